"""Process-wide wiring: settings, token codec and storage, built once per cold start."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from save_api.backups import BackupManager
from save_api.config import Settings, load_settings
from save_api.storage import ObjectStore, build_client
from save_api.tokens import TokenCodec


@dataclass
class Runtime:
    settings: Settings
    tokens: TokenCodec
    store: ObjectStore
    backups: BackupManager


def build_runtime(settings: Settings, client=None):
    """Assemble a Runtime. Pass a client to skip creating a real boto3 one."""
    if client is None:
        client = build_client(settings.storage)
    store = ObjectStore(client, settings.storage.bucket)
    backups = BackupManager(
        store,
        retention=timedelta(days=settings.backup_retention_days),
        enabled=settings.backup_enabled,
    )
    return Runtime(
        settings=settings,
        tokens=TokenCodec(settings.jwt_secret),
        store=store,
        backups=backups,
    )


def configure_logging(level):
    root = logging.getLogger()
    # the Lambda runtime installs its own handler; only add one when running elsewhere
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root.setLevel(level)


@lru_cache(maxsize=None)
def get_runtime():
    settings = load_settings()
    configure_logging(settings.log_level)
    return build_runtime(settings)
