from datetime import datetime, timedelta, timezone

from save_api.backups import BackupManager
from save_api.config import load_settings
from save_api.errors import StorageError
from save_api.runtime import Runtime
from save_api.tokens import TokenCodec

SECRET = "test-secret-that-is-long-enough-for-hs256"

BASE_ENV = {
    "LOGIN_USERNAME": "alice",
    "LOGIN_PASSWORD": "wonderland",
    "JWT_SECRET": SECRET,
    "S3_BUCKET": "test-bucket",
    "S3_ACCESS_KEY_ID": "key",
    "S3_SECRET_ACCESS_KEY": "secret",
}


class FakeStore:
    """In-memory stand-in for ObjectStore that records every call."""

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail_on = {}

    def _maybe_fail(self, op, key):
        self.calls.append((op, key))
        if (op, key) in self.fail_on or (op, "*") in self.fail_on:
            raise StorageError(f"{op} {key} refused")

    def put(self, key, body, content_type):
        self._maybe_fail("put", key)
        self.objects[key] = (body, content_type)

    def copy(self, source_key, dest_key):
        self._maybe_fail("copy", source_key)
        if source_key not in self.objects:
            return False
        self.objects[dest_key] = self.objects[source_key]
        return True

    def list_keys(self, prefix):
        self._maybe_fail("list", prefix)
        return sorted(k for k in self.objects if k.startswith(prefix))

    def delete(self, key):
        self._maybe_fail("delete", key)
        self.objects.pop(key, None)

    def writes(self):
        return [key for op, key in self.calls if op == "put"]


class Clock:
    def __init__(self, start=None):
        self.now = start or datetime(2026, 10, 16, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)

    def timestamp(self):
        return self.now.timestamp()


def make_settings(**overrides):
    env = dict(BASE_ENV)
    env.update(overrides)
    return load_settings({k: v for k, v in env.items() if v is not None})


def make_runtime(settings=None, store=None, clock=None):
    settings = settings or make_settings()
    store = store if store is not None else FakeStore()
    clock = clock or Clock()
    return Runtime(
        settings=settings,
        tokens=TokenCodec(settings.jwt_secret, clock=clock.timestamp),
        store=store,
        backups=BackupManager(
            store,
            retention=timedelta(days=settings.backup_retention_days),
            clock=clock,
            enabled=settings.backup_enabled,
        ),
    )
