"""
Backup-before-overwrite and retention for each user's data.json.

A save runs backup -> put -> sweep:

1. copy the current data.json to data.json.backup.<timestamp> (skipped when
   there is no current object yet). If the copy fails the save stops here,
   so the old content is never overwritten without a backup.
2. write the new data.json.
3. delete backups older than the retention window. Best effort: failures are
   logged and reported, never raised.

Saves for the same user are not serialized; two concurrent saves can both
back up the same previous version.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from save_api import keys
from save_api.errors import BackupError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=30)
JSON_CONTENT_TYPE = "application/json"


def utcnow():
    return datetime.now(timezone.utc)


@dataclass
class SweepResult:
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass
class JsonSaveResult:
    key: str
    backup_key: Optional[str]
    sweep: SweepResult

    def to_dict(self):
        result = {
            "key": self.key,
            "saved": True,
            "backup": self.backup_key,
            "pruned": len(self.sweep.deleted),
        }
        if self.sweep.failed:
            result["pruneFailed"] = list(self.sweep.failed)
        return result


class BackupManager:
    def __init__(self, store, retention=DEFAULT_RETENTION, clock=utcnow, enabled=True):
        self.store = store
        self.retention = retention
        self.clock = clock
        self.enabled = enabled

    def backup(self, username):
        """
        Copy the user's current data.json to a new timestamped backup key.

        Returns:
            str or None: the backup key, or None if there was nothing to back up.

        Raises:
            BackupError: the copy failed; the caller must not overwrite data.json.
        """
        source = keys.json_key(username)
        target = keys.backup_key(username, self.clock())
        try:
            copied = self.store.copy(source, target)
        except StorageError as e:
            raise BackupError(f"Backup of {source} failed, not overwriting: {e}") from e

        if not copied:
            logger.info(f"No existing {source}; skipping backup")
            return None
        logger.info(f"Backed up {source} to {target}")
        return target

    def sweep(self, username):
        """Delete this user's backups older than the retention window."""
        result = SweepResult()
        cutoff = self.clock() - self.retention

        try:
            backup_keys = self.store.list_keys(keys.backup_prefix(username))
        except StorageError as e:
            logger.warning(f"Backup sweep for {username} could not list backups: {e}")
            return result

        for key in sorted(backup_keys):
            stamp = keys.parse_backup_timestamp(key)
            if stamp is None:
                logger.debug(f"Ignoring unrecognised backup key {key}")
                continue
            if stamp >= cutoff:
                continue
            try:
                self.store.delete(key)
            except StorageError as e:
                logger.warning(f"Could not delete expired backup {key}: {e}")
                result.failed.append(key)
                continue
            result.deleted.append(key)

        if result.deleted:
            logger.info(f"Deleted {len(result.deleted)} expired backup(s) for {username}")
        return result

    def save_json(self, username, body):
        """Back up, overwrite and sweep. Raises StorageError if the write itself fails."""
        key = keys.json_key(username)
        backup_key = self.backup(username) if self.enabled else None
        self.store.put(key, body, JSON_CONTENT_TYPE)
        sweep = self.sweep(username) if self.enabled else SweepResult()
        return JsonSaveResult(key=key, backup_key=backup_key, sweep=sweep)
