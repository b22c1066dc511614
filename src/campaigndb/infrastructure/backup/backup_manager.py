"""
Backup manager: consistent point-in-time copies of the campaign store.

Backups are taken with sqlite3's online backup API, so the source can stay
open and in use while it is copied. Every ``<name>.db`` copy has a
``<name>.json`` sidecar holding its metadata.

Usage:
    manager = BackupManager(conn, Path("data/campaigns.db"), Path("backups"))
    path = manager.create_backup("before_import")
    manager.verify_backup("before_import")   # True
    conn = manager.restore_backup("before_import", force=True)  # fresh handle
"""

import json
import logging
import shutil
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from campaigndb.domain.errors import BackupError, ConfirmationRequired, RestoreError
from campaigndb.domain.types import BackupInfo, BackupMetadata
from campaigndb.infrastructure.database.connection import MEMORY_PATH, open_connection
from campaigndb.utils.formatting import filename_timestamp

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".db"
METADATA_SUFFIX = ".json"
AUTO_BACKUP_PREFIX = "auto_backup_"
BACKUP_PAGES_PER_STEP = 256

Reopen = Callable[[Path], sqlite3.Connection]


class BackupManager:
    """
    Creates, lists, verifies, restores and rotates backups.

    The manager owns the backup directory. The live connection is owned by
    the caller, except during restore_backup, which closes it and hands
    back a new one.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        db_path: Union[str, Path],
        backup_dir: Union[str, Path],
        max_auto_backups: int = 10,
        reopen: Reopen = open_connection,
    ):
        self.conn = conn
        self.db_path = db_path if str(db_path) == MEMORY_PATH else Path(db_path)
        self.backup_dir = Path(backup_dir)
        self.max_auto_backups = max_auto_backups
        self._reopen = reopen

    def _backup_path(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name.startswith("."):
            raise BackupError(f"Invalid backup name: {name!r}")
        return self.backup_dir / f"{name}{BACKUP_SUFFIX}"

    def _metadata_path(self, name: str) -> Path:
        return self.backup_dir / f"{name}{METADATA_SUFFIX}"

    def create_backup(self, name: Optional[str] = None) -> Path:
        """
        Copy the live store into the backup directory.

        Args:
            name: Backup name (default: backup_<timestamp>). Names starting
                with auto_backup_ are reserved for create_auto_backup.

        Returns:
            Path of the backup copy

        Raises:
            BackupError: If the name is invalid or reserved, the copy does not
                complete, or the target cannot be written
        """
        if name and name.startswith(AUTO_BACKUP_PREFIX):
            raise BackupError(f"Backup names starting with {AUTO_BACKUP_PREFIX!r} are reserved: {name}")
        return self._create(name or f"backup_{filename_timestamp(datetime.now())}")

    def _create(self, name: str) -> Path:
        path = self._backup_path(name)

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupError(f"Cannot create backup directory {self.backup_dir}: {e}") from e

        if path.exists():
            raise BackupError(f"Backup already exists: {name}")

        remaining = None

        def progress(status, pages_remaining, total):
            nonlocal remaining
            remaining = pages_remaining
            logger.debug(f"Backup {name}: {total - pages_remaining}/{total} pages copied")

        try:
            target = sqlite3.connect(str(path))
            try:
                self.conn.backup(target, pages=BACKUP_PAGES_PER_STEP, progress=progress)
                # A standalone copy should not need -wal/-shm files to open.
                target.execute("PRAGMA journal_mode=DELETE")
            finally:
                target.close()
        except sqlite3.Error as e:
            path.unlink(missing_ok=True)
            raise BackupError(f"Backup {name} failed: {e}") from e

        if remaining:
            path.unlink(missing_ok=True)
            raise BackupError(f"Backup {name} incomplete: {remaining} page(s) not copied")

        metadata = BackupMetadata(
            name=name,
            created=datetime.now().isoformat(),
            original_path=str(self.db_path),
            size=path.stat().st_size,
        )
        try:
            with open(self._metadata_path(name), "w") as f:
                json.dump(metadata.to_dict(), f, indent=2)
        except OSError as e:
            raise BackupError(f"Cannot write metadata for backup {name}: {e}") from e

        logger.info(f"✓ Backup created: {path} ({metadata.size} bytes)")
        return path

    def create_auto_backup(self) -> Path:
        """Create a timestamped automatic backup, then rotate old ones."""
        base = f"{AUTO_BACKUP_PREFIX}{filename_timestamp(datetime.now())}"
        name = base
        counter = 1
        while self._backup_path(name).exists():
            name = f"{base}_{counter}"
            counter += 1

        path = self._create(name)
        self.rotate_auto_backups()
        return path

    def rotate_auto_backups(self) -> List[str]:
        """
        Keep only the most recent auto backups.

        Manually named backups are never touched.

        Returns:
            Names of the deleted backups
        """
        auto = [b for b in self.list_backups() if b.name.startswith(AUTO_BACKUP_PREFIX)]
        expired = auto[self.max_auto_backups:]
        for backup in expired:
            self.delete_backup(backup.name)
        if expired:
            logger.info(f"Rotated {len(expired)} old auto backup(s)")
        return [b.name for b in expired]

    def list_backups(self, limit: Optional[int] = None) -> List[BackupInfo]:
        """
        List backups, newest first.

        Creation time comes from the metadata sidecar, falling back to the
        file's modification time.
        """
        if not self.backup_dir.exists():
            return []

        backups = []
        for path in self.backup_dir.glob(f"*{BACKUP_SUFFIX}"):
            name = path.stem
            stat = path.stat()
            metadata = self._read_metadata(name)
            created = datetime.fromtimestamp(stat.st_mtime)
            if metadata is not None:
                try:
                    created = datetime.fromisoformat(metadata.created)
                except ValueError:
                    logger.warning(f"Bad created timestamp in metadata for {name}")
            backups.append(
                BackupInfo(name=name, path=path, size=stat.st_size, created=created, metadata=metadata)
            )

        backups.sort(key=lambda b: (b.created, b.name), reverse=True)
        return backups[:limit] if limit is not None else backups

    def _read_metadata(self, name: str) -> Optional[BackupMetadata]:
        meta_path = self._metadata_path(name)
        if not meta_path.exists():
            return None
        try:
            with open(meta_path) as f:
                return BackupMetadata.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Unreadable metadata for backup {name}: {e}")
            return None

    def verify_backup(self, name: str) -> bool:
        """
        Run an integrity check on a backup in a separate read-only connection.

        Returns:
            True if the backup opens and passes PRAGMA integrity_check
        """
        try:
            path = self._backup_path(name)
            if not path.exists():
                logger.warning(f"Backup not found: {name}")
                return False
            uri = f"{path.resolve().as_uri()}?mode=ro"
            check = sqlite3.connect(uri, uri=True)
            try:
                result = check.execute("PRAGMA integrity_check").fetchone()[0]
            finally:
                check.close()
        except Exception as e:
            logger.warning(f"✗ Backup {name} failed verification: {e}")
            return False

        if result != "ok":
            logger.warning(f"✗ Backup {name} failed integrity check: {result}")
            return False
        logger.info(f"✓ Backup {name} verified")
        return True

    def restore_backup(self, name: str, force: bool = False) -> sqlite3.Connection:
        """
        Replace the live store with a backup.

        The current connection is closed and a freshly opened one is
        returned; the old handle must not be used afterwards. No safety
        backup is taken here.

        Raises:
            ConfirmationRequired: Unless force is True
            RestoreError: If the backup is missing, unreadable or the copy fails
        """
        if not force:
            raise ConfirmationRequired("restore backup")
        if str(self.db_path) == MEMORY_PATH:
            raise RestoreError("Cannot restore into an in-memory database")

        path = self._backup_path(name)
        if not path.exists():
            raise RestoreError(f"Backup not found: {name}")
        if not self.verify_backup(name):
            raise RestoreError(f"Backup {name} is unreadable or corrupt")

        logger.warning(f"Restoring {self.db_path} from backup {name}")
        self.conn.close()

        for suffix in ("-wal", "-shm"):
            Path(f"{self.db_path}{suffix}").unlink(missing_ok=True)

        try:
            shutil.copy2(path, self.db_path)
        except OSError as e:
            raise RestoreError(f"Copying backup {name} failed, connection is closed: {e}") from e

        self.conn = self._reopen(self.db_path)
        logger.info(f"✓ Restored {self.db_path} from {name}")
        return self.conn

    def delete_backup(self, name: str) -> bool:
        """
        Remove a backup and its metadata.

        Returns:
            True if anything was deleted
        """
        deleted = False
        for path in (self._backup_path(name), self._metadata_path(name)):
            if path.exists():
                path.unlink()
                deleted = True
        if deleted:
            logger.info(f"Deleted backup {name}")
        return deleted
