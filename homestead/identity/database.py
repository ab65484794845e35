"""
Account database access for the passwd, group and shadow files.

This module provides AccountDatabase, the repository object every identity
component receives. It owns:
- Parsing records out of the colon-delimited files
- Append-only writes for new records
- Atomic single-line rewrites of group records
- The exclusive lock that serializes read-check-write sequences
"""

import fcntl
import logging
import os
import tempfile
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ..errors import StorageUnavailable, UnknownGroup
from ..models import GroupRecord, UserRecord
from ..settings import HomesteadSettings, get_settings

logger = logging.getLogger(__name__)


class AccountDatabase:
    """
    Repository over the host's user, group and shadow databases.

    Records are read fresh from disk on every query so that a caller holding
    the lock always sees the latest committed state. Lines that do not parse
    (comments, NIS entries, blank lines) are skipped on read and preserved
    verbatim on rewrite.

    Allocation of IDs followed by appending records is a read-check-write
    sequence; callers must run it inside ``locked()``:

        >>> db = AccountDatabase.from_settings()
        >>> with db.locked():
        ...     uid = IdentityAllocator(db).next_free_uid()
        ...     db.append_user(UserRecord(...))
    """

    def __init__(
        self,
        passwd_path: Path,
        group_path: Path,
        lock_path: Path,
        shadow_path: Optional[Path] = None,
    ):
        """
        Initialize AccountDatabase.

        Args:
            passwd_path: Path to the user database
            group_path: Path to the group database
            lock_path: Lock file shared with other writers of the databases
            shadow_path: Optional shadow database for new user entries
        """
        self.passwd_path = Path(passwd_path)
        self.group_path = Path(group_path)
        self.lock_path = Path(lock_path)
        self.shadow_path = Path(shadow_path) if shadow_path else None

        self._lock = threading.RLock()
        self._depth = 0
        self._lock_file = None

    @classmethod
    def from_settings(cls, settings: Optional[HomesteadSettings] = None) -> "AccountDatabase":
        settings = settings or get_settings()
        return cls(
            passwd_path=settings.passwd_path,
            group_path=settings.group_path,
            lock_path=settings.lock_path,
            shadow_path=settings.shadow_path,
        )

    # =========================================================================
    # Locking
    # =========================================================================

    @contextmanager
    def locked(self) -> Iterator["AccountDatabase"]:
        """
        Hold the exclusive account database lock for the enclosed block.

        The lock is reentrant within a thread. It combines an in-process
        RLock with an fcntl write lock on ``lock_path`` so separate processes
        (including shadow-utils tools using the same file) are serialized too.

        Raises:
            StorageUnavailable: If the lock file cannot be opened or locked
        """
        with self._lock:
            if self._depth == 0:
                self._acquire_file_lock()
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._release_file_lock()

    def _acquire_file_lock(self) -> None:
        try:
            lock_file = open(self.lock_path, "a")
        except OSError as e:
            raise StorageUnavailable(f"Cannot open lock file {self.lock_path}: {e}") from e

        try:
            fcntl.lockf(lock_file, fcntl.LOCK_EX)
        except OSError as e:
            lock_file.close()
            raise StorageUnavailable(f"Cannot lock {self.lock_path}: {e}") from e

        self._lock_file = lock_file
        logger.debug(f"Acquired account database lock {self.lock_path}")

    def _release_file_lock(self) -> None:
        lock_file, self._lock_file = self._lock_file, None
        if lock_file is None:
            return
        try:
            fcntl.lockf(lock_file, fcntl.LOCK_UN)
        finally:
            lock_file.close()
        logger.debug(f"Released account database lock {self.lock_path}")

    # =========================================================================
    # Reading
    # =========================================================================

    def _read_lines(self, path: Path) -> list[str]:
        try:
            # newline="" keeps CRLF endings intact
            with open(path, encoding="utf-8", newline="") as fh:
                return fh.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailable(f"Cannot read {path}: {e}") from e

    def users(self) -> list[UserRecord]:
        """Return every parseable record in the user database."""
        records = []
        for lineno, line in enumerate(self._read_lines(self.passwd_path), start=1):
            try:
                records.append(UserRecord.from_line(line))
            except ValueError:
                logger.debug(f"Skipping unparseable line {lineno} in {self.passwd_path}")
        return records

    def groups(self) -> list[GroupRecord]:
        """Return every parseable record in the group database."""
        records = []
        for lineno, line in enumerate(self._read_lines(self.group_path), start=1):
            try:
                records.append(GroupRecord.from_line(line))
            except ValueError:
                logger.debug(f"Skipping unparseable line {lineno} in {self.group_path}")
        return records

    def find_user(self, name: str) -> Optional[UserRecord]:
        for record in self.users():
            if record.name == name:
                return record
        return None

    def find_group(self, name: str) -> Optional[GroupRecord]:
        for record in self.groups():
            if record.name == name:
                return record
        return None

    # =========================================================================
    # Writing
    # =========================================================================

    def _append_line(self, path: Path, line: str) -> None:
        """Append one line with a single write, adding a separator if needed."""
        try:
            with open(path, "a+b") as fh:
                size = fh.seek(0, os.SEEK_END)
                prefix = b""
                if size > 0:
                    fh.seek(size - 1)
                    if fh.read(1) != b"\n":
                        prefix = b"\n"
                fh.write(prefix + line.encode("utf-8") + b"\n")
                fh.flush()
                os.fsync(fh.fileno())
        except OSError as e:
            raise StorageUnavailable(f"Cannot append to {path}: {e}") from e

    def append_user(self, record: UserRecord) -> None:
        self._append_line(self.passwd_path, record.to_line())
        logger.info(f"Added user record {record.name} (uid {record.uid})")

    def append_group(self, record: GroupRecord) -> None:
        self._append_line(self.group_path, record.to_line())
        logger.info(f"Added group record {record.name} (gid {record.gid})")

    def append_shadow(self, name: str) -> bool:
        """
        Append a locked-password shadow entry for a new user.

        Returns:
            True if an entry was written, False if no shadow database is in use
        """
        if self.shadow_path is None or not self.shadow_path.exists():
            return False
        days_since_epoch = int(time.time() // 86400)
        self._append_line(self.shadow_path, f"{name}:!:{days_since_epoch}:0:99999:7:::")
        logger.debug(f"Added shadow entry for {name}")
        return True

    def replace_group(self, record: GroupRecord) -> None:
        """
        Rewrite the line of an existing group, leaving every other line intact.

        The new content is written to a temporary file in the same directory
        and renamed over the database, so readers see either the old or the
        new file and never a partial line.

        Raises:
            UnknownGroup: If no line for the group exists
            StorageUnavailable: If the database cannot be read or replaced
        """
        lines = self._read_lines(self.group_path)

        for index, line in enumerate(lines):
            try:
                existing = GroupRecord.from_line(line)
            except ValueError:
                continue
            if existing.name == record.name:
                ending = line[len(line.rstrip("\r\n")):]
                lines[index] = record.to_line() + ending
                break
        else:
            raise UnknownGroup(record.name)

        self._atomic_write(self.group_path, "".join(lines))
        logger.info(f"Updated group record {record.name}: {record.members.serialize()}")

    def _atomic_write(self, path: Path, content: str) -> None:
        try:
            st = os.stat(path)
            fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        except OSError as e:
            raise StorageUnavailable(f"Cannot prepare rewrite of {path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(content)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(temp_name, st.st_mode & 0o7777)
            temp_st = os.stat(temp_name)
            if (temp_st.st_uid, temp_st.st_gid) != (st.st_uid, st.st_gid):
                os.chown(temp_name, st.st_uid, st.st_gid)
            os.replace(temp_name, path)
        except OSError as e:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass
            raise StorageUnavailable(f"Cannot rewrite {path}: {e}") from e
