"""User and personal group creation."""

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..errors import ProvisioningFailed, StorageUnavailable, UnknownGroup
from ..models import GroupRecord, UserRecord
from ..settings import HomesteadSettings, get_settings
from .allocator import IdentityAllocator
from .database import AccountDatabase
from .membership import GroupMembership
from .shells import ShellAllowList

logger = logging.getLogger(__name__)

HOME_DIR_MODE = 0o755


class IdentityProvisioner:
    """
    Creates users together with a same-named personal group.

    Writes to the account databases are append-only: new lines are added
    after every validation and the home directory have succeeded, and no
    existing line is rewritten. Group membership edits for the new user go
    through GroupMembership.

    Attributes:
        database: Repository for the passwd/group/shadow files
        allocator: uid/gid allocator over the same repository
        membership: Group membership editor over the same repository
        shells: Shell allow-list used by provision()
        home_base: Parent directory for default home directories
        default_shell: Shell requested when provision() is given none
    """

    def __init__(
        self,
        database: AccountDatabase,
        shells: ShellAllowList,
        allocator: Optional[IdentityAllocator] = None,
        membership: Optional[GroupMembership] = None,
        home_base: Path = Path("/home"),
        default_shell: str = "bash",
    ):
        self.database = database
        self.shells = shells
        self.allocator = allocator or IdentityAllocator(database)
        self.membership = membership or GroupMembership(database)
        self.home_base = Path(home_base)
        self.default_shell = default_shell

    @classmethod
    def from_settings(cls, settings: Optional[HomesteadSettings] = None) -> "IdentityProvisioner":
        settings = settings or get_settings()
        database = AccountDatabase.from_settings(settings)
        return cls(
            database=database,
            shells=ShellAllowList(settings.shells_path, settings.shell_bin_dir),
            allocator=IdentityAllocator(database, floor=settings.id_floor),
            home_base=settings.home_base,
            default_shell=settings.default_shell,
        )

    def create_user(self, name: str, uid: int, gid: int, home_dir, shell: str) -> UserRecord:
        """
        Create a user record, its personal group, and its home directory.

        Args:
            name: New user and personal group name
            uid: Unused user id
            gid: Unused group id for the personal group
            home_dir: Home directory, created with parents if absent
            shell: Absolute path of the login shell

        Returns:
            The appended UserRecord

        Raises:
            ProvisioningFailed: On an invalid name, a name or id collision, a
                home path occupied by a non-directory, or a failed write
        """
        home = Path(home_dir)
        try:
            user = UserRecord(name=name, uid=uid, gid=gid, home_dir=str(home), shell=shell)
            group = GroupRecord(name=name, gid=gid)
        except ValidationError as e:
            raise ProvisioningFailed(f"Invalid user definition for '{name}': {e}") from e

        with self.database.locked():
            try:
                self._check_collisions(user)
            except StorageUnavailable as e:
                raise ProvisioningFailed(str(e)) from e
            self._check_writable()

            self._prepare_home(home, uid, gid)

            try:
                self.database.append_group(group)
                self.database.append_user(user)
                self.database.append_shadow(name)
            except StorageUnavailable as e:
                raise ProvisioningFailed(f"Could not record user '{name}': {e}") from e

        logger.info(f"Created user {name} (uid {uid}, gid {gid}, home {home})")
        return user

    def _check_collisions(self, user: UserRecord) -> None:
        users = self.database.users()
        groups = self.database.groups()

        if any(record.name == user.name for record in users):
            raise ProvisioningFailed(f"User '{user.name}' already exists")
        if any(record.name == user.name for record in groups):
            raise ProvisioningFailed(f"Group '{user.name}' already exists")
        if any(record.uid == user.uid for record in users):
            raise ProvisioningFailed(f"uid {user.uid} is already in use")
        if any(record.gid == user.gid for record in groups):
            raise ProvisioningFailed(f"gid {user.gid} is already in use")

    def _check_writable(self) -> None:
        """Refuse to start appending unless every database can take a new line."""
        paths = [self.database.group_path, self.database.passwd_path]
        if self.database.shadow_path is not None and self.database.shadow_path.exists():
            paths.append(self.database.shadow_path)

        for path in paths:
            if not os.access(path, os.W_OK):
                raise ProvisioningFailed(f"Account database {path} is not writable")

    def _prepare_home(self, home: Path, uid: int, gid: int) -> None:
        if os.path.lexists(home) and not home.is_dir():
            raise ProvisioningFailed(f"Home path {home} exists and is not a directory")

        try:
            home.mkdir(parents=True, exist_ok=True)
            os.chown(home, uid, gid)
            os.chmod(home, HOME_DIR_MODE)
        except OSError as e:
            raise ProvisioningFailed(f"Could not prepare home directory {home}: {e}") from e

    def provision(
        self,
        name: str,
        shell: Optional[str] = None,
        groups: Sequence[str] = (),
        home_dir=None,
    ) -> UserRecord:
        """
        Allocate ids and create a user, then add it to existing groups.

        The whole sequence runs under the database lock. Requested groups and
        the shell are validated before anything is written, so an unknown
        group leaves no user record behind.

        Args:
            name: New user name
            shell: Shell name or absolute path (default: configured default shell)
            groups: Existing supplementary groups
            home_dir: Home directory (default: <home_base>/<name>)

        Returns:
            The created UserRecord

        Raises:
            InvalidShell: If the shell is not allowed
            UnknownGroup: If a requested group does not exist
            ProvisioningFailed: If the user cannot be created
            StorageUnavailable: If a database cannot be read or written
        """
        shell_path = self.shells.resolve(shell or self.default_shell)
        home = Path(home_dir) if home_dir else self.home_base / name

        with self.database.locked():
            for group_name in groups:
                if not self.membership.group_exists(group_name):
                    raise UnknownGroup(group_name)

            uid = self.allocator.next_free_uid()
            gid = self.allocator.next_free_gid()
            user = self.create_user(name, uid, gid, home, shell_path)

            if groups:
                self.membership.add_member_to_groups(groups, name)

        return user
