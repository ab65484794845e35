"""
Pydantic models for Homestead account records and link outcomes.

This module contains the data models shared by the provisioning core:
- MemberSet, the ordered set behind a group's members field
- UserRecord and GroupRecord with their colon-delimited line formats
- MembershipResult returned by group membership edits
- LinkOutcome reported by the template linker
"""

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Characters that would corrupt the passwd/group line formats
_FORBIDDEN_NAME_CHARS = frozenset(":,\n\r\t ")


def check_account_name(name: str) -> str:
    if not name:
        raise ValueError("account name must not be empty")
    bad = sorted(set(name) & _FORBIDDEN_NAME_CHARS)
    if bad:
        raise ValueError(f"account name {name!r} contains forbidden characters {bad!r}")
    return name


# =============================================================================
# Group members
# =============================================================================

class MemberSet:
    """Ordered set of user names stored in a group's members field.

    The backing format is a comma-joined string with no surrounding
    whitespace. Membership is tested against whole tokens only, so ``bob``
    is not a member of ``bobby,carol``.

    Example:
        >>> members = MemberSet.parse("bobby,carol")
        >>> "bob" in members
        False
        >>> members.add("bob")
        True
        >>> members.serialize()
        'bobby,carol,bob'
    """

    def __init__(self, names: Iterable[str] = ()):
        self._names: list[str] = []
        for name in names:
            self.add(name)

    @classmethod
    def parse(cls, field: str) -> "MemberSet":
        """Build a MemberSet from a raw members field.

        Empty tokens (from an empty field or stray commas) are dropped.
        """
        return cls(token for token in field.strip().split(",") if token)

    def serialize(self) -> str:
        return ",".join(self._names)

    def add(self, name: str) -> bool:
        """Append name unless it is already present.

        Returns:
            True if the name was appended, False if it was already a member
        """
        if name in self:
            return False
        self._names.append(name)
        return True

    def __contains__(self, name: object) -> bool:
        return any(existing == name for existing in self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MemberSet):
            return self._names == other._names
        return NotImplemented

    def __repr__(self) -> str:
        return f"MemberSet({self._names})"


# =============================================================================
# Account records
# =============================================================================

class UserRecord(BaseModel):
    """One line of the user database: ``name:x:uid:gid::home_dir:shell``."""

    name: str
    uid: int = Field(ge=0)
    gid: int = Field(ge=0)
    home_dir: str
    shell: str
    placeholder: str = "x"
    gecos: str = ""

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return check_account_name(value)

    @field_validator("home_dir", "shell")
    @classmethod
    def check_no_separators(cls, value: str) -> str:
        if ":" in value or "\n" in value:
            raise ValueError(f"{value!r} must not contain ':' or newlines")
        return value

    def to_line(self) -> str:
        return ":".join([
            self.name, self.placeholder, str(self.uid), str(self.gid),
            self.gecos, self.home_dir, self.shell,
        ])

    @classmethod
    def from_line(cls, line: str) -> "UserRecord":
        """Parse a passwd line.

        Raises:
            ValueError: If the line does not have seven fields or numeric ids
        """
        fields = line.rstrip("\r\n").split(":")
        if len(fields) != 7:
            raise ValueError(f"expected 7 fields in passwd line, got {len(fields)}")
        name, placeholder, uid, gid, gecos, home_dir, shell = fields
        return cls(
            name=name, placeholder=placeholder, uid=int(uid), gid=int(gid),
            gecos=gecos, home_dir=home_dir, shell=shell,
        )


class GroupRecord(BaseModel):
    """One line of the group database: ``name:x:gid:members``."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    gid: int = Field(ge=0)
    members: MemberSet = Field(default_factory=MemberSet)
    placeholder: str = "x"

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return check_account_name(value)

    def to_line(self) -> str:
        return f"{self.name}:{self.placeholder}:{self.gid}:{self.members.serialize()}"

    @classmethod
    def from_line(cls, line: str) -> "GroupRecord":
        """Parse a group line.

        Raises:
            ValueError: If the line does not have four fields or a numeric gid
        """
        fields = line.rstrip("\r\n").split(":")
        if len(fields) != 4:
            raise ValueError(f"expected 4 fields in group line, got {len(fields)}")
        name, placeholder, gid, members = fields
        return cls(
            name=name, placeholder=placeholder, gid=int(gid),
            members=MemberSet.parse(members),
        )


class MembershipResult(str, Enum):
    """Result of adding a user to a group."""
    ADDED = "added"
    ALREADY_MEMBER = "already_member"


# =============================================================================
# Template linking
# =============================================================================

class LinkStatus(str, Enum):
    """Outcome kind for one template entry."""
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


class LinkOutcome(BaseModel):
    """Result of linking a single template entry into the destination tree."""

    status: LinkStatus
    path: str
    reason: Optional[str] = None

    @classmethod
    def created(cls, path) -> "LinkOutcome":
        return cls(status=LinkStatus.CREATED, path=str(path))

    @classmethod
    def already_exists(cls, path) -> "LinkOutcome":
        return cls(status=LinkStatus.ALREADY_EXISTS, path=str(path))

    @classmethod
    def failed(cls, path, reason: str) -> "LinkOutcome":
        return cls(status=LinkStatus.FAILED, path=str(path), reason=reason)
