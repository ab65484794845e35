"""Tests for GroupMembership."""

import pytest

from homestead.errors import HomesteadError, InvalidAccountName, UnknownGroup
from homestead.identity import GroupMembership
from homestead.models import MembershipResult


def _members(database, group):
    return database.find_group(group).members.serialize()


def test_group_exists(database):
    membership = GroupMembership(database)
    assert membership.group_exists("docker") is True
    assert membership.group_exists("dock") is False


def test_add_member_whole_token(database):
    """bob is appended even though bobby is already listed."""
    result = GroupMembership(database).add_member("docker", "bob")

    assert result is MembershipResult.ADDED
    assert _members(database, "docker") == "bobby,carol,bob"


def test_add_member_to_empty_group(database):
    result = GroupMembership(database).add_member("video", "dave")

    assert result is MembershipResult.ADDED
    assert _members(database, "video") == "dave"


def test_add_member_is_idempotent(database, etc_dir):
    membership = GroupMembership(database)

    assert membership.add_member("wheel", "dave") is MembershipResult.ADDED
    after_first = (etc_dir / "group").read_text()

    assert membership.add_member("wheel", "dave") is MembershipResult.ALREADY_MEMBER
    assert (etc_dir / "group").read_text() == after_first
    assert _members(database, "wheel") == "alice,dave"


def test_add_member_unknown_group(database):
    with pytest.raises(UnknownGroup) as exc_info:
        GroupMembership(database).add_member("nosuch", "dave")
    assert exc_info.value.group == "nosuch"


def test_other_lines_untouched(database, etc_dir):
    before = (etc_dir / "group").read_text().splitlines()

    GroupMembership(database).add_member("video", "alice")

    after = (etc_dir / "group").read_text().splitlines()
    changed = [(old, new) for old, new in zip(before, after) if old != new]
    assert changed == [("video:x:44:", "video:x:44:alice")]
    assert len(before) == len(after)


def test_add_member_to_groups(database):
    results = GroupMembership(database).add_member_to_groups(["wheel", "video", "docker"], "carol")

    assert results == {
        "wheel": MembershipResult.ADDED,
        "video": MembershipResult.ADDED,
        "docker": MembershipResult.ALREADY_MEMBER,
    }
    assert _members(database, "wheel") == "alice,carol"
    assert _members(database, "docker") == "bobby,carol"


def test_add_member_to_groups_fails_fast(database, etc_dir):
    """An unknown group anywhere in the list leaves every group unchanged."""
    before = (etc_dir / "group").read_text()

    with pytest.raises(UnknownGroup) as exc_info:
        GroupMembership(database).add_member_to_groups(["wheel", "nosuch", "video"], "dave")

    assert exc_info.value.group == "nosuch"
    assert (etc_dir / "group").read_text() == before


@pytest.mark.parametrize("user_name", ["ev:il", "a,b", "two words", ""])
def test_add_member_rejects_unstorable_names(database, etc_dir, user_name):
    """A name that would split the line or the members field leaves the file alone."""
    before = (etc_dir / "group").read_bytes()

    with pytest.raises(InvalidAccountName):
        GroupMembership(database).add_member("video", user_name)

    assert (etc_dir / "group").read_bytes() == before
    assert GroupMembership(database).group_exists("video") is True
    assert _members(database, "video") == ""


def test_add_member_to_groups_rejects_unstorable_names(database, etc_dir):
    before = (etc_dir / "group").read_bytes()

    with pytest.raises(HomesteadError):
        GroupMembership(database).add_member_to_groups(["wheel", "video"], "ev:il")

    assert (etc_dir / "group").read_bytes() == before


def test_add_member_preserves_crlf_endings(database, etc_dir):
    (etc_dir / "group").write_bytes(b"root:x:0:\r\nvideo:x:44:\r\ndocker:x:998:bobby\r\n")

    GroupMembership(database).add_member("video", "alice")

    assert (etc_dir / "group").read_bytes() == (
        b"root:x:0:\r\nvideo:x:44:alice\r\ndocker:x:998:bobby\r\n"
    )
