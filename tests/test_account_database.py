"""Tests for AccountDatabase reads, appends, rewrites and locking."""

import threading

import pytest

from homestead.errors import StorageUnavailable, UnknownGroup
from homestead.identity import AccountDatabase, IdentityAllocator
from homestead.models import GroupRecord, UserRecord


def test_reads_users_and_groups(database):
    users = {record.name: record for record in database.users()}
    groups = {record.name: record for record in database.groups()}

    assert users["alice"].uid == 1000
    assert users["bobby"].shell == "/bin/zsh"
    assert list(groups["docker"].members) == ["bobby", "carol"]
    assert database.find_group("video").members.serialize() == ""
    assert database.find_user("nobody-here") is None


def test_unparseable_lines_are_skipped(database, etc_dir):
    with open(etc_dir / "group", "a") as fh:
        fh.write("# local groups\n\n+@netgroup\n")

    names = [record.name for record in database.groups()]
    assert "docker" in names
    assert len(names) == 7


def test_missing_database_raises_storage_unavailable(temp_dir):
    database = AccountDatabase(
        passwd_path=temp_dir / "missing-passwd",
        group_path=temp_dir / "missing-group",
        lock_path=temp_dir / ".lock",
    )
    with pytest.raises(StorageUnavailable):
        database.users()
    with pytest.raises(StorageUnavailable):
        database.groups()


def test_undecodable_database_raises_storage_unavailable(database, etc_dir):
    (etc_dir / "group").write_bytes(b"video:x:44:\xff\xfe\n")

    with pytest.raises(StorageUnavailable):
        database.groups()
    with pytest.raises(StorageUnavailable):
        IdentityAllocator(database).next_free_gid()


def test_append_user_adds_single_line(database, etc_dir):
    before = (etc_dir / "passwd").read_text()

    database.append_user(UserRecord(name="dave", uid=1002, gid=1002, home_dir="/home/dave", shell="/bin/bash"))

    after = (etc_dir / "passwd").read_text()
    assert after == before + "dave:x:1002:1002::/home/dave:/bin/bash\n"


def test_append_repairs_missing_trailing_newline(database, etc_dir):
    (etc_dir / "group").write_text("root:x:0:")

    database.append_group(GroupRecord(name="dave", gid=1002))

    assert (etc_dir / "group").read_text() == "root:x:0:\ndave:x:1002:\n"


def test_append_shadow_only_when_database_present(database, etc_dir):
    assert database.append_shadow("dave") is True
    last = (etc_dir / "shadow").read_text().splitlines()[-1]
    assert last.startswith("dave:!:")
    assert last.endswith(":0:99999:7:::")

    (etc_dir / "shadow").unlink()
    assert database.append_shadow("erin") is False


def test_replace_group_touches_only_that_line(database, etc_dir):
    (etc_dir / "group").write_text(
        "# managed by hand\n"
        "root:x:0:\n"
        "docker:x:998:bobby,carol\n"
        "video:x:44:\n"
    )
    group = database.find_group("docker")
    group.members.add("bob")

    database.replace_group(group)

    assert (etc_dir / "group").read_text() == (
        "# managed by hand\n"
        "root:x:0:\n"
        "docker:x:998:bobby,carol,bob\n"
        "video:x:44:\n"
    )


def test_replace_group_preserves_file_mode(database, etc_dir):
    (etc_dir / "group").chmod(0o644)
    group = database.find_group("video")
    group.members.add("alice")

    database.replace_group(group)

    assert (etc_dir / "group").stat().st_mode & 0o777 == 0o644
    leftovers = [p.name for p in etc_dir.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_replace_unknown_group_raises(database):
    with pytest.raises(UnknownGroup):
        database.replace_group(GroupRecord(name="nosuch", gid=4242))


def test_lock_is_reentrant(database, etc_dir):
    with database.locked():
        with database.locked():
            database.users()
        assert (etc_dir / ".pwd.lock").exists()


def test_lock_serializes_threads(database):
    """A second thread waits until the first releases the lock."""
    events = []
    inside = threading.Event()

    def worker():
        with database.locked():
            events.append("worker")

    with database.locked():
        thread = threading.Thread(target=worker)
        thread.start()
        inside.wait(0.2)
        events.append("main")
    thread.join(timeout=5)

    assert events == ["main", "worker"]


def test_lock_released_after_error(database):
    with pytest.raises(RuntimeError):
        with database.locked():
            raise RuntimeError("boom")

    acquired = []

    def worker():
        with database.locked():
            acquired.append(True)

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join(timeout=5)
    assert acquired == [True]


def test_unopenable_lock_file_raises(database, temp_dir):
    database.lock_path = temp_dir / "no" / "such" / "dir" / ".lock"
    with pytest.raises(StorageUnavailable):
        with database.locked():
            pass
