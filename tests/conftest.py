"""
Pytest configuration and fixtures for Homestead tests.
"""

import tempfile
from pathlib import Path

import pytest

from homestead.identity import AccountDatabase, IdentityProvisioner, ShellAllowList
from homestead.settings import reload_settings

PASSWD = (
    "root:x:0:0:root:/root:/bin/bash\n"
    "daemon:x:1:1:daemon:/usr/sbin:/usr/sbin/nologin\n"
    "alice:x:1000:1000::/home/alice:/bin/bash\n"
    "bobby:x:1001:1001::/home/bobby:/bin/zsh\n"
    "carol:x:1003:1003::/home/carol:/bin/bash\n"
)

GROUP = (
    "root:x:0:\n"
    "wheel:x:10:alice\n"
    "docker:x:998:bobby,carol\n"
    "video:x:44:\n"
    "alice:x:1000:\n"
    "bobby:x:1001:\n"
    "carol:x:1003:\n"
)

SHELLS = (
    "# /etc/shells: valid login shells\n"
    "/bin/sh\n"
    "/bin/bash\n"
    "/usr/bin/bash\n"
    "/bin/zsh\n"
)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def etc_dir(temp_dir):
    """A fake /etc with passwd, group, shadow and shells files."""
    etc = temp_dir / "etc"
    etc.mkdir()
    (etc / "passwd").write_text(PASSWD)
    (etc / "group").write_text(GROUP)
    (etc / "shadow").write_text("root:*:19000:0:99999:7:::\n")
    (etc / "shells").write_text(SHELLS)
    return etc


@pytest.fixture
def database(etc_dir):
    """AccountDatabase over the fake /etc."""
    return AccountDatabase(
        passwd_path=etc_dir / "passwd",
        group_path=etc_dir / "group",
        lock_path=etc_dir / ".pwd.lock",
        shadow_path=etc_dir / "shadow",
    )


@pytest.fixture
def chown_calls(monkeypatch):
    """Record ownership changes instead of applying them."""
    calls = []
    monkeypatch.setattr("os.chown", lambda path, uid, gid: calls.append(("chown", str(path), uid, gid)))
    monkeypatch.setattr("os.lchown", lambda path, uid, gid: calls.append(("lchown", str(path), uid, gid)))
    return calls


@pytest.fixture
def provisioner(database, etc_dir, temp_dir, chown_calls):
    """IdentityProvisioner with home directories under the temp dir."""
    return IdentityProvisioner(
        database=database,
        shells=ShellAllowList(etc_dir / "shells"),
        home_base=temp_dir / "home",
    )


@pytest.fixture
def settings_env(monkeypatch, etc_dir, temp_dir):
    """Point HS_* settings at the fake /etc and reload them."""
    monkeypatch.setenv("HS_PASSWD_PATH", str(etc_dir / "passwd"))
    monkeypatch.setenv("HS_GROUP_PATH", str(etc_dir / "group"))
    monkeypatch.setenv("HS_SHADOW_PATH", str(etc_dir / "shadow"))
    monkeypatch.setenv("HS_LOCK_PATH", str(etc_dir / ".pwd.lock"))
    monkeypatch.setenv("HS_SHELLS_PATH", str(etc_dir / "shells"))
    monkeypatch.setenv("HS_HOME_BASE", str(temp_dir / "home"))
    monkeypatch.setenv("HS_TEMPLATE_ROOT", str(temp_dir / "template"))
    settings = reload_settings()
    yield settings
    monkeypatch.undo()
    reload_settings()
