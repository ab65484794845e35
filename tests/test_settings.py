"""Tests for HomesteadSettings."""

from pathlib import Path

from homestead.settings import HomesteadSettings, get_settings, reload_settings


def test_defaults(monkeypatch):
    for key in ("HS_PASSWD_PATH", "HS_GROUP_PATH", "HS_ID_FLOOR", "HS_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)

    settings = HomesteadSettings()

    assert settings.passwd_path == Path("/etc/passwd")
    assert settings.group_path == Path("/etc/group")
    assert settings.lock_path == Path("/etc/.pwd.lock")
    assert settings.id_floor == 1000
    assert settings.shell_bin_dir == "bin"
    assert settings.log_level == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("HS_ID_FLOOR", "5000")
    monkeypatch.setenv("HS_GROUP_PATH", "/tmp/group")

    settings = HomesteadSettings()

    assert settings.id_floor == 5000
    assert settings.group_path == Path("/tmp/group")


def test_reload_replaces_cached_instance(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("HS_DEFAULT_SHELL", "zsh")
    reloaded = reload_settings()

    assert reloaded is not first
    assert get_settings().default_shell == "zsh"

    monkeypatch.delenv("HS_DEFAULT_SHELL")
    reload_settings()
