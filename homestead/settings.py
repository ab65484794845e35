"""
Homestead Settings - Configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find project root (where .env file is located)
PROJECT_ROOT = Path(__file__).parent.parent


class HomesteadSettings(BaseSettings):
    """
    Homestead configuration settings.

    Settings are loaded from:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="HS_",  # All Homestead env vars must start with HS_
    )

    # Account databases
    passwd_path: Path = Field(
        default=Path("/etc/passwd"),
        description="User database (env: HS_PASSWD_PATH)",
    )

    group_path: Path = Field(
        default=Path("/etc/group"),
        description="Group database (env: HS_GROUP_PATH)",
    )

    shadow_path: Path | None = Field(
        default=Path("/etc/shadow"),
        description="Shadow database; a locked entry is appended for new users when it exists (env: HS_SHADOW_PATH)",
    )

    lock_path: Path = Field(
        default=Path("/etc/.pwd.lock"),
        description="Lock file serializing account database writers (env: HS_LOCK_PATH)",
    )

    # Identity allocation
    id_floor: int = Field(
        default=1000,
        description="Lowest uid/gid handed out to new accounts (env: HS_ID_FLOOR)",
    )

    # New user defaults
    home_base: Path = Field(
        default=Path("/home"),
        description="Parent directory of new home directories (env: HS_HOME_BASE)",
    )

    shells_path: Path = Field(
        default=Path("/etc/shells"),
        description="Shell allow-list (env: HS_SHELLS_PATH)",
    )

    shell_bin_dir: str = Field(
        default="bin",
        description="Directory a bare shell name is resolved against (env: HS_SHELL_BIN_DIR)",
    )

    default_shell: str = Field(
        default="bash",
        description="Shell used when none is requested (env: HS_DEFAULT_SHELL)",
    )

    # Template linking
    template_root: Path = Field(
        default=Path("/etc/skel.d/starter_files"),
        description="Template tree mirrored into home directories (env: HS_TEMPLATE_ROOT)",
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR) (env: HS_LOG_LEVEL)",
    )


# Global settings instance
_settings: HomesteadSettings | None = None


def get_settings() -> HomesteadSettings:
    """
    Get the global settings instance.

    Creates the settings instance on first call, then returns cached instance.

    Returns:
        HomesteadSettings instance
    """
    global _settings
    if _settings is None:
        _settings = HomesteadSettings()
    return _settings


def reload_settings() -> HomesteadSettings:
    """
    Reload settings from environment/files.

    Useful for testing or when .env file changes.

    Returns:
        Fresh HomesteadSettings instance
    """
    global _settings
    _settings = HomesteadSettings()
    return _settings
