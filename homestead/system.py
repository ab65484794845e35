"""
Host collaborators used by the CLI: privilege check and password setting.
"""

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def has_root_privileges() -> bool:
    """Return True when running with an effective uid of 0."""
    return os.geteuid() == 0


def set_password(user: str, password: str) -> bool:
    """
    Set a user's password with chpasswd.

    The password is passed on stdin, never on the command line.

    Args:
        user: Existing user name
        password: Clear-text password

    Returns:
        True if chpasswd succeeded, False otherwise
    """
    try:
        result = subprocess.run(
            ["chpasswd"],
            input=f"{user}:{password}\n",
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.error("chpasswd not found; password not set")
        return False

    if result.returncode != 0:
        logger.error(f"chpasswd failed for {user}: {result.stderr.strip()}")
        return False

    logger.info(f"Password set for {user}")
    return True
