"""Shell allow-list lookups against /etc/shells."""

import logging
from pathlib import Path

from ..errors import InvalidShell, StorageUnavailable

logger = logging.getLogger(__name__)


class ShellAllowList:
    """Validates requested login shells against the host's allow-list.

    A bare name such as ``zsh`` is accepted only when ``/<bin_dir>/zsh``
    appears in the list exactly. An absolute path must itself appear in the
    list.

    Example:
        >>> shells = ShellAllowList(Path("/etc/shells"))
        >>> shells.resolve("bash")
        '/bin/bash'
    """

    def __init__(self, path: Path, bin_dir: str = "bin"):
        self.path = Path(path)
        self.bin_dir = bin_dir.strip("/")

    def entries(self) -> list[str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailable(f"Cannot read shell list {self.path}: {e}") from e
        # Comment lines are not shell paths
        return [
            token
            for line in text.splitlines()
            if not line.lstrip().startswith("#")
            for token in line.split()
        ]

    def resolve(self, shell: str) -> str:
        """
        Return the absolute path of an allowed shell.

        Raises:
            InvalidShell: If the shell is not in the allow-list
            StorageUnavailable: If the allow-list cannot be read
        """
        candidate = shell if shell.startswith("/") else f"/{self.bin_dir}/{shell}"
        if candidate not in self.entries():
            raise InvalidShell(f"Shell '{shell}' is not listed in {self.path} as {candidate}")
        logger.debug(f"Resolved shell {shell} to {candidate}")
        return candidate
