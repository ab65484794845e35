"""Symlink replication of a template tree into a destination tree."""

import logging
import os
from pathlib import Path
from typing import NamedTuple, Optional

from ..models import LinkOutcome, LinkStatus
from .tree import DirectoryNode, FileNode, TreeVisitor, scan_template

logger = logging.getLogger(__name__)


class Owner(NamedTuple):
    """Numeric owner applied to created links and directories."""
    uid: int
    gid: int


class TemplateLinker(TreeVisitor):
    """
    Mirrors a template tree into a destination tree using symbolic links.

    Directories are recreated as real directories; every other entry becomes
    a symlink pointing at the absolute template path. Nothing that already
    exists at a destination path is touched: the entry is reported as
    ALREADY_EXISTS instead. A failure on one entry is reported as FAILED and
    the walk carries on with the remaining entries.

    Only file entries produce CREATED or ALREADY_EXISTS outcomes. Directories
    appear in the report only when they fail, in which case their subtree is
    skipped.

    Example:
        >>> linker = TemplateLinker(owner=Owner(1001, 1001))
        >>> outcomes = linker.link_tree("/etc/skel.d/starter_files", "/home/dev")
    """

    def __init__(self, owner: Optional[Owner] = None):
        self.owner = owner
        self._outcomes: list[LinkOutcome] = []

    def link_tree(self, template_root, dest_root) -> list[LinkOutcome]:
        """
        Link every entry under template_root into dest_root.

        Args:
            template_root: Directory whose structure is mirrored
            dest_root: Directory receiving the links (created if missing)

        Returns:
            Outcomes in traversal order

        Raises:
            NotADirectoryError: If template_root is not a directory
        """
        tree = scan_template(template_root)
        self._outcomes = []
        tree.accept(self, Path(dest_root).absolute())

        outcomes, self._outcomes = self._outcomes, []
        logger.info(
            f"Linked {tree.path} into {dest_root}: "
            f"{sum(o.status is LinkStatus.CREATED for o in outcomes)} created, "
            f"{sum(o.status is LinkStatus.ALREADY_EXISTS for o in outcomes)} existing, "
            f"{sum(o.status is LinkStatus.FAILED for o in outcomes)} failed"
        )
        return outcomes

    def visit_directory(self, node: DirectoryNode, dest: Path) -> None:
        if not self._ensure_directory(dest):
            return

        if node.error is not None:
            self._outcomes.append(LinkOutcome.failed(dest, f"cannot list {node.path}: {node.error}"))
            return

        for child in node.children:
            child.accept(self, dest / child.name)

    def visit_file(self, node: FileNode, dest: Path) -> None:
        if os.path.lexists(dest):
            logger.debug(f"{dest} already exists, skipping")
            self._outcomes.append(LinkOutcome.already_exists(dest))
            return

        try:
            os.symlink(node.path, dest)
        except FileExistsError:
            self._outcomes.append(LinkOutcome.already_exists(dest))
            return
        except OSError as e:
            logger.warning(f"Could not link {dest} -> {node.path}: {e}")
            self._outcomes.append(LinkOutcome.failed(dest, str(e)))
            return

        if self.owner is not None:
            try:
                os.lchown(dest, self.owner.uid, self.owner.gid)
            except OSError as e:
                logger.warning(f"Linked {dest} but could not set its owner: {e}")
                self._outcomes.append(LinkOutcome.failed(dest, f"link created, ownership not set: {e}"))
                return

        logger.debug(f"Linked {dest} -> {node.path}")
        self._outcomes.append(LinkOutcome.created(dest))

    def _ensure_directory(self, dest: Path) -> bool:
        """Create dest (with parents) unless it is already a directory.

        Returns:
            True if dest is a usable directory, False after recording a failure
        """
        if dest.is_dir():
            return True

        if os.path.lexists(dest):
            self._outcomes.append(LinkOutcome.failed(dest, "exists and is not a directory"))
            return False

        try:
            dest.mkdir(parents=True)
            if self.owner is not None:
                os.chown(dest, self.owner.uid, self.owner.gid)
        except OSError as e:
            logger.warning(f"Could not create directory {dest}: {e}")
            self._outcomes.append(LinkOutcome.failed(dest, str(e)))
            return False

        logger.debug(f"Created directory {dest}")
        return True


def link_tree(template_root, dest_root, owner: Optional[Owner] = None) -> list[LinkOutcome]:
    """Convenience wrapper around TemplateLinker.link_tree()."""
    return TemplateLinker(owner=owner).link_tree(template_root, dest_root)
