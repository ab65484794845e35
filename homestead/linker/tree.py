"""Template tree scanning.

A template root is read into a tree of DirectoryNode and FileNode objects.
Consumers walk the tree with a TreeVisitor; each node dispatches to the
matching ``visit_*`` method through ``accept``.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class TreeVisitor:
    """Base visitor for template trees."""

    def visit_file(self, node: "FileNode", *args: Any) -> Any:
        raise NotImplementedError

    def visit_directory(self, node: "DirectoryNode", *args: Any) -> Any:
        raise NotImplementedError


@dataclass
class FileNode:
    """A non-directory template entry (regular file, symlink, or other)."""

    name: str
    path: Path

    def accept(self, visitor: TreeVisitor, *args: Any) -> Any:
        return visitor.visit_file(self, *args)


@dataclass
class DirectoryNode:
    """A template directory and its scanned children.

    Attributes:
        name: Entry name relative to its parent
        path: Absolute path inside the template root
        children: Child nodes sorted by name
        error: Reason the directory could not be listed, if any
    """

    name: str
    path: Path
    children: list = field(default_factory=list)
    error: Optional[str] = None

    def accept(self, visitor: TreeVisitor, *args: Any) -> Any:
        return visitor.visit_directory(self, *args)


def scan_template(root) -> DirectoryNode:
    """
    Read a template root into a node tree.

    Symlinks are recorded as FileNodes and never followed. A subdirectory
    that cannot be listed is kept with its ``error`` set so the walk can
    report it.

    Args:
        root: Template root directory

    Returns:
        DirectoryNode for the root

    Raises:
        NotADirectoryError: If root is not a directory
    """
    root = Path(root).absolute()
    if not root.is_dir():
        raise NotADirectoryError(f"Template root {root} is not a directory")
    return _scan_directory(root.name, root)


def _scan_directory(name: str, path: Path) -> DirectoryNode:
    node = DirectoryNode(name=name, path=path)
    try:
        with os.scandir(path) as listing:
            entries = sorted(listing, key=lambda entry: entry.name)
    except OSError as e:
        logger.warning(f"Cannot list template directory {path}: {e}")
        node.error = str(e)
        return node

    for entry in entries:
        entry_path = path / entry.name
        if entry.is_dir(follow_symlinks=False):
            node.children.append(_scan_directory(entry.name, entry_path))
        else:
            node.children.append(FileNode(name=entry.name, path=entry_path))
    return node
