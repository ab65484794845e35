"""
Template linking - mirror a template tree into a home directory with symlinks.
"""

from .linker import Owner, TemplateLinker, link_tree
from .tree import DirectoryNode, FileNode, TreeVisitor, scan_template

__all__ = [
    "DirectoryNode",
    "FileNode",
    "Owner",
    "TemplateLinker",
    "TreeVisitor",
    "link_tree",
    "scan_template",
]
