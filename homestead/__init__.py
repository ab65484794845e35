"""
Homestead - Provision developer accounts on Linux hosts.

Creates users with a personal group and home directory, adds them to
existing groups, and mirrors a template tree of starter files into their
home directories with symbolic links.

The account database edits are lock-protected and idempotent:
- IDs are allocated from a floor of 1000 and never reused
- Group membership is tested by whole name, never by substring
- Template links never overwrite anything already in the home directory
"""

from .identity import (
    AccountDatabase,
    GroupMembership,
    IdentityAllocator,
    IdentityProvisioner,
    ShellAllowList,
)
from .linker import Owner, TemplateLinker, link_tree
from .settings import HomesteadSettings, get_settings, reload_settings

__version__ = "0.1.0"
__all__ = [
    "AccountDatabase",
    "GroupMembership",
    "HomesteadSettings",
    "IdentityAllocator",
    "IdentityProvisioner",
    "Owner",
    "ShellAllowList",
    "TemplateLinker",
    "get_settings",
    "link_tree",
    "reload_settings",
]
