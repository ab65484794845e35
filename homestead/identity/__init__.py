"""
Identity management - uid/gid allocation, user creation and group membership.
"""

from .allocator import IdentityAllocator
from .database import AccountDatabase
from .membership import GroupMembership
from .provisioner import IdentityProvisioner
from .shells import ShellAllowList

__all__ = [
    "AccountDatabase",
    "GroupMembership",
    "IdentityAllocator",
    "IdentityProvisioner",
    "ShellAllowList",
]
