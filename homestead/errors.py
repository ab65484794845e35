"""
Homestead errors - domain exceptions raised by the provisioning core.
"""

class HomesteadError(Exception):
    """Base exception for all Homestead errors."""
    pass

class StorageUnavailable(HomesteadError):
    """An account database could not be read or written."""
    pass

class UnknownGroup(HomesteadError):
    """A requested group does not exist in the group database."""

    def __init__(self, group: str):
        super().__init__(f"Group '{group}' does not exist")
        self.group = group

class ProvisioningFailed(HomesteadError):
    """User creation could not be completed."""
    pass

class InvalidShell(ProvisioningFailed):
    """The requested login shell is not in the shell allow-list."""
    pass

class PrivilegeError(HomesteadError):
    """The operation requires root privileges."""
    pass

class InvalidAccountName(HomesteadError):
    """An account name contains characters the databases cannot store."""
    pass
