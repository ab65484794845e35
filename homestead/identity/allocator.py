"""Next-free uid/gid allocation over the account databases."""

import logging

from .database import AccountDatabase

logger = logging.getLogger(__name__)

DEFAULT_ID_FLOOR = 1000


class IdentityAllocator:
    """Hands out the lowest unused numeric ID at or above a floor.

    The scan only reads the databases. Two concurrent provisioning runs could be
    handed the same ID unless the allocate-then-append sequence runs inside
    ``AccountDatabase.locked()``.

    Attributes:
        database: Repository the IDs are checked against
        floor: Lowest ID that may be handed out (default: 1000)
    """

    def __init__(self, database: AccountDatabase, floor: int = DEFAULT_ID_FLOOR):
        self.database = database
        self.floor = floor

    def _first_free(self, used: set[int]) -> int:
        candidate = self.floor
        while candidate in used:
            candidate += 1
        return candidate

    def next_free_uid(self) -> int:
        """Return the smallest uid >= floor with no exact match in the user database.

        Raises:
            StorageUnavailable: If the user database cannot be read
        """
        uid = self._first_free({record.uid for record in self.database.users()})
        logger.debug(f"Next free uid: {uid}")
        return uid

    def next_free_gid(self) -> int:
        """Return the smallest gid >= floor with no exact match in the group database.

        Raises:
            StorageUnavailable: If the group database cannot be read
        """
        gid = self._first_free({record.gid for record in self.database.groups()})
        logger.debug(f"Next free gid: {gid}")
        return gid
