"""Idempotent group membership edits."""

import logging
from collections.abc import Iterable

from ..errors import InvalidAccountName, UnknownGroup
from ..models import MembershipResult, check_account_name
from .database import AccountDatabase

logger = logging.getLogger(__name__)


class GroupMembership:
    """Adds users to existing groups by rewriting the group's members field.

    Each edit is a read-check-write of a single group line, performed under
    the database lock so that concurrent writers of the same record are
    serialized. Existing members and their order are always preserved.
    """

    def __init__(self, database: AccountDatabase):
        self.database = database

    @staticmethod
    def _check_member_name(user_name: str) -> None:
        try:
            check_account_name(user_name)
        except ValueError as e:
            raise InvalidAccountName(str(e)) from e

    def group_exists(self, name: str) -> bool:
        return self.database.find_group(name) is not None

    def add_member(self, group_name: str, user_name: str) -> MembershipResult:
        """
        Add a user to one group unless already a whole-token member.

        Args:
            group_name: Existing group to edit
            user_name: User to append to the members field

        Returns:
            MembershipResult.ADDED or MembershipResult.ALREADY_MEMBER

        Raises:
            UnknownGroup: If the group does not exist
            InvalidAccountName: If user_name cannot be stored in a members field
            StorageUnavailable: If the group database cannot be read or replaced
        """
        self._check_member_name(user_name)

        with self.database.locked():
            group = self.database.find_group(group_name)
            if group is None:
                raise UnknownGroup(group_name)

            if not group.members.add(user_name):
                logger.info(f"{user_name} is already a member of {group_name}")
                return MembershipResult.ALREADY_MEMBER

            self.database.replace_group(group)

        logger.info(f"Added {user_name} to group {group_name}")
        return MembershipResult.ADDED

    def add_member_to_groups(
        self, group_names: Iterable[str], user_name: str
    ) -> dict[str, MembershipResult]:
        """
        Add a user to several groups, failing before any edit if one is unknown.

        Args:
            group_names: Groups already split from the caller's comma-separated list
            user_name: User to add

        Returns:
            Mapping of group name to its MembershipResult, in request order

        Raises:
            UnknownGroup: For the first requested group that does not exist;
                no group has been modified when this is raised
            InvalidAccountName: If user_name cannot be stored in a members field
        """
        group_names = list(group_names)
        self._check_member_name(user_name)
        results: dict[str, MembershipResult] = {}

        with self.database.locked():
            for name in group_names:
                if not self.group_exists(name):
                    raise UnknownGroup(name)

            for name in group_names:
                results[name] = self.add_member(name, user_name)

        return results
