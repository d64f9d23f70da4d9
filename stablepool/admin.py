"""Fixed-capacity admin set."""

from __future__ import annotations

import structlog

from stablepool.config import MAX_ADMINS
from stablepool.errors import (
    AdminLimitReached,
    CannotRemoveDeployer,
    DuplicateAdmin,
    NotAnAdmin,
)

logger = structlog.get_logger()


class AdminSet:
    """Ordered set of admin principals.

    The deployer is always the first member and cannot be removed. Every
    rejected change raises; nothing is ever a silent no-op.
    """

    def __init__(self, deployer: str, capacity: int = MAX_ADMINS) -> None:
        if capacity < 1:
            raise ValueError(f"Admin capacity must be at least 1, got {capacity}")
        self.deployer = deployer
        self.capacity = capacity
        self._members: list[str] = [deployer]

    def __contains__(self, principal: object) -> bool:
        return principal in self._members

    def __len__(self) -> int:
        return len(self._members)

    def members(self) -> tuple[str, ...]:
        return tuple(self._members)

    def add(self, principal: str) -> None:
        """Add principal to the set.

        Raises:
            DuplicateAdmin: If principal is already a member
            AdminLimitReached: If the set is full
        """
        if principal in self._members:
            raise DuplicateAdmin(f"{principal} is already an admin")
        if len(self._members) >= self.capacity:
            raise AdminLimitReached(f"Admin set is full ({self.capacity} members)")
        self._members.append(principal)
        logger.info("admin_added", principal=principal, admin_count=len(self._members))

    def remove(self, principal: str) -> None:
        """Remove principal from the set.

        Raises:
            CannotRemoveDeployer: If principal is the deployer
            NotAnAdmin: If principal is not a member
        """
        if principal == self.deployer:
            raise CannotRemoveDeployer(f"{principal} deployed the engine and cannot be removed")
        if principal not in self._members:
            raise NotAnAdmin(f"{principal} is not an admin")
        self._members.remove(principal)
        logger.info("admin_removed", principal=principal, admin_count=len(self._members))
