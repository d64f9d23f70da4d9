"""Engine-wide settings shared by every pool.

The core holds the admin set, the minimum-share floors and the
public-pool-creation flag. Pools keep a reference to it and read these at
call time, so a change here applies to every pool immediately.
"""

from __future__ import annotations

import structlog

from stablepool.admin import AdminSet
from stablepool.config import DEFAULT_CORE_CONFIG, DEFAULT_POOL_CONFIG, CoreConfig, PoolConfig
from stablepool.errors import BelowMinimumShares, PoolAlreadyCreated, Unauthorized
from stablepool.pool import StableswapPool

logger = structlog.get_logger()


class StableswapCore:
    """Admin set, share floors and pool creation."""

    def __init__(self, deployer: str, config: CoreConfig = DEFAULT_CORE_CONFIG) -> None:
        self.admins = AdminSet(deployer)
        self.minimum_total_shares = config.minimum_total_shares
        self.minimum_burnt_shares = config.minimum_burnt_shares
        self.public_pool_creation = config.public_pool_creation
        # Names already taken; lookup only, pools are not enumerable
        self._pool_names: set[str] = set()

    def create_pool(
        self, caller: str, name: str, config: PoolConfig = DEFAULT_POOL_CONFIG
    ) -> StableswapPool:
        """Create and seed a new pool.

        Raises:
            PoolAlreadyCreated: If a pool with this name exists
            Unauthorized: If caller is not an admin and public creation is off
            ZeroAmount: If either initial balance is zero
            BelowMinimumShares: If initial or burnt shares are below their floors
        """
        if name in self._pool_names:
            raise PoolAlreadyCreated(f"Pool {name} already exists")
        pool = StableswapPool(self, name)
        pool.create(caller, config)
        self._pool_names.add(name)
        return pool

    # =========================================================================
    # Admin
    # =========================================================================

    def _require_admin(self, caller: str, operation: str) -> None:
        if caller not in self.admins:
            logger.warning("unauthorized", caller=caller, operation=operation)
            raise Unauthorized(f"{caller} may not call {operation}")

    def add_admin(self, caller: str, principal: str) -> None:
        self._require_admin(caller, "add_admin")
        self.admins.add(principal)

    def remove_admin(self, caller: str, principal: str) -> None:
        self._require_admin(caller, "remove_admin")
        self.admins.remove(principal)

    def set_public_pool_creation(self, caller: str, enabled: bool) -> None:
        self._require_admin(caller, "set_public_pool_creation")
        self.public_pool_creation = enabled
        logger.info("core_updated", caller=caller, public_pool_creation=enabled)

    def set_minimum_shares(self, caller: str, minimum_total: int, minimum_burnt: int) -> None:
        """Set the share floors applied to pool creation and withdrawals.

        Raises:
            Unauthorized: If caller is not an admin
            BelowMinimumShares: If either floor is not positive, or the burnt
                floor exceeds the total floor
        """
        self._require_admin(caller, "set_minimum_shares")
        if minimum_total <= 0 or minimum_burnt <= 0:
            raise BelowMinimumShares(
                f"Share floors must be positive, got ({minimum_total}, {minimum_burnt})"
            )
        if minimum_burnt > minimum_total:
            raise BelowMinimumShares(
                f"Burnt floor {minimum_burnt} exceeds total floor {minimum_total}"
            )
        self.minimum_total_shares = minimum_total
        self.minimum_burnt_shares = minimum_burnt
        logger.info(
            "core_updated",
            caller=caller,
            minimum_total_shares=minimum_total,
            minimum_burnt_shares=minimum_burnt,
        )

    # =========================================================================
    # Getters
    # =========================================================================

    def get_admins(self) -> tuple[str, ...]:
        return self.admins.members()

    def get_minimum_total_shares(self) -> int:
        return self.minimum_total_shares

    def get_minimum_burnt_shares(self) -> int:
        return self.minimum_burnt_shares

    def get_public_pool_creation(self) -> bool:
        return self.public_pool_creation
