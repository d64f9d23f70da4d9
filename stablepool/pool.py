"""Stableswap pool: parameter store and state machine.

A pool owns one PoolState snapshot. Every operation reads the snapshot,
runs the pure engine functions on it, and commits by replacing the
snapshot in a single assignment. An operation that raises leaves the pool
exactly as it was.

Status transitions:

    UNINITIALIZED --create--> ACTIVE <--set_pool_status--> PAUSED

Swaps, liquidity operations and their quotes need ACTIVE. Admin setters
work in ACTIVE and PAUSED and need an admin caller.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import structlog

from stablepool.config import DEFAULT_POOL_CONFIG, PoolConfig
from stablepool.errors import (
    ExcessiveSharesBurned,
    ImbalancedWithdrawsDisabled,
    InsufficientLiquidityMinted,
    InsufficientOutput,
    InsufficientWithdrawal,
    PoolAlreadyCreated,
    PoolNotActive,
    Unauthorized,
)
from stablepool.fees import FeeConfig, FeeTotals
from stablepool.liquidity import (
    AddLiquidityQuote,
    WithdrawQuote,
    apply_add_liquidity,
    apply_withdraw_liquidity,
    calc_add_liquidity,
    calc_withdraw_imbalanced,
    calc_withdraw_liquidity,
    initial_supply,
)
from stablepool.midpoint import Midpoint
from stablepool.state import PoolState
from stablepool.swap import SwapQuote, apply_swap, calc_swap
from stablepool.types import (
    AmplificationConfig,
    LPSupply,
    PoolStatus,
    ReserveState,
    SwapDirection,
)

if TYPE_CHECKING:
    from stablepool.core import StableswapCore

logger = structlog.get_logger()


@dataclass(frozen=True)
class PoolSnapshot:
    """Read-only view of a pool, as returned by get_pool()."""

    name: str
    status: PoolStatus
    reserves: ReserveState
    midpoint: Midpoint
    midpoint_manager: str | None
    fees: FeeConfig
    amplification: AmplificationConfig
    lp_supply: LPSupply
    fee_totals: FeeTotals
    fee_address: str
    uri: str
    imbalanced_withdraws: bool
    invariant: int


class StableswapPool:
    """A single two-asset stableswap pool.

    Pools are created through StableswapCore.create_pool, which supplies the
    admin set and minimum-share floors every pool reads at call time.
    """

    def __init__(self, core: StableswapCore, name: str) -> None:
        self.core = core
        self.name = name
        self.status = PoolStatus.UNINITIALIZED
        self.midpoint_manager: str | None = None
        self.fee_address = ""
        self.uri = ""
        self.imbalanced_withdraws = True
        self._state: PoolState | None = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def create(self, caller: str, config: PoolConfig = DEFAULT_POOL_CONFIG) -> LPSupply:
        """Seed the pool and move it to ACTIVE.

        Raises:
            PoolAlreadyCreated: If the pool was already created
            Unauthorized: If caller may not create pools
            ZeroAmount: If either initial balance is zero
            BelowMinimumShares: If initial or burnt shares are below their floors
        """
        if self.status is not PoolStatus.UNINITIALIZED:
            raise PoolAlreadyCreated(f"Pool {self.name} already created")
        if not self.core.public_pool_creation:
            self._require_admin(caller, "create_pool")

        state = PoolState(
            reserves=ReserveState(
                balance_x=config.initial_balance_x,
                balance_y=config.initial_balance_y,
            ),
            midpoint=config.midpoint,
            fees=config.fees,
            amplification=config.amplification,
            lp_supply=LPSupply(total_shares=0, burnt_shares=0),
        )
        supply = initial_supply(
            state,
            config.burn_amount,
            self.core.minimum_total_shares,
            self.core.minimum_burnt_shares,
        )

        self._state = replace(state, lp_supply=supply)
        self.fee_address = config.fee_address
        self.uri = config.uri
        self.imbalanced_withdraws = config.imbalanced_withdraws
        self.midpoint_manager = caller
        self.status = PoolStatus.ACTIVE

        logger.info(
            "pool_created",
            pool=self.name,
            caller=caller,
            balance_x=config.initial_balance_x,
            balance_y=config.initial_balance_y,
            total_shares=supply.total_shares,
            burnt_shares=supply.burnt_shares,
        )
        return supply

    @property
    def state(self) -> PoolState:
        """Current snapshot.

        Raises:
            PoolNotActive: If the pool has not been created
        """
        if self._state is None:
            raise PoolNotActive(f"Pool {self.name} has not been created")
        return self._state

    def get_pool(self) -> PoolSnapshot:
        state = self.state
        return PoolSnapshot(
            name=self.name,
            status=self.status,
            reserves=state.reserves,
            midpoint=state.midpoint,
            midpoint_manager=self.midpoint_manager,
            fees=state.fees,
            amplification=state.amplification,
            lp_supply=state.lp_supply,
            fee_totals=state.fee_totals,
            fee_address=self.fee_address,
            uri=self.uri,
            imbalanced_withdraws=self.imbalanced_withdraws,
            invariant=state.invariant(),
        )

    # =========================================================================
    # Quotes
    # =========================================================================

    def quote_swap(self, direction: SwapDirection, amount_in: int) -> SwapQuote:
        return calc_swap(self._active_state(), direction, amount_in)

    def quote_add_liquidity(self, amount_x: int, amount_y: int) -> AddLiquidityQuote:
        return calc_add_liquidity(self._active_state(), amount_x, amount_y)

    def quote_withdraw_liquidity(self, lp_amount: int) -> WithdrawQuote:
        return calc_withdraw_liquidity(
            self._active_state(), lp_amount, self.core.minimum_total_shares
        )

    def quote_withdraw_imbalanced(self, amount_x: int, amount_y: int) -> WithdrawQuote:
        return calc_withdraw_imbalanced(
            self._imbalanced_withdraw_state(), amount_x, amount_y, self.core.minimum_total_shares
        )

    def get_dy(self, amount_x: int) -> int:
        """Net Y received for selling amount_x X."""
        return self.quote_swap(SwapDirection.X_FOR_Y, amount_x).amount_out

    def get_dx(self, amount_y: int) -> int:
        """Net X received for selling amount_y Y."""
        return self.quote_swap(SwapDirection.Y_FOR_X, amount_y).amount_out

    def get_dlp(self, amount_x: int, amount_y: int) -> int:
        """LP shares minted for depositing (amount_x, amount_y)."""
        return self.quote_add_liquidity(amount_x, amount_y).lp_minted

    # =========================================================================
    # Swaps and liquidity
    # =========================================================================

    def swap_x_for_y(self, amount_x: int, min_amount_y: int) -> int:
        """Sell amount_x X; returns Y received."""
        return self._swap(SwapDirection.X_FOR_Y, amount_x, min_amount_y)

    def swap_y_for_x(self, amount_y: int, min_amount_x: int) -> int:
        """Sell amount_y Y; returns X received."""
        return self._swap(SwapDirection.Y_FOR_X, amount_y, min_amount_x)

    def _swap(self, direction: SwapDirection, amount_in: int, min_amount_out: int) -> int:
        state = self._active_state()
        quote = calc_swap(state, direction, amount_in)

        if quote.amount_out < min_amount_out:
            logger.warning(
                "swap_rejected",
                pool=self.name,
                direction=direction.value,
                amount_out=quote.amount_out,
                min_amount_out=min_amount_out,
            )
            raise InsufficientOutput(
                f"Output {quote.amount_out} below minimum {min_amount_out}"
            )

        self._state = apply_swap(state, quote)
        logger.info(
            "swap_executed",
            pool=self.name,
            direction=direction.value,
            amount_in=amount_in,
            amount_out=quote.amount_out,
            protocol_fee=quote.fees.protocol_fee,
            provider_fee=quote.fees.provider_fee,
        )
        return quote.amount_out

    def add_liquidity(self, amount_x: int, amount_y: int, min_lp: int) -> int:
        """Deposit (amount_x, amount_y); returns LP shares minted."""
        state = self._active_state()
        quote = calc_add_liquidity(state, amount_x, amount_y)

        if quote.lp_minted < min_lp:
            logger.warning(
                "add_liquidity_rejected",
                pool=self.name,
                lp_minted=quote.lp_minted,
                min_lp=min_lp,
            )
            raise InsufficientLiquidityMinted(
                f"Minted {quote.lp_minted} shares, minimum is {min_lp}"
            )

        self._state = apply_add_liquidity(state, quote)
        logger.info(
            "liquidity_added",
            pool=self.name,
            amount_x=amount_x,
            amount_y=amount_y,
            lp_minted=quote.lp_minted,
            fee_x=quote.fee_x,
            fee_y=quote.fee_y,
        )
        return quote.lp_minted

    def withdraw_liquidity(self, lp_amount: int, min_x: int, min_y: int) -> tuple[int, int]:
        """Burn lp_amount shares; returns (amount_x, amount_y)."""
        state = self._active_state()
        quote = calc_withdraw_liquidity(state, lp_amount, self.core.minimum_total_shares)

        if quote.amount_x < min_x or quote.amount_y < min_y:
            logger.warning(
                "withdraw_rejected",
                pool=self.name,
                amount_x=quote.amount_x,
                amount_y=quote.amount_y,
                min_x=min_x,
                min_y=min_y,
            )
            raise InsufficientWithdrawal(
                f"Withdrawal ({quote.amount_x}, {quote.amount_y}) below minimum ({min_x}, {min_y})"
            )

        self._state = apply_withdraw_liquidity(state, quote)
        logger.info(
            "liquidity_withdrawn",
            pool=self.name,
            lp_burned=lp_amount,
            amount_x=quote.amount_x,
            amount_y=quote.amount_y,
        )
        return quote.amount_x, quote.amount_y

    def withdraw_imbalanced(self, amount_x: int, amount_y: int, max_lp: int) -> int:
        """Withdraw exactly (amount_x, amount_y); returns LP shares burned."""
        state = self._imbalanced_withdraw_state()
        quote = calc_withdraw_imbalanced(
            state, amount_x, amount_y, self.core.minimum_total_shares
        )

        if quote.lp_burned > max_lp:
            logger.warning(
                "withdraw_rejected",
                pool=self.name,
                lp_burned=quote.lp_burned,
                max_lp=max_lp,
            )
            raise ExcessiveSharesBurned(f"Burns {quote.lp_burned} shares, maximum is {max_lp}")

        self._state = apply_withdraw_liquidity(state, quote)
        logger.info(
            "liquidity_withdrawn",
            pool=self.name,
            lp_burned=quote.lp_burned,
            amount_x=amount_x,
            amount_y=amount_y,
            fee_x=quote.fee_x,
            fee_y=quote.fee_y,
        )
        return quote.lp_burned

    # =========================================================================
    # Admin
    # =========================================================================

    def set_amplification_coefficient(self, caller: str, coefficient: int) -> None:
        state = self._admin_state(caller, "set_amplification_coefficient")
        amplification = replace(state.amplification, coefficient=coefficient)
        self._commit_admin(replace(state, amplification=amplification), caller, coefficient=coefficient)

    def set_convergence_threshold(self, caller: str, threshold: int) -> None:
        state = self._admin_state(caller, "set_convergence_threshold")
        amplification = replace(state.amplification, convergence_threshold=threshold)
        self._commit_admin(replace(state, amplification=amplification), caller, threshold=threshold)

    def set_midpoint(self, caller: str, numerator: int) -> None:
        """Update the midpoint value; the midpoint manager may also call this."""
        state = self._created_state()
        if caller != self.midpoint_manager:
            self._require_admin(caller, "set_midpoint")
        midpoint = replace(state.midpoint, numerator=numerator)
        self._commit_admin(replace(state, midpoint=midpoint), caller, midpoint=numerator)

    def set_midpoint_factor(self, caller: str, denominator: int) -> None:
        state = self._admin_state(caller, "set_midpoint_factor")
        midpoint = replace(state.midpoint, denominator=denominator)
        self._commit_admin(replace(state, midpoint=midpoint), caller, midpoint_factor=denominator)

    def set_midpoint_reversed(self, caller: str, reversed_: bool) -> None:
        state = self._admin_state(caller, "set_midpoint_reversed")
        midpoint = replace(state.midpoint, reversed=reversed_)
        self._commit_admin(replace(state, midpoint=midpoint), caller, reversed=reversed_)

    def set_midpoint_manager(self, caller: str, manager: str) -> None:
        self._admin_state(caller, "set_midpoint_manager")
        self.midpoint_manager = manager
        logger.info("pool_updated", pool=self.name, caller=caller, midpoint_manager=manager)

    def set_x_fees(self, caller: str, protocol_fee: int, provider_fee: int) -> None:
        state = self._admin_state(caller, "set_x_fees")
        fees = state.fees.with_x_fees(protocol_fee, provider_fee)
        self._commit_admin(
            replace(state, fees=fees), caller, protocol_fee_x=protocol_fee, provider_fee_x=provider_fee
        )

    def set_y_fees(self, caller: str, protocol_fee: int, provider_fee: int) -> None:
        state = self._admin_state(caller, "set_y_fees")
        fees = state.fees.with_y_fees(protocol_fee, provider_fee)
        self._commit_admin(
            replace(state, fees=fees), caller, protocol_fee_y=protocol_fee, provider_fee_y=provider_fee
        )

    def set_liquidity_fee(self, caller: str, liquidity_fee: int) -> None:
        state = self._admin_state(caller, "set_liquidity_fee")
        fees = state.fees.with_liquidity_fee(liquidity_fee)
        self._commit_admin(replace(state, fees=fees), caller, liquidity_fee=liquidity_fee)

    def set_imbalanced_withdraws(self, caller: str, enabled: bool) -> None:
        self._admin_state(caller, "set_imbalanced_withdraws")
        self.imbalanced_withdraws = enabled
        logger.info("pool_updated", pool=self.name, caller=caller, imbalanced_withdraws=enabled)

    def set_fee_address(self, caller: str, fee_address: str) -> None:
        self._admin_state(caller, "set_fee_address")
        self.fee_address = fee_address
        logger.info("pool_updated", pool=self.name, caller=caller, fee_address=fee_address)

    def set_pool_uri(self, caller: str, uri: str) -> None:
        self._admin_state(caller, "set_pool_uri")
        self.uri = uri
        logger.info("pool_updated", pool=self.name, caller=caller, uri=uri)

    def set_pool_status(self, caller: str, status: PoolStatus | str) -> None:
        """Toggle between ACTIVE and PAUSED.

        Raises:
            ValueError: If status is UNINITIALIZED or not a PoolStatus value
        """
        self._admin_state(caller, "set_pool_status")
        status = PoolStatus(status)
        if status is PoolStatus.UNINITIALIZED:
            raise ValueError("A created pool cannot return to UNINITIALIZED")
        self.status = status
        logger.info("pool_updated", pool=self.name, caller=caller, status=status.value)

    # =========================================================================
    # Guards
    # =========================================================================

    def _created_state(self) -> PoolState:
        if self._state is None:
            logger.warning("pool_not_created", pool=self.name)
            raise PoolNotActive(f"Pool {self.name} has not been created")
        return self._state

    def _active_state(self) -> PoolState:
        if self.status is not PoolStatus.ACTIVE:
            logger.warning("pool_not_active", pool=self.name, status=self.status.value)
            raise PoolNotActive(f"Pool {self.name} is {self.status.value}")
        return self._created_state()

    def _imbalanced_withdraw_state(self) -> PoolState:
        state = self._active_state()
        if not self.imbalanced_withdraws:
            logger.warning("imbalanced_withdraws_disabled", pool=self.name)
            raise ImbalancedWithdrawsDisabled(f"Pool {self.name} only allows proportional withdrawals")
        return state

    def _require_admin(self, caller: str, operation: str) -> None:
        if caller not in self.core.admins:
            logger.warning("unauthorized", pool=self.name, caller=caller, operation=operation)
            raise Unauthorized(f"{caller} may not call {operation}")

    def _admin_state(self, caller: str, operation: str) -> PoolState:
        state = self._created_state()
        self._require_admin(caller, operation)
        return state

    def _commit_admin(self, state: PoolState, caller: str, **changes: object) -> None:
        # New configuration must still price the current reserves.
        state.invariant()
        self._state = state
        logger.info("pool_updated", pool=self.name, caller=caller, **changes)
