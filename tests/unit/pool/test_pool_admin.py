"""Tests for the pool status machine and admin setters."""

import pytest

from stablepool.errors import (
    InvalidAmplification,
    InvalidConvergenceThreshold,
    InvalidFee,
    InvalidMidpoint,
    PoolAlreadyCreated,
    PoolNotActive,
    Unauthorized,
)
from stablepool.midpoint import Midpoint
from stablepool.pool import StableswapPool
from stablepool.types import Asset, PoolStatus
from tests.helpers import ADMIN, ALICE, DEPLOYER, ORACLE, UNIT


class TestStatusMachine:
    """UNINITIALIZED -> ACTIVE <-> PAUSED."""

    def test_uninitialized_pool_rejects_everything(self, core):
        pool = StableswapPool(core, "fresh")
        assert pool.status is PoolStatus.UNINITIALIZED
        with pytest.raises(PoolNotActive):
            pool.get_dy(UNIT)
        with pytest.raises(PoolNotActive):
            pool.swap_x_for_y(UNIT, 0)
        with pytest.raises(PoolNotActive):
            pool.set_liquidity_fee(DEPLOYER, 10)
        with pytest.raises(PoolNotActive):
            pool.get_pool()

    def test_create_only_once(self, pool):
        with pytest.raises(PoolAlreadyCreated):
            pool.create(DEPLOYER)

    def test_paused_pool_rejects_trading(self, pool):
        pool.set_pool_status(DEPLOYER, PoolStatus.PAUSED)
        before = pool.state
        with pytest.raises(PoolNotActive):
            pool.get_dy(UNIT)
        with pytest.raises(PoolNotActive):
            pool.swap_y_for_x(UNIT, 0)
        with pytest.raises(PoolNotActive):
            pool.add_liquidity(UNIT, 0, 0)
        with pytest.raises(PoolNotActive):
            pool.withdraw_liquidity(UNIT, 0, 0)
        assert pool.state is before

    def test_paused_pool_accepts_admin_changes(self, pool):
        pool.set_pool_status(DEPLOYER, PoolStatus.PAUSED)
        pool.set_liquidity_fee(DEPLOYER, 25)
        assert pool.state.fees.liquidity_fee == 25
        assert pool.get_pool().status is PoolStatus.PAUSED

    def test_resume(self, pool):
        pool.set_pool_status(DEPLOYER, PoolStatus.PAUSED)
        pool.set_pool_status(DEPLOYER, PoolStatus.ACTIVE)
        assert pool.get_dy(UNIT) > 0

    def test_cannot_return_to_uninitialized(self, pool):
        with pytest.raises(ValueError):
            pool.set_pool_status(DEPLOYER, PoolStatus.UNINITIALIZED)
        assert pool.status is PoolStatus.ACTIVE

    def test_status_given_as_string(self, pool):
        pool.set_pool_status(DEPLOYER, "paused")
        assert pool.status is PoolStatus.PAUSED
        with pytest.raises(PoolNotActive):
            pool.get_dy(UNIT)
        pool.set_pool_status(DEPLOYER, "active")
        assert pool.get_dy(UNIT) > 0

    def test_unknown_status_rejected(self, pool):
        with pytest.raises(ValueError):
            pool.set_pool_status(DEPLOYER, "closed")
        assert pool.status is PoolStatus.ACTIVE


class TestAuthorization:
    """Admin setters require an admin caller."""

    @pytest.mark.parametrize(
        "setter,args",
        [
            ("set_amplification_coefficient", (50,)),
            ("set_convergence_threshold", (5,)),
            ("set_midpoint_factor", (2_000_000,)),
            ("set_midpoint_reversed", (True,)),
            ("set_midpoint_manager", (ALICE,)),
            ("set_x_fees", (1, 1)),
            ("set_y_fees", (1, 1)),
            ("set_liquidity_fee", (1,)),
            ("set_fee_address", (ALICE,)),
            ("set_pool_status", (PoolStatus.PAUSED,)),
            ("set_pool_uri", ("ipfs://pool",)),
            ("set_imbalanced_withdraws", (False,)),
        ],
    )
    def test_non_admin_rejected(self, pool, setter, args):
        before = pool.get_pool()
        with pytest.raises(Unauthorized):
            getattr(pool, setter)(ALICE, *args)
        assert pool.get_pool() == before

    def test_added_admin_allowed(self, pool, core):
        core.add_admin(DEPLOYER, ADMIN)
        pool.set_pool_uri(ADMIN, "ipfs://pool")
        assert pool.uri == "ipfs://pool"

    def test_removed_admin_rejected(self, pool, core):
        core.add_admin(DEPLOYER, ADMIN)
        core.remove_admin(DEPLOYER, ADMIN)
        with pytest.raises(Unauthorized):
            pool.set_pool_uri(ADMIN, "ipfs://pool")


class TestMidpointUpdates:
    """Tests for midpoint setters and the midpoint manager."""

    def test_manager_can_set_midpoint(self, pool):
        pool.set_midpoint_manager(DEPLOYER, ORACLE)
        pool.set_midpoint(ORACLE, 1_050_000)
        assert pool.state.midpoint == Midpoint(1_050_000, 1_000_000)

    def test_manager_cannot_set_other_params(self, pool):
        pool.set_midpoint_manager(DEPLOYER, ORACLE)
        with pytest.raises(Unauthorized):
            pool.set_midpoint_factor(ORACLE, 2_000_000)

    def test_stranger_cannot_set_midpoint(self, pool):
        with pytest.raises(Unauthorized):
            pool.set_midpoint(ALICE, 1_050_000)

    def test_zero_midpoint_rejected(self, pool):
        before = pool.state
        with pytest.raises(InvalidMidpoint):
            pool.set_midpoint(DEPLOYER, 0)
        with pytest.raises(InvalidMidpoint):
            pool.set_midpoint_factor(DEPLOYER, 0)
        assert pool.state is before

    def test_lower_midpoint_cheapens_y(self, pool):
        before = pool.get_dx(UNIT)
        pool.set_midpoint(DEPLOYER, 1_000_000)
        assert pool.get_dx(UNIT) < before

    def test_reversed_prices_y_below_x(self, pool):
        pool.set_midpoint_reversed(DEPLOYER, True)
        assert pool.state.midpoint.reversed is True
        assert pool.get_dx(UNIT) < UNIT


class TestParameterUpdates:
    """Tests for fee and curve setters."""

    def test_set_fees(self, pool):
        pool.set_x_fees(DEPLOYER, 5, 10)
        pool.set_y_fees(DEPLOYER, 15, 20)
        pool.set_liquidity_fee(DEPLOYER, 0)
        fees = pool.state.fees
        assert fees.rates_for(Asset.X) == (5, 10)
        assert fees.rates_for(Asset.Y) == (15, 20)
        assert fees.liquidity_fee == 0

    def test_invalid_fees_rejected(self, pool):
        before = pool.state
        with pytest.raises(InvalidFee):
            pool.set_x_fees(DEPLOYER, 5_000, 5_000)
        with pytest.raises(InvalidFee):
            pool.set_liquidity_fee(DEPLOYER, 10_000)
        assert pool.state is before

    def test_set_amplification(self, pool):
        pool.set_amplification_coefficient(DEPLOYER, 500)
        pool.set_convergence_threshold(DEPLOYER, 1)
        assert pool.state.amp == 500
        assert pool.state.threshold == 1

    def test_invalid_amplification_rejected(self, pool):
        with pytest.raises(InvalidAmplification):
            pool.set_amplification_coefficient(DEPLOYER, 0)
        with pytest.raises(InvalidConvergenceThreshold):
            pool.set_convergence_threshold(DEPLOYER, 0)
        assert pool.state.amp == 100

    def test_higher_amp_flattens_curve(self, pool):
        before = pool.get_dy(2_000_000 * UNIT)
        pool.set_amplification_coefficient(DEPLOYER, 1_000)
        assert pool.get_dy(2_000_000 * UNIT) > before

    def test_fee_address_and_uri(self, pool):
        pool.set_fee_address(DEPLOYER, "treasury")
        pool.set_pool_uri(DEPLOYER, "ipfs://pool")
        snapshot = pool.get_pool()
        assert snapshot.fee_address == "treasury"
        assert snapshot.uri == "ipfs://pool"
