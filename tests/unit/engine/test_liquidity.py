"""Tests for the liquidity engine."""

from dataclasses import replace

import pytest

from stablepool.errors import (
    BelowMinimumShares,
    InsufficientLiquidityMinted,
    ZeroAmount,
    ZeroBalanceError,
)
from stablepool.liquidity import (
    apply_add_liquidity,
    apply_withdraw_liquidity,
    calc_add_liquidity,
    calc_withdraw_imbalanced,
    calc_withdraw_liquidity,
    initial_supply,
)
from stablepool.pricing import usd_value, value_change
from stablepool.types import LPSupply, ReserveState
from tests.helpers import INITIAL_BALANCE, UNIT, make_state

MIN_TOTAL = 10_000


def parity_state(**kwargs):
    return make_state(midpoint=1_000_000, midpoint_factor=1_000_000, **kwargs)


def round_trip(state, amount_x, amount_y):
    """Deposit then immediately withdraw every minted share."""
    added = calc_add_liquidity(state, amount_x, amount_y)
    after_add = apply_add_liquidity(state, added)
    withdrawn = calc_withdraw_liquidity(after_add, added.lp_minted, MIN_TOTAL)
    return added, withdrawn


class TestAddLiquidity:
    """Tests for calc_add_liquidity."""

    def test_balanced_deposit_pays_no_fee(self):
        """A deposit in the pool's own ratio mints exactly its share of D."""
        state = parity_state()
        quote = calc_add_liquidity(state, 1_000 * UNIT, 1_000 * UNIT)
        assert quote.fee_x == 0
        assert quote.fee_y == 0
        assert quote.lp_minted == 2_000 * UNIT
        assert quote.invariant_after == quote.invariant_before + 2_000 * UNIT

    def test_single_sided_pays_imbalance_fee(self, state):
        quote = calc_add_liquidity(state, 100 * UNIT, 0)
        assert quote.fee_x > 0
        assert quote.fee_y > 0
        assert quote.lp_minted > 0

    def test_fee_free_config_mints_more(self):
        with_fee = calc_add_liquidity(make_state(), 100 * UNIT, 0)
        without = calc_add_liquidity(make_state(liquidity_fee=0), 100 * UNIT, 0)
        assert without.lp_minted > with_fee.lp_minted
        assert without.fee_x == 0

    def test_reserves_grow_by_full_deposit(self, state):
        quote = calc_add_liquidity(state, 100 * UNIT, 50 * UNIT)
        assert quote.reserves_after == ReserveState(
            balance_x=INITIAL_BALANCE + 100 * UNIT,
            balance_y=INITIAL_BALANCE + 50 * UNIT,
        )

    def test_first_deposit_mints_invariant(self):
        empty = make_state(balance_x=0, balance_y=0, total_shares=0, burnt_shares=0)
        quote = calc_add_liquidity(empty, 1_000 * UNIT, 1_000 * UNIT)
        assert quote.lp_minted == quote.invariant_after
        assert quote.fee_x == quote.fee_y == 0

    def test_zero_deposit_raises(self, state):
        with pytest.raises(ZeroAmount):
            calc_add_liquidity(state, 0, 0)

    def test_dust_deposit_mints_nothing(self, state):
        with pytest.raises(InsufficientLiquidityMinted):
            calc_add_liquidity(state, 1, 0)

    @pytest.mark.parametrize("multiple", [1_000, 3_000])
    def test_oversized_single_sided_deposit_raises(self, state, multiple):
        """The fee on the untouched side would exceed that side's balance."""
        with pytest.raises(InsufficientLiquidityMinted, match="exceeds the pool's balance"):
            calc_add_liquidity(state, multiple * INITIAL_BALANCE, 0)

    def test_large_single_sided_deposit_still_mints(self, state):
        quote = calc_add_liquidity(state, 300 * INITIAL_BALANCE, 0)
        assert quote.lp_minted > 0

    def test_apply_updates_supply_and_fees(self, state):
        quote = calc_add_liquidity(state, 100 * UNIT, 0)
        after = apply_add_liquidity(state, quote)
        assert after.lp_supply.total_shares == state.lp_supply.total_shares + quote.lp_minted
        assert after.lp_supply.burnt_shares == state.lp_supply.burnt_shares
        assert after.fee_totals.liquidity_x == quote.fee_x
        assert after.fee_totals.liquidity_y == quote.fee_y


class TestWithdrawLiquidity:
    """Tests for calc_withdraw_liquidity."""

    def test_proportional(self, state):
        total = state.lp_supply.total_shares
        lp = total // 10
        quote = calc_withdraw_liquidity(state, lp, MIN_TOTAL)
        assert quote.amount_x == INITIAL_BALANCE * lp // total
        assert quote.amount_y == INITIAL_BALANCE * lp // total

    def test_apply_burns_shares(self, state):
        quote = calc_withdraw_liquidity(state, 1_000 * UNIT, MIN_TOTAL)
        after = apply_withdraw_liquidity(state, quote)
        assert after.lp_supply.total_shares == state.lp_supply.total_shares - 1_000 * UNIT
        assert after.reserves == quote.reserves_after

    def test_zero_raises(self, state):
        with pytest.raises(ZeroAmount):
            calc_withdraw_liquidity(state, 0, MIN_TOTAL)

    def test_burnt_shares_are_locked(self, state):
        withdrawable = state.lp_supply.withdrawable_shares
        with pytest.raises(BelowMinimumShares):
            calc_withdraw_liquidity(state, withdrawable + 1, MIN_TOTAL)

    def test_floor_on_remaining_supply(self):
        state = parity_state(balance_x=10_000, balance_y=10_000)
        assert state.lp_supply == LPSupply(total_shares=20_000, burnt_shares=1000)
        calc_withdraw_liquidity(state, 10_000, MIN_TOTAL)
        with pytest.raises(BelowMinimumShares):
            calc_withdraw_liquidity(state, 10_001, MIN_TOTAL)


class TestWithdrawImbalanced:
    """Tests for calc_withdraw_imbalanced."""

    def test_proportional_amounts_burn_at_least_proportional_shares(self):
        state = parity_state()
        lp = state.lp_supply.total_shares // 10
        proportional = calc_withdraw_liquidity(state, lp, MIN_TOTAL)
        quote = calc_withdraw_imbalanced(
            state, proportional.amount_x, proportional.amount_y, MIN_TOTAL
        )
        assert quote.fee_x == quote.fee_y == 0
        assert quote.lp_burned >= lp
        assert quote.reserves_after == proportional.reserves_after

    def test_single_sided_costs_more_than_proportional(self):
        """Taking the same value from one side burns more shares and pays a fee."""
        state = parity_state()
        lp = state.lp_supply.total_shares // 10
        proportional = calc_withdraw_liquidity(state, lp, MIN_TOTAL)
        quote = calc_withdraw_imbalanced(
            state, proportional.amount_x + proportional.amount_y, 0, MIN_TOTAL
        )
        assert quote.lp_burned > lp
        assert quote.fee_x > 0
        assert quote.fee_y > 0

    def test_fee_free_config_burns_less(self):
        with_fee = calc_withdraw_imbalanced(make_state(), 100 * UNIT, 0, MIN_TOTAL)
        without = calc_withdraw_imbalanced(
            make_state(liquidity_fee=0), 100 * UNIT, 0, MIN_TOTAL
        )
        assert without.lp_burned < with_fee.lp_burned
        assert without.fee_x == without.fee_y == 0

    def test_deposit_then_withdraw_same_amount_burns_more_than_minted(self, state):
        added = calc_add_liquidity(state, 100 * UNIT, 0)
        after_add = apply_add_liquidity(state, added)
        quote = calc_withdraw_imbalanced(after_add, 100 * UNIT, 0, MIN_TOTAL)
        assert quote.lp_burned > added.lp_minted

    def test_apply_records_fees(self, state):
        quote = calc_withdraw_imbalanced(state, 0, 100 * UNIT, MIN_TOTAL)
        after = apply_withdraw_liquidity(state, quote)
        assert after.reserves == ReserveState(
            balance_x=INITIAL_BALANCE, balance_y=INITIAL_BALANCE - 100 * UNIT
        )
        assert after.lp_supply.total_shares == state.lp_supply.total_shares - quote.lp_burned
        assert after.fee_totals.liquidity_x == quote.fee_x
        assert after.fee_totals.liquidity_y == quote.fee_y

    def test_zero_raises(self, state):
        with pytest.raises(ZeroAmount):
            calc_withdraw_imbalanced(state, 0, 0, MIN_TOTAL)

    def test_emptying_a_side_raises(self, state):
        with pytest.raises(ZeroBalanceError):
            calc_withdraw_imbalanced(state, INITIAL_BALANCE, 0, MIN_TOTAL)

    def test_burn_floor_enforced(self):
        state = parity_state(balance_x=10_000, balance_y=10_000)
        with pytest.raises(BelowMinimumShares):
            calc_withdraw_imbalanced(state, 6_000, 6_000, MIN_TOTAL)


class TestRoundTrip:
    """Add-then-withdraw cycles never create value."""

    def test_single_sided_x_loses_about_the_fee(self, state):
        _, withdrawn = round_trip(state, 100 * UNIT, 0)
        change = value_change(
            usd_value(100 * UNIT, 0), usd_value(withdrawn.amount_x, withdrawn.amount_y)
        )
        assert -0.01 < change < -0.001

    def test_single_sided_y_loses(self, state):
        _, withdrawn = round_trip(state, 0, 100 * UNIT)
        change = value_change(
            usd_value(0, 100 * UNIT), usd_value(withdrawn.amount_x, withdrawn.amount_y)
        )
        assert -0.01 < change < 0

    def test_balanced_deposit_does_not_gain(self):
        state = parity_state()
        _, withdrawn = round_trip(state, 1_000 * UNIT, 1_000 * UNIT)
        assert withdrawn.amount_x <= 1_000 * UNIT
        assert withdrawn.amount_y <= 1_000 * UNIT

    def test_higher_fee_loses_more(self):
        _, low = round_trip(make_state(liquidity_fee=10), 100 * UNIT, 0)
        _, high = round_trip(make_state(liquidity_fee=100), 100 * UNIT, 0)
        assert usd_value(high.amount_x, high.amount_y) < usd_value(low.amount_x, low.amount_y)


class TestInitialSupply:
    """Tests for the shares minted at pool creation."""

    def test_supply_is_invariant(self, state):
        supply = initial_supply(state, 1000, MIN_TOTAL, 1000)
        assert supply == LPSupply(total_shares=state.invariant(), burnt_shares=1000)

    def test_empty_side_raises(self, state):
        empty = replace(state, reserves=ReserveState(balance_x=0, balance_y=INITIAL_BALANCE))
        with pytest.raises(ZeroAmount):
            initial_supply(empty, 1000, MIN_TOTAL, 1000)

    def test_below_minimum_total(self):
        state = parity_state(balance_x=4_000, balance_y=4_000, total_shares=0)
        with pytest.raises(BelowMinimumShares):
            initial_supply(state, 1000, MIN_TOTAL, 1000)

    def test_below_minimum_burn(self, state):
        with pytest.raises(BelowMinimumShares):
            initial_supply(state, 999, MIN_TOTAL, 1000)

    def test_burn_must_leave_shares(self):
        state = parity_state(balance_x=10_000, balance_y=10_000)
        with pytest.raises(BelowMinimumShares):
            initial_supply(state, 20_000, MIN_TOTAL, 1000)
