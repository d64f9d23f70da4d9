"""Fee configuration and swap fee splitting.

Fees are basis points. Swap fees are cut from the gross output, in the
output asset, using that asset's protocol and provider rates. Each cut is
rounded up so rounding never favours the trader.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from stablepool.errors import InvalidFee
from stablepool.math.fixed_point import BPS, bps_of_up
from stablepool.types import Asset


def validate_fee(fee: int, name: str = "fee") -> None:
    """Check a single basis-point rate.

    Raises:
        InvalidFee: If fee is not in range [0, 10000)
    """
    if not 0 <= fee < BPS:
        raise InvalidFee(f"{name} must be in range [0, {BPS}), got {fee}")


def validate_fee_pair(protocol_fee: int, provider_fee: int) -> None:
    """Check protocol and provider rates for one asset.

    Raises:
        InvalidFee: If either rate is out of range, or together they
            would consume the whole output
    """
    validate_fee(protocol_fee, "protocol fee")
    validate_fee(provider_fee, "provider fee")
    if protocol_fee + provider_fee >= BPS:
        raise InvalidFee(
            f"Protocol + provider fee must be below {BPS}, got {protocol_fee + provider_fee}"
        )


@dataclass(frozen=True)
class FeeConfig:
    """Swap and liquidity fee rates, in basis points.

    Attributes:
        protocol_fee_x: Protocol cut of X outputs (Y -> X swaps)
        provider_fee_x: Provider cut of X outputs, retained by the pool
        protocol_fee_y: Protocol cut of Y outputs (X -> Y swaps)
        provider_fee_y: Provider cut of Y outputs, retained by the pool
        liquidity_fee: Imbalance fee on liquidity deposits
    """

    protocol_fee_x: int = 30
    provider_fee_x: int = 30
    protocol_fee_y: int = 30
    provider_fee_y: int = 30
    liquidity_fee: int = 40

    def __post_init__(self) -> None:
        validate_fee_pair(self.protocol_fee_x, self.provider_fee_x)
        validate_fee_pair(self.protocol_fee_y, self.provider_fee_y)
        validate_fee(self.liquidity_fee, "liquidity fee")

    def rates_for(self, asset: Asset) -> tuple[int, int]:
        """(protocol, provider) rates charged on outputs of asset."""
        if asset is Asset.X:
            return self.protocol_fee_x, self.provider_fee_x
        return self.protocol_fee_y, self.provider_fee_y

    def with_x_fees(self, protocol_fee: int, provider_fee: int) -> FeeConfig:
        return replace(self, protocol_fee_x=protocol_fee, provider_fee_x=provider_fee)

    def with_y_fees(self, protocol_fee: int, provider_fee: int) -> FeeConfig:
        return replace(self, protocol_fee_y=protocol_fee, provider_fee_y=provider_fee)

    def with_liquidity_fee(self, liquidity_fee: int) -> FeeConfig:
        return replace(self, liquidity_fee=liquidity_fee)


@dataclass(frozen=True)
class FeeSplit:
    """A gross swap output divided into trader, protocol and provider parts."""

    gross: int
    protocol_fee: int
    provider_fee: int

    @property
    def net(self) -> int:
        return self.gross - self.protocol_fee - self.provider_fee


def split_swap_fees(gross: int, protocol_fee: int, provider_fee: int) -> FeeSplit:
    """Cut protocol and provider fees from a gross output.

    Both cuts round up. If rounding up would push the combined fee past the
    gross amount (dust trades), the fees are capped so net is never negative.
    """
    protocol_amount = bps_of_up(gross, protocol_fee)
    provider_amount = bps_of_up(gross, provider_fee)
    if protocol_amount + provider_amount > gross:
        protocol_amount = min(protocol_amount, gross)
        provider_amount = gross - protocol_amount
    return FeeSplit(gross=gross, protocol_fee=protocol_amount, provider_fee=provider_amount)


@dataclass(frozen=True)
class FeeTotals:
    """Fees accumulated by a pool since creation, per asset."""

    protocol_x: int = 0
    provider_x: int = 0
    protocol_y: int = 0
    provider_y: int = 0
    liquidity_x: int = 0
    liquidity_y: int = 0

    def add_swap(self, asset: Asset, split: FeeSplit) -> FeeTotals:
        if asset is Asset.X:
            return replace(
                self,
                protocol_x=self.protocol_x + split.protocol_fee,
                provider_x=self.provider_x + split.provider_fee,
            )
        return replace(
            self,
            protocol_y=self.protocol_y + split.protocol_fee,
            provider_y=self.provider_y + split.provider_fee,
        )

    def add_liquidity(self, fee_x: int, fee_y: int) -> FeeTotals:
        return replace(
            self,
            liquidity_x=self.liquidity_x + fee_x,
            liquidity_y=self.liquidity_y + fee_y,
        )
