"""Pydantic models for the HTTP surface.

Amounts travel as decimal strings so clients in any language can carry
full uint128 values without float loss.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from stablepool.liquidity import AddLiquidityQuote
from stablepool.pool import PoolSnapshot
from stablepool.safe_int import UINT128_MAX
from stablepool.swap import SwapQuote


def validate_uint128(value: Any) -> str:
    """Validate that a value is a valid uint128 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint128 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint128 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint128 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint128 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint128 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint128 cannot be negative: {value}")
    if int_value > UINT128_MAX:
        raise ValueError(f"Uint128 overflow: {value} > 2^128-1")

    return str(int_value)


# 128-bit unsigned integer as decimal string (validated)
Uint128 = Annotated[
    str,
    BeforeValidator(validate_uint128),
    Field(description="128-bit unsigned integer as decimal string"),
]


class SwapQuoteResponse(BaseModel):
    """Quote for an exact-input swap."""

    direction: str
    amount_in: Uint128 = Field(alias="amountIn")
    amount_out: Uint128 = Field(alias="amountOut")
    gross_out: Uint128 = Field(alias="grossOut")
    protocol_fee: Uint128 = Field(alias="protocolFee")
    provider_fee: Uint128 = Field(alias="providerFee")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: SwapQuote) -> SwapQuoteResponse:
        return cls(
            direction=quote.direction.value,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            gross_out=quote.gross_out,
            protocol_fee=quote.fees.protocol_fee,
            provider_fee=quote.fees.provider_fee,
        )


class LiquidityQuoteResponse(BaseModel):
    """Quote for a liquidity deposit."""

    amount_x: Uint128 = Field(alias="amountX")
    amount_y: Uint128 = Field(alias="amountY")
    lp_minted: Uint128 = Field(alias="lpMinted")
    fee_x: Uint128 = Field(alias="feeX")
    fee_y: Uint128 = Field(alias="feeY")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: AddLiquidityQuote) -> LiquidityQuoteResponse:
        return cls(
            amount_x=quote.amount_x,
            amount_y=quote.amount_y,
            lp_minted=quote.lp_minted,
            fee_x=quote.fee_x,
            fee_y=quote.fee_y,
        )


class MidpointModel(BaseModel):
    numerator: Uint128
    denominator: Uint128
    reversed: bool
    manager: str | None = None


class FeesModel(BaseModel):
    protocol_fee_x: int = Field(alias="protocolFeeX")
    provider_fee_x: int = Field(alias="providerFeeX")
    protocol_fee_y: int = Field(alias="protocolFeeY")
    provider_fee_y: int = Field(alias="providerFeeY")
    liquidity_fee: int = Field(alias="liquidityFee")

    model_config = {"populate_by_name": True}


class PoolResponse(BaseModel):
    """Snapshot of a pool's state and parameters."""

    name: str
    status: str
    balance_x: Uint128 = Field(alias="balanceX")
    balance_y: Uint128 = Field(alias="balanceY")
    total_shares: Uint128 = Field(alias="totalShares")
    burnt_shares: Uint128 = Field(alias="burntShares")
    invariant: Uint128
    amplification_coefficient: int = Field(alias="amplificationCoefficient")
    convergence_threshold: int = Field(alias="convergenceThreshold")
    midpoint: MidpointModel
    fees: FeesModel
    fee_address: str = Field(alias="feeAddress")
    uri: str
    imbalanced_withdraws: bool = Field(alias="imbalancedWithdraws")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot) -> PoolResponse:
        fees = snapshot.fees
        return cls(
            name=snapshot.name,
            status=snapshot.status.value,
            balance_x=snapshot.reserves.balance_x,
            balance_y=snapshot.reserves.balance_y,
            total_shares=snapshot.lp_supply.total_shares,
            burnt_shares=snapshot.lp_supply.burnt_shares,
            invariant=snapshot.invariant,
            amplification_coefficient=snapshot.amplification.coefficient,
            convergence_threshold=snapshot.amplification.convergence_threshold,
            midpoint=MidpointModel(
                numerator=snapshot.midpoint.numerator,
                denominator=snapshot.midpoint.denominator,
                reversed=snapshot.midpoint.reversed,
                manager=snapshot.midpoint_manager,
            ),
            fees=FeesModel(
                protocol_fee_x=fees.protocol_fee_x,
                provider_fee_x=fees.provider_fee_x,
                protocol_fee_y=fees.protocol_fee_y,
                provider_fee_y=fees.provider_fee_y,
                liquidity_fee=fees.liquidity_fee,
            ),
            fee_address=snapshot.fee_address,
            imbalanced_withdraws=snapshot.imbalanced_withdraws,
            uri=snapshot.uri,
        )


class ErrorResponse(BaseModel):
    error: str
    detail: str
