"""
Fee policies for UTXO chains.

A fee policy is a plain callable ``(input_count, output_count) -> fee``.
Two are shipped:

- Linear (byte-proportional) model for Bitcoin-style fee markets
- ZIP-317 marginal-action model for transparent Zcash transactions

Any other callable with the same contract (deterministic, non-negative,
non-decreasing in both arguments) can be passed to the selector.
"""

from __future__ import annotations

import math
from decimal import Decimal

from pydantic import BaseModel, Field

from utxoplan.constants import (
    DEFAULT_FEE_RATE,
    DEFAULT_INPUT_VBYTES,
    DEFAULT_OUTPUT_VBYTES,
    DEFAULT_TX_OVERHEAD_VBYTES,
    ZIP317_GRACE_ACTIONS,
    ZIP317_MARGINAL_FEE,
)
from utxoplan.models import FeeCalculator


class LinearFeeParameters(BaseModel):
    """Coefficients of the linear fee model (sizes in vbytes, rate in sat/vbyte)."""

    base: int = Field(default=DEFAULT_TX_OVERHEAD_VBYTES, ge=0)
    input: int = Field(default=DEFAULT_INPUT_VBYTES, ge=0)
    output: int = Field(default=DEFAULT_OUTPUT_VBYTES, ge=0)
    rate: Decimal = Field(default=Decimal(DEFAULT_FEE_RATE), ge=0, allow_inf_nan=False)

    model_config = {"frozen": True}


def _check_counts(input_count: int, output_count: int) -> None:
    if input_count < 0 or output_count < 0:
        raise ValueError(
            f"Input and output counts must be non-negative: {input_count}, {output_count}"
        )


def calculate_linear_fee(params: LinearFeeParameters, input_count: int, output_count: int) -> int:
    """
    fee = ceil(rate * (base + inputs * input + outputs * output))

    Decimal arithmetic keeps fractional rates exact before rounding up.
    """
    _check_counts(input_count, output_count)
    vbytes = params.base + input_count * params.input + output_count * params.output
    return math.ceil(params.rate * vbytes)


def linear_fee_calculator(params: LinearFeeParameters | None = None) -> FeeCalculator:
    """Create a linear fee calculator based on transaction size."""
    if params is None:
        params = LinearFeeParameters()

    def calculator(input_count: int, output_count: int) -> int:
        return calculate_linear_fee(params, input_count, output_count)

    return calculator


def calculate_zcash_fee(
    inputs: int,
    outputs: int,
    marginal_fee: int = ZIP317_MARGINAL_FEE,
    grace_actions: int = ZIP317_GRACE_ACTIONS,
) -> int:
    """
    ZIP-317 conventional fee for a transparent-only Zcash transaction.

    Logical actions are max(inputs, outputs), not their sum. The first
    grace_actions are charged even when fewer actions are used.

    See: https://zips.z.cash/zip-0317

    Args:
        inputs: Number of transparent inputs
        outputs: Number of transparent outputs
        marginal_fee: Zatoshis per logical action
        grace_actions: Minimum number of actions charged

    Returns:
        Fee in zatoshis
    """
    _check_counts(inputs, outputs)
    logical_actions = max(inputs, outputs)
    return marginal_fee * max(grace_actions, logical_actions)


def zcash_fee_calculator() -> FeeCalculator:
    """Fee calculator implementing ZIP-317 with the network's constants."""

    def calculator(input_count: int, output_count: int) -> int:
        return calculate_zcash_fee(input_count, output_count)

    return calculator
