"""
Greedy UTXO selection with fee-aware sufficiency and dust absorption.

Selection is deterministic and single pass: candidates are accumulated in
order until they cover the target plus the fee for the actual number of
inputs (assuming a change output). It does not search for a cheaper
combination.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from utxoplan.errors import (
    InputLimitExceeded,
    InsufficientFunds,
    InvalidAmount,
    NoUtxosAvailable,
)
from utxoplan.models import NormalizedUTXO, SelectionOptions, SelectionResult, SortOrder


def order_candidates(
    utxos: Sequence[NormalizedUTXO], sort: SortOrder | None
) -> list[NormalizedUTXO]:
    """Order candidates by amount; ties keep their supplied order."""
    if sort == SortOrder.LARGEST_FIRST:
        return sorted(utxos, key=lambda u: u.amount, reverse=True)
    if sort == SortOrder.SMALLEST_FIRST:
        return sorted(utxos, key=lambda u: u.amount)
    return list(utxos)


def resolve_change(
    inputs: list[NormalizedUTXO],
    total: int,
    target: int,
    options: SelectionOptions,
) -> SelectionResult | None:
    """
    Decide fee and change for a sufficient input set.

    Returns None if the inputs do not cover target + fee(n, 2).
    """
    input_count = len(inputs)
    with_change_fee = options.fee_calculator(input_count, 2)
    change = total - target - with_change_fee

    if change < 0:
        return None

    if change == 0 or change < options.change_floor:
        # Change output would be dust: drop it and sweep the remainder into the fee
        base_fee = options.fee_calculator(input_count, 1)
        fee = total - target
        logger.debug(
            f"Change {change} below floor {options.change_floor}, "
            f"absorbing {fee - base_fee} into fee"
        )
        return SelectionResult(
            inputs=list(inputs),
            total_input=total,
            fee=fee,
            change=0,
            outputs=1,
            absorbed=fee - base_fee,
        )

    return SelectionResult(
        inputs=list(inputs),
        total_input=total,
        fee=with_change_fee,
        change=change,
        outputs=2,
    )


def select_utxos(
    utxos: Sequence[NormalizedUTXO],
    target_amount: int,
    options: SelectionOptions,
) -> SelectionResult:
    """
    Select UTXOs covering target_amount plus fees.

    Args:
        utxos: Normalized candidate UTXOs
        target_amount: Amount to pay to the destination
        options: Fee policy, dust/change floors, input cap and ordering

    Returns:
        SelectionResult with total_input == target_amount + fee + change

    Raises:
        InvalidAmount: If target_amount is not positive
        NoUtxosAvailable: If there are no candidates
        InputLimitExceeded: If more than options.max_inputs inputs would be needed
        InsufficientFunds: If all candidates together are not enough
    """
    if isinstance(target_amount, bool) or not isinstance(target_amount, int):
        raise InvalidAmount(f"Selection amount must be an integer, got {target_amount!r}")
    if target_amount <= 0:
        raise InvalidAmount(f"Selection amount must be positive, got {target_amount}")
    if not utxos:
        raise NoUtxosAvailable("No UTXOs available")

    candidates = order_candidates(utxos, options.sort)

    selected: list[NormalizedUTXO] = []
    total = 0

    for utxo in candidates:
        if options.max_inputs is not None and len(selected) >= options.max_inputs:
            logger.debug(
                f"Need more than {options.max_inputs} inputs for {target_amount} "
                f"(have {total} in {len(selected)} inputs)"
            )
            raise InputLimitExceeded(options.max_inputs)

        selected.append(utxo)
        total += utxo.amount

        result = resolve_change(selected, total, target_amount, options)
        if result is not None:
            logger.debug(
                f"Selected {len(result.inputs)} inputs totalling "
                f"{result.total_input}: fee={result.fee}, change={result.change}"
            )
            return result

    required = target_amount + options.fee_calculator(len(selected), 2)
    raise InsufficientFunds(required=required, available=total)
