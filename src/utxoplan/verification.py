"""
Withdrawal plan verification.

Run before a plan is handed to the signer. A plan that passes guarantees:
1. Every input is a known, distinct UTXO of the custodian
2. Output 0 pays exactly the withdrawal amount to the destination script
3. Output 1, if present, pays the change script at least the change floor
4. Inputs = outputs + fee, to the smallest unit
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from utxoplan.address import address_to_script
from utxoplan.errors import PlanningError
from utxoplan.models import NetworkType, NormalizedUTXO, UtxoChain, WithdrawalPlan


def verify_withdrawal_plan(
    plan: WithdrawalPlan,
    utxos: Iterable[NormalizedUTXO],
    amount: int,
    destination_address: str,
    change_address: str,
    chain: UtxoChain = UtxoChain.BTC,
    network: NetworkType | None = None,
    change_floor: int = 0,
) -> tuple[bool, str]:
    """
    Verify a withdrawal plan against the UTXO set it was built from.

    Args:
        plan: Plan to verify
        utxos: Custodian UTXOs the plan may spend
        amount: Withdrawal amount
        destination_address: Withdrawal recipient
        change_address: Bridge change address
        chain: Chain of both addresses
        network: Network of both addresses
        change_floor: Minimum acceptable change output value

    Returns:
        (is_valid, error_message)
    """
    known = {(utxo.txid, utxo.vout): utxo for utxo in utxos}

    spent: set[tuple[str, int]] = set()
    total_in = 0
    for inp in plan.inputs:
        key = (inp.txid, inp.vout)
        if key not in known:
            return False, f"Unknown input {inp}"
        if key in spent:
            return False, f"Input {inp} spent twice"
        spent.add(key)
        total_in += known[key].amount

    try:
        destination_script = address_to_script(destination_address, chain=chain, network=network)
        change_script = address_to_script(change_address, chain=chain, network=network)
    except PlanningError as e:
        return False, f"Cannot encode addresses: {e}"

    destination = plan.outputs[0]
    if destination.script_pubkey != destination_script:
        return False, "Output 0 does not pay the destination address"
    if destination.value != amount:
        return False, f"Destination value {destination.value} != withdrawal amount {amount}"

    if len(plan.outputs) == 2:
        change = plan.outputs[1]
        if change.script_pubkey != change_script:
            return False, "Output 1 does not pay the change address"
        if change.value < change_floor:
            return False, f"Change output {change.value} below floor {change_floor}"

    if total_in != plan.total_output + plan.fee:
        return (
            False,
            f"Value not conserved: inputs {total_in} != outputs {plan.total_output} "
            f"+ fee {plan.fee}",
        )

    logger.debug(f"Withdrawal plan verified: {len(plan.inputs)} inputs, fee {plan.fee}")
    return True, ""
