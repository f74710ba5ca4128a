"""
Withdrawal plan builder.

Builds an unsigned withdrawal plan from:
- The custodian's raw UTXO snapshot
- The withdrawal amount and destination address
- The bridge change address and fee policy

Flow: normalize -> select -> encode destination and change scripts.
Output order is fixed: destination first, change (if any) second.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from loguru import logger

from utxoplan.address import address_to_script
from utxoplan.config import PlanOverrides
from utxoplan.constants import (
    DEFAULT_FEE_RATE,
    DEFAULT_MIN_CHANGE,
    STANDARD_DUST_LIMIT,
    ZCASH_DUST_THRESHOLD,
)
from utxoplan.errors import InvalidAmount, NoUtxosAvailable
from utxoplan.fees import LinearFeeParameters, linear_fee_calculator, zcash_fee_calculator
from utxoplan.models import (
    FeeCalculator,
    InputRef,
    NetworkType,
    NormalizedUTXO,
    PlanOutput,
    RawUTXO,
    SelectionOptions,
    SelectionResult,
    SortOrder,
    UtxoChain,
    WithdrawalPlan,
    parse_amount,
)
from utxoplan.normalize import normalize_utxos
from utxoplan.selection import select_utxos

# sat/vbyte; accepted as anything Decimal can parse exactly
FeeRate = Decimal | int | float | str | None

CHAIN_LABELS = {
    UtxoChain.BTC: "Bitcoin",
    UtxoChain.ZCASH: "Zcash",
}


def create_output(
    address: str,
    value: int,
    chain: UtxoChain = UtxoChain.BTC,
    network: NetworkType | None = None,
) -> PlanOutput:
    """Create a plan output paying value to address."""
    if value <= 0:
        raise InvalidAmount(f"Output value must be positive, got {value}")
    return PlanOutput(
        value=value,
        script_pubkey=address_to_script(address, chain=chain, network=network),
    )


def build_outputs(
    selection: SelectionResult,
    amount: int,
    destination_address: str,
    change_address: str,
    chain: UtxoChain = UtxoChain.BTC,
    network: NetworkType | None = None,
) -> list[PlanOutput]:
    outputs = [create_output(destination_address, amount, chain, network)]

    if selection.change > 0:
        outputs.append(create_output(change_address, selection.change, chain, network))

    return outputs


def build_withdrawal_plan(
    raw_utxos: Iterable[RawUTXO | Mapping[str, Any]],
    amount: int | str,
    destination_address: str,
    change_address: str,
    options: SelectionOptions,
    chain: UtxoChain = UtxoChain.BTC,
    network: NetworkType | None = None,
) -> WithdrawalPlan:
    """
    Build a complete withdrawal plan.

    Args:
        raw_utxos: Candidate UTXOs as reported by the custodian
        amount: Amount to pay to destination_address (smallest unit)
        destination_address: Withdrawal recipient
        change_address: Bridge-controlled change address
        options: Fee policy and selection options
        chain: Chain the addresses belong to
        network: If given, both addresses must be valid on this network

    Returns:
        WithdrawalPlan with inputs in selection order

    Raises:
        NoUtxosAvailable: If raw_utxos is empty
        PlanningError: Any selection, normalization or address failure
    """
    candidates = list(raw_utxos)
    if not candidates:
        raise NoUtxosAvailable(f"{CHAIN_LABELS[chain]}: No UTXOs available for transaction")

    target = parse_amount(amount)
    normalized = normalize_utxos(candidates)
    selection = select_utxos(normalized, target, options)

    outputs = build_outputs(selection, target, destination_address, change_address, chain, network)

    plan = WithdrawalPlan(
        inputs=[InputRef(txid=utxo.txid, vout=utxo.vout) for utxo in selection.inputs],
        outputs=outputs,
        fee=selection.fee,
    )

    logger.info(
        f"{CHAIN_LABELS[chain]} withdrawal plan: {len(plan.inputs)} inputs "
        f"({selection.total_input}), amount={target}, fee={plan.fee}, change={selection.change}"
    )
    if selection.absorbed:
        logger.info(f"Absorbed {selection.absorbed} of sub-threshold change into the fee")

    return plan


class WithdrawalPlanner:
    """
    Builds withdrawal plans for one UTXO chain with its default fee policy.

    Bitcoin uses the linear byte-rate model (fee_rate in sat/vbyte),
    Zcash uses ZIP-317 and ignores fee_rate.
    """

    def __init__(self, chain: UtxoChain = UtxoChain.BTC, network: NetworkType | None = None):
        self.chain = UtxoChain(chain)
        self.network = NetworkType(network) if network is not None else None

    @property
    def label(self) -> str:
        return CHAIN_LABELS[self.chain]

    def fee_calculator(self, fee_rate: FeeRate = None) -> FeeCalculator:
        if self.chain == UtxoChain.ZCASH:
            if fee_rate is not None:
                logger.debug("Zcash fees follow ZIP-317, ignoring fee_rate")
            return zcash_fee_calculator()

        try:
            rate = Decimal(str(fee_rate)) if fee_rate is not None else Decimal(DEFAULT_FEE_RATE)
        except InvalidOperation as e:
            raise ValueError(f"Invalid fee rate: {fee_rate!r}") from e
        if not rate.is_finite() or rate <= 0:
            logger.debug(f"Non-positive fee rate {fee_rate}, using {DEFAULT_FEE_RATE}")
            rate = Decimal(DEFAULT_FEE_RATE)
        return linear_fee_calculator(LinearFeeParameters(rate=rate))

    def selection_options(
        self,
        fee_rate: FeeRate = None,
        overrides: PlanOverrides | None = None,
    ) -> SelectionOptions:
        """Chain defaults with overrides applied."""
        overrides = overrides or PlanOverrides()

        if self.chain == UtxoChain.ZCASH:
            default_dust, default_min_change = ZCASH_DUST_THRESHOLD, None
        else:
            default_dust, default_min_change = STANDARD_DUST_LIMIT, DEFAULT_MIN_CHANGE

        dust_threshold = (
            overrides.dust_threshold if overrides.dust_threshold is not None else default_dust
        )
        min_change = (
            overrides.min_change if overrides.min_change is not None else default_min_change
        )

        return SelectionOptions(
            fee_calculator=self.fee_calculator(fee_rate),
            dust_threshold=dust_threshold,
            min_change=min_change,
            max_inputs=overrides.max_inputs,
            sort=overrides.sort or SortOrder.LARGEST_FIRST,
        )

    def address_to_script(self, address: str) -> str:
        return address_to_script(address, chain=self.chain, network=self.network)

    def select_utxos(
        self,
        utxos: list[NormalizedUTXO],
        amount: int,
        options: SelectionOptions | None = None,
    ) -> SelectionResult:
        return select_utxos(utxos, amount, options or self.selection_options())

    def build_withdrawal_plan(
        self,
        utxos: Iterable[RawUTXO | Mapping[str, Any]],
        amount: int | str,
        destination_address: str,
        change_address: str,
        fee_rate: FeeRate = None,
        overrides: PlanOverrides | None = None,
    ) -> WithdrawalPlan:
        return build_withdrawal_plan(
            utxos,
            amount,
            destination_address,
            change_address,
            self.selection_options(fee_rate, overrides),
            chain=self.chain,
            network=self.network,
        )
