"""
utxoplan - UTXO coin selection and withdrawal planning for bridge chains

Turns a custodian's UTXO set and an already-decided withdrawal amount into a
fee-correct, change-correct unsigned transaction plan for Bitcoin and Zcash.
"""

__version__ = "0.1.0"

from utxoplan.address import AddressInfo, address_to_script, decode_address
from utxoplan.config import ConnectorConfig, PlanOverrides, Settings, get_settings
from utxoplan.constants import (
    DEFAULT_MIN_CHANGE,
    STANDARD_DUST_LIMIT,
    ZCASH_DUST_THRESHOLD,
    ZIP317_GRACE_ACTIONS,
    ZIP317_MARGINAL_FEE,
)
from utxoplan.errors import (
    ConfigurationError,
    InputLimitExceeded,
    InsufficientFunds,
    InvalidAddress,
    InvalidAmount,
    InvalidUtxo,
    NoUtxosAvailable,
    PlanningError,
)
from utxoplan.fees import (
    LinearFeeParameters,
    calculate_linear_fee,
    calculate_zcash_fee,
    linear_fee_calculator,
    zcash_fee_calculator,
)
from utxoplan.models import (
    AddressType,
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
)
from utxoplan.normalize import normalize_utxo, normalize_utxos
from utxoplan.planner import WithdrawalPlanner, build_withdrawal_plan
from utxoplan.selection import select_utxos
from utxoplan.verification import verify_withdrawal_plan

__all__ = [
    "AddressInfo",
    "AddressType",
    "ConfigurationError",
    "ConnectorConfig",
    "DEFAULT_MIN_CHANGE",
    "FeeCalculator",
    "InputLimitExceeded",
    "InputRef",
    "InsufficientFunds",
    "InvalidAddress",
    "InvalidAmount",
    "InvalidUtxo",
    "LinearFeeParameters",
    "NetworkType",
    "NoUtxosAvailable",
    "NormalizedUTXO",
    "PlanOutput",
    "PlanOverrides",
    "PlanningError",
    "RawUTXO",
    "STANDARD_DUST_LIMIT",
    "SelectionOptions",
    "SelectionResult",
    "Settings",
    "SortOrder",
    "UtxoChain",
    "WithdrawalPlan",
    "WithdrawalPlanner",
    "ZCASH_DUST_THRESHOLD",
    "ZIP317_GRACE_ACTIONS",
    "ZIP317_MARGINAL_FEE",
    "address_to_script",
    "build_withdrawal_plan",
    "calculate_linear_fee",
    "calculate_zcash_fee",
    "decode_address",
    "get_settings",
    "linear_fee_calculator",
    "normalize_utxo",
    "normalize_utxos",
    "select_utxos",
    "verify_withdrawal_plan",
    "zcash_fee_calculator",
]
