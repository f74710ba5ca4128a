"""
Data models for UTXO selection and withdrawal planning.

Monetary values are always Python ints (arbitrary precision). Floating point
never reaches the selector: raw balances are resolved into ints at the
RawUTXO boundary.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from utxoplan.constants import STANDARD_DUST_LIMIT
from utxoplan.errors import InvalidAmount

# (input_count, output_count) -> fee in the chain's smallest unit
FeeCalculator = Callable[[int, int], int]

# Largest integer a float (or a JS number) represents exactly
MAX_SAFE_FLOAT_INT = 2**53 - 1


class UtxoChain(str, Enum):
    BTC = "btc"
    ZCASH = "zcash"


class NetworkType(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"
    SIGNET = "signet"
    REGTEST = "regtest"


class AddressType(str, Enum):
    P2PKH = "p2pkh"
    P2SH = "p2sh"
    P2WPKH = "p2wpkh"
    P2WSH = "p2wsh"


class SortOrder(str, Enum):
    LARGEST_FIRST = "largest-first"
    SMALLEST_FIRST = "smallest-first"


def coerce_amount(value: Any) -> int:
    """
    Convert a duck-typed amount (int, decimal string, integral float or
    Decimal) into an int.

    Raises:
        ValueError: If the value is not an exact integer
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not a valid amount")
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise ValueError(f"amount must be an integer, got {value}")
        return int(value)
    if isinstance(value, float):
        if not value.is_integer() or abs(value) > MAX_SAFE_FLOAT_INT:
            raise ValueError(f"amount must be an exactly representable integer, got {value}")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text.startswith("-") else text
        if not digits or not digits.isascii() or not digits.isdigit():
            raise ValueError(f"amount must be a decimal integer string, got {value!r}")
        return int(text)
    raise ValueError(f"unsupported amount type: {type(value).__name__}")


def parse_amount(value: Any) -> int:
    """Like coerce_amount() but raises InvalidAmount."""
    try:
        return coerce_amount(value)
    except ValueError as e:
        raise InvalidAmount(str(e)) from e


class RawUTXO(BaseModel):
    """UTXO as reported by the custodian registry, before normalization."""

    txid: str = Field(..., pattern=r"^[0-9a-fA-F]{64}$")
    vout: int = Field(..., ge=0)
    balance: int = Field(..., ge=0)
    tx_bytes: bytes | None = None
    path: str | None = None

    @field_validator("balance", mode="before")
    @classmethod
    def validate_balance(cls, v: Any) -> int:
        return coerce_amount(v)

    @field_validator("tx_bytes", mode="before")
    @classmethod
    def validate_tx_bytes(cls, v: Any) -> bytes | None:
        if v is None or isinstance(v, bytes):
            return v
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        if isinstance(v, str):
            return bytes.fromhex(v)
        if isinstance(v, (list, tuple)):
            if not all(
                isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in v
            ):
                raise ValueError("tx_bytes must only contain integers in range 0..255")
            return bytes(v)
        raise ValueError(f"unsupported tx_bytes type: {type(v).__name__}")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class NormalizedUTXO:
    """Canonical UTXO used by the selector"""

    txid: str
    vout: int
    amount: int
    path: str | None = None
    raw_tx: bytes | None = None

    @property
    def outpoint(self) -> str:
        return f"{self.txid}:{self.vout}"


@dataclass(frozen=True)
class SelectionOptions:
    """
    Options for UTXO selection.

    Attributes:
        fee_calculator: (input_count, output_count) -> fee
        dust_threshold: Smallest output value considered economical
        min_change: Smallest change output worth creating (defaults to dust_threshold)
        max_inputs: Hard cap on the number of selected inputs
        sort: Candidate ordering; None keeps the order supplied by the caller
    """

    fee_calculator: FeeCalculator
    dust_threshold: int = STANDARD_DUST_LIMIT
    min_change: int | None = None
    max_inputs: int | None = None
    sort: SortOrder | None = None

    def __post_init__(self) -> None:
        if self.dust_threshold < 0:
            raise ValueError(f"dust_threshold must be non-negative, got {self.dust_threshold}")
        if self.min_change is not None and self.min_change < 0:
            raise ValueError(f"min_change must be non-negative, got {self.min_change}")
        if self.max_inputs is not None and self.max_inputs < 1:
            raise ValueError(f"max_inputs must be at least 1, got {self.max_inputs}")
        if self.sort is not None and not isinstance(self.sort, SortOrder):
            object.__setattr__(self, "sort", SortOrder(self.sort))

    @property
    def change_floor(self) -> int:
        """Change below this value is absorbed into the fee."""
        min_change = self.dust_threshold if self.min_change is None else self.min_change
        return max(self.dust_threshold, min_change)


@dataclass(frozen=True)
class SelectionResult:
    """Result of UTXO selection"""

    inputs: list[NormalizedUTXO]
    total_input: int
    fee: int
    change: int
    outputs: int
    # Part of fee above the no-change policy fee (dust swept into the fee)
    absorbed: int = 0


class InputRef(BaseModel):
    txid: str
    vout: int = Field(..., ge=0)

    def __str__(self) -> str:
        return f"{self.txid}:{self.vout}"

    model_config = {"frozen": True}


class PlanOutput(BaseModel):
    value: int = Field(..., gt=0)
    script_pubkey: str

    model_config = {"frozen": True}


class WithdrawalPlan(BaseModel):
    """
    Unsigned withdrawal plan handed to the transaction assembler.

    Output order is fixed: destination first, change (if any) second.
    """

    inputs: list[InputRef] = Field(..., min_length=1)
    outputs: list[PlanOutput] = Field(..., min_length=1, max_length=2)
    fee: int = Field(..., ge=0)

    @property
    def total_output(self) -> int:
        return sum(out.value for out in self.outputs)

    @property
    def change(self) -> int:
        return self.outputs[1].value if len(self.outputs) > 1 else 0

    model_config = {"frozen": True}
