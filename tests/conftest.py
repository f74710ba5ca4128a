"""
Pytest configuration and fixtures for utxoplan tests.
"""

from __future__ import annotations

from collections.abc import Callable

import base58
import bech32
import pytest

from utxoplan.fees import LinearFeeParameters, linear_fee_calculator
from utxoplan.models import FeeCalculator, NormalizedUTXO

# BIP173 P2WPKH test vector program
WITNESS_PUBKEY_HASH = bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")
# BIP173 P2WSH test vector program
WITNESS_SCRIPT_HASH = bytes.fromhex(
    "1863143c14c5166804bd19203356da136c985678cd4d27a1b8c6329604903262"
)
PUBKEY_HASH = bytes(range(20))
SCRIPT_HASH = bytes(range(20, 40))


def b58check(version: bytes, payload: bytes) -> str:
    return base58.b58encode_check(version + payload).decode("ascii")


@pytest.fixture
def fee_calculator() -> FeeCalculator:
    """Linear fee model: base=10, input=68, output=31, rate=1"""
    return linear_fee_calculator(LinearFeeParameters(base=10, input=68, output=31, rate=1))


@pytest.fixture
def make_utxo() -> Callable[..., NormalizedUTXO]:
    def _make(fill: str, amount: int, vout: int = 0) -> NormalizedUTXO:
        return NormalizedUTXO(txid=fill * 64, vout=vout, amount=amount)

    return _make


@pytest.fixture
def testnet_p2wpkh() -> str:
    return "tb1qw508d6qejxtdg4y5r3zarvary0c5xw7kxpjzsx"


@pytest.fixture
def testnet_p2wsh() -> str:
    result = bech32.encode("tb", 0, WITNESS_SCRIPT_HASH)
    assert result is not None
    return result


@pytest.fixture
def mainnet_p2pkh() -> str:
    return b58check(b"\x00", PUBKEY_HASH)


@pytest.fixture
def mainnet_p2sh() -> str:
    return b58check(b"\x05", SCRIPT_HASH)


@pytest.fixture
def zcash_testnet_p2pkh() -> str:
    return b58check(bytes([0x1D, 0x25]), PUBKEY_HASH)


@pytest.fixture
def zcash_testnet_p2sh() -> str:
    return b58check(bytes([0x1C, 0xBA]), SCRIPT_HASH)
