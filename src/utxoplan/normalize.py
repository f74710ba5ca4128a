"""
UTXO normalization.

Raw UTXOs arrive with duck-typed shapes: balances as ints, decimal strings
or floats, raw transaction bytes as bytes or lists of ints. This module is
the single boundary where they become NormalizedUTXO instances with int
amounts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from utxoplan.errors import InvalidUtxo
from utxoplan.models import NormalizedUTXO, RawUTXO


def normalize_utxo(raw: RawUTXO | Mapping[str, Any]) -> NormalizedUTXO:
    """
    Normalize a single UTXO.

    Args:
        raw: RawUTXO or a mapping with txid, vout, balance and optionally
             tx_bytes and path

    Raises:
        InvalidUtxo: If the UTXO cannot be validated
    """
    if not isinstance(raw, RawUTXO):
        try:
            raw = RawUTXO.model_validate(raw)
        except ValidationError as e:
            raise InvalidUtxo(f"Invalid UTXO {_describe(raw)}: {e}") from e

    return NormalizedUTXO(
        txid=raw.txid,
        vout=raw.vout,
        amount=raw.balance,
        path=raw.path,
        raw_tx=raw.tx_bytes,
    )


def normalize_utxos(raw_utxos: Iterable[RawUTXO | Mapping[str, Any]]) -> list[NormalizedUTXO]:
    """
    Normalize a UTXO set, preserving order.

    Raises:
        InvalidUtxo: If any UTXO is malformed or an outpoint appears twice
    """
    normalized: list[NormalizedUTXO] = []
    seen: set[tuple[str, int]] = set()

    for raw in raw_utxos:
        utxo = normalize_utxo(raw)
        key = (utxo.txid.lower(), utxo.vout)
        if key in seen:
            raise InvalidUtxo(f"Duplicate UTXO {utxo.outpoint}")
        seen.add(key)
        normalized.append(utxo)

    logger.debug(
        f"Normalized {len(normalized)} UTXOs, total {sum(u.amount for u in normalized)}"
    )
    return normalized


def _describe(raw: Any) -> str:
    if isinstance(raw, Mapping):
        return f"{raw.get('txid', '?')}:{raw.get('vout', '?')}"
    return repr(raw)
