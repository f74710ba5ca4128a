"""
Bitcoin and Zcash fee and dust constants.

Dust thresholds follow the relay policies of each chain:
- STANDARD_DUST_LIMIT: the P2PKH dust limit in Bitcoin Core (546 sats)
- ZCASH_DUST_THRESHOLD: one ZIP-317 marginal fee (5000 zatoshis)
"""

from __future__ import annotations

# Bitcoin network dust limits
# Standard P2PKH dust limit in Bitcoin Core
STANDARD_DUST_LIMIT = 546  # satoshis

# Smallest change output worth creating on Bitcoin withdrawals.
# Anything below this is swept into the fee instead.
DEFAULT_MIN_CHANGE = 1000  # satoshis

# Linear (byte-proportional) fee model coefficients, in vbytes.
# P2WPKH inputs are ~68 vbytes, P2WPKH outputs 31 vbytes, ~10 vbytes overhead.
DEFAULT_TX_OVERHEAD_VBYTES = 10
DEFAULT_INPUT_VBYTES = 68
DEFAULT_OUTPUT_VBYTES = 31
DEFAULT_FEE_RATE = 1  # sat/vbyte

# Rate for withdrawals planned from the bridge connector configuration
CONNECTOR_FEE_RATE = 2  # sat/vbyte

# ZIP-317 proportional transfer fee mechanism
# https://zips.z.cash/zip-0317
ZIP317_MARGINAL_FEE = 5000  # zatoshis per logical action
ZIP317_GRACE_ACTIONS = 2

# Zcash dust threshold: higher than Bitcoin's because every action costs
# a full marginal fee under ZIP-317
ZCASH_DUST_THRESHOLD = ZIP317_MARGINAL_FEE  # 5000 zatoshis
