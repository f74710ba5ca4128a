"""
Address codec: human-readable addresses to locking scripts (scriptPubKey).

Supports:
- Bitcoin native SegWit v0 (bc1q..., tb1q..., bcrt1q...): P2WPKH and P2WSH
- Bitcoin legacy Base58Check: P2PKH (1..., m..., n...) and P2SH (3..., 2...)
- Zcash transparent Base58Check: t1/t3 (mainnet), tm/t2 (testnet)

A wrong script byte sends custodial funds to an unspendable or foreign
output, so every decoding problem raises InvalidAddress instead of guessing.
"""

from __future__ import annotations

from dataclasses import dataclass

import base58
import bech32

from utxoplan.errors import InvalidAddress
from utxoplan.models import AddressType, NetworkType, UtxoChain

# Script opcodes
OP_0 = 0x00
OP_1 = 0x51
OP_DUP = 0x76
OP_HASH160 = 0xA9
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_CHECKSIG = 0xAC

HASH160_SIZE = 20
WITNESS_SCRIPT_HASH_SIZE = 32

BECH32_HRP_NETWORKS: dict[str, NetworkType] = {
    "bc": NetworkType.MAINNET,
    "tb": NetworkType.TESTNET,
    "bcrt": NetworkType.REGTEST,
}

# Base58Check version byte -> (type, network)
BITCOIN_BASE58_VERSIONS: dict[int, tuple[AddressType, NetworkType]] = {
    0x00: (AddressType.P2PKH, NetworkType.MAINNET),
    0x05: (AddressType.P2SH, NetworkType.MAINNET),
    0x6F: (AddressType.P2PKH, NetworkType.TESTNET),
    0xC4: (AddressType.P2SH, NetworkType.TESTNET),
}

# Zcash transparent addresses use a 2-byte version prefix
ZCASH_PREFIXES: dict[bytes, tuple[AddressType, NetworkType]] = {
    bytes([0x1C, 0xB8]): (AddressType.P2PKH, NetworkType.MAINNET),  # t1
    bytes([0x1C, 0xBD]): (AddressType.P2SH, NetworkType.MAINNET),  # t3
    bytes([0x1D, 0x25]): (AddressType.P2PKH, NetworkType.TESTNET),  # tm
    bytes([0x1C, 0xBA]): (AddressType.P2SH, NetworkType.TESTNET),  # t2
}
ZCASH_PAYLOAD_SIZE = 2 + HASH160_SIZE


@dataclass(frozen=True)
class AddressInfo:
    """Decoded address"""

    chain: UtxoChain
    address_type: AddressType
    network: NetworkType
    program: bytes  # 20-byte hash, or the witness program
    witness_version: int | None = None


def p2pkh_script(pubkey_hash: bytes) -> bytes:
    """P2PKH: OP_DUP OP_HASH160 <20-byte-pubkeyhash> OP_EQUALVERIFY OP_CHECKSIG"""
    if len(pubkey_hash) != HASH160_SIZE:
        raise ValueError(f"Invalid pubkey hash length: {len(pubkey_hash)}")
    return bytes([OP_DUP, OP_HASH160, HASH160_SIZE]) + pubkey_hash + bytes(
        [OP_EQUALVERIFY, OP_CHECKSIG]
    )


def p2sh_script(script_hash: bytes) -> bytes:
    """P2SH: OP_HASH160 <20-byte-scripthash> OP_EQUAL"""
    if len(script_hash) != HASH160_SIZE:
        raise ValueError(f"Invalid script hash length: {len(script_hash)}")
    return bytes([OP_HASH160, HASH160_SIZE]) + script_hash + bytes([OP_EQUAL])


def witness_script(version: int, program: bytes) -> bytes:
    """Witness program push: OP_n <program>"""
    if not 0 <= version <= 16:
        raise ValueError(f"Invalid witness version: {version}")
    if not 2 <= len(program) <= 40:
        raise ValueError(f"Invalid witness program length: {len(program)}")
    opcode = OP_0 if version == 0 else OP_1 + version - 1
    return bytes([opcode, len(program)]) + program


def script_from_info(info: AddressInfo) -> bytes:
    if info.witness_version is not None:
        return witness_script(info.witness_version, info.program)
    if info.address_type == AddressType.P2PKH:
        return p2pkh_script(info.program)
    if info.address_type == AddressType.P2SH:
        return p2sh_script(info.program)
    raise ValueError(f"Unsupported address type: {info.address_type}")


def _decode_segwit(address: str) -> AddressInfo:
    lowered = address.lower()
    hrp = lowered[: lowered.rfind("1")]
    network = BECH32_HRP_NETWORKS.get(hrp)
    if network is None:
        raise InvalidAddress(address, f"unknown bech32 prefix {hrp!r}")

    witver, witprog = bech32.decode(hrp, address)
    if witver is None or witprog is None:
        raise InvalidAddress(address, "invalid bech32 encoding or checksum")

    program = bytes(witprog)
    if witver != 0:
        raise InvalidAddress(address, f"unsupported witness version {witver}")

    if len(program) == HASH160_SIZE:
        address_type = AddressType.P2WPKH
    elif len(program) == WITNESS_SCRIPT_HASH_SIZE:
        address_type = AddressType.P2WSH
    else:
        raise InvalidAddress(address, f"invalid witness program length {len(program)}")

    return AddressInfo(
        chain=UtxoChain.BTC,
        address_type=address_type,
        network=network,
        program=program,
        witness_version=witver,
    )


def _b58decode_check(address: str) -> bytes:
    try:
        return base58.b58decode_check(address)
    except ValueError as e:
        raise InvalidAddress(address, f"invalid base58check encoding ({e})") from e


def decode_bitcoin_address(address: str) -> AddressInfo:
    """Decode a Bitcoin SegWit v0 or legacy Base58Check address."""
    if address.lower().startswith(("bc1", "tb1", "bcrt1")):
        return _decode_segwit(address)

    decoded = _b58decode_check(address)
    if len(decoded) != 1 + HASH160_SIZE:
        raise InvalidAddress(address, f"invalid payload length {len(decoded)}")

    version = decoded[0]
    entry = BITCOIN_BASE58_VERSIONS.get(version)
    if entry is None:
        raise InvalidAddress(address, f"unknown address version 0x{version:02x}")

    address_type, network = entry
    return AddressInfo(
        chain=UtxoChain.BTC,
        address_type=address_type,
        network=network,
        program=decoded[1:],
    )


def decode_zcash_address(address: str) -> AddressInfo:
    """Decode a Zcash transparent (t-) address."""
    decoded = _b58decode_check(address)
    if len(decoded) != ZCASH_PAYLOAD_SIZE:
        raise InvalidAddress(address, f"invalid Zcash address length {len(decoded)}")

    prefix, pubkey_hash = decoded[:2], decoded[2:]
    entry = ZCASH_PREFIXES.get(prefix)
    if entry is None:
        raise InvalidAddress(address, f"unknown Zcash address prefix {prefix.hex()}")

    address_type, network = entry
    return AddressInfo(
        chain=UtxoChain.ZCASH,
        address_type=address_type,
        network=network,
        program=pubkey_hash,
    )


def network_matches(info: AddressInfo, expected: NetworkType) -> bool:
    """
    Check whether a decoded address is usable on the expected network.

    tb1 and testnet Base58 versions are shared with signet, and regtest
    reuses the testnet Base58 versions (but has its own bech32 prefix).
    """
    if info.network == expected:
        return True
    if info.network != NetworkType.TESTNET:
        return False
    if expected == NetworkType.SIGNET:
        return True
    return expected == NetworkType.REGTEST and info.witness_version is None


def decode_address(
    address: str,
    chain: UtxoChain = UtxoChain.BTC,
    network: NetworkType | None = None,
) -> AddressInfo:
    """
    Decode an address for the given chain.

    Args:
        address: Human-readable address
        chain: Chain the address belongs to
        network: If given, the address must be valid on this network

    Raises:
        InvalidAddress: On any decoding failure or network mismatch
    """
    if not isinstance(address, str) or not address:
        raise InvalidAddress(str(address), "address must be a non-empty string")

    if chain == UtxoChain.ZCASH:
        info = decode_zcash_address(address)
    else:
        info = decode_bitcoin_address(address)

    if network is not None and not network_matches(info, network):
        raise InvalidAddress(
            address, f"address is for {info.network.value}, expected {network.value}"
        )
    return info


def address_to_script(
    address: str,
    chain: UtxoChain = UtxoChain.BTC,
    network: NetworkType | None = None,
) -> str:
    """
    Convert an address to its hex-encoded scriptPubKey.

    Zcash transparent addresses share Bitcoin's P2PKH/P2SH templates.
    """
    info = decode_address(address, chain=chain, network=network)
    return script_from_info(info).hex()
