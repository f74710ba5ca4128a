"""
Tests for the address codec.
"""

from __future__ import annotations

import bech32
import pytest

from tests.conftest import PUBKEY_HASH, SCRIPT_HASH, WITNESS_PUBKEY_HASH, b58check
from utxoplan.address import (
    address_to_script,
    decode_address,
    p2pkh_script,
    p2sh_script,
    witness_script,
)
from utxoplan.errors import InvalidAddress
from utxoplan.models import AddressType, NetworkType, UtxoChain

P2WPKH_SCRIPT = "0014751e76e8199196d454941c45d1b3a323f1433bd6"
P2WSH_SCRIPT = "00201863143c14c5166804bd19203356da136c985678cd4d27a1b8c6329604903262"


class TestScriptTemplates:
    """Tests for standard script templates."""

    def test_p2pkh(self) -> None:
        script = p2pkh_script(PUBKEY_HASH)
        assert script.hex() == "76a914" + PUBKEY_HASH.hex() + "88ac"
        assert len(script) == 25

    def test_p2sh(self) -> None:
        script = p2sh_script(SCRIPT_HASH)
        assert script.hex() == "a914" + SCRIPT_HASH.hex() + "87"
        assert len(script) == 23

    def test_witness_v0(self) -> None:
        assert witness_script(0, WITNESS_PUBKEY_HASH).hex() == P2WPKH_SCRIPT

    def test_witness_v1_opcode(self) -> None:
        assert witness_script(1, bytes(32))[0] == 0x51

    def test_wrong_hash_length(self) -> None:
        with pytest.raises(ValueError):
            p2pkh_script(bytes(19))
        with pytest.raises(ValueError):
            p2sh_script(bytes(21))


class TestBitcoinSegwit:
    """Tests for bech32 witness program addresses."""

    def test_p2wpkh_mainnet(self) -> None:
        """BIP-0173 test vector"""
        address = "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"
        assert address_to_script(address) == P2WPKH_SCRIPT

        info = decode_address(address)
        assert info.address_type == AddressType.P2WPKH
        assert info.network == NetworkType.MAINNET
        assert info.witness_version == 0

    def test_p2wpkh_uppercase(self) -> None:
        address = "BC1QW508D6QEJXTDG4Y5R3ZARVARY0C5XW7KV8F3T4"
        assert address_to_script(address) == P2WPKH_SCRIPT

    def test_p2wpkh_testnet(self, testnet_p2wpkh: str) -> None:
        assert address_to_script(testnet_p2wpkh) == P2WPKH_SCRIPT
        assert decode_address(testnet_p2wpkh).network == NetworkType.TESTNET

    def test_p2wpkh_regtest(self) -> None:
        address = bech32.encode("bcrt", 0, WITNESS_PUBKEY_HASH)
        assert address is not None
        assert address_to_script(address) == P2WPKH_SCRIPT
        assert decode_address(address).network == NetworkType.REGTEST

    def test_p2wsh_testnet(self) -> None:
        """BIP-0173 test vector"""
        address = "tb1qrp33g0q5c5txsp9arysrx4k6zdkfs4nce4xj0gdcccefvpysxf3q0sl5k7"
        assert address_to_script(address) == P2WSH_SCRIPT
        assert decode_address(address).address_type == AddressType.P2WSH

    def test_bad_checksum(self) -> None:
        with pytest.raises(InvalidAddress, match="bech32"):
            address_to_script("bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t5")

    def test_mixed_case(self) -> None:
        with pytest.raises(InvalidAddress):
            address_to_script("bc1qW508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4")

    def test_wrong_hrp_for_checksum(self) -> None:
        """Checksum covers the HRP: swapping bc for tb breaks it"""
        with pytest.raises(InvalidAddress):
            address_to_script("tb1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4")

    def test_unsupported_witness_version(self) -> None:
        address = bech32.encode("bc", 1, bytes(32))
        assert address is not None
        with pytest.raises(InvalidAddress, match="witness version"):
            address_to_script(address)


class TestBitcoinBase58:
    """Tests for legacy Base58Check addresses."""

    def test_p2pkh_genesis(self) -> None:
        """Genesis block coinbase address"""
        script = address_to_script("1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa")
        assert script == "76a91462e907b15cbf27d5425399ebf6f0fb50ebb88f1888ac"

    def test_p2pkh_mainnet(self, mainnet_p2pkh: str) -> None:
        assert mainnet_p2pkh.startswith("1")
        assert address_to_script(mainnet_p2pkh) == "76a914" + PUBKEY_HASH.hex() + "88ac"

        info = decode_address(mainnet_p2pkh)
        assert info.address_type == AddressType.P2PKH
        assert info.network == NetworkType.MAINNET
        assert info.witness_version is None

    def test_p2sh_mainnet(self, mainnet_p2sh: str) -> None:
        assert address_to_script(mainnet_p2sh) == "a914" + SCRIPT_HASH.hex() + "87"
        assert decode_address(mainnet_p2sh).address_type == AddressType.P2SH

    def test_p2sh_structure(self) -> None:
        script = bytes.fromhex(address_to_script("3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy"))
        assert script[0] == 0xA9  # OP_HASH160
        assert script[1] == 0x14  # 20 bytes
        assert script[-1] == 0x87  # OP_EQUAL
        assert len(script) == 23

    def test_testnet_versions(self) -> None:
        p2pkh = b58check(b"\x6f", PUBKEY_HASH)
        p2sh = b58check(b"\xc4", SCRIPT_HASH)
        assert decode_address(p2pkh).network == NetworkType.TESTNET
        assert decode_address(p2sh).address_type == AddressType.P2SH

    def test_bad_checksum(self) -> None:
        with pytest.raises(InvalidAddress, match="base58check"):
            address_to_script("1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNb")

    def test_invalid_character(self) -> None:
        with pytest.raises(InvalidAddress):
            address_to_script("1A1zP1eP5QGefi2DMPTfTL5SLmv7Divf0a")

    def test_unknown_version(self) -> None:
        with pytest.raises(InvalidAddress, match="version"):
            address_to_script(b58check(b"\x30", PUBKEY_HASH))

    def test_wrong_length(self) -> None:
        with pytest.raises(InvalidAddress, match="length"):
            address_to_script(b58check(b"\x00", bytes(19)))

    def test_garbage(self) -> None:
        with pytest.raises(InvalidAddress):
            address_to_script("invalid_address")

    def test_empty(self) -> None:
        with pytest.raises(InvalidAddress):
            address_to_script("")


class TestZcash:
    """Tests for Zcash transparent addresses."""

    @pytest.mark.parametrize(
        ("prefix", "leading", "address_type", "network"),
        [
            (bytes([0x1C, 0xB8]), "t1", AddressType.P2PKH, NetworkType.MAINNET),
            (bytes([0x1C, 0xBD]), "t3", AddressType.P2SH, NetworkType.MAINNET),
            (bytes([0x1D, 0x25]), "tm", AddressType.P2PKH, NetworkType.TESTNET),
            (bytes([0x1C, 0xBA]), "t2", AddressType.P2SH, NetworkType.TESTNET),
        ],
    )
    def test_prefix_table(
        self, prefix: bytes, leading: str, address_type: AddressType, network: NetworkType
    ) -> None:
        address = b58check(prefix, PUBKEY_HASH)
        assert address.startswith(leading)

        info = decode_address(address, chain=UtxoChain.ZCASH)
        assert info.chain == UtxoChain.ZCASH
        assert info.address_type == address_type
        assert info.network == network
        assert info.program == PUBKEY_HASH

    def test_p2pkh_script(self, zcash_testnet_p2pkh: str) -> None:
        script = address_to_script(zcash_testnet_p2pkh, chain=UtxoChain.ZCASH)
        assert script == "76a914" + PUBKEY_HASH.hex() + "88ac"

    def test_p2sh_script(self, zcash_testnet_p2sh: str) -> None:
        script = address_to_script(zcash_testnet_p2sh, chain=UtxoChain.ZCASH)
        assert script == "a914" + SCRIPT_HASH.hex() + "87"

    def test_unknown_prefix(self) -> None:
        with pytest.raises(InvalidAddress, match="prefix"):
            address_to_script(b58check(bytes([0x1C, 0xB9]), PUBKEY_HASH), chain=UtxoChain.ZCASH)

    def test_bitcoin_address_rejected(self, mainnet_p2pkh: str) -> None:
        """21-byte Bitcoin payload is the wrong length for Zcash"""
        with pytest.raises(InvalidAddress, match="length"):
            address_to_script(mainnet_p2pkh, chain=UtxoChain.ZCASH)

    def test_zcash_address_rejected_as_bitcoin(self, zcash_testnet_p2pkh: str) -> None:
        with pytest.raises(InvalidAddress):
            address_to_script(zcash_testnet_p2pkh, chain=UtxoChain.BTC)

    def test_garbage(self) -> None:
        with pytest.raises(InvalidAddress):
            address_to_script("invalid_address", chain=UtxoChain.ZCASH)


class TestNetworkCheck:
    """Tests for network enforcement."""

    def test_matching_network(self, testnet_p2wpkh: str) -> None:
        assert address_to_script(testnet_p2wpkh, network=NetworkType.TESTNET) == P2WPKH_SCRIPT

    def test_signet_shares_testnet_prefix(self, testnet_p2wpkh: str) -> None:
        assert address_to_script(testnet_p2wpkh, network=NetworkType.SIGNET) == P2WPKH_SCRIPT

    def test_mainnet_address_on_testnet(self, mainnet_p2pkh: str) -> None:
        with pytest.raises(InvalidAddress, match="expected testnet"):
            address_to_script(mainnet_p2pkh, network=NetworkType.TESTNET)

    def test_testnet_address_on_mainnet(self, testnet_p2wpkh: str) -> None:
        with pytest.raises(InvalidAddress, match="expected mainnet"):
            address_to_script(testnet_p2wpkh, network=NetworkType.MAINNET)

    def test_regtest_uses_testnet_base58(self) -> None:
        address = b58check(b"\x6f", PUBKEY_HASH)
        assert address_to_script(address, network=NetworkType.REGTEST).startswith("76a914")

    def test_tb1_not_valid_on_regtest(self, testnet_p2wpkh: str) -> None:
        with pytest.raises(InvalidAddress):
            address_to_script(testnet_p2wpkh, network=NetworkType.REGTEST)

    def test_zcash_network(self, zcash_testnet_p2pkh: str) -> None:
        with pytest.raises(InvalidAddress):
            address_to_script(
                zcash_testnet_p2pkh, chain=UtxoChain.ZCASH, network=NetworkType.MAINNET
            )
