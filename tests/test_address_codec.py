from __future__ import annotations

import unittest

from chaingenesis.address import Address, AddressError, bech32_decode, bech32_encode, is_valid_address
from chaingenesis.units import RAU_PER_IOTX, iotx_to_rau, iotx_to_rau_str, parse_decimal


VECTOR_BECH32 = "abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw"
VECTOR_PAYLOAD = bytes.fromhex("00443214c74254b635cf84653a56d7c675be77df")
SYSTEM_STAKING_ADDR = "io1drde9f483guaetl3w3w6n6y7yv80f8fael7qme"


class Bech32CodecTest(unittest.TestCase):
    def test_decode_vector(self) -> None:
        hrp, payload = bech32_decode(VECTOR_BECH32)
        self.assertEqual(hrp, "abcdef")
        self.assertEqual(payload, VECTOR_PAYLOAD)

    def test_encode_vector(self) -> None:
        self.assertEqual(bech32_encode("abcdef", VECTOR_PAYLOAD), VECTOR_BECH32)

    def test_decode_accepts_upper_case(self) -> None:
        hrp, payload = bech32_decode(VECTOR_BECH32.upper())
        self.assertEqual(hrp, "abcdef")
        self.assertEqual(payload, VECTOR_PAYLOAD)

    def test_rejects_mixed_case(self) -> None:
        with self.assertRaisesRegex(AddressError, "mixes"):
            bech32_decode("abcdef1Qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw")

    def test_rejects_bad_checksum(self) -> None:
        with self.assertRaisesRegex(AddressError, "checksum"):
            bech32_decode(VECTOR_BECH32[:-1] + "q")

    def test_rejects_missing_separator(self) -> None:
        with self.assertRaises(AddressError):
            bech32_decode("qpzry9x8gf2tvdw0s3jn54khce6mua7l")

    def test_rejects_invalid_character(self) -> None:
        with self.assertRaisesRegex(AddressError, "non-bech32"):
            bech32_decode("abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxb")


class AddressTest(unittest.TestCase):
    def test_round_trip_through_string(self) -> None:
        addr = Address(bytes(range(20)))
        encoded = str(addr)
        self.assertTrue(encoded.startswith("io1"))
        self.assertEqual(len(encoded), 41)
        self.assertEqual(Address.from_string(encoded), addr)
        self.assertEqual(addr.hex(), bytes(range(20)).hex())

    def test_default_system_staking_address_is_well_formed(self) -> None:
        addr = Address.from_string(SYSTEM_STAKING_ADDR)
        self.assertEqual(str(addr), SYSTEM_STAKING_ADDR)

    def test_wrong_prefix_rejected(self) -> None:
        with self.assertRaisesRegex(AddressError, "prefix"):
            Address.from_string(VECTOR_BECH32)

    def test_wrong_payload_length_rejected(self) -> None:
        with self.assertRaisesRegex(AddressError, "20 bytes"):
            Address(b"\x01" * 19)
        with self.assertRaises(AddressError):
            Address.from_string(bech32_encode("io", b"\x01" * 32))

    def test_is_valid_address(self) -> None:
        self.assertTrue(is_valid_address(SYSTEM_STAKING_ADDR))
        self.assertFalse(is_valid_address(""))
        self.assertFalse(is_valid_address("io1notanaddress"))
        self.assertFalse(is_valid_address(None))


class UnitsTest(unittest.TestCase):
    def test_iotx_to_rau(self) -> None:
        self.assertEqual(RAU_PER_IOTX, 10**18)
        self.assertEqual(iotx_to_rau(16), 16 * 10**18)
        self.assertEqual(iotx_to_rau_str(16), "16000000000000000000")

    def test_parse_decimal(self) -> None:
        self.assertEqual(parse_decimal("0"), 0)
        self.assertEqual(parse_decimal("1200000000000000000000000"), 1_200_000 * 10**18)

    def test_parse_decimal_rejects_non_canonical_text(self) -> None:
        for raw in ["", "-1", "+1", " 1", "1_000", "1e18", "0x10", "1.5", "not-a-number"]:
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    parse_decimal(raw)


if __name__ == "__main__":
    unittest.main()
