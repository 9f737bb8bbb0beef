from __future__ import annotations

import unittest

from chaingenesis import identityset
from chaingenesis.address import Address
from chaingenesis.crypto import (
    G,
    N,
    P,
    _multiply,
    _on_curve,
    address_from_public_key,
    public_key_point,
    uncompressed_public_key,
)


TWO_G = (
    0xC6047F9441ED7D6D3045406E95C07CD85C778E4B8CEF3CA7ABAC09B95C709EE5,
    0x1AE168FEA63DC339A3C58419466CEAEEF7F632653266D0E1236431A950CFE52A,
)
THREE_G = (
    0xF9308A019258C31049344F85F89D5229B531C845836F99B08601F113BCE036F9,
    0x388F7B0F632DE8140FE337E62A37F3566500A99934C2231B6CB9FD7584B8E672,
)


class KeyDerivationTest(unittest.TestCase):
    def test_private_key_one_maps_to_generator(self) -> None:
        public_key = uncompressed_public_key("0" * 63 + "1")
        self.assertEqual(public_key, b"\x04" + G[0].to_bytes(32, "big") + G[1].to_bytes(32, "big"))

    def test_derived_points_are_on_curve(self) -> None:
        self.assertTrue(_on_curve(public_key_point("2" * 64)))

    def test_small_multiples_match_known_points(self) -> None:
        self.assertEqual(_multiply(2), TWO_G)
        self.assertEqual(_multiply(3), THREE_G)
        self.assertEqual(_multiply(3), _multiply(1, THREE_G))

    def test_group_order_wraps(self) -> None:
        self.assertIsNone(_multiply(N))
        self.assertIsNone(_multiply(0))
        self.assertEqual(_multiply(N - 1), (G[0], P - G[1]))
        self.assertEqual(_multiply(N + 2), TWO_G)

    def test_multiplying_a_multiple(self) -> None:
        # 5 * (3G) == 15G
        self.assertEqual(_multiply(5, THREE_G), _multiply(15))
        for k in (7, 255, 2**128 + 1, N - 2):
            with self.subTest(k=k):
                self.assertTrue(_on_curve(_multiply(k)))

    def test_invalid_private_key_rejected(self) -> None:
        with self.assertRaises(ValueError):
            public_key_point("0" * 64)
        with self.assertRaises(ValueError):
            public_key_point("f" * 64)

    def test_address_requires_uncompressed_key(self) -> None:
        with self.assertRaises(ValueError):
            address_from_public_key(b"\x02" + b"\x00" * 32)


class IdentitySetTest(unittest.TestCase):
    def test_size_and_uniqueness(self) -> None:
        idents = identityset.identities()
        self.assertEqual(len(idents), identityset.size())
        self.assertEqual(len({ident.address_str for ident in idents}), identityset.size())
        self.assertEqual(len({ident.private_key_hex for ident in idents}), identityset.size())

    def test_identities_are_deterministic(self) -> None:
        self.assertEqual(identityset._derive(3), identityset.identity(3))
        self.assertEqual(identityset.address(3), identityset.identity(3).address)

    def test_addresses_decode_back(self) -> None:
        for ident in identityset.identities():
            with self.subTest(index=ident.index):
                self.assertTrue(ident.address_str.startswith("io1"))
                self.assertEqual(Address.from_string(ident.address_str), ident.address)
                self.assertEqual(address_from_public_key(ident.public_key), ident.address)


if __name__ == "__main__":
    unittest.main()
