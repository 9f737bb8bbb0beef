from __future__ import annotations

import hashlib
from typing import Optional

from .address import ADDRESS_PAYLOAD_LENGTH, Address


# secp256k1 domain parameters
P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
B = 7
G = (
    55066263022277343669578718895168534326250603453777594175500187360389116729240,
    32670510020758816978083085130507043184471273380659243275938904335757337482424,
)

Point = Optional[tuple[int, int]]

# Jacobian (X, Y, Z) stands for the affine point (X/Z^2, Y/Z^3); Z == 0 is infinity.
Jacobian = tuple[int, int, int]
_INFINITY: Jacobian = (1, 1, 0)


def _on_curve(point: Point) -> bool:
    if point is None:
        return True
    x, y = point
    return (y * y - (x * x * x + B)) % P == 0


def _to_jacobian(point: Point) -> Jacobian:
    if point is None:
        return _INFINITY
    return point[0], point[1], 1


def _to_affine(jp: Jacobian) -> Point:
    x, y, z = jp
    if z == 0:
        return None
    z_inv = pow(z, -1, P)
    z_inv2 = z_inv * z_inv % P
    return x * z_inv2 % P, y * z_inv2 * z_inv % P


def _double(jp: Jacobian) -> Jacobian:
    x, y, z = jp
    if z == 0 or y == 0:
        return _INFINITY
    yy = y * y % P
    s = 4 * x * yy % P
    m = 3 * x * x % P  # curve a = 0
    x3 = (m * m - 2 * s) % P
    y3 = (m * (s - x3) - 8 * yy * yy) % P
    z3 = 2 * y * z % P
    return x3, y3, z3


def _add_jacobian(jp: Jacobian, jq: Jacobian) -> Jacobian:
    x1, y1, z1 = jp
    x2, y2, z2 = jq
    if z1 == 0:
        return jq
    if z2 == 0:
        return jp
    z1z1 = z1 * z1 % P
    z2z2 = z2 * z2 % P
    u1 = x1 * z2z2 % P
    u2 = x2 * z1z1 % P
    s1 = y1 * z2 * z2z2 % P
    s2 = y2 * z1 * z1z1 % P
    if u1 == u2:
        return _double(jp) if s1 == s2 else _INFINITY
    h = (u2 - u1) % P
    r = (s2 - s1) % P
    hh = h * h % P
    hhh = h * hh % P
    u1hh = u1 * hh % P
    x3 = (r * r - hhh - 2 * u1hh) % P
    y3 = (r * (u1hh - x3) - s1 * hhh) % P
    z3 = h * z1 * z2 % P
    return x3, y3, z3


def _multiply(scalar: int, point: Point = G) -> Point:
    """Left-to-right double-and-add, kept in Jacobian form until the end."""
    scalar %= N
    if scalar == 0 or point is None:
        return None
    base = _to_jacobian(point)
    acc = _INFINITY
    for bit in bin(scalar)[2:]:
        acc = _double(acc)
        if bit == "1":
            acc = _add_jacobian(acc, base)
    return _to_affine(acc)


def derive_private_key_hex(seed: bytes) -> str:
    # Rehash until the candidate lands in [1, N).
    digest = hashlib.sha256(seed).digest()
    while not 1 <= int.from_bytes(digest, "big") < N:
        digest = hashlib.sha256(digest).digest()
    return digest.hex()


def public_key_point(private_key_hex: str) -> tuple[int, int]:
    private_key = int(private_key_hex, 16)
    if not 1 <= private_key < N:
        raise ValueError("Invalid private key")
    point = _multiply(private_key)
    if point is None or not _on_curve(point):
        raise ValueError("Could not derive public key")
    return point


def uncompressed_public_key(private_key_hex: str) -> bytes:
    x, y = public_key_point(private_key_hex)
    return b"\x04" + x.to_bytes(32, "big") + y.to_bytes(32, "big")


def address_from_public_key(public_key: bytes) -> Address:
    if len(public_key) != 65 or public_key[0] != 0x04:
        raise ValueError("Public key must be 65-byte uncompressed form")
    digest = hashlib.sha3_256(public_key[1:]).digest()
    return Address.from_bytes(digest[-ADDRESS_PAYLOAD_LENGTH:])
