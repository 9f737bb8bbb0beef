from __future__ import annotations

from dataclasses import dataclass


ADDRESS_PREFIX = "io"
ADDRESS_PAYLOAD_LENGTH = 20

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_MAX_LENGTH = 90


class AddressError(ValueError):
    pass


def _polymod(values: list[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 25
        checksum = ((checksum & 0x1FFFFFF) << 5) ^ value
        for i in range(5):
            if (top >> i) & 1:
                checksum ^= _GENERATOR[i]
    return checksum


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(ch) >> 5 for ch in hrp] + [0] + [ord(ch) & 31 for ch in hrp]


def _create_checksum(hrp: str, data: list[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def _convert_bits(data: bytes | list[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    max_value = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise AddressError("Invalid data value for bit conversion")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & max_value)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & max_value):
        raise AddressError("Invalid padding in address data")
    return out


def bech32_encode(hrp: str, payload: bytes) -> str:
    data = _convert_bits(payload, 8, 5, True)
    combined = data + _create_checksum(hrp, data)
    return hrp + "1" + "".join(_CHARSET[d] for d in combined)


def bech32_decode(encoded: str) -> tuple[str, bytes]:
    if not isinstance(encoded, str):
        raise AddressError("Address must be a string")
    if any(ord(ch) < 33 or ord(ch) > 126 for ch in encoded):
        raise AddressError("Address contains invalid characters")
    if encoded.lower() != encoded and encoded.upper() != encoded:
        raise AddressError("Address mixes upper and lower case")
    encoded = encoded.lower()
    pos = encoded.rfind("1")
    if pos < 1 or pos + 7 > len(encoded) or len(encoded) > _MAX_LENGTH:
        raise AddressError("Address has invalid separator position or length")

    hrp = encoded[:pos]
    data: list[int] = []
    for ch in encoded[pos + 1 :]:
        index = _CHARSET.find(ch)
        if index < 0:
            raise AddressError(f"Address contains non-bech32 character {ch!r}")
        data.append(index)
    if _polymod(_hrp_expand(hrp) + data) != 1:
        raise AddressError("Address checksum mismatch")
    return hrp, bytes(_convert_bits(data[:-6], 5, 8, False))


@dataclass(frozen=True)
class Address:
    payload: bytes

    def __post_init__(self) -> None:
        if len(self.payload) != ADDRESS_PAYLOAD_LENGTH:
            raise AddressError(f"Address payload must be {ADDRESS_PAYLOAD_LENGTH} bytes")

    def __str__(self) -> str:
        return bech32_encode(ADDRESS_PREFIX, self.payload)

    def hex(self) -> str:
        return self.payload.hex()

    @classmethod
    def from_string(cls, encoded: str) -> "Address":
        hrp, payload = bech32_decode(encoded)
        if hrp != ADDRESS_PREFIX:
            raise AddressError(f"Address has wrong prefix {hrp!r}")
        return cls(payload)

    @classmethod
    def from_bytes(cls, payload: bytes) -> "Address":
        return cls(bytes(payload))


def is_valid_address(encoded: object) -> bool:
    if not isinstance(encoded, str):
        return False
    try:
        Address.from_string(encoded)
    except AddressError:
        return False
    return True
