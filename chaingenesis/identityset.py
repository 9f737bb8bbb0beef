from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from .address import Address
from .crypto import address_from_public_key, derive_private_key_hex, uncompressed_public_key


IDENTITY_SET_SIZE = 30
_SEED_PREFIX = b"chaingenesis/identityset/"


@dataclass(frozen=True)
class Identity:
    index: int
    private_key_hex: str
    public_key: bytes
    address: Address

    @property
    def address_str(self) -> str:
        return str(self.address)


def _derive(index: int) -> Identity:
    private_key_hex = derive_private_key_hex(_SEED_PREFIX + str(index).encode("ascii"))
    public_key = uncompressed_public_key(private_key_hex)
    return Identity(
        index=index,
        private_key_hex=private_key_hex,
        public_key=public_key,
        address=address_from_public_key(public_key),
    )


@lru_cache(maxsize=1)
def identities() -> tuple[Identity, ...]:
    return tuple(_derive(i) for i in range(IDENTITY_SET_SIZE))


def size() -> int:
    return IDENTITY_SET_SIZE


def identity(index: int) -> Identity:
    return identities()[index]


def address(index: int) -> Address:
    return identities()[index].address
