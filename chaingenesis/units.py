from __future__ import annotations

import re


RAU_PER_IOTX = 10**18

_DECIMAL_RE = re.compile(r"[0-9]+")


def iotx_to_rau(amount: int) -> int:
    return int(amount) * RAU_PER_IOTX


def iotx_to_rau_str(amount: int) -> str:
    return str(iotx_to_rau(amount))


def is_decimal_string(value: object) -> bool:
    return isinstance(value, str) and _DECIMAL_RE.fullmatch(value) is not None


def parse_decimal(value: str) -> int:
    """Parse a non-negative base-10 amount string into an int.

    Signs, whitespace, underscores and exponents are rejected so that every
    participant reads the same string as the same number.
    """
    if not is_decimal_string(value):
        raise ValueError(f"not a non-negative decimal integer: {value!r}")
    return int(value, 10)
