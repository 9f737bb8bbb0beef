from __future__ import annotations

import math
from dataclasses import fields
from datetime import timedelta
from typing import Any

from .address import is_valid_address
from .config import (
    ADDRESS,
    ADDRESS_LIST,
    AMOUNT,
    BALANCES,
    BOOL,
    DURATION,
    FLOAT,
    INT,
    OPTIONAL_ADDRESS,
    SECTION,
    SECTION_LIST,
    STR,
    THRESHOLD,
    UINT,
    UINT32,
    Genesis,
    Section,
)
from .errors import GenesisValidationError
from .forks import MAX_HEIGHT
from .units import is_decimal_string


INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT32_MAX = 2**32 - 1


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_value(kind: str, value: Any, path: str, problems: list[str]) -> None:
    if kind == UINT:
        if not _is_int(value) or not 0 <= value <= MAX_HEIGHT:
            problems.append(f"{path}: must be an unsigned 64-bit integer, got {value!r}")
    elif kind == UINT32:
        if not _is_int(value) or not 0 <= value <= UINT32_MAX:
            problems.append(f"{path}: must be an unsigned 32-bit integer, got {value!r}")
    elif kind == INT:
        if not _is_int(value) or not INT64_MIN <= value <= INT64_MAX:
            problems.append(f"{path}: must be a signed 64-bit integer, got {value!r}")
    elif kind == BOOL:
        if not isinstance(value, bool):
            problems.append(f"{path}: must be a boolean, got {value!r}")
    elif kind == FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            problems.append(f"{path}: must be a finite number, got {value!r}")
    elif kind == STR:
        if not isinstance(value, str):
            problems.append(f"{path}: must be a string, got {value!r}")
    elif kind == AMOUNT:
        if not is_decimal_string(value):
            problems.append(f"{path}: must be a non-negative decimal integer string, got {value!r}")
    elif kind == THRESHOLD:
        if value != "" and not is_decimal_string(value):
            problems.append(f"{path}: must be empty or a non-negative decimal integer string, got {value!r}")
    elif kind == ADDRESS:
        if not is_valid_address(value):
            problems.append(f"{path}: malformed address {value!r}")
    elif kind == OPTIONAL_ADDRESS:
        if value != "" and not is_valid_address(value):
            problems.append(f"{path}: malformed address {value!r}")
    elif kind == DURATION:
        if not isinstance(value, timedelta) or value < timedelta(0):
            problems.append(f"{path}: must be a non-negative duration, got {value!r}")


def _walk(section: Section, path: str, problems: list[str]) -> None:
    for f in fields(section):
        kind = f.metadata["kind"]
        key = f.metadata["key"]
        value = getattr(section, f.name)
        field_path = f"{path}.{key}" if path else key

        if kind == SECTION:
            _walk(value, field_path, problems)
        elif kind == SECTION_LIST:
            for index, entry in enumerate(value):
                _walk(entry, f"{field_path}[{index}]", problems)
        elif kind == ADDRESS_LIST:
            for index, entry in enumerate(value):
                _check_value(ADDRESS, entry, f"{field_path}[{index}]", problems)
        elif kind == BALANCES:
            for addr, amount in value.items():
                _check_value(ADDRESS, addr, f"{field_path}[{addr!r}]", problems)
                _check_value(AMOUNT, amount, f"{field_path}[{addr!r}]", problems)
        else:
            _check_value(kind, value, field_path, problems)


def collect_problems(genesis: Genesis) -> list[str]:
    problems: list[str] = []
    _walk(genesis, "", problems)

    bc = genesis.blockchain
    if isinstance(bc.block_interval, timedelta) and bc.block_interval <= timedelta(0):
        problems.append("blockchain.blockInterval: must be positive")

    poll = genesis.poll
    if _is_int(poll.probation_intensity_rate) and poll.probation_intensity_rate > 100:
        problems.append(
            f"poll.probationIntensityRate: must be within [0, 100], got {poll.probation_intensity_rate}"
        )
    if (
        _is_int(poll.probation_epoch_period)
        and _is_int(poll.unproductive_delegate_max_cache_size)
        and poll.probation_epoch_period > poll.unproductive_delegate_max_cache_size
    ):
        problems.append(
            "poll.probationEpochPeriod: must not exceed unproductiveDelegateMaxCacheSize "
            f"({poll.probation_epoch_period} > {poll.unproductive_delegate_max_cache_size})"
        )
    return problems


def validate(genesis: Genesis) -> Genesis:
    """Check every stored string and number once, reporting all problems together."""
    problems = collect_problems(genesis)
    if problems:
        raise GenesisValidationError(problems)
    return genesis
