from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Callable

import yaml

from .config import Genesis, default_config, testnet_default
from .errors import GenesisLoadError
from .fingerprint import genesis_hash_hex
from .validate import validate


logger = logging.getLogger(__name__)


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge ``overlay`` onto a copy of ``base``.

    Mappings merge key by key; lists and scalars in the overlay replace the
    base value wholesale. A key left empty over a base mapping (``blockchain:``
    with nothing under it) keeps the base mapping.
    """
    merged = copy.deepcopy(base)
    for key, value in overlay.items():
        if value is None and isinstance(merged.get(key), dict):
            continue
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def read_overlay(path: str | os.PathLike[str]) -> dict[str, Any]:
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GenesisLoadError(f"Cannot read genesis file {file_path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise GenesisLoadError(f"Genesis file {file_path} is not valid UTF-8: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise GenesisLoadError(f"Malformed YAML in genesis file {file_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GenesisLoadError(f"Genesis file {file_path} must contain a mapping at the top level")
    return data


def apply_overlay(base: Genesis, overlay: dict[str, Any]) -> Genesis:
    merged = deep_merge(base.to_dict(), overlay)
    try:
        genesis = Genesis.from_dict(merged)
    except (KeyError, TypeError, ValueError, OverflowError) as exc:
        # KeyError wraps its message in quotes; unwrap it for readability.
        detail = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
        raise GenesisLoadError(f"Genesis overlay does not match the config shape: {detail}") from exc
    return validate(genesis)


def _load_onto(path: str | os.PathLike[str] | None, base: Callable[[], Genesis]) -> Genesis:
    if path is None or str(path) == "":
        logger.debug("No genesis file given, using built-in defaults")
        return validate(base())

    genesis = apply_overlay(base(), read_overlay(path))
    logger.info("Loaded genesis file %s (hash %s)", path, genesis_hash_hex(genesis))
    return genesis


def load(path: str | os.PathLike[str] | None = "") -> Genesis:
    """Build a genesis config from the defaults and an optional YAML overlay.

    Values in the file win; keys the file does not mention keep their default.
    Raises GenesisLoadError (or its GenesisValidationError subclass) when the
    file cannot be read, parsed, mapped or validated.
    """
    return _load_onto(path, default_config)


def load_testnet(path: str | os.PathLike[str] | None = "") -> Genesis:
    return _load_onto(path, testnet_default)


def dump(genesis: Genesis) -> str:
    return yaml.safe_dump(genesis.to_dict(), sort_keys=False, default_flow_style=False)


def save(genesis: Genesis, path: str | os.PathLike[str]) -> None:
    Path(path).write_text(dump(genesis), encoding="utf-8")
