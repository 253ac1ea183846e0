"""Response envelope normalization.

The backend nests the same logical collection differently per endpoint:
a bare array, ``data``, ``data.data`` or ``data.<entityName>``. Callers
declare their candidate paths in precedence order; ``normalize`` returns the
first one that resolves to a list and an empty list otherwise. The module
carries no entity-specific knowledge.

Also hosts the flag coercion rule used wherever a record's status drives UI
state, so every screen interprets ``0``/``1``/``"1"``/``True`` the same way.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

__all__ = [
    "CandidatePath",
    "TOP_LEVEL",
    "DATA",
    "DATA_DATA",
    "data_key",
    "parse_path",
    "resolve_path",
    "normalize",
    "coerce_flag",
    "extract_message",
    "unwrap_record",
]

CandidatePath = Tuple[str, ...]

TOP_LEVEL: CandidatePath = ()
DATA: CandidatePath = ("data",)
DATA_DATA: CandidatePath = ("data", "data")


def data_key(name: str) -> CandidatePath:
    """Path for collections wrapped as ``data.<name>``."""
    return ("data", name)


def parse_path(path: Union[str, Sequence[str]]) -> CandidatePath:
    """Accept ``"data.data"`` style strings as well as key tuples."""
    if isinstance(path, str):
        return tuple(part for part in path.split(".") if part)
    return tuple(path)


_MISSING = object()


def resolve_path(envelope: Any, path: Union[str, Sequence[str]]) -> Any:
    node = envelope
    for key in parse_path(path):
        if not isinstance(node, dict):
            return _MISSING
        node = node.get(key, _MISSING)
        if node is _MISSING:
            return _MISSING
    return node


def normalize(envelope: Any, candidate_paths: Iterable[Union[str, Sequence[str]]]) -> List[Any]:
    """Return the first candidate path that resolves to a list.

    Never raises and never returns ``None``; an unmatched envelope yields ``[]``.
    A fresh list is returned so callers may mutate it freely.
    """
    for path in candidate_paths:
        try:
            node = resolve_path(envelope, path)
        except Exception:  # noqa: BLE001 - malformed path input behaves like a miss
            continue
        if isinstance(node, list):
            return list(node)
    return []


def coerce_flag(value: Any) -> bool:
    """Numeric coercion: ``True`` exactly when the value is numerically 1.

    ``True``, ``1``, ``1.0``, ``"1"``, ``" 1 "`` and ``"1.0"`` are active;
    ``None``, empty strings, other numbers and non-numeric text are not.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return False
        try:
            number = float(text)
        except ValueError:
            return False
        return not math.isnan(number) and number == 1
    return False


def extract_message(envelope: Any, default: Optional[str] = None) -> Optional[str]:
    """Server-provided human message, if the envelope carries one."""
    if not isinstance(envelope, dict):
        return default
    message = envelope.get("message")
    if isinstance(message, str) and message.strip():
        return message
    meta = envelope.get("meta")
    if isinstance(meta, dict):
        meta_message = meta.get("message")
        if isinstance(meta_message, str) and meta_message.strip():
            return meta_message
    errors = envelope.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], str):
        return errors[0]
    return default


def unwrap_record(envelope: Any) -> Any:
    """Single-record endpoints: prefer ``data`` when present."""
    if isinstance(envelope, dict) and envelope.get("data") is not None:
        return envelope["data"]
    return envelope
