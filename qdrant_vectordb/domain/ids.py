from __future__ import annotations

import uuid
from typing import Any, Dict, Mapping, Union

ORIGINAL_ID_KEY = "doc_id"

_ID_NAMESPACE = "qdrant-vectordb"
_UINT64_MAX = 2 ** 64 - 1

PointId = Union[int, str]


def _make_uuid(doc_id: str) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{_ID_NAMESPACE}|{doc_id}"))


def to_point_id(doc_id: str) -> PointId:
    """Map a caller ID to a Qdrant-valid point ID (uint64 or UUID).

    Only canonical spellings pass through: a decimal string within uint64
    without leading zeros becomes an integer, a lowercase hyphenated UUID is
    kept as is. Anything else becomes a deterministic UUIDv5, so distinct
    caller IDs never share a point.
    """
    s = str(doc_id)
    if s.isdigit() and s.isascii() and int(s) <= _UINT64_MAX and str(int(s)) == s:
        return int(s)
    try:
        canonical = str(uuid.UUID(s))
    except ValueError:
        return _make_uuid(s)
    return canonical if canonical == s else _make_uuid(s)


def original_id(point_id: PointId, payload: Mapping[str, Any]) -> str:
    """Recover the caller ID stored in the payload, falling back to the point ID."""
    stored = payload.get(ORIGINAL_ID_KEY) if payload else None
    if stored is not None and str(stored) != "":
        return str(stored)
    return str(point_id)


def strip_internal(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in (payload or {}).items() if k != ORIGINAL_ID_KEY}
