from __future__ import annotations

from enum import Enum

from .client import QdrantApiError

_EXISTS_MARKERS = ("already exists",)
_NOT_FOUND_MARKERS = ("not found", "doesn't exist", "does not exist")


class BackendCondition(Enum):
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    OTHER = "other"


def classify_error(exc: BaseException) -> BackendCondition:
    """Tell benign backend conditions apart from real failures.

    HTTP status wins (409 conflict, 404 not found); message text is only
    consulted when the status is missing or ambiguous.
    """
    status = getattr(exc, "status_code", None) if isinstance(exc, QdrantApiError) else None
    if status == 409:
        return BackendCondition.ALREADY_EXISTS
    if status == 404:
        return BackendCondition.NOT_FOUND
    # transport failures carry no status and must never look benign
    if isinstance(exc, QdrantApiError) and status is None:
        return BackendCondition.OTHER

    message = str(exc).lower()
    if any(m in message for m in _EXISTS_MARKERS):
        return BackendCondition.ALREADY_EXISTS
    if any(m in message for m in _NOT_FOUND_MARKERS):
        return BackendCondition.NOT_FOUND
    return BackendCondition.OTHER
