from __future__ import annotations

from typing import Optional


class VectorDatabaseError(RuntimeError):
    """Raised when a backend operation fails.

    Carries the failing operation and collection so callers can tell
    which call broke without parsing the message.
    """

    def __init__(self, operation: str, collection: Optional[str], cause: object) -> None:
        self.operation = operation
        self.collection = collection
        self.cause = cause
        target = f" {collection}" if collection else ""
        super().__init__(f"Failed to {operation}{target}: {cause}")


class DatabaseInitializationError(VectorDatabaseError):
    """Raised when the backend cannot be reached on first use."""

    def __init__(self, cause: object) -> None:
        super().__init__("initialize Qdrant client", None, cause)


class ContractError(ValueError):
    """Raised when a request violates the documented contract (e.g., missing dense request)."""
