from __future__ import annotations

from ..dto import EnsureCollectionRequest
from ...domain.errors import ContractError
from ...domain.interfaces import VectorDatabase


class EnsureCollectionUseCase:
    """Use-case: ensure the collection exists (dense or hybrid)."""

    def __init__(self, db: VectorDatabase) -> None:
        self._db = db

    def execute(self, req: EnsureCollectionRequest) -> None:
        """
        Creates the collection with cosine distance, optionally with a sparse field.

        Creation is idempotent, so calling this for an existing collection is safe.

        Args:
            req: The request object containing collection name, dimension and hybrid flag.

        Raises:
            ContractError: The dimension is not a positive integer.
        """
        dim = int(req.dim or 0)
        if dim <= 0:
            raise ContractError(f"Collection dimension must be positive, got {req.dim}")
        if req.hybrid:
            self._db.create_hybrid_collection(req.collection, dim)
        else:
            self._db.create_collection(req.collection, dim)
