from __future__ import annotations

from ..dto import EnsureCollectionRequest, IndexDocumentsRequest, IndexResponse
from ...domain.errors import ContractError
from ...domain.interfaces import VectorDatabase
from .ensure_collection import EnsureCollectionUseCase


class IndexDocumentsUseCase:
    """Use-case: validate vector dimensions and upsert documents into the store."""

    def __init__(self, db: VectorDatabase) -> None:
        self._db = db

    def execute(self, req: IndexDocumentsRequest) -> IndexResponse:
        docs = list(req.documents or [])
        if not docs:
            return IndexResponse(collection=req.collection, indexed=0)
        dim = len(docs[0].vector)
        for d in docs:
            if len(d.vector) != dim:
                raise ContractError(
                    f"Inconsistent vector dimension for document '{d.id}': got {len(d.vector)}, expected {dim}"
                )

        if req.ensure_collection:
            EnsureCollectionUseCase(self._db).execute(
                EnsureCollectionRequest(collection=req.collection, dim=dim, hybrid=req.hybrid)
            )

        if req.hybrid:
            self._db.insert_hybrid(req.collection, docs)
        else:
            self._db.insert(req.collection, docs)
        return IndexResponse(collection=req.collection, indexed=len(docs), dim=dim)
