from __future__ import annotations

from typing import List

from ..dto import SearchRequest
from ...domain.interfaces import VectorDatabase
from ...domain.models import (
    DENSE_FIELD,
    SPARSE_FIELD,
    HybridSearchOptions,
    HybridSearchRequest,
    RerankStrategy,
    SearchOptions,
    VectorSearchResult,
)


class SearchDocumentsUseCase:
    """Use-case: dense search, or RRF hybrid search when requested or when query text is given."""

    def __init__(self, db: VectorDatabase) -> None:
        self._db = db

    def execute(self, req: SearchRequest) -> List[VectorSearchResult]:
        text = (req.text or "").strip()
        if not (req.hybrid or text):
            return self._db.search(
                req.collection,
                req.vector,
                SearchOptions(top_k=req.k, threshold=req.score_threshold),
            )
        legs = [HybridSearchRequest(data=list(req.vector), anns_field=DENSE_FIELD, limit=req.k)]
        if text:
            legs.append(HybridSearchRequest(data=text, anns_field=SPARSE_FIELD, limit=req.k))
        return self._db.hybrid_search(
            req.collection,
            legs,
            HybridSearchOptions(limit=req.k, rerank=RerankStrategy(strategy="rrf", params={"k": req.rrf_k})),
        )
