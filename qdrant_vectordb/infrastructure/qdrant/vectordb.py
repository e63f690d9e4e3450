from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from ...domain.errors import ContractError, DatabaseInitializationError, VectorDatabaseError
from ...domain.fusion import DEFAULT_RRF_K, reciprocal_rank_fusion, weighted_fusion
from ...domain.ids import ORIGINAL_ID_KEY, original_id, strip_internal, to_point_id
from ...domain.interfaces import VectorDatabase
from ...domain.models import (
    DENSE_FIELD,
    SPARSE_FIELD,
    HybridSearchOptions,
    HybridSearchRequest,
    HybridSearchResult,
    RerankStrategy,
    ScoredPoint,
    SearchOptions,
    VectorDocument,
    VectorSearchResult,
)
from ...domain.tokenizer import to_query_vector, to_sparse_vector
from ..logging import get_logger
from .client import SPARSE_VECTOR_NAME, QdrantRestClient
from .errors import BackendCondition, classify_error

logger = get_logger("qdrant_vectordb.qdrant")

DEFAULT_SCROLL_LIMIT = 100

# Qdrant's name for the unnamed default vector
_DEFAULT_VECTOR_NAME = ""


class InitState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def _payload(doc: VectorDocument) -> Dict[str, Any]:
    return {
        ORIGINAL_ID_KEY: doc.id,
        "content": doc.content,
        "relative_path": doc.relative_path,
        "start_line": doc.start_line,
        "end_line": doc.end_line,
        "file_extension": doc.file_extension,
        "metadata": dict(doc.metadata or {}),
    }


def _to_document(hit: ScoredPoint, query_vector: Sequence[float]) -> VectorDocument:
    p = hit.payload or {}
    return VectorDocument(
        id=original_id(hit.id, p),
        vector=list(query_vector),
        content=str(p.get("content") or ""),
        relative_path=str(p.get("relative_path") or ""),
        start_line=int(p.get("start_line") or 0),
        end_line=int(p.get("end_line") or 0),
        file_extension=str(p.get("file_extension") or ""),
        metadata=dict(p.get("metadata") or {}),
    )


class QdrantVectorDatabase(VectorDatabase):
    """``VectorDatabase`` adapter for Qdrant REST.

    Reachability is probed lazily on the first call. Expected backend
    conditions ("already exists" on create, "not found" on drop) are
    absorbed; every other failure is wrapped in ``VectorDatabaseError``.
    """

    def __init__(
        self,
        address: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[QdrantRestClient] = None,
    ) -> None:
        self._client = client or QdrantRestClient(url=address, api_key=api_key, timeout=timeout)
        self._state = InitState.UNINITIALIZED
        self._init_lock = threading.Lock()

    @property
    def state(self) -> InitState:
        return self._state

    def initialize(self) -> None:
        """Probe the backend once; later calls return immediately."""
        if self._state is InitState.READY:
            return
        with self._init_lock:
            if self._state is InitState.READY:
                return
            try:
                self._client.get_collections()
            except Exception as ex:
                raise DatabaseInitializationError(ex) from ex
            self._state = InitState.READY
            logger.debug("Qdrant ready | url=%s", getattr(self._client, "base_url", "?"))

    # --- collections ---
    def create_collection(self, collection_name: str, dimension: int, description: Optional[str] = None) -> None:
        self._create(collection_name, dimension, sparse=False)

    def create_hybrid_collection(self, collection_name: str, dimension: int, description: Optional[str] = None) -> None:
        self._create(collection_name, dimension, sparse=True)

    def _create(self, name: str, dim: int, sparse: bool) -> None:
        self.initialize()
        operation = "create hybrid collection" if sparse else "create collection"
        try:
            self._client.create_collection(name, dim, distance="Cosine", sparse=sparse)
        except Exception as ex:
            if classify_error(ex) is BackendCondition.ALREADY_EXISTS:
                logger.debug("Collection exists | collection=%s", name)
                return
            raise VectorDatabaseError(operation, name, ex) from ex
        logger.info("Collection created | collection=%s | dim=%d | hybrid=%s", name, dim, sparse)

    def drop_collection(self, collection_name: str) -> None:
        self.initialize()
        try:
            self._client.delete_collection(collection_name)
        except Exception as ex:
            if classify_error(ex) is BackendCondition.NOT_FOUND:
                logger.debug("Collection already absent | collection=%s", collection_name)
                return
            raise VectorDatabaseError("drop collection", collection_name, ex) from ex
        logger.info("Collection dropped | collection=%s", collection_name)

    def has_collection(self, collection_name: str) -> bool:
        self.initialize()
        try:
            names = self._client.get_collections()
        except Exception as ex:
            raise VectorDatabaseError("check collection existence of", collection_name, ex) from ex
        return collection_name in names

    def list_collections(self) -> List[str]:
        self.initialize()
        try:
            return self._client.get_collections()
        except Exception as ex:
            raise VectorDatabaseError("list collections", None, ex) from ex

    # --- documents ---
    def insert(self, collection_name: str, documents: Sequence[VectorDocument]) -> None:
        self._upsert(collection_name, documents, hybrid=False)

    def insert_hybrid(self, collection_name: str, documents: Sequence[VectorDocument]) -> None:
        self._upsert(collection_name, documents, hybrid=True)

    def _upsert(self, name: str, documents: Sequence[VectorDocument], hybrid: bool) -> None:
        self.initialize()
        if not documents:
            return
        points = []
        for doc in documents:
            if hybrid:
                vector: Any = {
                    _DEFAULT_VECTOR_NAME: list(doc.vector),
                    SPARSE_VECTOR_NAME: to_sparse_vector(doc.content).to_dict(),
                }
            else:
                vector = list(doc.vector)
            points.append({"id": to_point_id(doc.id), "vector": vector, "payload": _payload(doc)})
        operation = "insert hybrid documents into" if hybrid else "insert documents into"
        try:
            self._client.upsert(name, points)
        except Exception as ex:
            raise VectorDatabaseError(operation, name, ex) from ex
        logger.info("Upserted | collection=%s | points=%d | hybrid=%s", name, len(points), hybrid)

    def search(
        self,
        collection_name: str,
        query_vector: Sequence[float],
        options: Optional[SearchOptions] = None,
    ) -> List[VectorSearchResult]:
        self.initialize()
        opts = options or SearchOptions()
        limit = opts.top_k or 10
        try:
            hits = self._client.search(
                collection_name,
                query_vector,
                limit=limit,
                score_threshold=opts.threshold,
            )
        except Exception as ex:
            raise VectorDatabaseError("search in", collection_name, ex) from ex
        return [VectorSearchResult(document=_to_document(h, query_vector), score=h.score) for h in hits]

    def hybrid_search(
        self,
        collection_name: str,
        search_requests: Sequence[HybridSearchRequest],
        options: Optional[HybridSearchOptions] = None,
    ) -> List[HybridSearchResult]:
        opts = options or HybridSearchOptions()
        limit = opts.limit or 10
        dense = next((r for r in search_requests if r.anns_field == DENSE_FIELD), None)
        sparse = next((r for r in search_requests if r.anns_field == SPARSE_FIELD), None)
        if dense is None:
            raise ContractError("Dense search request (vector) is required for hybrid search")
        dense_vector = self._dense_vector(dense.data)
        fuse = self._fusion(opts.rerank)
        self.initialize()

        ranked: List[List[ScoredPoint]] = []
        try:
            ranked.append(
                self._client.search(collection_name, dense_vector, limit=max(dense.limit or 0, limit * 2))
            )
            sparse_text = str(sparse.data) if sparse is not None and sparse.data else ""
            sparse_vector = to_query_vector(sparse_text)
            if not sparse_vector.is_empty():
                ranked.append(
                    self._client.search_sparse(
                        collection_name, sparse_vector, limit=max(sparse.limit or 0, limit * 2)
                    )
                )
        except Exception as ex:
            raise VectorDatabaseError("perform hybrid search in", collection_name, ex) from ex

        fused = fuse(ranked)[:limit]
        logger.debug(
            "Hybrid search | collection=%s | legs=%d | candidates=%s | returned=%d",
            collection_name,
            len(ranked),
            [len(r) for r in ranked],
            len(fused),
        )
        return [HybridSearchResult(document=_to_document(p, dense_vector), score=p.score) for p in fused]

    @staticmethod
    def _dense_vector(data: Any) -> List[float]:
        if isinstance(data, (str, bytes)) or not data:
            raise ContractError("Dense search request (vector) must carry a non-empty list of numbers")
        try:
            return [float(x) for x in data]
        except (TypeError, ValueError) as exc:
            raise ContractError("Dense search request (vector) must contain only numbers") from exc

    @staticmethod
    def _fusion(rerank: Optional[RerankStrategy]) -> Callable[[List[List[ScoredPoint]]], List[ScoredPoint]]:
        """Resolve the rerank option to a fusion function; RRF with k=60 by default."""
        strategy = (rerank.strategy if rerank else "rrf") or "rrf"
        params = dict(rerank.params or {}) if rerank else {}
        if strategy == "rrf":
            k = float(params.get("k", DEFAULT_RRF_K))
            if k <= 0:
                raise ContractError(f"RRF constant k must be positive, got {k}")
            return lambda ranked: reciprocal_rank_fusion(ranked, k=k)
        if strategy == "weighted":
            weights = params.get("weights")
            return lambda ranked: weighted_fusion(ranked, weights)
        raise ContractError(f"Unsupported rerank strategy '{strategy}'; expected 'rrf' or 'weighted'")

    def delete(self, collection_name: str, ids: Sequence[str]) -> None:
        self.initialize()
        if not ids:
            return
        point_ids = [to_point_id(i) for i in ids]
        try:
            self._client.delete_points(collection_name, point_ids)
        except Exception as ex:
            raise VectorDatabaseError("delete documents from", collection_name, ex) from ex
        logger.info("Deleted | collection=%s | points=%d", collection_name, len(point_ids))

    def query(
        self,
        collection_name: str,
        filter_expr: str,
        output_fields: Sequence[str],
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self.initialize()
        if filter_expr:
            logger.debug("Query filter not applied | collection=%s | filter=%s", collection_name, filter_expr)
        try:
            points = self._client.scroll(collection_name, limit=limit or DEFAULT_SCROLL_LIMIT)
        except Exception as ex:
            raise VectorDatabaseError("query", collection_name, ex) from ex
        records: List[Dict[str, Any]] = []
        for pt in points:
            payload = pt.get("payload") or {}
            records.append({"id": original_id(pt.get("id"), payload), **strip_internal(payload)})
        return records

    def check_collection_limit(self) -> bool:
        self.initialize()
        try:
            self._client.get_collections()
        except Exception as ex:
            raise VectorDatabaseError("check collection limit", None, ex) from ex
        # open-source Qdrant has no collection cap
        return True
