from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DENSE_FIELD = "vector"
SPARSE_FIELD = "sparse_vector"


@dataclass(frozen=True)
class VectorDocument:
    """A single chunk of source text with its dense embedding.

    Fields:
        id: Caller-assigned identifier, unique within a collection.
        vector: Dense embedding (fixed dimension per collection).
        content: Raw chunk text; also the input to sparse vector synthesis.
        relative_path: Source file path relative to the indexed root.
        start_line: First line of the chunk in the source file.
        end_line: Last line of the chunk in the source file.
        file_extension: Source file extension, e.g. ".py".
        metadata: Arbitrary key/value data stored alongside the chunk.
    """
    id: str
    vector: List[float]
    content: str = ""
    relative_path: str = ""
    start_line: int = 0
    end_line: int = 0
    file_extension: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SparseVector:
    """Bag of hashed tokens: parallel lists of bucket ids and term counts."""
    indices: List[int] = field(default_factory=list)
    values: List[float] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.indices

    def to_dict(self) -> Dict[str, List]:
        return {"indices": list(self.indices), "values": list(self.values)}


@dataclass(frozen=True)
class SearchOptions:
    top_k: int = 10
    threshold: Optional[float] = None


@dataclass(frozen=True)
class VectorSearchResult:
    """Search match rebuilt from the stored payload.

    Fields:
        document: Reconstructed document; ``vector`` echoes the query vector.
        score: Backend similarity for dense search, fused score for hybrid search.
    """
    document: VectorDocument
    score: float


HybridSearchResult = VectorSearchResult


@dataclass(frozen=True)
class HybridSearchRequest:
    """One leg of a hybrid search.

    Fields:
        data: Dense query vector when ``anns_field`` is "vector",
            query text when it is "sparse_vector".
        anns_field: Which field the leg searches.
        param: Backend-specific search parameters (currently unused).
        limit: Candidate count requested for this leg.
    """
    data: Union[List[float], str]
    anns_field: str
    param: Dict[str, Any] = field(default_factory=dict)
    limit: int = 10


@dataclass(frozen=True)
class RerankStrategy:
    strategy: str = "rrf"
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class HybridSearchOptions:
    limit: int = 10
    rerank: Optional[RerankStrategy] = None


@dataclass(frozen=True)
class ScoredPoint:
    """Raw backend hit: point id, native score and payload."""
    id: Union[int, str]
    score: float
    payload: Dict[str, Any] = field(default_factory=dict)
