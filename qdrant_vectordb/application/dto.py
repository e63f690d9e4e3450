from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..domain.fusion import DEFAULT_RRF_K
from ..domain.models import VectorDocument


@dataclass(frozen=True)
class EnsureCollectionRequest:
    collection: str
    dim: int
    hybrid: bool = False


@dataclass(frozen=True)
class IndexDocumentsRequest:
    collection: str
    documents: List[VectorDocument]
    hybrid: bool = False
    ensure_collection: bool = False


@dataclass(frozen=True)
class SearchRequest:
    collection: str
    vector: List[float]
    k: int = 10
    score_threshold: Optional[float] = None
    text: Optional[str] = None
    hybrid: bool = False
    rrf_k: float = DEFAULT_RRF_K


@dataclass(frozen=True)
class IndexResponse:
    collection: str
    indexed: int
    dim: Optional[int] = None
