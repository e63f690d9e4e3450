from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from .models import (
    HybridSearchOptions,
    HybridSearchRequest,
    HybridSearchResult,
    SearchOptions,
    VectorDocument,
    VectorSearchResult,
)


class VectorDatabase(ABC):
    """Port for a vector database backend (e.g., Qdrant)."""

    @abstractmethod
    def create_collection(self, collection_name: str, dimension: int, description: Optional[str] = None) -> None:
        """Create a dense collection; re-creating an existing one is a no-op."""
        raise NotImplementedError

    @abstractmethod
    def create_hybrid_collection(self, collection_name: str, dimension: int, description: Optional[str] = None) -> None:
        """Create a dense + sparse collection; re-creating an existing one is a no-op."""
        raise NotImplementedError

    @abstractmethod
    def drop_collection(self, collection_name: str) -> None:
        """Drop a collection; dropping a missing one is a no-op."""
        raise NotImplementedError

    @abstractmethod
    def has_collection(self, collection_name: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def list_collections(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, collection_name: str, documents: Sequence[VectorDocument]) -> None:
        """Upsert documents keyed by their caller ID."""
        raise NotImplementedError

    @abstractmethod
    def insert_hybrid(self, collection_name: str, documents: Sequence[VectorDocument]) -> None:
        """Upsert documents together with the sparse vector of their content."""
        raise NotImplementedError

    @abstractmethod
    def search(
        self,
        collection_name: str,
        query_vector: Sequence[float],
        options: Optional[SearchOptions] = None,
    ) -> List[VectorSearchResult]:
        raise NotImplementedError

    @abstractmethod
    def hybrid_search(
        self,
        collection_name: str,
        search_requests: Sequence[HybridSearchRequest],
        options: Optional[HybridSearchOptions] = None,
    ) -> List[HybridSearchResult]:
        """Fuse a dense and an optional sparse search into one ranked list.

        Raises:
            ContractError: No dense request was supplied.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, collection_name: str, ids: Sequence[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def query(
        self,
        collection_name: str,
        filter_expr: str,
        output_fields: Sequence[str],
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return raw records; the filter expression is not applied."""
        raise NotImplementedError

    @abstractmethod
    def check_collection_limit(self) -> bool:
        raise NotImplementedError
