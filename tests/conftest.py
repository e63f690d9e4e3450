"""
Pytest configuration and fixtures for qdrant_vectordb tests.

Provides an in-memory stand-in for the Qdrant REST client so adapter tests
exercise real upsert/search/scroll round-trips without a server.
"""

import math
import os
from typing import Dict, List

import pytest

from qdrant_vectordb.domain.models import ScoredPoint, VectorDocument
from qdrant_vectordb.infrastructure.qdrant.client import SPARSE_VECTOR_NAME, QdrantApiError
from qdrant_vectordb.infrastructure.qdrant.vectordb import QdrantVectorDatabase


def _cosine(a, b) -> float:
    na = math.sqrt(sum(x * x for x in a))
    nb = math.sqrt(sum(x * x for x in b))
    if not na or not nb:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / (na * nb)


class FakeQdrantClient:
    """Mimics QdrantRestClient against in-memory collections and records calls."""

    base_url = "http://fake:6333"

    def __init__(self) -> None:
        self.collections: Dict[str, dict] = {}
        self.calls: List[tuple] = []
        self.fail_on: Dict[str, Exception] = {}

    def _call(self, op: str, *args) -> None:
        self.calls.append((op,) + args)
        if op in self.fail_on:
            raise self.fail_on[op]

    def ops(self) -> List[str]:
        return [c[0] for c in self.calls]

    def _points(self, name: str) -> Dict[object, dict]:
        if name not in self.collections:
            raise QdrantApiError(f"Not found: Collection `{name}` doesn't exist!", status_code=404)
        return self.collections[name]["points"]

    def get_collections(self):
        self._call("get_collections")
        return list(self.collections)

    def create_collection(self, name, dim, distance="Cosine", sparse=False):
        self._call("create_collection", name, dim, sparse)
        if name in self.collections:
            raise QdrantApiError(f"Wrong input: Collection `{name}` already exists!", status_code=409)
        self.collections[name] = {"dim": dim, "sparse": sparse, "points": {}}
        return True

    def delete_collection(self, name):
        self._call("delete_collection", name)
        if name not in self.collections:
            raise QdrantApiError(f"Not found: Collection `{name}` doesn't exist!", status_code=404)
        del self.collections[name]
        return True

    def upsert(self, name, points):
        self._call("upsert", name, points)
        store = self._points(name)
        for p in points:
            store[p["id"]] = {"vector": p["vector"], "payload": dict(p["payload"])}
        return {"status": "completed"}

    def search(self, name, vector, limit, score_threshold=None, with_payload=True):
        self._call("search", name, list(vector), limit)
        hits = []
        for pid, p in self._points(name).items():
            dense = p["vector"][""] if isinstance(p["vector"], dict) else p["vector"]
            score = _cosine(vector, dense)
            if score_threshold is None or score >= score_threshold:
                hits.append(ScoredPoint(id=pid, score=score, payload=p["payload"]))
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:limit]

    def search_sparse(self, name, vector, limit, with_payload=True):
        self._call("search_sparse", name, vector, limit)
        query = dict(zip(vector.indices, vector.values))
        hits = []
        for pid, p in self._points(name).items():
            if not isinstance(p["vector"], dict) or SPARSE_VECTOR_NAME not in p["vector"]:
                continue
            sv = p["vector"][SPARSE_VECTOR_NAME]
            score = sum(query.get(i, 0.0) * v for i, v in zip(sv["indices"], sv["values"]))
            if score > 0:
                hits.append(ScoredPoint(id=pid, score=score, payload=p["payload"]))
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:limit]

    def delete_points(self, name, ids):
        self._call("delete_points", name, list(ids))
        store = self._points(name)
        for i in ids:
            store.pop(i, None)
        return {"status": "completed"}

    def scroll(self, name, limit, with_payload=True):
        self._call("scroll", name, limit)
        return [{"id": pid, "payload": p["payload"]} for pid, p in list(self._points(name).items())[:limit]]


@pytest.fixture
def fake_client():
    return FakeQdrantClient()


@pytest.fixture
def db(fake_client):
    return QdrantVectorDatabase(client=fake_client)


def make_doc(doc_id: str, vector, content: str = "", **kwargs) -> VectorDocument:
    return VectorDocument(
        id=doc_id,
        vector=list(vector),
        content=content,
        relative_path=kwargs.get("relative_path", f"src/{doc_id}.py"),
        start_line=kwargs.get("start_line", 1),
        end_line=kwargs.get("end_line", 10),
        file_extension=kwargs.get("file_extension", ".py"),
        metadata=kwargs.get("metadata", {"language": "python"}),
    )


@pytest.fixture
def doc_factory():
    return make_doc


@pytest.fixture
def clean_environment():
    """Clean environment variables for testing."""
    env_vars_to_clean = [
        'VDB_COLLECTION_NAME',
        'QDRANT_URL',
        'QDRANT_API_KEY',
        'QDRANT_TIMEOUT',
        'VDB_LOG_LEVEL',
    ]

    original_env = {}
    for var in env_vars_to_clean:
        if var in os.environ:
            original_env[var] = os.environ[var]
            del os.environ[var]

    yield

    for var, value in original_env.items():
        os.environ[var] = value


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "cli: mark test as CLI command test"
    )
