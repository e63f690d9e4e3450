from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..application.dto import EnsureCollectionRequest, IndexDocumentsRequest, SearchRequest
from ..application.use_cases.ensure_collection import EnsureCollectionUseCase
from ..application.use_cases.index_documents import IndexDocumentsUseCase
from ..application.use_cases.search_documents import SearchDocumentsUseCase
from ..domain.errors import ContractError
from ..domain.models import VectorSearchResult
from ..infrastructure.config import default_collection
from ..infrastructure.logging import get_logger
from ..infrastructure.qdrant.vectordb import QdrantVectorDatabase
from ..ingestion.document_loader import load_documents
from .parsers import build_parser

logger = get_logger("qdrant_vectordb.cli")


def _resolve_collection_name(explicit: Optional[str]) -> str:
    """Resolve collection name from explicit arg or VDB_COLLECTION_NAME env/.env."""
    if explicit and str(explicit).strip():
        return str(explicit).strip()
    name = default_collection()
    if not name:
        raise ContractError("VDB_COLLECTION_NAME not set in environment or .env; set it or pass --name")
    return name


def _read_vector(ns) -> List[float]:
    """Parse the query vector from --vector (inline JSON) or --vector-file."""
    if getattr(ns, "vector_file", None):
        raw = Path(ns.vector_file).expanduser().read_text(encoding="utf-8")
    else:
        raw = str(ns.vector)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ContractError(f"Query vector is not valid JSON: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("vector")
    if not isinstance(data, list) or not data:
        raise ContractError("Query vector must be a non-empty JSON array of numbers")
    try:
        return [float(x) for x in data]
    except (TypeError, ValueError) as exc:
        raise ContractError("Query vector must contain only numbers") from exc


def _serialize_result(result: VectorSearchResult) -> Dict[str, Any]:
    """Convert a search match into a JSON-serializable mapping (query vector omitted)."""
    doc = result.document
    return {
        "id": doc.id,
        "score": float(result.score),
        "content": doc.content,
        "relative_path": doc.relative_path,
        "start_line": doc.start_line,
        "end_line": doc.end_line,
        "file_extension": doc.file_extension,
        "metadata": doc.metadata,
    }


def _print(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2))


def run(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    ns = ap.parse_args(list(argv or []))

    db = QdrantVectorDatabase()

    try:
        return dispatch_commands(ns, db)
    except ContractError as ex:
        print(json.dumps({"status": "error", "error": str(ex)}))
        return 2
    except Exception as ex:  # keep CLI concise and user-friendly
        print(json.dumps({"status": "error", "error": f"{type(ex).__name__}: {ex}"}))
        return 3


def dispatch_commands(ns, db):
    """
    Dispatches CLI commands to the vector database or the matching use case.

    Commands:
    - list-collections, create-collection, drop-collection, has-collection: collection lifecycle
    - index: upsert documents (with precomputed vectors) from a JSON/JSONL file
    - search, hybrid-search: dense search and RRF-fused hybrid search
    - delete, query: remove documents by caller ID, scroll raw records
    Commands that take --name default to VDB_COLLECTION_NAME when it is omitted.
    """
    if ns.cmd == "list-collections":
        _print({"status": "ok", "collections": db.list_collections()})
        return 0
    if ns.cmd == "create-collection":
        return create_collection(ns, db)
    if ns.cmd == "drop-collection":
        collection = _resolve_collection_name(getattr(ns, "name", None))
        db.drop_collection(collection)
        _print({"status": "ok", "collection": collection, "dropped": True})
        return 0
    if ns.cmd == "has-collection":
        collection = _resolve_collection_name(getattr(ns, "name", None))
        _print({"status": "ok", "collection": collection, "exists": db.has_collection(collection)})
        return 0
    if ns.cmd == "index":
        return index_documents(ns, db)
    if ns.cmd in ("search", "hybrid-search"):
        return search_documents(ns, db)
    if ns.cmd == "delete":
        collection = _resolve_collection_name(getattr(ns, "name", None))
        ids = [str(i) for i in ns.ids]
        db.delete(collection, ids)
        _print({"status": "ok", "collection": collection, "deleted": len(ids)})
        return 0
    if ns.cmd == "query":
        collection = _resolve_collection_name(getattr(ns, "name", None))
        records = db.query(collection, str(ns.filter or ""), list(ns.output_fields or []), int(ns.limit))
        _print({"status": "ok", "collection": collection, "result": records})
        return 0

    print(json.dumps({"status": "error", "error": f"Unknown command: {ns.cmd}"}))
    return 2


def create_collection(ns, db):
    collection = _resolve_collection_name(getattr(ns, "name", None))
    hybrid = bool(getattr(ns, "hybrid", False))
    EnsureCollectionUseCase(db).execute(
        EnsureCollectionRequest(collection=collection, dim=int(ns.dim), hybrid=hybrid)
    )
    _print({"status": "ok", "collection": collection, "dimension": int(ns.dim), "hybrid": hybrid})
    return 0


def index_documents(ns, db):
    """
    Index documents from a JSON/JSONL file into the collection.
    Falls back to VDB_COLLECTION_NAME when --name omitted.
    """
    collection = _resolve_collection_name(getattr(ns, "name", None))
    input_path = Path(str(ns.input)).expanduser()
    if not input_path.exists():
        _print({"status": "error", "error": f"Input file '{input_path}' not found", "collection": collection})
        return 2

    docs = load_documents(input_path, getattr(ns, "format", "auto"))
    logger.info("Index request | collection=%s | file=%s | candidates=%d", collection, input_path, len(docs))
    resp = IndexDocumentsUseCase(db).execute(
        IndexDocumentsRequest(
            collection=collection,
            documents=docs,
            hybrid=bool(getattr(ns, "hybrid", False)),
            ensure_collection=bool(getattr(ns, "ensure", False)),
        )
    )
    logger.info("Index completed | collection=%s | indexed=%d", collection, resp.indexed)
    _print({"status": "ok", "collection": collection, "indexed": resp.indexed, "dimension": resp.dim})
    return 0


def search_documents(ns, db):
    """
    Executes a dense or hybrid search against the collection and prints the results.

    Returns:
        int: 0 on success, 2 if the collection does not exist.
    """
    collection = _resolve_collection_name(getattr(ns, "name", None))
    if not db.has_collection(collection):
        _print(
            {
                "status": "error",
                "error": f"Collection '{collection}' does not exist in Qdrant.",
                "requested": collection,
                "available_collections": sorted(db.list_collections()),
            }
        )
        return 2

    hybrid = ns.cmd == "hybrid-search"
    req = SearchRequest(
        collection=collection,
        vector=_read_vector(ns),
        k=int(ns.limit if hybrid else ns.k),
        score_threshold=(
            float(ns.score_threshold)
            if getattr(ns, "score_threshold", None) is not None
            else None
        ),
        text=getattr(ns, "text", None),
        hybrid=hybrid,
        rrf_k=float(getattr(ns, "rrf_k", 60.0)),
    )
    results = SearchDocumentsUseCase(db).execute(req)
    _print({"status": "ok", "collection": collection, "result": [_serialize_result(r) for r in results]})
    return 0


def main() -> int:
    import sys
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
