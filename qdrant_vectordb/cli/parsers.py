from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Qdrant vector database adapter (dense + hybrid search)")
    sub = ap.add_subparsers(dest="cmd", required=False)

    sub.add_parser("list-collections")

    cc = sub.add_parser("create-collection")
    cc.add_argument("--name", required=False, help="Collection name; defaults to $VDB_COLLECTION_NAME")
    cc.add_argument("--dim", type=int, required=True)
    cc.add_argument("--hybrid", action="store_true", help="Add the sparse 'text' field for hybrid search")

    dc = sub.add_parser("drop-collection")
    dc.add_argument("--name", required=False, help="Collection name; defaults to $VDB_COLLECTION_NAME")

    hc = sub.add_parser("has-collection")
    hc.add_argument("--name", required=False, help="Collection name; defaults to $VDB_COLLECTION_NAME")

    # Upsert documents with precomputed vectors
    ix = sub.add_parser("index")
    ix.add_argument("--name", required=False, help="Collection name; defaults to $VDB_COLLECTION_NAME")
    ix.add_argument("--input", required=True, help="JSON or JSONL file of documents")
    ix.add_argument("--format", default="auto", choices=["auto", "json", "jsonl"])
    ix.add_argument("--hybrid", action="store_true", help="Store sparse vectors of document content")
    ix.add_argument("--ensure", action="store_true", help="Create the collection first (dimension from input)")

    se = add_search_subparser(sub, "search")
    se.add_argument("--k", type=int, default=10)
    se.add_argument("--score-threshold", type=float, default=None)

    hs = add_search_subparser(sub, "hybrid-search")
    hs.add_argument("--text", default=None, help="Query text for the sparse leg")
    hs.add_argument("--limit", type=int, default=10)
    hs.add_argument("--rrf-k", type=float, default=60.0)

    de = sub.add_parser("delete")
    de.add_argument("--name", required=False, help="Collection name; defaults to $VDB_COLLECTION_NAME")
    de.add_argument("--ids", nargs="+", required=True)

    qu = sub.add_parser("query")
    qu.add_argument("--name", required=False, help="Collection name; defaults to $VDB_COLLECTION_NAME")
    qu.add_argument("--filter", default="", help="Accepted for compatibility; not applied")
    qu.add_argument("--output-fields", nargs="*", default=[])
    qu.add_argument("--limit", type=int, default=100)

    return ap


def add_search_subparser(sub, cmd):
    """
    Adds a search-style subparser with collection name and query vector arguments.

    The query vector is given inline as a JSON array (--vector) or read from
    a file holding one (--vector-file).

    Args:
        sub: The subparsers object from argparse.
        cmd: The name of the subcommand to add.

    Returns:
        argparse.ArgumentParser: The configured subparser.
    """
    result = sub.add_parser(cmd)
    result.add_argument(
        "--name",
        required=False,
        help="Collection name; defaults to $VDB_COLLECTION_NAME",
    )
    vec = result.add_mutually_exclusive_group(required=True)
    vec.add_argument("--vector", help="Query vector as a JSON array")
    vec.add_argument("--vector-file", help="Path to a JSON file holding the query vector")
    return result
