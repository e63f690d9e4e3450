from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..domain.errors import ContractError
from ..domain.models import VectorDocument

_KNOWN_FIELDS = {"id", "vector", "content", "relative_path", "start_line", "end_line", "file_extension", "metadata"}


def infer_format(fmt: str, path: Path) -> str:
    """Infer input format from explicit flag or file extension."""
    resolved = (fmt or "auto").lower()
    if resolved != "auto":
        return resolved
    if path.suffix.lower() in {".jsonl", ".ndjson"}:
        return "jsonl"
    return "json"


def entry_to_document(entry: object, *, index: int) -> VectorDocument:
    """Convert a JSON object into a VectorDocument; unknown keys land in metadata."""
    if not isinstance(entry, dict):
        raise ContractError(f"Entry {index}: documents must be JSON objects")
    doc_id = entry.get("id")
    if doc_id is None or str(doc_id).strip() == "":
        raise ContractError(f"Entry {index}: missing 'id'")
    vector = entry.get("vector")
    if not isinstance(vector, list) or not vector:
        raise ContractError(f"Entry {index}: 'vector' must be a non-empty list of numbers")
    try:
        values = [float(x) for x in vector]
    except (TypeError, ValueError) as exc:
        raise ContractError(f"Entry {index}: 'vector' must contain only numbers") from exc

    metadata: Dict[str, Any] = {}
    if isinstance(entry.get("metadata"), dict):
        metadata.update(entry["metadata"])
    for key, value in entry.items():
        if key not in _KNOWN_FIELDS and value is not None and key not in metadata:
            metadata[key] = value

    return VectorDocument(
        id=str(doc_id),
        vector=values,
        content=str(entry.get("content") or ""),
        relative_path=str(entry.get("relative_path") or ""),
        start_line=int(entry.get("start_line") or 0),
        end_line=int(entry.get("end_line") or 0),
        file_extension=str(entry.get("file_extension") or ""),
        metadata=metadata,
    )


def load_documents(path: Path, fmt: str = "auto") -> List[VectorDocument]:
    """Load documents from a JSON array / ``{"items": [...]}`` file or a JSONL file."""
    fmt = infer_format(fmt, path)
    text = path.read_text(encoding="utf-8", errors="ignore")

    if fmt == "jsonl":
        docs: List[VectorDocument] = []
        for idx, raw in enumerate(text.splitlines()):
            if not raw.strip():
                continue
            try:
                entry = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise ContractError(f"Invalid JSON on line {idx + 1}: {exc}") from exc
            docs.append(entry_to_document(entry, index=idx + 1))
        return docs

    if fmt == "json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ContractError(f"Invalid JSON file: {exc}") from exc
        if isinstance(data, dict) and isinstance(data.get("items"), list):
            entries = data["items"]
        elif isinstance(data, list):
            entries = data
        else:
            raise ContractError("JSON input must be a list or contain an 'items' array")
        return [entry_to_document(e, index=i) for i, e in enumerate(entries)]

    raise ContractError(f"Unsupported format '{fmt}'")
