from __future__ import annotations

import re
from typing import Dict, List

from .models import SparseVector

HASH_BUCKETS = 65536
MAX_QUERY_TERMS = 100

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def tokenize(text: str) -> List[str]:
    """Lowercase, blank out punctuation and split on whitespace runs."""
    if not text:
        return []
    cleaned = _NON_WORD.sub(" ", text.lower())
    return [t for t in _WHITESPACE.split(cleaned) if t]


def hash_token(token: str, buckets: int = HASH_BUCKETS) -> int:
    """Fold a token into ``[0, buckets)`` with a 31-multiplier rolling hash.

    Runs over UTF-16 code units in signed 32-bit arithmetic, matching the
    Java and JavaScript string hash for the same token. Buckets agree with
    those clients only where tokenization agrees: ``tokenize`` keeps
    non-ASCII letters, which an ASCII-only ``\\w`` would blank out.
    """
    h = 0
    data = token.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return abs(h) % buckets


def to_sparse_vector(text: str, buckets: int = HASH_BUCKETS) -> SparseVector:
    """Build a term-frequency sparse vector; indices keep first-seen order."""
    counts: Dict[int, int] = {}
    for token in tokenize(text):
        index = hash_token(token, buckets)
        counts[index] = counts.get(index, 0) + 1
    return SparseVector(indices=list(counts), values=[float(v) for v in counts.values()])


def to_query_vector(text: str, max_terms: int = MAX_QUERY_TERMS) -> SparseVector:
    """Sparse vector for search text, capped to the first ``max_terms`` buckets."""
    vec = to_sparse_vector(text)
    return SparseVector(indices=vec.indices[:max_terms], values=vec.values[:max_terms])
