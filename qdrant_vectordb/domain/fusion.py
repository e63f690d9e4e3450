"""
Rank fusion for hybrid search.

Both functions take ranked lists of ``ScoredPoint`` (best first) and return
one fused list of ``ScoredPoint`` whose ``score`` is the fused score. Points
are matched across lists by ``id``. Ordering uses Python's stable sort, so
equal fused scores keep first-seen order: every point of the first list,
then points that only appear in later lists.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

from .errors import ContractError
from .models import ScoredPoint

DEFAULT_RRF_K = 60

PointKey = Union[int, str]


def rrf_score(ranks: Sequence[int], k: float = DEFAULT_RRF_K) -> float:
    """Sum of ``1 / (k + rank)`` over the 1-based ranks a candidate holds."""
    return sum(1.0 / (k + r) for r in ranks)


def reciprocal_rank_fusion(
    ranked_lists: Sequence[Sequence[ScoredPoint]],
    k: float = DEFAULT_RRF_K,
) -> List[ScoredPoint]:
    """Merge ranked lists with Reciprocal Rank Fusion.

    Args:
        ranked_lists: Result lists, each sorted most relevant first.
        k: Fusion constant; must be positive.

    Returns:
        List[ScoredPoint]: Candidates sorted by fused score, descending. The
            payload is taken from the first list the candidate appears in.

    Raises:
        ContractError: If ``k`` is not positive.
    """
    if k <= 0:
        raise ContractError(f"RRF constant k must be positive, got {k}")

    ranks: Dict[PointKey, List[int]] = {}
    first_seen: Dict[PointKey, ScoredPoint] = {}
    for hits in ranked_lists:
        seen_in_list = set()
        for rank, hit in enumerate(hits, start=1):
            key = hit.id
            # a list contributes at most once per candidate
            if key in seen_in_list:
                continue
            seen_in_list.add(key)
            ranks.setdefault(key, []).append(rank)
            first_seen.setdefault(key, hit)

    fused = [
        ScoredPoint(id=key, score=rrf_score(r, k), payload=first_seen[key].payload)
        for key, r in ranks.items()
    ]
    return sorted(fused, key=lambda p: p.score, reverse=True)


def weighted_fusion(
    ranked_lists: Sequence[Sequence[ScoredPoint]],
    weights: Optional[Sequence[float]] = None,
) -> List[ScoredPoint]:
    """Merge ranked lists by a weighted sum of each list's native score.

    Missing weights default to 1.0. A candidate absent from a list
    contributes nothing for that list.
    """
    weights = list(weights or [])
    if len(weights) > len(ranked_lists):
        raise ContractError(
            f"Got {len(weights)} weights for {len(ranked_lists)} result lists"
        )
    weights.extend([1.0] * (len(ranked_lists) - len(weights)))

    totals: Dict[PointKey, float] = {}
    first_seen: Dict[PointKey, ScoredPoint] = {}
    for hits, weight in zip(ranked_lists, weights):
        seen_in_list = set()
        for hit in hits:
            if hit.id in seen_in_list:
                continue
            seen_in_list.add(hit.id)
            totals[hit.id] = totals.get(hit.id, 0.0) + float(weight) * float(hit.score)
            first_seen.setdefault(hit.id, hit)

    fused = [
        ScoredPoint(id=key, score=total, payload=first_seen[key].payload)
        for key, total in totals.items()
    ]
    return sorted(fused, key=lambda p: p.score, reverse=True)
