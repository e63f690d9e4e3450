"""
Unit tests for Reciprocal Rank Fusion and weighted fusion.
"""

import pytest

from qdrant_vectordb.domain.errors import ContractError
from qdrant_vectordb.domain.fusion import (
    DEFAULT_RRF_K,
    reciprocal_rank_fusion,
    rrf_score,
    weighted_fusion,
)
from qdrant_vectordb.domain.models import ScoredPoint


def _hits(*ids, scores=None):
    scores = scores or [1.0 - 0.1 * i for i in range(len(ids))]
    return [ScoredPoint(id=i, score=s, payload={"doc_id": str(i)}) for i, s in zip(ids, scores)]


class TestReciprocalRankFusion:
    """Test RRF scoring and ordering."""

    def test_dense_only_first_place(self):
        fused = reciprocal_rank_fusion([_hits("a", "b")], k=60)
        assert fused[0].id == "a"
        assert fused[0].score == pytest.approx(1 / 61)
        assert fused[1].score == pytest.approx(1 / 62)

    def test_first_in_both_lists_beats_dense_only(self):
        dense = _hits("a", "b")
        sparse = _hits("b", "c")
        fused = reciprocal_rank_fusion([dense, sparse], k=60)
        by_id = {p.id: p.score for p in fused}
        assert by_id["b"] == pytest.approx(1 / 62 + 1 / 61)
        assert by_id["a"] == pytest.approx(1 / 61)
        assert by_id["c"] == pytest.approx(1 / 62)
        assert [p.id for p in fused] == ["b", "a", "c"]

    @pytest.mark.parametrize("k", [1, 10, 60, 1000])
    def test_both_lists_rank_one_scores_double(self, k):
        fused = reciprocal_rank_fusion([_hits("x", "y"), _hits("x")], k=k)
        assert fused[0].id == "x"
        assert fused[0].score == pytest.approx(2 / (k + 1))
        assert fused[0].score > 1 / (k + 1)

    def test_sparse_only_below_dense_item_also_in_sparse(self):
        # "s" is rank 2 in sparse only; "d" is rank 2 in dense and also in sparse
        dense = _hits("top", "d")
        sparse = _hits("x", "s", "d")
        fused = {p.id: p.score for p in reciprocal_rank_fusion([dense, sparse])}
        assert fused["s"] == pytest.approx(1 / (DEFAULT_RRF_K + 2))
        assert fused["s"] < fused["d"]

    def test_ties_keep_first_seen_order(self):
        # "a" rank 1 dense, "c" rank 1 sparse -> equal scores, dense first
        fused = reciprocal_rank_fusion([_hits("a"), _hits("c")])
        assert [p.id for p in fused] == ["a", "c"]
        assert fused[0].score == fused[1].score

    def test_commutative_scores(self):
        dense, sparse = _hits("a", "b", "c"), _hits("c", "d")
        one = {p.id: p.score for p in reciprocal_rank_fusion([dense, sparse])}
        two = {p.id: p.score for p in reciprocal_rank_fusion([sparse, dense])}
        assert one == pytest.approx(two)

    def test_payload_from_first_list(self):
        dense = [ScoredPoint(id=1, score=0.9, payload={"content": "dense"})]
        sparse = [ScoredPoint(id=1, score=3.0, payload={"content": "sparse"})]
        fused = reciprocal_rank_fusion([dense, sparse])
        assert fused[0].payload == {"content": "dense"}

    def test_duplicate_in_one_list_counted_once(self):
        fused = reciprocal_rank_fusion([_hits("a", "a")])
        assert fused[0].score == pytest.approx(1 / 61)

    def test_empty_lists(self):
        assert reciprocal_rank_fusion([]) == []
        assert reciprocal_rank_fusion([[], []]) == []

    @pytest.mark.parametrize("k", [0, -5])
    def test_non_positive_k_rejected(self, k):
        with pytest.raises(ContractError):
            reciprocal_rank_fusion([_hits("a")], k=k)

    def test_rrf_score_helper(self):
        assert rrf_score([1, 3], k=10) == pytest.approx(1 / 11 + 1 / 13)
        assert rrf_score([]) == 0


class TestWeightedFusion:
    """Test weighted native-score fusion."""

    def test_default_weights_sum_scores(self):
        fused = weighted_fusion([_hits("a", scores=[0.5]), _hits("a", "b", scores=[2.0, 1.0])])
        by_id = {p.id: p.score for p in fused}
        assert by_id == pytest.approx({"a": 2.5, "b": 1.0})
        assert fused[0].id == "a"

    def test_explicit_weights(self):
        fused = weighted_fusion(
            [_hits("a", scores=[0.8]), _hits("b", scores=[4.0])],
            weights=[1.0, 0.1],
        )
        assert [p.id for p in fused] == ["a", "b"]
        assert fused[1].score == pytest.approx(0.4)

    def test_too_many_weights_rejected(self):
        with pytest.raises(ContractError):
            weighted_fusion([_hits("a")], weights=[1.0, 2.0])
