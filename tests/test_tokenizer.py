"""
Unit tests for text tokenization and sparse vector synthesis.
"""

import pytest

from qdrant_vectordb.domain.tokenizer import (
    HASH_BUCKETS,
    MAX_QUERY_TERMS,
    hash_token,
    to_query_vector,
    to_sparse_vector,
    tokenize,
)


class TestTokenize:
    """Test word splitting."""

    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Hello, World!") == ["hello", "world"]

    def test_collapses_whitespace_runs(self):
        assert tokenize("  foo\t\tbar\n baz  ") == ["foo", "bar", "baz"]

    def test_keeps_underscores_and_digits(self):
        assert tokenize("fetch_data(42)") == ["fetch_data", "42"]

    def test_keeps_non_ascii_letters(self):
        assert tokenize("Café naïve, Straße!") == ["café", "naïve", "straße"]

    @pytest.mark.parametrize("text", ["", "   ", "!!! ... ???", "(){}[];"])
    def test_empty_or_punctuation_only(self, text):
        assert tokenize(text) == []


class TestHashToken:
    """Test bucket hashing."""

    def test_known_values(self):
        # h = h * 31 + code unit
        assert hash_token("a") == 97
        assert hash_token("ab") == 97 * 31 + 98
        assert hash_token("the") == (116 * 961 + 104 * 31 + 101) % HASH_BUCKETS

    def test_deterministic(self):
        assert hash_token("function") == hash_token("function")

    def test_long_tokens_wrap_into_range(self):
        token = "supercalifragilisticexpialidocious" * 4
        idx = hash_token(token)
        assert 0 <= idx < HASH_BUCKETS

    def test_custom_bucket_count(self):
        assert 0 <= hash_token("anything", buckets=16) < 16

    def test_non_ascii_token(self):
        assert 0 <= hash_token("café") < HASH_BUCKETS


class TestSparseVector:
    """Test sparse vector construction."""

    def test_same_text_same_vector(self):
        text = "const result = await fetchData();"
        assert to_sparse_vector(text) == to_sparse_vector(text)

    def test_case_and_punctuation_insensitive(self):
        a = to_sparse_vector("Hello, World!")
        b = to_sparse_vector("hello world")
        assert a == b
        assert set(a.indices) == {hash_token("hello"), hash_token("world")}

    def test_counts_aligned_with_first_seen_order(self):
        vec = to_sparse_vector("the cat the")
        assert vec.indices == [hash_token("the"), hash_token("cat")]
        assert vec.values == [2.0, 1.0]

    def test_indices_unique(self):
        vec = to_sparse_vector("a b a b a c")
        assert len(vec.indices) == len(set(vec.indices))
        assert len(vec.indices) == len(vec.values)
        assert sum(vec.values) == 6

    @pytest.mark.parametrize("text", ["", "?!.,;"])
    def test_empty_input_gives_empty_vector(self, text):
        vec = to_sparse_vector(text)
        assert vec.indices == []
        assert vec.values == []
        assert vec.is_empty()

    def test_to_dict_shape(self):
        vec = to_sparse_vector("x y")
        assert vec.to_dict() == {"indices": vec.indices, "values": vec.values}


class TestQueryVector:
    """Test query-side truncation."""

    def test_caps_number_of_terms(self):
        text = " ".join(f"term{i}" for i in range(MAX_QUERY_TERMS * 2))
        vec = to_query_vector(text)
        assert len(vec.indices) <= MAX_QUERY_TERMS
        assert vec.indices == to_sparse_vector(text).indices[:MAX_QUERY_TERMS]

    def test_short_text_unchanged(self):
        assert to_query_vector("function definition") == to_sparse_vector("function definition")
