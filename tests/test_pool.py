"""Tests for the chunk pool."""
import pytest

from docqa.errors import InvalidArgument
from docqa.pool import ChunkPool


class TestChunkPool:
    """Tests for ChunkPool class."""

    @pytest.fixture
    def pool(self, make_chunk):
        pool = ChunkPool()
        pool.add([make_chunk("a", 0, "alpha one"), make_chunk("a", 1, "alpha two")])
        pool.add([make_chunk("b", 0, "beta one")])
        pool.add([make_chunk("c", 0, "gamma one"), make_chunk("c", 1, "gamma two")])
        return pool

    def test_empty_pool(self):
        pool = ChunkPool()

        assert len(pool) == 0
        assert not pool
        assert pool.chunks() == ()
        assert pool.document_ids() == []

    def test_add_returns_count(self, make_chunk):
        pool = ChunkPool()

        added = pool.add([make_chunk("a", 0, "one"), make_chunk("a", 1, "two")])

        assert added == 2
        assert len(pool) == 2
        assert pool

    def test_add_empty(self):
        pool = ChunkPool()

        assert pool.add([]) == 0
        assert len(pool) == 0

    def test_insertion_order(self, pool):
        assert [c.chunk_id for c in pool.chunks()] == ["a-0", "a-1", "b-0", "c-0", "c-1"]
        assert [c.chunk_id for c in pool] == ["a-0", "a-1", "b-0", "c-0", "c-1"]

    def test_document_ids(self, pool):
        assert pool.document_ids() == ["a", "b", "c"]
        assert "b" in pool
        assert "z" not in pool

    def test_chunks_for(self, pool):
        assert [c.chunk_id for c in pool.chunks_for("c")] == ["c-0", "c-1"]
        assert pool.chunks_for("z") == []

    def test_remove_document(self, pool):
        removed = pool.remove_document("a")

        assert removed == 2
        assert "a" not in pool
        assert [c.chunk_id for c in pool] == ["b-0", "c-0", "c-1"]

    def test_remove_unknown_document(self, pool):
        assert pool.remove_document("z") == 0
        assert len(pool) == 5

    def test_document_can_return_after_removal(self, pool, make_chunk):
        pool.remove_document("b")

        pool.add([make_chunk("b", 0, "beta again")])

        assert [c.chunk_id for c in pool] == ["a-0", "a-1", "c-0", "c-1", "b-0"]

    def test_duplicate_document_rejected(self, pool, make_chunk):
        with pytest.raises(InvalidArgument):
            pool.add([make_chunk("a", 5, "alpha again")])

        assert len(pool) == 5

    def test_mixed_documents_rejected(self, make_chunk):
        pool = ChunkPool()

        with pytest.raises(InvalidArgument):
            pool.add([make_chunk("a", 0, "one"), make_chunk("b", 0, "two")])

        assert len(pool) == 0

    def test_non_chunk_rejected(self):
        pool = ChunkPool()

        with pytest.raises(InvalidArgument):
            pool.add([{"chunk_id": "a-0", "text": "raw dict"}])

    def test_snapshot_is_detached(self, pool):
        snapshot = pool.chunks()

        pool.remove_document("a")

        assert len(snapshot) == 5
        assert len(pool) == 3

    def test_clear(self, pool):
        pool.clear()

        assert len(pool) == 0
        assert pool.document_ids() == []
