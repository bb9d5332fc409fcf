"""
In-memory pool of chunks across all uploaded documents.
"""
from typing import Iterator, List, Sequence, Tuple

from .chunking import Chunk
from .errors import InvalidArgument


class ChunkPool:
    """
    Insertion-ordered chunk container.

    Chunks enter one document at a time and leave only through
    remove_document, so no chunk outlives its document.
    """

    def __init__(self):
        self._chunks: List[Chunk] = []

    def add(self, chunks: Sequence[Chunk]) -> int:
        """
        Append the chunks of a single document.

        Args:
            chunks: Chunks produced for one document

        Returns:
            Number of chunks added
        """
        chunks = list(chunks)
        if not chunks:
            return 0

        for chunk in chunks:
            if not isinstance(chunk, Chunk):
                raise InvalidArgument(f"Expected Chunk, got {type(chunk).__name__}")

        document_ids = {chunk.document_id for chunk in chunks}
        if len(document_ids) > 1:
            raise InvalidArgument("add() accepts chunks of exactly one document")

        document_id = chunks[0].document_id
        if document_id in self:
            raise InvalidArgument(f"Document {document_id} is already in the pool")

        self._chunks.extend(chunks)
        return len(chunks)

    def remove_document(self, document_id: str) -> int:
        """Drop every chunk owned by document_id; returns how many were removed."""
        kept = [chunk for chunk in self._chunks if chunk.document_id != document_id]
        removed = len(self._chunks) - len(kept)
        self._chunks = kept
        return removed

    def chunks(self) -> Tuple[Chunk, ...]:
        return tuple(self._chunks)

    def chunks_for(self, document_id: str) -> List[Chunk]:
        return [chunk for chunk in self._chunks if chunk.document_id == document_id]

    def document_ids(self) -> List[str]:
        seen = {}
        for chunk in self._chunks:
            seen.setdefault(chunk.document_id, None)
        return list(seen)

    def clear(self):
        self._chunks = []

    def __iter__(self) -> Iterator[Chunk]:
        return iter(tuple(self._chunks))

    def __len__(self) -> int:
        return len(self._chunks)

    def __bool__(self) -> bool:
        return bool(self._chunks)

    def __contains__(self, document_id: object) -> bool:
        return any(chunk.document_id == document_id for chunk in self._chunks)
