"""
Sliding-window chunking of extracted document text.

Windows are measured in Unicode code points (Python ``str`` indexing), so a
window boundary may fall inside a grapheme cluster such as a flag emoji or a
letter followed by a combining accent.
"""
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import tiktoken
from dotenv import load_dotenv

from .errors import InvalidArgument, InvalidConfiguration

load_dotenv()

DEFAULT_CHUNK_SIZE = 800
DEFAULT_OVERLAP = 200
MIN_CHUNK_LENGTH = 50


def env_int(name: str, default: int, error: type) -> int:
    """Read an integer setting from the environment, raising error when it is not one."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise error(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class Chunk:
    """A trimmed slice of one document's text"""
    chunk_id: str
    document_id: str
    document_name: str
    text: str

    def __post_init__(self):
        if not isinstance(self.document_id, str) or not self.document_id:
            raise InvalidArgument("Chunk document_id must be a non-empty string")
        if not isinstance(self.text, str) or self.text != self.text.strip():
            raise InvalidArgument(f"Chunk {self.chunk_id} text must be trimmed")
        if len(self.text) <= MIN_CHUNK_LENGTH:
            raise InvalidArgument(
                f"Chunk {self.chunk_id} text must be longer than {MIN_CHUNK_LENGTH} characters"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunk_id": self.chunk_id,
            "document_id": self.document_id,
            "document_name": self.document_name,
            "text": self.text
        }


def validate_window(chunk_size: int, overlap: int):
    """Reject window settings that cannot advance through the text."""
    if chunk_size <= 0:
        raise InvalidConfiguration(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise InvalidConfiguration(f"overlap must not be negative, got {overlap}")
    if overlap >= chunk_size:
        raise InvalidConfiguration(
            f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
        )


def window_starts(length: int, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_OVERLAP) -> List[int]:
    """Offsets of every window before the minimum-length filter."""
    validate_window(chunk_size, overlap)
    return list(range(0, length, chunk_size - overlap))


def chunk_text(
    text: str,
    document_id: str,
    document_name: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP
) -> List[Chunk]:
    """
    Split text into overlapping chunks.

    A window of ``chunk_size`` characters advances by ``chunk_size - overlap``
    until it starts past the end of the text. Each window is stripped and kept
    only when longer than MIN_CHUNK_LENGTH; ids count kept chunks only.

    Args:
        text: Full extracted document text
        document_id: Owning document identifier
        document_name: Display name copied onto every chunk
        chunk_size: Window length in characters
        overlap: Characters shared by consecutive windows

    Returns:
        Chunks in document order

    Raises:
        InvalidConfiguration: If overlap is not smaller than chunk_size
    """
    starts = window_starts(len(text), chunk_size, overlap)

    chunks = []
    for start in starts:
        window = text[start:start + chunk_size].strip()
        if len(window) > MIN_CHUNK_LENGTH:
            chunks.append(Chunk(
                chunk_id=f"{document_id}-{len(chunks)}",
                document_id=document_id,
                document_name=document_name,
                text=window
            ))

    return chunks


class DocumentChunker:
    """
    Chunker bound to one window configuration.

    Settings fall back to CHUNK_SIZE / CHUNK_OVERLAP from the environment and
    are validated once, at construction.
    """

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        overlap: Optional[int] = None,
        max_workers: int = 4
    ):
        self.chunk_size = chunk_size if chunk_size is not None else env_int(
            "CHUNK_SIZE", DEFAULT_CHUNK_SIZE, InvalidConfiguration
        )
        self.overlap = overlap if overlap is not None else env_int(
            "CHUNK_OVERLAP", DEFAULT_OVERLAP, InvalidConfiguration
        )
        validate_window(self.chunk_size, self.overlap)
        self.max_workers = max_workers
        self._tokenizer = None

    def chunk(self, text: str, document_id: str, document_name: str) -> List[Chunk]:
        return chunk_text(text, document_id, document_name, self.chunk_size, self.overlap)

    def window_starts(self, length: int) -> List[int]:
        return window_starts(length, self.chunk_size, self.overlap)

    def chunk_documents(self, documents: Sequence[Tuple[str, str, str]]) -> List[List[Chunk]]:
        """
        Chunk several documents concurrently.

        Args:
            documents: (text, document_id, document_name) triples

        Returns:
            One chunk list per document, in input order
        """
        if not documents:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(lambda doc: self.chunk(*doc), documents))

    def count_tokens(self, text: str) -> int:
        """Count tokens in text"""
        # Using cl100k_base for consistency with the prompt budget
        if self._tokenizer is None:
            self._tokenizer = tiktoken.get_encoding("cl100k_base")
        return len(self._tokenizer.encode(text))

    def total_tokens(self, chunks: Iterable[Chunk]) -> int:
        return sum(self.count_tokens(chunk.text) for chunk in chunks)
