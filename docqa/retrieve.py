"""
Lexical retrieval over the chunk pool.

Features:
- Query term extraction (lowercase, whitespace split, short terms dropped)
- Substring overlap scoring per chunk
- Optional concurrent scoring for large pools
- Stable ranking and context formatting for the generation prompt
"""
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from dotenv import load_dotenv

from .chunking import Chunk, env_int
from .errors import InvalidArgument

load_dotenv()

DEFAULT_TOP_N = 15
MIN_TERM_LENGTH = 4
SOURCE_HEADER = "[Source: {name}]\n{text}"
CONTEXT_SEPARATOR = "\n\n---\n\n"


@dataclass
class ScoredChunk:
    """A chunk with its lexical overlap score for one query."""
    chunk: Chunk
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunk_id": self.chunk.chunk_id,
            "score": self.score,
            "document_name": self.chunk.document_name,
            "text": self.chunk.text
        }


def _check_query(query: Any):
    if not isinstance(query, str):
        raise InvalidArgument(f"Query must be a string, got {type(query).__name__}")


def _check_top_n(top_n: Any):
    # bool is an int subclass; True is not a ranking size
    if isinstance(top_n, bool) or not isinstance(top_n, int):
        raise InvalidArgument(f"top_n must be an integer, got {top_n!r}")
    if top_n < 0:
        raise InvalidArgument(f"top_n must not be negative, got {top_n}")


def query_terms(query: str) -> List[str]:
    """
    Lowercase the query and keep whitespace-separated terms longer than 3 characters.

    Duplicates are kept; each occurrence scores separately.
    """
    _check_query(query)
    return [term for term in re.split(r"\s+", query.lower()) if len(term) >= MIN_TERM_LENGTH]


def score_chunk(terms: List[str], chunk: Chunk) -> int:
    """Count the terms found anywhere inside the chunk text, including inside longer words."""
    text = chunk.text.lower()
    return sum(1 for term in terms if term in text)


def format_context(results: Iterable[ScoredChunk]) -> str:
    """Render ranked chunks as one context block, highest score first."""
    return CONTEXT_SEPARATOR.join(
        SOURCE_HEADER.format(name=result.chunk.document_name, text=result.chunk.text)
        for result in results
    )


class LexicalRetriever:
    """
    Keyword-overlap retriever.

    Scores every chunk in the pool by how many query terms it contains and
    keeps the best top_n. Equal scores keep pool order.
    """

    def __init__(self, top_n: Optional[int] = None, max_workers: Optional[int] = None):
        """
        Initialize the retriever.

        Args:
            top_n: Default number of chunks to keep (RETRIEVAL_TOP_N or 15)
            max_workers: Score with a thread pool of this size; None scores inline
        """
        self.top_n = top_n if top_n is not None else env_int(
            "RETRIEVAL_TOP_N", DEFAULT_TOP_N, InvalidArgument
        )
        _check_top_n(self.top_n)
        self.max_workers = max_workers

    def score(self, query: str, pool: Iterable[Chunk]) -> List[ScoredChunk]:
        """
        Score and rank every chunk in the pool.

        Scoring may run concurrently, ranking is always a single stable sort.

        Returns:
            All chunks as ScoredChunk, score descending, ties in pool order
        """
        terms = query_terms(query)
        chunks = list(pool)

        if self.max_workers and len(chunks) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                scores = list(executor.map(lambda chunk: score_chunk(terms, chunk), chunks))
        else:
            scores = [score_chunk(terms, chunk) for chunk in chunks]

        order = sorted(range(len(chunks)), key=lambda i: (-scores[i], i))
        return [ScoredChunk(chunk=chunks[i], score=scores[i]) for i in order]

    def search(self, query: str, pool: Iterable[Chunk], top_n: Optional[int] = None) -> List[ScoredChunk]:
        """
        Return the top_n highest scoring chunks.

        Args:
            query: User question
            pool: Chunks to search, in insertion order
            top_n: Number of results (defaults to the retriever's setting)

        Returns:
            At most top_n ranked results
        """
        _check_query(query)
        top_n = self.top_n if top_n is None else top_n
        _check_top_n(top_n)
        return self.score(query, pool)[:top_n]

    def select_context(self, query: str, pool: Iterable[Chunk], top_n: Optional[int] = None) -> str:
        """Build the grounding context for query; an empty pool gives an empty string."""
        return format_context(self.search(query, pool, top_n))

    def print_results(self, results: List[ScoredChunk], query: str, show_score: bool = True):
        """Pretty print search results."""
        print(f"\nQuery: '{query}'")
        print(f"Found {len(results)} results")
        print("=" * 80)

        for rank, result in enumerate(results, 1):
            if show_score:
                print(f"\n{rank}. Score: {result.score}")
            else:
                print(f"\nRank {rank}")
            print(f"   Chunk: {result.chunk.chunk_id}")
            print(f"   Document: {result.chunk.document_name}")

            preview = result.chunk.text[:200].replace('\n', ' ')
            print(f"   Preview: {preview}...")


def select_context(query: str, pool: Iterable[Chunk], top_n: int = DEFAULT_TOP_N) -> str:
    """
    Select the most relevant chunks for query and format them as context.

    Args:
        query: User question
        pool: Chunks across all uploaded documents
        top_n: Maximum number of chunks in the context

    Returns:
        Formatted context, or "" when the pool is empty
    """
    return LexicalRetriever(top_n=top_n).select_context(query, pool)
