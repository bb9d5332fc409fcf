"""
DocQA - Document Question Answering over Uploaded Files

Extracts text from PDF, Word and plain-text uploads, splits it into
overlapping chunks, selects the chunks that share the most keywords with a
question, and asks Claude on AWS Bedrock to answer from that context alone.
"""

from .errors import (
    DocQAError,
    InvalidConfiguration,
    InvalidArgument,
    UnsupportedFileType,
    ExtractionError,
    GenerationError,
)
from .chunking import Chunk, DocumentChunker, chunk_text
from .pool import ChunkPool
from .retrieve import LexicalRetriever, ScoredChunk, select_context
from .extraction import DocumentExtractor
from .generation import AnswerGenerator
from .assistant import DocumentAssistant, UploadedDocument, Message

__all__ = [
    "DocQAError",
    "InvalidConfiguration",
    "InvalidArgument",
    "UnsupportedFileType",
    "ExtractionError",
    "GenerationError",
    "Chunk",
    "DocumentChunker",
    "chunk_text",
    "ChunkPool",
    "LexicalRetriever",
    "ScoredChunk",
    "select_context",
    "DocumentExtractor",
    "AnswerGenerator",
    "DocumentAssistant",
    "UploadedDocument",
    "Message",
]
