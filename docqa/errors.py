"""
Exceptions raised by the document QA pipeline.
"""


class DocQAError(Exception):
    """Base class for all pipeline errors."""


class InvalidConfiguration(DocQAError):
    """Chunking parameters that would never advance the window."""


class InvalidArgument(DocQAError):
    """Malformed query, ranking size or chunk record."""


class UnsupportedFileType(DocQAError):
    """File type outside PDF, Word and plain text."""

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported file type: {mime_type}")
        self.mime_type = mime_type


class ExtractionError(DocQAError):
    """Text extraction service failed for a document."""


class GenerationError(DocQAError):
    """Answer generation service failed for a question."""
