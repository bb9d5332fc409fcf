"""
Question answering session over uploaded documents.

Ties extraction, chunking, the chunk pool, retrieval and generation together.
A failed upload or a failed answer is recorded on that document or message
and never ends the session.
"""
import argparse
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .chunking import Chunk, DocumentChunker
from .extraction import DocumentExtractor, guess_mime_type
from .generation import AnswerGenerator
from .pool import ChunkPool
from .retrieve import LexicalRetriever, format_context

load_dotenv()

WELCOME = (
    "Hello! Upload some documents (PDF or Word) and I can help you answer "
    "questions based on their content."
)
NO_DOCUMENTS = "Please upload some documents first so I can provide grounded answers."
ANSWER_FAILED = "I encountered an error while processing your request. Please try again."


@dataclass
class UploadedDocument:
    """An uploaded file and its processing state"""
    document_id: str
    name: str
    mime_type: str
    size: int
    status: str = "processing"  # processing, ready, error
    error: Optional[str] = None
    chunk_count: int = 0
    token_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_id": self.document_id,
            "name": self.name,
            "mime_type": self.mime_type,
            "size": self.size,
            "status": self.status,
            "error": self.error,
            "chunk_count": self.chunk_count,
            "token_count": self.token_count
        }


@dataclass
class Message:
    message_id: str
    role: str  # user, assistant
    content: str
    timestamp: float = field(default_factory=time.time)
    sources: List[Dict[str, str]] = field(default_factory=list)


class DocumentAssistant:
    """
    One chat session over a set of uploaded documents.

    Owns the chunk pool; documents enter through upload() and leave through
    remove_document(). Questions are answered one at a time.
    """

    def __init__(
        self,
        extractor: Optional[DocumentExtractor] = None,
        generator: Optional[AnswerGenerator] = None,
        chunker: Optional[DocumentChunker] = None,
        retriever: Optional[LexicalRetriever] = None
    ):
        self.extractor = extractor or DocumentExtractor()
        self.generator = generator or AnswerGenerator()
        self.chunker = chunker or DocumentChunker()
        self.retriever = retriever or LexicalRetriever()

        self.pool = ChunkPool()
        self.documents: Dict[str, UploadedDocument] = {}
        self.messages: List[Message] = [
            Message(message_id="welcome", role="assistant", content=WELCOME)
        ]
        self._answer_lock = threading.Lock()

    def upload(self, content: bytes, name: str, mime_type: str) -> UploadedDocument:
        """
        Extract, chunk and pool one document.

        Extraction errors mark the document as "error" instead of raising.
        """
        document = UploadedDocument(
            document_id=uuid.uuid4().hex[:8],
            name=name,
            mime_type=mime_type,
            size=len(content)
        )
        self.documents[document.document_id] = document

        try:
            text = self.extractor.extract(content, name, mime_type)
            chunks = self.chunker.chunk(text, document.document_id, name)
        except Exception as e:
            print(f"Error processing file: {name}: {e}")
            document.status = "error"
            document.error = str(e)
            return document

        self._store(document, chunks)
        return document

    def _store(self, document: UploadedDocument, chunks: List[Chunk]):
        document.chunk_count = self.pool.add(chunks)
        document.token_count = self.chunker.total_tokens(chunks)
        document.status = "ready"

    def upload_files(self, paths: List[str]) -> List[UploadedDocument]:
        """
        Extract, chunk and pool several files at once.

        Extraction runs in parallel, then every extracted document is chunked
        in parallel. A file that fails is marked "error" and the rest are
        still pooled, in input order.

        Args:
            paths: Files on disk

        Returns:
            One UploadedDocument per path, in input order
        """
        results = self.extractor.extract_files(paths)

        documents = []
        pending = []
        for path, result in zip(paths, results):
            try:
                size = os.path.getsize(path)
            except OSError:
                size = 0

            document = UploadedDocument(
                document_id=uuid.uuid4().hex[:8],
                name=os.path.basename(path),
                mime_type=guess_mime_type(path),
                size=size
            )
            self.documents[document.document_id] = document
            documents.append(document)

            if result["status"] == "success":
                pending.append((document, result["text"]))
            else:
                print(f"Error processing file: {document.name}: {result['error']}")
                document.status = "error"
                document.error = result["error"]

        chunk_lists = self.chunker.chunk_documents([
            (text, document.document_id, document.name) for document, text in pending
        ])
        for (document, _), chunks in zip(pending, chunk_lists):
            self._store(document, chunks)

        return documents

    def upload_file(self, path: str, mime_type: Optional[str] = None) -> UploadedDocument:
        mime_type = mime_type or guess_mime_type(path)
        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError as e:
            document = UploadedDocument(
                document_id=uuid.uuid4().hex[:8],
                name=os.path.basename(path),
                mime_type=mime_type,
                size=0,
                status="error",
                error=str(e)
            )
            self.documents[document.document_id] = document
            return document

        return self.upload(content, os.path.basename(path), mime_type)

    def remove_document(self, document_id: str) -> bool:
        """Forget a document and every chunk it contributed."""
        document = self.documents.pop(document_id, None)
        self.pool.remove_document(document_id)
        return document is not None

    def ask(self, question: str) -> Optional[Message]:
        """
        Answer a question from the uploaded documents.

        Returns:
            The assistant message appended to the conversation, or None for a
            blank question, which is ignored
        """
        if isinstance(question, str) and not question.strip():
            return None

        with self._answer_lock:
            self.messages.append(Message(
                message_id=uuid.uuid4().hex,
                role="user",
                content=question
            ))

            reply_id = uuid.uuid4().hex + "-ai"
            if not self.pool:
                reply = Message(message_id=reply_id, role="assistant", content=NO_DOCUMENTS)
                self.messages.append(reply)
                return reply

            results = self.retriever.search(question, self.pool)
            context = format_context(results)
            sources = [
                {"name": result.chunk.document_name, "text": result.chunk.text}
                for result in results
            ]

            try:
                answer = self.generator.answer(question, context)
            except Exception as e:
                print(f"Error generating answer: {e}")
                reply = Message(message_id=reply_id, role="assistant", content=ANSWER_FAILED)
            else:
                reply = Message(
                    message_id=reply_id,
                    role="assistant",
                    content=answer,
                    sources=sources
                )

            self.messages.append(reply)
            return reply


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Ask questions about PDF, Word and text documents"
    )
    parser.add_argument(
        "-f", "--file",
        action="append",
        default=[],
        metavar="FILE",
        help="Document to upload (repeatable)"
    )
    parser.add_argument(
        "-n", "--top-n",
        type=int,
        default=None,
        help="Number of chunks passed as context (default: RETRIEVAL_TOP_N or 15)"
    )

    args = parser.parse_args()

    assistant = DocumentAssistant(retriever=LexicalRetriever(top_n=args.top_n))
    print(WELCOME)

    if args.file:
        for document in assistant.upload_files(args.file):
            if document.status == "ready":
                print(f"  ✓ {document.name}: {document.chunk_count} chunks, {document.token_count} tokens")
            else:
                print(f"  ✗ {document.name}: {document.error}")

    while True:
        try:
            question = input("\nQuestion (blank to quit): ").strip()
        except EOFError:
            break
        if not question:
            break
        print(f"\n{assistant.ask(question).content}")
