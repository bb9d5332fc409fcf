"""
Plain-text extraction for uploaded documents.

PDF and Word files are partitioned by the Unstructured API; plain text is
decoded locally.
"""
import mimetypes
import os
import pathlib
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional

import unstructured_client
from dotenv import load_dotenv
from tqdm import tqdm
from unstructured_client.models import operations, shared

from .errors import ExtractionError, UnsupportedFileType

load_dotenv()

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PLAIN_TEXT = "text/plain"
SUPPORTED_TYPES = (PDF, DOCX, PLAIN_TEXT)


def guess_mime_type(filename: str) -> str:
    """Guess a MIME type from the file suffix, empty string when unknown."""
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None and pathlib.Path(filename).suffix.lower() == ".docx":
        return DOCX
    return mime_type or ""


class DocumentExtractor:
    def __init__(self, api_key: Optional[str] = None, max_workers: int = 5):
        self.client = unstructured_client.UnstructuredClient(
            api_key_auth=api_key or os.getenv("UNSTRUCTURED_API_KEY")
        )
        self.max_workers = max_workers

    def _get_partition_parameters(self, mime_type):
        """Get partition parameters based on file type"""
        params = {
            "languages": ['eng'],
        }

        # PDF: hi_res handles scanned pages and multi-column layouts
        if mime_type == PDF:
            params.update({
                "strategy": shared.Strategy.HI_RES,
                "split_pdf_page": True,
                "split_pdf_allow_failed": True,
                "split_pdf_concurrency_level": 10,
            })
        else:
            params.update({
                "strategy": shared.Strategy.FAST,
            })

        return params

    def _partition(self, content: bytes, file_name: str, mime_type: str) -> str:
        params = self._get_partition_parameters(mime_type)
        req = operations.PartitionRequest(
            partition_parameters=shared.PartitionParameters(
                files=shared.Files(
                    content=content,
                    file_name=file_name,
                ),
                **params
            ),
        )

        try:
            res = self.client.general.partition(request=req)
        except Exception as e:
            raise ExtractionError(f"Could not extract text from {file_name}: {e}") from e

        texts = [element.get("text", "") for element in res.elements or []]
        return "\n\n".join(text for text in texts if text.strip())

    def extract(self, content: bytes, file_name: str, mime_type: str) -> str:
        """
        Extract plain text from a file payload.

        Args:
            content: Raw file bytes
            file_name: Original file name (sent to the partition API)
            mime_type: Declared MIME type of the upload

        Returns:
            Extracted text

        Raises:
            UnsupportedFileType: For types other than PDF, DOCX and plain text
            ExtractionError: If the partition API fails
        """
        if mime_type not in SUPPORTED_TYPES:
            raise UnsupportedFileType(mime_type)

        if mime_type == PLAIN_TEXT:
            return content.decode("utf-8-sig", errors="replace")

        return self._partition(content, file_name, mime_type)

    def extract_file(self, path: str, mime_type: Optional[str] = None) -> str:
        """Extract text from a file on disk, guessing the type from its suffix."""
        mime_type = mime_type or guess_mime_type(path)
        if mime_type not in SUPPORTED_TYPES:
            raise UnsupportedFileType(mime_type)

        with open(path, "rb") as file_content:
            content = file_content.read()

        return self.extract(content, os.path.basename(path), mime_type)

    def extract_single_file(self, path: str) -> Dict[str, Any]:
        """Extract one file and report the outcome instead of raising."""
        try:
            text = self.extract_file(path)
            return {
                "status": "success",
                "path": path,
                "filename": os.path.basename(path),
                "text": text,
                "characters": len(text)
            }
        except Exception as e:
            return {
                "status": "failed",
                "path": path,
                "filename": os.path.basename(path),
                "error": str(e)
            }

    def extract_files(self, paths: List[str]) -> List[Dict[str, Any]]:
        """Extract several files in parallel; results follow the input order."""
        results: List[Optional[Dict[str, Any]]] = [None] * len(paths)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_idx = {
                executor.submit(self.extract_single_file, path): idx
                for idx, path in enumerate(paths)
            }

            with tqdm(total=len(paths), desc="Extracting documents", unit="file") as pbar:
                for future in as_completed(future_to_idx):
                    result = future.result()
                    results[future_to_idx[future]] = result

                    if result["status"] == "success":
                        pbar.set_postfix_str(f"✓ {result['filename']}")
                    else:
                        pbar.set_postfix_str(f"✗ {result['filename']}")

                    pbar.update(1)

        self._print_summary(results)
        return results

    def _print_summary(self, results):
        """Print extraction summary"""
        successful = [r for r in results if r["status"] == "success"]
        failed = [r for r in results if r["status"] == "failed"]

        print("\n" + "="*60)
        print(f"Extraction Summary:")
        print(f"  Total files: {len(results)}")
        print(f"  Successful: {len(successful)}")
        print(f"  Failed: {len(failed)}")

        if successful:
            print(f"\n✓ Successfully extracted:")
            for r in successful:
                print(f"  - {r['filename']:40} | {r['characters']:8} chars")

        if failed:
            print(f"\n✗ Failed:")
            for r in failed:
                print(f"  - {r['filename']}: {r['error']}")

        print("="*60)
