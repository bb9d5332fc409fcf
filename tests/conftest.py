"""Shared pytest fixtures for docqa tests."""
import json
import pytest
from unittest.mock import MagicMock, patch

from docqa.chunking import Chunk


def pytest_addoption(parser):
    """Add command line options for integration tests."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires API credentials)"
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires --run-integration)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is passed."""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="Need --run-integration to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def mock_bedrock_client():
    """Mock AWS Bedrock client for generation tests."""
    with patch("boto3.client") as mock_client:
        client_instance = MagicMock()
        mock_client.return_value = client_instance
        yield client_instance


@pytest.fixture
def claude_response():
    """Build a mock invoke_model response carrying the given text."""
    def _build(text):
        response_body = MagicMock()
        response_body.read.return_value = json.dumps({"content": [{"text": text}]})
        return {"body": response_body}
    return _build


@pytest.fixture
def make_chunk():
    """Build a valid Chunk; short texts are padded with dots to pass the length check."""
    def _make(document_id, index, text, document_name=None):
        if len(text) <= 50:
            text = text + " " + "." * 60
        return Chunk(
            chunk_id=f"{document_id}-{index}",
            document_id=document_id,
            document_name=document_name or f"{document_id}.pdf",
            text=text
        )
    return _make


@pytest.fixture
def sample_text():
    """A 2000-character text with no whitespace."""
    return "".join(chr(ord("a") + i % 26) for i in range(2000))
