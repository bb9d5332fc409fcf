"""Tests for the generation module."""
import json
import pytest
from unittest.mock import patch

from docqa.errors import GenerationError
from docqa.generation import (
    INSUFFICIENT_INFORMATION,
    NO_RESPONSE,
    AnswerGenerator,
    build_prompt,
)


def test_build_prompt():
    prompt = build_prompt("What is the budget?", "[Source: plan.pdf]\nThe budget is 5M.")

    assert "Answer the question using ONLY the provided context." in prompt
    assert INSUFFICIENT_INFORMATION in prompt
    assert "cite the source document name" in prompt
    assert "CONTEXT:\n---\n[Source: plan.pdf]\nThe budget is 5M.\n---" in prompt
    assert "QUESTION: What is the budget?" in prompt
    assert prompt.endswith("ANSWER:")


class TestAnswerGenerator:
    """Tests for AnswerGenerator class."""

    @patch("boto3.client")
    def test_init(self, mock_boto_client, monkeypatch):
        """Test generator initialization."""
        monkeypatch.setenv("AWS_BEDROCK_CLAUDE_MODEL", "anthropic.claude-3-haiku")

        generator = AnswerGenerator(aws_region="us-west-2")

        mock_boto_client.assert_called_once_with(
            service_name="bedrock-runtime",
            region_name="us-west-2"
        )
        assert generator.claude_model == "anthropic.claude-3-haiku"
        assert generator.temperature == 0.2

    def test_answer(self, mock_bedrock_client, claude_response):
        mock_bedrock_client.invoke_model.return_value = claude_response("  The budget is 5M (plan.pdf).  ")

        generator = AnswerGenerator(claude_model="anthropic.claude-3-haiku")
        answer = generator.answer("What is the budget?", "[Source: plan.pdf]\nThe budget is 5M.")

        assert answer == "The budget is 5M (plan.pdf)."

    def test_request_body(self, mock_bedrock_client, claude_response):
        mock_bedrock_client.invoke_model.return_value = claude_response("ok")

        generator = AnswerGenerator(claude_model="anthropic.claude-3-haiku", max_tokens=256)
        generator.answer("Question?", "Some context")

        call_kwargs = mock_bedrock_client.invoke_model.call_args.kwargs
        assert call_kwargs["modelId"] == "anthropic.claude-3-haiku"
        body = json.loads(call_kwargs["body"])
        assert body["temperature"] == 0.2
        assert body["max_tokens"] == 256
        prompt = body["messages"][0]["content"][0]["text"]
        assert "Some context" in prompt
        assert "QUESTION: Question?" in prompt

    def test_empty_response(self, mock_bedrock_client, claude_response):
        mock_bedrock_client.invoke_model.return_value = claude_response("")

        generator = AnswerGenerator(claude_model="anthropic.claude-3-haiku")

        assert generator.answer("Question?", "context") == NO_RESPONSE

    def test_service_error(self, mock_bedrock_client):
        mock_bedrock_client.invoke_model.side_effect = Exception("Throttled")

        generator = AnswerGenerator(claude_model="anthropic.claude-3-haiku")

        with pytest.raises(GenerationError) as exc_info:
            generator.answer("Question?", "context")

        assert "Throttled" in str(exc_info.value)
