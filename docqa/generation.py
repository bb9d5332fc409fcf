"""
Grounded answer generation with Claude on AWS Bedrock.
"""
import json
import os
from typing import Optional

import boto3
from dotenv import load_dotenv

from .errors import GenerationError

load_dotenv()

TEMPERATURE = 0.2
NO_RESPONSE = "No response generated."
INSUFFICIENT_INFORMATION = (
    "I'm sorry, I don't have enough information in the uploaded documents to answer that."
)

PROMPT_TEMPLATE = """You are an expert document assistant. I will provide you with chunks of text from several documents.
Answer the question using ONLY the provided context.
If the answer is not in the context, say "{insufficient}"

Always cite the source document name if possible.

CONTEXT:
---
{context}
---

QUESTION: {question}

ANSWER:"""


def build_prompt(question: str, context: str) -> str:
    return PROMPT_TEMPLATE.format(
        insufficient=INSUFFICIENT_INFORMATION,
        context=context,
        question=question
    )


class AnswerGenerator:
    """Answers questions from retrieved context through a single Claude call."""

    def __init__(
        self,
        aws_region: Optional[str] = None,
        claude_model: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = TEMPERATURE
    ):
        """
        Initialize the generator.

        Args:
            aws_region: AWS region for Bedrock
            claude_model: Claude model ID (AWS_BEDROCK_CLAUDE_MODEL)
            max_tokens: Upper bound on answer length
            temperature: Sampling temperature, kept low for factual answers
        """
        aws_region = aws_region or os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        self.bedrock_client = boto3.client(
            service_name="bedrock-runtime",
            region_name=aws_region
        )
        self.claude_model = claude_model or os.getenv("AWS_BEDROCK_CLAUDE_MODEL")
        self.max_tokens = max_tokens
        self.temperature = temperature

    def _call_claude(self, prompt: str) -> str:
        """Call Claude via AWS Bedrock."""
        native_request = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": [{"type": "text", "text": prompt}]}]
        }

        response = self.bedrock_client.invoke_model(
            modelId=self.claude_model,
            body=json.dumps(native_request)
        )

        model_response = json.loads(response["body"].read())
        content = model_response.get("content") or []
        return "".join(part.get("text", "") for part in content).strip()

    def answer(self, question: str, context: str) -> str:
        """
        Answer question using only the given context.

        Raises:
            GenerationError: If the Bedrock call fails or returns malformed JSON
        """
        prompt = build_prompt(question, context)

        try:
            text = self._call_claude(prompt)
        except Exception as e:
            raise GenerationError(f"Can't invoke '{self.claude_model}'. Reason: {e}") from e

        return text or NO_RESPONSE
