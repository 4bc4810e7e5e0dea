"""
LLM client for OpenAI-compatible chat completion APIs.
"""

from __future__ import annotations

import logging
import os
import random
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI

from src.errors import GenerationError

# Load .env file if it exists
project_root = Path(__file__).resolve().parents[2]
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)


LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
LLM_API_KEY = os.getenv("LLM_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")

logger = logging.getLogger(__name__)


def _is_rate_limit(error: Exception) -> bool:
    text = str(error)
    return "429" in text or "rate limit" in text.lower() or "concurrency" in text.lower()


class LLMClient:
    """OpenAI-compatible chat client."""

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.model_name = model_name or LLM_MODEL
        self.base_url = base_url or LLM_BASE_URL
        api_key = api_key or LLM_API_KEY
        if not api_key:
            raise ValueError("API key required. Set LLM_API_KEY.")
        self.client = OpenAI(base_url=self.base_url, api_key=api_key)

    def generate_single(
        self,
        prompt: str,
        max_tokens: int = 512,
        temperature: float = 0.3,
        max_attempts: int = 1,
    ) -> str:
        """
        Generate text for a single prompt.

        Only rate-limit errors are retried, and only when max_attempts > 1.

        Raises:
            GenerationError: transport or provider failure, or an empty completion.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self.client.chat.completions.create(
                    model=self.model_name,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=max_tokens,
                    temperature=temperature,
                )
            except Exception as e:
                if _is_rate_limit(e) and attempt < max_attempts:
                    backoff = (2 ** attempt) * 3 + random.uniform(0, 3)
                    logger.warning(
                        "Rate limit hit. Retrying in %s s (attempt %s/%s)",
                        round(backoff, 1),
                        attempt,
                        max_attempts,
                    )
                    time.sleep(backoff)
                    continue
                logger.error("Error calling API: %s", e)
                raise GenerationError(f"Answer generation failed: {e}") from e
            break

        if not response.choices:
            logger.warning("Empty response from API")
            raise GenerationError("Answer generation failed: the model returned no choices.")
        choice = response.choices[0]
        text = (choice.message.content or "").strip()
        if not text:
            logger.warning(
                "Empty content in response (finish_reason=%s)",
                getattr(choice, "finish_reason", "?"),
            )
            raise GenerationError("Answer generation failed: the model returned an empty answer.")
        return text


def create_client(
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> LLMClient:
    """Create an OpenAI-compatible client from arguments or LLM_* env vars."""
    return LLMClient(model_name=model_name, api_key=api_key, base_url=base_url)
