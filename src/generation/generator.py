"""
Answer generator: sends a built prompt to the LLM and returns the raw answer text.
Citations are resolved separately (see citations.py and renumber.py).
"""

from __future__ import annotations

from typing import Optional, Protocol

from src.errors import GenerationError

from .config import GenerationConfig


class CompletionClient(Protocol):
    def generate_single(
        self,
        prompt: str,
        max_tokens: int = ...,
        temperature: float = ...,
        max_attempts: int = ...,
    ) -> str:
        ...


class AnswerGenerator:
    """Generate raw answer text from a prompt using the LLM."""

    def __init__(self, client: CompletionClient, config: Optional[GenerationConfig] = None):
        self.client = client
        self.config = config or GenerationConfig()

    def generate(self, prompt: str) -> str:
        """Call the LLM once. Any failure surfaces as GenerationError."""
        try:
            text = self.client.generate_single(
                prompt,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                max_attempts=self.config.max_attempts,
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Answer generation failed: {e}") from e
        if not text or not text.strip():
            raise GenerationError("Answer generation failed: the model returned an empty answer.")
        return text
