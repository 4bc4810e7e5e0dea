"""Configuration for answer generation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GenerationConfig:
    """Settings for answer generation."""

    max_tokens: int = 512
    temperature: float = 0.3
    # 1 = no retries; the pipeline surfaces the first failure.
    max_attempts: int = 1
