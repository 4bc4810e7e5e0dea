"""
LLM client module for OpenAI-compatible APIs.
"""

from .client import LLMClient, create_client

__all__ = ["LLMClient", "create_client"]
