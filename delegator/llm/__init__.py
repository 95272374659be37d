"""
LLM client module for OpenAI-compatible completion APIs.
"""

from .client import CompletionClient, create_client, is_quota_exhausted, is_rate_limited

__all__ = ["CompletionClient", "create_client", "is_quota_exhausted", "is_rate_limited"]
