"""
Prompt templates and sampling settings for routing, grounded answers and direct answers.
"""

from .config import GenerationConfig
from .prompts import (
    DIRECT_PROMPT,
    GENERAL_PROMPT,
    GROUNDED_PROMPT,
    ROUTER_PROMPT,
    format_history,
)

__all__ = [
    "GenerationConfig",
    "DIRECT_PROMPT",
    "GENERAL_PROMPT",
    "GROUNDED_PROMPT",
    "ROUTER_PROMPT",
    "format_history",
]
