"""Configuration for answer generation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GenerationConfig:
    """Sampling settings passed to every completion request."""

    max_tokens: int = 2048
    temperature: float = 0.1
