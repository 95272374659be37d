"""
Exception hierarchy shared by providers, executors and the orchestrator.
"""

from __future__ import annotations


class DelegatorError(Exception):
    """Base class for all errors raised by the delegator package."""


class TransientProviderError(DelegatorError):
    """Rate-limit style failure that is still failing after all retries."""


class QuotaExhaustedError(DelegatorError):
    """Permanent quota exhaustion. Never retried."""


class ClassificationParseError(DelegatorError):
    """Router response could not be parsed as a JSON decision."""


class ProviderUnavailableError(DelegatorError):
    """Knowledge store could not be queried, even through the fallback scan."""


class RouteExecutionError(DelegatorError):
    """Any other failure inside a route executor."""


class ImageGenerationError(RouteExecutionError):
    """Image endpoint returned a non-success response."""


class ChartConfigError(DelegatorError):
    """Chart templates are missing or malformed. Raised at startup."""


class MissingCredentialsError(DelegatorError, ValueError):
    """No API key configured for the completion provider."""
