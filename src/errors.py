from __future__ import annotations

from typing import Any, Optional


class DealFinderError(Exception):
    """Base error rendered as ``{"error": ..., "details": ...}``."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class ConfigurationError(DealFinderError):
    """A required provider credential is missing."""


class UpstreamFetchError(DealFinderError):
    """The shopping search provider call failed."""


class StorageError(DealFinderError):
    """Reading from or writing to the deal store failed."""


class AnalysisError(DealFinderError):
    """The language model failed to answer a deals question."""


class PlanGenerationError(DealFinderError):
    """The language model failed to produce a search plan."""
