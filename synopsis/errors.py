"""Error taxonomy for the summarization core.

Every failure the core reports is a :class:`SummarizationError` carrying a
``kind`` tag, so the HTTP layer can log it by kind while still collapsing it
into a bare 500 for the caller.
"""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid settings detected while wiring components."""


class SummarizationError(Exception):
    kind = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind} error: {self.message}" if self.message else f"{self.kind} error"


class SummarizationRuntimeError(SummarizationError, RuntimeError):
    """An inference call failed; the running loop is aborted."""

    kind = "runtime"


class ModelLoadError(SummarizationRuntimeError):
    kind = "model_load"


class DispatchError(SummarizationError):
    """The single summarization worker is overloaded or shut down."""

    kind = "dispatch"


class InvalidRangeError(SummarizationError, ValueError):
    kind = "invalid_range"


__all__ = [
    "ConfigurationError",
    "DispatchError",
    "InvalidRangeError",
    "ModelLoadError",
    "SummarizationError",
    "SummarizationRuntimeError",
]
