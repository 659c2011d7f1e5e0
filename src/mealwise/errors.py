"""Exception types shared across the suggestion and grocery engines."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a request carries malformed dates or unknown slot indices."""


class ExternalServiceUnavailable(RuntimeError):
    """Raised when the external LLM endpoint cannot produce a usable response."""


__all__ = ["InvalidInputError", "ExternalServiceUnavailable"]
