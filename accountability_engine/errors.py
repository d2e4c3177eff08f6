"""Typed failures raised by the calculation engine."""

from __future__ import annotations


class EngineError(ValueError):
    """Base class for every engine failure; each one is local to one metric."""


class InvalidConfiguration(EngineError):
    """Non-positive target, window or half-life, or a malformed record."""


class OutOfRange(EngineError):
    """A requested date or percent lies outside its valid range."""


class InsufficientData(EngineError):
    """Not enough history points to fit a trend."""


class NotApplicable(EngineError):
    """The metric does not apply to this task or goal shape."""
