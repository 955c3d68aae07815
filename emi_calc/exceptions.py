"""Exceptions raised at the input boundary of the EMI planner.

The amortization engine itself never raises for bad business input: it
degrades to an empty schedule or a bounded partial one. These exceptions are
raised while turning user text (CLI options, form fields, JSON payloads) into
the value objects the engine consumes.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class EmiCalcError(Exception):
    """Base exception for the package.

    Attributes
    ----------
    message: str
        Human-readable error description.
    context: dict
        Extra details about the failing input (field name, raw value, ...).
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class InputError(EmiCalcError, ValueError):
    """Raised when a raw input value cannot be parsed or is out of range."""
