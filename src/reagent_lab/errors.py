"""Error hierarchy for reagent_lab."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class ReagentLabError(Exception):
    """Base exception for reagent_lab failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class InvalidInputError(ReagentLabError, ValueError):
    """Wrong shape or type for a name, quantity, or container."""


class InvalidNameError(InvalidInputError, TypeError):
    """Substance name is not a non-empty string."""


class InvalidListError(InvalidInputError, TypeError):
    """Known substances were not given as a list."""


class EmptyListError(InvalidInputError):
    """Known substances list is empty."""


class InvalidQuantityError(InvalidInputError):
    """Quantity is not a finite, non-negative number."""


class UnknownSubstanceError(ReagentLabError, LookupError):
    """Reference to a substance that was never declared."""


class DuplicateNameError(ReagentLabError, ValueError):
    """Name collision between substances or products."""


class SingularSystemError(ReagentLabError, ArithmeticError):
    """Production matrix of a cyclic component cannot be inverted."""


class CircularDependencyError(ReagentLabError, RuntimeError):
    """Acyclic resolution re-entered a product already in flight."""


class ConfigError(ReagentLabError, ValueError):
    """Configuration or definition file loading/validation error."""


__all__ = [
    "ReagentLabError",
    "InvalidInputError",
    "InvalidNameError",
    "InvalidListError",
    "EmptyListError",
    "InvalidQuantityError",
    "UnknownSubstanceError",
    "DuplicateNameError",
    "SingularSystemError",
    "CircularDependencyError",
    "ConfigError",
]
