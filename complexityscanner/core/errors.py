"""
Exceptions raised by the complexity engine.
"""

from typing import Any


class ComplexityError(Exception):
    """Base class for all complexity engine errors."""


class UnsupportedLanguageError(ComplexityError, ValueError):
    """
    Raised when an analyzer is constructed for a language without a
    condition table or state machine.

    This is the only error the engine surfaces to callers.
    """

    def __init__(self, language: Any):
        self.language = language
        super().__init__(f"Unsupported language: {language!r}")


class ScopeTrackingError(ComplexityError):
    """
    Raised when the token stream leaves scope tracking in an inconsistent
    state (unterminated braces, lines moving backwards, ...).

    The analyzer recovers from it by falling back to aggregate analysis.
    """
