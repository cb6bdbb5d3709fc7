"""Core complexity engine and data structures."""

from complexityscanner.core.types import (
    AnalysisResult, ComplexityScore, FunctionInfo, Language, Token, TokenKind,
)
from complexityscanner.core.errors import (
    ComplexityError, ScopeTrackingError, UnsupportedLanguageError,
)
from complexityscanner.core.conditions import LanguageConditions, conditions_for
from complexityscanner.core.tokenizer import Tokenizer
from complexityscanner.core.context import FunctionContext
from complexityscanner.core.analyzer import ComplexityAnalyzer
from complexityscanner.core.scorer import ComplexityScorer

__all__ = [
    "AnalysisResult",
    "ComplexityScore",
    "FunctionInfo",
    "Language",
    "Token",
    "TokenKind",
    "ComplexityError",
    "ScopeTrackingError",
    "UnsupportedLanguageError",
    "LanguageConditions",
    "conditions_for",
    "Tokenizer",
    "FunctionContext",
    "ComplexityAnalyzer",
    "ComplexityScorer",
]
