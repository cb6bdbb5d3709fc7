"""
Complexity Scanner

A language-agnostic cyclomatic complexity engine for TypeScript,
JavaScript, Go and Python, with per-function metrics and a 1-10 review
score.
"""

__version__ = "1.0.0"
__author__ = "Complexity Scanner Team"

from complexityscanner.core.types import AnalysisResult, ComplexityScore, FunctionInfo, Language
from complexityscanner.core.errors import ComplexityError, UnsupportedLanguageError
from complexityscanner.core.analyzer import ComplexityAnalyzer
from complexityscanner.core.scorer import ComplexityScorer
from complexityscanner.config import AnalyzerConfig


def analyze_code(code: str, filename: str = "unknown") -> AnalysisResult:
    """Analyze source text, inferring the language from ``filename``."""
    return ComplexityAnalyzer.for_file(filename).analyze(code)


def score_segment(code: str, filename: str = "unknown") -> ComplexityScore:
    """Analyze and score source text on the 1-10 scale."""
    return ComplexityScorer().score_code(code, filename)


__all__ = [
    "ComplexityAnalyzer",
    "ComplexityScorer",
    "AnalysisResult",
    "ComplexityScore",
    "FunctionInfo",
    "Language",
    "ComplexityError",
    "UnsupportedLanguageError",
    "AnalyzerConfig",
    "analyze_code",
    "score_segment",
]
