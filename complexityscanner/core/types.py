"""
Core data structures for complexity analysis.

Tokens flow out of the tokenizer, frames live inside the function
context while a function is open, and FunctionInfo / AnalysisResult
are the durable results handed back to callers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union

from complexityscanner.core.errors import UnsupportedLanguageError


class Language(Enum):
    """Languages supported by the complexity engine."""
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    GO = "go"
    PYTHON = "python"

    @classmethod
    def coerce(cls, value: Union["Language", str]) -> "Language":
        """Resolve a Language from an enum member or its string value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedLanguageError(value)


class TokenKind(Enum):
    """Lexical classes produced by the tokenizer."""
    CODE = "code"
    COMMENT = "comment"
    STRING = "string"
    WHITESPACE = "whitespace"
    NEWLINE = "newline"


@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    ``line`` is 1-based, ``column`` is the tab-expanded offset of the
    token within its line. Newline tokens synthesized for line breaks
    embedded in comments, strings or continuations are ``implicit``:
    they advance the line counter but do not end a logical line.
    """
    kind: TokenKind
    text: str
    line: int = 1
    column: int = 0
    implicit: bool = False

    @property
    def is_code(self) -> bool:
        return self.kind is TokenKind.CODE

    @property
    def is_newline(self) -> bool:
        return self.kind is TokenKind.NEWLINE


@dataclass
class FunctionFrame:
    """A function that is currently open in the function context."""
    name: str
    start_line: int
    parameter_count: int = 0
    nesting_depth_at_open: int = 0
    decision_count: int = 0
    token_count: int = 0
    code_lines: Set[int] = field(default_factory=set)

    @property
    def nloc(self) -> int:
        return len(self.code_lines)


@dataclass(frozen=True)
class FunctionInfo:
    """Complexity metrics for one detected function."""
    name: str
    start_line: int
    end_line: int
    cyclomatic_complexity: int
    nloc: int
    parameter_count: int
    token_count: int = 0
    nesting_depth: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "cyclomatic_complexity": self.cyclomatic_complexity,
            "nloc": self.nloc,
            "parameter_count": self.parameter_count,
            "token_count": self.token_count,
            "nesting_depth": self.nesting_depth,
        }


@dataclass
class AnalysisResult:
    """
    Result of a single ``ComplexityAnalyzer.analyze`` call.

    ``mode`` is ``"function"`` when per-function detection succeeded and
    ``"aggregate"`` when the whole-text fallback produced the numbers.
    """
    total_ccn: int
    nloc: int
    token_count: int
    decision_points: int
    functions: List[FunctionInfo] = field(default_factory=list)
    language: Optional[Language] = None
    filename: str = "unknown"
    mode: str = "function"

    @property
    def function_count(self) -> int:
        return len(self.functions)

    @property
    def max_function_ccn(self) -> int:
        return max((f.cyclomatic_complexity for f in self.functions), default=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_ccn": self.total_ccn,
            "nloc": self.nloc,
            "token_count": self.token_count,
            "decision_points": self.decision_points,
            "language": self.language.value if self.language else None,
            "filename": self.filename,
            "mode": self.mode,
            "functions": [f.to_dict() for f in self.functions],
        }


@dataclass(frozen=True)
class ComplexityScore:
    """Normalized 1-10 review score derived from an AnalysisResult."""
    score: int
    ccn: int
    nloc: int
    function_count: int
    ccn_score: int
    size_score: int

    @property
    def breakdown(self) -> Dict[str, int]:
        return {"ccn_score": self.ccn_score, "size_score": self.size_score}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "ccn": self.ccn,
            "nloc": self.nloc,
            "function_count": self.function_count,
            "breakdown": self.breakdown,
        }
