"""
Per-language decision point tables.

Each table lists, by category, the literal tokens that add one to the
cyclomatic complexity of the enclosing function. Tables are frozen and
shared read-only between analyzers.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple

from complexityscanner.core.types import Language


@dataclass(frozen=True)
class LanguageConditions:
    """Decision point literals for one language, grouped by category."""
    control_flow: Tuple[str, ...] = ()
    logical_operators: Tuple[str, ...] = ()
    case_keywords: Tuple[str, ...] = ()
    ternary_operators: Tuple[str, ...] = ()
    exception_handling: Tuple[str, ...] = ()
    tokens: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "tokens", frozenset(self.ordered()))

    def ordered(self) -> List[str]:
        """All decision literals, category by category."""
        return [
            *self.control_flow,
            *self.logical_operators,
            *self.case_keywords,
            *self.ternary_operators,
            *self.exception_handling,
        ]

    def matches(self, text: str) -> bool:
        return text in self.tokens


_C_FAMILY = LanguageConditions(
    control_flow=("if", "for", "while", "do"),
    logical_operators=("&&", "||"),
    case_keywords=("case",),
    ternary_operators=("?",),
    exception_handling=("catch",),
)

LANGUAGE_CONDITIONS: Dict[Language, LanguageConditions] = {
    Language.TYPESCRIPT: _C_FAMILY,
    Language.JAVASCRIPT: _C_FAMILY,
    # Go has no ternary and reports errors by return value
    Language.GO: LanguageConditions(
        control_flow=("if", "for", "range"),
        logical_operators=("&&", "||"),
        case_keywords=("case",),
    ),
    Language.PYTHON: LanguageConditions(
        control_flow=("if", "for", "while", "elif"),
        logical_operators=("and", "or"),
        case_keywords=("case",),
        exception_handling=("except",),
    ),
}


def conditions_for(language: Language) -> LanguageConditions:
    """Return the decision point table for a language."""
    return LANGUAGE_CONDITIONS[language]
