"""
Complexity analyzer.

Orchestrates a single analysis: tokenize, filter, drive a fresh language
state machine over the token stream and collect the finalized functions.
If function-level detection fails for any reason the analyzer degrades
to an aggregate whole-text estimate, so ``analyze`` never raises.
"""

import logging
import os
from typing import Dict, List, Optional, Union

from complexityscanner.core.conditions import LanguageConditions, conditions_for
from complexityscanner.core.context import FunctionContext
from complexityscanner.core.tokenizer import Tokenizer
from complexityscanner.core.types import AnalysisResult, Language

logger = logging.getLogger(__name__)


# Language detection by file extension
LANGUAGE_EXTENSIONS: Dict[Language, List[str]] = {
    Language.TYPESCRIPT: [".ts", ".tsx"],
    Language.JAVASCRIPT: [".js", ".jsx", ".mjs", ".cjs"],
    Language.GO: [".go"],
    Language.PYTHON: [".py"],
}

# Reverse mapping for quick lookup
EXTENSION_TO_LANGUAGE: Dict[str, Language] = {}
for _lang, _exts in LANGUAGE_EXTENSIONS.items():
    for _ext in _exts:
        EXTENSION_TO_LANGUAGE[_ext] = _lang

DEFAULT_LANGUAGE = Language.TYPESCRIPT


def language_for_extension(
    filename: str,
    overrides: Optional[Dict[str, Union[Language, str]]] = None,
) -> Optional[Language]:
    """Language for a filename's extension, or None when unrecognized."""
    ext = os.path.splitext(filename)[1].lower()
    if overrides:
        for override_ext, language in overrides.items():
            if not override_ext.startswith("."):
                override_ext = "." + override_ext
            if override_ext.lower() == ext:
                return Language.coerce(language)
    return EXTENSION_TO_LANGUAGE.get(ext)


class ComplexityAnalyzer:
    """
    Computes cyclomatic complexity for source text in one language.

    Each ``analyze`` call builds its own FunctionContext and state machine,
    so an analyzer holds no mutable state between calls and may be reused.
    Separate threads should still use separate analyzers.
    """

    def __init__(self, language: Union[Language, str], filename: str = "unknown"):
        self.language = Language.coerce(language)
        self.filename = filename
        self.conditions: LanguageConditions = conditions_for(self.language)

    @classmethod
    def for_file(
        cls,
        filename: str,
        overrides: Optional[Dict[str, Union[Language, str]]] = None,
    ) -> "ComplexityAnalyzer":
        """
        Create an analyzer for a filename, inferring the language from its
        extension. Unknown or missing extensions fall back to TypeScript.
        """
        language = language_for_extension(filename, overrides) or DEFAULT_LANGUAGE
        return cls(language, filename)

    def get_condition_tokens(self) -> List[str]:
        """Decision point tokens for this language, in category order."""
        return self.conditions.ordered()

    def analyze(self, source_code: str) -> AnalysisResult:
        """
        Analyze source text.

        Tries function-level detection first. Any failure is logged and
        the aggregate estimate is returned instead.
        """
        try:
            result = self._analyze_function_level(source_code)
        except Exception as e:
            logger.warning(
                "Function-level analysis failed for %s (%s), using aggregate: %s",
                self.filename, self.language.value, e,
            )
            return self.analyze_aggregate(source_code)

        logger.debug(
            "Analyzed %s (%s): %d function(s), total CCN %d",
            self.filename, self.language.value, len(result.functions), result.total_ccn,
        )
        return result

    def analyze_aggregate(self, source_code: str) -> AnalysisResult:
        """Whole-text estimate: every decision token counts once."""
        tokens = Tokenizer.filter_code_tokens(
            Tokenizer.generate_tokens(source_code, self.language)
        )

        decision_points = 0
        token_count = 0
        for token in tokens:
            if token.is_newline:
                continue
            token_count += 1
            if token.is_code and self.conditions.matches(token.text):
                decision_points += 1

        return AnalysisResult(
            total_ccn=1 + decision_points,
            nloc=Tokenizer.count_nloc(source_code, self.language),
            token_count=token_count,
            decision_points=decision_points,
            functions=[],
            language=self.language,
            filename=self.filename,
            mode="aggregate",
        )

    def _analyze_function_level(self, source_code: str) -> AnalysisResult:
        # Deferred to break the machines -> core import cycle
        from complexityscanner.machines import create_state_machine

        tokens = Tokenizer.filter_code_tokens(
            Tokenizer.generate_tokens(source_code, self.language)
        )

        context = FunctionContext()
        machine = create_state_machine(self.language, context, self.conditions)

        line = 1
        token_count = 0
        for token in tokens:
            if token.is_newline:
                line += 1
                context.set_line(line)
                machine.process_token(token)
                continue

            token_count += 1
            context.begin_token(token.text.count("\n") + 1)
            machine.process_token(token)
            context.add_token()

        machine.end_of_input()
        functions = context.finalize_all_functions()

        function_ccn = sum(f.cyclomatic_complexity for f in functions)

        return AnalysisResult(
            total_ccn=function_ccn or 1,
            nloc=Tokenizer.count_nloc(source_code, self.language),
            token_count=token_count,
            # Approximation: exact when no decision falls outside a function
            decision_points=function_ccn - len(functions),
            functions=functions,
            language=self.language,
            filename=self.filename,
            mode="function",
        )
