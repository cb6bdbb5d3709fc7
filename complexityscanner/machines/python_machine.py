"""
Python state machine.

Python bodies are delimited by indentation rather than braces. A ``def``
header is recognized up to its closing ``:``; the function stays open
until the first logical line indented at or left of the ``def`` itself,
or until end of input. Nested functions and methods keep their own
indentation on the stack and close innermost first.
"""

from typing import List

from complexityscanner.core.errors import ScopeTrackingError
from complexityscanner.core.types import Language, Token
from complexityscanner.machines import register_machine
from complexityscanner.machines.base import (
    CLOSING_BRACKETS, OPENING_BRACKETS, ParameterCounter, StateMachine,
)


# Bare "*" and "/" separate keyword-only and positional-only parameters
PARAMETER_MARKERS = ("*", "/")


@register_machine(Language.PYTHON)
class PythonStateMachine(StateMachine):
    """State machine for Python source."""

    def __init__(self, context, conditions):
        super().__init__(context, conditions)
        self._state = self._global
        self._bracket_depth = 0
        self._line_start = True
        self._first_on_line = False
        self._line_indent = 0
        self._last_code_line = 0

        # Indentation column of every open def, innermost last
        self._defs: List[int] = []

        self._def_name = ""
        self._def_line = 0
        self._def_indent = 0
        self._generic_depth = 0
        self._params = ParameterCounter(markers=PARAMETER_MARKERS)
        # Decisions in default values and annotations of the header
        self._header_decisions = 0

    def on_token(self, token: Token) -> None:
        self._first_on_line = self._line_start
        if self._line_start:
            self._line_start = False
            self._line_indent = token.column
            self._dedent(token.column)

        self._last_code_line = self.context.current_line + token.text.count("\n")

        if token.is_code:
            if token.text in OPENING_BRACKETS:
                self._bracket_depth += 1
            elif token.text in CLOSING_BRACKETS and self._bracket_depth > 0:
                self._bracket_depth -= 1

        self._state(token)

    def on_newline(self, token: Token) -> None:
        if token.implicit or self._bracket_depth > 0:
            return
        self._line_start = True
        if self._state != self._global:
            # A def header never spans a logical line break
            self._state = self._global
            self._release_header()

    def is_decision_point(self, token: Token) -> bool:
        if token.text == "case":
            # Soft keyword: only a statement inside "match"
            return self._first_on_line
        return True

    def record_decision(self, count: int = 1) -> None:
        if self._state in (self._def_params, self._def_tail):
            self._header_decisions += count
        else:
            self.context.record_decision_point(count)

    def end_of_input(self) -> None:
        self._release_header()
        if self._bracket_depth > 0:
            raise ScopeTrackingError(f"{self._bracket_depth} unclosed bracket(s) at end of input")
        while self._defs:
            self._defs.pop()
            self.context.finalize_function(end_line=self._last_code_line)

    def _release_header(self) -> None:
        if self._header_decisions:
            self.context.record_decision_point(self._header_decisions)
            self._header_decisions = 0

    def _dedent(self, column: int) -> None:
        while self._defs and column <= self._defs[-1]:
            self._defs.pop()
            self.context.finalize_function(end_line=self._last_code_line)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _global(self, token: Token) -> None:
        if token.is_code and token.text == "def":
            self._def_name = ""
            self._def_line = self.context.current_line
            self._def_indent = self._line_indent
            self._header_decisions = 0
            self._state = self._def_name_state

    def _def_name_state(self, token: Token) -> None:
        if token.is_code and (token.text[0].isalpha() or token.text[0] == "_"):
            self._def_name = token.text
            self._state = self._def_open
        else:
            self._state = self._global

    def _def_open(self, token: Token) -> None:
        text = token.text
        if text == "[":
            self._generic_depth = 1
            self._state = self._def_generics
        elif text == "(":
            self._params = ParameterCounter(markers=PARAMETER_MARKERS)
            self._params.feed(text)
            self._state = self._def_params
        else:
            self._state = self._global

    def _def_generics(self, token: Token) -> None:
        if token.text == "[":
            self._generic_depth += 1
        elif token.text == "]":
            self._generic_depth -= 1
            if self._generic_depth == 0:
                self._state = self._def_open

    def _def_params(self, token: Token) -> None:
        if self._params.feed(token.text):
            self._state = self._def_tail

    def _def_tail(self, token: Token) -> None:
        """Skip a return annotation up to the header's colon."""
        if token.text == ":" and self._bracket_depth == 0:
            self.context.push_function(
                self._def_name,
                self._params.count,
                start_line=self._def_line,
            )
            self._defs.append(self._def_indent)
            self._state = self._global
            self._release_header()
