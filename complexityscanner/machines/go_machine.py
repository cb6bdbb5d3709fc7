"""
Go state machine.

Recognizes the three shapes a Go function body can follow:

    func Name[T any](params) results {
    func (recv *Type) Name(params) results {
    func(params) results {              (function literal)

After ``func (`` the first parenthesized group is either a method
receiver or the parameters of a literal; the token after it settles
which. Go ends statements at line breaks, so a signature that reaches a
real newline outside its brackets (``type H func(int) error``) has no
body and is abandoned.
"""

from typing import Optional

from complexityscanner.core.types import Language, Token
from complexityscanner.machines import register_machine
from complexityscanner.machines.base import (
    BraceStateMachine, ParameterCounter, PendingFunction,
)


TYPE_LITERALS = ("interface", "struct")
SIGNATURE_TERMINATORS = (";", ",", ")", "]", "=", "}")


def _is_identifier(text: Optional[str]) -> bool:
    return bool(text) and (text[0].isalpha() or text[0] == "_")


@register_machine(Language.GO)
class GoStateMachine(BraceStateMachine):
    """State machine for Go source."""

    def __init__(self, context, conditions):
        super().__init__(context, conditions)
        self._state = self._global
        self._reset_signature()

    def _reset_signature(self) -> None:
        self._name = ""
        self._candidate = ""
        self._start_line = self.context.current_line
        self._params = ParameterCounter()
        self._param_count = 0
        self._bracket_depth = 0
        self._type_brace_depth = 0
        self._type_literal = False

    def _abandon(self, token: Optional[Token] = None) -> None:
        self._state = self._global
        self._reset_signature()
        if token is not None:
            self._global(token)

    def _open_body(self) -> None:
        function = PendingFunction(self._name, self._param_count, self._start_line)
        self._state = self._global
        self._reset_signature()
        self.open_brace(function)

    def on_token(self, token: Token) -> None:
        if token.is_code:
            self._state(token)

    def on_newline(self, token: Token) -> None:
        if token.implicit or self._state == self._global:
            return
        if self._state in (self._first_group, self._params_state, self._generics):
            return
        if self._bracket_depth == 0 and self._type_brace_depth == 0:
            self._abandon()

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _global(self, token: Token) -> None:
        text = token.text
        if text == "func":
            self._reset_signature()
            self._state = self._after_func
        elif text == "{":
            self.open_brace()
        elif text == "}":
            self.close_brace()

    def _after_func(self, token: Token) -> None:
        text = token.text
        if text == "(":
            self._params.feed(text)
            self._state = self._first_group
        elif _is_identifier(text):
            self._name = text
            self._state = self._after_name
        elif text == "{":
            self._open_body()
        else:
            self._abandon(token)

    def _after_name(self, token: Token) -> None:
        text = token.text
        if text == "[":
            self._bracket_depth = 1
            self._state = self._generics
        elif text == "(":
            self._params.feed(text)
            self._state = self._params_state
        else:
            self._abandon(token)

    def _generics(self, token: Token) -> None:
        if token.text == "[":
            self._bracket_depth += 1
        elif token.text == "]":
            self._bracket_depth -= 1
            if self._bracket_depth == 0:
                self._state = self._after_name

    def _first_group(self, token: Token) -> None:
        if self._params.feed(token.text):
            self._param_count = self._params.count
            self._state = self._after_first_group

    def _after_first_group(self, token: Token) -> None:
        """After ``func (...)``: a receiver if a method name follows."""
        text = token.text
        if text == "{":
            self._open_body()
        elif _is_identifier(text) and text not in TYPE_LITERALS:
            self._candidate = text
            self._state = self._maybe_method
        else:
            self._state = self._results
            self._results(token)

    def _maybe_method(self, token: Token) -> None:
        text = token.text
        if text == "(":
            # The first group was a receiver
            self._name = self._candidate
            self._params = ParameterCounter()
            self._params.feed(text)
            self._state = self._params_state
        elif text == "{":
            self._open_body()
        else:
            self._state = self._results
            self._results(token)

    def _params_state(self, token: Token) -> None:
        if self._params.feed(token.text):
            self._param_count = self._params.count
            self._state = self._results

    def _results(self, token: Token) -> None:
        """Skip result types until the body opens."""
        text = token.text

        if self._type_brace_depth > 0:
            if text == "{":
                self._type_brace_depth += 1
            elif text == "}":
                self._type_brace_depth -= 1
            return

        if text in TYPE_LITERALS:
            self._type_literal = True
        elif text == "{":
            if self._type_literal:
                self._type_literal = False
                self._type_brace_depth = 1
            elif self._bracket_depth == 0:
                self._open_body()
        elif text in ("(", "["):
            self._bracket_depth += 1
        elif text in (")", "]") and self._bracket_depth > 0:
            self._bracket_depth -= 1
        elif self._bracket_depth == 0 and text in SIGNATURE_TERMINATORS:
            self._abandon(token)
