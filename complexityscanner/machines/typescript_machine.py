"""
TypeScript / JavaScript state machine.

Detects:
- function declarations and expressions (``function``, generators,
  generic parameters, return type annotations)
- class and object-literal methods (``name(params) {``), including
  getters, setters, async and static members
- arrow functions with a block body or a single-expression body

Function names come from the declaration itself, or from the nearest
``name =`` / ``name:`` that precedes an anonymous function or arrow.

Both TypeScript and JavaScript are served by this machine; the analyzer
registers it under each language and passes that language's decision
table.
"""

from dataclasses import dataclass
from typing import List, Optional

from complexityscanner.core.errors import ScopeTrackingError
from complexityscanner.core.types import Language, Token
from complexityscanner.machines import register_machine
from complexityscanner.machines.base import BraceStateMachine, PendingFunction


CONTROL_KEYWORDS = frozenset(["if", "for", "while", "switch", "catch", "with"])

# Identifiers that can precede "(" without naming a callable
NON_CALLABLE = CONTROL_KEYWORDS | frozenset([
    "return", "typeof", "await", "new", "function", "else", "do", "in", "of",
    "instanceof", "void", "delete", "yield", "async", "super", "import",
    "throw", "case", "let", "const", "var", "extends", "as", "satisfies",
    "keyof", "export", "default",
])

DECLARATION_KEYWORDS = frozenset(["const", "let", "var"])

# Tokens after "?" that mark it as an optional member or parameter
OPTIONAL_MARKER_FOLLOWERS = frozenset([":", ",", ")", "=", ";"])


def _is_identifier(text: Optional[str]) -> bool:
    return bool(text) and (text[0].isalpha() or text[0] in "_$")


@dataclass
class _Group:
    """An open ``(`` or ``[`` group."""
    opener: Optional[str]
    callable: bool
    control: bool
    start_line: int
    brace_depth: int
    paren: bool = True
    count: int = 0
    current_nonempty: bool = False
    # Held until the group turns out to be a signature or not
    decisions: int = 0

    def close(self) -> None:
        if self.current_nonempty:
            self.count += 1
            self.current_nonempty = False


@register_machine(Language.JAVASCRIPT)
@register_machine(Language.TYPESCRIPT)
class TypeScriptStateMachine(BraceStateMachine):
    """State machine for TypeScript and JavaScript source."""

    def __init__(self, context, conditions):
        super().__init__(context, conditions)
        self._state = self._global
        self._brackets: List[_Group] = []
        self._closed: Optional[_Group] = None

        self._assign_name = ""
        self._name_locked = False
        self._declaring = False

        self._function_keyword = False
        self._function_name = ""
        self._function_line = 0
        self._generic_depth = 0

        self._return_group: Optional[_Group] = None
        self._type_depth = 0
        self._type_tokens = 0

        self._pending_arrow: Optional[PendingFunction] = None

        self._question = False
        self._ternaries = 0
        self._in_case = False

    # ------------------------------------------------------------------
    # StateMachine hooks
    # ------------------------------------------------------------------

    def on_token(self, token: Token) -> None:
        text = token.text if token.is_code else None

        if self._question:
            self._question = False
            if text not in OPTIONAL_MARKER_FOLLOWERS:
                self.record_decision()
                self._ternaries += 1

        closed, self._closed = self._closed, None
        if closed is not None and text not in ("{", "=>", ":"):
            self._release(closed)
        self._state(token, closed)

    def on_newline(self, token: Token) -> None:
        if token.implicit or self._state == self._arrow_body:
            return

        if self._state == self._return_type and self._type_depth == 0 and self._type_tokens > 0:
            self._state = self._global
            self._release(self._return_group)

        if not self._brackets:
            self._name_locked = False
            self._close_expressions(0)

    def is_decision_point(self, token: Token) -> bool:
        if token.text == "?":
            # Decided on the next token: "x?: T" is an optional marker
            self._question = True
            return False
        return True

    def record_decision(self, count: int = 1) -> None:
        # Inside a bracket group at the current level no function is open
        # yet for it; hold the decision on the group.
        if self._brackets:
            group = self._brackets[-1]
            body = self.bodies[-1] if self.bodies else None
            in_arrow = (
                body is not None
                and body.expression
                and body.brace_depth == self.brace_depth
                and body.paren_depth >= len(self._brackets)
            )
            if group.brace_depth == self.brace_depth and not in_arrow:
                group.decisions += count
                return
        self.context.record_decision_point(count)

    def end_of_input(self) -> None:
        self._release(self._closed)
        self._closed = None
        if self._state == self._return_type:
            self._release(self._return_group)
        self._close_expressions(0)
        if self._brackets:
            raise ScopeTrackingError(f"{len(self._brackets)} unclosed bracket(s) at end of input")
        super().end_of_input()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _close_expressions(self, min_paren_depth: int) -> None:
        """Close expression-bodied arrows opened at this brace level."""
        while (
            self.bodies
            and self.bodies[-1].expression
            and self.bodies[-1].brace_depth == self.brace_depth
            and self.bodies[-1].paren_depth >= min_paren_depth
        ):
            self.close_body()

    def _can_name(self) -> bool:
        """True outside parameter lists and call arguments."""
        return not self._brackets or self.brace_depth > self._brackets[-1].brace_depth

    def _release(self, group: Optional[_Group]) -> None:
        """Hand a group's held decisions to the enclosing scope."""
        if group is not None and group.decisions:
            decisions, group.decisions = group.decisions, 0
            self.record_decision(decisions)

    def _mark_nonempty(self) -> None:
        if self._brackets:
            self._brackets[-1].current_nonempty = True

    def _start_arrow(self, token: Token, closed: Optional[_Group]) -> None:
        if closed is not None:
            parameter_count = closed.count
            start_line = closed.start_line
        elif _is_identifier(self.last_text):
            parameter_count = 1
            start_line = self.context.current_line
        else:
            parameter_count = 0
            start_line = self.context.current_line

        decisions = closed.decisions if closed is not None else 0
        self._pending_arrow = PendingFunction(self._assign_name, parameter_count, start_line, decisions)
        self._assign_name = ""
        self._name_locked = False
        self._state = self._arrow_body

    def _open_paren(self, token: Token) -> None:
        prev = self.last_text
        line = self.context.current_line

        if self._function_keyword:
            self._function_keyword = False
            group = _Group(
                opener=self._function_name or self._assign_name,
                callable=True,
                control=False,
                start_line=self._function_line,
                brace_depth=self.brace_depth,
            )
            self._assign_name = ""
        elif _is_identifier(prev) and prev not in NON_CALLABLE:
            # A call or a method signature; either way not an assignment target
            group = _Group(prev, True, False, line, self.brace_depth)
            self._assign_name = ""
            self._name_locked = False
        else:
            group = _Group(None, False, prev in CONTROL_KEYWORDS, line, self.brace_depth)

        self._mark_nonempty()
        self._brackets.append(group)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _global(self, token: Token, closed: Optional[_Group] = None) -> None:
        if not token.is_code:
            self._mark_nonempty()
            self._declaring = False
            return

        text = token.text
        prev = self.last_text

        if text == "function":
            self._function_name = ""
            self._function_line = self.context.current_line
            self._state = self._function_keyword_state
            return

        if self._declaring:
            self._declaring = False
            if _is_identifier(text):
                self._assign_name = text
                self._name_locked = True

        if text in DECLARATION_KEYWORDS:
            self._declaring = True
            self._mark_nonempty()
        elif text == "(":
            self._open_paren(token)
        elif text == "[":
            self._mark_nonempty()
            self._brackets.append(_Group(None, False, False, self.context.current_line, self.brace_depth, paren=False))
        elif text in (")", "]"):
            if self._brackets:
                group = self._brackets.pop()
                group.close()
                self._close_expressions(len(self._brackets) + 1)
                if text == ")" and group.paren:
                    self._closed = group
                else:
                    self._release(group)
        elif text == "{":
            self._mark_nonempty()
            if closed is not None and closed.callable:
                self.open_brace(PendingFunction(
                    closed.opener or "", closed.count, closed.start_line, closed.decisions,
                ))
            else:
                self._release(closed)
                self.open_brace()
            self._assign_name = ""
            self._name_locked = False
        elif text == "}":
            self.close_brace()
            self._assign_name = ""
            self._name_locked = False
        elif text == "=>":
            self._start_arrow(token, closed)
        elif text == ":":
            self._mark_nonempty()
            if closed is not None and (self._in_case or self._ternaries > 0 or closed.control):
                self._release(closed)
            if self._in_case:
                self._in_case = False
            elif self._ternaries > 0:
                self._ternaries -= 1
            elif closed is not None and not closed.control:
                self._return_group = closed
                self._type_depth = 0
                self._type_tokens = 0
                self._state = self._return_type
            elif _is_identifier(prev) and self._can_name() and not self._name_locked:
                self._assign_name = prev
        elif text == "=":
            self._mark_nonempty()
            if _is_identifier(prev) and self._can_name() and not self._name_locked:
                self._assign_name = prev
        elif text == ",":
            if self._brackets and self._brackets[-1].brace_depth == self.brace_depth:
                self._brackets[-1].close()
            self._close_expressions(len(self._brackets))
            if self._can_name():
                self._assign_name = ""
                self._name_locked = False
        elif text == ";":
            self._close_expressions(len(self._brackets))
            self._ternaries = 0
            self._in_case = False
            self._assign_name = ""
            self._name_locked = False
        else:
            self._mark_nonempty()
            if text == "case":
                self._in_case = True

    def _function_keyword_state(self, token: Token, closed: Optional[_Group] = None) -> None:
        text = token.text if token.is_code else None

        if text == "*":
            return
        if text == "<":
            self._generic_depth = 1
            self._state = self._generic_params
            return
        if _is_identifier(text) and not self._function_name:
            self._function_name = text
            return

        self._state = self._global
        if text == "(":
            self._function_keyword = True
        self._global(token)

    def _generic_params(self, token: Token, closed: Optional[_Group] = None) -> None:
        if token.text == "<":
            self._generic_depth += 1
        elif token.text == ">":
            self._generic_depth -= 1
            if self._generic_depth == 0:
                self._state = self._function_keyword_state

    def _return_type(self, token: Token, closed: Optional[_Group] = None) -> None:
        """Skip a ``): Type`` annotation until the body or arrow."""
        text = token.text if token.is_code else None
        group = self._return_group

        if self._type_depth == 0:
            if text == "{":
                self._state = self._global
                self._global(token, group)
                return
            if text == "=>":
                self._state = self._global
                self._start_arrow(token, group)
                return
            if text in (";", ",", ")", "]", "}", "="):
                self._state = self._global
                self._release(group)
                self._global(token)
                return

        if text in ("(", "[", "<", "{"):
            self._type_depth += 1
        elif text in (")", "]", ">", "}") and self._type_depth > 0:
            self._type_depth -= 1
        self._type_tokens += 1

    def _arrow_body(self, token: Token, closed: Optional[_Group] = None) -> None:
        function = self._pending_arrow
        self._pending_arrow = None
        self._state = self._global

        if token.is_code and token.text == "{":
            self._mark_nonempty()
            self.open_brace(function)
            return

        self.open_expression(function, paren_depth=len(self._brackets))
        self._global(token)
