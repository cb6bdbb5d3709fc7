"""
Base classes for the language state machines.

A state machine consumes the filtered token stream one token at a time,
recognizes function entry and exit for its grammar, and drives the
FunctionContext. Every token is handled in constant time with no
lookahead, so an analysis is a single streaming pass.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from complexityscanner.core.conditions import LanguageConditions
from complexityscanner.core.context import FunctionContext
from complexityscanner.core.errors import ScopeTrackingError
from complexityscanner.core.types import Token


StateHandler = Callable[[Token], None]

OPENING_BRACKETS = ("(", "[", "{")
CLOSING_BRACKETS = (")", "]", "}")


class StateMachine(ABC):
    """
    Base class for language-specific state machines.

    Subclasses implement ``on_token`` (and optionally ``on_newline`` and
    ``end_of_input``). Decision points are handled here: a code token
    found in the language's condition table is recorded against the
    innermost open function unless ``is_decision_point`` vetoes it.
    """

    def __init__(self, context: FunctionContext, conditions: LanguageConditions):
        self.context = context
        self.conditions = conditions
        self.last_token: Optional[Token] = None

    def process_token(self, token: Token) -> None:
        """Consume one token from the filtered stream."""
        if token.is_newline:
            self.on_newline(token)
            return

        self.on_token(token)

        if token.is_code and self.conditions.matches(token.text) and self.is_decision_point(token):
            self.record_decision()

        self.last_token = token

    def record_decision(self, count: int = 1) -> None:
        """Attribute decision points; machines may hold them for a pending signature."""
        self.context.record_decision_point(count)

    @abstractmethod
    def on_token(self, token: Token) -> None:
        """Handle a code or string token."""

    def on_newline(self, token: Token) -> None:
        """Handle a newline token. Implicit newlines never end a logical line."""

    def is_decision_point(self, token: Token) -> bool:
        return True

    def end_of_input(self) -> None:
        """
        Called once after the last token.

        Closes functions that end implicitly at end of input and raises
        ScopeTrackingError if the stream left scopes unterminated.
        """

    @property
    def last_text(self) -> Optional[str]:
        if self.last_token is None or not self.last_token.is_code:
            return None
        return self.last_token.text


@dataclass
class PendingFunction:
    """A recognized signature waiting for its body to open."""
    name: str
    parameter_count: int
    start_line: int
    # Decisions found in the signature itself (default parameter values)
    decision_count: int = 0


@dataclass
class OpenBody:
    """
    A function body opened by a brace machine.

    Block bodies close on the ``}`` that returns ``brace_depth`` to the
    depth recorded when their ``{`` was read. Expression bodies (arrow
    functions without braces) record the depths they were opened at and
    are closed by the owning machine.
    """
    brace_depth: int
    paren_depth: int = 0
    expression: bool = False


class BraceStateMachine(StateMachine):
    """
    Shared brace bookkeeping for brace-delimited grammars.

    Keeps a brace-depth counter and the stack of open function bodies.
    A ``}`` seen at depth 0 is unmatched and ignored.
    """

    def __init__(self, context: FunctionContext, conditions: LanguageConditions):
        super().__init__(context, conditions)
        self.brace_depth = 0
        self.bodies: List[OpenBody] = []

    def open_brace(self, function: Optional[PendingFunction] = None) -> None:
        """Read a ``{``, opening a function body if a signature is pending."""
        if function is not None:
            self._push(function)
            self.bodies.append(OpenBody(brace_depth=self.brace_depth))
        self.brace_depth += 1

    def _push(self, function: PendingFunction) -> None:
        self.context.push_function(
            function.name,
            function.parameter_count,
            start_line=function.start_line,
        )
        if function.decision_count:
            self.context.record_decision_point(function.decision_count)

    def close_brace(self) -> None:
        """Read a ``}``, closing every function body that ends with it."""
        if self.brace_depth == 0:
            return
        self.brace_depth -= 1

        while self.bodies and self.bodies[-1].expression and self.bodies[-1].brace_depth > self.brace_depth:
            self.close_body()

        if self.bodies and not self.bodies[-1].expression and self.bodies[-1].brace_depth == self.brace_depth:
            self.close_body()

    def open_expression(self, function: PendingFunction, paren_depth: int) -> None:
        """Open a function whose body is a single expression."""
        self._push(function)
        self.bodies.append(OpenBody(
            brace_depth=self.brace_depth,
            paren_depth=paren_depth,
            expression=True,
        ))

    def close_body(self) -> None:
        self.bodies.pop()
        self.context.finalize_function()

    def end_of_input(self) -> None:
        if self.brace_depth > 0:
            raise ScopeTrackingError(f"{self.brace_depth} unclosed brace(s) at end of input")


class ParameterCounter:
    """
    Counts the entries of a bracketed parameter list.

    Fed one token at a time starting with the opening bracket; reports
    when the matching closing bracket arrives. Only commas at the top
    level of the list separate parameters, and a trailing comma does not
    add an empty parameter.
    """

    def __init__(self, markers: tuple = ()):
        self.markers = markers
        self.depth = 0
        self.count = 0
        self._current: List[str] = []

    def feed(self, text: str) -> bool:
        """Consume a token; return True once the list is closed."""
        if text in OPENING_BRACKETS:
            self.depth += 1
            if self.depth == 1:
                self.count = 0
                self._current = []
                return False
        elif text in CLOSING_BRACKETS:
            self.depth -= 1
            if self.depth <= 0:
                self._end_parameter()
                return True
        elif text == "," and self.depth == 1:
            self._end_parameter()
            return False

        self._current.append(text)
        return False

    def _end_parameter(self) -> None:
        if not self._current:
            return
        if not (len(self._current) == 1 and self._current[0] in self.markers):
            self.count += 1
        self._current = []
