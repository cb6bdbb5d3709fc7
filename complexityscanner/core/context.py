"""
Function context: the scope tracker driven by the language state machines.

Open functions are kept as frames in a flat list used as a stack. The
innermost frame is the last element; nested functions get their own
frame, so decision points only ever accrue to the innermost function.
Frames are popped into immutable FunctionInfo records, in the order the
functions close.

Token accounting is two-phase. ``begin_token`` announces the token the
state machine is about to see; ``add_token`` credits it afterwards to the
innermost open function. A token that closes a function on its own line
(a closing brace) is credited to the function it closes instead.
"""

from typing import List, Optional, Set

from complexityscanner.core.errors import ScopeTrackingError
from complexityscanner.core.types import FunctionFrame, FunctionInfo


ANONYMOUS = "(anonymous)"


class FunctionContext:
    """
    Tracks open function frames, the current line, and completed functions.

    A fresh context is created for every analysis; it is not thread-safe
    and is never shared between analyses.
    """

    def __init__(self, start_line: int = 1):
        self._frames: List[FunctionFrame] = []
        self._completed: List[FunctionInfo] = []
        self._line = start_line
        # Every line holding a code or string token seen so far
        self._code_lines: Set[int] = set()
        self._pending: Optional[range] = None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def current_line(self) -> int:
        return self._line

    @property
    def depth(self) -> int:
        """Number of currently open functions."""
        return len(self._frames)

    @property
    def in_function(self) -> bool:
        return bool(self._frames)

    @property
    def current_frame(self) -> Optional[FunctionFrame]:
        return self._frames[-1] if self._frames else None

    @property
    def completed_functions(self) -> List[FunctionInfo]:
        return list(self._completed)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_line(self, line: int) -> None:
        """Record the current line. Lines may never move backwards."""
        if line < self._line:
            raise ScopeTrackingError(
                f"Line moved backwards from {self._line} to {line}"
            )
        self._line = line

    def push_function(
        self,
        name: str,
        parameter_count: int = 0,
        start_line: Optional[int] = None,
    ) -> FunctionFrame:
        """
        Open a new function frame at the current nesting depth.

        ``start_line`` defaults to the current line; state machines that
        only commit to a function once its body opens pass the line of
        the signature instead. Signature lines that hold code count
        toward the new function's NLOC; blank and comment lines do not.
        """
        if start_line is None or start_line > self._line:
            start_line = self._line

        frame = FunctionFrame(
            name=name or ANONYMOUS,
            start_line=start_line,
            parameter_count=parameter_count,
            nesting_depth_at_open=len(self._frames),
            code_lines={
                line for line in range(start_line, self._line + 1)
                if line in self._code_lines
            },
        )
        self._frames.append(frame)
        return frame

    def record_decision_point(self, count: int = 1) -> None:
        """Add decision points to the innermost open function, if any."""
        if self._frames:
            self._frames[-1].decision_count += count

    def begin_token(self, line_span: int = 1) -> None:
        """Announce a token starting on the current line and spanning ``line_span`` lines."""
        self._pending = range(self._line, self._line + max(line_span, 1))

    def add_token(self, line_span: int = 1) -> None:
        """
        Account one code token, and every line it spans, to the innermost
        function.

        Without a preceding ``begin_token`` the token is taken to start on
        the current line. A token already credited to the function it
        closed is not counted again.
        """
        lines = self._pending
        self._pending = None
        if lines is None:
            lines = range(self._line, self._line + max(line_span, 1))
        elif not lines:
            return
        self._credit(self._frames[-1] if self._frames else None, lines)

    def _credit(self, frame: Optional[FunctionFrame], lines: range) -> None:
        self._code_lines.update(lines)
        if frame is not None:
            frame.token_count += 1
            frame.code_lines.update(lines)

    def finalize_function(self, end_line: Optional[int] = None) -> Optional[FunctionInfo]:
        """
        Close the innermost function.

        Returns the completed FunctionInfo, or None when no function is
        open (an unmatched closing delimiter is ignored, not an underflow).
        """
        if not self._frames:
            return None

        frame = self._frames.pop()
        if end_line is None:
            end_line = self._line
        end_line = max(end_line, frame.start_line)

        if self._pending and self._pending[0] <= end_line:
            self._credit(frame, self._pending)
            self._pending = range(0)

        info = FunctionInfo(
            name=frame.name,
            start_line=frame.start_line,
            end_line=end_line,
            cyclomatic_complexity=1 + frame.decision_count,
            nloc=frame.nloc,
            parameter_count=frame.parameter_count,
            token_count=frame.token_count,
            nesting_depth=frame.nesting_depth_at_open,
        )
        self._completed.append(info)
        return info

    def finalize_all_functions(self) -> List[FunctionInfo]:
        """
        Force-close every frame still open and return all completed
        functions in closing order.
        """
        while self._frames:
            self.finalize_function()
        return list(self._completed)
