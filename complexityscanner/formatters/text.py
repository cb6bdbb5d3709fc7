"""
Text output formatter for human-readable results.
"""

import sys
from typing import List

from complexityscanner.core.scorer import ComplexityScorer
from complexityscanner.core.types import FunctionInfo
from complexityscanner.scanner import FileReport, ScanReport
from complexityscanner.utils import truncate_string


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    MAGENTA = "\033[95m"


LEVEL_COLORS = {
    "Low": Colors.GREEN,
    "Medium": Colors.YELLOW,
    "High": Colors.RED,
    "Very High": Colors.MAGENTA,
}


def supports_color() -> bool:
    """Check if the terminal supports color output."""
    if not hasattr(sys.stdout, "isatty"):
        return False
    if not sys.stdout.isatty():
        return False
    return True


class TextFormatter:
    """
    Formats scan reports for the terminal.
    """

    def __init__(self, use_color: bool = True, verbose: bool = False, show_functions: bool = False):
        self.use_color = use_color and supports_color()
        self.verbose = verbose
        self.show_functions = show_functions

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _score_label(self, score: int) -> str:
        level = ComplexityScorer.complexity_level(score)
        return self._color(f"[{score:>2} {level}]", LEVEL_COLORS.get(level, ""))

    def format_result(self, report: ScanReport) -> str:
        """Format a complete scan report."""
        lines = []

        # Header
        lines.append("")
        lines.append(self._color("=" * 70, Colors.DIM))
        lines.append(self._color(" COMPLEXITY REPORT ", Colors.BOLD))
        lines.append(self._color("=" * 70, Colors.DIM))
        lines.append("")

        # Summary
        lines.append(self._color("Summary", Colors.BOLD))
        lines.append(self._color("-" * 40, Colors.DIM))
        lines.append(f"  Files analyzed:    {report.files_scanned}")
        lines.append(f"  Languages:         {', '.join(report.languages_detected)}")
        lines.append(f"  Scan time:         {report.scan_time_seconds:.2f}s")
        lines.append(f"  Total CCN:         {report.total_ccn}")
        lines.append(f"  Functions:         {report.function_count}")
        lines.append(f"  Max function CCN:  {report.max_function_ccn}")
        lines.append("")

        if report.files:
            lines.append(self._color("Files", Colors.BOLD))
            lines.append(self._color("-" * 40, Colors.DIM))
            for file_report in report.files:
                lines.extend(self._format_file(file_report))
            lines.append("")

        # Errors
        if report.errors:
            lines.append(self._color("=" * 70, Colors.DIM))
            lines.append(self._color(" ERRORS ", Colors.RED))
            lines.append(self._color("=" * 70, Colors.DIM))
            for error in report.errors:
                lines.append(f"  - {error}")
            lines.append("")

        return "\n".join(lines)

    def _format_file(self, file_report: FileReport) -> List[str]:
        lines = []

        if not file_report.ok:
            lines.append(f"  {self._color('[error]', Colors.RED)} {file_report.path}: {file_report.error}")
            return lines

        result = file_report.result
        label = self._score_label(file_report.score.score)
        lines.append(
            f"  {label} {self._color(file_report.path, Colors.CYAN)}"
            f"  CCN {result.total_ccn}, NLOC {result.nloc}, {len(result.functions)} function(s)"
        )

        if self.verbose and result.mode == "aggregate":
            lines.append(self._color("      (aggregate estimate, functions not detected)", Colors.DIM))

        if self.show_functions and result.functions:
            for function in sorted(result.functions, key=lambda f: f.start_line):
                lines.append(self._format_function(function))

        return lines

    def _format_function(self, function: FunctionInfo) -> str:
        """Format one function row."""
        name = truncate_string(function.name, 32)
        location = f"{function.start_line}-{function.end_line}"
        ccn = str(function.cyclomatic_complexity)
        if function.cyclomatic_complexity > 10:
            ccn = self._color(ccn, Colors.RED)
        return (
            f"      {name:<32} lines {location:<11} "
            f"CCN {ccn:<4} NLOC {function.nloc:<5} params {function.parameter_count}"
        )
