"""
JSON output formatter for machine-readable results.
"""

import json

from complexityscanner.scanner import ScanReport


class JSONFormatter:
    """
    Formats scan reports as JSON for machine consumption.
    """

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format_result(self, report: ScanReport) -> str:
        """Format a complete scan report as JSON."""
        return json.dumps(report.to_dict(), indent=self.indent, default=str)
