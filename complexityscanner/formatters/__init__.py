"""
Output formatters for scan results.

Provides:
- Human-readable text output
- JSON for machine processing
"""

from complexityscanner.formatters.text import TextFormatter
from complexityscanner.formatters.json_formatter import JSONFormatter

__all__ = [
    "TextFormatter",
    "JSONFormatter",
    "get_formatter",
]


def get_formatter(format_name: str):
    """Get a formatter by name."""
    formatters = {
        "text": TextFormatter,
        "cli": TextFormatter,
        "json": JSONFormatter,
    }

    formatter_class = formatters.get(format_name.lower())
    if formatter_class:
        return formatter_class()

    raise ValueError(f"Unknown format: {format_name}")
