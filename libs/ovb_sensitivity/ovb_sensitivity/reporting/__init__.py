"""Text and table renderings of sensitivity reports."""

from .summary import bounds_table, ovb_minimal_reporting, print_text, summary_text

__all__ = ["bounds_table", "ovb_minimal_reporting", "print_text", "summary_text"]
