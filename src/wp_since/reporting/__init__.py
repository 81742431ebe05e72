"""Report generation for wp-since.

Renders the entries introduced, modified or deprecated in a version as an
indented console listing or as Markdown.
"""

from .report_generator import ReportGenerator, ReportGroup, ReportItem

__all__ = [
    "ReportGenerator",
    "ReportGroup",
    "ReportItem",
]
