"""
MarketLens v1.2

Marketing report composition and rendering engine.

Turns an analytics bundle (store ratings, usage analytics, AI narrative
analysis, market research, code-improvement suggestions) into a Markdown
report and a paginated PDF report built from one shared section model.
"""

from .__version__ import __version__

# Keep package init lightweight and safe
# Rendering backends (reportlab, matplotlib, requests) load on first use

from .reporting.orchestrator import (
    generate_markdown_report,
    generate_pdf_report,
    MarkdownResult,
    PDFResult,
)
from .localization import resolve_catalog, LocaleCatalog

__all__ = [
    "__version__",
    "generate_markdown_report",
    "generate_pdf_report",
    "MarkdownResult",
    "PDFResult",
    "resolve_catalog",
    "LocaleCatalog",
]
