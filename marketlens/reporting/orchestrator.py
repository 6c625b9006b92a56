"""
Report entry points.

Both generators share one contract:
- no report data → empty content, error None
- any unexpected failure → empty content, error message; never raises
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple

from marketlens.charts import ChartKind, ChartRenderer, ChartResults, build_chart_requests
from marketlens.config.loader import merge_config
from marketlens.localization import resolve_catalog

from .contracts import normalize_bundle
from .markdown_renderer import render_markdown
from .pdf_renderer import PDFReportRenderer
from .sections import build_sections

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkdownResult:
    content: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class PDFResult:
    content: bytes = b""
    error: Optional[str] = None
    page_count: int = 0
    charts: Dict[str, Tuple[str, ...]] = field(default_factory=dict)


# -------------------------------------------------
# MARKDOWN
# -------------------------------------------------
def generate_markdown_report(
    raw: Any,
    *,
    app_name: Optional[str] = None,
    cadence: str = "weekly",
    period: Any = None,
    locale: Any = None,
    today: Optional[date] = None,
) -> MarkdownResult:
    try:
        bundle = normalize_bundle(raw)
        if not bundle.has_report_data:
            logger.info("No report data; Markdown report skipped")
            return MarkdownResult()

        catalog = resolve_catalog(locale)
        sections = build_sections(
            bundle,
            display_name=app_name,
            period=period,
            cadence=cadence,
            locale=locale,
            today=today,
        )
        content = render_markdown(sections, catalog)
        logger.info("Markdown report generated (%s chars)", len(content))
        return MarkdownResult(content=content)

    except Exception as exc:
        logger.exception("Markdown report generation failed")
        return MarkdownResult(error=str(exc) or type(exc).__name__)


# -------------------------------------------------
# PDF
# -------------------------------------------------
def generate_pdf_report(
    raw: Any,
    *,
    app_name: Optional[str] = None,
    cadence: str = "weekly",
    period: Any = None,
    locale: Any = None,
    today: Optional[date] = None,
    chart_renderer: Optional[ChartRenderer] = None,
    config: Optional[dict] = None,
) -> PDFResult:
    """
    Charts render on a background thread while sections are built; the
    PDF renderer waits for them only when it starts drawing.
    """
    try:
        bundle = normalize_bundle(raw)
        if not bundle.has_report_data:
            logger.info("No report data; PDF report skipped")
            return PDFResult()

        final_config = merge_config(config)
        renderer = chart_renderer or ChartRenderer.from_config(final_config["charts"])
        requests = build_chart_requests(bundle)

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="charts") as pool:
            pending_charts = pool.submit(renderer.render_all, requests)

            catalog = resolve_catalog(locale)
            sections = build_sections(
                bundle,
                display_name=app_name,
                period=period,
                cadence=cadence,
                locale=locale,
                today=today,
            )
            charts: ChartResults = pending_charts.result()

        pdf = PDFReportRenderer.from_config(final_config["pdf"], invariant=today is not None)
        output = pdf.render(
            sections,
            catalog,
            charts=charts,
            title=sections[0].content.name,
        )

        logger.info(
            "PDF report generated: %s pages, %s bytes",
            output.page_count,
            len(output.content),
        )
        return PDFResult(
            content=output.content,
            page_count=output.page_count,
            charts=_chart_summary(charts, output.placed_charts),
        )

    except Exception as exc:
        logger.exception("PDF report generation failed")
        return PDFResult(error=str(exc) or type(exc).__name__)


def _chart_summary(charts: ChartResults, placed: Tuple[ChartKind, ...]) -> Dict[str, Tuple[str, ...]]:
    return {
        "requested": tuple(sorted(k.value for k in charts)),
        "placed": tuple(sorted({k.value for k in placed})),
        "failed": tuple(sorted(k.value for k in charts.failures())),
    }
