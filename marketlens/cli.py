"""
MarketLens CLI
Markdown + ReportLab PDF marketing reports from an analytics bundle file
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from marketlens.__version__ import __version__
from marketlens.config.loader import load_config
from marketlens.reporting.orchestrator import generate_markdown_report, generate_pdf_report
from marketlens.utils.logger import get_logger

logger = logging.getLogger(__name__)

MARKDOWN_NAME = "marketing_report.md"
PDF_NAME = "marketing_report.pdf"


def read_bundle(input_path: Path) -> Dict[str, Any]:
    """Analytics bundle from a .json or .yaml/.yml file."""
    with open(input_path, "r", encoding="utf-8") as f:
        if input_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Input must contain a mapping: {input_path}")
    return data


# -------------------------------------------------
# PROGRAMMATIC ENTRY
# -------------------------------------------------
def run_report(
    input_path: str,
    config_path: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    generate_markdown: bool = True,
    generate_pdf: bool = False,
    locale: Optional[str] = None,
    cadence: Optional[str] = None,
    period: Optional[tuple] = None,
) -> Dict[str, Optional[str]]:
    """
    Returns:
        {
            "markdown": <path or None>,
            "pdf": <path or None>,
            "run_dir": <path>
        }
    """
    final_config = config if config is not None else load_config(config_path)
    report_cfg = final_config.get("report", {})

    run_dir = Path(final_config.get("output_dir", "runs")) / datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    run_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Run directory: %s", run_dir)

    raw = read_bundle(Path(input_path))
    options = dict(
        cadence=cadence or report_cfg.get("cadence", "weekly"),
        locale=locale or report_cfg.get("locale"),
        period=period,
    )

    md_path = None
    pdf_path = None

    if generate_markdown:
        result = generate_markdown_report(raw, **options)
        if result.error:
            logger.error("Markdown report failed: %s", result.error)
        elif result.content:
            md_path = run_dir / MARKDOWN_NAME
            md_path.write_text(result.content, encoding="utf-8")
            logger.info("Markdown generated: %s", md_path)
        else:
            logger.warning("No report data in %s", input_path)

    if generate_pdf:
        result = generate_pdf_report(raw, config=final_config, **options)
        if result.error:
            logger.error("PDF report failed: %s", result.error)
        elif result.content:
            pdf_path = run_dir / PDF_NAME
            pdf_path.write_bytes(result.content)
            logger.info("PDF generated: %s (%s pages)", pdf_path, result.page_count)
            if result.charts.get("failed"):
                logger.warning("Charts left out: %s", ", ".join(result.charts["failed"]))
        else:
            logger.warning("No report data in %s", input_path)

    return {
        "markdown": str(md_path) if md_path else None,
        "pdf": str(pdf_path) if pdf_path else None,
        "run_dir": str(run_dir),
    }


# -------------------------------------------------
# CLI ENTRY
# -------------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=f"MarketLens v{__version__}"
    )

    parser.add_argument("input", nargs="?", help="Analytics bundle (JSON or YAML)")
    parser.add_argument("--config", required=False, help="Path to config YAML")

    parser.add_argument("--locale", help="Report locale, e.g. ja or de_DE")
    parser.add_argument("--cadence", choices=["daily", "weekly", "monthly"])
    parser.add_argument("--start", help="Report period start date")
    parser.add_argument("--end", help="Report period end date")

    parser.add_argument("--markdown", action="store_true", help="Export Markdown report")
    parser.add_argument("--pdf", action="store_true", help="Export PDF report")
    parser.add_argument("--offline", action="store_true", help="Render charts locally with matplotlib")
    parser.add_argument("--output-dir", help="Override output directory")

    parser.add_argument("--version", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    # ---- VERSION ----
    if args.version:
        print(f"MarketLens v{__version__}")
        return 0

    # ---- LOGGING ----
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    cli_logger = get_logger("marketlens.cli.run", level)

    # ---- INPUT ----
    if not args.input:
        parser.error("Input file required")

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(input_path)

    if bool(args.start) != bool(args.end):
        parser.error("--start and --end must be given together")

    # ---- CONFIG ----
    config = load_config(args.config)
    if args.offline:
        config["charts"]["provider"] = "matplotlib"
    if args.output_dir:
        config["output_dir"] = args.output_dir

    want_pdf = args.pdf
    want_markdown = args.markdown or not args.pdf

    result = run_report(
        input_path=str(input_path),
        config=config,
        generate_markdown=want_markdown,
        generate_pdf=want_pdf,
        locale=args.locale,
        cadence=args.cadence,
        period=(args.start, args.end) if args.start else None,
    )

    cli_logger.info("Report run finished")
    print("\n✅ Report generated")
    if result["markdown"]:
        print(f"📝 Markdown: {result['markdown']}")
    if result["pdf"]:
        print(f"📄 PDF: {result['pdf']}")
    print(f"📁 Run folder: {result['run_dir']}")

    return 0 if (result["markdown"] or result["pdf"]) else 1


if __name__ == "__main__":
    sys.exit(main())
