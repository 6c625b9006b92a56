import json
import logging
import subprocess
import sys
from pathlib import Path

from marketlens.cli import main, read_bundle
from marketlens.utils.logger import get_logger


def run_cli(args):
    return subprocess.run(
        [sys.executable, "-m", "marketlens.cli"] + args,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )


def test_cli_help():
    result = run_cli(["--help"])
    assert result.returncode == 0
    assert "--offline" in result.stdout


def test_cli_version():
    result = run_cli(["--version"])
    assert result.returncode == 0
    assert "MarketLens v" in result.stdout


def test_cli_writes_markdown(tmp_path, full_bundle):
    bundle = tmp_path / "bundle.json"
    bundle.write_text(json.dumps(full_bundle), encoding="utf-8")

    code = main([str(bundle), "--output-dir", str(tmp_path / "out"), "--start", "2024-03-01", "--end", "2024-03-07"])

    assert code == 0
    (md,) = (tmp_path / "out").glob("*/marketing_report.md")
    text = md.read_text(encoding="utf-8")
    assert text.startswith("# FitTrack")
    assert "2024-03-01 - 2024-03-07" in text
    assert not list((tmp_path / "out").glob("*/marketing_report.pdf"))


def test_cli_empty_bundle_exits_nonzero(tmp_path):
    bundle = tmp_path / "bundle.yaml"
    bundle.write_text("unrelated: true\n", encoding="utf-8")
    assert main([str(bundle), "--output-dir", str(tmp_path / "out")]) == 1


def test_read_bundle_yaml(tmp_path):
    path = tmp_path / "bundle.yml"
    path.write_text("firebaseAnalytics:\n  dau: 3\n", encoding="utf-8")
    assert read_bundle(Path(path)) == {"firebaseAnalytics": {"dau": 3}}


def test_get_logger_attaches_one_handler():
    first = get_logger("marketlens.tests.cli")
    second = get_logger("marketlens.tests.cli", logging.DEBUG)
    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG
    assert second.propagate is False
