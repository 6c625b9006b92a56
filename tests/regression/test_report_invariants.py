import pytest

from marketlens import generate_markdown_report, generate_pdf_report
from marketlens.reporting import AnalyticsBundle


# -------------------------------------------------
# Fixtures
# -------------------------------------------------

class ExplodingRenderer:
    """Chart renderer that must never be reached."""

    def render_all(self, requests):
        raise AssertionError("charts requested for an empty report")


EMPTY_INPUTS = [
    None,
    {},
    {"unrelatedKey": {"dau": 10}},
    {"githubImprovements": {"improvements": [{"title": "Only code"}]}},
    AnalyticsBundle(),
]


# -------------------------------------------------
# Regression Tests - MUST NEVER BREAK
# -------------------------------------------------

@pytest.mark.parametrize("raw", EMPTY_INPUTS)
def test_empty_bundle_gives_empty_markdown(raw, today):
    """
    No ratings, usage or narrative → empty output, no error.
    """
    result = generate_markdown_report(raw, today=today)
    assert result.content == ""
    assert result.error is None


@pytest.mark.parametrize("raw", EMPTY_INPUTS)
def test_empty_bundle_gives_empty_pdf(raw, today):
    result = generate_pdf_report(raw, today=today, chart_renderer=ExplodingRenderer())
    assert result.content == b""
    assert result.error is None
    assert result.page_count == 0


def test_unexpected_failure_is_reported_not_raised(full_bundle, today):
    """
    A broken collaborator surfaces as an error string.
    """
    class BrokenRenderer:
        def render_all(self, requests):
            raise RuntimeError("executor gone")

    result = generate_pdf_report(full_bundle, today=today, chart_renderer=BrokenRenderer())
    assert result.content == b""
    assert result.error == "executor gone"


def test_markdown_failure_is_reported_not_raised():
    result = generate_markdown_report(
        {"firebaseAnalytics": {"dau": 1}},
        today="not-a-date",
    )
    assert result.content == ""
    assert "isoformat" in result.error


def test_header_and_footer_always_present(usage_only_bundle, today):
    content = generate_markdown_report(usage_only_bundle, today=today).content
    assert content.startswith("# ")
    assert content.endswith("*Generated by MarketLens - 2024-03-15*")
