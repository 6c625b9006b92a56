import copy

import pytest

from marketlens import generate_pdf_report
from marketlens.charts import ChartKind


def render(raw, today, pdf_config, chart_renderer, **kwargs):
    result = generate_pdf_report(
        raw,
        today=today,
        config=pdf_config,
        chart_renderer=chart_renderer,
        **kwargs,
    )
    assert result.error is None
    return result


def pdf_literal(text):
    """Text as it appears inside an uncompressed PDF string literal."""
    escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    return escaped.encode("latin-1")


def test_full_report_renders(full_bundle, today, pdf_config, make_chart_renderer):
    result = render(full_bundle, today, pdf_config, make_chart_renderer())

    assert result.content.startswith(b"%PDF")
    assert result.page_count >= 10
    assert f"Page 1 of {result.page_count}".encode() in result.content
    assert f"Page {result.page_count} of {result.page_count}".encode() in result.content
    assert b"Generated by MarketLens - 2024-03-15" in result.content


def test_every_chart_placed_when_service_healthy(full_bundle, today, pdf_config, make_chart_renderer):
    result = render(full_bundle, today, pdf_config, make_chart_renderer())
    assert result.charts["failed"] == ()
    assert set(result.charts["placed"]) == {k.value for k in ChartKind}


def test_failed_chart_is_left_out(full_bundle, today, pdf_config, make_chart_renderer):
    renderer = make_chart_renderer(fail_titles=["Review Sentiment"])
    result = render(full_bundle, today, pdf_config, renderer)

    assert result.content.startswith(b"%PDF")
    assert result.charts["failed"] == (ChartKind.SENTIMENT.value,)
    assert ChartKind.SENTIMENT.value not in result.charts["placed"]
    assert len(result.charts["placed"]) == 5


def test_corrupt_chart_image_is_skipped(full_bundle, today, pdf_config, make_chart_renderer):
    renderer = make_chart_renderer(corrupt_titles=["Age Demographics"])
    result = render(full_bundle, today, pdf_config, renderer)

    assert result.content.startswith(b"%PDF")
    assert ChartKind.DEMOGRAPHICS.value not in result.charts["placed"]
    assert ChartKind.COUNTRY_DISTRIBUTION.value in result.charts["placed"]


def test_highlights_overflow_marker(full_bundle, today, pdf_config, make_chart_renderer):
    raw = copy.deepcopy(full_bundle)
    overall = raw["marketingAnalytics"]["overallAnalysis"]
    overall["highlights"] = [f"Win number {i:02d}" for i in range(1, 9)]
    overall["concerns"] = ["Concern alpha", "Concern beta"]

    content = render(raw, today, pdf_config, make_chart_renderer()).content

    for i in range(1, 6):
        assert f"Win number {i:02d}".encode() in content
    for i in range(6, 9):
        assert f"Win number {i:02d}".encode() not in content
    assert b"+ 3 more highlights" in content
    assert b"Concern alpha" in content
    assert b"Concern beta" in content
    assert b"more concerns" not in content


def test_overflow_markers_follow_locale(full_bundle, today, pdf_config, make_chart_renderer):
    raw = copy.deepcopy(full_bundle)
    overall = raw["marketingAnalytics"]["overallAnalysis"]
    overall["highlights"] = [f"Point {i}" for i in range(1, 9)]

    content = render(raw, today, pdf_config, make_chart_renderer(), locale="fr_FR").content

    assert b"+ 3 points forts de plus" in content
    assert b"more highlights" not in content
    assert b"+ 1 de plus..." in content
    assert b"more..." not in content


def test_long_lists_repeat_section_title(full_bundle, today, pdf_config, make_chart_renderer):
    raw = copy.deepcopy(full_bundle)
    raw["marketingAnalytics"]["improvementSuggestions"] = [
        {
            "title": f"Suggestion {i}",
            "description": "Rework the paywall copy and retest pricing tiers. " * 3,
            "priority": ["high", "medium", "low"][i % 3],
            "category": "Monetization",
            "expectedImpact": "Higher conversion",
        }
        for i in range(30)
    ]
    result = render(raw, today, pdf_config, make_chart_renderer())
    assert pdf_literal("Improvement Suggestions (continued)") in result.content
    assert b"Suggestion 29" in result.content


def test_block_taller_than_page_continues(full_bundle, today, pdf_config, make_chart_renderer):
    raw = copy.deepcopy(full_bundle)
    improvement = raw["githubImprovements"]["improvements"][0]
    improvement["description"] = "Split the catalog into pages. " * 400
    small = render(full_bundle, today, pdf_config, make_chart_renderer())
    large = render(raw, today, pdf_config, make_chart_renderer())
    assert large.page_count > small.page_count
    assert pdf_literal("Codebase Improvement Suggestions (continued)") in large.content


def test_badges_and_markers(full_bundle, today, pdf_config, make_chart_renderer):
    content = render(full_bundle, today, pdf_config, make_chart_renderer()).content
    assert b"vs StrideUp" in content
    assert b"EXCELLENT" in content
    assert b"UNCLEAR" in content
    assert b"Effort: High" in content
    assert b"+ 1 more..." in content
    assert b"2,000 +" in content
    assert b"DAU: 2,000" in content
    assert b"MAU: 10,000" in content


def test_cover_page(full_bundle, today, pdf_config, make_chart_renderer):
    content = render(
        full_bundle, today, pdf_config, make_chart_renderer(),
        cadence="monthly", period=("2024-02-01", "2024-02-29"),
    ).content
    assert b"FitTrack" in content
    assert b"Monthly Report" in content
    assert b"2024-02-01 - 2024-02-29" in content
    assert b"Generated: 2024-03-15" in content


def test_frozen_clock_gives_identical_bytes(full_bundle, today, pdf_config, make_chart_renderer):
    first = render(full_bundle, today, pdf_config, make_chart_renderer())
    second = render(full_bundle, today, pdf_config, make_chart_renderer())
    assert first.content == second.content


@pytest.mark.parametrize("locale", ["ja", "zh_CN", "ko_KR", "ru_RU", "de_DE"])
def test_non_latin_locales_render(full_bundle, today, pdf_config, make_chart_renderer, locale):
    result = render(full_bundle, today, pdf_config, make_chart_renderer(), locale=locale)
    assert result.content.startswith(b"%PDF")
    assert result.page_count >= 10


def test_report_without_charts(today, pdf_config, make_chart_renderer):
    raw = {"marketingAnalytics": {"trendAnalysis": {"predictions": ["Growth continues"]}}}
    result = render(raw, today, pdf_config, make_chart_renderer())
    assert result.page_count == 2
    assert result.charts["requested"] == ()
    assert b"-> Growth continues" in result.content
