import pytest

from marketlens.localization import resolve_catalog
from marketlens.reporting.formatters import (
    bar_glyph,
    bucket_label,
    filled_blocks,
    fmt_count,
    fmt_decimal,
    fmt_number,
    round_half_up,
    star_counts,
    star_glyph,
    trend_arrow,
)


@pytest.mark.parametrize(
    "rating, expected",
    [
        (0, (0, 0, 5)),
        (1, (1, 0, 4)),
        (2.4, (2, 0, 3)),
        (2.5, (2, 1, 2)),
        (3.0, (3, 0, 2)),
        (4.9, (4, 1, 0)),
        (5.0, (5, 0, 0)),
        (6.0, (5, 0, 0)),
        (-1, (0, 0, 5)),
    ],
)
def test_star_counts_are_clamped(rating, expected):
    assert star_counts(rating) == expected
    assert sum(star_counts(rating)) == 5


def test_star_glyph_uses_half_marker():
    assert star_glyph(3.5) == "★★★½☆"
    assert star_glyph(6) == "★★★★★"


@pytest.mark.parametrize(
    "value, filled",
    [(-10, 0), (0, 0), (33, 3), (50, 5), (66, 7), (100, 10), (150, 10)],
)
def test_bar_filled_blocks(value, filled):
    assert filled_blocks(value) == filled
    glyph = bar_glyph(value)
    assert len(glyph) == 10
    assert glyph.count("█") == filled


def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(6.6) == 7


def test_bucket_label():
    assert bucket_label(5) == "★★★★★"
    assert bucket_label(1) == "★☆☆☆☆"


def test_trend_arrow_defaults_to_stable():
    assert trend_arrow("up") == "↑"
    assert trend_arrow("DOWN") == "↓"
    assert trend_arrow("sideways") == "→"
    assert trend_arrow(None) == "→"


def test_counts_and_decimals_follow_catalog_separators():
    en = resolve_catalog("en")
    de = resolve_catalog("de_DE")

    assert fmt_count(12840, en) == "12,840"
    assert fmt_count(None, en) == "N/A"
    assert fmt_decimal(4.25, en, 2) == "4.25"

    thousands = de["thousands_separator"]
    decimal = de["decimal_separator"]
    assert fmt_count(12840, de) == f"12{thousands}840"
    assert fmt_decimal(1234.5, de) == f"1{thousands}234{decimal}5"


def test_fmt_number_keeps_input_precision():
    assert fmt_number(45) == "45"
    assert fmt_number(45.0) == "45"
    assert fmt_number(45.5) == "45.5"
