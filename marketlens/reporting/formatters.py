import math
from typing import Optional, Tuple

from marketlens.localization import LocaleCatalog

BAR_BLOCKS = 10
MAX_STARS = 5

FULL_STAR = "★"
HALF_STAR = "½"
EMPTY_STAR = "☆"
FILLED_BLOCK = "█"
EMPTY_BLOCK = "░"

TREND_ARROWS = {"up": "↑", "down": "↓", "stable": "→"}


def round_half_up(value: float) -> int:
    """2.5 → 3, 6.6 → 7. Python's round() would give 2 for 2.5."""
    return int(math.floor(value + 0.5))


def _separators(catalog: Optional[LocaleCatalog]) -> Tuple[str, str]:
    if catalog is None:
        return ",", "."
    return (
        catalog.get("thousands_separator", ","),
        catalog.get("decimal_separator", "."),
    )


def _localize(text: str, catalog: Optional[LocaleCatalog]) -> str:
    thousands, decimal = _separators(catalog)
    if (thousands, decimal) == (",", "."):
        return text
    return text.replace(",", "\0").replace(".", decimal).replace("\0", thousands)


def fmt_count(value: Optional[float], catalog: Optional[LocaleCatalog] = None) -> str:
    """Integer counts with locale thousands separators; missing → "N/A"."""
    if value is None:
        return "N/A"
    return _localize(f"{int(value):,}", catalog)


def fmt_decimal(
    value: Optional[float],
    catalog: Optional[LocaleCatalog] = None,
    decimals: int = 1,
) -> str:
    if value is None:
        return "-"
    return _localize(f"{value:,.{decimals}f}", catalog)


def fmt_number(value: Optional[float], catalog: Optional[LocaleCatalog] = None) -> str:
    """
    Pass-through number display: 45 → "45", 45.5 → "45.5".
    Used for input percentages that are shown as given.
    """
    if value is None:
        return "-"
    if float(value).is_integer():
        return _localize(str(int(value)), catalog)
    return _localize(repr(float(value)), catalog)


# -----------------------------------------------------
# GLYPHS
# -----------------------------------------------------

def filled_blocks(percentage: float, max_blocks: int = BAR_BLOCKS) -> int:
    clamped = max(0.0, min(100.0, float(percentage)))
    return round_half_up(clamped / 100 * max_blocks)


def bar_glyph(percentage: float, max_blocks: int = BAR_BLOCKS) -> str:
    filled = filled_blocks(percentage, max_blocks)
    return FILLED_BLOCK * filled + EMPTY_BLOCK * (max_blocks - filled)


def star_counts(rating: float) -> Tuple[int, int, int]:
    """(full, half, empty) star counts after clamping the rating to [0, 5]."""
    clamped = max(0.0, min(float(MAX_STARS), float(rating)))
    full = int(math.floor(clamped))
    half = 1 if clamped - full >= 0.5 else 0
    return full, half, MAX_STARS - full - half


def star_glyph(rating: float) -> str:
    full, half, empty = star_counts(rating)
    return FULL_STAR * full + HALF_STAR * half + EMPTY_STAR * empty


def bucket_label(stars: int) -> str:
    """Row label of the rating-distribution table, e.g. ★★★☆☆."""
    return FULL_STAR * stars + EMPTY_STAR * (MAX_STARS - stars)


def normalize_trend(trend: Optional[str]) -> str:
    trend = (trend or "").lower()
    return trend if trend in TREND_ARROWS else "stable"


def trend_arrow(trend: Optional[str]) -> str:
    return TREND_ARROWS[normalize_trend(trend)]
