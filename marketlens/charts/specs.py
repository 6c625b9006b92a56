"""
Chart request derivation.

At most one request per ChartKind, derived straight from the bundle.
Specs are Chart.js configs so they can be sent to QuickChart untouched;
the matplotlib backend reads the same dicts.
"""

from typing import List, Sequence, Tuple

from marketlens.reporting.contracts import AnalyticsBundle, RatingDistribution
from marketlens.reporting.formatters import round_half_up

from .contracts import ChartKind, ChartRequest, ChartSpec

RETENTION_GOOD = "#4CAF50"
RETENTION_AVERAGE = "#ff9800"
RETENTION_POOR = "#f44336"
GAUGE_TRACK = "#e0e0e0"

RATING_COLORS = ["#f44336", "#ff9800", "#ffeb3b", "#8bc34a", "#4CAF50"]
PIE_COLORS = ["#2196F3", "#4CAF50", "#ff9800", "#9c27b0", "#607d8b", "#e91e63"]
DOUGHNUT_COLORS = ["#2196F3", "#f44336", "#4CAF50", "#ff9800", "#9c27b0", "#607d8b"]
ENGAGEMENT_COLORS = ["#2196F3", "#4CAF50", "#ff9800"]
SENTIMENT_COLORS = ["#4CAF50", "#9e9e9e", "#f44336"]

TITLE_FONT = {"size": 28, "weight": "bold"}


def retention_color(ratio: float) -> str:
    """≥20 green, ≥10 amber, otherwise red."""
    if ratio >= 20:
        return RETENTION_GOOD
    if ratio >= 10:
        return RETENTION_AVERAGE
    return RETENTION_POOR


def gauge_ratio(dau: int, mau: int) -> int:
    """Whole-percent DAU/MAU clamped to [0, 100]."""
    if not mau or mau <= 0:
        return 0
    return max(0, min(100, round_half_up((dau or 0) / mau * 100)))


def _title(text: str, **extra) -> dict:
    return {"display": True, "text": text, "font": TITLE_FONT, **extra}


# -----------------------------------------------------
# SPEC BUILDERS
# -----------------------------------------------------

def rating_distribution_spec(distribution: RatingDistribution) -> ChartSpec:
    return {
        "type": "bar",
        "data": {
            "labels": ["1 Star", "2 Stars", "3 Stars", "4 Stars", "5 Stars"],
            "datasets": [{
                "label": "Ratings",
                "data": list(distribution.buckets),
                "backgroundColor": RATING_COLORS,
            }],
        },
        "options": {
            "indexAxis": "y",
            "plugins": {
                "title": _title("Rating Distribution"),
                "legend": {"display": False},
            },
            "scales": {
                "x": {"beginAtZero": True, "ticks": {"font": {"size": 20}}},
                "y": {"ticks": {"font": {"size": 22}}},
            },
        },
    }


def _share_spec(chart_type: str, title: str, pairs: Sequence[Tuple[str, float]],
                colors: List[str], legend: str = "right") -> ChartSpec:
    return {
        "type": chart_type,
        "data": {
            "labels": [label for label, _ in pairs],
            "datasets": [{
                "data": [value for _, value in pairs],
                "backgroundColor": colors,
            }],
        },
        "options": {
            "plugins": {
                "title": _title(title),
                "legend": {"position": legend, "labels": {"font": {"size": 36}}},
            },
        },
    }


def engagement_spec(dau: int, wau: int, mau: int) -> ChartSpec:
    return {
        "type": "bar",
        "data": {
            "labels": ["DAU", "WAU", "MAU"],
            "datasets": [{
                "label": "Active Users",
                "data": [dau, wau, mau],
                "backgroundColor": ENGAGEMENT_COLORS,
            }],
        },
        "options": {
            "plugins": {
                "title": _title("User Engagement"),
                "legend": {"position": "top", "labels": {"font": {"size": 36}}},
            },
            "scales": {
                "y": {"beginAtZero": True, "ticks": {"font": {"size": 20}}},
                "x": {"ticks": {"font": {"size": 22}}},
            },
        },
    }


def retention_spec(dau: int, mau: int) -> ChartSpec:
    ratio = gauge_ratio(dau, mau)
    return {
        "type": "doughnut",
        "data": {
            "datasets": [{
                "data": [ratio, 100 - ratio],
                "backgroundColor": [retention_color(ratio), GAUGE_TRACK],
                "borderWidth": 0,
            }],
        },
        "options": {
            "circumference": 180,
            "rotation": 270,
            "cutout": "70%",
            "plugins": {
                "title": _title(f"Retention Ratio: {ratio}%", position="bottom"),
                "legend": {"display": False},
                "datalabels": {"display": False},
            },
        },
    }


# -----------------------------------------------------
# REQUEST DERIVATION
# -----------------------------------------------------

def build_chart_requests(bundle: AnalyticsBundle) -> List[ChartRequest]:
    requests: List[ChartRequest] = []

    distribution = None
    if bundle.google_play and bundle.google_play.distribution:
        distribution = bundle.google_play.distribution
    elif bundle.app_store and bundle.app_store.distribution:
        distribution = bundle.app_store.distribution
    if distribution is not None:
        requests.append(ChartRequest(
            ChartKind.RATING_DISTRIBUTION,
            rating_distribution_spec(distribution),
            "Rating Distribution",
        ))

    usage = bundle.usage
    if usage is not None:
        dau, wau, mau = usage.dau or 0, usage.wau or 0, usage.mau or 0
        if dau > 0 or wau > 0 or mau > 0:
            requests.append(ChartRequest(
                ChartKind.ENGAGEMENT,
                engagement_spec(dau, wau, mau),
                "User Engagement",
            ))
            if mau > 0:
                requests.append(ChartRequest(
                    ChartKind.RETENTION_RATIO,
                    retention_spec(dau, mau),
                    "Retention Ratio",
                ))

        if usage.age_groups:
            requests.append(ChartRequest(
                ChartKind.DEMOGRAPHICS,
                _share_spec("pie", "Age Demographics", usage.age_groups, PIE_COLORS),
                "Age Demographics",
            ))

        if usage.countries:
            requests.append(ChartRequest(
                ChartKind.COUNTRY_DISTRIBUTION,
                _share_spec("doughnut", "Country Distribution", usage.countries, DOUGHNUT_COLORS),
                "Country Distribution",
            ))

    review = bundle.analysis.review if bundle.analysis else None
    if review is not None and review.sentiment is not None:
        s = review.sentiment
        requests.append(ChartRequest(
            ChartKind.SENTIMENT,
            _share_spec(
                "doughnut",
                "Review Sentiment",
                [("Positive", s.positive), ("Neutral", s.neutral), ("Negative", s.negative)],
                SENTIMENT_COLORS,
                legend="bottom",
            ),
            "Review Sentiment",
        ))

    return requests
