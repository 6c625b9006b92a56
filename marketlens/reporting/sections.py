"""
Section Builder
---------------
Turns a normalized AnalyticsBundle into the ordered section list that
both the Markdown and the PDF renderer consume.

Rules:
- Section order is fixed by CANONICAL_ORDER, never by input order
- Header and Footer are always present
- Every other section appears only when its data is present
- Derived values (retention, star counts, sorted distributions)
  are computed here once, renderers only format them
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional, Sequence, Tuple, Union

from marketlens.localization import resolve_catalog

from .contracts import (
    AnalyticsBundle,
    CodeImprovements,
    CompetitivePositioning,
    ImprovementSuggestion,
    MarketOpportunityPriority,
    ReviewAnalysis,
    TrendAnalysis,
)
from .formatters import normalize_trend, round_half_up, star_counts

logger = logging.getLogger(__name__)

CADENCES = ("daily", "weekly", "monthly")
TOP_COUNTRIES = 10


class SectionKind(str, Enum):
    HEADER = "header"
    EXECUTIVE_SUMMARY = "executive_summary"
    HIGHLIGHTS_CONCERNS = "highlights_concerns"
    USER_ANALYTICS = "user_analytics"
    RATINGS_REVIEWS = "ratings_reviews"
    COMPETITIVE_POSITIONING = "competitive_positioning"
    MARKET_OPPORTUNITY = "market_opportunity"
    TREND_ANALYSIS = "trend_analysis"
    IMPROVEMENTS = "improvements"
    CODE_IMPROVEMENTS = "code_improvements"
    FOOTER = "footer"


CANONICAL_ORDER: Tuple[SectionKind, ...] = tuple(SectionKind)


# =====================================================
# SECTION PAYLOADS
# =====================================================

@dataclass(frozen=True)
class HeaderContent:
    name: str
    cadence: str
    generated: str
    period: Optional[str] = None
    data_sources: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetricRow:
    metric: str
    value: str
    trend: str  # up | down | stable


@dataclass(frozen=True)
class ExecutiveSummaryContent:
    summary: str
    metrics: Tuple[MetricRow, ...] = ()


@dataclass(frozen=True)
class HighlightsConcernsContent:
    highlights: Tuple[str, ...] = ()
    concerns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class UserAnalyticsContent:
    dau: Optional[int] = None
    wau: Optional[int] = None
    mau: Optional[int] = None
    new_users: Optional[int] = None
    retention: Optional[float] = None
    session_minutes: Optional[int] = None
    session_seconds: Optional[int] = None
    sessions_per_user: Optional[float] = None
    age_groups: Tuple[Tuple[str, float], ...] = ()
    countries: Tuple[Tuple[str, float], ...] = ()

    @property
    def has_session_stats(self) -> bool:
        return self.session_minutes is not None or self.sessions_per_user is not None


@dataclass(frozen=True)
class StoreRatingRow:
    platform: str
    rating: float
    stars: Tuple[int, int, int]  # full, half, empty
    total_ratings: int


@dataclass(frozen=True)
class DistributionTable:
    """
    Star-bucket table. ``columns`` names the store(s) supplying data;
    rows run 5★ → 1★ with one value per column.
    """

    columns: Tuple[str, ...]
    rows: Tuple[Tuple[int, Tuple[float, ...]], ...]


@dataclass(frozen=True)
class RatingsReviewsContent:
    ratings: Tuple[StoreRatingRow, ...] = ()
    distribution: Optional[DistributionTable] = None
    review: Optional[ReviewAnalysis] = None


@dataclass(frozen=True)
class ImprovementsContent:
    suggestions: Tuple[ImprovementSuggestion, ...]


@dataclass(frozen=True)
class FooterContent:
    generated: str


Payload = Union[
    HeaderContent,
    ExecutiveSummaryContent,
    HighlightsConcernsContent,
    UserAnalyticsContent,
    RatingsReviewsContent,
    CompetitivePositioning,
    MarketOpportunityPriority,
    TrendAnalysis,
    ImprovementsContent,
    CodeImprovements,
    FooterContent,
]


@dataclass(frozen=True)
class Section:
    kind: SectionKind
    content: Payload


# =====================================================
# DERIVED VALUES
# =====================================================

def retention_ratio(dau: Optional[int], mau: Optional[int]) -> Optional[float]:
    """DAU / MAU × 100 with one decimal; None unless MAU > 0."""
    if dau is None or not mau or mau <= 0:
        return None
    return round_half_up(dau / mau * 1000) / 10


def split_duration(seconds: Optional[float]) -> Tuple[Optional[int], Optional[int]]:
    if seconds is None:
        return None, None
    total = int(seconds)
    return total // 60, total % 60


def sort_distribution(
    pairs: Sequence[Tuple[str, float]],
    limit: Optional[int] = None,
) -> Tuple[Tuple[str, float], ...]:
    ordered = sorted(pairs, key=lambda p: p[1], reverse=True)
    return tuple(ordered[:limit] if limit else ordered)


def normalize_cadence(cadence: Optional[str]) -> str:
    cadence = (cadence or "").lower()
    return cadence if cadence in CADENCES else "monthly"


def format_period(period: Any) -> Optional[str]:
    """``("2024-01-01", "2024-01-07")`` → ``"2024-01-01 - 2024-01-07"``."""
    if not period:
        return None
    if isinstance(period, (tuple, list)) and len(period) == 2:
        return f"{period[0]} - {period[1]}"
    return str(period)


# =====================================================
# PER-SECTION BUILDERS
# =====================================================

def _header(bundle, name, cadence, period, ai_label, today) -> HeaderContent:
    sources = []
    if bundle.google_play:
        sources.append("Google Play")
    if bundle.app_store:
        sources.append("App Store")
    if bundle.usage:
        sources.append("Firebase Analytics")
    if bundle.analysis:
        sources.append(ai_label)

    return HeaderContent(
        name=name,
        cadence=cadence,
        generated=today.isoformat(),
        period=period,
        data_sources=tuple(sources),
    )


def _executive_summary(bundle: AnalyticsBundle) -> Optional[ExecutiveSummaryContent]:
    overall = bundle.analysis.overall if bundle.analysis else None
    if overall is None:
        return None
    return ExecutiveSummaryContent(
        summary=overall.summary,
        metrics=tuple(
            MetricRow(m.metric, m.value, normalize_trend(m.trend))
            for m in overall.key_metrics
        ),
    )


def _highlights_concerns(bundle: AnalyticsBundle) -> Optional[HighlightsConcernsContent]:
    overall = bundle.analysis.overall if bundle.analysis else None
    if overall is None or not (overall.highlights or overall.concerns):
        return None
    return HighlightsConcernsContent(overall.highlights, overall.concerns)


def _user_analytics(bundle: AnalyticsBundle) -> Optional[UserAnalyticsContent]:
    usage = bundle.usage
    if usage is None:
        return None

    minutes, seconds = split_duration(usage.average_session_duration)
    return UserAnalyticsContent(
        dau=usage.dau,
        wau=usage.wau,
        mau=usage.mau,
        new_users=usage.new_users,
        retention=retention_ratio(usage.dau, usage.mau),
        session_minutes=minutes,
        session_seconds=seconds,
        sessions_per_user=usage.sessions_per_user,
        age_groups=sort_distribution(usage.age_groups),
        countries=sort_distribution(usage.countries, TOP_COUNTRIES),
    )


def _distribution_table(bundle: AnalyticsBundle) -> Optional[DistributionTable]:
    stores = [s for s in bundle.stores() if s.distribution is not None]
    if not stores:
        return None

    rows = tuple(
        (stars, tuple(s.distribution.value(stars) for s in stores))
        for stars in range(5, 0, -1)
    )
    return DistributionTable(
        columns=tuple(s.platform for s in stores),
        rows=rows,
    )


def _ratings_reviews(bundle: AnalyticsBundle) -> Optional[RatingsReviewsContent]:
    review = bundle.analysis.review if bundle.analysis else None
    if not bundle.stores() and review is None:
        return None

    ratings = tuple(
        StoreRatingRow(
            platform=store.platform,
            rating=store.average_rating,
            stars=star_counts(store.average_rating),
            total_ratings=store.total_ratings or 0,
        )
        for store in bundle.stores()
        if store.average_rating
    )
    return RatingsReviewsContent(
        ratings=ratings,
        distribution=_distribution_table(bundle),
        review=review,
    )


def _competitive(bundle: AnalyticsBundle) -> Optional[CompetitivePositioning]:
    competitive = bundle.analysis.competitive if bundle.analysis else None
    if competitive is None or competitive.is_empty:
        return None
    return competitive


def _market_opportunity(bundle: AnalyticsBundle) -> Optional[MarketOpportunityPriority]:
    priority = bundle.analysis.market_opportunity if bundle.analysis else None
    if priority is None or priority.is_empty:
        return None
    return priority


def _trend(bundle: AnalyticsBundle) -> Optional[TrendAnalysis]:
    trend = bundle.analysis.trend if bundle.analysis else None
    if trend is None or trend.is_empty:
        return None
    return trend


def _improvements(bundle: AnalyticsBundle) -> Optional[ImprovementsContent]:
    if not bundle.analysis or not bundle.analysis.improvements:
        return None
    return ImprovementsContent(bundle.analysis.improvements)


def _code_improvements(bundle: AnalyticsBundle) -> Optional[CodeImprovements]:
    code = bundle.code_improvements
    if code is None or not code.improvements:
        return None
    return code


_BUILDERS = (
    (SectionKind.EXECUTIVE_SUMMARY, _executive_summary),
    (SectionKind.HIGHLIGHTS_CONCERNS, _highlights_concerns),
    (SectionKind.USER_ANALYTICS, _user_analytics),
    (SectionKind.RATINGS_REVIEWS, _ratings_reviews),
    (SectionKind.COMPETITIVE_POSITIONING, _competitive),
    (SectionKind.MARKET_OPPORTUNITY, _market_opportunity),
    (SectionKind.TREND_ANALYSIS, _trend),
    (SectionKind.IMPROVEMENTS, _improvements),
    (SectionKind.CODE_IMPROVEMENTS, _code_improvements),
)


# =====================================================
# PUBLIC ENTRY
# =====================================================

def build_sections(
    bundle: AnalyticsBundle,
    display_name: Optional[str] = None,
    period: Any = None,
    cadence: str = "weekly",
    locale: Any = None,
    today: Optional[date] = None,
) -> Tuple[Section, ...]:
    """
    Ordered, immutable section list for one report.

    ``locale`` only affects the AI-analysis data-source label in the
    header; every other label is resolved by the renderers.
    """
    today = today or date.today()
    ai_label = resolve_catalog(locale)["ai_analysis"]

    sections = [
        Section(
            SectionKind.HEADER,
            _header(
                bundle,
                display_name or bundle.display_name(),
                normalize_cadence(cadence),
                format_period(period),
                ai_label,
                today,
            ),
        )
    ]

    for kind, builder in _BUILDERS:
        content = builder(bundle)
        if content is not None:
            sections.append(Section(kind, content))

    sections.append(Section(SectionKind.FOOTER, FooterContent(today.isoformat())))

    logger.debug(
        "Built sections: %s",
        ", ".join(s.kind.value for s in sections),
    )
    return tuple(sections)
