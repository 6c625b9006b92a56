"""
Reporting Contracts
-------------------
Authoritative input contract for the reporting layer.

Rules:
- Upstream collectors may return partial objects
- Reporting layer MUST normalize them once, here
- Normalizers never raise on missing or mistyped fields
- Renderers only ever see the frozen dataclasses below
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_REPORT_NAME = "Marketing Report"


# =====================================================
# COERCION HELPERS
# =====================================================

def _as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None


def _num(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _int(value: Any) -> Optional[int]:
    number = _num(value)
    return int(number) if number is not None else None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _texts(values: Any) -> Tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(t for t in (_text(v) for v in values) if t)


def _records(values: Any) -> Tuple[Mapping[str, Any], ...]:
    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(v for v in values if isinstance(v, Mapping))


def _distribution(values: Any) -> Tuple[Tuple[str, float], ...]:
    mapping = _as_mapping(values) or {}
    pairs = []
    for label, raw in mapping.items():
        number = _num(raw)
        if number is not None:
            pairs.append((str(label), number))
    return tuple(pairs)


# =====================================================
# STORE RATINGS
# =====================================================

@dataclass(frozen=True)
class RatingDistribution:
    """Five star buckets, index 0 = 1★ ... index 4 = 5★."""

    buckets: Tuple[float, float, float, float, float] = (0.0, 0.0, 0.0, 0.0, 0.0)

    def value(self, stars: int) -> float:
        return self.buckets[stars - 1]


def normalize_rating_distribution(raw: Any) -> Optional[RatingDistribution]:
    """
    Collapse the ``"5"`` / ``5`` / ``"star5"`` key shapes into five slots.
    Missing buckets default to 0.
    """
    mapping = _as_mapping(raw)
    if mapping is None:
        return None

    buckets = []
    for stars in range(1, 6):
        value = None
        for key in (str(stars), stars, f"star{stars}"):
            value = _num(mapping.get(key))
            if value is not None:
                break
        buckets.append(value or 0.0)

    return RatingDistribution(tuple(buckets))


@dataclass(frozen=True)
class StoreRatings:
    platform: str
    average_rating: Optional[float] = None
    total_ratings: Optional[int] = None
    distribution: Optional[RatingDistribution] = None
    app_name: str = ""
    package_name: str = ""


def _normalize_store(platform: str, raw: Any) -> Optional[StoreRatings]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    return StoreRatings(
        platform=platform,
        average_rating=_num(mapping.get("averageRating")),
        total_ratings=_int(mapping.get("totalRatings")),
        distribution=normalize_rating_distribution(mapping.get("ratingDistribution")),
        app_name=_text(mapping.get("appName")),
        package_name=_text(mapping.get("packageName")),
    )


# =====================================================
# USAGE ANALYTICS
# =====================================================

@dataclass(frozen=True)
class UsageAnalytics:
    dau: Optional[int] = None
    wau: Optional[int] = None
    mau: Optional[int] = None
    new_users: Optional[int] = None
    total_users: Optional[int] = None
    average_session_duration: Optional[float] = None
    sessions_per_user: Optional[float] = None
    age_groups: Tuple[Tuple[str, float], ...] = ()
    countries: Tuple[Tuple[str, float], ...] = ()


def _normalize_usage(raw: Any) -> Optional[UsageAnalytics]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    demographics = _as_mapping(mapping.get("demographics")) or {}
    return UsageAnalytics(
        dau=_int(mapping.get("dau")),
        wau=_int(mapping.get("wau")),
        mau=_int(mapping.get("mau")),
        new_users=_int(mapping.get("newUsers")),
        total_users=_int(mapping.get("totalUsers")),
        average_session_duration=_num(mapping.get("averageSessionDuration")),
        sessions_per_user=_num(mapping.get("sessionsPerUser")),
        age_groups=_distribution(demographics.get("ageGroups")),
        countries=_distribution(demographics.get("countryDistribution")),
    )


# =====================================================
# AI NARRATIVE ANALYSIS
# =====================================================

@dataclass(frozen=True)
class KeyMetric:
    metric: str
    value: str
    trend: str = "stable"


@dataclass(frozen=True)
class OverallAnalysis:
    summary: str = ""
    key_metrics: Tuple[KeyMetric, ...] = ()
    highlights: Tuple[str, ...] = ()
    concerns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ImprovementSuggestion:
    title: str
    description: str = ""
    priority: str = "medium"
    category: str = ""
    expected_impact: str = ""


@dataclass(frozen=True)
class TrendAnalysis:
    user_growth: str = ""
    engagement: str = ""
    rating: str = ""
    predictions: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.user_growth or self.engagement or self.rating or self.predictions)


@dataclass(frozen=True)
class Sentiment:
    positive: float = 0.0
    neutral: float = 0.0
    negative: float = 0.0


@dataclass(frozen=True)
class ReviewAnalysis:
    sentiment: Optional[Sentiment] = None
    common_themes: Tuple[str, ...] = ()
    actionable_insights: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CompetitorComparison:
    competitor: str
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()
    battle_strategy: str = ""


@dataclass(frozen=True)
class CompetitivePositioning:
    market_position: str = ""
    comparisons: Tuple[CompetitorComparison, ...] = ()
    differentiation_strategy: str = ""
    quick_wins: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.market_position
            or self.comparisons
            or self.differentiation_strategy
            or self.quick_wins
        )


@dataclass(frozen=True)
class Opportunity:
    opportunity: str
    fit_score: str = ""
    fit_reason: str = ""
    required_changes: Tuple[str, ...] = ()
    estimated_effort: str = ""
    recommended_action: str = ""


@dataclass(frozen=True)
class MarketOpportunityPriority:
    opportunities: Tuple[Opportunity, ...] = ()
    strategic_recommendation: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.opportunities or self.strategic_recommendation)


@dataclass(frozen=True)
class MarketingAnalysis:
    overall: Optional[OverallAnalysis] = None
    improvements: Tuple[ImprovementSuggestion, ...] = ()
    trend: Optional[TrendAnalysis] = None
    review: Optional[ReviewAnalysis] = None
    competitive: Optional[CompetitivePositioning] = None
    market_opportunity: Optional[MarketOpportunityPriority] = None


def _normalize_overall(raw: Any) -> Optional[OverallAnalysis]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    metrics = tuple(
        KeyMetric(
            metric=_text(m.get("metric")),
            value=_text(m.get("value")),
            trend=_text(m.get("trend")).lower() or "stable",
        )
        for m in _records(mapping.get("keyMetrics"))
    )
    return OverallAnalysis(
        summary=_text(mapping.get("summary")),
        key_metrics=metrics,
        highlights=_texts(mapping.get("highlights")),
        concerns=_texts(mapping.get("concerns")),
    )


def _normalize_suggestion(rec: Mapping[str, Any]) -> ImprovementSuggestion:
    return ImprovementSuggestion(
        title=_text(rec.get("title")),
        description=_text(rec.get("description")),
        priority=_text(rec.get("priority")).lower() or "medium",
        category=_text(rec.get("category")),
        expected_impact=_text(rec.get("expectedImpact")),
    )


def _normalize_trend(raw: Any) -> Optional[TrendAnalysis]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    return TrendAnalysis(
        user_growth=_text(mapping.get("userGrowthTrend")),
        engagement=_text(mapping.get("engagementTrend")),
        rating=_text(mapping.get("ratingTrend")),
        predictions=_texts(mapping.get("predictions")),
    )


def _normalize_review(raw: Any) -> Optional[ReviewAnalysis]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    sentiment_raw = _as_mapping(mapping.get("sentiment"))
    sentiment = None
    if sentiment_raw is not None:
        sentiment = Sentiment(
            positive=_num(sentiment_raw.get("positive")) or 0.0,
            neutral=_num(sentiment_raw.get("neutral")) or 0.0,
            negative=_num(sentiment_raw.get("negative")) or 0.0,
        )
    return ReviewAnalysis(
        sentiment=sentiment,
        common_themes=_texts(mapping.get("commonThemes")),
        actionable_insights=_texts(mapping.get("actionableInsights")),
    )


def _normalize_competitive(raw: Any) -> Optional[CompetitivePositioning]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    comparisons = tuple(
        CompetitorComparison(
            competitor=_text(c.get("competitor")),
            strengths=_texts(c.get("ourStrengths")),
            weaknesses=_texts(c.get("ourWeaknesses")),
            battle_strategy=_text(c.get("battleStrategy")),
        )
        for c in _records(mapping.get("competitorComparison"))
    )
    return CompetitivePositioning(
        market_position=_text(mapping.get("marketPosition")),
        comparisons=comparisons,
        differentiation_strategy=_text(mapping.get("differentiationStrategy")),
        quick_wins=_texts(mapping.get("quickWins")),
    )


def _normalize_market_opportunity(raw: Any) -> Optional[MarketOpportunityPriority]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    opportunities = tuple(
        Opportunity(
            opportunity=_text(o.get("opportunity")),
            fit_score=_text(o.get("fitScore")).lower(),
            fit_reason=_text(o.get("fitReason")),
            required_changes=_texts(o.get("requiredChanges")),
            estimated_effort=_text(o.get("estimatedEffort")).lower(),
            recommended_action=_text(o.get("recommendedAction")),
        )
        for o in _records(mapping.get("prioritizedOpportunities"))
    )
    return MarketOpportunityPriority(
        opportunities=opportunities,
        strategic_recommendation=_text(mapping.get("strategicRecommendation")),
    )


def _normalize_analysis(raw: Any) -> Optional[MarketingAnalysis]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    return MarketingAnalysis(
        overall=_normalize_overall(mapping.get("overallAnalysis")),
        improvements=tuple(
            _normalize_suggestion(r) for r in _records(mapping.get("improvementSuggestions"))
        ),
        trend=_normalize_trend(mapping.get("trendAnalysis")),
        review=_normalize_review(mapping.get("reviewAnalysis")),
        competitive=_normalize_competitive(mapping.get("competitivePositioning")),
        market_opportunity=_normalize_market_opportunity(
            mapping.get("marketOpportunityPriority")
        ),
    )


# =====================================================
# REPOSITORY CODE IMPROVEMENTS
# =====================================================

@dataclass(frozen=True)
class CodeReference:
    file_path: str
    modification_type: str = ""
    current: str = ""
    proposed: str = ""


@dataclass(frozen=True)
class CodeImprovement:
    title: str
    description: str = ""
    priority: str = "medium"
    category: str = ""
    expected_impact: str = ""
    related_feature: str = ""
    code_references: Tuple[CodeReference, ...] = ()


@dataclass(frozen=True)
class CodeImprovements:
    repository: str = ""
    framework: str = ""
    summary: str = ""
    improvements: Tuple[CodeImprovement, ...] = ()


def _normalize_code_improvements(raw: Any) -> Optional[CodeImprovements]:
    mapping = _as_mapping(raw)
    if mapping is None:
        return None
    improvements = []
    for rec in _records(mapping.get("improvements")):
        references = tuple(
            CodeReference(
                file_path=_text(ref.get("filePath")),
                modification_type=_text(ref.get("modificationType")).lower(),
                current=_text(ref.get("currentFunctionality")),
                proposed=_text(ref.get("proposedChange")),
            )
            for ref in _records(rec.get("codeReferences"))
        )
        improvements.append(CodeImprovement(
            title=_text(rec.get("title")),
            description=_text(rec.get("description")),
            priority=_text(rec.get("priority")).lower() or "medium",
            category=_text(rec.get("category")),
            expected_impact=_text(rec.get("expectedImpact")),
            related_feature=_text(rec.get("relatedFeature")),
            code_references=references,
        ))
    return CodeImprovements(
        repository=_text(mapping.get("repository")),
        framework=_text(mapping.get("framework")),
        summary=_text(mapping.get("improvementSummary")),
        improvements=tuple(improvements),
    )


# =====================================================
# ANALYTICS BUNDLE
# =====================================================

@dataclass(frozen=True)
class AnalyticsBundle:
    google_play: Optional[StoreRatings] = None
    app_store: Optional[StoreRatings] = None
    usage: Optional[UsageAnalytics] = None
    analysis: Optional[MarketingAnalysis] = None
    code_improvements: Optional[CodeImprovements] = None

    @property
    def has_report_data(self) -> bool:
        """At least one of ratings, usage analytics or narrative analysis."""
        return any((self.google_play, self.app_store, self.usage, self.analysis))

    def stores(self) -> Tuple[StoreRatings, ...]:
        return tuple(s for s in (self.google_play, self.app_store) if s is not None)

    def display_name(self) -> str:
        if self.app_store and self.app_store.app_name:
            return self.app_store.app_name
        if self.google_play and self.google_play.package_name:
            return self.google_play.package_name.split(".")[-1]
        return DEFAULT_REPORT_NAME


def normalize_bundle(raw: Any) -> AnalyticsBundle:
    """
    Build the frozen bundle from the collectors' camelCase payload.

    Accepts an existing AnalyticsBundle unchanged.
    """
    if isinstance(raw, AnalyticsBundle):
        return raw

    mapping = _as_mapping(raw) or {}
    known = {
        "googlePlayConsole",
        "appStore",
        "firebaseAnalytics",
        "marketingAnalytics",
        "githubImprovements",
    }
    unknown = sorted(str(k) for k in mapping if k not in known)
    if unknown:
        logger.debug("Ignoring unknown bundle keys: %s", ", ".join(unknown))

    return AnalyticsBundle(
        google_play=_normalize_store("Google Play", mapping.get("googlePlayConsole")),
        app_store=_normalize_store("App Store", mapping.get("appStore")),
        usage=_normalize_usage(mapping.get("firebaseAnalytics")),
        analysis=_normalize_analysis(mapping.get("marketingAnalytics")),
        code_improvements=_normalize_code_improvements(mapping.get("githubImprovements")),
    )
