"""
Markdown Renderer
-----------------
One block per section, blocks joined by a horizontal rule.

Rules:
- Labels come from the LocaleCatalog, narrative text passes through
- No clock access here; dates are carried by the sections
- Same sections + same catalog → byte-identical output
"""

from typing import Callable, Dict, List, Sequence

from marketlens.localization import LocaleCatalog

from .contracts import CodeImprovements, CompetitivePositioning, MarketOpportunityPriority, TrendAnalysis
from .formatters import (
    bar_glyph,
    bucket_label,
    fmt_count,
    fmt_decimal,
    fmt_number,
    star_glyph,
    trend_arrow,
)
from .sections import (
    ExecutiveSummaryContent,
    FooterContent,
    HeaderContent,
    HighlightsConcernsContent,
    ImprovementsContent,
    RatingsReviewsContent,
    Section,
    SectionKind,
    UserAnalyticsContent,
)

BLOCK_SEPARATOR = "\n\n---\n\n"

PRIORITY_EMOJI = {"high": "🔴", "medium": "🟡", "low": "🟢"}
FIT_EMOJI = {"excellent": "🟢", "good": "🔵", "moderate": "🟡", "poor": "🔴"}
FIT_EMOJI_DEFAULT = "⚪"
MODIFICATION_ICONS = {"add": "+", "modify": "~", "refactor": "R", "optimize": "O"}


def _priority_emoji(priority: str) -> str:
    return PRIORITY_EMOJI.get(priority, PRIORITY_EMOJI["low"])


def _escape_cell(text: str) -> str:
    return (text or "").replace("|", "\\|").replace("\r\n", " ").replace("\n", " ")


def _bar_cell(value: float, catalog: LocaleCatalog) -> str:
    return f"{bar_glyph(value)} {fmt_number(value, catalog)}%"


def _cadence_label(cadence: str, t: LocaleCatalog) -> str:
    return t[f"{cadence}_report"]


# =====================================================
# BLOCK RENDERERS
# =====================================================

def _header(c: HeaderContent, t: LocaleCatalog) -> str:
    lines = [
        f"# {c.name}",
        "",
        f"**{t['report_type']}:** {_cadence_label(c.cadence, t)}",
    ]
    if c.period:
        lines.append(f"**{t['period']}:** {c.period}")
    lines.append(f"**{t['generated']}:** {c.generated}")
    if c.data_sources:
        lines.append(f"**{t['data_sources']}:** {' | '.join(c.data_sources)}")
    return "\n".join(lines)


def _executive_summary(c: ExecutiveSummaryContent, t: LocaleCatalog) -> str:
    lines = [f"## {t['executive_summary']}"]
    if c.summary:
        lines += ["", c.summary]

    if c.metrics:
        lines += ["", f"### {t['metric']}", ""]
        lines.append(f"| {t['metric']} | {t['value']} | {t['trend']} |")
        lines.append("|--------|-------|-------|")
        for row in c.metrics:
            lines.append(f"| {row.metric} | {row.value} | {trend_arrow(row.trend)} |")

    return "\n".join(lines)


def _highlights_concerns(c: HighlightsConcernsContent, t: LocaleCatalog) -> str:
    lines = [f"## {t['highlights_and_concerns']}"]
    if c.highlights:
        lines += ["", f"### {t['highlights']}"]
        lines += [f"- {h}" for h in c.highlights]
    if c.concerns:
        lines += ["", f"### {t['concerns']}"]
        lines += [f"- {x}" for x in c.concerns]
    return "\n".join(lines)


def _user_analytics(c: UserAnalyticsContent, t: LocaleCatalog) -> str:
    lines = [f"## {t['user_analytics']}"]

    lines += ["", f"### {t['active_users']}", ""]
    lines.append(f"| {t['metric']} | {t['value']} |")
    lines.append("|--------|-------|")
    for label, value in (
        ("DAU", c.dau),
        ("WAU", c.wau),
        ("MAU", c.mau),
        (t["new_users"], c.new_users),
    ):
        if value is not None:
            lines.append(f"| {label} | {fmt_count(value, t)} |")
    if c.retention is not None:
        lines.append(f"| {t['retention']} (DAU/MAU) | {fmt_decimal(c.retention, t)}% |")

    if c.has_session_stats:
        lines += ["", f"### {t['session_statistics']}", ""]
        lines.append(f"| {t['metric']} | {t['value']} |")
        lines.append("|--------|-------|")
        if c.session_minutes is not None:
            lines.append(
                f"| {t['avg_session_duration']} | {c.session_minutes}m {c.session_seconds}s |"
            )
        if c.sessions_per_user is not None:
            lines.append(f"| {t['sessions_per_user']} | {fmt_decimal(c.sessions_per_user, t)} |")

    if c.age_groups:
        lines += ["", f"### {t['age_demographics']}", ""]
        lines.append(f"| Age Group | {t['percentage']} |")
        lines.append("|-----------|------------|")
        for label, value in c.age_groups:
            lines.append(f"| {label} | {_bar_cell(value, t)} |")

    if c.countries:
        lines += ["", f"### {t['country_distribution']}", ""]
        lines.append(f"| Country | {t['percentage']} |")
        lines.append("|---------|------------|")
        for label, value in c.countries:
            lines.append(f"| {label} | {_bar_cell(value, t)} |")

    return "\n".join(lines)


def _ratings_reviews(c: RatingsReviewsContent, t: LocaleCatalog) -> str:
    lines = [f"## {t['ratings_and_reviews']}"]

    if c.ratings:
        lines += ["", f"### {t['overall_ratings']}", ""]
        lines.append(f"| {t['platform']} | {t['rating']} | {t['total_ratings']} |")
        lines.append("|----------|--------|---------------|")
        for row in c.ratings:
            lines.append(
                f"| {row.platform} | {star_glyph(row.rating)} {fmt_decimal(row.rating, t)} "
                f"| {fmt_count(row.total_ratings, t)} |"
            )

    table = c.distribution
    if table is not None:
        lines += ["", f"### {t['rating_distribution']}", ""]
        lines.append("| " + " | ".join((t["rating"],) + table.columns) + " |")
        lines.append("|--------|" + "|".join("-" * (len(col) + 2) for col in table.columns) + "|")
        for stars, values in table.rows:
            cells = [bucket_label(stars)] + [_bar_cell(v, t) for v in values]
            lines.append("| " + " | ".join(cells) + " |")

    review = c.review
    if review is not None:
        if review.sentiment is not None:
            lines += ["", f"### {t['sentiment_analysis']}", ""]
            lines.append(f"| Sentiment | {t['percentage']} |")
            lines.append("|-----------|------------|")
            for key, value in (
                ("positive", review.sentiment.positive),
                ("neutral", review.sentiment.neutral),
                ("negative", review.sentiment.negative),
            ):
                lines.append(f"| {t[key]} | {_bar_cell(value, t)} |")

        if review.common_themes:
            lines += ["", f"### {t['common_themes']}"]
            lines += [f"- {theme}" for theme in review.common_themes]

        if review.actionable_insights:
            lines += ["", f"### {t['actionable_insights']}"]
            lines += [f"- {insight}" for insight in review.actionable_insights]

    return "\n".join(lines)


def _competitive(c: CompetitivePositioning, t: LocaleCatalog) -> str:
    lines = [f"## {t['competitive_positioning']}"]

    if c.market_position:
        lines += ["", f"### {t['market_position']}", "", c.market_position]

    if c.comparisons:
        lines += ["", f"### {t['competitor_comparison']}"]
        for comp in c.comparisons:
            lines += ["", f"#### vs {comp.competitor}", ""]
            if comp.strengths:
                lines.append(f"**{t['our_strengths']}:**")
                lines += [f"- ✅ {s}" for s in comp.strengths]
            if comp.weaknesses:
                lines += ["", f"**{t['our_weaknesses']}:**"]
                lines += [f"- ⚠️ {w}" for w in comp.weaknesses]
            if comp.battle_strategy:
                lines += ["", f"**{t['battle_strategy']}:** {comp.battle_strategy}"]

    if c.differentiation_strategy:
        lines += ["", f"### {t['differentiation_strategy']}", "", c.differentiation_strategy]

    if c.quick_wins:
        lines += ["", f"### {t['quick_wins']}"]
        lines += [f"- 🚀 {win}" for win in c.quick_wins]

    return "\n".join(lines)


def _effort_label(effort: str, t: LocaleCatalog) -> str:
    return t[effort] if effort in ("low", "medium", "high") else effort


def _market_opportunity(c: MarketOpportunityPriority, t: LocaleCatalog) -> str:
    lines = [f"## {t['market_opportunity_priority']}"]

    if c.opportunities:
        lines += ["", f"### {t['prioritized_opportunities']}", ""]
        lines.append(f"| {t['opportunity']} | {t['fit_score']} | {t['effort']} |")
        lines.append("|------|--------|------|")
        for opp in c.opportunities:
            emoji = FIT_EMOJI.get(opp.fit_score, FIT_EMOJI_DEFAULT)
            lines.append(
                f"| {opp.opportunity} | {emoji} {opp.fit_score} "
                f"| {_effort_label(opp.estimated_effort, t)} |"
            )

        lines.append("")
        for opp in c.opportunities:
            emoji = FIT_EMOJI.get(opp.fit_score, FIT_EMOJI_DEFAULT)
            lines += [f"#### {emoji} {opp.opportunity}", ""]
            lines.append(f"**{t['fit_score']}:** {opp.fit_score}")
            if opp.fit_reason:
                lines.append(f"**{t['reason']}:** {opp.fit_reason}")
            if opp.required_changes:
                lines += ["", f"**{t['required_changes']}:**"]
                lines += [f"- {change}" for change in opp.required_changes]
            if opp.recommended_action:
                lines += ["", f"**{t['recommended_action']}:** {opp.recommended_action}"]
            lines.append("")

    if c.strategic_recommendation:
        if not c.opportunities:
            lines.append("")
        lines += [f"### {t['strategic_recommendations']}", "", c.strategic_recommendation]

    return "\n".join(lines).rstrip("\n")


def _trend(c: TrendAnalysis, t: LocaleCatalog) -> str:
    lines = [f"## {t['trend_analysis_and_predictions']}"]
    for key, text in (
        ("user_growth", c.user_growth),
        ("engagement", c.engagement),
        ("ratings", c.rating),
    ):
        if text:
            lines += ["", f"### {t[key]}", text]
    if c.predictions:
        lines += ["", f"### {t['predictions']}"]
        lines += [f"- {p}" for p in c.predictions]
    return "\n".join(lines)


def _improvements(c: ImprovementsContent, t: LocaleCatalog) -> str:
    lines = [f"## {t['improvement_suggestions']}"]
    for s in c.suggestions:
        lines += [
            "",
            f"### {_priority_emoji(s.priority)} {s.priority.upper()}: [{s.category}] {s.title}",
            "",
            s.description,
        ]
        if s.expected_impact:
            lines += ["", f"**{t['expected_impact']}:** {s.expected_impact}"]
    return "\n".join(lines)


def _code_improvements(c: CodeImprovements, t: LocaleCatalog) -> str:
    lines = [f"## {t['codebase_improvements']}"]

    if c.repository or c.framework:
        lines += ["", f"**{t['repository']}:** {c.repository} | **{t['framework']}:** {c.framework}"]
    if c.summary:
        lines += ["", c.summary]

    for imp in c.improvements:
        lines += [
            "",
            f"### {_priority_emoji(imp.priority)} {imp.priority.upper()} [{imp.category}]: {imp.title}",
            "",
        ]
        if imp.description:
            lines.append(imp.description)
        if imp.related_feature:
            lines += ["", f"**{t['related_feature']}:** {imp.related_feature}"]

        if imp.code_references:
            lines += ["", f"**{t['file_modifications']}:**", ""]
            lines.append(f"| {t['type']} | {t['file']} | {t['current']} | {t['proposed']} |")
            lines.append("|------|------|---------|----------|")
            for ref in imp.code_references:
                icon = MODIFICATION_ICONS.get(ref.modification_type, "?")
                lines.append(
                    f"| {icon} | `{ref.file_path}` | {_escape_cell(ref.current)} "
                    f"| {_escape_cell(ref.proposed)} |"
                )

        if imp.expected_impact:
            lines += ["", f"**{t['expected_impact']}:** {imp.expected_impact}"]

    return "\n".join(lines)


def _footer(c: FooterContent, t: LocaleCatalog) -> str:
    return f"*{t['generated_by']} - {c.generated}*"


_RENDERERS: Dict[SectionKind, Callable] = {
    SectionKind.HEADER: _header,
    SectionKind.EXECUTIVE_SUMMARY: _executive_summary,
    SectionKind.HIGHLIGHTS_CONCERNS: _highlights_concerns,
    SectionKind.USER_ANALYTICS: _user_analytics,
    SectionKind.RATINGS_REVIEWS: _ratings_reviews,
    SectionKind.COMPETITIVE_POSITIONING: _competitive,
    SectionKind.MARKET_OPPORTUNITY: _market_opportunity,
    SectionKind.TREND_ANALYSIS: _trend,
    SectionKind.IMPROVEMENTS: _improvements,
    SectionKind.CODE_IMPROVEMENTS: _code_improvements,
    SectionKind.FOOTER: _footer,
}


def render_markdown(sections: Sequence[Section], catalog: LocaleCatalog) -> str:
    blocks: List[str] = [
        _RENDERERS[section.kind](section.content, catalog)
        for section in sections
    ]
    return BLOCK_SEPARATOR.join(blocks)
