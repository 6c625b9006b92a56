"""
Marketing PDF Renderer
----------------------
Draws the section list onto ReportLab canvas pages.

Rules:
- Every section after the cover starts on a fresh page
- Repeating entries are measured first, then placed; an entry that
  does not fit starts a new page under a "(continued)" title
- Entries taller than a page continue line by line across pages
- A failing element (bad chart image, odd glyph) is logged and skipped,
  it never aborts the document
- All draw calls receive an explicit StyleContext
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader

from marketlens.charts import ChartKind, ChartResults
from marketlens.localization import LocaleCatalog, register_font_profile

from .contracts import (
    CodeImprovement,
    CodeImprovements,
    CompetitivePositioning,
    CompetitorComparison,
    ImprovementSuggestion,
    MarketOpportunityPriority,
    Opportunity,
    TrendAnalysis,
)
from .formatters import fmt_count, fmt_decimal, fmt_number
from .layout import (
    NumberedCanvas,
    PageCursor,
    PageGeometry,
    StyleContext,
    text_height,
    text_width,
    wrap_text,
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

logger = logging.getLogger(__name__)


# =====================================================
# PALETTE & FIXED SIZES
# =====================================================

BLACK = "#000000"
WHITE = "#ffffff"
GRAY = "#757575"
BLUE = "#1565c0"
DARK_BLUE = "#0d47a1"
GREEN = "#2e7d32"
DARK_GREEN = "#1b5e20"
DARK_RED = "#b71c1c"
PURPLE = "#6a1b9a"
SLATE = "#37474f"
LIGHT_GRAY = "#f5f5f5"
LIGHT_GREEN = "#e8f5e9"
LIGHT_RED = "#ffebee"
LIGHT_BLUE = "#e3f2fd"

PRIORITY_COLORS = {"high": "#c62828", "medium": "#f57c00", "low": "#2e7d32"}
FIT_COLORS = {"excellent": "#2e7d32", "good": "#1565c0", "moderate": "#f57c00", "poor": "#c62828"}
EFFORT_COLORS = {"low": "#2e7d32", "medium": "#f57c00", "high": "#c62828"}
MODIFICATION_COLORS = {"add": "#2e7d32", "modify": "#f57c00", "refactor": "#1565c0", "optimize": "#6a1b9a"}
MODIFICATION_ICONS = {"add": "+", "modify": "~", "refactor": "R", "optimize": "O"}
NEUTRAL_BADGE = GRAY

TITLE_SIZE = 20
CONTINUED_SIZE = 16
MAX_LIST_ITEMS = 5
MAX_COMPARISON_ITEMS = 4
MAX_REQUIRED_CHANGES = 3
METRICS_PER_ROW = 3
METRIC_BOX_HEIGHT = 50
METRIC_ROW_STEP = 55
COLUMN_GUTTER = 30
LIST_ROW_MIN = 60
CHART_HEIGHT = 200
RATINGS_CHART_HEIGHT = 180
CHART_LABEL_GAP = 18
CHART_ROW_GAP = 32


@dataclass
class PDFRenderOutput:
    content: bytes
    page_count: int
    placed_charts: Tuple[ChartKind, ...] = ()


@dataclass
class _RenderState:
    """Per-call mutable state; discarded when render() returns."""

    pdf: NumberedCanvas
    cursor: PageCursor
    base: StyleContext
    catalog: LocaleCatalog
    charts: ChartResults
    placed: List[ChartKind] = field(default_factory=list)


class PDFReportRenderer:
    def __init__(
        self,
        geometry: Optional[PageGeometry] = None,
        compress: bool = True,
        font_dir: Optional[str] = None,
        invariant: bool = False,
    ):
        self.geometry = geometry or PageGeometry()
        self.compress = compress
        self.font_dir = font_dir
        self.invariant = invariant

    @classmethod
    def from_config(cls, pdf_config: Optional[dict] = None, invariant: bool = False):
        cfg = pdf_config or {}
        return cls(
            geometry=PageGeometry.from_config(cfg),
            compress=bool(cfg.get("compress", True)),
            font_dir=cfg.get("font_dir"),
            invariant=invariant,
        )

    # =================================================
    # ENTRY
    # =================================================
    def render(
        self,
        sections: Sequence[Section],
        catalog: LocaleCatalog,
        charts: Optional[ChartResults] = None,
        title: Optional[str] = None,
    ) -> PDFRenderOutput:
        fonts = register_font_profile(catalog.fonts, self.font_dir)
        base = StyleContext(fonts=fonts)

        buf = io.BytesIO()
        pdf = NumberedCanvas(
            buf,
            pagesize=(self.geometry.width, self.geometry.height),
            pageCompression=1 if self.compress else 0,
            invariant=1 if self.invariant else 0,
            page_label=catalog["page_of"],
            footer_style=base.plain(size=9, color=GRAY),
        )
        if title:
            pdf.setTitle(title)
        pdf.setAuthor(catalog["generated_by"])

        cursor = PageCursor(self.geometry)
        cursor.bind(pdf.showPage)
        state = _RenderState(pdf, cursor, base, catalog, charts or ChartResults())

        first = True
        for section in sections:
            draw = self._DRAWERS.get(section.kind)
            if draw is None:
                continue
            if section.kind is SectionKind.FOOTER:
                draw(self, state, section.content)
                continue
            if not first:
                cursor.on_break = None
                cursor.page_break(continued=False)
            first = False
            draw(self, state, section.content)

        pdf.showPage()
        pdf.save()

        return PDFRenderOutput(
            content=buf.getvalue(),
            page_count=pdf.total_pages,
            placed_charts=tuple(state.placed),
        )

    # =================================================
    # LOW-LEVEL DRAWING
    # =================================================
    def _text(self, st: _RenderState, text: str, x: float, y: float,
              style: StyleContext, align: str = "left") -> None:
        """One line whose box top sits ``y`` below the page top."""
        pdf = st.pdf
        baseline = st.cursor.to_pdf(y + style.size)
        try:
            pdf.setFont(style.font_name, style.size)
            pdf.setFillColor(HexColor(style.color))
            if align == "center":
                pdf.drawCentredString(x, baseline, text)
            elif align == "right":
                pdf.drawRightString(x, baseline, text)
            else:
                pdf.drawString(x, baseline, text)
        except Exception:
            logger.exception("Failed to draw text %r", text[:40])

    def _rect(self, st: _RenderState, x: float, y: float, w: float, h: float,
              color: str, radius: float = 0) -> None:
        pdf = st.pdf
        pdf.setFillColor(HexColor(color))
        bottom = st.cursor.to_pdf(y + h)
        if radius:
            pdf.roundRect(x, bottom, w, h, radius, stroke=0, fill=1)
        else:
            pdf.rect(x, bottom, w, h, stroke=0, fill=1)

    def _paragraph(self, st: _RenderState, text: str, x: float, width: float,
                   style: StyleContext, max_lines: Optional[int] = None) -> None:
        """Wrapped text at the cursor; breaks the page between lines."""
        for line in wrap_text(text, style, width, max_lines):
            st.cursor.ensure(style.leading)
            self._text(st, line, x, st.cursor.y, style)
            st.cursor.advance(style.leading)

    def _block_lines(self, st: _RenderState, lines: List[str], x: float, y: float,
                     style: StyleContext) -> float:
        """Pre-wrapped lines at a fixed position (inside boxes); returns height."""
        for i, line in enumerate(lines):
            self._text(st, line, x, y + i * style.leading, style)
        return len(lines) * style.leading

    def _badge(self, st: _RenderState, x: float, y: float, w: float, h: float,
               value: str, colors: Dict[str, str], label: Optional[str] = None,
               style: Optional[StyleContext] = None) -> None:
        color = colors.get((value or "").lower(), NEUTRAL_BADGE)
        style = style or st.base.strong(size=9, color=WHITE)
        self._rect(st, x, y, w, h, color)
        text = label if label is not None else (value or "").upper()
        lines = wrap_text(text, style, w - 8, max_lines=1)
        if lines:
            self._text(st, lines[0], x + 4, y + (h - style.size) / 2, style)

    def _section_title(self, st: _RenderState, title: str, continued: bool = False) -> None:
        if continued:
            style = st.base.strong(size=CONTINUED_SIZE, color=BLACK)
            self._text(st, f"{title} {st.catalog['continued']}", st.cursor.geometry.margin,
                       st.cursor.y, style)
            st.cursor.advance(30)
        else:
            style = st.base.strong(size=TITLE_SIZE, color=BLACK)
            for line in wrap_text(title, style, st.cursor.geometry.content_width):
                self._text(st, line, st.cursor.geometry.margin, st.cursor.y, style)
                st.cursor.advance(style.leading)
            st.cursor.advance(10)

    def _begin_section(self, st: _RenderState, title: str) -> None:
        self._section_title(st, title)
        st.cursor.on_break = lambda: self._section_title(st, title, continued=True)

    def _subheading(self, st: _RenderState, text: str, size: float = 14,
                    color: str = BLUE, gap: float = 20) -> None:
        st.cursor.ensure(gap + 20)
        self._text(st, text, st.cursor.geometry.margin, st.cursor.y,
                   st.base.strong(size=size, color=color))
        st.cursor.advance(gap)

    def _place_block(self, st: _RenderState, height: float) -> None:
        """
        Page-break decision for a measured block. A block taller than a
        full page starts on a fresh page and continues line by line.
        """
        cursor = st.cursor
        if cursor.fits(height):
            return
        if not cursor.at_top:
            cursor.page_break()

    def _chart(self, st: _RenderState, kind: ChartKind, label: str,
               x: float, y: float, w: float, h: float) -> None:
        """Labelled chart panel; failed or missing charts leave the box empty."""
        image = st.charts.image(kind)
        if image is None:
            return
        try:
            reader = ImageReader(io.BytesIO(image))
            reader.getSize()
            self._text(st, label, x, y, st.base.strong(size=12, color=BLACK))
            st.pdf.drawImage(
                reader,
                x,
                st.cursor.to_pdf(y + CHART_LABEL_GAP + h),
                width=w,
                height=h,
                preserveAspectRatio=True,
                anchor="c",
                mask="auto",
            )
            st.placed.append(kind)
        except Exception:
            logger.exception("Skipping chart %s: image could not be placed", kind.value)

    def _chart_row(self, st: _RenderState, panels, height: float) -> None:
        """Up to two panels side by side; slots keep their position."""
        g = st.cursor.geometry
        width = g.content_width / 2 - 10
        if not any(st.charts.image(kind) is not None for kind, _ in panels if kind):
            return
        st.cursor.ensure(CHART_LABEL_GAP + height)
        y = st.cursor.y
        for slot, (kind, label) in enumerate(panels):
            if kind is None:
                continue
            x = g.margin + slot * (width + 20)
            self._chart(st, kind, label, x, y, width, height)
        st.cursor.advance(CHART_LABEL_GAP + height + CHART_ROW_GAP)

    # =================================================
    # COVER
    # =================================================
    def _draw_header(self, st: _RenderState, c: HeaderContent) -> None:
        t = st.catalog
        g = st.cursor.geometry
        center = g.width / 2

        y = 200
        title_style = st.base.strong(size=32, color=BLACK)
        for line in wrap_text(c.name, title_style, g.content_width, max_lines=2):
            self._text(st, line, center, y, title_style, align="center")
            y += title_style.leading
        y += 20

        self._text(st, t[f"{c.cadence}_report"], center, y,
                   st.base.plain(size=20, color=BLACK), align="center")
        y += 40

        if c.period:
            self._text(st, c.period, center, y, st.base.plain(size=16, color=BLACK), align="center")
            y += 80
        else:
            y += 40

        self._text(st, f"{t['generated']}: {c.generated}", center, y,
                   st.base.plain(size=12, color=BLACK), align="center")

        if c.data_sources:
            self._text(
                st,
                f"{t['data_sources']}: {' | '.join(c.data_sources)}",
                center,
                g.height - 150,
                st.base.plain(size=10, color=GRAY),
                align="center",
            )
        st.cursor.y = g.bottom

    # =================================================
    # EXECUTIVE SUMMARY
    # =================================================
    def _draw_executive_summary(self, st: _RenderState, c: ExecutiveSummaryContent) -> None:
        t = st.catalog
        g = st.cursor.geometry
        self._begin_section(st, t["executive_summary"])

        if c.summary:
            self._paragraph(st, c.summary, g.margin, g.content_width, st.base.plain(size=11))
            st.cursor.advance(20)

        if st.charts.image(ChartKind.ENGAGEMENT) is not None:
            w, h = 300, 200
            st.cursor.ensure(CHART_LABEL_GAP + h)
            self._chart(st, ChartKind.ENGAGEMENT, t["active_users"],
                        g.margin + (g.content_width - w) / 2, st.cursor.y, w, h)
            st.cursor.advance(CHART_LABEL_GAP + h + 20)

        if c.metrics:
            self._metric_grid(st, c)

    def _metric_grid(self, st: _RenderState, c: ExecutiveSummaryContent) -> None:
        g = st.cursor.geometry
        self._subheading(st, st.catalog["metric"], color=BLACK)

        box_w = g.content_width / METRICS_PER_ROW
        label_style = st.base.strong(size=9, color=BLUE)
        trend_colors = {"up": GREEN, "down": "#c62828", "stable": GRAY}
        trend_marks = {"up": "+", "down": "-", "stable": "~"}

        for i, row in enumerate(c.metrics):
            col = i % METRICS_PER_ROW
            if col == 0:
                if i > 0:
                    st.cursor.advance(METRIC_ROW_STEP)
                st.cursor.ensure(METRIC_BOX_HEIGHT)
            x = g.margin + col * box_w
            y = st.cursor.y
            self._rect(st, x + 2, y, box_w - 4, METRIC_BOX_HEIGHT, LIGHT_GRAY)
            lines = wrap_text(row.metric, label_style, box_w - 16, max_lines=1)
            self._block_lines(st, lines, x + 8, y + 8, label_style)
            value_style = st.base.strong(size=13, color=trend_colors[row.trend])
            value = wrap_text(f"{row.value} {trend_marks[row.trend]}", value_style,
                              box_w - 16, max_lines=1)
            self._block_lines(st, value, x + 8, y + 26, value_style)

        st.cursor.advance(METRIC_ROW_STEP + 15)

    # =================================================
    # HIGHLIGHTS / CONCERNS
    # =================================================
    def _draw_highlights_concerns(self, st: _RenderState, c: HighlightsConcernsContent) -> None:
        t = st.catalog
        g = st.cursor.geometry
        self._begin_section(st, t["highlights_and_concerns"])

        half = (g.content_width - COLUMN_GUTTER) / 2
        right_x = g.margin + half + COLUMN_GUTTER
        heading = st.base.strong(size=14)
        self._text(st, t["highlights"], g.margin, st.cursor.y, heading.with_(color=DARK_GREEN))
        self._text(st, t["concerns"], right_x, st.cursor.y, heading.with_(color=DARK_RED))
        st.cursor.advance(25)

        self._two_column_list(
            st,
            left=(c.highlights, LIGHT_GREEN, DARK_GREEN),
            right=(c.concerns, LIGHT_RED, DARK_RED),
            width=half,
            right_x=right_x,
        )

        extra_left = max(0, len(c.highlights) - MAX_LIST_ITEMS)
        extra_right = max(0, len(c.concerns) - MAX_LIST_ITEMS)
        if extra_left or extra_right:
            st.cursor.advance(10)
            st.cursor.ensure(12)
            note = st.base.plain(size=9, color=GRAY)
            if extra_left:
                label = t.format("more_highlights", count=extra_left)
                self._text(st, label, g.margin, st.cursor.y, note)
            if extra_right:
                label = t.format("more_concerns", count=extra_right)
                self._text(st, label, right_x, st.cursor.y, note)
            st.cursor.advance(15)

    def _two_column_list(self, st: _RenderState, left, right, width: float, right_x: float) -> None:
        g = st.cursor.geometry
        style = st.base.plain(size=10)
        left_items = left[0][:MAX_LIST_ITEMS]
        right_items = right[0][:MAX_LIST_ITEMS]

        for i in range(max(len(left_items), len(right_items))):
            cells = []
            for items, x, (_, bg, fg) in (
                (left_items, g.margin, left),
                (right_items, right_x, right),
            ):
                if i < len(items):
                    lines = wrap_text(items[i], style, width - 16, max_lines=4)
                    cells.append((x, bg, fg, lines))

            row_h = max(
                [LIST_ROW_MIN] + [len(lines) * style.leading + 20 for *_, lines in cells]
            )
            st.cursor.ensure(row_h)
            y = st.cursor.y
            for x, bg, fg, lines in cells:
                self._rect(st, x, y, width, row_h - 5, bg, radius=4)
                self._block_lines(st, lines, x + 8, y + 8, style.with_(color=fg))
            st.cursor.advance(row_h)

    # =================================================
    # USER ANALYTICS
    # =================================================
    def _draw_user_analytics(self, st: _RenderState, c: UserAnalyticsContent) -> None:
        t = st.catalog
        g = st.cursor.geometry
        self._begin_section(st, t["user_analytics"])

        stats = "  |  ".join([
            f"DAU: {fmt_count(c.dau, t)}",
            f"WAU: {fmt_count(c.wau, t)}",
            f"MAU: {fmt_count(c.mau, t)}",
            f"{t['new_users']}: {fmt_count(c.new_users, t)}",
        ])
        self._paragraph(st, stats, g.margin, g.content_width, st.base.strong(size=14, color=BLUE))
        st.cursor.advance(8)

        body = st.base.plain(size=11)
        if c.retention is not None:
            self._paragraph(st, f"{t['retention']} (DAU/MAU): {fmt_decimal(c.retention, t)}%",
                            g.margin, g.content_width, body)
            st.cursor.advance(6)

        if c.has_session_stats:
            parts = []
            if c.session_minutes is not None:
                parts.append(f"{t['avg_session_duration']}: {c.session_minutes}m {c.session_seconds}s")
            if c.sessions_per_user is not None:
                parts.append(f"{t['sessions_per_user']}: {fmt_decimal(c.sessions_per_user, t)}")
            self._paragraph(st, "  |  ".join(parts), g.margin, g.content_width, body)
            st.cursor.advance(6)

        st.cursor.advance(20)
        self._chart_row(st, [(ChartKind.ENGAGEMENT, t["active_users"]),
                             (ChartKind.RETENTION_RATIO, t["retention"])], CHART_HEIGHT)
        self._chart_row(st, [(ChartKind.DEMOGRAPHICS, t["age_demographics"]),
                             (ChartKind.COUNTRY_DISTRIBUTION, t["country_distribution"])],
                        CHART_HEIGHT)

    # =================================================
    # RATINGS & REVIEWS
    # =================================================
    def _draw_ratings_reviews(self, st: _RenderState, c: RatingsReviewsContent) -> None:
        t = st.catalog
        g = st.cursor.geometry
        self._begin_section(st, t["ratings_and_reviews"])

        if c.ratings:
            slot_w = g.content_width / 2 + 10
            store_colors = {"Google Play": "#4CAF50", "App Store": "#007AFF"}
            y = st.cursor.y
            for slot, row in enumerate(c.ratings[:2]):
                x = g.margin + slot * slot_w
                big = st.base.strong(size=24, color=store_colors.get(row.platform, BLUE))
                score = fmt_decimal(row.rating, t)
                self._text(st, score, x, y, big)
                self._text(
                    st,
                    f"{row.platform} ({t['total_ratings']}: {fmt_count(row.total_ratings, t)})",
                    x + text_width(score, big) + 10,
                    y + 8,
                    st.base.plain(size=11, color=BLACK),
                )
            st.cursor.advance(50)

        self._chart_row(st, [(ChartKind.RATING_DISTRIBUTION, t["rating_distribution"]),
                             (ChartKind.SENTIMENT, t["sentiment_analysis"])],
                        RATINGS_CHART_HEIGHT)

        review = c.review
        if review is None:
            return

        if review.sentiment is not None:
            self._subheading(st, t["sentiment_analysis"], color=BLACK)
            st.cursor.ensure(20)
            s = review.sentiment
            body = st.base.plain(size=11)
            for offset, key, value, color in (
                (0, "positive", s.positive, "#4CAF50"),
                (120, "neutral", s.neutral, "#9e9e9e"),
                (230, "negative", s.negative, "#f44336"),
            ):
                self._text(st, f"{t[key]}: {fmt_number(value, t)}%", g.margin + offset,
                           st.cursor.y, body.with_(color=color))
            st.cursor.advance(25)

        for key, items, marker, color in (
            ("common_themes", review.common_themes, "-", BLACK),
            ("actionable_insights", review.actionable_insights, "->", BLUE),
        ):
            if not items:
                continue
            self._subheading(st, f"{t[key]}:", size=12, color=BLACK, gap=18)
            self._bullets(st, items, marker, st.base.plain(size=10, color=color))
            st.cursor.advance(10)

    def _bullets(self, st: _RenderState, items, marker: str, style: StyleContext,
                 indent: float = 10, gap: float = 4) -> None:
        g = st.cursor.geometry
        for item in items:
            self._paragraph(st, f"{marker} {item}", g.margin + indent,
                            g.content_width - 2 * indent, style)
            st.cursor.advance(gap)

    # =================================================
    # COMPETITIVE POSITIONING
    # =================================================
    def _draw_competitive(self, st: _RenderState, c: CompetitivePositioning) -> None:
        t = st.catalog
        g = st.cursor.geometry
        self._begin_section(st, t["competitive_positioning"])

        if c.market_position:
            self._subheading(st, t["market_position"])
            self._paragraph(st, c.market_position, g.margin, g.content_width,
                            st.base.plain(size=11, color=BLACK))
            st.cursor.advance(20)

        if c.comparisons:
            self._subheading(st, t["competitor_comparison"], gap=25)
            for comp in c.comparisons:
                height = self.measure_comparison(st, comp)
                self._place_block(st, height)
                self._comparison(st, comp)

        if c.differentiation_strategy:
            self._subheading(st, t["differentiation_strategy"])
            self._paragraph(st, c.differentiation_strategy, g.margin, g.content_width,
                            st.base.plain(size=10, color=BLACK))
            st.cursor.advance(20)

        if c.quick_wins:
            self._subheading(st, t["quick_wins"])
            self._bullets(st, c.quick_wins, "->", st.base.plain(size=10, color=GREEN), gap=5)

    def _comparison_columns(self, st: _RenderState, comp: CompetitorComparison):
        g = st.cursor.geometry
        half = g.content_width / 2 - 10
        style = st.base.plain(size=9)
        strengths = [wrap_text(f"+ {s}", style, half - 16, max_lines=4)
                     for s in comp.strengths[:MAX_COMPARISON_ITEMS]]
        weaknesses = [wrap_text(f"- {w}", style, half - 24, max_lines=4)
                      for w in comp.weaknesses[:MAX_COMPARISON_ITEMS]]

        def column_height(items):
            return 22 + sum(len(lines) * style.leading + 4 for lines in items) + 10

        box_h = max(column_height(strengths), column_height(weaknesses), 80)
        return half, style, strengths, weaknesses, box_h

    def measure_comparison(self, st: _RenderState, comp: CompetitorComparison) -> float:
        *_, box_h = self._comparison_columns(st, comp)
        height = 28 + box_h + 10
        if comp.battle_strategy:
            height += 55
        return height + 15

    def _comparison(self, st: _RenderState, comp: CompetitorComparison) -> None:
        t = st.catalog
        g = st.cursor.geometry
        half, style, strengths, weaknesses, box_h = self._comparison_columns(st, comp)

        y = st.cursor.y
        self._rect(st, g.margin, y, g.content_width, 22, SLATE)
        self._text(st, f"vs {comp.competitor}", g.margin + 10, y + 5,
                   st.base.strong(size=12, color=WHITE))
        y += 28

        for items, x, label, bg, fg in (
            (strengths, g.margin, t["our_strengths"], LIGHT_GREEN, DARK_GREEN),
            (weaknesses, g.margin + half + 20, t["our_weaknesses"], LIGHT_RED, DARK_RED),
        ):
            if not items:
                continue
            self._rect(st, x, y, half, box_h, bg)
            self._text(st, label, x + 8, y + 5, st.base.strong(size=10, color=fg))
            iy = y + 22
            for lines in items:
                iy += self._block_lines(st, lines, x + 8, iy, style.with_(color=fg)) + 4
        y += box_h + 10

        if comp.battle_strategy:
            self._rect(st, g.margin, y, g.content_width, 45, LIGHT_BLUE)
            self._text(st, f"{t['battle_strategy']}:", g.margin + 8, y + 5,
                       st.base.strong(size=9, color=BLUE))
            body = st.base.plain(size=9, color=BLUE)
            lines = wrap_text(comp.battle_strategy, body, g.content_width - 16, max_lines=2)
            self._block_lines(st, lines, g.margin + 8, y + 18, body)
            y += 55

        st.cursor.y = y + 15

    # =================================================
    # MARKET OPPORTUNITY
    # =================================================
    def _draw_market_opportunity(self, st: _RenderState, c: MarketOpportunityPriority) -> None:
        t = st.catalog
        g = st.cursor.geometry
        self._begin_section(st, t["market_opportunity_priority"])

        for opp in c.opportunities:
            self._place_block(st, self.measure_opportunity(st, opp))
            self._opportunity(st, opp)

        if c.strategic_recommendation:
            body = st.base.plain(size=10, color=DARK_BLUE)
            lines = wrap_text(c.strategic_recommendation, body, g.content_width - 20, max_lines=5)
            box_h = max(80, len(lines) * body.leading + 20)
            self._place_block(st, 20 + box_h)
            self._subheading(st, t["strategic_recommendations"])
            y = st.cursor.y
            self._rect(st, g.margin, y, g.content_width, box_h, LIGHT_BLUE)
            self._block_lines(st, lines, g.margin + 10, y + 10, body)
            st.cursor.advance(box_h + 10)

    def _effort_label(self, st: _RenderState, effort: str) -> str:
        return st.catalog[effort] if effort in ("low", "medium", "high") else effort

    def _opportunity_parts(self, st: _RenderState, opp: Opportunity):
        g = st.cursor.geometry
        title = st.base.strong(size=13, color=BLACK)
        reason = st.base.plain(size=10, color=GRAY)
        change = st.base.plain(size=9, color=BLUE)
        action = st.base.plain(size=9, color=DARK_GREEN)
        return {
            "title": (title, wrap_text(opp.opportunity, title, g.content_width, max_lines=3)),
            "reason": (reason, wrap_text(f"{st.catalog['reason']}: {opp.fit_reason}", reason,
                                         g.content_width - 10, max_lines=4) if opp.fit_reason else []),
            "changes": (change, [wrap_text(f"- {ch}", change, g.content_width - 30, max_lines=3)
                                 for ch in opp.required_changes[:MAX_REQUIRED_CHANGES]]),
            "action": (action, wrap_text(opp.recommended_action, action, g.content_width - 30,
                                         max_lines=2) if opp.recommended_action else []),
        }

    def measure_opportunity(self, st: _RenderState, opp: Opportunity) -> float:
        parts = self._opportunity_parts(st, opp)
        height = 25
        style, lines = parts["title"]
        height += len(lines) * style.leading + 5
        style, lines = parts["reason"]
        if lines:
            height += len(lines) * style.leading + 10
        style, changes = parts["changes"]
        if changes:
            height += 15 + sum(len(l) * style.leading + 3 for l in changes)
            if len(opp.required_changes) > MAX_REQUIRED_CHANGES:
                height += style.leading + 3
            height += 5
        if opp.recommended_action:
            height += 50
        return height + 15

    def _opportunity(self, st: _RenderState, opp: Opportunity) -> None:
        t = st.catalog
        g = st.cursor.geometry
        parts = self._opportunity_parts(st, opp)
        y = st.cursor.y

        self._badge(st, g.margin, y, 70, 20, opp.fit_score, FIT_COLORS,
                    label=t.get(opp.fit_score, opp.fit_score).upper())
        self._badge(st, g.margin + 75, y, 90, 20, opp.estimated_effort, EFFORT_COLORS,
                    label=f"{t['effort']}: {self._effort_label(st, opp.estimated_effort)}",
                    style=st.base.plain(size=9, color=WHITE))
        y += 25

        style, lines = parts["title"]
        y += self._block_lines(st, lines, g.margin, y, style) + 5

        style, lines = parts["reason"]
        if lines:
            y += self._block_lines(st, lines, g.margin + 10, y, style) + 10

        style, changes = parts["changes"]
        if changes:
            self._text(st, f"{t['required_changes']}:", g.margin + 10, y,
                       st.base.strong(size=10, color=BLACK))
            y += 15
            for lines in changes:
                y += self._block_lines(st, lines, g.margin + 20, y, style) + 3
            hidden = len(opp.required_changes) - MAX_REQUIRED_CHANGES
            if hidden > 0:
                self._text(st, t.format("more_items", count=hidden), g.margin + 20, y,
                           style.with_(color=GRAY))
                y += style.leading + 3
            y += 5

        style, lines = parts["action"]
        if lines:
            self._rect(st, g.margin + 10, y, g.content_width - 20, 40, LIGHT_GREEN)
            self._text(st, f"{t['recommended_action']}:", g.margin + 15, y + 5,
                       st.base.strong(size=9, color=DARK_GREEN))
            self._block_lines(st, lines, g.margin + 15, y + 17, style)
            y += 50

        st.cursor.y = y + 15

    # =================================================
    # TREND ANALYSIS
    # =================================================
    def _draw_trend(self, st: _RenderState, c: TrendAnalysis) -> None:
        t = st.catalog
        g = st.cursor.geometry
        self._begin_section(st, t["trend_analysis_and_predictions"])

        for key, text in (
            ("user_growth", c.user_growth),
            ("engagement", c.engagement),
            ("ratings", c.rating),
        ):
            if text:
                self._subheading(st, t[key], size=12, color=BLACK, gap=18)
                self._paragraph(st, text, g.margin, g.content_width, st.base.plain(size=10))
                st.cursor.advance(20)

        if c.predictions:
            self._subheading(st, t["predictions"], color=BLACK, gap=22)
            self._bullets(st, c.predictions, "->", st.base.plain(size=10, color=BLUE), gap=6)

    # =================================================
    # IMPROVEMENT SUGGESTIONS
    # =================================================
    def _draw_improvements(self, st: _RenderState, c: ImprovementsContent) -> None:
        self._begin_section(st, st.catalog["improvement_suggestions"])
        for suggestion in c.suggestions:
            self._place_block(st, self.measure_suggestion(st, suggestion))
            self._suggestion(st, suggestion)

    def _suggestion_styles(self, st: _RenderState):
        return (
            st.base.strong(size=13, color=BLACK),
            st.base.plain(size=11, color=BLACK),
            st.base.plain(size=11, color=BLUE),
        )

    def measure_suggestion(self, st: _RenderState, s: ImprovementSuggestion) -> float:
        g = st.cursor.geometry
        title, body, impact = self._suggestion_styles(st)
        height = 25
        height += text_height(s.title, title, g.content_width) + 5
        height += text_height(s.description, body, g.content_width - 10) + 10
        if s.expected_impact:
            height += text_height(f"{st.catalog['expected_impact']}: {s.expected_impact}",
                                  impact, g.content_width - 10) + 10
        return height + 15

    def _suggestion(self, st: _RenderState, s: ImprovementSuggestion) -> None:
        t = st.catalog
        g = st.cursor.geometry
        title, body, impact = self._suggestion_styles(st)

        st.cursor.ensure(25)
        y = st.cursor.y
        self._badge(st, g.margin, y, 60, 20, s.priority, PRIORITY_COLORS,
                    style=st.base.strong(size=10, color=WHITE))
        if s.category:
            self._text(st, f"[{s.category}]", g.margin + 70, y + 5, st.base.plain(size=10, color=GRAY))
        st.cursor.advance(25)

        self._paragraph(st, s.title, g.margin, g.content_width, title)
        st.cursor.advance(5)
        self._paragraph(st, s.description, g.margin + 10, g.content_width - 10, body)
        st.cursor.advance(10)
        if s.expected_impact:
            self._paragraph(st, f"{t['expected_impact']}: {s.expected_impact}",
                            g.margin + 10, g.content_width - 10, impact)
            st.cursor.advance(10)
        st.cursor.advance(15)

    # =================================================
    # CODEBASE IMPROVEMENTS
    # =================================================
    def _draw_code_improvements(self, st: _RenderState, c: CodeImprovements) -> None:
        t = st.catalog
        g = st.cursor.geometry
        self._begin_section(st, t["codebase_improvements"])

        self._paragraph(
            st,
            f"{t['repository']}: {c.repository} | {t['framework']}: {c.framework}",
            g.margin, g.content_width, st.base.plain(size=10, color=GRAY),
        )
        st.cursor.advance(8)
        if c.summary:
            self._paragraph(st, c.summary, g.margin, g.content_width, st.base.plain(size=11))
            st.cursor.advance(20)

        for improvement in c.improvements:
            self._place_block(st, self.measure_code_improvement(st, improvement))
            self._code_improvement(st, improvement)

    def _code_styles(self, st: _RenderState):
        return {
            "title": st.base.strong(size=13, color=BLACK),
            "body": st.base.plain(size=10, color=BLACK),
            "feature": st.base.plain(size=9, color=PURPLE),
            "path": st.base.plain(size=9, color=BLUE),
            "current": st.base.plain(size=8, color=GRAY),
            "proposed": st.base.plain(size=8, color=GREEN),
            "impact": st.base.plain(size=9, color=BLUE),
        }

    def _reference_height(self, st: _RenderState, ref, styles) -> float:
        t = st.catalog
        w = st.cursor.geometry.content_width - 50
        return (
            max(18, text_height(ref.file_path, styles["path"], w) + 6)
            + text_height(f"{t['current']}: {ref.current}", styles["current"], w) + 3
            + text_height(f"{t['proposed']}: {ref.proposed}", styles["proposed"], w) + 8
        )

    def measure_code_improvement(self, st: _RenderState, imp: CodeImprovement) -> float:
        t = st.catalog
        g = st.cursor.geometry
        styles = self._code_styles(st)
        height = 25
        height += text_height(imp.title, styles["title"], g.content_width) + 5
        height += text_height(imp.description, styles["body"], g.content_width - 10) + 10
        if imp.related_feature:
            height += text_height(f"{t['related_feature']}: {imp.related_feature}",
                                  styles["feature"], g.content_width - 10) + 8
        if imp.code_references:
            height += 15
            height += sum(self._reference_height(st, ref, styles) for ref in imp.code_references)
        if imp.expected_impact:
            height += text_height(f"{t['expected_impact']}: {imp.expected_impact}",
                                  styles["impact"], g.content_width - 10) + 5
        return height + 20

    def _code_improvement(self, st: _RenderState, imp: CodeImprovement) -> None:
        t = st.catalog
        g = st.cursor.geometry
        styles = self._code_styles(st)

        st.cursor.ensure(25)
        y = st.cursor.y
        self._badge(st, g.margin, y, 60, 18, imp.priority, PRIORITY_COLORS)
        if imp.category:
            self._badge(st, g.margin + 65, y, 80, 18, imp.category, {imp.category.lower(): BLUE},
                        label=imp.category, style=st.base.plain(size=9, color=WHITE))
        st.cursor.advance(25)

        self._paragraph(st, imp.title, g.margin, g.content_width, styles["title"])
        st.cursor.advance(5)
        self._paragraph(st, imp.description, g.margin + 10, g.content_width - 10, styles["body"])
        st.cursor.advance(10)

        if imp.related_feature:
            self._paragraph(st, f"{t['related_feature']}: {imp.related_feature}",
                            g.margin + 10, g.content_width - 10, styles["feature"])
            st.cursor.advance(8)

        if imp.code_references:
            st.cursor.ensure(15 + 18)
            self._text(st, f"{t['file_modifications']}:", g.margin + 10, st.cursor.y,
                       st.base.strong(size=10, color=BLACK))
            st.cursor.advance(15)
            for ref in imp.code_references:
                self._code_reference(st, ref, styles)

        if imp.expected_impact:
            self._paragraph(st, f"{t['expected_impact']}: {imp.expected_impact}",
                            g.margin + 10, g.content_width - 10, styles["impact"])
            st.cursor.advance(5)
        st.cursor.advance(20)

    def _code_reference(self, st: _RenderState, ref, styles) -> None:
        t = st.catalog
        g = st.cursor.geometry
        text_x = g.margin + 40
        w = g.content_width - 50

        height = self._reference_height(st, ref, styles)
        if height <= g.usable_height:
            st.cursor.ensure(height)
        else:
            st.cursor.ensure(18)

        y = st.cursor.y
        icon = MODIFICATION_ICONS.get(ref.modification_type, "?")
        color = MODIFICATION_COLORS.get(ref.modification_type, NEUTRAL_BADGE)
        self._rect(st, g.margin + 15, y, 20, 16, color, radius=2)
        self._text(st, icon, g.margin + 25, y + 3, st.base.strong(size=9, color=WHITE), align="center")

        path_lines = wrap_text(ref.file_path, styles["path"], w)
        self._block_lines(st, path_lines, text_x, y + 3, styles["path"])
        st.cursor.advance(max(18, len(path_lines) * styles["path"].leading + 6))

        self._paragraph(st, f"{t['current']}: {ref.current}", text_x, w, styles["current"])
        st.cursor.advance(3)
        self._paragraph(st, f"{t['proposed']}: {ref.proposed}", text_x, w, styles["proposed"])
        st.cursor.advance(8)

    # =================================================
    # FOOTER
    # =================================================
    def _draw_footer(self, st: _RenderState, c: FooterContent) -> None:
        st.pdf.last_page_note = f"{st.catalog['generated_by']} - {c.generated}"

    _DRAWERS = {
        SectionKind.HEADER: _draw_header,
        SectionKind.EXECUTIVE_SUMMARY: _draw_executive_summary,
        SectionKind.HIGHLIGHTS_CONCERNS: _draw_highlights_concerns,
        SectionKind.USER_ANALYTICS: _draw_user_analytics,
        SectionKind.RATINGS_REVIEWS: _draw_ratings_reviews,
        SectionKind.COMPETITIVE_POSITIONING: _draw_competitive,
        SectionKind.MARKET_OPPORTUNITY: _draw_market_opportunity,
        SectionKind.TREND_ANALYSIS: _draw_trend,
        SectionKind.IMPROVEMENTS: _draw_improvements,
        SectionKind.CODE_IMPROVEMENTS: _draw_code_improvements,
        SectionKind.FOOTER: _draw_footer,
    }
