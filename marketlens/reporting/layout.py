"""
PDF Layout Primitives
---------------------
Geometry, cursor and style values shared by the PDF renderer.

Responsibilities:
- PageCursor tracks the write position as distance from the page top
- StyleContext is an immutable font/size/color value passed to every draw
- Text is measured with ReportLab font metrics before it is placed
- NumberedCanvas writes "Page X of Y" once the page total is known
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from marketlens.localization import FontProfile
from marketlens.localization.fonts import LATIN

PAGE_SIZES = {
    "A4": A4,
    "LETTER": letter,
}

ELLIPSIS = "..."


# =====================================================
# GEOMETRY
# =====================================================

@dataclass(frozen=True)
class PageGeometry:
    width: float = A4[0]
    height: float = A4[1]
    margin: float = 50

    @classmethod
    def from_config(cls, pdf_config: Optional[dict] = None) -> "PageGeometry":
        cfg = pdf_config or {}
        size_name = str(cfg.get("page_size", "A4")).upper()
        width, height = PAGE_SIZES.get(size_name, A4)
        return cls(width=width, height=height, margin=float(cfg.get("margin", 50)))

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def top(self) -> float:
        return self.margin

    @property
    def bottom(self) -> float:
        """Lowest usable y (distance from top) for content."""
        return self.height - self.margin

    @property
    def usable_height(self) -> float:
        return self.bottom - self.top


# =====================================================
# STYLE
# =====================================================

@dataclass(frozen=True)
class StyleContext:
    fonts: FontProfile = LATIN
    size: float = 11
    color: str = "#000000"
    bold: bool = False
    leading_ratio: float = 1.3

    @property
    def font_name(self) -> str:
        return self.fonts.bold if self.bold else self.fonts.regular

    @property
    def leading(self) -> float:
        return self.size * self.leading_ratio

    def with_(self, **changes) -> "StyleContext":
        return replace(self, **changes)

    def strong(self, size: Optional[float] = None, color: Optional[str] = None) -> "StyleContext":
        return replace(
            self,
            bold=True,
            size=size if size is not None else self.size,
            color=color if color is not None else self.color,
        )

    def plain(self, size: Optional[float] = None, color: Optional[str] = None) -> "StyleContext":
        return replace(
            self,
            bold=False,
            size=size if size is not None else self.size,
            color=color if color is not None else self.color,
        )


# =====================================================
# CURSOR
# =====================================================

class PageCursor:
    """
    Mutable write position for one render call.

    ``y`` grows downward from the top edge. ``on_break`` is invoked
    after every page break with the cursor already reset to the top
    margin; the renderer uses it to repeat the section title.
    """

    def __init__(self, geometry: PageGeometry):
        self.geometry = geometry
        self.y = geometry.top
        self.page_count = 1
        self.on_break: Optional[Callable[[], None]] = None
        self._new_page: Optional[Callable[[], None]] = None

    def bind(self, new_page: Callable[[], None]) -> None:
        self._new_page = new_page

    @property
    def remaining(self) -> float:
        return self.geometry.bottom - self.y

    @property
    def at_top(self) -> bool:
        return self.y <= self.geometry.top

    def fits(self, height: float) -> bool:
        return height <= self.remaining

    def advance(self, dy: float) -> None:
        self.y += dy

    def page_break(self, continued: bool = True) -> None:
        if self._new_page is not None:
            self._new_page()
        self.page_count += 1
        self.y = self.geometry.top
        if continued and self.on_break is not None:
            self.on_break()

    def ensure(self, height: float) -> bool:
        """Break the page if ``height`` does not fit. True when a break happened."""
        if self.fits(height) or self.at_top:
            return False
        self.page_break()
        return True

    def to_pdf(self, y_from_top: float) -> float:
        return self.geometry.height - y_from_top


# =====================================================
# TEXT MEASUREMENT
# =====================================================

def text_width(text: str, style: StyleContext) -> float:
    return stringWidth(text, style.font_name, style.size)


def _hard_wrap(line: str, style: StyleContext, width: float) -> List[str]:
    """Character-level wrap for runs without spaces (CJK, long paths)."""
    out, current = [], ""
    for ch in line:
        if current and text_width(current + ch, style) > width:
            out.append(current)
            current = ch
        else:
            current += ch
    if current:
        out.append(current)
    return out


def wrap_text(
    text: str,
    style: StyleContext,
    width: float,
    max_lines: Optional[int] = None,
) -> List[str]:
    """
    Split ``text`` into lines that fit ``width`` at the given style.

    With ``max_lines`` the tail is cut and the last line ends in "...".
    """
    if not text:
        return []

    lines: List[str] = []
    for paragraph in str(text).splitlines() or [""]:
        for line in simpleSplit(paragraph, style.font_name, style.size, width) or [""]:
            if text_width(line, style) > width:
                lines.extend(_hard_wrap(line, style, width))
            else:
                lines.append(line)

    if max_lines is not None and len(lines) > max_lines:
        lines = lines[:max_lines]
        last = lines[-1]
        while last and text_width(last + ELLIPSIS, style) > width:
            last = last[:-1]
        lines[-1] = last.rstrip() + ELLIPSIS

    return lines


def text_height(
    text: str,
    style: StyleContext,
    width: float,
    max_lines: Optional[int] = None,
) -> float:
    return len(wrap_text(text, style, width, max_lines)) * style.leading


# =====================================================
# NUMBERED CANVAS
# =====================================================

class NumberedCanvas(canvas.Canvas):
    """
    Defers page footers until save() so every page can show the total.

    ``page_label`` is a format string with ``{current}`` and ``{total}``.
    ``last_page_note`` is drawn centered above the page number on the
    final page only.
    """

    def __init__(self, *args, page_label: str = "Page {current} of {total}",
                 footer_style: Optional[StyleContext] = None,
                 footer_offset: float = 25, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self.page_label = page_label
        self.footer_style = footer_style or StyleContext(size=9, color="#757575")
        self.footer_offset = footer_offset
        self.last_page_note: Optional[str] = None

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_page_footer(total)
            super().showPage()
        super().save()

    @property
    def total_pages(self) -> int:
        return len(self._saved_page_states)

    def _draw_page_footer(self, total: int) -> None:
        style = self.footer_style
        width = self._pagesize[0]
        self.saveState()
        self.setFont(style.font_name, style.size)
        self.setFillColor(HexColor(style.color))
        label = self.page_label.format(current=self._pageNumber, total=total)
        self.drawCentredString(width / 2, self.footer_offset, label)
        if self.last_page_note and self._pageNumber == total:
            self.drawCentredString(width / 2, self.footer_offset + 14, self.last_page_note)
        self.restoreState()
