import io

from marketlens.reporting.layout import (
    NumberedCanvas,
    PageCursor,
    PageGeometry,
    StyleContext,
    text_height,
    text_width,
    wrap_text,
)


def test_geometry_from_config():
    geometry = PageGeometry.from_config({"page_size": "letter", "margin": 36})
    assert geometry.width == 612
    assert geometry.margin == 36
    assert geometry.content_width == 612 - 72
    assert PageGeometry.from_config({"page_size": "tabloid"}).width == PageGeometry().width


def test_style_context_is_a_value():
    base = StyleContext(size=11)
    bold = base.strong(size=14, color="#1565c0")
    assert base.bold is False
    assert (bold.bold, bold.size, bold.color) == (True, 14, "#1565c0")
    assert bold.font_name == "Helvetica-Bold"
    assert bold.plain().font_name == "Helvetica"


def test_cursor_breaks_only_when_needed():
    geometry = PageGeometry(width=200, height=300, margin=50)
    pages = []
    titles = []
    cursor = PageCursor(geometry)
    cursor.bind(lambda: pages.append(cursor.page_count))
    cursor.on_break = lambda: titles.append(cursor.y)

    assert cursor.remaining == 200
    assert cursor.ensure(150) is False
    cursor.advance(150)
    assert cursor.ensure(40) is False
    assert cursor.ensure(60) is True
    assert cursor.page_count == 2
    assert cursor.y == geometry.top
    assert pages == [1]
    assert titles == [50]


def test_oversized_block_at_top_does_not_loop():
    cursor = PageCursor(PageGeometry(width=200, height=300, margin=50))
    assert cursor.at_top
    assert cursor.ensure(10_000) is False
    assert cursor.page_count == 1


def test_to_pdf_flips_axis():
    cursor = PageCursor(PageGeometry(width=200, height=300, margin=50))
    assert cursor.to_pdf(50) == 250


def test_wrap_respects_width():
    style = StyleContext(size=10)
    text = "Engagement is climbing across every cohort this week " * 5
    lines = wrap_text(text, style, 150)
    assert len(lines) > 1
    assert all(text_width(line, style) <= 150 for line in lines)
    assert text_height(text, style, 150) == len(lines) * style.leading


def test_wrap_truncates_with_ellipsis():
    style = StyleContext(size=10)
    lines = wrap_text("word " * 200, style, 100, max_lines=2)
    assert len(lines) == 2
    assert lines[-1].endswith("...")
    assert text_width(lines[-1], style) <= 100


def test_wrap_breaks_unspaced_runs():
    style = StyleContext(size=10)
    path = "lib/" + "very_long_directory_name/" * 10 + "main.dart"
    lines = wrap_text(path, style, 120)
    assert "".join(lines) == path
    assert all(text_width(line, style) <= 120 for line in lines)


def test_wrap_empty():
    assert wrap_text("", StyleContext(), 100) == []


def test_numbered_canvas_writes_totals():
    buf = io.BytesIO()
    pdf = NumberedCanvas(buf, pageCompression=0, page_label="Seite {current} von {total}")
    pdf.drawString(100, 700, "one")
    pdf.showPage()
    pdf.drawString(100, 700, "two")
    pdf.last_page_note = "closing note"
    pdf.showPage()
    pdf.save()

    content = buf.getvalue()
    assert pdf.total_pages == 2
    assert b"Seite 1 von 2" in content
    assert b"Seite 2 von 2" in content
    assert content.count(b"closing note") == 1
