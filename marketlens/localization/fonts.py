"""
Font profiles by script family.

CJK scripts use the CID fonts that ship with ReportLab, so no font files
are needed for Japanese, Simplified Chinese or Korean. Cyrillic needs a
TrueType font (NotoSans) from a configured directory; without one the
profile degrades to Helvetica.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfbase.ttfonts import TTFont

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontProfile:
    family: str
    regular: str
    bold: str
    kind: str = "standard"   # standard | cid | ttf


LATIN = FontProfile("Helvetica", "Helvetica", "Helvetica-Bold")
JAPANESE = FontProfile("NotoSansJP", "HeiseiKakuGo-W5", "HeiseiKakuGo-W5", "cid")
CHINESE = FontProfile("NotoSansSC", "STSong-Light", "STSong-Light", "cid")
KOREAN = FontProfile("NotoSansKR", "HYGothic-Medium", "HYGothic-Medium", "cid")
CYRILLIC = FontProfile("NotoSans", "NotoSans", "NotoSans-Bold", "ttf")

_PROFILES = {
    "ja": JAPANESE,
    "zh": CHINESE,
    "ko": KOREAN,
    "ru": CYRILLIC,
}

_TTF_FILES = {
    "NotoSans": ("NotoSans.ttf", "NotoSans-Bold.ttf"),
}


def font_profile_for(language: str) -> FontProfile:
    """Script-family bucket for a bare language code; unmatched → Latin."""
    return _PROFILES.get((language or "").lower(), LATIN)


def register_font_profile(
    profile: FontProfile,
    font_dir: Optional[str] = None,
) -> FontProfile:
    """
    Register the fonts of *profile* with ReportLab and return the profile
    that is actually usable. Never raises; falls back to Helvetica.
    """
    if profile.kind == "standard":
        return profile

    registered = set(pdfmetrics.getRegisteredFontNames())

    if profile.kind == "cid":
        try:
            if profile.regular not in registered:
                pdfmetrics.registerFont(UnicodeCIDFont(profile.regular))
            return profile
        except Exception:
            logger.warning("CID font %s unavailable, using Helvetica", profile.regular)
            return LATIN

    regular_file, bold_file = _TTF_FILES.get(profile.family, (None, None))
    if not font_dir or not regular_file:
        logger.info("No font directory for %s, using Helvetica", profile.family)
        return LATIN

    regular_path = Path(font_dir) / regular_file
    bold_path = Path(font_dir) / bold_file
    if not regular_path.exists():
        logger.warning("Font file not found: %s", regular_path)
        return LATIN

    try:
        if profile.regular not in registered:
            pdfmetrics.registerFont(TTFont(profile.regular, str(regular_path)))
        bold = profile.regular
        if bold_path.exists():
            if profile.bold not in registered:
                pdfmetrics.registerFont(TTFont(profile.bold, str(bold_path)))
            bold = profile.bold
        return FontProfile(profile.family, profile.regular, bold, "ttf")
    except Exception:
        logger.exception("Failed to register %s", regular_path)
        return LATIN
