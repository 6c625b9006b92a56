"""
Locale Resolution
-----------------
Maps a requested locale onto a label catalog and a font profile.

Rules:
- Catalogs are YAML files under ``catalogs/``, one per supported locale
- Every catalog carries the full key set of the base catalog
- Unknown locales fall back to the base catalog as a whole
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml

from .fonts import FontProfile, LATIN, font_profile_for

CATALOG_DIR = Path(__file__).parent / "catalogs"

BASE_LOCALE = "en"

SUPPORTED_LOCALES = (
    "en",
    "ja",
    "zh_CN",
    "ko_KR",
    "es_ES",
    "fr_FR",
    "de_DE",
    "pt_PT",
    "ru_RU",
    "id_ID",
)

# Field carrying the language code on locale objects handed over by the
# workflow layer, e.g. {"@language": "ja_JP"}.
LANGUAGE_FIELD = "@language"


class CatalogError(Exception):
    """Raised when a catalog file is missing keys or malformed."""


@dataclass(frozen=True)
class LocaleCatalog:
    code: str
    labels: Mapping[str, str]
    fonts: FontProfile = field(default=LATIN)

    def __getitem__(self, key: str) -> str:
        return self.labels[key]

    def __contains__(self, key: str) -> bool:
        return key in self.labels

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.labels.get(key, default)

    def format(self, key: str, **kwargs: Any) -> str:
        return self.labels[key].format(**kwargs)


# =====================================================
# LOCALE NORMALIZATION
# =====================================================

def _locale_string(locale: Any) -> Optional[str]:
    if locale is None:
        return None

    # Object form wins: mapping or attribute carrying the language code
    if isinstance(locale, Mapping):
        value = locale.get(LANGUAGE_FIELD) or locale.get("language")
        return str(value) if value else None

    if not isinstance(locale, str):
        value = getattr(locale, "language", None)
        return str(value) if value else None

    return locale.strip() or None


def extract_language_code(locale: Any = None) -> str:
    """``"ja_JP"`` → ``"ja"``; missing → base language."""
    raw = _locale_string(locale)
    if not raw:
        return BASE_LOCALE
    return raw.replace("-", "_").split("_")[0].lower()


def normalize_locale(locale: Any = None) -> str:
    """
    Resolve any locale value onto one of SUPPORTED_LOCALES.

    Exact match first, then language code, then the first supported
    locale sharing the language prefix (``zh`` → ``zh_CN``).
    """
    raw = _locale_string(locale)
    if not raw:
        return BASE_LOCALE

    raw = raw.replace("-", "_")
    if raw in SUPPORTED_LOCALES:
        return raw

    language = raw.split("_")[0].lower()
    if language in SUPPORTED_LOCALES:
        return language

    for supported in SUPPORTED_LOCALES:
        if supported.split("_")[0] == language:
            return supported

    return BASE_LOCALE


# =====================================================
# CATALOG LOADING
# =====================================================

def _read_catalog_file(code: str) -> dict:
    path = CATALOG_DIR / f"{code}.yaml"
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise CatalogError(f"Catalog {code} must be a YAML mapping")

    return {str(k): str(v) for k, v in data.items()}


@lru_cache(maxsize=None)
def load_catalog(code: str) -> LocaleCatalog:
    """Load one supported catalog and check it against the base key set."""
    if code not in SUPPORTED_LOCALES:
        raise CatalogError(f"Unsupported locale: {code}")

    labels = _read_catalog_file(code)

    if code != BASE_LOCALE:
        missing = set(load_catalog(BASE_LOCALE).labels) - set(labels)
        if missing:
            raise CatalogError(
                f"Catalog {code} is missing keys: {', '.join(sorted(missing))}"
            )

    return LocaleCatalog(
        code=code,
        labels=MappingProxyType(labels),
        fonts=font_profile_for(code.split("_")[0]),
    )


def resolve_catalog(locale: Any = None) -> LocaleCatalog:
    """Single entry point used by both renderers."""
    return load_catalog(normalize_locale(locale))
