from .resolver import (
    BASE_LOCALE,
    SUPPORTED_LOCALES,
    CatalogError,
    LocaleCatalog,
    extract_language_code,
    load_catalog,
    normalize_locale,
    resolve_catalog,
)
from .fonts import FontProfile, font_profile_for, register_font_profile

__all__ = [
    "BASE_LOCALE",
    "SUPPORTED_LOCALES",
    "CatalogError",
    "LocaleCatalog",
    "FontProfile",
    "extract_language_code",
    "font_profile_for",
    "load_catalog",
    "normalize_locale",
    "register_font_profile",
    "resolve_catalog",
]
