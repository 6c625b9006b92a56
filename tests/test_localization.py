import pytest

from marketlens.localization import (
    BASE_LOCALE,
    SUPPORTED_LOCALES,
    extract_language_code,
    load_catalog,
    normalize_locale,
    resolve_catalog,
)
from marketlens.localization.fonts import LATIN, font_profile_for, register_font_profile


@pytest.mark.parametrize(
    "requested, expected",
    [
        (None, "en"),
        ("", "en"),
        ("ja", "ja"),
        ("ja_JP", "ja"),
        ("zh", "zh_CN"),
        ("zh-CN", "zh_CN"),
        ("de", "de_DE"),
        ("pt_BR", "pt_PT"),
        ("xx_YY", "en"),
        ({"@language": "ko_KR"}, "ko_KR"),
        ({"@language": None}, "en"),
    ],
)
def test_normalize_locale(requested, expected):
    assert normalize_locale(requested) == expected


def test_object_with_language_attribute_is_accepted():
    class Locale:
        language = "fr_FR"

    assert normalize_locale(Locale()) == "fr_FR"
    assert extract_language_code(Locale()) == "fr"


def test_unknown_locale_matches_no_locale():
    unknown = resolve_catalog("tlh_QO")
    default = resolve_catalog(None)
    assert unknown.code == default.code == BASE_LOCALE
    assert dict(unknown.labels) == dict(default.labels)


@pytest.mark.parametrize("code", SUPPORTED_LOCALES)
def test_every_catalog_has_full_key_set(code):
    base_keys = set(load_catalog(BASE_LOCALE).labels)
    catalog = load_catalog(code)
    assert base_keys <= set(catalog.labels)
    assert "{current}" in catalog["page_of"]
    assert "{total}" in catalog["page_of"]
    for key in ("more_highlights", "more_concerns", "more_items"):
        assert "7" in catalog.format(key, count=7)


def test_catalog_is_cached_and_read_only():
    catalog = resolve_catalog("ja")
    assert resolve_catalog("ja_JP") is catalog
    with pytest.raises(TypeError):
        catalog.labels["executive_summary"] = "changed"


def test_catalog_format():
    catalog = resolve_catalog("de_DE")
    assert catalog.format("page_of", current=2, total=7) == "Seite 2 von 7"


@pytest.mark.parametrize(
    "language, regular",
    [
        ("ja", "HeiseiKakuGo-W5"),
        ("zh", "STSong-Light"),
        ("ko", "HYGothic-Medium"),
        ("en", "Helvetica"),
        ("es", "Helvetica"),
    ],
)
def test_font_profile_by_script(language, regular):
    assert font_profile_for(language).regular == regular


def test_cyrillic_without_font_dir_falls_back_to_helvetica(tmp_path):
    profile = resolve_catalog("ru_RU").fonts
    assert register_font_profile(profile, None) == LATIN
    assert register_font_profile(profile, str(tmp_path)) == LATIN


def test_cjk_profile_registers():
    profile = resolve_catalog("ja").fonts
    assert register_font_profile(profile) == profile
