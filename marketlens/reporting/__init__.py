from .contracts import AnalyticsBundle, normalize_bundle
from .sections import CANONICAL_ORDER, Section, SectionKind, build_sections

__all__ = [
    "AnalyticsBundle",
    "normalize_bundle",
    "CANONICAL_ORDER",
    "Section",
    "SectionKind",
    "build_sections",
]
