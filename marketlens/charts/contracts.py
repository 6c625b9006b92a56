from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional


class ChartServiceError(Exception):
    """Chart service answered with a non-success status."""


class ChartKind(str, Enum):
    RATING_DISTRIBUTION = "rating_distribution"
    ENGAGEMENT = "engagement"
    RETENTION_RATIO = "retention_ratio"
    DEMOGRAPHICS = "demographics"
    COUNTRY_DISTRIBUTION = "country_distribution"
    SENTIMENT = "sentiment"


# Chart.js-style configuration dict, serialized as-is for QuickChart
ChartSpec = Dict[str, Any]


@dataclass(frozen=True)
class ChartOptions:
    width: int = 400
    height: int = 300
    background: str = "#ffffff"
    format: str = "png"

    @classmethod
    def from_config(cls, charts_config: Optional[Mapping[str, Any]] = None) -> "ChartOptions":
        cfg = charts_config or {}
        return cls(
            width=int(cfg.get("width", cls.width)),
            height=int(cfg.get("height", cls.height)),
            background=str(cfg.get("background", cls.background)),
            format=str(cfg.get("format", cls.format)),
        )


@dataclass(frozen=True)
class ChartRequest:
    kind: ChartKind
    spec: ChartSpec = field(compare=False)
    title: str = ""


@dataclass(frozen=True)
class ChartResult:
    """Either ``image`` bytes or an explicit ``error`` message."""

    kind: ChartKind
    image: Optional[bytes] = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.image is not None and self.error is None

    @classmethod
    def success(cls, kind: ChartKind, image: bytes, attempts: int = 1) -> "ChartResult":
        return cls(kind=kind, image=image, attempts=attempts)

    @classmethod
    def failure(cls, kind: ChartKind, error: str, attempts: int = 0) -> "ChartResult":
        return cls(kind=kind, error=error, attempts=attempts)


class ChartResults(Mapping):
    """Immutable per-request result set keyed by ChartKind."""

    def __init__(self, results: Optional[Mapping[ChartKind, ChartResult]] = None):
        self._results = MappingProxyType(dict(results or {}))

    def __getitem__(self, kind: ChartKind) -> ChartResult:
        return self._results[kind]

    def __iter__(self) -> Iterator[ChartKind]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def image(self, kind: ChartKind) -> Optional[bytes]:
        result = self._results.get(kind)
        return result.image if result is not None and result.ok else None

    def failures(self) -> Dict[ChartKind, str]:
        return {k: r.error for k, r in self._results.items() if not r.ok}

    def __repr__(self) -> str:
        ok = sorted(k.value for k, r in self._results.items() if r.ok)
        failed = sorted(self.failures())
        return f"ChartResults(ok={ok}, failed={[k.value for k in failed]})"


class ChartBackend(ABC):
    """Turns one chart spec into image bytes. Raises on failure."""

    name = "backend"

    @abstractmethod
    def render(self, spec: ChartSpec, options: ChartOptions) -> bytes:
        raise NotImplementedError
