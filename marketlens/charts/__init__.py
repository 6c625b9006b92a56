from .contracts import (
    ChartBackend,
    ChartKind,
    ChartOptions,
    ChartRequest,
    ChartResult,
    ChartResults,
    ChartServiceError,
)
from .renderer import ChartRenderer
from .specs import build_chart_requests, retention_color

__all__ = [
    "ChartBackend",
    "ChartKind",
    "ChartOptions",
    "ChartRequest",
    "ChartResult",
    "ChartResults",
    "ChartServiceError",
    "ChartRenderer",
    "build_chart_requests",
    "retention_color",
]
