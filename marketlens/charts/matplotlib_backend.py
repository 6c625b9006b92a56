"""
Offline chart backend.

Draws the same Chart.js-style specs locally with matplotlib so reports
can be built without network access. Uses the object API (Figure)
rather than pyplot because charts are rendered from worker threads.
"""

import io
import logging
import threading

from matplotlib.figure import Figure

from .contracts import ChartBackend, ChartOptions, ChartSpec

logger = logging.getLogger(__name__)

DPI = 100

# Font handling inside matplotlib is not thread-safe
_RENDER_LOCK = threading.Lock()


def _dataset(spec: ChartSpec) -> dict:
    datasets = spec.get("data", {}).get("datasets") or [{}]
    return datasets[0]


def _title(spec: ChartSpec) -> str:
    return spec.get("options", {}).get("plugins", {}).get("title", {}).get("text", "")


def _colors(dataset: dict, count: int):
    colors = dataset.get("backgroundColor")
    if isinstance(colors, str):
        return [colors] * count
    if not colors:
        return None
    return [colors[i % len(colors)] for i in range(count)]


class MatplotlibBackend(ChartBackend):
    name = "matplotlib"

    def render(self, spec: ChartSpec, options: ChartOptions) -> bytes:
        chart_type = spec.get("type", "bar")
        dataset = _dataset(spec)
        values = [float(v or 0) for v in dataset.get("data", [])]
        labels = list(spec.get("data", {}).get("labels") or [])
        chart_options = spec.get("options", {})

        with _RENDER_LOCK:
            fig = Figure(
                figsize=(options.width / DPI, options.height / DPI),
                dpi=DPI,
                facecolor=options.background,
            )
            ax = fig.add_subplot(1, 1, 1)
            colors = _colors(dataset, len(values))

            if chart_type == "bar":
                self._bar(ax, labels, values, colors, chart_options.get("indexAxis") == "y")
            elif chart_type in ("pie", "doughnut"):
                self._share(ax, labels, values, colors, chart_type, chart_options)
            else:
                raise ValueError(f"Unsupported chart type: {chart_type}")

            title = _title(spec)
            if title:
                ax.set_title(title, fontsize=11, pad=8)

            fig.tight_layout()
            buf = io.BytesIO()
            fig.savefig(buf, format=options.format or "png", facecolor=options.background)

        return buf.getvalue()

    # -------------------------------------------------
    # DRAWERS
    # -------------------------------------------------
    @staticmethod
    def _bar(ax, labels, values, colors, horizontal: bool) -> None:
        positions = range(len(values))
        if horizontal:
            ax.barh(positions, values, color=colors)
            ax.set_yticks(list(positions))
            ax.set_yticklabels(labels)
            ax.set_xlim(left=0)
            ax.grid(axis="x", linestyle="--", alpha=0.4)
        else:
            ax.bar(positions, values, color=colors)
            ax.set_xticks(list(positions))
            ax.set_xticklabels(labels)
            ax.set_ylim(bottom=0)
            ax.grid(axis="y", linestyle="--", alpha=0.4)
        ax.set_axisbelow(True)

    @staticmethod
    def _share(ax, labels, values, colors, chart_type, chart_options) -> None:
        if not any(values):
            values = [1.0] * max(len(values), 1)

        wedgeprops = None
        if chart_type == "doughnut":
            cutout = str(chart_options.get("cutout", "50%")).rstrip("%")
            width = 1 - float(cutout) / 100
            wedgeprops = {"width": width}

        circumference = float(chart_options.get("circumference", 360))
        if circumference < 360:
            # Half-doughnut gauge: scale wedges onto the arc and hide the rest
            total = sum(values) or 1.0
            scaled = [v / total * circumference for v in values]
            scaled.append(360 - circumference)
            colors = list(colors or []) + ["none"]
            ax.pie(scaled, colors=colors, startangle=180, counterclock=False,
                   wedgeprops=wedgeprops)
            ax.set_ylim(0, 1.1)
        else:
            ax.pie(values, labels=None, colors=colors, wedgeprops=wedgeprops,
                   autopct=lambda p: f"{p:.0f}%" if p > 5 else "")
            if labels:
                ax.legend(labels, loc="center left", bbox_to_anchor=(1.0, 0.5),
                          fontsize=7, frameon=False)
        ax.set_aspect("equal")
