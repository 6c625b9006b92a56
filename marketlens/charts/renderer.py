"""
Chart fan-out / fan-in.

Every request runs on its own worker under the retry helper. A chart
that exhausts its attempts becomes a failed ChartResult; the batch
itself never raises and never stops early.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Dict, Iterable, Mapping, Optional

from marketlens.automation.retry import retry

from .contracts import (
    ChartBackend,
    ChartKind,
    ChartOptions,
    ChartRequest,
    ChartResult,
    ChartResults,
)

logger = logging.getLogger(__name__)


class ChartRenderer:
    def __init__(
        self,
        backend: ChartBackend,
        options: Optional[ChartOptions] = None,
        attempts: int = 3,
        backoff_seconds: float = 1.0,
        batch_timeout: Optional[float] = 90,
        max_workers: int = 6,
    ):
        self.backend = backend
        self.options = options or ChartOptions()
        self.attempts = max(1, int(attempts))
        self.backoff_seconds = backoff_seconds
        self.batch_timeout = batch_timeout
        self.max_workers = max(1, int(max_workers))

    @classmethod
    def from_config(cls, charts_config: Mapping[str, Any]) -> "ChartRenderer":
        """Build the renderer and its backend from the ``charts`` config section."""
        provider = charts_config.get("provider", "quickchart")

        if provider == "matplotlib":
            from .matplotlib_backend import MatplotlibBackend
            backend = MatplotlibBackend()
        elif provider == "quickchart":
            from .quickchart import QuickChartBackend
            backend = QuickChartBackend(
                url=charts_config.get("url") or "https://quickchart.io/chart",
                timeout=charts_config.get("request_timeout", 15),
            )
        else:
            raise ValueError(f"Unknown chart provider: {provider}")

        return cls(
            backend,
            options=ChartOptions.from_config(charts_config),
            attempts=charts_config.get("attempts", 3),
            backoff_seconds=charts_config.get("backoff_seconds", 1.0),
            batch_timeout=charts_config.get("batch_timeout", 90),
            max_workers=charts_config.get("max_workers", 6),
        )

    # -------------------------------------------------
    # SINGLE CHART
    # -------------------------------------------------
    def render_one(self, request: ChartRequest) -> ChartResult:
        calls = {"count": 0}

        @retry(times=self.attempts, delay=self.backoff_seconds)
        def attempt() -> bytes:
            calls["count"] += 1
            return self.backend.render(request.spec, self.options)

        try:
            image = attempt()
        except Exception as exc:
            logger.warning(
                "Chart %s failed after %s attempts: %s",
                request.kind.value,
                calls["count"],
                exc,
            )
            return ChartResult.failure(request.kind, str(exc) or type(exc).__name__, calls["count"])

        return ChartResult.success(request.kind, image, calls["count"])

    # -------------------------------------------------
    # BATCH
    # -------------------------------------------------
    def render_all(self, requests: Iterable[ChartRequest]) -> ChartResults:
        requests = list(requests)
        if not requests:
            return ChartResults()

        results: Dict[ChartKind, ChartResult] = {}
        pool = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(requests)),
            thread_name_prefix="chart",
        )
        futures = {pool.submit(self.render_one, req): req for req in requests}

        try:
            done, pending = wait(futures, timeout=self.batch_timeout)

            for future in done:
                req = futures[future]
                try:
                    results[req.kind] = future.result()
                except Exception as exc:
                    logger.exception("Chart worker crashed: %s", req.kind.value)
                    results[req.kind] = ChartResult.failure(req.kind, str(exc))

            for future in pending:
                req = futures[future]
                future.cancel()
                logger.warning("Chart %s timed out", req.kind.value)
                results[req.kind] = ChartResult.failure(
                    req.kind, f"timed out after {self.batch_timeout}s"
                )
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        logger.info(
            "Charts rendered: %s ok, %s failed",
            sum(1 for r in results.values() if r.ok),
            sum(1 for r in results.values() if not r.ok),
        )
        return ChartResults(results)
