import json
import logging
from typing import Optional

import requests

from .contracts import ChartBackend, ChartOptions, ChartServiceError, ChartSpec

logger = logging.getLogger(__name__)

QUICKCHART_URL = "https://quickchart.io/chart"


class QuickChartBackend(ChartBackend):
    """
    Renders Chart.js specs through the QuickChart HTTP service.

    One GET per chart: ``c`` (JSON config), ``w``, ``h``, ``bkg``, ``f``.
    Transport errors propagate as ``requests`` exceptions; any non-2xx
    answer raises ChartServiceError. Retrying is the caller's job.
    """

    name = "quickchart"

    def __init__(
        self,
        url: str = QUICKCHART_URL,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_params(self, spec: ChartSpec, options: ChartOptions) -> dict:
        return {
            "c": json.dumps(spec, separators=(",", ":")),
            "w": str(options.width),
            "h": str(options.height),
            "bkg": options.background or "#ffffff",
            "f": options.format or "png",
        }

    def render(self, spec: ChartSpec, options: ChartOptions) -> bytes:
        params = self.build_params(spec, options)
        logger.debug("GET %s (type=%s)", self.url, spec.get("type"))

        resp = self.session.get(self.url, params=params, timeout=self.timeout)

        if not resp.ok:
            raise ChartServiceError(
                f"QuickChart API error: {resp.status_code} {resp.reason}"
            )
        if not resp.content:
            raise ChartServiceError("QuickChart API returned an empty body")

        return resp.content
