import json

import pytest
import requests

from marketlens.charts import (
    ChartKind,
    ChartOptions,
    ChartRenderer,
    ChartRequest,
    ChartServiceError,
    build_chart_requests,
    retention_color,
)
from marketlens.charts.quickchart import QuickChartBackend
from marketlens.charts.specs import gauge_ratio
from marketlens.reporting import normalize_bundle


@pytest.fixture
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr("marketlens.automation.retry.time.sleep", sleeps.append)
    return sleeps


# -------------------------------------------------
# REQUEST DERIVATION
# -------------------------------------------------

def test_full_bundle_requests_every_kind_once(full_bundle):
    requests_ = build_chart_requests(normalize_bundle(full_bundle))
    assert [r.kind for r in requests_] == [
        ChartKind.RATING_DISTRIBUTION,
        ChartKind.ENGAGEMENT,
        ChartKind.RETENTION_RATIO,
        ChartKind.DEMOGRAPHICS,
        ChartKind.COUNTRY_DISTRIBUTION,
        ChartKind.SENTIMENT,
    ]


def test_retention_chart_needs_mau():
    bundle = normalize_bundle({"firebaseAnalytics": {"dau": 5, "wau": 10, "mau": 0}})
    assert [r.kind for r in build_chart_requests(bundle)] == [ChartKind.ENGAGEMENT]


def test_no_engagement_chart_without_active_users():
    bundle = normalize_bundle({"firebaseAnalytics": {"dau": 0, "wau": 0, "mau": 0}})
    assert build_chart_requests(bundle) == []


def test_rating_chart_prefers_google_play():
    bundle = normalize_bundle({
        "googlePlayConsole": {"ratingDistribution": {"5": 90}},
        "appStore": {"ratingDistribution": {"5": 10}},
    })
    (request,) = build_chart_requests(bundle)
    assert request.spec["data"]["datasets"][0]["data"][-1] == 90


@pytest.mark.parametrize(
    "ratio, color",
    [(35, "#4CAF50"), (20, "#4CAF50"), (19.9, "#ff9800"), (10, "#ff9800"), (9.99, "#f44336"), (0, "#f44336")],
)
def test_retention_color_thresholds(ratio, color):
    assert retention_color(ratio) == color


def test_gauge_ratio_is_clamped():
    assert gauge_ratio(20, 100) == 20
    assert gauge_ratio(300, 100) == 100
    assert gauge_ratio(5, 0) == 0


# -------------------------------------------------
# RETRY & FAN-OUT
# -------------------------------------------------

def test_transient_failure_is_retried_with_linear_backoff(png_bytes, no_sleep):
    class Flaky:
        calls = 0

        def render(self, spec, options):
            Flaky.calls += 1
            if Flaky.calls < 3:
                raise ConnectionError("blip")
            return png_bytes

    renderer = ChartRenderer(Flaky(), backoff_seconds=1.0)
    result = renderer.render_one(ChartRequest(ChartKind.ENGAGEMENT, {}))

    assert result.ok
    assert result.attempts == 3
    assert no_sleep == [1.0, 2.0]


def test_exhausted_retries_become_failure(fake_backend, no_sleep):
    fake_backend.fail_titles = {"User Engagement"}
    renderer = ChartRenderer(fake_backend, backoff_seconds=1.0)
    spec = {"options": {"plugins": {"title": {"text": "User Engagement"}}}}

    result = renderer.render_one(ChartRequest(ChartKind.ENGAGEMENT, spec))

    assert not result.ok
    assert result.image is None
    assert "chart service down" in result.error
    assert result.attempts == 3
    assert fake_backend.calls == ["User Engagement"] * 3


def test_one_failing_chart_does_not_affect_others(full_bundle, make_chart_renderer, no_sleep):
    renderer = make_chart_renderer(fail_titles=["Review Sentiment"])
    results = renderer.render_all(build_chart_requests(normalize_bundle(full_bundle)))

    assert len(results) == 6
    assert set(results.failures()) == {ChartKind.SENTIMENT}
    assert results.image(ChartKind.SENTIMENT) is None
    for kind in ChartKind:
        if kind is not ChartKind.SENTIMENT:
            assert results.image(kind) is not None


def test_empty_batch():
    renderer = ChartRenderer(object())
    assert len(renderer.render_all([])) == 0


def test_from_config_selects_provider():
    quick = ChartRenderer.from_config({"provider": "quickchart", "attempts": 2})
    assert isinstance(quick.backend, QuickChartBackend)
    assert quick.attempts == 2

    with pytest.raises(ValueError):
        ChartRenderer.from_config({"provider": "gnuplot"})


# -------------------------------------------------
# QUICKCHART HTTP
# -------------------------------------------------

class FakeResponse:
    def __init__(self, status_code=200, content=b"png", reason="OK"):
        self.status_code = status_code
        self.content = content
        self.reason = reason

    @property
    def ok(self):
        return 200 <= self.status_code < 300


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.response


def test_quickchart_request_parameters():
    session = FakeSession(FakeResponse())
    backend = QuickChartBackend(url="https://charts.test/chart", timeout=7, session=session)
    spec = {"type": "bar", "data": {"labels": ["DAU"]}}

    assert backend.render(spec, ChartOptions(width=500, height=250)) == b"png"

    url, params, timeout = session.calls[0]
    assert url == "https://charts.test/chart"
    assert timeout == 7
    assert json.loads(params["c"]) == spec
    assert (params["w"], params["h"], params["bkg"], params["f"]) == ("500", "250", "#ffffff", "png")


def test_quickchart_non_success_raises():
    backend = QuickChartBackend(session=FakeSession(FakeResponse(503, b"", "Service Unavailable")))
    with pytest.raises(ChartServiceError, match="503"):
        backend.render({}, ChartOptions())


def test_quickchart_uses_requests_session_by_default():
    assert isinstance(QuickChartBackend().session, requests.Session)


# -------------------------------------------------
# OFFLINE BACKEND
# -------------------------------------------------

def test_matplotlib_backend_renders_every_spec_kind(full_bundle):
    from marketlens.charts.matplotlib_backend import MatplotlibBackend

    backend = MatplotlibBackend()
    for request in build_chart_requests(normalize_bundle(full_bundle)):
        image = backend.render(request.spec, ChartOptions(width=300, height=200))
        assert image.startswith(b"\x89PNG"), request.kind
