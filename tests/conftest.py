import io
from datetime import date

import pytest
from PIL import Image

from marketlens.charts import ChartBackend, ChartRenderer


@pytest.fixture
def today():
    """Frozen report date so output is deterministic."""
    return date(2024, 3, 15)


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (40, 30), (33, 150, 243)).save(buf, format="PNG")
    return buf.getvalue()


class FakeChartBackend(ChartBackend):
    """
    In-memory chart backend. Charts whose title text is listed in
    ``fail_titles`` always raise; every call is recorded.
    """

    name = "fake"

    def __init__(self, image: bytes, fail_titles=(), corrupt_titles=()):
        self.image = image
        self.fail_titles = set(fail_titles)
        self.corrupt_titles = set(corrupt_titles)
        self.calls = []

    @staticmethod
    def title_of(spec):
        return spec.get("options", {}).get("plugins", {}).get("title", {}).get("text", "")

    def render(self, spec, options):
        title = self.title_of(spec)
        self.calls.append(title)
        if any(title.startswith(t) for t in self.fail_titles):
            raise ConnectionError(f"chart service down for {title}")
        if any(title.startswith(t) for t in self.corrupt_titles):
            return b"definitely not an image"
        return self.image


@pytest.fixture
def fake_backend(png_bytes):
    return FakeChartBackend(png_bytes)


@pytest.fixture
def make_chart_renderer(png_bytes):
    def _make(fail_titles=(), corrupt_titles=()):
        backend = FakeChartBackend(png_bytes, fail_titles, corrupt_titles)
        return ChartRenderer(backend, backoff_seconds=0, batch_timeout=30)
    return _make


@pytest.fixture
def pdf_config():
    """Uncompressed pages so drawn text can be found in the bytes."""
    return {"pdf": {"compress": False}}


@pytest.fixture
def full_bundle():
    """
    Bundle with every data source present, in the collectors' camelCase
    shape.
    """
    return {
        "googlePlayConsole": {
            "packageName": "com.example.fittrack",
            "averageRating": 4.3,
            "totalRatings": 12840,
            "ratingDistribution": {"5": 62, "4": 18, "3": 9, "2": 4, "1": 7},
        },
        "appStore": {
            "appName": "FitTrack",
            "averageRating": 4.6,
            "totalRatings": 3120,
            "ratingDistribution": {"star5": 70, "star4": 15, "star3": 8, "star2": 3, "star1": 4},
        },
        "firebaseAnalytics": {
            "dau": 2000,
            "wau": 6500,
            "mau": 10000,
            "newUsers": 1450,
            "totalUsers": 48000,
            "averageSessionDuration": 272,
            "sessionsPerUser": 3.4,
            "demographics": {
                "ageGroups": {"18-24": 22, "25-34": 41, "35-44": 24, "45+": 13},
                "countryDistribution": {"US": 38, "DE": 14, "JP": 12, "IN": 19, "BR": 9},
            },
        },
        "marketingAnalytics": {
            "overallAnalysis": {
                "summary": "Engagement grew steadily while ratings held above 4.",
                "keyMetrics": [
                    {"metric": "DAU", "value": "2,000", "trend": "up"},
                    {"metric": "Crash-free users", "value": "99.1%", "trend": "stable"},
                    {"metric": "Churn", "value": "4.2%", "trend": "down"},
                    {"metric": "Sessions", "value": "3.4", "trend": "sideways"},
                ],
                "highlights": ["Record weekly signups", "Workout streaks adopted"],
                "concerns": ["Onboarding drop-off on Android"],
            },
            "improvementSuggestions": [
                {
                    "title": "Shorten onboarding",
                    "description": "Cut the signup flow from five screens to three.",
                    "priority": "high",
                    "category": "UX",
                    "expectedImpact": "+8% activation",
                },
                {
                    "title": "Localize store listing",
                    "description": "Add Japanese screenshots.",
                    "priority": "low",
                    "category": "ASO",
                },
            ],
            "trendAnalysis": {
                "userGrowthTrend": "New users up 12% week over week.",
                "engagementTrend": "Sessions per user flat.",
                "ratingTrend": "Stable around 4.4.",
                "predictions": ["MAU passes 12k next month"],
            },
            "reviewAnalysis": {
                "sentiment": {"positive": 68, "neutral": 20, "negative": 12},
                "commonThemes": ["Battery usage", "Sync reliability"],
                "actionableInsights": ["Add offline mode"],
            },
            "competitivePositioning": {
                "marketPosition": "Challenger in the mid-market fitness segment.",
                "competitorComparison": [
                    {
                        "competitor": "StrideUp",
                        "ourStrengths": ["Cleaner UI", "Cheaper plan"],
                        "ourWeaknesses": ["Fewer integrations"],
                        "battleStrategy": "Lead with price in paid search.",
                    }
                ],
                "differentiationStrategy": "Own habit building.",
                "quickWins": ["Ship Garmin sync"],
            },
            "marketOpportunityPriority": {
                "prioritizedOpportunities": [
                    {
                        "opportunity": "Corporate wellness plans",
                        "fitScore": "Excellent",
                        "fitReason": "Team challenges already exist.",
                        "requiredChanges": ["Admin dashboard", "SSO", "Invoicing", "Seat management"],
                        "estimatedEffort": "High",
                        "recommendedAction": "Pilot with two design partners.",
                    },
                    {
                        "opportunity": "Smart ring support",
                        "fitScore": "unclear",
                        "estimatedEffort": "medium",
                    },
                ],
                "strategicRecommendation": "Focus on B2B wellness this quarter.",
            },
        },
        "githubImprovements": {
            "repository": "example/fittrack",
            "framework": "Flutter",
            "improvementSummary": "Two changes close the onboarding gap.",
            "improvements": [
                {
                    "title": "Lazy-load workout catalog",
                    "description": "Defer catalog fetch until the tab is opened.",
                    "priority": "medium",
                    "category": "performance",
                    "expectedImpact": "Faster cold start",
                    "relatedFeature": "Workout catalog",
                    "codeReferences": [
                        {
                            "filePath": "lib/catalog/catalog_page.dart",
                            "modificationType": "modify",
                            "currentFunctionality": "Fetches | renders all\nat startup",
                            "proposedChange": "Fetch on first open",
                        },
                        {
                            "filePath": "lib/catalog/cache.dart",
                            "modificationType": "rewrite",
                            "currentFunctionality": "No cache",
                            "proposedChange": "LRU cache",
                        },
                    ],
                }
            ],
        },
    }


@pytest.fixture
def usage_only_bundle():
    return {"firebaseAnalytics": {"dau": 20, "wau": 60, "mau": 100}}
