"""
Shared pytest fixtures for WebJage backend tests.
"""

import pytest

from analysis_cache import AnalysisCache
from orchestrator import AnalysisOrchestrator


# ============================================================================
# Test doubles
# ============================================================================

class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAnalyzer:
    """Async stand-in for claude_service.analyze_content that records calls."""

    def __init__(self, result=None, error=None):
        self.result = result if result is not None else {
            "summary": "A short guide to brewing coffee at home.",
            "qualityScore": 7,
            "credibility": "Medium",
            "sentiment": "Positive",
            "category": "Blog",
            "readingTime": "99 min read",
            "keyPoints": ["Grind fresh", "Weigh your beans"],
        }
        self.error = error
        self.calls = []

    async def __call__(self, url, title, content, metadata):
        self.calls.append({"url": url, "title": title, "content": content, "metadata": metadata})
        if self.error is not None:
            raise self.error
        return dict(self.result) if isinstance(self.result, dict) else self.result


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Isolated cache driven by the fake clock."""
    return AnalysisCache(clock=clock)


@pytest.fixture
def fake_analyzer():
    return FakeAnalyzer()


@pytest.fixture
def orchestrator(cache, fake_analyzer):
    return AnalysisOrchestrator(cache=cache, analyzer=fake_analyzer)


@pytest.fixture
def article_text():
    return (
        "H1: Brewing Better Coffee\n\n"
        "Coffee tastes better when the beans are fresh. Grind the beans right before brewing!\n\n"
        "- Weigh the coffee beans\n"
        "- Heat the water to 94 degrees\n\n"
        "Fresh coffee beans and clean water make the biggest difference. Enjoy your coffee."
    )


@pytest.fixture
def sample_content(article_text):
    return {
        "text": article_text,
        "wordCount": 600,
        "images": [
            {"src": "https://example.com/beans.jpg", "alt": "Roasted coffee beans", "title": ""},
            {"src": "https://example.com/kettle.jpg", "alt": "", "title": "Kettle"},
        ],
        "links": [
            {"url": "https://example.com/grinders", "text": "Our guide to coffee grinders"},
            {"url": "https://example.com/more", "text": "Read more"},
        ],
    }


@pytest.fixture
def sample_metadata():
    return {
        "description": "Learn how fresh beans, a good grinder and clean water improve home-brewed coffee.",
        "author": "Sam Barista",
        "article:published_time": "2024-12-15T10:00:00Z",
        "og:type": "article",
    }


@pytest.fixture
def sample_request(sample_content, sample_metadata):
    return {
        "url": "https://example.com/coffee",
        "title": "Brewing Better Coffee at Home: A Guide",
        "content": sample_content,
        "metadata": sample_metadata,
    }
