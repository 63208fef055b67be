"""Cache-backed analysis pipeline.

Pipeline: fingerprint -> cache lookup -> (miss) preprocess -> Claude ->
enrich -> cache store -> response.
"""

import asyncio
from typing import Any, Awaitable, Callable

from analysis_cache import AnalysisCache
from enricher import enhance_analysis, format_timestamp, preprocess_content
from errors import AiServiceUnavailable, AnalysisError, AnalysisFailed
from fingerprint import generate_cache_key
from models import AiAnalysis, EnhancedAnalysis

# analyzer(url=..., title=..., content=ProcessedContent, metadata=...) -> AiAnalysis
Analyzer = Callable[..., Awaitable[AiAnalysis]]


class AnalysisOrchestrator:
    """
    Entry point for page analysis.

    The cache is owned by the caller and injected, so several orchestrators
    (or tests) never share state by accident. Concurrent requests for the
    same content are not coalesced: each cache miss calls the analyzer.
    """

    def __init__(self, cache: AnalysisCache, analyzer: Analyzer) -> None:
        self.cache = cache
        self._analyzer = analyzer

    async def analyze(self, request: dict[str, Any]) -> EnhancedAnalysis:
        url = request.get("url") or ""
        title = request.get("title") or ""
        content = request.get("content") or {}
        metadata = request.get("metadata") or {}

        cache_key = generate_cache_key(url, content)
        cached = self.cache.get(cache_key)
        if cached is not None:
            print(f"ANALYZE CACHE HIT: url={url}")
            return {**cached, "cached": True, "timestamp": format_timestamp()}

        print(f"ANALYZE: url={url}")
        processed = preprocess_content(content, metadata)

        try:
            ai_analysis = await self._analyzer(
                url=url,
                title=title,
                content=processed,
                metadata=metadata,
            )
        except AnalysisError:
            raise
        except (OSError, asyncio.TimeoutError) as e:
            print("ANALYZE ERROR: analysis service unreachable:", str(e))
            raise AiServiceUnavailable(
                "Unable to connect to analysis service. Please try again later."
            ) from e
        except Exception as e:
            print("ANALYZE ERROR:", repr(e))
            raise AnalysisFailed() from e

        try:
            final = enhance_analysis(
                ai_analysis,
                {"url": url, "title": title, "content": content, "metadata": metadata},
            )
        except Exception as e:
            print("ANALYZE ERROR: enrichment failed:", repr(e))
            raise AnalysisFailed() from e

        self.cache.set(cache_key, final)
        print(f"ANALYZE DONE: url={url}")

        return {**final, "cached": False, "timestamp": format_timestamp()}
