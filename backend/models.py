"""Data models and types used across the backend.

Request/response schemas for the HTTP layer are in schemas.py.
Types for extension content, processed content and analysis output live here.
Keys use the camelCase names the browser extension sends and reads.
"""

from typing import Any, TypedDict


class ImageRef(TypedDict, total=False):
    """Image scraped from the page by the extension."""

    src: str
    alt: str
    title: str


class LinkRef(TypedDict, total=False):
    """Link scraped from the page by the extension."""

    url: str
    text: str


class Content(TypedDict, total=False):
    """Readable page content as extracted by the browser extension."""

    text: str
    wordCount: int
    images: list[ImageRef]
    links: list[LinkRef]


Metadata = dict[str, str]


class StructureStats(TypedDict):
    paragraphs: int
    sentences: int
    avgSentenceLength: int
    hasHeadings: bool
    hasList: bool


class ProcessedContent(TypedDict):
    """Content after cleaning, ready to be sent to the AI service."""

    text: str
    wordCount: int
    images: list[ImageRef]
    links: list[LinkRef]
    estimatedReadingTime: str
    keyPhrases: list[str]
    structure: StructureStats


class TechnicalMetrics(TypedDict):
    wordCount: int
    characterCount: int
    averageWordLength: int
    imageCount: int
    linkCount: int
    readabilityScore: str


class SeoInsights(TypedDict):
    titleLength: int
    titleOptimal: bool
    hasMetaDescription: bool
    metaDescriptionLength: int
    metaDescriptionOptimal: bool
    hasHeadings: bool
    imageAltTextRatio: float


class AccessibilityInsights(TypedDict):
    hasAltText: bool
    altTextCoverage: int
    hasDescriptiveLinks: bool
    readingLevel: str


class ContentFreshness(TypedDict, total=False):
    hasPublishDate: bool
    publishDate: str
    daysOld: int
    freshness: str


class OriginalPage(TypedDict, total=False):
    """The untouched request data handed to the enricher."""

    url: str
    title: str
    content: Content
    metadata: Metadata


# The AI result is an open mapping: summary, qualityScore, credibility,
# sentiment, category, keyPoints, ... plus whatever else the model returns.
AiAnalysis = dict[str, Any]

# AiAnalysis plus technicalMetrics, seoInsights, accessibility,
# contentFreshness, confidenceScore and readingTime.
EnhancedAnalysis = dict[str, Any]
