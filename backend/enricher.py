"""Prepare content for Claude and enrich Claude's answer with local signals.

Neither function performs I/O. The AI result is treated as an open mapping:
fields we compute overwrite same-named AI fields, everything else the model
returned is passed through untouched.
"""

import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from models import (
    AccessibilityInsights,
    AiAnalysis,
    Content,
    ContentFreshness,
    EnhancedAnalysis,
    Metadata,
    OriginalPage,
    ProcessedContent,
    SeoInsights,
    TechnicalMetrics,
)
from text_metrics import (
    analyze_text_structure,
    calculate_readability_score,
    calculate_reading_time,
    calculate_technical_metrics,
    clean_text,
    extract_key_phrases,
)

TITLE_OPTIMAL_RANGE = (30, 60)
DESCRIPTION_OPTIMAL_RANGE = (120, 160)
PUBLISH_DATE_KEYS = ("article:published_time", "datePublished", "date")
# Tried after ISO-8601 and RFC-2822.
PUBLISH_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)
NON_DESCRIPTIVE_LINK_TEXT = {"click here", "read more", "more"}
MIN_DESCRIPTIVE_LINK_LENGTH = 6

# (max days old, label), checked top-down.
FRESHNESS_BUCKETS = [
    (7, "Very Fresh"),
    (30, "Fresh"),
    (90, "Recent"),
    (365, "Somewhat Old"),
]


def _as_list(value: object) -> list:
    return value if isinstance(value, list) else []


def _as_dict(value: object) -> dict:
    return value if isinstance(value, dict) else {}


def _word_count(content: Content) -> int:
    value = content.get("wordCount")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def preprocess_content(content: Content | None, metadata: Metadata | None = None) -> ProcessedContent:
    """Clean extension content and attach reading time, key phrases and structure."""
    content = _as_dict(content)
    raw_text = content.get("text") if isinstance(content.get("text"), str) else ""
    word_count = _word_count(content)

    return {
        "text": clean_text(raw_text),
        "wordCount": word_count,
        "images": _as_list(content.get("images")),
        "links": _as_list(content.get("links")),
        "estimatedReadingTime": calculate_reading_time(word_count),
        # Structure needs the original line breaks, so use the raw text.
        "keyPhrases": extract_key_phrases(raw_text),
        "structure": analyze_text_structure(raw_text),
    }


def _images_with_alt(images: list) -> int:
    count = 0
    for image in images:
        alt = image.get("alt") if isinstance(image, dict) else None
        if isinstance(alt, str) and alt.strip():
            count += 1
    return count


def generate_seo_insights(title: object, content: Content, metadata: Metadata) -> SeoInsights:
    title_length = len(title) if isinstance(title, str) else 0
    description = metadata.get("description")
    description_length = len(description) if isinstance(description, str) else 0
    text = content.get("text") if isinstance(content.get("text"), str) else ""
    images = _as_list(content.get("images"))

    return {
        "titleLength": title_length,
        "titleOptimal": TITLE_OPTIMAL_RANGE[0] <= title_length <= TITLE_OPTIMAL_RANGE[1],
        "hasMetaDescription": description_length > 0,
        "metaDescriptionLength": description_length,
        "metaDescriptionOptimal": (
            DESCRIPTION_OPTIMAL_RANGE[0] <= description_length <= DESCRIPTION_OPTIMAL_RANGE[1]
        ),
        "hasHeadings": "H1:" in text or "H2:" in text,
        "imageAltTextRatio": _images_with_alt(images) / len(images) if images else 0,
    }


def _is_descriptive_link(link: object) -> bool:
    text = link.get("text") if isinstance(link, dict) else None
    if not isinstance(text, str):
        return False
    normalized = text.strip().lower()
    return len(text) >= MIN_DESCRIPTIVE_LINK_LENGTH and normalized not in NON_DESCRIPTIVE_LINK_TEXT


def analyze_accessibility(content: Content) -> AccessibilityInsights:
    images = _as_list(content.get("images"))
    links = _as_list(content.get("links"))
    with_alt = _images_with_alt(images)
    # A page without images has nothing to describe.
    coverage = math.floor(with_alt / len(images) * 100 + 0.5) if images else 100

    return {
        "hasAltText": with_alt > 0,
        "altTextCoverage": coverage,
        "hasDescriptiveLinks": any(_is_descriptive_link(link) for link in links),
        "readingLevel": calculate_readability_score(content.get("text")),
    }


def format_timestamp(moment: datetime | None = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision and a Z suffix."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_publish_date(value: object) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()

    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(raw)
        except (TypeError, ValueError, IndexError):
            parsed = None
    if parsed is None:
        for fmt in PUBLISH_DATE_FORMATS:
            try:
                parsed = datetime.strptime(raw, fmt)
                break
            except ValueError:
                continue
        else:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def analyze_content_freshness(metadata: Metadata, now: datetime | None = None) -> ContentFreshness:
    raw_date = None
    for key in PUBLISH_DATE_KEYS:
        if metadata.get(key):
            raw_date = metadata[key]
            break

    published = _parse_publish_date(raw_date)
    if published is None:
        return {"hasPublishDate": False, "freshness": "Unknown"}

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    days_old = math.floor((now - published).total_seconds() / 86400)

    freshness = "Old"
    for max_days, label in FRESHNESS_BUCKETS:
        if days_old <= max_days:
            freshness = label
            break

    return {
        "hasPublishDate": True,
        "publishDate": format_timestamp(published),
        "daysOld": days_old,
        "freshness": freshness,
    }


def calculate_confidence_score(
    content: Content, metadata: Metadata, technical_metrics: TechnicalMetrics
) -> int:
    """0-100 score for how much the analysis can be trusted given the input size and richness."""
    score = 50
    word_count = _word_count(content)

    if word_count > 500:
        score += 20
    elif word_count > 200:
        score += 10
    elif word_count < 50:
        score -= 20

    if len(metadata) > 3:
        score += 10
    if technical_metrics["imageCount"] > 0:
        score += 5
    if technical_metrics["linkCount"] > 0:
        score += 5
    if word_count > 10000:
        score -= 10

    return max(0, min(100, score))


def enhance_analysis(
    ai_analysis: AiAnalysis | None,
    original: OriginalPage,
    now: datetime | None = None,
) -> EnhancedAnalysis:
    """Merge Claude's analysis with locally computed metrics."""
    content = _as_dict(original.get("content"))
    metadata = _as_dict(original.get("metadata"))

    enhanced: EnhancedAnalysis = dict(_as_dict(ai_analysis))
    technical_metrics = calculate_technical_metrics(content)
    enhanced["technicalMetrics"] = technical_metrics
    enhanced["seoInsights"] = generate_seo_insights(original.get("title"), content, metadata)
    enhanced["accessibility"] = analyze_accessibility(content)
    enhanced["contentFreshness"] = analyze_content_freshness(metadata, now=now)

    if content.get("wordCount") is not None:
        enhanced["readingTime"] = calculate_reading_time(content.get("wordCount"))

    enhanced["confidenceScore"] = calculate_confidence_score(content, metadata, technical_metrics)
    return enhanced
