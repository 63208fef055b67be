"""Lexical heuristics over page text.

Everything here is pure and must tolerate degenerate input (empty strings,
None, text without sentences): malformed page text is normal, so these
functions fall back to zero/"Unknown" defaults instead of raising.
"""

import math
import re

from models import Content, StructureStats, TechnicalMetrics

WORDS_PER_MINUTE = 225
MAX_KEY_PHRASES = 10
MIN_KEY_PHRASE_LENGTH = 4
VOWELS = "aeiouy"

STOP_WORDS = {
    "that", "this", "with", "from", "have", "they", "will", "been",
    "were", "said", "each", "which", "their", "there", "what", "about",
    "would", "these", "other", "into", "more", "some", "could", "them",
    "than", "then", "when", "your",
}

_DISALLOWED_CHARS_RE = re.compile(r"[^\w\s.,!?;:()\-\"']")
_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_HEADING_LINE_RE = re.compile(r"^(H[1-6]:|#)", re.MULTILINE)
_LIST_LINE_RE = re.compile(r"^[•\-*]\s", re.MULTILINE)

# (minimum Flesch score, label), checked top-down.
READABILITY_BUCKETS = [
    (90, "Very Easy"),
    (80, "Easy"),
    (70, "Fairly Easy"),
    (60, "Standard"),
    (50, "Fairly Difficult"),
    (30, "Difficult"),
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _split_sentences(text: str) -> list[str]:
    return [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def clean_text(text: object) -> str:
    """Drop unusual characters, collapse whitespace and trim."""
    if not isinstance(text, str) or not text:
        return ""
    stripped = _DISALLOWED_CHARS_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def calculate_reading_time(word_count: object) -> str:
    """Human readable reading time at 225 words per minute, rounded up."""
    if isinstance(word_count, bool) or not isinstance(word_count, (int, float)):
        word_count = 0
    if word_count < 1:
        return "< 1 min read"

    minutes = math.ceil(word_count / WORDS_PER_MINUTE)
    if minutes == 1:
        return "1 min read"
    if minutes < 60:
        return f"{minutes} min read"

    hours, remainder = divmod(minutes, 60)
    return f"{hours}h {remainder}m read"


def extract_key_phrases(text: object) -> list[str]:
    """
    Most frequent meaningful words in `text`.

    Words of 3 characters or fewer, stop words and words that appear only
    once are ignored. Ties keep first-seen order.
    """
    if not isinstance(text, str) or not text:
        return []

    tokens = _NON_WORD_RE.sub("", text.lower()).split()
    frequency: dict[str, int] = {}
    for token in tokens:
        if len(token) < MIN_KEY_PHRASE_LENGTH or token in STOP_WORDS:
            continue
        frequency[token] = frequency.get(token, 0) + 1

    repeated = [(word, count) for word, count in frequency.items() if count > 1]
    repeated.sort(key=lambda item: item[1], reverse=True)
    return [word for word, _ in repeated[:MAX_KEY_PHRASES]]


def analyze_text_structure(text: object) -> StructureStats:
    if not isinstance(text, str) or not text:
        return {
            "paragraphs": 0,
            "sentences": 0,
            "avgSentenceLength": 0,
            "hasHeadings": False,
            "hasList": False,
        }

    paragraphs = [p for p in text.split("\n\n") if p.strip()]
    sentences = _split_sentences(text)
    word_total = len(text.split())
    avg_sentence_length = _round_half_up(word_total / len(sentences)) if sentences else 0

    return {
        "paragraphs": len(paragraphs),
        "sentences": len(sentences),
        "avgSentenceLength": avg_sentence_length,
        "hasHeadings": bool(_HEADING_LINE_RE.search(text)),
        "hasList": bool(_LIST_LINE_RE.search(text)),
    }


def count_syllables(word: str) -> int:
    """Rough syllable count: one per vowel group, silent trailing 'e' dropped."""
    word = word.lower()
    if len(word) <= 3:
        return 1

    count = 0
    previous_was_vowel = False
    for char in word:
        is_vowel = char in VOWELS
        if is_vowel and not previous_was_vowel:
            count += 1
        previous_was_vowel = is_vowel

    if word.endswith("e"):
        count -= 1
    return max(1, count)


def calculate_readability_score(text: object) -> str:
    """Flesch Reading Ease label for `text`, or "Unknown" when not computable."""
    if not isinstance(text, str) or not text:
        return "Unknown"

    words = text.split()
    sentences = _split_sentences(text)
    if not words or not sentences:
        return "Unknown"

    syllables = sum(count_syllables(word) for word in words)
    score = (
        206.835
        - 1.015 * (len(words) / len(sentences))
        - 84.6 * (syllables / len(words))
    )

    for threshold, label in READABILITY_BUCKETS:
        if score >= threshold:
            return label
    return "Very Difficult"


def calculate_technical_metrics(content: Content | None) -> TechnicalMetrics:
    content = content if isinstance(content, dict) else {}
    text = content.get("text")
    if not isinstance(text, str):
        text = ""

    words = text.split()
    average_word_length = (
        _round_half_up(sum(len(word) for word in words) / len(words)) if words else 0
    )
    images = content.get("images")
    links = content.get("links")

    return {
        "wordCount": len(words),
        "characterCount": len(text),
        "averageWordLength": average_word_length,
        "imageCount": len(images) if isinstance(images, list) else 0,
        "linkCount": len(links) if isinstance(links, list) else 0,
        "readabilityScore": calculate_readability_score(text),
    }
