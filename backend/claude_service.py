"""
Claude API key must be defined in a .env file in the backend root:

ANTHROPIC_API_KEY=your_real_key_here

The app loads environment variables automatically using python-dotenv.
"""

from dotenv import load_dotenv
import json
import os
from pathlib import Path

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

import anthropic
from anthropic import AsyncAnthropic

from errors import AiServiceUnavailable, AnalysisFailed
from models import AiAnalysis, Metadata, ProcessedContent

CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "").strip() or "claude-3-haiku-20240307"
TEMPERATURE = float(os.getenv("CLAUDE_TEMPERATURE", "0.2"))
MAX_TOKENS = int(os.getenv("CLAUDE_MAX_TOKENS", "1000"))
MAX_CONTENT_CHARS = int(os.getenv("CLAUDE_MAX_CONTENT_CHARS", "8000"))

CREDIBILITY_LEVELS = ("High", "Medium", "Low")
SENTIMENTS = ("Positive", "Neutral", "Negative")
CATEGORIES = ("News", "Blog", "Article", "Product", "Encyclopedia", "Recipe", "General")
COMPLEXITY_LEVELS = ("Beginner", "Intermediate", "Advanced")
ACCURACY_LEVELS = ("High", "Medium", "Low", "Cannot Determine")
BIAS_LEVELS = ("None Detected", "Slight", "Moderate", "Strong")
COMPLETENESS_LEVELS = ("Complete", "Mostly Complete", "Incomplete")

SYSTEM_MESSAGE = """You are an expert content analyst who evaluates webpages for readers.
Return ONLY valid raw JSON that matches the schema exactly.
Base every judgment on the provided page text; do not invent facts about the site.
Do not include markdown, code fences, or text outside JSON."""

USER_TEMPLATE = """Page URL: {url}
Page Title: {title}
Meta Description: {description}

Page Signals:
Word Count: {word_count}
Estimated Reading Time: {reading_time}
Key Phrases: {key_phrases}
Paragraphs: {paragraphs}
Sentences: {sentences}
Average Sentence Length: {avg_sentence_length} words
Has Headings: {has_headings}
Has Lists: {has_list}
Images: {image_count}
Links: {link_count}

Page Text:
{text}

Tasks:
1. Summarize the page in 2-3 sentences.
2. Rate overall content quality from 1 to 10.
3. Judge credibility, sentiment, category, complexity, factual accuracy, bias and completeness
   using only the allowed values below.
4. List 3-5 key points, up to 3 strengths and up to 3 concerns.
5. Describe the target audience in one short phrase.
6. Do not use unescaped double quotes inside any JSON string value.

Return ONLY this JSON structure:

{{
  "summary": "string",
  "qualityScore": number,
  "credibility": "High|Medium|Low",
  "sentiment": "Positive|Neutral|Negative",
  "category": "News|Blog|Article|Product|Encyclopedia|Recipe|General",
  "readingTime": "string",
  "keyPoints": ["string"],
  "strengths": ["string"],
  "concerns": ["string"],
  "targetAudience": "string",
  "complexity": "Beginner|Intermediate|Advanced",
  "factualAccuracy": "High|Medium|Low|Cannot Determine",
  "bias": "None Detected|Slight|Moderate|Strong",
  "completeness": "Complete|Mostly Complete|Incomplete"
}}

No additional text."""


def _extract_json(text: str) -> dict | None:
    if not text:
        return None

    text = text.strip()

    # Remove markdown fences
    if text.startswith("```"):
        text = text.replace("```json", "").replace("```", "").strip()

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None

    json_str = (
        text[start : end + 1]
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )

    def _escape_inner_quotes(value: str) -> str:
        """
        Escape quotes that sit inside string values.
        A quote closes the string only when the next non-space char is : , } or ].
        """
        out: list[str] = []
        in_string = False
        escaped = False

        for i, ch in enumerate(value):
            if escaped:
                out.append(ch)
                escaped = False
                continue
            if ch == "\\":
                out.append(ch)
                escaped = True
                continue
            if ch != '"':
                out.append(ch)
                continue
            if not in_string:
                in_string = True
                out.append(ch)
                continue

            rest = value[i + 1 :].lstrip()
            if not rest or rest[0] in {":", ",", "}", "]"}:
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')

        return "".join(out)

    for candidate in (json_str, _escape_inner_quotes(json_str)):
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed

    print("CLAUDE PARSE ERROR:", json_str[:500])
    return None


def _build_user_message(
    url: str,
    title: str,
    content: ProcessedContent,
    metadata: Metadata,
) -> str:
    def _text_value(value: object) -> str:
        cleaned = str(value or "").strip()
        return cleaned if cleaned else "Not provided"

    structure = content.get("structure") or {}
    text = content.get("text") or ""
    if len(text) > MAX_CONTENT_CHARS:
        text = text[:MAX_CONTENT_CHARS] + " [truncated]"

    return USER_TEMPLATE.format(
        url=url,
        title=_text_value(title),
        description=_text_value(metadata.get("description")),
        word_count=content.get("wordCount", 0),
        reading_time=content.get("estimatedReadingTime") or "Unknown",
        key_phrases=", ".join(content.get("keyPhrases") or []) or "Not provided",
        paragraphs=structure.get("paragraphs", 0),
        sentences=structure.get("sentences", 0),
        avg_sentence_length=structure.get("avgSentenceLength", 0),
        has_headings="Yes" if structure.get("hasHeadings") else "No",
        has_list="Yes" if structure.get("hasList") else "No",
        image_count=len(content.get("images") or []),
        link_count=len(content.get("links") or []),
        text=text,
    )


def _extract_response_text(response: object) -> str:
    content = ""
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            content += text
    return content.strip()


def _normalize_result(raw: dict) -> AiAnalysis:
    """Coerce the fields we know about; keep anything else Claude added."""

    def score(v) -> int:
        if isinstance(v, bool):
            return 5
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 5
        return int(min(10, max(1, round(value))))

    def text(v) -> str:
        return str(v).strip() if v is not None else ""

    def str_list(v) -> list[str]:
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            return []
        return [str(x).strip() for x in v if x is not None and str(x).strip()]

    def choice(v, allowed: tuple[str, ...], default: str) -> str:
        value = text(v).lower()
        for option in allowed:
            if option.lower() == value:
                return option
        return default

    normalized = dict(raw)
    normalized.update(
        {
            "summary": text(raw.get("summary")),
            "qualityScore": score(raw.get("qualityScore")),
            "credibility": choice(raw.get("credibility"), CREDIBILITY_LEVELS, "Medium"),
            "sentiment": choice(raw.get("sentiment"), SENTIMENTS, "Neutral"),
            "category": choice(raw.get("category"), CATEGORIES, "General"),
            "keyPoints": str_list(raw.get("keyPoints")),
            "strengths": str_list(raw.get("strengths")),
            "concerns": str_list(raw.get("concerns")),
            "targetAudience": text(raw.get("targetAudience")) or "General audience",
            "complexity": choice(raw.get("complexity"), COMPLEXITY_LEVELS, "Intermediate"),
            "factualAccuracy": choice(raw.get("factualAccuracy"), ACCURACY_LEVELS, "Cannot Determine"),
            "bias": choice(raw.get("bias"), BIAS_LEVELS, "None Detected"),
            "completeness": choice(raw.get("completeness"), COMPLETENESS_LEVELS, "Mostly Complete"),
        }
    )
    return normalized


def _create_client(api_key: str) -> AsyncAnthropic:
    base_url = os.getenv("ANTHROPIC_BASE_URL", "").strip()
    if base_url:
        return AsyncAnthropic(api_key=api_key, base_url=base_url)
    return AsyncAnthropic(api_key=api_key)


async def analyze_content(
    url: str,
    title: str,
    content: ProcessedContent,
    metadata: Metadata | None = None,
) -> AiAnalysis:
    """
    Ask Claude for a qualitative analysis of preprocessed page content.
    Raises AiServiceUnavailable for key/provider/network problems and
    AnalysisFailed when the reply cannot be used. Never retries.
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        print("ERROR: ANTHROPIC_API_KEY not found in environment.")
        raise AiServiceUnavailable()

    user_message = _build_user_message(url, title, content, metadata or {})

    try:
        async with _create_client(api_key) as client:
            response = await client.messages.create(
                model=CLAUDE_MODEL,
                max_tokens=MAX_TOKENS,
                system=SYSTEM_MESSAGE,
                messages=[{"role": "user", "content": user_message}],
                temperature=TEMPERATURE,
            )
    except anthropic.AnthropicError as e:
        print("CLAUDE ERROR:", str(e))
        raise AiServiceUnavailable() from e

    if getattr(response, "stop_reason", None) == "max_tokens":
        print(f"CLAUDE WARNING: output hit max_tokens for model={CLAUDE_MODEL}.")

    reply = _extract_response_text(response)
    if not reply:
        print("CLAUDE ERROR: empty response content.")
        raise AnalysisFailed()

    parsed = _extract_json(reply)
    if parsed is None:
        raise AnalysisFailed()

    return _normalize_result(parsed)
