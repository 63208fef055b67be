"""Cache key derivation for extension content."""

import hashlib
import json

from models import Content

KEY_TEXT_LENGTH = 1000


def _utf16_prefix(text: str, length: int) -> str:
    # Browser string lengths are UTF-16 code units; slice the same way so a
    # key built here matches one built by the extension for the same page.
    raw = text.encode("utf-16-le", "surrogatepass")[: length * 2]
    return raw.decode("utf-16-le", "ignore")


def generate_cache_key(url: str, content: Content | None) -> str:
    """
    Return an MD5 hex digest identifying (url, text prefix, word count).

    Only the first 1000 text units take part in the key. Fields that are
    missing or None are left out of the canonical JSON, so a request with no
    text hashes the same as one with `text: null`.
    """
    content = content if isinstance(content, dict) else {}
    text = content.get("text")

    canonical = {
        "url": url,
        "text": _utf16_prefix(text, KEY_TEXT_LENGTH) if isinstance(text, str) else None,
        "wordCount": content.get("wordCount"),
    }
    canonical = {key: value for key, value in canonical.items() if value is not None}

    serialized = json.dumps(canonical, ensure_ascii=False, separators=(",", ":"))
    return hashlib.md5(serialized.encode("utf-8", "surrogatepass")).hexdigest()
