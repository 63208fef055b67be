"""
Unit tests for generate_cache_key().
"""

import re

from fingerprint import generate_cache_key


URL = "https://example.com"


class TestGenerateCacheKey:
    """Tests for generate_cache_key()"""

    def test_known_digest(self):
        # md5('{"url":"https://example.com","text":"hello","wordCount":1}')
        key = generate_cache_key(URL, {"text": "hello", "wordCount": 1})
        assert key == "ad185b2ad504b606b7392597feb598be"

    def test_is_32_char_hex(self):
        key = generate_cache_key(URL, {"text": "some text", "wordCount": 2})
        assert re.fullmatch(r"[0-9a-f]{32}", key)

    def test_deterministic(self):
        content = {"text": "Fresh coffee beans matter.", "wordCount": 4}
        assert generate_cache_key(URL, content) == generate_cache_key(URL, dict(content))

    def test_word_count_changes_key(self):
        text = "Fresh coffee beans matter."
        assert generate_cache_key(URL, {"text": text, "wordCount": 4}) != generate_cache_key(
            URL, {"text": text, "wordCount": 5}
        )

    def test_url_changes_key(self):
        content = {"text": "same", "wordCount": 1}
        assert generate_cache_key(URL, content) != generate_cache_key(URL + "/other", content)

    def test_only_first_1000_chars_count(self):
        prefix = "a" * 1000
        assert generate_cache_key(URL, {"text": prefix + "x", "wordCount": 1}) == generate_cache_key(
            URL, {"text": prefix + "y", "wordCount": 1}
        )

    def test_text_change_within_prefix_changes_key(self):
        assert generate_cache_key(URL, {"text": "a" * 999 + "x"}) != generate_cache_key(
            URL, {"text": "a" * 999 + "y"}
        )

    def test_prefix_measured_in_utf16_units(self):
        # Each emoji is two UTF-16 units, so 500 of them fill the prefix.
        emoji = "\U0001F600"
        assert generate_cache_key(URL, {"text": emoji * 600}) == generate_cache_key(
            URL, {"text": emoji * 500 + "tail"}
        )

    def test_images_and_links_ignored(self):
        base = {"text": "same", "wordCount": 1}
        with_media = dict(base, images=[{"src": "a.png"}], links=[{"url": "b"}])
        assert generate_cache_key(URL, base) == generate_cache_key(URL, with_media)

    def test_missing_text_does_not_raise(self):
        key = generate_cache_key(URL, {"wordCount": 1})
        assert key == "9dace6c9072b746ad99d55632a40fe95"

    def test_missing_and_null_text_collide(self):
        # Known rough edge: absent values drop out of the canonical form.
        assert generate_cache_key(URL, {"wordCount": 1}) == generate_cache_key(
            URL, {"text": None, "wordCount": 1}
        )

    def test_non_dict_content(self):
        assert generate_cache_key(URL, None) == generate_cache_key(URL, {})
