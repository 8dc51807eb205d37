"""Unit tests for storage key encoding."""

from pathlib import Path
from urllib.parse import unquote

import pytest

import wrangler


class TestGenerateKey:
    """Test generate_key()."""

    def test_top_level_file(self, tmp_path):
        """A file directly in the directory keeps its name."""
        assert wrangler.generate_key(tmp_path / "a.txt", tmp_path) == "a.txt"

    def test_nested_slash_is_encoded(self, tmp_path):
        """Separators become %2F so the key fits one path segment."""
        key = wrangler.generate_key(tmp_path / "sub" / "b.txt", tmp_path)
        assert key == "sub%2Fb.txt"

    def test_no_leading_separator(self, tmp_path):
        key = wrangler.generate_key(tmp_path / "x" / "y" / "z.bin", tmp_path)
        assert not key.startswith("%2F")
        assert key == "x%2Fy%2Fz.bin"

    def test_reserved_characters_encoded(self, tmp_path):
        """Space, #, ?, % and friends are escaped."""
        key = wrangler.generate_key(tmp_path / "my file#1?.txt", tmp_path)
        assert key == "my%20file%231%3F.txt"

        key = wrangler.generate_key(tmp_path / "100%.txt", tmp_path)
        assert key == "100%25.txt"

    def test_sub_delimiters_kept(self, tmp_path):
        """Characters outside the encode set are left alone."""
        key = wrangler.generate_key(tmp_path / "a+b=c&d@e!(f).txt", tmp_path)
        assert key == "a+b=c&d@e!(f).txt"

    def test_non_ascii_is_utf8_encoded(self, tmp_path):
        key = wrangler.generate_key(tmp_path / "café.txt", tmp_path)
        assert key == "caf%C3%A9.txt"

    def test_round_trip_reconstructs_components(self, tmp_path):
        """Percent-decoding and splitting on / gives back the path parts."""
        rel = Path("docs") / "über uns" / "index #2.html"
        key = wrangler.generate_key(tmp_path / rel, tmp_path)

        assert unquote(key).split("/") == list(rel.parts)

    def test_non_utf8_path_raises_encoding_error(self, tmp_path):
        """Undecodable bytes (surrogate-escaped) are reported, not crashed on."""
        bad = tmp_path / "bad\udcff.txt"
        with pytest.raises(wrangler.EncodingError, match="non-UTF-8"):
            wrangler.generate_key(bad, tmp_path)


class TestEncodeSegment:
    """Test encode_segment() used for single-key deletes."""

    def test_plain_key_unchanged(self):
        assert wrangler.encode_segment("my-key_1.txt") == "my-key_1.txt"

    def test_slash_and_percent_escaped(self):
        assert wrangler.encode_segment("b/c") == "b%2Fc"
        assert wrangler.encode_segment("sub%2Fb.txt") == "sub%252Fb.txt"

    def test_control_characters_escaped(self):
        assert wrangler.encode_segment("a\tb\x7f") == "a%09b%7F"

    @pytest.mark.parametrize("text", ["", ".", ".."])
    def test_dot_and_empty_segments_rejected(self, text):
        """These would resolve to the parent URL once requests normalizes it."""
        with pytest.raises(wrangler.EncodingError, match="cannot be used"):
            wrangler.encode_segment(text)

    def test_other_dots_kept(self):
        assert wrangler.encode_segment("...") == "..."
        assert wrangler.encode_segment(".env") == ".env"
        assert wrangler.encode_segment("a..b") == "a..b"
