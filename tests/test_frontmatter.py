"""Tests for front matter parsing."""

from datetime import date

import pytest

from permapress_pkg.errors import MalformedFrontMatterError
from permapress_pkg.frontmatter import parse_front_matter


class TestParseFrontMatter:
    """Test cases for parse_front_matter."""

    def test_parses_metadata_and_body(self):
        """Test a standard block is split from the body."""
        text = '---\nlayout: post\ntitle: "X"\ntags: [Java, Logging]\n---\nBody text\n'
        metadata, body = parse_front_matter(text)

        assert metadata == {'layout': 'post', 'title': 'X', 'tags': ['Java', 'Logging']}
        assert body == 'Body text\n'

    def test_body_is_left_unchanged(self):
        """Test the body keeps its blank lines and markup."""
        body_text = '\n# Heading\n\n---\n\nMore *text*\n'
        metadata, body = parse_front_matter('---\nlayout: page\n---' + '\n' + body_text)

        assert metadata == {'layout': 'page'}
        assert body == body_text

    def test_no_front_matter(self):
        """Test documents without a block yield an empty mapping."""
        text = '# About\n\nJust text.\n'
        metadata, body = parse_front_matter(text)

        assert metadata == {}
        assert body == text

    def test_empty_block(self):
        """Test an empty block is valid."""
        metadata, body = parse_front_matter('---\n---\nHello\n')

        assert metadata == {}
        assert body == 'Hello\n'

    def test_unterminated_block(self):
        """Test an opening marker without a closing one is rejected."""
        with pytest.raises(MalformedFrontMatterError, match='never closed') as excinfo:
            parse_front_matter('---\nlayout: post\ntitle: X\n\nBody\n', source='x.md')

        assert excinfo.value.source == 'x.md'

    def test_line_that_is_not_key_value(self):
        """Test a stray line inside the block is rejected."""
        with pytest.raises(MalformedFrontMatterError):
            parse_front_matter('---\nlayout: post\njust some words\n---\nBody\n')

    def test_block_that_is_a_list(self):
        """Test a block must be a mapping."""
        with pytest.raises(MalformedFrontMatterError, match='key: value'):
            parse_front_matter('---\n- layout\n- post\n---\nBody\n')

    def test_nested_mapping_rejected(self):
        """Test front matter must be flat."""
        with pytest.raises(MalformedFrontMatterError, match="'author'"):
            parse_front_matter('---\nlayout: post\nauthor:\n  name: Jane\n---\nBody\n')

    def test_non_string_key_rejected(self):
        """Test keys must be strings."""
        with pytest.raises(MalformedFrontMatterError):
            parse_front_matter('---\n1: one\n---\nBody\n')

    def test_windows_newlines_and_bom(self):
        """Test CRLF line endings and a leading BOM are tolerated."""
        text = '\ufeff---\r\nlayout: page\r\ntitle: About\r\n---\r\nBody\r\n'
        metadata, body = parse_front_matter(text)

        assert metadata == {'layout': 'page', 'title': 'About'}
        assert body == 'Body\r\n'

    def test_yaml_scalars_are_kept(self):
        """Test dates and booleans come through as YAML types."""
        metadata, _ = parse_front_matter('---\ndate: 2022-01-01\npublished: false\n---\n')

        assert metadata['date'] == date(2022, 1, 1)
        assert metadata['published'] is False

    def test_parsing_is_deterministic(self):
        """Test parsing the same text twice gives equal results."""
        text = '---\nlayout: post\ntitle: X\ntags: a, b\n---\nBody\n'
        assert parse_front_matter(text) == parse_front_matter(text)
