"""
Unit tests for character reference decoding and escaping.
"""

from laxhtml.entities import decode_entities_in_text, decode_numeric_entity, escape_attr_value, escape_text


class TestDecodeText:
    """Character references in text content."""

    def test_named_references(self) -> None:
        """Named references with a semicolon decode."""
        assert decode_entities_in_text("a &amp; b &lt;c&gt;") == "a & b <c>"
        assert decode_entities_in_text("&nbsp;") == "\xa0"

    def test_numeric_references(self) -> None:
        """Decimal and hex references decode."""
        assert decode_entities_in_text("&#60;&#x3C;&#X3c;") == "<<<"
        assert decode_entities_in_text("&#9731;") == "☃"

    def test_legacy_reference_without_semicolon(self) -> None:
        """Legacy references are accepted without a semicolon in text."""
        assert decode_entities_in_text("a &lt b") == "a < b"
        assert decode_entities_in_text("&ltx") == "<x"

    def test_unknown_reference_kept(self) -> None:
        """Unknown references stay as written."""
        assert decode_entities_in_text("&bogus; & &;") == "&bogus; & &;"

    def test_text_without_ampersand_untouched(self) -> None:
        text = "plain text"
        assert decode_entities_in_text(text) is text


class TestDecodeAttribute:
    """Attribute values use the stricter legacy rules."""

    def test_legacy_followed_by_equals_kept(self) -> None:
        """A query string like ``?a=1&lt=2`` is not decoded."""
        assert decode_entities_in_text("?a=1&lt=2", in_attribute=True) == "?a=1&lt=2"

    def test_legacy_followed_by_alnum_kept(self) -> None:
        assert decode_entities_in_text("&ltx", in_attribute=True) == "&ltx"

    def test_legacy_at_end_decoded(self) -> None:
        assert decode_entities_in_text("a&amp", in_attribute=True) == "a&"

    def test_semicolon_reference_decoded(self) -> None:
        assert decode_entities_in_text("?a=1&amp;b=2", in_attribute=True) == "?a=1&b=2"


class TestNumericEntity:
    """Replacement rules for numeric references."""

    def test_windows_1252_range(self) -> None:
        """C1 controls map to windows-1252 characters."""
        assert decode_numeric_entity("80", is_hex=True) == "€"
        assert decode_numeric_entity("151") == "—"

    def test_invalid_codepoints_replaced(self) -> None:
        """NUL, surrogates and out-of-range values become U+FFFD."""
        assert decode_numeric_entity("0") == "\ufffd"
        assert decode_numeric_entity("D800", is_hex=True) == "\ufffd"
        assert decode_numeric_entity("110000", is_hex=True) == "\ufffd"


class TestEscape:
    """Escaping for rendering."""

    def test_escape_text(self) -> None:
        assert escape_text("<a & b>") == "&lt;a &amp; b&gt;"
        assert escape_text(None) == ""

    def test_escape_attr_value(self) -> None:
        """Double quotes are escaped as well."""
        assert escape_attr_value('say "hi" & <go>') == "say &quot;hi&quot; &amp; &lt;go&gt;"
        assert escape_attr_value("") == ""
