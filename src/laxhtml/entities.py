"""HTML character reference decoding and markup escaping.

Decoding handles named references (``&amp;``, ``&nbsp;``), decimal and hex
numeric references (``&#60;``, ``&#x3C;``) and the legacy named references
that browsers accept without a trailing semicolon (``&lt`` in ``a &lt b``).
"""

from __future__ import annotations

import html.entities
import re

# Python ships the complete HTML5 table. Keys carry their trailing semicolon,
# except for the legacy references that may appear without one.
NAMED_ENTITIES: dict[str, str] = {key.rstrip(";"): value for key, value in html.entities.html5.items()}
LEGACY_ENTITIES: frozenset[str] = frozenset(key for key in html.entities.html5 if not key.endswith(";"))

# Numeric references in the C1 control range map to windows-1252 characters
NUMERIC_REPLACEMENTS: dict[int, str] = {
    0x00: "\ufffd",
    0x80: "€",
    0x82: "‚",
    0x83: "ƒ",
    0x84: "„",
    0x85: "…",
    0x86: "†",
    0x87: "‡",
    0x88: "ˆ",
    0x89: "‰",
    0x8A: "Š",
    0x8B: "‹",
    0x8C: "Œ",
    0x8E: "Ž",
    0x91: "‘",
    0x92: "’",
    0x93: "“",
    0x94: "”",
    0x95: "•",
    0x96: "–",
    0x97: "—",
    0x98: "˜",
    0x99: "™",
    0x9A: "š",
    0x9B: "›",
    0x9C: "œ",
    0x9E: "ž",
    0x9F: "Ÿ",
}

_REFERENCE_PATTERN = re.compile(r"&(?:#(?:[xX]([0-9a-fA-F]+)|([0-9]+));?|([A-Za-z0-9]+)(;?))")


def decode_numeric_entity(digits: str, is_hex: bool = False) -> str:
    """Decode the digits of a numeric character reference."""
    codepoint = int(digits, 16 if is_hex else 10)

    if codepoint in NUMERIC_REPLACEMENTS:
        return NUMERIC_REPLACEMENTS[codepoint]
    if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
        return "\ufffd"
    return chr(codepoint)


def _longest_legacy_prefix(name: str) -> int:
    for length in range(len(name), 0, -1):
        if name[:length] in LEGACY_ENTITIES:
            return length
    return 0


def _decode_reference(match: re.Match[str], in_attribute: bool) -> str:
    hex_digits, dec_digits, name, semicolon = match.groups()
    if hex_digits is not None:
        return decode_numeric_entity(hex_digits, is_hex=True)
    if dec_digits is not None:
        return decode_numeric_entity(dec_digits)

    if semicolon and name in NAMED_ENTITIES:
        return NAMED_ENTITIES[name]

    length = _longest_legacy_prefix(name)
    if not length:
        return match.group(0)

    if in_attribute:
        # "&lt=" or "&ltx" stay literal inside attribute values
        if length < len(name):
            return match.group(0)
        source = match.string
        following = source[match.end()] if not semicolon and match.end() < len(source) else ""
        if following == "=" or following.isalnum():
            return match.group(0)

    return NAMED_ENTITIES[name[:length]] + name[length:] + semicolon


def decode_entities_in_text(text: str, in_attribute: bool = False) -> str:
    """Decode every character reference in ``text``.

    Args:
        text: Markup text that may contain character references
        in_attribute: Apply the stricter attribute-value rules for legacy
            references without a semicolon

    Returns:
        Text with references decoded; unknown references are left as written
    """
    if "&" not in text:
        return text
    return _REFERENCE_PATTERN.sub(lambda match: _decode_reference(match, in_attribute), text)


def escape_text(text: str | None) -> str:
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_attr_value(value: str | None) -> str:
    """Escape a value for use inside a double-quoted attribute."""
    if not value:
        return ""
    return escape_text(value).replace('"', "&quot;")
