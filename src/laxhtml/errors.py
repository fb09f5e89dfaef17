"""Human-readable messages for the recoveries the parser reports.

Parsing never fails; these codes describe where the input was malformed and
how the tree builder worked around it.
"""

from __future__ import annotations


def generate_error_message(code: str, tag_name: str | None = None) -> str:
    """Generate human-readable error message from error code.

    Args:
        code: The error code string (kebab-case format)
        tag_name: Optional tag name to include in the message for context

    Returns:
        Human-readable error message string
    """
    messages = {
        # Tokenizer
        "stray-less-than-sign": "A '<' that does not start markup was kept as text",
        "eof-in-raw-text": "Unexpected end of file before the closing tag of a raw text element",
        # Tree builder
        "unexpected-end-tag": "End tag has no matching open element and was ignored",
        "end-tag-crosses-block-boundary": "Inline end tag cannot close an element outside the enclosing block",
        "implicitly-closed-element": "Element was closed implicitly by a following start tag",
    }

    message = messages.get(code, code)
    if tag_name:
        return f"{message}: <{tag_name}>"
    return message
