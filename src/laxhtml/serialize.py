"""HTML serialization utilities for laxhtml nodes."""

from __future__ import annotations

from typing import Any

from .constants import VOID_ELEMENTS
from .entities import escape_attr_value, escape_text
from .tokens import TextKind

_MARKUP_DELIMITERS: dict[TextKind, tuple[str, str]] = {
    TextKind.DOCTYPE: ("<!DOCTYPE", ">"),
    TextKind.COMMENT: ("<!--", "-->"),
    TextKind.CDATA: ("<![CDATA[", "]]>"),
    TextKind.PI: ("<?", "?>"),
}


def serialize_start_tag(name: str, attrs: dict[str, str | None] | None) -> str:
    parts: list[str] = ["<", name]
    if attrs:
        for key, value in attrs.items():
            if value is None:
                parts.extend([" ", key])
            else:
                parts.extend([" ", key, '="', escape_attr_value(value), '"'])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def render(node: Any) -> str:
    """Render ``node`` and its subtree as markup.

    Plain text is re-escaped, raw text is written verbatim, attributes are
    emitted in key order with double-quoted values, and a childless void
    element gets no end tag.
    """
    parts: list[str] = []
    _render_into(node, parts)
    return "".join(parts)


def _render_into(node: Any, parts: list[str]) -> None:
    if node.is_text:
        kind: TextKind = node.kind
        if kind is TextKind.TEXT:
            parts.append(escape_text(node.data))
        elif kind is TextKind.RAW:
            parts.append(node.data)
        else:
            start, end = _MARKUP_DELIMITERS[kind]
            parts.extend([start, node.data, end])
        return

    if node.is_root:
        for child in node.children:
            _render_into(child, parts)
        return

    name: str = node.name
    parts.append(serialize_start_tag(name, node.attrs))
    children = node.children
    if not children:
        if name not in VOID_ELEMENTS:
            parts.append(serialize_end_tag(name))
        return

    for child in children:
        _render_into(child, parts)
    parts.append(serialize_end_tag(name))


def to_test_format(node: Any, indent: int = 0) -> str:
    """Convert a tree to an indented outline, one node per line.

    Elements print as ``| <name>`` followed by their attributes, text nodes
    print their kind and quoted data. Used to compare tree shapes in tests.
    """
    if node.is_root:
        return "\n".join(_node_to_test_format(child, 0) for child in node.children)
    return _node_to_test_format(node, indent)


def _node_to_test_format(node: Any, indent: int) -> str:
    padding = " " * indent
    if node.is_text:
        if node.kind is TextKind.TEXT:
            return f'| {padding}"{node.data}"'
        return f'| {padding}#{node.kind.value} "{node.data}"'

    sections = [f"| {padding}<{node.name}>"]
    for key, value in node.attrs.items():
        if value is None:
            sections.append(f"| {padding}  {key}")
        else:
            sections.append(f'| {padding}  {key}="{value}"')
    sections.extend(_node_to_test_format(child, indent + 2) for child in node.children)
    return "\n".join(sections)
