from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .constants import (
    OPTIONAL_END_PREDECESSORS,
    PHRASING_ELEMENTS,
    SCOPED_CLOSE,
    SELF_CLOSE_IGNORED,
    TAG_NAME_ALIASES,
    VOID_ELEMENTS,
)
from .errors import generate_error_message
from .node import RootNode, TagNode, TextNode
from .tokens import CharacterTokens, EOFToken, MarkupToken, ParseError, Tag, TextKind

if TYPE_CHECKING:
    from .node import Node
    from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Builds a tree from tokens using a single insertion point.

    There is no stack of open elements: the insertion node and its ancestor
    chain play that role. End tags walk up that chain; start tags may close
    optional-end-tag ancestors before inserting the new element.
    """

    __slots__ = ("collect_errors", "current", "errors", "root", "tokenizer")

    collect_errors: bool
    current: Node
    errors: list[ParseError]
    root: RootNode
    tokenizer: Tokenizer | None

    def __init__(self, collect_errors: bool = False) -> None:
        self.collect_errors = collect_errors
        self.errors = []
        self.root = RootNode()
        self.current = self.root
        self.tokenizer = None

    def _parse_error(self, code: str, tag_name: str | None = None) -> None:
        if not self.collect_errors:
            return
        line = column = None
        if self.tokenizer is not None:  # pragma: no branch
            line, column = self.tokenizer.location()
        message = generate_error_message(code, tag_name)
        self.errors.append(ParseError(code, line=line, column=column, message=message))

    def process_token(self, token: Any) -> None:
        # Optimization: Use type() identity check instead of isinstance
        token_type = type(token)
        if token_type is Tag:
            if token.kind == Tag.START:
                self._process_start_tag(token)
            else:
                self._process_end_tag(token.name)
        elif token_type is CharacterTokens:
            self._insert_text(TextKind.RAW if token.raw else TextKind.TEXT, token.data)
        elif token_type is MarkupToken:
            self._insert_text(token.kind, token.data)
        elif token_type is EOFToken:
            pass

    def finish(self) -> RootNode:
        return self.root

    # ---------------------
    # Token handlers
    # ---------------------

    def _insert_text(self, kind: TextKind, data: str) -> None:
        self.current.append_child(TextNode(kind, data))  # type: ignore[attr-defined]

    def _process_start_tag(self, tag: Tag) -> None:
        name = TAG_NAME_ALIASES.get(tag.name, tag.name)

        if not self.current.is_root:
            self._close_optional_ancestors(name)

        node = TagNode(name, tag.attrs)
        self.current.append_child(node)  # type: ignore[attr-defined]
        self.current = node

        if name in VOID_ELEMENTS or (tag.self_closing and name not in SELF_CLOSE_IGNORED):
            self.current = node.parent  # type: ignore[assignment]

    def _process_end_tag(self, name: str) -> None:
        target = self._find_open_element(name, report=True)
        if target is not None:
            self.current = target.parent  # type: ignore[assignment]

    def _find_open_element(self, name: str, report: bool = False) -> Node | None:
        """Search upward from the insertion node for an open element ``name``.

        A phrasing end tag never closes anything outside the nearest
        non-phrasing ancestor.
        """
        phrasing = name in PHRASING_ELEMENTS
        node = self.current
        while not node.is_root:
            if node.name == name:
                return node
            if phrasing and node.name not in PHRASING_ELEMENTS:
                if report:
                    logger.debug("end tag </%s> stopped at <%s>", name, node.name)
                    self._parse_error("end-tag-crosses-block-boundary", name)
                return None
            node = node.parent  # type: ignore[assignment]

        if report:
            logger.debug("ignoring end tag </%s> with no open element", name)
            self._parse_error("unexpected-end-tag", name)
        return None

    def _close_implicitly(self, name: str) -> None:
        target = self._find_open_element(name)
        if target is None:
            return
        logger.debug("implicitly closing <%s>", name)
        self._parse_error("implicitly-closed-element", name)
        self.current = target.parent  # type: ignore[assignment]

    def _close_optional_ancestors(self, name: str) -> None:
        predecessor = OPTIONAL_END_PREDECESSORS.get(name)
        if predecessor is not None:
            self._close_implicitly(predecessor)
            return

        scoped = SCOPED_CLOSE.get(name)
        if scoped is None:
            return
        allowed, scope = scoped
        node = self.current
        while not node.is_root and node.name not in scope:
            if node.name in allowed:
                self._close_implicitly(node.name)
            node = node.parent  # type: ignore[assignment]
