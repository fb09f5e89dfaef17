from __future__ import annotations

import itertools
import re
import weakref
from typing import TYPE_CHECKING, Any

from .selector import compile_selector, matches, select
from .serialize import render
from .tokens import TextKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .selector import GroupOfSelectors

    SelectorLike = str | GroupOfSelectors

# One counter for every tree in the process
_node_ids = itertools.count(1)

_WHITESPACE_RUN = re.compile(r"\s+")
_ENDS_WITH_NON_SPACE = re.compile(r"\S\Z")
_STARTS_WITH_WORD = re.compile(r"[^.!?,;:\s]+")
_HAS_NON_SPACE = re.compile(r"\S")

_TEXT_CONTENT_KINDS = frozenset({TextKind.TEXT, TextKind.RAW, TextKind.CDATA})


def _compiled(selector: SelectorLike | None) -> GroupOfSelectors | None:
    if selector is None or not isinstance(selector, str):
        return selector
    return compile_selector(selector)


def _nodes_text(nodes: Any, recursive: bool, trim: bool) -> str:
    """Concatenate the text of ``nodes``.

    With ``trim``, whitespace runs collapse to one space, whitespace-only
    chunks are dropped and chunks are separated by a space unless the next one
    starts with punctuation. Trimming is switched off below a ``pre`` element.
    """
    text = ""
    for node in nodes:
        if node.is_text:
            if node.kind is TextKind.TEXT and trim:
                chunk = _WHITESPACE_RUN.sub(" ", node.data.strip())
            elif node.kind in _TEXT_CONTENT_KINDS:
                chunk = node.data
            else:
                chunk = ""
        elif recursive and node.is_tag:
            chunk = _nodes_text(node.children, True, trim and node.name != "pre")
        else:
            chunk = ""

        if trim and _ENDS_WITH_NON_SPACE.search(text) and _STARTS_WITH_WORD.match(chunk):
            chunk = " " + chunk

        if not trim or _HAS_NON_SPACE.search(chunk):
            text += chunk
    return text


def _to_text_collect(node: Node, parts: list[str], strip: bool) -> None:
    if node.is_text:
        if node.kind not in _TEXT_CONTENT_KINDS:
            return
        data = node.data
        if strip:
            data = data.strip()
        if data:
            parts.append(data)
        return

    for child in node.children:
        _to_text_collect(child, parts, strip=strip)


class Node:
    """Base class of the three node kinds.

    A parent owns its children; a child only keeps a weak reference back to
    its parent, so a tree stays alive exactly as long as its root (or the
    ``LaxHTML`` document holding it) is referenced.
    """

    __slots__ = ("__weakref__", "_parent_ref", "id")

    is_root: bool = False
    is_tag: bool = False
    is_text: bool = False

    name: str
    id: int
    _parent_ref: weakref.ReferenceType[Node] | None

    def __init__(self) -> None:
        self.id = next(_node_ids)
        self._parent_ref = None

    @property
    def parent(self) -> Node | None:
        """The owning node, or None for a root.

        Raises:
            ReferenceError: If the tree this node belonged to was released
        """
        ref = self._parent_ref
        if ref is None:
            return None
        parent = ref()
        if parent is None:
            raise ReferenceError(f"parent of {self.name!r} node {self.id} no longer exists")
        return parent

    @property
    def children(self) -> Any:
        return ()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} id={self.id}>"

    def attr(self, name: str) -> str | None:  # noqa: ARG002
        """Attribute value; only elements carry attributes."""
        return None

    # ---------------------
    # Rendering
    # ---------------------

    def to_html(self) -> str:
        """Render this node and its subtree as markup."""
        return render(self)

    @property
    def content(self) -> str:
        """Markup of the children, without this node's own tags."""
        return "".join(render(child) for child in self.children)

    # ---------------------
    # Selectors
    # ---------------------

    def query(self, selector: SelectorLike) -> list[Node]:
        """Return every descendant element matching ``selector`` in document order."""
        return select(self, selector)

    def at(self, selector: SelectorLike) -> Node | None:
        """Return the first descendant element matching ``selector``, or None."""
        found = select(self, selector, limit=1)
        return found[0] if found else None

    def matches(self, selector: SelectorLike) -> bool:
        return matches(self, selector)

    # ---------------------
    # Navigation
    # ---------------------

    def iter_ancestors(self) -> Iterator[Node]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def ancestors(self, selector: SelectorLike | None = None) -> list[Node]:
        """Element ancestors, nearest first, optionally filtered by ``selector``."""
        group = _compiled(selector)
        return [
            node for node in self.iter_ancestors() if node.is_tag and (group is None or matches(node, group))
        ]

    def element_children(self, selector: SelectorLike | None = None) -> list[Node]:
        group = _compiled(selector)
        return [child for child in self.children if child.is_tag and (group is None or matches(child, group))]

    def _element_siblings(self) -> list[Node]:
        parent = self.parent
        if parent is None:
            return []
        return [child for child in parent.children if child.is_tag]

    def _sibling_index(self, siblings: list[Node]) -> int:
        for index, sibling in enumerate(siblings):
            if sibling.id == self.id:
                return index
        return -1

    def following(self, selector: SelectorLike | None = None) -> list[Node]:
        """Element siblings after this node, optionally filtered by ``selector``."""
        siblings = self._element_siblings()
        index = self._sibling_index(siblings)
        if index < 0:
            return []
        group = _compiled(selector)
        return [node for node in siblings[index + 1 :] if group is None or matches(node, group)]

    def preceding(self, selector: SelectorLike | None = None) -> list[Node]:
        """Element siblings before this node, optionally filtered by ``selector``."""
        siblings = self._element_siblings()
        index = self._sibling_index(siblings)
        if index < 0:
            return []
        group = _compiled(selector)
        return [node for node in siblings[:index] if group is None or matches(node, group)]

    @property
    def next_element(self) -> Node | None:
        siblings = self._element_siblings()
        index = self._sibling_index(siblings)
        if index < 0 or index + 1 >= len(siblings):
            return None
        return siblings[index + 1]

    @property
    def previous_element(self) -> Node | None:
        siblings = self._element_siblings()
        index = self._sibling_index(siblings)
        if index <= 0:
            return None
        return siblings[index - 1]

    # ---------------------
    # Text
    # ---------------------

    def _text(self, recursive: bool, trim: bool) -> str:
        if trim and self.is_tag and self.name == "pre":
            trim = False
        elif trim and any(node.is_tag and node.name == "pre" for node in self.iter_ancestors()):
            trim = False
        return _nodes_text(self.children, recursive, trim)

    @property
    def text(self) -> str:
        """Text of the direct children, with smart whitespace trimming.

        ``<div>foo\\n<p>bar</p>baz\\n</div>`` gives ``"foo baz"``.
        """
        return self._text(recursive=False, trim=True)

    @property
    def raw_text(self) -> str:
        """Text of the direct children, as written."""
        return self._text(recursive=False, trim=False)

    @property
    def text_all(self) -> str:
        """Text of all descendants, with smart whitespace trimming."""
        return self._text(recursive=True, trim=True)

    @property
    def raw_text_all(self) -> str:
        return self._text(recursive=True, trim=False)

    def to_text(self, separator: str = " ", strip: bool = True) -> str:
        """Join the text, raw text and CDATA of every descendant with ``separator``.

        With ``strip``, each segment is stripped and empty segments are skipped.
        Unlike ``text_all``, no other whitespace handling is applied.
        """
        parts: list[str] = []
        _to_text_collect(self, parts, strip=strip)
        return separator.join(parts)


class _ParentNode(Node):
    __slots__ = ("_children",)

    _children: list[Node]

    def __init__(self) -> None:
        super().__init__()
        self._children = []

    @property
    def children(self) -> list[Node]:
        return self._children

    def append_child(self, node: Node) -> None:
        self._children.append(node)
        node._parent_ref = weakref.ref(self)


class RootNode(_ParentNode):
    __slots__ = ()

    is_root = True
    name = "#document"


class TagNode(_ParentNode):
    __slots__ = ("attrs", "name")

    is_tag = True

    name: str
    attrs: dict[str, str | None]

    def __init__(self, name: str, attrs: dict[str, str | None] | None = None) -> None:
        super().__init__()
        self.name = name
        self.attrs = dict(sorted(attrs.items())) if attrs else {}

    def attr(self, name: str) -> str | None:
        """Value of attribute ``name``; None when absent or valueless."""
        return self.attrs.get(name)

    def __repr__(self) -> str:
        return f"<TagNode {self.name!r} id={self.id} attrs={self.attrs!r}>"


class TextNode(Node):
    __slots__ = ("data", "kind")

    is_text = True

    kind: TextKind
    data: str

    def __init__(self, kind: TextKind, data: str) -> None:
        super().__init__()
        self.kind = kind
        self.data = data

    @property
    def name(self) -> str:  # type: ignore[override]
        return "#" + self.kind.value

    @property
    def text(self) -> str:
        """Return the content of this node."""
        return self.data

    @property
    def raw_text(self) -> str:
        return self.data

    @property
    def text_all(self) -> str:
        return self.data

    @property
    def raw_text_all(self) -> str:
        return self.data

    def __repr__(self) -> str:
        return f"<TextNode {self.kind.value} id={self.id} data={self.data!r}>"
