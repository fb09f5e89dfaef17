"""laxhtml parser entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .tokenizer import Tokenizer, TokenizerOpts
from .treebuilder import TreeBuilder

if TYPE_CHECKING:
    from .node import Node, RootNode
    from .selector import GroupOfSelectors
    from .tokens import ParseError


def _coerce_markup(html: object) -> str:
    if html is None:
        return ""
    if isinstance(html, (bytes, bytearray, memoryview)):
        return bytes(html).decode("utf-8", errors="replace")
    return str(html)


class LaxHTML:
    """A parsed document: the tree root plus the recoveries made while parsing.

    Parsing never fails. With ``collect_errors=True`` every recovery (a stray
    ``<``, an ignored end tag, an implicitly closed element, ...) is recorded
    in ``errors`` with its line and column.
    """

    __slots__ = ("errors", "root", "tokenizer", "tree_builder")

    errors: list[ParseError]
    root: RootNode
    tokenizer: Tokenizer
    tree_builder: TreeBuilder

    def __init__(
        self,
        html: str | bytes | bytearray | memoryview | None,
        *,
        collect_errors: bool = False,
        tokenizer_opts: TokenizerOpts | None = None,
    ) -> None:
        self.tree_builder = TreeBuilder(collect_errors=collect_errors)
        self.tokenizer = Tokenizer(self.tree_builder, tokenizer_opts or TokenizerOpts(), collect_errors=collect_errors)
        # Link tokenizer to tree_builder for position info
        self.tree_builder.tokenizer = self.tokenizer

        self.tokenizer.run(_coerce_markup(html))
        self.root = self.tree_builder.finish()

        # Merge errors from both tokenizer and tree builder, in source order
        self.errors = sorted(
            self.tokenizer.errors + self.tree_builder.errors,
            key=lambda error: (error.line or 0, error.column or 0),
        )

    def query(self, selector: str | GroupOfSelectors) -> list[Node]:
        """Query the document using a CSS selector. Delegates to root.query()."""
        return self.root.query(selector)

    def at(self, selector: str | GroupOfSelectors) -> Node | None:
        """Return the first element matching ``selector``. Delegates to root.at()."""
        return self.root.at(selector)

    def to_html(self) -> str:
        """Serialize the document to HTML. Delegates to root.to_html()."""
        return self.root.to_html()

    def to_text(self, separator: str = " ", strip: bool = True) -> str:
        """Return the document's concatenated text.

        Delegates to `root.to_text(separator=..., strip=...)`.
        """
        return self.root.to_text(separator=separator, strip=strip)


def parse(html: str | bytes | bytearray | memoryview | None) -> RootNode:
    """Parse ``html`` and return the root of the tree.

    The returned root owns the whole tree; keep a reference to it for as long
    as any of its nodes are in use.
    """
    return LaxHTML(html).root
