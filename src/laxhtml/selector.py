# CSS Selector implementation for laxhtml
# Supports CSS3 selectors: tag, class, id and attribute tests, the four
# combinators and the structural pseudo-classes (including An+B equations).

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, NamedTuple

from .tokens import TextKind

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

# A hex escape takes at most six digits; the lookahead keeps shorter runs maximal
_HEX_ESCAPE = r"\\(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{1,5}(?![0-9a-fA-F]))\s?"
_CHAR_ESCAPE = r"\\[^0-9a-fA-F]"
_IDENTIFIER = r"(?:" + _HEX_ESCAPE + "|" + _CHAR_ESCAPE + r"|[^\s\\,.#:\[>~+])+"

_CLASS_OR_ID_PATTERN = re.compile(r"([.#])(" + _IDENTIFIER + ")", re.DOTALL)
_TAG_PATTERN = re.compile(_IDENTIFIER, re.DOTALL)
_ATTRIBUTE_PATTERN = re.compile(
    r"\[\s*"
    r"((?:" + _HEX_ESCAPE + "|" + _CHAR_ESCAPE + r"|[\w-])+)"  # Key
    r"(?:\s*"
    r"(\W)?=\s*"  # Operator
    r"(?:\"((?:\\.|[^\"\\])*)\"|'((?:\\.|[^'\\])*)'|([^\]]+?))"  # Value
    r"(?:\s+([iI]))?"  # Case-insensitivity flag
    r")?\s*\]",
    re.DOTALL,
)
_PSEUDO_CLASS_PATTERN = re.compile(r":([\w-]+)")
_COMBINATOR_PATTERN = re.compile(r"\s*([>+~])\s*|\s+")
_SEPARATOR_PATTERN = re.compile(r"\s*,\s*")

_ESCAPE_PATTERN = re.compile(r"\\(?:([0-9a-fA-F]{1,6})\s?|(\n)|(.))", re.DOTALL)

_EQUATION_NUMBER = re.compile(r"\s*([+-]?\d+)\s*\Z")
_EQUATION_AN_B = re.compile(r"\s*([+-]?\d*)n\s*(?:([+-])\s*(\d+))?\s*\Z", re.IGNORECASE)

_IGNORED_BY_EMPTY = frozenset({TextKind.COMMENT, TextKind.PI})

# Matches nothing; empty operands of substring operators never match
_NEVER = re.compile(r"(?!)")


def _replace_escape(match: re.Match[str]) -> str:
    hex_digits, newline, char = match.groups()
    if hex_digits is not None:
        codepoint = int(hex_digits, 16)
        if codepoint == 0 or 0xD800 <= codepoint <= 0xDFFF or codepoint > 0x10FFFF:
            return "\ufffd"
        return chr(codepoint)
    if newline is not None:
        return ""
    return char


def unescape(value: str) -> str:
    """Resolve CSS escapes: ``\\2603 `` is a snowman, ``\\.`` a literal dot."""
    if "\\" not in value:
        return value
    return _ESCAPE_PATTERN.sub(_replace_escape, value)


def _name_pattern(name: str) -> re.Pattern[str]:
    # Element names and attribute keys are stored lowercase; "svg:rect" matches "rect"
    return re.compile(r"(?:^|:)" + re.escape(unescape(name).lower()) + r"\Z")


def _value_pattern(op: str, value: str, insensitive: bool = False) -> re.Pattern[str]:
    escaped = re.escape(unescape(value))
    if not escaped and op in ("~", "*", "^", "$"):
        return _NEVER

    if op == "~":
        source = r"(?:^|\s)" + escaped + r"(?:\s|\Z)"
    elif op == "*":
        source = escaped
    elif op == "^":
        source = "^" + escaped
    elif op == "$":
        source = escaped + r"\Z"
    elif op == "|":
        source = "^" + escaped + r"(?:-|\Z)"
    else:
        source = "^" + escaped + r"\Z"
    return re.compile(source, re.IGNORECASE if insensitive else 0)


class Equation(NamedTuple):
    """The ``An+B`` argument of a positional pseudo-class."""

    a: int
    b: int

    def matches(self, position: int) -> bool:
        """True if ``a*i + b == position`` for some integer ``i >= 0``."""
        diff = position - self.b
        if self.a == 0:
            return diff == 0
        return diff % self.a == 0 and diff // self.a >= 0


def parse_equation(text: str) -> Equation:
    """Parse ``odd``, ``even``, ``N`` or ``An+B``.

    Anything else yields ``Equation(0, 0)``, which matches no position.
    """
    keyword = text.strip().lower()
    if keyword == "even":
        return Equation(2, 2)
    if keyword == "odd":
        return Equation(2, 1)

    match = _EQUATION_NUMBER.match(text)
    if match:
        return Equation(0, int(match.group(1)))

    match = _EQUATION_AN_B.match(text)
    if match:
        coefficient, sign, offset = match.groups()
        if coefficient in ("", "+"):
            a = 1
        elif coefficient == "-":
            a = -1
        else:
            a = int(coefficient)
        b = int(sign + offset) if offset is not None else 0
        return Equation(a, b)

    logger.debug("unparseable equation %r", text)
    return Equation(0, 0)


class TagTest:
    __slots__ = ("pattern",)

    pattern: re.Pattern[str]

    def __init__(self, pattern: re.Pattern[str]) -> None:
        self.pattern = pattern

    def __repr__(self) -> str:
        return f"TagTest({self.pattern.pattern!r})"


class AttributeTest:
    __slots__ = ("key", "value")

    key: re.Pattern[str]
    value: re.Pattern[str] | None

    def __init__(self, key: re.Pattern[str], value: re.Pattern[str] | None = None) -> None:
        self.key = key
        self.value = value

    def __repr__(self) -> str:
        value = self.value.pattern if self.value is not None else None
        return f"AttributeTest({self.key.pattern!r}, {value!r})"


class PseudoClass:
    __slots__ = ("equation", "group", "name")

    name: str
    group: GroupOfSelectors | None
    equation: Equation | None

    def __init__(
        self,
        name: str,
        group: GroupOfSelectors | None = None,
        equation: Equation | None = None,
    ) -> None:
        self.name = name
        self.group = group
        self.equation = equation

    def __repr__(self) -> str:
        parts = [repr(self.name)]
        if self.group is not None:
            parts.append(f"group={self.group!r}")
        if self.equation is not None:
            parts.append(f"equation={tuple(self.equation)!r}")
        return f"PseudoClass({', '.join(parts)})"


Condition = TagTest | AttributeTest | PseudoClass


class ConditionsGroup:
    """Conditions that must all hold for one element (``div.a[href]``)."""

    __slots__ = ("conditions",)

    conditions: tuple[Condition, ...]

    def __init__(self, conditions: tuple[Condition, ...] = ()) -> None:
        self.conditions = conditions

    def __repr__(self) -> str:
        return f"ConditionsGroup({list(self.conditions)!r})"


class Combinator:
    DESCENDANT: str = " "
    CHILD: str = ">"
    NEXT_SIBLING: str = "+"
    SUBSEQUENT_SIBLING: str = "~"

    __slots__ = ("op",)

    op: str

    def __init__(self, op: str) -> None:
        self.op = op

    def __repr__(self) -> str:
        return f"Combinator({self.op!r})"


class Selectors:
    """One comma-separated alternative: condition groups joined by combinators."""

    __slots__ = ("items",)

    items: tuple[ConditionsGroup | Combinator, ...]

    def __init__(self, items: tuple[ConditionsGroup | Combinator, ...]) -> None:
        self.items = items

    def __repr__(self) -> str:
        return f"Selectors({list(self.items)!r})"


class GroupOfSelectors:
    __slots__ = ("selectors",)

    selectors: tuple[Selectors, ...]

    def __init__(self, selectors: tuple[Selectors, ...] = ()) -> None:
        self.selectors = selectors

    def __len__(self) -> int:
        return len(self.selectors)

    def __repr__(self) -> str:
        return f"GroupOfSelectors({list(self.selectors)!r})"


class SelectorCompiler:
    """Compiles selector text into a ``GroupOfSelectors``.

    Compilation never fails. Parsing stops at the first construct it cannot
    read and the rest of the text is dropped, so ``"div [oops"`` compiles to
    ``div``.
    """

    __slots__ = ("length", "pos", "selector")

    selector: str
    pos: int
    length: int

    def __init__(self, selector: str) -> None:
        self.selector = selector.strip()
        self.pos = 0
        self.length = len(self.selector)

    def _match(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        match = pattern.match(self.selector, self.pos)
        if match:
            self.pos = match.end()
        return match

    def compile(self) -> GroupOfSelectors:
        if not self.selector:
            # Nothing to test: every element matches
            return GroupOfSelectors((Selectors((ConditionsGroup(),)),))

        alternatives: list[Selectors] = []
        while True:
            selectors = self._parse_selectors()
            if selectors is None:
                break
            alternatives.append(selectors)
            if not self._match(_SEPARATOR_PATTERN):
                break

        if self.pos < self.length:
            logger.debug("dropping unparsed selector text %r", self.selector[self.pos :])
        return GroupOfSelectors(tuple(alternatives))

    def _parse_selectors(self) -> Selectors | None:
        items: list[ConditionsGroup | Combinator] = []
        while True:
            group = self._parse_conditions()
            if group is None:
                # A trailing combinator has nothing to apply to
                if items and isinstance(items[-1], Combinator):
                    items.pop()
                break
            items.append(group)

            combinator = self._match(_COMBINATOR_PATTERN)
            if not combinator:
                break
            items.append(Combinator(combinator.group(1) or Combinator.DESCENDANT))

        if not items:
            return None
        return Selectors(tuple(items))

    def _parse_conditions(self) -> ConditionsGroup | None:
        start = self.pos
        conditions: list[Condition] = []
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch in ".#":
                match = self._match(_CLASS_OR_ID_PATTERN)
                if not match:
                    break
                if match.group(1) == ".":
                    conditions.append(AttributeTest(_name_pattern("class"), _value_pattern("~", match.group(2))))
                else:
                    conditions.append(AttributeTest(_name_pattern("id"), _value_pattern("", match.group(2))))
            elif ch == "[":
                match = self._match(_ATTRIBUTE_PATTERN)
                if not match:
                    break
                conditions.append(self._attribute_test(match))
            elif ch == ":":
                match = self._match(_PSEUDO_CLASS_PATTERN)
                if not match:
                    break
                conditions.append(self._pseudo_class(match.group(1).lower(), self._parenthesized()))
            else:
                match = self._match(_TAG_PATTERN)
                if not match:
                    break
                if match.group(0) != "*":
                    conditions.append(TagTest(_name_pattern(match.group(0))))

        if self.pos == start:
            return None
        return ConditionsGroup(tuple(conditions))

    def _parenthesized(self) -> str | None:
        """Consume a balanced ``(...)`` at the current position and return its inside.

        Quoted strings and escaped characters do not count towards the
        balance. Without a closing parenthesis nothing is consumed.
        """
        if not self.selector.startswith("(", self.pos):
            return None

        depth = 0
        quote = ""
        index = self.pos
        while index < self.length:
            ch = self.selector[index]
            if ch == "\\":
                index += 2
                continue
            if quote:
                if ch == quote:
                    quote = ""
            elif ch in "\"'":
                quote = ch
            elif ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    arg = self.selector[self.pos + 1 : index]
                    self.pos = index + 1
                    return arg
            index += 1
        return None

    def _attribute_test(self, match: re.Match[str]) -> AttributeTest:
        key, op, double_quoted, single_quoted, unquoted, flag = match.groups()
        value = double_quoted
        if value is None:
            value = single_quoted if single_quoted is not None else unquoted
        if value is None:
            return AttributeTest(_name_pattern(key))
        return AttributeTest(_name_pattern(key), _value_pattern(op or "", value, insensitive=flag is not None))

    def _pseudo_class(self, name: str, arg: str | None) -> PseudoClass:
        if name == "not":
            group = compile_selector(arg) if arg is not None else None
            return PseudoClass(name, group=group)

        if name.startswith("nth-"):
            if arg is None or not arg.strip():
                return PseudoClass(name)
            return PseudoClass(name, equation=parse_equation(arg))

        # :first-child is :nth-child(1), :last-of-type is :nth-last-of-type(1)
        if name.startswith("first-"):
            return PseudoClass("nth-" + name[6:], equation=Equation(0, 1))
        if name.startswith("last-"):
            return PseudoClass("nth-" + name, equation=Equation(0, 1))

        return PseudoClass(name)


def compile_selector(selector: str) -> GroupOfSelectors:
    """Compile CSS selector text. Never raises."""
    return SelectorCompiler(selector).compile()


def _ensure_compiled(selector: str | GroupOfSelectors) -> GroupOfSelectors:
    if isinstance(selector, GroupOfSelectors):
        return selector
    return compile_selector(selector)


class SelectorMatcher:
    """Matches compiled selectors against tree nodes.

    ``context_root`` bounds the combinators: ancestor and parent walks never
    step onto it (nor onto the tree's root), so ``select(div, "div p")``
    only finds paragraphs inside a ``div`` that is itself inside ``div``.
    """

    __slots__ = ()

    def matches(self, node: Any, group: GroupOfSelectors, context_root: Any) -> bool:
        if not node.is_tag:
            return False
        for selectors in group.selectors:
            items = selectors.items
            if self._match_chain(items, len(items) - 1, node, context_root):
                return True
        return False

    def _match_chain(self, items: tuple[Any, ...], index: int, node: Any, context_root: Any) -> bool:
        """Match ``items[: index + 1]`` right to left, with ``items[index]`` applied to ``node``."""
        if not self._match_conditions(items[index], node):
            return False
        if index == 0:
            return True

        op = items[index - 1].op
        index -= 2

        if op == Combinator.CHILD:
            parent = node.parent
            if parent is None or parent.is_root or parent.id == context_root.id:
                return False
            return self._match_chain(items, index, parent, context_root)

        if op == Combinator.NEXT_SIBLING:
            sibling = self._previous_element(node)
            return sibling is not None and self._match_chain(items, index, sibling, context_root)

        if op == Combinator.SUBSEQUENT_SIBLING:
            for sibling in _element_siblings(node):
                if sibling.id == node.id:
                    return False
                if self._match_chain(items, index, sibling, context_root):
                    return True
            return False

        # Descendant
        ancestor = node.parent
        while ancestor is not None and not ancestor.is_root and ancestor.id != context_root.id:
            if self._match_chain(items, index, ancestor, context_root):
                return True
            ancestor = ancestor.parent
        return False

    def _match_conditions(self, group: ConditionsGroup, node: Any) -> bool:
        for condition in group.conditions:
            condition_type = type(condition)
            if condition_type is TagTest:
                if not condition.pattern.search(node.name):
                    return False
            elif condition_type is AttributeTest:
                if not self._matches_attribute(node, condition):
                    return False
            elif not self._matches_pseudo(node, condition):
                return False
        return True

    def _matches_attribute(self, node: Any, test: AttributeTest) -> bool:
        for key, value in node.attrs.items():
            if not test.key.search(key):
                continue
            if test.value is None or (value is not None and test.value.search(value)):
                return True
        return False

    def _matches_pseudo(self, node: Any, pseudo: PseudoClass) -> bool:
        name = pseudo.name

        if name == "empty":
            # Comments and processing instructions do not count
            return all(child.is_text and child.kind in _IGNORED_BY_EMPTY for child in node.children)

        if name == "root":
            parent = node.parent
            return parent is not None and parent.is_root

        if name == "not":
            if pseudo.group is None:
                return False
            return not self.matches(node, pseudo.group, node)

        if name == "checked":
            return "checked" in node.attrs or "selected" in node.attrs

        if name in ("nth-child", "nth-last-child", "nth-of-type", "nth-last-of-type"):
            if pseudo.equation is None:
                return False
            siblings = _element_siblings(node, same_name=name.endswith("of-type"))
            if name.startswith("nth-last"):
                siblings.reverse()
            for position, sibling in enumerate(siblings, 1):
                if sibling.id == node.id:
                    return pseudo.equation.matches(position)
            return False

        if name in ("only-child", "only-of-type"):
            siblings = _element_siblings(node, same_name=name == "only-of-type")
            return all(sibling.id == node.id for sibling in siblings)

        # Unknown pseudo-class - don't match
        return False

    def _previous_element(self, node: Any) -> Any | None:
        previous = None
        for sibling in _element_siblings(node):
            if sibling.id == node.id:
                return previous
            previous = sibling
        return None


def _element_siblings(node: Any, same_name: bool = False) -> list[Any]:
    """Element children of ``node``'s parent, ``node`` included."""
    parent = node.parent
    if parent is None:
        return [node]
    if same_name:
        return [child for child in parent.children if child.is_tag and child.name == node.name]
    return [child for child in parent.children if child.is_tag]


def _tree_root(node: Any) -> Any:
    while True:
        parent = node.parent
        if parent is None:
            return node
        node = parent


def _iter_elements(root: Any) -> Iterator[Any]:
    """Yield the descendant elements of ``root`` in document order."""
    stack = [iter(root.children)]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
            continue
        if child.is_tag:
            yield child
            stack.append(iter(child.children))


# Stateless; shared by the module-level helpers
_matcher: SelectorMatcher = SelectorMatcher()


def matches(node: Any, selector: str | GroupOfSelectors) -> bool:
    """
    Test whether an element satisfies a CSS selector.

    Combinators may walk up to, but not onto, the root of the node's tree.

    Args:
        node: Any tree node; text nodes and roots never match
        selector: A CSS selector string or a compiled selector

    Returns:
        True if any comma-separated alternative matches
    """
    group = _ensure_compiled(selector)
    return _matcher.matches(node, group, _tree_root(node))


def select(root: Any, selector: str | GroupOfSelectors, limit: int = 0) -> list[Any]:
    """
    Return the descendant elements of ``root`` matching ``selector``.

    Matches come in document order and ``root`` itself is never included.
    Combinators stay within ``root``: ``select(div, "div p")`` needs a ``div``
    between ``root`` and the paragraph.

    Args:
        root: The node to search from
        selector: A CSS selector string or a compiled selector
        limit: Stop after this many matches; 0 means no limit

    Returns:
        A list of matching nodes
    """
    group = _ensure_compiled(selector)
    results: list[Any] = []
    for node in _iter_elements(root):
        if _matcher.matches(node, group, root):
            results.append(node)
            if limit and len(results) >= limit:
                break
    return results


def query(root: Any, selector: str | GroupOfSelectors) -> list[Any]:
    """Query the tree below ``root``, returning all matching elements."""
    return select(root, selector)
