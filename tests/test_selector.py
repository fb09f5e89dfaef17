"""
Unit tests for selector compilation and matching.
"""

import pytest

from laxhtml import (
    AttributeTest,
    Combinator,
    Equation,
    GroupOfSelectors,
    PseudoClass,
    TagTest,
    compile_selector,
    matches,
    parse,
    select,
)
from laxhtml.selector import parse_equation, unescape

LIST_HTML = "<ul>" + "".join(f"<li>{letter}</li>" for letter in "ABCDEFGH") + "</ul>"


def texts(nodes) -> list[str]:
    return [node.text_all for node in nodes]


def ids(nodes) -> list[str]:
    return [node.attr("id") for node in nodes]


@pytest.fixture
def list_root():
    return parse(LIST_HTML)


class TestCompile:
    """Structure of compiled selectors."""

    def test_compound_with_child_combinator(self) -> None:
        group = compile_selector("div.a > p")
        assert len(group) == 1
        items = group.selectors[0].items
        assert len(items) == 3
        assert [type(condition) for condition in items[0].conditions] == [TagTest, AttributeTest]
        assert isinstance(items[1], Combinator)
        assert items[1].op == Combinator.CHILD
        assert [type(condition) for condition in items[2].conditions] == [TagTest]

    def test_descendant_combinator_from_whitespace(self) -> None:
        items = compile_selector("div \n p").selectors[0].items
        assert items[1].op == Combinator.DESCENDANT

    def test_selector_list(self) -> None:
        assert len(compile_selector("h1, h2 ,h3")) == 3

    def test_universal_has_no_conditions(self) -> None:
        items = compile_selector("*").selectors[0].items
        assert len(items) == 1
        assert items[0].conditions == ()

    def test_trailing_combinator_dropped(self) -> None:
        items = compile_selector("div >").selectors[0].items
        assert len(items) == 1

    def test_unparseable_rest_dropped(self) -> None:
        group = compile_selector("div [oops")
        assert len(group) == 1
        assert len(group.selectors[0].items) == 1

    def test_first_and_last_shorthands(self) -> None:
        first = compile_selector(":first-child").selectors[0].items[0].conditions[0]
        last = compile_selector(":last-of-type").selectors[0].items[0].conditions[0]
        assert (first.name, first.equation) == ("nth-child", Equation(0, 1))
        assert (last.name, last.equation) == ("nth-last-of-type", Equation(0, 1))

    def test_not_holds_nested_group(self) -> None:
        condition = compile_selector(":not(p, .x)").selectors[0].items[0].conditions[0]
        assert isinstance(condition, PseudoClass)
        assert isinstance(condition.group, GroupOfSelectors)
        assert len(condition.group) == 2

    def test_nested_parentheses_in_argument(self) -> None:
        condition = compile_selector("li:not(:nth-child(2n))").selectors[0].items[0].conditions[1]
        assert condition.name == "not"
        inner = condition.group.selectors[0].items[0].conditions[0]
        assert inner.equation == Equation(2, 0)


class TestEquation:
    """``An+B`` parsing and position matching."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("odd", (2, 1)),
            ("EVEN", (2, 2)),
            ("3", (0, 3)),
            ("+5", (0, 5)),
            ("2n+1", (2, 1)),
            ("2n - 1", (2, -1)),
            ("-n+3", (-1, 3)),
            ("n", (1, 0)),
            ("-2n", (-2, 0)),
            ("foo", (0, 0)),
        ],
    )
    def test_parse(self, text: str, expected: tuple[int, int]) -> None:
        assert parse_equation(text) == expected

    def test_matches(self) -> None:
        odd = Equation(2, 1)
        assert [position for position in range(1, 8) if odd.matches(position)] == [1, 3, 5, 7]
        first_three = Equation(-1, 3)
        assert [position for position in range(1, 8) if first_three.matches(position)] == [1, 2, 3]
        assert not any(Equation(0, 0).matches(position) for position in range(1, 8))


class TestUnescape:
    def test_hex_escape(self) -> None:
        assert unescape("\\2603 x") == "☃x"
        assert unescape("\\2603  x") == "☃ x"

    def test_character_escape(self) -> None:
        assert unescape("foo\\.bar\\#") == "foo.bar#"

    def test_invalid_codepoints(self) -> None:
        assert unescape("\\0") == "\ufffd"
        assert unescape("\\110000") == "\ufffd"

    def test_escaped_newline_removed(self) -> None:
        assert unescape("a\\\nb") == "ab"


class TestSimpleSelectors:
    """Tag, class, id and attribute tests."""

    def test_tag_case_insensitive(self) -> None:
        root = parse("<div>a</div><p>b</p>")
        assert texts(select(root, "DIV")) == ["a"]

    def test_namespaced_tag(self) -> None:
        root = parse("<svg:rect id=r></svg:rect>")
        assert ids(select(root, "rect")) == ["r"]

    def test_class_and_id(self) -> None:
        root = parse('<p class="a b" id=one>1</p><p class="ab" id=two>2</p>')
        assert ids(select(root, ".b")) == ["one"]
        assert ids(select(root, "p.a.b")) == ["one"]
        assert ids(select(root, "#two")) == ["two"]
        assert ids(select(root, ".ab#two")) == ["two"]

    def test_escaped_identifier(self) -> None:
        root = parse('<p id="foo.bar">x</p>')
        assert texts(select(root, "#foo\\.bar")) == ["x"]

    def test_unicode_identifiers(self) -> None:
        root = parse('<p class="☃">a</p><p id="☃ x">b</p>')
        assert texts(select(root, "p.☃")) == ["a"]
        assert texts(select(root, '[id="\\2603  x"]')) == ["b"]


class TestAttributeSelectors:
    """Attribute presence and value operators."""

    @pytest.fixture
    def root(self):
        return parse(
            '<a id=link href="https://example.com/page.html" lang="en-US" class="btn primary" data-x="">x</a>'
            "<input id=box disabled>"
        )

    @pytest.mark.parametrize(
        "selector",
        [
            "[href]",
            "[HREF]",
            '[href="https://example.com/page.html"]',
            '[href^="https"]',
            '[href$=".html"]',
            '[href*="example"]',
            "[class~=primary]",
            "[lang|=en]",
            '[lang="EN-US" i]',
            "[lang=en-us I]",
            '[data-x=""]',
            "[ href ]",
        ],
    )
    def test_matching_operators(self, root, selector: str) -> None:
        assert ids(select(root, selector)) == ["link"]

    @pytest.mark.parametrize(
        "selector",
        [
            '[href^=""]',
            '[href*=""]',
            "[class~=btn-primary]",
            "[lang|=e]",
            '[lang="EN-US"]',
            "[missing]",
        ],
    )
    def test_non_matching_operators(self, root, selector: str) -> None:
        assert select(root, selector) == []

    def test_valueless_attribute(self, root) -> None:
        """A valueless attribute only satisfies a presence test."""
        assert ids(select(root, "[disabled]")) == ["box"]
        assert select(root, '[disabled=""]') == []


class TestCombinators:
    """Descendant, child and sibling combinators."""

    @pytest.fixture
    def root(self):
        return parse(
            "<div id=a><p id=b><span id=c>x</span></p><p id=d></p><span id=e></span></div>"
        )

    @pytest.mark.parametrize(
        ("selector", "expected"),
        [
            ("div span", ["c", "e"]),
            ("div > span", ["e"]),
            ("p > span", ["c"]),
            ("div p span", ["c"]),
            ("p + p", ["d"]),
            ("p + span", ["e"]),
            ("p ~ span", ["e"]),
            ("#b ~ p", ["d"]),
            ("#b~*", ["d", "e"]),
            ("div>p+p", ["d"]),
            ("span, #d", ["c", "d", "e"]),
        ],
    )
    def test_combinators(self, root, selector: str, expected: list[str]) -> None:
        assert ids(select(root, selector)) == expected

    def test_context_root_bounds_combinators(self) -> None:
        """Ancestor walks stop at the node the search starts from."""
        root = parse("<div id=outer><div id=inner><p id=x></p></div><p id=y></p></div>")
        outer = root.at("#outer")
        assert ids(select(outer, "div p")) == ["x"]
        assert ids(select(outer, "p")) == ["x", "y"]
        assert ids(select(root, "div p")) == ["x", "y"]

    def test_root_is_never_a_parent(self) -> None:
        root = parse("<p id=top></p>")
        assert select(root, "* > p") == []


class TestPseudoClasses:
    """Structural pseudo-classes."""

    @pytest.mark.parametrize(
        ("selector", "expected"),
        [
            ("li:nth-child(odd)", "ACEG"),
            ("li:nth-child(even)", "BDFH"),
            ("li:nth-child(3)", "C"),
            ("li:nth-child(n+3)", "CDEFGH"),
            ("li:nth-child(-n+3)", "ABC"),
            ("li:nth-child(3n)", "CF"),
            ("li:nth-child(n)", "ABCDEFGH"),
            ("li:nth-child(1n+0)", "ABCDEFGH"),
            ("li:nth-last-child(1)", "H"),
            ("li:nth-last-child(-n+2)", "GH"),
            ("li:first-child", "A"),
            ("li:last-child", "H"),
            ("li:not(:first-child):not(:last-child)", "BCDEFG"),
            ("li:nth-child(foo)", ""),
            ("li:nth-child()", ""),
            ("li:only-child", ""),
            ("li:hover", ""),
            ("li:not", ""),
        ],
    )
    def test_list_positions(self, list_root, selector: str, expected: str) -> None:
        assert "".join(texts(select(list_root, selector))) == expected

    def test_of_type(self) -> None:
        root = parse("<div><h1>a</h1><p>1</p><h2>b</h2><p>2</p><p>3</p></div>")
        assert texts(select(root, "p:first-of-type")) == ["1"]
        assert texts(select(root, "p:last-of-type")) == ["3"]
        assert texts(select(root, "p:nth-of-type(2)")) == ["2"]
        assert texts(select(root, "p:nth-last-of-type(3)")) == ["1"]
        assert texts(select(root, "div > :only-of-type")) == ["a", "b"]

    def test_only_child(self) -> None:
        root = parse("<div><p>x</p></div><div><p>y</p><p>z</p></div>")
        assert texts(select(root, "p:only-child")) == ["x"]

    def test_empty(self) -> None:
        """Comments do not count as content; whitespace does."""
        root = parse("<p id=a></p><p id=b><!-- c --></p><p id=c> </p><p id=d>x</p>")
        assert ids(select(root, "p:empty")) == ["a", "b"]

    def test_root(self) -> None:
        root = parse("<html><body><p>x</p></body></html>")
        assert [node.name for node in select(root, ":root")] == ["html"]

    def test_checked(self) -> None:
        root = parse("<input id=a checked><input id=b><option id=c selected>")
        assert ids(select(root, ":checked")) == ["a", "c"]

    def test_not_with_selector_list(self, list_root) -> None:
        assert "".join(texts(select(list_root, "li:not(:first-child, :nth-child(2))"))) == "CDEFGH"

    @pytest.mark.parametrize(
        ("selector", "expected"),
        [
            ("li:not(:not(:first-child))", "A"),
            ("li:not(:not(:not(:nth-child(2n+1))))", "BDFH"),
            ('li:not([title=")"])', "ABCDEFGH"),
            ("li:not(:nth-child(2n+1)", ""),
        ],
    )
    def test_nested_parentheses(self, list_root, selector: str, expected: str) -> None:
        """Arguments end at the balancing parenthesis, outside of quotes."""
        assert "".join(texts(select(list_root, selector))) == expected


class TestSelectAndMatches:
    """The public matching entry points."""

    def test_empty_selector_matches_everything(self) -> None:
        root = parse("<div><p></p></div>")
        assert [node.name for node in select(root, "  ")] == ["div", "p"]

    def test_limit(self, list_root) -> None:
        assert texts(select(list_root, "li", limit=2)) == ["A", "B"]

    def test_document_order_across_alternatives(self) -> None:
        root = parse("<p>1</p><h1>2</h1><p>3</p>")
        assert texts(select(root, "h1, p")) == ["1", "2", "3"]

    def test_compiled_selector_reused(self, list_root) -> None:
        group = compile_selector("li:nth-child(2n)")
        assert texts(select(list_root, group)) == ["B", "D", "F", "H"]
        assert texts(list_root.query(group)) == ["B", "D", "F", "H"]

    @pytest.mark.parametrize("selector", ["li", "ul > li:nth-child(odd)", "li + li", "li:not(:last-child)"])
    def test_matches_agrees_with_select(self, list_root, selector: str) -> None:
        selected = select(list_root, selector)
        everything = select(list_root, "*")
        assert [node for node in everything if matches(node, selector)] == selected

    def test_text_nodes_never_match(self) -> None:
        root = parse("<p>x</p>")
        text = root.at("p").children[0]
        assert not matches(text, "*")
