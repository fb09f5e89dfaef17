"""
End-to-end scenarios: parse a document, then query and render it.
"""

import pytest

from laxhtml import matches, parse, render, select

EIGHT_ITEMS = """
<ul>
    <li>A</li>
    <li>B</li>
    <li>C</li>
    <li>D</li>
    <li>E</li>
    <li>F</li>
    <li>G</li>
    <li>H</li>
</ul>
"""

MIXED_LIST = """
<ul>
    <li>A</li>
    <p>B</p>
    <li class="test ♥">C</li>
    <p>D</p>
    <li>E</li>
    <li>F</li>
    <p>G</p>
    <li>H</li>
    <li>I</li>
</ul>
<div>
    <div class="☃">J</div>
</div>
<div>
    <a href="http://example.com">Example!</a>
    <div class="☃">K</div>
    <a href="http://example.com">Another!</a>
</div>
"""


def texts(nodes) -> list[str]:
    return [node.text for node in nodes]


class TestDocumentScenarios:
    def test_ids_and_root(self) -> None:
        root = parse('<div><div FOO="0" id="a">A</div><div id="b">B</div></div>')
        outer = select(root, ":root")
        assert len(outer) == 1
        assert outer[0].element_children()[0].attr("id") == "a"
        assert [node.attr("id") for node in select(root, "[id]")] == ["a", "b"]
        a = root.at("#a")
        assert matches(a, "#a")
        assert render(a) == '<div foo="0" id="a">A</div>'

    def test_odd_positions_from_either_end(self) -> None:
        root = parse("<ul><li>A</li><li>B</li><li>C</li></ul>")
        assert texts(select(root, "li:nth-child(2n+1)")) == ["A", "C"]
        # Position p matches when a*i + b == p for some i >= 0; counted from
        # the end, A and C are positions 3 and 1
        assert texts(select(root, "li:nth-last-child(2n+1)")) == ["A", "C"]
        assert texts(select(root, "li:nth-last-child(2n)")) == ["B"]

    def test_script_body_is_one_raw_child(self) -> None:
        root = parse("<script>var x = '<b>';</script>")
        script = root.at("script")
        assert len(script.children) == 1
        assert script.children[0].data == "var x = '<b>';"
        assert root.at("b") is None

    def test_stray_end_tag_ignored(self) -> None:
        root = parse("<div></span></div>")
        assert root.at("div").children == []
        assert render(root) == "<div></div>"

    def test_void_self_closing(self) -> None:
        assert render(parse("<br/>")) == "<br>"
        assert parse("<hr>text").at("hr").children == []


class TestPositionalSelectors:
    """Positional pseudo-classes over a whitespace-formatted list."""

    @pytest.fixture
    def root(self):
        return parse(EIGHT_ITEMS)

    @pytest.mark.parametrize(
        ("selector", "expected"),
        [
            ("li:NTH-CHILD(ODD)", "ACEG"),
            ("li:nth-last-child(odd)", "BDFH"),
            ("li:nth-child(2n + 1)", "ACEG"),
            ("li:nth-last-child( even )", "ACEG"),
            ("li:nTh-chILd(2N+2)", "BDFH"),
            ("li:nth-child( 2n + 2 )", "BDFH"),
            ("li:nth-child(4n+1)", "AE"),
            ("li:nth-last-child(4n+1)", "DH"),
            ("li:nth-last-child(4n+4)", "AE"),
            ("li:nth-child( 4n )", "DH"),
            ("li:nth-child(5n-2)", "CH"),
            ("li:nth-child( 5n - 2 )", "CH"),
            ("li:nth-last-child(5n-2)", "AF"),
            ("li:nth-child( -n + 3 )", "ABC"),
            ("li:nth-last-child(-1n+3)", "FGH"),
            ("li:Nth-Last-Child(3N)", "CF"),
            ("li:nth-child( 3 )", "C"),
            ("li:nth-last-child( +3 )", "F"),
            ("li:nth-child(1n-0)", "ABCDEFGH"),
            ("li:Nth-Child(N+0)", "ABCDEFGH"),
            ("li:nth-child(0n+1)", "A"),
            ("li:nth-child(0n+0)", ""),
            ("li:nth-child(0)", ""),
            ("li:nth-child(whatever)", ""),
            ("li:whatever(whatever)", ""),
        ],
    )
    def test_positions(self, root, selector: str, expected: str) -> None:
        assert "".join(texts(select(root, selector))) == expected

    def test_list_itself_is_first_child(self, root) -> None:
        """The list is the only element child of the document."""
        found = select(root, ":nth-child(1)")
        assert found[0].name == "ul"
        assert found[1].text == "A"
        assert select(root, ":nth-last-child(odd)")[-1].text == "H"


class TestMixedSiblings:
    """Type-restricted positions, negation and only-child tests."""

    @pytest.fixture
    def root(self):
        return parse(MIXED_LIST)

    @pytest.mark.parametrize(
        ("selector", "expected"),
        [
            ("ul :nth-child(odd)", ["A", "C", "E", "G", "I"]),
            ("li:nth-of-type(odd)", ["A", "E", "H"]),
            ("li:nth-last-of-type( odd )", ["C", "F", "I"]),
            ("p:nth-of-type(odd)", ["B", "G"]),
            ("p:nth-last-of-type(odd)", ["B", "G"]),
            ("ul :first-child", ["A"]),
            ("p:first-of-type", ["B"]),
            ("ul :last-child", ["I"]),
            ("p:last-of-type", ["G"]),
            ("li:last-of-type", ["I"]),
            ("ul :nth-child(-n+3):not(li)", ["B"]),
            ("ul :nth-child(-n+3):NOT(li)", ["B"]),
            ("ul :nth-child(-n+3):not(:first-child)", ["B", "C"]),
            ("ul :nth-child(-n+3):not(.♥)", ["A", "B"]),
            ('ul :nth-child(-n+3):not([class$="♥"])', ["A", "B"]),
            ('ul :nth-child(-n+3):not(li[class$="♥"])', ["A", "B"]),
            ('ul :nth-child(-n+3):not([class$="♥"][class^="test"])', ["A", "B"]),
            ('ul :nth-child(-n+3):not(*[class$="♥"])', ["A", "B"]),
            ("ul :nth-child(-n+3):not(:nth-child(-n+2))", ["C"]),
            ("ul :nth-child(-n+3):not(:nth-child(1)):not(:nth-child(2))", ["C"]),
            (":only-child", ["J"]),
            ("div :only-of-type", ["J", "K"]),
            ("div:only-child", ["J"]),
            ("div div:only-of-type", ["J", "K"]),
        ],
    )
    def test_selectors(self, root, selector: str, expected: list[str]) -> None:
        assert texts(select(root, selector)) == expected

    def test_snowman_class(self, root) -> None:
        assert texts(select(root, ".☃")) == ["J", "K"]
        assert texts(select(root, "div.\\2603")) == ["J", "K"]
