from .node import Node, RootNode, TagNode, TextNode
from .parser import LaxHTML, parse
from .selector import (
    AttributeTest,
    Combinator,
    ConditionsGroup,
    Equation,
    GroupOfSelectors,
    PseudoClass,
    SelectorCompiler,
    SelectorMatcher,
    Selectors,
    TagTest,
    compile_selector,
    matches,
    query,
    select,
)
from .serialize import render, to_test_format
from .tokenizer import TokenizerOpts
from .tokens import ParseError, TextKind

__version__ = "0.1.0"

__all__ = [
    "AttributeTest",
    "Combinator",
    "ConditionsGroup",
    "Equation",
    "GroupOfSelectors",
    "LaxHTML",
    "Node",
    "ParseError",
    "PseudoClass",
    "RootNode",
    "SelectorCompiler",
    "SelectorMatcher",
    "Selectors",
    "TagNode",
    "TagTest",
    "TextKind",
    "TextNode",
    "TokenizerOpts",
    "__version__",
    "compile_selector",
    "matches",
    "parse",
    "query",
    "render",
    "select",
    "to_test_format",
]
