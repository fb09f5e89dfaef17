"""Element classification tables used by the tokenizer and tree builder."""

from __future__ import annotations

# Elements that never have children or an end tag
VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "menuitem",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Bodies are not tokenized as markup
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style"})

# Bodies are not tokenized as markup, but character references are decoded
ESCAPABLE_RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"title", "textarea"})

_PARAGRAPH_BREAKERS: tuple[str, ...] = (
    "address",
    "article",
    "aside",
    "blockquote",
    "dir",
    "div",
    "dl",
    "fieldset",
    "footer",
    "form",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "main",
    "menu",
    "nav",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "ul",
)

# Opening the key implicitly closes an open element named by the value
OPTIONAL_END_PREDECESSORS: dict[str, str] = {
    "body": "head",
    "optgroup": "optgroup",
    "option": "option",
    **{name: "p" for name in _PARAGRAPH_BREAKERS},
}

_TABLE_SECTIONS: frozenset[str] = frozenset({"colgroup", "tbody", "td", "tfoot", "th", "thead", "tr"})

# name -> (elements the start tag may close, elements that bound the upward search)
SCOPED_CLOSE: dict[str, tuple[frozenset[str], frozenset[str]]] = {
    "li": (frozenset({"li"}), frozenset({"ul", "ol"})),
    "colgroup": (_TABLE_SECTIONS, frozenset({"table"})),
    "tbody": (_TABLE_SECTIONS, frozenset({"table"})),
    "tfoot": (_TABLE_SECTIONS, frozenset({"table"})),
    "thead": (_TABLE_SECTIONS, frozenset({"table"})),
    "tr": (frozenset({"tr"}), frozenset({"table"})),
    "th": (frozenset({"th", "td"}), frozenset({"table"})),
    "td": (frozenset({"th", "td"}), frozenset({"table"})),
    "dd": (frozenset({"dd", "dt"}), frozenset({"dl"})),
    "dt": (frozenset({"dd", "dt"}), frozenset({"dl"})),
    "rp": (frozenset({"rp", "rt"}), frozenset({"ruby"})),
    "rt": (frozenset({"rp", "rt"}), frozenset({"ruby"})),
}

# Phrasing content (plus obsolete inline elements)
PHRASING_ELEMENTS: frozenset[str] = frozenset(
    {
        "a",
        "abbr",
        "area",
        "audio",
        "b",
        "bdi",
        "bdo",
        "br",
        "button",
        "canvas",
        "cite",
        "code",
        "data",
        "datalist",
        "del",
        "dfn",
        "em",
        "embed",
        "i",
        "iframe",
        "img",
        "input",
        "ins",
        "kbd",
        "keygen",
        "label",
        "link",
        "map",
        "mark",
        "math",
        "meta",
        "meter",
        "noscript",
        "object",
        "output",
        "picture",
        "progress",
        "q",
        "ruby",
        "s",
        "samp",
        "script",
        "select",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "svg",
        "template",
        "textarea",
        "time",
        "u",
        "var",
        "video",
        "wbr",
        # Obsolete
        "acronym",
        "applet",
        "basefont",
        "big",
        "font",
        "strike",
        "tt",
    }
)

# Elements whose "/>" self-closing syntax is ignored
SELF_CLOSE_IGNORED: frozenset[str] = frozenset(
    {
        "a",
        "address",
        "applet",
        "article",
        "aside",
        "b",
        "big",
        "blockquote",
        "body",
        "button",
        "caption",
        "center",
        "code",
        "col",
        "colgroup",
        "dd",
        "details",
        "dialog",
        "dir",
        "div",
        "dl",
        "dt",
        "em",
        "fieldset",
        "figcaption",
        "figure",
        "font",
        "footer",
        "form",
        "frameset",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "head",
        "header",
        "hgroup",
        "html",
        "i",
        "iframe",
        "li",
        "listing",
        "main",
        "marquee",
        "menu",
        "nav",
        "nobr",
        "noembed",
        "noframes",
        "noscript",
        "object",
        "ol",
        "optgroup",
        "option",
        "p",
        "plaintext",
        "pre",
        "rp",
        "rt",
        "s",
        "script",
        "section",
        "select",
        "small",
        "strike",
        "strong",
        "style",
        "summary",
        "table",
        "tbody",
        "td",
        "template",
        "textarea",
        "tfoot",
        "th",
        "thead",
        "title",
        "tr",
        "tt",
        "u",
        "ul",
        "xmp",
    }
)

# Start tag names rewritten before element creation
TAG_NAME_ALIASES: dict[str, str] = {"image": "img"}
