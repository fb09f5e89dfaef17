import re
from bisect import bisect_right

from .constants import ESCAPABLE_RAW_TEXT_ELEMENTS, RAW_TEXT_ELEMENTS
from .entities import decode_entities_in_text
from .errors import generate_error_message
from .tokens import CharacterTokens, EOFToken, MarkupToken, ParseError, Tag, TextKind

_ASCII_LOWER_TABLE = str.maketrans({chr(code): chr(code + 32) for code in range(65, 91)})

_WHITESPACE_RUN_PATTERN = re.compile(r"\s*")
_TAG_NAME_RUN_PATTERN = re.compile(r"[^<>\s/]+")
_ATTR_NAME_RUN_PATTERN = re.compile(r"[^<>=\s/]+")
_ATTR_VALUE_UNQUOTED_END_PATTERN = re.compile(r"[>\s]")
_ATTR_VALUE_QUOTE_PATTERNS = {'"': re.compile('"'), "'": re.compile("'")}

# (opener, terminator, kind); openers are compared lowercased
_DECLARATIONS = (
    ("<!doctype", re.compile(">"), TextKind.DOCTYPE),
    ("<!--", re.compile(r"--\s*>"), TextKind.COMMENT),
    ("<![cdata[", re.compile(r"\]\]>"), TextKind.CDATA),
    ("<?", re.compile(r"\?>"), TextKind.PI),
)

_RAW_TEXT_END_PATTERNS = {
    name: re.compile(r"</" + name + r"\s*>", re.IGNORECASE) for name in RAW_TEXT_ELEMENTS | ESCAPABLE_RAW_TEXT_ELEMENTS
}


class TokenizerOpts:
    __slots__ = ("discard_bom",)

    def __init__(self, discard_bom=True):
        self.discard_bom = bool(discard_bom)


class Tokenizer:
    """Scans markup into tokens and feeds them to a sink.

    At each position the tokenizer takes the first construct that applies:
    a run of text, a doctype, a comment, a CDATA section, a processing
    instruction, a start or end tag, and finally a lone ``<`` kept as text.
    Adjacent text is merged and entity-decoded once, when the next non-text
    token is emitted.
    """

    __slots__ = (
        "_dead_attribute_starts",
        "_newline_positions",
        "_search_cache",
        "buffer",
        "collect_errors",
        "errors",
        "length",
        "opts",
        "pos",
        "sink",
        "text_buffer",
        "token_start",
    )

    def __init__(self, sink, opts=None, collect_errors=False):
        self.sink = sink
        self.opts = opts or TokenizerOpts()
        self.collect_errors = collect_errors
        self.errors = []

        self.buffer = ""
        self.length = 0
        self.pos = 0
        self.token_start = 0
        self.text_buffer = []
        self._newline_positions = None
        self._search_cache = {}
        self._dead_attribute_starts = set()

    def initialize(self, html):
        if html and html[0] == "\ufeff" and self.opts.discard_bom:
            html = html[1:]

        self.buffer = html or ""
        self.length = len(self.buffer)
        self.pos = 0
        self.token_start = 0
        self.errors = []
        self.text_buffer.clear()
        self._search_cache.clear()
        self._dead_attribute_starts.clear()

        # Pre-compute newline positions for O(log n) line lookups
        if self.collect_errors:
            self._newline_positions = [i for i, ch in enumerate(self.buffer) if ch == "\n"]
        else:
            self._newline_positions = None

    def run(self, html):
        self.initialize(html)
        while self.pos < self.length:
            self.step()
        self._flush_text()
        self._emit_token(EOFToken())

    def step(self):
        buffer = self.buffer
        pos = self.pos

        if buffer[pos] != "<":
            end = buffer.find("<", pos)
            if end == -1:
                end = self.length
            self._append_text(buffer[pos:end])
            self.pos = end
            return

        if buffer.startswith(("<!", "<?"), pos):
            for opener, terminator, kind in _DECLARATIONS:
                body_start = pos + len(opener)
                if buffer[pos:body_start].lower() != opener:
                    continue
                match = self._search(terminator, body_start)
                if match:
                    data = buffer[body_start : match.start()]
                    if kind is TextKind.DOCTYPE:
                        data = data.rstrip()
                    self._emit_markup(kind, data, match.end())
                    return

        tag = self._scan_tag(pos)
        if tag:
            self._flush_text()
            self.token_start = pos
            self.pos = tag[0]
            self._emit_tag(*tag[1:])
            return

        # Runaway "<"
        self.token_start = pos
        self._emit_error("stray-less-than-sign")
        self._append_text("<")
        self.pos = pos + 1

    def location(self):
        """Return the 1-indexed (line, column) where the last token started."""
        if self._newline_positions is None:
            return None, None
        pos = self.token_start
        line_index = bisect_right(self._newline_positions, pos - 1)
        line_start = self._newline_positions[line_index - 1] + 1 if line_index else 0
        return line_index + 1, pos - line_start + 1

    # ---------------------
    # Helper methods
    # ---------------------

    def _append_text(self, text):
        if not self.text_buffer:
            self.token_start = self.pos
        self.text_buffer.append(text)

    def _flush_text(self):
        if not self.text_buffer:
            return

        # Optimization: Avoid join for single chunk
        if len(self.text_buffer) == 1:
            data = self.text_buffer[0]
        else:
            data = "".join(self.text_buffer)
        self.text_buffer.clear()

        self._emit_token(CharacterTokens(decode_entities_in_text(data)))

    def _search(self, pattern, start):
        """Search ``pattern`` from ``start``, reusing the last search for the same pattern.

        A closing delimiter that is missing from the rest of the document is
        therefore only looked for once, however many openers precede it.
        """
        cached = self._search_cache.get(pattern)
        if cached is not None:
            searched_from, match = cached
            if searched_from <= start and (match is None or start <= match.start()):
                return match
        match = pattern.search(self.buffer, start)
        self._search_cache[pattern] = (start, match)
        return match

    def _skip_whitespace(self, pos):
        return _WHITESPACE_RUN_PATTERN.match(self.buffer, pos).end()

    def _scan_tag(self, pos):
        """Read the start or end tag whose ``<`` is at ``pos``.

        Returns ``(end, is_end_tag, name, attrs, self_closing)``, or None when
        no ``>`` closes the tag. A quoted value ends at its closing quote; a
        quote that is never closed starts an unquoted value instead.
        """
        buffer = self.buffer
        pos = self._skip_whitespace(pos + 1)
        is_end_tag = buffer.startswith("/", pos)
        if is_end_tag:
            pos = self._skip_whitespace(pos + 1)

        match = _TAG_NAME_RUN_PATTERN.match(buffer, pos)
        if not match:
            return None
        name = match.group(0).translate(_ASCII_LOWER_TABLE)
        pos = self._skip_whitespace(match.end())

        attrs = {}
        self_closing = False
        visited = []
        while pos < self.length and pos not in self._dead_attribute_starts:
            if buffer[pos] == ">":
                return pos + 1, is_end_tag, name, attrs, self_closing

            visited.append(pos)
            if buffer[pos] == "/":
                key = "/"
                pos += 1
            else:
                match = _ATTR_NAME_RUN_PATTERN.match(buffer, pos)
                if not match:
                    break
                key = match.group(0).translate(_ASCII_LOWER_TABLE)
                pos = match.end()

            value = None
            pos = self._skip_whitespace(pos)
            if buffer.startswith("=", pos):
                value, pos = self._scan_attribute_value(self._skip_whitespace(pos + 1))
                pos = self._skip_whitespace(pos)

            if key == "/":
                self_closing = True
            else:
                # Later duplicates win
                attrs[key] = value

        # The rest of a tag only depends on where an attribute starts, so any
        # later tag reaching one of these positions fails as well
        self._dead_attribute_starts.update(visited)
        return None

    def _scan_attribute_value(self, pos):
        buffer = self.buffer
        quote = buffer[pos] if pos < self.length else ""
        if quote in _ATTR_VALUE_QUOTE_PATTERNS:
            closing = self._search(_ATTR_VALUE_QUOTE_PATTERNS[quote], pos + 1)
            if closing:
                return self._decode_attribute_value(buffer[pos + 1 : closing.start()]), closing.end()

        match = self._search(_ATTR_VALUE_UNQUOTED_END_PATTERN, pos)
        end = match.start() if match else self.length
        return self._decode_attribute_value(buffer[pos:end]), end

    def _decode_attribute_value(self, value):
        if "&" in value:
            return decode_entities_in_text(value, in_attribute=True)
        return value

    def _emit_markup(self, kind, data, end):
        self._flush_text()
        self.token_start = self.pos
        self.pos = end
        self._emit_token(MarkupToken(kind, data))

    def _emit_tag(self, is_end_tag, name, attrs, self_closing):
        if is_end_tag:
            self._emit_token(Tag(Tag.END, name))
            return

        self._emit_token(Tag(Tag.START, name, attrs, self_closing))

        if name in _RAW_TEXT_END_PATTERNS:
            self._consume_raw_text(name)

    def _consume_raw_text(self, name):
        """Emit everything up to ``</name>`` as one raw token, then the end tag."""
        start = self.pos
        match = _RAW_TEXT_END_PATTERNS[name].search(self.buffer, start)
        if match:
            body = self.buffer[start : match.start()]
            end = match.end()
        else:
            self.token_start = start
            self._emit_error("eof-in-raw-text", name)
            body = self.buffer[start:]
            end = self.length

        if body:
            if name in ESCAPABLE_RAW_TEXT_ELEMENTS:
                body = decode_entities_in_text(body)
            self.token_start = start
            self._emit_token(CharacterTokens(body, raw=True))

        self.token_start = match.start() if match else end
        self.pos = end
        self._emit_token(Tag(Tag.END, name))

    def _emit_token(self, token):
        self.sink.process_token(token)

    def _emit_error(self, code, tag_name=None):
        if not self.collect_errors:
            return
        line, column = self.location()
        message = generate_error_message(code, tag_name)
        self.errors.append(ParseError(code, line=line, column=column, message=message))
