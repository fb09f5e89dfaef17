from __future__ import annotations

import enum
from typing import Literal


class TextKind(enum.Enum):
    """Subtype of a text node (and of the token that produced it)."""

    TEXT = "text"
    RAW = "raw"
    DOCTYPE = "doctype"
    COMMENT = "comment"
    CDATA = "cdata"
    PI = "pi"


class Tag:
    __slots__ = ("attrs", "kind", "name", "self_closing")

    START: Literal[0] = 0
    END: Literal[1] = 1

    kind: int
    name: str
    attrs: dict[str, str | None]
    self_closing: bool

    def __init__(
        self,
        kind: int,
        name: str,
        attrs: dict[str, str | None] | None = None,
        self_closing: bool = False,
    ) -> None:
        self.kind = kind
        self.name = name
        self.attrs = attrs if attrs is not None else {}
        self.self_closing = bool(self_closing)

    def __repr__(self) -> str:
        slash = "/" if self.kind == Tag.END else ""
        return f"Tag(<{slash}{self.name}>, attrs={self.attrs!r})"


class CharacterTokens:
    """A run of character data; ``raw`` marks the body of a raw text element."""

    __slots__ = ("data", "raw")

    data: str
    raw: bool

    def __init__(self, data: str, raw: bool = False) -> None:
        self.data = data
        self.raw = raw


class MarkupToken:
    """Doctype, comment, CDATA section or processing instruction."""

    __slots__ = ("data", "kind")

    kind: TextKind
    data: str

    def __init__(self, kind: TextKind, data: str) -> None:
        self.kind = kind
        self.data = data


class EOFToken:
    __slots__ = ()


class ParseError:
    """A recovery the parser performed.

    ``line`` and ``column`` are 1-indexed and point at the start of the token
    that triggered the recovery. Two errors are equal when their code and
    location agree; the message is only for display.
    """

    __slots__ = ("code", "column", "line", "message")

    code: str
    line: int | None
    column: int | None
    message: str

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        code: str,
        line: int | None = None,
        column: int | None = None,
        message: str | None = None,
    ) -> None:
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code

    @property
    def location(self) -> tuple[int, int] | None:
        if self.line is None or self.column is None:
            return None
        return self.line, self.column

    def __repr__(self) -> str:
        return f"ParseError({self.code!r}, location={self.location!r})"

    def __str__(self) -> str:
        text = self.code if self.message == self.code else f"{self.code} ({self.message})"
        if self.location is None:
            return text
        return "line {}, column {}: {}".format(*self.location, text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.code, self.location) == (other.code, other.location)
