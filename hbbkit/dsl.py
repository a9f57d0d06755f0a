"""A small DSL for typing text with modifier keys, e.g. ``{+SHIFT}hi{-SHIFT}``."""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Union

from .keys import Key, KeyboardControllable, Layout


class ParseError(ValueError):
    """The DSL input could not be parsed."""


class UnknownTagError(ParseError):
    """A ``{TAG}`` names no known tag."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"Unknown tag: {tag}")
        self.tag = tag

    def __eq__(self, other: object) -> bool:
        return isinstance(other, UnknownTagError) and other.tag == self.tag

    def __hash__(self) -> int:
        return hash(self.tag)


class UnexpectedOpenError(ParseError):
    """An unescaped ``{`` appeared inside a tag name."""

    def __init__(self) -> None:
        super().__init__("Unescaped open bracket ({) found inside tag name")


class UnmatchedOpenError(ParseError):
    """A ``{`` was never closed."""

    def __init__(self) -> None:
        super().__init__("Unmatched open bracket ({). No matching close (})")


class UnmatchedCloseError(ParseError):
    """A ``}`` appeared with no preceding ``{``."""

    def __init__(self) -> None:
        super().__init__("Unmatched close bracket (}). No previous open ({)")


class TokenKind(Enum):
    SEQUENCE = auto()
    UNICODE = auto()
    KEY_UP = auto()
    KEY_DOWN = auto()


@dataclass(frozen=True)
class Token:
    """One step of a parsed DSL string: text to type or a key to press/release."""

    kind: TokenKind
    value: Union[str, Key]


_TAGS = {
    "+SHIFT": (TokenKind.KEY_DOWN, Key.SHIFT),
    "-SHIFT": (TokenKind.KEY_UP, Key.SHIFT),
    "+CTRL": (TokenKind.KEY_DOWN, Key.CONTROL),
    "-CTRL": (TokenKind.KEY_UP, Key.CONTROL),
    "+META": (TokenKind.KEY_DOWN, Key.META),
    "-META": (TokenKind.KEY_UP, Key.META),
    "+ALT": (TokenKind.KEY_DOWN, Key.ALT),
    "-ALT": (TokenKind.KEY_UP, Key.ALT),
}


class _Scanner:
    def __init__(self, text: str) -> None:
        self._chars: Iterator[str] = iter(text)
        self._pending: Optional[str] = None
        self._has_pending = False

    def next(self) -> Optional[str]:
        if self._has_pending:
            self._has_pending = False
            return self._pending
        return next(self._chars, None)

    def peek(self) -> Optional[str]:
        if not self._has_pending:
            self._pending = next(self._chars, None)
            self._has_pending = True
        return self._pending


def _read_tag(scanner: _Scanner, first: str) -> str:
    tag = []
    c = first
    while True:
        tag.append(c)
        nxt = scanner.next()
        if nxt == "{":
            if scanner.peek() != "{":
                raise UnexpectedOpenError()
            scanner.next()
            c = "{"
        elif nxt == "}":
            if scanner.peek() != "}":
                return "".join(tag)
            scanner.next()
            c = "}"
        elif nxt is None:
            raise UnmatchedOpenError()
        else:
            c = nxt


def tokenize(text: str) -> list[Token]:
    """Split DSL text into tokens, raising a :class:`ParseError` on bad input."""
    tokens: list[Token] = []
    buffer: list[str] = []
    unicode = False

    def flush() -> None:
        if buffer:
            kind = TokenKind.UNICODE if unicode else TokenKind.SEQUENCE
            tokens.append(Token(kind, "".join(buffer)))
            buffer.clear()

    scanner = _Scanner(text)
    while (c := scanner.next()) is not None:
        if c == "{":
            nxt = scanner.next()
            if nxt is None:
                raise UnmatchedOpenError()
            if nxt == "{":
                buffer.append("{")
                continue
            flush()
            tag = _read_tag(scanner, nxt)
            if tag == "+UNICODE":
                unicode = True
            elif tag == "-UNICODE":
                unicode = False
            elif tag in _TAGS:
                kind, key = _TAGS[tag]
                tokens.append(Token(kind, key))
            else:
                raise UnknownTagError(tag)
        elif c == "}":
            if scanner.next() != "}":
                raise UnmatchedCloseError()
            buffer.append("}")
        else:
            buffer.append(c)

    flush()
    return tokens


def evaluate(controller: KeyboardControllable, text: str) -> None:
    """Parse ``text`` and drive ``controller`` with the resulting key events.

    The whole input is parsed before any event is sent. Failures of
    ``key_down`` are ignored.
    """
    for token in tokenize(text):
        if token.kind is TokenKind.SEQUENCE:
            for ch in token.value:
                controller.key_click(Layout(ch))
        elif token.kind is TokenKind.UNICODE:
            controller.key_sequence(token.value)
        elif token.kind is TokenKind.KEY_UP:
            controller.key_up(token.value)
        else:
            with suppress(Exception):
                controller.key_down(token.value)