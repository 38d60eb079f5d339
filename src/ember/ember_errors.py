"""
Error hierarchy for the EMBER front end.

Every failure raised by the reader, lexer or parser is fatal and derives from
`EmberError`, so a caller can catch the whole family with one clause:

    try:
        program = parse(source)
    except EmberError as e:
        print(f"error: {e}")

Hierarchy:
    EmberError
    ├── DecodingError - input bytes are not valid UTF-8
    └── EmberSyntaxError (also a SyntaxError)
        ├── UnrecognizedCharacterError - the lexer cannot classify a character
        ├── ExpectedTokenError - a specific token kind was required
        ├── UnexpectedTokenError - no grammar rule applies to the lookahead
        └── NestingTooDeepError - parenthesized groups exceed the depth limit
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ember.ember_lexer import Position, TokenKind


class EmberError(Exception):
    """Base class for all EMBER front-end errors."""


class DecodingError(EmberError):
    """Raised when the underlying byte stream is not valid UTF-8."""


class EmberSyntaxError(SyntaxError, EmberError):
    """A lexical or grammatical fault, optionally tagged with a source position.

    Attributes:
        message (str): Description without location.
        position (Position | None): Where the fault was detected.
    """

    def __init__(self, message: str, position: Position | None = None) -> None:
        self.message = message
        self.position = position
        if position is not None:
            message = f"{message} at line {position.row}, col {position.col}"
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.args[0])


class UnrecognizedCharacterError(EmberSyntaxError):
    """Raised by the lexer for a character outside the recognition table."""

    def __init__(self, char: str, position: Position | None = None) -> None:
        self.char = char
        super().__init__(f"Unrecognized character {char!r}", position)


class ExpectedTokenError(EmberSyntaxError):
    """Raised when the parser requires one token kind and observes another.

    Attributes:
        expected (TokenKind): The kind the grammar required.
        found (TokenKind): The kind actually at the lookahead.
    """

    def __init__(
        self, expected: TokenKind, found: TokenKind, position: Position | None = None
    ) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"Expected token {expected.name}, found {found.name}", position
        )


class UnexpectedTokenError(EmberSyntaxError):
    """Raised when no grammar rule matches the current lookahead token."""

    def __init__(
        self, found: TokenKind, position: Position | None = None, context: str = ""
    ) -> None:
        self.found = found
        self.context = context
        where = f" in {context}" if context else ""
        super().__init__(f"Unexpected token {found.name}{where}", position)


class NestingTooDeepError(EmberSyntaxError):
    """Raised when parenthesized groups nest deeper than the parser allows."""

    def __init__(self, limit: int, position: Position | None = None) -> None:
        self.limit = limit
        super().__init__(
            f"Expression nested too deeply (more than {limit} groups)", position
        )


__all__ = [
    "DecodingError",
    "EmberError",
    "EmberSyntaxError",
    "ExpectedTokenError",
    "NestingTooDeepError",
    "UnexpectedTokenError",
    "UnrecognizedCharacterError",
]
