"""
Lexical analyzer for the EMBER programming language.

This module converts a `CharacterStream` into position-tagged tokens:

Classes:
    Position: Immutable 1-based (row, col) location in the source.
    TokenKind: Every kind of token the lexer can emit.
    Token: A single token with kind, payload text and start position.
    Lexer: Pulls characters and produces tokens with one-token lookahead.

Features:
    - Skips whitespace while tracking rows and columns
    - Recognizes `>>` as a single pipe token (longest match over `>`)
    - Recognizes:
        * Identifiers (alphabetic, then alphanumeric)
        * Number literals (runs of decimal digits, kept as raw text)
        * String literals (double-quoted, no escape processing)
        * Single-character operators and punctuation
    - Past the end of input the lexer keeps yielding `END`

Raises:
    UnrecognizedCharacterError: For any character outside the table above.

Example:
    >>> lexer = Lexer.from_source("let x = 42;")
    >>> lexer.next_token()
    Token(IDENTIFIER, let)

Exports:
    - Position
    - TokenKind
    - Token
    - Lexer
    - tokenize
    - lex_source
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from os import PathLike

from ember.ember_constants import (
    DEFAULT_CAPACITY,
    PIPE_CHAR,
    STRING_DELIMITER,
    token_hashmap,
)
from ember.ember_errors import UnrecognizedCharacterError
from ember.ember_reader import CharacterStream, Source


@dataclass(frozen=True, order=True)
class Position:
    """A 1-based location in the source text.

    Attributes:
        row (int): Line number, incremented on every consumed newline.
        col (int): Column number, reset to 1 after a newline.
    """

    row: int = 1
    col: int = 1

    def advance(self, char: str) -> Position:
        """Returns the position that follows consuming `char`."""
        if char == "\n":
            return Position(self.row + 1, 1)
        return Position(self.row, self.col + 1)

    def __str__(self) -> str:
        return f"{self.row}:{self.col}"


class TokenKind(Enum):
    EQUALS = "EQUALS"
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"
    PERCENT = "PERCENT"
    CARET = "CARET"
    AMPERSAND = "AMPERSAND"
    SEMICOLON = "SEMICOLON"
    LESS_THAN = "LESS_THAN"
    GREATER_THAN = "GREATER_THAN"
    PIPE = "PIPE"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    IDENTIFIER = "IDENTIFIER"
    NUMBER_LITERAL = "NUMBER_LITERAL"
    STRING_LITERAL = "STRING_LITERAL"
    END = "END"


PAYLOAD_KINDS = frozenset(
    {TokenKind.IDENTIFIER, TokenKind.NUMBER_LITERAL, TokenKind.STRING_LITERAL}
)


@dataclass(frozen=True)
class Token:
    """Represents a single lexical token in the EMBER language.

    Attributes:
        kind (TokenKind): The token's kind.
        value (str | None): Raw text for identifiers, numbers and strings; None otherwise.
        position (Position): Where the token's first character sits.
    """

    kind: TokenKind
    value: str | None = None
    position: Position = field(default_factory=Position)

    @property
    def line(self) -> int:
        return self.position.row

    @property
    def col(self) -> int:
        return self.position.col

    def __repr__(self) -> str:
        if self.kind in PAYLOAD_KINDS:
            return f"Token({self.kind.name}, {self.value})"
        return f"Token({self.kind.name})"


class Lexer:
    """Lexical analyzer for the EMBER language.

    The lexer holds at most one already-computed token. `peek_token()` fills
    that slot on demand; `next_token()` hands it out and clears it so the
    following peek lexes a fresh token.

    Attributes:
        stream (CharacterStream): The source of characters.
        position (Position): The cursor position of the next unconsumed character.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream
        self.position = Position()
        self._peeked: Token | None = None

    @classmethod
    def from_source(cls, source: Source, capacity: int = DEFAULT_CAPACITY) -> Lexer:
        """Builds a lexer over text, bytes or a readable."""
        return cls(CharacterStream(source, capacity))

    def peek(self) -> str | None:
        return self.stream.peek()

    def advance(self) -> str | None:
        """Consumes one character and moves the cursor past it."""
        char = self.stream.next()
        if char is not None:
            self.position = self.position.advance(char)
        return char

    def skip_whitespace(self) -> None:
        while (ch := self.peek()) is not None and ch.isspace():
            self.advance()

    def read_while(self, predicate: Callable[[str], bool]) -> str:
        """Consumes the longest run of characters satisfying `predicate`."""
        text = ""
        while (ch := self.peek()) is not None and predicate(ch):
            text += self.advance() or ""
        return text

    def read_string(self) -> str:
        """Consumes a string literal after its opening quote.

        An unterminated literal runs to the end of input and yields what was read.
        """
        text = ""
        while (ch := self.advance()) is not None and ch != STRING_DELIMITER:
            text += ch
        return text

    def lex_token(self) -> Token:
        """Classifies the characters at the cursor into one token.

        Raises:
            UnrecognizedCharacterError: If the next character starts no token.
        """
        self.skip_whitespace()
        start = self.position
        ch = self.peek()

        if ch is None:
            return Token(TokenKind.END, position=start)

        # 1. Identifier
        if ch.isalpha():
            return Token(TokenKind.IDENTIFIER, self.read_while(str.isalnum), start)

        # 2. Number
        if ch.isdecimal():
            return Token(TokenKind.NUMBER_LITERAL, self.read_while(str.isdecimal), start)

        # 3. String
        if ch == STRING_DELIMITER:
            self.advance()
            return Token(TokenKind.STRING_LITERAL, self.read_string(), start)

        # 4. '>' or '>>'
        if ch == PIPE_CHAR:
            self.advance()
            if self.peek() == PIPE_CHAR:
                self.advance()
                return Token(TokenKind.PIPE, position=start)
            return Token(TokenKind.GREATER_THAN, position=start)

        # 5. Single-character symbol
        if ch in token_hashmap:
            self.advance()
            return Token(TokenKind[token_hashmap[ch]], position=start)

        raise UnrecognizedCharacterError(ch, start)

    def peek_token(self) -> Token:
        """Returns the next token without consuming it."""
        if self._peeked is None:
            self._peeked = self.lex_token()
        return self._peeked

    def next_token(self) -> Token:
        """Consumes and returns the next token; yields END forever once exhausted."""
        token = self.peek_token()
        self._peeked = None
        return token

    def __iter__(self) -> Iterator[Token]:
        """Yields every remaining token up to and including the first END."""
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.END:
                return


def tokenize(source: Source, capacity: int = DEFAULT_CAPACITY) -> list[Token]:
    """Lexes a whole source into a list of tokens terminated by a single END."""
    return list(Lexer.from_source(source, capacity))


def lex_source(
    path: str | PathLike[str], capacity: int = DEFAULT_CAPACITY
) -> list[Token]:
    """Opens a source file and lexes its full contents."""
    with open(path, "rb") as f:
        return tokenize(f, capacity)


__all__ = [
    "Lexer",
    "Position",
    "Token",
    "TokenKind",
    "lex_source",
    "tokenize",
]
