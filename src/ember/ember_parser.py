"""
EMBER Language Parser

Parses EMBER tokens into a `Program` of statements.

This module implements a recursive-descent parser with explicit precedence
levels. Tokens are pulled one at a time through the lexer's single-token
lookahead, and every rule picks its production from that lookahead alone.

Grammar
-------
    Program   := Stmt* End
    Stmt      := LetDecl
    LetDecl   := "let" Identifier "=" Expr ";"
    Expr      := Term
    Term      := Factor ( ("+" | "-") Factor )*
    Factor    := Primary ( ("*" | "/") Primary )*
    Primary   := NumberLiteral | StringLiteral | Identifier | "(" Expr ")"

`Term` and `Factor` fold left-to-right, so both levels are left-associative
and multiplication binds tighter than addition. A parenthesized group resets
precedence back to `Expr`.

Entry Points
------------
- `Parser.parse()`: Parse a full program.
- `Parser.parse_statement()`: Parse one `let` declaration.
- `Parser.parse_expression()`: Parse one expression.
- `parse()` / `parse_file()`: Lex and parse a source or a file in one call.

Raises
------
ExpectedTokenError
    When a specific token kind is required (`=`, `;`, `)`, the bound name) and
    the lookahead is something else.
UnexpectedTokenError
    When no statement or primary expression starts with the lookahead.
NestingTooDeepError
    When parenthesized groups nest deeper than MAX_NESTING_DEPTH.

Every error is fatal; there is no resynchronization.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from os import PathLike

from ember.ember_ast import BinaryOp, Expr, Program, Stmt
from ember.ember_constants import DEFAULT_CAPACITY, LET, MAX_NESTING_DEPTH
from ember.ember_errors import (
    ExpectedTokenError,
    NestingTooDeepError,
    UnexpectedTokenError,
)
from ember.ember_lexer import Lexer, Token, TokenKind
from ember.ember_reader import Source

logger = logging.getLogger(__name__)

TERM_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.PLUS: BinaryOp.ADD,
    TokenKind.MINUS: BinaryOp.SUBTRACT,
}

FACTOR_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.STAR: BinaryOp.MULTIPLY,
    TokenKind.SLASH: BinaryOp.DIVIDE,
}


class Parser:
    """
    EMBER Parser Class

    Transforms the token stream of a `Lexer` into a `Program`.

    Attributes
    ----------
    lexer : Lexer
        The token source; only its `peek_token()` and `next_token()` are used.
    depth : int
        Number of parenthesized groups currently open.
    """

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.depth = 0

    def current(self) -> Token:
        return self.lexer.peek_token()

    def advance(self) -> Token:
        return self.lexer.next_token()

    def expect(self, kind: TokenKind) -> Token:
        """Consumes the lookahead if it is `kind`, otherwise raises ExpectedTokenError."""
        tok = self.current()
        if tok.kind is not kind:
            raise ExpectedTokenError(kind, tok.kind, tok.position)
        return self.advance()

    def is_keyword(self, tok: Token, word: str) -> bool:
        return tok.kind is TokenKind.IDENTIFIER and tok.value == word

    def parse(self) -> Program:
        """Parse statements until END and return them as a Program."""
        stmts: list[Stmt] = []
        while self.current().kind is not TokenKind.END:
            stmt = self.parse_statement()
            logger.debug("Parsed statement at line %d: %r", stmt.line, stmt)
            stmts.append(stmt)
        return Program(tuple(stmts))

    def parse_statement(self) -> Stmt:
        tok = self.current()
        if self.is_keyword(tok, LET):
            return self.parse_let()
        raise UnexpectedTokenError(tok.kind, tok.position, "statement")

    def parse_let(self) -> Stmt:
        """
        Let declaration:
        let x = 1 + 2;
        """
        let_tok = self.advance()
        name_tok = self.expect(TokenKind.IDENTIFIER)
        self.expect(TokenKind.EQUALS)
        value = self.parse_expression()
        self.expect(TokenKind.SEMICOLON)

        assert name_tok.value is not None  # for mypy
        return Stmt.let_decl(
            name_tok.value, value, line=let_tok.line, col=let_tok.col
        )

    def parse_expression(self) -> Expr:
        return self.parse_term()

    def parse_binary_level(
        self, ops: dict[TokenKind, BinaryOp], operand: Callable[[], Expr]
    ) -> Expr:
        """Folds `operand (op operand)*` to the left for the operators in `ops`."""
        expr: Expr = operand()
        while self.current().kind in ops:
            op = ops[self.advance().kind]
            right = operand()
            expr = Expr.binary(op, expr, right, line=expr.line, col=expr.col)
        return expr

    def parse_term(self) -> Expr:
        return self.parse_binary_level(TERM_OPS, self.parse_factor)

    def parse_factor(self) -> Expr:
        return self.parse_binary_level(FACTOR_OPS, self.parse_primary)

    def parse_primary(self) -> Expr:
        tok = self.current()

        if tok.kind is TokenKind.NUMBER_LITERAL:
            self.advance()
            return Expr.num_lit(float(tok.value or 0), line=tok.line, col=tok.col)

        if tok.kind is TokenKind.STRING_LITERAL:
            self.advance()
            return Expr.str_lit(tok.value or "", line=tok.line, col=tok.col)

        if tok.kind is TokenKind.IDENTIFIER:
            self.advance()
            return Expr.reference(tok.value or "", line=tok.line, col=tok.col)

        if tok.kind is TokenKind.LPAREN:
            if self.depth >= MAX_NESTING_DEPTH:
                raise NestingTooDeepError(MAX_NESTING_DEPTH, tok.position)
            self.advance()
            self.depth += 1
            inner = self.parse_expression()
            self.depth -= 1
            self.expect(TokenKind.RPAREN)
            return Expr.group(inner, line=tok.line, col=tok.col)

        raise UnexpectedTokenError(tok.kind, tok.position, "expression")


def parse(source: Source, capacity: int = DEFAULT_CAPACITY) -> Program:
    """Lex and parse a source (text, bytes or readable) into a Program."""
    return Parser(Lexer.from_source(source, capacity)).parse()


def parse_file(path: str | PathLike[str], capacity: int = DEFAULT_CAPACITY) -> Program:
    """Lex and parse the contents of a source file."""
    with open(path, "rb") as f:
        return parse(f, capacity)


__all__ = ["Parser", "parse", "parse_file"]
