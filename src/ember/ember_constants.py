"""
Shared lexical tables for the EMBER language front end.

Exports:
    DEFAULT_CAPACITY: Lookahead capacity used when none is supplied.
    token_hashmap: Single-character symbols mapped to their token kind names.
    RESERVED_WORDS: Identifiers that open a statement.
"""

DEFAULT_CAPACITY = 16

token_hashmap: dict[str, str] = {
    "=": "EQUALS",
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    "/": "SLASH",
    "%": "PERCENT",
    "^": "CARET",
    "&": "AMPERSAND",
    ";": "SEMICOLON",
    "<": "LESS_THAN",
    "{": "LBRACE",
    "}": "RBRACE",
    "(": "LPAREN",
    ")": "RPAREN",
}

# '>' is resolved by the lexer: ">>" is a pipe, a lone '>' is GREATER_THAN
PIPE_CHAR = ">"
STRING_DELIMITER = '"'

LET = "let"
RESERVED_WORDS = frozenset({LET})

# each parenthesized group costs several Python frames in the parser
MAX_NESTING_DEPTH = 100
