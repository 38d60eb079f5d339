"""
EMBER CLI Entrypoint.

This module provides the command-line interface for the EMBER front end.
It lexes and parses a source and prints the resulting token stream or AST.

Features:
    - Read source from `.ember` files or inline strings.
    - Print the parsed AST, one statement per line, or as JSON.
    - Dump the raw token stream with positions instead of parsing.
    - Launch an interactive REPL.

Example usage:
    ember program.ember
    ember -s "let x = 1 + 2;" --json
    ember program.ember --tokens
    ember --repl --verbose

Functions:
    run_ember(source: str, is_string: bool = False, tokens: bool = False,
              as_json: bool = False, capacity: int = DEFAULT_CAPACITY) -> None:
        Executes the front-end pipeline (read → lex → parse → print).

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import sys

from ember.ember_constants import DEFAULT_CAPACITY
from ember.ember_errors import EmberError
from ember.ember_lexer import Lexer, Token
from ember.ember_parser import Parser

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".ember"


def format_token(tok: Token) -> str:
    return f"{tok.position!s:>7}  {tok!r}"


def run_ember(
    source: str,
    is_string: bool = False,
    tokens: bool = False,
    as_json: bool = False,
    capacity: int = DEFAULT_CAPACITY,
) -> None:
    """
    Run the EMBER front end and print its output.

    Args:
        source (str): EMBER source code or path to a `.ember` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        tokens (bool): If True, prints the token stream instead of the AST.
        as_json (bool): If True, prints the AST as JSON.
        capacity (int): Lookahead capacity of the character buffer.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.ember'.
        EmberError: If the source cannot be decoded, lexed or parsed.
    """
    if not is_string and not source.endswith(SOURCE_SUFFIX):
        raise ValueError(f"Only {SOURCE_SUFFIX} files are supported.")

    if is_string:
        lexer = Lexer.from_source(source, capacity)
        _emit(lexer, tokens, as_json)
    else:
        logger.info("Reading %s", source)
        with open(source, "rb") as f:
            _emit(Lexer.from_source(f, capacity), tokens, as_json)


def _emit(lexer: Lexer, tokens: bool, as_json: bool) -> None:
    if tokens:
        for tok in lexer:
            print(format_token(tok))
        return

    program = Parser(lexer).parse()
    logger.info("Parsed %d statement(s)", len(program))
    if as_json:
        try:
            text = json.dumps(program.to_dict(), indent=2)
        except RecursionError as e:
            raise EmberError("AST nests too deeply to encode as JSON") from e
        print(text)
    else:
        for stmt in program:
            print(repr(stmt))


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the EMBER CLI.

    Dispatches to the REPL when no source is given or `--repl` is passed,
    otherwise runs the front end over the source.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print the token stream instead of the AST.
        - `--json`: Print the AST as JSON.
        - `--capacity`: Lookahead capacity of the character buffer.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Enable debug logging.

    Returns:
        int: Process exit code, 1 when the source fails to lex or parse.
    """
    parser = argparse.ArgumentParser(prog="ember")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print tokens instead of the AST"
    )
    parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Print the AST as JSON"
    )
    parser.add_argument(
        "--capacity",
        type=int,
        default=DEFAULT_CAPACITY,
        help=f"Lookahead buffer capacity (default: {DEFAULT_CAPACITY})",
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    if args.capacity < 1:
        parser.error("--capacity must be at least 1")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.repl or args.source is None:
        from ember.ember_repl import start_repl

        start_repl(capacity=args.capacity)
        return 0

    try:
        run_ember(
            source=args.source,
            is_string=args.string,
            tokens=args.tokens,
            as_json=args.as_json,
            capacity=args.capacity,
        )
    except (EmberError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
