"""
Interactive read-parse-print loop for EMBER.

Each line entered is parsed as a complete program and every resulting
statement is printed. Errors are reported and the loop continues.
"""

from ember.ember_constants import DEFAULT_CAPACITY
from ember.ember_errors import EmberError
from ember.ember_parser import parse

PROMPT = "ember> "
EXIT_COMMANDS = {"exit", "quit"}


def eval_line(src: str, capacity: int = DEFAULT_CAPACITY) -> list[str]:
    """Parses one line and returns the lines to print for it."""
    try:
        program = parse(src, capacity)
    except EmberError as e:
        return [f"[error] >>> {e}"]
    return [repr(stmt) for stmt in program]


def start_repl(capacity: int = DEFAULT_CAPACITY) -> None:
    print("EMBER REPL. Type 'exit' or 'quit' to leave.")
    while True:
        try:
            src = input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if src.strip() in EXIT_COMMANDS:
            break
        if not src.strip():
            continue

        for line in eval_line(src, capacity):
            print(line)
