import io
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ember.ember_ast import BinaryOp, Expr, ExprKind, Program, Stmt
from ember.ember_errors import (
    EmberError,
    ExpectedTokenError,
    NestingTooDeepError,
    UnexpectedTokenError,
    UnrecognizedCharacterError,
)
from ember.ember_lexer import Lexer, Position, TokenKind
from ember.ember_parser import Parser, parse, parse_file


def num(value: float) -> Expr:
    return Expr.num_lit(value)


def binary(op: BinaryOp, left: Expr, right: Expr) -> Expr:
    return Expr.binary(op, left, right)


def parse_expr(source: str) -> Expr:
    return Parser(Lexer.from_source(source)).parse_expression()


def prune(node: Any) -> Any:
    """Remove line/col from a serialized tree."""
    if isinstance(node, list):
        return [prune(n) for n in node]
    if isinstance(node, dict):
        return {k: prune(v) for k, v in node.items() if k not in ("line", "col")}
    return node


def test_basic_decl() -> None:
    assert parse("let x = 1;") == Program((Stmt.let_decl("x", num(1)),))


@pytest.mark.parametrize(
    "source,expected",
    [
        ("let x = 1 + 2;", binary(BinaryOp.ADD, num(1), num(2))),
        ("let x = 1 - 2;", binary(BinaryOp.SUBTRACT, num(1), num(2))),
        ("let x = 6 / 3;", binary(BinaryOp.DIVIDE, num(6), num(3))),
        ("let x = 2 * 3;", binary(BinaryOp.MULTIPLY, num(2), num(3))),
        ('let x = "hi";', Expr.str_lit("hi")),
        ("let x = y;", Expr.reference("y")),
        ("let x = (y);", Expr.group(Expr.reference("y"))),
    ],
)  # type: ignore[misc]
def test_single_let_values(source: str, expected: Expr) -> None:
    program = parse(source)
    assert len(program) == 1
    assert program[0].name == "x"
    assert program[0].value == expected


def test_multiply_binds_tighter_than_add() -> None:
    program = parse("let x = 1 + 2 * 3;")
    assert program == Program(
        (
            Stmt.let_decl(
                "x",
                binary(BinaryOp.ADD, num(1), binary(BinaryOp.MULTIPLY, num(2), num(3))),
            ),
        )
    )


def test_addition_is_left_associative() -> None:
    assert parse_expr("1 - 2 + 3") == binary(
        BinaryOp.ADD, binary(BinaryOp.SUBTRACT, num(1), num(2)), num(3)
    )


def test_division_is_left_associative() -> None:
    assert parse_expr("8 / 4 * 2") == binary(
        BinaryOp.MULTIPLY, binary(BinaryOp.DIVIDE, num(8), num(4)), num(2)
    )


def test_group_resets_precedence() -> None:
    assert parse_expr("(1 + 2) * 3") == binary(
        BinaryOp.MULTIPLY,
        Expr.group(binary(BinaryOp.ADD, num(1), num(2))),
        num(3),
    )


def test_nested_groups() -> None:
    assert parse_expr("((a))") == Expr.group(Expr.group(Expr.reference("a")))


def test_multiline_program_keeps_order_and_rows() -> None:
    program = parse("let x = 1;\nlet y = 2 + 2;")
    assert program == Program(
        (
            Stmt.let_decl("x", num(1)),
            Stmt.let_decl("y", binary(BinaryOp.ADD, num(2), num(2))),
        )
    )
    assert (program[0].line, program[0].col) == (1, 1)
    assert program[1].line == 2
    value = program[1].value
    assert value is not None
    assert (value.left.line, value.left.col) == (2, 9)
    assert (value.right.line, value.right.col) == (2, 13)


def test_empty_program() -> None:
    assert parse("") == Program()
    assert parse("  \n\t ") == Program()


def test_to_dict_shape() -> None:
    assert prune(parse("let s = a * 2;").to_dict()) == [
        {
            "kind": "let_decl",
            "value": "s",
            "children": [
                {
                    "kind": "binary",
                    "value": None,
                    "op": "MULTIPLY",
                    "children": [
                        {"kind": "reference", "value": "a", "op": None, "children": []},
                        {"kind": "num_lit", "value": 2.0, "op": None, "children": []},
                    ],
                }
            ],
        }
    ]


def test_missing_semicolon() -> None:
    with pytest.raises(ExpectedTokenError) as excinfo:
        parse("let x = 1")
    assert excinfo.value.expected is TokenKind.SEMICOLON
    assert excinfo.value.found is TokenKind.END
    assert "Expected token SEMICOLON, found END" in str(excinfo.value)


def test_missing_closing_paren() -> None:
    with pytest.raises(ExpectedTokenError) as excinfo:
        parse("let x = (1 + 2")
    assert excinfo.value.expected is TokenKind.RPAREN
    assert excinfo.value.found is TokenKind.END


def test_missing_equals() -> None:
    with pytest.raises(ExpectedTokenError) as excinfo:
        parse("let x 1;")
    assert excinfo.value.expected is TokenKind.EQUALS
    assert excinfo.value.found is TokenKind.NUMBER_LITERAL
    assert excinfo.value.position == Position(1, 7)


def test_let_requires_identifier() -> None:
    with pytest.raises(ExpectedTokenError) as excinfo:
        parse("let 5 = 1;")
    assert excinfo.value.expected is TokenKind.IDENTIFIER


def test_non_let_statement_is_unexpected() -> None:
    with pytest.raises(UnexpectedTokenError) as excinfo:
        parse("x = 1;")
    assert excinfo.value.found is TokenKind.IDENTIFIER
    assert "in statement" in str(excinfo.value)


def test_stray_token_at_statement_start() -> None:
    with pytest.raises(UnexpectedTokenError, match="SEMICOLON"):
        parse("let x = 1;;")


def test_unexpected_token_in_primary() -> None:
    with pytest.raises(UnexpectedTokenError) as excinfo:
        parse("let x = 1 + ;")
    assert excinfo.value.found is TokenKind.SEMICOLON
    assert excinfo.value.position == Position(1, 13)


def test_pipe_is_not_parsed_as_an_operator() -> None:
    with pytest.raises(ExpectedTokenError) as excinfo:
        parse("let x = a >> b;")
    assert excinfo.value.found is TokenKind.PIPE


def test_errors_are_syntax_errors() -> None:
    with pytest.raises(SyntaxError):
        parse("let x = 1")


def test_lex_errors_propagate_through_parser() -> None:
    with pytest.raises(UnrecognizedCharacterError):
        parse("let x = 1 ! 2;")


def test_second_statement_error_reports_row_two() -> None:
    with pytest.raises(ExpectedTokenError) as excinfo:
        parse("let a = 1;\nlet b = 2")
    assert excinfo.value.position is not None
    assert excinfo.value.position.row == 2


def test_parse_from_readable_and_bytes() -> None:
    expected = Program((Stmt.let_decl("x", num(1)),))
    assert parse(io.BytesIO(b"let x = 1;"), capacity=1) == expected
    assert parse(b"let x = 1;") == expected


def test_parse_file(ember_file: Callable[[str], Path]) -> None:
    path = ember_file('let greeting = "hello";\nlet n = greeting;\n')
    program = parse_file(path)
    assert [s.name for s in program] == ["greeting", "n"]
    assert program[1].value == Expr.reference("greeting")


def test_parser_stops_at_end_without_consuming_past_it() -> None:
    lexer = Lexer.from_source("let x = 1;")
    Parser(lexer).parse()
    assert lexer.peek_token().kind is TokenKind.END


@given(st.lists(st.integers(min_value=0, max_value=999), min_size=1, max_size=10))  # type: ignore[misc]
def test_sum_chain_folds_left(values: list[int]) -> None:
    source = " + ".join(str(v) for v in values)
    expected = num(values[0])
    for v in values[1:]:
        expected = binary(BinaryOp.ADD, expected, num(v))
    assert parse_expr(source) == expected


@given(
    st.lists(
        st.tuples(
            st.from_regex(r"[a-z][a-z0-9]{0,5}", fullmatch=True),
            st.integers(min_value=0, max_value=10**6),
        ),
        max_size=10,
    )
)  # type: ignore[misc]
def test_statement_count_matches_source(decls: list[tuple[str, int]]) -> None:
    source = "\n".join(f"let {name} = {value};" for name, value in decls)
    program = parse(source)
    assert [(s.name, s.value) for s in program] == [
        (name, num(value)) for name, value in decls
    ]
    assert [s.line for s in program] == list(range(1, len(decls) + 1))


def nested(depth: int) -> str:
    return "let x = " + "(" * depth + "1" + ")" * depth + ";"


def test_deep_nesting_raises_syntax_error() -> None:
    with pytest.raises(NestingTooDeepError) as excinfo:
        parse(nested(1000))
    err = excinfo.value
    assert isinstance(err, EmberError)
    assert isinstance(err, SyntaxError)
    assert err.limit == 100
    # the 101st "(" after "let x = "
    assert err.position == Position(1, 109)
    assert "nested too deeply" in str(err)


def test_nesting_up_to_limit_parses() -> None:
    value = parse(nested(100))[0].value
    assert value is not None
    depth = 0
    while value.kind is ExprKind.GROUP:
        depth += 1
        value = value.children[0]
    assert depth == 100
    assert value == num(1)


def test_nesting_depth_resets_between_groups() -> None:
    source = "let x = " + " + ".join([nested(100)[8:-1]] * 3) + ";"
    program = parse(source)
    assert program[0].value is not None
    assert program[0].value.kind is ExprKind.BINARY


def test_long_operator_chain_parses() -> None:
    value = parse("let x = " + " - ".join(["7"] * 3000) + ";")[0].value
    assert value is not None
    assert repr(value).startswith("Binary(SUBTRACT, Binary(SUBTRACT,")
    assert value.right == num(7)
