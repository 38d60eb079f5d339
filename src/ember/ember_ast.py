"""
Defines the abstract syntax tree (AST) node structure for the EMBER programming language.

Classes:
    BinaryOp:
        The reduction a `binary` expression performs.

    Expr:
        An expression node. Its `kind` selects which payload fields are meaningful:

        ============  ================================================
        kind          payload
        ============  ================================================
        NUM_LIT       value: float
        STR_LIT       value: str
        REFERENCE     value: referenced name
        GROUP         children: (inner,)
        BINARY        op, children: (left, right)
        FN_INVOKE     children: (callee, *args)
        TYPEDEF       fields: TypedefField entries
        WHILE         block
        ============  ================================================

    Stmt:
        A statement node, either a `let` declaration binding a name to an
        expression, or a block declaration.

    Program:
        The ordered statements of one source file; the parser's only output.

    ASTDict:
        TypedDict representation used when serializing nodes to plain dictionaries.

Every node is frozen and owns its children exclusively, so a parsed tree is an
immutable strict tree. Each node records the line/col of its first token; these
are informational and excluded from equality so trees compare by shape.

Only `NUM_LIT`, `STR_LIT`, `REFERENCE`, `GROUP`, `BINARY` and `LET_DECL` are
produced by the parser today. The remaining shapes are data-only.

Example:
    node = Expr.binary(BinaryOp.ADD, Expr.num_lit(1.0), Expr.reference("x"))
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypedDict, TypeVar

T = TypeVar("T")


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an AST node used for serialization.

    Fields:
        kind (str): The node kind in lower case (e.g., "binary", "let_decl").
        value (Any): Literal value or referenced/bound name.
        op (str | None): Operator name for binary expressions.
        line (int): Line number of the node's first token.
        col (int): Column number of the node's first token.
        children (list[ASTDict]): Child nodes in order.
        fields (list[dict[str, str]]): Typedef fields.
        block (list[ASTDict]): Statements of a nested block.
    """

    kind: str
    value: Any
    op: str | None
    line: int
    col: int
    children: list["ASTDict"]
    fields: list[dict[str, str]]
    block: list["ASTDict"]


class BinaryOp(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    PIPE = ">>"


class ExprKind(Enum):
    NUM_LIT = "num_lit"
    STR_LIT = "str_lit"
    REFERENCE = "reference"
    GROUP = "group"
    BINARY = "binary"
    FN_INVOKE = "fn_invoke"
    TYPEDEF = "typedef"
    WHILE = "while"


class StmtKind(Enum):
    LET_DECL = "let_decl"
    BLOCK_DECL = "block_decl"


@dataclass(frozen=True)
class TypedefField:
    name: str
    type_name: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "type_name": self.type_name}


@dataclass(frozen=True)
class Block:
    """An ordered run of statements, as held by `while` bodies and block declarations."""

    stmts: tuple[Stmt, ...] = ()

    def to_dict(self) -> list[ASTDict]:
        return [s.to_dict() for s in self.stmts]


@dataclass(frozen=True)
class Expr:
    """
    Represents an expression node in the EMBER AST.

    Attributes:
        kind (ExprKind): Which expression this is.
        value (float | str | None): Literal value or referenced name.
        op (BinaryOp | None): Operator for BINARY nodes.
        children (tuple[Expr, ...]): Sub-expressions, in source order.
        fields (tuple[TypedefField, ...]): Fields for TYPEDEF nodes.
        block (Block | None): Body for WHILE nodes.
        line (int): Source line number (default is 0).
        col (int): Source column number (default is 0).
    """

    kind: ExprKind
    value: float | str | None = None
    op: BinaryOp | None = None
    children: tuple[Expr, ...] = ()
    fields: tuple[TypedefField, ...] = ()
    block: Block | None = None
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)

    @classmethod
    def num_lit(cls, value: float, line: int = 0, col: int = 0) -> Expr:
        return cls(ExprKind.NUM_LIT, value=float(value), line=line, col=col)

    @classmethod
    def str_lit(cls, value: str, line: int = 0, col: int = 0) -> Expr:
        return cls(ExprKind.STR_LIT, value=value, line=line, col=col)

    @classmethod
    def reference(cls, name: str, line: int = 0, col: int = 0) -> Expr:
        return cls(ExprKind.REFERENCE, value=name, line=line, col=col)

    @classmethod
    def group(cls, inner: Expr, line: int = 0, col: int = 0) -> Expr:
        return cls(ExprKind.GROUP, children=(inner,), line=line, col=col)

    @classmethod
    def binary(
        cls, op: BinaryOp, left: Expr, right: Expr, line: int = 0, col: int = 0
    ) -> Expr:
        return cls(ExprKind.BINARY, op=op, children=(left, right), line=line, col=col)

    @classmethod
    def fn_invoke(
        cls, callee: Expr, args: tuple[Expr, ...] = (), line: int = 0, col: int = 0
    ) -> Expr:
        return cls(
            ExprKind.FN_INVOKE, children=(callee, *args), line=line, col=col
        )

    @classmethod
    def typedef(
        cls, fields: tuple[TypedefField, ...], line: int = 0, col: int = 0
    ) -> Expr:
        return cls(ExprKind.TYPEDEF, fields=tuple(fields), line=line, col=col)

    @classmethod
    def while_loop(cls, body: Block, line: int = 0, col: int = 0) -> Expr:
        return cls(ExprKind.WHILE, block=body, line=line, col=col)

    @property
    def left(self) -> Expr:
        return self.children[0]

    @property
    def right(self) -> Expr:
        return self.children[1]

    @property
    def callee(self) -> Expr:
        return self.children[0]

    @property
    def args(self) -> tuple[Expr, ...]:
        return self.children[1:]

    def fold(self, render: Callable[[Expr, list[T]], T]) -> T:
        """
        Renders the tree bottom-up without recursing on the Python stack.

        `render` receives each node together with the already rendered results
        of its children, in order. Operator chains form left spines as deep as
        the chain is long.
        """
        results: list[T] = []
        stack: list[tuple[Expr, bool]] = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if not expanded:
                stack.append((node, True))
                stack.extend((c, False) for c in reversed(node.children))
                continue
            split = len(results) - len(node.children)
            children = results[split:]
            del results[split:]
            results.append(render(node, children))
        return results[0]

    @staticmethod
    def _render_repr(node: Expr, children: list[str]) -> str:
        if node.kind is ExprKind.BINARY and node.op is not None:
            return f"Binary({node.op.name}, {children[0]}, {children[1]})"
        if node.kind is ExprKind.GROUP:
            return f"Group({children[0]})"
        if node.kind is ExprKind.FN_INVOKE:
            return f"FnInvoke({children[0]}, [{', '.join(children[1:])}])"
        if node.kind is ExprKind.TYPEDEF:
            return f"Typedef({list(node.fields)!r})"
        if node.kind is ExprKind.WHILE:
            return f"While({node.block!r})"
        name = "".join(part.title() for part in node.kind.value.split("_"))
        return f"{name}({node.value!r})"

    @staticmethod
    def _render_dict(node: Expr, children: list[ASTDict]) -> ASTDict:
        d: ASTDict = {
            "kind": node.kind.value,
            "value": node.value,
            "op": node.op.name if node.op is not None else None,
            "line": node.line,
            "col": node.col,
            "children": children,
        }
        if node.fields:
            d["fields"] = [f.to_dict() for f in node.fields]
        if node.block is not None:
            d["block"] = node.block.to_dict()
        return d

    def __repr__(self) -> str:
        return self.fold(Expr._render_repr)

    def to_dict(self) -> ASTDict:
        return self.fold(Expr._render_dict)


@dataclass(frozen=True)
class Stmt:
    """
    Represents a statement node in the EMBER AST.

    Attributes:
        kind (StmtKind): Which statement this is.
        name (str | None): Bound name for LET_DECL.
        value (Expr | None): Bound expression for LET_DECL.
        block (Block | None): Body for BLOCK_DECL.
        line (int): Source line number (default is 0).
        col (int): Source column number (default is 0).
    """

    kind: StmtKind
    name: str | None = None
    value: Expr | None = None
    block: Block | None = None
    line: int = field(default=0, compare=False)
    col: int = field(default=0, compare=False)

    @classmethod
    def let_decl(cls, name: str, value: Expr, line: int = 0, col: int = 0) -> Stmt:
        return cls(StmtKind.LET_DECL, name=name, value=value, line=line, col=col)

    @classmethod
    def block_decl(cls, body: Block, line: int = 0, col: int = 0) -> Stmt:
        return cls(StmtKind.BLOCK_DECL, block=body, line=line, col=col)

    def __repr__(self) -> str:
        if self.kind is StmtKind.LET_DECL:
            return f"LetDecl({self.name!r}, {self.value!r})"
        return f"BlockDecl({self.block!r})"

    def to_dict(self) -> ASTDict:
        d: ASTDict = {
            "kind": self.kind.value,
            "value": self.name,
            "line": self.line,
            "col": self.col,
            "children": [self.value.to_dict()] if self.value is not None else [],
        }
        if self.block is not None:
            d["block"] = self.block.to_dict()
        return d


@dataclass(frozen=True)
class Program:
    """The statements of one source file, in textual order."""

    stmts: tuple[Stmt, ...] = ()

    def __len__(self) -> int:
        return len(self.stmts)

    def __iter__(self) -> Iterator[Stmt]:
        return iter(self.stmts)

    def __getitem__(self, index: int) -> Stmt:
        return self.stmts[index]

    def to_dict(self) -> list[ASTDict]:
        return [s.to_dict() for s in self.stmts]


__all__ = [
    "ASTDict",
    "BinaryOp",
    "Block",
    "Expr",
    "ExprKind",
    "Program",
    "Stmt",
    "StmtKind",
    "TypedefField",
]
