"""
Syntax tree for Go source files.

Only the declaration-level structure needed by the op checks is modelled
precisely: function signatures, receivers and constant declarations. Other
statements and expressions are kept as opaque token runs, but they still own
the blocks nested inside them so a full tree walk reaches every block.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Located:
    line: int
    column: int


class Node:
    loc: Located


@dataclass(frozen=True)
class Ident(Node):
    loc: Located
    name: str


# ---------------------------------------------------------------------------
# Types


class TypeExpr(Node):
    loc: Located


@dataclass(frozen=True)
class TypeName(TypeExpr):
    """A named type, optionally package-qualified (`fmt.Stringer`) or instantiated (`List[T]`)."""

    loc: Located
    name: str
    qualifier: Optional[str] = None
    generic: bool = False


@dataclass(frozen=True)
class PointerType(TypeExpr):
    loc: Located
    elem: TypeExpr


@dataclass(frozen=True)
class CompositeType(TypeExpr):
    """Any other type literal: array, slice, map, chan, func, struct or interface."""

    loc: Located
    kind: str
    parts: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Field(Node):
    loc: Located
    names: Tuple[Ident, ...]
    type: TypeExpr
    variadic: bool = False


@dataclass(frozen=True)
class FieldList(Node):
    loc: Located
    fields: Tuple[Field, ...] = ()


# ---------------------------------------------------------------------------
# Expressions


class Expr(Node):
    loc: Located


@dataclass(frozen=True)
class BasicLit(Expr):
    """A literal token. `value` is the raw source text, quotes included."""

    loc: Located
    kind: str
    value: str


@dataclass(frozen=True)
class IdentExpr(Expr):
    loc: Located
    ident: Ident


@dataclass(frozen=True)
class OpaqueExpr(Expr):
    loc: Located
    text: str
    blocks: Tuple["Block", ...] = ()


# ---------------------------------------------------------------------------
# Statements and declarations


class Stmt(Node):
    loc: Located


@dataclass(frozen=True)
class Block(Node):
    loc: Located
    statements: Tuple[Stmt, ...] = ()


@dataclass(frozen=True)
class ValueSpec(Node):
    loc: Located
    names: Tuple[Ident, ...]
    type: Optional[TypeExpr] = None
    values: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class ConstDecl(Stmt):
    """`const x = ...` or a parenthesised `const ( ... )` group."""

    loc: Located
    specs: Tuple[ValueSpec, ...]
    grouped: bool = False


@dataclass(frozen=True)
class OpaqueStmt(Stmt):
    loc: Located
    text: str
    blocks: Tuple[Block, ...] = ()


@dataclass(frozen=True)
class FuncDecl(Node):
    loc: Located  # position of the `func` keyword
    name: Ident
    params: FieldList
    recv: Optional[FieldList] = None
    results: Optional[FieldList] = None
    body: Optional[Block] = None


@dataclass(frozen=True)
class OpaqueDecl(Node):
    """Top-level `import`, `type` or `var` declaration."""

    loc: Located
    keyword: str
    text: str
    blocks: Tuple[Block, ...] = ()


Decl = Union[FuncDecl, ConstDecl, OpaqueDecl]


@dataclass(frozen=True)
class File(Node):
    loc: Located
    package: Ident
    decls: Tuple[Decl, ...] = ()
