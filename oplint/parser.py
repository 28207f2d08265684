from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree

from .ast import (
    BasicLit,
    Block,
    CompositeType,
    ConstDecl,
    Decl,
    Expr,
    Field,
    FieldList,
    File,
    FuncDecl,
    Ident,
    IdentExpr,
    Located,
    OpaqueDecl,
    OpaqueExpr,
    OpaqueStmt,
    PointerType,
    Stmt,
    TypeExpr,
    TypeName,
    ValueSpec,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_LITERAL_TOKENS = {"STRING", "RAW_STRING", "CHAR", "NUMBER"}


class ParseError(ValueError):
    """
    Source was accepted by the grammar but has a shape the tree builder
    cannot represent. Carries the best-effort location of the problem.
    """

    def __init__(self, message: str, *, loc: Located) -> None:
        super().__init__(f"{loc.line}:{loc.column}: {message}")
        self.loc = loc


class TerminatorInserter:
    """
    Insert `_TERM` tokens the way the Go lexer inserts semicolons.

    An explicit `;` always terminates. A newline terminates only when the
    previous token could end a statement: an identifier, a literal, one of
    `return break continue fallthrough`, `++`, `--`, or a closing `) ] }`.
    A colon ending a label or `case x:` also terminates, either at the end of
    the line or directly before a `const` on the same line.
    """

    always_accept = ("NEWLINE", "SEMI", "BLOCK_COMMENT")

    TERMINABLE = {
        "NAME",
        "NUMBER",
        "STRING",
        "RAW_STRING",
        "CHAR",
        "RPAR",
        "RSQB",
        "RBRACE",
        "RETURN",
        "BREAK",
        "CONTINUE",
        "FALLTHROUGH",
    }

    TERMINABLE_OPS = {"++", "--", ":"}

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.can_terminate = False
        self.after_colon = False

    def process(self, stream):
        self._reset()
        for token in stream:
            ttype = token.type
            if ttype == "BLOCK_COMMENT":
                # A comment spanning lines acts like a newline.
                if "\n" not in token.value:
                    continue
                ttype = "NEWLINE"
            if ttype == "NEWLINE":
                if self.can_terminate:
                    yield Token.new_borrow_pos("_TERM", "\n", token)
                    self.can_terminate = False
                    self.after_colon = False
                continue
            if ttype == "SEMI":
                yield Token.new_borrow_pos("_TERM", token.value, token)
                self.can_terminate = False
                self.after_colon = False
                continue
            if ttype == "CONST" and self.after_colon:
                # `L: const ...` and `case x: const ...` on one line
                yield Token.new_borrow_pos("_TERM", ":", token)
            yield token
            self.can_terminate = self._is_terminable(token)
            self.after_colon = ttype == "OP" and token.value == ":"

    def _is_terminable(self, token: Token) -> bool:
        if token.type == "OP":
            return token.value in self.TERMINABLE_OPS
        return token.type in self.TERMINABLE


_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    lexer="basic",
    start="source_file",
    propagate_positions=True,
    maybe_placeholders=False,
    postlex=TerminatorInserter(),
)


def parse_file(source: str) -> File:
    # a leading byte-order mark is allowed in Go source
    if source.startswith("\ufeff"):
        source = source[1:]
    tree = _PARSER.parse(source)
    return _build_file(tree)


def _build_file(tree: Tree) -> File:
    package: Optional[Ident] = None
    decls: List[Decl] = []
    for child in _trees(tree):
        kind = _name(child)
        if kind == "package_clause":
            package = _ident(_tokens(child, "NAME")[0])
        elif kind == "func_decl":
            decls.append(_build_func_decl(child))
        elif kind == "const_decl":
            decls.append(_build_const_decl(child))
        elif kind == "opaque_decl":
            decls.append(_build_opaque_decl(child))
        else:
            raise ParseError(f"unexpected top-level node '{kind}'", loc=_loc(child))
    if package is None:
        raise ParseError("missing package clause", loc=Located(line=1, column=1))
    return File(loc=package.loc, package=package, decls=tuple(decls))


def _build_func_decl(tree: Tree) -> FuncDecl:
    func_token = tree.children[0]
    name: Optional[Ident] = None
    recv: Optional[FieldList] = None
    params: Optional[FieldList] = None
    results: Optional[FieldList] = None
    body: Optional[Block] = None
    for child in tree.children[1:]:
        if isinstance(child, Token):
            if child.type == "NAME":
                name = _ident(child)
            continue
        kind = _name(child)
        # type_params are skipped
        if kind == "receiver":
            recv = _build_parameters(_trees(child)[0])
        elif kind == "signature":
            params, results = _build_signature(child)
        elif kind == "block":
            body = _build_block(child)
    if name is None or params is None:
        raise ParseError("malformed function declaration", loc=_loc_from_token(func_token))
    return FuncDecl(
        loc=_loc_from_token(func_token),
        name=name,
        params=params,
        recv=recv,
        results=results,
        body=body,
    )


def _build_signature(tree: Tree) -> Tuple[FieldList, Optional[FieldList]]:
    params: Optional[FieldList] = None
    results: Optional[FieldList] = None
    for child in _trees(tree):
        kind = _name(child)
        if kind == "parameters":
            params = _build_parameters(child)
        elif kind == "result":
            results = _build_result(child)
    if params is None:
        raise ParseError("signature missing parameter list", loc=_loc(tree))
    return params, results


def _build_result(tree: Tree) -> FieldList:
    inner = _trees(tree)[0]
    if _name(inner) == "parameters":
        return _build_parameters(inner)
    type_expr = _build_type(inner)
    field = Field(loc=type_expr.loc, names=(), type=type_expr)
    return FieldList(loc=type_expr.loc, fields=(field,))


def _build_parameters(tree: Tree) -> FieldList:
    lpar = _tokens(tree, "LPAR")[0]
    entries: List[Tuple[Optional[Token], TypeExpr, bool]] = []
    for param_list in _trees(tree):
        for param in _trees(param_list):
            entries.append(_build_param_entry(param))
    return FieldList(loc=_loc_from_token(lpar), fields=_group_params(entries))


def _build_param_entry(tree: Tree) -> Tuple[Optional[Token], TypeExpr, bool]:
    kind = _name(tree)
    name_tokens = _tokens(tree, "NAME")
    type_expr = _build_type(_trees(tree)[0])
    if kind == "param_type":
        return None, type_expr, False
    if kind == "param_variadic":
        return None, type_expr, True
    if kind == "param_named":
        return name_tokens[0], type_expr, False
    if kind == "param_named_variadic":
        return name_tokens[0], type_expr, True
    raise ParseError(f"unexpected parameter node '{kind}'", loc=_loc(tree))


def _group_params(entries: List[Tuple[Optional[Token], TypeExpr, bool]]) -> Tuple[Field, ...]:
    """
    Apply Go's parameter grouping: if any entry is named, every bare entry is
    a name sharing the type of the next named entry (`a, b int`). Otherwise
    all entries are unnamed types (`int, string`).
    """
    if not any(name is not None for name, _type, _variadic in entries):
        return tuple(
            Field(loc=type_expr.loc, names=(), type=type_expr, variadic=variadic)
            for _name_tok, type_expr, variadic in entries
        )
    fields: List[Field] = []
    pending: List[TypeExpr] = []
    for name, type_expr, variadic in entries:
        if name is None:
            pending.append(type_expr)
            continue
        names = [_pending_name(p) for p in pending]
        names.append(_ident(name))
        loc = names[0].loc
        fields.append(Field(loc=loc, names=tuple(names), type=type_expr, variadic=variadic))
        pending = []
    for type_expr in pending:
        # trailing bare names without a type are not valid Go; keep them as types
        fields.append(Field(loc=type_expr.loc, names=(), type=type_expr))
    return tuple(fields)


def _pending_name(type_expr: TypeExpr) -> Ident:
    if isinstance(type_expr, TypeName) and type_expr.qualifier is None and not type_expr.generic:
        return Ident(loc=type_expr.loc, name=type_expr.name)
    raise ParseError("mixed named and unnamed parameters", loc=type_expr.loc)


def _build_type(tree: Tree) -> TypeExpr:
    kind = _name(tree)
    if kind == "type_name":
        names = _tokens(tree, "NAME")
        generic = any(_name(child) == "type_args" for child in _trees(tree))
        loc = _loc_from_token(names[0])
        if len(names) == 2:
            return TypeName(loc=loc, name=names[1].value, qualifier=names[0].value, generic=generic)
        return TypeName(loc=loc, name=names[0].value, generic=generic)
    if kind == "pointer_type":
        star = _tokens(tree, "STAR")[0]
        return PointerType(loc=_loc_from_token(star), elem=_build_type(_trees(tree)[0]))
    if kind == "array_type":
        # [N]T and []T; the length expression is irrelevant here
        elem = _trees(tree)[-1]
        return CompositeType(loc=_loc(tree), kind="array", parts=(_build_type(elem),))
    if kind in ("map_type", "chan_type"):
        parts = tuple(_build_type(child) for child in _trees(tree))
        return CompositeType(loc=_loc(tree), kind=kind[:-5], parts=parts)
    if kind == "func_type":
        params, results = _build_signature(_trees(tree)[0])
        parts = (params,) if results is None else (params, results)
        return CompositeType(loc=_loc(tree), kind="func", parts=parts)
    if kind in ("struct_type", "interface_type"):
        body = _build_block(_trees(tree)[0])
        return CompositeType(loc=_loc(tree), kind=kind[:-5], parts=(body,))
    raise ParseError(f"unsupported type node '{kind}'", loc=_loc(tree))


def _build_block(tree: Tree) -> Block:
    lbrace = _tokens(tree, "LBRACE")[0]
    statements: List[Stmt] = []
    for stmt_list in _trees(tree):
        for child in _trees(stmt_list):
            statements.append(_build_stmt(child))
    return Block(loc=_loc_from_token(lbrace), statements=tuple(statements))


def _build_stmt(tree: Tree) -> Stmt:
    kind = _name(tree)
    if kind == "const_decl":
        return _build_const_decl(tree)
    if kind == "simple_stmt":
        text, blocks = _flatten(tree)
        return OpaqueStmt(loc=_loc(tree), text=text, blocks=blocks)
    raise ParseError(f"unexpected statement node '{kind}'", loc=_loc(tree))


def _build_const_decl(tree: Tree) -> ConstDecl:
    const_token = _tokens(tree, "CONST")[0]
    grouped = bool(_tokens(tree, "LPAR"))
    specs = tuple(_build_const_spec(child) for child in _trees(tree))
    return ConstDecl(loc=_loc_from_token(const_token), specs=specs, grouped=grouped)


def _build_const_spec(tree: Tree) -> ValueSpec:
    names: Tuple[Ident, ...] = ()
    type_expr: Optional[TypeExpr] = None
    values: Tuple[Expr, ...] = ()
    for child in _trees(tree):
        kind = _name(child)
        if kind == "ident_list":
            names = tuple(_ident(tok) for tok in _tokens(child, "NAME"))
        elif kind == "expr_list":
            values = tuple(_build_const_expr(expr) for expr in _trees(child))
        else:
            type_expr = _build_type(child)
    if not names:
        raise ParseError("constant declaration without names", loc=_loc(tree))
    return ValueSpec(loc=names[0].loc, names=names, type=type_expr, values=values)


def _build_const_expr(tree: Tree) -> Expr:
    children = tree.children
    if len(children) == 1 and isinstance(children[0], Token):
        token = children[0]
        if token.type in _LITERAL_TOKENS:
            return BasicLit(loc=_loc_from_token(token), kind=_literal_kind(token), value=token.value)
        if token.type == "NAME":
            return IdentExpr(loc=_loc_from_token(token), ident=_ident(token))
    text, blocks = _flatten(tree)
    return OpaqueExpr(loc=_loc(tree), text=text, blocks=blocks)


def _build_opaque_decl(tree: Tree) -> OpaqueDecl:
    keyword = tree.children[0]
    text, blocks = _flatten(tree)
    return OpaqueDecl(loc=_loc_from_token(keyword), keyword=keyword.value, text=text, blocks=blocks)


def _literal_kind(token: Token) -> str:
    if token.type in ("STRING", "RAW_STRING"):
        return "STRING"
    if token.type == "CHAR":
        return "CHAR"
    text = token.value.lower()
    if text.endswith("i"):
        return "IMAG"
    if text.startswith("0x"):
        return "FLOAT" if "." in text or "p" in text else "INT"
    if "." in text or "e" in text:
        return "FLOAT"
    return "INT"


def _flatten(tree: Tree) -> Tuple[str, Tuple[Block, ...]]:
    """Render an opaque token run back to text, collecting the blocks nested in it."""
    parts: List[str] = []
    blocks: List[Block] = []
    stack: List[object] = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Token):
            parts.append(node.value)
            continue
        if _name(node) == "block":
            blocks.append(_build_block(node))
            parts.append("{...}")
            continue
        stack.extend(reversed(node.children))
    return " ".join(parts), tuple(blocks)


def _trees(tree: Tree) -> List[Tree]:
    return [child for child in tree.children if isinstance(child, Tree)]


def _tokens(tree: Tree, ttype: str) -> List[Token]:
    return [child for child in tree.children if isinstance(child, Token) and child.type == ttype]


def _ident(token: Token) -> Ident:
    return Ident(loc=_loc_from_token(token), name=token.value)


def _loc(tree: Tree) -> Located:
    meta = tree.meta
    return Located(line=meta.line, column=meta.column)


def _loc_from_token(token: Token) -> Located:
    return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
    if isinstance(node, Tree):
        data = node.data
        if isinstance(data, Token):
            return data.value
        return data
    if isinstance(node, Token):
        return node.type
    return str(node)
