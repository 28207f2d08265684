"""
Per-declaration facts needed by the op rules.

`extract_function` reduces a `FuncDecl` to a `FunctionRecord`: the canonical
name parts, whether the function returns an `error`, and the `op`/`Op`
constant declared directly in its body (if any).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .ast import BasicLit, ConstDecl, Expr, FieldList, FuncDecl, Located, PointerType, TypeExpr, TypeName

OP_NAMES = ("op", "Op")


@dataclass(frozen=True)
class OpConstant:
    name: str
    name_loc: Located
    value: str
    value_loc: Optional[Located] = None


@dataclass(frozen=True)
class FunctionRecord:
    package_name: str
    function_name: str
    loc: Located
    receiver_name: str = ""
    receiver_type_name: Optional[str] = None
    has_error_result: bool = False
    op_constant: Optional[OpConstant] = None

    @property
    def canonical_name(self) -> str:
        if self.receiver_type_name:
            return f"{self.package_name}/{self.receiver_type_name}.{self.function_name}"
        return f"{self.package_name}/{self.function_name}"


def extract_function(decl: FuncDecl, package_name: str) -> FunctionRecord:
    receiver_name, receiver_type_name = _receiver(decl.recv)
    return FunctionRecord(
        package_name=package_name,
        function_name=decl.name.name,
        loc=decl.loc,
        receiver_name=receiver_name,
        receiver_type_name=receiver_type_name,
        has_error_result=_returns_error(decl.results),
        op_constant=_find_op_constant(decl),
    )


def _receiver(recv: Optional[FieldList]) -> tuple[str, Optional[str]]:
    if recv is None or not recv.fields:
        return "", None
    field = recv.fields[0]
    name = field.names[0].name if field.names else ""
    return name, receiver_type_name(field.type)


def receiver_type_name(type_expr: TypeExpr) -> Optional[str]:
    """
    Name of the receiver's base type: `T`, `*T` and `*T[K]` all give `T`.

    Only a single level of pointer indirection is looked through; anything
    else (`**T`, qualified or composite types) has no usable name.
    """
    if isinstance(type_expr, PointerType):
        type_expr = type_expr.elem
    if isinstance(type_expr, TypeName) and type_expr.qualifier is None:
        return type_expr.name
    return None


def _returns_error(results: Optional[FieldList]) -> bool:
    if results is None:
        return False
    for field in results.fields:
        t = field.type
        if isinstance(t, TypeName) and t.name == "error" and t.qualifier is None and not t.generic:
            return True
    return False


def _find_op_constant(decl: FuncDecl) -> Optional[OpConstant]:
    if decl.body is None:
        return None
    found: Optional[OpConstant] = None
    for stmt in decl.body.statements:
        if not isinstance(stmt, ConstDecl):
            continue
        for spec in stmt.specs:
            for idx, ident in enumerate(spec.names):
                if ident.name not in OP_NAMES:
                    continue
                value_expr = spec.values[idx] if idx < len(spec.values) else None
                value, value_loc = _string_value(value_expr)
                # later declarations replace earlier ones
                found = OpConstant(name=ident.name, name_loc=ident.loc, value=value, value_loc=value_loc)
    return found


def _string_value(expr: Optional[Expr]) -> tuple[str, Optional[Located]]:
    if not isinstance(expr, BasicLit) or expr.kind != "STRING":
        return "", None
    return _unquote(expr.value), expr.loc


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"`":
        return text[1:-1]
    return text
