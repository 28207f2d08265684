"""
Declaration collection over parsed Go files.

The traversal is generic: every dataclass field holding a node (or a tuple
of nodes) is a child. Opaque statements and expressions expose the blocks
nested in them, so function declarations are found wherever they occur.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Iterator, List, Tuple

from .ast import FuncDecl, Node


def walk(node: Node) -> Iterator[Node]:
    """Yield `node` and every node beneath it, parents before children, in source order."""
    stack: List[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(_children(current)))


def collect_func_decls(node: Node) -> Tuple[FuncDecl, ...]:
    return tuple(n for n in walk(node) if isinstance(n, FuncDecl))


def _children(node: Node) -> List[Node]:
    if not is_dataclass(node):
        return []
    children: List[Node] = []
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            children.append(value)
        elif isinstance(value, tuple):
            children.extend(item for item in value if isinstance(item, Node))
    return children
