"""Compile and evaluate ``${...}`` binding expressions.

Expressions use Python syntax restricted to property access, literals,
arithmetic, comparisons and boolean logic. The EL spellings ``&&``, ``||``,
``!``, ``eq ne lt gt le ge``, ``null``, ``true`` and ``false`` are accepted
as aliases. Names resolve against the binding root through the accessors, so
``${address.street}`` and ``${items[0]}`` read the same way plain paths do.
"""

from __future__ import annotations

import ast
import operator
import re
from dataclasses import dataclass
from typing import Any

from . import accessors
from .accessors import SegmentError

_EL_TOKENS = re.compile(
    r"""('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")"""
    r"""|(&&|\|\||!(?!=)|\b(?:eq|ne|lt|gt|le|ge|null|true|false)\b)"""
)

_EL_ALIASES = {
    "&&": " and ",
    "||": " or ",
    "!": " not ",
    "eq": "==",
    "ne": "!=",
    "lt": "<",
    "gt": ">",
    "le": "<=",
    "ge": ">=",
    "null": "None",
    "true": "True",
    "false": "False",
}

_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY_OPS = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

_COMPARE_OPS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}

_ALLOWED_NODES = (
    ast.Expression,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.BinOp,
    ast.UnaryOp,
    ast.Compare,
    ast.IfExp,
    ast.Constant,
    ast.Name,
    ast.Attribute,
    ast.Subscript,
    ast.Tuple,
    ast.List,
    ast.Load,
    *_BIN_OPS,
    *_UNARY_OPS,
    *_COMPARE_OPS,
)


class ExpressionSyntaxError(ValueError):
    pass


def translate_el(source: str) -> str:
    """Rewrite EL operator spellings to Python, leaving string literals untouched."""

    def _sub(m: re.Match[str]) -> str:
        if m.group(1):
            return m.group(1)
        return _EL_ALIASES[m.group(2)]

    return _EL_TOKENS.sub(_sub, source).strip()


def _chain(node: ast.AST) -> tuple[Any, ...] | None:
    """Return the segments of a pure property chain, or None."""
    if isinstance(node, ast.Name):
        return (node.id,)
    if isinstance(node, ast.Attribute):
        head = _chain(node.value)
        return None if head is None else (*head, node.attr)
    if isinstance(node, ast.Subscript) and isinstance(node.slice, ast.Constant):
        head = _chain(node.value)
        return None if head is None else (*head, node.slice.value)
    return None


def _collect(node: ast.AST, out: list[tuple[Any, ...]]) -> None:
    chain = _chain(node)
    if chain is not None:
        if chain not in out:
            out.append(chain)
        return
    for child in ast.iter_child_nodes(node):
        _collect(child, out)


@dataclass(frozen=True, slots=True)
class CompiledExpression:
    source: str
    tree: ast.Expression
    dependencies: tuple[tuple[Any, ...], ...]
    chain: tuple[Any, ...] | None

    @property
    def writable(self) -> bool:
        return self.chain is not None

    def evaluate(self, root: Any) -> Any:
        return _eval(self.tree.body, root)


def compile_expression(source: str) -> CompiledExpression:
    text = translate_el(source)
    if not text:
        raise ExpressionSyntaxError("empty expression")
    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError as e:
        raise ExpressionSyntaxError(f"invalid expression: {e.msg}") from None
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise ExpressionSyntaxError(f"{type(node).__name__} is not allowed in binding expressions")
    deps: list[tuple[Any, ...]] = []
    _collect(tree.body, deps)
    return CompiledExpression(source, tree, tuple(deps), _chain(tree.body))


def _eval(node: ast.AST, root: Any) -> Any:  # noqa: PLR0911, PLR0912
    if isinstance(node, ast.Constant):
        return node.value
    if isinstance(node, ast.Name):
        return accessors.read(root, node.id)
    if isinstance(node, ast.Attribute):
        return accessors.read(_eval(node.value, root), node.attr)
    if isinstance(node, ast.Subscript):
        return accessors.read(_eval(node.value, root), _eval(node.slice, root))
    if isinstance(node, ast.BoolOp):
        result: Any = None
        for value_node in node.values:
            result = _eval(value_node, root)
            if isinstance(node.op, ast.And) and not result:
                return result
            if isinstance(node.op, ast.Or) and result:
                return result
        return result
    if isinstance(node, ast.IfExp):
        return _eval(node.body, root) if _eval(node.test, root) else _eval(node.orelse, root)
    if isinstance(node, (ast.Tuple, ast.List)):
        return tuple(_eval(e, root) for e in node.elts)
    try:
        if isinstance(node, ast.UnaryOp):
            return _UNARY_OPS[type(node.op)](_eval(node.operand, root))
        if isinstance(node, ast.BinOp):
            return _BIN_OPS[type(node.op)](_eval(node.left, root), _eval(node.right, root))
        if isinstance(node, ast.Compare):
            left = _eval(node.left, root)
            for op, right_node in zip(node.ops, node.comparators):
                right = _eval(right_node, root)
                if not _COMPARE_OPS[type(op)](left, right):
                    return False
                left = right
            return True
    except (TypeError, ValueError, ZeroDivisionError) as e:
        raise SegmentError(f"{type(e).__name__}: {e}") from None
    raise SegmentError(f"unsupported expression node {type(node).__name__}")
