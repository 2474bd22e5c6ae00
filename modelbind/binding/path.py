from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from modelbind.errors import PathResolutionError

from . import accessors
from .accessors import SegmentError
from .expression import CompiledExpression, ExpressionSyntaxError, compile_expression
from .observer import ExpressionObserver, PathCallback, PathObserver

_EXPRESSION_RE = re.compile(r"^\$\{(?P<body>.*)\}$", re.DOTALL)


class PathKind(Enum):
    PROPERTY = "property"
    EXPRESSION = "expression"


@dataclass(frozen=True, slots=True)
class PropertyPath:
    """Parsed, reusable reference to a property of a model graph.

    ``name`` and ``address.street`` are property paths; ``${count > 0}`` is an
    expression. Expressions that are a bare property chain (``${address.street}``)
    are writable, every other expression is read-only.
    """

    text: str
    kind: PathKind
    segments: tuple[Any, ...]
    expression: CompiledExpression | None = None

    @classmethod
    def parse(cls, text: str | PropertyPath) -> PropertyPath:
        if isinstance(text, PropertyPath):
            return text
        return _parse(str(text))

    @property
    def is_expression(self) -> bool:
        return self.kind is PathKind.EXPRESSION

    @property
    def writable(self) -> bool:
        return bool(self.segments)

    def get(self, root: Any) -> Any:
        try:
            if self.expression is not None and not self.segments:
                return self.expression.evaluate(root)
            obj = root
            for seg in self.segments:
                obj = accessors.read(obj, seg)
            return obj
        except SegmentError as e:
            raise PathResolutionError(self.text, e.reason, _seg_text(e.segment)) from None

    def set(self, root: Any, value: Any) -> None:
        if not self.segments:
            raise PathResolutionError(self.text, "expression is read-only")
        obj = root
        try:
            for seg in self.segments[:-1]:
                obj = accessors.read(obj, seg)
            accessors.write(obj, self.segments[-1], value)
        except SegmentError as e:
            raise PathResolutionError(self.text, e.reason, _seg_text(e.segment)) from None

    def is_readable(self, root: Any) -> bool:
        try:
            self.get(root)
        except PathResolutionError:
            return False
        return True

    def observe(self, root: Any, callback: PathCallback) -> PathObserver | ExpressionObserver:
        """Start observing this path on ``root``; ``close()`` the result to stop."""
        if self.segments:
            return PathObserver(root, self.segments, callback)
        assert self.expression is not None
        return ExpressionObserver(root, self.expression, callback)

    def __str__(self) -> str:
        return self.text


def _seg_text(segment: Any) -> str | None:
    return None if segment is None else str(segment)


@lru_cache(maxsize=1024)
def _parse(text: str) -> PropertyPath:
    source = text.strip()
    if not source:
        raise PathResolutionError(text, "empty path")

    if "${" in source:
        m = _EXPRESSION_RE.match(source)
        if m is None:
            raise PathResolutionError(text, "expressions must be written as ${...} with nothing around them")
        try:
            compiled = compile_expression(m.group("body"))
        except ExpressionSyntaxError as e:
            raise PathResolutionError(text, str(e)) from None
        return PropertyPath(source, PathKind.EXPRESSION, compiled.chain or (), compiled)

    segments = tuple(seg.strip() for seg in source.split("."))
    for seg in segments:
        if not seg or any(ch.isspace() for ch in seg):
            raise PathResolutionError(text, f"invalid segment {seg!r}")
    return PropertyPath(source, PathKind.PROPERTY, segments)


def parse(text: str | PropertyPath) -> PropertyPath:
    return PropertyPath.parse(text)
