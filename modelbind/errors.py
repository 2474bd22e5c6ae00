from __future__ import annotations


class ModelBindError(Exception):
    """Base class for binding layer failures."""


class PathResolutionError(ModelBindError):
    """A property path (or one of its segments) could not be parsed, read or written."""

    def __init__(self, path: str, reason: str, segment: str | None = None) -> None:
        self.path = path
        self.reason = reason
        self.segment = segment
        where = f" at segment '{segment}'" if segment is not None else ""
        super().__init__(f"cannot resolve '{path}'{where}: {reason}")


class HandlerInvocationError(ModelBindError):
    """A watch, action or gesture handler raised while being invoked."""

    def __init__(self, handler_name: str, origin: str, cause: BaseException | None = None) -> None:
        self.handler_name = handler_name
        self.origin = origin
        self.cause = cause
        detail = f": {type(cause).__name__}: {cause}" if cause is not None else ""
        super().__init__(f"handler '{handler_name}' failed for {origin}{detail}")


class BindingActivationError(ModelBindError):
    """A binding could not be activated; it stays inactive."""

    def __init__(self, binding_name: str, cause: BaseException | None = None) -> None:
        self.binding_name = binding_name
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"binding '{binding_name}' not activated{detail}")


def callable_name(fn: object) -> str:
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    return str(name) if name else repr(fn)
