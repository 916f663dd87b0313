"""Exceptions raised while resolving dependencies."""

from typing import Any, Literal

__all__ = ["AutowireError", "ReflectionError", "NotInstantiable"]


class AutowireError(Exception):
    """Base class for every error raised by the container."""

    pass


class ReflectionError(AutowireError):
    """Raised when a target cannot be located or introspected."""

    pass


class NotInstantiable(AutowireError, ValueError):
    """Raised when an abstract or one of its parameters cannot be resolved.

    Attributes:
        reason: ``"primitive"`` for a builtin or untyped parameter with neither a
            default nor nullability, ``"class"`` for a class-typed parameter whose
            recursive resolution failed, ``"default"`` for an abstract bound to a
            class that cannot be instantiated.
        name: The parameter name or abstract the error is about.
    """

    def __init__(self, message: str, reason: Literal["primitive", "class", "default"], name: str):
        super().__init__(message)
        self.reason = reason
        self.name = name

    @classmethod
    def primitive(cls, name: str) -> "NotInstantiable":
        return cls(f"Unresolvable primitive parameter [{name}]", "primitive", name)

    @classmethod
    def for_class(cls, name: str) -> "NotInstantiable":
        return cls(f"Unresolvable class [{name}]", "class", name)

    @classmethod
    def default(cls, abstract: Any) -> "NotInstantiable":
        name = describe(abstract)
        return cls(f"[{name}] could not be instantiated.", "default", name)


def describe(target: Any) -> str:
    """Human readable name for a key, class or callable."""
    if isinstance(target, str):
        return target
    qualname = getattr(target, "__qualname__", None)
    if qualname is None:
        return repr(target)
    module = getattr(target, "__module__", None)
    return f"{module}.{qualname}" if module else qualname
