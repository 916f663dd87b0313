"""Domain models used throughout the container."""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional, Union

__all__ = [
    "AbstractKey",
    "ParameterSpec",
    "ClassConcrete",
    "FactoryConcrete",
    "Concrete",
    "make_concrete",
]


AbstractKey = Hashable
"""Type alias for keys under which concretes are bound and resolved.

Usually a class, but any hashable value works: an arbitrary string key, a dotted
import path such as ``"app.services.Mailer"``, or a function.

Example:
    >>> container.make(Mailer)                 # Lookup by class
    >>> container.make("app.services.Mailer")  # Lookup by dotted path
    >>> container.make("mailer.sender")        # Lookup by explicitly bound key
"""


@dataclass(frozen=True)
class ParameterSpec:
    """Describes a single parameter of a constructor, function or method.

    Instances are derived from reflection each time a target is resolved and are
    never cached.

    Attributes:
        name: The parameter name, which is also the key looked up in overrides.
        kind: The ``inspect.Parameter`` kind (positional, keyword-only, variadic...).
        declared_type: The evaluated annotation, or None if the parameter has none.
        dependency: The key to resolve through the container when this is a class
            dependency, or None when the parameter is a primitive.
        has_default: Whether the signature declares a default value.
        default: The default value (meaningful only if ``has_default`` is True).
        nullable: Whether None is an acceptable value for the parameter.
    """

    name: str
    kind: Any
    declared_type: Any
    dependency: Optional[AbstractKey]
    has_default: bool
    default: Any
    nullable: bool

    @property
    def is_variadic(self) -> bool:
        return self.kind is inspect.Parameter.VAR_POSITIONAL

    @property
    def is_keyword_variadic(self) -> bool:
        return self.kind is inspect.Parameter.VAR_KEYWORD

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY


@dataclass(frozen=True)
class ClassConcrete:
    """A class, or a dotted import path naming one, to be instantiated."""

    target: Any


@dataclass(frozen=True)
class FactoryConcrete:
    """A callable whose return value is the resolved instance."""

    func: Callable


Concrete = Union[ClassConcrete, FactoryConcrete]


def make_concrete(abstract: AbstractKey, concrete: Any = None) -> Concrete:
    """Classify what an abstract should be built from.

    Args:
        abstract: The key being bound.
        concrete: The class, dotted path or factory to bind. Defaults to the
            abstract itself.

    Returns:
        A :class:`FactoryConcrete` for non-class callables, otherwise a
        :class:`ClassConcrete`. Nothing is validated here: a target that is not
        actually a class fails when it is built.
    """
    target = abstract if concrete is None else concrete
    if not inspect.isclass(target) and not isinstance(target, str) and callable(target):
        return FactoryConcrete(target)
    return ClassConcrete(target)
