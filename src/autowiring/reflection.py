"""Reflection adapters describing the parameters of resolvable targets.

Each shape of target the container knows how to invoke (a plain function, a
method looked up on an instance or class, a class constructor) is wrapped in a
:class:`Resolvable`. A resolvable exposes the target's ordered parameter list as
:class:`~autowiring.domain.ParameterSpec` objects and invokes the target once the
container has resolved those parameters, so the container never needs to branch
on what kind of callable it was given.

Parameter specs are rebuilt on every call; nothing here caches reflection
metadata.
"""

import builtins
import functools
import importlib
import inspect
import logging
import sys
import types
from abc import ABC, abstractmethod
from typing import (
    Annotated,
    Any,
    Callable,
    ForwardRef,
    Optional,
    Self,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from autowiring.domain import AbstractKey, ParameterSpec
from autowiring.errors import ReflectionError, describe

__all__ = [
    "Resolvable",
    "FunctionResolvable",
    "MethodResolvable",
    "ConstructorResolvable",
    "resolvable_for_callable",
    "locate",
    "is_instantiable",
    "has_own_constructor",
    "STATIC_METHOD_DELIMITER",
]

logger = logging.getLogger(__name__)

STATIC_METHOD_DELIMITER = "::"


class Resolvable(ABC):
    """Something whose parameters can be autowired and which can then be invoked."""

    @abstractmethod
    def parameters(self) -> list[ParameterSpec]:
        """Describe the target's parameters in declaration order."""

    @abstractmethod
    def invoke(self, args: list[Any], kwargs: dict[str, Any]) -> Any:
        """Invoke the target with resolved arguments."""


class FunctionResolvable(Resolvable):
    """Plain functions, lambdas, builtins, partials and already-bound methods."""

    def __init__(self, func: Callable):
        self._func = func

    def parameters(self) -> list[ParameterSpec]:
        declaring_class = None
        if inspect.ismethod(self._func):
            owner = self._func.__self__
            declaring_class = owner if inspect.isclass(owner) else type(owner)
        return _get_parameters(self._func, _signature(self._func), declaring_class)

    def invoke(self, args: list[Any], kwargs: dict[str, Any]) -> Any:
        return self._func(*args, **kwargs)


class MethodResolvable(Resolvable):
    """A method looked up by name on an instance, or a static/class method on a class."""

    def __init__(self, owner: Any, method_name: str):
        try:
            self._method = getattr(owner, method_name)
        except AttributeError as error:
            raise ReflectionError(
                f"Method [{describe(owner)}{STATIC_METHOD_DELIMITER}{method_name}] does not exist"
            ) from error
        self._declaring_class = owner if inspect.isclass(owner) else type(owner)

    def parameters(self) -> list[ParameterSpec]:
        return _get_parameters(self._method, _signature(self._method), self._declaring_class)

    def invoke(self, args: list[Any], kwargs: dict[str, Any]) -> Any:
        return self._method(*args, **kwargs)


class ConstructorResolvable(Resolvable):
    """A class, invoked by instantiating it."""

    def __init__(self, cls: type):
        self._cls = cls

    def parameters(self) -> list[ParameterSpec]:
        if not has_own_constructor(self._cls):
            return []
        constructor = (
            self._cls.__init__ if self._cls.__init__ is not object.__init__ else self._cls.__new__
        )
        signature = _signature(constructor)
        # Drop the leading self (for __init__) or cls (for __new__).
        unbound = list(signature.parameters.values())[1:]
        return _get_parameters(constructor, signature.replace(parameters=unbound), self._cls)

    def invoke(self, args: list[Any], kwargs: dict[str, Any]) -> Any:
        return self._cls(*args, **kwargs)


def resolvable_for_callable(target: Any) -> Resolvable:
    """Wrap any supported callable shape in the matching :class:`Resolvable`.

    Supported shapes:
        - ``"package.module.ClassName::method"``: a static or class method.
        - ``"package.module.function"``: a function located by import path.
        - ``(instance_or_class, "method")``: a method looked up by name.
        - a class: its constructor.
        - a function, lambda, builtin, bound method or ``functools.partial``.
        - any other callable object, through its ``__call__`` method.

    Raises:
        ReflectionError: If the target cannot be located or is not callable.
    """
    if isinstance(target, str):
        if STATIC_METHOD_DELIMITER in target:
            class_path, _, method_name = target.partition(STATIC_METHOD_DELIMITER)
            return MethodResolvable(locate(class_path), method_name)
        located = locate(target)
        if isinstance(located, str):
            raise ReflectionError(f"[{target}] does not name a callable")
        return resolvable_for_callable(located)

    if isinstance(target, (tuple, list)) and len(target) == 2 and isinstance(target[1], str):
        owner, method_name = target
        return MethodResolvable(owner, method_name)

    if inspect.isclass(target):
        return ConstructorResolvable(target)

    if inspect.isroutine(target) or isinstance(target, functools.partial):
        return FunctionResolvable(target)

    if callable(target):
        return MethodResolvable(target, "__call__")

    raise ReflectionError(f"[{describe(target)}] is not callable")


def locate(path: str) -> Any:
    """Import the object named by a dotted path.

    The longest importable module prefix is imported and the remaining segments
    are looked up as attributes, so nested classes work too.

    Example:
        >>> locate("collections.OrderedDict")
        <class 'collections.OrderedDict'>

    Raises:
        ReflectionError: If no prefix of the path is an importable module, or an
            attribute along the way does not exist.
    """
    parts = path.split(".")
    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as error:
            if error.name and not (module_name + ".").startswith(error.name + "."):
                raise
            continue

        target: Any = module
        for attribute in parts[index:]:
            try:
                target = getattr(target, attribute)
            except AttributeError as error:
                raise ReflectionError(f"Class [{path}] does not exist") from error
        return target

    raise ReflectionError(f"Class [{path}] does not exist")


def is_instantiable(cls: type) -> bool:
    """False for abstract base classes with abstract members and for protocols."""
    return not inspect.isabstract(cls) and not getattr(cls, "_is_protocol", False)


def has_own_constructor(cls: type) -> bool:
    return cls.__init__ is not object.__init__ or cls.__new__ is not object.__new__


def _signature(target: Any) -> inspect.Signature:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError) as error:
        raise ReflectionError(f"Cannot reflect parameters of [{describe(target)}]") from error


def _get_parameters(
    hint_source: Any, signature: inspect.Signature, declaring_class: Optional[type]
) -> list[ParameterSpec]:
    """Build parameter specs from a signature and the evaluated type hints.

    Args:
        hint_source: The function whose annotations describe the parameters. For
            constructors this is ``__init__`` (or ``__new__``) rather than the class.
        signature: The signature of the callable that will actually be invoked.
        declaring_class: The class the callable belongs to, used to resolve
            ``typing.Self`` and forward references to the class itself.
    """
    annotations = _annotations(hint_source, signature, declaring_class)
    return [
        _make_parameter(parameter, annotations[name], declaring_class)
        for name, parameter in signature.parameters.items()
    ]


def _annotations(
    hint_source: Any, signature: inspect.Signature, declaring_class: Optional[type]
) -> dict[str, Any]:
    localns = {declaring_class.__name__: declaring_class} if declaring_class else None
    try:
        hints = get_type_hints(hint_source, localns=localns, include_extras=True)
    except (NameError, TypeError) as error:
        logger.debug(
            "Evaluating annotations of %s one by one: %s", describe(hint_source), error
        )
        hints = {}

    return {
        name: hints[name] if name in hints else _evaluate(parameter.annotation, hint_source, localns)
        for name, parameter in signature.parameters.items()
    }


def _evaluate(annotation: Any, hint_source: Any, localns: Optional[dict[str, Any]]) -> Any:
    """Look up a single string annotation by name, leaving unknown names as strings."""
    if annotation is inspect.Parameter.empty:
        return None
    if not isinstance(annotation, str):
        return annotation
    for namespace in (localns or {}, _module_namespace(hint_source), vars(builtins)):
        if annotation in namespace:
            return namespace[annotation]
    return annotation


def _module_namespace(hint_source: Any) -> dict[str, Any]:
    if isinstance(hint_source, functools.partial):
        hint_source = hint_source.func
    func = inspect.unwrap(getattr(hint_source, "__func__", hint_source))
    namespace = getattr(func, "__globals__", None)
    if namespace is not None:
        return namespace
    module = sys.modules.get(getattr(func, "__module__", None) or "")
    return vars(module) if module else {}


def _make_parameter(
    parameter: inspect.Parameter, annotation: Any, declaring_class: Optional[type]
) -> ParameterSpec:
    declared_type, nullable = _unwrap_optional(annotation)
    has_default = parameter.default is not inspect.Parameter.empty
    return ParameterSpec(
        parameter.name,
        parameter.kind,
        annotation,
        _dependency_key(declared_type, declaring_class),
        has_default,
        parameter.default if has_default else None,
        nullable,
    )


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Split ``Optional[X]`` into ``X`` and a nullability flag.

    Untyped and ``Any`` parameters are nullable. Unions of several non-None
    members are returned unchanged and end up treated as primitives.
    """
    if annotation is None or annotation is Any or annotation is type(None):
        return annotation, True

    if get_origin(annotation) is Annotated:
        base, *_ = get_args(annotation)
        return annotation, _unwrap_optional(base)[1]

    if get_origin(annotation) in (Union, types.UnionType):
        members = get_args(annotation)
        not_none = [member for member in members if member is not type(None)]
        if len(not_none) < len(members):
            return (not_none[0] if len(not_none) == 1 else annotation), True

    return annotation, False


def _dependency_key(declared_type: Any, declaring_class: Optional[type]) -> Optional[AbstractKey]:
    """Work out which key a parameter should be resolved from, or None for primitives.

    Example:
        >>> _dependency_key(Database, None)                          # Database
        >>> _dependency_key(Annotated[Cache, "redis"], None)         # "redis"
        >>> _dependency_key("NotYetDefined", None)                   # "NotYetDefined"
        >>> _dependency_key(int, None)                               # None
    """
    if get_origin(declared_type) is Annotated:
        base, *metadata = get_args(declared_type)
        qualifier = next((m for m in metadata if isinstance(m, str)), None)
        if qualifier is not None:
            return qualifier
        return _dependency_key(_unwrap_optional(base)[0], declaring_class)

    if declared_type is Self:
        return declaring_class

    if isinstance(declared_type, str):
        return declared_type

    if isinstance(declared_type, ForwardRef):
        return declared_type.__forward_arg__

    if (
        declared_type is not Any
        and get_origin(declared_type) is None
        and inspect.isclass(declared_type)
        and declared_type.__module__ != "builtins"
    ):
        return declared_type

    return None
