"""The dependency injection container.

A :class:`Container` builds instances on demand by inspecting constructors and
callables, resolving each parameter either from caller-supplied overrides, by
recursively building the parameter's declared type, or from the parameter's
default. Nothing is resolved ahead of time and reflection metadata is not cached:
every ``make`` or ``call`` re-inspects its target.

Containers are not thread-safe. The override stack and instance cache are plain
mutable state, so a container must not be shared between threads resolving
concurrently without external locking.
"""

import inspect
import logging
from collections.abc import Iterable
from typing import Any, Mapping, Optional

from autowiring.domain import AbstractKey, FactoryConcrete, ParameterSpec
from autowiring.errors import NotInstantiable, ReflectionError, describe
from autowiring.override_stack import OverrideStack
from autowiring.reflection import (
    ConstructorResolvable,
    Resolvable,
    has_own_constructor,
    is_instantiable,
    locate,
    resolvable_for_callable,
)
from autowiring.registry import BindingRegistry

__all__ = ["Container"]

logger = logging.getLogger(__name__)


class Container:
    """Binding registry, singleton cache and autowiring resolver.

    Example:
        >>> container = Container.create()
        >>> container.bind(Mailer, SmtpMailer).singleton(Clock, lambda: SystemClock())
        >>> service = container.make(SignupService, {"sender": "noreply@example.com"})
        >>> container.call(send_welcome, {"user_id": 42})
    """

    def __init__(self):
        self._registry = BindingRegistry()
        self._instances: dict[AbstractKey, Any] = {}
        self._overrides = OverrideStack()

    @classmethod
    def create(
        cls,
        binds: Optional[Mapping[AbstractKey, Any]] = None,
        singletons: Optional[Mapping[AbstractKey, Any]] = None,
    ) -> "Container":
        """Create a container seeded with bindings.

        The container registers itself as a singleton under its own class, so a
        dependency declared as the container resolves to the very instance doing
        the resolving. The self-binding is registered before ``singletons`` is
        applied, so callers may replace it.

        Args:
            binds: Abstracts mapped to the concretes they should be built from.
            singletons: Abstracts mapped to concretes, each flagged as a singleton.
                A value of None binds the abstract to itself.

        Returns:
            The new container.
        """
        container = cls()

        for abstract, concrete in (binds or {}).items():
            container.bind(abstract, concrete)

        container.singleton(cls, lambda: container)

        for abstract, concrete in (singletons or {}).items():
            container.singleton(abstract, concrete)

        return container

    def bind(self, abstract: AbstractKey, concrete: Any = None, singleton: bool = False) -> "Container":
        """Bind an abstract to a class, dotted path or factory.

        Nothing is checked at this point; a concrete that cannot be built fails
        when it is first resolved.

        Returns:
            This container, to allow chaining.
        """
        logger.debug(
            "Binding %s to %s%s",
            describe(abstract),
            describe(abstract if concrete is None else concrete),
            " as singleton" if singleton else "",
        )
        self._registry.register(abstract, concrete, singleton)
        return self

    def singleton(self, abstract: AbstractKey, concrete: Any = None) -> "Container":
        """Bind an abstract that should be built at most once."""
        return self.bind(abstract, concrete, True)

    def make(self, abstract: AbstractKey, args: Optional[Mapping[str, Any]] = None) -> Any:
        """Resolve an abstract to an instance.

        Args:
            abstract: A class, a dotted path, a bound key or a callable.
            args: Values for specific parameters, keyed by parameter name, used
                instead of autowiring. Applies only to the abstract's own
                parameters, not to those of its dependencies, and is ignored when
                a singleton has already been built.

        Returns:
            The resolved instance, or the factory's return value.

        Raises:
            NotInstantiable: If the abstract or one of its parameters cannot be resolved.
            ReflectionError: If the abstract (or its bound concrete) cannot be located
                or introspected.
        """
        return self._resolve(abstract, args or {})

    def call(self, target: Any, args: Optional[Mapping[str, Any]] = None) -> Any:
        """Invoke a callable, autowiring its parameters.

        Args:
            target: A function, a ``(instance_or_class, "method")`` pair, a
                ``"package.module.ClassName::method"`` string, a dotted path to a
                function, a class or a callable object.
            args: Values for specific parameters, keyed by parameter name.

        Returns:
            Whatever the target returns. Nothing is cached.

        Raises:
            NotInstantiable: If a parameter cannot be resolved.
            ReflectionError: If the target cannot be located or is not callable.
        """
        resolvable = resolvable_for_callable(target)
        logger.debug("Calling %s", describe(target))
        with self._overrides.frame(args):
            positional, keywords = self._resolve_dependencies(resolvable.parameters())
        return resolvable.invoke(positional, keywords)

    def _resolve(self, abstract: AbstractKey, args: Mapping[str, Any]) -> Any:
        singleton = self._registry.is_singleton(abstract)
        if singleton and abstract in self._instances:
            logger.debug("Reusing singleton %s", describe(abstract))
            return self._instances[abstract]

        with self._overrides.frame(args):
            instance = self._build(abstract)

        if singleton:
            self._instances[abstract] = instance
        return instance

    def _build(self, abstract: AbstractKey) -> Any:
        concrete = self._registry.concrete_for(abstract)
        logger.debug("Building %s from %s", describe(abstract), concrete)

        if isinstance(concrete, FactoryConcrete):
            return self._invoke(resolvable_for_callable(concrete.func))

        cls = locate(concrete.target) if isinstance(concrete.target, str) else concrete.target
        if not inspect.isclass(cls):
            raise ReflectionError(f"[{describe(cls)}] is not a class")

        if not is_instantiable(cls):
            raise NotInstantiable.default(abstract)

        if not has_own_constructor(cls):
            return cls()

        return self._invoke(ConstructorResolvable(cls))

    def _invoke(self, resolvable: Resolvable) -> Any:
        positional, keywords = self._resolve_dependencies(resolvable.parameters())
        return resolvable.invoke(positional, keywords)

    def _resolve_dependencies(self, parameters: list[ParameterSpec]) -> tuple[list[Any], dict[str, Any]]:
        """Resolve each parameter in declaration order.

        Returns:
            The positional arguments and the keyword-only arguments to invoke with.
        """
        positional: list[Any] = []
        keywords: dict[str, Any] = {}
        overrides = self._overrides.current

        for parameter in parameters:
            if parameter.name in overrides:
                value = overrides[parameter.name]
                if parameter.is_variadic:
                    positional.extend(_spread(value))
                elif parameter.is_keyword_variadic:
                    keywords.update(value)
                elif parameter.is_keyword_only:
                    keywords[parameter.name] = value
                else:
                    positional.append(value)
                continue

            if parameter.is_variadic or parameter.is_keyword_variadic:
                continue

            if parameter.dependency is None:
                value = self._resolve_primitive(parameter)
            else:
                value = self._resolve_class(parameter)

            if parameter.is_keyword_only:
                keywords[parameter.name] = value
            else:
                positional.append(value)

        return positional, keywords

    def _resolve_primitive(self, parameter: ParameterSpec) -> Any:
        if parameter.has_default:
            return parameter.default
        if parameter.nullable:
            return None
        raise NotInstantiable.primitive(parameter.name)

    def _resolve_class(self, parameter: ParameterSpec) -> Any:
        try:
            return self.make(parameter.dependency)
        except (ValueError, ReflectionError) as error:
            logger.debug(
                "Could not resolve %s for parameter %s: %s",
                describe(parameter.dependency),
                parameter.name,
                error,
            )
            if parameter.has_default:
                return parameter.default
            if parameter.nullable:
                return None
            raise NotInstantiable.for_class(parameter.name) from error


def _spread(value: Any) -> list[Any]:
    """Treat a variadic override as a sequence, wrapping single values."""
    if value is None:
        return []
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        return list(value)
    return [value]
