"""Autowiring dependency injection container.

Autowiring builds objects on demand by reading constructor and function
signatures: each parameter is filled from a caller-supplied override, by
recursively building its annotated type, or from its default. Abstract types can
be bound to concrete classes or factory callables, and bindings can be flagged as
singletons.

Key Features:
    - Constructor and callable autowiring from standard type hints
    - Interface-to-implementation and factory bindings
    - Singleton bindings, built once per container
    - Per-call named parameter overrides, including variadic spreading
    - Static method and dotted import path targets

Basic Usage:
    >>> from autowiring.container import Container
    >>>
    >>> container = Container.create()
    >>> container.singleton(Database, PostgresDatabase)
    >>>
    >>> service = container.make(UserService)
    >>> report = container.call(build_report, {"month": 3})

The package consists of several modules:
    - container: The Container and its resolution algorithm
    - registry: Binding and singleton registration
    - reflection: Parameter introspection adapters for each callable shape
    - override_stack: Per-call parameter override frames
    - domain: Core domain models (ParameterSpec, concretes)
    - errors: Package-specific exceptions
"""
