"""Registry of bindings and singleton flags."""

from typing import Any

from autowiring.domain import AbstractKey, Concrete, make_concrete

__all__ = ["BindingRegistry"]


class BindingRegistry:
    """Maps abstracts to the concretes they are built from.

    Bindings are never removed, only overwritten (the last bind wins). Singleton
    flags are only ever added.
    """

    def __init__(self):
        self._bound: dict[AbstractKey, Concrete] = {}
        self._singletons: set[AbstractKey] = set()

    def register(self, abstract: AbstractKey, concrete: Any = None, singleton: bool = False):
        """Bind an abstract to a concrete.

        Args:
            abstract: The key dependants ask for.
            concrete: A class, dotted path or factory callable. Defaults to the
                abstract itself.
            singleton: If True the abstract is flagged to be resolved at most once.
        """
        if singleton:
            self._singletons.add(abstract)
        self._bound[abstract] = make_concrete(abstract, concrete)

    def concrete_for(self, abstract: AbstractKey) -> Concrete:
        """The bound concrete, or the abstract itself if it was never bound."""
        if abstract in self._bound:
            return self._bound[abstract]
        return make_concrete(abstract)

    def is_singleton(self, abstract: AbstractKey) -> bool:
        return abstract in self._singletons

    def __contains__(self, abstract: AbstractKey) -> bool:
        return abstract in self._bound
