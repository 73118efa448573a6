from __future__ import annotations
import dataclasses
import logging
from typing import Any, Iterator

from .builtin import BUILTIN_TYPES
from .errors import CyclicSupertypeError, UnknownPredicateError, UnknownTypeError
from .ir import TypeDescriptor
from .predicates import BUILTIN_PREDICATES, Predicate

logger = logging.getLogger(__name__)

class TypeRegistry:
    """Named types and predicates.

    Descriptors may refer to other types by name (as a supertype or inside
    predicate arguments). Names are looked up here when validation reaches
    them, falling back to ``parent``.
    """

    def __init__(self, parent: TypeRegistry | None = None):
        self.parent = parent
        self._types: dict[str, TypeDescriptor] = {}
        self._predicates: dict[str, Predicate] = {}

    def child(self) -> TypeRegistry:
        return TypeRegistry(parent=self)

    def register(self, name: str, descriptor: TypeDescriptor, check: bool = True) -> TypeDescriptor:
        """Name ``descriptor``. With ``check=False`` cycles are left for :meth:`check`."""
        if descriptor.name is None:
            descriptor = dataclasses.replace(descriptor, name=name)
        previous = self._types.get(name)
        self._types[name] = descriptor
        if check:
            try:
                self._check_chain(name)
            except CyclicSupertypeError:
                if previous is None:
                    del self._types[name]
                else:
                    self._types[name] = previous
                raise
        logger.debug("registered type %s", name)
        return descriptor

    def register_predicate(self, name: str, predicate: Predicate) -> Predicate:
        self._predicates[name] = predicate
        logger.debug("registered predicate %s", name)
        return predicate

    def lookup(self, name: str) -> TypeDescriptor | None:
        registry: TypeRegistry | None = self
        while registry is not None:
            if name in registry._types:
                return registry._types[name]
            registry = registry.parent
        return None

    def resolve(self, ref: Any) -> TypeDescriptor:
        if isinstance(ref, TypeDescriptor):
            return ref
        if isinstance(ref, str):
            found = self.lookup(ref)
            if found is None:
                raise UnknownTypeError(f"Unknown type {ref!r}")
            return found
        raise UnknownTypeError(f"Not a type reference: {ref!r}")

    def predicate(self, ref: Any) -> Predicate:
        if callable(ref):
            return ref
        registry: TypeRegistry | None = self
        while registry is not None:
            if ref in registry._predicates:
                return registry._predicates[ref]
            registry = registry.parent
        raise UnknownPredicateError(f"Unknown predicate {ref!r}")

    def names(self, inherited: bool = True) -> list[str]:
        seen: set[str] = set()
        registry: TypeRegistry | None = self
        while registry is not None:
            seen.update(registry._types)
            registry = registry.parent if inherited else None
        return sorted(seen)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def _check_chain(self, name: str, strict: bool = False) -> None:
        seen = {name}
        current = self._types.get(name) or self.lookup(name)
        while current is not None and current.supertype is not None:
            ref = current.supertype
            if isinstance(ref, str):
                if ref in seen:
                    raise CyclicSupertypeError(f"Supertype cycle through {ref!r}", path=name)
                seen.add(ref)
                current = self.lookup(ref)
                if current is None and strict:
                    raise UnknownTypeError(f"Unknown supertype {ref!r}", path=name)
            else:
                current = ref

    def check(self) -> None:
        """Fail if any type registered here has a dangling or cyclic supertype chain."""
        for name in self._types:
            self._check_chain(name, strict=True)

def _builtin_registry() -> TypeRegistry:
    registry = TypeRegistry()
    for name, predicate in BUILTIN_PREDICATES.items():
        registry.register_predicate(name, predicate)
    for name, descriptor in BUILTIN_TYPES.items():
        registry.register(name, descriptor)
    return registry

default_registry = _builtin_registry()
