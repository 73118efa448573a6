from __future__ import annotations
import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from .errors import CyclicSupertypeError, DepthLimitError, ValueCycleError
from .ir import Err, ErrorEntry, Refinement, TypeDescriptor
from .kinds import is_composite
from .predicates import normalize
from .registry import TypeRegistry, default_registry

logger = logging.getLogger(__name__)

# Each nesting level costs a handful of Python frames, so stay well under the
# interpreter's recursion limit.
DEFAULT_MAX_DEPTH = 100

@dataclass
class EvalContext:
    registry: TypeRegistry
    max_depth: int = DEFAULT_MAX_DEPTH
    depth: int = 0
    ancestors: list[tuple[int, int]] = field(default_factory=list)  # (value id, type id) on the current path

_active: ContextVar[EvalContext | None] = ContextVar("conform_eval_context", default=None)

def resolve_levels(type_: Any, registry: TypeRegistry | None = None) -> list[tuple[TypeDescriptor, tuple[Refinement, ...]]]:
    registry = registry if registry is not None else default_registry
    levels = []
    seen: set[int] = set()
    current: TypeDescriptor | None = registry.resolve(type_)
    while current is not None:
        if id(current) in seen:
            raise CyclicSupertypeError(f"Supertype cycle at {current!r}")
        seen.add(id(current))
        levels.append((current, current.refinements))
        current = registry.resolve(current.supertype) if current.supertype is not None else None
    levels.reverse()
    return levels

def resolve_chain(type_: Any, registry: TypeRegistry | None = None) -> list[Refinement]:
    """Every refinement that applies to ``type_``, supertypes first."""
    chain = [r for _, refinements in resolve_levels(type_, registry) for r in refinements]
    logger.debug("resolved %r to %d refinements", type_, len(chain))
    return chain

def _walk(ctx: EvalContext, value: Any, type_: Any) -> list[ErrorEntry]:
    if ctx.depth >= ctx.max_depth:
        raise DepthLimitError(f"Value nested deeper than {ctx.max_depth} levels")
    descriptor = ctx.registry.resolve(type_)
    # The same container checked against the same type while already on the
    # path can only mean the value refers to itself.
    key = (id(value), id(descriptor))
    tracked = is_composite(value)
    if tracked:
        if key in ctx.ancestors:
            raise ValueCycleError(f"Value contains itself: {type(value).__name__} at depth {ctx.depth}")
        ctx.ancestors.append(key)
    ctx.depth += 1
    try:
        report = []
        for refinement in resolve_chain(descriptor, ctx.registry):
            predicate = ctx.registry.predicate(refinement.predicate)
            outcome = normalize(predicate(value, refinement.arguments), refinement.predicate)
            if isinstance(outcome, Err):
                for reason in outcome.reasons:
                    report.append(ErrorEntry(refinement.predicate, refinement.arguments, reason))
        return report
    finally:
        ctx.depth -= 1
        if tracked:
            ctx.ancestors.pop()

def errors(value: Any, type_: Any, *, registry: TypeRegistry | None = None,
           max_depth: int | None = None) -> list[ErrorEntry]:
    """Validate ``value`` against ``type_`` and return every failure.

    An empty list means the value is valid. Calls made while another
    validation is running (from structural predicates) continue its depth
    count and cycle tracking, and use its registry and depth limit unless
    given their own.
    """
    outer = _active.get()
    if outer is not None and registry is None and max_depth is None:
        return _walk(outer, value, type_)
    if outer is None:
        ctx = EvalContext(
            registry=registry if registry is not None else default_registry,
            max_depth=DEFAULT_MAX_DEPTH if max_depth is None else max_depth,
        )
    else:
        ctx = EvalContext(
            registry=registry if registry is not None else outer.registry,
            max_depth=outer.max_depth if max_depth is None else max_depth,
            depth=outer.depth,
            ancestors=outer.ancestors,
        )
    token = _active.set(ctx)
    try:
        return _walk(ctx, value, type_)
    finally:
        _active.reset(token)

def is_valid(value: Any, type_: Any, **kwargs: Any) -> bool:
    return not errors(value, type_, **kwargs)

@dataclass
class Validator:
    registry: TypeRegistry = field(default_factory=lambda: default_registry)
    max_depth: int = DEFAULT_MAX_DEPTH

    def errors(self, value: Any, type_: Any) -> list[ErrorEntry]:
        return errors(value, type_, registry=self.registry, max_depth=self.max_depth)

    def is_valid(self, value: Any, type_: Any) -> bool:
        return not self.errors(value, type_)
