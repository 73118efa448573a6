"""Factory functions for building type descriptors in code.

    >>> from conform.notation import subtype
    >>> positive = subtype("integer", lambda v: v > 0)
    >>> even = subtype(positive, lambda v: v % 2 == 0)
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Any, Callable

from .ir import Refinement, TypeDescriptor

def as_refinement(raw: Any) -> Refinement:
    if isinstance(raw, Refinement):
        return raw
    if isinstance(raw, tuple) and len(raw) == 2:
        return Refinement(*raw)
    if callable(raw):
        return Refinement("fun", raw)
    raise TypeError(f"Cannot build a refinement from {raw!r}")

def subtype(supertype: Any, *refinements: Any, name: str | None = None) -> TypeDescriptor:
    return TypeDescriptor(
        supertype=supertype,
        refinements=tuple(as_refinement(r) for r in refinements),
        name=name,
    )

def refine(type_: TypeDescriptor, *refinements: Any) -> TypeDescriptor:
    """A copy of ``type_`` with ``refinements`` appended after its own."""
    return TypeDescriptor(
        supertype=type_.supertype,
        refinements=type_.refinements + tuple(as_refinement(r) for r in refinements),
        name=type_.name,
    )

def type_of(function: Callable[[Any], Any], name: str | None = None) -> TypeDescriptor:
    return TypeDescriptor(refinements=(Refinement("fun", function),), name=name)

def list_of(element_type: Any, name: str | None = None) -> TypeDescriptor:
    return TypeDescriptor(
        refinements=(Refinement("list", MappingProxyType({"element_type": element_type})),),
        name=name,
    )

def map_of(keys: Any = None, values: Any = None, fields: Any = None,
           name: str | None = None) -> TypeDescriptor:
    options = {}
    if keys is not None:
        options["keys"] = keys
    if values is not None:
        options["values"] = values
    if fields is not None:
        options["fields"] = MappingProxyType(dict(fields))
    return TypeDescriptor(refinements=(Refinement("map", MappingProxyType(options)),), name=name)

def structure(fields: Any, tag: Any = None, name: str | None = None) -> TypeDescriptor:
    """A tagged record whose named fields each have their own type."""
    return TypeDescriptor(
        refinements=(
            Refinement("is_struct", tag),
            Refinement("map", MappingProxyType({"fields": MappingProxyType(dict(fields))})),
        ),
        name=name,
    )
