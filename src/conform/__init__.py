"""Runtime structural validation against declarative type descriptors."""

from .engine import Validator, errors, is_valid, resolve_chain, resolve_levels
from .errors import (
    ConfigError, ConformError, CyclicSupertypeError, DepthLimitError, PredicateContractError,
    UnknownKindError, UnknownPredicateError, UnknownTypeError, ValueCycleError,
)
from .ir import (
    OK, Err, ErrorEntry, Invalid, KeyErrors, NestedError, NestedErrors, Refinement,
    TypeDescriptor, ValueErrors, iter_leaves,
)
from .kinds import Kind
from .registry import TypeRegistry, default_registry

__all__ = [
    "errors",
    "is_valid",
    "resolve_chain",
    "resolve_levels",
    "Validator",
    "TypeDescriptor",
    "Refinement",
    "ErrorEntry",
    "NestedError",
    "Invalid",
    "NestedErrors",
    "KeyErrors",
    "ValueErrors",
    "OK",
    "Err",
    "iter_leaves",
    "Kind",
    "TypeRegistry",
    "default_registry",
    "ConformError",
    "ConfigError",
    "CyclicSupertypeError",
    "DepthLimitError",
    "PredicateContractError",
    "UnknownKindError",
    "UnknownPredicateError",
    "UnknownTypeError",
    "ValueCycleError",
]
