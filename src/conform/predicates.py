"""Built-in predicates and the predicate contract.

A predicate is called as ``predicate(value, arguments)`` and answers with one
of four raw forms: ``True``, ``False``, ``OK`` or ``Err(reason, ...)``.
:func:`normalize` turns those into an outcome (``OK`` or ``Err``) and rejects
anything else.
"""
from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Callable

from .errors import PredicateContractError
from .ir import (
    OK, Err, Invalid, KeyErrors, NestedError, NestedErrors, Ok, Outcome, ValueErrors,
    as_reason, predicate_name,
)
from .kinds import REASONS, Kind, as_kind, GUARDS, is_map, is_record, is_sequence, map_items

Predicate = Callable[[Any, Any], Any]

def normalize(raw: Any, predicate: Any = None) -> Outcome:
    if raw is True or isinstance(raw, Ok):
        return OK
    if raw is False:
        return Err(Invalid("invalid"))
    if isinstance(raw, Err):
        return Err(*(as_reason(r) for r in raw.reasons))
    where = f" from {predicate_name(predicate)}" if predicate is not None else ""
    raise PredicateContractError(f"Unrecognized predicate result{where}: {raw!r}")

def fun(value: Any, function: Callable[[Any], Any]) -> Outcome:
    """Run ``function(value)`` and normalize what it returns.

    >>> fun(1, lambda v: v > 0)
    OK
    >>> fun(0, lambda v: v > 0)
    Err(Invalid(tag='invalid'))
    """
    return normalize(function(value), function)

def is_(value: Any, kind: Any = None) -> Outcome:
    kind = Kind.NIL if kind is None else as_kind(kind)
    if kind is Kind.NIL:
        return OK if value is None else Err(Invalid(REASONS[kind]))
    if GUARDS[kind](value):
        return OK
    return Err(Invalid(REASONS[kind]))

def _options(options: Any) -> Mapping:
    if options is None:
        return {}
    if isinstance(options, Mapping):
        return options
    # keyword-list style: [("element_type", T), ...]
    return dict(options)

def _collect(pairs) -> list[NestedError]:
    from .engine import errors

    collected = []
    for address, item, type_ in pairs:
        sub = errors(item, type_)
        if sub:
            collected.append(NestedError(address, tuple(sub)))
    return collected

def list_(value: Any, options: Any = None) -> Outcome:
    if not is_sequence(value):
        return Err(Invalid("not_a_sequence"))
    element_type = _options(options).get("element_type")
    if element_type is None:
        return OK
    nested = _collect((idx, e, element_type) for idx, e in enumerate(value))
    return Err(NestedErrors(tuple(nested))) if nested else OK

def _fields(fields: Any) -> list[tuple[Any, Any]]:
    if isinstance(fields, Mapping):
        return list(fields.items())
    return [tuple(pair) for pair in fields]

def map_(value: Any, options: Any = None) -> Outcome:
    """Check map shape plus any of ``keys``, ``values`` and ``fields``.

    Each requested check reports its own collection: ``KeyErrors`` addressed
    by key, ``ValueErrors`` addressed by value and ``NestedErrors`` addressed
    by field name.
    """
    if not is_map(value):
        return Err(Invalid("not_a_map"))
    opts = _options(options)
    items = map_items(value)
    reasons = []
    if opts.get("keys") is not None:
        nested = _collect((k, k, opts["keys"]) for k, _ in items)
        if nested:
            reasons.append(KeyErrors(tuple(nested)))
    if opts.get("values") is not None:
        nested = _collect((v, v, opts["values"]) for _, v in items)
        if nested:
            reasons.append(ValueErrors(tuple(nested)))
    if opts.get("fields") is not None:
        lookup = dict(items) if not isinstance(value, Mapping) else value
        nested = _collect((name, lookup.get(name), type_) for name, type_ in _fields(opts["fields"]))
        if nested:
            reasons.append(NestedErrors(tuple(nested)))
    return Err(*reasons) if reasons else OK

def _tag_matches(tag: type, expected: Any) -> bool:
    if isinstance(expected, str):
        return expected == f"{tag.__module__}.{tag.__qualname__}"
    return tag is expected

def is_struct(value: Any, expected: Any = None) -> Outcome:
    if not is_record(value):
        return Err(Invalid("not_a_struct"))
    if expected is None or _tag_matches(type(value), expected):
        return OK
    return Err(Invalid("invalid_struct"))

BUILTIN_PREDICATES: dict[str, Predicate] = {
    "fun": fun,
    "is": is_,
    "list": list_,
    "map": map_,
    "is_struct": is_struct,
}
