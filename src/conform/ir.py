from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterator, Union

@dataclass(frozen=True)
class Refinement:
    predicate: Any  # registered predicate name or a (value, arguments) callable
    arguments: Any = None

    def to_json_obj(self) -> dict:
        return {"predicate": predicate_name(self.predicate), "arguments": plain(self.arguments)}

@dataclass(frozen=True)
class TypeDescriptor:
    supertype: Union["TypeDescriptor", str, None] = None
    refinements: tuple[Refinement, ...] = ()
    name: str | None = None

    def __repr__(self) -> str:
        if self.name is not None:
            return f"<type {self.name}>"
        return f"TypeDescriptor(supertype={self.supertype!r}, refinements={self.refinements!r})"

    def to_json_obj(self) -> dict:
        return {
            "name": self.name,
            "supertype": plain(self.supertype),
            "refinements": [r.to_json_obj() for r in self.refinements],
        }

# Outcomes

class Ok:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OK"

OK = Ok()

class Err:
    """Explicit failure signal. Carries one or more reasons."""

    __slots__ = ("reasons",)

    def __init__(self, *reasons: Any):
        if not reasons:
            raise ValueError("Err needs at least one reason")
        self.reasons = tuple(reasons)

    @property
    def reason(self) -> Any:
        return self.reasons[0]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Err) and other.reasons == self.reasons

    def __hash__(self) -> int:
        return hash(self.reasons)

    def __repr__(self) -> str:
        return f"Err({', '.join(repr(r) for r in self.reasons)})"

Outcome = Union[Ok, Err]

# Reasons

@dataclass(frozen=True)
class Invalid:
    tag: Any

    def to_json_obj(self) -> Any:
        return plain(self.tag)

@dataclass(frozen=True)
class NestedError:
    address: Any
    errors: tuple["ErrorEntry", ...]

    def to_json_obj(self) -> list:
        return [plain(self.address), [e.to_json_obj() for e in self.errors]]

@dataclass(frozen=True)
class NestedErrors:
    entries: tuple[NestedError, ...]
    tag = "nested_errors"

    def to_json_obj(self) -> dict:
        return {self.tag: [e.to_json_obj() for e in self.entries]}

@dataclass(frozen=True)
class KeyErrors(NestedErrors):
    tag = "key_errors"

@dataclass(frozen=True)
class ValueErrors(NestedErrors):
    tag = "value_errors"

Reason = Union[Invalid, NestedErrors, KeyErrors, ValueErrors]

def as_reason(reason: Any) -> Reason:
    if isinstance(reason, (Invalid, NestedErrors)):
        return reason
    return Invalid(reason)

@dataclass(frozen=True)
class ErrorEntry:
    predicate: Any
    arguments: Any
    reason: Reason

    def to_json_obj(self) -> dict:
        return {
            "predicate": predicate_name(self.predicate),
            "arguments": plain(self.arguments),
            "reason": self.reason.to_json_obj(),
        }

def iter_leaves(report, path: tuple = ()) -> Iterator[tuple[tuple, ErrorEntry]]:
    """Yield ``(path, entry)`` for every terminal failure in a report.

    ``path`` lists the addresses (index, key, value or field name) walked from
    the validated value down to the one that failed.
    """
    for entry in report:
        if isinstance(entry.reason, NestedErrors):
            for nested in entry.reason.entries:
                yield from iter_leaves(nested.errors, path + (nested.address,))
        else:
            yield path, entry

def predicate_name(predicate: Any) -> str:
    if isinstance(predicate, str):
        return predicate
    return getattr(predicate, "__qualname__", None) or repr(predicate)

def plain(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, TypeDescriptor):
        return obj.name if obj.name is not None else obj.to_json_obj()
    if isinstance(obj, dict) or hasattr(obj, "items"):
        return {str(plain(k)): plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [plain(x) for x in obj]
    if callable(obj):
        return predicate_name(obj)
    return repr(obj)
