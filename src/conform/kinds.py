from __future__ import annotations
import asyncio.subprocess
import dataclasses
import enum
import io
import multiprocessing.process
import socket
import subprocess
import weakref
from collections.abc import Mapping, Sequence
from typing import Any, Callable

from .errors import UnknownKindError

class Kind(str, enum.Enum):
    ATOM = "atom"
    BINARY = "binary"
    BITSTRING = "bitstring"
    BOOLEAN = "boolean"
    FLOAT = "float"
    FUNCTION = "function"
    INTEGER = "integer"
    LIST = "list"
    MAP = "map"
    NIL = "nil"
    NUMBER = "number"
    PID = "pid"
    PORT = "port"
    REFERENCE = "reference"
    TUPLE = "tuple"

_BINARY_TYPES = (str, bytes, bytearray, memoryview)
_PROCESS_TYPES = (subprocess.Popen, multiprocessing.process.BaseProcess, asyncio.subprocess.Process)
_PORT_TYPES = (socket.socket, io.IOBase)

def is_record(value: Any) -> bool:
    """Dataclass and namedtuple instances are tagged records; their class is the tag."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    return isinstance(value, tuple) and hasattr(type(value), "_fields")

def record_items(value: Any) -> list[tuple[str, Any]]:
    if isinstance(value, tuple):
        return list(zip(type(value)._fields, value))
    return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]

def is_map(value: Any) -> bool:
    return isinstance(value, Mapping) or is_record(value)

def map_items(value: Any) -> list[tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return list(value.items())
    return record_items(value)

def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, _BINARY_TYPES + (tuple,))

def is_composite(value: Any) -> bool:
    """Containers the structural checkers descend into."""
    return is_sequence(value) or is_map(value)

def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

GUARDS: dict[Kind, Callable[[Any], bool]] = {
    Kind.ATOM: lambda v: v is None or isinstance(v, (bool, enum.Enum)),
    Kind.BINARY: lambda v: isinstance(v, _BINARY_TYPES),
    Kind.BITSTRING: lambda v: isinstance(v, _BINARY_TYPES),
    Kind.BOOLEAN: lambda v: isinstance(v, bool),
    Kind.FLOAT: lambda v: isinstance(v, float),
    Kind.FUNCTION: lambda v: callable(v) and not isinstance(v, type),
    Kind.INTEGER: _is_integer,
    Kind.LIST: lambda v: isinstance(v, list),
    Kind.MAP: is_map,
    Kind.NIL: lambda v: v is None,
    Kind.NUMBER: lambda v: _is_integer(v) or isinstance(v, float),
    Kind.PID: lambda v: isinstance(v, _PROCESS_TYPES),
    Kind.PORT: lambda v: isinstance(v, _PORT_TYPES),
    Kind.REFERENCE: lambda v: isinstance(v, weakref.ReferenceType),
    Kind.TUPLE: lambda v: isinstance(v, tuple),
}

def _reason(kind: Kind) -> str:
    if kind is Kind.NIL:
        return "not_nil"
    if kind in (Kind.ATOM, Kind.INTEGER):
        return f"not_an_{kind.value}"
    return f"not_a_{kind.value}"

REASONS: dict[Kind, str] = {kind: _reason(kind) for kind in Kind}

# Most specific first; atom last since None and bool are atoms too.
_KIND_ORDER = (
    Kind.NIL, Kind.BOOLEAN, Kind.INTEGER, Kind.FLOAT, Kind.BINARY, Kind.LIST,
    Kind.TUPLE, Kind.MAP, Kind.REFERENCE, Kind.FUNCTION, Kind.PID, Kind.PORT, Kind.ATOM,
)

def as_kind(tag: Any) -> Kind:
    try:
        return Kind(tag)
    except ValueError:
        raise UnknownKindError(f"Unknown kind {tag!r}") from None

def kind_of(value: Any) -> Kind | None:
    for kind in _KIND_ORDER:
        if GUARDS[kind](value):
            return kind
    return None
