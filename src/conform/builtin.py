from __future__ import annotations

from .ir import Refinement, TypeDescriptor
from .kinds import Kind

ANY = TypeDescriptor(name="any")

def _guarded(kind: Kind, name: str | None = None) -> TypeDescriptor:
    return TypeDescriptor(refinements=(Refinement("is", kind.value),), name=name or kind.value)

ATOM = _guarded(Kind.ATOM)
BINARY = _guarded(Kind.BINARY)
BITSTRING = _guarded(Kind.BITSTRING)
BOOLEAN = _guarded(Kind.BOOLEAN)
FLOAT = _guarded(Kind.FLOAT)
FUNCTION = _guarded(Kind.FUNCTION)
INTEGER = _guarded(Kind.INTEGER)
MAP = _guarded(Kind.MAP)
NIL = _guarded(Kind.NIL)
NUMBER = _guarded(Kind.NUMBER)
PID = _guarded(Kind.PID)
PORT = _guarded(Kind.PORT)
REFERENCE = _guarded(Kind.REFERENCE)
STRING = _guarded(Kind.BINARY, "string")
TUPLE = _guarded(Kind.TUPLE)
LIST = TypeDescriptor(refinements=(Refinement("list"),), name="list")
STRUCT = TypeDescriptor(refinements=(Refinement("is_struct"),), name="struct")

BUILTIN_TYPES: dict[str, TypeDescriptor] = {
    t.name: t
    for t in (
        ANY, ATOM, BINARY, BITSTRING, BOOLEAN, FLOAT, FUNCTION, INTEGER, LIST, MAP,
        NIL, NUMBER, PID, PORT, REFERENCE, STRING, STRUCT, TUPLE,
    )
}
