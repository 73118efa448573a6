from __future__ import annotations
import logging
import pathlib
from dataclasses import dataclass
from typing import Any, Dict

import tomli

from .engine import DEFAULT_MAX_DEPTH
from .errors import ConfigError, ConformError
from .ir import Refinement, TypeDescriptor
from .registry import TypeRegistry, default_registry

logger = logging.getLogger(__name__)

@dataclass
class Config:
    registry: TypeRegistry
    max_depth: int = DEFAULT_MAX_DEPTH

def parse_document(text: str) -> Dict[str, Any]:
    try:
        return tomli.loads(text)
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e

def _refinement(raw: Any, path: str) -> Refinement:
    if not isinstance(raw, dict):
        raise ConfigError(f"Refinement must be a table at {path}", path)
    unknown = set(raw) - {"predicate", "arguments"}
    if unknown:
        raise ConfigError(f"Unexpected field {sorted(unknown)[0]} at {path}", path)
    if not isinstance(raw.get("predicate"), str):
        raise ConfigError(f"Missing predicate name at {path}", path)
    return Refinement(raw["predicate"], raw.get("arguments"))

def _descriptor(name: str, raw: Any) -> TypeDescriptor:
    path = f"types.{name}"
    if not isinstance(raw, dict):
        raise ConfigError(f"Type declaration must be a table at {path}", path)
    unknown = set(raw) - {"supertype", "refinements"}
    if unknown:
        raise ConfigError(f"Unexpected field {sorted(unknown)[0]} at {path}", path)
    supertype = raw.get("supertype")
    if supertype is not None and not isinstance(supertype, str):
        raise ConfigError(f"Supertype must be a type name at {path}.supertype", f"{path}.supertype")
    refinements = raw.get("refinements", [])
    if not isinstance(refinements, list):
        raise ConfigError(f"Refinements must be an array at {path}.refinements", f"{path}.refinements")
    return TypeDescriptor(
        supertype=supertype,
        refinements=tuple(_refinement(r, f"{path}.refinements[{i}]") for i, r in enumerate(refinements)),
        name=name,
    )

def _max_depth(settings: Any) -> int:
    if not isinstance(settings, dict):
        raise ConfigError("settings must be a table", "settings")
    max_depth = settings.get("max_depth", DEFAULT_MAX_DEPTH)
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise ConfigError("settings.max_depth must be a positive integer", "settings.max_depth")
    return max_depth

def load_types(text: str, registry: TypeRegistry | None = None) -> Config:
    """Register every ``[types.<name>]`` table into a fresh child registry.

    Names used as supertypes or inside arguments may refer to built-in types,
    to types of ``registry`` or to any type in the same document regardless of
    declaration order.
    """
    doc = parse_document(text)
    types = doc.get("types", {})
    if not isinstance(types, dict):
        raise ConfigError("types must be a table", "types")
    parent = registry if registry is not None else default_registry
    target = parent.child()
    # Register everything before checking so forward references resolve.
    for name, raw in types.items():
        target.register(name, _descriptor(name, raw), check=False)
    try:
        target.check()
    except ConformError as e:
        raise ConfigError(str(e), f"types.{e.path}" if e.path else "types") from e
    logger.debug("loaded %d types", len(types))
    return Config(registry=target, max_depth=_max_depth(doc.get("settings", {})))

def load_path(path: str | pathlib.Path, registry: TypeRegistry | None = None) -> Config:
    try:
        text = pathlib.Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read types file: {e.strerror or e}", str(path)) from e
    return load_types(text, registry)
