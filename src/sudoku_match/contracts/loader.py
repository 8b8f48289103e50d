"""Schema loading utilities for message and match-service contracts."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import jsonschema

_SCHEMA_ROOT = Path(__file__).resolve().parent / "schemas"
_CATALOG_PATH = _SCHEMA_ROOT / "catalog.json"


@dataclass(frozen=True)
class SchemaDescriptor:
    """Descriptor describing a schema entry from the catalog."""

    name: str
    version: str
    schema_id: str
    schema_path: str


@lru_cache(maxsize=1)
def load_catalog() -> Dict[str, SchemaDescriptor]:
    """Load and cache the schema catalog."""

    raw_catalog = json.loads(_CATALOG_PATH.read_text("utf-8"))
    return {
        name: SchemaDescriptor(
            name=name,
            version=payload["version"],
            schema_id=payload["schema_id"],
            schema_path=payload["schema_path"],
        )
        for name, payload in raw_catalog.items()
    }


def get_descriptor(name: str) -> SchemaDescriptor:
    catalog = load_catalog()
    if name not in catalog:
        raise KeyError(f"Unknown contract: {name}")
    return catalog[name]


@lru_cache(maxsize=None)
def _read_schema(schema_path: str) -> Dict[str, Any]:
    resolved = (_SCHEMA_ROOT / schema_path).resolve()
    if not str(resolved).startswith(str(_SCHEMA_ROOT)):
        raise ValueError("Schema path escapes the contracts directory")
    return json.loads(resolved.read_text("utf-8"))


def load_schema(name: str) -> Dict[str, Any]:
    """Return a copy of the JSON schema registered under ``name``."""

    descriptor = get_descriptor(name)
    schema = _read_schema(descriptor.schema_path)
    if schema.get("$id") != descriptor.schema_id:
        raise ValueError(
            f"Schema id mismatch: catalog has {descriptor.schema_id!r}, schema has {schema.get('$id')!r}"
        )
    return copy.deepcopy(schema)


@lru_cache(maxsize=None)
def compiled(name: str) -> jsonschema.Draft202012Validator:
    schema = load_schema(name)
    jsonschema.Draft202012Validator.check_schema(schema)
    return jsonschema.Draft202012Validator(schema)


__all__ = [
    "SchemaDescriptor",
    "compiled",
    "get_descriptor",
    "load_catalog",
    "load_schema",
]
