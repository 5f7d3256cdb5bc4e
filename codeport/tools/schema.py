"""
Argument schema derivation.

Turns a tool's typed argument shape into the JSON schema advertised to the
model. Pydantic generates the schema; this module normalizes it so every
registration yields a minimal, stable document.
"""

import inspect
from typing import Any, Optional

from pydantic import TypeAdapter

# Keys that describe the document rather than the data.
_META_KEYS = ("$schema", "title")

# Keywords whose value maps user-chosen names to sub-schemas.
_NAMED_SCHEMA_KEYS = ("properties", "$defs", "definitions", "patternProperties")


def is_unit_type(arg_type: Any) -> bool:
    """Return True when the argument shape carries no information."""
    return arg_type is None or arg_type is type(None) or arg_type is inspect.Parameter.empty


def strip_schema_metadata(schema: Any) -> Any:
    """Remove ``title`` and ``$schema`` keywords at every level.

    Names under ``properties`` and ``$defs`` are data, not keywords, so a
    property that is itself called ``title`` survives.
    """
    if isinstance(schema, list):
        return [strip_schema_metadata(item) for item in schema]
    if not isinstance(schema, dict):
        return schema

    cleaned: dict[str, Any] = {}
    for key, value in schema.items():
        if key in _META_KEYS:
            continue
        if key in _NAMED_SCHEMA_KEYS and isinstance(value, dict):
            cleaned[key] = {
                name: strip_schema_metadata(sub) for name, sub in value.items()
            }
        else:
            cleaned[key] = strip_schema_metadata(value)
    return cleaned


def derive_schema(arg_type: Any) -> Optional[dict]:
    """
    Derive the advertised JSON schema for a tool argument type.

    Args:
        arg_type: The annotated type of the tool's argument, or a unit
            marker (``None``, ``NoneType``, ``inspect.Parameter.empty``).

    Returns:
        A self-contained JSON schema dict, or None for the unit shape.
    """
    if is_unit_type(arg_type):
        return None
    schema = TypeAdapter(arg_type).json_schema()
    return strip_schema_metadata(schema)
