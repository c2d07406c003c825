"""Read-only collection endpoints, one per synthesized class schema."""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping

from .structures import PathDefinition, SchemaDefinition

OFFSET_PARAM = "offsetParam"
LIMIT_PARAM = "limitParam"

PAGINATION_PARAMETERS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        OFFSET_PARAM: {
            "name": "offset",
            "in": "query",
            "description": "Number of items to skip before returning the results.",
            "required": False,
            "schema": {"type": "integer", "format": "int32", "minimum": 0, "default": 0},
        },
        LIMIT_PARAM: {
            "name": "limit",
            "in": "query",
            "description": "Maximum number of items to return.",
            "required": False,
            "schema": {
                "type": "integer",
                "format": "int32",
                "minimum": 1,
                "maximum": 100,
                "default": 20,
            },
        },
    }
)


def pagination_parameters() -> Dict[str, Dict[str, Any]]:
    """Fresh copies of the shared query parameters referenced by every path."""

    return {
        name: {**spec, "schema": dict(spec["schema"])}
        for name, spec in PAGINATION_PARAMETERS.items()
    }


def path_for(schema: SchemaDefinition) -> PathDefinition:
    """Collection endpoint for ``schema``; an o2o:endpoint annotation renames the route."""

    return PathDefinition(
        route=f"/{schema.endpoint or schema.key}",
        label=schema.title,
        schema_key=schema.key,
        summary=f"Get all '{schema.title}' objects.",
        response_description=f"A paged array of '{schema.title}' objects.",
        parameters=(OFFSET_PARAM, LIMIT_PARAM),
        deprecated=schema.deprecated,
    )


def synthesize_paths(schemas: Iterable[SchemaDefinition]) -> List[PathDefinition]:
    return [
        path_for(schema) for schema in sorted(schemas, key=lambda s: s.key) if schema.exposed
    ]
