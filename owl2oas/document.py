"""Assembly of synthesized schemas and paths into the final OpenAPI document."""
from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Sequence

from rdflib import URIRef

from .errors import DuplicateLabelError
from .labels import local_name, pick_literal
from .paths import pagination_parameters
from .structures import Document, OntologyMetadata, PathDefinition, SchemaDefinition

logger = logging.getLogger(__name__)


def check_unique_labels(schemas: Sequence[SchemaDefinition]) -> None:
    """Fail if two classes would share a component name (and therefore a route)."""

    owners: Dict[str, List[URIRef]] = defaultdict(list)
    for schema in schemas:
        owners[schema.key].append(schema.identifier)
    for key in sorted(owners):
        if len(owners[key]) > 1:
            raise DuplicateLabelError(key, sorted(owners[key]))


def document_title(metadata: OntologyMetadata, language: Optional[str], default: str) -> str:
    title = pick_literal(metadata.identifier, metadata.titles, language)
    if title:
        return title.strip()
    if metadata.identifier is not None:
        return local_name(metadata.identifier)
    return default


def document_description(metadata: OntologyMetadata, language: Optional[str]) -> Optional[str]:
    description = pick_literal(metadata.identifier, metadata.descriptions, language)
    if not description:
        return None
    return description.strip().replace("\r\n", "\n")


def assemble_document(
    schemas: Sequence[SchemaDefinition],
    paths: Sequence[PathDefinition],
    *,
    title: str,
    version: str,
    license_name: str,
    license_url: Optional[str] = None,
    description: Optional[str] = None,
    server_url: Optional[str] = None,
) -> Document:
    """Combine metadata, schemas and paths into a :class:`Document`.

    Label collisions are checked first so that no schema can silently
    replace another one.
    """

    check_unique_labels(schemas)
    for route, count in sorted(Counter(path.route for path in paths).items()):
        if count > 1:
            raise DuplicateLabelError(route, [p.label for p in paths if p.route == route])
    missing = {path.schema_key for path in paths} - {schema.key for schema in schemas}
    if missing:
        raise ValueError(f"Paths reference unknown schemas: {', '.join(sorted(missing))}")

    document = Document(
        title=title,
        version=version,
        license_name=license_name,
        license_url=license_url,
        description=description,
        server_url=server_url,
        parameters=pagination_parameters() if paths else {},
        schemas={schema.key: schema for schema in schemas},
        paths={path.route: path for path in paths},
    )
    logger.info(
        "Assembled document '%s' with %d schemas and %d paths",
        title,
        len(document.schemas),
        len(document.paths),
    )
    return document
