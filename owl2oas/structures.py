"""Typed domain objects shared by the ontology reader and the OpenAPI synthesizers."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from rdflib import URIRef

LabelLiterals = Tuple[Tuple[Optional[str], str], ...]

OPENAPI_VERSION = "3.0.0"
SCHEMA_REF_PREFIX = "#/components/schemas/"
PARAMETER_REF_PREFIX = "#/components/parameters/"

# JSON-LD identity fields present on every class schema
IDENTITY_PROPERTY_NAMES = ("@id", "@type", "label")


class PropertyKind(Enum):
    DATA = "data"
    OBJECT = "object"
    ANNOTATION = "annotation"


class RestrictionShape(Enum):
    EXACT = "exact"
    MIN = "min"
    MAX = "max"
    QUALIFIED_EXACT = "qualified_exact"
    QUALIFIED_MIN = "qualified_min"
    QUALIFIED_MAX = "qualified_max"

    @property
    def qualified(self) -> bool:
        return self in (
            RestrictionShape.QUALIFIED_EXACT,
            RestrictionShape.QUALIFIED_MIN,
            RestrictionShape.QUALIFIED_MAX,
        )


@dataclass(frozen=True)
class Restriction:
    """A cardinality constraint a class places on one property."""

    owner: URIRef
    on_property: URIRef
    shape: RestrictionShape
    cardinality: int
    value_range: Optional[URIRef] = None


@dataclass(frozen=True)
class OntologyClass:
    identifier: URIRef
    superclasses: Tuple[URIRef, ...] = ()
    restrictions: Tuple[Restriction, ...] = ()
    deprecated: bool = False
    labels: LabelLiterals = ()
    comments: LabelLiterals = ()
    is_datatype: bool = False
    # Explicit o2o:included annotation, None when absent
    included: Optional[bool] = None
    endpoint: Optional[str] = None


@dataclass(frozen=True)
class OntologyProperty:
    identifier: URIRef
    kind: PropertyKind
    domains: Tuple[URIRef, ...] = ()
    ranges: Tuple[URIRef, ...] = ()
    functional: bool = False
    deprecated: bool = False
    labels: LabelLiterals = ()
    comments: LabelLiterals = ()
    included: Optional[bool] = None


@dataclass(frozen=True)
class OntologyMetadata:
    identifier: Optional[URIRef] = None
    titles: LabelLiterals = ()
    descriptions: LabelLiterals = ()
    version_info: Optional[str] = None
    version_iri: Optional[str] = None
    license: Optional[str] = None


def is_included(entity: Any, include_by_default: bool) -> bool:
    """An explicit o2o:included annotation wins over the default policy."""

    if entity.included is not None:
        return entity.included
    return include_by_default


@dataclass
class OntologyModel:
    """Arena of classes and properties keyed by identifier.

    Relations (superclasses, domains, ranges, restriction targets) are stored
    as identifiers into ``classes`` and ``properties``. The model is built
    once by :func:`owl2oas.ontology.build_model` and only read afterwards.
    """

    classes: Dict[URIRef, OntologyClass] = field(default_factory=dict)
    properties: Dict[URIRef, OntologyProperty] = field(default_factory=dict)
    metadata: OntologyMetadata = field(default_factory=OntologyMetadata)
    # rdfs:Datatype -> the XSD datatype it is declared equivalent to
    datatype_aliases: Dict[URIRef, URIRef] = field(default_factory=dict)

    def resource_classes(self) -> List[OntologyClass]:
        """Classes that become schemas and paths, ordered by identifier."""

        return [
            self.classes[key]
            for key in sorted(self.classes)
            if not self.classes[key].is_datatype
        ]

    def is_resource_class(self, identifier: URIRef) -> bool:
        cls = self.classes.get(identifier)
        return cls is not None and not cls.is_datatype

    def ancestors(self, identifier: URIRef) -> FrozenSet[URIRef]:
        """All transitive superclasses of ``identifier`` (excluding itself)."""

        seen: Set[URIRef] = set()
        stack = list(self._direct_superclasses(identifier))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self._direct_superclasses(current))
        seen.discard(identifier)
        return frozenset(seen)

    def _direct_superclasses(self, identifier: URIRef) -> Tuple[URIRef, ...]:
        cls = self.classes.get(identifier)
        return cls.superclasses if cls is not None else ()


@dataclass(frozen=True)
class Multiplicity:
    array: bool = True
    required: bool = False
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    value_range: Optional[URIRef] = None


@dataclass(frozen=True)
class PrimitiveType:
    type: str
    format: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type}
        if self.format:
            schema["format"] = self.format
        return schema


@dataclass(frozen=True)
class ReferenceType:
    target: str

    def to_dict(self) -> Dict[str, Any]:
        return {"$ref": f"{SCHEMA_REF_PREFIX}{self.target}"}


IRI_TYPE = PrimitiveType("string", "uri")
STRING_TYPE = PrimitiveType("string")


@dataclass(frozen=True)
class PropertySpec:
    name: str
    identifier: URIRef
    type: Any  # PrimitiveType | ReferenceType
    array: bool = True
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    deprecated: bool = False
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        item = self.type.to_dict()
        if self.array:
            schema: Dict[str, Any] = {"type": "array", "items": item}
            if self.min_items is not None:
                schema["minItems"] = self.min_items
            if self.max_items is not None:
                schema["maxItems"] = self.max_items
        elif "$ref" in item and (self.deprecated or self.description):
            # Siblings of $ref are ignored in OpenAPI 3.0
            schema = {"allOf": [item]}
        else:
            schema = dict(item)
        if self.description:
            schema["description"] = self.description
        if self.deprecated:
            schema["deprecated"] = True
        return schema


@dataclass(frozen=True)
class SchemaDefinition:
    key: str
    title: str
    identifier: URIRef
    properties: Tuple[PropertySpec, ...] = ()
    required: Tuple[str, ...] = ()
    superclasses: Tuple[str, ...] = ()
    deprecated: bool = False
    description: Optional[str] = None
    # Own and inherited property identifiers and names, consulted by subclasses
    available: FrozenSet[URIRef] = frozenset()
    names: Tuple[Tuple[str, URIRef], ...] = ()
    endpoint: Optional[str] = None
    # False for classes kept only as allOf targets of published subclasses
    exposed: bool = True

    def to_dict(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"title": self.title}
        if self.description:
            schema["description"] = self.description
        schema["type"] = "object"
        if self.superclasses:
            schema["allOf"] = [ReferenceType(key).to_dict() for key in self.superclasses]
        properties: Dict[str, Any] = {
            "@id": {"type": "string"},
            "@type": {"type": "string", "default": self.key},
            "label": {"type": "string"},
        }
        properties.update((spec.name, spec.to_dict()) for spec in self.properties)
        schema["properties"] = properties
        if self.required:
            schema["required"] = list(self.required)
        if self.deprecated:
            schema["deprecated"] = True
        return schema


@dataclass(frozen=True)
class PathDefinition:
    route: str
    label: str
    schema_key: str
    summary: str
    response_description: str
    parameters: Tuple[str, ...] = ()
    deprecated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        operation: Dict[str, Any] = {
            "summary": self.summary,
            "tags": [self.route.lstrip("/")],
        }
        if self.parameters:
            operation["parameters"] = [
                {"$ref": f"{PARAMETER_REF_PREFIX}{name}"} for name in self.parameters
            ]
        operation["responses"] = {
            "200": {
                "description": self.response_description,
                "content": {
                    "application/json": {
                        "schema": {
                            "type": "array",
                            "items": ReferenceType(self.schema_key).to_dict(),
                        }
                    }
                },
            }
        }
        if self.deprecated:
            operation["deprecated"] = True
        return {"get": operation}


@dataclass
class Document:
    title: str
    version: str
    license_name: str
    license_url: Optional[str] = None
    description: Optional[str] = None
    server_url: Optional[str] = None
    parameters: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    schemas: Dict[str, SchemaDefinition] = field(default_factory=dict)
    paths: Dict[str, PathDefinition] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {"version": self.version, "title": self.title}
        if self.description:
            info["description"] = self.description
        license_block: Dict[str, Any] = {"name": self.license_name}
        if self.license_url:
            license_block["url"] = self.license_url
        info["license"] = license_block

        document: Dict[str, Any] = {"openapi": OPENAPI_VERSION, "info": info}
        if self.server_url:
            document["servers"] = [{"url": self.server_url}]
        components: Dict[str, Any] = {}
        if self.parameters:
            components["parameters"] = {
                name: dict(self.parameters[name]) for name in sorted(self.parameters)
            }
        components["schemas"] = {
            key: self.schemas[key].to_dict() for key in sorted(self.schemas)
        }
        document["components"] = components
        document["paths"] = {route: self.paths[route].to_dict() for route in sorted(self.paths)}
        return document
