"""Well-known vocabulary terms and the XSD to OpenAPI datatype table."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from rdflib import Namespace, URIRef
from rdflib.namespace import DC, DCTERMS, OWL, RDF, RDFS, XSD

CC = Namespace("http://creativecommons.org/ns#")
O2O = Namespace("https://karlhammar.com/owl2oas/o2o.owl#")


@dataclass(frozen=True)
class Vocabulary:
    """Fixed predicate and type identifiers consulted while reading an ontology."""

    titles: Tuple[URIRef, ...] = (DC.title, DCTERMS.title, RDFS.label)
    descriptions: Tuple[URIRef, ...] = (DC.description, DCTERMS.description, RDFS.comment)
    label: URIRef = RDFS.label
    comment: URIRef = RDFS.comment
    licenses: Tuple[URIRef, ...] = (DCTERMS.license, CC.license)
    version_info: URIRef = OWL.versionInfo
    version_iri: URIRef = OWL.versionIRI
    deprecated: URIRef = OWL.deprecated
    included: URIRef = O2O.included
    endpoint: URIRef = O2O.endpoint

    ontology: URIRef = OWL.Ontology
    owl_class: URIRef = OWL.Class
    rdfs_class: URIRef = RDFS.Class
    thing: URIRef = OWL.Thing
    datatype: URIRef = RDFS.Datatype
    subclass_of: URIRef = RDFS.subClassOf
    equivalent_class: URIRef = OWL.equivalentClass
    intersection_of: URIRef = OWL.intersectionOf
    union_of: URIRef = OWL.unionOf
    domain: URIRef = RDFS.domain
    range: URIRef = RDFS.range

    datatype_property: URIRef = OWL.DatatypeProperty
    object_property: URIRef = OWL.ObjectProperty
    annotation_property: URIRef = OWL.AnnotationProperty
    functional_property: URIRef = OWL.FunctionalProperty

    restriction: URIRef = OWL.Restriction
    on_property: URIRef = OWL.onProperty
    on_class: URIRef = OWL.onClass
    on_data_range: URIRef = OWL.onDataRange
    cardinality: URIRef = OWL.cardinality
    min_cardinality: URIRef = OWL.minCardinality
    max_cardinality: URIRef = OWL.maxCardinality
    qualified_cardinality: URIRef = OWL.qualifiedCardinality
    min_qualified_cardinality: URIRef = OWL.minQualifiedCardinality
    max_qualified_cardinality: URIRef = OWL.maxQualifiedCardinality

    datatype_namespace: str = str(XSD)

    def in_datatype_namespace(self, identifier: URIRef) -> bool:
        return str(identifier).startswith(self.datatype_namespace)


VOCABULARY = Vocabulary()

# Ranges that carry no datatype information and map to a plain string.
PLAIN_LITERALS = frozenset({RDFS.Literal, RDF.PlainLiteral, RDF.langString})

# XSD local name -> (OpenAPI type, OpenAPI format or None). See
# https://github.com/OAI/OpenAPI-Specification/blob/main/versions/3.0.0.md#dataTypeFormat
XSD_TO_OAS: Mapping[str, Tuple[str, Optional[str]]] = MappingProxyType(
    {
        "string": ("string", None),
        "normalizedString": ("string", None),
        "token": ("string", None),
        "boolean": ("boolean", None),
        "byte": ("string", "byte"),
        "base64Binary": ("string", "byte"),
        "date": ("string", "date"),
        "time": ("string", "time"),
        "dateTime": ("string", "date-time"),
        "dateTimeStamp": ("string", "date-time"),
        "anyURI": ("string", "uri"),
        "decimal": ("number", None),
        "double": ("number", "double"),
        "float": ("number", "float"),
        "int": ("integer", "int32"),
        "integer": ("integer", "int32"),
        "short": ("integer", "int32"),
        "nonNegativeInteger": ("integer", "int32"),
        "positiveInteger": ("integer", "int32"),
        "long": ("integer", "int64"),
    }
)
