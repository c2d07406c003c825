"""Classification of ontology terms into property kinds and datatype classes."""
from __future__ import annotations

from typing import Iterable

from rdflib import URIRef

from .errors import ConflictingPropertyKind
from .structures import PropertyKind
from .vocabulary import VOCABULARY, Vocabulary


def classify_property(
    identifier: URIRef, types: Iterable[URIRef], vocabulary: Vocabulary = VOCABULARY
) -> PropertyKind:
    """Return the kind of a property from its ``rdf:type`` assertions.

    A property typed as neither a datatype nor an object property is treated
    as an annotation property. Being typed as both is a modelling error.
    """

    types = set(types)
    is_data = vocabulary.datatype_property in types
    is_object = vocabulary.object_property in types
    if is_data and is_object:
        raise ConflictingPropertyKind(identifier)
    if is_data:
        return PropertyKind.DATA
    if is_object:
        return PropertyKind.OBJECT
    return PropertyKind.ANNOTATION


def is_functional(types: Iterable[URIRef], vocabulary: Vocabulary = VOCABULARY) -> bool:
    return vocabulary.functional_property in set(types)


def is_datatype_class(
    identifier: URIRef, types: Iterable[URIRef] = (), vocabulary: Vocabulary = VOCABULARY
) -> bool:
    """Datatype classes are not resources and get neither a schema nor a path."""

    if vocabulary.in_datatype_namespace(identifier):
        return True
    return vocabulary.datatype in set(types)
