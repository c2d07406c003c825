"""Reading ontology files into the in-memory :class:`OntologyModel`."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from rdflib import Graph, Literal, URIRef
from rdflib.collection import Collection
from rdflib.namespace import RDF
from rdflib.util import guess_format

from .classifier import classify_property, is_datatype_class, is_functional
from .errors import LoadError, MalformedOntologyError
from .structures import (
    LabelLiterals,
    OntologyClass,
    OntologyMetadata,
    OntologyModel,
    OntologyProperty,
    Restriction,
    RestrictionShape,
)
from .vocabulary import VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)


def load_graph(path: Union[str, Path]) -> Graph:
    """Parse an RDF file into a graph, raising :class:`LoadError` on any failure."""

    path = Path(path)
    if not path.exists():
        raise LoadError(path, "file not found")
    if not path.is_file():
        raise LoadError(path, "not a regular file")

    graph = Graph()
    try:
        graph.parse(str(path), format=guess_format(str(path)))
    except OSError as exc:
        raise LoadError(path, f"file could not be read ({exc})") from exc
    except Exception as exc:  # rdflib raises parser-specific exception types
        raise LoadError(path, f"invalid RDF syntax ({exc})") from exc
    logger.info("Loaded %d triples from %s", len(graph), path)
    return graph


def read_ontology(path: Union[str, Path], vocabulary: Vocabulary = VOCABULARY) -> OntologyModel:
    """Load ``path`` and build the ontology model from it."""

    return build_model(load_graph(path), vocabulary)


def build_model(graph: Graph, vocabulary: Vocabulary = VOCABULARY) -> OntologyModel:
    """Project an rdflib graph onto the class/property arena.

    Property kinds are classified here so that conflicting declarations
    abort the run before any schema is produced.
    """

    reader = _GraphReader(graph, vocabulary)
    class_ids = reader.class_identifiers()
    properties = {pid: reader.read_property(pid) for pid in reader.property_identifiers()}
    classes = {cid: reader.read_class(cid, class_ids) for cid in sorted(class_ids)}
    model = OntologyModel(
        classes=classes,
        properties=properties,
        metadata=reader.read_metadata(),
        datatype_aliases=reader.datatype_aliases(),
    )
    logger.info(
        "Ontology model holds %d classes and %d properties", len(classes), len(properties)
    )
    return model


_CARDINALITY_SHAPES = (
    ("qualified_cardinality", RestrictionShape.QUALIFIED_EXACT),
    ("min_qualified_cardinality", RestrictionShape.QUALIFIED_MIN),
    ("max_qualified_cardinality", RestrictionShape.QUALIFIED_MAX),
    ("cardinality", RestrictionShape.EXACT),
    ("min_cardinality", RestrictionShape.MIN),
    ("max_cardinality", RestrictionShape.MAX),
)

_PROPERTY_TYPES = ("datatype_property", "object_property", "annotation_property", "functional_property")


class _GraphReader:
    def __init__(self, graph: Graph, vocabulary: Vocabulary) -> None:
        self.graph = graph
        self.vocabulary = vocabulary

    # Classes -------------------------------------------------------------

    def class_identifiers(self) -> Set[URIRef]:
        vocab = self.vocabulary
        identifiers: Set[URIRef] = set()
        for class_type in (vocab.owl_class, vocab.rdfs_class, vocab.datatype):
            for subject in self.graph.subjects(RDF.type, class_type):
                if isinstance(subject, URIRef) and subject != vocab.thing:
                    identifiers.add(subject)
        return identifiers

    def read_class(self, identifier: URIRef, known: Set[URIRef]) -> OntologyClass:
        vocab = self.vocabulary
        superclasses: Set[URIRef] = set()
        restrictions: List[Restriction] = []
        for parent in self.graph.objects(identifier, vocab.subclass_of):
            if isinstance(parent, URIRef):
                if parent == identifier or parent == vocab.thing:
                    continue
                if parent not in known:
                    logger.debug("Skipping undeclared superclass <%s> of <%s>", parent, identifier)
                    continue
                superclasses.add(parent)
            else:
                restrictions.extend(self._restrictions_in(identifier, parent))
        for equivalent in self.graph.objects(identifier, vocab.equivalent_class):
            if not isinstance(equivalent, URIRef):
                restrictions.extend(self._restrictions_in(identifier, equivalent))

        types = set(self.graph.objects(identifier, RDF.type))
        return OntologyClass(
            identifier=identifier,
            superclasses=tuple(sorted(superclasses)),
            restrictions=tuple(restrictions),
            deprecated=self._is_deprecated(identifier),
            labels=self._literals(identifier, vocab.label),
            comments=self._literals(identifier, vocab.comment),
            is_datatype=is_datatype_class(identifier, types, vocab),
            included=self._included(identifier),
            endpoint=self._endpoint(identifier),
        )

    def _restrictions_in(self, owner: URIRef, node) -> List[Restriction]:
        """Restrictions in an anonymous class expression, looking into intersections."""

        members = self._collection(node, self.vocabulary.intersection_of)
        if members:
            found: List[Restriction] = []
            for member in members:
                if not isinstance(member, URIRef):
                    found.extend(self._restrictions_in(owner, member))
            return found
        restriction = self._parse_restriction(owner, node)
        return [restriction] if restriction is not None else []

    def _parse_restriction(self, owner: URIRef, node) -> Optional[Restriction]:
        vocab = self.vocabulary
        typed = (node, RDF.type, vocab.restriction) in self.graph
        on_property = self.graph.value(node, vocab.on_property)
        if not typed and on_property is None:
            return None
        if on_property is None:
            raise MalformedOntologyError(owner, "restriction without owl:onProperty")
        if not isinstance(on_property, URIRef):
            logger.debug("Ignoring restriction on <%s> over an anonymous property expression", owner)
            return None

        for attribute, shape in _CARDINALITY_SHAPES:
            value = self.graph.value(node, getattr(vocab, attribute))
            if value is None:
                continue
            value_range = None
            if shape.qualified:
                value_range = self.graph.value(node, vocab.on_class) or self.graph.value(
                    node, vocab.on_data_range
                )
                if not isinstance(value_range, URIRef):
                    value_range = None
            return Restriction(
                owner=owner,
                on_property=on_property,
                shape=shape,
                cardinality=self._cardinality(owner, on_property, value),
                value_range=value_range,
            )
        logger.debug(
            "Ignoring restriction on <%s> for <%s>: no cardinality constraint", on_property, owner
        )
        return None

    @staticmethod
    def _cardinality(owner: URIRef, on_property: URIRef, value) -> int:
        if isinstance(value, Literal):
            raw = value.toPython()
            text = str(value)
        else:
            raw = text = str(value)
        try:
            number = raw if isinstance(raw, int) and not isinstance(raw, bool) else int(text)
        except ValueError:
            number = -1
        if number < 0:
            raise MalformedOntologyError(
                owner, f"cardinality {text!r} on <{on_property}> is not a non-negative integer"
            )
        return number

    # Properties ----------------------------------------------------------

    def property_identifiers(self) -> List[URIRef]:
        identifiers: Set[URIRef] = set()
        for attribute in _PROPERTY_TYPES:
            for subject in self.graph.subjects(RDF.type, getattr(self.vocabulary, attribute)):
                if isinstance(subject, URIRef):
                    identifiers.add(subject)
        for subject in self.graph.subjects(RDF.type, RDF.Property):
            if isinstance(subject, URIRef):
                identifiers.add(subject)
        return sorted(identifiers)

    def read_property(self, identifier: URIRef) -> OntologyProperty:
        types = set(self.graph.objects(identifier, RDF.type))
        return OntologyProperty(
            identifier=identifier,
            kind=classify_property(identifier, types, self.vocabulary),
            domains=self._named_members(self.graph.objects(identifier, self.vocabulary.domain)),
            ranges=self._named_members(self.graph.objects(identifier, self.vocabulary.range)),
            functional=is_functional(types, self.vocabulary),
            deprecated=self._is_deprecated(identifier),
            labels=self._literals(identifier, self.vocabulary.label),
            comments=self._literals(identifier, self.vocabulary.comment),
            included=self._included(identifier),
        )

    def _named_members(self, nodes: Iterable) -> Tuple[URIRef, ...]:
        """Named classes of a domain/range, expanding ``owl:unionOf`` expressions."""

        named: Set[URIRef] = set()
        for node in nodes:
            if isinstance(node, URIRef):
                named.add(node)
                continue
            for member in self._collection(node, self.vocabulary.union_of):
                if isinstance(member, URIRef):
                    named.add(member)
        return tuple(sorted(named))

    # Ontology header -----------------------------------------------------

    def read_metadata(self) -> OntologyMetadata:
        vocab = self.vocabulary
        headers = sorted(
            subject for subject in self.graph.subjects(RDF.type, vocab.ontology)
            if isinstance(subject, URIRef)
        )
        if not headers:
            return OntologyMetadata()
        header = headers[0]
        return OntologyMetadata(
            identifier=header,
            titles=self._first_literals(header, vocab.titles),
            descriptions=self._first_literals(header, vocab.descriptions),
            version_info=self._first_value(header, (vocab.version_info,)),
            version_iri=self._first_value(header, (vocab.version_iri,)),
            license=self._first_value(header, vocab.licenses),
        )

    def datatype_aliases(self) -> Dict[URIRef, URIRef]:
        aliases: Dict[URIRef, URIRef] = {}
        for subject in self.graph.subjects(RDF.type, self.vocabulary.datatype):
            if not isinstance(subject, URIRef):
                continue
            for target in self.graph.objects(subject, self.vocabulary.equivalent_class):
                if isinstance(target, URIRef) and self.vocabulary.in_datatype_namespace(target):
                    aliases[subject] = target
                    break
        return aliases

    # Helpers -------------------------------------------------------------

    def _literals(self, subject, predicate) -> LabelLiterals:
        pairs = {
            (obj.language, str(obj))
            for obj in self.graph.objects(subject, predicate)
            if isinstance(obj, Literal)
        }
        return tuple(sorted(pairs, key=lambda pair: (pair[0] or "", pair[1])))

    def _first_literals(self, subject, predicates: Iterable[URIRef]) -> LabelLiterals:
        for predicate in predicates:
            found = self._literals(subject, predicate)
            if found:
                return found
        return ()

    def _is_deprecated(self, subject) -> bool:
        for value in self.graph.objects(subject, self.vocabulary.deprecated):
            if isinstance(value, Literal) and str(value).strip().lower() in ("true", "1"):
                return True
        return False

    def _included(self, subject) -> Optional[bool]:
        values = {
            str(value).strip().lower()
            for value in self.graph.objects(subject, self.vocabulary.included)
            if isinstance(value, Literal)
        }
        if not values:
            return None
        if len(values) == 1:
            value = values.pop()
            if value in ("true", "1"):
                return True
            if value in ("false", "0"):
                return False
        logger.warning(
            "Ignoring o2o:included on <%s>: expected one boolean, got %s", subject, sorted(values)
        )
        return None

    def _endpoint(self, subject) -> Optional[str]:
        names = sorted(
            str(value).strip().strip("/")
            for value in self.graph.objects(subject, self.vocabulary.endpoint)
            if isinstance(value, Literal)
        )
        names = [name for name in names if name]
        if len(names) > 1:
            logger.warning("Class <%s> has %d endpoint names; using '%s'", subject, len(names), names[0])
        return names[0] if names else None

    def _first_value(self, subject, predicates: Iterable[URIRef]) -> Optional[str]:
        for predicate in predicates:
            values = sorted(str(value) for value in self.graph.objects(subject, predicate))
            if values:
                return values[0]
        return None

    def _collection(self, node, predicate) -> List:
        head = self.graph.value(node, predicate)
        if head is None:
            return []
        return list(Collection(self.graph, head))

