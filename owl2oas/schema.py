"""Synthesis of one OpenAPI schema object per ontology class."""
from __future__ import annotations

import logging
import threading
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from rdflib import URIRef

from .errors import AmbiguousRangeError, CycleDetected, DuplicateLabelError, UnmappedDatatype
from .labels import label_key, local_name, pick_literal, resolve_label
from .restrictions import declared_properties, resolve_multiplicity
from .structures import (
    IDENTITY_PROPERTY_NAMES,
    IRI_TYPE,
    STRING_TYPE,
    Multiplicity,
    OntologyClass,
    OntologyModel,
    OntologyProperty,
    PrimitiveType,
    PropertyKind,
    PropertySpec,
    ReferenceType,
    SchemaDefinition,
    is_included,
)
from .vocabulary import PLAIN_LITERALS, VOCABULARY, XSD_TO_OAS, Vocabulary

logger = logging.getLogger(__name__)

_VISITING = object()
_DONE = object()


def check_acyclic(model: OntologyModel) -> None:
    """Raise :class:`CycleDetected` if the superclass relation has a cycle.

    The walk keeps its own stack, so arbitrarily deep hierarchies are fine.
    """

    state: Dict[URIRef, object] = {}
    for root in sorted(model.classes):
        if root in state:
            continue
        state[root] = _VISITING
        path: List[URIRef] = [root]
        pending = [iter(model.classes[root].superclasses)]
        while pending:
            parent = next(pending[-1], None)
            if parent is None:
                pending.pop()
                state[path.pop()] = _DONE
                continue
            if parent not in model.classes:
                continue
            seen = state.get(parent)
            if seen is _VISITING:
                raise CycleDetected(path[path.index(parent):] + [parent])
            if seen is None:
                state[parent] = _VISITING
                path.append(parent)
                pending.append(iter(model.classes[parent].superclasses))


class SchemaSynthesizer:
    """Builds :class:`SchemaDefinition` objects for the classes of a model.

    ``schema_for`` is memoised and computes each class at most once, also
    when called from several threads: superclass schemas needed for
    composition are shared rather than rebuilt. The hierarchy is checked
    for cycles on construction.

    Classes are published when they are included (by ``o2o:included`` or
    the ``include_classes`` default) or when an included class inherits
    from them; the latter get a schema for ``allOf`` but no path.
    """

    def __init__(
        self,
        model: OntologyModel,
        language: Optional[str] = "en",
        vocabulary: Vocabulary = VOCABULARY,
        include_classes: bool = True,
        include_properties: bool = True,
    ) -> None:
        check_acyclic(model)
        self.model = model
        self.language = language
        self.vocabulary = vocabulary
        self.include_properties = include_properties
        self._exposed: FrozenSet[URIRef] = frozenset(
            cls.identifier for cls in model.resource_classes() if is_included(cls, include_classes)
        )
        published: Set[URIRef] = set(self._exposed)
        for identifier in self._exposed:
            published.update(a for a in model.ancestors(identifier) if model.is_resource_class(a))
        self._published: FrozenSet[URIRef] = frozenset(published)
        self._labels: Dict[URIRef, str] = {
            cls.identifier: resolve_label(cls.identifier, cls.labels, language)
            for cls in model.resource_classes()
        }
        self._schemas: Dict[URIRef, SchemaDefinition] = {}
        self._locks: Dict[URIRef, threading.Lock] = {}
        self._guard = threading.Lock()
        self._notices: List[UnmappedDatatype] = []

    @property
    def notices(self) -> Tuple[UnmappedDatatype, ...]:
        with self._guard:
            found = set(self._notices)
        return tuple(sorted(found, key=lambda n: (n.property_id, n.owner or "", n.datatype)))

    def published_classes(self) -> List[URIRef]:
        return sorted(self._published)

    def is_published(self, identifier: URIRef) -> bool:
        return identifier in self._published

    def class_label(self, identifier: URIRef) -> str:
        return self._labels[identifier]

    def class_key(self, identifier: URIRef) -> str:
        return label_key(self._labels[identifier])

    def property_name(self, prop: OntologyProperty) -> str:
        return label_key(resolve_label(prop.identifier, prop.labels, self.language))

    def schema_for(self, identifier: URIRef) -> SchemaDefinition:
        if not self.is_published(identifier):
            raise KeyError(f"<{identifier}> is not a published resource class of this ontology")
        for node in self._lineage(identifier):
            self._build(node)
        return self._stored(identifier)

    # Synthesis -------------------------------------------------------------

    def _lineage(self, identifier: URIRef) -> List[URIRef]:
        """Published superclasses of ``identifier``, then itself, parents first."""

        order: List[URIRef] = []
        seen = {identifier}
        stack = [(identifier, iter(self._parents(identifier)))]
        while stack:
            node, parents = stack[-1]
            parent = next(parents, None)
            if parent is None:
                stack.pop()
                order.append(node)
            elif parent not in seen:
                seen.add(parent)
                stack.append((parent, iter(self._parents(parent))))
        return order

    def _parents(self, identifier: URIRef) -> List[URIRef]:
        return [p for p in self.model.classes[identifier].superclasses if self.is_published(p)]

    def _build(self, identifier: URIRef) -> None:
        with self._guard:
            lock = self._locks.setdefault(identifier, threading.Lock())
        with lock:
            if self._stored(identifier) is None:
                schema = self._synthesize(self.model.classes[identifier])
                with self._guard:
                    self._schemas[identifier] = schema

    def _stored(self, identifier: URIRef) -> Optional[SchemaDefinition]:
        with self._guard:
            return self._schemas.get(identifier)

    def _synthesize(self, cls: OntologyClass) -> SchemaDefinition:
        # Parents are built first by schema_for
        parents = [self._stored(parent) for parent in self._parents(cls.identifier)]
        parents.sort(key=lambda schema: (schema.title, schema.key))
        inherited = frozenset().union(*(schema.available for schema in parents))

        names: Dict[str, URIRef] = {}
        for schema in parents:
            for name, owner in schema.names:
                if names.setdefault(name, owner) != owner:
                    raise DuplicateLabelError(name, sorted({names[name], owner}), cls.identifier)

        specs: List[PropertySpec] = []
        required: List[str] = []
        for prop in declared_properties(self.model, cls):
            if not is_included(prop, self.include_properties):
                logger.debug("Property <%s> is not included on <%s>", prop.identifier, cls.identifier)
                continue
            multiplicity = resolve_multiplicity(cls, prop)
            name = self.property_name(prop)
            if prop.identifier in inherited:
                # Contributed by a superclass schema through allOf
                if multiplicity.required and name not in required:
                    required.append(name)
                continue
            if name in IDENTITY_PROPERTY_NAMES:
                raise DuplicateLabelError(name, [self.vocabulary.label, prop.identifier], cls.identifier)
            if name in names:
                raise DuplicateLabelError(name, [names[name], prop.identifier], cls.identifier)
            names[name] = prop.identifier
            specs.append(self._property_spec(cls, prop, name, multiplicity))
            if multiplicity.required and name not in required:
                required.append(name)

        schema = SchemaDefinition(
            key=self.class_key(cls.identifier),
            title=self.class_label(cls.identifier),
            identifier=cls.identifier,
            properties=tuple(specs),
            required=tuple(required),
            superclasses=tuple(schema.key for schema in parents),
            deprecated=cls.deprecated,
            description=pick_literal(cls.identifier, cls.comments, self.language),
            available=inherited.union(spec.identifier for spec in specs),
            names=tuple(sorted(names.items())),
            endpoint=cls.endpoint,
            exposed=cls.identifier in self._exposed,
        )
        logger.debug(
            "Synthesized schema %s with %d properties and %d superclasses",
            schema.key,
            len(specs),
            len(parents),
        )
        return schema

    def _property_spec(
        self, cls: OntologyClass, prop: OntologyProperty, name: str, multiplicity: Multiplicity
    ) -> PropertySpec:
        ranges: Sequence[URIRef] = (
            (multiplicity.value_range,) if multiplicity.value_range is not None else prop.ranges
        )
        if prop.kind is PropertyKind.DATA:
            value_type = self._data_type(cls, prop, ranges)
        else:
            value_type = self._object_type(cls, prop, ranges)
        return PropertySpec(
            name=name,
            identifier=prop.identifier,
            type=value_type,
            array=multiplicity.array,
            min_items=multiplicity.min_items,
            max_items=multiplicity.max_items,
            deprecated=prop.deprecated,
            description=pick_literal(prop.identifier, prop.comments, self.language),
        )

    def _data_type(
        self, cls: OntologyClass, prop: OntologyProperty, ranges: Sequence[URIRef]
    ) -> PrimitiveType:
        if not ranges:
            return STRING_TYPE
        if len(ranges) > 1:
            raise AmbiguousRangeError(prop.identifier, ranges, cls.identifier)
        declared = ranges[0]
        datatype = self.model.datatype_aliases.get(declared, declared)
        if datatype in PLAIN_LITERALS:
            return STRING_TYPE
        if self.vocabulary.in_datatype_namespace(datatype):
            mapped = XSD_TO_OAS.get(local_name(datatype))
            if mapped is not None:
                return PrimitiveType(*mapped)

        notice = UnmappedDatatype(str(prop.identifier), str(declared), str(cls.identifier))
        with self._guard:
            self._notices.append(notice)
        logger.warning("%s (class <%s>)", notice.message, cls.identifier)
        return STRING_TYPE

    def _object_type(self, cls: OntologyClass, prop: OntologyProperty, ranges: Sequence[URIRef]):
        candidates = sorted(r for r in ranges if r != self.vocabulary.thing)
        if not candidates:
            return IRI_TYPE
        if len(candidates) == 1:
            target = candidates[0]
        else:
            target = self._most_specific(cls, prop, candidates)
        if not self.is_published(target):
            logger.debug(
                "Range <%s> of <%s> has no schema; emitting an IRI reference", target, prop.identifier
            )
            return IRI_TYPE
        return ReferenceType(self.class_key(target))

    def _most_specific(
        self, cls: OntologyClass, prop: OntologyProperty, candidates: Sequence[URIRef]
    ) -> URIRef:
        specific = [
            candidate
            for candidate in candidates
            if all(
                other == candidate or other in self.model.ancestors(candidate)
                for other in candidates
            )
        ]
        if len(specific) != 1:
            raise AmbiguousRangeError(prop.identifier, candidates, cls.identifier)
        return specific[0]
