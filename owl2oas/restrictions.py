"""Per-class multiplicity of properties derived from local restrictions."""
from __future__ import annotations

import logging
from typing import List, Optional, Set

from rdflib import URIRef

from .errors import AmbiguousRangeError
from .structures import (
    Multiplicity,
    OntologyClass,
    OntologyModel,
    OntologyProperty,
    PropertyKind,
    Restriction,
    RestrictionShape,
)

logger = logging.getLogger(__name__)


def restrictions_on(cls: OntologyClass, property_id: URIRef) -> List[Restriction]:
    """Restrictions asserted by ``cls`` itself on ``property_id``.

    Restrictions are never inherited: a subclass only sees its own.
    """

    return [r for r in cls.restrictions if r.on_property == property_id]


def resolve_multiplicity(cls: OntologyClass, prop: OntologyProperty) -> Multiplicity:
    exact: Optional[int] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    value_ranges: Set[URIRef] = set()

    for restriction in restrictions_on(cls, prop.identifier):
        count = restriction.cardinality
        shape = restriction.shape
        if shape in (RestrictionShape.EXACT, RestrictionShape.QUALIFIED_EXACT):
            if exact is not None and exact != count:
                logger.warning(
                    "Class <%s> restricts <%s> to both %d and %d values; using %d",
                    cls.identifier,
                    prop.identifier,
                    exact,
                    count,
                    max(exact, count),
                )
            exact = count if exact is None else max(exact, count)
        elif shape in (RestrictionShape.MIN, RestrictionShape.QUALIFIED_MIN):
            minimum = count if minimum is None else max(minimum, count)
        elif shape in (RestrictionShape.MAX, RestrictionShape.QUALIFIED_MAX):
            maximum = count if maximum is None else min(maximum, count)
        else:  # pragma: no cover - every shape is handled above
            raise ValueError(f"Unknown restriction shape {shape!r}")
        if restriction.value_range is not None:
            value_ranges.add(restriction.value_range)

    if len(value_ranges) > 1:
        raise AmbiguousRangeError(prop.identifier, sorted(value_ranges), cls.identifier)
    value_range = next(iter(value_ranges), None)
    required = (exact or 0) >= 1 or (minimum or 0) >= 1

    if exact is not None:
        if exact == 1:
            return Multiplicity(array=False, required=required, value_range=value_range)
        return Multiplicity(
            array=True,
            required=required,
            min_items=exact,
            max_items=exact,
            value_range=value_range,
        )
    if maximum == 1 or prop.functional:
        return Multiplicity(array=False, required=required, value_range=value_range)
    return Multiplicity(
        array=True,
        required=required,
        min_items=minimum if minimum else None,
        max_items=maximum,
        value_range=value_range,
    )


def declared_properties(model: OntologyModel, cls: OntologyClass) -> List[OntologyProperty]:
    """Data and object properties that apply to ``cls`` by domain or by restriction."""

    candidates = {
        pid for pid, prop in model.properties.items() if cls.identifier in prop.domains
    }
    candidates.update(r.on_property for r in cls.restrictions)

    declared: List[OntologyProperty] = []
    for pid in sorted(candidates):
        prop = model.properties.get(pid)
        if prop is None:
            logger.debug("Restriction on <%s> targets undeclared property <%s>", cls.identifier, pid)
            continue
        if prop.kind is PropertyKind.ANNOTATION:
            logger.debug("Skipping annotation property <%s> on <%s>", pid, cls.identifier)
            continue
        declared.append(prop)
    return declared
