"""Exceptions and notices raised while turning an ontology into an API description."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, Union


class Owl2OasError(Exception):
    """Base class for every fatal condition of a transformation run."""

    def __init__(self, message: str, identifiers: Iterable[object] = ()) -> None:
        super().__init__(message)
        self.identifiers: Tuple[str, ...] = tuple(str(item) for item in identifiers)


class LoadError(Owl2OasError):
    """Raised when the ontology file is missing, unreadable or unparseable."""

    def __init__(self, path: Union[str, Path, None], reason: str) -> None:
        source = str(path) if path is not None else "<graph>"
        super().__init__(f"Could not load ontology from {source}: {reason}", [source])
        self.path = path
        self.reason = reason


class MalformedOntologyError(LoadError):
    """Raised when a recognised construct lacks a shape the generator relies on."""

    def __init__(self, subject: object, reason: str, path: Union[str, Path, None] = None) -> None:
        super().__init__(path, f"{subject}: {reason}")
        self.identifiers = (str(subject),)


class ConflictingPropertyKind(Owl2OasError):
    """Raised when a property is declared both a datatype and an object property."""

    def __init__(self, property_id: object) -> None:
        super().__init__(
            f"Property <{property_id}> is asserted as both owl:DatatypeProperty and owl:ObjectProperty",
            [property_id],
        )
        self.property_id = property_id


class AmbiguousRangeError(Owl2OasError):
    """Raised when a property range cannot be narrowed down to a single type."""

    def __init__(self, property_id: object, ranges: Sequence[object], owner: Optional[object] = None) -> None:
        listed = ", ".join(f"<{item}>" for item in ranges)
        where = f" on class <{owner}>" if owner is not None else ""
        super().__init__(
            f"Property <{property_id}>{where} has no single most specific range among {listed}",
            [property_id] + ([owner] if owner is not None else []),
        )
        self.property_id = property_id
        self.ranges = tuple(ranges)
        self.owner = owner


class DuplicateLabelError(Owl2OasError):
    """Raised when distinct resources would be emitted under the same name."""

    def __init__(self, label: str, sources: Sequence[object], scope: Optional[object] = None) -> None:
        listed = ", ".join(f"<{item}>" for item in sources)
        where = f" within <{scope}>" if scope is not None else ""
        super().__init__(f"Label '{label}' is shared by {listed}{where}", sources)
        self.label = label
        self.sources = tuple(sources)


class CycleDetected(Owl2OasError):
    """Raised when the superclass relation loops back on itself."""

    def __init__(self, cycle: Sequence[object]) -> None:
        path = " -> ".join(f"<{item}>" for item in cycle)
        super().__init__(f"Superclass cycle detected: {path}", cycle)
        self.cycle = tuple(cycle)


@dataclass(frozen=True)
class UnmappedDatatype:
    """Notice emitted when a datatype has no OpenAPI counterpart and falls back to string."""

    property_id: str
    datatype: str
    owner: Optional[str] = None

    @property
    def message(self) -> str:
        return f"Datatype <{self.datatype}> of property <{self.property_id}> is not mapped; using string"
