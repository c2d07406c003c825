"""OWL2OAS: OpenAPI 3.0 documents generated from OWL ontologies."""

from .config import GeneratorConfig
from .document import assemble_document
from .emitter import emit
from .errors import (
    AmbiguousRangeError,
    ConflictingPropertyKind,
    CycleDetected,
    DuplicateLabelError,
    LoadError,
    MalformedOntologyError,
    Owl2OasError,
    UnmappedDatatype,
)
from .ontology import build_model, read_ontology
from .pipeline import GenerationResult, OpenApiGenerationPipeline
from .schema import SchemaSynthesizer

__all__ = [
    "GeneratorConfig",
    "OpenApiGenerationPipeline",
    "GenerationResult",
    "SchemaSynthesizer",
    "assemble_document",
    "build_model",
    "read_ontology",
    "emit",
    "Owl2OasError",
    "LoadError",
    "MalformedOntologyError",
    "ConflictingPropertyKind",
    "AmbiguousRangeError",
    "DuplicateLabelError",
    "CycleDetected",
    "UnmappedDatatype",
]
