"""High-level orchestration for the OWL to OpenAPI transformation."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import GeneratorConfig
from .document import assemble_document, document_description, document_title
from .emitter import emit
from .errors import UnmappedDatatype
from .ontology import read_ontology
from .paths import synthesize_paths
from .reporting import build_report, save_report
from .schema import SchemaSynthesizer
from .structures import Document, OntologyModel, SchemaDefinition
from .vocabulary import VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    document: Document
    model: OntologyModel
    notices: Tuple[UnmappedDatatype, ...] = ()
    report: Dict[str, Any] = field(default_factory=dict)

    def render(self, output_format: str = "yaml") -> str:
        return emit(self.document, output_format)


class OpenApiGenerationPipeline:
    """Load an ontology file and turn it into an OpenAPI :class:`Document`.

    Nothing is produced when any step fails: errors propagate to the caller
    before the document is assembled.
    """

    def __init__(
        self, config: Optional[GeneratorConfig] = None, vocabulary: Vocabulary = VOCABULARY
    ) -> None:
        self.config = config or GeneratorConfig()
        self.vocabulary = vocabulary

    def run(
        self, ontology_path: Union[str, Path], report_path: Optional[Path] = None
    ) -> GenerationResult:
        source = Path(ontology_path)
        model = read_ontology(source, self.vocabulary)
        result = self.generate(model)
        result.report = build_report(model, result.document, result.notices, source=source)
        if report_path is not None:
            save_report(result.report, report_path)
        return result

    def generate(self, model: OntologyModel) -> GenerationResult:
        synthesizer = SchemaSynthesizer(
            model,
            self.config.language,
            self.vocabulary,
            include_classes=self.config.include_classes,
            include_properties=self.config.include_properties,
        )
        schemas = self._synthesize_schemas(synthesizer, model)
        paths = synthesize_paths(schemas)
        document = assemble_document(
            schemas,
            paths,
            title=document_title(model.metadata, self.config.language, self.config.default_title),
            version=self.config.version,
            license_name=self.config.license_name,
            license_url=self.config.license_url,
            description=document_description(model.metadata, self.config.language),
            server_url=self.config.server_url,
        )
        notices = synthesizer.notices
        if notices:
            logger.warning("%d datatype(s) could not be mapped and were emitted as strings", len(notices))
        return GenerationResult(
            document=document,
            model=model,
            notices=notices,
            report=build_report(model, document, notices),
        )

    def _synthesize_schemas(
        self, synthesizer: SchemaSynthesizer, model: OntologyModel
    ) -> List[SchemaDefinition]:
        identifiers = synthesizer.published_classes()
        if self.config.workers > 1 and len(identifiers) > 1:
            logger.debug("Synthesizing %d schemas with %d workers", len(identifiers), self.config.workers)
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                schemas = list(executor.map(synthesizer.schema_for, identifiers))
        else:
            schemas = [synthesizer.schema_for(identifier) for identifier in identifiers]
        return sorted(schemas, key=lambda schema: schema.key)
