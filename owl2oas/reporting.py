"""Run summaries for the OWL to OpenAPI pipeline."""
from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .errors import UnmappedDatatype
from .structures import Document, OntologyModel


def build_report(
    model: OntologyModel,
    document: Document,
    notices: Sequence[UnmappedDatatype] = (),
    source: Optional[Path] = None,
) -> Dict[str, Any]:
    resource_classes = model.resource_classes()
    report: Dict[str, Any] = {
        "title": document.title,
        "classes": len(resource_classes),
        "datatypes": len(model.classes) - len(resource_classes),
        "properties": len(model.properties),
        "schemas": len(document.schemas),
        "paths": len(document.paths),
        "deprecated": sorted(
            key for key, schema in document.schemas.items() if schema.deprecated
        ),
        "notices": [asdict(notice) for notice in notices],
    }
    metadata = model.metadata
    if metadata.identifier is not None:
        report["ontology"] = {
            "identifier": str(metadata.identifier),
            "version_info": metadata.version_info,
            "version_iri": metadata.version_iri,
            "license": metadata.license,
        }
    if source is not None:
        report["source"] = str(source)
    return report


def save_report(report: Dict[str, Any], path: Path) -> None:
    path.write_text(json.dumps(report, indent=2), encoding="utf-8")
