"""Serialisation of a :class:`Document` to YAML or JSON text."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Union

import yaml

from .structures import Document


def to_yaml(document: Document) -> str:
    return yaml.safe_dump(
        document.to_dict(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def to_json(document: Document) -> str:
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False) + "\n"


def emit(document: Document, output_format: str = "yaml") -> str:
    """Render ``document`` in ``output_format`` (``yaml`` or ``json``)."""

    if output_format == "yaml":
        return to_yaml(document)
    if output_format == "json":
        return to_json(document)
    raise ValueError(f"Unsupported output format: {output_format}")


def save_document(document: Document, path: Union[str, Path], output_format: str = "yaml") -> None:
    Path(path).write_text(emit(document, output_format), encoding="utf-8")
