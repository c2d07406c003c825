"""Configuration helpers for the OWL to OpenAPI generator."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "OWL2OAS_"
OUTPUT_FORMATS = ("yaml", "json")
INCLUSION_POLICIES = ("include", "exclude")


@dataclass(frozen=True)
class GeneratorConfig:
    """Runtime configuration for :class:`OpenApiGenerationPipeline`.

    Version and license are fixed per deployment rather than read from the
    ontology; the document title comes from the ontology header and falls
    back to ``default_title``.
    """

    language: Optional[str] = "en"
    version: str = "1.0.0"
    license_name: str = "MIT"
    license_url: Optional[str] = None
    server_url: Optional[str] = None
    default_title: str = "Ontology API"
    output_format: str = "yaml"
    workers: int = 1
    log_level: str = "WARNING"
    # Default for entities without an o2o:included annotation
    class_inclusion: str = "include"
    property_inclusion: str = "include"

    def __post_init__(self) -> None:
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format {self.output_format!r}; expected one of {', '.join(OUTPUT_FORMATS)}"
            )
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        for name in ("class_inclusion", "property_inclusion"):
            if getattr(self, name) not in INCLUSION_POLICIES:
                raise ValueError(
                    f"Unsupported {name} {getattr(self, name)!r}; expected one of {', '.join(INCLUSION_POLICIES)}"
                )

    @property
    def include_classes(self) -> bool:
        return self.class_inclusion == "include"

    @property
    def include_properties(self) -> bool:
        return self.property_inclusion == "include"

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "GeneratorConfig":
        """Build a config from ``OWL2OAS_*`` variables, loading ``.env`` first.

        Variables already present in the environment win over the file.
        """

        if environ is None:
            load_dotenv(env_file or find_dotenv(usecwd=True), override=False)
            environ = os.environ

        def value(name: str) -> Optional[str]:
            raw = environ.get(ENV_PREFIX + name)
            if raw is None:
                return None
            raw = raw.strip()
            return raw or None

        defaults = cls()
        workers_raw = value("WORKERS")
        try:
            workers = int(workers_raw) if workers_raw is not None else defaults.workers
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}WORKERS must be an integer, got {workers_raw!r}") from exc

        language = value("LANGUAGE")
        return cls(
            language=language if language is not None else defaults.language,
            version=value("VERSION") or defaults.version,
            license_name=value("LICENSE") or defaults.license_name,
            license_url=value("LICENSE_URL"),
            server_url=value("SERVER"),
            default_title=value("TITLE") or defaults.default_title,
            output_format=(value("OUTPUT_FORMAT") or defaults.output_format).lower(),
            workers=workers,
            log_level=(value("LOG_LEVEL") or defaults.log_level).upper(),
            class_inclusion=(value("CLASS_INCLUSION") or defaults.class_inclusion).lower(),
            property_inclusion=(value("PROPERTY_INCLUSION") or defaults.property_inclusion).lower(),
        )
