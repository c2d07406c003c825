"""Command-line entry point for the OWL to OpenAPI generator."""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .config import INCLUSION_POLICIES, OUTPUT_FORMATS, GeneratorConfig
from .errors import Owl2OasError
from .pipeline import OpenApiGenerationPipeline

logger = logging.getLogger("owl2oas")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="owl2oas",
        description="Generate an OpenAPI 3.0 document from an OWL ontology",
    )
    parser.add_argument("ontology", type=Path, help="Path to the ontology file (Turtle, RDF/XML, ...)")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format (default: yaml)")
    parser.add_argument("--language", help="Preferred label language tag (default: en)")
    parser.add_argument(
        "--class-inclusion",
        choices=INCLUSION_POLICIES,
        help="Publish classes without an o2o:included annotation (default: include)",
    )
    parser.add_argument(
        "--property-inclusion",
        choices=INCLUSION_POLICIES,
        help="Emit properties without an o2o:included annotation (default: include)",
    )
    parser.add_argument("--report", type=Path, help="Optional JSON report path")
    parser.add_argument("--env-file", type=Path, help="Load OWL2OAS_* settings from this .env file")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = GeneratorConfig.from_env(args.env_file)
    except ValueError as exc:
        logging.basicConfig(stream=sys.stderr, level=logging.WARNING)
        logger.error("Invalid configuration: %s", exc)
        return 1

    overrides = {}
    if args.format:
        overrides["output_format"] = args.format
    if args.language:
        overrides["language"] = args.language
    if args.class_inclusion:
        overrides["class_inclusion"] = args.class_inclusion
    if args.property_inclusion:
        overrides["property_inclusion"] = args.property_inclusion
    if overrides:
        config = replace(config, **overrides)

    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    pipeline = OpenApiGenerationPipeline(config)
    try:
        result = pipeline.run(args.ontology, report_path=args.report)
    except (Owl2OasError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    sys.stdout.write(result.render(config.output_format))
    return 0


if __name__ == "__main__":
    sys.exit(main())
