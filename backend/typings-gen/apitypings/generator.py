"""
backend/typings-gen/apitypings/generator.py

Main entry: Package -> TypescriptTypes

  1) scan comments for @typescript-ignore
  2) classify every declaration (records / unions render on the spot)
  3) render enums, now that all constants are known
  4) hand the buckets to the assembler
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional, Tuple

from apitypings import config
from apitypings.assembler import TypescriptTypes
from apitypings.classifier import Classifier, scan_ignored_types
from apitypings.symbols.loader import load_package_file
from apitypings.symbols.model import Package
from apitypings.typemapper import TypeMapper

logger = logging.getLogger(__name__)


def generate(
    package: Package,
    banner: Optional[str] = None,
    known_types: Optional[Mapping[str, Tuple[str, bool]]] = None,
) -> TypescriptTypes:
    ignored = scan_ignored_types(package.comments)
    if ignored:
        logger.info("ignoring %d declaration(s): %s", len(ignored), ", ".join(sorted(ignored)))

    mapper = TypeMapper(package, known_types=known_types, ignored=ignored)
    classifier = Classifier(package, mapper, ignored)
    classified = classifier.classify()
    enums = classifier.finalize_enums(classified)

    result = TypescriptTypes(
        types=classified.structs,
        enums=enums,
        generics=classified.generics,
        banner=banner or config.GENERATED_BANNER,
    )
    logger.info(
        "generated %s: %d types, %d enums, %d generics",
        package.path, len(result.types), len(result.enums), len(result.generics),
    )
    return result


def generate_from_file(path: str | Path, banner: Optional[str] = None) -> TypescriptTypes:
    return generate(load_package_file(path), banner=banner)
