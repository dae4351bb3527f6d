"""
backend/typings-gen/apitypings/classifier.py

One pass over the package scope. Every exported declaration lands in
exactly one bucket:

  struct                   -> records   (rendered immediately)
  map / slice / array      -> records   (rendered as `export type X = ...`)
  basic                    -> enum base (rendered after the pass)
  const of a local named   -> enum member
  single-embedding iface   -> generics  (rendered immediately)
  other iface / func type  -> ignored
  anything else            -> ClassificationError
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List

from apitypings import config
from apitypings.errors import ClassificationError, MappingError
from apitypings.render import build_alias, build_enum, build_struct, build_union
from apitypings.symbols.model import (
    BasicType,
    InterfaceType,
    MapType,
    NamedType,
    Object,
    Package,
    SignatureType,
    SliceType,
    StructType,
    describe,
)
from apitypings.typemapper import TypeMapper, union_terms

logger = logging.getLogger(__name__)

_IGNORE_RE = re.compile(config.IGNORE_DIRECTIVE_PATTERN)


def scan_ignored_types(comments: Iterable[str]) -> FrozenSet[str]:
    """
    Collect names listed in `@typescript-ignore: A, B` directives.
    A comment group may carry several lines, each is scanned on its own.
    """
    ignored: set[str] = set()
    for comment in comments:
        for line in comment.splitlines():
            m = _IGNORE_RE.search(line)
            if not m:
                continue
            for name in m.group("ignored_types").split(","):
                name = name.strip()
                if name:
                    ignored.add(name)
    return frozenset(ignored)


@dataclass
class Classification:
    structs: Dict[str, str] = field(default_factory=dict)
    generics: Dict[str, str] = field(default_factory=dict)
    enums: Dict[str, Object] = field(default_factory=dict)
    enum_consts: Dict[str, List[Object]] = field(default_factory=dict)


class Classifier:
    def __init__(self, package: Package, mapper: TypeMapper, ignored: FrozenSet[str] = frozenset()) -> None:
        self.package = package
        self.mapper = mapper
        self.ignored = ignored

    def classify(self) -> Classification:
        out = Classification()
        for obj in self.package.objects:
            if not obj.exported:
                continue
            if obj.name in self.ignored:
                logger.debug("ignoring %s (@typescript-ignore)", obj.name)
                continue
            if obj.kind == "type":
                self._type_decl(obj, out)
            elif obj.kind == "const":
                self._const_decl(obj, out)
            # vars and funcs never produce a block
        return out

    def _type_decl(self, obj: Object, out: Classification) -> None:
        named = obj.type
        if not isinstance(named, NamedType) or named.underlying is None:
            raise ClassificationError(obj.name, describe(named))
        underlying = named.underlying

        try:
            if isinstance(underlying, StructType):
                out.structs[obj.name] = build_struct(self.package, self.mapper, obj, underlying)
                logger.debug("struct %s", obj.name)
            elif isinstance(underlying, BasicType):
                out.enums[obj.name] = obj
                logger.debug("enum base %s (%s)", obj.name, underlying.name)
            elif isinstance(underlying, (MapType, SliceType)):
                out.structs[obj.name] = build_alias(self.package, self.mapper, obj, underlying)
                logger.debug("alias %s = %s", obj.name, describe(underlying))
            elif isinstance(underlying, InterfaceType):
                terms = union_terms(underlying)
                if terms is None:
                    # plain method sets are not constraints
                    logger.debug("skipping interface %s", obj.name)
                    return
                out.generics[obj.name] = build_union(self.package, self.mapper, obj, terms)
                logger.debug("union %s", obj.name)
            elif isinstance(underlying, SignatureType):
                logger.debug("skipping func type %s", obj.name)
            else:
                raise ClassificationError(obj.name, describe(underlying))
        except MappingError as e:
            raise MappingError(f"generate {obj.name!r} ({obj.file}:{obj.line}): {e}") from e

    def _const_decl(self, obj: Object, out: Classification) -> None:
        # Only constants typed with a named type of this package are enum members.
        ty = obj.type
        if isinstance(ty, NamedType) and self.package.is_local(ty):
            out.enum_consts.setdefault(ty.name, []).append(obj)

    def finalize_enums(self, out: Classification) -> Dict[str, str]:
        """Render enum bases once every constant has been seen."""
        blocks: Dict[str, str] = {}
        for name, obj in out.enums.items():
            base = obj.type.underlying  # type: ignore[union-attr]
            try:
                blocks[name] = build_enum(self.package, self.mapper, obj, base, out.enum_consts.get(name, []))
            except MappingError as e:
                raise MappingError(f"generate enum {name!r} ({obj.file}:{obj.line}): {e}") from e
        return blocks
