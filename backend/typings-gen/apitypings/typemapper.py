"""
backend/typings-gen/apitypings/typemapper.py

Go type descriptor -> TypeScript type expression.

    map[string][]byte   -> Record<string, string>
    *time.Time          -> string   (optional)
    []User              -> User[]
    T (T Custom)        -> T, bound as `T extends string | number`

Every result is a TypescriptType; composite mappings concatenate the
annotations of their parts (without repeats). Optionality only propagates
where Go semantics allow a nil: pointers force it, map and slice elements
never pass it up to the container.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from apitypings import config
from apitypings.errors import MappingError
from apitypings.symbols.model import (
    BasicType,
    InterfaceType,
    MapType,
    NamedType,
    Package,
    PointerType,
    SliceType,
    StructType,
    Term,
    TypeDescriptor,
    TypeParam,
    UnionType,
    describe,
)

logger = logging.getLogger(__name__)

BYTE_NOTE = "This is a byte in golang"
ANONYMOUS_STRUCT_NOTE = "Embedded anonymous struct, please fix by naming it"
NO_EXPLICIT_ANY = "eslint-disable-next-line @typescript-eslint/no-explicit-any"

_BYTE_KINDS = ("byte", "uint8")


@dataclass(frozen=True)
class TypescriptType:
    value_type: str
    optional: bool = False
    # Single-letter symbol when the value is bound through a generic,
    # value_type then holds the constraint expression.
    generic_mapping: str = ""
    # Comment lines (without "//") to place above the declaration.
    annotations: Tuple[str, ...] = ()
    # (symbol, constraint) for every type param used anywhere in the value,
    # containers keep these while their value_type refers to the symbol.
    generic_bindings: Tuple[Tuple[str, str], ...] = ()

    @property
    def reference(self) -> str:
        """The expression a field or container spells: the symbol if bound."""
        return self.generic_mapping or self.value_type


def join_annotations(*groups: Iterable[str]) -> Tuple[str, ...]:
    out: list[str] = []
    for group in groups:
        for line in group:
            if line and line not in out:
                out.append(line)
    return tuple(out)


def join_bindings(*groups: Iterable[Tuple[str, str]]) -> Tuple[Tuple[str, str], ...]:
    out: list[Tuple[str, str]] = []
    for group in groups:
        for binding in group:
            if binding not in out:
                out.append(binding)
    return tuple(out)


def _array_element(expr: str) -> str:
    # `string | number[]` reads as "string, or array of number"
    return f"({expr})" if " | " in expr else expr


def comment_lines(annotations: Sequence[str], indent: str = "") -> list[str]:
    return [f"{indent}// {line}" for line in annotations]


def union_terms(iface: InterfaceType) -> Optional[Tuple[Term, ...]]:
    """
    The term list of a constraint interface, or None when the interface is
    not a single-embedding constraint.

        interface{ string | int } -> (string, int)
        interface{ ~string }      -> (string,)
    """
    if len(iface.embeddeds) != 1 or iface.methods:
        return None
    embedded = iface.embeddeds[0]
    if isinstance(embedded, UnionType):
        return embedded.terms
    # A lone embedded type behaves as a one-term union.
    return (Term(type=embedded, tilde=True),)


class TypeMapper:
    def __init__(
        self,
        package: Package,
        known_types: Optional[Mapping[str, Tuple[str, bool]]] = None,
        ignored: FrozenSet[str] = frozenset(),
    ) -> None:
        self.package = package
        self.known_types: Dict[str, Tuple[str, bool]] = dict(
            config.KNOWN_EXTERNAL_TYPES if known_types is None else known_types
        )
        # local names that never get a block of their own
        self.ignored = ignored

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def resolve_underlying(self, named: NamedType) -> Optional[TypeDescriptor]:
        if named.underlying is not None:
            return named.underlying
        if self.package.is_local(named):
            obj = self.package.lookup(named.name)
            if obj is not None and isinstance(obj.type, NamedType):
                return obj.type.underlying
        return None

    def union_type(self, terms: Sequence[Term]) -> TypescriptType:
        """Map each term and join them into `A | B | ...`."""
        values: list[str] = []
        annotations: Tuple[str, ...] = ()
        bindings: Tuple[Tuple[str, str], ...] = ()
        optional = False
        for term in terms:
            ts = self.typescript_type(term.type)
            values.append(ts.reference)
            annotations = join_annotations(annotations, ts.annotations)
            bindings = join_bindings(bindings, ts.generic_bindings)
            optional = optional or ts.optional
        return TypescriptType(
            value_type=" | ".join(values),
            optional=optional,
            annotations=annotations,
            generic_bindings=bindings,
        )

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def typescript_type(self, ty: TypeDescriptor) -> TypescriptType:
        if isinstance(ty, BasicType):
            return self._basic(ty)

        if isinstance(ty, StructType):
            # type Name struct { Embedded struct { ... } }
            logger.warning("anonymous struct in package %s mapped to any", self.package.path)
            return TypescriptType(
                value_type="any",
                annotations=(ANONYMOUS_STRUCT_NOTE, NO_EXPLICIT_ANY),
            )

        if isinstance(ty, MapType):
            key = self._wrap("map key", ty.key)
            value = self._wrap("map value", ty.elem)
            return TypescriptType(
                value_type=f"Record<{key.reference}, {value.reference}>",
                annotations=join_annotations(key.annotations, value.annotations),
                generic_bindings=join_bindings(key.generic_bindings, value.generic_bindings),
            )

        if isinstance(ty, SliceType):
            # Byte slices and arrays travel as encoded strings.
            if isinstance(ty.elem, BasicType) and ty.elem.name in _BYTE_KINDS:
                return TypescriptType(value_type="string")
            elem = self._wrap("array", ty.elem)
            return TypescriptType(
                value_type=f"{_array_element(elem.reference)}[]",
                annotations=elem.annotations,
                generic_bindings=elem.generic_bindings,
            )

        if isinstance(ty, NamedType):
            return self._named(ty)

        if isinstance(ty, PointerType):
            elem = self._wrap("pointer", ty.elem)
            return replace(elem, optional=True)

        if isinstance(ty, InterfaceType):
            if ty.is_empty:
                return TypescriptType(value_type="any", annotations=(NO_EXPLICIT_ANY,))
            raise MappingError("only empty interface types are supported")

        if isinstance(ty, TypeParam):
            return self._type_param(ty)

        raise MappingError(f"unknown type: {describe(ty)}")

    def _wrap(self, what: str, ty: TypeDescriptor) -> TypescriptType:
        try:
            return self.typescript_type(ty)
        except MappingError as e:
            raise MappingError(f"{what}: {e}") from e

    def _basic(self, ty: BasicType) -> TypescriptType:
        # byte is numeric too, check it first to keep the note
        if ty.name in _BYTE_KINDS:
            return TypescriptType(value_type="number", annotations=(BYTE_NOTE,))
        if ty.is_numeric:
            return TypescriptType(value_type="number")
        if ty.is_boolean:
            return TypescriptType(value_type="boolean")
        if ty.is_string:
            return TypescriptType(value_type="string")
        return TypescriptType(value_type=ty.name)

    def _named(self, ty: NamedType) -> TypescriptType:
        qualified = ty.qualified_name
        known = self.known_types.get(qualified)
        if known is not None:
            value_type, optional = known
            return TypescriptType(value_type=value_type, optional=optional)

        # Declared in this package, so it gets its own block in this run.
        if self.package.is_local(ty):
            if not ty.name[:1].isupper() or ty.name in self.ignored:
                logger.warning(
                    "%s refers to %s, which is unexported or ignored and gets no declaration",
                    self.package.path, ty.name,
                )
            return TypescriptType(value_type=ty.name)

        underlying = self.resolve_underlying(ty)
        if underlying is None:
            raise MappingError(f"unknown type: {qualified}")

        if isinstance(underlying, StructType):
            logger.warning("named type %s is not declared in %s, using any", qualified, self.package.path)
            return TypescriptType(
                value_type="any",
                annotations=(f'Named type "{qualified}" unknown, using "any"', NO_EXPLICIT_ANY),
            )

        ts = self._wrap("named underlying", underlying)
        note = f'This is likely an enum in an external package ("{qualified}")'
        return replace(ts, annotations=join_annotations(ts.annotations, (note,)))

    def _type_param(self, ty: TypeParam) -> TypescriptType:
        constraint = ty.constraint
        iface = self.resolve_underlying(constraint) if isinstance(constraint, NamedType) else constraint
        if not isinstance(iface, InterfaceType):
            raise MappingError(f"type param {ty.name} must be an interface, got {describe(constraint)}")

        if iface.is_empty:
            return TypescriptType(value_type="any", generic_mapping=ty.name, generic_bindings=((ty.name, "any"),))

        terms = union_terms(iface)
        if terms is None:
            raise MappingError(
                f"type param {ty.name} constraint {describe(constraint)} is not a union of types"
            )
        union = self.union_type(terms)
        return TypescriptType(
            value_type=union.value_type,
            generic_mapping=ty.name,
            annotations=union.annotations,
            generic_bindings=join_bindings(union.generic_bindings, ((ty.name, union.value_type),)),
        )
