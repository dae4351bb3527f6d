"""
backend/typings-gen/apitypings/render.py

Declaration -> TypeScript code block.

  build_struct  type User struct {...}        -> export interface User {...}
  build_alias   type Labels map[string]string -> export type Labels = Record<...>
  build_union   type Num interface{ int | ... } -> export type Num = number | ...
  build_enum    type Role string + consts     -> export type Role = "admin" | ...

Each block starts with a `// From <dir>/<file>.go` line and ends with a
newline; the assembler puts a blank line between blocks.
"""

from __future__ import annotations

import json
import posixpath
import re
from typing import Dict, List, Sequence

from apitypings import config
from apitypings.errors import MappingError
from apitypings.structtag import FieldDirective, interpret_field_tag, parse_struct_tag
from apitypings.symbols.model import (
    BasicType,
    Field,
    NamedType,
    Object,
    Package,
    PointerType,
    StructType,
    Term,
    TypeDescriptor,
    describe,
)
from apitypings.typemapper import TypeMapper, TypescriptType, comment_lines

_NUMBER_LITERAL_RE = re.compile(r"^-?(?:0[xX][0-9a-fA-F]+|\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)$")


def pos_line(package: Package, obj: Object) -> str:
    if not obj.file:
        return f"// From {package.source_dir}"
    return f"// From {posixpath.join(package.source_dir, posixpath.basename(obj.file))}"


# ======================================================================
#  RECORDS
# ======================================================================

def _embedded_record(package: Package, field: Field) -> bool:
    """
    True for an untagged embedded field naming a record of this package.
    A json tag makes encoding/json treat the field as a regular member.
    """
    if not field.embedded:
        return False
    if field.pkg not in (None, "", package.path):
        return False
    try:
        json_tag = parse_struct_tag(field.tag).get("json")
    except MappingError as e:
        raise MappingError(f"field {field.name!r}: {e}") from e
    if json_tag is not None and (json_tag.name or json_tag.options):
        return False

    ty: TypeDescriptor = field.type
    if isinstance(ty, PointerType):
        ty = ty.elem
    if not isinstance(ty, NamedType) or not package.is_local(ty):
        return False
    decl = package.lookup(ty.name)
    return (
        decl is not None
        and isinstance(decl.type, NamedType)
        and isinstance(decl.type.underlying, StructType)
    )


def _bind_generics(generics: Dict[str, str], ts: TypescriptType) -> None:
    """Record each symbol once, in first-use order."""
    for symbol, constraint in ts.generic_bindings:
        bound = generics.setdefault(symbol, constraint)
        if bound != constraint:
            raise MappingError(f"generic {symbol} bound to both {bound!r} and {constraint!r}")


def _type_params(generics: Dict[str, str]) -> str:
    if not generics:
        return ""
    return "<" + ", ".join(f"{symbol} extends {c}" for symbol, c in generics.items()) + ">"


def _field_directive(field: Field) -> FieldDirective:
    try:
        return interpret_field_tag(field.tag)
    except MappingError as e:
        raise MappingError(f"field {field.name!r}: {e}") from e


def build_struct(
    package: Package,
    mapper: TypeMapper,
    obj: Object,
    st: StructType,
    indent: str = config.INDENT,
) -> str:
    extends: List[str] = []
    members: List[Field] = []
    for field in st.fields:
        if _embedded_record(package, field):
            extends.append(field.name)
        else:
            members.append(field)

    generics: Dict[str, str] = {}
    body: List[str] = []
    for field in members:
        directive = _field_directive(field)
        if directive.skip:
            continue

        if directive.override:
            ts = TypescriptType(value_type=directive.override)
        else:
            try:
                ts = mapper.typescript_type(field.type)
            except MappingError as e:
                raise MappingError(f"field {field.name!r}: {e}") from e

        optional = (directive.omit_empty or ts.optional) and not directive.not_null
        try:
            _bind_generics(generics, ts)
        except MappingError as e:
            raise MappingError(f"field {field.name!r}: {e}") from e

        body.extend(comment_lines(ts.annotations, indent))
        body.append(f"{indent}readonly {directive.name or field.name}{'?' if optional else ''}: {ts.reference}")

    header = f"export interface {obj.name}{_type_params(generics)}"
    if extends:
        header += f" extends {', '.join(extends)}"

    lines = [pos_line(package, obj), header + " {", *body, "}"]
    return "\n".join(lines) + "\n"


# ======================================================================
#  ALIASES / UNIONS
# ======================================================================

def build_alias(package: Package, mapper: TypeMapper, obj: Object, underlying: TypeDescriptor) -> str:
    """Named maps and slices. No tags apply, so the mapping is used as is."""
    ts = mapper.typescript_type(underlying)
    generics: Dict[str, str] = {}
    _bind_generics(generics, ts)
    lines = [pos_line(package, obj), *comment_lines(ts.annotations)]
    lines.append(f"export type {obj.name}{_type_params(generics)} = {ts.reference}")
    return "\n".join(lines) + "\n"


def build_union(package: Package, mapper: TypeMapper, obj: Object, terms: Sequence[Term]) -> str:
    try:
        ts = mapper.union_type(terms)
    except MappingError as e:
        rendered = " | ".join(describe(t.type) for t in terms)
        raise MappingError(f"union {rendered!r} for {obj.name!r} failed to get type: {e}") from e

    q_mark = "?" if ts.optional else ""
    lines = [pos_line(package, obj), *comment_lines(ts.annotations)]
    lines.append(f"export type {obj.name}{q_mark} = {ts.value_type}")
    return "\n".join(lines) + "\n"


# ======================================================================
#  ENUMS
# ======================================================================

def _literal(base: BasicType, member: Object) -> str:
    text = (member.value or "").strip()
    if base.is_string:
        if len(text) >= 2 and text[0] == text[-1] == '"':
            return text
        if len(text) >= 2 and text[0] == text[-1] == "`":
            return json.dumps(text[1:-1])
        if text:
            return json.dumps(text)
    elif base.is_boolean:
        if text in ("true", "false"):
            return text
    elif base.is_numeric and not base.is_complex:
        if _NUMBER_LITERAL_RE.match(text):
            return text
    raise MappingError(f"constant {member.name} = {text!r} is not a supported {base.name} enum value")


def build_enum(
    package: Package,
    mapper: TypeMapper,
    obj: Object,
    base: BasicType,
    members: Sequence[Object],
) -> str:
    if members:
        # sorted by literal text, never by declaration order
        values = sorted({_literal(base, m) for m in members})
        value_type = " | ".join(values)
    else:
        value_type = mapper.typescript_type(base).value_type
    return f"{pos_line(package, obj)}\nexport type {obj.name} = {value_type}\n"
