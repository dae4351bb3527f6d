"""
backend/typings-gen/apitypings/symbols/loader.py

Symbol dump (JSON) -> Package.

The Go side (a small go/packages program) type-checks one package and
writes its scope as JSON:

  {
    "packages": [
      {
        "name": "codersdk",
        "path": "github.com/coder/coder/codersdk",
        "dir": "codersdk",
        "comments": ["// @typescript-ignore: Foo"],
        "objects": [
          {"kind": "type", "name": "User", "file": "codersdk/users.go", "line": 12,
           "type": {"kind": "named", "name": "User", "pkg": "...",
                    "underlying": {"kind": "struct", "fields": [...]}}},
          {"kind": "const", "name": "RoleAdmin", "value": "\\"admin\\"",
           "type": {"kind": "named", "name": "Role", "pkg": "..."}}
        ]
      }
    ]
  }

The wire schema is validated with pydantic and converted into the frozen
dataclasses of `apitypings.symbols.model`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ValidationError, model_validator  # type: ignore

from apitypings.errors import LoadError
from apitypings.symbols.model import (
    BasicType,
    ChanType,
    Field,
    InterfaceType,
    MapType,
    NamedType,
    Object,
    Package,
    PointerType,
    SignatureType,
    SliceType,
    StructType,
    Term,
    TypeDescriptor,
    TypeParam,
    UnionType,
)

logger = logging.getLogger(__name__)

TypeKind = Literal[
    "basic", "struct", "map", "slice", "array", "named", "pointer",
    "interface", "union", "typeparam", "signature", "chan",
]

# kind -> attributes that must be present
_REQUIRED = {
    "basic": ("name",),
    "map": ("key", "elem"),
    "slice": ("elem",),
    "array": ("elem",),
    "named": ("name",),
    "pointer": ("elem",),
    "union": ("terms",),
    "typeparam": ("name", "constraint"),
    "chan": ("elem",),
}


# ---------------------------------------------------------------------------
# Wire schema
# ---------------------------------------------------------------------------

class FieldSpec(BaseModel):
    name: str
    type: "TypeSpec"
    tag: str = ""
    embedded: bool = False
    pkg: Optional[str] = None


class TermSpec(BaseModel):
    type: "TypeSpec"
    tilde: bool = False


class TypeSpec(BaseModel):
    kind: TypeKind
    name: Optional[str] = None
    pkg: Optional[str] = None
    key: Optional["TypeSpec"] = None
    elem: Optional["TypeSpec"] = None
    length: Optional[int] = None
    underlying: Optional["TypeSpec"] = None
    constraint: Optional["TypeSpec"] = None
    fields: List[FieldSpec] = []
    embeddeds: List["TypeSpec"] = []
    methods: List[str] = []
    terms: List[TermSpec] = []
    direction: Literal["both", "send", "recv"] = "both"
    text: str = ""

    @model_validator(mode="after")
    def _check_required(self) -> "TypeSpec":
        for attr in _REQUIRED.get(self.kind, ()):
            value = getattr(self, attr)
            if value is None or value == "" or value == []:
                raise ValueError(f"{self.kind} type requires {attr!r}")
        return self


FieldSpec.model_rebuild()
TermSpec.model_rebuild()
TypeSpec.model_rebuild()


class ObjectSpec(BaseModel):
    kind: Literal["type", "const", "var", "func"]
    name: str
    type: TypeSpec
    file: str = ""
    line: int = 0
    value: Optional[str] = None

    @model_validator(mode="after")
    def _check_declaration(self) -> "ObjectSpec":
        if self.kind == "type":
            if self.type.kind != "named" or self.type.underlying is None:
                raise ValueError(f"type {self.name!r} must be a named type with an underlying type")
        return self


class PackageSpec(BaseModel):
    name: str
    path: str
    dir: str = ""
    comments: List[str] = []
    objects: List[ObjectSpec] = []

    @model_validator(mode="after")
    def _check_unique(self) -> "PackageSpec":
        seen: set[str] = set()
        for o in self.objects:
            if o.name in seen:
                raise ValueError(f"duplicate declaration {o.name!r} in package {self.path!r}")
            seen.add(o.name)
        return self


class SymbolDump(BaseModel):
    packages: List[PackageSpec]


# ---------------------------------------------------------------------------
# Wire schema -> model
# ---------------------------------------------------------------------------

def _to_type(spec: TypeSpec) -> TypeDescriptor:
    kind = spec.kind
    if kind == "basic":
        return BasicType(name=spec.name or "")
    if kind == "struct":
        return StructType(fields=tuple(
            Field(name=f.name, type=_to_type(f.type), tag=f.tag, embedded=f.embedded, pkg=f.pkg)
            for f in spec.fields
        ))
    if kind == "map":
        return MapType(key=_to_type(spec.key), elem=_to_type(spec.elem))
    if kind in ("slice", "array"):
        length = spec.length if kind == "array" else None
        return SliceType(elem=_to_type(spec.elem), length=length)
    if kind == "named":
        underlying = _to_type(spec.underlying) if spec.underlying is not None else None
        return NamedType(name=spec.name or "", pkg=spec.pkg, underlying=underlying)
    if kind == "pointer":
        return PointerType(elem=_to_type(spec.elem))
    if kind == "interface":
        return InterfaceType(
            embeddeds=tuple(_to_type(e) for e in spec.embeddeds),
            methods=tuple(spec.methods),
        )
    if kind == "union":
        return UnionType(terms=tuple(Term(type=_to_type(t.type), tilde=t.tilde) for t in spec.terms))
    if kind == "typeparam":
        return TypeParam(name=spec.name or "", constraint=_to_type(spec.constraint))
    if kind == "signature":
        return SignatureType(text=spec.text)
    if kind == "chan":
        return ChanType(elem=_to_type(spec.elem), direction=spec.direction)
    raise LoadError(f"unknown type kind {kind!r}")


def to_package(spec: PackageSpec) -> Package:
    objects = tuple(
        Object(
            kind=o.kind,
            name=o.name,
            type=_to_type(o.type),
            file=o.file,
            line=o.line,
            value=o.value,
        )
        for o in spec.objects
    )
    return Package(
        name=spec.name,
        path=spec.path,
        dir=spec.dir,
        objects=objects,
        comments=tuple(spec.comments),
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def load_packages(document: Any) -> List[Package]:
    try:
        dump = SymbolDump.model_validate(document)
    except ValidationError as e:
        raise LoadError(f"invalid symbol dump: {e}") from e
    return [to_package(p) for p in dump.packages]


def require_single(packages: List[Package]) -> Package:
    # Only one package per run; multiple packages would need cross-package
    # name resolution in the type mapper.
    if len(packages) != 1:
        raise LoadError(f"expected 1 package, found {len(packages)}")
    return packages[0]


def load_package(document: Any) -> Package:
    pkg = require_single(load_packages(document))
    logger.debug("loaded package %s (%d objects)", pkg.path, len(pkg.objects))
    return pkg


def load_package_file(path: str | Path) -> Package:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise LoadError(f"read symbol dump {str(p)!r}: {e}") from e
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LoadError(f"parse symbol dump {str(p)!r}: {e}") from e
    return load_package(document)
