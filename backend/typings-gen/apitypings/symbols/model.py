from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Tuple, Union

ObjectKind = Literal["type", "const", "var", "func"]

_NUMERIC_KINDS = {
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    "float32", "float64", "complex64", "complex128",
    "byte", "rune",
    "untyped int", "untyped rune", "untyped float", "untyped complex",
}
_BOOLEAN_KINDS = {"bool", "untyped bool"}
_STRING_KINDS = {"string", "untyped string"}


@dataclass(frozen=True)
class BasicType:
    name: str                 # Go spelling: string, int64, byte, ...

    @property
    def is_numeric(self) -> bool:
        return self.name in _NUMERIC_KINDS

    @property
    def is_boolean(self) -> bool:
        return self.name in _BOOLEAN_KINDS

    @property
    def is_string(self) -> bool:
        return self.name in _STRING_KINDS

    @property
    def is_complex(self) -> bool:
        return "complex" in self.name


@dataclass(frozen=True)
class Field:
    name: str
    type: "TypeDescriptor"
    tag: str = ""             # raw struct tag, e.g. json:"name,omitempty"
    embedded: bool = False
    pkg: Optional[str] = None  # import path of the declaring package


@dataclass(frozen=True)
class StructType:
    fields: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class MapType:
    key: "TypeDescriptor"
    elem: "TypeDescriptor"


@dataclass(frozen=True)
class SliceType:
    elem: "TypeDescriptor"
    length: Optional[int] = None  # set for fixed arrays


@dataclass(frozen=True)
class NamedType:
    name: str
    pkg: Optional[str] = None
    # Omitted for references back into the generated package.
    underlying: Optional["TypeDescriptor"] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.pkg}.{self.name}" if self.pkg else self.name


@dataclass(frozen=True)
class PointerType:
    elem: "TypeDescriptor"


@dataclass(frozen=True)
class Term:
    type: "TypeDescriptor"
    tilde: bool = False


@dataclass(frozen=True)
class UnionType:
    terms: Tuple[Term, ...]


@dataclass(frozen=True)
class InterfaceType:
    embeddeds: Tuple["TypeDescriptor", ...] = ()
    methods: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.embeddeds and not self.methods


@dataclass(frozen=True)
class TypeParam:
    name: str
    constraint: "TypeDescriptor"


@dataclass(frozen=True)
class SignatureType:
    text: str = ""


@dataclass(frozen=True)
class ChanType:
    elem: "TypeDescriptor"
    direction: Literal["both", "send", "recv"] = "both"


TypeDescriptor = Union[
    BasicType,
    StructType,
    MapType,
    SliceType,
    NamedType,
    PointerType,
    InterfaceType,
    UnionType,
    TypeParam,
    SignatureType,
    ChanType,
]


def describe(ty: TypeDescriptor) -> str:
    """Short Go-like rendering of a descriptor, used in error messages."""
    if isinstance(ty, BasicType):
        return ty.name
    if isinstance(ty, StructType):
        return "struct{...}"
    if isinstance(ty, MapType):
        return f"map[{describe(ty.key)}]{describe(ty.elem)}"
    if isinstance(ty, SliceType):
        size = "" if ty.length is None else str(ty.length)
        return f"[{size}]{describe(ty.elem)}"
    if isinstance(ty, NamedType):
        return ty.qualified_name
    if isinstance(ty, PointerType):
        return f"*{describe(ty.elem)}"
    if isinstance(ty, InterfaceType):
        return "interface{}" if ty.is_empty else "interface{...}"
    if isinstance(ty, UnionType):
        return " | ".join(("~" if t.tilde else "") + describe(t.type) for t in ty.terms)
    if isinstance(ty, TypeParam):
        return ty.name
    if isinstance(ty, SignatureType):
        return ty.text or "func(...)"
    if isinstance(ty, ChanType):
        return f"chan {describe(ty.elem)}"
    return type(ty).__name__


@dataclass(frozen=True)
class Object:
    kind: ObjectKind
    name: str
    type: TypeDescriptor
    file: str = ""
    line: int = 0
    value: Optional[str] = None  # literal text of a constant, e.g. "\"red\""

    @property
    def exported(self) -> bool:
        return self.name[:1].isupper()


@dataclass(frozen=True)
class Package:
    name: str
    path: str
    dir: str = ""
    objects: Tuple[Object, ...] = ()
    comments: Tuple[str, ...] = ()
    _scope: Dict[str, Object] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # first declaration wins, mirrors a Go scope lookup
        for obj in self.objects:
            self._scope.setdefault(obj.name, obj)

    @property
    def source_dir(self) -> str:
        return self.dir or self.name

    def lookup(self, name: str) -> Optional[Object]:
        return self._scope.get(name)

    def is_local(self, named: NamedType) -> bool:
        if named.pkg not in (None, "", self.path):
            return False
        return named.name in self._scope
