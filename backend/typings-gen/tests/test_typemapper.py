import os
import sys

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from apitypings.errors import MappingError
from apitypings.symbols.model import (
    BasicType,
    ChanType,
    InterfaceType,
    MapType,
    NamedType,
    Object,
    Package,
    PointerType,
    SliceType,
    StructType,
    Term,
    TypeParam,
    UnionType,
)
from apitypings.typemapper import (
    ANONYMOUS_STRUCT_NOTE,
    BYTE_NOTE,
    NO_EXPLICIT_ANY,
    TypeMapper,
    join_annotations,
    union_terms,
)

PKG = "github.com/acme/sdk"

CUSTOM = InterfaceType(
    embeddeds=(UnionType(terms=(Term(BasicType("string")), Term(BasicType("int"), tilde=True))),)
)


def _mapper(known_types=None) -> TypeMapper:
    package = Package(
        name="sdk",
        path=PKG,
        objects=(
            Object(kind="type", name="User", type=NamedType("User", PKG, StructType())),
            Object(kind="type", name="Custom", type=NamedType("Custom", PKG, CUSTOM)),
        ),
    )
    return TypeMapper(package, known_types)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("int64", "number"),
        ("float32", "number"),
        ("rune", "number"),
        ("bool", "boolean"),
        ("string", "string"),
        ("untyped string", "string"),
    ],
)
def test_basic_types(name, expected):
    ts = _mapper().typescript_type(BasicType(name))
    assert ts.value_type == expected
    assert not ts.optional
    assert ts.annotations == ()


@pytest.mark.parametrize("name", ["byte", "uint8"])
def test_byte_keeps_a_note(name):
    ts = _mapper().typescript_type(BasicType(name))
    assert ts.value_type == "number"
    assert ts.annotations == (BYTE_NOTE,)


def test_containers():
    m = _mapper()
    assert m.typescript_type(MapType(BasicType("string"), SliceType(BasicType("byte")))).value_type == (
        "Record<string, string>"
    )
    assert m.typescript_type(SliceType(NamedType("User", PKG))).value_type == "User[]"
    assert m.typescript_type(SliceType(BasicType("uint8"), length=16)).value_type == "string"

    # element optionality does not leak into the container
    ts = m.typescript_type(SliceType(PointerType(BasicType("int"))))
    assert ts.value_type == "number[]"
    assert not ts.optional


def test_pointer_is_optional():
    ts = _mapper().typescript_type(PointerType(NamedType("User", PKG)))
    assert ts.value_type == "User"
    assert ts.optional


def test_known_external_types():
    m = _mapper()
    ts = m.typescript_type(NamedType("Time", "time", StructType()))
    assert (ts.value_type, ts.optional) == ("string", False)

    ts = m.typescript_type(NamedType("NullTime", "database/sql", StructType()))
    assert (ts.value_type, ts.optional) == ("string", True)

    custom = _mapper(known_types={"github.com/shopspring/decimal.Decimal": ("string", False)})
    assert custom.typescript_type(NamedType("Decimal", "github.com/shopspring/decimal")).value_type == "string"


def test_external_struct_becomes_any():
    # same name as a local declaration, different package
    ts = _mapper().typescript_type(NamedType("User", "github.com/other/auth", StructType()))
    assert ts.value_type == "any"
    assert ts.annotations == ('Named type "github.com/other/auth.User" unknown, using "any"', NO_EXPLICIT_ANY)


def test_external_enum_maps_underlying():
    ts = _mapper().typescript_type(NamedType("Level", "github.com/acme/log", BasicType("int")))
    assert ts.value_type == "number"
    assert ts.annotations == ('This is likely an enum in an external package ("github.com/acme/log.Level")',)


def test_unknown_named_type():
    with pytest.raises(MappingError, match="unknown type: github.com/acme/log.Level"):
        _mapper().typescript_type(NamedType("Level", "github.com/acme/log"))


def test_interfaces_and_anonymous_structs():
    m = _mapper()
    ts = m.typescript_type(InterfaceType())
    assert ts.value_type == "any"
    assert ts.annotations == (NO_EXPLICIT_ANY,)

    with pytest.raises(MappingError, match="only empty interface types are supported"):
        m.typescript_type(InterfaceType(methods=("String",)))

    ts = m.typescript_type(StructType())
    assert ts.value_type == "any"
    assert ANONYMOUS_STRUCT_NOTE in ts.annotations


def test_nested_errors_are_prefixed():
    with pytest.raises(MappingError, match="map value: unknown type: chan int"):
        _mapper().typescript_type(MapType(BasicType("string"), ChanType(BasicType("int"))))


def test_type_params():
    m = _mapper()
    ts = m.typescript_type(TypeParam("T", NamedType("Custom", PKG)))
    assert ts.generic_mapping == "T"
    assert ts.value_type == "string | number"

    ts = m.typescript_type(TypeParam("K", InterfaceType()))
    assert (ts.generic_mapping, ts.value_type) == ("K", "any")

    with pytest.raises(MappingError, match="not a union of types"):
        m.typescript_type(TypeParam("S", InterfaceType(methods=("String",))))

    with pytest.raises(MappingError, match="must be an interface"):
        m.typescript_type(TypeParam("T", BasicType("int")))


def test_type_params_inside_containers_keep_the_symbol():
    m = _mapper()
    t = TypeParam("T", NamedType("Custom", PKG))
    binding = (("T", "string | number"),)

    ts = m.typescript_type(SliceType(t))
    assert (ts.value_type, ts.generic_mapping) == ("T[]", "")
    assert ts.generic_bindings == binding

    ts = m.typescript_type(MapType(BasicType("string"), t))
    assert ts.value_type == "Record<string, T>"
    assert ts.generic_bindings == binding

    ts = m.typescript_type(SliceType(PointerType(t)))
    assert ts.value_type == "T[]"
    assert ts.generic_bindings == binding

    ts = m.typescript_type(PointerType(t))
    assert (ts.reference, ts.optional) == ("T", True)
    assert ts.generic_bindings == binding


def test_union_elements_are_parenthesized_in_arrays():
    m = _mapper(known_types={
        "github.com/acme/log.Level": ("string | number", False),
        "github.com/acme/log.Mode": ("string", False),
    })
    assert m.typescript_type(SliceType(NamedType("Level", "github.com/acme/log"))).value_type == (
        "(string | number)[]"
    )
    assert m.typescript_type(SliceType(NamedType("Mode", "github.com/acme/log"))).value_type == "string[]"


def test_reference_to_unemitted_local_type_warns(caplog):
    package = Package(
        name="sdk",
        path=PKG,
        objects=(
            Object(kind="type", name="secret", type=NamedType("secret", PKG, StructType())),
            Object(kind="type", name="Hidden", type=NamedType("Hidden", PKG, StructType())),
            Object(kind="type", name="User", type=NamedType("User", PKG, StructType())),
        ),
    )
    m = TypeMapper(package, ignored=frozenset({"Hidden"}))

    with caplog.at_level("WARNING", logger="apitypings.typemapper"):
        assert m.typescript_type(NamedType("secret", PKG)).value_type == "secret"
        assert m.typescript_type(NamedType("Hidden", PKG)).value_type == "Hidden"
        assert m.typescript_type(NamedType("User", PKG)).value_type == "User"

    warned = [r.getMessage() for r in caplog.records]
    assert len(warned) == 2
    assert "secret" in warned[0]
    assert "Hidden" in warned[1]


def test_union_terms():
    assert union_terms(CUSTOM) == CUSTOM.embeddeds[0].terms
    assert union_terms(InterfaceType(embeddeds=(BasicType("string"),))) == (Term(BasicType("string"), tilde=True),)
    assert union_terms(InterfaceType(embeddeds=(BasicType("string"),), methods=("String",))) is None
    assert union_terms(InterfaceType()) is None


def test_union_type_propagates_optional():
    ts = _mapper().union_type((Term(BasicType("string")), Term(PointerType(BasicType("byte")))))
    assert ts.value_type == "string | number"
    assert ts.optional
    assert ts.annotations == (BYTE_NOTE,)


def test_join_annotations_dedupes_in_order():
    assert join_annotations(("a", "b"), ("", "b", "c")) == ("a", "b", "c")
