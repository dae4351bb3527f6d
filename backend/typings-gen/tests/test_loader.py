import json
import os
import sys

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from apitypings.errors import LoadError
from apitypings.symbols.loader import load_package, load_package_file, load_packages
from apitypings.symbols.model import (
    BasicType,
    MapType,
    NamedType,
    PointerType,
    SliceType,
    StructType,
    TypeParam,
)

PKG = "github.com/acme/sdk"


def sample_package(**overrides):
    pkg = {
        "name": "sdk",
        "path": PKG,
        "dir": "codersdk",
        "comments": ["// @typescript-ignore: Foo"],
        "objects": [
            {
                "kind": "type",
                "name": "User",
                "file": "codersdk/users.go",
                "line": 12,
                "type": {
                    "kind": "named",
                    "name": "User",
                    "pkg": PKG,
                    "underlying": {
                        "kind": "struct",
                        "fields": [
                            {"name": "ID", "type": {"kind": "array", "length": 16, "elem": {"kind": "basic", "name": "byte"}},
                             "tag": "json:\"id\"", "pkg": PKG},
                            {"name": "Roles", "type": {"kind": "map", "key": {"kind": "basic", "name": "string"},
                                                        "elem": {"kind": "pointer", "elem": {"kind": "named", "name": "Role", "pkg": PKG}}},
                             "pkg": PKG},
                            {"name": "Meta", "type": {"kind": "typeparam", "name": "T",
                                                       "constraint": {"kind": "interface"}}, "pkg": PKG},
                        ],
                    },
                },
            },
            {"kind": "const", "name": "RoleAdmin", "value": "\"admin\"",
             "type": {"kind": "named", "name": "Role", "pkg": PKG}},
        ],
    }
    pkg.update(overrides)
    return pkg


def test_load_package_builds_model():
    package = load_package({"packages": [sample_package()]})
    assert package.path == PKG
    assert package.source_dir == "codersdk"
    assert package.comments == ("// @typescript-ignore: Foo",)

    user = package.lookup("User")
    assert user.file == "codersdk/users.go"
    assert user.line == 12
    assert isinstance(user.type, NamedType)
    assert isinstance(user.type.underlying, StructType)

    id_field, roles, meta = user.type.underlying.fields
    assert id_field.type == SliceType(BasicType("byte"), length=16)
    assert id_field.tag == 'json:"id"'
    assert roles.type == MapType(BasicType("string"), PointerType(NamedType("Role", PKG)))
    assert isinstance(meta.type, TypeParam)

    admin = package.lookup("RoleAdmin")
    assert admin.kind == "const"
    assert admin.value == '"admin"'
    assert package.is_local(NamedType("Role", PKG)) is False  # Role itself is not declared here
    assert package.is_local(NamedType("User", PKG))
    assert not package.is_local(NamedType("User", "github.com/other"))


def test_exactly_one_package_required():
    with pytest.raises(LoadError, match="expected 1 package, found 2"):
        load_package({"packages": [sample_package(), sample_package(path="github.com/acme/other")]})
    with pytest.raises(LoadError, match="expected 1 package, found 0"):
        load_package({"packages": []})
    assert len(load_packages({"packages": [sample_package(), sample_package()]})) == 2


@pytest.mark.parametrize(
    "bad_type",
    [
        {"kind": "map", "key": {"kind": "basic", "name": "string"}},
        {"kind": "pointer"},
        {"kind": "basic"},
        {"kind": "tuple"},
        {"kind": "union", "terms": []},
    ],
)
def test_schema_violations_are_load_errors(bad_type):
    pkg = sample_package(objects=[{"kind": "var", "name": "V", "type": bad_type}])
    with pytest.raises(LoadError, match="invalid symbol dump"):
        load_package({"packages": [pkg]})


def test_type_declaration_needs_underlying():
    pkg = sample_package(objects=[
        {"kind": "type", "name": "User", "type": {"kind": "named", "name": "User", "pkg": PKG}},
    ])
    with pytest.raises(LoadError, match="underlying"):
        load_package({"packages": [pkg]})


def test_duplicate_declarations_rejected():
    obj = {"kind": "var", "name": "V", "type": {"kind": "basic", "name": "int"}}
    with pytest.raises(LoadError, match="duplicate declaration"):
        load_package({"packages": [sample_package(objects=[obj, obj])]})


def test_load_package_file(tmp_path):
    path = tmp_path / "dump.json"
    path.write_text(json.dumps({"packages": [sample_package()]}), encoding="utf-8")
    assert load_package_file(path).name == "sdk"

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(LoadError, match="parse symbol dump"):
        load_package_file(broken)

    with pytest.raises(LoadError, match="read symbol dump"):
        load_package_file(tmp_path / "missing.json")
