"""
Go struct tag parsing.

    `json:"name,omitempty" typescript:"string,notnull"`

parse_struct_tag() splits the raw tag into key -> Tag(name, options);
interpret_field_tag() reduces the json / typescript keys to the
FieldDirective the struct renderer consumes.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Dict, Tuple

from apitypings.errors import MappingError

# key:"value" pairs; keys are non-empty runs without space, quote or colon
_PAIR_RE = re.compile(r'([^\s:"]+):"((?:[^"\\]|\\.)*)"')


@dataclass(frozen=True)
class Tag:
    key: str
    name: str
    options: Tuple[str, ...] = ()

    def has_option(self, option: str) -> bool:
        return option in self.options


@dataclass(frozen=True)
class FieldDirective:
    name: str = ""            # external (json) name, "" keeps the Go name
    skip: bool = False
    omit_empty: bool = False
    override: str = ""        # TypeScript expression replacing the mapped one
    not_null: bool = False


def _unquote(raw: str, tag: str) -> str:
    try:
        return json.loads(f'"{raw}"')
    except json.JSONDecodeError as e:
        raise MappingError(f"invalid struct tag {tag!r}: bad quoted value {raw!r}") from e


def parse_struct_tag(tag: str) -> Dict[str, Tag]:
    tags: Dict[str, Tag] = {}
    pos = 0
    while pos < len(tag):
        if tag[pos] == " ":
            pos += 1
            continue
        m = _PAIR_RE.match(tag, pos)
        if not m:
            raise MappingError(f"invalid struct tag {tag!r} at offset {pos}")
        key, value = m.group(1), _unquote(m.group(2), tag)
        name, *options = value.split(",")
        # reflect.StructTag.Lookup returns the first match
        tags.setdefault(key, Tag(key=key, name=name, options=tuple(options)))
        pos = m.end()
    return tags


def interpret_field_tag(tag: str) -> FieldDirective:
    tags = parse_struct_tag(tag)
    name = ""
    skip = False
    omit_empty = False
    override = ""
    not_null = False

    json_tag = tags.get("json")
    if json_tag is not None:
        # `json:"-,"` names the field "-", only a bare dash drops it
        if json_tag.name == "-" and not json_tag.options:
            skip = True
        name = json_tag.name
        omit_empty = json_tag.has_option("omitempty")

    ts_tag = tags.get("typescript")
    if ts_tag is not None:
        if ts_tag.name == "-":
            skip = True
        elif ts_tag.name:
            override = ts_tag.name
        not_null = ts_tag.has_option("notnull")

    return FieldDirective(
        name=name,
        skip=skip,
        omit_empty=omit_empty,
        override=override,
        not_null=not_null,
    )
