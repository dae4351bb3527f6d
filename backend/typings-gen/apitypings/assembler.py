from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from apitypings import config


@dataclass
class TypescriptTypes:
    """
    All code blocks of one run, keyed by declaration name.

    The three buckets stay separate until to_string(), which sorts each by
    name so identical input always yields byte-identical output.
    """

    types: Dict[str, str] = field(default_factory=dict)
    enums: Dict[str, str] = field(default_factory=dict)
    generics: Dict[str, str] = field(default_factory=dict)
    banner: str = config.GENERATED_BANNER

    def blocks(self) -> Iterator[str]:
        for bucket in (self.types, self.enums, self.generics):
            for name in sorted(bucket):
                yield bucket[name]

    def names(self) -> List[str]:
        return [*sorted(self.types), *sorted(self.enums), *sorted(self.generics)]

    def to_string(self) -> str:
        parts = [self.banner, "\n\n"]
        for block in self.blocks():
            parts.append(block)
            parts.append("\n")
        return "".join(parts).rstrip()

    def __str__(self) -> str:
        return self.to_string()
