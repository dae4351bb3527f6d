from __future__ import annotations


class TypingsError(ValueError):
    """Base for every failure that aborts a generator run."""


class LoadError(TypingsError):
    """The symbol dump could not be read, validated or narrowed to one package."""


class ClassificationError(TypingsError):
    def __init__(self, name: str, shape: str) -> None:
        self.name = name
        self.shape = shape
        super().__init__(f"unsupported named type {name!r} ({shape})")


class MappingError(TypingsError):
    """A field or union term has no TypeScript equivalent."""
