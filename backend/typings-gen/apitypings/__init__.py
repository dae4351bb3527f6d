"""
Go package symbols -> TypeScript declarations.

Keeps a client's type definitions structurally in sync with the server's
exported data model without hand-maintained duplication.
"""

from apitypings.generator import TypescriptTypes, generate, generate_from_file

__all__ = ["TypescriptTypes", "generate", "generate_from_file"]
