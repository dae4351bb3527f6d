# backend/typings-gen/apitypings/config.py

from __future__ import annotations

import os
from typing import Dict, Tuple

from dotenv import load_dotenv  # type: ignore

load_dotenv()

GENERATED_BANNER = (
    (os.getenv("APITYPINGS_BANNER") or "").strip()
    or "// Code generated by 'apitypings'. DO NOT EDIT."
)
LOG_LEVEL = (os.getenv("APITYPINGS_LOG_LEVEL") or "INFO").strip().upper()

INDENT = "  "

# Scanned over every comment line of the package, e.g.
#   // @typescript-ignore: Foo, Bar
IGNORE_DIRECTIVE_PATTERN = r"@typescript-ignore[:]?(?P<ignored_types>.*)"

# Qualified Go name -> (TypeScript expression, optional)
KNOWN_EXTERNAL_TYPES: Dict[str, Tuple[str, bool]] = {
    "net/url.URL": ("string", False),
    "time.Time": ("string", False),
    "database/sql.NullTime": ("string", True),
    "github.com/google/uuid.NullUUID": ("string", True),
    "github.com/google/uuid.UUID": ("string", False),
}
