# backend/typings-gen/main.py
from fastapi import FastAPI, HTTPException  # type: ignore
from pydantic import BaseModel  # type: ignore
from typing import List, Optional

from apitypings.errors import TypingsError
from apitypings.generator import generate
from apitypings.symbols.loader import PackageSpec, require_single, to_package

app = FastAPI(title="API Typings Generator (Go package -> TypeScript)")


class TypingsRequest(BaseModel):
    packages: List[PackageSpec]
    banner: Optional[str] = None


class TypingsResponse(BaseModel):
    typescript: str
    types: List[str]


class CheckRequest(BaseModel):
    packages: List[PackageSpec]
    current: str
    banner: Optional[str] = None


class CheckResponse(BaseModel):
    stale: bool


def _generate(packages: List[PackageSpec], banner: Optional[str]):
    try:
        package = require_single([to_package(p) for p in packages])
        return generate(package, banner=banner)
    except TypingsError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/typings", response_model=TypingsResponse)
def typings(req: TypingsRequest):
    result = _generate(req.packages, req.banner)
    return TypingsResponse(typescript=result.to_string(), types=result.names())


@app.post("/typings/check", response_model=CheckResponse)
def typings_check(req: CheckRequest):
    result = _generate(req.packages, req.banner)
    # a trailing newline written by the CLI does not make a file stale
    return CheckResponse(stale=result.to_string() != req.current.rstrip())
