"""
Generation REST routes.

All routes are mounted under /api by main.py.
"""
from __future__ import annotations

import logging
import warnings
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from neluablocks.generator import GenerationError, GeneratorConfig, NeluaGenerator, registered_types
from neluablocks.serialization import SchemaError, json_to_workspace, validate

logger = logging.getLogger(__name__)

router = APIRouter()


# ── GET /block-types ──────────────────────────────────────────────────────────

@router.get("/block-types")
async def list_block_types() -> List[str]:
    return registered_types()


# ── POST /generate ────────────────────────────────────────────────────────────

class GenerateBody(BaseModel):
    graph: Dict[str, Any]
    options: Optional[Dict[str, Any]] = None
    strict: bool = False


class GenerateResponse(BaseModel):
    code: str
    helpers: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


@router.post("/generate", response_model=GenerateResponse)
async def generate(body: GenerateBody) -> GenerateResponse:
    try:
        config = GeneratorConfig.from_dict(body.options)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid options: {exc}")

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            validate(body.graph, strict=body.strict)
        except SchemaError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    workspace = json_to_workspace(body.graph)
    try:
        program = NeluaGenerator(config).generate(workspace)
    except GenerationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    logger.info(f"Generated '{workspace.name}' with {len(program.helpers)} helper(s)")
    return GenerateResponse(
        code=program.code,
        helpers=program.helpers,
        warnings=[str(w.message) for w in caught],
    )
