from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field, validator

from tapebf.compiler import Operation, compile_source, count_operations, operation_to_dict
from tapebf.errors import InterpreterError, ParseError
from tapebf.executor import execute, to_input_bytes

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 5_000_000


class CompileRequest(BaseModel):
    source: str


class CompileResponse(BaseModel):
    operations: List[dict]
    operation_count: int


class RunRequest(BaseModel):
    source: str
    input: str = ""
    max_steps: Optional[int] = Field(default=None, ge=1)

    @validator("input")
    def validate_input(cls, value: str) -> str:
        to_input_bytes(value)
        return value


class RunResponse(BaseModel):
    output: str
    operation_count: int


def _compile_or_422(source: str) -> List[Operation]:
    try:
        return compile_source(source)
    except ParseError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc


def create_app(*, max_steps: int = DEFAULT_MAX_STEPS) -> FastAPI:
    app = FastAPI(title="tapebf API", version="0.1.0")

    @app.post("/api/compile", response_model=CompileResponse)
    def compile_program(payload: CompileRequest) -> CompileResponse:
        operations = _compile_or_422(payload.source)
        return CompileResponse(
            operations=[operation_to_dict(op) for op in operations],
            operation_count=count_operations(operations),
        )

    @app.post("/api/run", response_model=RunResponse)
    def run_program(payload: RunRequest) -> RunResponse:
        operations = _compile_or_422(payload.source)
        budget = payload.max_steps if payload.max_steps is not None else max_steps
        try:
            output = execute(operations, payload.input, max_steps=budget)
        except InterpreterError as exc:
            logger.debug("run failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"kind": type(exc).__name__, "message": str(exc)},
            ) from exc
        return RunResponse(output=output, operation_count=count_operations(operations))

    return app


__all__ = ["create_app"]
