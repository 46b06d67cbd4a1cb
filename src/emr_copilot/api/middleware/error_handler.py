"""Global exception handlers mapping domain exceptions to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from emr_copilot.exceptions import (
    CopilotError,
    GenerationError,
    InsertionNotFoundError,
    PreconditionError,
    ResponseRecoveryError,
)


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(PreconditionError)
    async def handle_precondition(request: Request, exc: PreconditionError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"error": str(exc), "type": "precondition_error"})

    @app.exception_handler(GenerationError)
    async def handle_generation(request: Request, exc: GenerationError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"error": str(exc), "type": "generation_error"})

    @app.exception_handler(ResponseRecoveryError)
    async def handle_recovery(request: Request, exc: ResponseRecoveryError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"error": str(exc), "type": "recovery_error"})

    @app.exception_handler(InsertionNotFoundError)
    async def handle_not_found(request: Request, exc: InsertionNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc), "type": "insertion_not_found"})

    @app.exception_handler(CopilotError)
    async def handle_generic(request: Request, exc: CopilotError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": str(exc), "type": "copilot_error"})
