from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend.app.api.deps import get_codegen_service
from backend.app.models.program import CompileRequest, CompileResponse
from backend.app.services.codegen_errors import CompilationError
from backend.app.services.codegen_service import CodegenService

router = APIRouter(prefix="/programs", tags=["programs"])


@router.post("/compile", response_model=CompileResponse)
async def compile_program(
    request: CompileRequest,
    codegen: CodegenService = Depends(get_codegen_service),
) -> CompileResponse:
    try:
        generated = codegen.compile_program(request.graph, request.root_id)
    except CompilationError as error:
        raise HTTPException(
            status_code=422,
            detail={
                "diagnostics": error.diagnostics,
                "error": type(error).__name__,
                "node_id": error.node_id,
                "kind": error.kind,
            },
        ) from error
    return CompileResponse.model_validate(generated.model_dump())
