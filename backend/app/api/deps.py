from __future__ import annotations

from fastapi import Depends, Request

from backend.app.core.container import AppContainer
from backend.app.services.block_registry import BlockRegistry
from backend.app.services.codegen_service import CodegenService


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_block_registry(container: AppContainer = Depends(get_container)) -> BlockRegistry:
    return container.block_registry


def get_codegen_service(container: AppContainer = Depends(get_container)) -> CodegenService:
    return container.codegen_service
