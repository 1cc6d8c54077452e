from __future__ import annotations

from dataclasses import dataclass

from backend.app.core.config import Settings
from backend.app.services.block_registry import BlockRegistry
from backend.app.services.codegen_service import CodegenService


@dataclass(slots=True)
class AppContainer:
    settings: Settings
    block_registry: BlockRegistry
    codegen_service: CodegenService
