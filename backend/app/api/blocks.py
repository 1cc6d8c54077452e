from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.app.api.deps import get_block_registry
from backend.app.models.block import BlockSpec
from backend.app.services.block_registry import BlockRegistry

router = APIRouter(prefix="/blocks", tags=["blocks"])


@router.get("", response_model=list[BlockSpec])
async def list_blocks(
    category: str | None = Query(default=None),
    registry: BlockRegistry = Depends(get_block_registry),
) -> list[BlockSpec]:
    return registry.list_blocks(category)


@router.get("/categories")
async def list_categories(registry: BlockRegistry = Depends(get_block_registry)) -> dict[str, int]:
    return registry.categories()


@router.get("/{kind}", response_model=BlockSpec)
async def get_block(kind: str, registry: BlockRegistry = Depends(get_block_registry)) -> BlockSpec:
    block = registry.get_block(kind)
    if not block:
        raise HTTPException(status_code=404, detail=f"Block kind '{kind}' not found")
    return block
