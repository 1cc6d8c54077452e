from __future__ import annotations

import argparse
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api import blocks, programs
from backend.app.core.config import Settings, get_settings
from backend.app.core.container import AppContainer
from backend.app.core.logging import configure_logging
from backend.app.services.block_registry import BlockRegistry
from backend.app.services.codegen_service import CodegenService


def _build_container(settings: Settings) -> AppContainer:
    block_registry = BlockRegistry()
    codegen_service = CodegenService(registry=block_registry, indent_unit=settings.indent_unit)

    return AppContainer(
        settings=settings,
        block_registry=block_registry,
        codegen_service=codegen_service,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.debug)

    app.state.container = _build_container(settings)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(blocks.router, prefix=settings.api_prefix)
    app.include_router(programs.router, prefix=settings.api_prefix)

    @app.get("/api/health")
    async def health() -> dict[str, str | int]:
        return {
            "status": "ok",
            "version": settings.app_version,
            "block_kinds": len(app.state.container.block_registry.kinds()),
        }

    return app


app = create_app()


def run() -> None:
    parser = argparse.ArgumentParser(description="Run the BlockScore code generation API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="info")
    parser.add_argument("--reload", action=argparse.BooleanOptionalAction, default=False)
    parser.add_argument("--access-log", action=argparse.BooleanOptionalAction, default=True)
    parser.add_argument("--debug", action=argparse.BooleanOptionalAction, default=None)
    args = parser.parse_args()

    if args.debug is True:
        os.environ["BLOCKSCORE_DEBUG"] = "1"
    elif args.debug is False:
        os.environ["BLOCKSCORE_DEBUG"] = "0"

    get_settings.cache_clear()
    globals()["app"] = create_app()

    uvicorn.run(
        "backend.app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        access_log=args.access_log,
    )


if __name__ == "__main__":
    run()
