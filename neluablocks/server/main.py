"""
FastAPI server exposing the Nelua generator over HTTP.

Start with:
    python -m neluablocks.server.main [--port 3001]

Or via uvicorn directly:
    uvicorn neluablocks.server.main:app --port 3001 --reload
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from neluablocks.generator import registered_types
from neluablocks.server.routes.generate_routes import router

logger = logging.getLogger(__name__)

# The block editor is served from a different origin during development.
ALLOWED_ORIGINS = ["*"]

app = FastAPI(title="Nelua Blocks API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "block_types": len(registered_types())}


def _serve() -> None:
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="Serve the Nelua block generator.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3001)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    logger.info(f"Serving {len(registered_types())} block types on {args.host}:{args.port}")
    uvicorn.run("neluablocks.server.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    _serve()
