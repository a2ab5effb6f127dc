#!/usr/bin/env python3
"""NYC Transit MCP Server — repository root entry point.

Usage:
    uv run server.py           # HTTP mode (default)
    uv run server.py --stdio   # stdio mode for desktop MCP hosts
"""
from __future__ import annotations

import logging
import sys

import uvicorn
from starlette.middleware.cors import CORSMiddleware

from transit_mcp.config import load_settings
from transit_mcp.mcp import create_mcp_app


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    mcp = create_mcp_app(settings)
    if "--stdio" in sys.argv:
        mcp.run(transport="stdio")
    else:
        # HTTP mode with CORS
        app = mcp.streamable_http_app()
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
        print(f"Transit MCP Server listening on http://{settings.host}:{settings.port}/mcp")
        uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
