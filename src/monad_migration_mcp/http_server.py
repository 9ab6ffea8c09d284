"""
Monad Migration MCP HTTP Server

Streamable HTTP transport for remote access to the Monad Migration MCP server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from mcp.server.streamable_http_manager import StreamableHTTPSessionManager

from .config import ServerSettings, build_config, load_settings
from .registry import Dispatcher, Operation
from .server import SERVER_NAME, configure_logging, create_server

logger = logging.getLogger("monad-migration-mcp")


def _check_registry_health(dispatcher: Dispatcher) -> dict:
    """Report the registry the server is serving; every operation must be routed."""
    tools = len(dispatcher.list_operations())
    result = {
        "status": "ok" if tools == len(Operation) else "error",
        "modules": len(dispatcher.modules),
        "tools": tools,
    }
    if result["status"] == "error":
        result["error"] = f"{len(Operation) - tools} operations have no module"
    return result


def create_app(settings: Optional[ServerSettings] = None) -> Starlette:
    """Create the Starlette ASGI application."""
    config = build_config(settings)
    dispatcher = Dispatcher.from_config(config)
    server = create_server(config, dispatcher)
    session_manager = StreamableHTTPSessionManager(app=server, stateless=True)

    @asynccontextmanager
    async def lifespan(app):
        """Run the session manager for the lifetime of the app."""
        logger.info("Monad Migration MCP HTTP Server starting...")
        async with session_manager.run():
            yield
        logger.info("Monad Migration MCP HTTP Server shut down.")

    async def health(request: Request) -> JSONResponse:
        """Health endpoint.

        Returns:
            - status: "healthy" or "degraded"
            - server: server name
            - network: configured Monad network and chain id
            - checks: detailed status of the tool registry
        """
        checks = {"registry": _check_registry_health(dispatcher)}
        overall_status = "healthy" if all(c["status"] == "ok" for c in checks.values()) else "degraded"

        return JSONResponse({
            "status": overall_status,
            "server": SERVER_NAME,
            "network": {"name": config.network.name, "chain_id": config.network.chain_id},
            "checks": checks,
        })

    routes = [
        Route("/health", health, methods=["GET"]),
        Mount("/mcp", app=session_manager.handle_request),
    ]

    return Starlette(routes=routes, lifespan=lifespan)


def main():
    """Main entry point for HTTP server."""
    settings = load_settings()
    configure_logging(settings)

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
