"""
Monad Migration MCP Server

A Model Context Protocol server with tools for migrating EVM applications to
Monad: contract deployment, frontend config, gas, RPC batching, indexers,
transactions, and migration validation.

Error Handling Strategy:
- All startup phases are wrapped in try/except with detailed logging
- Errors are logged to stderr, where MCP hosts collect server logs
- Tool execution errors are logged with their arguments, then re-raised so
  the MCP SDK returns them to the client as an error result
"""

import logging
import sys
import traceback
from typing import Any, Optional

# Configure logging FIRST, before any other imports that might log
# Log to stderr: stdout carries the stdio protocol stream
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("monad-migration-mcp")

# Wrap all imports in try/except to catch import errors during startup
try:
    from mcp.server import Server
    from mcp.server.stdio import stdio_server
    from mcp.types import Tool, TextContent
except ImportError as e:
    logger.critical(f"Failed to import MCP library: {e}")
    logger.critical("Make sure 'mcp' is installed: pip install mcp")
    sys.exit(1)

try:
    from .config import MonadConfig, ServerSettings, build_config, load_settings
    from .registry import Dispatcher
except ImportError as e:
    logger.critical(f"Failed to import local modules: {e}")
    logger.critical(f"Traceback:\n{traceback.format_exc()}")
    sys.exit(1)

SERVER_NAME = "monad-migration-server"


def create_server(config: Optional[MonadConfig] = None, dispatcher: Optional[Dispatcher] = None) -> Server:
    """Create and configure the MCP server with the given Monad configuration.

    Args:
        config: Monad configuration. Defaults to the testnet configuration if None.
        dispatcher: Prebuilt tool registry. Built from ``config`` if None.

    Returns:
        Configured MCP Server instance.

    Raises:
        RuntimeError: If the server instance or the tool registry cannot be built.
    """
    logger.info("Creating MCP server...")

    # Phase 1: Configuration
    if config is None:
        config = build_config()

    # Phase 2: Create server instance
    try:
        server = Server(SERVER_NAME)
        logger.info("Server instance created")
    except Exception as e:
        logger.critical(f"Failed to create Server instance: {e}")
        raise RuntimeError(f"Cannot create MCP Server: {e}") from e

    # Phase 3: Register tool modules. A broken module or duplicate tool name stops startup.
    try:
        if dispatcher is None:
            dispatcher = Dispatcher.from_config(config)
    except Exception as e:
        logger.critical(f"Failed to build tool registry: {e}")
        logger.critical(f"Traceback:\n{traceback.format_exc()}")
        raise RuntimeError(f"Cannot register tools: {e}") from e

    # Phase 4: Register server handlers
    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return list of available tools."""
        tools = dispatcher.list_operations()
        logger.debug(f"list_tools called, returning {len(tools)} tools")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Dispatch tool calls to the owning module."""
        return await dispatcher.invoke(name, arguments)

    logger.info("Server handlers registered")
    return server


def configure_logging(settings: ServerSettings) -> None:
    logging.getLogger().setLevel(settings.log_level)
    logger.setLevel(settings.log_level)


# =============================================================================
# Main Entry Point (stdio transport)
# =============================================================================

async def run(settings: Optional[ServerSettings] = None):
    """Run the MCP server via stdio transport.

    This is the main async entry point. All errors are caught and logged
    to ensure the server doesn't crash silently.
    """
    logger.info("=" * 60)
    logger.info("Starting Monad Migration MCP Server (stdio)...")
    logger.info("=" * 60)

    try:
        server = create_server(build_config(settings))
    except Exception as e:
        logger.critical(f"Failed to create server: {e}")
        logger.critical(f"Traceback:\n{traceback.format_exc()}")
        raise

    try:
        logger.info("Opening stdio transport...")
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Transport ready, starting server loop...")
            init_options = server.create_initialization_options()
            await server.run(read_stream, write_stream, init_options)
    except KeyboardInterrupt:
        logger.info("Server stopped by user (Ctrl+C)")
    except Exception as e:
        logger.critical(f"Server runtime error: {e}")
        logger.critical(f"Traceback:\n{traceback.format_exc()}")
        raise
    finally:
        logger.info("Server shutdown complete")


def main():
    """Main entry point with comprehensive error handling.

    Catches all exceptions during startup and runtime to ensure
    errors are logged to stderr for the MCP host to capture.
    """
    import asyncio

    try:
        if sys.version_info < (3, 10):
            logger.warning(f"Python {sys.version_info} detected. Python 3.10+ recommended.")

        logger.info(f"Python version: {sys.version}")
        logger.info(f"Platform: {sys.platform}")

        settings = load_settings()
        configure_logging(settings)
        asyncio.run(run(settings))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.critical(f"FATAL ERROR: {type(e).__name__}: {e}")
        logger.critical(f"Full traceback:\n{traceback.format_exc()}")
        sys.exit(1)


if __name__ == "__main__":
    main()
