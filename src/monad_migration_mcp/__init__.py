"""
Monad Migration MCP Server

Tools for migrating EVM applications to the Monad blockchain.
"""

from .server import main, run, create_server

__version__ = "1.0.0"
__all__ = ["main", "run", "create_server"]
