"""
Tests for Monad Migration MCP Server
"""

import asyncio
import pytest
from pathlib import Path
import sys

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mcp.types import Tool

from monad_migration_mcp.config import MonadConfig
from monad_migration_mcp.errors import DuplicateOperation, OperationNotFound
from monad_migration_mcp.registry import Dispatcher, Operation, load_modules
from monad_migration_mcp.tools import ToolModule, contracts, validation

EXPECTED_REQUIRED = {
    "migrate_contract_deployment": ["originalCode", "contractType"],
    "optimize_contract_size": ["contractCode"],
    "add_monad_gas_optimizations": ["contractCode"],
    "generate_monad_deployment_script": ["contractName"],
    "migrate_web3_config": ["originalConfig", "framework"],
    "optimize_rpc_calls": ["code", "library"],
    "implement_batch_calls": ["functions"],
    "optimize_gas_estimation": ["code"],
    "implement_gas_limit_strategy": ["transactionTypes"],
    "implement_multicall_pattern": ["calls"],
    "optimize_concurrent_calls": ["originalCode"],
    "setup_envio_indexer": ["contractAddress", "events"],
    "configure_goldsky_subgraph": ["contractName", "events"],
    "implement_concurrent_transactions": ["transactionCount"],
    "optimize_nonce_management": ["walletType"],
    "validate_monad_migration": ["projectType", "codeBase"],
    "check_gas_optimization": ["code"],
    "generate_migration_checklist": ["complexity"],
}


@pytest.fixture
def dispatcher():
    return Dispatcher.from_config(MonadConfig())


class TestModuleRegistration:
    """Test that all tool modules register correctly."""

    def test_all_modules_load(self):
        """Test that every module registers with its tool count."""
        modules = load_modules(MonadConfig())
        counts = {m.name: len(m.tools) for m in modules}
        assert counts == {
            "contracts": 4,
            "frontend": 3,
            "gas": 2,
            "rpc": 2,
            "indexers": 2,
            "transactions": 2,
            "validation": 3,
        }

    def test_module_order(self):
        """Test modules are registered in listing order."""
        modules = load_modules(MonadConfig())
        assert [m.name for m in modules] == [
            "contracts", "frontend", "gas", "rpc", "indexers", "transactions", "validation",
        ]

    def test_tool_names(self):
        """Test a module exposes its tool names in declaration order."""
        module = validation.register(MonadConfig())
        assert module.tool_names == [
            "validate_monad_migration", "check_gas_optimization", "generate_migration_checklist",
        ]

    def test_module_rejects_foreign_operation(self):
        """Test a module handler refuses a name it does not own."""
        module = contracts.register(MonadConfig())
        with pytest.raises(OperationNotFound):
            asyncio.run(module.handler("check_gas_optimization", {"code": ""}))


class TestListOperations:
    """Test the flattened operation listing."""

    def test_eighteen_operations(self, dispatcher):
        """Test exactly 18 descriptors are listed."""
        assert len(dispatcher.list_operations()) == 18

    def test_names_and_required_fields(self, dispatcher):
        """Test every descriptor declares the expected required fields."""
        listed = {t.name: t.inputSchema["required"] for t in dispatcher.list_operations()}
        assert listed == EXPECTED_REQUIRED

    def test_listing_preserves_declaration_order(self, dispatcher):
        """Test descriptors follow module order, then declaration order."""
        names = [t.name for t in dispatcher.list_operations()]
        assert names == list(EXPECTED_REQUIRED)

    def test_listing_is_idempotent(self, dispatcher):
        """Test repeated listing returns identical results."""
        assert dispatcher.list_operations() == dispatcher.list_operations()

    def test_every_operation_is_enumerated(self, dispatcher):
        """Test the Operation enum and the listing agree."""
        names = {t.name for t in dispatcher.list_operations()}
        assert names == {op.value for op in Operation}


class TestDispatch:
    """Test routing of tool calls."""

    def test_unknown_operation(self, dispatcher):
        """Test an unknown name fails with OperationNotFound."""
        with pytest.raises(OperationNotFound) as exc:
            asyncio.run(dispatcher.invoke("nonexistent_tool", {}))
        assert exc.value.name == "nonexistent_tool"

    def test_invoke_by_enum(self, dispatcher):
        """Test invoking with an Operation member."""
        result = asyncio.run(dispatcher.invoke(
            Operation.GENERATE_MIGRATION_CHECKLIST, {"complexity": "simple"}
        ))
        assert result[0].type == "text"
        assert "10143" in result[0].text

    def test_owner_of(self, dispatcher):
        """Test lookup of the owning module."""
        assert dispatcher.owner_of("setup_envio_indexer").name == "indexers"
        assert dispatcher.owner_of(Operation.CHECK_GAS_OPTIMIZATION).name == "validation"

    def test_parse(self):
        """Test parsing wire names into operations."""
        assert Operation.parse("optimize_rpc_calls") is Operation.OPTIMIZE_RPC_CALLS
        with pytest.raises(OperationNotFound):
            Operation.parse("nonexistent_tool")

    def test_duplicate_registration_rejected(self):
        """Test two modules declaring the same tool name fail at build time."""
        config = MonadConfig()
        first = validation.register(config)
        second = validation.register(config)
        with pytest.raises(DuplicateOperation) as exc:
            Dispatcher([first, second])
        assert exc.value.name == "validate_monad_migration"

    def test_unknown_descriptor_rejected(self):
        """Test a module declaring a name outside the Operation set fails at build time."""
        async def handler(name, arguments):
            return []

        rogue = ToolModule(
            name="rogue",
            tools=[Tool(name="do_something_else", description="", inputSchema={"type": "object"})],
            handler=handler,
        )
        with pytest.raises(OperationNotFound):
            Dispatcher([rogue])


class TestCreateServer:
    """Test server factory function."""

    def test_create_server_returns_server(self):
        """Test create_server returns an MCP Server instance."""
        from monad_migration_mcp.server import create_server
        from mcp.server import Server

        server = create_server(MonadConfig())
        assert isinstance(server, Server)

    def test_create_server_default_config(self):
        """Test create_server builds the testnet config when none is given."""
        from monad_migration_mcp.server import create_server, SERVER_NAME

        server = create_server()
        assert server.name == SERVER_NAME

    def test_list_tools_handler_registered(self):
        """Test the server answers tools/list with all 18 descriptors."""
        from mcp.types import CallToolRequest, ListToolsRequest
        from monad_migration_mcp.server import create_server

        server = create_server(MonadConfig())
        assert CallToolRequest in server.request_handlers

        result = asyncio.run(server.request_handlers[ListToolsRequest](ListToolsRequest(method="tools/list")))
        assert [t.name for t in result.root.tools] == list(EXPECTED_REQUIRED)


class TestHttpServer:
    """Test the streamable HTTP app."""

    def test_health(self):
        """Test the health endpoint reports the registry and network."""
        from starlette.testclient import TestClient
        from monad_migration_mcp.http_server import create_app

        with TestClient(create_app()) as client:
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["network"]["chain_id"] == 10143
        assert body["checks"]["registry"]["tools"] == 18

    def test_health_reuses_server_registry(self, monkeypatch):
        """Test health polls report the registry built at startup without rebuilding it."""
        from starlette.testclient import TestClient
        from monad_migration_mcp.http_server import create_app

        app = create_app()

        def rebuild(cls, config):
            raise AssertionError("registry rebuilt during a health check")

        monkeypatch.setattr(Dispatcher, "from_config", classmethod(rebuild))

        with TestClient(app) as client:
            first = client.get("/health").json()
            second = client.get("/health").json()

        assert first == second
        assert first["checks"]["registry"] == {"status": "ok", "modules": 7, "tools": 18}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
