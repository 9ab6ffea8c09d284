"""Operation registry and dispatch.

Every tool name the server answers to is a member of ``Operation``. Tool
modules are registered in a fixed order; ``Dispatcher`` maps each operation
to the module that declared it and routes calls there.
"""

import logging
import traceback
from enum import Enum
from typing import Any, Optional, Union

from mcp.types import Tool, TextContent

from .config import MonadConfig
from .errors import DuplicateOperation, OperationNotFound
from .tools import ToolModule
from .tools import contracts, frontend, gas, rpc, indexers, transactions, validation

logger = logging.getLogger("monad-migration-mcp")


class Operation(str, Enum):
    MIGRATE_CONTRACT_DEPLOYMENT = "migrate_contract_deployment"
    OPTIMIZE_CONTRACT_SIZE = "optimize_contract_size"
    ADD_MONAD_GAS_OPTIMIZATIONS = "add_monad_gas_optimizations"
    GENERATE_MONAD_DEPLOYMENT_SCRIPT = "generate_monad_deployment_script"
    MIGRATE_WEB3_CONFIG = "migrate_web3_config"
    OPTIMIZE_RPC_CALLS = "optimize_rpc_calls"
    IMPLEMENT_BATCH_CALLS = "implement_batch_calls"
    OPTIMIZE_GAS_ESTIMATION = "optimize_gas_estimation"
    IMPLEMENT_GAS_LIMIT_STRATEGY = "implement_gas_limit_strategy"
    IMPLEMENT_MULTICALL_PATTERN = "implement_multicall_pattern"
    OPTIMIZE_CONCURRENT_CALLS = "optimize_concurrent_calls"
    SETUP_ENVIO_INDEXER = "setup_envio_indexer"
    CONFIGURE_GOLDSKY_SUBGRAPH = "configure_goldsky_subgraph"
    IMPLEMENT_CONCURRENT_TRANSACTIONS = "implement_concurrent_transactions"
    OPTIMIZE_NONCE_MANAGEMENT = "optimize_nonce_management"
    VALIDATE_MONAD_MIGRATION = "validate_monad_migration"
    CHECK_GAS_OPTIMIZATION = "check_gas_optimization"
    GENERATE_MIGRATION_CHECKLIST = "generate_migration_checklist"

    @classmethod
    def parse(cls, name: Union[str, "Operation"]) -> "Operation":
        """Turn a wire-level tool name into an Operation.

        Raises:
            OperationNotFound: If the name is not one of the known operations.
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise OperationNotFound(str(name)) from None


# Registration order is the order tools are listed to clients
MODULES = (contracts, frontend, gas, rpc, indexers, transactions, validation)


def load_modules(config: MonadConfig) -> list[ToolModule]:
    """Register every tool module against the given config, in listing order."""
    loaded = []
    for module in MODULES:
        tool_module = module.register(config)
        loaded.append(tool_module)
        logger.info(f"{tool_module.name} module loaded ({len(tool_module.tools)} tools)")
    return loaded


class Dispatcher:
    """Routes tool calls to the module that declared them.

    Built once at startup; neither the module list nor the routing table
    changes afterwards.
    """

    def __init__(self, modules: list[ToolModule]):
        self._modules = list(modules)
        self._routes: dict[Operation, ToolModule] = {}
        for module in self._modules:
            for tool in module.tools:
                operation = Operation.parse(tool.name)
                owner = self._routes.get(operation)
                if owner is not None:
                    raise DuplicateOperation(tool.name, owner.name, module.name)
                self._routes[operation] = module
        self._tools = [tool for m in self._modules for tool in m.tools]
        logger.info(f"Total modules loaded: {len(self._modules)}, Total tools: {len(self._tools)}")

    @classmethod
    def from_config(cls, config: MonadConfig) -> "Dispatcher":
        return cls(load_modules(config))

    @property
    def modules(self) -> list[ToolModule]:
        return list(self._modules)

    def list_operations(self) -> list[Tool]:
        """All tool descriptors, module registration order then declaration order."""
        return list(self._tools)

    def owner_of(self, name: Union[str, Operation]) -> ToolModule:
        return self._routes[Operation.parse(name)]

    async def invoke(self, name: Union[str, Operation], arguments: Optional[dict[str, Any]] = None) -> list[TextContent]:
        """Run one tool call and return its report.

        Raises:
            OperationNotFound: If no module owns ``name``.
            TemplateRenderError: If an argument cannot be rendered.
        """
        logger.info(f"Tool call: {name}")
        try:
            operation = Operation.parse(name)
        except OperationNotFound:
            logger.warning(f"Unknown tool requested: {name}")
            raise

        module = self._routes.get(operation)
        if module is None:
            logger.warning(f"No module registered for tool: {operation.value}")
            raise OperationNotFound(operation.value)

        arguments = arguments if arguments is not None else {}
        try:
            result = await module.handler(operation.value, arguments)
        except Exception as e:
            logger.error(f"Tool '{operation.value}' failed with error: {e}")
            logger.error(f"Arguments: {arguments}")
            logger.error(f"Traceback:\n{traceback.format_exc()}")
            raise
        logger.info(f"Tool {operation.value} completed successfully")
        return result
