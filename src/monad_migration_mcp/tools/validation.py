"""Validation tools: migration validation, gas optimization check, migration checklist."""

import logging

from mcp.types import Tool, TextContent

from . import ToolModule
from .helpers import text_arg, choice_arg, bullets, code_block, text_report
from ..analyzer import Analysis, Importance, analyze, migration_checks, gas_checks
from ..config import MonadConfig
from ..errors import OperationNotFound

logger = logging.getLogger("monad-migration-mcp")

PROJECT_TYPES = ("defi", "nft", "dao", "gaming", "general")
COMPLEXITIES = ("simple", "moderate", "complex")

PASS, FAIL = "✅", "❌"

PROJECT_ADVICE = {
    "defi": "Consider implementing batch swap functions and optimized liquidity operations",
    "nft": "Leverage Monad's larger contract size for rich metadata and batch minting",
    "dao": "Implement batch voting and concurrent proposal processing",
}


def _base_checklist(config: MonadConfig) -> list[str]:
    return [
        f"Update network configuration to Monad testnet (Chain ID: {config.network.chain_id})",
        "Replace dynamic gas pricing with hardcoded values",
        "Set explicit gas limits for all transactions",
        "Test basic contract deployment and interaction",
        f"Verify contract functionality on {config.network.name}",
    ]


MODERATE_ITEMS = [
    "Implement multicall patterns for batch operations",
    "Add concurrent transaction processing",
    "Set up event indexing with supported providers",
    "Optimize contract reads with batch patterns",
    "Implement proper nonce management for multiple transactions",
    "Test gas usage patterns and optimize accordingly",
]


def _complex_items(config: MonadConfig) -> list[str]:
    size_kb = config.limits.max_contract_size // 1024
    block_s = config.limits.block_time_ms / 1000
    return [
        f"Leverage Monad's {size_kb}kb contract size limit for consolidation",
        "Implement custom batching contracts for complex operations",
        "Set up comprehensive monitoring and alerting",
        "Optimize for Monad's high throughput capabilities",
        "Implement cross-chain bridge integrations if needed",
        "Set up automated testing for concurrent scenarios",
        "Implement advanced indexing with multiple providers",
        f"Optimize frontend for Monad's fast block times ({block_s}s)",
        "Set up proper error handling for batch operations",
        "Implement fallback strategies for RPC failures",
    ]


def checklist_items(config: MonadConfig, complexity: str) -> list[str]:
    """Core migration tasks; each complexity level extends the previous one."""
    items = _base_checklist(config)
    if complexity in ("moderate", "complex"):
        items += MODERATE_ITEMS
    if complexity == "complex":
        items += _complex_items(config)
    return items


def _result_lines(analysis: Analysis, with_importance: bool = False) -> str:
    lines = []
    for r in analysis.results:
        mark = PASS if r.passed else FAIL
        if with_importance:
            lines.append(f"{mark} **{r.name}** ({r.importance.value} priority)")
        else:
            lines.append(f"{mark} **{r.name}**: {r.description}")
    return "\n".join(lines)


def render_validate_monad_migration(config: MonadConfig, arguments: dict) -> str:
    op = "validate_monad_migration"
    project_type = choice_arg(arguments, op, "projectType", PROJECT_TYPES)
    code_base = text_arg(arguments, op, "codeBase")

    analysis = analyze(code_base, migration_checks(config))
    logger.debug(f"{op}: {analysis.passed}/{analysis.total} checks passed")

    recommendations = [r.recommendation for r in analysis.failed if r.recommendation]
    if recommendations:
        recommended = bullets(recommendations)
    else:
        recommended = "🎉 All checks passed! Your migration follows Monad best practices."
    advice = PROJECT_ADVICE.get(project_type, "")

    return f"""## Monad Migration Validation Report

### Migration Score: {analysis.score}% ({analysis.passed}/{analysis.total} checks passed)

### Validation Results:
{_result_lines(analysis)}

### Project Type: {project_type}
{advice}

### Recommendations:
{recommended}

### Next Steps:
1. Deploy to {config.network.name} for testing
2. Monitor gas usage patterns
3. Set up indexing for event data
4. Test concurrent transaction scenarios"""


def render_check_gas_optimization(config: MonadConfig, arguments: dict) -> str:
    code = text_arg(arguments, "check_gas_optimization", "code")
    gas = config.gas

    analysis = analyze(code, gas_checks(config))
    high = analysis.by_importance(Importance.HIGH)
    high_passed = sum(1 for r in high if r.passed)

    example = f"""// {PASS} Optimized for Monad
const tx = {{
  gasLimit: {gas.standard_transfer_gas}n, // Explicit limit
  gasPrice: {gas.default_gas_price}n, // Hardcoded
  maxFeePerGas: {gas.base_fee_per_gas}n + {gas.max_priority_fee_per_gas}n
}};

// {FAIL} Avoid on Monad
const gasLimit = await contract.estimateGas.transfer(to, amount);
const gasPrice = await provider.getGasPrice();"""

    return f"""## Gas Optimization Analysis

### Gas Optimization Score: {analysis.score}% ({analysis.passed}/{analysis.total} checks passed)

### High Priority Optimizations: {high_passed}/{len(high)} ✓

### Detailed Results:
{_result_lines(analysis, with_importance=True)}

### Monad-Specific Gas Recommendations:

#### {PASS} **DO:**
- Use hardcoded gas price: `{gas.default_gas_price}` wei ({gas.default_gas_price // 10 ** 9} gwei)
- Set explicit gas limits for predictable costs
- Implement batch operations to reduce transaction count
- Use EIP-1559 transaction format

#### {FAIL} **DON'T:**
- Call `eth_estimateGas` - use known gas costs instead
- Use dynamic gas pricing - values are hardcoded on Monad
- Ignore gas_limit charging - Monad charges gas_limit not gas_used

### Code Examples:

{code_block(example)}"""


def render_generate_migration_checklist(config: MonadConfig, arguments: dict) -> str:
    complexity = choice_arg(arguments, "generate_migration_checklist", "complexity", COMPLEXITIES)
    core = bullets(checklist_items(config, complexity), marker="- [ ] ")
    net, gas, limits = config.network, config.gas, config.limits
    multicall3 = config.contracts.get("Multicall3")

    return f"""## Monad Migration Checklist ({complexity.upper()} complexity)

### Pre-Migration
- [ ] Audit existing codebase for Monad compatibility
- [ ] Identify gas-heavy operations for optimization
- [ ] Plan indexing strategy for event data
- [ ] Set up Monad testnet development environment

### Core Migration Tasks
{core}

### Monad-Specific Optimizations
- [ ] Replace `eth_chainId` calls with hardcoded value: {net.chain_id}
- [ ] Replace `eth_gasPrice` calls with hardcoded value: {gas.default_gas_price} wei
- [ ] Use Multicall3 at: `{multicall3}`
- [ ] Implement proper gas_limit vs gas_used cost calculations
- [ ] Optimize for {limits.block_time_ms}ms block times

### Testing & Validation
- [ ] Test all contract functions on Monad testnet
- [ ] Verify gas cost predictions vs actual usage
- [ ] Test concurrent transaction scenarios
- [ ] Validate indexer integration and event querying
- [ ] Performance test with high transaction volumes
- [ ] Test error handling and recovery scenarios

### Deployment & Monitoring
- [ ] Deploy to Monad testnet with proper gas settings
- [ ] Set up transaction monitoring and alerting
- [ ] Configure indexer for production data access
- [ ] Implement health checks and uptime monitoring
- [ ] Document migration changes and new patterns

### Resources
- **Testnet RPC**: {net.rpc_url}
- **Explorer**: {net.explorer_url}
- **Faucet**: {net.faucet_url}
- **Max Contract Size**: {limits.max_contract_size // 1024}kb
- **Recommended Batch Size**: {limits.recommended_batch_size}

### Success Criteria
- All transactions execute with predictable gas costs
- Batch operations reduce overall transaction count by >50%
- Event indexing provides real-time data access
- Application performs better than original EVM implementation"""


RENDERERS = {
    "validate_monad_migration": render_validate_monad_migration,
    "check_gas_optimization": render_check_gas_optimization,
    "generate_migration_checklist": render_generate_migration_checklist,
}


def register(config: MonadConfig) -> ToolModule:
    tools = [
        Tool(
            name="validate_monad_migration",
            description="Validate a complete Monad migration for best practices",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectType": {
                        "type": "string",
                        "enum": list(PROJECT_TYPES),
                        "description": "Type of project being migrated",
                    },
                    "codeBase": {"type": "string", "description": "Code to validate"},
                },
                "required": ["projectType", "codeBase"],
            },
        ),
        Tool(
            name="check_gas_optimization",
            description="Check for proper gas optimization patterns",
            inputSchema={
                "type": "object",
                "properties": {
                    "code": {"type": "string", "description": "Code to check for gas optimizations"},
                },
                "required": ["code"],
            },
        ),
        Tool(
            name="generate_migration_checklist",
            description="Generate a comprehensive migration checklist",
            inputSchema={
                "type": "object",
                "properties": {
                    "complexity": {
                        "type": "string",
                        "enum": list(COMPLEXITIES),
                        "description": "Complexity level of the migration",
                    },
                },
                "required": ["complexity"],
            },
        ),
    ]

    async def handler(name: str, arguments: dict) -> list[TextContent]:
        render = RENDERERS.get(name)
        if render is None:
            raise OperationNotFound(name)
        return text_report(render(config, arguments))

    return ToolModule(name="validation", tools=tools, handler=handler)
