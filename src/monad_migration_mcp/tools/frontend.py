"""Frontend migration tools: web3 config, RPC call optimization, batch calls."""

from mcp.types import Tool, TextContent

from . import ToolModule
from .helpers import text_arg, choice_arg, list_arg, comment_out, bullets, code_block, text_report
from ..config import MonadConfig
from ..errors import OperationNotFound

FRAMEWORKS = ("react", "vue", "angular", "vanilla")
LIBRARIES = ("viem", "ethers", "web3js")

# Where the generated config usually lives for each framework
FRAMEWORK_HINTS = {
    "react": "Expose MONAD_CONFIG through a context provider (e.g. a WagmiConfig/Web3 provider) at the app root",
    "vue": "Register MONAD_CONFIG as a plugin or provide/inject value in main.ts",
    "angular": "Provide MONAD_CONFIG through an InjectionToken in the root module",
    "vanilla": "Import MONAD_CONFIG directly where the provider is created",
}

PROVIDER_SETUP = {
    "ethers": "const provider = new ethers.JsonRpcProvider(MONAD_CONFIG.rpcUrl);",
    "viem": "const client = createPublicClient({ transport: http(MONAD_CONFIG.rpcUrl) });",
    "web3js": "const web3 = new Web3(MONAD_CONFIG.rpcUrl);",
}

BATCH_PROCESSOR_METHODS = """
  async batchProcessing(items: any[]) {
    // Process items in batches for optimal performance
    const batches = this.createBatches(items, this.batchSize);

    const results = await Promise.all(
      batches.map(batch => this.processBatch(batch))
    );

    return results.flat();
  }

  private createBatches<T>(items: T[], batchSize: number): T[][] {
    const batches: T[][] = [];
    for (let i = 0; i < items.length; i += batchSize) {
      batches.push(items.slice(i, i + batchSize));
    }
    return batches;
  }

  private async processBatch(batch: any[]) {
    // Concurrent processing within batch
    return Promise.all(batch.map(item => this.processItem(item)));
  }

  private async processItem(item: any) {
    return item;
  }
}"""


def render_migrate_web3_config(config: MonadConfig, arguments: dict) -> str:
    op = "migrate_web3_config"
    original = text_arg(arguments, op, "originalConfig")
    framework = choice_arg(arguments, op, "framework", FRAMEWORKS)
    net, limits = config.network, config.limits
    static = config.static_rpc_responses
    gas_price_hex = static["eth_gasPrice"]
    chain_id_hex = static["eth_chainId"]
    priority_fee_hex = static["eth_maxPriorityFeePerGas"]

    migrated = f"""
// === MONAD MIGRATION: Web3 Configuration ===
// Original EVM configuration (commented out)
{comment_out(original)}

// Monad-optimized configuration
const MONAD_CONFIG = {{
  chainId: {net.chain_id},
  name: "{net.name}",
  currency: "{net.currency}",
  rpcUrl: "{net.rpc_url}",
  explorerUrl: "{net.explorer_url}",

  // Monad-specific optimizations
  staticValues: {{
    gasPrice: "{gas_price_hex}",
    chainId: "{chain_id_hex}",
    maxPriorityFeePerGas: "{priority_fee_hex}"
  }},

  // Performance settings
  batchSize: {limits.recommended_batch_size},
  maxBlockRange: {limits.max_block_range_logs}
}};

// Monad-optimized provider setup
const provider = new ethers.JsonRpcProvider(MONAD_CONFIG.rpcUrl);

// Use static values instead of RPC calls
const getGasPrice = () => BigInt(MONAD_CONFIG.staticValues.gasPrice);
const getChainId = () => MONAD_CONFIG.chainId;
const getMaxPriorityFee = () => BigInt(MONAD_CONFIG.staticValues.maxPriorityFeePerGas);"""

    return f"""## Frontend Configuration Migration

### Monad-Optimized Web3 Configuration ({framework}):

{code_block(migrated)}

### Key Optimizations:
- Uses hardcoded gas values to avoid RPC calls
- Configured for {net.name} (chain ID {net.chain_id})
- Includes batch processing settings (batch size {limits.recommended_batch_size}, max log range {limits.max_block_range_logs} blocks)
- Optimized for Monad's performance characteristics

### Framework Integration:
- {FRAMEWORK_HINTS[framework]}"""


def render_optimize_rpc_calls(config: MonadConfig, arguments: dict) -> str:
    op = "optimize_rpc_calls"
    code = text_arg(arguments, op, "code")
    library = choice_arg(arguments, op, "library", LIBRARIES)
    multicall3 = config.contracts.get("Multicall3")

    optimized = f"""
// === MONAD MIGRATION: RPC Call Optimization ===

// Original: Multiple sequential RPC calls (slow)
{comment_out(code)}

// {library} client
{PROVIDER_SETUP[library]}

// Monad optimized: Batch RPC calls
async function batchedRPCCalls() {{
  // Use Promise.all for concurrent calls
  const [balance, nonce, gasPrice] = await Promise.all([
    provider.getBalance(address),
    provider.getTransactionCount(address),
    getGasPrice() // Use hardcoded value
  ]);

  return {{ balance, nonce, gasPrice }};
}}

// Monad optimized: Multicall for contract reads
async function multicallContractReads() {{
  const multicall = new ethers.Contract(
    "{multicall3}",
    MULTICALL_ABI,
    provider
  );

  const calls = [
    {{ target: tokenAddress, callData: tokenContract.interface.encodeFunctionData("balanceOf", [address]) }},
    {{ target: tokenAddress, callData: tokenContract.interface.encodeFunctionData("allowance", [owner, spender]) }}
  ];

  const results = await multicall.aggregate(calls);
  return results;
}}"""

    applied = [
        "Concurrent RPC calls using Promise.all",
        "Multicall for contract reads",
        f"Hardcoded gas values ({config.gas.default_gas_price} wei)",
        "Batch processing patterns",
    ]
    return f"""## RPC Call Optimization

### Optimized Code:
{code_block(optimized)}

### Optimizations Applied:
{bullets(applied)}"""


def render_implement_batch_calls(config: MonadConfig, arguments: dict) -> str:
    op = "implement_batch_calls"
    functions = list_arg(arguments, op, "functions")
    batch_size = config.limits.recommended_batch_size

    processor = f"""
// === MONAD MIGRATION: Batch Call Implementation ===

class MonadBatchProcessor {{
  private batchSize = {batch_size};
{BATCH_PROCESSOR_METHODS}"""

    batched = bullets([f"`{fn}`" for fn in functions]) if functions else "- (no functions given)"
    return f"""## Batch Call Implementation

### Functions Batched Together:
{batched}

### Batch Processing Class:
{code_block(processor)}

### Benefits:
- Optimal batch size for Monad ({batch_size} items, max {config.limits.max_batch_size})
- Concurrent processing
- Configurable batch parameters
- Error handling for batch failures"""


RENDERERS = {
    "migrate_web3_config": render_migrate_web3_config,
    "optimize_rpc_calls": render_optimize_rpc_calls,
    "implement_batch_calls": render_implement_batch_calls,
}


def register(config: MonadConfig) -> ToolModule:
    tools = [
        Tool(
            name="migrate_web3_config",
            description="Migrate web3 configuration to Monad network",
            inputSchema={
                "type": "object",
                "properties": {
                    "originalConfig": {"type": "string", "description": "Original web3 configuration code"},
                    "framework": {
                        "type": "string",
                        "enum": list(FRAMEWORKS),
                        "description": "Frontend framework being used",
                    },
                },
                "required": ["originalConfig", "framework"],
            },
        ),
        Tool(
            name="optimize_rpc_calls",
            description="Optimize RPC calls for Monad performance",
            inputSchema={
                "type": "object",
                "properties": {
                    "code": {"type": "string", "description": "Frontend code with RPC calls"},
                    "library": {
                        "type": "string",
                        "enum": list(LIBRARIES),
                        "description": "Web3 library being used",
                    },
                },
                "required": ["code", "library"],
            },
        ),
        Tool(
            name="implement_batch_calls",
            description="Implement batch calling patterns for Monad",
            inputSchema={
                "type": "object",
                "properties": {
                    "functions": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Functions to batch together",
                    },
                },
                "required": ["functions"],
            },
        ),
    ]

    async def handler(name: str, arguments: dict) -> list[TextContent]:
        render = RENDERERS.get(name)
        if render is None:
            raise OperationNotFound(name)
        return text_report(render(config, arguments))

    return ToolModule(name="frontend", tools=tools, handler=handler)
