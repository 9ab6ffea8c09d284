"""RPC tools: multicall pattern, concurrent call optimization."""

from mcp.types import Tool, TextContent

from . import ToolModule
from .helpers import text_arg, list_arg, comment_out, code_block, text_report
from ..config import MonadConfig
from ..errors import OperationNotFound

MULTICALL3_ABI = """
// Multicall3 ABI (essential functions)
const MULTICALL3_ABI = [
  "function aggregate3(tuple(address target, bool allowFailure, bytes callData)[] calls) payable returns (tuple(bool success, bytes returnData)[] returnData)",
  "function aggregate3Value(tuple(address target, bool allowFailure, uint256 value, bytes callData)[] calls) payable returns (tuple(bool success, bytes returnData)[] returnData)"
];"""


def _multicall_entry(index: int, call: str) -> str:
    n = index + 1
    return f"""
  {{
    target: "0x...", // Contract {n} address
    callData: contract{n}.interface.encodeFunctionData("{call}"),
    allowFailure: false
  }}"""


def render_implement_multicall_pattern(config: MonadConfig, arguments: dict) -> str:
    calls = list_arg(arguments, "implement_multicall_pattern", "calls")
    multicall3 = config.contracts.get("Multicall3")
    entries = ",".join(_multicall_entry(i, call) for i, call in enumerate(calls))

    code = f"""
// === MONAD MIGRATION: Multicall Implementation ===

import {{ ethers }} from "ethers";

class MonadMulticallOptimizer {{
  private multicallAddress = "{multicall3}";
  private provider: ethers.Provider;

  constructor(provider: ethers.Provider) {{
    this.provider = provider;
  }}

  // Batch multiple contract reads into single call
  async batchContractReads(calls: Array<{{
    target: string;
    callData: string;
    allowFailure?: boolean;
  }}>) {{
    const multicall = new ethers.Contract(
      this.multicallAddress,
      MULTICALL3_ABI,
      this.provider
    );

    const results = await multicall.aggregate3(calls);

    return results.map((result, index) => ({{
      success: result.success,
      returnData: result.returnData,
      decoded: calls[index].allowFailure ? null : result.returnData
    }}));
  }}

  // Batch calls with value (for payable functions)
  async batchCallsWithValue(calls: Array<{{
    target: string;
    callData: string;
    value: bigint;
  }}>) {{
    const multicall = new ethers.Contract(
      this.multicallAddress,
      MULTICALL3_ABI,
      this.provider
    );

    const totalValue = calls.reduce((sum, call) => sum + call.value, 0n);

    return await multicall.aggregate3Value(calls, {{ value: totalValue }});
  }}
}}
{MULTICALL3_ABI}

// Usage example
const multicaller = new MonadMulticallOptimizer(provider);
const batchResults = await multicaller.batchContractReads([{entries}
]);"""

    return f"""## Multicall Pattern Implementation

### Multicall Optimizer ({len(calls)} calls in one request):
{code_block(code)}

### Benefits:
- Single RPC call for multiple contract reads
- Reduced latency and network overhead
- Built-in error handling
- Support for payable functions

### Multicall3 on {config.network.name}: `{multicall3}`"""


def render_optimize_concurrent_calls(config: MonadConfig, arguments: dict) -> str:
    original = text_arg(arguments, "optimize_concurrent_calls", "originalCode")

    optimized = f"""
// === MONAD MIGRATION: Concurrent RPC Optimization ===

// Original sequential calls (commented out)
{comment_out(original)}

// Monad optimized: Concurrent pattern
class MonadRPCOptimizer {{
  private batchSize = {config.limits.recommended_batch_size};

  // Batch RPC requests using Promise.all
  async batchRPCRequests<T>(
    requests: Array<() => Promise<T>>
  ): Promise<T[]> {{
    // Process requests in batches to avoid overwhelming the RPC
    const batches = this.createBatches(requests, this.batchSize);
    const results: T[] = [];

    for (const batch of batches) {{
      const batchResults = await Promise.all(
        batch.map(request => request())
      );
      results.push(...batchResults);
    }}

    return results;
  }}

  // Concurrent transaction submission with nonce management
  async submitConcurrentTransactions(transactions: any[]) {{
    const provider = new ethers.JsonRpcProvider("{config.network.rpc_url}");
    const signer = new ethers.Wallet(process.env.PRIVATE_KEY!, provider);

    const initialNonce = await provider.getTransactionCount(signer.address);

    // Submit all transactions concurrently with managed nonces
    const txPromises = transactions.map(async (tx, index) => {{
      return await signer.sendTransaction({{
        ...tx,
        nonce: initialNonce + index,
        gasPrice: {config.gas.default_gas_price}n
      }});
    }});

    return Promise.all(txPromises);
  }}

  private createBatches<T>(items: T[], batchSize: number): T[][] {{
    const batches: T[][] = [];
    for (let i = 0; i < items.length; i += batchSize) {{
      batches.push(items.slice(i, i + batchSize));
    }}
    return batches;
  }}
}}

// Usage examples
const optimizer = new MonadRPCOptimizer();

// Batch multiple balance checks
const balanceRequests = addresses.map(addr =>
  () => provider.getBalance(addr)
);
const balances = await optimizer.batchRPCRequests(balanceRequests);

// Submit multiple transactions concurrently
const transactions = [
  {{ to: "0x...", value: ethers.parseEther("0.1") }},
  {{ to: "0x...", value: ethers.parseEther("0.2") }}
];
const txHashes = await optimizer.submitConcurrentTransactions(transactions);"""

    return f"""## Concurrent RPC Call Optimization

### Optimized Implementation:
{code_block(optimized)}

### Key Optimizations:
- Concurrent request processing with Promise.all
- Batch size management for optimal performance
- Nonce management for concurrent transactions
- Configurable batch sizes for different scenarios
- Keep eth_getLogs queries within {config.limits.max_block_range_logs} blocks (recommended {config.limits.recommended_block_range})"""


RENDERERS = {
    "implement_multicall_pattern": render_implement_multicall_pattern,
    "optimize_concurrent_calls": render_optimize_concurrent_calls,
}


def register(config: MonadConfig) -> ToolModule:
    tools = [
        Tool(
            name="implement_multicall_pattern",
            description="Implement multicall patterns for batching RPC calls",
            inputSchema={
                "type": "object",
                "properties": {
                    "calls": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "List of contract calls to batch",
                    },
                },
                "required": ["calls"],
            },
        ),
        Tool(
            name="optimize_concurrent_calls",
            description="Optimize concurrent RPC call patterns",
            inputSchema={
                "type": "object",
                "properties": {
                    "originalCode": {"type": "string", "description": "Original sequential RPC call code"},
                },
                "required": ["originalCode"],
            },
        ),
    ]

    async def handler(name: str, arguments: dict) -> list[TextContent]:
        render = RENDERERS.get(name)
        if render is None:
            raise OperationNotFound(name)
        return text_report(render(config, arguments))

    return ToolModule(name="rpc", tools=tools, handler=handler)
