"""Transaction tools: concurrent submission, local nonce management."""

from mcp.types import Tool, TextContent

from . import ToolModule
from .helpers import number_arg, choice_arg, format_number, code_block, text_report
from ..config import MonadConfig
from ..errors import OperationNotFound

WALLET_TYPES = ("ethers", "viem")

NONCE_MANAGER_METHODS = """
  // Get next available nonce for address
  async getNextNonce(address: string): Promise<number> {
    if (!this.localNonces.has(address)) {
      const chainNonce = await this.provider.getTransactionCount(address);
      this.localNonces.set(address, chainNonce);
    }

    const currentNonce = this.localNonces.get(address)!;

    // Find next available nonce not in pending
    let nextNonce = currentNonce;
    const pending = this.pendingTransactions.get(address) || new Set();

    while (pending.has(nextNonce)) {
      nextNonce++;
    }

    // Mark nonce as pending
    if (!this.pendingTransactions.has(address)) {
      this.pendingTransactions.set(address, new Set());
    }
    this.pendingTransactions.get(address)!.add(nextNonce);

    this.localNonces.set(address, Math.max(currentNonce, nextNonce + 1));

    return nextNonce;
  }

  // Mark transaction as confirmed
  confirmTransaction(address: string, nonce: number) {
    const pending = this.pendingTransactions.get(address);
    if (pending) {
      pending.delete(nonce);
    }
  }

  // Reset nonce cache (use when transactions fail)
  async resetNonceCache(address: string) {
    const chainNonce = await this.provider.getTransactionCount(address);
    this.localNonces.set(address, chainNonce);
    this.pendingTransactions.set(address, new Set());
  }
"""

ETHERS_HELPER = """
class MonadEthersHelper {
  private nonceManager: MonadNonceManager;
  private signer: ethers.Wallet;

  constructor(privateKey: string, provider: ethers.Provider) {
    this.signer = new ethers.Wallet(privateKey, provider);
    this.nonceManager = new MonadNonceManager(provider);
  }

  async sendTransaction(tx: any) {
    const txParams = await this.nonceManager.getTransactionParams(this.signer.address, tx);
    const sentTx = await this.signer.sendTransaction(txParams);

    // Confirm nonce when transaction is mined
    sentTx.wait().then(() => {
      this.nonceManager.confirmTransaction(this.signer.address, txParams.nonce);
    });

    return sentTx;
  }
}
"""


def _viem_helper(config: MonadConfig) -> str:
    return f"""
class MonadViemHelper {{
  private nonceManager: MonadNonceManager;
  private account: any;
  private client: any;

  constructor(account: any, client: any) {{
    this.account = account;
    this.client = client;
    this.nonceManager = new MonadNonceManager(client);
  }}

  async sendTransaction(tx: any) {{
    const nonce = await this.nonceManager.getNextNonce(this.account.address);

    const hash = await this.client.sendTransaction({{
      ...tx,
      account: this.account,
      nonce,
      gasPrice: {config.gas.default_gas_price}n,
      chain: {{ id: {config.network.chain_id} }}
    }});

    // Confirm nonce when transaction is mined
    this.client.waitForTransactionReceipt({{ hash }}).then(() => {{
      this.nonceManager.confirmTransaction(this.account.address, nonce);
    }});

    return hash;
  }}
}}
"""


def render_implement_concurrent_transactions(config: MonadConfig, arguments: dict) -> str:
    count = format_number(number_arg(arguments, "implement_concurrent_transactions", "transactionCount"))
    gas, net = config.gas, config.network

    code = f"""
// === MONAD MIGRATION: Concurrent Transaction Implementation ===

import {{ ethers }} from "ethers";

class MonadTransactionManager {{
  private provider: ethers.JsonRpcProvider;
  private signer: ethers.Wallet;

  constructor(privateKey: string) {{
    this.provider = new ethers.JsonRpcProvider("{net.rpc_url}");
    this.signer = new ethers.Wallet(privateKey, this.provider);
  }}

  // Submit multiple transactions concurrently
  async submitConcurrentTransactions(transactions: Array<{{
    to: string;
    value?: bigint;
    data?: string;
    gasLimit?: bigint;
  }}>) {{
    console.log(`Submitting ${{transactions.length}} transactions concurrently...`);

    const initialNonce = await this.provider.getTransactionCount(this.signer.address);

    // Prepare all transactions with managed nonces
    const txPromises = transactions.map(async (tx, index) => {{
      const txParams = {{
        to: tx.to,
        value: tx.value || 0n,
        data: tx.data || "0x",
        gasLimit: tx.gasLimit || {gas.standard_transfer_gas}n,
        gasPrice: {gas.default_gas_price}n,
        nonce: initialNonce + index,
        chainId: {net.chain_id}
      }};

      return this.signer.sendTransaction(txParams);
    }});

    const submittedTxs = await Promise.all(txPromises);
    console.log(`Submitted ${{submittedTxs.length}} transactions`);

    // Wait for all confirmations
    const receipts = await Promise.all(
      submittedTxs.map(tx => tx.wait())
    );

    console.log(`All ${{receipts.length}} transactions confirmed`);
    return receipts;
  }}

  // Batch similar transactions for gas efficiency
  async batchSimilarTransactions(
    recipients: string[],
    amounts: bigint[],
    gasLimitPerTx: bigint = {gas.standard_transfer_gas}n
  ) {{
    if (recipients.length !== amounts.length) {{
      throw new Error("Recipients and amounts arrays must have same length");
    }}

    const transactions = recipients.map((recipient, index) => ({{
      to: recipient,
      value: amounts[index],
      gasLimit: gasLimitPerTx
    }}));

    return this.submitConcurrentTransactions(transactions);
  }}

  // Example: {count} concurrent transfers
  async exampleConcurrentTransfers() {{
    const recipients = Array({count}).fill(null).map((_, i) =>
      `0x${{(i + 1).toString(16).padStart(40, '0')}}`
    );
    const amounts = Array({count}).fill(ethers.parseEther("0.01"));

    return this.batchSimilarTransactions(recipients, amounts);
  }}
}}

// Usage example
const txManager = new MonadTransactionManager(process.env.PRIVATE_KEY!);
const results = await txManager.exampleConcurrentTransfers();
console.log(`Processed ${{results.length}} transactions`);"""

    return f"""## Concurrent Transaction Implementation

### Transaction Manager ({count} transactions):
{code_block(code)}

### Key Features:
- Concurrent transaction submission
- Local nonce management
- Batch processing for similar transactions
- Optimized for Monad's performance ({config.limits.block_time_ms}ms blocks)
- Error handling and confirmation tracking"""


def render_optimize_nonce_management(config: MonadConfig, arguments: dict) -> str:
    wallet_type = choice_arg(arguments, "optimize_nonce_management", "walletType", WALLET_TYPES)
    helper = ETHERS_HELPER if wallet_type == "ethers" else _viem_helper(config)
    helper_class = "MonadEthersHelper" if wallet_type == "ethers" else "MonadViemHelper"

    code = f"""
// === MONAD MIGRATION: Advanced Nonce Management ===

class MonadNonceManager {{
  private localNonces: Map<string, number> = new Map();
  private provider: any;
  private pendingTransactions: Map<string, Set<number>> = new Map();

  constructor(provider: any) {{
    this.provider = provider;
  }}
{NONCE_MANAGER_METHODS}
  // Get transaction parameters with managed nonce
  async getTransactionParams(address: string, tx: any) {{
    const nonce = await this.getNextNonce(address);

    return {{
      ...tx,
      nonce,
      gasPrice: {config.gas.default_gas_price}n,
      chainId: {config.network.chain_id}
    }};
  }}
}}

// {wallet_type} Integration
{helper}
// Usage example
const helper = new {helper_class}(/* parameters */);
const txResults = await Promise.all([
  helper.sendTransaction({{ to: "0x...", value: "1000000000000000000" }}),
  helper.sendTransaction({{ to: "0x...", value: "2000000000000000000" }}),
  helper.sendTransaction({{ to: "0x...", value: "3000000000000000000" }})
]);"""

    return f"""## Advanced Nonce Management

### Nonce Manager Implementation:
{code_block(code)}

### Benefits:
- Local nonce tracking for concurrent transactions
- Automatic nonce gap prevention
- Transaction confirmation tracking
- Error recovery mechanisms
- Optimized for {wallet_type} library"""


RENDERERS = {
    "implement_concurrent_transactions": render_implement_concurrent_transactions,
    "optimize_nonce_management": render_optimize_nonce_management,
}


def register(config: MonadConfig) -> ToolModule:
    tools = [
        Tool(
            name="implement_concurrent_transactions",
            description="Implement concurrent transaction submission for Monad",
            inputSchema={
                "type": "object",
                "properties": {
                    "transactionCount": {"type": "number", "description": "Number of transactions to submit"},
                },
                "required": ["transactionCount"],
            },
        ),
        Tool(
            name="optimize_nonce_management",
            description="Implement local nonce management for multiple transactions",
            inputSchema={
                "type": "object",
                "properties": {
                    "walletType": {
                        "type": "string",
                        "enum": list(WALLET_TYPES),
                        "description": "Wallet library type",
                    },
                },
                "required": ["walletType"],
            },
        ),
    ]

    async def handler(name: str, arguments: dict) -> list[TextContent]:
        render = RENDERERS.get(name)
        if render is None:
            raise OperationNotFound(name)
        return text_report(render(config, arguments))

    return ToolModule(name="transactions", tools=tools, handler=handler)
