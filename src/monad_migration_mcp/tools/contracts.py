"""Contract migration tools: deployment migration, size, gas optimizations, deploy script."""

import logging
import re

from mcp.types import Tool, TextContent

from . import ToolModule
from .helpers import (
    text_arg, choice_arg, list_arg, number_arg, flag_arg,
    format_number, bullets, code_block, text_report,
)
from ..config import MonadConfig
from ..errors import OperationNotFound

logger = logging.getLogger("monad-migration-mcp")

CONTRACT_TYPES = ("token", "nft", "defi", "dao", "general")
OPTIMIZATION_LEVELS = ("basic", "advanced", "aggressive")

# Deployment gas limit per contract type (general uses standardDeployment only)
DEPLOYMENT_GAS = {
    "token": ("tokenDeployment", 2000000),
    "nft": ("nftDeployment", 3000000),
    "defi": ("defiDeployment", 5000000),
    "dao": ("daoDeployment", 4000000),
}

ETHEREUM_SIZE_LIMIT_KB = 24.5

CONCURRENT_DEPLOYMENT = """
// === MONAD MIGRATION: Concurrent Deployment Optimization ===
// Deploy multiple contracts concurrently for better performance

async function deployContractsConcurrently(contracts) {
  // Original: Sequential deployment (slow)
  // for (const contract of contracts) {
  //   await deployContract(contract);
  // }

  // Monad optimized: Concurrent deployment with nonce management
  const deploymentPromises = contracts.map(async (contract, index) => {
    const nonce = await provider.getTransactionCount(deployer.address) + index;
    return deployContract(contract, { nonce });
  });

  return Promise.all(deploymentPromises);
}"""

SIZE_OPTIMIZED_CONTRACT = """
// === MONAD MIGRATION: Contract Size Optimization ===
// Monad allows up to 128kb contracts (vs 24.5kb on Ethereum)
// This enables more complex contracts without splitting

// Original approach might have used proxy patterns to stay under 24.5kb limit
// contract SplitContract {
//   // Limited functionality due to size constraints
// }

// Monad optimized: Single large contract
contract MonadOptimizedContract {
  // === MONAD ADVANTAGE: Larger contract size limit ===
  // Can include more functionality in single contract
  // Reduces complexity and gas costs from proxy calls

  // Combined functionality that previously required multiple contracts
  mapping(address => UserData) public users;
  mapping(uint256 => ComplexData) public complexData;

  struct UserData {
    uint256 balance;
    uint256[] transactions;
    mapping(address => bool) permissions;
  }

  struct ComplexData {
    string metadata;
    bytes data;
    uint256[] relatedIds;
  }

  // === MONAD OPTIMIZATION: Batch operations ===
  // Larger contracts can include more batch operations
  function batchUserOperations(
    address[] calldata users,
    uint256[] calldata amounts,
    bytes[] calldata data
  ) external {
    // Batch logic that would exceed 24.5kb on Ethereum
    for (uint i = 0; i < users.length; i++) {
      processUserOperation(users[i], amounts[i], data[i]);
    }
  }

  function processUserOperation(address user, uint256 amount, bytes calldata data) internal {
    // Complex processing logic
  }

  // === MONAD OPTIMIZATION: Embedded libraries ===
  // Can embed utility functions instead of external libraries
  function complexMath(uint256 a, uint256 b) internal pure returns (uint256) {
    return a * b + (a ** 2) / b;
  }

  // === MONAD OPTIMIZATION: Rich event logging ===
  // Larger contracts can afford more detailed events
  event DetailedTransaction(
    address indexed user,
    uint256 indexed amount,
    string metadata,
    bytes data,
    uint256[] relatedIds
  );
}"""

GAS_OPTIMIZED_CONTRACT_BODY = """
  // === MONAD GAS OPTIMIZATION 3: Storage Optimization ===
  // Pack data efficiently for better performance

  struct PackedData {
    uint128 amount;     // Instead of uint256 where possible
    uint64 timestamp;   // Sufficient for timestamps
    uint32 blockNumber; // Sufficient for block numbers
    uint32 nonce;       // Sufficient for nonces
  }

  mapping(address => PackedData) public packedUserData;

  // === MONAD GAS OPTIMIZATION 4: Event Optimization ===
  // Use indexed events for better querying performance

  event OptimizedTransfer(
    address indexed from,
    address indexed to,
    uint256 amount,
    uint256 indexed blockNumber
  );

  // === MONAD GAS OPTIMIZATION 5: View Function Optimization ===
  // Combine multiple reads into single function

  function getUserInfo(address user) external view returns (
    uint256 balance,
    uint256 timestamp,
    uint256 blockNumber,
    uint256 nonce
  ) {
    PackedData memory data = packedUserData[user];
    return (
      uint256(data.amount),
      uint256(data.timestamp),
      uint256(data.blockNumber),
      uint256(data.nonce)
    );
  }

  // === MONAD GAS OPTIMIZATION 6: Multicall Support ===
  // Enable batch calls for better UX

  function multicall(bytes[] calldata data) external returns (bytes[] memory results) {
    results = new bytes[](data.length);
    for (uint i = 0; i < data.length; i++) {
      (bool success, bytes memory result) = address(this).call(data[i]);
      require(success, "Multicall failed");
      results[i] = result;
    }
  }

  // Internal functions with gas tracking
  function _transfer(address from, address to, uint256 amount) internal {
    // Track gas usage for predictable costs
  }
}"""

CREATE_X_ABI = """
// CreateX ABI (minimal)
const CREATE_X_ABI = [
  "function deployCreate2(bytes32 salt, bytes memory bytecode) external returns (address)",
  "function computeCreate2Address(bytes32 salt, bytes32 bytecodeHash, address deployer) external view returns (address)"
];
"""

DEPLOY_USAGE = """# Set environment variables
export PRIVATE_KEY="your-private-key"

# Deploy single contract
npm run deploy

# Or deploy multiple contracts
npm run deploy:batch"""

DEPLOYMENT_FOOTER = """
// Export deployment functions
export { deployContract, batchDeploy, MONAD_DEPLOYMENT_CONFIG };

// Run deployment if called directly
if (require.main === module) {
  deployContract()
    .then(() => process.exit(0))
    .catch((error) => {
      console.error(error);
      process.exit(1);
    });
}"""


def _network_block(config: MonadConfig, original_code: str) -> str:
    net, gas = config.network, config.gas
    original_chain = ""
    if "chainId" in original_code:
        match = re.search(r"chainId.*?[,;]", original_code)
        original_chain = "// Original chain configuration (commented out)\n"
        original_chain += f"// {match.group(0) if match else ''}\n"
    return f"""
// === MONAD MIGRATION: Network Configuration ===
// Original code used standard EVM configuration
// Monad-specific configuration with optimized gas settings
{original_chain}
// Monad Testnet Configuration
const MONAD_CONFIG = {{
  chainId: {net.chain_id},
  name: "{net.name}",
  rpcUrl: "{net.rpc_url}",
  // Gas configuration - Monad charges gas_limit not gas_used
  gasPrice: {gas.default_gas_price}, // {gas.default_gas_price // 10 ** 9} gwei
  baseFeePerGas: {gas.base_fee_per_gas}, // {gas.base_fee_per_gas // 10 ** 9} gwei (hardcoded)
  maxPriorityFeePerGas: {gas.max_priority_fee_per_gas}, // {gas.max_priority_fee_per_gas // 10 ** 9} gwei (hardcoded)
}};"""


def _gas_limits_block(contract_type: str) -> str:
    lines = []
    if contract_type in DEPLOYMENT_GAS:
        key, limit = DEPLOYMENT_GAS[contract_type]
        lines.append(f"  {key}: {limit},")
    lines.append("  standardDeployment: 2000000,")
    limits = "\n".join(lines)
    return f"""
// === MONAD MIGRATION: Gas Optimization ===
// Monad charges gas_limit instead of gas_used for DOS prevention
// Set explicit gas limits for predictable costs

const MONAD_GAS_LIMITS = {{
  // Standard deployment gas limits for different contract types
{limits}
  // Contract interaction limits
  simpleCall: 100000,
  complexCall: 500000,
}};"""


def render_migrate_contract_deployment(config: MonadConfig, arguments: dict) -> str:
    op = "migrate_contract_deployment"
    original_code = text_arg(arguments, op, "originalCode")
    contract_type = choice_arg(arguments, op, "contractType", CONTRACT_TYPES)
    level = choice_arg(arguments, op, "optimizationLevel", OPTIMIZATION_LEVELS, default="basic")
    create_x = config.contracts.get("CreateX")

    optimized = "\n\n".join([
        _network_block(config, original_code),
        _gas_limits_block(contract_type),
        CONCURRENT_DEPLOYMENT,
        original_code,
    ])
    changes = [
        "Added Monad network configuration with hardcoded gas values",
        "Added explicit gas limits to prevent unexpected costs",
        "Added concurrent deployment pattern for better performance",
        "Monad charges gas_limit instead of gas_used - important for cost prediction",
    ]

    return f"""## Contract Deployment Migration to Monad

**Contract Type:** {contract_type} | **Optimization Level:** {level}

### Key Changes Made:
{bullets(changes)}

### Optimized Code:

{code_block(optimized)}

### Migration Notes:
1. **Gas Charging**: Monad charges gas_limit instead of gas_used
2. **Network Configuration**: Updated to use {config.network.name} settings (chain ID {config.network.chain_id})
3. **Concurrent Deployment**: Enabled for better performance
4. **Hardcoded Values**: Using static gas values instead of RPC calls

### Next Steps:
1. Test deployment on {config.network.name}
2. Monitor gas usage patterns
3. Consider using CreateX (`{create_x}`) for deterministic deployments
4. Set up proper nonce management for production"""


def render_optimize_contract_size(config: MonadConfig, arguments: dict) -> str:
    op = "optimize_contract_size"
    text_arg(arguments, op, "contractCode")
    max_size = config.limits.max_contract_size
    target_size = number_arg(arguments, op, "targetSize", default=max_size)
    limit_kb = format_number(max_size / 1024)

    return f"""## Contract Size Optimization for Monad

### Monad Advantage: {limit_kb}kb Contract Limit

Monad allows contracts up to **{limit_kb}kb** ({max_size} bytes) compared to Ethereum's **{ETHEREUM_SIZE_LIMIT_KB}kb** limit. This enables:

- **Single Large Contracts**: Reduce proxy complexity
- **Rich Data Structures**: More complex state variables
- **Batch Operations**: Include more batch processing logic
- **Embedded Libraries**: Reduce external dependencies
- **Detailed Events**: More comprehensive logging

### Optimized Contract Code:

{code_block(SIZE_OPTIMIZED_CONTRACT, 'solidity')}

### Size Optimization Strategies:

1. **Consolidate Related Contracts**: Combine proxy + implementation
2. **Embed Common Libraries**: Reduce external calls
3. **Rich Batch Operations**: Process multiple items in single call
4. **Detailed State Management**: Use complex data structures
5. **Comprehensive Events**: Enhanced debugging and indexing

### Benefits on Monad:
- **Reduced Gas Costs**: Fewer inter-contract calls
- **Simplified Architecture**: Less proxy complexity
- **Better Performance**: More operations per transaction
- **Enhanced Functionality**: Richer feature sets

### Target Size: {format_number(target_size)} bytes ({target_size / 1024:.1f}kb)"""


def render_add_monad_gas_optimizations(config: MonadConfig, arguments: dict) -> str:
    op = "add_monad_gas_optimizations"
    text_arg(arguments, op, "contractCode")
    functions = list_arg(arguments, op, "functions", default=[])
    transfer_gas = config.gas.standard_transfer_gas

    contract = f"""
// === MONAD MIGRATION: Gas Optimizations ===

pragma solidity ^0.8.19;

contract MonadOptimizedContract {{
  // === MONAD GAS OPTIMIZATION 1: Explicit Gas Limits ===
  // Monad charges gas_limit not gas_used, so set explicit limits

  modifier gasOptimized(uint256 gasLimit) {{
    require(gasleft() >= gasLimit, "Insufficient gas");
    _;
  }}

  // === MONAD GAS OPTIMIZATION 2: Batch Operations ===
  // Combine multiple operations to reduce transaction overhead

  function batchTransfer(
    address[] calldata recipients,
    uint256[] calldata amounts
  ) external gasOptimized({transfer_gas} * recipients.length) {{
    for (uint i = 0; i < recipients.length; i++) {{
      // Each transfer costs exactly {transfer_gas:,} gas
      _transfer(msg.sender, recipients[i], amounts[i]);
    }}
  }}
{GAS_OPTIMIZED_CONTRACT_BODY}

// === MONAD GAS CALCULATION HELPER ===
library MonadGasCalculator {{
  uint256 constant TRANSFER_GAS = {transfer_gas};
  uint256 constant SSTORE_GAS = 20000;
  uint256 constant SLOAD_GAS = 800;
  uint256 constant CALL_GAS = 700;

  function calculateBatchTransferGas(uint256 transfers) internal pure returns (uint256) {{
    return TRANSFER_GAS * transfers;
  }}

  function calculateStorageGas(uint256 writes, uint256 reads) internal pure returns (uint256) {{
    return (SSTORE_GAS * writes) + (SLOAD_GAS * reads);
  }}
}}"""

    targeted = ""
    if functions:
        targeted = "\n### Functions To Optimize:\n"
        targeted += bullets([f"`{fn}`: wrap with `gasOptimized(...)` and set an explicit gas limit" for fn in functions])
        targeted += "\n"

    return f"""## Monad Gas Optimizations

### Key Optimization Strategies:

1. **Explicit Gas Limits**: Set predictable gas limits since Monad charges gas_limit
2. **Batch Operations**: Combine multiple operations for efficiency
3. **Storage Packing**: Optimize data structures for better performance
4. **Event Optimization**: Use indexed events for better querying
5. **View Function Batching**: Combine multiple reads
6. **Multicall Support**: Enable batch calls for better UX
{targeted}
### Optimized Contract Code:

{code_block(contract, 'solidity')}

### Gas Optimization Benefits:

- **Predictable Costs**: Know exact gas costs upfront
- **Better Performance**: Optimized for Monad's execution model
- **Reduced Transactions**: Batch operations reduce overhead
- **Efficient Storage**: Packed data structures
- **Enhanced UX**: Multicall support for complex operations

### Important Monad Differences:

1. **Gas Charging**: Monad charges gas_limit, not gas_used
2. **Batch Friendly**: Larger blocks support more batch operations
3. **Storage Efficiency**: Optimized state management
4. **Event Indexing**: Better support for complex events

### Recommended Gas Limits:
- Simple transfer: {transfer_gas:,} gas
- Complex call: 100,000 gas
- Batch operations: 50,000 gas per item
- Contract deployment: 2,000,000+ gas"""


def _deploy_body(contract_name: str, constructor_args: list[str], use_create_x: bool) -> str:
    if use_create_x:
        return f"""
  // === MONAD OPTIMIZATION: CreateX Deployment (Deterministic) ===
  const createXContract = new ethers.Contract(
    MONAD_DEPLOYMENT_CONFIG.createX,
    CREATE_X_ABI,
    signer
  );

  // Generate deterministic salt
  const salt = ethers.keccak256(ethers.toUtf8Bytes("{contract_name}"));

  console.log("Deploying {contract_name} using CreateX...");
  const deployTx = await createXContract.deployCreate2(
    salt,
    ContractFactory.bytecode,
    {{
      gasLimit: MONAD_DEPLOYMENT_CONFIG.gasLimit,
      gasPrice: MONAD_DEPLOYMENT_CONFIG.gasPrice,
    }}
  );

  await deployTx.wait();

  const deployedAddress = await createXContract.computeCreate2Address(
    salt,
    ethers.keccak256(ContractFactory.bytecode),
    signer.address
  );
"""
    args = "".join(f'"{arg}", ' for arg in constructor_args)
    return f"""
  // === MONAD OPTIMIZATION: Standard deployment with explicit gas ===
  console.log("Deploying {contract_name}...");
  const contract = await ContractFactory.deploy(
    {args}{{
      gasLimit: MONAD_DEPLOYMENT_CONFIG.gasLimit,
      gasPrice: MONAD_DEPLOYMENT_CONFIG.gasPrice,
      // Monad-specific: Set explicit gas to avoid estimation calls
    }}
  );

  console.log("Waiting for deployment...");
  await contract.waitForDeployment();

  const deployedAddress = await contract.getAddress();
"""


def render_generate_monad_deployment_script(config: MonadConfig, arguments: dict) -> str:
    op = "generate_monad_deployment_script"
    contract_name = text_arg(arguments, op, "contractName")
    constructor_args = list_arg(arguments, op, "constructorArgs", default=[])
    use_create_x = flag_arg(arguments, op, "useCreateX", default=False)

    create_x_line = f'\n  createX: "{config.contracts["CreateX"]}",' if use_create_x else ""
    method = "CreateX" if use_create_x else "Standard"
    multicall3 = config.contracts.get("Multicall3")
    quoted_args = ", ".join(f'"{arg}"' for arg in constructor_args)
    create_x_abi = CREATE_X_ABI if use_create_x else ""

    script = f"""
// === MONAD DEPLOYMENT SCRIPT ===
// Optimized deployment script for Monad blockchain

import {{ ethers }} from "ethers";

// Monad-specific deployment configuration
const MONAD_DEPLOYMENT_CONFIG = {{
  // Use hardcoded gas values for predictable costs
  gasPrice: {config.gas.default_gas_price},
  gasLimit: 2000000, // Explicit gas limit for deployment

  // Network configuration
  chainId: {config.network.chain_id},
  rpcUrl: "{config.network.rpc_url}",

  // Contract addresses{create_x_line}
  multicall3: "{multicall3}",
}};

async function deployContract() {{
  const provider = new ethers.JsonRpcProvider(MONAD_DEPLOYMENT_CONFIG.rpcUrl);
  const signer = new ethers.Wallet(process.env.PRIVATE_KEY!, provider);

  // Verify network
  const network = await provider.getNetwork();
  console.log(`Deploying to network: ${{network.name}} (chainId: ${{network.chainId}})`);

  if (network.chainId !== BigInt(MONAD_DEPLOYMENT_CONFIG.chainId)) {{
    throw new Error(`Wrong network! Expected ${{MONAD_DEPLOYMENT_CONFIG.chainId}}, got ${{network.chainId}}`);
  }}

  const ContractFactory = await ethers.getContractFactory("{contract_name}", signer);
{_deploy_body(contract_name, constructor_args, use_create_x)}
  console.log(`{contract_name} deployed to: ${{deployedAddress}}`);

  // === MONAD OPTIMIZATION: Verify deployment ===
  const deployedContract = new ethers.Contract(
    deployedAddress,
    ContractFactory.interface,
    signer
  );

  const code = await provider.getCode(deployedAddress);
  if (code === "0x") {{
    throw new Error("Contract deployment failed - no code at address");
  }}
  console.log("Contract deployed successfully!");

  // === MONAD OPTIMIZATION: Save deployment info ===
  const deploymentInfo = {{
    contractName: "{contract_name}",
    address: deployedAddress,
    chainId: MONAD_DEPLOYMENT_CONFIG.chainId,
    gasUsed: MONAD_DEPLOYMENT_CONFIG.gasLimit, // Monad charges gas_limit
    gasPrice: MONAD_DEPLOYMENT_CONFIG.gasPrice.toString(),
    deploymentTime: new Date().toISOString(),
    constructorArgs: [{quoted_args}],
    deploymentMethod: "{method}",
  }};

  console.log("Deployment info:", JSON.stringify(deploymentInfo, null, 2));

  return {{
    contract: deployedContract,
    address: deployedAddress,
    deploymentInfo
  }};
}}

// === MONAD OPTIMIZATION: Batch deployment function ===
async function batchDeploy(contracts: Array<{{name: string, args: string[]}}>) {{
  const provider = new ethers.JsonRpcProvider(MONAD_DEPLOYMENT_CONFIG.rpcUrl);
  const signer = new ethers.Wallet(process.env.PRIVATE_KEY!, provider);

  const initialNonce = await provider.getTransactionCount(signer.address);

  // Deploy contracts concurrently with managed nonces
  const deploymentPromises = contracts.map(async (contractInfo, index) => {{
    const factory = await ethers.getContractFactory(contractInfo.name, signer);

    return factory.deploy(...contractInfo.args, {{
      gasLimit: MONAD_DEPLOYMENT_CONFIG.gasLimit,
      gasPrice: MONAD_DEPLOYMENT_CONFIG.gasPrice,
      nonce: initialNonce + index,
    }});
  }});

  console.log(`Deploying ${{contracts.length}} contracts concurrently...`);
  const deployedContracts = await Promise.all(deploymentPromises);
  await Promise.all(deployedContracts.map(contract => contract.waitForDeployment()));

  return deployedContracts;
}}
{create_x_abi}{DEPLOYMENT_FOOTER}"""

    deterministic = "Uses CreateX for" if use_create_x else "Option to use CreateX for"

    return f"""## Monad Deployment Script

### Generated deployment script for {contract_name}:

{code_block(script)}

### Key Optimizations:

1. **Explicit Gas Configuration**: Uses hardcoded gas values to avoid RPC calls
2. **Network Verification**: Ensures deployment to the correct Monad network (chain ID {config.network.chain_id})
3. **Batch Deployment**: Supports concurrent deployment with nonce management
4. **Deterministic Deployment**: {deterministic} deterministic addresses
5. **Deployment Verification**: Checks for code at the deployed address

### Usage:

{code_block(DEPLOY_USAGE, 'bash')}

### Monad-Specific Features:

- **Gas Charging**: Configured for gas_limit charging model
- **Concurrent Deployment**: Optimized for Monad's performance
- **Network Configuration**: Pre-configured for {config.network.name}
- **Canonical Contracts**: Integrated with Monad's deployed contracts

### Next Steps:

1. Test deployment on {config.network.name}
2. Verify contract on {config.network.explorer_url}
3. Set up contract verification
4. Configure monitoring and alerts"""


RENDERERS = {
    "migrate_contract_deployment": render_migrate_contract_deployment,
    "optimize_contract_size": render_optimize_contract_size,
    "add_monad_gas_optimizations": render_add_monad_gas_optimizations,
    "generate_monad_deployment_script": render_generate_monad_deployment_script,
}


def register(config: MonadConfig) -> ToolModule:
    tools = [
        Tool(
            name="migrate_contract_deployment",
            description="Migrate contract deployment scripts to Monad with optimizations",
            inputSchema={
                "type": "object",
                "properties": {
                    "originalCode": {"type": "string", "description": "Original contract deployment code"},
                    "contractType": {
                        "type": "string",
                        "enum": list(CONTRACT_TYPES),
                        "description": "Type of contract being migrated",
                    },
                    "optimizationLevel": {
                        "type": "string",
                        "enum": list(OPTIMIZATION_LEVELS),
                        "default": "basic",
                        "description": "Level of Monad-specific optimizations to apply",
                    },
                },
                "required": ["originalCode", "contractType"],
            },
        ),
        Tool(
            name="optimize_contract_size",
            description="Optimize contract for Monad's larger size limits (128kb vs 24.5kb)",
            inputSchema={
                "type": "object",
                "properties": {
                    "contractCode": {"type": "string", "description": "Original contract code"},
                    "targetSize": {
                        "type": "number",
                        "description": "Target contract size in bytes",
                        "default": config.limits.max_contract_size,
                    },
                },
                "required": ["contractCode"],
            },
        ),
        Tool(
            name="add_monad_gas_optimizations",
            description="Add Monad-specific gas optimizations to contracts",
            inputSchema={
                "type": "object",
                "properties": {
                    "contractCode": {"type": "string", "description": "Original contract code"},
                    "functions": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Specific functions to optimize",
                    },
                },
                "required": ["contractCode"],
            },
        ),
        Tool(
            name="generate_monad_deployment_script",
            description="Generate Monad-optimized deployment script",
            inputSchema={
                "type": "object",
                "properties": {
                    "contractName": {"type": "string", "description": "Name of the contract"},
                    "constructorArgs": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Constructor arguments",
                    },
                    "useCreateX": {
                        "type": "boolean",
                        "default": False,
                        "description": "Use CreateX for deterministic deployment",
                    },
                },
                "required": ["contractName"],
            },
        ),
    ]

    async def handler(name: str, arguments: dict) -> list[TextContent]:
        render = RENDERERS.get(name)
        if render is None:
            raise OperationNotFound(name)
        return text_report(render(config, arguments))

    return ToolModule(name="contracts", tools=tools, handler=handler)
