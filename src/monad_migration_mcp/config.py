"""Monad network configuration and server settings.

``MonadConfig`` holds every constant the report templates and analyzers
interpolate: network identity, gas pricing, canonical contract addresses,
performance thresholds and indexer identifiers. It is built once at startup
and handed to each tool module; nothing reads it through a global.

``ServerSettings`` holds the few knobs that do come from the environment
(log level, network environment, HTTP bind address).
"""

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger("monad-migration-mcp")

GWEI = 10 ** 9


@dataclass(frozen=True)
class NetworkInfo:
    chain_id: int
    name: str
    currency: str
    rpc_url: str
    explorer_url: str
    faucet_url: Optional[str] = None
    testnet_hub: Optional[str] = None


@dataclass(frozen=True)
class GasConfig:
    # Base and priority fees are fixed by the network, not market driven
    base_fee_per_gas: int = 50 * GWEI
    max_priority_fee_per_gas: int = 2 * GWEI
    default_gas_price: int = 52 * GWEI
    standard_transfer_gas: int = 21000

    @property
    def max_fee_per_gas(self) -> int:
        return self.base_fee_per_gas + self.max_priority_fee_per_gas


@dataclass(frozen=True)
class OptimizationConstants:
    max_block_range_logs: int = 100
    recommended_block_range: int = 10
    max_contract_size: int = 128 * 1024
    block_time_ms: int = 500
    recommended_batch_size: int = 50
    max_batch_size: int = 100


@dataclass(frozen=True)
class IndexerConfigs:
    allium_chain: str = "monad_testnet"
    allium_explorer_chain: str = "Monad Testnet"
    envio_network_id: int = 10143
    goldsky_network: str = "monad-testnet"
    goldsky_mirror_dataset: str = "monad_testnet"
    quicknode_network: str = "monad-testnet"
    thegraph_network: str = "monad-testnet"
    thirdweb_chain_id: int = 10143


TESTNET = NetworkInfo(
    chain_id=10143,
    name="Monad Testnet",
    currency="MON",
    rpc_url="https://testnet-rpc.monad.xyz",
    explorer_url="https://testnet.monadexplorer.com",
    faucet_url="https://faucet.monad.xyz",
    testnet_hub="https://testnet.monad.xyz",
)

# Insertion order matters: name_for_address returns the earliest entry.
CANONICAL_CONTRACTS = {
    # Deployment utilities
    "CreateX": "0xba5Ed099633D3B313e4D5F7bdc1305d3c28ba5Ed",
    "FoundryDeterministicDeployer": "0x4e59b44847b379578588920ca78fbf26c0b4956c",
    "SafeSingletonFactory": "0x914d7Fec6aaC8cd542e72Bca78B30650d45643d7",
    # Account abstraction
    "EntryPointV06": "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789",
    "EntryPointV07": "0x0000000071727De22E5E9d8BAf0edAc6f37da032",
    # Utilities
    "Multicall3": "0xcA11bde05977b3631167028862bE2a173976CA11",
    "Permit2": "0x000000000022d473030f116ddee9f6b43ac78ba3",
    # DEX infrastructure
    "UniswapV2Factory": "0x733e88f248b742db6c14c0b1713af5ad7fdd59d0",
    "UniswapV3Factory": "0x961235a9020b05c44df1026d956d1f4d78014276",
    "UniswapV2Router02": "0xfb8e1c3b833f9e67a71c859a132cf783b645e436",
    "UniswapUniversalRouter": "0x3ae6d8a282d67893e17aa70ebffb33ee5aa65893",
    # Wrapped tokens
    "WrappedMonad": "0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701",
}

TEST_TOKENS = {
    "USDC": "0xf817257fed379853cDe0fa4F97AB987181B1E5Ea",
    "USDT": "0x88b8E2161DEDC77EF4ab7585569D2415a1C1055D",
    "WBTC": "0xcf5a6076cfa32686c0Df13aBaDa2b40dec133F1d",
    "WETH": "0xB5a30b0FDc42e3E9760Cb8449Fb37",
    "WSOL": "0x5387C85A4965769f6B0Df430638a1388493486F1",
}


def _frozen(mapping: dict) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class MonadConfig:
    """Read-only table of Monad constants used by every tool module."""
    network: NetworkInfo = TESTNET
    gas: GasConfig = field(default_factory=GasConfig)
    limits: OptimizationConstants = field(default_factory=OptimizationConstants)
    indexers: IndexerConfigs = field(default_factory=IndexerConfigs)
    contracts: Mapping[str, str] = field(default_factory=lambda: _frozen(CANONICAL_CONTRACTS))
    test_tokens: Mapping[str, str] = field(default_factory=lambda: _frozen(TEST_TOKENS))

    @property
    def static_rpc_responses(self) -> dict[str, str]:
        """Values that never change on Monad and can be served without an RPC round trip."""
        return {
            "eth_chainId": hex(self.network.chain_id),
            "eth_gasPrice": hex(self.gas.default_gas_price),
            "eth_maxPriorityFeePerGas": hex(self.gas.max_priority_fee_per_gas),
        }

    def is_known_address(self, address: str) -> bool:
        """Check if an address is one of the canonical contracts (case-insensitive)."""
        return self.name_for_address(address) is not None

    def name_for_address(self, address: str) -> Optional[str]:
        """Get the canonical contract name for an address.

        If two names share an address, the one inserted first wins.
        """
        wanted = address.lower()
        for name, contract_address in self.contracts.items():
            if contract_address.lower() == wanted:
                return name
        return None

    def optimized_tx_params(self, gas_limit: Optional[int] = None) -> dict:
        """EIP-1559 transaction parameters using the fixed Monad fees."""
        return {
            "gasLimit": gas_limit or self.gas.standard_transfer_gas,
            "gasPrice": self.gas.default_gas_price,
            "maxFeePerGas": self.gas.max_fee_per_gas,
            "maxPriorityFeePerGas": self.gas.max_priority_fee_per_gas,
            "type": 2,
        }

    def network_for(self, environment: str = "testnet") -> NetworkInfo:
        if environment == "testnet":
            return self.network
        if environment == "mainnet":
            raise ConfigurationError("Mainnet configuration not yet available")
        raise ConfigurationError(f"Unknown Monad environment: {environment}")


# =============================================================================
# Environment-driven server settings
# =============================================================================

# Names both logging and uvicorn accept
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


@dataclass(frozen=True)
class ServerSettings:
    environment: str = "testnet"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


def load_settings(env_file: Optional[str] = None) -> ServerSettings:
    """Read server settings from the environment, after loading an optional .env file.

    Raises:
        ConfigurationError: If PORT is not an integer or the log level is unknown.
    """
    from dotenv import find_dotenv, load_dotenv

    if load_dotenv(env_file or find_dotenv(usecwd=True)):
        logger.info(f"Loaded settings from {env_file or '.env'}")

    environment = os.environ.get("MONAD_ENVIRONMENT", "testnet").strip().lower()
    raw_level = os.environ.get("MONAD_MCP_LOG_LEVEL", "INFO").strip().upper()
    log_level = LOG_LEVEL_ALIASES.get(raw_level, raw_level)
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"Unknown log level: {raw_level}")

    raw_port = os.environ.get("PORT", "8000")
    try:
        port = int(raw_port)
    except ValueError as e:
        raise ConfigurationError(f"PORT must be an integer, got {raw_port!r}") from e

    return ServerSettings(
        environment=environment,
        log_level=log_level,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=port,
    )


def build_config(settings: Optional[ServerSettings] = None) -> MonadConfig:
    """Create the Monad configuration for the requested environment.

    Raises:
        ConfigurationError: If the environment has no configuration (mainnet).
    """
    config = MonadConfig()
    environment = settings.environment if settings else "testnet"
    # Only testnet exists today; this rejects anything else up front
    config.network_for(environment)
    logger.info(f"Monad config ready: {config.network.name} (chain id {config.network.chain_id})")
    return config
