"""
Tests for Monad configuration and server settings
"""

import dataclasses
import pytest
from pathlib import Path
from types import MappingProxyType
import sys

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from monad_migration_mcp.config import (
    MonadConfig, ServerSettings, build_config, load_settings,
)
from monad_migration_mcp.errors import ConfigurationError

MULTICALL3 = "0xcA11bde05977b3631167028862bE2a173976CA11"


@pytest.fixture
def config():
    return MonadConfig()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with none of the server variables set."""
    for var in ("MONAD_ENVIRONMENT", "MONAD_MCP_LOG_LEVEL", "HOST", "PORT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestConstants:
    """Test the Monad testnet constants."""

    def test_network(self, config):
        assert config.network.chain_id == 10143
        assert config.network.name == "Monad Testnet"
        assert config.network.currency == "MON"
        assert config.network.rpc_url == "https://testnet-rpc.monad.xyz"

    def test_gas(self, config):
        """Test the fixed fee schedule adds up."""
        assert config.gas.default_gas_price == 52_000_000_000
        assert config.gas.base_fee_per_gas == 50_000_000_000
        assert config.gas.max_priority_fee_per_gas == 2_000_000_000
        assert config.gas.max_fee_per_gas == config.gas.default_gas_price
        assert config.gas.standard_transfer_gas == 21000

    def test_limits(self, config):
        assert config.limits.max_contract_size == 131072
        assert config.limits.max_block_range_logs == 100
        assert config.limits.recommended_batch_size == 50
        assert config.limits.block_time_ms == 500

    def test_contracts_order(self, config):
        names = list(config.contracts)
        assert len(names) == 12
        assert names[0] == "CreateX"
        assert config.contracts["Multicall3"] == MULTICALL3

    def test_indexers_and_tokens(self, config):
        assert config.indexers.envio_network_id == 10143
        assert config.indexers.thirdweb_chain_id == 10143
        assert config.indexers.goldsky_network == "monad-testnet"
        assert config.indexers.allium_chain == "monad_testnet"
        assert set(config.test_tokens) == {"USDC", "USDT", "WBTC", "WETH", "WSOL"}

    def test_config_is_read_only(self, config):
        """Test neither the dataclass nor its tables accept writes."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.network = None
        with pytest.raises(TypeError):
            config.contracts["Multicall3"] = "0x0"


class TestStaticRpcResponses:
    """Test values served without an RPC round trip."""

    def test_hex_values(self, config):
        static = config.static_rpc_responses
        assert static["eth_chainId"] == "0x279f"
        assert static["eth_gasPrice"] == "0xc1b710800"
        assert static["eth_maxPriorityFeePerGas"] == "0x77359400"

    def test_values_decode_to_config(self, config):
        static = config.static_rpc_responses
        assert int(static["eth_chainId"], 16) == config.network.chain_id
        assert int(static["eth_gasPrice"], 16) == config.gas.default_gas_price


class TestAddressLookup:
    """Test canonical contract lookups."""

    def test_known_address_any_case(self, config):
        assert config.is_known_address(MULTICALL3)
        assert config.is_known_address(MULTICALL3.lower())
        assert config.is_known_address(MULTICALL3.upper().replace("0X", "0x"))

    def test_name_for_address(self, config):
        assert config.name_for_address(MULTICALL3.lower()) == "Multicall3"
        assert config.name_for_address("0x0000000000000000000000000000000000000001") is None
        assert not config.is_known_address("0x0000000000000000000000000000000000000001")

    def test_shared_address_returns_first_inserted(self):
        """Test a duplicated address resolves to the earliest entry."""
        config = MonadConfig(contracts=MappingProxyType({"First": "0xabc", "Second": "0xABC"}))
        assert config.name_for_address("0xAbC") == "First"


class TestTransactionParams:
    """Test optimized EIP-1559 parameters."""

    def test_defaults(self, config):
        params = config.optimized_tx_params()
        assert params == {
            "gasLimit": 21000,
            "gasPrice": 52_000_000_000,
            "maxFeePerGas": 52_000_000_000,
            "maxPriorityFeePerGas": 2_000_000_000,
            "type": 2,
        }

    def test_custom_gas_limit(self, config):
        assert config.optimized_tx_params(gas_limit=65000)["gasLimit"] == 65000


class TestEnvironments:
    """Test network selection."""

    def test_testnet(self, config):
        assert config.network_for("testnet") is config.network

    def test_mainnet_not_available(self, config):
        with pytest.raises(ConfigurationError, match="Mainnet configuration not yet available"):
            config.network_for("mainnet")

    def test_unknown_environment(self, config):
        with pytest.raises(ConfigurationError):
            config.network_for("devnet")

    def test_build_config(self):
        assert build_config().network.chain_id == 10143
        assert build_config(ServerSettings(environment="testnet")).network.chain_id == 10143

    def test_build_config_mainnet(self):
        with pytest.raises(ConfigurationError):
            build_config(ServerSettings(environment="mainnet"))


class TestLoadSettings:
    """Test environment-driven settings."""

    def test_defaults(self, clean_env):
        settings = load_settings()
        assert settings == ServerSettings()

    def test_environment_variables(self, clean_env, monkeypatch):
        monkeypatch.setenv("MONAD_ENVIRONMENT", " Testnet ")
        monkeypatch.setenv("MONAD_MCP_LOG_LEVEL", "debug")
        monkeypatch.setenv("PORT", "9001")
        settings = load_settings()
        assert settings.environment == "testnet"
        assert settings.log_level == "DEBUG"
        assert settings.port == 9001

    def test_env_file(self, clean_env, monkeypatch):
        """Test values are read from an explicit .env file."""
        env_file = clean_env / "server.env"
        env_file.write_text("PORT=8123\nHOST=127.0.0.1\n")
        settings = load_settings(str(env_file))
        for var in ("PORT", "HOST"):
            monkeypatch.delenv(var, raising=False)
        assert settings.port == 8123
        assert settings.host == "127.0.0.1"

    def test_bad_port(self, clean_env, monkeypatch):
        monkeypatch.setenv("PORT", "eighty")
        with pytest.raises(ConfigurationError, match="PORT"):
            load_settings()

    def test_bad_log_level(self, clean_env, monkeypatch):
        monkeypatch.setenv("MONAD_MCP_LOG_LEVEL", "chatty")
        with pytest.raises(ConfigurationError):
            load_settings()

    @pytest.mark.parametrize("alias,level", [("warn", "WARNING"), ("FATAL", "CRITICAL")])
    def test_log_level_alias(self, clean_env, monkeypatch, alias, level):
        """Test logging aliases map to names uvicorn also accepts."""
        import uvicorn.config

        monkeypatch.setenv("MONAD_MCP_LOG_LEVEL", alias)
        settings = load_settings()
        assert settings.log_level == level
        assert settings.log_level.lower() in uvicorn.config.LOG_LEVELS

    def test_notset_log_level_rejected(self, clean_env, monkeypatch):
        monkeypatch.setenv("MONAD_MCP_LOG_LEVEL", "NOTSET")
        with pytest.raises(ConfigurationError):
            load_settings()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
