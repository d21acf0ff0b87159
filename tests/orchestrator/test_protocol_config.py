"""
Tests for ProtocolConfig loading and validation.

============================================================
PURPOSE
============================================================
Verify environment parsing, defaults, load-time validation
and the loggable view.

============================================================
"""

import dataclasses
from unittest.mock import patch

import pytest

from allocation import AllocationMode
from core.exceptions import ConfigurationError, InvalidConfigError
from executor import ExecutorMode
from fee_sources import FeeEventSource
from orchestrator import (
    EnvReader,
    LogFormat,
    ProtocolConfig,
    SolanaNetwork,
    load_protocol_config,
)
from swap_engine import DexEngineType


LIVE_ENV = {
    "EXECUTOR_MODE": "live",
    "ICE_TOKEN_MINT": "IceMint111",
    "BOT_WALLET_ADDRESS": "BotWallet111",
}


class TestEnvReader:
    """Tests for typed environment access."""

    def test_defaults_for_missing_and_blank(self):
        reader = EnvReader({"BLANK": "  "})

        assert reader.get_str("MISSING", "x") == "x"
        assert reader.get_int("BLANK", 3) == 3
        assert reader.get_float("MISSING", 1.5) == 1.5
        assert reader.get_bool("MISSING") is False

    def test_parses_values(self):
        reader = EnvReader({"N": "42", "F": "0.5", "B": "Yes", "S": " text "})

        assert reader.get_int("N", 0) == 42
        assert reader.get_float("F", 0.0) == 0.5
        assert reader.get_bool("B") is True
        assert reader.get_str("S") == "text"

    def test_non_numeric_names_key(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            EnvReader({"MIN_INTERVAL_SECONDS": "soon"}).get_int("MIN_INTERVAL_SECONDS", 300)

        assert exc_info.value.context["config_key"] == "MIN_INTERVAL_SECONDS"
        assert "MIN_INTERVAL_SECONDS" in str(exc_info.value)

    def test_enum_outside_closed_set(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            EnvReader({"EXECUTOR_MODE": "yolo"}).get_enum("EXECUTOR_MODE", ExecutorMode, ExecutorMode.DRY_RUN)

        assert "dry-run, live" in str(exc_info.value)

    def test_enum_case_insensitive(self):
        reader = EnvReader({"DEX_ENGINE": "Raydium"})
        assert reader.get_enum("DEX_ENGINE", DexEngineType, DexEngineType.MOCK) == DexEngineType.RAYDIUM


class TestProtocolConfigFromEnv:
    """Tests for building the config from the environment."""

    def test_defaults(self):
        config = ProtocolConfig.from_env({})

        assert config.validate() == []
        assert config.solana_network == SolanaNetwork.DEVNET
        assert config.solana_rpc_url == "https://api.devnet.solana.com"
        assert config.executor.mode == ExecutorMode.DRY_RUN
        assert config.executor.epoch_interval_seconds == 1800
        assert config.executor.min_interval_seconds == 300
        assert config.executor.max_consecutive_failures == 5
        assert config.allocation_mode == AllocationMode.ADAPTIVE
        assert config.allocation.buyback_pct == 70
        assert config.health.threshold == 50
        assert config.health.weights.volatility_penalty == 0.15
        assert config.swap.max_price_impact_bps == 1000
        assert config.fee_source.source_type == FeeEventSource.MOCK
        assert config.log_format == LogFormat.TEXT
        assert config.simulation_duration_epochs == 24

    def test_overrides_from_env(self):
        config = ProtocolConfig.from_env({
            **LIVE_ENV,
            "SOLANA_NETWORK": "mainnet-beta",
            "ALLOCATION_MODE": "fixed",
            "ALLOCATION_BUYBACK_PCT": "60",
            "ALLOCATION_LP_PCT": "30",
            "MAX_PRICE_IMPACT_BPS": "250",
            "FEE_SOURCE": "api",
            "FEE_API_URL": "https://fees.test",
            "LOG_LEVEL": "debug",
            "SIMULATE_MODE": "true",
        })

        assert config.validate() == []
        assert config.solana_network == SolanaNetwork.MAINNET_BETA
        assert config.executor.is_live
        assert config.allocation_mode == AllocationMode.FIXED
        assert config.allocation.buyback_pct == 60
        assert config.swap.max_price_impact_bps == 250
        assert config.swap.ice_token_mint == "IceMint111"
        assert config.fee_source.api_url == "https://fees.test"
        assert config.log_level == "DEBUG"
        assert config.simulate_mode is True


class TestProtocolConfigValidate:
    """Tests for load-time validation."""

    def test_weights_must_sum_to_one(self):
        config = ProtocolConfig.from_env({"TIME_DECAY_WEIGHT": "0.5"})
        assert any("sum to 1.0" in e for e in config.validate())

    def test_allocation_must_sum_to_100(self):
        config = ProtocolConfig.from_env({"ALLOCATION_BURN_PCT": "10"})
        assert any("sum to 100" in e for e in config.validate())

    def test_threshold_range(self):
        config = ProtocolConfig.from_env({"ICE_HEALTH_THRESHOLD": "150"})
        assert config.validate()

    def test_live_requires_mint_and_wallet(self):
        errors = ProtocolConfig.from_env({"EXECUTOR_MODE": "live"}).validate()

        assert "ICE_TOKEN_MINT is required in live mode" in errors
        assert "BOT_WALLET_ADDRESS is required in live mode" in errors

    def test_wallet_watcher_requires_fee_wallet(self):
        errors = ProtocolConfig.from_env({"FEE_SOURCE": "wallet-watcher"}).validate()
        assert any("ICE_CREATOR_FEE_WALLET" in e for e in errors)

    def test_telegram_pair(self):
        errors = ProtocolConfig.from_env({"TELEGRAM_BOT_TOKEN": "t"}).validate()
        assert any("TELEGRAM_CHAT_ID" in e for e in errors)

    def test_log_level(self):
        errors = ProtocolConfig.from_env({"LOG_LEVEL": "chatty"}).validate()
        assert any("LOG_LEVEL" in e for e in errors)


class TestLoadProtocolConfig:
    """Tests for the load entry point."""

    def test_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_protocol_config(env={"EXECUTOR_MODE": "live"})

        assert "ICE_TOKEN_MINT" in str(exc_info.value)
        assert exc_info.value.context["errors"]

    def test_parse_error_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            load_protocol_config(env={"MAX_CONSECUTIVE_FAILURES": "many"})

    def test_explicit_env_skips_dotenv(self):
        with patch("orchestrator.models.load_dotenv") as load_dotenv:
            load_protocol_config(env={})
        load_dotenv.assert_not_called()

    def test_loads_dotenv_file(self):
        with patch("orchestrator.models.load_dotenv") as load_dotenv, \
                patch.dict("os.environ", {"EXECUTOR_EPOCH_INTERVAL_SECONDS": "600"}):
            config = load_protocol_config(env_file="custom.env")

        load_dotenv.assert_called_once_with(dotenv_path="custom.env")
        assert config.executor.epoch_interval_seconds == 600


class TestProtocolConfigHelpers:
    """Tests for overrides and the loggable view."""

    def test_with_overrides(self):
        config = ProtocolConfig.from_env({})
        changed = config.with_overrides(
            executor=dataclasses.replace(config.executor, mode=ExecutorMode.LIVE),
        )

        assert changed.executor.is_live
        assert not config.executor.is_live
        assert changed.health is config.health

    def test_to_dict_masks_credentials(self):
        config = ProtocolConfig.from_env({
            "TELEGRAM_BOT_TOKEN": "secret-token",
            "TELEGRAM_CHAT_ID": "1",
        })
        data = config.to_dict()

        assert data["telegram"] is True
        assert "secret-token" not in str(data)
