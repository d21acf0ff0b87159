"""
Orchestrator - Configuration Models.

============================================================
RESPONSIBILITY
============================================================
Loads, parses and validates the protocol configuration.

- .env file loaded first with python-dotenv
- Environment variables parsed into nested dataclasses
- Validated once at load time; the core trusts the result
- Unparseable values fail with the offending key named

============================================================
USAGE
============================================================
```python
config = load_protocol_config()          # raises ConfigurationError
config = ProtocolConfig.from_env(env)    # parse only
errors = config.validate()               # semantic checks
```

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from dotenv import load_dotenv

from allocation.strategies import AllocationMode
from allocation.types import AllocationConfig
from core.exceptions import ConfigurationError, InvalidConfigError
from executor.config import ExecutorConfig, ExecutorMode
from fee_sources.api import DEFAULT_FEE_API_URL
from fee_sources.types import FeeEventSource
from ice_health.config import HealthWeights, IceHealthConfig
from ledger.rpc import DEFAULT_RPC_URL
from swap_engine.config import SwapConfig
from swap_engine.factory import DexEngineType


logger = logging.getLogger(__name__)


E = TypeVar("E", bound=Enum)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ============================================================
# ENUMS
# ============================================================

class SolanaNetwork(str, Enum):
    """Cluster the RPC endpoint belongs to."""

    DEVNET = "devnet"
    TESTNET = "testnet"
    MAINNET_BETA = "mainnet-beta"


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"


# ============================================================
# ENVIRONMENT PARSING
# ============================================================

class EnvReader:
    """Typed access to an environment mapping."""

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        self._env = env if env is not None else os.environ

    def get_str(self, key: str, default: str = "") -> str:
        value = self._env.get(key)
        return value.strip() if value is not None and value.strip() else default

    def get_int(self, key: str, default: int) -> int:
        raw = self._env.get(key)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError:
            raise InvalidConfigError(key, raw, "must be an integer")

    def get_float(self, key: str, default: float) -> float:
        raw = self._env.get(key)
        if raw is None or not raw.strip():
            return default
        try:
            return float(raw)
        except ValueError:
            raise InvalidConfigError(key, raw, "must be a number")

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = self._env.get(key)
        if raw is None or not raw.strip():
            return default
        return raw.strip().lower() in ("1", "true", "yes", "on")

    def get_enum(self, key: str, enum_type: Type[E], default: E) -> E:
        raw = self._env.get(key)
        if raw is None or not raw.strip():
            return default
        try:
            return enum_type(raw.strip().lower())
        except ValueError:
            allowed = ", ".join(e.value for e in enum_type)
            raise InvalidConfigError(key, raw, f"must be one of: {allowed}")


# ============================================================
# SECTION CONFIGS
# ============================================================

@dataclass(frozen=True)
class FeeSourceConfig:
    """Fee detection settings."""

    source_type: FeeEventSource = FeeEventSource.MOCK
    poll_interval_ms: int = 30000
    confirmation_depth: int = 32
    api_url: str = DEFAULT_FEE_API_URL

    def validate(self) -> List[str]:
        errors = []

        if self.poll_interval_ms <= 0:
            errors.append("fee poll_interval_ms must be positive")

        if self.confirmation_depth < 1:
            errors.append("fee confirmation_depth must be at least 1")

        return errors


@dataclass(frozen=True)
class ReportingConfig:
    """Report output settings."""

    reports_dir: str = "./reports"
    database_url: str = ""
    discord_webhook_url: str = ""
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""

    def validate(self) -> List[str]:
        errors = []

        if not self.reports_dir:
            errors.append("reports_dir must not be empty")

        if bool(self.telegram_bot_token) != bool(self.telegram_chat_id):
            errors.append("TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID must be set together")

        return errors


# ============================================================
# PROTOCOL CONFIG
# ============================================================

@dataclass
class ProtocolConfig:
    """Complete protocol configuration."""

    # Network
    solana_network: SolanaNetwork = SolanaNetwork.DEVNET
    solana_rpc_url: str = DEFAULT_RPC_URL

    # Token and wallets
    ice_token_mint: str = ""
    ice_creator_fee_wallet: str = ""
    bot_wallet_address: str = ""

    # Components
    health: IceHealthConfig = field(default_factory=IceHealthConfig)
    allocation_mode: AllocationMode = AllocationMode.ADAPTIVE
    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    swap: SwapConfig = field(default_factory=SwapConfig)
    fee_source: FeeSourceConfig = field(default_factory=FeeSourceConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)

    # Logging
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.TEXT

    # Simulation
    simulate_mode: bool = False
    simulation_duration_epochs: int = 24

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ProtocolConfig":
        """
        Parse configuration from environment variables.

        Raises:
            InvalidConfigError: On unparseable values
        """
        e = EnvReader(env)

        ice_token_mint = e.get_str("ICE_TOKEN_MINT")

        return cls(
            solana_network=e.get_enum("SOLANA_NETWORK", SolanaNetwork, SolanaNetwork.DEVNET),
            solana_rpc_url=e.get_str("SOLANA_RPC_URL", DEFAULT_RPC_URL),
            ice_token_mint=ice_token_mint,
            ice_creator_fee_wallet=e.get_str("ICE_CREATOR_FEE_WALLET"),
            bot_wallet_address=e.get_str("BOT_WALLET_ADDRESS"),
            health=IceHealthConfig(
                weights=HealthWeights(
                    buyback_frequency=e.get_float("BUYBACK_FREQUENCY_WEIGHT", 0.25),
                    buyback_coverage=e.get_float("BUYBACK_COVERAGE_WEIGHT", 0.25),
                    liquidity_depth=e.get_float("LIQUIDITY_DEPTH_WEIGHT", 0.25),
                    volatility_penalty=e.get_float("VOLATILITY_PENALTY_WEIGHT", 0.15),
                    time_decay=e.get_float("TIME_DECAY_WEIGHT", 0.10),
                ),
                threshold=e.get_float("ICE_HEALTH_THRESHOLD", 50.0),
                check_interval_minutes=e.get_int("ICE_HEALTH_CHECK_INTERVAL_MINUTES", 5),
            ),
            allocation_mode=e.get_enum("ALLOCATION_MODE", AllocationMode, AllocationMode.ADAPTIVE),
            allocation=AllocationConfig(
                buyback_pct=e.get_float("ALLOCATION_BUYBACK_PCT", 70),
                lp_pct=e.get_float("ALLOCATION_LP_PCT", 20),
                burn_pct=e.get_float("ALLOCATION_BURN_PCT", 5),
                cooling_pct=e.get_float("ALLOCATION_COOLING_PCT", 5),
            ),
            executor=ExecutorConfig(
                mode=e.get_enum("EXECUTOR_MODE", ExecutorMode, ExecutorMode.DRY_RUN),
                epoch_interval_seconds=e.get_int("EXECUTOR_EPOCH_INTERVAL_SECONDS", 1800),
                max_budget_per_epoch_sol=e.get_float("MAX_BUDGET_PER_EPOCH_SOL", 1.0),
                min_interval_seconds=e.get_int("MIN_INTERVAL_SECONDS", 300),
                max_consecutive_failures=e.get_int("MAX_CONSECUTIVE_FAILURES", 5),
                min_balance_to_operate_sol=e.get_float("MIN_BALANCE_TO_OPERATE_SOL", 0.5),
                drift_tolerance_bps=e.get_int("DRIFT_TOLERANCE_BPS", 50),
            ),
            swap=SwapConfig(
                dex_engine=e.get_enum("DEX_ENGINE", DexEngineType, DexEngineType.MOCK),
                max_slippage_bps=e.get_int("MAX_SLIPPAGE_BPS", 500),
                max_price_impact_bps=e.get_int("MAX_PRICE_IMPACT_BPS", 1000),
                ice_token_mint=ice_token_mint,
            ),
            fee_source=FeeSourceConfig(
                source_type=e.get_enum("FEE_SOURCE", FeeEventSource, FeeEventSource.MOCK),
                poll_interval_ms=e.get_int("FEE_POLL_INTERVAL_MS", 30000),
                confirmation_depth=e.get_int("FEE_CONFIRMATION_DEPTH", 32),
                api_url=e.get_str("FEE_API_URL", DEFAULT_FEE_API_URL),
            ),
            reporting=ReportingConfig(
                reports_dir=e.get_str("REPORTS_DIR", "./reports"),
                database_url=e.get_str("REPORTS_DATABASE_URL"),
                discord_webhook_url=e.get_str("DISCORD_WEBHOOK_URL"),
                telegram_bot_token=e.get_str("TELEGRAM_BOT_TOKEN"),
                telegram_chat_id=e.get_str("TELEGRAM_CHAT_ID"),
            ),
            log_level=e.get_str("LOG_LEVEL", "INFO").upper(),
            log_format=e.get_enum("LOG_FORMAT", LogFormat, LogFormat.TEXT),
            simulate_mode=e.get_bool("SIMULATE_MODE", False),
            simulation_duration_epochs=e.get_int("SIMULATION_DURATION_EPOCHS", 24),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors: List[str] = []

        errors.extend(self.health.validate())
        errors.extend(self.allocation.validate())
        errors.extend(self.executor.validate())
        errors.extend(self.swap.validate())
        errors.extend(self.fee_source.validate())
        errors.extend(self.reporting.validate())

        if self.log_level not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}")

        if self.simulation_duration_epochs < 1:
            errors.append("SIMULATION_DURATION_EPOCHS must be at least 1")

        if self.executor.is_live:
            if not self.ice_token_mint:
                errors.append("ICE_TOKEN_MINT is required in live mode")
            if not self.bot_wallet_address:
                errors.append("BOT_WALLET_ADDRESS is required in live mode")

        if (
            self.fee_source.source_type == FeeEventSource.WALLET_WATCHER
            and not self.ice_creator_fee_wallet
        ):
            errors.append("ICE_CREATOR_FEE_WALLET is required for the wallet-watcher fee source")

        return errors

    def with_overrides(self, **changes: Any) -> "ProtocolConfig":
        """Copy with top-level fields replaced."""
        data = {name: getattr(self, name) for name in self.__dataclass_fields__}
        data.update(changes)
        return ProtocolConfig(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Loggable view; credentials are masked."""
        return {
            "solanaNetwork": self.solana_network.value,
            "solanaRpcUrl": self.solana_rpc_url,
            "iceTokenMint": self.ice_token_mint,
            "botWalletAddress": self.bot_wallet_address,
            "healthThreshold": self.health.threshold,
            "healthWeights": self.health.weights.to_dict(),
            "allocationMode": self.allocation_mode.value,
            "allocation": self.allocation.to_dict(),
            "executor": self.executor.to_dict(),
            "swap": self.swap.to_dict(),
            "feeSource": self.fee_source.source_type.value,
            "reportsDir": self.reporting.reports_dir,
            "reportsDatabase": bool(self.reporting.database_url),
            "telegram": bool(self.reporting.telegram_bot_token),
            "discord": bool(self.reporting.discord_webhook_url),
            "simulateMode": self.simulate_mode,
        }


# ============================================================
# LOADING
# ============================================================

def load_protocol_config(
    env_file: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ProtocolConfig:
    """
    Load and validate the protocol configuration.

    Args:
        env_file: .env file to load first (default: search upward)
        env: Explicit mapping instead of os.environ (no .env loading)

    Raises:
        ConfigurationError: On unparseable or invalid configuration
    """
    if env is None:
        load_dotenv(dotenv_path=env_file)

    config = ProtocolConfig.from_env(env)

    errors = config.validate()
    if errors:
        raise ConfigurationError(
            f"Invalid configuration: {'; '.join(errors)}",
            context={"errors": errors},
        )

    logger.info(f"Configuration loaded: {config.to_dict()}")
    return config


__all__ = [
    "LOG_LEVELS",
    "SolanaNetwork",
    "LogFormat",
    "EnvReader",
    "FeeSourceConfig",
    "ReportingConfig",
    "ProtocolConfig",
    "load_protocol_config",
]
