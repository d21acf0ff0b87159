"""
Executor - Configuration.

============================================================
PURPOSE
============================================================
Safety interlocks and cadence for the epoch executor.

CRITICAL CONSTRAINTS:
- No epoch closer than min_interval_seconds to the last one
- Circuit breaker after max_consecutive_failures
- No operation below min_balance_to_operate_sol

============================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List


DUST_THRESHOLD_SOL = 0.01
"""Accumulated fees below this are not allocated."""


class ExecutorMode(str, Enum):
    """Whether allocated actions are submitted."""

    DRY_RUN = "dry-run"
    LIVE = "live"


@dataclass(frozen=True)
class ExecutorConfig:
    """Executor configuration."""

    mode: ExecutorMode = ExecutorMode.DRY_RUN
    """dry-run skips action submission entirely."""

    epoch_interval_seconds: int = 1800
    """Orchestrator tick cadence."""

    min_interval_seconds: int = 300
    """Minimum time between two executed epochs."""

    max_consecutive_failures: int = 5
    """Failures that trip the circuit breaker."""

    min_balance_to_operate_sol: float = 0.5
    """Bot wallet floor below which epochs fail."""

    max_budget_per_epoch_sol: float = 1.0
    """Reported in state snapshots; not enforced."""

    drift_tolerance_bps: int = 50
    """Reported in state snapshots; not enforced."""

    dust_threshold_sol: float = DUST_THRESHOLD_SOL

    @property
    def is_live(self) -> bool:
        return self.mode == ExecutorMode.LIVE

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.epoch_interval_seconds <= 0:
            errors.append("epoch_interval_seconds must be positive")

        if self.min_interval_seconds < 0:
            errors.append("min_interval_seconds must be non-negative")

        if self.max_consecutive_failures < 1:
            errors.append("max_consecutive_failures must be at least 1")

        if self.min_balance_to_operate_sol < 0:
            errors.append("min_balance_to_operate_sol must be non-negative")

        if self.max_budget_per_epoch_sol <= 0:
            errors.append("max_budget_per_epoch_sol must be positive")

        if self.drift_tolerance_bps < 0:
            errors.append("drift_tolerance_bps must be non-negative")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "epochIntervalSeconds": self.epoch_interval_seconds,
            "minIntervalSeconds": self.min_interval_seconds,
            "maxConsecutiveFailures": self.max_consecutive_failures,
            "minBalanceToOperateSol": self.min_balance_to_operate_sol,
            "maxBudgetPerEpochSol": self.max_budget_per_epoch_sol,
            "driftToleranceBps": self.drift_tolerance_bps,
        }


__all__ = [
    "DUST_THRESHOLD_SOL",
    "ExecutorMode",
    "ExecutorConfig",
]
