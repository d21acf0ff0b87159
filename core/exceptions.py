"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines all custom exceptions for the ice protocol.

- Provides clear exception hierarchy
- Enables specific error handling
- Carries context for debugging
- Separates collaborator failures from core failures

============================================================
EXCEPTION HIERARCHY
============================================================
IceProtocolException (base)
├── ConfigurationError
│   ├── MissingConfigError
│   └── InvalidConfigError
├── LedgerError
│   └── RPCError
├── FeeSourceError
├── SwapEngineError
│   ├── PriceImpactExceededError
│   └── UnsupportedOperationError
└── ReportingError

============================================================
PROPAGATION
============================================================
Collaborators (ledger, fee sources, swap engines, reporting)
raise these. The executor catches everything inside an epoch
and converts it into state updates or action records.

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels for alerting."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, requires attention."""

    HIGH = "high"
    """Serious issue, may impact operations."""

    CRITICAL = "critical"
    """Critical issue, requires immediate action."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class IceProtocolException(Exception):
    """
    Base exception for all ice protocol errors.

    All exceptions carry:
    - severity: for alerting
    - context: for debugging
    - recoverable: whether the next epoch may succeed
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM
    default_recoverable: bool = True

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.recoverable = recoverable if recoverable is not None else self.default_recoverable
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    @property
    def requires_immediate_action(self) -> bool:
        """Check if error requires immediate action."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging/storage."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(IceProtocolException):
    """Error in configuration."""

    default_severity = Severity.HIGH
    default_recoverable = False

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""

    def __init__(self, key: str, source: str = "environment"):
        super().__init__(
            message=f"Required environment variable not set: {key}",
            config_key=key,
            context={"source": source},
        )


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for {key}: {reason}",
            config_key=key,
            actual_value=value,
            context={"reason": reason},
        )


# ============================================================
# LEDGER ERRORS
# ============================================================

class LedgerError(IceProtocolException):
    """Base class for ledger client errors."""

    default_severity = Severity.MEDIUM


class RPCError(LedgerError):
    """JSON-RPC call failed."""

    def __init__(
        self,
        message: str,
        rpc_url: Optional[str] = None,
        method: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if rpc_url:
            context["rpc_url"] = rpc_url
        if method:
            context["method"] = method
        if status_code is not None:
            context["status_code"] = status_code

        super().__init__(message, context=context, **kwargs)


# ============================================================
# FEE SOURCE ERRORS
# ============================================================

class FeeSourceError(IceProtocolException):
    """Fee detection failed."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if source:
            context["source"] = source
        super().__init__(message, context=context, **kwargs)


# ============================================================
# SWAP ENGINE ERRORS
# ============================================================

class SwapEngineError(IceProtocolException):
    """Swap engine could not quote or execute."""

    def __init__(self, message: str, engine: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if engine:
            context["engine"] = engine
        super().__init__(message, context=context, **kwargs)


class PriceImpactExceededError(SwapEngineError):
    """Quoted price impact is above the configured ceiling."""

    def __init__(self, price_impact_bps: float, max_price_impact_bps: float, **kwargs):
        self.price_impact_bps = price_impact_bps
        self.max_price_impact_bps = max_price_impact_bps
        super().__init__(
            f"Price impact too high: {price_impact_bps}bps > {max_price_impact_bps}bps",
            context={
                "price_impact_bps": price_impact_bps,
                "max_price_impact_bps": max_price_impact_bps,
            },
            **kwargs,
        )


class UnsupportedOperationError(SwapEngineError):
    """Operation has no implementation for this collaborator."""

    default_recoverable = False


# ============================================================
# REPORTING ERRORS
# ============================================================

class ReportingError(IceProtocolException):
    """Report could not be written, loaded or published."""

    default_severity = Severity.LOW


# ============================================================
# EXPORTS
# ============================================================

__all__ = [
    "Severity",
    "IceProtocolException",
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    "LedgerError",
    "RPCError",
    "FeeSourceError",
    "SwapEngineError",
    "PriceImpactExceededError",
    "UnsupportedOperationError",
    "ReportingError",
]
