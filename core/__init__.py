"""
Core Module Package.

This package contains the infrastructure components
that all other modules depend on.

Components:
- clock: Injectable time abstraction
- exceptions: Custom exception hierarchy
"""

from .clock import ClockProtocol, SystemClock, MockClock
from .exceptions import (
    Severity,
    IceProtocolException,
    ConfigurationError,
    MissingConfigError,
    InvalidConfigError,
    LedgerError,
    RPCError,
    FeeSourceError,
    SwapEngineError,
    PriceImpactExceededError,
    UnsupportedOperationError,
    ReportingError,
)


__all__ = [
    # Clock
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    # Exceptions
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
