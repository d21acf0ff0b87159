"""
Orchestrator Package - Protocol Coordination Layer.

============================================================
PACKAGE OVERVIEW
============================================================
This package is the SINGLE ENTRYPOINT that controls startup,
shutdown and the epoch loop of the ICE protocol.

============================================================
CORE PRINCIPLES
============================================================
1. The orchestrator has NO allocation logic
2. It does NOT modify executor state
3. Stop requests take effect between epochs only

============================================================
EPOCH FLOW
============================================================
 1. Detect fees (FeeSource -> FeeTracker)
 2. Compute ICE health (HealthInputProvider -> IceHealthEngine)
 3. Execute epoch (Executor)
 4. Write report (files, optional database, optional webhooks)

============================================================
QUICK START
============================================================
Command line usage::

    python app.py run
    python app.py simulate --epochs 10
    python app.py health-check

Programmatic usage::

    import asyncio
    from orchestrator import IceProtocol, load_protocol_config

    async def main():
        protocol = IceProtocol.create(load_protocol_config())
        try:
            await protocol.start()
        finally:
            await protocol.close()

    asyncio.run(main())

============================================================
"""

# ============================================================
# Models
# ============================================================
from orchestrator.models import (
    LOG_LEVELS,
    SolanaNetwork,
    LogFormat,
    EnvReader,
    FeeSourceConfig,
    ReportingConfig,
    ProtocolConfig,
    load_protocol_config,
)

# ============================================================
# Health Inputs
# ============================================================
from orchestrator.health_inputs import (
    WINDOW_SECONDS,
    MarketMetrics,
    HealthInputProvider,
    SimulatedHealthInputProvider,
    ActivityHealthInputProvider,
)

# ============================================================
# Core
# ============================================================
from orchestrator.core import (
    SIMULATED_BALANCE_SOL,
    IceProtocol,
    setup_logging,
)

# ============================================================
# CLI
# ============================================================
from orchestrator.cli import (
    create_parser,
    validate_args,
    force_dry_run,
    main,
    async_main,
)


__version__ = "0.1.0"

__all__ = [
    # Models
    "LOG_LEVELS",
    "SolanaNetwork",
    "LogFormat",
    "EnvReader",
    "FeeSourceConfig",
    "ReportingConfig",
    "ProtocolConfig",
    "load_protocol_config",

    # Health inputs
    "WINDOW_SECONDS",
    "MarketMetrics",
    "HealthInputProvider",
    "SimulatedHealthInputProvider",
    "ActivityHealthInputProvider",

    # Core
    "SIMULATED_BALANCE_SOL",
    "IceProtocol",
    "setup_logging",

    # CLI
    "create_parser",
    "validate_args",
    "force_dry_run",
    "main",
    "async_main",
]
