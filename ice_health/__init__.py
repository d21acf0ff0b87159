"""
Ice Health Engine - Package.

============================================================
PURPOSE
============================================================
Turns trailing 24h protocol measurements into a single
deterministic health score in [0, 100] and a status tag
(ALIVE, MELTING, DEAD).

============================================================
USAGE
============================================================

```python
from ice_health import IceHealthEngine, IceHealthConfig, HealthMetricsInput

engine = IceHealthEngine(IceHealthConfig(threshold=50))
state = engine.compute_health(HealthMetricsInput(...), epoch_number=1)

if not state.is_alive:
    minutes = engine.estimate_time_to_threshold(state)  # 0
```

============================================================
"""

from .types import (
    DISPLAY_DECIMALS,
    round_for_display,
    HealthStatus,
    HealthMetricsInput,
    IceHealthMetrics,
    IceHealthState,
)
from .config import (
    WEIGHT_SUM_TOLERANCE,
    HealthWeights,
    IceHealthConfig,
)
from .engine import (
    clamp,
    IceHealthEngine,
    health_state_to_dict,
    health_state_from_dict,
    format_health_summary,
)


__all__ = [
    # Types
    "DISPLAY_DECIMALS",
    "round_for_display",
    "HealthStatus",
    "HealthMetricsInput",
    "IceHealthMetrics",
    "IceHealthState",
    # Configuration
    "WEIGHT_SUM_TOLERANCE",
    "HealthWeights",
    "IceHealthConfig",
    # Engine
    "clamp",
    "IceHealthEngine",
    "health_state_to_dict",
    "health_state_from_dict",
    "format_health_summary",
]
