"""
Allocation - Package.

============================================================
PURPOSE
============================================================
Budget split of collected fees into buyback, LP, burn and
cooling categories, plus the per-category action records.

============================================================
USAGE
============================================================

```python
from allocation import AllocationConfig, create_allocation_strategy

strategy = create_allocation_strategy("adaptive")
allocation = strategy.allocate(2.5, health_state, AllocationConfig())

allocation.allocations.buyback  # SOL for buyback
```

============================================================
"""

from .types import (
    ALLOCATION_TOTAL_TOLERANCE,
    ActionType,
    ActionStatus,
    InvalidActionTransitionError,
    AllocationConfig,
    AllocationAmounts,
    AllocationAction,
    EpochAllocation,
)
from .strategies import (
    AllocationMode,
    split_fees,
    AllocationStrategy,
    FixedAllocationStrategy,
    AdaptiveAllocationStrategy,
    create_allocation_strategy,
)


__all__ = [
    # Types
    "ALLOCATION_TOTAL_TOLERANCE",
    "ActionType",
    "ActionStatus",
    "InvalidActionTransitionError",
    "AllocationConfig",
    "AllocationAmounts",
    "AllocationAction",
    "EpochAllocation",
    # Strategies
    "AllocationMode",
    "split_fees",
    "AllocationStrategy",
    "FixedAllocationStrategy",
    "AdaptiveAllocationStrategy",
    "create_allocation_strategy",
]
