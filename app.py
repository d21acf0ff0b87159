#!/usr/bin/env python3
"""
ICE Protocol - Main Application Entry Point.

============================================================
SINGLE ENTRYPOINT
============================================================
This is the ONE executable entry point for the protocol bot.

- Compatible with PM2 process management
- Can be started, stopped, and restarted safely
- SIGINT/SIGTERM stop the loop after the in-flight epoch
- Executor state and fee tracker reset on restart

============================================================
USAGE
============================================================
Direct execution:
    python app.py run

With PM2:
    pm2 start app.py --interpreter python --name ice-protocol -- run

Simulation:
    python app.py simulate --epochs 24 --sleep 0

============================================================
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from orchestrator.cli import main


# ============================================================
# ENTRY POINT
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
