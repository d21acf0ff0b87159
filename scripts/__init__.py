"""
Scripts Package.

This package contains operational scripts for the ICE protocol.

Scripts:
- simulate: Run a seeded multi-epoch simulation
- executor_dry_run: One executor epoch for a given fee amount and health
- health_check: Score a set of health measurements
"""

# Scripts are meant to be run directly, not imported
