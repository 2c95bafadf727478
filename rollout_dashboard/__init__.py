"""Rollout readiness dashboard: department rollout workbook -> dashboard snapshot."""

__version__ = "0.1.0"
