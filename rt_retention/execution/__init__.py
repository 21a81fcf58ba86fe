"""Retention execution."""

from .orchestrator import RetentionOrchestrator

__all__ = ["RetentionOrchestrator"]
