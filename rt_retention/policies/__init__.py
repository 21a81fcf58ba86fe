"""Retention policy configuration."""

from .loader import load_policies, read_config

__all__ = ["load_policies", "read_config"]
