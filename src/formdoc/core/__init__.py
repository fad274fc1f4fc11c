"""Shared utilities used across formdoc components.

Includes:
- YAML configuration loader + validation
- structured logging with privacy guardrails
"""

from __future__ import annotations

from .config import FormdocConfig, LayoutConfig, SignatureConfig, load_config
from .logging import configure_logging, log_event

__all__ = [
    "FormdocConfig",
    "LayoutConfig",
    "SignatureConfig",
    "configure_logging",
    "load_config",
    "log_event",
]
