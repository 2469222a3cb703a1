"""CLI module."""

from __future__ import annotations

from orderly.cli.config import OrderlyConfig, get_config
from orderly.cli.main import app

__all__ = ["OrderlyConfig", "app", "get_config"]
