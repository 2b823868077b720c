"""
Storage Layer.

This package handles configuration persistence. Resolved streams are never
stored; every resolution reflects the upstream at call time.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
