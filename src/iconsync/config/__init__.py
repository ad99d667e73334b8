"""
Configuration management for the icon sync pipeline.
"""

from .config_loader import SyncConfig, DEFAULT_CONFIG

__all__ = ["SyncConfig", "DEFAULT_CONFIG"]
