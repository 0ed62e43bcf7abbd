"""Scan configuration (Scan.toml) models and loading."""

from balscan.config.loader import ConfigError, ConfigResolver, load_config, load_scan_file
from balscan.config.models import Analyzer, Platform, ScanConfiguration

__all__ = [
    "Analyzer",
    "ConfigError",
    "ConfigResolver",
    "Platform",
    "ScanConfiguration",
    "load_config",
    "load_scan_file",
]
