"""Configuration module for loading and managing application settings"""
import logging
from typing import Dict, Any

from .lib.load_settings_conf import load_settings_conf, SettingsError, DEFAULTS

__all__ = ['settings_conf', 'load_settings_conf', 'configure_logging', 'SettingsError', 'DEFAULTS']

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = None) -> None:
    """Configure root logging for entry points."""
    logging.basicConfig(
        level=level or settings_conf['log_level'],
        format=LOG_FORMAT
    )


try:
    settings_conf: Dict[str, Any] = load_settings_conf()
except SettingsError as e:
    # Re-raise the error but provide more context
    raise type(e)(
        f"Configuration Error\n"
        "=================\n\n"
        f"{str(e)}\n\n"
        "Please ensure settings.conf is properly configured."
    )
