"""
RCPanel - Managers Package

This package contains manager classes for configuration and credentials.
"""

from .config_manager import ConfigManager

__all__ = ['ConfigManager']
