"""
Configuration
"""

from .config import ConfigService, ConfigError

__all__ = ['ConfigService', 'ConfigError']
