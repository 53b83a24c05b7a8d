"""
Configuration package for setupmini

Reserved runtime names, generated-module conventions and compile switches,
overridable through SETUPMINI_* environment variables.
"""

from .settings import appsettings, AppSettings

__all__ = ["appsettings", "AppSettings"]
