"""Configuration objects loaded from the environment and ``.env``."""

from .settings import ProvidersConfig, RouterConfig, Settings, settings

__all__ = ["ProvidersConfig", "RouterConfig", "Settings", "settings"]
