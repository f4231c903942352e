"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository, env_overrides
from .models import SinkSettings

__all__ = ["ConfigLocator", "ConfigRepository", "SinkSettings", "env_overrides"]
