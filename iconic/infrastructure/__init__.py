"""Iconic Infrastructure Layer.

Core services used by the rule engine and its collaborators:
- ConfigManager: Layered YAML/environment configuration
- LRUCache: Bounded cache (compiled regular expressions)
- Logger: Structured logging system
"""

from .cache_manager import CacheConfig, LRUCache
from .config_manager import ConfigError
from .config_manager import ConfigManager as Config
from .config_manager import ConfigManager, ConfigSource, get_config_manager, set_global_config
from .logger import Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    # Cache exports
    "CacheConfig",
    "LRUCache",
    # ConfigManager exports
    "ConfigSource",
    "ConfigError",
    "ConfigManager",
    "Config",
    "get_config_manager",
    "set_global_config",
]
