"""
SmartModel Application Module

Configuration and wiring of shared collaborators.
"""

from .configuration import (
    Environment, HashingConfig, LoggingConfig, PersistenceConfig,
    SmartModelConfig, ValidationConfig, get_config, set_config,
)
from .configurator import (
    configure_smartmodel, get_backend, get_hasher, get_validation_factory,
    reset_smartmodel,
)

__all__ = [
    "Environment",
    "HashingConfig",
    "LoggingConfig",
    "PersistenceConfig",
    "SmartModelConfig",
    "ValidationConfig",
    "get_config",
    "set_config",
    "configure_smartmodel",
    "get_backend",
    "get_hasher",
    "get_validation_factory",
    "reset_smartmodel",
]
