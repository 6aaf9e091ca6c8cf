"""
Configuration Management for SmartModel

🔧 Environment-aware settings for the shared collaborators models use:
the persistence backend, the password hasher, validation message overrides
and logging.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class PersistenceConfig:
    """Persistence layer configuration"""
    backend: str = "memory"
    database_url: str = "sqlite:///smartmodel.db"
    echo: bool = False


@dataclass
class HashingConfig:
    rounds: int = 260000


@dataclass
class ValidationConfig:
    custom_messages: Dict[str, str] = field(default_factory=dict)


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class SmartModelConfig:
    """Complete SmartModel configuration"""
    environment: Environment = Environment.DEVELOPMENT

    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    hashing: HashingConfig = field(default_factory=HashingConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def for_environment(cls, environment: Environment) -> 'SmartModelConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.persistence.backend = "memory"
            config.persistence.database_url = "sqlite://"
            config.hashing.rounds = 1000
            config.logging.level = "WARNING"

        elif environment == Environment.PRODUCTION:
            config.persistence.backend = "sql"
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'SmartModelConfig':
        """Create configuration from dictionary"""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        for section in ("persistence", "hashing", "validation", "logging"):
            target = getattr(config, section)
            for key, value in config_dict.get(section, {}).items():
                if hasattr(target, key):
                    setattr(target, key, value)

        return config

    @classmethod
    def from_environment(cls) -> 'SmartModelConfig':
        """Create configuration from environment variables"""
        environment = Environment(os.getenv('SMARTMODEL_ENV', 'development'))
        config = cls.for_environment(environment)

        if os.getenv('SMARTMODEL_DATABASE_URL'):
            config.persistence.backend = "sql"
            config.persistence.database_url = os.getenv('SMARTMODEL_DATABASE_URL')

        if os.getenv('SMARTMODEL_LOG_LEVEL'):
            config.logging.level = os.getenv('SMARTMODEL_LOG_LEVEL').upper()

        if os.getenv('SMARTMODEL_HASH_ROUNDS'):
            config.hashing.rounds = int(os.getenv('SMARTMODEL_HASH_ROUNDS'))

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "environment": self.environment.value,
            "persistence": {
                "backend": self.persistence.backend,
                "database_url": self.persistence.database_url,
                "echo": self.persistence.echo,
            },
            "hashing": {"rounds": self.hashing.rounds},
            "validation": {"custom_messages": dict(self.validation.custom_messages)},
            "logging": {"level": self.logging.level, "format": self.logging.format},
        }


# Global configuration management
_current_config: Optional[SmartModelConfig] = None


def set_config(config: Optional[SmartModelConfig]):
    """Set the global configuration"""
    global _current_config
    _current_config = config


def get_config() -> SmartModelConfig:
    """Get the current global configuration"""
    global _current_config

    if _current_config is None:
        # Auto-create from environment if not set
        _current_config = SmartModelConfig.from_environment()

    return _current_config


__all__ = [
    "Environment", "PersistenceConfig", "HashingConfig", "ValidationConfig",
    "LoggingConfig", "SmartModelConfig", "set_config", "get_config",
]
