"""
SmartModel Configurator

Wires the shared collaborators every model reaches for: the persistence
backend, the password hasher and the validation factory. Accessors configure
lazily from ``get_config()`` so models work without an explicit setup call.
"""

import logging
from typing import Optional

from ..hashing import Hasher, Pbkdf2Hasher
from ..persistence import MemoryRepo, PersistenceBackend, SQLModelBackend
from ..validation import PresenceVerifier, ValidationFactory
from .configuration import SmartModelConfig, get_config, set_config

logger = logging.getLogger(__name__)

_backend: Optional[PersistenceBackend] = None
_hasher: Optional[Hasher] = None
_validation_factory: Optional[ValidationFactory] = None


def configure_smartmodel(
    config: Optional[SmartModelConfig] = None,
    backend: Optional[PersistenceBackend] = None,
    hasher: Optional[Hasher] = None,
    validation_factory: Optional[ValidationFactory] = None,
) -> SmartModelConfig:
    """
    Configure the collaborators shared by all models.

    Args:
        config: Settings to apply; defaults to the current global config
        backend: Backend to use instead of the one built from ``config``
        hasher: Hasher to use instead of the one built from ``config``
        validation_factory: Factory to use instead of the default one

    Example:
        ```python
        from smartmodel import configure_smartmodel, SQLModelBackend

        configure_smartmodel(backend=SQLModelBackend("sqlite:///app.db"))
        ```
    """
    global _backend, _hasher, _validation_factory

    if config is not None:
        set_config(config)
    config = get_config()

    _configure_logging(config)

    _backend = backend or _build_backend(config)
    _hasher = hasher or Pbkdf2Hasher(rounds=config.hashing.rounds)
    _validation_factory = validation_factory or ValidationFactory(
        PresenceVerifier(_backend), config.validation.custom_messages
    )

    logger.info(
        f"SmartModel configured for {config.environment.value}: "
        f"backend={type(_backend).__name__}, hasher={type(_hasher).__name__}"
    )
    return config


def reset_smartmodel() -> None:
    """Forget configured collaborators and settings."""
    global _backend, _hasher, _validation_factory
    _backend = None
    _hasher = None
    _validation_factory = None
    set_config(None)


def get_backend() -> PersistenceBackend:
    if _backend is None:
        configure_smartmodel()
    return _backend


def get_hasher() -> Hasher:
    if _hasher is None:
        configure_smartmodel()
    return _hasher


def get_validation_factory() -> ValidationFactory:
    if _validation_factory is None:
        configure_smartmodel()
    return _validation_factory


def _build_backend(config: SmartModelConfig) -> PersistenceBackend:
    if config.persistence.backend == "memory":
        return MemoryRepo()
    if config.persistence.backend == "sql":
        return SQLModelBackend(config.persistence.database_url, echo=config.persistence.echo)
    raise ValueError(f"Unknown persistence backend: {config.persistence.backend}")


def _configure_logging(config: SmartModelConfig) -> None:
    package_logger = logging.getLogger("smartmodel")
    package_logger.setLevel(config.logging.level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.logging.format))
        package_logger.addHandler(handler)
