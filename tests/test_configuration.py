"""
Configuration and wiring tests.
"""

import logging

import pytest

from smartmodel import Environment, MemoryRepo, SmartModelConfig, SQLModelBackend, configure_smartmodel
from smartmodel.app import get_backend, get_config, get_hasher, get_validation_factory, reset_smartmodel


class TestSmartModelConfig:

    def test_environment_presets(self):
        testing = SmartModelConfig.for_environment(Environment.TESTING)
        production = SmartModelConfig.for_environment(Environment.PRODUCTION)

        assert testing.persistence.backend == "memory"
        assert testing.hashing.rounds == 1000
        assert production.persistence.backend == "sql"

    def test_from_dict_overrides_preset(self):
        config = SmartModelConfig.from_dict({
            "environment": "testing",
            "hashing": {"rounds": 5},
            "validation": {"custom_messages": {"required": "Needed."}},
            "unknown_section": {"x": 1},
        })

        assert config.environment is Environment.TESTING
        assert config.hashing.rounds == 5
        assert config.validation.custom_messages == {"required": "Needed."}
        assert SmartModelConfig.from_dict(config.to_dict()).to_dict() == config.to_dict()

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SMARTMODEL_ENV", "testing")
        monkeypatch.setenv("SMARTMODEL_DATABASE_URL", "sqlite://")
        monkeypatch.setenv("SMARTMODEL_LOG_LEVEL", "debug")
        monkeypatch.setenv("SMARTMODEL_HASH_ROUNDS", "2000")

        config = SmartModelConfig.from_environment()

        assert config.environment is Environment.TESTING
        assert config.persistence.backend == "sql"
        assert config.logging.level == "DEBUG"
        assert config.hashing.rounds == 2000


class TestConfigurator:

    def test_lazy_configuration(self, monkeypatch):
        for name in ("SMARTMODEL_ENV", "SMARTMODEL_DATABASE_URL", "SMARTMODEL_LOG_LEVEL", "SMARTMODEL_HASH_ROUNDS"):
            monkeypatch.delenv(name, raising=False)
        reset_smartmodel()

        assert isinstance(get_backend(), MemoryRepo)
        assert get_config().environment is Environment.DEVELOPMENT
        assert get_hasher().rounds == 260000

    def test_sql_backend_from_config(self):
        config = SmartModelConfig.from_dict({
            "environment": "testing",
            "persistence": {"backend": "sql", "database_url": "sqlite://"},
        })

        configure_smartmodel(config)

        assert isinstance(get_backend(), SQLModelBackend)

    def test_unknown_backend(self):
        config = SmartModelConfig.from_dict({"environment": "testing", "persistence": {"backend": "redis"}})

        with pytest.raises(ValueError):
            configure_smartmodel(config)

    def test_custom_messages_reach_the_factory(self):
        config = SmartModelConfig.from_dict({
            "environment": "testing",
            "validation": {"custom_messages": {"required": "Needed."}},
        })
        configure_smartmodel(config, backend=MemoryRepo())

        validator = get_validation_factory().make({}, {"name": "required"})

        assert validator.messages().first("name") == "Needed."

    def test_logging_level_applied(self):
        configure_smartmodel(SmartModelConfig.from_dict({"environment": "testing", "logging": {"level": "ERROR"}}))

        assert logging.getLogger("smartmodel").level == logging.ERROR
