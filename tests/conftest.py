"""
Shared fixtures for the SmartModel test suite.
"""

import pytest

from smartmodel import Environment, MemoryRepo, SmartModelConfig, configure_smartmodel, reset_smartmodel


@pytest.fixture(autouse=True)
def memory_backend():
    """Give every test a fresh in-memory store and testing configuration."""
    backend = MemoryRepo()
    configure_smartmodel(SmartModelConfig.for_environment(Environment.TESTING), backend=backend)

    yield backend

    reset_smartmodel()
