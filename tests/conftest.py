"""Pytest configuration and fixtures."""

import pytest

from src.config import Settings
from src.triage.application import ComplaintTriageService, TriageEngine


@pytest.fixture
def settings():
    """Provide settings fixture."""
    return Settings()


@pytest.fixture
def engine():
    """Engine over the built-in rule table."""
    return TriageEngine()


@pytest.fixture
def service(engine):
    return ComplaintTriageService(engine)
