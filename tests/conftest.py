# tests/conftest.py

import os
from datetime import datetime, timezone

import pytest

from clustercost.core.builder import SnapshotBuilder
from clustercost.core.classifier import ClassifierConfig, EnvironmentClassifier
from clustercost.core.pricing import NodePriceLookup


@pytest.fixture(autouse=True)
def mock_settings_env_vars(monkeypatch):
    """
    Pytest fixture to isolate configuration from the real environment.

    This fixture runs automatically for every test (`autouse=True`), clearing
    every CLUSTERCOST_* variable so each test starts from the defaults.
    """
    for key in list(os.environ):
        if key.startswith("CLUSTERCOST_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def classifier():
    """Classifier configured with the agent's default heuristics."""
    return EnvironmentClassifier(
        ClassifierConfig(
            label_keys=["clustercost.io/environment"],
            production_label_values=["production", "prod"],
            nonprod_label_values=["nonprod", "staging", "dev", "test"],
            system_label_values=["system"],
            production_name_contains=["prod"],
            system_namespaces=["kube-system", "monitoring"],
        )
    )


@pytest.fixture
def builder(classifier):
    """Builder pricing m5.large at 0.1/h with a zero default."""
    return SnapshotBuilder("test-cluster", classifier, NodePriceLookup({"m5.large": 0.1}, 0.0))


@pytest.fixture
def now():
    return datetime(2026, 2, 8, 12, 0, 0, tzinfo=timezone.utc)
