"""Shared fixtures for the telemetry batcher tests."""

import os
import threading

import pytest

from telemetry_batcher.config import get_config_manager
from telemetry_batcher.reporter import registry


class RecordingExporter:
    """Export function that records every (batch, config) call."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, batch, config):
        assert batch, "exporter must never receive an empty batch"
        with self._lock:
            self.calls.append((list(batch), config))

    @property
    def batches(self):
        with self._lock:
            return [batch for batch, _ in self.calls]

    @property
    def events(self):
        return [event for batch in self.batches for event in batch]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from TELEMETRY_BATCHER_* variables, cached settings and registered reporters."""
    for key in list(os.environ):
        if key.startswith("TELEMETRY_BATCHER_"):
            monkeypatch.delenv(key, raising=False)
    get_config_manager().reset()
    yield
    get_config_manager().reset()
    for name in registry.registered_names():
        registry.unregister(name)


@pytest.fixture
def exporter():
    return RecordingExporter()
