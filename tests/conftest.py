"""Shared test fixtures — temporary registry files and a polling helper."""

from __future__ import annotations

import time

import pytest

from titan.processes.registry import WorkerRegistry


@pytest.fixture
def registry_path(tmp_path):
    return tmp_path / ".titan"


@pytest.fixture
def registry(registry_path):
    return WorkerRegistry(registry_path)


@pytest.fixture
def wait_for():
    def _wait(predicate, timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.05)
        return predicate()
    return _wait
