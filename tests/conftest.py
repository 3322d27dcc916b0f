"""Pytest configuration and fixtures for grid pursuit tests."""

import pytest

from grid_pursuit.config import EngineConfig
from grid_pursuit.model.engine import SimulationEngine


@pytest.fixture
def events():
    """Collects every event an engine emits."""
    return []


@pytest.fixture
def make_engine(events):
    """Build an engine from symbol rows, recording its events."""
    def _make(rows, **kwargs):
        return SimulationEngine.from_layout(rows, observers=[events.append], **kwargs)
    return _make


@pytest.fixture
def seeded_engine(events):
    """A randomized 12x12 engine with a fixed seed."""
    return SimulationEngine(EngineConfig(seed=42), observers=[events.append])
