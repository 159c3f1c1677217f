"""Shared fixtures: manual clock, seeded generator, scripted RNG, fixed wall clock."""

from datetime import datetime

import numpy as np
import pytest

from core.mission_controller import MissionController
from core.mission_history import InMemoryMissionHistory
from core.simulator import TelemetrySimulator
from simulation.clock import ManualClock

FIXED_NOW = datetime(2026, 10, 19, 9, 30, 0)


class ScriptedRandom:
    """Deterministic stand-in for ``numpy.random.Generator``.

    ``random`` pops from ``draws`` (0.99 once exhausted, i.e. no detection),
    ``uniform`` returns the midpoint of its band and ``integers(n)`` pops
    from ``indices`` (0 once exhausted)."""

    def __init__(self, draws=(), indices=()):
        self.draws = list(draws)
        self.indices = list(indices)

    def random(self):
        return self.draws.pop(0) if self.draws else 0.99

    def uniform(self, low, high):
        return (low + high) / 2.0

    def integers(self, low, high=None):
        if high is None:
            return self.indices.pop(0) if self.indices else 0
        return low + (high - low) // 2


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def simulator(clock, rng):
    return TelemetrySimulator(clock, rng=rng)


@pytest.fixture
def controller(simulator):
    return MissionController(simulator, history=InMemoryMissionHistory(), now=lambda: FIXED_NOW)


@pytest.fixture
def scripted_simulator(clock):
    """Factory for a simulator on the manual clock with a ScriptedRandom."""
    def build(draws=(), indices=()):
        return TelemetrySimulator(clock, rng=ScriptedRandom(draws, indices))
    return build


@pytest.fixture
def fixed_now():
    return FIXED_NOW
