# File: tests/conftest.py

import random

import pytest

from transcription_sim.config import Settings
from transcription_sim.jobs.lifecycle import InProcessLifecycleEngine
from transcription_sim.jobs.randomizer import OutcomeRandomizer


@pytest.fixture
def randomizer():
    """Seeded randomizer that never slows anything down."""
    return OutcomeRandomizer(slow_response_rate=0.0, rng=random.Random(1234))


@pytest.fixture
def make_engine(randomizer):
    """Builds an engine with a short tick so lifecycles finish in well under a second."""

    def _make(**overrides):
        params = {
            "min_processing_time_ms": 100,
            "max_processing_time_ms": 100,
            "processing_failure_rate": 0.0,
            "tick_seconds": 0.01,
        }
        params.update(overrides)
        return InProcessLifecycleEngine(randomizer, **params)

    return _make


@pytest.fixture
def quiet_settings():
    """Settings with every boundary fault disabled and instant processing."""
    return Settings(
        upload_failure_rate=0.0,
        timeout_rate=0.0,
        processing_failure_rate=0.0,
        min_processing_time_ms=0,
        max_processing_time_ms=0,
        slow_response_rate=0.0,
        timeout_delay_seconds=0.0,
        tick_seconds=0.01,
    )
