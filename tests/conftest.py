"""Fixtures compartidas de simulación.

Shared simulation fixtures.
"""

from __future__ import annotations

import random
from datetime import timedelta

import pytest
from sim_helpers import ManualClock

from votewatch.config import MonitorSettings, SimulationSettings


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def minute_clock() -> ManualClock:
    """Avanza un minuto por lectura. / Advances one minute per reading."""
    return ManualClock(step=timedelta(minutes=1))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def no_anomaly_settings() -> SimulationSettings:
    return SimulationSettings(anomaly_injection_rate=0.0)


@pytest.fixture
def quiet_monitor_settings() -> MonitorSettings:
    """Sin anomalías inyectadas ni actividad aleatoria.

    English: No injected anomalies and no random activity.
    """
    return MonitorSettings(
        simulation={"anomaly_injection_rate": 0.0},
        retention={"vote_update_activity_rate": 0.0},
    )
