"""Pruebas de las funciones estadísticas de detección.

Tests for the statistical detection functions.
"""

from __future__ import annotations

import math

import pytest
from sim_helpers import START, make_district

from votewatch.core.models import Anomaly, AnomalyType, ChartDataPoint, Severity
from votewatch.core.stats import (
    calculate_anomaly_score,
    calculate_moving_average,
    calculate_z_score,
    detect_moving_average_anomalies,
    detect_turnout_anomalies,
    detect_vote_rate_anomalies,
    detect_z_score_anomalies,
)


def _points(values):
    return [ChartDataPoint(value=float(value), timestamp=START) for value in values]


def _anomaly(severity: Severity, district_id: int = 1) -> Anomaly:
    return Anomaly(
        district_id=district_id,
        anomaly_type=AnomalyType.VOTE_RATE,
        severity=severity,
        message="test",
        timestamp=START,
    )


def test_z_score_uses_population_deviation():
    assert calculate_z_score(3, [1, 2, 3]) == pytest.approx(1 / math.sqrt(2 / 3))


@pytest.mark.parametrize("data", [[], [5, 5, 5]])
def test_z_score_degenerate_population_is_zero(data):
    assert calculate_z_score(5, data) == 0.0


def test_moving_average_pads_leading_points():
    assert calculate_moving_average([1, 2, 3, 4], window_size=2) == [None, 1.5, 2.5, 3.5]
    assert calculate_moving_average([1, 2], window_size=5) == [None, None]


def test_moving_average_rejects_empty_window():
    with pytest.raises(ValueError):
        calculate_moving_average([1, 2, 3], window_size=0)


def test_z_score_detector_grades_severity():
    medium = detect_z_score_anomalies(_points([10] * 7 + [100]))
    high = detect_z_score_anomalies(_points([10] * 10 + [100]))

    assert [(a.district_id, a.severity) for a in medium] == [(7, Severity.MEDIUM)]
    assert [(a.district_id, a.severity) for a in high] == [(10, Severity.HIGH)]
    assert high[0].z_score == pytest.approx(math.sqrt(10))


def test_z_score_detector_flat_series_is_quiet():
    assert detect_z_score_anomalies(_points([4] * 6)) == []
    assert detect_z_score_anomalies([]) == []


def test_moving_average_detector_grades_severity():
    medium = detect_moving_average_anomalies(_points([100, 100, 100, 100, 500]))
    high = detect_moving_average_anomalies(_points([100, 100, 100, 100, 800]))

    assert len(medium) == 1 and medium[0].severity is Severity.MEDIUM
    assert medium[0].moving_average_value == pytest.approx(180.0)
    assert len(high) == 1 and high[0].severity is Severity.HIGH
    assert high[0].deviation_percent == pytest.approx(560 / 240 * 100)
    assert high[0].district_id == 4


def test_moving_average_detector_skips_zero_average():
    assert detect_moving_average_anomalies(_points([0, 0, 0, 0, 0])) == []


def test_turnout_over_one_hundred_percent_is_high():
    districts = [make_district(1, votes=1100, registered_voters=1000)]

    [anomaly] = detect_turnout_anomalies(districts, timestamp=START)

    assert anomaly.anomaly_type is AnomalyType.TURNOUT_RATE
    assert anomaly.severity is Severity.HIGH
    assert anomaly.turnout_rate_percent == pytest.approx(110.0)
    assert "exceeds 100%" in anomaly.message


def test_ordinary_turnout_spread_is_quiet():
    districts = [
        make_district(1, votes=700, registered_voters=1000),
        make_district(2, votes=650, registered_voters=1000),
    ]

    assert detect_turnout_anomalies(districts) == []


def test_unusually_low_turnout_is_medium():
    districts = [make_district(i, votes=500, registered_voters=1000) for i in range(1, 11)]
    districts.append(make_district(11, votes=0, registered_voters=1000))

    [anomaly] = detect_turnout_anomalies(districts)

    assert anomaly.district_id == 11
    assert anomaly.severity is Severity.MEDIUM
    assert "abnormally low" in anomaly.message


def test_unusually_high_turnout_is_high():
    districts = [make_district(i, votes=500, registered_voters=1000) for i in range(1, 11)]
    districts.append(make_district(11, votes=900, registered_voters=1000))

    [anomaly] = detect_turnout_anomalies(districts)

    assert anomaly.district_id == 11
    assert anomaly.severity is Severity.HIGH
    assert "abnormally high" in anomaly.message


def test_vote_rate_outlier_is_high():
    districts = [make_district(i, vote_velocity=1.0) for i in range(1, 8)]
    districts.append(make_district(8, vote_velocity=100.0))

    [anomaly] = detect_vote_rate_anomalies(districts, timestamp=START)

    assert anomaly.district_id == 8
    assert anomaly.severity is Severity.HIGH
    assert anomaly.expected_rate == pytest.approx(107 / 8)
    assert anomaly.timestamp == START


def test_vote_rate_zero_mean_is_quiet():
    districts = [make_district(i, vote_velocity=0.0) for i in range(1, 4)]

    assert detect_vote_rate_anomalies(districts) == []
    assert detect_vote_rate_anomalies([]) == []


def test_anomaly_score_weights_and_cap():
    assert calculate_anomaly_score([]) == 0
    assert calculate_anomaly_score(
        [_anomaly(Severity.HIGH), _anomaly(Severity.MEDIUM), _anomaly(Severity.LOW)]
    ) == 17
    assert calculate_anomaly_score([_anomaly(Severity.HIGH)] * 11) == 100
