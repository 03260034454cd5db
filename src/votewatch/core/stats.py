"""Funciones estadísticas puras para detección de anomalías.

Ninguna función muta sus entradas. Las poblaciones vacías o sin varianza
degeneran en "sin anomalía".

English:
    Pure statistical functions for anomaly detection. No function mutates its
    inputs. Empty or zero-variance populations degenerate to "no anomaly".
"""

from __future__ import annotations

import statistics
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from votewatch.core.models import Anomaly, AnomalyType, ChartDataPoint, District, Severity

SEVERITY_WEIGHTS = {Severity.HIGH: 10, Severity.MEDIUM: 5, Severity.LOW: 2}
MAX_ANOMALY_SCORE = 100


def _now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_z_score(value: float, data: Sequence[float]) -> float:
    """Z-score con desviación estándar poblacional.

    Devuelve 0 para datos vacíos o con desviación 0.

    English:
        Z-score using the population standard deviation. Returns 0 for empty
        data or zero deviation.
    """
    if not data:
        return 0.0
    mean = statistics.fmean(data)
    std_dev = statistics.pstdev(data, mu=mean)
    if std_dev == 0:
        return 0.0
    return (value - mean) / std_dev


def calculate_moving_average(data: Sequence[float], window_size: int = 5) -> List[Optional[float]]:
    """Media móvil simple; los primeros ``window_size - 1`` puntos son ``None``.

    English:
        Simple moving average; the first ``window_size - 1`` points are
        ``None``.
    """
    if window_size < 1:
        raise ValueError("window_size must be >= 1")
    averages: List[Optional[float]] = []
    for index in range(len(data)):
        if index < window_size - 1:
            averages.append(None)
            continue
        window = data[index - window_size + 1 : index + 1]
        averages.append(sum(window) / window_size)
    return averages


def detect_z_score_anomalies(
    points: Sequence[ChartDataPoint],
    threshold: float = 2.5,
    high_threshold: float = 3.0,
) -> List[Anomaly]:
    """Marca puntos con |z| por encima del umbral.

    El ``district_id`` de cada anomalía es el índice del punto.

    English:
        Flag points whose |z| exceeds the threshold. Each anomaly's
        ``district_id`` is the point index.
    """
    values = [point.value for point in points]
    anomalies: List[Anomaly] = []
    for index, point in enumerate(points):
        z_score = calculate_z_score(point.value, values)
        if abs(z_score) <= threshold:
            continue
        anomalies.append(
            Anomaly(
                district_id=index,
                anomaly_type=AnomalyType.Z_SCORE,
                severity=Severity.HIGH if abs(z_score) > high_threshold else Severity.MEDIUM,
                message=f"Z-score anomaly detected: {z_score:.2f} standard deviations from mean",
                timestamp=point.timestamp or _now(),
                z_score=z_score,
            )
        )
    return anomalies


def detect_moving_average_anomalies(
    points: Sequence[ChartDataPoint],
    window_size: int = 5,
    threshold_pct: float = 150.0,
    high_threshold_pct: float = 200.0,
) -> List[Anomaly]:
    """Desvíos porcentuales respecto de la media móvil.

    English:
        Percent deviations from the moving average. Points without a moving
        average, or with a zero average, are never flagged.
    """
    values = [point.value for point in points]
    averages = calculate_moving_average(values, window_size)
    anomalies: List[Anomaly] = []
    for index, (point, average) in enumerate(zip(points, averages)):
        if average is None or average == 0:
            continue
        deviation_pct = abs(point.value - average) / average * 100
        if deviation_pct <= threshold_pct:
            continue
        anomalies.append(
            Anomaly(
                district_id=index,
                anomaly_type=AnomalyType.MOVING_AVERAGE,
                severity=Severity.HIGH if deviation_pct > high_threshold_pct else Severity.MEDIUM,
                message=f"Moving average deviation: {deviation_pct:.1f}% from trend",
                timestamp=point.timestamp or _now(),
                deviation_percent=deviation_pct,
                moving_average_value=average,
            )
        )
    return anomalies


def detect_turnout_anomalies(
    districts: Sequence[District],
    z_threshold: float = 3.0,
    timestamp: Optional[datetime] = None,
) -> List[Anomaly]:
    """Participación imposible (>100%) o atípica (|z| > umbral).

    English:
        Impossible (>100%) or statistically unusual (|z| > threshold)
        turnout. Checked in that order; a district yields at most one
        turnout anomaly.
    """
    timestamp = timestamp or _now()
    rates = [district.turnout_rate for district in districts]
    anomalies: List[Anomaly] = []
    for district, rate in zip(districts, rates):
        z_score = calculate_z_score(rate, rates)
        if rate > 100:
            anomalies.append(
                Anomaly(
                    district_id=district.district_id,
                    district_name=district.name,
                    anomaly_type=AnomalyType.TURNOUT_RATE,
                    severity=Severity.HIGH,
                    message=f"Impossible turnout rate: {rate:.1f}% (exceeds 100%)",
                    timestamp=timestamp,
                    turnout_rate_percent=rate,
                    z_score=z_score,
                )
            )
        elif abs(z_score) > z_threshold:
            label = "abnormally high" if z_score > 0 else "abnormally low"
            anomalies.append(
                Anomaly(
                    district_id=district.district_id,
                    district_name=district.name,
                    anomaly_type=AnomalyType.TURNOUT_RATE,
                    severity=Severity.HIGH if z_score > 0 else Severity.MEDIUM,
                    message=f"Unusual turnout rate: {rate:.1f}% ({label})",
                    timestamp=timestamp,
                    turnout_rate_percent=rate,
                    z_score=z_score,
                )
            )
    return anomalies


def detect_vote_rate_anomalies(
    districts: Sequence[District],
    threshold_pct: float = 300.0,
    high_threshold_pct: float = 500.0,
    timestamp: Optional[datetime] = None,
) -> List[Anomaly]:
    """Velocidades de voto muy por encima de la media.

    English:
        Vote velocities far above the mean. Slow districts are never
        flagged; a zero mean yields no anomalies.
    """
    if not districts:
        return []
    timestamp = timestamp or _now()
    mean_rate = statistics.fmean(district.vote_velocity for district in districts)
    if mean_rate <= 0:
        return []
    anomalies: List[Anomaly] = []
    for district in districts:
        if district.vote_velocity <= mean_rate:
            continue
        deviation_pct = (district.vote_velocity - mean_rate) / mean_rate * 100
        if deviation_pct <= threshold_pct:
            continue
        anomalies.append(
            Anomaly(
                district_id=district.district_id,
                district_name=district.name,
                anomaly_type=AnomalyType.VOTE_RATE,
                severity=Severity.HIGH if deviation_pct > high_threshold_pct else Severity.MEDIUM,
                message=(
                    f"Suspicious vote rate: {district.vote_velocity:.0f} votes/min "
                    f"({deviation_pct:.0f}% above average)"
                ),
                timestamp=timestamp,
                vote_rate=district.vote_velocity,
                expected_rate=mean_rate,
                deviation_percent=deviation_pct,
            )
        )
    return anomalies


def calculate_anomaly_score(anomalies: Iterable[Anomaly]) -> int:
    """Puntaje 0-100: ``min(100, 10*altas + 5*medias + 2*bajas)``.

    English: 0-100 score weighted by severity.
    """
    score = sum(SEVERITY_WEIGHTS.get(anomaly.severity, 0) for anomaly in anomalies)
    return min(MAX_ANOMALY_SCORE, score)
