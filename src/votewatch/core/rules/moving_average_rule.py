"""Regla de desvío contra la media móvil de incrementos por distrito.

Moving-average deviation rule over per-district increments.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

from votewatch.core.models import Anomaly, AnomalyType, ChartDataPoint, District, VoteHistoryEntry
from votewatch.core.rules.registry import rule
from votewatch.core.stats import detect_moving_average_anomalies


def district_increments(
    district_id: int, history: Sequence[VoteHistoryEntry]
) -> List[ChartDataPoint]:
    """Serie de incrementos de votos por tick para un distrito.

    English:
        Per-tick vote increments for one district, derived from consecutive
        history entries that both recorded it. The series restarts whenever the
        candidate set changes, since a removal lowers the count by design.
    """
    points: List[ChartDataPoint] = []
    previous = None
    previous_candidates = None
    for entry in history:
        current = entry.per_district_votes.get(district_id)
        candidates = set(entry.candidate_totals)
        if candidates != previous_candidates:
            points = []
        elif current is not None and previous is not None:
            points.append(ChartDataPoint(value=float(current - previous), timestamp=entry.timestamp))
        previous = current
        previous_candidates = candidates
    return points


@rule(
    name="Moving Average",
    anomaly_type=AnomalyType.MOVING_AVERAGE,
    description="Incremento del último tick lejos de la media móvil del distrito.",
    config_key="moving_average",
)
def apply(districts: Sequence[District], history: Sequence[VoteHistoryEntry], config: dict) -> List[Anomaly]:
    """
    Evalúa solo el último incremento de cada distrito para no repetir
    alertas históricas en cada tick. (Only the latest increment of each
    district is evaluated so past points are not re-reported every tick.)
    """
    window_size = int(config.get("window_size", 5))
    threshold_pct = float(config.get("threshold_pct", 150.0))
    high_threshold_pct = float(config.get("high_threshold_pct", 200.0))

    results: List[Anomaly] = []
    for district in districts:
        points = district_increments(district.district_id, history)
        if len(points) < window_size:
            continue
        for anomaly in detect_moving_average_anomalies(
            points[-window_size:],
            window_size=window_size,
            threshold_pct=threshold_pct,
            high_threshold_pct=high_threshold_pct,
        ):
            if anomaly.district_id != window_size - 1:
                continue
            results.append(
                replace(
                    anomaly,
                    district_id=district.district_id,
                    district_name=district.name,
                    message=f"{district.name}: {anomaly.message}",
                )
            )
    return results
