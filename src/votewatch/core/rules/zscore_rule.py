"""Regla de Z-score sobre la velocidad de voto de cada distrito.

Z-score rule over each district's vote velocity.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

from votewatch.core.models import Anomaly, AnomalyType, ChartDataPoint, District, VoteHistoryEntry
from votewatch.core.rules.registry import rule
from votewatch.core.stats import detect_z_score_anomalies


@rule(
    name="Velocity Z-Score",
    anomaly_type=AnomalyType.Z_SCORE,
    description="Velocidad de voto a más de N desviaciones de la media.",
    config_key="z_score",
)
def apply(districts: Sequence[District], history: Sequence[VoteHistoryEntry], config: dict) -> List[Anomaly]:
    """
    Z-score de la velocidad de cada distrito frente a todos los distritos.
    (Z-score of each district's velocity against all districts.)

    Los detectores genéricos indexan por posición; aquí se traduce el índice
    al id del distrito. (Generic detectors index by position; the index is
    mapped back to the district id here.)
    """
    points = [
        ChartDataPoint(value=district.vote_velocity, label=district.name, timestamp=district.last_update)
        for district in districts
    ]
    anomalies = detect_z_score_anomalies(
        points,
        threshold=float(config.get("threshold", 2.5)),
        high_threshold=float(config.get("high_threshold", 3.0)),
    )
    results: List[Anomaly] = []
    for anomaly in anomalies:
        district = districts[anomaly.district_id]
        results.append(
            replace(
                anomaly,
                district_id=district.district_id,
                district_name=district.name,
                message=(
                    f"Vote velocity z-score {anomaly.z_score:.2f} "
                    f"({district.vote_velocity:.0f} votes/min)"
                ),
            )
        )
    return results
