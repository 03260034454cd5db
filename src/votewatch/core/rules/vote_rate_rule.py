"""Regla de velocidad de voto sospechosa.

Suspicious vote velocity rule.
"""

from __future__ import annotations

from typing import List, Sequence

from votewatch.core.models import Anomaly, AnomalyType, District, VoteHistoryEntry
from votewatch.core.rules.registry import rule
from votewatch.core.stats import detect_vote_rate_anomalies


@rule(
    name="Vote Rate",
    anomaly_type=AnomalyType.VOTE_RATE,
    description="Velocidad de voto muy por encima de la media de distritos.",
    config_key="vote_rate",
)
def apply(districts: Sequence[District], history: Sequence[VoteHistoryEntry], config: dict) -> List[Anomaly]:
    return detect_vote_rate_anomalies(
        districts,
        threshold_pct=float(config.get("threshold_pct", 300.0)),
        high_threshold_pct=float(config.get("high_threshold_pct", 500.0)),
    )
