"""Regla de participación imposible o atípica.

Impossible or unusual turnout rule.
"""

from __future__ import annotations

from typing import List, Sequence

from votewatch.core.models import Anomaly, AnomalyType, District, VoteHistoryEntry
from votewatch.core.rules.registry import rule
from votewatch.core.stats import detect_turnout_anomalies


@rule(
    name="Turnout Rate",
    anomaly_type=AnomalyType.TURNOUT_RATE,
    description="Participación >100% o con |z| fuera de umbral entre distritos.",
    config_key="turnout_rate",
)
def apply(districts: Sequence[District], history: Sequence[VoteHistoryEntry], config: dict) -> List[Anomaly]:
    """
    Participación por distrito contra el resto de distritos.
    (Per-district turnout against every other district.)

    Args:
        districts: Instantánea vigente. (Current snapshot.)
        history: No se usa. (Unused.)
        config: Sección ``rules.turnout_rate``. (``rules.turnout_rate`` section.)

    Returns:
        Lista de anomalías (vacía si todo normal). (Anomalies, empty if normal.)
    """
    return detect_turnout_anomalies(districts, z_threshold=float(config.get("z_threshold", 3.0)))
