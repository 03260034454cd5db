"""Motor de simulación de votos por tick.

Genera incrementos normales o con anomalía inyectada, los reparte entre los
candidatos vigentes y aplica el techo de electores inscritos.

English:
    Per-tick vote simulation engine. Generates ordinary or anomaly-injected
    increments, splits them across the current candidates and enforces the
    registered-voter ceiling.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from votewatch.config import SimulationSettings
from votewatch.core.models import AnomalyKind, Candidate, District, DistrictStatus
from votewatch.errors import ComputationError
from votewatch.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]

ANOMALY_MULTIPLIERS: Dict[AnomalyKind, int] = {
    AnomalyKind.HIGH_TURNOUT: 5,
    AnomalyKind.SUSPICIOUS_RATE: 8,
    AnomalyKind.IMBALANCED: 3,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VoteIncrement:
    """Incremento calculado para un distrito en un tick.

    English: Increment computed for one district in one tick.
    """

    raw: int
    per_candidate: Dict[str, int]
    anomaly: Optional[AnomalyKind] = None

    @property
    def applied(self) -> int:
        return sum(self.per_candidate.values())


class VoteSimulationEngine:
    """Avanza todos los distritos exactamente un tick.

    English:
        Advances every district by exactly one tick. Randomness and time are
        injected so tests can force specific branches.
    """

    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.settings = settings or SimulationSettings()
        self.rng = rng or random.Random(self.settings.seed)
        self.clock = clock or _utcnow

    # ── incrementos / increments ─────────────────────────────────────────

    def generate_vote_increment(self, base_rate: float) -> int:
        """``max(1, round(base * (1 + U(-v/2, v/2))))``."""
        half = self.settings.vote_variance / 2
        variation = 1 + self.rng.uniform(-half, half)
        value = base_rate * variation
        if not math.isfinite(value):
            raise ComputationError(f"Non-finite vote increment from base rate {base_rate}")
        return max(1, round(value))

    def draw_anomaly(self) -> Optional[AnomalyKind]:
        """Ensayo de Bernoulli y elección uniforme del tipo de anomalía.

        English:
            Bernoulli trial followed by a uniform pick of the anomaly kind.
        """
        if self.rng.random() >= self.settings.anomaly_injection_rate:
            return None
        return self.rng.choice(list(self.settings.anomaly_kinds))

    def random_split(self, candidate_ids: Sequence[str]) -> Dict[str, float]:
        """Reparto proporcional aleatorio que suma exactamente 1.0.

        English:
            Randomized proportional split summing to 1.0: every candidate but
            the last takes a bounded random share of what remains, the last
            takes the rest, then all shares are normalised by their sum.
        """
        if not candidate_ids:
            raise ComputationError("Cannot split votes across zero candidates")
        shares: Dict[str, float] = {}
        remaining = 1.0
        last_index = len(candidate_ids) - 1
        for index, candidate_id in enumerate(candidate_ids):
            if index == last_index:
                shares[candidate_id] = remaining
            else:
                portion = self.rng.random() * remaining * self.settings.split_max_share
                shares[candidate_id] = portion
                remaining -= portion
        total = sum(shares.values())
        if not math.isfinite(total) or total <= 0:
            raise ComputationError(f"Degenerate vote split total: {total}")
        return {candidate_id: share / total for candidate_id, share in shares.items()}

    def compute_increment(
        self,
        district: District,
        candidate_ids: Sequence[str],
        anomaly: Optional[AnomalyKind] = None,
    ) -> VoteIncrement:
        """Incremento bruto y reparto redondeado por candidato.

        La suma redondeada puede diferir del bruto; esa deriva se conserva.

        English:
            Raw increment plus rounded per-candidate split. The rounded sum
            may drift from the raw increment; the drift is kept as is.
        """
        if anomaly is None:
            raw = self.generate_vote_increment(district.base_vote_rate)
        else:
            raw = self.generate_vote_increment(district.base_vote_rate * ANOMALY_MULTIPLIERS[anomaly])

        if anomaly is AnomalyKind.IMBALANCED:
            if not candidate_ids:
                raise ComputationError("Cannot concentrate votes without candidates")
            per_candidate = {candidate_id: 0 for candidate_id in candidate_ids}
            per_candidate[candidate_ids[0]] = raw
            return VoteIncrement(raw=raw, per_candidate=per_candidate, anomaly=anomaly)

        split = self.random_split(candidate_ids)
        per_candidate = {candidate_id: round(raw * share) for candidate_id, share in split.items()}
        return VoteIncrement(raw=raw, per_candidate=per_candidate, anomaly=anomaly)

    # ── avance / advance ─────────────────────────────────────────────────

    def advance_district(
        self,
        district: District,
        candidate_ids: Sequence[str],
        now: datetime,
        force_anomaly: Optional[AnomalyKind] = None,
    ) -> District:
        """Avanza un distrito; nunca muta la entrada.

        English:
            Advance one district; the input is never mutated.
        """
        if district.status is DistrictStatus.CLOSED:
            return district.copy()

        anomaly = force_anomaly if force_anomaly is not None else self.draw_anomaly()
        increment = self.compute_increment(district, candidate_ids, anomaly)

        ceiling = district.registered_voters * self.settings.overflow_tolerance
        prospective = district.votes + max(increment.raw, increment.applied)
        if increment.anomaly is None and prospective > ceiling:
            logger.info(
                "district_closed",
                district_id=district.district_id,
                votes=district.votes,
                ceiling=ceiling,
            )
            return district.copy(status=DistrictStatus.CLOSED)

        candidate_votes = {
            candidate_id: district.candidate_votes.get(candidate_id, 0)
            + increment.per_candidate.get(candidate_id, 0)
            for candidate_id in candidate_ids
        }
        elapsed_minutes = (now - district.last_update).total_seconds() / 60
        velocity = increment.raw / elapsed_minutes if elapsed_minutes > 0 else 0.0
        if not math.isfinite(velocity):
            raise ComputationError(f"Non-finite vote velocity for district {district.district_id}")

        if increment.anomaly is not None:
            logger.debug(
                "anomaly_injected",
                district_id=district.district_id,
                kind=increment.anomaly.value,
                increment=increment.raw,
            )
        return district.copy(
            votes=sum(candidate_votes.values()),
            candidate_votes=candidate_votes,
            vote_velocity=velocity,
            last_update=now,
        )

    def tick(
        self,
        districts: Sequence[District],
        candidates: Sequence[Candidate],
        *,
        force_anomaly: Optional[AnomalyKind] = None,
    ) -> List[District]:
        """Un paso de simulación sobre todos los distritos.

        Un error en un distrito se registra y ese distrito conserva su estado
        previo; los demás continúan.

        English:
            One simulation step across every district. A failure in one
            district is logged and that district keeps its prior state; the
            others proceed normally.
        """
        candidate_ids = [candidate.candidate_id for candidate in candidates]
        now = self.clock()
        updated: List[District] = []
        for district in districts:
            try:
                updated.append(self.advance_district(district, candidate_ids, now, force_anomaly))
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "district_tick_failed",
                    district_id=district.district_id,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                updated.append(district.copy())
        return updated
