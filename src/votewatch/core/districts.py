"""Tabla base de distritos y almacén de estado por distrito.

Base district table and per-district state store.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from votewatch.core.models import District
from votewatch.schemas import DistrictSeed

logger = logging.getLogger(__name__)

DISTRICTS: tuple[DistrictSeed, ...] = (
    DistrictSeed(id=1, name="District 1 - Downtown", registered_voters=45000, base_vote_rate=120),
    DistrictSeed(id=2, name="District 2 - Northside", registered_voters=38000, base_vote_rate=95),
    DistrictSeed(id=3, name="District 3 - Eastville", registered_voters=52000, base_vote_rate=140),
    DistrictSeed(id=4, name="District 4 - Westport", registered_voters=41000, base_vote_rate=105),
    DistrictSeed(id=5, name="District 5 - Southend", registered_voters=35000, base_vote_rate=88),
    DistrictSeed(id=6, name="District 6 - Central", registered_voters=47000, base_vote_rate=125),
    DistrictSeed(id=7, name="District 7 - Riverside", registered_voters=29000, base_vote_rate=75),
    DistrictSeed(id=8, name="District 8 - Hilltop", registered_voters=33000, base_vote_rate=85),
)


def initialize_districts(
    candidate_ids: Iterable[str],
    seeds: Sequence[DistrictSeed] = DISTRICTS,
    now: Optional[datetime] = None,
) -> List[District]:
    """Crea el estado inicial: cero votos y estado activo.

    English:
        Build the initial state: zero votes, every candidate at 0, active.
    """
    ids = list(candidate_ids)
    timestamp = now or datetime.now(timezone.utc)
    return [
        District(
            district_id=seed.id,
            name=seed.name,
            registered_voters=seed.registered_voters,
            base_vote_rate=seed.base_vote_rate,
            last_update=timestamp,
            candidate_votes={candidate_id: 0 for candidate_id in ids},
        )
        for seed in seeds
    ]


class DistrictStore:
    """Mantiene la instantánea vigente de todos los distritos.

    English:
        Holds the current snapshot of every district.
    """

    def __init__(self, seeds: Sequence[DistrictSeed] = DISTRICTS) -> None:
        self.seeds = tuple(seeds)
        self._districts: List[District] = []

    def __len__(self) -> int:
        return len(self._districts)

    def initialize(self, candidate_ids: Iterable[str], now: Optional[datetime] = None) -> List[District]:
        self._districts = initialize_districts(candidate_ids, self.seeds, now=now)
        return self.snapshot()

    def snapshot(self) -> List[District]:
        """Copias independientes de los distritos. / Independent district copies."""
        return [district.copy() for district in self._districts]

    def replace(self, districts: Sequence[District]) -> None:
        self._districts = list(districts)

    def get(self, district_id: int) -> District:
        for district in self._districts:
            if district.district_id == district_id:
                return district.copy()
        raise KeyError(district_id)

    def attach_candidate(self, candidate_id: str) -> None:
        """Agrega una entrada en cero en cada distrito; ``votes`` no cambia.

        English:
            Add a zero entry to every district; ``votes`` is unchanged.
        """
        updated = []
        for district in self._districts:
            votes = dict(district.candidate_votes)
            votes.setdefault(candidate_id, 0)
            updated.append(district.copy(candidate_votes=votes))
        self._districts = updated

    def detach_candidate(self, candidate_id: str) -> None:
        """Quita la entrada del candidato y descuenta sus votos del total.

        English:
            Drop the candidate's entry and subtract its votes from the total,
            keeping ``sum(candidate_votes) == votes``.
        """
        updated = []
        for district in self._districts:
            votes = dict(district.candidate_votes)
            removed = votes.pop(candidate_id, 0)
            updated.append(district.copy(candidate_votes=votes, votes=district.votes - removed))
        self._districts = updated
        logger.debug("candidate_detached candidate_id=%s districts=%d", candidate_id, len(updated))
