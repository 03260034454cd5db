"""Utilidades de prueba para distritos y relojes.

Test helpers for districts and clocks.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from votewatch.core.models import District, DistrictStatus

START = datetime(2026, 11, 3, 8, 0, tzinfo=timezone.utc)


class ManualClock:
    """Reloj controlado por la prueba. / Test-controlled clock."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(0)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        self.now = self.now + self.step
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_district(
    district_id: int = 1,
    *,
    votes: int = 0,
    registered_voters: int = 1000,
    base_vote_rate: int = 100,
    candidate_votes: dict | None = None,
    vote_velocity: float = 0.0,
    status: DistrictStatus = DistrictStatus.ACTIVE,
    last_update: datetime = START,
) -> District:
    """Distrito de prueba; por defecto todos los votos van al candidato A.

    English: Test district; by default every vote belongs to candidate A.
    """
    if candidate_votes is None:
        candidate_votes = {"A": votes, "B": 0, "C": 0}
    return District(
        district_id=district_id,
        name=f"District {district_id}",
        registered_voters=registered_voters,
        base_vote_rate=base_vote_rate,
        last_update=last_update,
        votes=votes,
        candidate_votes=dict(candidate_votes),
        vote_velocity=vote_velocity,
        status=status,
    )
