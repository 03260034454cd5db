"""Agregador de historial de votos y buffer circular acotado.

Vote history aggregator and bounded ring buffer.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Deque, List, Optional, Sequence

from votewatch.core.models import Candidate, District, VoteHistoryEntry


def fold(
    districts: Sequence[District],
    candidates: Sequence[Candidate],
    timestamp: datetime,
) -> VoteHistoryEntry:
    """Pliega una instantánea de distritos en una entrada de historial.

    Solo se totalizan candidatos presentes en el registro al momento del
    pliegue.

    English:
        Fold a district snapshot into a history entry. Totals are kept only
        for candidates registered at fold time.
    """
    candidate_totals = {candidate.candidate_id: 0 for candidate in candidates}
    per_district_votes = {}
    for district in districts:
        for candidate_id in candidate_totals:
            candidate_totals[candidate_id] += district.candidate_votes.get(candidate_id, 0)
        per_district_votes[district.district_id] = district.votes
    return VoteHistoryEntry(
        timestamp=timestamp,
        candidate_totals=candidate_totals,
        total_votes=sum(per_district_votes.values()),
        per_district_votes=per_district_votes,
    )


class HistoryBuffer:
    """Historial FIFO con las ``max_entries`` entradas más recientes.

    English:
        FIFO history keeping the ``max_entries`` most recent entries.
    """

    def __init__(self, max_entries: int = 50) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._entries: Deque[VoteHistoryEntry] = deque(maxlen=max_entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: VoteHistoryEntry) -> None:
        self._entries.append(entry)

    def entries(self) -> List[VoteHistoryEntry]:
        return list(self._entries)

    def latest(self) -> Optional[VoteHistoryEntry]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()
