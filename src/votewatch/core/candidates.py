"""Registro de candidatos con altas, ediciones y bajas.

Candidate registry supporting add, update and remove.
"""

from __future__ import annotations

import logging
from itertools import count
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from votewatch.core.models import Candidate
from votewatch.errors import NotFoundError, ValidationError
from votewatch.schemas import CandidateInput, parse_candidate_input

logger = logging.getLogger(__name__)

MIN_CANDIDATES = 2

DEFAULT_CANDIDATES: Tuple[Candidate, ...] = (
    Candidate("A", "Candidate A", "Blue Party", "#3b82f6"),
    Candidate("B", "Candidate B", "Red Party", "#ef4444"),
    Candidate("C", "Candidate C", "Green Party", "#10b981"),
)


class CandidateRegistry:
    """Conjunto mutable de candidatos en orden de inserción.

    El registro es la única fuente de ids válidos; la limpieza referencial de
    los mapas de votos la aplica ``DistrictStore``.

    English:
        Mutable, insertion-ordered candidate set. The registry is the single
        source of valid ids; referential cleanup of district vote maps is
        applied by ``DistrictStore``.
    """

    def __init__(self, candidates: Optional[Iterable[Candidate]] = None) -> None:
        self._candidates: Dict[str, Candidate] = {}
        self._sequence = count(1)
        for candidate in DEFAULT_CANDIDATES if candidates is None else candidates:
            if candidate.candidate_id in self._candidates:
                raise ValidationError(f"Duplicate candidate id: {candidate.candidate_id}")
            self._candidates[candidate.candidate_id] = candidate

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, candidate_id: object) -> bool:
        return candidate_id in self._candidates

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self.list())

    def _next_id(self) -> str:
        while True:
            candidate_id = f"C{next(self._sequence)}"
            if candidate_id not in self._candidates:
                return candidate_id

    def get(self, candidate_id: str) -> Candidate:
        try:
            return self._candidates[candidate_id]
        except KeyError:
            raise NotFoundError(
                f"Unknown candidate id: {candidate_id}", candidate_id=candidate_id
            ) from None

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._candidates)

    def list(self) -> Tuple[Candidate, ...]:
        """Snapshot consistente en orden de inserción.

        English:
            Consistent snapshot in insertion order; later CRUD calls do not
            affect a tuple already handed out.
        """
        return tuple(self._candidates.values())

    def add(self, candidate_data: Mapping[str, Any] | CandidateInput) -> Candidate:
        """Registra un candidato nuevo con id único.

        English:
            Register a new candidate under a fresh, unique id.
        """
        payload = parse_candidate_input(candidate_data)
        candidate = Candidate(
            candidate_id=self._next_id(),
            name=payload.name,
            party=payload.party,
            color=payload.color,
        )
        self._candidates[candidate.candidate_id] = candidate
        logger.info("candidate_added candidate_id=%s name=%s", candidate.candidate_id, candidate.name)
        return candidate

    def update(
        self, candidate_id: str, candidate_data: Mapping[str, Any] | CandidateInput
    ) -> Candidate:
        """Reemplaza nombre, partido y color; el id no cambia.

        English:
            Replace name, party and color in place; the id never changes.
        """
        self.get(candidate_id)
        payload = parse_candidate_input(candidate_data)
        updated = Candidate(
            candidate_id=candidate_id,
            name=payload.name,
            party=payload.party,
            color=payload.color,
        )
        self._candidates[candidate_id] = updated
        logger.info("candidate_updated candidate_id=%s", candidate_id)
        return updated

    def check_removable(self, candidate_id: str) -> Candidate:
        """Valida una baja sin modificar estado.

        English:
            Validate a removal without changing any state.
        """
        candidate = self.get(candidate_id)
        if len(self._candidates) - 1 < MIN_CANDIDATES:
            raise ValidationError(
                f"At least {MIN_CANDIDATES} candidates are required; "
                f"cannot remove {candidate_id}"
            )
        return candidate

    def remove(self, candidate_id: str) -> Candidate:
        candidate = self.check_removable(candidate_id)
        del self._candidates[candidate_id]
        logger.info("candidate_removed candidate_id=%s", candidate_id)
        return candidate
