"""Errores del dominio VoteWatch.

English:
    VoteWatch domain errors.
"""

from __future__ import annotations


class VoteWatchError(Exception):
    """Error base de VoteWatch.

    English: Base VoteWatch error.
    """


class ValidationError(VoteWatchError):
    """Entrada inválida o mínimo de candidatos violado.

    English: Invalid input or candidate floor violated.
    """


class NotFoundError(VoteWatchError):
    """Identificador de candidato desconocido.

    English: Unknown candidate identifier.
    """

    def __init__(self, message: str, *, candidate_id: str | None = None) -> None:
        super().__init__(message)
        self.candidate_id = candidate_id


class ComputationError(VoteWatchError):
    """Fallo numérico inesperado dentro del tick de un distrito.

    English: Unexpected numeric failure within one district's tick.
    """
