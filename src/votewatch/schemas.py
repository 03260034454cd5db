"""Esquemas Pydantic para validar entradas de candidatos y distritos.

Pydantic schemas to validate candidate and district inputs.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from votewatch import errors

DEFAULT_CANDIDATE_COLOR = "#6b7280"


class CandidateInput(BaseModel):
    """Datos editables de un candidato (sin id).

    English: Editable candidate data (id excluded).
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    party: str = Field(min_length=1)
    color: str = Field(default=DEFAULT_CANDIDATE_COLOR)

    @field_validator("name", "party")
    @classmethod
    def strip_text(cls, value: str) -> str:
        """Normaliza texto eliminando espacios y valida no vacío.

        English:
            Normalize text by trimming whitespace and validate non-empty.
        """
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Field cannot be empty")
        return cleaned

    @field_validator("color", mode="before")
    @classmethod
    def default_blank_color(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_CANDIDATE_COLOR
        return value


class DistrictSeed(BaseModel):
    """Configuración base de un distrito.

    English: Base configuration of a district.
    """

    id: int = Field(ge=1)
    name: str = Field(min_length=1)
    registered_voters: int = Field(gt=0)
    base_vote_rate: int = Field(gt=0)

    @model_validator(mode="after")
    def rate_below_registered(self) -> "DistrictSeed":
        """base_vote_rate must not exceed registered_voters."""
        if self.base_vote_rate > self.registered_voters:
            raise ValueError(
                f"base_vote_rate ({self.base_vote_rate}) exceeds "
                f"registered_voters ({self.registered_voters})"
            )
        return self


def parse_candidate_input(data: Mapping[str, Any] | CandidateInput) -> CandidateInput:
    """Valida datos de candidato y traduce errores de pydantic.

    English:
        Validate candidate data, translating pydantic errors into the domain
        ``ValidationError``.
    """
    if isinstance(data, CandidateInput):
        return data
    if not isinstance(data, Mapping):
        raise errors.ValidationError("Candidate data must be a mapping")
    try:
        return CandidateInput.model_validate(dict(data))
    except ValidationError as exc:
        raise errors.ValidationError(f"Invalid candidate data: {exc}") from exc
