"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `src/votewatch/core/models.py`.
Modelos de dominio de la simulación: candidatos, distritos, historial,
anomalías y actividad del feed en vivo.

Componentes detectados:
  - Candidate
  - District
  - VoteHistoryEntry
  - Anomaly
  - Activity
  - OverallStats
  - ChartDataPoint

Notas:
- Mantener esta cabecera sincronizada con cambios estructurales del archivo.
- Los mapas de votos por candidato usan el id del candidato como clave.

======================== ENGLISH ========================
File: `src/votewatch/core/models.py`.
Simulation domain models: candidates, districts, history, anomalies and
live feed activity.

Detected components:
  - Candidate
  - District
  - VoteHistoryEntry
  - Anomaly
  - Activity
  - OverallStats
  - ChartDataPoint

Notes:
- Keep this header in sync with structural changes in the file.
- Per-candidate vote maps are keyed by candidate id.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, Mapping, Optional


class DistrictStatus(str, Enum):
    """Estado de un distrito durante la simulación.

    English: District status during the simulation.
    """

    ACTIVE = "active"
    CLOSED = "closed"


class AnomalyKind(str, Enum):
    """Tipos de anomalía inyectada por el generador.

    English: Anomaly kinds injected by the generator.
    """

    HIGH_TURNOUT = "high-turnout"
    SUSPICIOUS_RATE = "suspicious-rate"
    IMBALANCED = "imbalanced"


class AnomalyType(str, Enum):
    """Método de detección que produjo la anomalía.

    English: Detection method that produced the anomaly.
    """

    Z_SCORE = "z-score"
    MOVING_AVERAGE = "moving-average"
    TURNOUT_RATE = "turnout-rate"
    VOTE_RATE = "vote-rate"


class Severity(str, Enum):
    """Severidad de una anomalía.

    English: Anomaly severity.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ActivityAction(str, Enum):
    """Tipos de evento del feed de actividad.

    English: Activity feed event kinds.
    """

    VOTE_UPDATE = "vote-update"
    ANOMALY_DETECTED = "anomaly-detected"
    SYSTEM = "system"


@dataclass(frozen=True)
class Candidate:
    """Candidato registrado en la contienda.

    Attributes:
        candidate_id (str): Identificador estable.
        name (str): Nombre del candidato.
        party (str): Partido.
        color (str): Token de color para consumidores de presentación.

    English:
        Candidate registered in the race.
    """

    candidate_id: str
    name: str
    party: str
    color: str


@dataclass
class District:
    """Estado de simulación de un distrito.

    Attributes:
        district_id (int): Identificador fijo (1..N).
        name (str): Nombre del distrito.
        registered_voters (int): Electores inscritos.
        base_vote_rate (int): Votos base por tick.
        votes (int): Votos acumulados; igual a la suma de ``candidate_votes``.
        candidate_votes (Dict[str, int]): Votos por id de candidato.
        vote_velocity (float): Votos por minuto desde el tick anterior.
        last_update (datetime): Instante de la última actualización.
        status (DistrictStatus): Activo o cerrado.

    English:
        Simulation state for one district.
    """

    district_id: int
    name: str
    registered_voters: int
    base_vote_rate: int
    last_update: datetime
    votes: int = 0
    candidate_votes: Dict[str, int] = field(default_factory=dict)
    vote_velocity: float = 0.0
    status: DistrictStatus = DistrictStatus.ACTIVE

    @property
    def turnout_rate(self) -> float:
        """Participación en porcentaje. / Turnout as a percentage."""
        if self.registered_voters <= 0:
            return 0.0
        return self.votes / self.registered_voters * 100

    def copy(self, **changes) -> "District":
        """Copia con el mapa de votos duplicado.

        English:
            Copy with a duplicated vote map so callers never share it.
        """
        changes.setdefault("candidate_votes", dict(self.candidate_votes))
        return replace(self, **changes)


@dataclass(frozen=True)
class VoteHistoryEntry:
    """Punto inmutable de la serie temporal de votos.

    English: Immutable point of the vote time series.
    """

    timestamp: datetime
    candidate_totals: Mapping[str, int]
    total_votes: int
    per_district_votes: Mapping[int, int]


@dataclass(frozen=True)
class Anomaly:
    """Resultado transitorio de una pasada de análisis.

    Solo se completan los campos propios de ``anomaly_type``.

    English:
        Transient output of one analysis pass. Only the fields relevant to
        ``anomaly_type`` are populated.
    """

    district_id: int
    anomaly_type: AnomalyType
    severity: Severity
    message: str
    timestamp: datetime
    district_name: Optional[str] = None
    z_score: Optional[float] = None
    turnout_rate_percent: Optional[float] = None
    vote_rate: Optional[float] = None
    expected_rate: Optional[float] = None
    deviation_percent: Optional[float] = None
    moving_average_value: Optional[float] = None

    def with_district_name(self, name: str) -> "Anomaly":
        return replace(self, district_name=name)


@dataclass(frozen=True)
class Activity:
    """Entrada del feed de actividad.

    English: Activity feed entry.
    """

    activity_id: int
    timestamp: datetime
    district_name: str
    action: ActivityAction
    details: str


@dataclass(frozen=True)
class OverallStats:
    """Totales agregados de todos los distritos.

    English: Aggregated totals across all districts.
    """

    total_votes: int
    total_registered: int
    turnout_rate: float
    active_districts: int


@dataclass(frozen=True)
class ChartDataPoint:
    """Valor de una serie para los detectores genéricos.

    English: Series value consumed by the generic detectors.
    """

    value: float
    label: Optional[str] = None
    timestamp: Optional[datetime] = None
