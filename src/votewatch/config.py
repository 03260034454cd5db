# Config Module
# AUTO-DOC-INDEX
#
# ES: Índice rápido
#   1) Propósito del módulo
#   2) Componentes principales
#   3) Puntos de extensión
#
# EN: Quick index
#   1) Module purpose
#   2) Main components
#   3) Extension points
#
# Secciones / Sections:
#   - Configuración / Configuration
#   - Lógica principal / Core logic
#   - Integraciones / Integrations

"""Configuración validada de la simulación y de los analizadores.

Validated configuration for the simulation and the analyzers.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from votewatch.core.models import AnomalyKind
from votewatch.schemas import DistrictSeed

logger = logging.getLogger(__name__)

_ENV_PATH = Path(".env")
_ENV_LOCAL_PATH = Path(".env.local")
load_dotenv(_ENV_PATH, override=False)
load_dotenv(_ENV_LOCAL_PATH, override=False)

CONFIG_PATH = Path(os.getenv("VOTEWATCH_CONFIG", "config/votewatch.yaml"))

TICK_INTERVALS: tuple[int, ...] = (1000, 2000, 5000)


class SimulationSettings(BaseModel):
    """Parámetros del generador de votos.

    English: Vote generator parameters.
    """

    tick_interval_ms: int = 2000
    anomaly_injection_rate: float = Field(default=0.05, ge=0.0, le=1.0)
    anomaly_kinds: List[AnomalyKind] = Field(
        default_factory=lambda: [AnomalyKind.HIGH_TURNOUT, AnomalyKind.SUSPICIOUS_RATE],
        min_length=1,
    )
    vote_variance: float = Field(default=0.3, ge=0.0, lt=2.0)
    overflow_tolerance: float = Field(default=1.02, ge=1.0)
    # Fracción máxima del remanente por candidato. / Max share of the remainder per candidate.
    split_max_share: float = Field(default=0.7, gt=0.0, le=1.0)
    seed: Optional[int] = None

    @field_validator("tick_interval_ms")
    @classmethod
    def _validate_tick_interval(cls, value: int) -> int:
        if value not in TICK_INTERVALS:
            raise ValueError(f"tick_interval_ms must be one of {TICK_INTERVALS}, got {value}")
        return value


class RetentionSettings(BaseModel):
    """Límites de los buffers circulares. / Ring buffer limits."""

    max_history_entries: int = Field(default=50, ge=1)
    max_activities: int = Field(default=100, ge=1)
    dedup_window_seconds: float = Field(default=30.0, ge=0.0)
    vote_update_activity_rate: float = Field(default=0.3, ge=0.0, le=1.0)


class ZScoreRuleSettings(BaseModel):
    enabled: bool = True
    threshold: float = Field(default=2.5, gt=0.0)
    high_threshold: float = Field(default=3.0, gt=0.0)


class MovingAverageRuleSettings(BaseModel):
    enabled: bool = True
    window_size: int = Field(default=5, ge=1)
    threshold_pct: float = Field(default=150.0, gt=0.0)
    high_threshold_pct: float = Field(default=200.0, gt=0.0)


class TurnoutRuleSettings(BaseModel):
    enabled: bool = True
    z_threshold: float = Field(default=3.0, gt=0.0)


class VoteRateRuleSettings(BaseModel):
    enabled: bool = True
    threshold_pct: float = Field(default=300.0, gt=0.0)
    high_threshold_pct: float = Field(default=500.0, gt=0.0)


class RulesSettings(BaseModel):
    """Umbrales por regla; aquí se modifican los números de cada detector.

    English: Per-rule thresholds; this is where detector numbers change.
    """

    global_enabled: bool = True
    z_score: ZScoreRuleSettings = Field(default_factory=ZScoreRuleSettings)
    moving_average: MovingAverageRuleSettings = Field(default_factory=MovingAverageRuleSettings)
    turnout_rate: TurnoutRuleSettings = Field(default_factory=TurnoutRuleSettings)
    vote_rate: VoteRateRuleSettings = Field(default_factory=VoteRateRuleSettings)

    def for_rule(self, config_key: str) -> Dict[str, Any]:
        section = getattr(self, config_key, None)
        if isinstance(section, BaseModel):
            return section.model_dump()
        return {}


class LoggingSettings(BaseModel):
    level: str = "INFO"
    file: Optional[Path] = None
    json_logs: bool = Field(default=False, alias="json")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


class MonitorSettings(BaseSettings):
    """Configuración completa; variables ``VOTEWATCH_`` y archivo .env.

    English:
        Full configuration; ``VOTEWATCH_`` environment variables and .env
        file, overridden by explicit (YAML) values.
    """

    model_config = SettingsConfigDict(
        env_prefix="VOTEWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    retention: RetentionSettings = Field(default_factory=RetentionSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    districts: Optional[List[DistrictSeed]] = None

    @field_validator("districts")
    @classmethod
    def _unique_district_ids(cls, value: Optional[List[DistrictSeed]]) -> Optional[List[DistrictSeed]]:
        if value is None:
            return value
        if not value:
            raise ValueError("districts cannot be empty")
        ids = [seed.id for seed in value]
        if len(ids) != len(set(ids)):
            raise ValueError("district ids must be unique")
        return value


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"YAML syntax error in {path}: {exc}") from exc
    if payload is None:
        logger.warning("config_empty path=%s", path)
        return {}
    if not isinstance(payload, dict):
        raise ValueError(f"Config file must be a YAML mapping: {path}")
    return payload


def load_config(path: Optional[Path | str] = None, *, required: bool = False) -> MonitorSettings:
    """Carga y valida configuración, fallando con detalle.

    English:
        Load and validate configuration, failing with details. A missing
        file yields defaults unless ``required`` is set.
    """
    resolved = Path(path) if path is not None else CONFIG_PATH
    payload: Dict[str, Any] = {}
    if resolved.exists():
        payload = _read_yaml(resolved)
        logger.info("config_loaded path=%s keys=%d", resolved, len(payload))
    elif required:
        raise FileNotFoundError(f"Configuration file not found: {resolved}")
    else:
        logger.info("config_missing_using_defaults path=%s", resolved)

    try:
        return MonitorSettings(**payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
