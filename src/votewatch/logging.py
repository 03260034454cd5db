"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `src/votewatch/logging.py`.
Configuración de structlog para la simulación y los analizadores.

Componentes detectados:
  - setup_logging
  - get_logger
  - bind_context

Notas:
- Mantener esta cabecera sincronizada con cambios estructurales del archivo.
- Los eventos se nombran en snake_case (``district_tick_failed``).

======================== ENGLISH ========================
File: `src/votewatch/logging.py`.
structlog configuration for the simulation and the analyzers.

Detected components:
  - setup_logging
  - get_logger
  - bind_context

Notes:
- Keep this header in sync with structural changes in the file.
- Events are named in snake_case (``district_tick_failed``).
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

import structlog


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    json_logs: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configura structlog y handlers de consola/archivo.

    English: Configure structlog and console/file handlers.
    """
    level = log_level.upper()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
        )

    logging.basicConfig(level=level, handlers=handlers, format="%(message)s", force=True)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger("votewatch")


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def bind_context(
    logger: Any,
    tick: Optional[int] = None,
    district_id: Optional[int] = None,
    candidate_id: Optional[str] = None,
) -> Any:
    """Adjunta contexto estándar al logger.

    English: Bind standard context to the logger.
    """
    context: dict[str, Any] = {}
    if tick is not None:
        context["tick"] = tick
    if district_id is not None:
        context["district_id"] = district_id
    if candidate_id:
        context["candidate_id"] = candidate_id
    return logger.bind(**context)
