"""
======================== ÍNDICE / INDEX ========================
1. Descripción general / Overview
2. Componentes principales / Main components
3. Notas de mantenimiento / Maintenance notes

======================== ESPAÑOL ========================
Archivo: `src/votewatch/cli.py`.
Interfaz de línea de comandos para correr la simulación y revisar
candidatos.

Componentes detectados:
  - main
  - run
  - candidates

Notas:
- Mantener esta cabecera sincronizada con cambios estructurales del archivo.

======================== ENGLISH ========================
File: `src/votewatch/cli.py`.
Command line interface to run the simulation and inspect candidates.

Detected components:
  - main
  - run
  - candidates

Notes:
- Keep this header in sync with structural changes in the file.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import typer

from votewatch import __version__
from votewatch.config import TICK_INTERVALS, MonitorSettings, load_config
from votewatch.core.rules_engine import severity_counts
from votewatch.logging import setup_logging
from votewatch.monitor import ElectionMonitor

app = typer.Typer(help="VoteWatch election monitoring simulator")


def _load_settings(config_path: Optional[Path]) -> MonitorSettings:
    try:
        return load_config(config_path, required=config_path is not None)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc


@app.callback()
def main() -> None:
    """Interfaz de línea de comandos de VoteWatch.

    English: VoteWatch command line interface.
    """


@app.command()
def version() -> None:
    typer.echo(__version__)


@app.command()
def run(
    ticks: int = typer.Option(20, min=1, help="Ticks to simulate."),
    interval: Optional[int] = typer.Option(None, help="Tick interval in ms (1000, 2000 or 5000)."),
    seed: Optional[int] = typer.Option(None, help="Seed for the random source."),
    injection_rate: Optional[float] = typer.Option(None, min=0.0, max=1.0, help="Anomaly injection rate."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file."),
    realtime: bool = typer.Option(False, help="Drive ticks with the timer instead of back to back."),
    log_level: Optional[str] = typer.Option(None, help="Override the configured log level."),
) -> None:
    """Corre la simulación y resume las anomalías detectadas.

    English: Run the simulation and summarise detected anomalies.
    """
    settings = _load_settings(config)
    if interval is not None:
        if interval not in TICK_INTERVALS:
            typer.echo(f"--interval must be one of {TICK_INTERVALS}", err=True)
            raise typer.Exit(code=2)
        settings.simulation.tick_interval_ms = interval
    if seed is not None:
        settings.simulation.seed = seed
    if injection_rate is not None:
        settings.simulation.anomaly_injection_rate = injection_rate

    setup_logging(
        log_level or settings.logging.level,
        settings.logging.file,
        settings.logging.json_logs,
    )
    monitor = ElectionMonitor(settings)

    if realtime:
        monitor.start()
        try:
            while monitor.scheduler.ticks_attempted < ticks:
                time.sleep(0.05)
        except KeyboardInterrupt:
            typer.echo("Interrupted.")
        finally:
            monitor.stop()
    else:
        for _ in range(ticks):
            result = monitor.step()
            for anomaly in result.new_anomalies:
                typer.echo(f"[tick {result.tick}] {anomaly.severity.value.upper()} {anomaly.message}")

    stats = monitor.overall_stats()
    typer.echo(
        f"Ticks: {monitor.tick_count}  Votes: {stats.total_votes:,}/{stats.total_registered:,} "
        f"({stats.turnout_rate:.1f}%)  Active districts: {stats.active_districts}"
    )
    counts = severity_counts(monitor.anomalies())
    summary = ", ".join(f"{severity.value}={total}" for severity, total in sorted(counts.items()))
    typer.echo(f"Current anomalies: {summary or 'none'}")
    for district_id, score in sorted(monitor.district_scores().items()):
        if score:
            typer.echo(f"District {district_id} anomaly score: {score}")


@app.command()
def candidates(
    config: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file."),
) -> None:
    """Lista los candidatos por defecto. / List the default candidates."""
    monitor = ElectionMonitor(_load_settings(config))
    for candidate in monitor.list_candidates():
        typer.echo(f"{candidate.candidate_id}\t{candidate.name}\t{candidate.party}\t{candidate.color}")


if __name__ == "__main__":
    app()
