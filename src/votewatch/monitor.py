"""Monitor electoral: orquesta simulación, historial y análisis por tick.

Además lleva la contabilidad del consumidor: feed de actividad acotado,
deduplicación de alertas entre ticks y estadísticas globales.

English:
    Election monitor: drives simulation, history and analysis per tick. It
    also keeps consumer-side bookkeeping: a bounded activity feed, cross-tick
    alert de-duplication and overall statistics.
"""

from __future__ import annotations

import random
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Sequence, Tuple

from votewatch.config import MonitorSettings
from votewatch.core.candidates import CandidateRegistry
from votewatch.core.districts import DISTRICTS, DistrictStore
from votewatch.core.history import HistoryBuffer, fold
from votewatch.core.models import (
    Activity,
    ActivityAction,
    Anomaly,
    AnomalyKind,
    AnomalyType,
    Candidate,
    District,
    DistrictStatus,
    OverallStats,
    VoteHistoryEntry,
)
from votewatch.core.rules_engine import RulesEngine, score_by_district
from votewatch.core.simulation import VoteSimulationEngine
from votewatch.core.stats import calculate_anomaly_score
from votewatch.logging import bind_context, get_logger
from votewatch.scheduler import TickScheduler

logger = get_logger(__name__)

SYSTEM_NAME = "System"


@dataclass(frozen=True)
class TickResult:
    """Salida de un paso completo. / Output of one full step."""

    tick: int
    districts: List[District]
    history_entry: VoteHistoryEntry
    anomalies: List[Anomaly]
    new_anomalies: List[Anomaly] = field(default_factory=list)


def calculate_overall_stats(districts: Sequence[District]) -> OverallStats:
    """Totales globales de votos, padrón y participación.

    English: Overall votes, registration and turnout.
    """
    total_votes = sum(district.votes for district in districts)
    total_registered = sum(district.registered_voters for district in districts)
    active = sum(1 for district in districts if district.status is DistrictStatus.ACTIVE)
    turnout = total_votes / total_registered * 100 if total_registered > 0 else 0.0
    return OverallStats(
        total_votes=total_votes,
        total_registered=total_registered,
        turnout_rate=turnout,
        active_districts=active,
    )


class ElectionMonitor:
    """Raíz de composición del sistema.

    El registro de candidatos se pasa explícitamente al motor y al agregador
    en cada tick; no hay estado global compartido. Todas las mutaciones se
    hacen bajo un único lock, por lo que las operaciones CRUD se aplican
    entre ticks.

    English:
        Composition root. The candidate registry snapshot is threaded
        explicitly into the engine and the aggregator on every tick; there is
        no hidden global. Every mutation happens under one lock so CRUD
        operations land between ticks.
    """

    def __init__(
        self,
        settings: Optional[MonitorSettings] = None,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        registry: Optional[CandidateRegistry] = None,
    ) -> None:
        self.settings = settings or MonitorSettings()
        self.rng = rng or random.Random(self.settings.simulation.seed)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.registry = registry or CandidateRegistry()
        self.store = DistrictStore(self.settings.districts or DISTRICTS)
        self.engine = VoteSimulationEngine(self.settings.simulation, rng=self.rng, clock=self.clock)
        self.rules_engine = RulesEngine(self.settings.rules)
        self.history = HistoryBuffer(self.settings.retention.max_history_entries)
        self.scheduler = TickScheduler(self.step, self.settings.simulation.tick_interval_ms)

        self._lock = threading.RLock()
        self._activities: Deque[Activity] = deque(maxlen=self.settings.retention.max_activities)
        self._activity_ids = count(1)
        self._anomalies: List[Anomaly] = []
        self._last_reported: Dict[Tuple[int, AnomalyType], datetime] = {}
        self._tick = 0
        self.initialize()

    # ── ciclo de vida / lifecycle ────────────────────────────────────────

    def initialize(self) -> List[District]:
        """Estado inicial de todos los distritos. / Fresh state for every district."""
        with self._lock:
            districts = self.store.initialize(self.registry.ids(), now=self.clock())
            self._log_activity(
                SYSTEM_NAME,
                ActivityAction.SYSTEM,
                f"Monitor initialized. Monitoring {len(districts)} districts.",
            )
            return districts

    def reset(self) -> List[District]:
        """Detiene el temporizador y restablece todo el estado transitorio.

        English:
            Stop the timer and rebuild every piece of transient state.
        """
        self.scheduler.stop()
        with self._lock:
            self.history.clear()
            self._anomalies = []
            self._last_reported.clear()
            self._activities.clear()
            self._tick = 0
            districts = self.store.initialize(self.registry.ids(), now=self.clock())
            self._log_activity(SYSTEM_NAME, ActivityAction.SYSTEM, "Monitor reset. All data cleared.")
            logger.info("monitor_reset", districts=len(districts))
            return districts

    # ── tick ─────────────────────────────────────────────────────────────

    def step(self, *, force_anomaly: Optional[AnomalyKind] = None) -> TickResult:
        """Simulación, historial y análisis, estrictamente en ese orden.

        English: Simulation, history and analysis, strictly in that order.
        """
        with self._lock:
            self._tick += 1
            log = bind_context(logger, tick=self._tick)
            candidates = self.registry.list()

            districts = self.engine.tick(self.store.snapshot(), candidates, force_anomaly=force_anomaly)
            self.store.replace(districts)

            now = self.clock()
            entry = fold(districts, candidates, now)
            self.history.append(entry)

            anomalies = self.rules_engine.run(districts, self.history.entries())
            new_anomalies = self._record_anomalies(anomalies, now)
            self._anomalies = anomalies
            self._maybe_log_vote_update(districts)

            log.debug(
                "tick_complete",
                total_votes=entry.total_votes,
                anomalies=len(anomalies),
                new_anomalies=len(new_anomalies),
            )
            return TickResult(
                tick=self._tick,
                districts=self.store.snapshot(),
                history_entry=entry,
                anomalies=list(anomalies),
                new_anomalies=new_anomalies,
            )

    def _record_anomalies(self, anomalies: Sequence[Anomaly], now: datetime) -> List[Anomaly]:
        """Alertas nuevas: mismo distrito y tipo no reportado en la ventana.

        English:
            New alerts: same district and type not reported within the
            de-duplication window.
        """
        window = timedelta(seconds=self.settings.retention.dedup_window_seconds)
        fresh: List[Anomaly] = []
        for anomaly in anomalies:
            key = (anomaly.district_id, anomaly.anomaly_type)
            last = self._last_reported.get(key)
            if last is not None and now - last < window:
                continue
            self._last_reported[key] = now
            fresh.append(anomaly)
            self._log_activity(
                anomaly.district_name or f"District {anomaly.district_id}",
                ActivityAction.ANOMALY_DETECTED,
                anomaly.message,
            )
        return fresh

    def _maybe_log_vote_update(self, districts: Sequence[District]) -> None:
        if not districts:
            return
        if self.rng.random() >= self.settings.retention.vote_update_activity_rate:
            return
        district = self.rng.choice(list(districts))
        self._log_activity(
            district.name,
            ActivityAction.VOTE_UPDATE,
            f"{district.votes:,} total votes recorded",
        )

    def _log_activity(self, district_name: str, action: ActivityAction, details: str) -> Activity:
        activity = Activity(
            activity_id=next(self._activity_ids),
            timestamp=self.clock(),
            district_name=district_name,
            action=action,
            details=details,
        )
        self._activities.appendleft(activity)
        return activity

    # ── candidatos / candidates ──────────────────────────────────────────

    def list_candidates(self) -> Tuple[Candidate, ...]:
        with self._lock:
            return self.registry.list()

    def add_candidate(self, candidate_data: Mapping[str, Any]) -> Candidate:
        """Alta con entrada en cero en cada distrito.

        English: Add a candidate with a zero entry in every district.
        """
        with self._lock:
            candidate = self.registry.add(candidate_data)
            self.store.attach_candidate(candidate.candidate_id)
            self._log_activity(
                SYSTEM_NAME, ActivityAction.SYSTEM, f'Candidate "{candidate.name}" added to the race.'
            )
            return candidate

    def update_candidate(self, candidate_id: str, candidate_data: Mapping[str, Any]) -> Candidate:
        with self._lock:
            candidate = self.registry.update(candidate_id, candidate_data)
            self._log_activity(
                SYSTEM_NAME, ActivityAction.SYSTEM, f'Candidate "{candidate.name}" information updated.'
            )
            return candidate

    def remove_candidate(self, candidate_id: str) -> Candidate:
        """Baja en cascada: cada distrito pierde la entrada y sus votos.

        English:
            Cascading removal: every district loses the entry and its votes.
            Validation happens before any state changes.
        """
        with self._lock:
            self.registry.check_removable(candidate_id)
            self.store.detach_candidate(candidate_id)
            candidate = self.registry.remove(candidate_id)
            self._log_activity(
                SYSTEM_NAME, ActivityAction.SYSTEM, f'Candidate "{candidate.name}" removed from the race.'
            )
            return candidate

    # ── lecturas / reads ─────────────────────────────────────────────────

    @property
    def tick_count(self) -> int:
        return self._tick

    def districts(self) -> List[District]:
        with self._lock:
            return self.store.snapshot()

    def history_entries(self) -> List[VoteHistoryEntry]:
        with self._lock:
            return self.history.entries()

    def anomalies(self) -> List[Anomaly]:
        with self._lock:
            return list(self._anomalies)

    def activities(self) -> List[Activity]:
        """Actividad más reciente primero. / Most recent activity first."""
        with self._lock:
            return list(self._activities)

    def overall_stats(self) -> OverallStats:
        return calculate_overall_stats(self.districts())

    def district_scores(self) -> Dict[int, int]:
        with self._lock:
            scores = {district.district_id: 0 for district in self.store.snapshot()}
            scores.update(score_by_district(self._anomalies))
            return scores

    @staticmethod
    def score(anomalies: Sequence[Anomaly]) -> int:
        return calculate_anomaly_score(anomalies)

    # ── temporizador / timer ─────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        with self._lock:
            self._log_activity(SYSTEM_NAME, ActivityAction.SYSTEM, "Real-time simulation started")
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()
        with self._lock:
            self._log_activity(SYSTEM_NAME, ActivityAction.SYSTEM, "Real-time simulation paused")

    def set_interval(self, interval_ms: int) -> None:
        self.scheduler.interval_ms = interval_ms
