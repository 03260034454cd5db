"""Motor unificado de analizadores de anomalías.

Punto de entrada único: ``RulesEngine.run()``.  Todas las reglas se
auto-registran vía el decorador ``@rule`` al ser importadas aquí.

Unified anomaly analyzer engine.

Single entry point: ``RulesEngine.run()``.  All rules self-register via the
``@rule`` decorator when imported here.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

# ── Importar TODAS las reglas para que se auto-registren ────────────────
# Import ALL rules so they self-register via @rule decorator.
from votewatch.core.rules import (  # noqa: F401
    moving_average_rule,
    turnout_rule,
    vote_rate_rule,
    zscore_rule,
)
from votewatch.config import RulesSettings
from votewatch.core.models import Anomaly, District, VoteHistoryEntry
from votewatch.core.rules.registry import RuleDefinition, list_rules
from votewatch.core.stats import calculate_anomaly_score

logger = logging.getLogger(__name__)


class RulesEngine:
    """Ejecuta todos los analizadores habilitados sobre una instantánea.

    Cada anomalía se reporta tal cual: si varios métodos disparan para el
    mismo distrito se reportan todos. La deduplicación entre ticks es
    responsabilidad del consumidor.

    English:
        Runs every enabled analyzer over a snapshot. Every anomaly is
        reported as is; when several methods fire for the same district all
        are kept. Cross-tick de-duplication belongs to the consumer.
    """

    def __init__(self, settings: Optional[RulesSettings] = None) -> None:
        self.settings = settings or RulesSettings()

    def _get_rule_config(self, rule: RuleDefinition) -> dict:
        return self.settings.for_rule(rule.config_key)

    def _rule_enabled(self, rule: RuleDefinition) -> bool:
        """Determina si una regla está habilitada según la configuración.

        Todas las reglas están habilitadas por defecto.

        English:
            Determine whether a rule is enabled based on configuration.
            All rules are enabled by default.
        """
        if not self.settings.global_enabled:
            return False
        return bool(self._get_rule_config(rule).get("enabled", True))

    def run(
        self,
        districts: Sequence[District],
        history: Sequence[VoteHistoryEntry] = (),
    ) -> List[Anomaly]:
        """Ejecuta todas las reglas registradas; un fallo equivale a cero anomalías.

        English:
            Run every registered rule. A failing rule degrades to "no
            anomaly" and is logged; the remaining rules still run.
        """
        names: Dict[int, str] = {district.district_id: district.name for district in districts}
        anomalies: List[Anomaly] = []

        for rule in list_rules():
            if not self._rule_enabled(rule):
                logger.debug("rule_skipped rule=%s config_key=%s", rule.name, rule.config_key)
                continue

            try:
                rule_anomalies = rule.func(districts, history, self._get_rule_config(rule)) or []
            except Exception as exc:  # noqa: BLE001
                logger.error("rule_error rule=%s error=%s", rule.name, str(exc))
                continue

            for anomaly in rule_anomalies:
                if anomaly.district_name is None and anomaly.district_id in names:
                    anomaly = anomaly.with_district_name(names[anomaly.district_id])
                anomalies.append(anomaly)

            if rule_anomalies:
                logger.warning("rule_alerts rule=%s anomalies_count=%d", rule.name, len(rule_anomalies))
            else:
                logger.debug("rule_ok rule=%s", rule.name)

        return anomalies


def analyze(
    districts: Sequence[District],
    history: Sequence[VoteHistoryEntry] = (),
    settings: Optional[RulesSettings] = None,
) -> List[Anomaly]:
    """Atajo funcional sobre ``RulesEngine.run``. / Functional shortcut."""
    return RulesEngine(settings).run(districts, history)


def score(anomalies: Iterable[Anomaly]) -> int:
    return calculate_anomaly_score(anomalies)


def score_by_district(anomalies: Iterable[Anomaly]) -> Dict[int, int]:
    """Puntaje agregado por distrito.

    English: Aggregate score per district id.
    """
    grouped: Dict[int, List[Anomaly]] = {}
    for anomaly in anomalies:
        grouped.setdefault(anomaly.district_id, []).append(anomaly)
    return {district_id: calculate_anomaly_score(items) for district_id, items in grouped.items()}


def severity_counts(anomalies: Iterable[Anomaly]) -> Counter:
    return Counter(anomaly.severity for anomaly in anomalies)
