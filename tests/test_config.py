"""Pruebas de carga y validación de configuración.

Tests for configuration loading and validation.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from votewatch.config import MonitorSettings, load_config
from votewatch.core.models import AnomalyKind


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "votewatch.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_yields_defaults(tmp_path):
    settings = load_config(tmp_path / "missing.yaml")

    assert settings == MonitorSettings()
    assert settings.simulation.tick_interval_ms == 2000
    assert settings.simulation.anomaly_injection_rate == 0.05
    assert settings.retention.max_history_entries == 50
    assert settings.rules.z_score.threshold == 2.5
    assert settings.districts is None


def test_required_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml", required=True)


def test_yaml_values_are_loaded(tmp_path):
    path = _write(
        tmp_path,
        """
simulation:
  tick_interval_ms: 1000
  anomaly_kinds: [imbalanced]
  seed: 42
rules:
  moving_average:
    window_size: 8
  vote_rate:
    enabled: false
logging:
  level: debug
  json: true
districts:
  - {id: 1, name: North, registered_voters: 5000, base_vote_rate: 40}
  - {id: 2, name: South, registered_voters: 6000, base_vote_rate: 55}
""",
    )

    settings = load_config(path)

    assert settings.simulation.tick_interval_ms == 1000
    assert settings.simulation.anomaly_kinds == [AnomalyKind.IMBALANCED]
    assert settings.simulation.seed == 42
    assert settings.rules.for_rule("moving_average")["window_size"] == 8
    assert settings.rules.for_rule("vote_rate")["enabled"] is False
    assert settings.rules.for_rule("unknown") == {}
    assert settings.logging.level == "DEBUG"
    assert settings.logging.json_logs is True
    assert [seed.name for seed in settings.districts] == ["North", "South"]


def test_shipped_config_file_is_valid():
    path = Path(__file__).resolve().parents[1] / "config" / "votewatch.yaml"

    settings = load_config(path, required=True)

    assert settings.simulation.tick_interval_ms in (1000, 2000, 5000)


def test_empty_file_yields_defaults(tmp_path):
    assert load_config(_write(tmp_path, "")) == MonitorSettings()


@pytest.mark.parametrize(
    "text",
    [
        "simulation:\n  tick_interval_ms: 1500\n",
        "simulation:\n  anomaly_injection_rate: 1.5\n",
        "logging:\n  level: chatty\n",
        "districts: []\n",
        "districts:\n  - {id: 1, name: A, registered_voters: 10, base_vote_rate: 5}\n"
        "  - {id: 1, name: B, registered_voters: 10, base_vote_rate: 5}\n",
        "districts:\n  - {id: 1, name: A, registered_voters: 10, base_vote_rate: 50}\n",
        "- just\n- a list\n",
        "simulation: [unclosed\n",
    ],
)
def test_invalid_config_raises_value_error(tmp_path, text):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, text))


def test_environment_overrides_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("VOTEWATCH_SIMULATION__ANOMALY_INJECTION_RATE", "0.5")

    settings = load_config(tmp_path / "missing.yaml")

    assert settings.simulation.anomaly_injection_rate == 0.5
    assert settings.simulation.tick_interval_ms == 2000


def test_environment_sets_tick_interval(tmp_path, monkeypatch):
    monkeypatch.setenv("VOTEWATCH_SIMULATION__TICK_INTERVAL_MS", "1000")

    settings = load_config(tmp_path / "missing.yaml")

    assert settings.simulation.tick_interval_ms == 1000


def test_environment_rejects_unknown_tick_interval(tmp_path, monkeypatch):
    monkeypatch.setenv("VOTEWATCH_SIMULATION__TICK_INTERVAL_MS", "1500")

    with pytest.raises(ValueError):
        load_config(tmp_path / "missing.yaml")


def test_yaml_wins_over_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("VOTEWATCH_SIMULATION__ANOMALY_INJECTION_RATE", "0.5")
    path = _write(tmp_path, "simulation:\n  anomaly_injection_rate: 0.1\n")

    settings = load_config(path)

    assert settings.simulation.anomaly_injection_rate == 0.1
