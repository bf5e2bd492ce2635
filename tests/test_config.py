"""Tests for YAML config loading and environment overrides."""

from __future__ import annotations

from clockguard.config import AppConfig, load_config


def test_defaults_when_file_missing(tmp_path):
    config = load_config(tmp_path / "absent.yaml")
    assert config == AppConfig()
    assert config.history.capacity == 10
    assert config.rules.max_realistic_speed_kmh == 120


def test_yaml_sections_are_applied(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n"
        "  port: 9000\n"
        "network:\n"
        "  enabled: false\n"
        "history:\n"
        "  backend: memory\n"
        "  capacity: 5\n"
        "rules:\n"
        "  max_network_distance_m: 2500\n"
        "  unknown_key: 1\n"
        "storage: not-a-mapping\n"
    )
    config = load_config(path)
    assert config.server.port == 9000
    assert config.network.enabled is False
    assert config.history.backend == "memory"
    assert config.history.capacity == 5
    assert config.rules.max_network_distance_m == 2500
    assert not hasattr(config.rules, "unknown_key")
    assert config.storage.base_dir == "data/attendance"


def test_empty_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path) == AppConfig()


def test_env_overrides_win(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("server:\n  port: 9000\n")
    monkeypatch.setenv("CLOCKGUARD_SERVER_PORT", "9100")
    monkeypatch.setenv("CLOCKGUARD_NETWORK_ENABLED", "no")
    monkeypatch.setenv("CLOCKGUARD_HISTORY_CAPACITY", "20")
    monkeypatch.setenv("CLOCKGUARD_LOG_FORMAT", "json")

    config = load_config(path)
    assert config.server.port == 9100
    assert config.network.enabled is False
    assert config.history.capacity == 20
    assert config.logging.format == "json"


def test_rule_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("CLOCKGUARD_RULES_MAX_REALISTIC_SPEED_KMH", "300")
    monkeypatch.setenv("CLOCKGUARD_RULES_MAX_READING_AGE_MS", "60000")
    monkeypatch.setenv("CLOCKGUARD_RULES_DEVELOPER_MODE_MIN_INDICATORS", "2")

    config = load_config(tmp_path / "absent.yaml")
    assert config.rules.max_realistic_speed_kmh == 300.0
    assert config.rules.max_reading_age_ms == 60_000
    assert config.rules.developer_mode_min_indicators == 2
