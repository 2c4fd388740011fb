"""Test configuration loading."""

from circuitmap.config import CircuitMapConfig, _flatten_yaml


def test_default_config():
    config = CircuitMapConfig()
    assert config.log_level == "INFO"
    assert config.history_limit == 50
    assert config.history_coalesce_ms == 300
    assert config.default_cable_label == "2.5mm²"


def test_viewport_config_defaults():
    config = CircuitMapConfig()
    assert config.zoom_min == 0.25
    assert config.zoom_max == 2.0
    assert config.zoom_step == 0.25
    assert config.wheel_zoom_step == 0.1


def test_project_settings():
    config = CircuitMapConfig(grid_size=10, snap_to_grid=True)
    assert config.project_settings() == {
        "default_cable_unit": "mm²",
        "grid_size": 10,
        "snap_to_grid": True,
        "show_grid": True,
    }


def test_flatten_yaml():
    assert _flatten_yaml({"history": {"limit": 20, "coalesce_ms": 500}, "grid_size": 40}) == {
        "history_limit": 20,
        "history_coalesce_ms": 500,
        "grid_size": 40,
    }


def test_from_yaml(tmp_path):
    path = tmp_path / "circuitmap.yaml"
    path.write_text(
        "circuitmap:\n"
        "  history:\n"
        "    limit: 20\n"
        "  default_cable:\n"
        "    size: '4'\n",
        encoding="utf-8",
    )
    config = CircuitMapConfig.from_yaml(path)
    assert config.history_limit == 20
    assert config.default_cable_label == "4mm²"


def test_from_yaml_missing_file(tmp_path):
    config = CircuitMapConfig.from_yaml(tmp_path / "absent.yaml")
    assert config.grid_size == 20


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("HISTORY_LIMIT", "5")
    assert CircuitMapConfig().history_limit == 5
