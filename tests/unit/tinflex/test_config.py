import math

import pytest
from pydantic import ValidationError

from tinflex.config import RunConfig, TinflexSettings, load_config, load_run_config
from tinflex.errors import ConfigError


def test_settings_defaults():
    s = TinflexSettings()
    assert (s.rho, s.max_intervals, s.max_iterations, s.summation) == (1.1, 1000, 1000, "precise")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"rho": 1.0},
        {"rho": 0.5},
        {"rho": math.inf},
        {"max_intervals": 0},
        {"max_iterations": -1},
        {"summation": "naive"},
        {"unknown": 1},
    ],
)
def test_settings_build_rejects_bad_values(kwargs):
    with pytest.raises(ConfigError):
        TinflexSettings.build(**kwargs)


def test_settings_are_frozen():
    s = TinflexSettings()
    with pytest.raises(ValidationError):
        s.rho = 2.0  # type: ignore[misc]


def test_run_config_broadcasts_scalar_cs():
    cfg = RunConfig(density="Quartic", points=[-3, 0, 3], cs=1.5)
    assert cfg.density == "quartic"
    assert cfg.piece_cs() == [1.5, 1.5]


def test_run_config_checks_cs_length():
    cfg = RunConfig(density="normal", points=[-1, 0, 1], cs=[0.0])
    with pytest.raises(ConfigError):
        cfg.piece_cs()


def test_run_config_parses_infinite_points_from_strings():
    cfg = RunConfig(density="normal", points=["-inf", 0, "inf"])
    assert cfg.points == [-math.inf, 0.0, math.inf]


def test_run_config_needs_two_points():
    with pytest.raises(ValidationError):
        RunConfig(density="normal", points=[0.0])


def test_load_run_config_from_yaml(tmp_path):
    p = tmp_path / "run.yaml"
    p.write_text(
        "density: normal\n"
        "params: {mu: 1.0, sigma: 2.0}\n"
        "points: [-.inf, 0.0, .inf]\n"
        "cs: [0.0, 0.0]\n"
        "settings: {rho: 1.05, summation: kbn}\n"
        "seed: 3\n",
        encoding="utf-8",
    )
    cfg = load_run_config(str(p))
    assert cfg.params == {"mu": 1.0, "sigma": 2.0}
    assert cfg.points[0] == -math.inf
    assert cfg.settings.rho == 1.05
    assert cfg.settings.summation == "kbn"
    assert cfg.seed == 3


def test_shipped_configs_load(configs_dir):
    for name in ("normal.yaml", "quartic.yaml"):
        cfg = load_run_config(str(configs_dir / name))
        assert len(cfg.piece_cs()) == len(cfg.points) - 1


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "nope.yaml"))


def test_load_config_requires_mapping(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(p))


def test_load_config_reports_yaml_errors(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("density: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(p))


def test_load_run_config_reports_validation_errors(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("density: normal\npoints: [0.0, 1.0]\nsettings: {rho: 0.9}\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_run_config(str(p))
