import json

import numpy as np

from tinflex.cli import main

QUARTIC_RUN = """\
density: quartic
points: [-3.0, -1.5, 0.0, 1.5, 3.0]
cs: 1.5
seed: 7
n_samples: 200
"""


def _config(tmp_path, text=QUARTIC_RUN):
    p = tmp_path / "run.yaml"
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_build_writes_intervals_json(tmp_path, capsys):
    out = tmp_path / "out" / "intervals.json"
    rc = main(["build", "--config", _config(tmp_path), "--out", str(out), "--log-level", "WARNING"])
    assert rc == 0
    assert "converged" in capsys.readouterr().out

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["density"] == "quartic"
    assert payload["report"]["converged"] is True
    ivs = payload["intervals"]
    assert len(ivs) == payload["report"]["n_intervals"]
    assert ivs[0]["lx"] == -3.0 and ivs[-1]["rx"] == 3.0


def test_build_writes_infinite_ends_as_strings(tmp_path, configs_dir):
    out = tmp_path / "normal.json"
    rc = main(["build", "--config", str(configs_dir / "normal.yaml"), "--out", str(out)])
    assert rc == 0
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["intervals"][0]["lx"] == "-inf"
    assert payload["intervals"][-1]["rx"] == "inf"
    assert payload["intervals"][0]["squeeze"] is None


def test_sample_writes_npy(tmp_path, capsys):
    out = tmp_path / "draws.npy"
    rc = main(["sample", "--config", _config(tmp_path), "--n", "300", "--seed", "5", "--out", str(out)])
    assert rc == 0
    draws = np.load(out)
    assert draws.shape == (300,)
    assert "samples: 300" in capsys.readouterr().out


def test_sample_defaults_come_from_config(tmp_path, capsys):
    rc = main(["sample", "--config", _config(tmp_path)])
    assert rc == 0
    assert "samples: 200" in capsys.readouterr().out


def test_usage_error_exit_code(capsys):
    assert main([]) == 2
    assert main(["fit"]) == 2
    assert "Usage" in capsys.readouterr().err


def test_missing_config_is_a_config_error(tmp_path, capsys):
    assert main(["build", "--config", str(tmp_path / "missing.yaml")]) == 2
    assert "ERROR" in capsys.readouterr().err


def test_invalid_partition_is_a_runtime_failure(tmp_path, capsys):
    bad = "density: normal\npoints: [0.0, .inf, 1.0]\ncs: 0.0\n"
    assert main(["build", "--config", _config(tmp_path, bad)]) == 1
    assert "build failed" in capsys.readouterr().err


def test_nonpositive_sample_count(tmp_path):
    assert main(["sample", "--config", _config(tmp_path), "--n", "0"]) == 2


def test_positive_c_on_whole_line_is_a_runtime_failure(tmp_path, capsys):
    bad = "density: normal\npoints: [-.inf, -1.5, 0.0, 1.5, .inf]\ncs: 1.5\n"
    assert main(["build", "--config", _config(tmp_path, bad)]) == 1
    assert "no hat" in capsys.readouterr().err
