# src/tinflex/cli.py
"""
tinflex CLI

Subcommands:
  - build     Refine the envelope for a configured density and summarise it
  - sample    Build the envelope, draw samples, print mean/std

Examples:
  python -m tinflex.cli build --config configs/normal.yaml --out runs/intervals.json
  python -m tinflex.cli sample --config configs/quartic.yaml --n 50000 --seed 7 --out runs/draws.npy
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

import numpy as np

from .config import RunConfig, load_run_config
from .densities import get_density
from .errors import ConfigError, TinflexError
from .sampler import Tinflex

LOG = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _json_safe(obj: Any) -> Any:
    """Replace non-finite floats with "inf"/"-inf"/"nan" strings (strict JSON)."""
    if isinstance(obj, float) and not math.isfinite(obj):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_safe(v) for v in obj]
    return obj


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
    tmp.replace(path)


def _base_parser(prog: str, description: str) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=prog, description=description)
    p.add_argument("--config", required=True, help="Path to YAML run config")
    p.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    return p


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _build(cfg: RunConfig) -> Tinflex:
    density = get_density(cfg.density, **cfg.params)
    LOG.info("building envelope for %s on points=%s", cfg.density, cfg.points)
    return Tinflex(density, cfg.piece_cs(), cfg.points, cfg.settings)


def _summary(gen: Tinflex) -> str:
    r = gen.report
    status = "converged" if r.converged else "budget exhausted"
    return (
        f"intervals: {r.n_intervals}\n"
        f"iterations: {r.iterations}\n"
        f"hat area: {r.hat_area:.10g}\n"
        f"squeeze area: {r.squeeze_area:.10g}\n"
        f"ratio: {r.ratio:.6g} (rho={r.rho}, {status})"
    )


# -----------------------------------------------------------------------------
# Subcommands
# -----------------------------------------------------------------------------

def _cmd_build(argv: List[str]) -> int:
    p = _base_parser("tinflex build", "Refine the hat/squeeze envelope and print a summary.")
    p.add_argument("--out", type=str, default=None, help="Write the intervals as JSON")
    args = p.parse_args(argv)
    _setup_logging(args.log_level)

    cfg = load_run_config(args.config)
    gen = _build(cfg)
    print(_summary(gen))

    if args.out:
        payload = {
            "density": cfg.density,
            "params": dict(cfg.params),
            "settings": cfg.settings.model_dump(),
            "report": {
                "iterations": gen.report.iterations,
                "n_intervals": gen.report.n_intervals,
                "hat_area": gen.report.hat_area,
                "squeeze_area": gen.report.squeeze_area,
                "ratio": gen.report.ratio,
                "converged": gen.report.converged,
            },
            "intervals": [iv.to_dict() for iv in gen.intervals],
        }
        out = Path(args.out).expanduser()
        _write_text(out, json.dumps(_json_safe(payload), sort_keys=True, indent=2) + "\n")
        print(f"wrote {out}")
    return 0


def _cmd_sample(argv: List[str]) -> int:
    p = _base_parser("tinflex sample", "Build the envelope and draw samples from it.")
    p.add_argument("--n", type=int, default=None, help="Number of samples (default: config n_samples)")
    p.add_argument("--seed", type=int, default=None, help="RNG seed (default: config seed)")
    p.add_argument("--out", type=str, default=None, help="Write samples to a .npy file")
    args = p.parse_args(argv)
    _setup_logging(args.log_level)

    cfg = load_run_config(args.config)
    n = args.n if args.n is not None else cfg.n_samples
    if n <= 0:
        raise ConfigError(f"--n must be positive. Got {n}.")
    seed = args.seed if args.seed is not None else cfg.seed

    gen = _build(cfg)
    draws = gen.sample(n, rng=seed)
    print(_summary(gen))
    print(f"samples: {n}\nmean: {float(np.mean(draws)):.6g}\nstd: {float(np.std(draws)):.6g}")

    if args.out:
        out = Path(args.out).expanduser()
        out.parent.mkdir(parents=True, exist_ok=True)
        np.save(out, draws)
        print(f"wrote {out}")
    return 0


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------

_COMMANDS = {"build": _cmd_build, "sample": _cmd_sample}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in _COMMANDS:
        print("Usage: python -m tinflex.cli {build|sample} --config run.yaml ...", file=sys.stderr)
        return 2

    cmd, rest = args[0], args[1:]
    try:
        return _COMMANDS[cmd](rest)
    except ConfigError as e:
        LOG.error("config error: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except (OSError, TinflexError) as e:
        LOG.exception("%s failed", cmd)
        print(f"ERROR: {cmd} failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
