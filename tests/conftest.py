"""
Pytest bootstrap for src/ layout.

Makes ./src importable for any pytest invocation (editable install or not),
and provides the small density fixtures most test modules share.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

repo_root = Path(__file__).resolve().parents[1]
src = repo_root / "src"
if src.is_dir():
    src_str = str(src)
    if src_str not in sys.path:
        # Put first so local src wins over any installed copy of `tinflex`.
        sys.path.insert(0, src_str)

from tinflex.densities import normal, quartic  # noqa: E402


@pytest.fixture
def quartic_density():
    return quartic()


@pytest.fixture
def normal_density():
    return normal(0.0, 1.0)


@pytest.fixture
def configs_dir() -> Path:
    return repo_root / "configs"
