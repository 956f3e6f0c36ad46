import math

import pytest

from tinflex.densities import normal
from tinflex.intervals import FunType, determine_type
from tinflex.transform import inverse, transform, transform_to_interval


def test_c_zero_is_identity():
    assert transform(0.0, -1.25, 0.5, -2.0) == (-1.25, 0.5, -2.0)


def test_positive_c_formulas():
    t0, t1, t2 = transform(1.5, 0.0, 1.0, -1.0)
    assert t0 == 1.0
    assert t1 == pytest.approx(1.5)
    assert t2 == pytest.approx(1.5 * (1.5 - 1.0))


def test_negative_c_is_negative_and_increasing():
    t0, t1, _ = transform(-0.5, 0.0, 2.0, 0.0)
    assert t0 == -1.0
    # c * t0 > 0, so T_c keeps the direction of f0
    assert t1 == pytest.approx(1.0)


@pytest.mark.parametrize("c", [-0.9, -0.5, 0.0, 0.5, 1.5])
def test_derivatives_match_finite_differences(c):
    d = normal(0.3, 1.2)
    h = 1e-5
    for x in (-2.0, -0.4, 0.0, 1.1, 2.5):
        t0, t1, t2 = transform(c, d.f0(x), d.f1(x), d.f2(x))
        tp = transform(c, d.f0(x + h), d.f1(x + h), d.f2(x + h))
        tm = transform(c, d.f0(x - h), d.f1(x - h), d.f2(x - h))
        assert t1 == pytest.approx((tp[0] - tm[0]) / (2 * h), rel=1e-6, abs=1e-9)
        assert t2 == pytest.approx((tp[1] - tm[1]) / (2 * h), rel=1e-6, abs=1e-9)


@pytest.mark.parametrize("c", [-0.9, -0.5, 0.0, 0.5, 1.5, 2.0])
def test_inverse_undoes_transform(c):
    for f0 in (-5.0, -0.7, 0.0, 1.3):
        t0, _, _ = transform(c, f0, 0.0, 0.0)
        assert inverse(c, t0) == pytest.approx(math.exp(f0), rel=1e-12)


def test_inverse_outside_range():
    assert inverse(1.5, -1.0) == 0.0
    assert inverse(1.5, 0.0) == 0.0
    assert inverse(-0.5, 0.0) == math.inf


def test_transform_to_interval_classifies_normal_pieces():
    d = normal()

    def triple(x):
        return d.f0(x), d.f1(x), d.f2(x)

    # T_1.5 of the normal has inflection points at +-sqrt(2/3)
    iv = transform_to_interval(-1.5, 0.0, 1.5, *triple(-1.5), *triple(0.0))
    assert determine_type(iv) is FunType.CONVEX_CONCAVE
    iv = transform_to_interval(0.0, 1.5, 1.5, *triple(0.0), *triple(1.5))
    assert determine_type(iv) is FunType.CONCAVE_CONVEX
    iv = transform_to_interval(1.5, 3.0, 1.5, *triple(1.5), *triple(3.0))
    assert determine_type(iv) is FunType.CONVEX
    iv = transform_to_interval(-0.5, 0.5, 0.0, *triple(-0.5), *triple(0.5))
    assert determine_type(iv) is FunType.CONCAVE
