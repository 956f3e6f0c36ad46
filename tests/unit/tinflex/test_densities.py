import math

import pytest

from tinflex.densities import DENSITIES, exponential_power, get_density, normal, quartic
from tinflex.errors import ConfigError


@pytest.mark.parametrize(
    "density",
    [normal(), normal(-1.0, 0.5), quartic(), exponential_power(2.0), exponential_power(3.5)],
)
def test_derivatives_are_consistent(density):
    h = 1e-6
    for x in (-1.7, -0.3, 0.4, 1.2, 2.1):
        d1 = (density.f0(x + h) - density.f0(x - h)) / (2 * h)
        d2 = (density.f1(x + h) - density.f1(x - h)) / (2 * h)
        assert density.f1(x) == pytest.approx(d1, rel=1e-5, abs=1e-6)
        assert density.f2(x) == pytest.approx(d2, rel=1e-5, abs=1e-6)


def test_normal_is_normalised():
    d = normal(0.0, 1.0)
    assert d.f0(0.0) == pytest.approx(-0.5 * math.log(2.0 * math.pi))


def test_quartic_modes():
    d = quartic()
    m = math.sqrt(2.5)
    assert d.f1(m) == pytest.approx(0.0, abs=1e-12)
    assert d.f2(m) < 0


def test_registry_lookup():
    assert set(DENSITIES) == {"normal", "quartic", "exponential_power"}
    d = get_density("normal", mu=2.0, sigma=1.0)
    assert d.f1(2.0) == 0.0


@pytest.mark.parametrize(
    "name,params",
    [
        ("cauchy", {}),
        ("normal", {"sigma": 0.0}),
        ("normal", {"scale": 1.0}),
        ("exponential_power", {"alpha": 1.5}),
    ],
)
def test_bad_density_requests(name, params):
    with pytest.raises(ConfigError):
        get_density(name, **params)
