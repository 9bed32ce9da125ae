import math

import numpy as np
import pytest

from whmegno import Body, SimConfig, SimulationState


def orbit_at_pericenter(e, a=1.0, M=1.0):
    r = a * (1.0 - e)
    v = math.sqrt(M * (1.0 + e) / r)
    return np.array([r, 0.0, 0.0]), np.array([0.0, v, 0.0])


def orbit_at_apocenter(e, a=1.0, M=1.0):
    r = a * (1.0 + e)
    v = math.sqrt(M * (1.0 - e) / r)
    return np.array([-r, 0.0, 0.0]), np.array([0.0, -v, 0.0])


def kepler_period(a=1.0, M=1.0):
    return 2.0 * math.pi * math.sqrt(a ** 3 / M)


@pytest.fixture
def circular_binary():
    """Star and planet on a circular orbit about their barycentre, separation 1."""
    m0, m1 = 1.0, 1e-3
    mtot = m0 + m1
    v = math.sqrt(mtot)
    bodies = [
        Body(m0, x=-m1 / mtot, vy=-m1 / mtot * v),
        Body(m1, x=m0 / mtot, vy=m0 / mtot * v),
    ]
    cfg = SimConfig(G=1.0, dt=0.01)
    return SimulationState.from_config(cfg, bodies), cfg


@pytest.fixture
def planetary_system():
    """Sun-like star with two slightly inclined, eccentric planets."""
    bodies = [Body(1.0)]
    for a, e, inc, m in ((1.0, 0.05, 0.01, 1e-3), (1.6, 0.08, -0.02, 5e-4)):
        r = a * (1.0 - e)
        v = math.sqrt((1.0 + m) * (1.0 + e) / r)
        bodies.append(Body(
            m,
            x=r,
            vy=v * math.cos(inc),
            vz=v * math.sin(inc),
        ))
    cfg = SimConfig(G=1.0, dt=0.01, seed=1234)
    return SimulationState.from_config(cfg, bodies), cfg


@pytest.fixture
def random_system():
    rng = np.random.default_rng(42)
    n = 6
    masses = np.concatenate([[1.0], rng.uniform(1e-5, 1e-2, n - 1)])
    positions = rng.normal(0.0, 2.0, size=(n, 3))
    velocities = rng.normal(0.0, 0.5, size=(n, 3))
    state = SimulationState(G=1.0, dt=0.01)
    state.build_state(masses=masses, positions=positions, velocities=velocities)
    return state
