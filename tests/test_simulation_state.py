"""
Tests for the simulation state container, body views and shadow bookkeeping.
"""

import numpy as np
import pytest

from whmegno import Body, BodyView, SimConfig, SimulationState


def test_build_from_bodies_copies_values():
    bodies = [Body(1.0), Body(1e-3, x=1.0, vy=1.0, az=0.5)]
    state = SimulationState.from_config(SimConfig(G=2.0, dt=0.05, softening=0.01), bodies)
    assert len(state) == 2
    assert state.G == 2.0 and state.dt == 0.05 and state.softening == 0.01
    np.testing.assert_array_equal(state.mass, [1.0, 1e-3])
    np.testing.assert_array_equal(state.pos[1], [1.0, 0.0, 0.0])
    np.testing.assert_array_equal(state.vel[1], [0.0, 1.0, 0.0])
    np.testing.assert_array_equal(state.acc, 0.0)
    bodies[1].x = 5.0
    assert state[1].x == 1.0


def test_build_from_arrays_defaults_velocities():
    state = SimulationState()
    state.build_state(masses=[1.0, 2.0], positions=[0.0, 0.0, 0.0, 1.0, 1.0, 1.0])
    assert state.n_bodies == 2
    np.testing.assert_array_equal(state.vel, np.zeros((2, 3)))


@pytest.mark.parametrize("masses,positions", [
    ([1.0, -1.0], [[0, 0, 0], [1, 0, 0]]),
    ([1.0, 0.0], [[0, 0, 0], [1, 0, 0]]),
    ([1.0, np.nan], [[0, 0, 0], [1, 0, 0]]),
    ([1.0, 1.0], [[0, 0, 0], [np.inf, 0, 0]]),
    ([1.0, 1.0, 1.0], [[0, 0, 0], [1, 0, 0]]),
])
def test_invalid_input_is_rejected(masses, positions):
    state = SimulationState()
    with pytest.raises(ValueError):
        state.build_state(masses=masses, positions=positions)


def test_build_requires_some_input():
    with pytest.raises(ValueError):
        SimulationState().build_state()


def test_setters_check_shapes(random_system):
    state = random_system
    with pytest.raises(ValueError):
        state.pos = np.zeros((2, 3))
    with pytest.raises(ValueError):
        state.mass = np.ones(2)
    with pytest.raises(ValueError):
        state.mass = -np.ones(state.n_bodies)
    state.vel = np.ones(3 * state.n_bodies)
    np.testing.assert_array_equal(state.vel, 1.0)


def test_body_views_read_and_write_through(random_system):
    state = random_system
    view = state[2]
    assert isinstance(view, BodyView)
    assert view.index == 2 and not view.is_shadow
    view.vx = 9.0
    assert state.vel[2, 0] == 9.0
    state.pos[2, 1] = -4.0
    assert view.y == -4.0
    assert state[-1].index == state.n_bodies - 1
    assert len(state.bodies) == state.n_bodies
    assert "Body(" in repr(view)
    with pytest.raises(IndexError):
        state[state.n_bodies]


def test_shadows_sit_after_the_real_bodies(random_system):
    state = random_system
    n = state.n_bodies
    dpos = np.arange(3 * n, dtype=float).reshape(n, 3)
    state.add_shadows(dpos, np.zeros((n, 3)))
    assert state.n_megno == n and len(state) == 2 * n
    assert state.pos.shape == (n, 3)
    np.testing.assert_array_equal(state.shadow_pos, dpos)
    np.testing.assert_array_equal(state.shadow_mass, state.mass)
    assert state[n + 1].is_shadow
    assert state[n + 1].x == dpos[1, 0]
    assert "Shadow(" in repr(state[n])


def test_mass_setter_keeps_shadow_masses_in_step(random_system):
    state = random_system
    n = state.n_bodies
    state.add_shadows(np.zeros((n, 3)), np.zeros((n, 3)))
    new = np.linspace(1.0, 2.0, n)
    state.mass = new
    np.testing.assert_array_equal(state.shadow_mass, new)


def test_shadow_shape_is_checked(random_system):
    with pytest.raises(ValueError):
        random_system.add_shadows(np.zeros((2, 3)), np.zeros((2, 3)))


def test_reseeding_replaces_shadows(random_system):
    state = random_system
    n = state.n_bodies
    state.add_shadows(np.ones((n, 3)), np.ones((n, 3)))
    state.add_shadows(np.zeros((n, 3)), np.zeros((n, 3)))
    assert state.n_megno == n and len(state) == 2 * n
    np.testing.assert_array_equal(state.shadow_pos, 0.0)


def test_adding_real_bodies_requires_no_shadows(random_system):
    state = random_system
    n = state.n_bodies
    state.add(Body(1e-4, x=7.0))
    assert state.n_bodies == n + 1
    state.add_shadows(np.zeros((n + 1, 3)), np.zeros((n + 1, 3)))
    with pytest.raises(ValueError):
        state.add(Body(1e-4, x=8.0))
    state.remove_shadows()
    assert state.n_megno == 0 and len(state) == n + 1
    state.add(Body(1e-4, x=8.0))
    assert state.n_bodies == n + 2


def test_snapshot_restore_round_trip(random_system):
    state = random_system
    n = state.n_bodies
    state.add_shadows(np.ones((n, 3)), np.zeros((n, 3)))
    state.t = 3.5
    snap = state.snapshot()
    pos0 = state.pos.copy()
    state.pos = np.zeros((n, 3))
    state.remove_shadows()
    state.t = 0.0
    state.restore(snap)
    assert state.t == 3.5 and state.n_megno == n
    np.testing.assert_array_equal(state.pos, pos0)
    np.testing.assert_array_equal(state.shadow_pos, 1.0)


def test_reset_empties_the_state(random_system):
    state = random_system
    state.t = 1.0
    state.reset()
    assert len(state) == 0 and state.t == 0.0
    assert state.pos.shape == (0, 3)


def test_view_mass_write_reaches_the_shadow_row(random_system):
    state = random_system
    n = state.n_bodies
    state.add_shadows(np.zeros((n, 3)), np.zeros((n, 3)))
    state[2].mass = 0.25
    assert state.mass[2] == 0.25
    np.testing.assert_array_equal(state.shadow_mass, state.mass)
