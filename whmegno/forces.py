"""
This module implements the default direct-summation gravity used to fill in heliocentric
accelerations between the two half steps.

The gravitational_accel function computes pairwise Plummer-softened Newtonian
accelerations using numpy broadcasting, with the self-interaction removed by an infinite
diagonal distance. fill_accelerations writes the result into the real block of a
SimulationState and leaves the shadow block to the tangent map. Any other evaluator with
the same fill_accelerations(state) signature can be handed to Integrator.step instead.
All functions assume (N, 3) position arrays and positive masses.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from .simulation_state import SimulationState









def _geometry(q: np.ndarray, eps: float):
    diff = q[None, :, :] - q[:, None, :]
    r2 = np.einsum("ijk,ijk->ij", diff, diff, optimize=True)
    r2 += eps * eps
    np.fill_diagonal(r2, np.inf)
    inv_r3 = r2 ** -1.5
    return diff, r2, inv_r3


def gravitational_accel(
    q: NDArray[np.floating],
    m: NDArray[np.floating],
    G: float = 1.0,
    eps: float = 0.0,
) -> NDArray[np.floating]:

    q_arr = np.asarray(q, dtype=float)
    m_arr = np.asarray(m, dtype=float)

    if q_arr.shape[0] < 2 or float(G) == 0.0:
        return np.zeros_like(q_arr)

    diff, _, inv_r3 = _geometry(q_arr, float(eps))
    a_pair = float(G) * (m_arr[None, :] * inv_r3)[..., None] * diff
    return a_pair.sum(axis=1)


def fill_accelerations(state: "SimulationState") -> None:
    state.acc[...] = gravitational_accel(state.pos, state.mass, state.G, state.softening)
