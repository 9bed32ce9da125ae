"""
This module computes variational dynamics for chaos analysis in N-body systems.

The TangentMap class calculates the accelerations of MEGNO shadow bodies, i.e. the
linearisation of softened Newtonian gravity along the shadow displacement vectors. The
separations entering the tidal tensor are those of the real bodies; shadow row k is
paired with real row k. All ordered pairs are evaluated at once with numpy broadcasting,
so each shadow's contribution is reduced independently of the others. This pass is
separate from the main force evaluator and depends only on positions.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .simulation_state import SimulationState




class TangentMap:
    def __init__(self, state: "SimulationState"):

        self.state = state

    def variational_accel(self, delta_r):
        """Linearised gravity along delta_r, one row per real body.

        Row k of delta_r is the displacement of real body k, so the separations and
        the masses are those of the real block, never the shadow copies.
        """
        state = self.state

        n = state.n_bodies
        G = state.G
        delta_r = np.asarray(delta_r, dtype=float)
        if n < 2 or G == 0.0:
            return np.zeros_like(delta_r)

        pos  = state.pos
        mass = state.mass
        s2   = state.softening * state.softening

        diff = pos[None, :, :] - pos[:, None, :]
        r2   = np.einsum("ijk,ijk->ij", diff, diff)
        r2 += s2
        np.fill_diagonal(r2, np.inf)

        inv_r2 = 1.0 / r2
        inv_r3 = inv_r2 * np.sqrt(inv_r2)

        d_diff = delta_r[None, :, :] - delta_r[:, None, :]
        dot    = np.einsum("ijk,ijk->ij", diff, d_diff)

        coeff  = 3.0 * dot * inv_r2 * inv_r3
        term   = d_diff * inv_r3[..., None] - coeff[..., None] * diff

        delta_a = G * np.sum(mass[None, :, None] * term, axis=1)
        return delta_a

    def calculate_acceleration(self) -> None:
        state = self.state
        if not state.n_megno:
            return
        state.shadow_acc[...] = self.variational_accel(state.shadow_pos)
