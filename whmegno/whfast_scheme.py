from __future__ import annotations
from typing import TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .integrator import Integrator

"""
This module implements the Wisdom-Holman drift-kick-drift composition in Jacobi coordinates. The WHFastScheme class splits a timestep into step_first_half, which converts the heliocentric state to Jacobi coordinates, advances every Jacobi body by a half Kepler step around its inner mass, drifts the centroid and converts back, and step_second_half, which converts the externally computed accelerations to the Jacobi frame, applies the interaction kick with the Keplerian part removed, runs the second half Kepler step and converts back. Shadow bodies ride along in every stage through the linearised maps. The external force evaluator is expected to run exactly once between the two halves.
"""


class WHFastScheme:

	def __init__(self, integrator: "Integrator") -> None:
		self.integ = integrator

	def _kepler_drift(self, dt: float) -> None:
		integ = self.integ
		jac = integ.jacobi
		G = integ.state.G
		for i in range(1, jac.n):
			integ._uv_solver.kepler_step(jac, i, dt, G * jac.inner_mass(i))
		jac.drift_centroid(dt)

	def interaction(self, dt: float) -> None:
		integ = self.integ
		jac = integ.jacobi
		if jac.n < 2:
			return
		M = integ.state.G * jac.eta[1:]
		r = jac.pos[1:]
		r2 = np.einsum("ij,ij->i", r, r)
		prefac1 = M / (r2 * np.sqrt(r2))
		jac.vel[1:] += dt * (jac.acc[1:] + prefac1[:, None] * r)

		if jac.n_megno:
			dr = jac.dpos[1:]
			dot = np.einsum("ij,ij->i", r, dr)
			prefac2 = 3.0 * prefac1 * dot / r2
			d_kepler = prefac1[:, None] * dr - prefac2[:, None] * r
			jac.dvel[1:] += dt * (jac.dacc[1:] + d_kepler)

	def step_first_half(self) -> None:
		integ = self.integ
		state = integ.state
		integ._ensure_initialized()
		if state.n_bodies == 0:
			state.t += 0.5 * state.dt
			return
		jac = integ.jacobi
		jac.to_jacobi_posvel(state)

		self._kepler_drift(0.5 * state.dt)

		if integ.force_is_velocity_dependent or state.n_megno:
			jac.to_heliocentric_posvel(state)
		else:
			jac.to_heliocentric_pos(state)
		state.t += 0.5 * state.dt

	def step_second_half(self) -> None:
		integ = self.integ
		state = integ.state
		if state.n_bodies == 0:
			state.t += 0.5 * state.dt
			return
		if not integ.jacobi.matches(state):
			raise RuntimeError("body set changed between step_first_half and step_second_half")
		jac = integ.jacobi
		jac.to_jacobi_acc(state)
		self.interaction(state.dt)

		self._kepler_drift(0.5 * state.dt)

		state.t += 0.5 * state.dt
		jac.to_heliocentric_posvel(state)
