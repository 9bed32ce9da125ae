"""
This module converts between heliocentric (inertial) and Jacobi coordinates.

JacobiCoordinates owns the Jacobi-frame buffers and the cumulative mass table eta, where
eta[i] is the total mass of bodies 0..i. Jacobi body i is measured from the centre of
mass of bodies 0..i-1, and Jacobi index 0 holds the centroid of the whole system. The
forward maps run a mass-weighted prefix sum over the bodies; the inverse maps run a
reverse accumulation of the correction m_k / eta_k * r_k from the outermost body inward
and recover body 0 last. All maps are linear, so MEGNO shadow displacements are sent
through the same maps with the same eta table and kept in a parallel block of buffers.
The buffers are sized by resize() and compared against the simulation state by matches()
so that a change in body count, shadow count or masses is detected before a step.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .simulation_state import SimulationState


logger = logging.getLogger(__name__)




def _forward(h: np.ndarray, m: np.ndarray, eta: np.ndarray, out: np.ndarray) -> None:
	weighted = np.cumsum(m[:, None] * h, axis=0)
	out[1:] = h[1:] - weighted[:-1] / eta[:-1, None]
	out[0] = weighted[-1] / eta[-1]


def _inverse(hj: np.ndarray, m: np.ndarray, eta: np.ndarray, out: np.ndarray) -> None:
	n = hj.shape[0]
	w = (m[1:] / eta[1:])[:, None] * hj[1:]
	s = np.zeros_like(hj)
	s[:n - 1] = np.cumsum(w[::-1], axis=0)[::-1]
	out[1:] = hj[0] + (eta[:-1] / eta[1:])[:, None] * hj[1:] - s[1:]
	out[0] = hj[0] - s[0]


class JacobiCoordinates:

	def __init__(self) -> None:
		self.n: int = 0
		self.n_megno: int = 0
		self.eta: np.ndarray = np.empty(0, dtype=np.float64)
		self._mass: np.ndarray = np.empty(0, dtype=np.float64)
		self.pos: np.ndarray = np.empty((0, 3), dtype=np.float64)
		self.vel: np.ndarray = np.empty((0, 3), dtype=np.float64)
		self.acc: np.ndarray = np.empty((0, 3), dtype=np.float64)
		self.dpos: np.ndarray = np.empty((0, 3), dtype=np.float64)
		self.dvel: np.ndarray = np.empty((0, 3), dtype=np.float64)
		self.dacc: np.ndarray = np.empty((0, 3), dtype=np.float64)

	@property
	def allocated(self) -> bool:
		return self.n > 0

	def resize(self, state: "SimulationState") -> None:
		n = state.n_bodies
		n_megno = state.n_megno
		if n_megno not in (0, n):
			raise ValueError(f"expected 0 or {n} shadow bodies, found {n_megno}")
		self.n = n
		self.n_megno = n_megno
		self._mass = np.array(state.mass, dtype=np.float64)
		self.eta = np.cumsum(self._mass)
		self.pos = np.zeros((n, 3))
		self.vel = np.zeros((n, 3))
		self.acc = np.zeros((n, 3))
		self.dpos = np.zeros((n_megno, 3))
		self.dvel = np.zeros((n_megno, 3))
		self.dacc = np.zeros((n_megno, 3))
		logger.debug("allocated Jacobi buffers for %d bodies and %d shadows", n, n_megno)

	def invalidate(self) -> None:
		self.n = 0
		self.n_megno = 0

	def matches(self, state: "SimulationState") -> bool:
		return (
			self.n == state.n_bodies
			and self.n_megno == state.n_megno
			and np.array_equal(self._mass, state.mass)
		)

	def inner_mass(self, i: int) -> float:
		return float(self.eta[i])

	def to_jacobi_posvel(self, state: "SimulationState") -> None:
		m, eta = self._mass, self.eta
		_forward(state.pos, m, eta, self.pos)
		_forward(state.vel, m, eta, self.vel)
		if self.n_megno:
			_forward(state.shadow_pos, m, eta, self.dpos)
			_forward(state.shadow_vel, m, eta, self.dvel)

	def to_jacobi_acc(self, state: "SimulationState") -> None:
		m, eta = self._mass, self.eta
		_forward(state.acc, m, eta, self.acc)
		if self.n_megno:
			_forward(state.shadow_acc, m, eta, self.dacc)

	def to_heliocentric_posvel(self, state: "SimulationState") -> None:
		m, eta = self._mass, self.eta
		_inverse(self.pos, m, eta, state.pos)
		_inverse(self.vel, m, eta, state.vel)
		if self.n_megno:
			_inverse(self.dpos, m, eta, state.shadow_pos)
			_inverse(self.dvel, m, eta, state.shadow_vel)

	def to_heliocentric_pos(self, state: "SimulationState") -> None:
		m, eta = self._mass, self.eta
		_inverse(self.pos, m, eta, state.pos)
		if self.n_megno:
			_inverse(self.dpos, m, eta, state.shadow_pos)

	def drift_centroid(self, dt: float) -> None:
		self.pos[0] += dt * self.vel[0]
		if self.n_megno:
			self.dpos[0] += dt * self.dvel[0]
