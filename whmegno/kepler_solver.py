"""
This module implements the universal-variable Kepler solver used for the drift part of
the Wisdom-Holman map.

The UniversalVariableKeplerSolver class solves Kepler's equation in the universal
anomaly X, r0 X + eta0 G2 + zeta0 G3 = dt, with G_n = X^n c_n(beta X^2), by a safeguarded
Newton-Raphson iteration. Elliptic orbits are bracketed by whole X-periods, so a Newton
step that leaves the bracket is replaced by bisection, and the iteration is capped. The
converged anomaly gives the Lagrange f, g, fdot and gdot coefficients that map the old
position and velocity onto the new ones. When shadow bodies are attached the exact
differential of the same map is applied to their displacement vectors, reusing the very
coefficients of the real body. A step that does not converge is retried as two half
steps, which is exact for the Kepler flow, and only after the configured number of
splits does the solver give up with KeplerConvergenceError. All orbit types (elliptic,
parabolic, hyperbolic) are handled by the same formulas.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple
import numpy as np

from .integrator_constants import IntegratorConstants as IC
from .stumpff import CFuncs, g_functions

if TYPE_CHECKING:
    from .jacobi import JacobiCoordinates
    from .sim_config import SimConfig


logger = logging.getLogger(__name__)

_TWO_PI = 2.0 * math.pi


class KeplerConvergenceError(RuntimeError):
	pass


@dataclass
class KeplerSolution:
	X: float
	G: CFuncs
	r: float
	iterations: int


class UniversalVariableKeplerSolver:

	def __init__(
		self,
		max_iterations: int = IC.KEPLER_MAX_ITERATIONS,
		tolerance: float = IC.KEPLER_TOLERANCE,
		max_subdivisions: int = IC.KEPLER_MAX_SUBDIVISIONS,
	) -> None:
		self.max_iterations = int(max_iterations)
		self.tolerance = float(tolerance)
		self.max_subdivisions = int(max_subdivisions)

	@classmethod
	def from_config(cls, cfg: "SimConfig") -> "UniversalVariableKeplerSolver":
		return cls(
			max_iterations=cfg.kepler_max_iterations,
			tolerance=cfg.kepler_tolerance,
			max_subdivisions=cfg.kepler_max_subdivisions,
		)

	@staticmethod
	def initial_guess(r0: float, eta0: float, beta: float, M: float, dt: float) -> float:
		if beta > 0.0:
			invperiod = beta * math.sqrt(beta) / (_TWO_PI * M)
			if abs(dt) * invperiod > 0.01:
				return dt * beta / M
		x1 = dt / r0
		x2 = x1 * (1.0 - 0.5 * eta0 * x1 / r0)
		if x2 * x1 > 0.0:
			return x2
		return x1

	def solve(
		self,
		r0: float,
		eta0: float,
		zeta0: float,
		beta: float,
		M: float,
		dt: float,
	) -> KeplerSolution:
		lo = -math.inf
		hi = math.inf
		if dt > 0.0:
			lo = 0.0
		elif dt < 0.0:
			hi = 0.0
		if beta > 0.0:
			sqrt_beta = math.sqrt(beta)
			x_period = _TWO_PI / sqrt_beta
			period = _TWO_PI * M / (beta * sqrt_beta)
			k = math.floor(dt / period)
			lo = max(lo, k * x_period)
			hi = min(hi, (k + 1) * x_period)

		X = self.initial_guess(r0, eta0, beta, M, dt)
		if not lo < X < hi:
			X = 0.5 * (lo + hi)

		converged = False
		iterations = 0
		for iterations in range(1, self.max_iterations + 1):
			_, G1, G2, G3, _, _ = g_functions(beta, X)
			s = r0 * X + eta0 * G2 + zeta0 * G3 - dt
			if s == 0.0:
				converged = True
				break
			if s < 0.0:
				lo = max(lo, X)
			else:
				hi = min(hi, X)
			sp = r0 + eta0 * G1 + zeta0 * G2
			X_new = X - s / sp  # Newton's method
			if not (math.isfinite(X_new) and lo <= X_new <= hi):
				if not (math.isfinite(lo) and math.isfinite(hi)):
					break
				X_new = 0.5 * (lo + hi)
			dX = X_new - X
			X = X_new
			if abs(dX) <= self.tolerance * abs(X):
				converged = True
				break

		if not converged:
			raise KeplerConvergenceError(
				f"universal anomaly did not converge after {iterations} iterations "
				f"(r0={r0!r}, beta={beta!r}, dt={dt!r})"
			)

		G = g_functions(beta, X)
		r = r0 + eta0 * G[1] + zeta0 * G[2]
		return KeplerSolution(X=X, G=G, r=r, iterations=iterations)

	def advance(
		self,
		r: np.ndarray,
		v: np.ndarray,
		M: float,
		dt: float,
		dr: np.ndarray | None = None,
		dv: np.ndarray | None = None,
	) -> Tuple[np.ndarray, np.ndarray, np.ndarray | None, np.ndarray | None]:
		r = np.asarray(r, dtype=float)
		v = np.asarray(v, dtype=float)
		r0 = math.sqrt(float(np.dot(r, r)))
		if dt == 0.0:
			return r.copy(), v.copy(), _copy_or_none(dr), _copy_or_none(dv)
		if r0 == 0.0:
			if dr is None:
				return r + dt * v, v.copy(), None, None
			return r + dt * v, v.copy(), dr + dt * dv, np.array(dv, dtype=float)

		v2 = float(np.dot(v, v))
		beta = 2.0 * M / r0 - v2
		eta0 = float(np.dot(r, v))
		zeta0 = M - beta * r0

		sol = self.solve(r0, eta0, zeta0, beta, M, dt)
		X = sol.X
		G0, G1, G2, G3, G4, G5 = sol.G
		rn = sol.r

		f = 1.0 - M * G2 / r0
		g = dt - M * G3
		fd = -M * G1 / (r0 * rn)
		gd = 1.0 - M * G2 / rn

		r_new = f * r + g * v
		v_new = fd * r + gd * v
		if dr is None:
			return r_new, v_new, None, None

		dr = np.asarray(dr, dtype=float)
		dv = np.asarray(dv, dtype=float)
		dr0 = float(np.dot(dr, r)) / r0
		dbeta = -2.0 * M * dr0 / (r0 * r0) - 2.0 * float(np.dot(dv, v))
		deta0 = float(np.dot(dr, v)) + float(np.dot(r, dv))
		dzeta0 = -beta * dr0 - r0 * dbeta

		G3beta = 0.5 * (3.0 * G5 - X * G4)
		G2beta = 0.5 * (2.0 * G4 - X * G3)
		G1beta = 0.5 * (G3 - X * G2)
		tbeta = eta0 * G2beta + zeta0 * G3beta
		dX = -1.0 / rn * (X * dr0 + G2 * deta0 + G3 * dzeta0 + tbeta * dbeta)
		dG1 = G0 * dX + G1beta * dbeta
		dG2 = G1 * dX + G2beta * dbeta
		dG3 = G2 * dX + G3beta * dbeta
		drn = dr0 + G1 * deta0 + G2 * dzeta0 + eta0 * dG1 + zeta0 * dG2
		df = M * G2 * dr0 / (r0 * r0) - M * dG2 / r0
		dg = -M * dG3
		dfd = -M * dG1 / (r0 * rn) + M * G1 * (dr0 / r0 + drn / rn) / (rn * r0)
		dgd = -M * dG2 / rn + M * G2 * drn / (rn * rn)

		dr_new = f * dr + g * dv + df * r + dg * v
		dv_new = fd * dr + gd * dv + dfd * r + dgd * v
		return r_new, v_new, dr_new, dv_new

	def _advance_split(self, r, v, dr, dv, M: float, dt: float, depth: int, body_index: int):
		try:
			return self.advance(r, v, M, dt, dr, dv)
		except KeplerConvergenceError as err:
			if depth >= self.max_subdivisions:
				logger.error("Kepler step of body %d failed after %d subdivisions: %s", body_index, depth, err)
				raise KeplerConvergenceError(
					f"Kepler step of body {body_index} did not converge (dt={dt!r}, subdivisions={depth})"
				) from err
			logger.debug("splitting Kepler step of body %d, dt=%g, depth=%d", body_index, dt, depth + 1)
		half = 0.5 * dt
		r, v, dr, dv = self._advance_split(r, v, dr, dv, M, half, depth + 1, body_index)
		return self._advance_split(r, v, dr, dv, M, half, depth + 1, body_index)

	def kepler_step(self, jac: "JacobiCoordinates", i: int, dt: float, M: float) -> None:
		if jac.n_megno:
			dr, dv = jac.dpos[i], jac.dvel[i]
		else:
			dr, dv = None, None
		r_new, v_new, dr_new, dv_new = self._advance_split(
			jac.pos[i], jac.vel[i], dr, dv, float(M), float(dt), 0, i
		)
		jac.pos[i] = r_new
		jac.vel[i] = v_new
		if dr_new is not None:
			jac.dpos[i] = dr_new
			jac.dvel[i] = dv_new

	def propagate(self, r, v, mu, dt):
		r = np.asarray(r, dtype=float)
		v = np.asarray(v, dtype=float)
		mu = float(mu)
		dt = float(dt)
		if r.ndim == 1:
			rn, vn, _, _ = self._advance_split(r, v, None, None, mu, dt, 0, 0)
			return rn, vn
		out_r = []
		out_v = []
		for k, (ri, vi) in enumerate(zip(r, v)):
			rn, vn, _, _ = self._advance_split(ri, vi, None, None, mu, dt, 0, k)
			out_r.append(rn)
			out_v.append(vn)
		return np.array(out_r), np.array(out_v)


def _copy_or_none(a):
	if a is None:
		return None
	return np.array(a, dtype=float)
