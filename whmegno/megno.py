"""
This module accumulates the MEGNO chaos indicator and the Lyapunov exponent estimate.

deltad_delta2 measures the instantaneous logarithmic growth rate of the shadow vector,
the ratio of the 6-D phase-space inner product of the shadow state with its time
derivative to its squared norm. The MegnoAccumulator integrates that rate once per
timestep into the running Y(t) and its time average <Y>, and keeps single-pass Welford
estimates of the means of t and <Y>, the covariance of (<Y>, t) and the variance of t.
megno() returns <Y>, which tends to 2 for quasi-periodic orbits and grows linearly for
chaotic ones; lyapunov() returns the regression slope cov(<Y>, t) / var(t). Degenerate
readings (t == 0, zero variance, zero shadow norm) return 0 instead of dividing by zero.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .simulation_state import SimulationState



def deltad_delta2(state: "SimulationState") -> float:
	x = state.shadow_pos
	v = state.shadow_vel
	a = state.shadow_acc
	deltad = float(np.sum(v * x) + np.sum(a * v))
	delta2 = float(np.sum(x * x) + np.sum(v * v))
	if delta2 == 0.0:
		return 0.0
	return deltad / delta2


@dataclass
class MegnoAccumulator:
	Ys: float = 0.0
	Yss: float = 0.0
	cov_Yt: float = 0.0  # covariance of <Y> and t
	var_t: float = 0.0
	mean_t: float = 0.0
	mean_Y: float = 0.0
	n: int = 0

	def reset(self) -> None:
		self.Ys = 0.0
		self.Yss = 0.0
		self.cov_Yt = 0.0
		self.var_t = 0.0
		self.mean_t = 0.0
		self.mean_Y = 0.0
		self.n = 0

	def update(self, dY: float, t: float, dt: float) -> None:
		if t == 0.0:
			return
		self.Ys += dY
		Y = self.Ys / t
		self.Yss += Y * dt

		self.n += 1
		Y_mean = self.Yss / t
		d_t = t - self.mean_t
		self.mean_t += d_t / self.n
		d_Y = Y_mean - self.mean_Y
		self.mean_Y += d_Y / self.n
		self.cov_Yt += d_t * (Y_mean - self.mean_Y)
		self.var_t += d_t * (t - self.mean_t)

	def megno(self, t: float) -> float:
		if t == 0.0:
			return 0.0
		return self.Yss / t

	def lyapunov(self, t: float) -> float:
		if t == 0.0 or self.var_t == 0.0:
			return 0.0
		return self.cov_Yt / self.var_t
