from __future__ import annotations
import logging
from typing import Callable, TYPE_CHECKING
import numpy as np

from .forces import fill_accelerations
from .jacobi import JacobiCoordinates
from .kepler_solver import UniversalVariableKeplerSolver
from .megno import MegnoAccumulator, deltad_delta2
from .sim_config import SimConfig
from .tangent_map import TangentMap
from .whfast_scheme import WHFastScheme

if TYPE_CHECKING:
    from .simulation_state import SimulationState

"""
This central module implements the Integrator class that owns everything the Wisdom-Holman step needs besides the simulation state itself. Key responsibilities include the explicit lifecycle of the Jacobi buffers and the eta table (initialize and resize, plus detection of a changed body set before each step), the two half-step entry points called by an external driver, a convenience full step that runs the force evaluator and the variational pass between the halves, seeding and resetting the MEGNO shadow bodies, and the MEGNO and Lyapunov readings. The state is borrowed from the driver and never copied; the integrator only keeps values derived from it.

"""

logger = logging.getLogger(__name__)

ForceEvaluator = Callable[["SimulationState"], None]


class Integrator:

	def __init__(
		self,
		state: "SimulationState",
		cfg: SimConfig | None = None,
		*,
		rng: np.random.Generator | None = None,
	) -> None:
		self.state = state
		self.cfg = cfg if cfg is not None else SimConfig()
		self.force_is_velocity_dependent = bool(self.cfg.force_is_velocity_dependent)

		self.jacobi = JacobiCoordinates()
		self.megno_stats = MegnoAccumulator()
		self._uv_solver = UniversalVariableKeplerSolver.from_config(self.cfg)
		self._tmap = TangentMap(state)
		self._scheme = WHFastScheme(self)
		self._rng = rng if rng is not None else np.random.default_rng(self.cfg.seed)

	def initialize(self) -> None:
		self.jacobi.resize(self.state)

	def resize(self) -> None:
		logger.debug("resizing Jacobi buffers from %d to %d bodies", self.jacobi.n, self.state.n_bodies)
		self.jacobi.resize(self.state)

	def _ensure_initialized(self) -> None:
		if self.jacobi.matches(self.state):
			return
		if self.jacobi.allocated:
			self.resize()
		else:
			self.initialize()

	def step_first_half(self) -> None:
		self._scheme.step_first_half()

	def step_second_half(self) -> None:
		self._scheme.step_second_half()

	def calculate_megno_acceleration(self) -> None:
		self._tmap.calculate_acceleration()

	def megno_update(self) -> None:
		state = self.state
		if not state.n_megno or state.t == 0.0:
			return
		dY = 2.0 * state.dt * state.t * deltad_delta2(state)
		self.megno_stats.update(dY, state.t, state.dt)

	def step(self, force: ForceEvaluator | None = None) -> None:
		self.step_first_half()
		(force or fill_accelerations)(self.state)
		if self.state.n_megno:
			self.calculate_megno_acceleration()
			self.megno_update()
		self.step_second_half()

	def integrate(self, t_end: float, force: ForceEvaluator | None = None) -> int:
		n_steps = 0
		while self.state.t < t_end:
			self.step(force)
			n_steps += 1
		return n_steps

	def megno_init(self, delta: float | None = None) -> None:
		state = self.state
		if delta is None:
			delta = self.cfg.megno_delta
		delta = float(delta)
		self.megno_stats.reset()
		state.remove_shadows()
		n = state.n_bodies
		dpos = self._rng.normal(0.0, delta, size=(n, 3))
		dvel = self._rng.normal(0.0, delta, size=(n, 3))
		state.add_shadows(dpos, dvel)
		logger.debug("seeded %d shadow bodies with delta=%g", n, delta)

	def megno_reset(self) -> None:
		self.megno_stats.reset()
		self.state.remove_shadows()

	def deltad_delta2(self) -> float:
		return deltad_delta2(self.state)

	def megno(self) -> float:
		return self.megno_stats.megno(self.state.t)

	def lyapunov(self) -> float:
		return self.megno_stats.lyapunov(self.state.t)
