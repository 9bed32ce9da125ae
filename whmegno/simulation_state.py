"""
This module manages the simulation context shared between the driver and the integrator.

The SimulationState class maintains numpy arrays for masses, positions, velocities and
accelerations together with the scalar state (time, timestep, gravitational constant,
softening length). Real bodies occupy the first n_bodies rows of every array and MEGNO
shadow bodies, when present, are appended after them so that shadow row n_bodies + k
holds the variation of real body k. The class validates input, exposes views on the real
and shadow blocks, and can be snapshotted and restored. Quantities derived from the
masses (the Jacobi eta table) are cached elsewhere and compared against it. It assumes three
spatial dimensions throughout.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Sequence, TYPE_CHECKING
import numpy as np

from .body import Body
from .body_view import BodyView

if TYPE_CHECKING:
    from .sim_config import SimConfig


logger = logging.getLogger(__name__)


class SimulationState:

	def __init__(self, G: float = 1.0, dt: float = 0.01, softening: float = 0.0, t: float = 0.0):
		self.G: float = float(G)
		self.dt: float = float(dt)
		self.softening: float = float(softening)
		self.t: float = float(t)
		self.n_bodies: int = 0
		self.n_megno: int = 0
		self._mass: np.ndarray = np.empty(0, dtype=np.float64)
		self._pos: np.ndarray = np.empty((0, 3), dtype=np.float64)
		self._vel: np.ndarray = np.empty((0, 3), dtype=np.float64)
		self._acc: np.ndarray = np.empty((0, 3), dtype=np.float64)

	@classmethod
	def from_config(cls, cfg: "SimConfig", bodies: Iterable[Body] | None = None) -> "SimulationState":
		state = cls(G=cfg.G, dt=cfg.dt, softening=cfg.softening)
		if bodies is not None:
			state.build_state(list(bodies))
		return state

	@property
	def n_total(self) -> int:
		return self.n_bodies + self.n_megno

	@property
	def pos(self) -> np.ndarray:
		return self._pos[:self.n_bodies]

	@property
	def vel(self) -> np.ndarray:
		return self._vel[:self.n_bodies]

	@property
	def acc(self) -> np.ndarray:
		return self._acc[:self.n_bodies]

	@property
	def mass(self) -> np.ndarray:
		return self._mass[:self.n_bodies]

	@property
	def shadow_pos(self) -> np.ndarray:
		return self._pos[self.n_bodies:]

	@property
	def shadow_vel(self) -> np.ndarray:
		return self._vel[self.n_bodies:]

	@property
	def shadow_acc(self) -> np.ndarray:
		return self._acc[self.n_bodies:]

	@property
	def shadow_mass(self) -> np.ndarray:
		return self._mass[self.n_bodies:]

	@property
	def bodies(self) -> List[BodyView]:
		return [BodyView(self, i) for i in range(self.n_total)]

	def __len__(self) -> int:
		return self.n_total

	def __getitem__(self, idx: int) -> BodyView:
		idx = int(idx)
		if idx < 0:
			idx += self.n_total
		if not 0 <= idx < self.n_total:
			raise IndexError(f"body index {idx} out of range for {self.n_total} bodies")
		return BodyView(self, idx)



	@pos.setter
	def pos(self, value: np.ndarray) -> None:
		self._pos[:self.n_bodies] = self._checked_block(value, "pos")

	@vel.setter
	def vel(self, value: np.ndarray) -> None:
		self._vel[:self.n_bodies] = self._checked_block(value, "vel")

	@acc.setter
	def acc(self, value: np.ndarray) -> None:
		self._acc[:self.n_bodies] = self._checked_block(value, "acc")

	@mass.setter
	def mass(self, value: np.ndarray) -> None:
		arr = np.asarray(value, dtype=np.float64).ravel()
		if arr.shape != (self.n_bodies,):
			raise ValueError(f"shape mismatch when assigning to mass: "
							 f"expected {(self.n_bodies,)}, got {arr.shape}")
		self._check_masses(arr)
		self._mass[:self.n_bodies] = arr
		if self.n_megno:
			self._mass[self.n_bodies:] = arr

	def _checked_block(self, value, label: str) -> np.ndarray:
		arr = np.asarray(value, dtype=np.float64)
		if arr.ndim == 1:
			arr = arr.reshape(-1, 3)
		if arr.shape != (self.n_bodies, 3):
			raise ValueError(f"shape mismatch when assigning to {label}: "
							 f"expected {(self.n_bodies, 3)}, got {arr.shape}")
		return arr

	@staticmethod
	def _check_masses(m: np.ndarray) -> None:
		if np.any(m <= 0) or not np.all(np.isfinite(m)):
			raise ValueError("all masses must be positive finite numbers")

	def build_state(
		self,
		bodies: Sequence[Body] | None = None,
		masses=None,
		positions=None,
		velocities=None,
	) -> None:
		if bodies is None:
			if masses is None or positions is None:
				raise ValueError("either bodies or masses and positions are required")
			mass = np.asarray(masses, dtype=np.float64).ravel()
			pos = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
			if velocities is None:
				vel = np.zeros_like(pos)
			else:
				vel = np.asarray(velocities, dtype=np.float64).reshape(-1, 3)
		else:
			mass = np.array([b.mass for b in bodies], dtype=np.float64)
			pos = np.array([(b.x, b.y, b.z) for b in bodies], dtype=np.float64).reshape(-1, 3)
			vel = np.array([(b.vx, b.vy, b.vz) for b in bodies], dtype=np.float64).reshape(-1, 3)

		if not (mass.shape[0] == pos.shape[0] == vel.shape[0]):
			raise ValueError(f"inconsistent body counts: {mass.shape[0]} masses, "
							 f"{pos.shape[0]} positions, {vel.shape[0]} velocities")
		self._check_masses(mass)
		if not np.all(np.isfinite(pos)) or not np.all(np.isfinite(vel)):
			raise ValueError("positions and velocities must be finite")

		self.n_bodies = int(mass.shape[0])
		self.n_megno = 0
		self._mass = mass.copy()
		self._pos = pos.copy()
		self._vel = vel.copy()
		self._acc = np.zeros_like(self._pos)

	def add(self, body: Body) -> None:
		if self.n_megno:
			raise ValueError("cannot add real bodies while shadow bodies are attached")
		self._check_masses(np.array([body.mass]))
		self._mass = np.append(self._mass, body.mass)
		self._pos = np.vstack([self._pos, [body.x, body.y, body.z]])
		self._vel = np.vstack([self._vel, [body.vx, body.vy, body.vz]])
		self._acc = np.vstack([self._acc, [body.ax, body.ay, body.az]])
		self.n_bodies += 1

	def add_shadows(self, dpos: np.ndarray, dvel: np.ndarray) -> None:
		n = self.n_bodies
		dpos = np.asarray(dpos, dtype=np.float64).reshape(-1, 3)
		dvel = np.asarray(dvel, dtype=np.float64).reshape(-1, 3)
		if dpos.shape != (n, 3) or dvel.shape != (n, 3):
			raise ValueError(f"shadow offsets must have shape {(n, 3)}, got {dpos.shape} and {dvel.shape}")
		self.remove_shadows()
		self._mass = np.concatenate([self._mass, self._mass[:n]])
		self._pos = np.vstack([self._pos, dpos])
		self._vel = np.vstack([self._vel, dvel])
		self._acc = np.vstack([self._acc, np.zeros((n, 3))])
		self.n_megno = n
		logger.debug("attached %d shadow bodies", n)

	def remove_shadows(self) -> None:
		if not self.n_megno:
			return
		n = self.n_bodies
		self._mass = self._mass[:n].copy()
		self._pos = self._pos[:n].copy()
		self._vel = self._vel[:n].copy()
		self._acc = self._acc[:n].copy()
		self.n_megno = 0

	def reset(self) -> None:
		self.t = 0.0
		self.n_bodies = 0
		self.n_megno = 0
		self._mass = np.empty(0, dtype=np.float64)
		self._pos = np.empty((0, 3), dtype=np.float64)
		self._vel = np.empty((0, 3), dtype=np.float64)
		self._acc = np.empty((0, 3), dtype=np.float64)

	def snapshot(self) -> dict:
		return {
			"t": self.t,
			"dt": self.dt,
			"G": self.G,
			"softening": self.softening,
			"n_bodies": self.n_bodies,
			"n_megno": self.n_megno,
			"masses": self._mass.copy(),
			"positions": self._pos.copy(),
			"velocities": self._vel.copy(),
			"acc": self._acc.copy(),
		}

	def restore(self, snap: dict) -> None:
		self.t = float(snap["t"])
		self.dt = float(snap["dt"])
		self.G = float(snap["G"])
		self.softening = float(snap["softening"])
		self.n_bodies = int(snap["n_bodies"])
		self.n_megno = int(snap["n_megno"])
		self._mass = snap["masses"].copy()
		self._pos = snap["positions"].copy()
		self._vel = snap["velocities"].copy()
		self._acc = snap["acc"].copy()
