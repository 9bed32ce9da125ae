"""
This module implements BodyView, a proxy class providing Body-like access to individual
entries stored in the simulation state's numpy arrays.

Coordinate attributes (x, y, z, vx, vy, vz, ax, ay, az) and the mass are generated as
properties that read and write the appropriate array cells of the parent state, so real
bodies and shadow bodies can be inspected and edited without copying. The view assumes
the parent state keeps valid array structures and that the index stays within bounds.
Writing a mass through a view is picked up by the integrator on its next step, which
compares the masses against the ones its Jacobi eta table was built from; on a real body
the write is mirrored into its shadow row.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .simulation_state import SimulationState




def _component(array_name: str, axis: int) -> property:
	def getter(self) -> float:
		return float(getattr(self._state, array_name)[self._i, axis])

	def setter(self, v: float) -> None:
		getattr(self._state, array_name)[self._i, axis] = float(v)

	return property(getter, setter)


class BodyView:
	__slots__ = ("_state", "_i")

	def __init__(self, state: "SimulationState", idx: int) -> None:
		self._state = state
		self._i = int(idx)

	@property
	def index(self) -> int:
		return self._i

	@property
	def is_shadow(self) -> bool:
		return self._i >= self._state.n_bodies

	@property
	def mass(self) -> float:
		return float(self._state._mass[self._i])
	@mass.setter
	def mass(self, v: float) -> None:
		state = self._state
		state._mass[self._i] = float(v)
		if state.n_megno and self._i < state.n_bodies:
			state._mass[self._i + state.n_bodies] = float(v)

	x = _component("_pos", 0)
	y = _component("_pos", 1)
	z = _component("_pos", 2)
	vx = _component("_vel", 0)
	vy = _component("_vel", 1)
	vz = _component("_vel", 2)
	ax = _component("_acc", 0)
	ay = _component("_acc", 1)
	az = _component("_acc", 2)

	def __repr__(self) -> str:
		kind = "Shadow" if self.is_shadow else "Body"
		return (f"{kind}(mass={self.mass}, x={self.x}, y={self.y}, z={self.z}, "
				f"vx={self.vx}, vy={self.vy}, vz={self.vz})")
