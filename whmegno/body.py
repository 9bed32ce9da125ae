"""
This module defines the Body class, a simple data container for individual bodies handed
to the simulation state.

The class stores the mass, the position x/y/z, the velocity vx/vy/vz and the
acceleration ax/ay/az as floating-point attributes and provides a clean string
representation for debugging. It serves as the input record for SimulationState, which
copies the values into its numpy arrays. Accelerations default to zero since they are
filled in by the force evaluator during a step. Units are left to the caller.
"""


class Body:
	def __init__(
		self,
		mass: float,
		x: float = 0.0,
		y: float = 0.0,
		z: float = 0.0,
		vx: float = 0.0,
		vy: float = 0.0,
		vz: float = 0.0,
		ax: float = 0.0,
		ay: float = 0.0,
		az: float = 0.0,
	):
		self.mass = float(mass)
		self.x = float(x)
		self.y = float(y)
		self.z = float(z)
		self.vx = float(vx)
		self.vy = float(vy)
		self.vz = float(vz)
		self.ax = float(ax)
		self.ay = float(ay)
		self.az = float(az)

	@property
	def position(self) -> tuple[float, float, float]:
		return (self.x, self.y, self.z)

	@property
	def velocity(self) -> tuple[float, float, float]:
		return (self.vx, self.vy, self.vz)

	def __repr__(self) -> str:
		return (f"Body(mass={self.mass}, x={self.x}, y={self.y}, z={self.z}, "
				f"vx={self.vx}, vy={self.vy}, vz={self.vz})")
