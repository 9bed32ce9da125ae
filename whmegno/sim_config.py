from __future__ import annotations
from dataclasses import dataclass

"""
This configuration module defines the tunable parameters of the Wisdom-Holman integrator through the SimConfig dataclass. Key parameters include the gravitational constant, the fixed timestep, the softening length used by the default force evaluator and the variational pass, the velocity-dependence flag that selects the heliocentric reconstruction after the first half step, the Newton iteration cap and tolerance of the universal Kepler solver, the sub-step fallback depth, and the seed and scale of the MEGNO shadow offsets. The class provides a copy method for configuration inheritance. It assumes users understand the physical implications of the values they pick.

"""


@dataclass
class SimConfig:
    G: float = 1.0
    dt: float = 0.01
    softening: float = 0.0
    force_is_velocity_dependent: bool = True
    kepler_max_iterations: int = 20
    kepler_tolerance: float = 1e-15
    kepler_max_subdivisions: int = 8
    megno_delta: float = 1e-16
    seed: int | None = None

    def copy(self) -> "SimConfig":
        new = object.__new__(SimConfig)
        new.__dict__ = dict(getattr(self, "__dict__", {}))
        return new
