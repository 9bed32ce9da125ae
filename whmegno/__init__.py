"""
This initialization file serves as the main entry point for the whmegno package, exposing
the public API through a clean namespace.

It re-exports the simulation context (SimulationState, Body, BodyView), the configuration
(SimConfig), the Wisdom-Holman integrator with its Jacobi coordinate transforms and
universal-variable Kepler solver, the special-function evaluator, the default force
evaluator, and the MEGNO tangent map and statistics. A NullHandler is attached to the
package logger so that applications decide where log records go.
"""

import logging

from .sim_config import SimConfig
from .body import Body
from .body_view import BodyView
from .simulation_state import SimulationState
from .stumpff import c, c_n_series, c_functions, integrator_G, g_functions
from .kepler_solver import (
    UniversalVariableKeplerSolver,
    KeplerConvergenceError,
    KeplerSolution,
)
from .jacobi import JacobiCoordinates
from .forces import gravitational_accel, fill_accelerations
from .tangent_map import TangentMap
from .megno import MegnoAccumulator, deltad_delta2
from .whfast_scheme import WHFastScheme
from .integrator import Integrator


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    "SimConfig",
    "Body",
    "BodyView",
    "SimulationState",
    "c",
    "c_n_series",
    "c_functions",
    "integrator_G",
    "g_functions",
    "UniversalVariableKeplerSolver",
    "KeplerConvergenceError",
    "KeplerSolution",
    "JacobiCoordinates",
    "gravitational_accel",
    "fill_accelerations",
    "TangentMap",
    "MegnoAccumulator",
    "deltad_delta2",
    "WHFastScheme",
    "Integrator",
]
