from __future__ import annotations
import math

from .sim_config import SimConfig

"""
This module centralizes numerical constants shared by the special-function evaluator and the Kepler solver. The IntegratorConstants class exposes the inverse factorial lookup table, the truncation length and early-exit threshold of the c(n, z) power series, the argument bound below which the series is used directly, the cap on argument quarterings, and the solver defaults sourced from SimConfig. Only the names defined here exist; a misspelt constant raises AttributeError.


"""


class IntegratorConstants:
    _cfg = SimConfig()

    INV_FACTORIAL = tuple(1.0 / math.factorial(k) for k in range(35))

    SERIES_TERMS     = 13
    SERIES_REL_TOL   = 1e-17
    SERIES_Z_MAX     = 0.5
    DUPLICATION_N_MAX = 5

    # |z| up to SERIES_Z_MAX * 4**MAX_ARGUMENT_REDUCTIONS
    MAX_ARGUMENT_REDUCTIONS = 64

    KEPLER_MAX_ITERATIONS   = _cfg.kepler_max_iterations
    KEPLER_TOLERANCE        = _cfg.kepler_tolerance
    KEPLER_MAX_SUBDIVISIONS = _cfg.kepler_max_subdivisions


__all__ = ["IntegratorConstants"]
