"""
This module evaluates the universal-variable special functions c(n, z) used by the
Kepler solver.

The functions are the normalised Stumpff functions, c_n(z) = sum_j (-z)^j / (n + 2j)!,
so that c0 = cos(sqrt z), c1 = sin(sqrt z) / sqrt z and so on, with the hyperbolic forms
following automatically for negative z. Small arguments are summed directly from a
precomputed inverse factorial table with an early exit once a term no longer changes the
sum. Larger arguments are quartered until they fall inside the series region and the
result is rebuilt with the duplication identities for c0..c5, which bounds the recursion
depth to about log4|z|. The integrator_G helper returns X^n c(n, beta X^2), the form the
Kepler equation and the Lagrange coefficients are written in.
"""

from __future__ import annotations
from typing import Tuple

from .integrator_constants import IntegratorConstants as IC


_INV_FACTORIAL = IC.INV_FACTORIAL

CFuncs = Tuple[float, float, float, float, float, float]



def c_n_series(n: int, z: float) -> float:
	n = int(n)
	if n < 0 or n + 2 * (IC.SERIES_TERMS - 1) >= len(_INV_FACTORIAL):
		raise ValueError(f"c({n}, z) is outside the supported index range")
	mz = -float(z)
	power = 1.0
	c_n = 0.0
	for j in range(IC.SERIES_TERMS):
		term = power * _INV_FACTORIAL[n + 2 * j]
		c_n += term
		if c_n != 0.0 and abs(term / c_n) < IC.SERIES_REL_TOL:
			break
		power *= mz
	return c_n


def c_functions(z: float, _depth: int = 0) -> CFuncs:
	z = float(z)
	if not abs(z) > IC.SERIES_Z_MAX:
		return (
			c_n_series(0, z),
			c_n_series(1, z),
			c_n_series(2, z),
			c_n_series(3, z),
			c_n_series(4, z),
			c_n_series(5, z),
		)
	if _depth >= IC.MAX_ARGUMENT_REDUCTIONS:
		raise ValueError(f"argument {z!r} needs more than {IC.MAX_ARGUMENT_REDUCTIONS} quarterings")

	_, c1, c2, c3, c4, c5 = c_functions(0.25 * z, _depth + 1)
	cn4 = c3 * (1.0 + c1) / 8.0
	cn5 = (c5 + c4 + c3 * c2) / 16.0
	cn2 = 0.5 - z * cn4
	cn3 = 1.0 / 6.0 - z * cn5
	cn0 = 1.0 - z * cn2
	cn1 = 1.0 - z * cn3
	return cn0, cn1, cn2, cn3, cn4, cn5


def c(n: int, z: float) -> float:
	if n < 0 or n > IC.DUPLICATION_N_MAX or not abs(z) > IC.SERIES_Z_MAX:
		return c_n_series(n, z)
	return c_functions(z)[n]


def integrator_G(n: int, beta: float, X: float) -> float:
	return X ** n * c(n, beta * X * X)


def g_functions(beta: float, X: float) -> CFuncs:
	cs = c_functions(beta * X * X)
	G = [0.0] * 6
	xn = 1.0
	for n in range(6):
		G[n] = xn * cs[n]
		xn *= X
	return tuple(G)
