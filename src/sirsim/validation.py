# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Validation of Parameters, Initial Conditions and Trajectories
=============================================================

Every check returns a ValidationResult; nothing here raises for bad user
input. Three layers:

1. Parameter ranges (per-parameter closed intervals)
2. Initial-condition feasibility: S₀, I₀, R₀ finite, non-negative, and
   S₀ + I₀ + R₀ <= N (N = 1 for the normalized Basic SIR)
3. Trajectory finiteness: catches parameter regimes that pass the range
   checks but still blow up numerically (very large β with very small γ)

Usage
-----
>>> validate_parameter("beta", 0.5)
ValidationResult(is_valid=True, error=None)
>>> validate_parameter("gamma", 0.0).error
'gamma must be between 0.001 and 10'
>>> validate_initial_conditions(500, 300, 200, 1000).is_valid
True
"""

import math
from types import MappingProxyType
from typing import Collection, Dict, Iterable, Mapping, Tuple

import numpy as np

from sirsim.types import SimulationResult, ValidationResult

PARAMETER_RANGES: Mapping[str, Tuple[float, float]] = MappingProxyType({
    "beta": (0.00001, 10),  # low bound admits absolute-population variants
    "gamma": (0.001, 10),
    "mu": (0, 1),
    "alpha": (0, 10),
    "N": (1, 1000000),
})

# Absorbs rounding in S₀ + I₀ + R₀ after rescaling
SUM_TOLERANCE = 1e-10

INSTABILITY_MESSAGE = (
    "Simulation produced invalid values (NaN or Infinity). "
    "Try reducing β or increasing γ."
)

_VALID = ValidationResult(True)


def validate_parameter(name: str, value: float) -> ValidationResult:
    """
    Check a single parameter against its range.

    Parameters
    ----------
    name : str
        One of the keys of PARAMETER_RANGES
    value : float
        Candidate value

    Returns
    -------
    ValidationResult

    Raises
    ------
    KeyError
        If ``name`` has no declared range
    """
    low, high = PARAMETER_RANGES[name]

    if not _is_finite(value):
        return ValidationResult(False, f"{name} must be a valid number")

    if value < low or value > high:
        return ValidationResult(False, f"{name} must be between {low} and {high}")

    return _VALID


def validate_all_parameters(
    params: Mapping[str, float],
    required_names: Iterable[str],
) -> Dict[str, ValidationResult]:
    """
    Validate every parameter a variant requires.

    A required name missing from ``params`` yields "<name> is required";
    names without a declared range are skipped.

    Examples
    --------
    >>> results = validate_all_parameters({"beta": 0.5}, ["beta", "gamma"])
    >>> results["gamma"].error
    'gamma is required'
    """
    results: Dict[str, ValidationResult] = {}
    for name in required_names:
        if params.get(name) is None:
            results[name] = ValidationResult(False, f"{name} is required")
            continue
        if name in PARAMETER_RANGES:
            results[name] = validate_parameter(name, params[name])
    return results


def are_all_valid(results: Mapping[str, ValidationResult]) -> bool:
    return all(r.is_valid for r in results.values())


def validate_initial_conditions(
    S0: float,
    I0: float,
    R0: float,
    N: float = 1.0,
) -> ValidationResult:
    """
    Check that an initial state is feasible for capacity ``N``.

    Parameters
    ----------
    S0, I0, R0 : float
        Initial compartment sizes
    N : float
        Declared population capacity (1 for normalized variants)

    Returns
    -------
    ValidationResult
        Invalid if any value is non-finite or negative, or if the total
        exceeds N by more than SUM_TOLERANCE

    Examples
    --------
    >>> validate_initial_conditions(600, 400, 200, 1000).error
    'Sum of initial conditions (1200.00) must not exceed total population (1000)'
    """
    values = (S0, I0, R0)

    if not all(_is_finite(v) for v in values):
        return ValidationResult(False, "Initial conditions must be valid numbers")

    if any(v < 0 for v in values):
        return ValidationResult(False, "Initial conditions must be non-negative")

    total = S0 + I0 + R0
    if total > N + SUM_TOLERANCE:
        return ValidationResult(
            False,
            f"Sum of initial conditions ({total:.2f}) must not exceed "
            f"total population ({_format_number(N)})",
        )

    return _VALID


def validate_simulation_values(values: Collection[float]) -> ValidationResult:
    """Check that every value in a sequence is finite."""
    arr = np.asarray(values, dtype=float)
    if not np.all(np.isfinite(arr)):
        return ValidationResult(False, INSTABILITY_MESSAGE)
    return _VALID


def validate_simulation_result(result: SimulationResult) -> ValidationResult:
    """
    Check a trajectory for non-finite values.

    Sequences are checked in the order t, S, I, R and the first offending
    one is named in the error.
    """
    if not validate_simulation_values(result["t"]).is_valid:
        return ValidationResult(False, "Time values are invalid")

    labels = (
        ("S", "Susceptible"),
        ("I", "Infected"),
        ("R", "Recovered"),
    )
    for key, label in labels:
        check = validate_simulation_values(result[key])
        if not check.is_valid:
            return ValidationResult(
                False, f"{label} population values are invalid. {check.error}"
            )

    return _VALID


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def _format_number(value: float) -> str:
    """Render integral floats without a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
