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
Core Types for SIR Simulation

Defines the value types shared by models, the integrator, the validators
and the simulation controller:

- ModelState: compartment sizes (S, I, R) at a single instant
- ModelParameters: rate constants and population size
- SimulationResult: index-aligned time series from one integration run
- ValidationResult: outcome of a single validation check
- TimeSpan / DerivativeFunction: integrator call signatures

Shape Conventions
-----------------
A SimulationResult holds four 1-D arrays of identical length
(n_steps + 1,); element k of every array refers to the same instant t[k].

Usage
-----
>>> from sirsim.types import ModelState, ModelParameters
>>>
>>> state = ModelState(S=0.99, I=0.01, R=0.0)
>>> params: ModelParameters = {"beta": 0.5, "gamma": 0.1}
>>> state.S + state.I + state.R
1.0
"""

from typing import Callable, NamedTuple, Optional, Tuple

import numpy as np
from typing_extensions import TypedDict


class ModelState(NamedTuple):
    """
    Compartment sizes at a single instant.

    Counts for absolute-population variants, fractions of a unit population
    for the normalized Basic SIR variant. Also used for derivatives, in
    which case each field is a rate (dS/dt, dI/dt, dR/dt).

    Non-negativity is not enforced here: a negative compartment is a sign
    the caller chose a suspect parameter regime.

    Examples
    --------
    >>> x = ModelState(990.0, 10.0, 0.0)
    >>> x.I
    10.0
    >>> x._replace(R=5.0)
    ModelState(S=990.0, I=10.0, R=5.0)
    """

    S: float
    I: float
    R: float


class ModelParameters(TypedDict, total=False):
    """
    Rate constants for an SIR variant.

    Only ``beta`` and ``gamma`` are shared by every variant; ``mu``,
    ``alpha`` and ``N`` appear only for the variants that declare them in
    their required-parameter set.

    Keys
    ----
    beta : float
        Transmission rate [1/time], > 0
    gamma : float
        Recovery rate [1/time], > 0
    mu : float
        Natural birth/death rate [1/time], >= 0
    alpha : float
        Disease-induced death rate [1/time], >= 0
    N : float
        Declared population capacity, > 0
    """

    beta: float
    gamma: float
    mu: float
    alpha: float
    N: float


class SimulationResult(TypedDict):
    """
    Time series produced by a single integration run.

    All four arrays have shape (n_steps + 1,) and are index-aligned; the
    first element is the initial condition.

    Keys
    ----
    t : np.ndarray
        Time points
    S : np.ndarray
        Susceptible compartment over time
    I : np.ndarray
        Infected compartment over time
    R : np.ndarray
        Recovered compartment over time
    """

    t: np.ndarray
    S: np.ndarray
    I: np.ndarray
    R: np.ndarray


class ValidationResult(NamedTuple):
    """
    Outcome of a validation check.

    ``error`` is None when ``is_valid`` is True and holds a user-facing
    message otherwise.
    """

    is_valid: bool
    error: Optional[str] = None


TimeSpan = Tuple[float, float]
"""Integration interval (t_start, t_end)."""

DerivativeFunction = Callable[[ModelState, ModelParameters], ModelState]
"""
Right-hand side of the ODE system: (state, params) -> rates.

Typically a bound ``EpidemicModel.compute_derivatives``.
"""


__all__ = [
    "ModelState",
    "ModelParameters",
    "SimulationResult",
    "ValidationResult",
    "TimeSpan",
    "DerivativeFunction",
]
