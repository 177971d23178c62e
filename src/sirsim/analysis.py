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
Epidemic Threshold and Outcome Analysis

Derived quantities for consumers of a published simulation:

**Threshold:**
    R₀ > 1: each case infects more than one other, epidemic grows
    R₀ <= 1: disease dies out

**Herd Immunity Threshold:**
    H = 1 - 1/R₀
    Fraction immune needed to prevent an epidemic.

**Outbreak Summary:**
    Peak prevalence max I(t) and its time, final compartment sizes,
    attack rate (S₀ - S_end)/S₀ and population change.
"""

import math

import numpy as np
from typing_extensions import TypedDict

from sirsim.types import SimulationResult

EPIDEMIC_MESSAGE = "Epidemic threshold exceeded"
DIE_OUT_MESSAGE = "Disease will die out"


class EpidemicSummary(TypedDict):
    """
    Scalar summary of a trajectory.

    Keys
    ----
    peak_infected : float
        max I(t)
    peak_time : float
        First t at which I(t) is maximal
    final_susceptible : float
        S at the last time point
    final_recovered : float
        R at the last time point
    initial_population : float
        S + I + R at t[0]
    final_population : float
        S + I + R at the last time point
    attack_rate : float
        (S₀ - S_end)/S₀, 0 when S₀ = 0
    """

    peak_infected: float
    peak_time: float
    final_susceptible: float
    final_recovered: float
    initial_population: float
    final_population: float
    attack_rate: float


def _safe_r0(r0: float) -> float:
    return r0 if math.isfinite(r0) else 0.0


def is_epidemic(r0: float) -> bool:
    """True when R₀ exceeds 1; non-finite values count as 0."""
    return _safe_r0(r0) > 1


def interpret_r0(r0: float) -> str:
    return EPIDEMIC_MESSAGE if is_epidemic(r0) else DIE_OUT_MESSAGE


def format_r0(r0: float) -> str:
    """
    >>> format_r0(5.0)
    'R₀ = 5.000'
    >>> format_r0(float("nan"))
    'R₀ = 0.000'
    """
    return f"R₀ = {_safe_r0(r0):.3f}"


def herd_immunity_threshold(r0: float) -> float:
    """
    Fraction of the population that must be immune to prevent spread.

    Returns 0 when R₀ <= 1 and 1 for an unbounded R₀.

    Examples
    --------
    >>> herd_immunity_threshold(4.0)
    0.75
    """
    if math.isinf(r0) and r0 > 0:
        return 1.0
    if not math.isfinite(r0) or r0 <= 1:
        return 0.0
    return 1.0 - 1.0 / r0


def total_population(result: SimulationResult) -> np.ndarray:
    """S + I + R at every time point."""
    return np.asarray(result["S"]) + np.asarray(result["I"]) + np.asarray(result["R"])


def summarize_epidemic(result: SimulationResult) -> EpidemicSummary:
    """
    Peak, final sizes and attack rate of a trajectory.

    Parameters
    ----------
    result : SimulationResult
        A validated (finite) trajectory with at least one point

    Returns
    -------
    EpidemicSummary

    Raises
    ------
    ValueError
        If the trajectory is empty
    """
    t = np.asarray(result["t"])
    S = np.asarray(result["S"])
    I = np.asarray(result["I"])
    R = np.asarray(result["R"])
    if t.size == 0:
        raise ValueError("Cannot summarize an empty trajectory")

    peak_idx = int(np.argmax(I))
    population = total_population(result)
    s0 = float(S[0])

    return {
        'peak_infected': float(I[peak_idx]),
        'peak_time': float(t[peak_idx]),
        'final_susceptible': float(S[-1]),
        'final_recovered': float(R[-1]),
        'initial_population': float(population[0]),
        'final_population': float(population[-1]),
        'attack_rate': (s0 - float(S[-1])) / s0 if s0 > 0 else 0.0,
    }
