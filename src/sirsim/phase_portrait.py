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
Phase Portrait Ensembles

Integrates a family of trajectories from initial conditions spread over
the simplex S + I + R = 1 (scaled by N), for plotting in (S, I, R) phase
space. Initial conditions are drawn from three bands:

    band 1: S in [0.70, 0.95), I in [0.01, 0.21)   mostly susceptible
    band 2: S in [0.40, 0.70), I in [0.05, 0.35)
    band 3: S in [0.20, 0.40), I in [0.10, 0.50)   heavily infected

with R = 1 - S - I. Points falling outside the simplex are dropped.
"""

import warnings
from typing import List, Optional

from typing_extensions import TypedDict

from sirsim.config import select_time_grid
from sirsim.integration import RK4Solver
from sirsim.models import EpidemicModel
from sirsim.types import ModelParameters, ModelState, SimulationResult
from sirsim.validation import INSTABILITY_MESSAGE, validate_simulation_result

# (S start, S width, I start, I width) per band
_BANDS = (
    (0.7, 0.25, 0.01, 0.2),
    (0.4, 0.3, 0.05, 0.3),
    (0.2, 0.2, 0.1, 0.4),
)


class PhasePortrait(TypedDict):
    """
    Keys
    ----
    trajectories : List[SimulationResult]
        Valid trajectories, in sampling order
    skipped : int
        Trajectories dropped for non-finite values
    error : Optional[str]
        Guidance message when no trajectory survived
    """

    trajectories: List[SimulationResult]
    skipped: int
    error: Optional[str]


def sample_initial_conditions(num_trajectories: int = 12, N: float = 1.0) -> List[ModelState]:
    """
    Spread initial conditions over the simplex S + I + R = N.

    Parameters
    ----------
    num_trajectories : int
        Number of candidates; split evenly over three bands
    N : float
        Scale factor (1 for normalized variants)

    Returns
    -------
    List[ModelState]
        Feasible initial conditions, at most ``num_trajectories``

    Examples
    --------
    >>> states = sample_initial_conditions(3)
    >>> [round(s.S, 2) for s in states]
    [0.7, 0.4, 0.2]
    """
    if num_trajectories < 0:
        raise ValueError(f"num_trajectories must be non-negative, got {num_trajectories}")

    band_size = num_trajectories / 3
    conditions = []
    for i in range(num_trajectories):
        band = min(int(i // band_size), 2)
        s_start, s_width, i_start, i_width = _BANDS[band]
        frac = (i - band * band_size) / band_size

        s = s_start + frac * s_width
        infected = i_start + frac * i_width
        r = 1 - s - infected

        if s >= 0 and infected >= 0 and r >= 0 and abs(s + infected + r - 1) < 0.01:
            conditions.append(ModelState(s * N, infected * N, r * N))
    return conditions


def compute_phase_trajectories(
    model: EpidemicModel,
    params: ModelParameters,
    num_trajectories: int = 12,
    solver: Optional[RK4Solver] = None,
) -> PhasePortrait:
    """
    Integrate an ensemble of trajectories for a phase portrait.

    Uses the coarse phase grid for the variant: (0, 100) step 0.1 for
    Basic SIR, (0, 500) step 0.5 with vital dynamics.

    Parameters
    ----------
    model : EpidemicModel
        Variant to integrate
    params : ModelParameters
        Must contain every parameter the variant requires
    num_trajectories : int
        Number of initial conditions to sample
    solver : Optional[RK4Solver]
        Default: RK4Solver()

    Returns
    -------
    PhasePortrait

    Raises
    ------
    MissingParameterError
        If a required parameter is absent
    """
    solver = solver if solver is not None else RK4Solver()
    N = (params.get("N") or 1.0) if model.requires("N") else 1.0
    grid = select_time_grid(model.required_parameters(), phase=True)

    trajectories: List[SimulationResult] = []
    skipped = 0
    for index, x0 in enumerate(sample_initial_conditions(num_trajectories, N)):
        result = solver.solve(model.compute_derivatives, x0, params, grid.span, grid.step)
        check = validate_simulation_result(result)
        if not check.is_valid:
            warnings.warn(
                f"Trajectory {index + 1} failed validation: {check.error}",
                UserWarning,
                stacklevel=2,
            )
            skipped += 1
            continue
        trajectories.append(result)

    error = None
    if not trajectories:
        error = f"Unable to compute trajectories with current parameters. {INSTABILITY_MESSAGE}"

    return {'trajectories': trajectories, 'skipped': skipped, 'error': error}
