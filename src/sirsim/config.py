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
Default configuration for the simulation engine.

All values can be overridden per controller through keyword arguments;
this module only holds the defaults.
"""

from typing import Collection, NamedTuple

from sirsim.types import ModelParameters, ModelState, TimeSpan


class TimeGrid(NamedTuple):
    """Integration interval and fixed step size."""

    span: TimeSpan
    step: float


DEFAULT_MODEL = "basic-sir"

DEFAULT_PARAMETERS: ModelParameters = {
    "beta": 0.5,
    "gamma": 0.1,
    "mu": 0.01,
    "alpha": 0.05,
    "N": 1000.0,
}

# Normalized: fractions of a unit population
DEFAULT_INITIAL_STATE = ModelState(S=0.99, I=0.01, R=0.0)

# Seconds of quiet after the last edit before recomputing
DEBOUNCE_DELAY = 0.3

# Closed epidemic: fast dynamics, fine step
EPIDEMIC_TIME_GRID = TimeGrid(span=(0.0, 100.0), step=0.01)

# Vital dynamics evolve on the slower demographic time scale
VITAL_DYNAMICS_TIME_GRID = TimeGrid(span=(0.0, 500.0), step=0.1)

# Phase portraits integrate many trajectories, so use coarser steps
PHASE_EPIDEMIC_TIME_GRID = TimeGrid(span=(0.0, 100.0), step=0.1)
PHASE_VITAL_DYNAMICS_TIME_GRID = TimeGrid(span=(0.0, 500.0), step=0.5)


def select_time_grid(required_parameters: Collection[str], phase: bool = False) -> TimeGrid:
    """
    Pick the integration grid for a variant.

    Variants with vital dynamics (those requiring ``mu``) use the long grid.

    Parameters
    ----------
    required_parameters : Collection[str]
        Required-parameter set of the variant
    phase : bool
        If True, return the coarser phase-portrait grid

    Returns
    -------
    TimeGrid

    Examples
    --------
    >>> select_time_grid({"beta", "gamma"})
    TimeGrid(span=(0.0, 100.0), step=0.01)
    >>> select_time_grid({"beta", "gamma", "mu", "N"}).step
    0.1
    """
    vital = "mu" in required_parameters
    if phase:
        return PHASE_VITAL_DYNAMICS_TIME_GRID if vital else PHASE_EPIDEMIC_TIME_GRID
    return VITAL_DYNAMICS_TIME_GRID if vital else EPIDEMIC_TIME_GRID
