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
Fixed-Step Runge-Kutta Integrator
=================================

Classic 4th-order Runge-Kutta for a three-component autonomous ODE

    dy/dt = f(y; θ),    y = (S, I, R)

Each step of size h from state y:

    k1 = f(y)
    k2 = f(y + h/2·k1)
    k3 = f(y + h/2·k2)
    k4 = f(y + h·k3)
    y_next = y + h/6·(k1 + 2·k2 + 2·k3 + k4)

Local truncation error is O(h⁵), global error O(h⁴).

The solver knows nothing about epidemiology: it steps whatever derivative
function it is handed. It also performs no error checking on the output;
a divergent parameter regime yields inf/nan values silently and it is up
to the caller to validate the result.

Time Accumulation
-----------------
Reported times are accumulated (t += h) rather than recomputed from the
step index, so over many steps t[k] can drift from t_start + k·h by a
few ulps. Consumers compare against this accumulated grid, so keep it.
"""

import math
from typing import Optional

import numpy as np

from sirsim.types import (
    DerivativeFunction,
    ModelParameters,
    ModelState,
    SimulationResult,
    TimeSpan,
)


class RK4Solver:
    """
    Fixed-step RK4 solver over a (S, I, R) state.

    Stateless: a single instance can be reused for any number of runs.

    Examples
    --------
    >>> from sirsim.models import get_model
    >>> model = get_model("basic-sir")
    >>> solver = RK4Solver()
    >>> result = solver.solve(
    ...     model.compute_derivatives,
    ...     ModelState(0.99, 0.01, 0.0),
    ...     {"beta": 0.5, "gamma": 0.1},
    ...     time_span=(0.0, 10.0),
    ...     time_step=0.1,
    ... )
    >>> len(result["t"])
    101
    """

    DEFAULT_TIME_SPAN: TimeSpan = (0.0, 100.0)
    DEFAULT_TIME_STEP: float = 0.01

    def solve(
        self,
        derivative_fn: DerivativeFunction,
        initial_state: ModelState,
        params: ModelParameters,
        time_span: Optional[TimeSpan] = None,
        time_step: Optional[float] = None,
    ) -> SimulationResult:
        """
        Integrate from ``initial_state`` over ``time_span``.

        Parameters
        ----------
        derivative_fn : DerivativeFunction
            (state, params) -> rates
        initial_state : ModelState
            State at t_start
        params : ModelParameters
            Passed through to ``derivative_fn`` unchanged
        time_span : Optional[TimeSpan]
            (t_start, t_end). Default: (0, 100)
        time_step : Optional[float]
            Step size h. Default: 0.01

        Returns
        -------
        SimulationResult
            Arrays of length floor((t_end - t_start)/h) + 1, initial point
            included

        Raises
        ------
        ValueError
            If the step is not a positive finite number or t_end < t_start
        """
        t_start, t_end = time_span if time_span is not None else self.DEFAULT_TIME_SPAN
        h = self.DEFAULT_TIME_STEP if time_step is None else float(time_step)

        if not math.isfinite(h) or h <= 0:
            raise ValueError(f"time_step must be a positive finite number, got {time_step}")
        if t_end < t_start:
            raise ValueError(f"time_span must satisfy t_start <= t_end, got {(t_start, t_end)}")

        num_steps = int(math.floor((t_end - t_start) / h))

        t = np.empty(num_steps + 1)
        y_hist = np.empty((num_steps + 1, 3))

        y = np.asarray(initial_state, dtype=float).copy()
        current_time = float(t_start)
        t[0] = current_time
        y_hist[0] = y

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            for k in range(1, num_steps + 1):
                y = self._step_array(derivative_fn, y, params, h)
                current_time += h
                t[k] = current_time
                y_hist[k] = y

        return {
            "t": t,
            "S": y_hist[:, 0].copy(),
            "I": y_hist[:, 1].copy(),
            "R": y_hist[:, 2].copy(),
        }

    def rk4_step(
        self,
        derivative_fn: DerivativeFunction,
        state: ModelState,
        params: ModelParameters,
        h: float,
    ) -> ModelState:
        """
        Advance ``state`` by a single RK4 step of size ``h``.

        Examples
        --------
        >>> solver = RK4Solver()
        >>> decay = lambda x, p: ModelState(-x.S, -x.I, -x.R)
        >>> nxt = solver.rk4_step(decay, ModelState(1.0, 1.0, 1.0), {}, 0.1)
        >>> round(nxt.S, 4)
        0.9048
        """
        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            y = self._step_array(derivative_fn, np.asarray(state, dtype=float), params, h)
        return ModelState(float(y[0]), float(y[1]), float(y[2]))

    @staticmethod
    def _step_array(
        derivative_fn: DerivativeFunction,
        y: np.ndarray,
        params: ModelParameters,
        h: float,
    ) -> np.ndarray:
        def f(v: np.ndarray) -> np.ndarray:
            return np.asarray(derivative_fn(ModelState(v[0], v[1], v[2]), params), dtype=float)

        k1 = f(y)
        k2 = f(y + (h / 2) * k1)
        k3 = f(y + (h / 2) * k2)
        k4 = f(y + h * k3)
        return y + (h / 6) * (k1 + 2 * k2 + 2 * k3 + k4)

    @property
    def name(self) -> str:
        return "RK4 (fixed step)"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"default_span={self.DEFAULT_TIME_SPAN}, default_step={self.DEFAULT_TIME_STEP})"
        )
