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
Simulation Controller
=====================

Owns the current model selection, parameters and initial state; reacts to
edits by debouncing, validating and re-running the integrator; publishes
the latest SimulationResult and R₀.

State Machine
-------------

    IDLE ──edit──> DEBOUNCING ──timer──> COMPUTING ──publish──> IDLE
                    │      ^
                    └edit──┘  (cancel timer, re-arm)

- Any edit cancels the pending timer (if any) and arms a new one, so only
  the last of a burst of edits is computed.
- COMPUTING validates parameters and initial state, computes R₀, picks a
  time grid, integrates and validates the trajectory. Any failure
  publishes (None, 0.0) instead of a result.
- A model switch preserves β and γ, fills in the optional parameters the
  new variant needs, and rescales the initial state when moving between
  the normalized (Basic SIR) and absolute-population variants.

Diagnostics go through ``warnings``; a ConfigurationError raised while
computing propagates to whoever drove the scheduler, after the controller
has returned to IDLE.

Published trajectories are frozen (read-only numpy arrays) and handed out
as shallow copies of the result dict.

Timing
------
Constructed inside a running event loop, the controller schedules on that
loop and recomputes in real time. Outside one it falls back to a
VirtualClockScheduler that the caller drives with ``advance()``; nothing
is published until the clock moves or ``flush()`` is called.

Usage
-----
>>> from sirsim.scheduling import VirtualClockScheduler
>>> scheduler = VirtualClockScheduler()
>>> controller = SimulationController(scheduler=scheduler)
>>> controller.set_parameter("beta", 0.3)
>>> scheduler.advance(0.3)
1
>>> round(controller.r0_value, 3)
3.0
"""

import asyncio
import math
import time
import warnings
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from sirsim.config import (
    DEBOUNCE_DELAY,
    DEFAULT_INITIAL_STATE,
    DEFAULT_MODEL,
    DEFAULT_PARAMETERS,
    select_time_grid,
)
from sirsim.integration import RK4Solver
from sirsim.models import MODEL_REGISTRY, PARAMETER_NAMES, EpidemicModel
from sirsim.scheduling import (
    AsyncioScheduler,
    ScheduledHandle,
    Scheduler,
    VirtualClockScheduler,
)
from sirsim.types import ModelParameters, ModelState, SimulationResult
from sirsim.validation import (
    are_all_valid,
    validate_all_parameters,
    validate_initial_conditions,
    validate_simulation_result,
)

OPTIONAL_PARAMETERS = ("mu", "alpha", "N")

Listener = Callable[["SimulationController"], None]


class ControllerState(Enum):
    """Lifecycle of a recomputation."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    COMPUTING = "computing"


def _default_scheduler() -> Scheduler:
    """Real-time scheduler inside an event loop, virtual clock otherwise."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return VirtualClockScheduler()
    return AsyncioScheduler(loop)


class SimulationController:
    """
    Debounced, validated orchestration of SIR simulations.

    Parameters
    ----------
    model : str
        Registry key of the initial variant. Default: "basic-sir"
    parameters : Optional[Mapping[str, float]]
        Initial parameter set. Default: DEFAULT_PARAMETERS
    initial_state : Optional[ModelState]
        Initial compartments. Default: (0.99, 0.01, 0) normalized
    debounce_delay : float
        Quiet period after the last edit before recomputing, in the
        scheduler's time unit (seconds). Default: 0.3
    scheduler : Optional[Scheduler]
        Runs the debounce callback. Default: an AsyncioScheduler on the
        running event loop if there is one, otherwise a fresh
        VirtualClockScheduler. A virtual clock never moves by itself:
        the caller must drive it through ``controller.scheduler.advance()``
        or ``run_pending()``, or call ``flush()``/``run_simulation()``
    solver : Optional[RK4Solver]
        Integrator. Default: RK4Solver()
    registry : Mapping[str, EpidemicModel]
        Variant lookup. Default: MODEL_REGISTRY

    Raises
    ------
    ValueError
        If ``model`` is not registered or ``debounce_delay`` is negative

    Examples
    --------
    >>> scheduler = VirtualClockScheduler()
    >>> ctrl = SimulationController(scheduler=scheduler)
    >>> ctrl.set_selected_model("natural-demographics")
    >>> ctrl.initial_state
    ModelState(S=990.0, I=10.0, R=0.0)
    >>> scheduler.run_pending()
    1
    >>> ctrl.simulation_result is not None
    True
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        parameters: Optional[Mapping[str, float]] = None,
        initial_state: Optional[ModelState] = None,
        debounce_delay: float = DEBOUNCE_DELAY,
        scheduler: Optional[Scheduler] = None,
        solver: Optional[RK4Solver] = None,
        registry: Mapping[str, EpidemicModel] = MODEL_REGISTRY,
    ):
        if model not in registry:
            raise ValueError(f"Unknown model '{model}'. Choose from: {list(registry)}")
        if debounce_delay < 0:
            raise ValueError(f"debounce_delay must be non-negative, got {debounce_delay}")

        self._registry = registry
        self._selected_model = model
        self._parameters: ModelParameters = dict(
            DEFAULT_PARAMETERS if parameters is None else parameters
        )
        self._initial_state = (
            DEFAULT_INITIAL_STATE if initial_state is None else ModelState(*initial_state)
        )
        self._debounce_delay = debounce_delay
        self._scheduler: Scheduler = scheduler if scheduler is not None else _default_scheduler()
        self._solver = solver if solver is not None else RK4Solver()

        # Published outputs
        self._simulation_result: Optional[SimulationResult] = None
        self._r0_value = 0.0
        self._parameter_errors: Dict[str, str] = {}
        self._initial_state_error = ""
        self._simulation_error = ""

        self._state = ControllerState.IDLE
        self._handle: Optional[ScheduledHandle] = None
        self._listeners: List[Listener] = []

        self._stats = {
            'runs': 0,
            'successes': 0,
            'failures': 0,
            'debounce_cancellations': 0,
            'total_time': 0.0,
        }

        # First result once the initial quiet period elapses
        self._schedule()

    # ========================================================================
    # Read-only views
    # ========================================================================

    @property
    def selected_model(self) -> str:
        return self._selected_model

    @property
    def model(self) -> EpidemicModel:
        return self._registry[self._selected_model]

    @property
    def parameters(self) -> ModelParameters:
        """Copy of the current parameters."""
        return dict(self._parameters)

    @property
    def initial_state(self) -> ModelState:
        return self._initial_state

    @property
    def simulation_result(self) -> Optional[SimulationResult]:
        """Latest published trajectory; arrays are read-only."""
        if self._simulation_result is None:
            return None
        return dict(self._simulation_result)

    @property
    def r0_value(self) -> float:
        return self._r0_value

    @property
    def parameter_errors(self) -> Dict[str, str]:
        return dict(self._parameter_errors)

    @property
    def initial_state_error(self) -> str:
        return self._initial_state_error

    @property
    def simulation_error(self) -> str:
        """Last R₀ or numerical-instability message, empty if none."""
        return self._simulation_error

    @property
    def is_valid(self) -> bool:
        return not self._parameter_errors and not self._initial_state_error

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def debounce_delay(self) -> float:
        return self._debounce_delay

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    # ========================================================================
    # Edits
    # ========================================================================

    def set_parameter(self, name: str, value: float) -> None:
        """
        Replace a single parameter and schedule a recomputation.

        Raises
        ------
        ValueError
            If ``name`` is not one of beta, gamma, mu, alpha, N
        """
        if name not in PARAMETER_NAMES:
            raise ValueError(
                f"Unknown parameter '{name}'. Choose from: {list(PARAMETER_NAMES)}"
            )
        self._parameters = {**self._parameters, name: value}
        self._schedule()

    def set_initial_state(self, partial: Optional[Mapping[str, float]] = None, **values: float) -> None:
        """
        Update any of S, I, R and schedule a recomputation.

        Examples
        --------
        >>> ctrl = SimulationController()
        >>> ctrl.set_initial_state({"I": 0.02}, S=0.98)
        >>> ctrl.initial_state
        ModelState(S=0.98, I=0.02, R=0.0)
        """
        updates = {**(partial or {}), **values}
        unknown = set(updates) - set(ModelState._fields)
        if unknown:
            raise ValueError(f"Unknown compartment(s): {sorted(unknown)}")
        self._initial_state = self._initial_state._replace(**updates)
        self._schedule()

    def set_selected_model(self, name: str) -> None:
        """
        Switch variant, carrying parameters and rescaling the initial state.

        Unknown names are ignored with a UserWarning.
        """
        if name not in self._registry:
            warnings.warn(f"Unknown model: {name}", UserWarning, stacklevel=2)
            return

        old_model = self.model
        new_model = self._registry[name]
        current = self._parameters

        preserved: ModelParameters = {
            k: current[k] for k in ("beta", "gamma") if k in current
        }
        for opt in OPTIONAL_PARAMETERS:
            if new_model.requires(opt):
                value = current.get(opt)
                preserved[opt] = DEFAULT_PARAMETERS[opt] if value is None else value

        old_has_n = old_model.requires("N")
        new_has_n = new_model.requires("N")
        S, I, R = self._initial_state

        if not old_has_n and new_has_n:
            # normalized -> absolute
            n = preserved["N"]
            self._initial_state = ModelState(S * n, I * n, R * n)
        elif old_has_n and not new_has_n:
            # absolute -> normalized
            n = current.get("N")
            if n is None or not math.isfinite(n) or n <= 0:
                warnings.warn(
                    f"Cannot rescale initial state by N={n}; using default N",
                    UserWarning,
                    stacklevel=2,
                )
                n = DEFAULT_PARAMETERS["N"]
            self._initial_state = ModelState(S / n, I / n, R / n)

        self._parameters = preserved
        self._selected_model = name
        self._schedule()

    # ========================================================================
    # Execution
    # ========================================================================

    def run_simulation(self) -> Optional[SimulationResult]:
        """
        Cancel any pending timer and recompute immediately.

        Returns
        -------
        Optional[SimulationResult]
            The published result (None on failure)
        """
        self._cancel_timer()
        self._compute()
        return self.simulation_result

    def flush(self) -> bool:
        """
        Fire a pending debounced computation now.

        Returns
        -------
        bool
            True if a computation was pending and has run
        """
        if self._state is not ControllerState.DEBOUNCING:
            return False
        self._cancel_timer()
        self._compute()
        return True

    def cancel_pending(self) -> None:
        """Drop any pending computation without running it."""
        self._cancel_timer()
        if self._state is ControllerState.DEBOUNCING:
            self._state = ControllerState.IDLE

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callable invoked with the controller after each publish.

        Returns
        -------
        Callable[[], None]
            Unsubscribe function
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ========================================================================
    # Statistics
    # ========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """
        Get computation statistics.

        Returns
        -------
        dict
            - 'runs': Computations started
            - 'successes': Runs that published a result
            - 'failures': Runs that published (None, 0)
            - 'debounce_cancellations': Timers replaced before firing
            - 'total_time': Wall time spent computing [s]
            - 'avg_time': total_time / runs
        """
        return {
            **self._stats,
            'avg_time': self._stats['total_time'] / max(1, self._stats['runs']),
        }

    def reset_stats(self) -> None:
        self._stats['runs'] = 0
        self._stats['successes'] = 0
        self._stats['failures'] = 0
        self._stats['debounce_cancellations'] = 0
        self._stats['total_time'] = 0.0

    # ========================================================================
    # Internal
    # ========================================================================

    def _schedule(self) -> None:
        if self._cancel_timer():
            self._stats['debounce_cancellations'] += 1
        self._handle = self._scheduler.call_later(self._debounce_delay, self._on_timer)
        self._state = ControllerState.DEBOUNCING

    def _cancel_timer(self) -> bool:
        handle, self._handle = self._handle, None
        if handle is None or handle.cancelled():
            return False
        handle.cancel()
        return True

    def _on_timer(self) -> None:
        self._handle = None
        self._compute()

    def _compute(self) -> None:
        self._state = ControllerState.COMPUTING
        self._stats['runs'] += 1
        start_time = time.time()
        try:
            result, r0 = self._evaluate()
        finally:
            self._stats['total_time'] += time.time() - start_time
            self._state = ControllerState.IDLE
        self._publish(result, r0)

    def _evaluate(self):
        model = self.model
        params: ModelParameters = dict(self._parameters)
        initial = self._initial_state
        self._simulation_error = ""

        results = validate_all_parameters(params, model.parameter_order)
        self._parameter_errors = {
            name: r.error for name, r in results.items() if not r.is_valid
        }

        capacity = (params.get("N") or 1.0) if model.requires("N") else 1.0
        check = validate_initial_conditions(initial.S, initial.I, initial.R, capacity)
        self._initial_state_error = "" if check.is_valid else check.error

        if not are_all_valid(results) or not check.is_valid:
            warnings.warn(
                "Skipping simulation due to invalid parameters or initial conditions",
                UserWarning,
                stacklevel=3,
            )
            return None, 0.0

        r0 = model.calculate_r0(params)
        if not math.isfinite(r0):
            self._simulation_error = f"R₀ calculation produced invalid value: {r0}"
            warnings.warn(self._simulation_error, RuntimeWarning, stacklevel=3)
            return None, 0.0

        grid = select_time_grid(model.required_parameters())
        result = self._solver.solve(
            model.compute_derivatives, initial, params, grid.span, grid.step
        )

        check = validate_simulation_result(result)
        if not check.is_valid:
            self._simulation_error = check.error
            warnings.warn(check.error, RuntimeWarning, stacklevel=3)
            return None, 0.0

        return result, r0

    def _publish(self, result: Optional[SimulationResult], r0: float) -> None:
        if result is not None:
            for series in result.values():
                series.setflags(write=False)
        self._simulation_result = result
        self._r0_value = r0
        if result is None:
            self._stats['failures'] += 1
        else:
            self._stats['successes'] += 1
        for listener in list(self._listeners):
            listener(self)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"model={self._selected_model!r}, state={self._state.value}, "
            f"r0={self._r0_value:.3f})"
        )
