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
sirsim: Deterministic SIR Epidemic Simulation

Symbolically defined SIR variants, a fixed-step RK4 integrator, validation
of parameters and trajectories, and a debounced simulation controller.
"""

# Submodules
from . import analysis, config, integration, models, phase_portrait, scheduling, types, validation

# Core types
from .types import (
    DerivativeFunction,
    ModelParameters,
    ModelState,
    SimulationResult,
    TimeSpan,
    ValidationResult,
)

# Errors
from .exceptions import ConfigurationError, MissingParameterError

# Models
from .models import (
    MODEL_REGISTRY,
    EpidemicModel,
    ModelVariant,
    get_model,
    list_models,
)

# Integration
from .integration import RK4Solver

# Validation
from .validation import (
    PARAMETER_RANGES,
    are_all_valid,
    validate_all_parameters,
    validate_initial_conditions,
    validate_parameter,
    validate_simulation_result,
    validate_simulation_values,
)

# Orchestration
from .controller import ControllerState, SimulationController
from .scheduling import AsyncioScheduler, VirtualClockScheduler

# Analysis
from .analysis import (
    EpidemicSummary,
    format_r0,
    herd_immunity_threshold,
    interpret_r0,
    is_epidemic,
    summarize_epidemic,
)
from .phase_portrait import compute_phase_trajectories, sample_initial_conditions

__version__ = "0.1.0"

__all__ = [
    # Types
    "DerivativeFunction",
    "ModelParameters",
    "ModelState",
    "SimulationResult",
    "TimeSpan",
    "ValidationResult",
    # Errors
    "ConfigurationError",
    "MissingParameterError",
    # Models
    "MODEL_REGISTRY",
    "EpidemicModel",
    "ModelVariant",
    "get_model",
    "list_models",
    # Integration
    "RK4Solver",
    # Validation
    "PARAMETER_RANGES",
    "are_all_valid",
    "validate_all_parameters",
    "validate_initial_conditions",
    "validate_parameter",
    "validate_simulation_result",
    "validate_simulation_values",
    # Orchestration
    "ControllerState",
    "SimulationController",
    "AsyncioScheduler",
    "VirtualClockScheduler",
    # Analysis
    "EpidemicSummary",
    "format_r0",
    "herd_immunity_threshold",
    "interpret_r0",
    "is_epidemic",
    "summarize_epidemic",
    "compute_phase_trajectories",
    "sample_initial_conditions",
]
