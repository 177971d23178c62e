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
Unit Tests for Validation
=========================

Parameter ranges, initial-condition feasibility and trajectory finiteness.
"""

import numpy as np
import pytest

from sirsim.types import ValidationResult
from sirsim.validation import (
    INSTABILITY_MESSAGE,
    PARAMETER_RANGES,
    are_all_valid,
    validate_all_parameters,
    validate_initial_conditions,
    validate_parameter,
    validate_simulation_result,
    validate_simulation_values,
)

NAN = float("nan")
INF = float("inf")


def make_result(n=5, **overrides):
    result = {
        "t": np.linspace(0.0, 1.0, n),
        "S": np.full(n, 0.9),
        "I": np.full(n, 0.1),
        "R": np.zeros(n),
    }
    result.update(overrides)
    return result


# ============================================================================
# Test Class: Parameter Ranges
# ============================================================================


class TestValidateParameter:
    """Closed-interval range checks."""

    @pytest.mark.parametrize("name", list(PARAMETER_RANGES))
    def test_bounds_are_inclusive(self, name):
        low, high = PARAMETER_RANGES[name]
        assert validate_parameter(name, low).is_valid
        assert validate_parameter(name, high).is_valid

    def test_valid_result_has_no_error(self):
        assert validate_parameter("beta", 0.5) == ValidationResult(True, None)

    @pytest.mark.parametrize(
        "name,value,message",
        [
            ("beta", 0.0, "beta must be between 1e-05 and 10"),
            ("beta", 10.5, "beta must be between 1e-05 and 10"),
            ("gamma", 0.0005, "gamma must be between 0.001 and 10"),
            ("mu", 1.5, "mu must be between 0 and 1"),
            ("alpha", -0.1, "alpha must be between 0 and 10"),
            ("N", 0.5, "N must be between 1 and 1000000"),
            ("N", 2e6, "N must be between 1 and 1000000"),
        ],
    )
    def test_out_of_range_messages(self, name, value, message):
        result = validate_parameter(name, value)
        assert not result.is_valid
        assert result.error == message

    @pytest.mark.parametrize("value", [NAN, INF, -INF])
    def test_non_finite(self, value):
        result = validate_parameter("gamma", value)
        assert result == ValidationResult(False, "gamma must be a valid number")

    def test_non_numeric(self):
        assert validate_parameter("beta", "fast").error == "beta must be a valid number"

    def test_unknown_name_raises(self):
        with pytest.raises(KeyError):
            validate_parameter("kappa", 1.0)

    def test_ranges_are_read_only(self):
        with pytest.raises(TypeError):
            PARAMETER_RANGES["beta"] = (0.0, 100.0)
        with pytest.raises(TypeError):
            del PARAMETER_RANGES["N"]
        assert validate_parameter("beta", 50.0).is_valid is False


class TestValidateAllParameters:
    """Batch validation over a variant's required names."""

    def test_only_required_names_checked(self):
        results = validate_all_parameters({"beta": 0.5, "gamma": 0.1, "mu": 99.0}, ["beta", "gamma"])
        assert set(results) == {"beta", "gamma"}
        assert are_all_valid(results)

    def test_missing_is_required(self):
        results = validate_all_parameters({"beta": 0.5}, ["beta", "gamma"])
        assert results["gamma"] == ValidationResult(False, "gamma is required")
        assert not are_all_valid(results)

    def test_none_is_required(self):
        results = validate_all_parameters({"beta": 0.5, "gamma": None}, ["beta", "gamma"])
        assert results["gamma"].error == "gamma is required"

    def test_collects_every_failure(self):
        params = {"beta": 20.0, "gamma": 0.1, "mu": -1.0, "N": 1000.0}
        results = validate_all_parameters(params, ["beta", "gamma", "mu", "N"])
        invalid = sorted(name for name, r in results.items() if not r.is_valid)
        assert invalid == ["beta", "mu"]

    def test_empty_results_are_valid(self):
        assert are_all_valid({})


# ============================================================================
# Test Class: Initial Conditions
# ============================================================================


class TestValidateInitialConditions:
    """Feasibility of (S₀, I₀, R₀) against capacity N."""

    def test_sum_equal_to_capacity(self):
        assert validate_initial_conditions(500, 300, 200, 1000).is_valid

    def test_sum_below_capacity(self):
        assert validate_initial_conditions(400, 10, 0, 1000).is_valid

    def test_sum_exceeds_capacity(self):
        result = validate_initial_conditions(600, 400, 200, 1000)
        assert not result.is_valid
        assert result.error == (
            "Sum of initial conditions (1200.00) must not exceed total population (1000)"
        )

    def test_normalized_default_capacity(self):
        assert validate_initial_conditions(0.99, 0.01, 0.0).is_valid
        result = validate_initial_conditions(0.9, 0.2, 0.0)
        assert result.error == (
            "Sum of initial conditions (1.10) must not exceed total population (1)"
        )

    def test_fractional_capacity_in_message(self):
        result = validate_initial_conditions(2.0, 0.0, 0.0, 1.5)
        assert "total population (1.5)" in result.error

    def test_rounding_tolerance(self):
        assert validate_initial_conditions(0.1, 0.2, 0.7).is_valid
        assert validate_initial_conditions(0.5, 0.5, 5e-11).is_valid
        assert not validate_initial_conditions(0.5, 0.5, 1e-9).is_valid

    @pytest.mark.parametrize(
        "state",
        [(-0.1, 0.5, 0.5), (0.5, -1e-9, 0.0), (0.0, 0.0, -5.0)],
    )
    def test_negative(self, state):
        result = validate_initial_conditions(*state)
        assert result == ValidationResult(False, "Initial conditions must be non-negative")

    @pytest.mark.parametrize(
        "state",
        [(NAN, 0.0, 0.0), (0.5, INF, 0.0), (0.5, 0.0, -INF)],
    )
    def test_non_finite(self, state):
        result = validate_initial_conditions(*state)
        assert result == ValidationResult(False, "Initial conditions must be valid numbers")

    def test_non_finite_reported_before_negative(self):
        result = validate_initial_conditions(-1.0, NAN, 0.0)
        assert result.error == "Initial conditions must be valid numbers"


# ============================================================================
# Test Class: Trajectories
# ============================================================================


class TestValidateSimulation:
    """Non-finite values in integrator output."""

    def test_finite_values(self):
        assert validate_simulation_values([0.0, 1.0, 2.5]).is_valid

    def test_empty_values(self):
        assert validate_simulation_values([]).is_valid

    @pytest.mark.parametrize("bad", [NAN, INF, -INF])
    def test_non_finite_values(self, bad):
        result = validate_simulation_values([0.0, bad, 1.0])
        assert result == ValidationResult(False, INSTABILITY_MESSAGE)

    def test_instability_message_gives_guidance(self):
        assert "NaN or Infinity" in INSTABILITY_MESSAGE
        assert "reducing β" in INSTABILITY_MESSAGE

    def test_valid_result(self):
        assert validate_simulation_result(make_result()).is_valid

    def test_time_checked_first(self):
        result = make_result(t=np.array([0.0, NAN, 0.5, 0.75, 1.0]), S=np.full(5, INF))
        assert validate_simulation_result(result).error == "Time values are invalid"

    @pytest.mark.parametrize(
        "key,label",
        [("S", "Susceptible"), ("I", "Infected"), ("R", "Recovered")],
    )
    def test_names_offending_compartment(self, key, label):
        values = np.zeros(5)
        values[-1] = NAN
        check = validate_simulation_result(make_result(**{key: values}))

        assert not check.is_valid
        assert check.error == f"{label} population values are invalid. {INSTABILITY_MESSAGE}"

    def test_first_offending_compartment_wins(self):
        bad = np.full(5, INF)
        check = validate_simulation_result(make_result(I=bad, R=bad))
        assert check.error.startswith("Infected")
