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
Unit Tests for Phase Portrait Ensembles
=======================================
"""

import numpy as np
import pytest

from sirsim.exceptions import MissingParameterError
from sirsim.integration import RK4Solver
from sirsim.models import get_model
from sirsim.phase_portrait import compute_phase_trajectories, sample_initial_conditions
from sirsim.validation import INSTABILITY_MESSAGE


class NanSolver(RK4Solver):
    def solve(self, derivative_fn, initial_state, params, time_span=None, time_step=None):
        result = super().solve(derivative_fn, initial_state, params, (0.0, 1.0), 0.5)
        result["S"][1] = np.nan
        return result


@pytest.fixture
def full_params():
    return {"beta": 0.5, "gamma": 0.1, "mu": 0.01, "alpha": 0.05, "N": 1000.0}


class TestSampleInitialConditions:
    """Initial conditions spread over the simplex."""

    def test_infeasible_points_dropped(self):
        states = sample_initial_conditions(12)
        # (0.8875, 0.16) in the first band has R < 0
        assert len(states) == 11

    def test_points_on_simplex(self):
        for state in sample_initial_conditions(12):
            assert min(state) >= 0
            assert sum(state) == pytest.approx(1.0)

    def test_band_starts(self):
        states = sample_initial_conditions(3)
        assert [round(s.S, 2) for s in states] == [0.7, 0.4, 0.2]
        assert [round(s.I, 2) for s in states] == [0.01, 0.05, 0.1]

    def test_scaled_by_n(self):
        unit = sample_initial_conditions(6)
        scaled = sample_initial_conditions(6, N=1000.0)
        np.testing.assert_allclose(np.array(scaled), 1000.0 * np.array(unit))

    def test_zero(self):
        assert sample_initial_conditions(0) == []

    def test_negative(self):
        with pytest.raises(ValueError):
            sample_initial_conditions(-1)


class TestComputePhaseTrajectories:
    """Ensembles integrated on the coarse grid."""

    def test_basic_sir(self):
        portrait = compute_phase_trajectories(get_model("basic-sir"), {"beta": 0.5, "gamma": 0.1})

        assert len(portrait["trajectories"]) == 11
        assert portrait["skipped"] == 0
        assert portrait["error"] is None

        first = portrait["trajectories"][0]
        assert first["t"][-1] == pytest.approx(100.0)
        assert first["t"][1] == pytest.approx(0.1)

    def test_vital_dynamics_grid_and_scale(self, full_params):
        portrait = compute_phase_trajectories(get_model("natural-demographics"), full_params, 3)

        first = portrait["trajectories"][0]
        assert first["S"][0] == pytest.approx(700.0)
        assert first["t"][1] == pytest.approx(0.5)
        assert first["t"][-1] == pytest.approx(500.0)
        total = first["S"] + first["I"] + first["R"]
        np.testing.assert_allclose(total, 1000.0, rtol=1e-6)

    def test_all_trajectories_fail(self):
        with pytest.warns(UserWarning, match="Trajectory 1 failed validation"):
            portrait = compute_phase_trajectories(
                get_model("basic-sir"), {"beta": 0.5, "gamma": 0.1}, 3, solver=NanSolver()
            )

        assert portrait["trajectories"] == []
        assert portrait["skipped"] == 3
        assert portrait["error"] == (
            f"Unable to compute trajectories with current parameters. {INSTABILITY_MESSAGE}"
        )

    def test_missing_parameter(self):
        with pytest.raises(MissingParameterError):
            compute_phase_trajectories(get_model("disease-deaths"), {"beta": 0.5, "gamma": 0.1}, 3)
