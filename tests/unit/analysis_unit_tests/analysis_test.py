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
Unit Tests for Epidemic Analysis
================================

Threshold interpretation, herd immunity and trajectory summaries.
"""

import numpy as np
import pytest

from sirsim.analysis import (
    DIE_OUT_MESSAGE,
    EPIDEMIC_MESSAGE,
    format_r0,
    herd_immunity_threshold,
    interpret_r0,
    is_epidemic,
    summarize_epidemic,
    total_population,
)
from sirsim.integration import RK4Solver
from sirsim.models import get_model
from sirsim.types import ModelState

NAN = float("nan")
INF = float("inf")


@pytest.fixture
def toy_result():
    return {
        "t": np.array([0.0, 1.0, 2.0, 3.0]),
        "S": np.array([0.9, 0.7, 0.5, 0.45]),
        "I": np.array([0.1, 0.25, 0.2, 0.1]),
        "R": np.array([0.0, 0.05, 0.3, 0.45]),
    }


class TestThreshold:
    """R₀ > 1 separates growth from die-out."""

    @pytest.mark.parametrize("r0,expected", [(5.0, True), (1.01, True), (1.0, False), (0.3, False)])
    def test_is_epidemic(self, r0, expected):
        assert is_epidemic(r0) is expected

    def test_non_finite_treated_as_zero(self):
        assert not is_epidemic(NAN)
        assert not is_epidemic(INF)

    def test_interpret(self):
        assert interpret_r0(3.0) == EPIDEMIC_MESSAGE
        assert interpret_r0(0.9) == DIE_OUT_MESSAGE
        assert interpret_r0(NAN) == DIE_OUT_MESSAGE

    @pytest.mark.parametrize(
        "r0,text",
        [(5.0, "R₀ = 5.000"), (0.5 / 0.11, "R₀ = 4.545"), (NAN, "R₀ = 0.000"), (INF, "R₀ = 0.000")],
    )
    def test_format(self, r0, text):
        assert format_r0(r0) == text


class TestHerdImmunity:
    """H = 1 - 1/R₀ above threshold."""

    def test_above_threshold(self):
        assert herd_immunity_threshold(4.0) == pytest.approx(0.75)
        assert herd_immunity_threshold(2.0) == pytest.approx(0.5)

    @pytest.mark.parametrize("r0", [1.0, 0.5, 0.0, NAN])
    def test_at_or_below_threshold(self, r0):
        assert herd_immunity_threshold(r0) == 0.0

    def test_unbounded(self):
        assert herd_immunity_threshold(INF) == 1.0


class TestSummary:
    """Scalar summaries of trajectories."""

    def test_toy_trajectory(self, toy_result):
        summary = summarize_epidemic(toy_result)

        assert summary["peak_infected"] == 0.25
        assert summary["peak_time"] == 1.0
        assert summary["final_susceptible"] == 0.45
        assert summary["final_recovered"] == 0.45
        assert summary["initial_population"] == pytest.approx(1.0)
        assert summary["final_population"] == pytest.approx(1.0)
        assert summary["attack_rate"] == pytest.approx(0.5)

    def test_total_population(self, toy_result):
        np.testing.assert_allclose(total_population(toy_result), 1.0)

    def test_zero_susceptible(self, toy_result):
        toy_result["S"] = np.zeros(4)
        assert summarize_epidemic(toy_result)["attack_rate"] == 0.0

    def test_empty_trajectory(self):
        empty = {"t": np.array([]), "S": np.array([]), "I": np.array([]), "R": np.array([])}
        with pytest.raises(ValueError, match="empty"):
            summarize_epidemic(empty)

    def test_large_outbreak(self):
        model = get_model("basic-sir")
        result = RK4Solver().solve(
            model.compute_derivatives, ModelState(0.99, 0.01, 0.0),
            {"beta": 0.5, "gamma": 0.1}, (0.0, 100.0), 0.01,
        )
        summary = summarize_epidemic(result)

        assert summary["attack_rate"] > 0.95
        assert 0.0 < summary["peak_time"] < 100.0
        assert summary["peak_infected"] > 0.4

    def test_subcritical_outbreak_decays(self):
        model = get_model("basic-sir")
        result = RK4Solver().solve(
            model.compute_derivatives, ModelState(0.99, 0.01, 0.0),
            {"beta": 0.05, "gamma": 0.1}, (0.0, 100.0), 0.01,
        )
        summary = summarize_epidemic(result)

        assert summary["peak_time"] == 0.0
        assert summary["peak_infected"] == 0.01
        assert summary["attack_rate"] < 0.02
