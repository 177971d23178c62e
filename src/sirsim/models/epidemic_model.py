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
Epidemic Model Record
=====================

A single record type describes every SIR variant. Each record carries:

- its tag (ModelVariant) and display name
- the symbolic right-hand side f(S, I, R; θ) as a sympy Matrix
- the symbolic basic reproduction number R₀(θ)
- the exact set of parameters the variant needs

The symbolic expressions are compiled once, at construction, into plain
numeric functions with ``sympy.lambdify``. Variants differ only in the
data they carry, never in code, so dispatch is a registry lookup from tag
to record.

Usage
-----
>>> from sirsim.models import get_model
>>> from sirsim.types import ModelState
>>>
>>> model = get_model("basic-sir")
>>> rates = model.compute_derivatives(ModelState(0.99, 0.01, 0.0), {"beta": 0.5, "gamma": 0.1})
>>> round(rates.R, 6)
0.001
>>> model.calculate_r0({"beta": 0.5, "gamma": 0.1})
5.0
"""

from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, Mapping, Sequence, Tuple

import numpy as np
import sympy as sp

from sirsim.exceptions import MissingParameterError
from sirsim.types import ModelParameters, ModelState

# Canonical parameter order; lambdified functions take parameters in this order
PARAMETER_NAMES: Tuple[str, ...] = ("beta", "gamma", "mu", "alpha", "N")

STATE_SYMBOLS: Tuple[sp.Symbol, sp.Symbol, sp.Symbol] = sp.symbols("S I R", real=True)

PARAMETER_SYMBOLS: Dict[str, sp.Symbol] = {
    name: sp.Symbol(name, real=True) for name in PARAMETER_NAMES
}


class ModelVariant(Enum):
    """
    Tag identifying an SIR variant.

    The value is the registry key used by the controller.
    """

    BASIC_SIR = "basic-sir"
    NATURAL_DEMOGRAPHICS = "natural-demographics"
    DISEASE_DEATHS = "disease-deaths"


class EpidemicModel:
    """
    Closed-form SIR variant: derivatives, R₀ and required parameters.

    Parameters
    ----------
    variant : ModelVariant
        Tag of this variant
    name : str
        Human-readable name, e.g. "Basic SIR"
    equations : Sequence[str]
        Display form of the three ODEs
    rhs : sp.Matrix
        Symbolic (3, 1) right-hand side in STATE_SYMBOLS and PARAMETER_SYMBOLS
    r0_expression : sp.Expr
        Symbolic basic reproduction number
    required_parameters : Iterable[str]
        Subset of PARAMETER_NAMES this variant needs

    Raises
    ------
    ValueError
        If a required parameter name is unknown or the expressions use a
        parameter outside the required set
    """

    def __init__(
        self,
        variant: ModelVariant,
        name: str,
        equations: Sequence[str],
        rhs: sp.Matrix,
        r0_expression: sp.Expr,
        required_parameters: Iterable[str],
    ):
        required = frozenset(required_parameters)
        unknown = required - set(PARAMETER_NAMES)
        if unknown:
            raise ValueError(f"Unknown parameter name(s): {sorted(unknown)}")

        used = {str(s) for s in rhs.free_symbols | r0_expression.free_symbols}
        undeclared = used - required - {str(s) for s in STATE_SYMBOLS}
        if undeclared:
            raise ValueError(
                f"{name} expressions use undeclared parameter(s): {sorted(undeclared)}"
            )

        self.variant = variant
        self.name = name
        self.equations: Tuple[str, ...] = tuple(equations)
        self.rhs = sp.Matrix(rhs)
        self.r0_expression = r0_expression
        self._required: FrozenSet[str] = required

        # Parameters in canonical order, so argument lists are deterministic
        self._parameter_order = tuple(p for p in PARAMETER_NAMES if p in required)
        self._r0_parameters = tuple(
            p for p in self._parameter_order
            if PARAMETER_SYMBOLS[p] in r0_expression.free_symbols
        )
        param_syms = [PARAMETER_SYMBOLS[p] for p in self._parameter_order]
        r0_syms = [PARAMETER_SYMBOLS[p] for p in self._r0_parameters]

        self._f_numeric: Callable = sp.lambdify(
            list(STATE_SYMBOLS) + param_syms, list(self.rhs), "numpy"
        )

        # Evaluated separately so a zero denominator can be detected exactly
        numerator, denominator = sp.fraction(sp.together(r0_expression))
        self._r0_numerator: Callable = sp.lambdify(r0_syms, numerator, "numpy")
        self._r0_denominator: Callable = sp.lambdify(r0_syms, denominator, "numpy")

    # ========================================================================
    # Public API
    # ========================================================================

    @property
    def key(self) -> str:
        """Registry key of this variant."""
        return self.variant.value

    def required_parameters(self) -> FrozenSet[str]:
        """Exact subset of {beta, gamma, mu, alpha, N} this variant needs."""
        return self._required

    @property
    def parameter_order(self) -> Tuple[str, ...]:
        """Required parameters in canonical order (beta, gamma, mu, alpha, N)."""
        return self._parameter_order

    def requires(self, name: str) -> bool:
        return name in self._required

    def compute_derivatives(self, state: ModelState, params: ModelParameters) -> ModelState:
        """
        Evaluate instantaneous rates (dS/dt, dI/dt, dR/dt).

        Parameters
        ----------
        state : ModelState
            Current compartment sizes
        params : ModelParameters
            Must contain every required parameter

        Returns
        -------
        ModelState
            Rates, one per compartment

        Raises
        ------
        MissingParameterError
            If any required parameter is absent
        """
        values = self._collect(params, self._parameter_order)
        d_s, d_i, d_r = self._f_numeric(state[0], state[1], state[2], *values)
        return ModelState(d_s, d_i, d_r)

    def calculate_r0(self, params: ModelParameters) -> float:
        """
        Basic reproduction number for the given parameters.

        When the denominator vanishes the result is +inf for a positive
        numerator (β > 0) and 0.0 otherwise; no exception is raised.

        Raises
        ------
        MissingParameterError
            If any parameter appearing in R₀ is absent
        """
        values = self._collect(params, self._r0_parameters)
        numerator = float(self._r0_numerator(*values))
        denominator = float(self._r0_denominator(*values))
        if denominator == 0.0:
            return float(np.inf) if numerator > 0 else 0.0
        return numerator / denominator

    # ========================================================================
    # Internal
    # ========================================================================

    def _collect(self, params: Mapping[str, float], names: Sequence[str]) -> list:
        missing = [n for n in names if params.get(n) is None]
        if missing:
            raise MissingParameterError(self.name, missing)
        return [params[n] for n in names]

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"variant={self.variant.value!r}, "
            f"required={sorted(self._required, key=PARAMETER_NAMES.index)})"
        )

    def __str__(self) -> str:
        return f"{self.name}: " + "; ".join(self.equations)
