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
SIR Variants - Closed and Open Population Epidemic Dynamics
===========================================================

This module defines the three deterministic SIR variants served by the
engine. All share the state X = [S, I, R] and differ in which transitions
they include:

    Variant               Transmission          Vital dynamics   Disease deaths
    -------------------   -------------------   --------------   --------------
    Basic SIR             mass-action  βSI      no               no
    Natural Demographics  frequency    βSI/N    yes (μ)          no
    Disease Deaths        frequency    βSI/N    yes (μ)          yes (α)

Basic SIR
---------

**Kermack-McKendrick Model (1927):**

    dS/dt = -β·S·I
    dI/dt = β·S·I - γ·I
    dR/dt = γ·I

State is normalized to a unit population, so mass-action transmission
needs no division by N and S + I + R = 1 is conserved exactly.

    R₀ = β/γ

Vital Dynamics
--------------

With births and natural deaths at rate μ, births replace the *living*
population P = S + I + R (not the declared capacity N):

    dS/dt = μ·P - β·S·I/N - μ·S
    dI/dt = β·S·I/N - γ·I - μ·I
    dR/dt = γ·I - μ·R

    d(S+I+R)/dt = 0            (population conserved)
    R₀ = β/(γ + μ)

Adding disease-induced mortality α removes infected individuals:

    dI/dt = β·S·I/N - γ·I - μ·I - α·I

    d(S+I+R)/dt = -α·I         (population declines while I > 0)
    R₀ = β/(γ + μ + α)

Each extra removal term strictly increases the denominator of R₀, so for
identical β, γ, μ and any α > 0:

    R₀(Disease Deaths) < R₀(Natural Demographics) < R₀(Basic SIR)

Typical Parameters
------------------
- β: 0.2-2.0 per day (contact rate × transmission probability)
- γ: 0.1-1.0 per day (1/γ = infectious period)
- μ: 1/(life expectancy), e.g. 0.01 in accelerated demographic time
- α: case fatality rate per unit time infected
"""

import sympy as sp

from sirsim.models.epidemic_model import (
    PARAMETER_SYMBOLS,
    STATE_SYMBOLS,
    EpidemicModel,
    ModelVariant,
)


def define_basic_sir() -> EpidemicModel:
    """
    Basic SIR with mass-action transmission on a normalized population.

    Required parameters: beta, gamma.
    """
    S, I, R = STATE_SYMBOLS
    beta = PARAMETER_SYMBOLS["beta"]
    gamma = PARAMETER_SYMBOLS["gamma"]

    transmission = beta * S * I
    recovery = gamma * I

    rhs = sp.Matrix([
        -transmission,             # dS/dt
        transmission - recovery,   # dI/dt
        recovery,                  # dR/dt
    ])

    return EpidemicModel(
        variant=ModelVariant.BASIC_SIR,
        name="Basic SIR",
        equations=[
            "dS/dt = -βSI",
            "dI/dt = βSI - γI",
            "dR/dt = γI",
        ],
        rhs=rhs,
        r0_expression=beta / gamma,
        required_parameters=("beta", "gamma"),
    )


def define_natural_demographics() -> EpidemicModel:
    """
    SIR with births and natural deaths at rate μ.

    Frequency-dependent transmission (division by N); births balance
    natural deaths of the living population, so S + I + R is conserved.

    Required parameters: beta, gamma, mu, N.
    """
    S, I, R = STATE_SYMBOLS
    beta = PARAMETER_SYMBOLS["beta"]
    gamma = PARAMETER_SYMBOLS["gamma"]
    mu = PARAMETER_SYMBOLS["mu"]
    N = PARAMETER_SYMBOLS["N"]

    population = S + I + R
    transmission = beta * S * I / N
    recovery = gamma * I

    rhs = sp.Matrix([
        mu * population - transmission - mu * S,
        transmission - recovery - mu * I,
        recovery - mu * R,
    ])

    return EpidemicModel(
        variant=ModelVariant.NATURAL_DEMOGRAPHICS,
        name="Natural Demographics",
        equations=[
            "dS/dt = μP - βSI/N - μS",
            "dI/dt = βSI/N - γI - μI",
            "dR/dt = γI - μR",
        ],
        rhs=rhs,
        r0_expression=beta / (gamma + mu),
        required_parameters=("beta", "gamma", "mu", "N"),
    )


def define_disease_deaths() -> EpidemicModel:
    """
    SIR with vital dynamics and disease-induced mortality at rate α.

    The infected compartment loses α·I per unit time in addition to
    recovery and natural death, so total population declines at rate α·I.

    Required parameters: beta, gamma, mu, alpha, N.
    """
    S, I, R = STATE_SYMBOLS
    beta = PARAMETER_SYMBOLS["beta"]
    gamma = PARAMETER_SYMBOLS["gamma"]
    mu = PARAMETER_SYMBOLS["mu"]
    alpha = PARAMETER_SYMBOLS["alpha"]
    N = PARAMETER_SYMBOLS["N"]

    population = S + I + R
    transmission = beta * S * I / N
    recovery = gamma * I

    rhs = sp.Matrix([
        mu * population - transmission - mu * S,
        transmission - recovery - mu * I - alpha * I,
        recovery - mu * R,
    ])

    return EpidemicModel(
        variant=ModelVariant.DISEASE_DEATHS,
        name="Disease Deaths",
        equations=[
            "dS/dt = μP - βSI/N - μS",
            "dI/dt = βSI/N - γI - μI - αI",
            "dR/dt = γI - μR",
        ],
        rhs=rhs,
        r0_expression=beta / (gamma + mu + alpha),
        required_parameters=("beta", "gamma", "mu", "alpha", "N"),
    )
