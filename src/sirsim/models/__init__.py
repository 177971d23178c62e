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
SIR model variants and the registry that serves them.

Available variants:
- basic-sir: normalized population, mass-action transmission
- natural-demographics: births and natural deaths (μ)
- disease-deaths: vital dynamics plus disease-induced mortality (α)
"""

from .epidemic_model import (
    PARAMETER_NAMES,
    PARAMETER_SYMBOLS,
    STATE_SYMBOLS,
    EpidemicModel,
    ModelVariant,
)
from .registry import MODEL_REGISTRY, get_model, list_models
from .variants import (
    define_basic_sir,
    define_disease_deaths,
    define_natural_demographics,
)

__all__ = [
    "PARAMETER_NAMES",
    "PARAMETER_SYMBOLS",
    "STATE_SYMBOLS",
    "EpidemicModel",
    "ModelVariant",
    "MODEL_REGISTRY",
    "get_model",
    "list_models",
    "define_basic_sir",
    "define_natural_demographics",
    "define_disease_deaths",
]
