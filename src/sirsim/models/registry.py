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
Process-wide registry mapping variant keys to model records.

Built once at import time and exposed read-only.
"""

from types import MappingProxyType
from typing import List, Mapping, Union

from sirsim.models.epidemic_model import EpidemicModel, ModelVariant
from sirsim.models.variants import (
    define_basic_sir,
    define_disease_deaths,
    define_natural_demographics,
)


def _build_registry() -> Mapping[str, EpidemicModel]:
    models = [
        define_basic_sir(),
        define_natural_demographics(),
        define_disease_deaths(),
    ]
    return MappingProxyType({m.key: m for m in models})


MODEL_REGISTRY: Mapping[str, EpidemicModel] = _build_registry()


def get_model(name: Union[str, ModelVariant]) -> EpidemicModel:
    """
    Look up a variant by registry key or tag.

    Raises
    ------
    KeyError
        If the name is not registered
    """
    key = name.value if isinstance(name, ModelVariant) else name
    try:
        return MODEL_REGISTRY[key]
    except KeyError:
        raise KeyError(
            f"Unknown model '{key}'. Choose from: {list_models()}"
        ) from None


def list_models() -> List[str]:
    """Registry keys in declaration order."""
    return list(MODEL_REGISTRY.keys())
