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
Exceptions raised by the simulation engine.

User-correctable problems (out-of-range parameters, infeasible initial
conditions, non-finite trajectories) are never raised; they are reported
as ValidationResult values. Only configuration defects are exceptions.
"""

from typing import Iterable, Tuple


class ConfigurationError(Exception):
    """A model was evaluated with an inconsistent configuration."""


class MissingParameterError(ConfigurationError):
    """
    A variant was evaluated without one of its required parameters.

    Attributes
    ----------
    model_name : str
        Display name of the variant that was evaluated
    missing : Tuple[str, ...]
        Sorted names of the absent parameters
    """

    def __init__(self, model_name: str, missing: Iterable[str]):
        self.model_name = model_name
        self.missing: Tuple[str, ...] = tuple(sorted(missing))
        super().__init__(
            f"{model_name} model requires parameter(s): {', '.join(self.missing)}"
        )
