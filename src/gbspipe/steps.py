# GBSpipe
#
# Copyright (C) 2024 The GBSpipe Authors
#
# Author: GBSpipe developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from enum import Enum


class PipelineStep(Enum):
    DEMULTIPLEX = 'demultiplex'
    TRIM = 'trim'
    ALIGN = 'align'
    CALL = 'call'

    @property
    def aliases(self) -> tuple[str, ...]:
        return STEP_ALIASES[self]

    @classmethod
    def from_name(cls, name: str) -> 'PipelineStep | None':
        """Resolve a step by its name or one of its aliases (exact match)"""

        return STEP_NAMES.get(name)


STEP_ALIASES: dict[PipelineStep, tuple[str, ...]] = {
    PipelineStep.DEMULTIPLEX: ('f1', 'function1'),
    PipelineStep.TRIM: ('f2', 'function2', 'trim_reads'),
    PipelineStep.ALIGN: ('f3', 'function3', 'align_reads'),
    PipelineStep.CALL: ('f4', 'function4', 'SNP_calling')
}

STEP_NAMES: dict[str, PipelineStep] = {
    name: step
    for step in PipelineStep
    for name in (step.value, *step.aliases)
}
