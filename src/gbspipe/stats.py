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

from dataclasses import dataclass
from typing import Any

import numpy as np

from .utils import get_percentages


@dataclass
class DemultiplexStats:
    sample_names: list[str]

    # Pairs per sample (indexed as in the barcode table sample codec)
    read1_counts: np.ndarray
    read2_counts: np.ndarray

    total_raw_pairs: int = 0

    @classmethod
    def empty(cls, sample_names: list[str]):
        n = len(sample_names)
        return cls(
            list(sample_names),
            np.zeros(n, dtype=np.int64),
            np.zeros(n, dtype=np.int64))

    @property
    def matched_pairs(self) -> int:
        return int(self.read1_counts.sum())

    @property
    def unmatched_pairs(self) -> int:
        return self.total_raw_pairs - self.matched_pairs

    @property
    def read1_percentages(self) -> np.ndarray:
        return get_percentages(self.read1_counts, self.total_raw_pairs)

    @property
    def read2_percentages(self) -> np.ndarray:
        return get_percentages(self.read2_counts, self.total_raw_pairs)

    def eval_pair(self, sample_index: int) -> None:
        self.total_raw_pairs += 1
        if sample_index >= 0:
            self.read1_counts[sample_index] += 1
            self.read2_counts[sample_index] += 1

    def get_sample_counts(self, sample_name: str) -> tuple[int, int]:
        i = self.sample_names.index(sample_name)
        return int(self.read1_counts[i]), int(self.read2_counts[i])

    def to_dict(self) -> dict[str, Any]:
        return {
            'total_raw_pairs': self.total_raw_pairs,
            'matched_pairs': self.matched_pairs,
            'unmatched_pairs': self.unmatched_pairs,
            'samples': {
                sample_name: {
                    'read1_count': int(r1),
                    'read2_count': int(r2)
                }
                for sample_name, r1, r2 in zip(self.sample_names, self.read1_counts, self.read2_counts)
            }
        }
