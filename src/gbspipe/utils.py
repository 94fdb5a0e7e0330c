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

from itertools import groupby
import json
import logging
import re
from typing import TypeVar

import numpy as np
from pydantic import ValidationError

T = TypeVar('T')

dna_re = re.compile('^[ACGT]+$')
file_name_unsafe_re = re.compile(r'[\s/\\]')


def is_dna(s: str) -> bool:
    return dna_re.match(s) is not None


def is_file_name_safe(s: str) -> bool:
    return bool(s) and file_name_unsafe_re.search(s) is None


def get_duplicates(ls: list[T]) -> list[T]:
    return [
        x
        for x, xs in groupby(sorted(ls))  # type: ignore[type-var]
        if len(list(xs)) > 1
    ]


def hamming_distance(a: str, b: str) -> int:
    """
    Count mismatching positions across equal-length sequences

    Targets are unambiguous DNA, therefore any 'N' in the query is a mismatch.
    """

    return sum(1 for x, y in zip(a, b) if x != y)


def get_percentages(counts: np.ndarray, total: int) -> np.ndarray:
    if total == 0:
        return np.zeros(counts.shape[0], dtype=np.float64)
    return counts.astype(np.float64) * 100.0 / total


def format_percentage(pct: float) -> str:
    return '%.2f' % pct


def log_validation_error(ex: ValidationError) -> None:
    for err in ex.errors(include_url=False):
        logging.error(f"{err['msg']} ({err['type']}, at: {json.dumps(err['input'], default=str)})")
