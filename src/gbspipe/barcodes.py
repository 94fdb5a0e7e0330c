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

from collections import defaultdict
from dataclasses import dataclass, field
from itertools import combinations
import logging
import os
from typing import Sized

from .codec import Codec
from .errors import AmbiguousBarcodeError, ConfigError
from .readers.tsv import TsvTruncatedRow, parse_tsv_rows
from .utils import get_duplicates, hamming_distance, is_dna, is_file_name_safe

INVALID = -1
NO_MATCH: tuple[int, int] = (INVALID, 0)


@dataclass(slots=True, frozen=True)
class BarcodeEntry:
    barcode: str
    sample_name: str


def load_barcode_entries(fp: str) -> list[BarcodeEntry]:
    """
    Parse a barcode file into entries

    Each data row holds either a barcode, or a sample name and a barcode
    (tab-separated); barcode-only rows are named after the barcode itself.
    """

    if not os.path.isfile(fp) or not os.access(fp, os.R_OK):
        raise ConfigError(f"Barcode file '{fp}' does not exist or is unreadable!")

    entries: list[BarcodeEntry] = []
    try:
        for i, fields in parse_tsv_rows(fp, min_fields=1, max_fields=2):
            barcode = fields[-1].upper()
            sample_name = fields[0] if len(fields) == 2 else barcode

            if not is_dna(barcode):
                raise ConfigError(f"Invalid barcode '{fields[-1]}' in '{fp}' at line {i}!")
            if not is_file_name_safe(sample_name):
                raise ConfigError(f"Invalid sample name '{sample_name}' in '{fp}' at line {i}!")

            entries.append(BarcodeEntry(barcode, sample_name))

    except TsvTruncatedRow as ex:
        raise ConfigError(f"Invalid row in barcode file '{ex.fp}' at line {ex.line}!")

    except UnicodeDecodeError:
        raise ConfigError(f"Barcode file '{fp}' is not a text file!")

    if not entries:
        raise ConfigError(f"Barcode file '{fp}' exists but appears to be empty!")

    return entries


@dataclass(slots=True, frozen=True)
class BarcodeTable(Sized):
    """
    Samples indexed by the expected read prefix (barcode followed by overhang)

    Lookups are anchored at the start of the read and attempt the longest
    tags first; when mismatches are allowed, they are only considered in the
    absence of an exact match.
    """

    entries: list[BarcodeEntry]
    overhang: str
    max_mismatches: int = 0
    samples: Codec = field(init=False)
    length_tags: dict[int, dict[str, int]] = field(init=False)
    _lengths: list[int] = field(init=False)

    def __post_init__(self) -> None:
        if not self.entries:
            raise ConfigError("Empty barcode table!")
        if not is_dna(self.overhang):
            raise ConfigError(f"Invalid restriction site overhang '{self.overhang}'!")
        if self.max_mismatches < 0:
            raise ConfigError("The maximum number of mismatches can not be negative!")

        duplicates = get_duplicates([e.barcode for e in self.entries])
        if duplicates:
            raise AmbiguousBarcodeError(
                "Duplicate barcodes in barcode table: %s!" % ', '.join(duplicates))

        samples = Codec()
        length_tags: dict[int, dict[str, int]] = defaultdict(dict)
        for entry in self.entries:
            length_tags[len(entry.barcode) + len(self.overhang)][entry.barcode + self.overhang] = samples.add(entry.sample_name)

        object.__setattr__(self, 'samples', samples)
        object.__setattr__(self, 'length_tags', dict(length_tags))
        object.__setattr__(self, '_lengths', sorted(length_tags.keys(), reverse=True))

        if self.max_mismatches > 0:
            self._check_tag_distances()

    def __len__(self) -> int:
        return len(self.entries)

    def _check_tag_distances(self) -> None:
        max_distance = 2 * self.max_mismatches
        for tags in self.length_tags.values():
            for a, b in combinations(tags.keys(), 2):
                if hamming_distance(a, b) <= max_distance:
                    logging.warning(
                        "Tags '%s' and '%s' are within %d mismatches of each other: " +
                        "reads between them will be left unmatched.",
                        a, b, max_distance)

    @classmethod
    def load(cls, fp: str, overhang: str, max_mismatches: int = 0):
        return cls(load_barcode_entries(fp), overhang.upper(), max_mismatches=max_mismatches)

    @property
    def sample_names(self) -> list[str]:
        return self.samples.items

    @property
    def max_tag_length(self) -> int:
        return self._lengths[0]

    @property
    def tags(self) -> list[str]:
        return [e.barcode + self.overhang for e in self.entries]

    def _match_exact(self, seq: str) -> tuple[int, int]:
        seq_len = len(seq)

        # Assumption: the lengths are in descending order
        for tag_length in self._lengths:
            if tag_length > seq_len:
                continue

            sample_index = self.length_tags[tag_length].get(seq[:tag_length])
            if sample_index is not None:
                return sample_index, tag_length

        return NO_MATCH

    def _match_approximate(self, seq: str) -> tuple[int, int]:
        seq_len = len(seq)

        for tag_length in self._lengths:
            if tag_length > seq_len:
                continue

            prefix = seq[:tag_length]
            best_index: int = INVALID
            best_distance: int = self.max_mismatches + 1
            is_tie = False
            for tag, sample_index in self.length_tags[tag_length].items():
                distance = hamming_distance(prefix, tag)
                if distance < best_distance:
                    best_index, best_distance, is_tie = sample_index, distance, False
                elif distance == best_distance and sample_index != best_index:
                    is_tie = True

            if best_index != INVALID and not is_tie:
                return best_index, tag_length

        return NO_MATCH

    def match(self, seq: str) -> tuple[int, int]:
        """Match the start of the sequence and return the sample index and tag length"""

        m = self._match_exact(seq)
        if m[0] == INVALID and self.max_mismatches > 0:
            return self._match_approximate(seq)
        return m

    def lookup(self, seq: str) -> str | None:
        sample_index, _ = self.match(seq)
        return self.samples.decode(sample_index) if sample_index != INVALID else None
