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
import logging
import os
import re

from ..errors import ToolLogParseError
from ..utils import format_percentage
from .base import Tool, resolve_executable

TOOL_NAME = 'bowtie2'
BOWTIE2_EXE = 'bowtie2'
BOWTIE2_BUILD_EXE = 'bowtie2-build'

INDEX_EXTS = ('.1.bt2', '.1.bt2l')

# Header lines are left to the downstream conversion
NO_HEADER_ARGS = ['--no-hd', '--no-sq']

input_reads_re = re.compile(r'^\s*(\d+) reads; of these:', re.MULTILINE)
paired_reads_re = re.compile(r'^\s*(\d+) \(([\d.]+)%\) were paired', re.MULTILINE)
alignment_rate_re = re.compile(r'^\s*([\d.]+)% overall alignment rate', re.MULTILINE)


@dataclass(slots=True, frozen=True)
class AlignStats:
    input_reads: int
    reads_paired: int
    reads_paired_pct: float
    overall_alignment_rate: float

    def to_row(self) -> list[str]:
        return [
            str(self.input_reads),
            str(self.reads_paired),
            format_percentage(self.reads_paired_pct),
            format_percentage(self.overall_alignment_rate)
        ]


def parse_bowtie2_log(text: str, fp: str) -> AlignStats:
    input_m = input_reads_re.search(text)
    paired_m = paired_reads_re.search(text)
    rate_m = alignment_rate_re.search(text)
    if not (input_m and paired_m and rate_m):
        raise ToolLogParseError(TOOL_NAME, fp)

    return AlignStats(
        int(input_m.group(1)),
        int(paired_m.group(1)),
        float(paired_m.group(2)),
        float(rate_m.group(1)))


def has_index(basename: str) -> bool:
    return any(os.path.isfile(basename + ext) for ext in INDEX_EXTS)


@dataclass(slots=True)
class Bowtie2(Tool):
    bowtie2_dir: str | None = None

    @property
    def name(self) -> str:
        return TOOL_NAME

    @property
    def bowtie2(self) -> str:
        return resolve_executable(TOOL_NAME, BOWTIE2_EXE, self.bowtie2_dir)

    @property
    def bowtie2_build(self) -> str:
        return resolve_executable(TOOL_NAME, BOWTIE2_BUILD_EXE, self.bowtie2_dir)

    def check(self) -> None:
        resolve_executable(TOOL_NAME, BOWTIE2_EXE, self.bowtie2_dir)
        resolve_executable(TOOL_NAME, BOWTIE2_BUILD_EXE, self.bowtie2_dir)

    def ensure_index(self, reference: str, basename: str, log_fp: str | None = None) -> None:
        if has_index(basename):
            logging.info("Using existing bowtie2 index: %s", basename)
            return

        logging.info("Building bowtie2 index for '%s'...", reference)
        self.run([self.bowtie2_build, reference, basename], log_fp=log_fp)

    def get_command(self, index: str, r1_fp: str, r2_fp: str, sam_fp: str, args: list[str]) -> list[str]:
        return [
            self.bowtie2,
            *args,
            *NO_HEADER_ARGS,
            '-x', index,
            '-1', r1_fp,
            '-2', r2_fp,
            '-S', sam_fp
        ]

    def align(self, index: str, r1_fp: str, r2_fp: str, sam_fp: str, args: list[str], log_fp: str | None = None) -> AlignStats:
        result = self.run(self.get_command(index, r1_fp, r2_fp, sam_fp, args), log_fp=log_fp)
        return parse_bowtie2_log(result.stderr or '', r1_fp)
