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
import os
import re

from ..config import TrimOptions
from ..errors import ToolLogParseError, ToolNotFoundError
from ..utils import format_percentage
from .base import Tool, resolve_executable

TOOL_NAME = 'Trimmomatic'
TRIMMOMATIC_PE_CLASS = 'org.usadellab.trimmomatic.TrimmomaticPE'

trim_stats_re = re.compile(
    r'Input Read Pairs:\s*(\d+)\s+'
    r'Both Surviving:\s*(\d+)\s+\(([\d.]+)%\)\s+'
    r'Forward Only Surviving:\s*(\d+)\s+\(([\d.]+)%\)\s+'
    r'Reverse Only Surviving:\s*(\d+)\s+\(([\d.]+)%\)\s+'
    r'Dropped:\s*(\d+)\s+\(([\d.]+)%\)')


@dataclass(slots=True, frozen=True)
class TrimStats:
    input_read_pairs: int
    both_surviving: int
    both_surviving_pct: float
    forward_surviving: int
    forward_surviving_pct: float
    reverse_surviving: int
    reverse_surviving_pct: float
    dropped: int
    dropped_pct: float

    def to_row(self) -> list[str]:
        return [
            str(self.input_read_pairs),
            str(self.both_surviving),
            format_percentage(self.both_surviving_pct),
            str(self.forward_surviving),
            format_percentage(self.forward_surviving_pct),
            str(self.reverse_surviving),
            format_percentage(self.reverse_surviving_pct),
            str(self.dropped),
            format_percentage(self.dropped_pct)
        ]


def parse_trimmomatic_log(text: str, fp: str) -> TrimStats:
    m = trim_stats_re.search(text)
    if not m:
        raise ToolLogParseError(TOOL_NAME, fp)

    g = m.groups()
    return TrimStats(
        int(g[0]),
        int(g[1]), float(g[2]),
        int(g[3]), float(g[4]),
        int(g[5]), float(g[6]),
        int(g[7]), float(g[8]))


@dataclass(slots=True, frozen=True)
class TrimOutputs:
    r1_paired: str
    r1_unpaired: str
    r2_paired: str
    r2_unpaired: str


@dataclass(slots=True)
class Trimmomatic(Tool):
    jar_path: str = ''

    @property
    def name(self) -> str:
        return TOOL_NAME

    def check(self) -> None:
        if not os.path.isfile(self.jar_path) or os.path.getsize(self.jar_path) == 0:
            raise ToolNotFoundError(TOOL_NAME, self.jar_path)
        resolve_executable(TOOL_NAME, 'java')

    def get_command(self, r1_fp: str, r2_fp: str, out: TrimOutputs, trim_file: str, opt: TrimOptions, trim_log_fp: str) -> list[str]:
        return [
            'java', '-classpath', self.jar_path, TRIMMOMATIC_PE_CLASS,
            '-threads', str(opt.threads),
            f"-phred{opt.phred}",
            '-trimlog', trim_log_fp,
            r1_fp, r2_fp,
            out.r1_paired, out.r1_unpaired,
            out.r2_paired, out.r2_unpaired,
            f"ILLUMINACLIP:{trim_file}:{opt.seed_mismatches}:{opt.palindrome_clip_threshold}:{opt.simple_clip_threshold}",
            f"LEADING:{opt.leading}",
            f"TRAILING:{opt.trailing}",
            f"SLIDINGWINDOW:{opt.window_size}:{opt.required_quality}",
            f"MINLEN:{opt.minlen}"
        ]

    def trim(self, r1_fp: str, r2_fp: str, out: TrimOutputs, trim_file: str, opt: TrimOptions, trim_log_fp: str, log_fp: str | None = None) -> TrimStats:
        """Trim a pair of read files, returning the statistics reported by Trimmomatic"""

        result = self.run(
            self.get_command(r1_fp, r2_fp, out, trim_file, opt, trim_log_fp),
            log_fp=log_fp)
        return parse_trimmomatic_log(result.stderr or '', r1_fp)
