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

import json
import logging
from typing import Iterable

from .fs import write_text_atomic
from .stats import DemultiplexStats
from .tools.bowtie2 import AlignStats
from .tools.trimmomatic import TrimStats
from .utils import format_percentage


UNMATCHED_ROW_LABEL = 'Unmatched'

DEMULTIPLEX_SUMMARY_HEADER = [
    'Sample',
    'Read1 count',
    '% of Raw Read1',
    'Read2 count',
    '% of Raw Read2'
]

TRIM_SUMMARY_HEADER = [
    'Sample',
    'Input Read Pairs',
    'Surviving Read Pairs',
    '% Both Surviving',
    'Only Forward Surviving',
    '% Forward Surviving',
    'Only Reverse Surviving',
    '% Reverse Surviving',
    'Dropped Reads',
    '% Dropped'
]

ALIGN_SUMMARY_HEADER = [
    'Sample',
    'Input Reads',
    'Reads Paired',
    '% Reads Paired',
    'Overall Alignment Rate'
]


def format_table(header: list[str], rows: Iterable[list[str]]) -> str:
    return ''.join(
        '\t'.join(row) + '\n'
        for row in [header, *rows]
    )


def format_demultiplex_summary(stats: DemultiplexStats) -> str:
    rows = [
        [sample_name, str(r1), format_percentage(p1), str(r2), format_percentage(p2)]
        for sample_name, r1, p1, r2, p2 in zip(
            stats.sample_names,
            stats.read1_counts,
            stats.read1_percentages,
            stats.read2_counts,
            stats.read2_percentages)
    ]

    unmatched_pct = format_percentage(
        (100.0 * stats.unmatched_pairs / stats.total_raw_pairs) if stats.total_raw_pairs else 0.0)
    rows.append([
        UNMATCHED_ROW_LABEL,
        str(stats.unmatched_pairs),
        unmatched_pct,
        str(stats.unmatched_pairs),
        unmatched_pct
    ])

    return format_table(DEMULTIPLEX_SUMMARY_HEADER, rows)


def write_demultiplex_summary(stats: DemultiplexStats, fp: str) -> None:
    logging.info(f"Writing demultiplexing summary: {fp}")
    write_text_atomic(fp, format_demultiplex_summary(stats))


def write_stats(stats: DemultiplexStats, fp: str) -> None:
    logging.info(f"Writing statistics file: {fp}")
    write_text_atomic(fp, json.dumps(stats.to_dict()))


def format_trim_summary(sample_stats: list[tuple[str, TrimStats]]) -> str:
    return format_table(TRIM_SUMMARY_HEADER, [
        [sample_name, *s.to_row()]
        for sample_name, s in sample_stats
    ])


def write_trim_summary(sample_stats: list[tuple[str, TrimStats]], fp: str) -> None:
    logging.info(f"Writing trimming summary: {fp}")
    write_text_atomic(fp, format_trim_summary(sample_stats))


def format_align_summary(sample_stats: list[tuple[str, AlignStats]]) -> str:
    return format_table(ALIGN_SUMMARY_HEADER, [
        [sample_name, *s.to_row()]
        for sample_name, s in sample_stats
    ])


def write_align_summary(sample_stats: list[tuple[str, AlignStats]], fp: str) -> None:
    logging.info(f"Writing alignment summary: {fp}")
    write_text_atomic(fp, format_align_summary(sample_stats))
