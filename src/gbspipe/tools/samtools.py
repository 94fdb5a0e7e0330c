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

from .base import Tool, resolve_executable

TOOL_NAME = 'SAMtools'
SAMTOOLS_EXE = 'samtools'
BCFTOOLS_EXE = 'bcftools'

EXT_FAI = '.fai'


def get_sorted_bam_path(bam_fp: str) -> str:
    # E.g.: sample1_lentil.bam -> sample1_lentil.sorted.bam
    return os.path.splitext(bam_fp)[0] + '.sorted.bam'


@dataclass(slots=True)
class Samtools(Tool):
    samtools_dir: str | None = None
    bcftools_dir: str | None = None

    @property
    def name(self) -> str:
        return TOOL_NAME

    @property
    def samtools(self) -> str:
        return resolve_executable(TOOL_NAME, SAMTOOLS_EXE, self.samtools_dir)

    @property
    def bcftools(self) -> str:
        return resolve_executable(TOOL_NAME, BCFTOOLS_EXE, self.bcftools_dir)

    def check(self) -> None:
        resolve_executable(TOOL_NAME, SAMTOOLS_EXE, self.samtools_dir)
        resolve_executable(TOOL_NAME, BCFTOOLS_EXE, self.bcftools_dir)

    def ensure_faidx(self, reference: str) -> str:
        fai_fp = reference + EXT_FAI
        if not os.path.isfile(fai_fp):
            logging.info("Indexing reference '%s'...", reference)
            self.run([self.samtools, 'faidx', reference])
        return fai_fp

    def sam_to_sorted_bam(self, sam_fp: str, bam_fp: str, fai_fp: str, min_mapq: int = 0, threads: int = 1) -> str:
        """
        Filter, convert, sort and index headerless alignments

        The reference index provides the sequence dictionary the SAM file lacks.
        """

        sorted_bam_fp = get_sorted_bam_path(bam_fp)
        self.run([
            self.samtools, 'view', '-b',
            '-q', str(min_mapq),
            '-t', fai_fp,
            '-o', bam_fp,
            sam_fp])
        self.run([
            self.samtools, 'sort',
            '-@', str(threads),
            '-o', sorted_bam_fp,
            bam_fp])
        self.run([self.samtools, 'index', sorted_bam_fp])
        return sorted_bam_fp

    def call_variants(self, reference: str, sorted_bam_fps: list[str], bcf_fp: str, vcf_fp: str, log_fp: str | None = None) -> None:
        self.run([
            self.bcftools, 'mpileup',
            '-f', reference,
            '-O', 'b',
            '-o', bcf_fp,
            *sorted_bam_fps])
        self.run([
            self.bcftools, 'call',
            '-mv',
            '-O', 'v',
            '-o', vcf_fp,
            bcf_fp], log_fp=log_fp)
