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

import os
import subprocess

import pytest

from gbspipe.config import DEFAULT_BOWTIE2_ARGS, TrimOptions
from gbspipe.errors import ToolExecutionError, ToolLogParseError, ToolNotFoundError
from gbspipe.tools.base import resolve_executable
from gbspipe.tools.bowtie2 import Bowtie2, parse_bowtie2_log
from gbspipe.tools.samtools import Samtools
from gbspipe.tools.trimmomatic import TrimOutputs, Trimmomatic, parse_trimmomatic_log

TRIMMOMATIC_LOG = """TrimmomaticPE: Started with arguments:
 -threads 20 -phred33 a_R1.fastq a_R2.fastq
Input Read Pairs: 1000 Both Surviving: 900 (90.00%) Forward Only Surviving: 50 (5.00%) Reverse Only Surviving: 30 (3.00%) Dropped: 20 (2.00%)
TrimmomaticPE: Completed successfully
"""

BOWTIE2_LOG = """1000 reads; of these:
  1000 (100.00%) were paired; of these:
    100 (10.00%) aligned concordantly 0 times
    800 (80.00%) aligned concordantly exactly 1 time
    100 (10.00%) aligned concordantly >1 times
92.50% overall alignment rate
"""


class FakeRunner:
    def __init__(self, returncode=0, stderr=''):
        self.returncode = returncode
        self.stderr = stderr
        self.calls = []

    def __call__(self, args):
        self.calls.append(args)
        return subprocess.CompletedProcess(args, self.returncode, stdout='', stderr=self.stderr)


def make_executable(dp, name):
    fp = os.path.join(dp, name)
    with open(fp, 'w') as fh:
        fh.write('#!/bin/sh\n')
    os.chmod(fp, 0o755)
    return fp


def test_parse_trimmomatic_log():
    s = parse_trimmomatic_log(TRIMMOMATIC_LOG, 'a_R1.fastq')
    assert s.input_read_pairs == 1000
    assert s.both_surviving == 900
    assert s.reverse_surviving_pct == 3.0
    assert s.dropped == 20

    with pytest.raises(ToolLogParseError):
        parse_trimmomatic_log('', 'a_R1.fastq')


def test_parse_bowtie2_log():
    s = parse_bowtie2_log(BOWTIE2_LOG, 'a_R1.fastq')
    assert s.input_reads == 1000
    assert s.reads_paired == 1000
    assert s.reads_paired_pct == 100.0
    assert s.overall_alignment_rate == 92.5

    with pytest.raises(ToolLogParseError):
        parse_bowtie2_log('Error: reads file does not look like a FASTQ file', 'a_R1.fastq')


def test_resolve_executable(tmp_path):
    fp = make_executable(str(tmp_path), 'bowtie2')
    assert resolve_executable('bowtie2', 'bowtie2', str(tmp_path)) == fp
    with pytest.raises(ToolNotFoundError):
        resolve_executable('bowtie2', 'bowtie2-build', str(tmp_path))


def test_trimmomatic(tmp_path):
    jar_fp = str(tmp_path / 'trimmomatic.jar')
    with open(jar_fp, 'wb') as fh:
        fh.write(b'PK')

    runner = FakeRunner(stderr=TRIMMOMATIC_LOG)
    tool = Trimmomatic(jar_path=jar_fp, runner=runner)
    out = TrimOutputs('a_R1-p.fastq', 'a_R1-s.fastq', 'a_R2-p.fastq', 'a_R2-s.fastq')
    log_fp = str(tmp_path / 'a_trimmomatic_output.log')

    stats = tool.trim('a_R1.fastq', 'a_R2.fastq', out, 'adapters.fa', TrimOptions(), 'a.trim.log', log_fp=log_fp)
    assert stats.both_surviving == 900

    args = runner.calls[0]
    assert args[:4] == ['java', '-classpath', jar_fp, 'org.usadellab.trimmomatic.TrimmomaticPE']
    assert args[-5:] == [
        'ILLUMINACLIP:adapters.fa:2:30:10',
        'LEADING:3',
        'TRAILING:3',
        'SLIDINGWINDOW:4:15',
        'MINLEN:36'
    ]
    assert '-phred33' in args
    with open(log_fp) as fh:
        assert fh.read() == TRIMMOMATIC_LOG


def test_trimmomatic_missing_jar(tmp_path):
    with pytest.raises(ToolNotFoundError):
        Trimmomatic(jar_path=str(tmp_path / 'missing.jar')).check()


def test_tool_failure(tmp_path):
    make_executable(str(tmp_path), 'bowtie2')
    tool = Bowtie2(bowtie2_dir=str(tmp_path), runner=FakeRunner(returncode=1, stderr='Error!'))
    with pytest.raises(ToolExecutionError) as ex:
        tool.align('ref', 'a_R1.fastq', 'a_R2.fastq', 'a.sam', DEFAULT_BOWTIE2_ARGS)
    assert ex.value.returncode == 1


def test_bowtie2(tmp_path):
    dp = str(tmp_path)
    make_executable(dp, 'bowtie2')
    make_executable(dp, 'bowtie2-build')
    runner = FakeRunner(stderr=BOWTIE2_LOG)
    tool = Bowtie2(bowtie2_dir=dp, runner=runner)
    tool.check()

    index = os.path.join(dp, 'genome')
    tool.ensure_index(index + '.fasta', index)
    assert runner.calls[-1] == [os.path.join(dp, 'bowtie2-build'), index + '.fasta', index]

    # Existing index
    open(index + '.1.bt2', 'w').close()
    n = len(runner.calls)
    tool.ensure_index(index + '.fasta', index)
    assert len(runner.calls) == n

    stats = tool.align(index, 'a_R1-p.fastq', 'a_R2-p.fastq', 'a.sam', DEFAULT_BOWTIE2_ARGS)
    assert stats.overall_alignment_rate == 92.5
    assert runner.calls[-1] == [
        os.path.join(dp, 'bowtie2'),
        *DEFAULT_BOWTIE2_ARGS,
        '--no-hd', '--no-sq',
        '-x', index,
        '-1', 'a_R1-p.fastq',
        '-2', 'a_R2-p.fastq',
        '-S', 'a.sam'
    ]


def test_samtools(tmp_path):
    dp = str(tmp_path)
    samtools = make_executable(dp, 'samtools')
    bcftools = make_executable(dp, 'bcftools')
    runner = FakeRunner()
    tool = Samtools(samtools_dir=dp, bcftools_dir=dp, runner=runner)
    tool.check()

    reference = os.path.join(dp, 'genome.fasta')
    assert tool.ensure_faidx(reference) == reference + '.fai'
    assert runner.calls[-1] == [samtools, 'faidx', reference]

    sorted_bam_fp = tool.sam_to_sorted_bam('a.sam', 'a.bam', reference + '.fai', min_mapq=20, threads=2)
    assert sorted_bam_fp == 'a.sorted.bam'
    assert runner.calls[-3] == [samtools, 'view', '-b', '-q', '20', '-t', reference + '.fai', '-o', 'a.bam', 'a.sam']
    assert runner.calls[-2] == [samtools, 'sort', '-@', '2', '-o', 'a.sorted.bam', 'a.bam']
    assert runner.calls[-1] == [samtools, 'index', 'a.sorted.bam']

    tool.call_variants(reference, [sorted_bam_fp], 'lentil.bcf', 'lentil.vcf')
    assert runner.calls[-2] == [bcftools, 'mpileup', '-f', reference, '-O', 'b', '-o', 'lentil.bcf', 'a.sorted.bam']
    assert runner.calls[-1] == [bcftools, 'call', '-mv', '-O', 'v', '-o', 'lentil.vcf', 'lentil.bcf']
