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

import gzip
import logging
import os

from click.testing import CliRunner
import pytest

from gbspipe.config import RunState
from gbspipe.fs import PARTIAL_FILE_SUFFIX
from gbspipe.main import main

OVERHANG = 'TGCA'


@pytest.fixture
def demultiplex_args(tmp_path, write_text, write_fastq):
    barcode_fp = write_text('barcodes.tsv', "s1\tACGT\ns2\tGGCC\n")
    r1_reads = [
        ('p1', 'ACGT' + OVERHANG + 'AAAAAA'),
        ('p2', 'GGCC' + OVERHANG + 'CCCCCC')
    ]
    r2_reads = [(name, 'TTTTTTTT') for name, _ in r1_reads]
    return [
        'lentil',
        barcode_fp,
        OVERHANG,
        write_fastq('raw_R1.fastq', r1_reads, mate=1),
        write_fastq('raw_R2.fastq', r2_reads, mate=2),
        str(tmp_path / 'out'),
        '--state', str(tmp_path / 'state.yaml'),
        '--summary-dir', str(tmp_path / 'summary_files')
    ]


@pytest.mark.parametrize('name', ['demultiplex', 'f1', 'function2', 'align_reads', 'SNP_calling'])
def test_help(name):
    runner = CliRunner()
    result = runner.invoke(main, [name, '--help'])
    assert result.exit_code == 0


def test_unknown_command():
    runner = CliRunner()
    result = runner.invoke(main, ['function5'])
    assert result.exit_code != 0


@pytest.mark.parametrize('name', ['demultiplex', 'function1'])
def test_demultiplex(tmp_path, demultiplex_args, name):
    runner = CliRunner()
    result = runner.invoke(main, [name, *demultiplex_args])
    assert result.exit_code == 0

    out_dir = tmp_path / 'out' / 'demultiplex'
    assert sorted(os.listdir(out_dir)) == [
        'demultiplex.stats.json',
        's1_lentil_R1.fastq',
        's1_lentil_R2.fastq',
        's2_lentil_R1.fastq',
        's2_lentil_R2.fastq'
    ]

    with open(tmp_path / 'summary_files' / 'lentil_demultiplex_summary.txt') as fh:
        assert fh.read().splitlines()[1:] == [
            's1\t1\t50.00\t1\t50.00',
            's2\t1\t50.00\t1\t50.00',
            'Unmatched\t0\t0.00\t0\t0.00'
        ]

    state = RunState.load(str(tmp_path / 'state.yaml'))
    assert state.population == 'lentil'
    assert state.output_dir == os.path.realpath(tmp_path / 'out')


def test_demultiplex_invalid_barcodes(tmp_path, demultiplex_args, write_text):
    demultiplex_args[1] = write_text('invalid.tsv', "s1\tACGT\ns2\tACGT\n")
    runner = CliRunner()
    result = runner.invoke(main, ['demultiplex', *demultiplex_args])
    assert result.exit_code == 1
    assert not os.path.isfile(tmp_path / 'state.yaml')


@pytest.mark.parametrize('i,value', [
    (0, 'len/til'),
    (2, 'TGNA')
])
def test_demultiplex_invalid_arguments(demultiplex_args, i, value):
    demultiplex_args[i] = value
    runner = CliRunner()
    result = runner.invoke(main, ['demultiplex', *demultiplex_args])
    assert result.exit_code == 2


def test_trim_no_state(tmp_path, write_text):
    jar_fp = write_text('trimmomatic.jar', 'PK')
    adapters_fp = write_text('adapters.fa', '>a\nACGT\n')
    runner = CliRunner()
    result = runner.invoke(main, [
        'f2', jar_fp, adapters_fp,
        '--state', str(tmp_path / 'missing.yaml')
    ])
    assert result.exit_code == 1


def test_call_no_reference(tmp_path, demultiplex_args):
    runner = CliRunner()
    result = runner.invoke(main, ['demultiplex', *demultiplex_args])
    assert result.exit_code == 0

    result = runner.invoke(main, [
        'call', str(tmp_path), str(tmp_path),
        '--state', str(tmp_path / 'state.yaml')
    ])
    assert result.exit_code == 1


def get_critical_messages(caplog):
    return [r.getMessage() for r in caplog.records if r.levelno == logging.CRITICAL]


def test_demultiplex_output_error(tmp_path, demultiplex_args, caplog):
    out_dir = tmp_path / 'out' / 'demultiplex'
    os.makedirs(out_dir / ('s2_lentil_R1.fastq' + PARTIAL_FILE_SUFFIX))

    runner = CliRunner()
    result = runner.invoke(main, ['demultiplex', *demultiplex_args])
    assert result.exit_code == 1

    messages = get_critical_messages(caplog)
    assert len(messages) == 1
    assert os.path.realpath(out_dir / 's2_lentil_R1.fastq') in messages[0]

    assert os.listdir(out_dir) == ['s2_lentil_R1.fastq' + PARTIAL_FILE_SUFFIX]
    assert not os.path.isfile(tmp_path / 'state.yaml')


def test_demultiplex_truncated_input(tmp_path, demultiplex_args, caplog):
    with open(demultiplex_args[3], 'rb') as fh:
        data = gzip.compress(fh.read() * 200)
    r1_fp = str(tmp_path / 'raw_R1.fastq.gz')
    with open(r1_fp, 'wb') as fh:
        fh.write(data[:len(data) // 2])
    demultiplex_args[3] = r1_fp

    # Read 2 in full, so that read 1 is the first to fail
    with open(demultiplex_args[4]) as fh:
        r2_text = fh.read() * 200
    with open(demultiplex_args[4], 'w') as fh:
        fh.write(r2_text)

    runner = CliRunner()
    result = runner.invoke(main, ['demultiplex', *demultiplex_args])
    assert result.exit_code == 1

    messages = get_critical_messages(caplog)
    assert len(messages) == 1
    assert os.path.realpath(r1_fp) in messages[0]
