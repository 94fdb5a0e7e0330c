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
import os
from tempfile import TemporaryDirectory

import pytest

from gbspipe.errors import InputIOError
from gbspipe.fs import (
    PARTIAL_FILE_SUFFIX, check_readable_file, get_demultiplexed_file_name, get_summary_file_name,
    get_trimmed_file_name, open_output_file, write_text_atomic)


def test_open_output_file():
    s = 'ABC\n'

    def write_to_file(compress):
        with open_output_file(fp, compress=compress) as f:
            f.fh.write(s)

    with TemporaryDirectory() as out_dir:
        fp = os.path.join(out_dir, 'a.txt')
        cfp = fp + '.gz'

        write_to_file(True)
        write_to_file(False)
        assert os.path.isfile(fp)
        assert os.path.isfile(cfp)
        with open(fp) as ufh, gzip.open(cfp, 'rt') as cfh:
            assert ufh.read() == cfh.read()


@pytest.mark.parametrize('keep_empty', [True, False])
def test_open_output_file_empty(keep_empty):
    with TemporaryDirectory() as out_dir:
        with open_output_file('a.txt', out_dir=out_dir, keep_empty=keep_empty):
            pass
        assert os.path.isfile(os.path.join(out_dir, 'a.txt')) is keep_empty
        assert os.listdir(out_dir) == (['a.txt'] if keep_empty else [])


def test_open_output_file_error():
    with TemporaryDirectory() as out_dir:
        with pytest.raises(ValueError):
            with open_output_file('a.txt', out_dir=out_dir) as f:
                f.fh.write('ABC\n')
                raise ValueError()
        assert os.listdir(out_dir) == []


def test_open_output_file_interrupted():
    with TemporaryDirectory() as out_dir:
        with pytest.raises(KeyboardInterrupt):
            with open_output_file('a.txt', out_dir=out_dir) as f:
                f.fh.write('ABC\n')
                raise KeyboardInterrupt()
        assert os.listdir(out_dir) == ['a.txt' + PARTIAL_FILE_SUFFIX]


def test_file_names():
    assert get_demultiplexed_file_name('s1', 'lentil', 1) == 's1_lentil_R1.fastq'
    assert get_trimmed_file_name('s1', 'lentil', 2, False) == 's1_lentil_R2-s.fastq'
    assert get_summary_file_name('lentil', 'trim') == 'lentil_trim_summary.txt'


def test_check_readable_file():
    with TemporaryDirectory() as out_dir:
        with pytest.raises(InputIOError):
            check_readable_file(os.path.join(out_dir, 'missing.fastq'))


def test_open_output_file_open_error():
    with TemporaryDirectory() as out_dir:
        fp = os.path.join(out_dir, 'a.txt')

        # A directory in place of the partial file makes opening it fail
        os.mkdir(fp + PARTIAL_FILE_SUFFIX)
        with pytest.raises(InputIOError) as ex:
            with open_output_file(fp):
                pass
        assert fp in ex.value.message
        assert not os.path.exists(fp)


def test_write_text_atomic_error():
    with TemporaryDirectory() as out_dir:
        fp = os.path.join(out_dir, 'summary.txt')
        os.mkdir(fp + PARTIAL_FILE_SUFFIX)
        with pytest.raises(InputIOError) as ex:
            write_text_atomic(fp, 'ABC\n')
        assert fp in ex.value.message
