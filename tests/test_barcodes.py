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

import pytest

from gbspipe.barcodes import INVALID, BarcodeEntry, BarcodeTable
from gbspipe.errors import AmbiguousBarcodeError, ConfigError

OVERHANG = 'TGCA'


def get_table(barcodes: list[tuple[str, str]], max_mismatches: int = 0) -> BarcodeTable:
    return BarcodeTable([
        BarcodeEntry(barcode, sample_name)
        for sample_name, barcode in barcodes
    ], OVERHANG, max_mismatches=max_mismatches)


def test_load(write_text):
    fp = write_text('barcodes.tsv', "# sample\tbarcode\ns1\tacgt\nGGCC\n")
    table = BarcodeTable.load(fp, OVERHANG.lower())
    assert table.overhang == OVERHANG
    assert table.sample_names == ['s1', 'GGCC']
    assert table.tags == ['ACGT' + OVERHANG, 'GGCC' + OVERHANG]


@pytest.mark.parametrize('text', [
    '',
    '# header only\n',
    's1\tACGX\n',
    's 1\tACGT\n',
    's1\tACGT\textra\n'
])
def test_load_invalid(write_text, text):
    fp = write_text('barcodes.tsv', text)
    with pytest.raises(ConfigError):
        BarcodeTable.load(fp, OVERHANG)


def test_load_missing(tmp_path):
    with pytest.raises(ConfigError):
        BarcodeTable.load(str(tmp_path / 'missing.tsv'), OVERHANG)


def test_duplicate_barcodes():
    with pytest.raises(AmbiguousBarcodeError):
        get_table([('s1', 'ACGT'), ('s2', 'ACGT')])


def test_invalid_overhang():
    with pytest.raises(ConfigError):
        BarcodeTable([BarcodeEntry('ACGT', 's1')], 'TGNA')


def test_match_exact():
    table = get_table([('s1', 'ACGT'), ('s2', 'GGCC')])
    assert table.match('ACGT' + OVERHANG + 'AAAA') == (0, 8)
    assert table.match('GGCC' + OVERHANG + 'AAAA') == (1, 8)
    assert table.lookup('GGCC' + OVERHANG) == 's2'

    # Overhang mismatch, short read, no match
    assert table.match('ACGTTGCTAAAA')[0] == INVALID
    assert table.match('ACGT')[0] == INVALID
    assert table.lookup('TTTTTTTTTTTT') is None


def test_match_longest_first():
    table = get_table([('short', 'ACGT'), ('long', 'ACGTAC')])
    assert table.max_tag_length == 10
    assert table.lookup('ACGTAC' + OVERHANG + 'AAAA') == 'long'
    assert table.lookup('ACGT' + OVERHANG + 'AAAA') == 'short'


def test_multiple_barcodes_per_sample():
    table = get_table([('s1', 'ACGT'), ('s1', 'GGCC')])
    assert table.sample_names == ['s1']
    assert table.lookup('ACGT' + OVERHANG) == 's1'
    assert table.lookup('GGCC' + OVERHANG) == 's1'


def test_match_mismatches():
    table = get_table([('s1', 'AAAAAA'), ('s2', 'CCCCCC')], max_mismatches=1)

    # Exact
    assert table.match('AAAAAA' + OVERHANG) == (0, 10)

    # One mismatch
    assert table.lookup('AAAAAT' + OVERHANG) == 's1'
    assert table.lookup('CNCCCC' + OVERHANG) == 's2'

    # Two mismatches
    assert table.lookup('AAAATT' + OVERHANG) is None


def test_match_mismatches_tie():
    table = get_table([('s1', 'AAAA'), ('s2', 'AAAT')], max_mismatches=1)
    assert table.lookup('AAAG' + OVERHANG) is None
    assert table.lookup('AAAT' + OVERHANG) == 's2'


def test_match_mismatches_disabled():
    table = get_table([('s1', 'AAAAAA')])
    assert table.lookup('AAAAAT' + OVERHANG) is None
