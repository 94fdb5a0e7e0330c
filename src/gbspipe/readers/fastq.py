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

from contextlib import closing
from dataclasses import dataclass
from itertools import zip_longest
import logging
from typing import IO, Generator
import zlib

from ..errors import DesynchronizedPairError, InputIOError, MalformedRecordError
from ..fs import check_readable_file, open_input_file
from .constants import LOAD_INFO_THRESHOLD


HEADER_PREFIX = '@'
SEPARATOR_PREFIX = '+'
MATE_SUFFIXES = ('/1', '/2')


@dataclass(slots=True, frozen=True)
class FastqRecord:
    header: str
    sequence: str
    separator: str
    quality: str

    @property
    def read_id(self) -> str:
        """Read name up to the first whitespace, without mate suffix"""

        fields = self.header[1:].split(maxsplit=1)
        name = fields[0] if fields else ''
        return name[:-2] if name.endswith(MATE_SUFFIXES) else name

    def trim_left(self, n: int) -> 'FastqRecord':
        if n == 0:
            return self
        return FastqRecord(self.header, self.sequence[n:], self.separator, self.quality[n:])

    def write(self, fh: IO) -> None:
        fh.write(self.header)
        fh.write('\n')
        fh.write(self.sequence)
        fh.write('\n')
        fh.write(self.separator)
        fh.write('\n')
        fh.write(self.quality)
        fh.write('\n')


@dataclass(slots=True, frozen=True)
class ReadPair:
    r1: FastqRecord
    r2: FastqRecord

    @property
    def id(self) -> str:
        return self.r1.read_id


def _is_blank_remainder(fh: IO) -> bool:
    return all(not line.strip() for line in fh)


def _iter_records(fp: str, fh: IO) -> Generator[FastqRecord, None, int]:
    n = 0
    line_number = 0

    def read_line() -> str:
        nonlocal line_number
        line = fh.readline()
        if not line:
            raise MalformedRecordError(fp, line_number + 1, "truncated record")
        line_number += 1
        return line.rstrip('\n')

    while True:
        header = fh.readline()
        if not header:
            break
        line_number += 1
        header = header.rstrip('\n')

        if not header.strip():
            # Tolerate trailing blank lines only
            if _is_blank_remainder(fh):
                break
            raise MalformedRecordError(fp, line_number, "unexpected blank line")

        if not header.startswith(HEADER_PREFIX):
            raise MalformedRecordError(fp, line_number, f"header not starting with '{HEADER_PREFIX}'")

        sequence = read_line()
        separator = read_line()
        if not separator.startswith(SEPARATOR_PREFIX):
            raise MalformedRecordError(fp, line_number, f"separator not starting with '{SEPARATOR_PREFIX}'")
        quality = read_line()
        if len(quality) != len(sequence):
            raise MalformedRecordError(fp, line_number, "sequence and quality lengths differ")

        n += 1
        yield FastqRecord(header, sequence, separator, quality)

    return n


def parse_fastq(fp: str) -> Generator[FastqRecord, None, int]:
    """
    Stream the records of a FASTQ file (optionally gzip-compressed)

    Records are parsed lazily, four lines at a time; any structural error is
    fatal. Returns the number of records parsed.
    """

    check_readable_file(fp)
    try:
        with open_input_file(fp) as fh:
            n = yield from _iter_records(fp, fh)

    except UnicodeDecodeError:
        raise InputIOError(f"'{fp}' is not a text FASTQ file!")

    except OSError as ex:
        raise InputIOError(f"Failed to read '{fp}': {ex}!")

    except (EOFError, zlib.error) as ex:
        raise InputIOError(f"Failed to read '{fp}' (truncated or corrupted compressed file): {ex}!")

    return n


def parse_read_pairs(r1_fp: str, r2_fp: str) -> Generator[ReadPair, None, int]:
    """
    Stream the read pairs of two positionally paired FASTQ files

    Returns the number of read pairs parsed.
    """

    n = 0
    with (
        closing(parse_fastq(r1_fp)) as r1_reads,
        closing(parse_fastq(r2_fp)) as r2_reads
    ):
        for r1, r2 in zip_longest(r1_reads, r2_reads):
            n += 1

            if r1 is None:
                raise DesynchronizedPairError(r1_fp, r2_fp, n, f"'{r1_fp}' ended first")
            if r2 is None:
                raise DesynchronizedPairError(r1_fp, r2_fp, n, f"'{r2_fp}' ended first")
            if r1.read_id != r2.read_id:
                raise DesynchronizedPairError(
                    r1_fp, r2_fp, n, f"read identifiers '{r1.read_id}' and '{r2.read_id}' differ")

            yield ReadPair(r1, r2)

            if n % LOAD_INFO_THRESHOLD == 0:  # pragma: no cover
                logging.debug(f"Parsed {n} read pairs...")

    return n
