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

from typing import Generator

from .utils import open_text_file


COMMENT_PREFIX = '#'
BYTE_ORDER_MARK = '\ufeff'


class TsvError(Exception):
    def __init__(self, fp: str, *args) -> None:
        self.fp = fp
        super().__init__(*args)


class TsvTruncatedRow(TsvError):
    def __init__(self, fp: str, line: int, *args) -> None:
        self.line = line
        super().__init__(fp, *args)


def parse_tsv_rows(fp: str, min_fields: int = 1, max_fields: int | None = None) -> Generator[tuple[int, list[str]], None, None]:
    """
    Yield the line number and the stripped fields of each data row

    Blank lines and lines starting with '#' are skipped; rows with an empty
    field, or with a number of fields outside of the expected range, are
    reported as truncated.
    """

    with open_text_file(fp) as fh:
        for i, line in enumerate(fh, start=1):
            line = line.lstrip(BYTE_ORDER_MARK).strip()
            if not line or line.startswith(COMMENT_PREFIX):
                continue

            fields = [f.strip() for f in line.split('\t')]
            if (
                len(fields) < min_fields or
                (max_fields is not None and len(fields) > max_fields) or
                not all(fields)
            ):
                raise TsvTruncatedRow(fp, i)

            yield i, fields
