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

from contextlib import contextmanager
import logging

import charset_normalizer


MAX_BYTES = 10000
DEFAULT_ENCODING = 'utf-8'


def detect_encoding(fp: str) -> str:
    """
    Guess the text encoding from the first bytes of the file

    Spreadsheet exports of barcode tables are not always UTF-8 (e.g., UTF-16
    with a byte order mark); empty or undecidable files fall back to UTF-8.
    """

    with open(fp, 'rb') as rfh:
        data = rfh.read(MAX_BYTES)

    encoding = charset_normalizer.detect(data)['encoding'] if data else None
    if not encoding:
        return DEFAULT_ENCODING

    logging.debug("File '%s' encoding: %s." % (fp, encoding))
    return encoding


@contextmanager
def open_text_file(fp: str):
    with open(fp, 'rt', encoding=detect_encoding(fp), newline=None) as fh:
        yield fh
