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

import logging
import sys
from typing import NoReturn

import click

from .utils import is_dna, is_file_name_safe


existing_file_path = click.Path(
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
    resolve_path=True)


existing_directory_path = click.Path(
    exists=True,
    file_okay=False,
    dir_okay=True,
    readable=True,
    resolve_path=True)


output_directory_path = click.Path(
    file_okay=False,
    dir_okay=True,
    writable=True,
    resolve_path=True)


class DnaSequenceType(click.ParamType):
    """Unambiguous DNA sequence, case-insensitive (e.g., a restriction site overhang)"""

    name = 'sequence'

    def convert(self, value, param, ctx):
        seq = value.upper()
        if not is_dna(seq):
            self.fail(f"'{value}' is not a DNA sequence (A, C, G, T only)", param, ctx)
        return seq


class FileNameLabelType(click.ParamType):
    name = 'label'

    def convert(self, value, param, ctx):
        if not is_file_name_safe(value):
            self.fail(f"'{value}' contains whitespace or path separators", param, ctx)
        return value


dna_sequence = DnaSequenceType()
file_name_label = FileNameLabelType()


def abort(message: str, *args, level: int = logging.CRITICAL) -> NoReturn:
    logging.log(level, message, *args)
    sys.exit(1)


def setup_logging(loglevel: str) -> None:
    logging.basicConfig(
        level=logging._nameToLevel[loglevel.upper()],
        format="%(levelname)s: %(message)s")
