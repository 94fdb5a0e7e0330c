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
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, Any

from .errors import InputIOError


PARTIAL_FILE_EXT = 'part'
PARTIAL_FILE_SUFFIX = '.' + PARTIAL_FILE_EXT

EXT_COMPRESSED = '.gz'
EXT_FASTQ = '.fastq'

DEMULTIPLEX_DIR = 'demultiplex'
TRIM_DIR = 'trim'
ALIGN_DIR = 'align'
VARIANTS_DIR = 'variants'
LOGS_DIR = 'logs'
SUMMARY_DIR = 'summary_files'


@dataclass(slots=True)
class OutputFile:
    fp: str
    fh: IO[Any] | gzip.GzipFile


@contextmanager
def open_input_file(fp: str):
    is_compressed = fp.endswith(EXT_COMPRESSED)
    with (gzip.open if is_compressed else open)(fp, 'rt') as fh:
        yield fh


def get_partial_file_path(fp: str) -> str:
    return fp + PARTIAL_FILE_SUFFIX


@contextmanager
def open_output_file(fp: str, out_dir: str | None = None, mode: str = 'wt', compress: bool = False, keep_empty: bool = False):
    """
    Open file with partial extension, and delete it on close if empty

    The partial file is deleted on error, unless the user interrupted the
    process, in which case it is closed and left in place.

    Assumptions:
    - writing in text format when in compression mode
    """

    rfp = fp
    if compress:
        rfp += EXT_COMPRESSED
    fp = rfp if not out_dir else os.path.join(out_dir, rfp)
    fp_part = get_partial_file_path(fp)
    keep_part = False

    def rename_part():
        if keep_empty or os.path.getsize(fp_part) > 0:
            logging.debug("Renaming partial file '%s'...", fp_part)
            os.rename(fp_part, fp)

    try:
        try:
            fh = (gzip.open if compress else open)(fp_part, mode)
        except OSError as ex:
            raise InputIOError(f"Failed to open '{fp}' for writing: {ex.strerror or ex}!")

        try:
            yield OutputFile(fp, fh)
        except BaseException:
            fh.close()
            raise

        # Flushing and renaming may still fail (e.g., disk full)
        try:
            fh.close()
            rename_part()
        except OSError as ex:
            raise InputIOError(f"Failed to write '{fp}': {ex.strerror or ex}!")

    except KeyboardInterrupt:
        keep_part = True
        logging.warning("Interrupted: incomplete output left at '%s'.", fp_part)
        raise

    finally:
        if not keep_part and os.path.isfile(fp_part):
            logging.debug("Deleting partial file '%s'...", fp_part)
            os.remove(fp_part)


def write_text_atomic(fp: str, text: str) -> None:
    with open_output_file(fp, keep_empty=True) as f:
        try:
            f.fh.write(text)
        except OSError as ex:
            raise InputIOError(f"Failed to write '{f.fp}': {ex.strerror or ex}!")


def setup_dir(dp: str) -> str:
    try:
        os.makedirs(dp, exist_ok=True)
    except OSError as ex:
        raise InputIOError(f"Failed to create directory '{dp}': {ex.strerror}!")
    return dp


def get_sample_file_prefix(sample_name: str, population: str) -> str:
    # E.g.: sample1_lentil
    return f"{sample_name}_{population}"


def get_demultiplexed_file_name(sample_name: str, population: str, mate: int) -> str:
    # E.g.: sample1_lentil_R1.fastq
    return f"{get_sample_file_prefix(sample_name, population)}_R{mate}{EXT_FASTQ}"


def get_trimmed_file_name(sample_name: str, population: str, mate: int, paired: bool) -> str:
    # E.g.: sample1_lentil_R1-p.fastq
    status = 'p' if paired else 's'
    return f"{get_sample_file_prefix(sample_name, population)}_R{mate}-{status}{EXT_FASTQ}"


def get_alignment_file_name(sample_name: str, population: str, ext: str = '.sam') -> str:
    return get_sample_file_prefix(sample_name, population) + ext


def get_summary_file_name(population: str, step: str) -> str:
    # E.g.: lentil_demultiplex_summary.txt
    return f"{population}_{step}_summary.txt"


def get_step_dir(output_dir: str, step_dir: str) -> str:
    return os.path.join(output_dir, step_dir)


def check_readable_file(fp: str) -> None:
    if not (os.path.isfile(fp) and os.access(fp, os.R_OK)):
        raise InputIOError(f"'{fp}' does not exist or is unreadable!")
