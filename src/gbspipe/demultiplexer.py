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
import logging
from time import time

from .barcodes import INVALID, BarcodeTable
from .fs import check_readable_file, setup_dir
from .readers.fastq import ReadPair, parse_read_pairs
from .stats import DemultiplexStats
from .writer_pool import SampleWriterPool


def trim_pair(pair: ReadPair, tag_length: int, trim_r2: bool) -> ReadPair:
    return ReadPair(
        pair.r1.trim_left(tag_length),
        pair.r2.trim_left(tag_length) if trim_r2 else pair.r2)


def demultiplex(
    table: BarcodeTable,
    r1_fp: str,
    r2_fp: str,
    out_dir: str,
    population: str,
    trim_r2: bool = False,
    compress: bool = False,
    limit: int | None = None
) -> DemultiplexStats:
    """
    Split paired reads into one file pair per sample by barcode

    Reads are assigned by the tag (barcode and restriction site overhang) at
    the start of read 1, which is then trimmed from read 1 (and, optionally,
    from read 2 by the same length). Pairs matching no tag are counted and
    dropped. Output files are opened for every sample in the table, so that
    samples with no reads still get (empty) files.
    """

    check_readable_file(r1_fp)
    check_readable_file(r2_fp)
    setup_dir(out_dir)

    start = time()
    sample_names = table.sample_names
    stats = DemultiplexStats.empty(sample_names)

    logging.info(
        "Demultiplexing %d samples (maximum tag length: %d)...",
        len(sample_names), table.max_tag_length)

    with (
        SampleWriterPool(out_dir, population, compress=compress) as pool,
        closing(parse_read_pairs(r1_fp, r2_fp)) as pairs
    ):
        pool.open_all(sample_names)

        for pair in pairs:
            sample_index, tag_length = table.match(pair.r1.sequence)
            stats.eval_pair(sample_index)

            if sample_index != INVALID:
                pool.write(sample_names[sample_index], trim_pair(pair, tag_length, trim_r2))

            if limit is not None and stats.total_raw_pairs >= limit:
                logging.warning(
                    "Terminating after parsing %d read pairs as per user request (--limit option)." %
                    stats.total_raw_pairs)
                break

        pool.close_all()

        for sample_name in sample_names:
            r1_out_fp, r2_out_fp = pool.get_file_paths(sample_name)
            logging.debug(
                "Sample '%s': %d read pairs written to '%s' and '%s'",
                sample_name, pool.buckets[sample_name].count, r1_out_fp, r2_out_fp)

    logging.info(
        "Processed %d read pairs in %d s (%d unmatched)",
        stats.total_raw_pairs, int(time() - start), stats.unmatched_pairs)

    return stats
