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
import os

import click
from click_option_group import OptionGroup
from pydantic import ValidationError

from .barcodes import BarcodeTable
from .cli import common_cli_debug_options, common_cli_options, debug_opts
from .cli_utils import abort, dna_sequence, existing_file_path, file_name_label, output_directory_path, setup_logging
from .config import DemultiplexOptions, RunState
from .demultiplexer import demultiplex as run_demultiplex
from .errors import ConfigError, InputIOError, InvalidInputFormatError
from .fs import DEMULTIPLEX_DIR, get_step_dir
from .step_utils import get_summary_file_path, override_options, report_outputs, save_run_state, setup_dirs
from .steps import PipelineStep
from .utils import log_validation_error
from .writer import write_demultiplex_summary, write_stats


HELP_MAX_MISMATCHES = "Tag mismatches tolerated when no tag matches exactly"
HELP_TRIM_R2 = "Whether to trim the tag length from read 2 as well"
HELP_COMPRESS = "Whether to compress the demultiplexed reads"
HELP_LIMIT = "Maximum number of read pairs to process"

STATS_FILE_NAME = 'demultiplex.stats.json'

demux_opts = OptionGroup("\nDemultiplexing", help="Options specific to barcode matching and trimming")


@click.command()
@click.argument('population', required=True, type=file_name_label)
@click.argument('barcode_file', required=True, type=existing_file_path)
@click.argument('overhang', required=True, type=dna_sequence)
@click.argument('read_1', required=True, type=existing_file_path)
@click.argument('read_2', required=True, type=existing_file_path)
@click.argument('output', required=True, type=output_directory_path)
@common_cli_options
@demux_opts.option('-m', '--max-mismatches', type=click.IntRange(min=0), default=None, help=HELP_MAX_MISMATCHES)
@demux_opts.option('--trim-r2', is_flag=True, default=None, help=HELP_TRIM_R2)
@demux_opts.option('--compress', is_flag=True, default=None, help=HELP_COMPRESS)
@debug_opts.option('--limit', type=click.IntRange(min=1), default=None, help=HELP_LIMIT)
@common_cli_debug_options
def demultiplex(
    population: str,
    barcode_file: str,
    overhang: str,
    read_1: str,
    read_2: str,
    output: str,
    state: str,
    summary_dir: str,
    loglevel: str,
    limit: int | None = None,

    # Default option overrides
    max_mismatches: int | None = None,
    trim_r2: bool | None = None,
    compress: bool | None = None
):
    """
    Demultiplex paired-end reads by barcode and restriction site overhang.

    \b
    POPULATION: Label used in naming output files (no whitespace)
    BARCODE_FILE: Barcodes, optionally preceded by sample names (TSV)
    OVERHANG: Restriction site overhang expected after the barcode
    READ_1: Read 1 FASTQ file
    READ_2: Read 2 FASTQ file
    OUTPUT: Output directory
    """

    setup_logging(loglevel)

    opt = DemultiplexOptions()
    override_options(
        opt,
        max_mismatches=max_mismatches,
        trim_r2=trim_r2,
        compress=compress)

    try:
        run_state = RunState(
            population=population,
            barcode_file=barcode_file,
            overhang=overhang,
            output_dir=output,
            read_1=read_1,
            read_2=read_2,
            demultiplex=opt)
    except ValidationError as ex:
        log_validation_error(ex)
        abort("Invalid demultiplexing parameters!")

    # Load barcode table
    try:
        table = BarcodeTable.load(barcode_file, run_state.overhang, max_mismatches=opt.max_mismatches)
    except ConfigError as ex:
        abort(ex.message)

    logging.info("Loaded %d barcodes for %d samples", len(table), len(table.sample_names))
    logging.debug("Expected read prefixes: %s", ', '.join(table.tags))

    out_dir = get_step_dir(output, DEMULTIPLEX_DIR)
    setup_dirs(out_dir, summary_dir)

    try:
        stats = run_demultiplex(
            table,
            read_1,
            read_2,
            out_dir,
            population,
            trim_r2=opt.trim_r2,
            compress=opt.compress,
            limit=limit)

    except InputIOError as ex:
        abort(ex.message)

    except InvalidInputFormatError as ex:
        abort(ex.message)

    if stats.unmatched_pairs:
        logging.warning(
            "%d of %d read pairs matched no barcode and were discarded.",
            stats.unmatched_pairs, stats.total_raw_pairs)

    # Write reports (only after a complete pass)
    summary_fp = get_summary_file_path(summary_dir, population, PipelineStep.DEMULTIPLEX)
    try:
        write_demultiplex_summary(stats, summary_fp)
        write_stats(stats, os.path.join(out_dir, STATS_FILE_NAME))
    except InputIOError as ex:
        abort(ex.message)

    # Share parameters with the following steps
    save_run_state(run_state, state)

    report_outputs(out_dir, summary_fp)
