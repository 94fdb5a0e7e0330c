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

from .cli import common_cli_debug_options, common_cli_options
from .cli_utils import abort, existing_directory_path, existing_file_path, setup_logging
from .config import AlignOptions, RunState
from .errors import InputIOError, ToolError
from .fs import ALIGN_DIR, LOGS_DIR, TRIM_DIR, get_alignment_file_name, get_sample_file_prefix, get_step_dir, get_trimmed_file_name
from .step_utils import check_input_files, check_tool, get_summary_file_path, load_run_state, load_sample_names, log_progress, override_options, report_outputs, save_run_state, setup_dirs
from .steps import PipelineStep
from .tools.bowtie2 import AlignStats, Bowtie2
from .writer import write_align_summary


HELP_INDEX_FILES = "Path and basename of prebuilt reference index files (if not alongside the reference)"


def get_trimmed_file_paths(state: RunState, sample_name: str) -> tuple[str, str]:
    in_dir = get_step_dir(state.output_dir, TRIM_DIR)
    return (
        os.path.join(in_dir, get_trimmed_file_name(sample_name, state.population, 1, True)),
        os.path.join(in_dir, get_trimmed_file_name(sample_name, state.population, 2, True))
    )


def get_index_basename(reference: str, index_files: str | None) -> str:
    # E.g.: /data/genome.fasta -> /data/genome (genome.1.bt2, ...)
    return index_files or os.path.splitext(reference)[0]


@click.command()
@click.argument('bowtie2_dir', required=True, type=existing_directory_path)
@click.argument('reference', required=True, type=existing_file_path)
@click.argument('bowtie2_args', nargs=-1, type=click.UNPROCESSED)
@common_cli_options
@click.option('--index-files', type=str, default=None, help=HELP_INDEX_FILES)
@common_cli_debug_options
def align(
    bowtie2_dir: str,
    reference: str,
    bowtie2_args: tuple[str, ...],
    state: str,
    summary_dir: str,
    loglevel: str,
    index_files: str | None = None
):
    """
    Align trimmed reads to a reference genome with bowtie2.

    Custom bowtie2 options replace the defaults and must follow '--', e.g.:

    \b
        gbspipe align BOWTIE2_DIR REFERENCE -- --end-to-end -X 1000 -p 8

    \b
    BOWTIE2_DIR: Directory of the bowtie2 executables
    REFERENCE: Reference genome (FASTA)
    """

    setup_logging(loglevel)

    run_state = load_run_state(state)
    opt = AlignOptions()
    override_options(
        opt,
        args=list(bowtie2_args) or None,
        index_basename=index_files)

    tool = Bowtie2(bowtie2_dir=bowtie2_dir)
    check_tool(tool)

    sample_names = load_sample_names(run_state)
    inputs = {
        sample_name: get_trimmed_file_paths(run_state, sample_name)
        for sample_name in sample_names
    }
    check_input_files([fp for fps in inputs.values() for fp in fps])

    out_dir = get_step_dir(run_state.output_dir, ALIGN_DIR)
    logs_dir = get_step_dir(run_state.output_dir, LOGS_DIR)
    setup_dirs(out_dir, logs_dir, summary_dir)

    index = get_index_basename(reference, opt.index_basename)
    try:
        tool.ensure_index(reference, index, log_fp=os.path.join(logs_dir, 'bowtie2_build.log'))
    except (InputIOError, ToolError) as ex:
        abort(ex.message)

    logging.info("bowtie2 options: %s", ' '.join(opt.args))

    sample_stats: list[tuple[str, AlignStats]] = []
    n = len(sample_names)
    for i, sample_name in enumerate(sample_names):
        log_progress(i, n, sample_name)
        prefix = get_sample_file_prefix(sample_name, run_state.population)
        r1_fp, r2_fp = inputs[sample_name]

        try:
            stats = tool.align(
                index,
                r1_fp,
                r2_fp,
                os.path.join(out_dir, get_alignment_file_name(sample_name, run_state.population)),
                opt.args,
                log_fp=os.path.join(logs_dir, f"{prefix}_bowtie2_output.log"))
        except (InputIOError, ToolError) as ex:
            abort(ex.message)

        sample_stats.append((sample_name, stats))

    summary_fp = get_summary_file_path(summary_dir, run_state.population, PipelineStep.ALIGN)
    try:
        write_align_summary(sample_stats, summary_fp)
    except InputIOError as ex:
        abort(ex.message)

    # The variant calling step requires the reference
    run_state.reference = reference
    save_run_state(run_state, state)

    report_outputs(out_dir, summary_fp)
