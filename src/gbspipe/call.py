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

import os

import click
from click_option_group import OptionGroup

from .cli import common_cli_debug_options, common_cli_options
from .cli_utils import abort, existing_directory_path, setup_logging
from .config import CallOptions
from .errors import InputIOError, ToolError
from .fs import ALIGN_DIR, LOGS_DIR, VARIANTS_DIR, get_alignment_file_name, get_step_dir
from .step_utils import check_input_files, check_tool, load_run_state, load_sample_names, log_progress, override_options, report_outputs, setup_dirs
from .tools.samtools import Samtools


HELP_MIN_MAPQ = "Minimum mapping quality of the alignments to retain [0]"
HELP_THREADS = "Threads used for sorting [1]"

call_opts = OptionGroup("\nVariant calling", help="Options passed on to SAMtools")


@click.command()
@click.argument('samtools_dir', required=True, type=existing_directory_path)
@click.argument('bcftools_dir', required=True, type=existing_directory_path)
@common_cli_options
@call_opts.option('-q', '--min-mapq', type=click.IntRange(min=0), default=None, help=HELP_MIN_MAPQ)
@call_opts.option('-t', '--threads', type=click.IntRange(min=1), default=None, help=HELP_THREADS)
@common_cli_debug_options
def call(
    samtools_dir: str,
    bcftools_dir: str,
    state: str,
    summary_dir: str,
    loglevel: str,

    # Default option overrides
    min_mapq: int | None = None,
    threads: int | None = None
):
    """
    Sort and index the alignments and call raw variants with SAMtools/BCFtools.

    \b
    SAMTOOLS_DIR: Directory of the samtools executable
    BCFTOOLS_DIR: Directory of the bcftools executable
    """

    setup_logging(loglevel)

    run_state = load_run_state(state)
    if not run_state.reference:
        abort("No reference genome in the run state: run the alignment step first!")
    reference: str = run_state.reference

    opt = CallOptions()
    override_options(opt, min_mapq=min_mapq, threads=threads)

    tool = Samtools(samtools_dir=samtools_dir, bcftools_dir=bcftools_dir)
    check_tool(tool)

    in_dir = get_step_dir(run_state.output_dir, ALIGN_DIR)
    sample_names = load_sample_names(run_state)
    inputs = {
        sample_name: os.path.join(in_dir, get_alignment_file_name(sample_name, run_state.population))
        for sample_name in sample_names
    }
    check_input_files([reference, *inputs.values()])

    out_dir = get_step_dir(run_state.output_dir, VARIANTS_DIR)
    logs_dir = get_step_dir(run_state.output_dir, LOGS_DIR)
    setup_dirs(out_dir, logs_dir, summary_dir)

    try:
        fai_fp = tool.ensure_faidx(reference)

        sorted_bam_fps: list[str] = []
        n = len(sample_names)
        for i, sample_name in enumerate(sample_names):
            log_progress(i, n, sample_name)
            sorted_bam_fps.append(tool.sam_to_sorted_bam(
                inputs[sample_name],
                os.path.join(out_dir, get_alignment_file_name(sample_name, run_state.population, ext='.bam')),
                fai_fp,
                min_mapq=opt.min_mapq,
                threads=opt.threads))

        tool.call_variants(
            reference,
            sorted_bam_fps,
            os.path.join(out_dir, f"{run_state.population}.bcf"),
            os.path.join(out_dir, f"{run_state.population}.vcf"),
            log_fp=os.path.join(logs_dir, f"{run_state.population}_bcftools_output.log"))

    except (InputIOError, ToolError) as ex:
        abort(ex.message)

    report_outputs(out_dir)
