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
from .cli_utils import abort, existing_file_path, setup_logging
from .config import RunState, TrimOptions
from .errors import InputIOError, ToolError
from .fs import DEMULTIPLEX_DIR, EXT_COMPRESSED, LOGS_DIR, TRIM_DIR, get_demultiplexed_file_name, get_sample_file_prefix, get_step_dir, get_trimmed_file_name
from .step_utils import check_input_files, check_tool, get_summary_file_path, load_run_state, load_sample_names, log_progress, override_options, report_outputs, setup_dirs
from .steps import PipelineStep
from .tools.trimmomatic import TrimOutputs, TrimStats, Trimmomatic
from .writer import write_trim_summary


trim_opts = OptionGroup("\nTrimmomatic", help="Options passed on to Trimmomatic")


def get_demultiplexed_file_paths(state: RunState, sample_name: str) -> tuple[str, str]:
    in_dir = get_step_dir(state.output_dir, DEMULTIPLEX_DIR)
    ext = EXT_COMPRESSED if state.demultiplex.compress else ''

    def get_path(mate: int) -> str:
        return os.path.join(in_dir, get_demultiplexed_file_name(sample_name, state.population, mate) + ext)

    return get_path(1), get_path(2)


def get_trim_outputs(state: RunState, sample_name: str) -> TrimOutputs:
    out_dir = get_step_dir(state.output_dir, TRIM_DIR)

    def get_path(mate: int, paired: bool) -> str:
        return os.path.join(out_dir, get_trimmed_file_name(sample_name, state.population, mate, paired))

    return TrimOutputs(
        get_path(1, True),
        get_path(1, False),
        get_path(2, True),
        get_path(2, False))


@click.command()
@click.argument('trimmomatic_path', required=True, type=click.Path(dir_okay=False))
@click.argument('trim_file', required=True, type=existing_file_path)
@common_cli_options
@trim_opts.option('-t', '--threads', type=click.IntRange(min=1), default=None, help="Threads [20]")
@trim_opts.option('--seed-mismatches', type=int, default=None, help="ILLUMINACLIP seed mismatches [2]")
@trim_opts.option('--palindrome-clip-threshold', type=int, default=None, help="ILLUMINACLIP palindrome clip threshold [30]")
@trim_opts.option('--simple-clip-threshold', type=int, default=None, help="ILLUMINACLIP simple clip threshold [10]")
@trim_opts.option('--window-size', type=int, default=None, help="SLIDINGWINDOW window size [4]")
@trim_opts.option('--required-quality', type=int, default=None, help="SLIDINGWINDOW required quality [15]")
@trim_opts.option('--leading', type=int, default=None, help="LEADING quality [3]")
@trim_opts.option('--trailing', type=int, default=None, help="TRAILING quality [3]")
@trim_opts.option('--minlen', type=int, default=None, help="MINLEN [36]")
@common_cli_debug_options
def trim(
    trimmomatic_path: str,
    trim_file: str,
    state: str,
    summary_dir: str,
    loglevel: str,

    # Default option overrides
    threads: int | None = None,
    seed_mismatches: int | None = None,
    palindrome_clip_threshold: int | None = None,
    simple_clip_threshold: int | None = None,
    window_size: int | None = None,
    required_quality: int | None = None,
    leading: int | None = None,
    trailing: int | None = None,
    minlen: int | None = None
):
    """
    Trim demultiplexed reads with Trimmomatic.

    \b
    TRIMMOMATIC_PATH: Trimmomatic JAR file
    TRIM_FILE: Adapter and other sequences to clip (FASTA)
    """

    setup_logging(loglevel)

    run_state = load_run_state(state)
    opt = TrimOptions()
    override_options(
        opt,
        threads=threads,
        seed_mismatches=seed_mismatches,
        palindrome_clip_threshold=palindrome_clip_threshold,
        simple_clip_threshold=simple_clip_threshold,
        window_size=window_size,
        required_quality=required_quality,
        leading=leading,
        trailing=trailing,
        minlen=minlen)

    tool = Trimmomatic(jar_path=trimmomatic_path)
    check_tool(tool)

    sample_names = load_sample_names(run_state)
    inputs = {
        sample_name: get_demultiplexed_file_paths(run_state, sample_name)
        for sample_name in sample_names
    }
    check_input_files([fp for fps in inputs.values() for fp in fps])

    out_dir = get_step_dir(run_state.output_dir, TRIM_DIR)
    logs_dir = get_step_dir(run_state.output_dir, LOGS_DIR)
    setup_dirs(out_dir, logs_dir, summary_dir)

    sample_stats: list[tuple[str, TrimStats]] = []
    n = len(sample_names)
    for i, sample_name in enumerate(sample_names):
        log_progress(i, n, sample_name)
        prefix = get_sample_file_prefix(sample_name, run_state.population)
        r1_fp, r2_fp = inputs[sample_name]

        try:
            stats = tool.trim(
                r1_fp,
                r2_fp,
                get_trim_outputs(run_state, sample_name),
                trim_file,
                opt,
                os.path.join(logs_dir, f"{prefix}.trim.log"),
                log_fp=os.path.join(logs_dir, f"{prefix}_trimmomatic_output.log"))
        except (InputIOError, ToolError) as ex:
            abort(ex.message)

        sample_stats.append((sample_name, stats))

    summary_fp = get_summary_file_path(summary_dir, run_state.population, PipelineStep.TRIM)
    try:
        write_trim_summary(sample_stats, summary_fp)
    except InputIOError as ex:
        abort(ex.message)

    report_outputs(out_dir, summary_fp)
