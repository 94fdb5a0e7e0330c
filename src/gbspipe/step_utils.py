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
from pydantic import ValidationError

from .barcodes import BarcodeTable
from .cli_utils import abort
from .config import BaseConfig, RunState
from .errors import ConfigError, InputIOError, ToolError
from .fs import get_summary_file_name, setup_dir
from .steps import PipelineStep
from .tools.base import Tool
from .utils import log_validation_error


def load_run_state(fp: str) -> RunState:
    try:
        return RunState.load(fp)
    except ConfigError as ex:
        abort(ex.message)


def save_run_state(state: RunState, fp: str) -> None:
    try:
        state.save(fp)
    except InputIOError as ex:
        abort(ex.message)


def override_options(opt: BaseConfig, **kwargs) -> None:
    try:
        opt.override(**kwargs)
    except ValidationError as ex:
        log_validation_error(ex)
        abort("Invalid options!")


def load_sample_names(state: RunState) -> list[str]:
    """Sample names in barcode table order (the same used to name the demultiplexed files)"""

    try:
        return BarcodeTable.load(state.barcode_file, state.overhang).sample_names
    except ConfigError as ex:
        abort(ex.message)


def check_tool(tool: Tool) -> None:
    try:
        tool.check()
    except ToolError as ex:
        abort(ex.message)


def check_input_files(fps: list[str]) -> None:
    missing = [fp for fp in fps if not (os.path.isfile(fp) and os.access(fp, os.R_OK))]
    for fp in missing:
        logging.error("'%s' does not exist or is unreadable!", fp)
    if missing:
        abort("Missing input files!")


def setup_dirs(*dps: str) -> None:
    try:
        for dp in dps:
            setup_dir(dp)
    except InputIOError as ex:
        abort(ex.message)


def get_summary_file_path(summary_dir: str, population: str, step: PipelineStep) -> str:
    return os.path.join(summary_dir, get_summary_file_name(population, step.value))


def log_progress(i: int, n: int, sample_name: str) -> None:
    logging.info("[%d/%d] %d%% Current sample: %s", i + 1, n, (100 * i) // n, sample_name)


def report_outputs(out_dir: str, summary_fp: str | None = None) -> None:
    click.echo(f"Processed reads located in: {out_dir}")
    if summary_fp:
        click.echo(f"Summary: {summary_fp}")
