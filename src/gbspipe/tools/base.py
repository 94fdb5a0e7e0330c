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

import abc
from dataclasses import dataclass, field
import logging
import os
import shutil
import subprocess
from typing import Callable

from ..errors import ToolExecutionError, ToolNotFoundError
from ..fs import write_text_atomic

Runner = Callable[[list[str]], subprocess.CompletedProcess]


def run_subprocess(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(args, capture_output=True, text=True, check=False)


def resolve_executable(tool: str, exe: str, tool_dir: str | None = None) -> str:
    """
    Locate an executable in the given directory, or in the search path

    Tools are never installed on the fly: a missing executable is fatal.
    """

    if tool_dir:
        fp = os.path.join(tool_dir, exe)
        if not (os.path.isfile(fp) and os.access(fp, os.X_OK)):
            raise ToolNotFoundError(tool, fp)
        return fp

    fp = shutil.which(exe)
    if not fp:
        raise ToolNotFoundError(tool, exe)
    return fp


@dataclass(slots=True)
class Tool(abc.ABC):
    runner: Runner = field(default=run_subprocess, kw_only=True)

    @property
    @abc.abstractmethod
    def name(self) -> str:
        pass

    @abc.abstractmethod
    def check(self) -> None:
        """Verify all required executables are available"""
        pass

    def run(self, args: list[str], log_fp: str | None = None) -> subprocess.CompletedProcess:
        logging.debug(' '.join(args))
        try:
            result = self.runner(args)
        except OSError as ex:
            raise ToolExecutionError(self.name, -1, str(ex))

        if log_fp:
            write_text_atomic(log_fp, (result.stdout or '') + (result.stderr or ''))

        if result.returncode != 0:
            raise ToolExecutionError(self.name, result.returncode, result.stderr or '')

        return result
