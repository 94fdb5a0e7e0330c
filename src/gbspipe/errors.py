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


class CustomException(Exception, abc.ABC):
    def __init__(self, message: str, *args: object) -> None:
        self.message = message
        super().__init__(message, *args)


class ConfigError(CustomException):
    pass


class AmbiguousBarcodeError(ConfigError):
    pass


class InputIOError(CustomException):
    pass


class InvalidInputFormatError(CustomException, abc.ABC):
    pass


class MalformedRecordError(InvalidInputFormatError):
    def __init__(self, fp: str, line: int, reason: str, *args: object) -> None:
        self.fp = fp
        self.line = line
        self.reason = reason
        super().__init__(
            f"Malformed FASTQ record in '{fp}' at line {line}: {reason}!", *args)


class DesynchronizedPairError(InvalidInputFormatError):
    def __init__(self, r1_fp: str, r2_fp: str, record: int, reason: str, *args: object) -> None:
        self.r1_fp = r1_fp
        self.r2_fp = r2_fp
        self.record = record
        super().__init__(
            f"Read files '{r1_fp}' and '{r2_fp}' out of sync at record {record}: {reason}!", *args)


class ToolError(CustomException, abc.ABC):
    def __init__(self, tool: str, message: str, *args: object) -> None:
        self.tool = tool
        super().__init__(message, *args)


class ToolNotFoundError(ToolError):
    def __init__(self, tool: str, path: str, *args: object) -> None:
        self.path = path
        super().__init__(tool, f"{tool} not found at '{path}'!", *args)


class ToolExecutionError(ToolError):
    def __init__(self, tool: str, returncode: int, stderr: str, *args: object) -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            tool, f"{tool} failed with exit status {returncode}: {stderr.strip()}", *args)


class ToolLogParseError(ToolError):
    def __init__(self, tool: str, fp: str, *args: object) -> None:
        self.fp = fp
        super().__init__(tool, f"Statistics not found in {tool} output for '{fp}'!", *args)
