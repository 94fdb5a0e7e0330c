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

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from yaml.parser import ParserError
from yaml.scanner import ScannerError

from .errors import ConfigError
from .fs import write_text_atomic
from .utils import is_dna, is_file_name_safe, log_validation_error


DEFAULT_STATE_FILE = 'gbspipe.state.yaml'

DEFAULT_BOWTIE2_ARGS = [
    '--end-to-end',
    '--no-mixed',
    '--no-discordant',
    '-X', '11000',
    '-R', '5',
    '-k', '3',
    '-p', '4'
]


class BaseConfig(BaseModel, validate_assignment=True):
    model_config = ConfigDict(extra='forbid')  # noqa: F841

    def override(self, **kwargs) -> None:
        for k, v in kwargs.items():
            assert hasattr(self, k)
            if v is not None:
                self.__setattr__(k, v)


class DemultiplexOptions(BaseConfig):
    """
    Demultiplexing options

    max_mismatches: tag mismatches tolerated when no exact match is found
    trim_r2: trim the tag length from read 2 as well
    compress: write gzip-compressed FASTQ files
    """

    max_mismatches: int = Field(default=0, ge=0)
    trim_r2: bool = False
    compress: bool = False


class TrimOptions(BaseConfig):
    threads: int = Field(default=20, ge=1)
    phred: int = 33
    seed_mismatches: int = 2
    palindrome_clip_threshold: int = 30
    simple_clip_threshold: int = 10
    window_size: int = 4
    required_quality: int = 15
    leading: int = 3
    trailing: int = 3
    minlen: int = 36

    @field_validator('phred')
    @classmethod
    def _validate_phred(cls, v: int) -> int:
        if v not in (33, 64):
            raise ValueError("quality encoding must be either 33 or 64")
        return v


class AlignOptions(BaseConfig):
    args: list[str] = Field(default_factory=lambda: list(DEFAULT_BOWTIE2_ARGS))
    index_basename: str | None = None


class CallOptions(BaseConfig):
    min_mapq: int = Field(default=0, ge=0)
    threads: int = Field(default=1, ge=1)


class RunState(BaseConfig):
    """
    Parameters shared by the pipeline steps

    Set by the demultiplexing step, extended by the alignment step, and
    loaded by every following step.
    """

    population: str
    barcode_file: str
    overhang: str
    output_dir: str
    read_1: str | None = None
    read_2: str | None = None
    demultiplex: DemultiplexOptions = Field(default_factory=DemultiplexOptions)
    reference: str | None = None

    @field_validator('population')
    @classmethod
    def _validate_population(cls, v: str) -> str:
        if not is_file_name_safe(v):
            raise ValueError("the population label may not contain whitespace or path separators")
        return v

    @field_validator('overhang')
    @classmethod
    def _validate_overhang(cls, v: str) -> str:
        v = v.upper()
        if not is_dna(v):
            raise ValueError("the restriction site overhang must be a DNA sequence")
        return v

    @classmethod
    def load(cls, fp: str):
        if not os.path.isfile(fp):
            raise ConfigError(f"Run state not found at '{fp}': run the demultiplexing step first!")

        with open(fp) as fh:
            try:
                return cls.model_validate(yaml.safe_load(fh))
            except ScannerError as ex:
                m = ex.problem_mark
                raise ConfigError(f"YAML parsing error: {ex.problem} at line {m.line} column {m.column} in {m.name}!")  # type: ignore
            except ParserError as ex:
                logging.error(str(ex).replace('\n', ''))
                raise ConfigError(f"Failed to load run state from '{fp}'!")
            except ValidationError as ex:
                log_validation_error(ex)
                raise ConfigError(f"Invalid run state in '{fp}'!")

    def save(self, fp: str) -> None:
        logging.debug("Saving run state: %s", fp)
        write_text_atomic(fp, yaml.safe_dump(self.model_dump(mode='json'), sort_keys=False))
