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

from contextlib import ExitStack
from dataclasses import dataclass, field
import logging
from typing import IO, Iterable

from .errors import InputIOError
from .fs import OutputFile, get_demultiplexed_file_name, open_output_file
from .readers.fastq import ReadPair


@dataclass(slots=True)
class SampleBucket:
    r1: OutputFile
    r2: OutputFile
    count: int = 0

    @property
    def handles(self) -> tuple[IO, IO]:
        return self.r1.fh, self.r2.fh  # type: ignore[return-value]

    def write(self, pair: ReadPair) -> None:
        for record, f in ((pair.r1, self.r1), (pair.r2, self.r2)):
            try:
                record.write(f.fh)
            except OSError as ex:
                raise InputIOError(f"Failed to write '{f.fp}': {ex.strerror or ex}!")
        self.count += 1


@dataclass
class SampleWriterPool:
    """
    Output file pairs of each sample, opened at most once per run

    Files are written with a partial extension and only renamed to their
    final names by a successful `close_all`; any error raised while the pool
    is open deletes them (see `open_output_file`).
    """

    out_dir: str
    population: str
    compress: bool = False
    buckets: dict[str, SampleBucket] = field(init=False, default_factory=dict)
    _stack: ExitStack = field(init=False, default_factory=ExitStack)

    def __enter__(self):
        self._stack.__enter__()
        return self

    def __exit__(self, *exc_info) -> bool:
        return self._stack.__exit__(*exc_info)

    def _open_output_file(self, sample_name: str, mate: int) -> OutputFile:
        return self._stack.enter_context(open_output_file(
            get_demultiplexed_file_name(sample_name, self.population, mate),
            out_dir=self.out_dir,
            compress=self.compress,
            keep_empty=True))

    def open(self, sample_name: str) -> tuple[IO, IO]:
        bucket = self.buckets.get(sample_name)
        if bucket is None:
            logging.debug("Opening output files for sample '%s'...", sample_name)
            bucket = SampleBucket(
                self._open_output_file(sample_name, 1),
                self._open_output_file(sample_name, 2))
            self.buckets[sample_name] = bucket
        return bucket.handles

    def open_all(self, sample_names: Iterable[str]) -> None:
        for sample_name in sample_names:
            self.open(sample_name)

    def write(self, sample_name: str, pair: ReadPair) -> None:
        self.open(sample_name)
        self.buckets[sample_name].write(pair)

    def get_file_paths(self, sample_name: str) -> tuple[str, str]:
        bucket = self.buckets[sample_name]
        return bucket.r1.fp, bucket.r2.fp

    def close_all(self) -> None:
        self._stack.close()
