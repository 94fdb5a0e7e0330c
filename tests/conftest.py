import os

import pytest


def format_fastq_record(name: str, seq: str, mate: int | None = None) -> str:
    suffix = f"/{mate}" if mate else ''
    return f"@{name}{suffix}\n{seq}\n+\n{'I' * len(seq)}\n"


@pytest.fixture
def write_fastq(tmp_path):
    def write(file_name: str, reads: list[tuple[str, str]], mate: int | None = None) -> str:
        fp = os.path.join(tmp_path, file_name)
        with open(fp, 'w') as fh:
            for name, seq in reads:
                fh.write(format_fastq_record(name, seq, mate=mate))
        return fp

    return write


@pytest.fixture
def write_text(tmp_path):
    def write(file_name: str, text: str) -> str:
        fp = os.path.join(tmp_path, file_name)
        with open(fp, 'w') as fh:
            fh.write(text)
        return fp

    return write
