from __future__ import annotations

import shutil

import pytest

from spk.compression import ChildProcess, Direction
from spk.errors import CompressorFailed

pytestmark = pytest.mark.skipif(shutil.which("sh") is None or shutil.which("cat") is None, reason="needs a POSIX shell")


def test_output_direction_writes_to_wrapped_file(tmp_path):
  target = tmp_path / "out.bin"
  with target.open("wb") as handle:
    with ChildProcess(["cat"], handle, Direction.OUTPUT) as child:
      child.pipe.write(b"x" * 200_000)
  assert target.read_bytes() == b"x" * 200_000


def test_input_direction_reads_from_wrapped_file(tmp_path):
  source = tmp_path / "in.bin"
  source.write_bytes(b"prefix" + b"payload" * 50_000)
  with open(source, "rb", buffering=0) as handle:
    handle.read(6)
    with ChildProcess(["cat"], handle, Direction.INPUT) as child:
      data = child.pipe.read()
  assert data == b"payload" * 50_000


def test_nonzero_exit_is_reported(tmp_path):
  with (tmp_path / "sink").open("wb") as handle:
    with pytest.raises(CompressorFailed) as info:
      with ChildProcess(["sh", "-c", "exit 3"], handle, Direction.OUTPUT):
        pass
  assert info.value.exit_code == 3
  assert info.value.signal is None


def test_signal_death_is_reported(tmp_path):
  with (tmp_path / "sink").open("wb") as handle:
    with pytest.raises(CompressorFailed) as info:
      with ChildProcess(["sh", "-c", "kill -9 $$"], handle, Direction.OUTPUT):
        pass
  assert info.value.signal == 9


def test_failure_after_full_transfer_is_reported(tmp_path):
  source = tmp_path / "in.bin"
  source.write_bytes(b"data")
  with open(source, "rb", buffering=0) as handle:
    with pytest.raises(CompressorFailed):
      with ChildProcess(["sh", "-c", "cat; exit 1"], handle, Direction.INPUT) as child:
        assert child.pipe.read() == b"data"


def test_broken_pipe_surfaces_as_compressor_failure(tmp_path):
  with (tmp_path / "sink").open("wb") as handle:
    with pytest.raises(CompressorFailed):
      with ChildProcess(["sh", "-c", "exit 2"], handle, Direction.OUTPUT) as child:
        child._process.wait()
        child.pipe.write(b"z" * 1_000_000)
        child.pipe.flush()


def test_body_exception_wins_over_exit_status(tmp_path):
  with (tmp_path / "sink").open("wb") as handle:
    with pytest.raises(KeyError):
      with ChildProcess(["sh", "-c", "exit 4"], handle, Direction.OUTPUT):
        raise KeyError("boom")
