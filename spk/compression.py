"""Adapter running an external compressor as a pipeline stage.

The child is connected to us by a single pipe. In the OUTPUT direction we
write uncompressed bytes into the pipe and the child writes the compressed
stream straight to the wrapped file; in the INPUT direction the child reads the
wrapped file and we read decompressed bytes from the pipe. Pipe buffering gives
backpressure both ways.
"""
from __future__ import annotations

import enum
import logging
import subprocess
from typing import BinaryIO, List, Optional

from .errors import CompressorFailed

logger = logging.getLogger(__name__)


class Direction(enum.Enum):
  OUTPUT = "output"
  INPUT = "input"


class ChildProcess:
  def __init__(self, command: List[str], wrapped: BinaryIO, direction: Direction) -> None:
    self.command = command
    self.direction = direction
    logger.debug("Starting %s (%s)", " ".join(command), direction.value)
    if direction is Direction.OUTPUT:
      self._process = subprocess.Popen(command, stdin=subprocess.PIPE, stdout=wrapped)
      self._pipe: Optional[BinaryIO] = self._process.stdin
    else:
      self._process = subprocess.Popen(command, stdin=wrapped, stdout=subprocess.PIPE)
      self._pipe = self._process.stdout

  @property
  def pipe(self) -> BinaryIO:
    if self._pipe is None:
      raise ValueError("Child process pipe is already closed")
    return self._pipe

  def close(self) -> int:
    """Close our end of the pipe, reap the child and return its exit status."""
    # Close first: the child may be blocked until it sees EOF.
    if self._pipe is not None:
      pipe, self._pipe = self._pipe, None
      try:
        pipe.close()
      except BrokenPipeError:
        logger.debug("%s exited before consuming all input", self.command[0])
    return self._process.wait()

  def check(self) -> None:
    status = self.close()
    if status > 0:
      raise CompressorFailed(self.command[0], exit_code=status)
    if status < 0:
      raise CompressorFailed(self.command[0], signal=-status)

  def __enter__(self) -> "ChildProcess":
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    if exc_type is None or issubclass(exc_type, BrokenPipeError):
      # A broken pipe means the child died early; report its status instead.
      self.check()
    else:
      self.close()
