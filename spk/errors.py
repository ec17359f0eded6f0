"""Error types raised while building, verifying and extracting packages."""
from __future__ import annotations

from typing import Optional


class SpkError(RuntimeError):
  pass


class ValidationError(SpkError):
  """A package, key file or archive failed a format or cryptographic check."""


class NotAPackage(ValidationError):
  pass


class InvalidKeyFile(ValidationError):
  pass


class InvalidSignature(ValidationError):
  pass


class MalformedSignature(ValidationError):
  pass


class HashMismatch(ValidationError):
  pass


class MalformedArchive(ValidationError):
  pass


class UnencodableFileName(ValidationError):
  """A source file name cannot be stored in an archive (not valid UTF-8)."""


class InvalidEncoding(SpkError, ValueError):
  pass


class OutputExists(SpkError):
  pass


class CompressorFailed(SpkError):
  """The compressor child process exited non-zero or was killed by a signal."""

  def __init__(self, command: str, exit_code: Optional[int] = None, signal: Optional[int] = None) -> None:
    self.command = command
    self.exit_code = exit_code
    self.signal = signal
    if signal is not None:
      message = f"{command} crashed with signal {signal}"
    else:
      message = f"{command} failed with exit code {exit_code}"
    super().__init__(message)
