"""Verifies .spk packages and extracts them to disk."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .archive import Archive, extract_archive
from .compression import ChildProcess, Direction
from .errors import MalformedSignature, NotAPackage, OutputExists, SpkError
from .keys import app_id
from .messages import MessageError, SignatureRecord, read_message
from .pack import MAGIC_NUMBER, SUFFIX
from .settings import Settings, get_settings
from .signing import check_payload_hash, open_signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedPackage:
  public_key: bytes
  archive: Archive
  archive_hash: bytes

  @property
  def app_id(self) -> str:
    return app_id(self.public_key)


@dataclass(frozen=True)
class UnpackResult:
  app_id: str
  output: Path


def default_output(spkfile: Path) -> Optional[Path]:
  if spkfile.name.endswith(SUFFIX) and len(spkfile.name) > len(SUFFIX):
    return spkfile.with_name(spkfile.name[: -len(SUFFIX)])
  return None


def _check_magic(handle) -> None:
  magic = handle.read(len(MAGIC_NUMBER))
  if magic != MAGIC_NUMBER:
    raise NotAPackage("Does not appear to be an .spk (bad magic number).")


def verify_package(spkfile: Path, settings: Optional[Settings] = None) -> VerifiedPackage:
  """Check magic, signature and hash, and parse the archive.

  Nothing is written to disk; every check has passed once this returns.
  """
  settings = settings or get_settings()

  # Unbuffered so the decompressor inherits the offset right after the magic.
  with open(spkfile, "rb", buffering=0) as handle:
    _check_magic(handle)
    with ChildProcess(settings.decompress_command(), handle, Direction.INPUT) as child:
      try:
        record = read_message(child.pipe, SignatureRecord)
      except MessageError as exc:
        raise MalformedSignature("Invalid signature format.") from exc
      expected_hash = open_signature(record)
      payload = child.pipe.read()

  check_payload_hash(payload, expected_hash)
  archive = Archive.deserialize(payload)
  logger.debug("Verified %s (%d byte archive)", spkfile, len(payload))
  return VerifiedPackage(public_key=record.public_key, archive=archive, archive_hash=expected_hash)


def unpack_package(
  spkfile: Path,
  output: Optional[Path] = None,
  settings: Optional[Settings] = None,
) -> UnpackResult:
  output = output or default_output(spkfile)
  if output is None:
    raise SpkError(f"Cannot derive an output directory from {spkfile}; pass one explicitly.")
  if os.path.lexists(output):
    raise OutputExists(f"Output directory already exists: {output}")

  package = verify_package(spkfile, settings)
  extract_archive(package.archive, output)
  return UnpackResult(app_id=package.app_id, output=output)
