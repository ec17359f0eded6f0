"""Builds a signed, compressed .spk package from a directory tree."""
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .archive import collect_tree
from .compression import ChildProcess, Direction
from .keys import load_key_file
from .messages import write_message
from .settings import Settings, get_settings
from .signing import sign_payload

logger = logging.getLogger(__name__)

MAGIC_NUMBER = b"\x8f\xc6\xcd\xef\x45\x1a\xea\x96"
SUFFIX = ".spk"


@dataclass(frozen=True)
class PackResult:
  app_id: str
  output: Path


def default_output(dirname: Path) -> Path:
  # "." has no name component; append to the path text instead.
  return Path(str(dirname) + SUFFIX)


def pack_package(
  dirname: Path,
  key_path: Path,
  output: Optional[Path] = None,
  settings: Optional[Settings] = None,
) -> PackResult:
  settings = settings or get_settings()
  output = output or default_output(dirname)

  # Bad key material fails before we touch the source tree.
  key_pair = load_key_file(key_path)

  archive = collect_tree(dirname)
  logger.debug("Collected %d files from %s", archive.file_count(), dirname)
  payload = archive.serialize()
  del archive

  signature = sign_payload(payload, key_pair)

  fd, tmp_name = tempfile.mkstemp(prefix=output.name + ".", dir=output.parent)
  tmp_path = Path(tmp_name)
  try:
    with os.fdopen(fd, "wb") as handle:
      handle.write(MAGIC_NUMBER)
      handle.flush()
      with ChildProcess(settings.compress_command(), handle, Direction.OUTPUT) as child:
        write_message(child.pipe, signature)
        child.pipe.write(payload)
    os.chmod(tmp_path, 0o644)
    os.replace(tmp_path, output)
  except BaseException:
    tmp_path.unlink(missing_ok=True)
    raise

  logger.debug("Wrote %s (%d byte archive)", output, len(payload))
  return PackResult(app_id=key_pair.app_id, output=output)
