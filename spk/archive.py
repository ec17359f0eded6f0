"""Archive data model and the walks between it and a real directory tree."""
from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Set, Union

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from .errors import MalformedArchive, UnencodableFileName
from .messages import Message

logger = logging.getLogger(__name__)


class RegularFile(Message):
  kind: Literal["regular"] = "regular"
  name: str
  content: bytes = b""


class ExecutableFile(Message):
  kind: Literal["executable"] = "executable"
  name: str
  content: bytes = b""


class Symlink(Message):
  kind: Literal["symlink"] = "symlink"
  name: str
  target: bytes


class Directory(Message):
  kind: Literal["directory"] = "directory"
  name: str
  children: List["Entry"] = Field(default_factory=list)


Entry = Annotated[Union[RegularFile, ExecutableFile, Symlink, Directory], Field(discriminator="kind")]

Directory.model_rebuild()


class Archive(Message):
  files: List[Entry] = Field(default_factory=list)

  def serialize(self) -> bytes:
    return self.model_dump_json().encode("utf-8")

  @classmethod
  def deserialize(cls, data: bytes) -> "Archive":
    try:
      return cls.model_validate_json(data)
    except PydanticValidationError as exc:
      raise MalformedArchive("Archive is malformed.") from exc

  def file_count(self) -> int:
    return _count(self.files)


def _count(entries: List[Entry]) -> int:
  total = 0
  for entry in entries:
    if isinstance(entry, Directory):
      total += _count(entry.children)
    else:
      total += 1
  return total


# ---------------------------------------------------------------------------
# Disk -> archive
# ---------------------------------------------------------------------------

def pack_file(dirname: Path, filename: str) -> Optional[Entry]:
  """Build an entry from one directory member, or None for irregular files."""
  path = dirname / filename
  try:
    filename.encode("utf-8")
  except UnicodeEncodeError as exc:
    raise UnencodableFileName(f"File name is not valid UTF-8: {os.fsencode(path)!r}") from exc
  stats = os.lstat(path)
  mode = stats.st_mode

  if stat.S_ISREG(mode):
    content = path.read_bytes()
    if mode & stat.S_IXUSR:
      return ExecutableFile(name=filename, content=content)
    return RegularFile(name=filename, content=content)
  if stat.S_ISLNK(mode):
    return Symlink(name=filename, target=os.readlink(os.fsencode(path)))
  if stat.S_ISDIR(mode):
    return Directory(name=filename, children=pack_directory(path))

  logger.warning("Cannot pack irregular file: %s", path)
  return None


def pack_directory(dirname: Path) -> List[Entry]:
  entries: List[Entry] = []
  for filename in os.listdir(dirname):
    entry = pack_file(dirname, filename)
    if entry is not None:
      entries.append(entry)
  return entries


def collect_tree(root: Path) -> Archive:
  return Archive(files=pack_directory(root))


# ---------------------------------------------------------------------------
# Archive -> disk
# ---------------------------------------------------------------------------

def validate_name(name: str) -> None:
  if not name or name in {".", ".."} or "/" in name or "\0" in name:
    raise MalformedArchive(f"Archive contained invalid file name: {name!r}")


def _write_exclusive(path: Path, content: bytes, mode: int) -> None:
  fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
  with os.fdopen(fd, "wb") as handle:
    handle.write(content)


def unpack_directory(entries: List[Entry], dirname: Path) -> None:
  seen: Set[str] = set()

  for entry in entries:
    validate_name(entry.name)
    if entry.name in seen:
      raise MalformedArchive(f"Archive contained duplicate file name: {entry.name!r}")
    seen.add(entry.name)

    path = dirname / entry.name
    if os.path.lexists(path):
      raise MalformedArchive(f"Unpacked file already exists: {path}")

    if isinstance(entry, RegularFile):
      _write_exclusive(path, entry.content, 0o666)
    elif isinstance(entry, ExecutableFile):
      _write_exclusive(path, entry.content, 0o777)
    elif isinstance(entry, Symlink):
      os.symlink(entry.target, os.fsencode(path))
    elif isinstance(entry, Directory):
      os.mkdir(path, 0o777)
      unpack_directory(entry.children, path)
    else:
      raise MalformedArchive("Unknown file type in archive.")


def extract_archive(archive: Archive, root: Path) -> None:
  """Materialize a verified archive under a root that must not exist yet."""
  os.mkdir(root, 0o777)
  unpack_directory(archive.files, root)
