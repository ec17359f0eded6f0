"""Length-prefixed structured messages shared by key files and packages.

Each message is a pydantic model serialized as compact JSON (bytes fields as
base64) behind a 4-byte big-endian length header, so a reader can pull one
message off a stream without knowing what follows it.
"""
from __future__ import annotations

import struct
from typing import BinaryIO, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

HEADER = struct.Struct(">I")
MAX_MESSAGE_SIZE = 1 << 20

M = TypeVar("M", bound="Message")


class MessageError(ValueError):
  pass


class Message(BaseModel):
  model_config = ConfigDict(
    extra="forbid",
    frozen=True,
    ser_json_bytes="base64",
    val_json_bytes="base64",
  )


class KeyFile(Message):
  public_key: bytes
  private_key: bytes


class SignatureRecord(Message):
  public_key: bytes
  signature: bytes


def encode_message(message: Message) -> bytes:
  body = message.model_dump_json().encode("utf-8")
  return HEADER.pack(len(body)) + body


def write_message(stream: BinaryIO, message: Message) -> None:
  stream.write(encode_message(message))


def _read_exact(stream: BinaryIO, size: int) -> bytes:
  chunks = []
  remaining = size
  while remaining:
    chunk = stream.read(remaining)
    if not chunk:
      raise MessageError(f"Unexpected end of stream ({size - remaining} of {size} bytes)")
    chunks.append(chunk)
    remaining -= len(chunk)
  return b"".join(chunks)


def read_message(stream: BinaryIO, model: Type[M]) -> M:
  (size,) = HEADER.unpack(_read_exact(stream, HEADER.size))
  if size > MAX_MESSAGE_SIZE:
    raise MessageError(f"Message too large ({size} bytes)")
  body = _read_exact(stream, size)
  try:
    return model.model_validate_json(body)
  except PydanticValidationError as exc:
    raise MessageError(f"Malformed {model.__name__} message") from exc


def decode_message(data: bytes, model: Type[M]) -> M:
  """Parse a buffer holding exactly one framed message."""
  if len(data) < HEADER.size:
    raise MessageError("Message truncated")
  (size,) = HEADER.unpack_from(data)
  if len(data) != HEADER.size + size:
    raise MessageError("Message length does not match its header")
  try:
    return model.model_validate_json(data[HEADER.size:])
  except PydanticValidationError as exc:
    raise MessageError(f"Malformed {model.__name__} message") from exc
