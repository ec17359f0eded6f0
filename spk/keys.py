"""Ed25519 key pairs, key files and the App IDs derived from them."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from nacl.bindings import crypto_sign_PUBLICKEYBYTES, crypto_sign_SECRETKEYBYTES
from nacl.signing import SigningKey

from . import base32
from .errors import InvalidKeyFile
from .messages import KeyFile, MessageError, decode_message, encode_message

PUBLIC_KEY_BYTES = crypto_sign_PUBLICKEYBYTES
PRIVATE_KEY_BYTES = crypto_sign_SECRETKEYBYTES


@dataclass(frozen=True)
class KeyPair:
  public_key: bytes
  private_key: bytes

  @classmethod
  def generate(cls) -> "KeyPair":
    signing_key = SigningKey.generate()
    public_key = bytes(signing_key.verify_key)
    # libsodium's secret key layout: 32-byte seed followed by the public key.
    return cls(public_key=public_key, private_key=signing_key.encode() + public_key)

  @property
  def app_id(self) -> str:
    return app_id(self.public_key)

  def signing_key(self) -> SigningKey:
    return SigningKey(self.private_key[:32])


def app_id(public_key: bytes) -> str:
  if len(public_key) != PUBLIC_KEY_BYTES:
    raise InvalidKeyFile(f"Ed25519 public keys must be {PUBLIC_KEY_BYTES} bytes")
  return base32.encode(public_key)


def _check_key_pair(public_key: bytes, private_key: bytes) -> None:
  if len(public_key) != PUBLIC_KEY_BYTES or len(private_key) != PRIVATE_KEY_BYTES:
    raise InvalidKeyFile("Invalid key file.")
  if bytes(SigningKey(private_key[:32]).verify_key) != public_key or private_key[32:] != public_key:
    raise InvalidKeyFile("Key file public and private keys do not match.")


def load_key_file(path: Path) -> KeyPair:
  try:
    message = decode_message(path.read_bytes(), KeyFile)
  except MessageError as exc:
    raise InvalidKeyFile("Invalid key file.") from exc
  _check_key_pair(message.public_key, message.private_key)
  return KeyPair(public_key=message.public_key, private_key=message.private_key)


def write_key_file(path: Path, key_pair: KeyPair) -> None:
  data = encode_message(KeyFile(public_key=key_pair.public_key, private_key=key_pair.private_key))
  fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
  with os.fdopen(fd, "wb") as handle:
    handle.write(data)
