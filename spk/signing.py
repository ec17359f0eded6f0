"""Hash-then-sign protocol binding an archive to a key pair.

The archive bytes are hashed with SHA-512 and the 64-byte digest is signed in
attached form, so opening the signature hands back the digest. Verification
authenticates the digest first and only then compares it against a fresh hash
of the payload, which keeps "is the signature genuine" apart from "does the
payload match".
"""
from __future__ import annotations

import hmac

from nacl.bindings import crypto_hash_sha512_BYTES, crypto_sign_BYTES
from nacl.encoding import RawEncoder
from nacl.exceptions import BadSignatureError
from nacl.hash import sha512
from nacl.signing import VerifyKey

from .errors import HashMismatch, InvalidSignature, MalformedSignature
from .keys import PUBLIC_KEY_BYTES, KeyPair
from .messages import SignatureRecord

HASH_BYTES = crypto_hash_sha512_BYTES
SIGNATURE_BYTES = HASH_BYTES + crypto_sign_BYTES


def hash_payload(payload: bytes) -> bytes:
  return sha512(payload, encoder=RawEncoder)


def sign_payload(payload: bytes, key_pair: KeyPair) -> SignatureRecord:
  signed = key_pair.signing_key().sign(hash_payload(payload))
  return SignatureRecord(public_key=key_pair.public_key, signature=bytes(signed))


def open_signature(record: SignatureRecord) -> bytes:
  """Authenticate the record and return the digest it carries."""
  if len(record.public_key) != PUBLIC_KEY_BYTES:
    raise MalformedSignature("Invalid public key.")
  if len(record.signature) != SIGNATURE_BYTES:
    raise MalformedSignature("Invalid signature format.")
  try:
    expected_hash = VerifyKey(record.public_key).verify(record.signature)
  except BadSignatureError as exc:
    raise InvalidSignature("Invalid signature.") from exc
  if len(expected_hash) != HASH_BYTES:
    raise MalformedSignature("Wrong signature size.")
  return expected_hash


def check_payload_hash(payload: bytes, expected_hash: bytes) -> None:
  if not hmac.compare_digest(hash_payload(payload), expected_hash):
    raise HashMismatch("Signature didn't match package contents.")


def verify_payload(payload: bytes, record: SignatureRecord) -> None:
  check_payload_hash(payload, open_signature(record))
