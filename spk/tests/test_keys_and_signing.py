from __future__ import annotations

import stat

import pytest

from spk import base32
from spk.errors import HashMismatch, InvalidKeyFile, InvalidSignature, MalformedSignature
from spk.keys import KeyPair, load_key_file, write_key_file
from spk.messages import KeyFile, SignatureRecord, encode_message
from spk.signing import HASH_BYTES, SIGNATURE_BYTES, hash_payload, open_signature, sign_payload, verify_payload


def test_generated_key_sizes():
  key_pair = KeyPair.generate()
  assert len(key_pair.public_key) == 32
  assert len(key_pair.private_key) == 64
  assert key_pair.private_key[32:] == key_pair.public_key
  assert base32.decode(key_pair.app_id) == key_pair.public_key


def test_key_file_round_trip(tmp_path):
  key_pair = KeyPair.generate()
  path = tmp_path / "app.key"
  write_key_file(path, key_pair)
  assert stat.S_IMODE(path.stat().st_mode) & 0o077 == 0
  assert load_key_file(path) == key_pair


def test_key_file_rejects_wrong_sizes(tmp_path):
  path = tmp_path / "bad.key"
  path.write_bytes(encode_message(KeyFile(public_key=b"\x01" * 31, private_key=b"\x02" * 64)))
  with pytest.raises(InvalidKeyFile):
    load_key_file(path)


def test_key_file_rejects_mismatched_halves(tmp_path):
  first, second = KeyPair.generate(), KeyPair.generate()
  path = tmp_path / "mixed.key"
  path.write_bytes(encode_message(KeyFile(public_key=first.public_key, private_key=second.private_key)))
  with pytest.raises(InvalidKeyFile):
    load_key_file(path)


def test_key_file_rejects_garbage(tmp_path):
  path = tmp_path / "garbage.key"
  path.write_bytes(b"not a key file at all")
  with pytest.raises(InvalidKeyFile):
    load_key_file(path)


def test_key_file_rejects_trailing_data(tmp_path):
  key_pair = KeyPair.generate()
  path = tmp_path / "trailing.key"
  path.write_bytes(
    encode_message(KeyFile(public_key=key_pair.public_key, private_key=key_pair.private_key)) + b"x"
  )
  with pytest.raises(InvalidKeyFile):
    load_key_file(path)


def test_sign_and_verify():
  key_pair = KeyPair.generate()
  payload = b"archive bytes" * 100
  record = sign_payload(payload, key_pair)
  assert record.public_key == key_pair.public_key
  assert len(record.signature) == SIGNATURE_BYTES
  assert open_signature(record) == hash_payload(payload)
  assert len(hash_payload(payload)) == HASH_BYTES
  verify_payload(payload, record)


def test_verify_detects_payload_change():
  key_pair = KeyPair.generate()
  record = sign_payload(b"original", key_pair)
  with pytest.raises(HashMismatch):
    verify_payload(b"originaL", record)


def test_verify_detects_forged_signature():
  key_pair = KeyPair.generate()
  record = sign_payload(b"payload", key_pair)
  tampered = bytearray(record.signature)
  tampered[-1] ^= 0x01
  with pytest.raises(InvalidSignature):
    open_signature(SignatureRecord(public_key=record.public_key, signature=bytes(tampered)))


def test_verify_detects_wrong_public_key():
  record = sign_payload(b"payload", KeyPair.generate())
  other = KeyPair.generate()
  with pytest.raises(InvalidSignature):
    open_signature(SignatureRecord(public_key=other.public_key, signature=record.signature))


def test_verify_rejects_wrong_sizes():
  key_pair = KeyPair.generate()
  record = sign_payload(b"payload", key_pair)
  with pytest.raises(MalformedSignature):
    open_signature(SignatureRecord(public_key=record.public_key[:-1], signature=record.signature))
  with pytest.raises(MalformedSignature):
    open_signature(SignatureRecord(public_key=record.public_key, signature=record.signature[:-1]))


def test_verify_rejects_genuine_signature_over_non_digest():
  key_pair = KeyPair.generate()
  signed = key_pair.signing_key().sign(b"short")
  record = SignatureRecord(public_key=key_pair.public_key, signature=bytes(signed))
  with pytest.raises(MalformedSignature):
    open_signature(record)
