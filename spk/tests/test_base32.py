from __future__ import annotations

import math
import os

import pytest

from spk import base32
from spk.errors import InvalidEncoding


def test_known_values():
  assert base32.encode(b"") == ""
  assert base32.encode(b"\x00") == "00"
  assert base32.encode(b"\xff") == "zw"
  assert base32.encode(b"\x00" * 5) == "00000000"
  assert base32.encode(b"\xff" * 5) == "zzzzzzzz"


@pytest.mark.parametrize("size", [0, 1, 2, 3, 4, 5, 6, 7, 31, 32, 33, 64])
def test_round_trip_and_length(size):
  data = os.urandom(size)
  encoded = base32.encode(data)
  assert len(encoded) == math.ceil(8 * size / 5)
  assert set(encoded) <= set(base32.ALPHABET)
  assert base32.decode(encoded) == data


def test_public_key_sized_app_id():
  assert len(base32.encode(bytes(range(32)))) == 52


def test_decode_is_case_insensitive():
  data = bytes(range(200, 232))
  encoded = base32.encode(data)
  assert base32.decode(encoded.upper()) == data
  mixed = "".join(c.upper() if i % 2 else c for i, c in enumerate(encoded))
  assert base32.decode(mixed) == data


def test_decode_accepts_aliases():
  assert base32.decode("o0") == base32.decode("00")
  assert base32.decode("O0") == b"\x00"
  canonical = base32.decode("1m8a1m8a")
  assert base32.decode("im8aLm8a") == canonical
  assert base32.decode("IMBAlMBA") == canonical
  assert base32.decode("ImbAiMBa") == canonical


@pytest.mark.parametrize("text", ["u!", "00 0", "00=", "é0", "0-"])
def test_decode_rejects_unknown_characters(text):
  with pytest.raises(InvalidEncoding):
    base32.decode(text)


def test_decode_rejects_nonzero_trailing_bits():
  # "zz" is 10 bits: one byte plus two leftover one-bits.
  with pytest.raises(InvalidEncoding):
    base32.decode("zz")
  with pytest.raises(InvalidEncoding):
    base32.decode("1")
  assert base32.decode("zw") == b"\xff"


def test_decode_drops_zero_padding_bits():
  assert base32.decode("0") == b""
  assert base32.decode("000") == b"\x00"
