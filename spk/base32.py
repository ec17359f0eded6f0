"""Base32 codec used to turn public keys into App IDs.

The alphabet is Douglas Crockford's, lower-cased, except that 'u' stays in the
alphabet and 'b' is read as a misspelling of '8'.
"""
from __future__ import annotations

from typing import Dict

from .errors import InvalidEncoding

ALPHABET = "0123456789acdefghjkmnpqrstuvwxyz"

_ALIASES = {"o": 0, "i": 1, "l": 1, "b": 8}


def _build_decode_table() -> Dict[str, int]:
  table: Dict[str, int] = {}
  for index, char in enumerate(ALPHABET):
    table[char] = index
    table[char.upper()] = index
  for char, value in _ALIASES.items():
    table[char] = value
    table[char.upper()] = value
  return table


def _verify_table(table: Dict[str, int]) -> None:
  expected = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
  missing = [char for char in expected if char not in table]
  if missing:
    raise RuntimeError(f"Base32 decode table is incomplete: {''.join(missing)}")


_DECODE_TABLE = _build_decode_table()
_verify_table(_DECODE_TABLE)


def encode(data: bytes) -> str:
  symbols = []
  buffer = 0
  bits = 0
  for byte in data:
    buffer = (buffer << 8) | byte
    bits += 8
    while bits >= 5:
      bits -= 5
      symbols.append(ALPHABET[(buffer >> bits) & 0x1F])
    buffer &= (1 << bits) - 1
  if bits:
    # Pad the final partial group with zeros on the right.
    symbols.append(ALPHABET[(buffer << (5 - bits)) & 0x1F])
  return "".join(symbols)


def decode(text: str) -> bytes:
  """Decode base32 text, tolerating case and the o/i/l/b aliases.

  Trailing bits that do not fill a whole byte are dropped, but only after
  checking that they are zero; anything else means truncated input.
  """
  result = bytearray()
  buffer = 0
  bits = 0
  for char in text:
    value = _DECODE_TABLE.get(char)
    if value is None:
      raise InvalidEncoding(f"Invalid base32 character {char!r}")
    buffer = (buffer << 5) | value
    bits += 5
    if bits >= 8:
      bits -= 8
      result.append(buffer >> bits)
      buffer &= (1 << bits) - 1
  if buffer:
    raise InvalidEncoding("Base32 decode failed: extra bits at end")
  return bytes(result)
