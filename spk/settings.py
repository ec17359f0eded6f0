from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List


@dataclass
class Settings:
  compressor: str = "xz"
  compress_flags: List[str] = field(default_factory=lambda: ["-zc"])
  decompress_flags: List[str] = field(default_factory=lambda: ["-dc"])
  log_level: str = "WARNING"

  @classmethod
  def from_env(cls) -> "Settings":
    compressor = os.getenv("SPK_COMPRESSOR")
    compress_flags = os.getenv("SPK_COMPRESS_FLAGS")
    decompress_flags = os.getenv("SPK_DECOMPRESS_FLAGS")
    log_level = os.getenv("SPK_LOG_LEVEL")
    return cls(
      compressor=compressor or "xz",
      compress_flags=shlex.split(compress_flags) if compress_flags else ["-zc"],
      decompress_flags=shlex.split(decompress_flags) if decompress_flags else ["-dc"],
      log_level=log_level.upper() if log_level else "WARNING",
    )

  def compress_command(self) -> List[str]:
    return [self.compressor, *self.compress_flags]

  def decompress_command(self) -> List[str]:
    return [self.compressor, *self.decompress_flags]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings.from_env()
