from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


@dataclass
class Settings:
  package_dir: Path

  @classmethod
  def from_env(cls) -> "Settings":
    base_dir = Path(__file__).resolve().parents[2]
    package_dir = os.getenv("SPK_PACKAGE_DIR")
    package_path = Path(package_dir).expanduser() if package_dir else base_dir / "packages"
    return cls(package_dir=package_path)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings.from_env()
