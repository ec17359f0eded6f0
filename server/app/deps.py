from __future__ import annotations

from functools import lru_cache

from spk.settings import get_settings as get_spk_settings

from .package_repository import PackageRepository
from .settings import get_settings


@lru_cache(maxsize=1)
def get_package_repository() -> PackageRepository:
  settings = get_settings()
  return PackageRepository(settings.package_dir, get_spk_settings())
