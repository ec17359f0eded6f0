from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from spk import base32
from spk.errors import InvalidEncoding, SpkError
from spk.settings import Settings as SpkSettings
from spk.unpack import verify_package

from .models import PackageMetaModel

logger = logging.getLogger(__name__)


class PackageRepository:
  """Verifies the .spk files in a directory and indexes them by App ID."""

  def __init__(self, package_dir: Path, spk_settings: SpkSettings | None = None) -> None:
    self._package_dir = package_dir
    self._spk_settings = spk_settings
    self._packages: Dict[str, PackageMetaModel] = {}
    self._by_app_id: Dict[str, List[PackageMetaModel]] = {}
    self._rejected: Dict[str, str] = {}
    self.refresh()

  def refresh(self) -> None:
    packages: Dict[str, PackageMetaModel] = {}
    by_app_id: Dict[str, List[PackageMetaModel]] = {}
    rejected: Dict[str, str] = {}

    paths = sorted(self._package_dir.glob("*.spk")) if self._package_dir.is_dir() else []
    for path in paths:
      try:
        package = verify_package(path, self._spk_settings)
      except (SpkError, OSError) as exc:
        logger.warning("Rejected package %s: %s", path.name, exc)
        rejected[path.name] = str(exc)
        continue
      meta = PackageMetaModel(
        app_id=package.app_id,
        filename=path.name,
        size_bytes=path.stat().st_size,
        file_count=package.archive.file_count(),
        archive_hash=package.archive_hash.hex(),
      )
      packages[path.name] = meta
      by_app_id.setdefault(meta.app_id, []).append(meta)

    self._packages = packages
    self._by_app_id = by_app_id
    self._rejected = rejected

  def list_packages(self) -> List[PackageMetaModel]:
    return list(self._packages.values())

  def get_packages(self, app_id: str) -> List[PackageMetaModel]:
    try:
      canonical = base32.encode(base32.decode(app_id))
    except InvalidEncoding as exc:
      raise KeyError(f"Invalid app ID {app_id}") from exc
    if canonical not in self._by_app_id:
      raise KeyError(f"No packages for app ID {app_id}")
    return list(self._by_app_id[canonical])

  @property
  def rejected(self) -> Dict[str, str]:
    return dict(self._rejected)
