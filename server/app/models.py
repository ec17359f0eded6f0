from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field


class PackageMetaModel(BaseModel):
  app_id: str
  filename: str
  size_bytes: int
  file_count: int
  archive_hash: str


class PackageListModel(BaseModel):
  packages: List[PackageMetaModel] = Field(default_factory=list)


class RejectedPackagesModel(BaseModel):
  rejected: Dict[str, str] = Field(default_factory=dict)


class HealthModel(BaseModel):
  status: str
  package_count: int
