from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_package_repository
from ..models import PackageListModel, RejectedPackagesModel
from ..package_repository import PackageRepository

router = APIRouter(prefix="/v1/packages", tags=["packages"])


@router.get("", response_model=PackageListModel)
def list_packages(repo: PackageRepository = Depends(get_package_repository)):
  return PackageListModel(packages=repo.list_packages())


@router.get("/rejected", response_model=RejectedPackagesModel)
def list_rejected(repo: PackageRepository = Depends(get_package_repository)):
  return RejectedPackagesModel(rejected=repo.rejected)


@router.get("/{app_id}", response_model=PackageListModel)
def get_packages(app_id: str, repo: PackageRepository = Depends(get_package_repository)):
  try:
    return PackageListModel(packages=repo.get_packages(app_id))
  except KeyError as exc:
    raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
