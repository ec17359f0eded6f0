from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from .deps import get_package_repository
from .models import HealthModel
from .package_repository import PackageRepository
from .routers import packages

@asynccontextmanager
async def lifespan(_: FastAPI):
  repo = get_package_repository()
  repo.refresh()
  yield


app = FastAPI(title="Package Index", version="0.1.0", lifespan=lifespan)
app.include_router(packages.router)


@app.get("/healthz", response_model=HealthModel)
def healthcheck(repo: PackageRepository = Depends(get_package_repository)):
  return HealthModel(status="ok", package_count=len(repo.list_packages()))
