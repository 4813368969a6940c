"""Catalogue router - public browsing and admin management of repair services"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from sqlalchemy.orm import Session

from ...database import get_db
from ...i18n import get_locale
from ...models import User
from ...policy import require
from ...shared.pagination import PageParams
from ...shared.responses import paginated, success
from .schemas import ServiceCreate, ServiceUpdate, serialize_service
from .service import CatalogueService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["Services"])

require_admin = require("service", "manage")


def get_catalogue_service(db: Session = Depends(get_db)) -> CatalogueService:
    """Dependency injection for CatalogueService"""
    return CatalogueService(db)


@router.get("")
async def list_services(
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    active: Optional[bool] = Query(None),
    params: PageParams = Depends(),
    locale: str = Depends(get_locale),
    service: CatalogueService = Depends(get_catalogue_service),
):
    services, total = service.list_services(params, category, featured, active)
    return paginated("services", [serialize_service(s, locale) for s in services], total, params, locale)


@router.get("/categories/list")
async def list_categories(service: CatalogueService = Depends(get_catalogue_service)):
    return success({"categories": service.categories()})


@router.get("/featured/list")
async def featured_services(
    locale: str = Depends(get_locale),
    service: CatalogueService = Depends(get_catalogue_service),
):
    services = service.featured()
    return success(
        {"services": [serialize_service(s, locale) for s in services]}, locale, results=len(services)
    )


@router.get("/search/{term}")
async def search_services(
    term: str,
    params: PageParams = Depends(),
    locale: str = Depends(get_locale),
    service: CatalogueService = Depends(get_catalogue_service),
):
    services, total = service.search(term, params)
    return paginated("services", [serialize_service(s, locale) for s in services], total, params, locale)


@router.get("/{service_id}")
async def get_service(
    service_id: int,
    locale: str = Depends(get_locale),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return success({"service": serialize_service(service.get_service(service_id), locale)}, locale)


@router.post("", status_code=201)
async def create_service(
    data: ServiceCreate,
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return success({"service": serialize_service(service.create_service(data), locale)}, locale)


@router.put("/{service_id}")
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: CatalogueService = Depends(get_catalogue_service),
):
    updated = service.update_service(service_id, data)
    return success({"service": serialize_service(updated, locale)}, locale)


@router.delete("/{service_id}", status_code=204)
async def delete_service(
    service_id: int,
    _: User = Depends(require_admin),
    service: CatalogueService = Depends(get_catalogue_service),
):
    service.delete_service(service_id)
    return Response(status_code=204)


@router.post("/{service_id}/images")
async def upload_service_images(
    service_id: int,
    files: list[UploadFile] = File(...),
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: CatalogueService = Depends(get_catalogue_service),
):
    updated = await service.add_images(service_id, files)
    return success({"service": serialize_service(updated, locale)}, locale)


@router.delete("/{service_id}/images/{public_id:path}")
async def delete_service_image(
    service_id: int,
    public_id: str,
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: CatalogueService = Depends(get_catalogue_service),
):
    updated = service.remove_image(service_id, public_id)
    return success({"service": serialize_service(updated, locale)}, locale)
