"""Projects router - public portfolio plus admin management"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user
from ...database import get_db
from ...i18n import get_locale
from ...models import User
from ...policy import require
from ...shared.pagination import PageParams
from ...shared.responses import paginated, success
from .schemas import (
    ProjectAssign,
    ProjectCreate,
    ProjectNoteCreate,
    ProjectStatusUpdate,
    ProjectUpdate,
    serialize_project,
)
from .service import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])

require_admin = require("project", "manage")


def get_project_service(db: Session = Depends(get_db)) -> ProjectService:
    """Dependency injection for ProjectService"""
    return ProjectService(db)


@router.get("")
async def list_projects(
    service_id: Optional[int] = Query(None, alias="service"),
    status: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    is_public: Optional[bool] = Query(None, alias="public"),
    params: PageParams = Depends(),
    viewer: Optional[User] = Depends(get_optional_user),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    projects, total = service.list_projects(params, viewer, service_id, status, featured, is_public)
    items = [serialize_project(p, locale, viewer) for p in projects]
    return paginated("projects", items, total, params, locale)


@router.get("/featured/list")
async def featured_projects(
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    projects = service.featured()
    return success({"projects": [serialize_project(p, locale) for p in projects]}, locale, results=len(projects))


@router.get("/service/{service_id}")
async def projects_for_service(
    service_id: int,
    params: PageParams = Depends(),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    projects, total = service.list_projects(params, None, service_id)
    return paginated("projects", [serialize_project(p, locale) for p in projects], total, params, locale)


@router.get("/{project_id}")
async def get_project(
    project_id: int,
    viewer: Optional[User] = Depends(get_optional_user),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    project = service.get_project(project_id, viewer)
    return success({"project": serialize_project(project, locale, viewer)}, locale)


@router.post("", status_code=201)
async def create_project(
    data: ProjectCreate,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    project = service.create_project(data, current_user)
    return success({"project": serialize_project(project, locale, current_user)}, locale)


@router.put("/{project_id}")
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    project = service.update_project(project_id, data, current_user)
    return success({"project": serialize_project(project, locale, current_user)}, locale)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: int,
    current_user: User = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    service.delete_project(project_id, current_user)
    return Response(status_code=204)


@router.delete("/{project_id}/images/{public_id:path}")
async def delete_project_image(
    project_id: int,
    public_id: str,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    project = service.remove_image(project_id, public_id, current_user)
    return success({"project": serialize_project(project, locale, current_user)}, locale)


@router.put("/{project_id}/status")
async def update_project_status(
    project_id: int,
    data: ProjectStatusUpdate,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    project = service.update_status(project_id, data, current_user)
    return success({"project": serialize_project(project, locale, current_user)}, locale)


@router.put("/{project_id}/assign")
async def assign_project_technician(
    project_id: int,
    data: ProjectAssign,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    project = service.assign_technician(project_id, data.technician, current_user)
    return success({"project": serialize_project(project, locale, current_user)}, locale)


@router.post("/{project_id}/notes", status_code=201)
async def add_project_note(
    project_id: int,
    data: ProjectNoteCreate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: ProjectService = Depends(get_project_service),
):
    project = service.add_note(project_id, data, current_user)
    return success({"project": serialize_project(project, locale, current_user)}, locale)
