"""Project service - showcase jobs with parts, costs and technician assignment"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ... import storage
from ...errors import NotFound
from ...models import Project, User
from ...policy import authorize, is_allowed
from ...shared.pagination import PageParams, paginate
from ...shared.timeutils import utcnow
from ...utils.sanitization import sanitize_dict, sanitize_list, sanitize_string
from ..services.repository import ServiceRepository
from ..users.repository import UserRepository
from .repository import ProjectRepository
from .schemas import (
    ProjectCreate,
    ProjectNoteCreate,
    ProjectStatusUpdate,
    ProjectUpdate,
)

logger = logging.getLogger(__name__)


def _dump_all(items) -> list[dict]:
    return [sanitize_dict(item.model_dump()) for item in items]


class ProjectService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProjectRepository()
        self.services = ServiceRepository()
        self.users = UserRepository()

    def list_projects(
        self,
        params: PageParams,
        viewer: Optional[User] = None,
        service_id: Optional[int] = None,
        status: Optional[str] = None,
        featured: Optional[bool] = None,
        is_public: Optional[bool] = None,
    ) -> tuple[list[Project], int]:
        if not is_allowed(viewer, "project", "manage"):
            # Private projects stay in the back office
            is_public = True
        return paginate(self.repo.query_projects(self.db, service_id, status, featured, is_public), params)

    def featured(self) -> list[Project]:
        return self.repo.get_featured(self.db)

    def get_project(self, project_id: int, viewer: Optional[User] = None) -> Project:
        project = self.repo.get_by_id(self.db, project_id)
        if not project or (not project.is_public and not is_allowed(viewer, "project", "manage")):
            raise NotFound("Project not found")
        return project

    def _ensure_service(self, service_id: int) -> None:
        if not self.services.get_by_id(self.db, service_id):
            raise NotFound("Service not found")

    def create_project(self, data: ProjectCreate, user: User) -> Project:
        authorize(user, "project", "manage")
        self._ensure_service(data.service)

        project = self.repo.create(
            self.db,
            name=data.name.strip(),
            name_ar=data.nameAr.strip(),
            description=sanitize_string(data.description),
            description_ar=sanitize_string(data.descriptionAr),
            service_id=data.service,
            client=sanitize_dict(data.client.model_dump()),
            car=sanitize_dict(data.car.model_dump(exclude_none=True)),
            status=data.status,
            priority=data.priority,
            estimated_duration=data.estimatedDuration,
            actual_duration=data.actualDuration,
            cost=data.cost.model_dump(exclude_none=True),
            images=_dump_all(data.images),
            parts=_dump_all(data.parts),
            notes=[],
            is_public=data.isPublic,
            featured=data.featured,
            tags=sanitize_list(data.tags),
            end_date=utcnow() if data.status == "completed" else None,
        )
        logger.info(f"🏗️ Created project {project.id} ({project.name})")
        return self.get_project(project.id, user)

    def update_project(self, project_id: int, data: ProjectUpdate, user: User) -> Project:
        authorize(user, "project", "manage")
        project = self.get_project(project_id, user)
        if data.service is not None:
            self._ensure_service(data.service)

        self.repo.update(
            self.db,
            project,
            name=data.name,
            name_ar=data.nameAr,
            description=sanitize_string(data.description),
            description_ar=sanitize_string(data.descriptionAr),
            service_id=data.service,
            client=sanitize_dict(data.client.model_dump()) if data.client else None,
            car=sanitize_dict(data.car.model_dump(exclude_none=True)) if data.car else None,
            priority=data.priority,
            estimated_duration=data.estimatedDuration,
            actual_duration=data.actualDuration,
            cost=data.cost.model_dump(exclude_none=True) if data.cost else None,
            images=_dump_all(data.images) if data.images is not None else None,
            parts=_dump_all(data.parts) if data.parts is not None else None,
            is_public=data.isPublic,
            featured=data.featured,
            tags=sanitize_list(data.tags) if data.tags is not None else None,
        )
        return self.get_project(project_id, user)

    def delete_project(self, project_id: int, user: User) -> None:
        authorize(user, "project", "manage")
        project = self.get_project(project_id, user)
        public_ids = [image.get("publicId") for image in project.images or []]
        self.repo.delete(self.db, project)
        storage.discard_files(public_ids)
        logger.info(f"🗑️ Project {project_id} deleted")

    def remove_image(self, project_id: int, public_id: str, user: User) -> Project:
        authorize(user, "project", "manage")
        project = self.get_project(project_id, user)
        images = project.images or []
        remaining = [image for image in images if image.get("publicId") != public_id]
        if len(remaining) == len(images):
            raise NotFound("Image not found")
        storage.discard_files([public_id])
        return self.repo.update(self.db, project, images=remaining)

    def update_status(self, project_id: int, data: ProjectStatusUpdate, user: User) -> Project:
        authorize(user, "project", "manage")
        project = self.get_project(project_id, user)
        project.status = data.status
        if data.status == "completed" and not project.end_date:
            project.end_date = utcnow()
        self.db.commit()
        logger.info(f"🔄 Project {project.id} status -> {data.status}")
        return self.get_project(project_id, user)

    def assign_technician(self, project_id: int, technician_id: int, user: User) -> Project:
        authorize(user, "project", "manage")
        project = self.get_project(project_id, user)
        technician = self.users.get_by_id(self.db, technician_id)
        if not technician or technician.role != "technician":
            raise NotFound("Technician not found")
        project.technician_id = technician.id
        self.db.commit()
        return self.get_project(project_id, user)

    def add_note(self, project_id: int, data: ProjectNoteCreate, user: User) -> Project:
        project = self.get_project(project_id, user)
        authorize(user, "project", "add_note", project)
        note = {
            "text": sanitize_string(data.text),
            "textAr": sanitize_string(data.textAr),
            "author": user.id,
            "createdAt": utcnow().isoformat(),
            "isInternal": data.isInternal,
        }
        project.notes = [*(project.notes or []), note]
        self.db.commit()
        return self.get_project(project_id, user)
