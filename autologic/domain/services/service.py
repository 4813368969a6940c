"""Catalogue service - Business logic for repair services"""

import logging
from typing import Optional

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ... import storage
from ...errors import Conflict, NotFound, ValidationFailed
from ...models import Service
from ...shared.pagination import PageParams, paginate
from ...utils.sanitization import sanitize_list
from .repository import ServiceRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)

MAX_SERVICE_IMAGES = 5


class CatalogueService:
    """Service layer for the repair service catalogue"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def list_services(
        self,
        params: PageParams,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        active: Optional[bool] = None,
    ) -> tuple[list[Service], int]:
        return paginate(self.repo.query_services(self.db, category, featured, active), params)

    def search(self, term: str, params: PageParams) -> tuple[list[Service], int]:
        return paginate(self.repo.search(self.db, term), params)

    def get_service(self, service_id: int) -> Service:
        service = self.repo.get_by_id(self.db, service_id)
        if not service:
            raise NotFound("Service not found")
        return service

    def featured(self) -> list[Service]:
        return self.repo.get_popular(self.db)

    def categories(self) -> list[dict]:
        return [
            {"value": category, "label": category.capitalize(), "count": count}
            for category, count in self.repo.category_counts(self.db).items()
        ]

    def create_service(self, data: ServiceCreate) -> Service:
        service = self.repo.create(
            self.db,
            name=data.name.strip(),
            name_ar=data.nameAr.strip(),
            description=data.description.strip(),
            description_ar=data.descriptionAr.strip(),
            price=data.price,
            duration=data.duration,
            category=data.category,
            images=[image.model_dump() for image in data.images],
            tags=sanitize_list(data.tags),
            is_active=data.isActive,
            is_popular=data.isPopular,
        )
        logger.info(f"🛠️ Created service {service.id} ({service.name})")
        return service

    def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        service = self.get_service(service_id)
        return self.repo.update(
            self.db,
            service,
            name=data.name,
            name_ar=data.nameAr,
            description=data.description,
            description_ar=data.descriptionAr,
            price=data.price,
            duration=data.duration,
            category=data.category,
            tags=sanitize_list(data.tags) if data.tags is not None else None,
            is_active=data.isActive,
            is_popular=data.isPopular,
        )

    def delete_service(self, service_id: int) -> None:
        service = self.get_service(service_id)
        public_ids = [image.get("publicId") for image in service.images or []]
        try:
            self.repo.delete(self.db, service)
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("Service is referenced by bookings; deactivate it instead") from e
        storage.discard_files(public_ids)

    async def add_images(self, service_id: int, files: list[UploadFile]) -> Service:
        service = self.get_service(service_id)
        if not files:
            raise ValidationFailed("No file uploaded")
        if len(files) + len(service.images or []) > MAX_SERVICE_IMAGES:
            raise ValidationFailed(f"A service can have at most {MAX_SERVICE_IMAGES} images")

        folder = storage.UPLOAD_FOLDERS["serviceImages"]
        added = []
        for file in files:
            stored = await storage.store_upload(file, folder)
            added.append({"url": stored.url, "publicId": stored.publicId, "alt": service.name})

        service.images = [*(service.images or []), *added]
        self.db.commit()
        self.db.refresh(service)
        return service

    def remove_image(self, service_id: int, public_id: str) -> Service:
        service = self.get_service(service_id)
        images = service.images or []
        remaining = [image for image in images if image.get("publicId") != public_id]
        if len(remaining) == len(images):
            raise NotFound("Image not found")

        storage.discard_files([public_id])
        service.images = remaining
        self.db.commit()
        self.db.refresh(service)
        return service
