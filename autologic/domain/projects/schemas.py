"""Project (showcase repair job) schemas"""

import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...i18n import localize, localize_entry
from ...models import PRIORITIES, PROJECT_STATUSES
from ...policy import is_allowed
from ...shared.validators import (
    validate_car_year,
    validate_choice,
    validate_email,
    validate_phone,
    validate_vin,
)
from ..services.schemas import service_summary
from ..users.schemas import user_summary

IMAGE_STAGES = ("before", "during", "after")
WARRANTY_UNITS = ("days", "weeks", "months", "years")


class ClientInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str
    phone: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class ProjectCar(BaseModel):
    make: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    year: int
    vin: Optional[str] = None
    licensePlate: Optional[str] = Field(None, max_length=20)

    @field_validator("year")
    @classmethod
    def check_year(cls, v):
        return validate_car_year(v)

    @field_validator("vin")
    @classmethod
    def check_vin(cls, v):
        return validate_vin(v)

    @field_validator("licensePlate")
    @classmethod
    def upper_plate(cls, v):
        return v.strip().upper() if v else v


class ProjectCost(BaseModel):
    estimated: float = Field(..., ge=0)
    actual: Optional[float] = Field(None, ge=0)
    labor: Optional[float] = Field(None, ge=0)
    parts: Optional[float] = Field(None, ge=0)


class ProjectImage(BaseModel):
    url: str
    publicId: str
    caption: Optional[str] = None
    captionAr: Optional[str] = None
    type: str = "after"

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return validate_choice(v, IMAGE_STAGES, "image type")


class Part(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    partNumber: Optional[str] = None
    quantity: int = Field(..., ge=1)
    unitPrice: float = Field(..., ge=0)
    supplier: Optional[str] = None
    warranty: int = Field(0, ge=0)
    warrantyUnit: str = "months"

    @field_validator("warrantyUnit")
    @classmethod
    def check_unit(cls, v):
        return validate_choice(v, WARRANTY_UNITS, "warranty unit")


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    nameAr: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    descriptionAr: str = Field(..., min_length=1)
    service: int
    client: ClientInfo
    car: ProjectCar
    status: str = "pending"
    priority: str = "medium"
    estimatedDuration: int = Field(..., ge=1, description="Hours")
    actualDuration: Optional[float] = Field(None, ge=0)
    cost: ProjectCost
    images: list[ProjectImage] = Field(default=[], max_length=10)
    parts: list[Part] = []
    isPublic: bool = True
    featured: bool = False
    tags: list[str] = []

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, PROJECT_STATUSES, "status")

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, PRIORITIES, "priority")


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    nameAr: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    descriptionAr: Optional[str] = Field(None, min_length=1)
    service: Optional[int] = None
    client: Optional[ClientInfo] = None
    car: Optional[ProjectCar] = None
    priority: Optional[str] = None
    estimatedDuration: Optional[int] = Field(None, ge=1)
    actualDuration: Optional[float] = Field(None, ge=0)
    cost: Optional[ProjectCost] = None
    images: Optional[list[ProjectImage]] = Field(None, max_length=10)
    parts: Optional[list[Part]] = None
    isPublic: Optional[bool] = None
    featured: Optional[bool] = None
    tags: Optional[list[str]] = None

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, PRIORITIES, "priority")


class ProjectStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, PROJECT_STATUSES, "status")


class ProjectAssign(BaseModel):
    technician: int


class ProjectNoteCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)
    textAr: str = Field(..., min_length=1, max_length=1000)
    isInternal: bool = False


# ------------------------------------------------------------------
# Derived values
# ------------------------------------------------------------------


def total_parts_cost(parts: Optional[list]) -> float:
    return sum(part.get("quantity", 0) * part.get("unitPrice", 0) for part in parts or [])


def project_duration(start_date, end_date) -> Optional[int]:
    """Whole days between start and end, rounded up"""
    if not start_date or not end_date:
        return None
    return math.ceil((end_date - start_date).total_seconds() / 86400)


def completion_percentage(status: str, actual_duration=None, estimated_duration=None) -> int:
    if status == "completed":
        return 100
    if status != "in-progress":
        return 0
    if actual_duration and estimated_duration:
        # Capped below 100 until the job is actually marked completed
        return min(round(actual_duration / estimated_duration * 100), 90)
    return 50


def serialize_project(project, locale: str, viewer=None) -> dict:
    staff = is_allowed(viewer, "project", "add_note")
    notes = [
        {
            "text": localize_entry(note, "text", locale),
            "author": note.get("author"),
            "createdAt": note.get("createdAt"),
            "isInternal": note.get("isInternal", False),
        }
        for note in project.notes or []
        if staff or not note.get("isInternal")
    ]
    data = {
        "id": project.id,
        "name": localize(project, "name", locale),
        "description": localize(project, "description", locale),
        "service": service_summary(project.service, locale),
        "car": project.car,
        "status": project.status,
        "priority": project.priority,
        "startDate": project.start_date,
        "endDate": project.end_date,
        "estimatedDuration": project.estimated_duration,
        "actualDuration": project.actual_duration,
        "cost": project.cost,
        "images": project.images or [],
        "technician": user_summary(project.technician),
        "notes": notes,
        "parts": project.parts or [],
        "isPublic": project.is_public,
        "featured": project.featured,
        "tags": project.tags or [],
        "totalPartsCost": total_parts_cost(project.parts),
        "projectDuration": project_duration(project.start_date, project.end_date),
        "completionPercentage": completion_percentage(
            project.status, project.actual_duration, project.estimated_duration
        ),
        "createdAt": project.created_at,
        "updatedAt": project.updated_at,
    }
    if staff:
        data["client"] = project.client
    return data
