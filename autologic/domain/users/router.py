"""User router - admin-only account management"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import User
from ...policy import require
from ...shared.pagination import PageParams
from ...shared.responses import paginated, success
from .schemas import RoleUpdate, UserCreate, UserUpdate, serialize_user, user_summary
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

require_admin = require("user", "manage")


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


@router.get("")
async def list_users(
    role: Optional[str] = Query(None),
    isActive: Optional[bool] = Query(None),
    query: Optional[str] = Query(None, description="Search name, email or phone"),
    params: PageParams = Depends(),
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    users, total = service.list_users(params, role, isActive, query)
    return paginated("users", [serialize_user(u) for u in users], total, params)


@router.get("/stats/overview")
async def user_stats(
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return success({"stats": service.get_stats()})


@router.get("/technicians/list")
async def list_technicians(
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    technicians = service.get_technicians()
    return success(
        {"technicians": [user_summary(t) for t in technicians]}, results=len(technicians)
    )


@router.get("/search/{term}")
async def search_users(
    term: str,
    params: PageParams = Depends(),
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    users, total = service.search_users(term, params)
    return paginated("users", [serialize_user(u) for u in users], total, params)


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return success({"user": serialize_user(service.get_user(user_id))})


@router.post("", status_code=201)
async def create_user(
    data: UserCreate,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return success({"user": serialize_user(service.create_user(data))})


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    data: UserUpdate,
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    return success({"user": serialize_user(service.update_user(user_id, data))})


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    service.delete_user(user_id, current_user)
    return Response(status_code=204)


@router.put("/{user_id}/activate")
async def activate_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    user = service.set_active(user_id, True, current_user)
    return success({"user": serialize_user(user)}, message="User activated")


@router.put("/{user_id}/deactivate")
async def deactivate_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    user = service.set_active(user_id, False, current_user)
    return success({"user": serialize_user(user)}, message="User deactivated")


@router.put("/{user_id}/role")
async def change_role(
    user_id: int,
    data: RoleUpdate,
    current_user: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    user = service.change_role(user_id, data.role, current_user)
    return success({"user": serialize_user(user)})
