from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..core.database import get_db
from ..core.auth import get_current_user, require_roles, ensure_owner_or_admin
from ..core.responses import success_response, serialize
from . import services
from .models import User
from .schemas import UserCreate, UserUpdate, RoleUpdate, UserResponse, UserStats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("")
async def get_users(
    role: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    is_verified: Optional[bool] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    users = services.get_users(
        db, role=role, is_active=is_active, is_verified=is_verified, limit=limit, offset=offset
    )
    return success_response(serialize(UserResponse, users), "Users retrieved successfully")


@router.get("/active")
async def get_active_users(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    users = services.get_active_users(db, limit, offset)
    return success_response(serialize(UserResponse, users), "Active users retrieved successfully")


@router.get("/verified")
async def get_verified_users(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    users = services.get_verified_users(db, limit, offset)
    return success_response(serialize(UserResponse, users), "Verified users retrieved successfully")


@router.get("/recent")
async def get_recent_users(
    days: int = Query(30, ge=1, le=365),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    users = services.get_recent_users(db, days, limit)
    return success_response(serialize(UserResponse, users), "Recent users retrieved successfully")


@router.get("/search")
async def search_users(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    users = services.search_users(db, q, limit, offset)
    return success_response(serialize(UserResponse, users), "Users retrieved successfully")


@router.get("/email")
async def get_user_by_email(
    email: str = Query(..., min_length=3),
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    user = services.get_user_by_email(db, email)
    return success_response(serialize(UserResponse, user), "User retrieved successfully")


@router.get("/username/{username}")
async def get_user_by_username(
    username: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = services.get_user_by_username(db, username)
    return success_response(serialize(UserResponse, user), "User retrieved successfully")


@router.get("/role/{role}")
async def get_users_by_role(
    role: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    users = services.get_users_by_role(db, role, limit, offset)
    return success_response(serialize(UserResponse, users), "Users retrieved successfully")


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = services.get_user(db, user_id)
    return success_response(serialize(UserResponse, user), "User retrieved successfully")


@router.get("/{user_id}/stats")
async def get_user_stats(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_owner_or_admin(current_user, user_id)
    stats = UserStats(**services.get_user_stats(db, user_id))
    return success_response(stats, "User statistics retrieved successfully")


@router.get("/{user_id}/dashboard")
async def get_user_dashboard(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_owner_or_admin(current_user, user_id)
    return success_response(services.get_user_dashboard(db, user_id), "User dashboard retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    user = services.create_user(db, user_in.model_dump())
    logger.info(f"Admin {current_user.id} created user {user.id}")
    return success_response(serialize(UserResponse, user), "User created successfully", status.HTTP_201_CREATED)


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    user_in: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_owner_or_admin(current_user, user_id)
    user = services.update_user(db, user_id, user_in.model_dump(exclude_unset=True))
    return success_response(serialize(UserResponse, user), "User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    services.delete_user(db, user_id)
    return success_response({"id": user_id}, "User deleted successfully")


@router.put("/{user_id}/verify")
async def verify_user(
    user_id: int,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    user = services.verify_user(db, user_id)
    return success_response(serialize(UserResponse, user), "User verified successfully")


@router.put("/{user_id}/activate")
async def activate_user(
    user_id: int,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    user = services.activate_user(db, user_id)
    return success_response(serialize(UserResponse, user), "User activated successfully")


@router.put("/{user_id}/deactivate")
async def deactivate_user(
    user_id: int,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    user = services.deactivate_user(db, user_id)
    return success_response(serialize(UserResponse, user), "User deactivated successfully")


@router.put("/{user_id}/role")
async def change_user_role(
    user_id: int,
    role_in: RoleUpdate,
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    user = services.change_user_role(db, user_id, role_in.role)
    return success_response(serialize(UserResponse, user), "User role updated successfully")
