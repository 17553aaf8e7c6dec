# daycare/routes/users.py
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_current_actor, get_user_service
from daycare.core.identity import Actor
from daycare.routes.responses import page_of, respond
from daycare.schemas.common import ApiResponse, PageParams, PageResponse
from daycare.schemas.enums import UserRole
from daycare.schemas.reports import UserStatistics
from daycare.schemas.user import UserCreate, UserDirectoryEntry, UserFilters, UserResponse, UserUpdate
from daycare.services import UserService

router = APIRouter()


@router.get("", response_model=ApiResponse[PageResponse[UserResponse]])
async def list_users(
    filters: Annotated[UserFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """List users (admin only)"""
    result = await service.list(actor, filters, filters.page, filters.page_size)
    return respond(page_of(UserResponse, result))


@router.get("/statistics", response_model=ApiResponse[UserStatistics])
async def user_statistics(
    actor: Optional[Actor] = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return respond(await service.statistics(actor))


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_my_profile(
    actor: Optional[Actor] = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """The authenticated user's own profile"""
    user = await service.get(actor, actor.id if actor else 0)
    return respond(UserResponse.model_validate(user))


@router.get("/role/{role}", response_model=ApiResponse[PageResponse[UserDirectoryEntry]])
async def list_users_by_role(
    role: UserRole,
    paging: Annotated[PageParams, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """Directory of active users with one role, for any signed-in user"""
    result = await service.list_by_role(actor, role, paging.page, paging.page_size)
    return respond(page_of(UserDirectoryEntry, result))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return respond(UserResponse.model_validate(await service.get(actor, user_id)))


@router.post("", response_model=ApiResponse[UserResponse], status_code=201)
async def create_user(
    data: UserCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    user = await service.create(actor, data)
    return respond(UserResponse.model_validate(user), "User created successfully")


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: int,
    data: UserUpdate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    user = await service.update(actor, user_id, data)
    return respond(UserResponse.model_validate(user), "User updated successfully")


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    await service.delete(actor, user_id)
    return respond(message="User deleted successfully")
