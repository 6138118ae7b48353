"""Role management API routes (admin only)."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_admin_identity, get_role_repository
from app.api.v1.endpoints.auth.schemas import ErrorResponse, MessageResponse
from app.core.auth.entities import Role
from app.core.exceptions import (
    RoleAlreadyExistsException,
    RoleInUseException,
    RoleNotFoundException,
)
from app.infrastructure.database.repositories.role_repository import SqlRoleRepository
from .schemas import RoleCreateRequest, RoleResponse, RoleUpdateRequest

router = APIRouter(
    prefix="/roles",
    tags=["Roles"],
    dependencies=[Depends(get_admin_identity)],
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        403: {"model": ErrorResponse, "description": "Admin role required"},
    },
)


@router.get(
    "/",
    response_model=List[RoleResponse],
    summary="List roles",
)
async def list_roles(
    role_repository: SqlRoleRepository = Depends(get_role_repository),
) -> List[RoleResponse]:
    roles = await role_repository.list_roles()
    return [RoleResponse.model_validate(role) for role in roles]


@router.post(
    "/",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    responses={409: {"model": ErrorResponse, "description": "Role already exists"}},
)
async def create_role(
    request: RoleCreateRequest,
    role_repository: SqlRoleRepository = Depends(get_role_repository),
) -> RoleResponse:
    try:
        role = await role_repository.create_role(Role(id=None, name=request.name))
    except RoleAlreadyExistsException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return RoleResponse.model_validate(role)


@router.patch(
    "/{role_id}",
    response_model=RoleResponse,
    summary="Rename role",
    responses={
        404: {"model": ErrorResponse, "description": "Role not found"},
        409: {"model": ErrorResponse, "description": "Role already exists"},
    },
)
async def update_role(
    role_id: int,
    request: RoleUpdateRequest,
    role_repository: SqlRoleRepository = Depends(get_role_repository),
) -> RoleResponse:
    try:
        role = await role_repository.update_role(role_id, request.name)
    except RoleNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RoleAlreadyExistsException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return RoleResponse.model_validate(role)


@router.delete(
    "/{role_id}",
    response_model=MessageResponse,
    summary="Delete role",
    responses={
        404: {"model": ErrorResponse, "description": "Role not found"},
        409: {"model": ErrorResponse, "description": "Role is assigned to accounts"},
    },
)
async def delete_role(
    role_id: int,
    role_repository: SqlRoleRepository = Depends(get_role_repository),
) -> MessageResponse:
    try:
        await role_repository.delete_role(role_id)
    except RoleNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except RoleInUseException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return MessageResponse(message="Role deleted successfully")
