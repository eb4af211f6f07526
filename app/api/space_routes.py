"""
Space Routes - Space (group) management endpoints.

All endpoints require a bearer token.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.db.models import User
from app.db.session import get_db
from app.exceptions import (
    AlreadyMemberError,
    InvalidJoinCodeError,
    NotAuthorizedError,
    SpaceNotFoundError,
)
from app.models.api import (
    CreateSpaceRequest,
    JoinSpaceRequest,
    MessageResponse,
    SpaceResponse,
    UpdateSpaceRequest,
)
from app.models.domain import SpaceData
from app.services.spaces import SpaceService

router = APIRouter(prefix="/api/groups", tags=["spaces"])


def _space_response(space: SpaceData) -> SpaceResponse:
    return SpaceResponse(
        id=space.space_id,
        name=space.name,
        type=space.type,
        description=space.description,
        join_code=space.join_code,
        member_count=space.member_count,
        prompt_count=space.prompt_count,
        role=space.role,
        icon=space.icon,
        color=space.color,
    )


@router.post("/create", response_model=SpaceResponse, status_code=status.HTTP_201_CREATED)
async def create_space(
    request: CreateSpaceRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SpaceResponse:
    """Create a space owned by the caller."""
    service = SpaceService(db)
    space = await service.create_space(user.id, request.name, request.type, request.description)
    return _space_response(space)


@router.post("/join", response_model=SpaceResponse)
async def join_space(
    request: JoinSpaceRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SpaceResponse:
    """Join a space by its join code."""
    service = SpaceService(db)

    try:
        space = await service.join_space(user, request.group_code)
    except InvalidJoinCodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid group code",
        ) from exc
    except AlreadyMemberError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Already a member of this group",
        ) from exc

    return _space_response(space)


@router.get("/my-groups", response_model=list[SpaceResponse])
async def list_my_spaces(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[SpaceResponse]:
    """List every space the caller belongs to."""
    service = SpaceService(db)
    spaces = await service.list_spaces(user.id)
    return [_space_response(space) for space in spaces]


@router.get("/{space_id}", response_model=SpaceResponse)
async def get_space(
    space_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SpaceResponse:
    """Get a space the caller belongs to."""
    service = SpaceService(db)

    try:
        space = await service.get_space(space_id, user.id)
    except SpaceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found",
        ) from exc

    return _space_response(space)


@router.put("/{space_id}", response_model=SpaceResponse)
async def update_space(
    space_id: UUID,
    request: UpdateSpaceRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SpaceResponse:
    """Update a space's name, description or type (owner only)."""
    service = SpaceService(db)

    try:
        space = await service.update_space(
            space_id,
            user.id,
            name=request.name,
            description=request.description,
            type=request.type,
        )
    except SpaceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found",
        ) from exc
    except NotAuthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can update this group",
        ) from exc

    return _space_response(space)


@router.delete("/{space_id}", response_model=MessageResponse)
async def delete_space(
    space_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a space and all of its prompts (owner only)."""
    service = SpaceService(db)

    try:
        await service.delete_space(space_id, user.id)
    except SpaceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found",
        ) from exc
    except NotAuthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can delete this group",
        ) from exc

    return MessageResponse(message="Group deleted")
