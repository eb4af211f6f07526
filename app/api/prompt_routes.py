"""
Prompt Routes - Prompt CRUD and favorite endpoints.

All endpoints require a bearer token.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.db.models import User
from app.db.session import get_db
from app.exceptions import NotAuthorizedError, PromptNotFoundError, SpaceNotFoundError
from app.models.api import (
    CreatePromptRequest,
    FavoriteToggleResponse,
    MessageResponse,
    PromptResponse,
    UpdatePromptRequest,
)
from app.models.domain import PromptData
from app.services.prompts import PromptService

router = APIRouter(prefix="/api/prompts", tags=["prompts"])


def _prompt_response(prompt: PromptData) -> PromptResponse:
    return PromptResponse(
        id=prompt.prompt_id,
        title=prompt.title,
        content=prompt.content,
        description=prompt.description,
        tags=prompt.tags,
        space_id=prompt.space_id,
        author_id=prompt.author_id,
        version=prompt.version,
        variables=prompt.variables,
        is_favorite=prompt.is_favorite,
        created_at=prompt.created_at,
        updated_at=prompt.updated_at,
    )


@router.post("/create", response_model=PromptResponse, status_code=status.HTTP_201_CREATED)
async def create_prompt(
    request: CreatePromptRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PromptResponse:
    """Post a prompt into a space the caller belongs to."""
    service = PromptService(db)

    try:
        prompt = await service.create_prompt(
            user.id,
            request.space_id,
            request.title,
            request.content,
            description=request.description,
            tags=request.tags,
            variables=request.variables,
        )
    except SpaceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found",
        ) from exc
    except NotAuthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this group",
        ) from exc

    return _prompt_response(prompt)


@router.get("/{space_id}", response_model=list[PromptResponse])
async def list_prompts(
    space_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[PromptResponse]:
    """List the prompts of a space, newest first."""
    service = PromptService(db)

    try:
        prompts = await service.list_prompts(space_id, user.id)
    except SpaceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found",
        ) from exc
    except NotAuthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this group",
        ) from exc

    return [_prompt_response(prompt) for prompt in prompts]


@router.put("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: UUID,
    request: UpdatePromptRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PromptResponse:
    """Update the given fields of a prompt."""
    service = PromptService(db)

    try:
        prompt = await service.update_prompt(
            prompt_id,
            user.id,
            title=request.title,
            content=request.content,
            description=request.description,
            tags=request.tags,
            variables=request.variables,
        )
    except PromptNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        ) from exc
    except NotAuthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this group",
        ) from exc

    return _prompt_response(prompt)


@router.delete("/{prompt_id}", response_model=MessageResponse)
async def delete_prompt(
    prompt_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a prompt (author only)."""
    service = PromptService(db)

    try:
        await service.delete_prompt(prompt_id, user.id)
    except PromptNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        ) from exc
    except NotAuthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can delete this prompt",
        ) from exc

    return MessageResponse(message="Prompt deleted")


@router.put("/{prompt_id}/favorite", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    prompt_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FavoriteToggleResponse:
    """Add or remove the prompt from the caller's favorites."""
    service = PromptService(db)

    try:
        state = await service.toggle_favorite(prompt_id, user.id)
    except PromptNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        ) from exc

    return FavoriteToggleResponse(
        id=state.prompt_id,
        is_favorite=state.is_favorite,
        favorite_count=state.favorite_count,
    )
