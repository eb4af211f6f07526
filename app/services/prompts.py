"""
Prompt service - prompts posted into spaces, and per-user favorites.

Favorites are a set of (prompt, user) rows; toggling inserts or deletes
the caller's row.
"""

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.db.models import Prompt, PromptFavorite, Space, utc_now
from app.exceptions import NotAuthorizedError, PromptNotFoundError, SpaceNotFoundError
from app.models.domain import FavoriteState, PromptData
from app.services.spaces import SpaceService

logger = get_logger(__name__)


def _to_data(prompt: Prompt, is_favorite: bool) -> PromptData:
    return PromptData(
        prompt_id=prompt.id,
        title=prompt.title,
        content=prompt.content,
        description=prompt.description,
        space_id=prompt.space_id,
        author_id=prompt.author_id,
        version=prompt.version,
        is_favorite=is_favorite,
        created_at=prompt.created_at,
        updated_at=prompt.updated_at,
        tags=list(prompt.tags or []),
        variables=list(prompt.variables or []),
    )


class PromptService:
    """Prompt CRUD and favorites."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.spaces = SpaceService(session)

    async def create_prompt(
        self,
        user_id: UUID,
        space_id: UUID,
        title: str,
        content: str,
        description: str | None = None,
        tags: Sequence[str] = (),
        variables: Sequence[str] = (),
    ) -> PromptData:
        """
        Post a prompt into a space the caller belongs to.

        Raises:
            SpaceNotFoundError: Space doesn't exist
            NotAuthorizedError: Caller is not a member of the space
        """
        await self._require_member(space_id, user_id, "post in this space")

        now = utc_now()
        prompt = Prompt(
            id=uuid4(),
            title=title,
            content=content,
            description=description,
            tags=list(tags),
            variables=list(variables),
            version=1,
            space_id=space_id,
            author_id=user_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(prompt)
        await self.session.flush()
        await self.session.commit()

        logger.info("prompt_created", prompt_id=str(prompt.id), space_id=str(space_id))
        return _to_data(prompt, is_favorite=False)

    async def list_prompts(self, space_id: UUID, user_id: UUID) -> list[PromptData]:
        """
        Prompts of a space, newest first, with the caller's favorite flags.

        Raises:
            SpaceNotFoundError: Space doesn't exist
            NotAuthorizedError: Caller is not a member of the space
        """
        await self._require_member(space_id, user_id, "view this space")

        stmt = select(Prompt).where(Prompt.space_id == space_id).order_by(Prompt.created_at.desc())
        result = await self.session.execute(stmt)
        prompts = list(result.scalars().all())
        if not prompts:
            return []

        favorites = await self._favorited_ids([p.id for p in prompts], user_id)
        return [_to_data(p, is_favorite=p.id in favorites) for p in prompts]

    async def update_prompt(
        self,
        prompt_id: UUID,
        user_id: UUID,
        title: str | None = None,
        content: str | None = None,
        description: str | None = None,
        tags: Sequence[str] | None = None,
        variables: Sequence[str] | None = None,
    ) -> PromptData:
        """
        Update the given fields of a prompt.

        Raises:
            PromptNotFoundError: Prompt doesn't exist
            NotAuthorizedError: Caller is not a member of the prompt's space
        """
        prompt = await self._get_prompt(prompt_id)
        if not await self.spaces.is_member(prompt.space_id, user_id):
            raise NotAuthorizedError(user_id, "edit this prompt")

        if title is not None:
            prompt.title = title
        if content is not None:
            prompt.content = content
        if description is not None:
            prompt.description = description
        if tags is not None:
            prompt.tags = list(tags)
        if variables is not None:
            prompt.variables = list(variables)
        prompt.updated_at = utc_now()

        await self.session.flush()
        await self.session.commit()

        logger.info("prompt_updated", prompt_id=str(prompt_id), user_id=str(user_id))
        return _to_data(prompt, is_favorite=await self._is_favorite(prompt_id, user_id))

    async def delete_prompt(self, prompt_id: UUID, user_id: UUID) -> None:
        """
        Delete a prompt (author only).

        Raises:
            PromptNotFoundError: Prompt doesn't exist
            NotAuthorizedError: Caller is not the author
        """
        prompt = await self._get_prompt(prompt_id)
        if prompt.author_id != user_id:
            logger.warning("prompt_delete_denied", prompt_id=str(prompt_id), user_id=str(user_id))
            raise NotAuthorizedError(user_id, "delete this prompt")

        await self.session.delete(prompt)
        await self.session.flush()
        await self.session.commit()

        logger.info("prompt_deleted", prompt_id=str(prompt_id), user_id=str(user_id))

    async def toggle_favorite(self, prompt_id: UUID, user_id: UUID) -> FavoriteState:
        """
        Add the caller to the prompt's favorite set, or remove them if present.

        Raises:
            PromptNotFoundError: Prompt doesn't exist
        """
        await self._get_prompt(prompt_id)

        existing = await self.session.get(PromptFavorite, (prompt_id, user_id))
        if existing is not None:
            await self.session.delete(existing)
            is_favorite = False
        else:
            self.session.add(PromptFavorite(prompt_id=prompt_id, user_id=user_id))
            is_favorite = True

        try:
            await self.session.flush()
            await self.session.commit()
        except IntegrityError:
            # A concurrent toggle already inserted the row; the set holds the user
            await self.session.rollback()
            is_favorite = True

        logger.info(
            "prompt_favorite_toggled",
            prompt_id=str(prompt_id),
            user_id=str(user_id),
            is_favorite=is_favorite,
        )
        return FavoriteState(
            prompt_id=prompt_id,
            is_favorite=is_favorite,
            favorite_count=await self.count_favorites(prompt_id),
        )

    async def count_favorites(self, prompt_id: UUID) -> int:
        """Size of the prompt's favorite set."""
        stmt = select(func.count()).select_from(PromptFavorite).where(
            PromptFavorite.prompt_id == prompt_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def _require_member(self, space_id: UUID, user_id: UUID, action: str) -> None:
        space = await self.session.get(Space, space_id)
        if space is None:
            raise SpaceNotFoundError(space_id)
        if not await self.spaces.is_member(space_id, user_id):
            logger.warning("space_membership_required", space_id=str(space_id), user_id=str(user_id))
            raise NotAuthorizedError(user_id, action)

    async def _get_prompt(self, prompt_id: UUID) -> Prompt:
        prompt = await self.session.get(Prompt, prompt_id)
        if prompt is None:
            raise PromptNotFoundError(prompt_id)
        return prompt

    async def _is_favorite(self, prompt_id: UUID, user_id: UUID) -> bool:
        return await self.session.get(PromptFavorite, (prompt_id, user_id)) is not None

    async def _favorited_ids(self, prompt_ids: Sequence[UUID], user_id: UUID) -> set[UUID]:
        stmt = select(PromptFavorite.prompt_id).where(
            PromptFavorite.user_id == user_id,
            PromptFavorite.prompt_id.in_(prompt_ids),
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())
