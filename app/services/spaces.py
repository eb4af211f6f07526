"""
Space service - groups that scope prompt visibility.

Membership is a set of (space, user) rows. The creator is the owner and
the first member. TEAM and PUBLIC spaces carry a join code.
"""

import secrets
from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.db.models import Prompt, Space, SpaceMember, User
from app.exceptions import (
    AlreadyMemberError,
    InvalidJoinCodeError,
    NotAuthorizedError,
    SpaceNotFoundError,
)
from app.models.api import NotificationType, SpaceRole, SpaceType
from app.models.domain import SpaceData
from app.services.notifications import NotificationService

logger = get_logger(__name__)

SHARED_SPACE_TYPES = (SpaceType.TEAM, SpaceType.PUBLIC)
DEFAULT_ICON = "Folder"
DEFAULT_COLOR = "text-neon-blue"


def generate_join_code() -> str:
    """Random 8-character uppercase hex code."""
    return secrets.token_hex(4).upper()


def _role_for(space: Space, user_id: UUID) -> SpaceRole:
    return SpaceRole.OWNER if space.created_by == user_id else SpaceRole.MEMBER


def _to_data(space: Space, role: SpaceRole, member_count: int, prompt_count: int) -> SpaceData:
    return SpaceData(
        space_id=space.id,
        name=space.name,
        type=SpaceType(space.type),
        description=space.description,
        join_code=space.join_code,
        member_count=member_count,
        prompt_count=prompt_count,
        role=role,
        icon=space.icon,
        color=space.color,
    )


class SpaceService:
    """Space lifecycle and membership."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_space(
        self,
        owner_id: UUID,
        name: str,
        type: SpaceType = SpaceType.PRIVATE,
        description: str | None = None,
    ) -> SpaceData:
        """Create a space with the caller as owner and only member."""
        space = Space(
            id=uuid4(),
            name=name,
            type=type.value,
            description=description,
            join_code=generate_join_code() if type in SHARED_SPACE_TYPES else None,
            created_by=owner_id,
            icon=DEFAULT_ICON,
            color=DEFAULT_COLOR,
        )
        self.session.add(space)
        self.session.add(SpaceMember(space_id=space.id, user_id=owner_id))
        await self.session.flush()
        await self.session.commit()

        logger.info("space_created", space_id=str(space.id), owner_id=str(owner_id), type=type.value)
        return _to_data(space, SpaceRole.OWNER, member_count=1, prompt_count=0)

    async def join_space(self, user: User, join_code: str) -> SpaceData:
        """
        Join a space by its code, notifying the owner and the joiner.

        Raises:
            InvalidJoinCodeError: No space has this code
            AlreadyMemberError: User already belongs to the space
        """
        stmt = select(Space).where(Space.join_code == join_code)
        result = await self.session.execute(stmt)
        space = result.scalar_one_or_none()
        if space is None:
            raise InvalidJoinCodeError(join_code)

        if await self.is_member(space.id, user.id):
            raise AlreadyMemberError(space.id, user.id)

        self.session.add(SpaceMember(space_id=space.id, user_id=user.id))

        notifications = NotificationService(self.session)
        if space.created_by != user.id:
            notifications.add_notification(
                space.created_by,
                f'{user.name} joined your space "{space.name}"',
                NotificationType.JOIN,
            )
        notifications.add_notification(
            user.id,
            f'You successfully joined the space "{space.name}"',
            NotificationType.INFO,
        )

        try:
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            # Concurrent join by the same user
            await self.session.rollback()
            raise AlreadyMemberError(space.id, user.id) from e

        logger.info("space_joined", space_id=str(space.id), user_id=str(user.id))
        member_counts = await self._member_counts([space.id])
        prompt_counts = await self._prompt_counts([space.id])
        return _to_data(
            space,
            _role_for(space, user.id),
            member_count=member_counts.get(space.id, 0),
            prompt_count=prompt_counts.get(space.id, 0),
        )

    async def list_spaces(self, user_id: UUID) -> list[SpaceData]:
        """All spaces the user belongs to, with role and counts."""
        stmt = (
            select(Space)
            .join(SpaceMember, SpaceMember.space_id == Space.id)
            .where(SpaceMember.user_id == user_id)
            .order_by(Space.created_at.desc())
        )
        result = await self.session.execute(stmt)
        spaces = list(result.scalars().all())
        if not spaces:
            return []

        space_ids = [space.id for space in spaces]
        member_counts = await self._member_counts(space_ids)
        prompt_counts = await self._prompt_counts(space_ids)
        return [
            _to_data(
                space,
                _role_for(space, user_id),
                member_count=member_counts.get(space.id, 0),
                prompt_count=prompt_counts.get(space.id, 0),
            )
            for space in spaces
        ]

    async def get_space(self, space_id: UUID, user_id: UUID) -> SpaceData:
        """
        Get a space the user belongs to.

        Raises:
            SpaceNotFoundError: Space doesn't exist or user is not a member
        """
        space = await self.session.get(Space, space_id)
        if space is None or not await self.is_member(space_id, user_id):
            raise SpaceNotFoundError(space_id)

        member_counts = await self._member_counts([space_id])
        prompt_counts = await self._prompt_counts([space_id])
        return _to_data(
            space,
            _role_for(space, user_id),
            member_count=member_counts.get(space_id, 0),
            prompt_count=prompt_counts.get(space_id, 0),
        )

    async def update_space(
        self,
        space_id: UUID,
        user_id: UUID,
        name: str | None = None,
        description: str | None = None,
        type: SpaceType | None = None,
    ) -> SpaceData:
        """
        Update a space's details (owner only).

        Switching to a shared type hands out a join code if the space has none.

        Raises:
            SpaceNotFoundError: Space doesn't exist
            NotAuthorizedError: Caller is not the owner
        """
        space = await self._get_owned_space(space_id, user_id, "update this space")

        if name:
            space.name = name
        if description:
            space.description = description
        if type is not None:
            space.type = type.value
            if type in SHARED_SPACE_TYPES and space.join_code is None:
                space.join_code = generate_join_code()

        await self.session.flush()
        await self.session.commit()

        logger.info("space_updated", space_id=str(space_id), user_id=str(user_id))
        member_counts = await self._member_counts([space_id])
        prompt_counts = await self._prompt_counts([space_id])
        return _to_data(
            space,
            SpaceRole.OWNER,
            member_count=member_counts.get(space_id, 0),
            prompt_count=prompt_counts.get(space_id, 0),
        )

    async def delete_space(self, space_id: UUID, user_id: UUID) -> None:
        """
        Delete a space and every prompt in it (owner only).

        Raises:
            SpaceNotFoundError: Space doesn't exist
            NotAuthorizedError: Caller is not the owner
        """
        space = await self._get_owned_space(space_id, user_id, "delete this space")

        await self.session.execute(delete(Prompt).where(Prompt.space_id == space_id))
        await self.session.delete(space)
        await self.session.flush()
        await self.session.commit()

        logger.info("space_deleted", space_id=str(space_id), user_id=str(user_id))

    async def is_member(self, space_id: UUID, user_id: UUID) -> bool:
        """Check whether the user belongs to the space."""
        membership = await self.session.get(SpaceMember, (space_id, user_id))
        return membership is not None

    async def _get_owned_space(self, space_id: UUID, user_id: UUID, action: str) -> Space:
        space = await self.session.get(Space, space_id)
        if space is None:
            raise SpaceNotFoundError(space_id)
        if space.created_by != user_id:
            logger.warning(
                "space_owner_required", space_id=str(space_id), user_id=str(user_id), action=action
            )
            raise NotAuthorizedError(user_id, action)
        return space

    async def _member_counts(self, space_ids: Sequence[UUID]) -> dict[UUID, int]:
        stmt = (
            select(SpaceMember.space_id, func.count())
            .where(SpaceMember.space_id.in_(space_ids))
            .group_by(SpaceMember.space_id)
        )
        result = await self.session.execute(stmt)
        return {space_id: count for space_id, count in result.all()}

    async def _prompt_counts(self, space_ids: Sequence[UUID]) -> dict[UUID, int]:
        stmt = (
            select(Prompt.space_id, func.count())
            .where(Prompt.space_id.in_(space_ids))
            .group_by(Prompt.space_id)
        )
        result = await self.session.execute(stmt)
        return {space_id: count for space_id, count in result.all()}
