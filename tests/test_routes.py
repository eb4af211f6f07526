"""
Tests for API routes.

Exercises request validation and exception-to-status translation with
services and database mocked out.
"""

from collections.abc import Iterator
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.exceptions import (
    AlreadyMemberError,
    AuthenticationError,
    DailyCreditLimitError,
    DuplicateSignalError,
    InvalidJoinCodeError,
    NotAuthorizedError,
    UserAlreadyExistsError,
)
from app.models.api import SignalKind, SpaceRole, SpaceType
from app.models.domain import (
    AuthResult,
    CreditBalance,
    FavoriteState,
    PromptData,
    SignalHistoryEntry,
    SpaceData,
    UsageSummary,
    UserProfile,
)

NOW = datetime(2026, 5, 4, 12, 0, tzinfo=UTC)


@pytest.fixture
def anonymous_client(app: FastAPI, db_session: AsyncMock) -> Iterator[TestClient]:
    """Test client with only the database overridden."""
    from app.db.session import get_db

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_profile(user_id=None, ai_credits: int = 20) -> UserProfile:
    return UserProfile(
        user_id=user_id or uuid4(),
        name="Ada",
        email="ada@example.com",
        avatar=None,
        ai_credits=ai_credits,
    )


def make_space(role: SpaceRole = SpaceRole.OWNER) -> SpaceData:
    return SpaceData(
        space_id=uuid4(),
        name="Design",
        type=SpaceType.TEAM,
        description=None,
        join_code="ABCD1234",
        member_count=2,
        prompt_count=0,
        role=role,
        icon="Folder",
        color="text-neon-blue",
    )


class TestAuthRoutes:
    """Tests for registration, login and token handling."""

    def test_register_returns_user_and_token(self, anonymous_client: TestClient) -> None:
        result = AuthResult(profile=make_profile(), token="token-value")

        with patch(
            "app.api.routes.UserAuthService.register", AsyncMock(return_value=result)
        ) as register:
            response = anonymous_client.post(
                "/api/auth/register",
                json={"name": "Ada", "email": " Ada@Example.com ", "password": "s3cret!"},
            )

        assert response.status_code == 201
        body = response.json()
        assert body["token"] == "token-value"
        assert body["user"]["ai_credits"] == 20
        register.assert_awaited_once_with("Ada", "ada@example.com", "s3cret!")

    def test_register_duplicate_is_conflict(self, anonymous_client: TestClient) -> None:
        with patch(
            "app.api.routes.UserAuthService.register",
            AsyncMock(side_effect=UserAlreadyExistsError("ada@example.com")),
        ):
            response = anonymous_client.post(
                "/api/auth/register",
                json={"name": "Ada", "email": "ada@example.com", "password": "s3cret!"},
            )

        assert response.status_code == 409

    def test_register_rejects_email_without_at(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.post(
            "/api/auth/register",
            json={"name": "Ada", "email": "not-an-email", "password": "s3cret!"},
        )

        assert response.status_code == 422

    def test_login_bad_credentials(self, anonymous_client: TestClient) -> None:
        with patch(
            "app.api.routes.UserAuthService.login",
            AsyncMock(side_effect=AuthenticationError("Invalid email or password")),
        ):
            response = anonymous_client.post(
                "/api/auth/login", json={"email": "ada@example.com", "password": "nope"}
            )

        assert response.status_code == 401

    def test_missing_bearer_token(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.get("/api/auth/me")

        assert response.status_code == 401

    def test_invalid_bearer_token(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    def test_valid_token_for_deleted_user(
        self, anonymous_client: TestClient, db_session: AsyncMock
    ) -> None:
        from app.services.auth import UserAuthService

        token = UserAuthService(db_session).create_token(uuid4())

        response = anonymous_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    def test_me_returns_resolved_profile(
        self, authenticated_client: TestClient, mock_user: MagicMock
    ) -> None:
        profile = make_profile(user_id=mock_user.id, ai_credits=17)

        with patch(
            "app.api.routes.CreditService.get_profile", AsyncMock(return_value=profile)
        ):
            response = authenticated_client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["id"] == str(mock_user.id)
        assert response.json()["ai_credits"] == 17


class TestCreditRoutes:
    """Tests for deduct/reward endpoints."""

    def test_deduct_returns_new_balance(
        self, authenticated_client: TestClient, mock_user: MagicMock
    ) -> None:
        balance = CreditBalance(user_id=mock_user.id, ai_credits=19, last_credit_reset=NOW)

        with patch("app.api.routes.CreditService.deduct", AsyncMock(return_value=balance)):
            response = authenticated_client.post("/api/auth/deduct-credit")

        assert response.status_code == 200
        assert response.json() == {"success": True, "ai_credits": 19}

    def test_deduct_when_exhausted_is_429(
        self, authenticated_client: TestClient, mock_user: MagicMock
    ) -> None:
        with patch(
            "app.api.routes.CreditService.deduct",
            AsyncMock(side_effect=DailyCreditLimitError(mock_user.id, 20)),
        ):
            response = authenticated_client.post("/api/auth/deduct-credit")

        assert response.status_code == 429
        assert "Daily AI limit reached" in response.json()["detail"]

    @pytest.mark.parametrize("amount", [0, 11, -1])
    def test_reward_out_of_range_is_400(
        self, authenticated_client: TestClient, amount: int
    ) -> None:
        response = authenticated_client.post("/api/auth/reward-credit", json={"amount": amount})

        assert response.status_code == 400

    def test_reward_returns_new_balance(
        self, authenticated_client: TestClient, mock_user: MagicMock
    ) -> None:
        balance = CreditBalance(user_id=mock_user.id, ai_credits=25, last_credit_reset=NOW)

        with patch(
            "app.api.routes.CreditService.reward", AsyncMock(return_value=balance)
        ) as reward:
            response = authenticated_client.post("/api/auth/reward-credit", json={"amount": 5})

        assert response.status_code == 200
        assert response.json()["ai_credits"] == 25
        reward.assert_awaited_once_with(mock_user.id, 5)


class TestUsageSignalRoutes:
    """Tests for usage signal endpoints."""

    def test_submit_returns_summary(self, authenticated_client: TestClient) -> None:
        summary = UsageSummary(worked=3, didnt_work=1, last_worked_at=NOW)

        with patch(
            "app.api.routes.UsageSignalService.submit_signal", AsyncMock(return_value=summary)
        ):
            response = authenticated_client.post(
                f"/api/prompts/{uuid4()}/usage", json={"signal": "WORKED", "note": "nice"}
            )

        assert response.status_code == 201
        body = response.json()
        assert body["worked"] == 3
        assert body["didnt_work"] == 1
        assert body["last_worked_at"].startswith("2026-05-04T12:00:00")

    def test_malformed_signal_is_400(self, authenticated_client: TestClient) -> None:
        response = authenticated_client.post(
            f"/api/prompts/{uuid4()}/usage", json={"signal": "MAYBE"}
        )

        assert response.status_code == 400

    def test_unknown_prompt_is_404(self, authenticated_client: TestClient) -> None:
        response = authenticated_client.post(
            f"/api/prompts/{uuid4()}/usage", json={"signal": "WORKED"}
        )

        assert response.status_code == 404

    def test_duplicate_same_day_is_409(self, authenticated_client: TestClient) -> None:
        with patch(
            "app.api.routes.UsageSignalService.submit_signal",
            AsyncMock(side_effect=DuplicateSignalError(uuid4(), uuid4())),
        ):
            response = authenticated_client.post(
                f"/api/prompts/{uuid4()}/usage", json={"signal": "DIDNT_WORK"}
            )

        assert response.status_code == 409

    def test_summary_and_history(self, authenticated_client: TestClient) -> None:
        prompt_id = uuid4()
        history = [
            SignalHistoryEntry(signal=SignalKind.WORKED, note=None, created_at=NOW),
            SignalHistoryEntry(signal=SignalKind.NOT_SURE, note="hm", created_at=NOW),
        ]

        with (
            patch(
                "app.api.routes.UsageSignalService.get_summary",
                AsyncMock(return_value=UsageSummary()),
            ),
            patch(
                "app.api.routes.UsageSignalService.get_history",
                AsyncMock(return_value=history),
            ),
        ):
            summary = authenticated_client.get(f"/api/prompts/{prompt_id}/usage/summary")
            entries = authenticated_client.get(f"/api/prompts/{prompt_id}/usage/history")

        assert summary.json() == {"worked": 0, "didnt_work": 0, "last_worked_at": None}
        assert [e["signal"] for e in entries.json()] == ["WORKED", "NOT_SURE"]


class TestSpaceRoutes:
    """Tests for space endpoints."""

    def test_create_space(self, authenticated_client: TestClient) -> None:
        with patch(
            "app.api.space_routes.SpaceService.create_space",
            AsyncMock(return_value=make_space()),
        ):
            response = authenticated_client.post(
                "/api/groups/create", json={"name": "Design", "type": "TEAM"}
            )

        assert response.status_code == 201
        assert response.json()["join_code"] == "ABCD1234"
        assert response.json()["role"] == "OWNER"

    def test_join_uppercases_code(
        self, authenticated_client: TestClient, mock_user: MagicMock
    ) -> None:
        with patch(
            "app.api.space_routes.SpaceService.join_space",
            AsyncMock(return_value=make_space(SpaceRole.MEMBER)),
        ) as join:
            response = authenticated_client.post(
                "/api/groups/join", json={"group_code": " abcd1234 "}
            )

        assert response.status_code == 200
        join.assert_awaited_once_with(mock_user, "ABCD1234")

    def test_join_invalid_code_is_404(self, authenticated_client: TestClient) -> None:
        with patch(
            "app.api.space_routes.SpaceService.join_space",
            AsyncMock(side_effect=InvalidJoinCodeError("NOPE")),
        ):
            response = authenticated_client.post("/api/groups/join", json={"group_code": "nope"})

        assert response.status_code == 404

    def test_join_already_member_is_409(self, authenticated_client: TestClient) -> None:
        with patch(
            "app.api.space_routes.SpaceService.join_space",
            AsyncMock(side_effect=AlreadyMemberError(uuid4(), uuid4())),
        ):
            response = authenticated_client.post(
                "/api/groups/join", json={"group_code": "ABCD1234"}
            )

        assert response.status_code == 409

    def test_my_groups_is_not_captured_by_space_id(
        self, authenticated_client: TestClient
    ) -> None:
        with patch(
            "app.api.space_routes.SpaceService.list_spaces",
            AsyncMock(return_value=[make_space(), make_space(SpaceRole.MEMBER)]),
        ):
            response = authenticated_client.get("/api/groups/my-groups")

        assert response.status_code == 200
        assert [s["role"] for s in response.json()] == ["OWNER", "MEMBER"]

    def test_update_by_non_owner_is_403(
        self, authenticated_client: TestClient, mock_user: MagicMock
    ) -> None:
        with patch(
            "app.api.space_routes.SpaceService.update_space",
            AsyncMock(side_effect=NotAuthorizedError(mock_user.id, "update this space")),
        ):
            response = authenticated_client.put(f"/api/groups/{uuid4()}", json={"name": "X"})

        assert response.status_code == 403

    def test_get_missing_space_is_404(self, authenticated_client: TestClient) -> None:
        response = authenticated_client.get(f"/api/groups/{uuid4()}")

        assert response.status_code == 404


class TestPromptRoutes:
    """Tests for prompt endpoints."""

    def test_create_prompt(self, authenticated_client: TestClient, mock_user: MagicMock) -> None:
        space_id = uuid4()
        prompt = PromptData(
            prompt_id=uuid4(),
            title="Summarize",
            content="Summarize {{text}}",
            description=None,
            space_id=space_id,
            author_id=mock_user.id,
            version=1,
            is_favorite=False,
            created_at=NOW,
            updated_at=NOW,
            tags=["writing"],
            variables=["text"],
        )

        with patch(
            "app.api.prompt_routes.PromptService.create_prompt", AsyncMock(return_value=prompt)
        ):
            response = authenticated_client.post(
                "/api/prompts/create",
                json={
                    "title": "Summarize",
                    "content": "Summarize {{text}}",
                    "space_id": str(space_id),
                    "tags": ["writing"],
                    "variables": ["text"],
                },
            )

        assert response.status_code == 201
        assert response.json()["author_id"] == str(mock_user.id)
        assert response.json()["variables"] == ["text"]

    def test_toggle_favorite(self, authenticated_client: TestClient) -> None:
        prompt_id = uuid4()
        state = FavoriteState(prompt_id=prompt_id, is_favorite=True, favorite_count=3)

        with patch(
            "app.api.prompt_routes.PromptService.toggle_favorite", AsyncMock(return_value=state)
        ):
            response = authenticated_client.put(f"/api/prompts/{prompt_id}/favorite")

        assert response.status_code == 200
        assert response.json() == {"id": str(prompt_id), "is_favorite": True, "favorite_count": 3}

    def test_delete_by_non_author_is_403(
        self, authenticated_client: TestClient, mock_user: MagicMock
    ) -> None:
        with patch(
            "app.api.prompt_routes.PromptService.delete_prompt",
            AsyncMock(side_effect=NotAuthorizedError(mock_user.id, "delete this prompt")),
        ):
            response = authenticated_client.delete(f"/api/prompts/{uuid4()}")

        assert response.status_code == 403

    def test_update_missing_prompt_is_404(self, authenticated_client: TestClient) -> None:
        response = authenticated_client.put(f"/api/prompts/{uuid4()}", json={"title": "New"})

        assert response.status_code == 404


class TestNotificationAndHealthRoutes:
    """Tests for notifications and health."""

    def test_list_notifications_empty(self, authenticated_client: TestClient) -> None:
        response = authenticated_client.get("/api/notifications")

        assert response.status_code == 200
        assert response.json() == []

    def test_mark_missing_notification_is_404(self, authenticated_client: TestClient) -> None:
        response = authenticated_client.put(f"/api/notifications/{uuid4()}/read")

        assert response.status_code == 404

    def test_health_ok(self, anonymous_client: TestClient) -> None:
        response = anonymous_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_health_db_down(self, anonymous_client: TestClient, db_session: AsyncMock) -> None:
        db_session.execute = AsyncMock(side_effect=ConnectionError("refused"))

        response = anonymous_client.get("/health")

        assert response.status_code == 503
        assert response.json()["detail"]["database"] == "disconnected"
