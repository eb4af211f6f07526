"""
Tests for domain and API models.
"""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime
from uuid import uuid4

import pytest
from pydantic import ValidationError

from app.models.api import (
    CreateSpaceRequest,
    JoinSpaceRequest,
    LoginRequest,
    RegisterRequest,
    SpaceType,
    SubmitSignalRequest,
)
from app.models.domain import CreditBalance, PromptData, UsageSummary


class TestDomainModels:
    """Tests for immutable domain dataclasses."""

    def test_credit_balance_is_frozen(self):
        balance = CreditBalance(user_id=uuid4(), ai_credits=5, last_credit_reset=datetime.now(UTC))

        with pytest.raises(FrozenInstanceError):
            balance.ai_credits = 20  # type: ignore[misc]

    def test_usage_summary_defaults(self):
        summary = UsageSummary()

        assert summary.worked == 0
        assert summary.didnt_work == 0
        assert summary.last_worked_at is None

    def test_prompt_lists_are_not_shared(self):
        now = datetime.now(UTC)
        kwargs = dict(
            title="t",
            content="c",
            description=None,
            space_id=uuid4(),
            author_id=uuid4(),
            version=1,
            is_favorite=False,
            created_at=now,
            updated_at=now,
        )
        first = PromptData(prompt_id=uuid4(), **kwargs)
        second = PromptData(prompt_id=uuid4(), **kwargs)

        first.tags.append("x")

        assert second.tags == []


class TestRequestModels:
    """Tests for request validation."""

    def test_register_normalizes_email(self):
        request = RegisterRequest(name="Ada", email="  ADA@Example.COM ", password="s3cret!")

        assert request.email == "ada@example.com"

    def test_register_requires_at_sign(self):
        with pytest.raises(ValidationError):
            RegisterRequest(name="Ada", email="ada.example.com", password="s3cret!")

    def test_register_password_min_length(self):
        with pytest.raises(ValidationError):
            RegisterRequest(name="Ada", email="ada@example.com", password="123")

    def test_login_lowercases_email(self):
        assert LoginRequest(email="Ada@Example.com", password="x").email == "ada@example.com"

    def test_join_code_uppercased(self):
        assert JoinSpaceRequest(group_code=" cafe1234 ").group_code == "CAFE1234"

    def test_space_type_defaults_private(self):
        assert CreateSpaceRequest(name="Notes").type == SpaceType.PRIVATE

    def test_signal_note_max_length(self):
        SubmitSignalRequest(signal="WORKED", note="x" * 500)

        with pytest.raises(ValidationError):
            SubmitSignalRequest(signal="WORKED", note="x" * 501)
