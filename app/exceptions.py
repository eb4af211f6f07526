"""
Exception Classes - Strongly typed exception hierarchy.

Every exception carries typed attributes. The five recoverable families
(not found, not authorized, conflict, invalid input, exhausted) map onto
HTTP status codes in the route layer.
"""

from uuid import UUID


class PromptOSError(Exception):
    """Base exception for all PromptOS errors."""

    pass


# ============================================================================
# Not Found
# ============================================================================


class ResourceNotFoundError(PromptOSError):
    """Raised when a requested record doesn't exist."""

    def __init__(self, resource_type: str, resource_id: UUID | str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found: {resource_id}")


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user doesn't exist."""

    def __init__(self, user_id: UUID) -> None:
        super().__init__("User", user_id)


class SpaceNotFoundError(ResourceNotFoundError):
    """Raised when a space doesn't exist or the caller cannot see it."""

    def __init__(self, space_id: UUID) -> None:
        super().__init__("Space", space_id)


class PromptNotFoundError(ResourceNotFoundError):
    """Raised when a prompt doesn't exist."""

    def __init__(self, prompt_id: UUID) -> None:
        super().__init__("Prompt", prompt_id)


class NotificationNotFoundError(ResourceNotFoundError):
    """Raised when a notification doesn't exist."""

    def __init__(self, notification_id: UUID) -> None:
        super().__init__("Notification", notification_id)


class InvalidJoinCodeError(ResourceNotFoundError):
    """Raised when no space matches a join code."""

    def __init__(self, join_code: str) -> None:
        self.join_code = join_code
        super().__init__("Space with join code", join_code)


# ============================================================================
# Not Authorized
# ============================================================================


class NotAuthorizedError(PromptOSError):
    """Raised when the caller lacks the relationship an action requires."""

    def __init__(self, user_id: UUID, action: str) -> None:
        self.user_id = user_id
        self.action = action
        super().__init__(f"User {user_id} is not authorized to {action}")


# ============================================================================
# Conflict
# ============================================================================


class ConflictError(PromptOSError):
    """Base class for state conflicts."""

    pass


class DuplicateSignalError(ConflictError):
    """Raised when a user already submitted a usage signal for a prompt today."""

    def __init__(self, prompt_id: UUID, user_id: UUID) -> None:
        self.prompt_id = prompt_id
        self.user_id = user_id
        super().__init__(
            f"Usage signal already submitted today for prompt {prompt_id} by user {user_id}"
        )


class AlreadyMemberError(ConflictError):
    """Raised when joining a space the user already belongs to."""

    def __init__(self, space_id: UUID, user_id: UUID) -> None:
        self.space_id = space_id
        self.user_id = user_id
        super().__init__(f"User {user_id} is already a member of space {space_id}")


class UserAlreadyExistsError(ConflictError):
    """Raised when registering an email that is already taken."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"User already exists: {email}")


# ============================================================================
# Invalid Input
# ============================================================================


class InvalidInputError(PromptOSError):
    """Base class for rejected input values."""

    pass


class InvalidRewardAmountError(InvalidInputError):
    """Raised when a reward amount is outside (0, max]."""

    def __init__(self, amount: int, maximum: int) -> None:
        self.amount = amount
        self.maximum = maximum
        super().__init__(f"Invalid reward amount: {amount} (must be between 1 and {maximum})")


class InvalidSignalError(InvalidInputError):
    """Raised when a usage signal kind or note is malformed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid usage signal: {message}")


# ============================================================================
# Exhausted
# ============================================================================


class DailyCreditLimitError(PromptOSError):
    """Raised when a user has no AI credits left for today."""

    def __init__(self, user_id: UUID, daily_limit: int) -> None:
        self.user_id = user_id
        self.daily_limit = daily_limit
        super().__init__(
            f"Daily AI limit reached ({daily_limit}/{daily_limit}). Try again tomorrow."
        )


# ============================================================================
# Authentication / Internal
# ============================================================================


class AuthenticationError(PromptOSError):
    """Raised when authentication fails (bad credentials, invalid token)."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Authentication failed: {message}")


class DataIntegrityError(PromptOSError):
    """Raised when data integrity constraint violated."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Data integrity error: {message}")

