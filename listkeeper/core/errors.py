"""Exceptions shared by the security, persistence and service layers."""


class ConfigurationError(RuntimeError):
    """Required secret or setting is missing or unusable. Fatal at startup."""


class UserServiceError(Exception):
    """Base for user service failures that map to a client error."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UserNotFoundError(UserServiceError):
    """No user with the requested identifier."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class UserConflictError(UserServiceError):
    """Username or email already belongs to another user."""
