"""
Users module exceptions.
"""

from shared.exceptions import NotFoundError, ValidationError


class UserNotFoundError(NotFoundError):
    """Raised when a user profile does not exist."""

    def __init__(self, user_id: str):
        super().__init__(
            "User not found",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class InvalidPhoneError(ValidationError):
    """Raised when a phone number does not look like one."""

    def __init__(self, phone: str):
        super().__init__(
            "Invalid phone number format",
            code="INVALID_PHONE",
            details={"phone": phone},
        )
