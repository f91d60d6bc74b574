"""
Quota module exceptions.
"""

from shared.exceptions import QuotaExceededError, AuthorizationError


class OpenRequestLimitError(QuotaExceededError):
    """Raised when a user already has as many open requests as allowed."""

    def __init__(self, limit: int, current: int):
        super().__init__(
            f"You have reached your limit of {limit} open requests. "
            f"You currently have {current} open requests.",
            limit_name="max_open_requests",
            limit=limit,
            current=current,
            code="OPEN_REQUEST_LIMIT",
        )


class GroupsCreatedLimitError(QuotaExceededError):
    """Raised when a user already owns as many groups as allowed."""

    def __init__(self, limit: int, current: int):
        super().__init__(
            f"You have reached your limit of {limit} groups. "
            f"You currently have {current} groups.",
            limit_name="max_groups_created",
            limit=limit,
            current=current,
            code="GROUPS_CREATED_LIMIT",
        )


class GroupsJoinedLimitError(QuotaExceededError):
    """Raised when a user already belongs to as many groups as allowed."""

    def __init__(self, limit: int, current: int):
        super().__init__(
            f"You have reached your limit of {limit} groups. "
            f"You are currently a member of {current} groups.",
            limit_name="max_groups_joined",
            limit=limit,
            current=current,
            code="GROUPS_JOINED_LIMIT",
        )


class LimitsAdminRequiredError(AuthorizationError):
    """Raised when a non-admin tries to change someone's limits."""

    def __init__(self, user_id: str):
        super().__init__(
            "Access denied: Admin privileges required",
            code="ADMIN_REQUIRED",
            details={"user_id": user_id},
        )
