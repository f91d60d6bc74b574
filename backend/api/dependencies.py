"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations on top of one shared
membership store.
"""

from typing import TYPE_CHECKING, Optional

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.store.interfaces import IMembershipStore
    from modules.quotas.interfaces import IQuotaService
    from modules.groups.interfaces import IGroupService
    from modules.help_requests.interfaces import IRequestLifecycleService
    from modules.notifications.interfaces import INotificationService
    from modules.users.interfaces import IUserService


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, store: "Optional[IMembershipStore]" = None) -> None:
        self._store = store
        self._quota_service: "Optional[IQuotaService]" = None
        self._group_service: "Optional[IGroupService]" = None
        self._request_service: "Optional[IRequestLifecycleService]" = None
        self._notification_service: "Optional[INotificationService]" = None
        self._user_service: "Optional[IUserService]" = None

    @property
    def store(self) -> "IMembershipStore":
        """Get the membership store shared by every service."""
        if self._store is None:
            from modules.store.factory import get_membership_store
            self._store = get_membership_store()
        return self._store

    @property
    def quotas(self) -> "IQuotaService":
        """Get the quota service instance."""
        if self._quota_service is None:
            from modules.quotas.service import QuotaService
            self._quota_service = QuotaService(self.store)
        return self._quota_service

    @property
    def notifications(self) -> "INotificationService":
        """Get the notification service instance."""
        if self._notification_service is None:
            from modules.notifications.service import NotificationService
            self._notification_service = NotificationService(self.store)
        return self._notification_service

    @property
    def groups(self) -> "IGroupService":
        """Get the group service instance."""
        if self._group_service is None:
            from modules.groups.service import GroupService
            self._group_service = GroupService(self.store, self.quotas)
        return self._group_service

    @property
    def requests(self) -> "IRequestLifecycleService":
        """Get the request lifecycle service instance."""
        if self._request_service is None:
            from modules.help_requests.service import RequestLifecycleService
            self._request_service = RequestLifecycleService(
                self.store,
                self.quotas,
                notifications=self.notifications,
            )
        return self._request_service

    @property
    def users(self) -> "IUserService":
        """Get the user service instance."""
        if self._user_service is None:
            from modules.users.service import UserService
            self._user_service = UserService(self.store)
        return self._user_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._store = None
        self._quota_service = None
        self._group_service = None
        self._request_service = None
        self._notification_service = None
        self._user_service = None


# Module-level container singleton
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_quota_service() -> "IQuotaService":
    """FastAPI dependency for quota service."""
    return get_container().quotas


def get_group_service() -> "IGroupService":
    """FastAPI dependency for group service."""
    return get_container().groups


def get_request_service() -> "IRequestLifecycleService":
    """FastAPI dependency for request lifecycle service."""
    return get_container().requests


def get_notification_service() -> "INotificationService":
    """FastAPI dependency for notification service."""
    return get_container().notifications


def get_user_service() -> "IUserService":
    """FastAPI dependency for user service."""
    return get_container().users
