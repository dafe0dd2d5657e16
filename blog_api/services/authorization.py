"""
Role policies consulted when a user asks for a role at registration.
"""

from typing import Iterable, Protocol

from blog_api.models.user import UserRole


class RolePolicy(Protocol):
    """Decides whether an email may hold a role."""

    def is_authorized_for_role(self, email: str, role: UserRole) -> bool: ...


class AdminAllowlistPolicy:
    """Anyone may be a user; only allowlisted emails may be admins."""

    def __init__(self, admin_emails: Iterable[str]) -> None:
        self.admin_emails = frozenset(email.strip().lower() for email in admin_emails)

    def is_authorized_for_role(self, email: str, role: UserRole) -> bool:
        if role == UserRole.USER:
            return True
        if role == UserRole.ADMIN:
            return email.strip().lower() in self.admin_emails
        return False
