"""
Request-scoped acting principal.

Workflow operations receive a ``Principal`` explicitly instead of reading a
shared role context. It is always built from the authenticated user row, so
the role it carries is the one stored in the database.
"""

from dataclasses import dataclass

from django.contrib.auth import get_user_model

from bizsuite.users.models import Role


@dataclass(frozen=True)
class Principal:
    id: int
    name: str
    email: str
    role: str

    def has_role(self, *roles) -> bool:
        return self.role in roles


def principal_for(user) -> Principal:
    if user is None or not getattr(user, "is_authenticated", False):
        raise ValueError("an authenticated user is required")
    return Principal(
        id=user.pk,
        name=getattr(user, "full_name", "") or user.email,
        email=user.email,
        role=getattr(user, "role", "") or Role.USER,
    )


def users_with_role(role):
    return get_user_model().objects.filter(role=role, is_active=True).order_by("id")
