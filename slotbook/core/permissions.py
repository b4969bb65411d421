"""Caller roles."""

from enum import Enum


class UserRole(str, Enum):
    """Roles carried in the access token."""

    USER = "USER"
    ADMIN = "ADMIN"
