"""Service layer for accounts, profiles and job requests."""

from .auth import AuthService
from .catalog import CatalogService
from .profile import ProfileService
from .recovery import PasswordRecoveryService
from .registration import RegistrationService
from .requests import RequestService

__all__ = [
    "AuthService",
    "CatalogService",
    "PasswordRecoveryService",
    "ProfileService",
    "RegistrationService",
    "RequestService",
]
