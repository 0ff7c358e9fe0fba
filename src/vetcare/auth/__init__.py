"""
Access control: bearer tokens and staff credentials.
"""

from .credentials import (
    CredentialService,
    LoginResult,
    hash_password,
    project_user,
    verify_password,
)
from .gate import AccessGate, Principal

__all__ = [
    "AccessGate",
    "Principal",
    "CredentialService",
    "LoginResult",
    "hash_password",
    "verify_password",
    "project_user",
]
