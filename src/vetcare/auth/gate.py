"""
Bearer-token access gate.

Tokens are HS256 JWTs issued with PyJWT carrying the user id (``sub``),
email and role, and expiring after ``ClinicSettings.jwt_expiry_hours``.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

import jwt

from ..exceptions import AuthenticationException, AuthFailureReason
from ..utils.config import ClinicSettings
from ..utils.datetime_utils import get_current_utc

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Principal:
    """The authenticated caller behind a bearer token."""

    user_id: int
    email: str
    role: str


class AccessGate:
    """Issues and verifies access tokens."""

    def __init__(self, settings: Optional[ClinicSettings] = None):
        self.settings = settings or ClinicSettings()

    def issue_token(self, user_id: int, email: str, role: str) -> str:
        """
        Sign a token for a user.

        Args:
            user_id: Id stored as the ``sub`` claim
            email: Login email
            role: Staff role

        Returns:
            Encoded JWT
        """
        now = get_current_utc()
        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "iat": now,
            "exp": now + timedelta(hours=self.settings.jwt_expiry_hours),
        }
        return jwt.encode(
            payload, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm
        )

    def decode_token(self, token: str) -> Principal:
        """
        Verify a token's signature and expiry.

        Raises:
            AuthenticationException: With reason ``invalid_credentials``
        """
        try:
            claims = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
                options={"require": ["sub", "exp"]},
            )
            return Principal(
                user_id=int(claims["sub"]),
                email=claims.get("email", ""),
                role=claims.get("role", ""),
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired access token")
            raise AuthenticationException(AuthFailureReason.INVALID_CREDENTIALS)
        except (jwt.InvalidTokenError, ValueError) as e:
            logger.info(f"Rejected invalid access token: {e}")
            raise AuthenticationException(AuthFailureReason.INVALID_CREDENTIALS)

    def authenticate(self, authorization: Optional[str]) -> Principal:
        """
        Resolve an ``Authorization`` header to a principal.

        Args:
            authorization: Header value, expected as ``Bearer <token>``

        Raises:
            AuthenticationException: ``missing_credentials`` when the header
                is absent or malformed, ``invalid_credentials`` when the
                token does not verify
        """
        header = (authorization or "").strip()
        if not header.lower().startswith(BEARER_PREFIX):
            raise AuthenticationException(AuthFailureReason.MISSING_CREDENTIALS)
        token = header[len(BEARER_PREFIX):].strip()
        if not token:
            raise AuthenticationException(AuthFailureReason.MISSING_CREDENTIALS)
        return self.decode_token(token)
