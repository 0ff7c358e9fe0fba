"""
Staff login and account management.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import bcrypt
from pydantic import ValidationError as PydanticValidationError

from ..crud.hooks import validate_with_schema
from ..database.store import EntityStore
from ..exceptions import AuthenticationException, AuthFailureReason
from ..models import User
from ..schemas import LoginRequest, UserCreate, UserDTO
from ..utils.config import ClinicSettings
from ..utils.datetime_utils import format_calendar_date
from .gate import AccessGate, Principal

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with a fresh bcrypt salt."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def project_user(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        created_at=format_calendar_date(user.created_at),
    )


@dataclass
class LoginResult:
    """A signed token and the account it was issued for."""

    token: str
    user: UserDTO


class CredentialService:
    """Login, current-user lookup and staff registration."""

    def __init__(
        self,
        store: EntityStore,
        gate: AccessGate,
        settings: Optional[ClinicSettings] = None,
    ):
        self.store = store
        self.gate = gate
        self.settings = settings or gate.settings
        self._unknown_user_hash: Optional[str] = None

    def _check_unknown_user(self, password: str) -> None:
        # Unknown emails pay the same bcrypt cost as real accounts
        if self._unknown_user_hash is None:
            self._unknown_user_hash = hash_password(
                secrets.token_urlsafe(16), self.settings.bcrypt_rounds
            )
        verify_password(password, self._unknown_user_hash)

    async def login(self, email: Any, password: Any) -> LoginResult:
        """
        Exchange an email and password for an access token.

        Raises:
            AuthenticationException: ``invalid_login`` for an unknown email,
                a wrong password or a malformed payload alike
        """
        try:
            credentials = LoginRequest.model_validate(
                {"email": email or "", "password": password or ""}
            )
        except PydanticValidationError:
            logger.info("Rejected malformed login payload")
            raise AuthenticationException(AuthFailureReason.INVALID_LOGIN)
        normalized = credentials.email.strip().lower()
        if not normalized or not credentials.password:
            raise AuthenticationException(AuthFailureReason.INVALID_LOGIN)

        user = await self.store.find_first(User, [User.email == normalized])
        if user is None:
            self._check_unknown_user(credentials.password)
        if user is None or not verify_password(credentials.password, user.password_hash):
            logger.info("Failed login attempt")
            raise AuthenticationException(AuthFailureReason.INVALID_LOGIN)

        token = self.gate.issue_token(user.id, user.email, user.role)
        logger.info(f"User {user.id} logged in")
        return LoginResult(token=token, user=project_user(user))

    async def current_user(self, principal: Principal) -> Optional[UserDTO]:
        """Fresh account data for a principal; None if the account is gone."""
        user = await self.store.find_one(User, principal.user_id)
        if user is None:
            return None
        return project_user(user)

    async def register_user(self, data: Mapping[str, Any]) -> UserDTO:
        """
        Create a staff account with a hashed password.

        Raises:
            ValidationException: If the email, password or name is invalid
            DuplicateRecordException: If the email is already registered
        """
        values = validate_with_schema(UserCreate, data)
        password = values.pop("password")
        values["password_hash"] = hash_password(password, self.settings.bcrypt_rounds)
        user = await self.store.create(User, values)
        logger.info(f"Registered user {user.id}")
        return project_user(user)
