"""
Tests for bearer tokens, password hashing and staff login.
"""

from dataclasses import replace
from datetime import timedelta

import jwt
import pytest

from vetcare.api import RequestBoundary
from vetcare.auth import credentials as credentials_module
from vetcare.auth import (
    AccessGate,
    CredentialService,
    Principal,
    hash_password,
    verify_password,
)
from vetcare.exceptions import (
    AuthenticationException,
    AuthFailureReason,
    DuplicateRecordException,
    ValidationException,
)
from vetcare.utils.datetime_utils import get_current_utc


@pytest.fixture
def gate(settings):
    return AccessGate(settings)


@pytest.fixture
def credentials(store, gate, settings):
    return CredentialService(store, gate, settings)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse", rounds=4)

        assert hashed != "correct horse"
        assert hashed.startswith("$2")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_salted(self):
        assert hash_password("secret123", rounds=4) != hash_password("secret123", rounds=4)

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("secret123", "not-a-bcrypt-hash") is False


class TestAccessGate:
    def test_issue_and_authenticate(self, gate):
        token = gate.issue_token(7, "desk@example.com", "admin")

        principal = gate.authenticate(f"Bearer {token}")

        assert principal == Principal(user_id=7, email="desk@example.com", role="admin")

    def test_scheme_is_case_insensitive(self, gate):
        token = gate.issue_token(1, "a@example.com", "admin")

        assert gate.authenticate(f"bearer {token}").user_id == 1

    def test_token_claims(self, gate, settings):
        token = gate.issue_token(3, "vet@example.com", "vet")

        claims = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])

        assert claims["sub"] == "3"
        assert claims["exp"] - claims["iat"] == settings.jwt_expiry_hours * 3600

    @pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer ", "Basic dXNlcg=="])
    def test_missing_credentials(self, gate, header):
        with pytest.raises(AuthenticationException) as exc_info:
            gate.authenticate(header)

        assert exc_info.value.reason is AuthFailureReason.MISSING_CREDENTIALS
        assert exc_info.value.status_hint == 401

    def test_garbage_token(self, gate):
        with pytest.raises(AuthenticationException) as exc_info:
            gate.authenticate("Bearer not.a.jwt")

        assert exc_info.value.reason is AuthFailureReason.INVALID_CREDENTIALS

    def test_wrong_secret(self, gate, settings):
        other = AccessGate(replace(settings, jwt_secret="another-secret-of-sufficient-length"))
        token = other.issue_token(1, "a@example.com", "admin")

        with pytest.raises(AuthenticationException) as exc_info:
            gate.authenticate(f"Bearer {token}")

        assert exc_info.value.reason is AuthFailureReason.INVALID_CREDENTIALS

    def test_expired_token(self, gate, settings):
        past = get_current_utc() - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "1", "iat": past, "exp": past + timedelta(hours=1)},
            settings.jwt_secret,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationException) as exc_info:
            gate.decode_token(token)

        assert exc_info.value.reason is AuthFailureReason.INVALID_CREDENTIALS

    def test_token_without_subject(self, gate, settings):
        token = jwt.encode(
            {"exp": get_current_utc() + timedelta(hours=1)},
            settings.jwt_secret,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationException):
            gate.decode_token(token)


@pytest.mark.integration
class TestCredentialService:
    @pytest.mark.asyncio
    async def test_login(self, credentials, gate, store, user_factory):
        user = await user_factory.create(
            store, hash_password("s3cret-pass", rounds=4), email="desk@example.com"
        )

        result = await credentials.login("  Desk@Example.com ", "s3cret-pass")

        assert result.user.id == user.id
        assert result.user.email == "desk@example.com"
        assert gate.decode_token(result.token).user_id == user.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email, password",
        [
            ("desk@example.com", "wrong-pass"),
            ("nobody@example.com", "s3cret-pass"),
            ("", ""),
            (None, None),
            (12345, "s3cret-pass"),
            ("desk@example.com", {"value": "s3cret-pass"}),
            (["desk@example.com"], "s3cret-pass"),
        ],
    )
    async def test_login_failures_are_generic(
        self, credentials, store, user_factory, email, password
    ):
        await user_factory.create(
            store, hash_password("s3cret-pass", rounds=4), email="desk@example.com"
        )

        with pytest.raises(AuthenticationException) as exc_info:
            await credentials.login(email, password)

        assert exc_info.value.reason is AuthFailureReason.INVALID_LOGIN
        assert exc_info.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_non_string_login_is_unauthorized_at_boundary(self, credentials, gate):
        boundary = RequestBoundary(gate)

        body = await boundary.respond(lambda: credentials.login(12345, "s3cret-pass"))

        assert body == {
            "ok": False,
            "error": "Invalid email or password",
            "statusHint": 401,
        }

    @pytest.mark.asyncio
    async def test_unknown_email_still_checks_a_hash(self, credentials, monkeypatch):
        checked = []
        real_verify = credentials_module.verify_password

        def recording_verify(password, password_hash):
            checked.append(password_hash)
            return real_verify(password, password_hash)

        monkeypatch.setattr(credentials_module, "verify_password", recording_verify)

        for _ in range(2):
            with pytest.raises(AuthenticationException):
                await credentials.login("nobody@example.com", "s3cret-pass")

        assert len(checked) == 2
        assert checked[0] == checked[1]
        assert checked[0].startswith("$2")

    @pytest.mark.asyncio
    async def test_current_user(self, credentials, store, user_factory):
        user = await user_factory.create(store, hash_password("s3cret-pass", rounds=4))

        found = await credentials.current_user(Principal(user.id, user.email, user.role))
        missing = await credentials.current_user(Principal(999, "x@example.com", "admin"))

        assert found.email == user.email
        assert missing is None

    @pytest.mark.asyncio
    async def test_register_user_hashes_password(self, credentials, store):
        registered = await credentials.register_user(
            {"email": "New@Example.com", "password": "longenough", "name": "Reception"}
        )

        assert registered.email == "new@example.com"
        assert registered.role == "admin"
        result = await credentials.login("new@example.com", "longenough")
        assert result.user.id == registered.id

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, credentials):
        payload = {"email": "dup@example.com", "password": "longenough", "name": "A"}
        await credentials.register_user(payload)

        with pytest.raises(DuplicateRecordException):
            await credentials.register_user(payload)

    @pytest.mark.asyncio
    async def test_register_short_password(self, credentials):
        with pytest.raises(ValidationException) as exc_info:
            await credentials.register_user(
                {"email": "a@example.com", "password": "short", "name": "A"}
            )

        assert "password" in exc_info.value.validation_errors
