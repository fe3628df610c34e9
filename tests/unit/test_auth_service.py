"""
Unit tests for the auth service and auth error mapping.

Supabase clients are replaced by MagicMocks; the service runs SDK calls
through asyncio.to_thread, which works unchanged with mocks.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from ai_memo.core.config import settings
from ai_memo.schemas.auth import (
    MSG_INVALID_EMAIL,
    MSG_PASSWORD_NO_SPECIAL,
    MSG_PASSWORD_TOO_SHORT,
)
from ai_memo.services import auth as auth_service
from ai_memo.services.auth import (
    MSG_AUTH_REQUIRED,
    MSG_EMAIL_IN_USE,
    MSG_INVALID_CODE,
    MSG_LOGOUT_FAILED,
    MSG_ONBOARDING_FAILED,
    MSG_PASSWORD_REQUIRED,
    PROFILES_TABLE,
)
from ai_memo.services.auth_errors import (
    AUTH_ERROR_MESSAGES,
    get_auth_error_message,
    parse_auth_error,
)

EMAIL = "writer@naver.com"
PASSWORD = "memo-pass!1"


class FakeAuthError(Exception):
    """Shape of supabase's AuthApiError (message, code, status)."""

    def __init__(self, message: str, code: str | None = None, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


def _session_response(user_id: str = "user-1", with_session: bool = True):
    session = (
        SimpleNamespace(access_token="access", refresh_token="refresh", expires_at=1_900_000_000)
        if with_session
        else None
    )
    return SimpleNamespace(user=SimpleNamespace(id=user_id), session=session)


@pytest.fixture
def auth_client():
    client = MagicMock()
    with patch("ai_memo.services.auth.create_auth_client", return_value=client):
        yield client


@pytest.fixture
def admin_client():
    admin = MagicMock()
    admin.auth.admin.list_users.return_value = []
    with patch("ai_memo.services.auth.get_supabase_admin_client", return_value=admin):
        yield admin


class TestSignUp:
    @pytest.mark.asyncio
    async def test_field_errors(self, auth_client, admin_client):
        result = await auth_service.sign_up_with_email("not-an-email", "short")

        assert result.success is False
        assert result.field_errors["email"] == [MSG_INVALID_EMAIL]
        assert result.field_errors["password"] == [MSG_PASSWORD_TOO_SHORT]
        auth_client.auth.sign_up.assert_not_called()

    @pytest.mark.asyncio
    async def test_password_needs_special_character(self, auth_client, admin_client):
        result = await auth_service.sign_up_with_email(EMAIL, "longpassword1")

        assert result.field_errors == {"password": [MSG_PASSWORD_NO_SPECIAL]}
        assert result.error == MSG_PASSWORD_NO_SPECIAL

    @pytest.mark.asyncio
    async def test_duplicate_detected_by_admin_lookup(self, auth_client, admin_client):
        admin_client.auth.admin.list_users.return_value = [SimpleNamespace(email=EMAIL)]

        result = await auth_service.sign_up_with_email(EMAIL, PASSWORD)

        assert result.success is False
        assert result.error == MSG_EMAIL_IN_USE
        auth_client.auth.sign_up.assert_not_called()

    @pytest.mark.asyncio
    async def test_pending_email_verification(self, auth_client):
        auth_client.auth.sign_up.return_value = _session_response(with_session=False)

        with patch(
            "ai_memo.services.auth.get_supabase_admin_client",
            side_effect=RuntimeError("SUPABASE_SERVICE_ROLE_KEY is not configured"),
        ):
            result = await auth_service.sign_up_with_email(EMAIL, PASSWORD)

        assert result.success is True
        assert result.requires_email_verification is True
        assert result.session is None
        assert result.user_id == "user-1"
        payload = auth_client.auth.sign_up.call_args.args[0]
        assert payload["email"] == EMAIL
        assert payload["options"]["email_redirect_to"] == f"{settings.SITE_URL}/auth/callback"

    @pytest.mark.asyncio
    async def test_provider_duplicate_error(self, auth_client, admin_client):
        auth_client.auth.sign_up.side_effect = FakeAuthError("User already registered")

        result = await auth_service.sign_up_with_email(EMAIL, PASSWORD)

        assert result.error == MSG_EMAIL_IN_USE

    @pytest.mark.asyncio
    async def test_provider_error_keeps_detail(self, auth_client, admin_client):
        auth_client.auth.sign_up.side_effect = FakeAuthError("Signups not allowed", status=400)

        result = await auth_service.sign_up_with_email(EMAIL, PASSWORD)

        assert result.error == "회원가입에 실패했습니다 (Signups not allowed)"


class TestSignIn:
    @pytest.mark.asyncio
    async def test_missing_fields(self, auth_client):
        result = await auth_service.sign_in_with_email("", "")

        assert result.field_errors == {
            "email": [MSG_INVALID_EMAIL],
            "password": [MSG_PASSWORD_REQUIRED],
        }
        auth_client.auth.sign_in_with_password.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_returns_session(self, auth_client):
        auth_client.auth.sign_in_with_password.return_value = _session_response()

        result = await auth_service.sign_in_with_email(f" {EMAIL} ", PASSWORD)

        assert result.success is True
        assert result.session.access_token == "access"
        assert result.user_id == "user-1"
        auth_client.auth.sign_in_with_password.assert_called_once_with(
            {"email": EMAIL, "password": PASSWORD}
        )

    @pytest.mark.asyncio
    async def test_invalid_credentials(self, auth_client):
        auth_client.auth.sign_in_with_password.side_effect = FakeAuthError(
            "Invalid login credentials", code="invalid_credentials", status=400
        )

        result = await auth_service.sign_in_with_email(EMAIL, "wrong")

        assert result.success is False
        assert result.error == AUTH_ERROR_MESSAGES["invalid_credentials"]


class TestSignOut:
    @pytest.mark.asyncio
    async def test_without_token_is_noop(self, admin_client):
        result = await auth_service.sign_out(None)

        assert result.success is True
        admin_client.auth.admin.sign_out.assert_not_called()

    @pytest.mark.asyncio
    async def test_global_scope(self, admin_client):
        result = await auth_service.sign_out("jwt", "global")

        assert result.success is True
        admin_client.auth.admin.sign_out.assert_called_once_with("jwt", "global")

    @pytest.mark.asyncio
    async def test_failure(self, admin_client):
        admin_client.auth.admin.sign_out.side_effect = FakeAuthError("boom")

        result = await auth_service.sign_out("jwt")

        assert result.error == MSG_LOGOUT_FAILED


class TestPasswordReset:
    @pytest.mark.asyncio
    async def test_invalid_email(self, auth_client):
        result = await auth_service.send_password_reset("nope")

        assert result.success is False
        assert result.field_errors == {"email": [MSG_INVALID_EMAIL]}

    @pytest.mark.asyncio
    async def test_sends_reset_link(self, auth_client):
        result = await auth_service.send_password_reset(EMAIL)

        assert result.success is True
        auth_client.auth.reset_password_for_email.assert_called_once_with(
            EMAIL, {"redirect_to": f"{settings.SITE_URL}/auth/reset-password"}
        )

    @pytest.mark.asyncio
    async def test_update_requires_user(self, admin_client):
        result = await auth_service.update_password(None, PASSWORD)
        assert result.error == MSG_AUTH_REQUIRED

    @pytest.mark.asyncio
    async def test_update_validates_rules(self, user, admin_client):
        result = await auth_service.update_password(user, "short")

        assert result.field_errors == {"password": [MSG_PASSWORD_TOO_SHORT]}
        admin_client.auth.admin.update_user_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_password(self, user, admin_client):
        result = await auth_service.update_password(user, PASSWORD)

        assert result.success is True
        admin_client.auth.admin.update_user_by_id.assert_called_once_with(
            user.id, {"password": PASSWORD}
        )


class TestOnboardingAndCodeExchange:
    @pytest.mark.asyncio
    async def test_onboarding_updates_profile(self, user, admin_client):
        result = await auth_service.complete_onboarding(user)

        assert result.success is True
        admin_client.table.assert_called_once_with(PROFILES_TABLE)
        values = admin_client.table.return_value.update.call_args.args[0]
        assert values["onboarding_completed"] is True
        assert "onboarding_completed_at" in values
        admin_client.table.return_value.update.return_value.eq.assert_called_once_with(
            "user_id", user.id
        )

    @pytest.mark.asyncio
    async def test_onboarding_failure(self, user, admin_client):
        query = admin_client.table.return_value.update.return_value.eq.return_value
        query.execute.side_effect = RuntimeError("permission denied")

        result = await auth_service.complete_onboarding(user)

        assert result.error == MSG_ONBOARDING_FAILED

    @pytest.mark.asyncio
    async def test_exchange_without_code(self, auth_client):
        result = await auth_service.exchange_code(None)
        assert result.error == MSG_INVALID_CODE

    @pytest.mark.asyncio
    async def test_exchange_code(self, auth_client):
        auth_client.auth.exchange_code_for_session.return_value = _session_response()

        result = await auth_service.exchange_code("pkce-code")

        assert result.success is True
        assert result.session.refresh_token == "refresh"
        auth_client.auth.exchange_code_for_session.assert_called_once_with(
            {"auth_code": "pkce-code"}
        )


class TestAuthErrorMessages:
    def test_known_and_unknown_codes(self):
        assert get_auth_error_message("weak_password") == AUTH_ERROR_MESSAGES["weak_password"]
        assert get_auth_error_message("no_such_code") == AUTH_ERROR_MESSAGES["unknown_error"]
        assert get_auth_error_message(None) == AUTH_ERROR_MESSAGES["unknown_error"]

    @pytest.mark.parametrize(
        "message, key",
        [
            ("Invalid login credentials", "invalid_credentials"),
            ("User already registered", "email_exists"),
            ("Email not confirmed", "email_not_confirmed"),
            ("Email logins are disabled", "email_provider_disabled"),
            ("Password is too weak", "weak_password"),
            ("Unable to validate email address: invalid format", "invalid_email"),
            ("Session expired", "session_expired"),
            ("Network request failed", "network_error"),
            ("Gateway timeout", "timeout"),
            ("Something else", "unknown_error"),
        ],
    )
    def test_message_matching(self, message, key):
        assert parse_auth_error(FakeAuthError(message)) == AUTH_ERROR_MESSAGES[key]

    def test_code_takes_precedence(self):
        error = FakeAuthError("Invalid login credentials", code="email_not_confirmed")
        assert parse_auth_error(error) == AUTH_ERROR_MESSAGES["email_not_confirmed"]
