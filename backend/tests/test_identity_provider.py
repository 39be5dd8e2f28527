"""
Tests for the Firebase identity adapter; the Admin SDK calls are patched out.
"""
import pytest
from unittest.mock import MagicMock, patch
from firebase_admin import auth
from google.auth.exceptions import DefaultCredentialsError, RefreshError

from app.errors import ConflictError, UpstreamIdentityFailure
from app.services.identity_provider import FirebaseIdentityProvider, IdentityTokenError


@pytest.fixture
def provider():
    provider = FirebaseIdentityProvider(credentials_path=None, project_id="demo")
    provider._app = MagicMock(name="firebase-app")
    return provider


class TestCreateIdentity:

    @pytest.mark.asyncio
    async def test_returns_uid(self, provider):
        with patch.object(auth, "create_user", return_value=MagicMock(uid="fb-123")) as create_user:
            uid = await provider.create_identity("alice@x.io", "Str0ngPass", "Alice", "+15550001111")

        assert uid == "fb-123"
        kwargs = create_user.call_args.kwargs
        assert kwargs["email"] == "alice@x.io"
        assert kwargs["phone_number"] == "+15550001111"
        assert kwargs["display_name"] == "Alice"

    @pytest.mark.asyncio
    async def test_email_taken_is_conflict(self, provider):
        error = auth.EmailAlreadyExistsError("exists", None, None)
        with patch.object(auth, "create_user", side_effect=error):
            with pytest.raises(ConflictError) as exc_info:
                await provider.create_identity("alice@x.io", "Str0ngPass", "Alice", "+15550001111")
        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    async def test_phone_taken_is_conflict(self, provider):
        error = auth.PhoneNumberAlreadyExistsError("exists", None, None)
        with patch.object(auth, "create_user", side_effect=error):
            with pytest.raises(ConflictError) as exc_info:
                await provider.create_identity("alice@x.io", "Str0ngPass", "Alice", "+15550001111")
        assert exc_info.value.field == "mobile_no"

    @pytest.mark.asyncio
    async def test_other_failure_is_upstream(self, provider):
        with patch.object(auth, "create_user", side_effect=ValueError("bad phone")):
            with pytest.raises(UpstreamIdentityFailure):
                await provider.create_identity("alice@x.io", "Str0ngPass", "Alice", "+1")

    @pytest.mark.asyncio
    async def test_credential_failure_is_upstream(self, provider):
        with patch.object(auth, "create_user", side_effect=DefaultCredentialsError("no credentials")):
            with pytest.raises(UpstreamIdentityFailure):
                await provider.create_identity("alice@x.io", "Str0ngPass", "Alice", "+15550001111")


class TestDeleteIdentity:

    @pytest.mark.asyncio
    async def test_deletes_by_uid(self, provider):
        with patch.object(auth, "delete_user") as delete_user:
            await provider.delete_identity("fb-123")
        assert delete_user.call_args.args == ("fb-123",)

    @pytest.mark.asyncio
    async def test_already_gone_is_ignored(self, provider):
        with patch.object(auth, "delete_user", side_effect=auth.UserNotFoundError("gone", None, None)):
            await provider.delete_identity("fb-123")

    @pytest.mark.asyncio
    async def test_provider_error(self, provider):
        with patch.object(auth, "delete_user", side_effect=ValueError("boom")):
            with pytest.raises(UpstreamIdentityFailure):
                await provider.delete_identity("fb-123")


class TestVerifyToken:

    @pytest.mark.asyncio
    async def test_decodes_claims(self, provider):
        claims = {"uid": "fb-123", "email": "alice@x.io", "email_verified": True, "phone_number": "+15550001111"}
        with patch.object(auth, "verify_id_token", return_value=claims):
            verified = await provider.verify_token("id-token")

        assert verified.uid == "fb-123"
        assert verified.email == "alice@x.io"
        assert verified.email_verified is True
        assert verified.phone_number == "+15550001111"

    @pytest.mark.asyncio
    async def test_rejected_token(self, provider):
        with patch.object(auth, "verify_id_token", side_effect=ValueError("malformed")):
            with pytest.raises(IdentityTokenError):
                await provider.verify_token("garbage")


class TestEmailVerification:

    @pytest.mark.asyncio
    async def test_generates_link_and_sends(self, provider):
        with patch.object(auth, "generate_email_verification_link", return_value="https://link"), \
                patch("app.services.identity_provider.send_verification_email", return_value=True) as send:
            assert await provider.send_email_verification("alice@x.io") is True
        send.assert_called_once_with("alice@x.io", "https://link")


class TestUpdatePhone:

    @pytest.mark.asyncio
    async def test_updates_phone_number(self, provider):
        with patch.object(auth, "update_user") as update_user:
            await provider.update_phone("fb-123", "+15550007777")
        assert update_user.call_args.args == ("fb-123",)
        assert update_user.call_args.kwargs["phone_number"] == "+15550007777"

    @pytest.mark.asyncio
    async def test_phone_taken_is_conflict(self, provider):
        error = auth.PhoneNumberAlreadyExistsError("exists", None, None)
        with patch.object(auth, "update_user", side_effect=error):
            with pytest.raises(ConflictError) as exc_info:
                await provider.update_phone("fb-123", "+15550007777")
        assert exc_info.value.field == "mobile_no"

    @pytest.mark.asyncio
    async def test_expired_service_credentials(self, provider):
        with patch.object(auth, "update_user", side_effect=RefreshError("token refresh failed")):
            with pytest.raises(UpstreamIdentityFailure):
                await provider.update_phone("fb-123", "+15550007777")
