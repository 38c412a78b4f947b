"""Unit tests for the infrastructure layer."""

import os
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from config import EmailSettings, OAuthProviderSettings
from infrastructure.email.protocol import (
    EmailAuthError,
    EmailDeliveryError,
    EmailNotConfiguredError,
)
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.oauth_clients import (
    GOOGLE,
    extract_user_info_from_google,
    fetch_google_user_info,
    init_oauth,
)
from infrastructure.storage.local_storage import LocalFileStorage


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    async def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = await client.post("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_post_propagates_exception(self, mocker):
        client = HttpClient()
        mocker.patch.object(client._client, "post", side_effect=Exception("timeout"))
        with pytest.raises(Exception, match="timeout"):
            await client.post("http://example.com")
        await client.aclose()

    async def test_context_manager(self):
        async with HttpClient() as client:
            assert client is not None


# ── ZeptoMailProvider ─────────────────────────────────────────────────────────


class TestZeptoMailProvider:
    def _make(self, token="test-token"):
        settings = EmailSettings(
            zepto_api_token=token,
            zepto_from_email="noreply@agent-service.local",
            zepto_from_name="Agent Service",
        )
        http = MagicMock()
        # Patch template rendering so tests don't need real template files
        jinja = MagicMock()
        jinja.get_template.return_value.render.return_value = "<html>test</html>"
        provider = ZeptoMailProvider(settings=settings, http_client=http)
        provider._jinja = jinja
        return provider, http

    async def test_send_verification_makes_post(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=201))
        await provider.send_verification_email("user@example.com", "Alice", "4821")
        http.post.assert_awaited_once()
        _, kwargs = http.post.call_args
        assert kwargs["json"]["to"][0]["email_address"]["address"] == "user@example.com"
        assert "4821" in kwargs["json"]["textbody"]

    async def test_template_gets_code_and_expiry(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        await provider.send_verification_email("u@e.com", "Alice", "4821")
        render = provider._jinja.get_template.return_value.render
        assert render.call_args.kwargs["otp_code"] == "4821"
        assert render.call_args.kwargs["expires_minutes"] == 5

    async def test_raises_not_configured_when_token_empty(self):
        provider, http = self._make(token="")
        http.post = AsyncMock()
        with pytest.raises(EmailNotConfiguredError) as exc:
            await provider.send_verification_email("u@e.com", None, "1234")
        assert exc.value.kind == "not_configured"
        http.post.assert_not_awaited()

    @pytest.mark.parametrize("status", [401, 403])
    async def test_raises_auth_error_on_rejected_token(self, status):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=status, text="denied"))
        with pytest.raises(EmailAuthError) as exc:
            await provider.send_verification_email("u@e.com", None, "1234")
        assert exc.value.kind == "auth"
        assert exc.value.status_code == status

    async def test_raises_delivery_error_on_non_2xx(self):
        provider, http = self._make()
        http.post = AsyncMock(
            return_value=MagicMock(status_code=422, text="Unprocessable")
        )
        with pytest.raises(EmailDeliveryError) as exc:
            await provider.send_verification_email("u@e.com", None, "1234")
        assert exc.value.kind == "transport"

    async def test_raises_delivery_error_on_transport_failure(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(EmailDeliveryError, match="refused"):
            await provider.send_verification_email("u@e.com", None, "1234")

    async def test_auth_header_prepends_prefix(self):
        provider, http = self._make(token="rawtoken")
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        await provider.send_verification_email("u@e.com", "Alice", "1234")
        _, kwargs = http.post.call_args
        assert kwargs["headers"]["Authorization"] == "Zoho-enczapikey rawtoken"

    async def test_auth_header_not_double_prefixed(self):
        provider, http = self._make(token="Zoho-enczapikey alreadyprefixed")
        http.post = AsyncMock(return_value=MagicMock(status_code=201))
        await provider.send_verification_email("u@e.com", None, "1234")
        _, kwargs = http.post.call_args
        assert kwargs["headers"]["Authorization"].count("Zoho-enczapikey") == 1

    async def test_real_template_renders_code(self):
        settings = EmailSettings(zepto_api_token="t")
        http = MagicMock()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        provider = ZeptoMailProvider(settings=settings, http_client=http)
        await provider.send_verification_email("u@e.com", "Alice", "7302")
        _, kwargs = http.post.call_args
        assert "7302" in kwargs["json"]["htmlbody"]


# ── LocalFileStorage ──────────────────────────────────────────────────────────


class TestLocalFileStorage:
    async def test_save_writes_file_and_returns_reference(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        ref = await storage.save("agents", "face.png", b"\x89PNG")
        assert ref.startswith("/uploads/agents/")
        assert ref.endswith("-face.png")
        on_disk = os.path.join(tmp_path, "agents", ref.rsplit("/", 1)[1])
        with open(on_disk, "rb") as f:
            assert f.read() == b"\x89PNG"

    async def test_save_sanitizes_filename(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        ref = await storage.save("agents", "../../evil.png", b"x")
        assert ".." not in ref
        assert ref.endswith("-evil.png")

    async def test_delete_removes_file(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        ref = await storage.save("agents", "a.png", b"x")
        assert await storage.delete(ref) is True
        assert os.listdir(os.path.join(tmp_path, "agents")) == []

    async def test_delete_missing_file_is_best_effort(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        assert await storage.delete("/uploads/agents/nope.png") is False

    @pytest.mark.parametrize(
        "reference", ["/etc/passwd", "/uploads/../../etc/passwd", "relative.png"]
    )
    async def test_delete_refuses_outside_upload_dir(self, tmp_path, reference):
        storage = LocalFileStorage(str(tmp_path))
        assert await storage.delete(reference) is False


# ── OAuth utilities ───────────────────────────────────────────────────────────


class TestInitOAuth:
    def test_returns_none_without_credentials(self):
        assert init_oauth(OAuthProviderSettings()) is None

    def test_registers_google(self):
        settings = OAuthProviderSettings(
            google_oauth_client_id="cid", google_oauth_client_secret="secret"
        )
        oauth = init_oauth(settings)
        assert oauth is not None
        assert oauth.create_client(GOOGLE) is not None


class TestExtractUserInfo:
    def test_google_extraction(self):
        userinfo = {
            "sub": "123",
            "email": "User@Google.COM",
            "email_verified": True,
            "name": "Test User",
            "picture": "https://example.com/pic.jpg",
        }
        result = extract_user_info_from_google(userinfo)
        assert result["provider_user_id"] == "123"
        assert result["email"] == "user@google.com"
        assert result["email_verified"] is True
        assert result["picture"] == "https://example.com/pic.jpg"

    def test_missing_fields_default_empty(self):
        result = extract_user_info_from_google({"sub": "1"})
        assert result["email"] == ""
        assert result["email_verified"] is False
        assert result["name"] == ""

    async def test_fetch_prefers_id_token_userinfo(self):
        client = MagicMock()
        client.userinfo = AsyncMock()
        token = {"userinfo": {"sub": "9", "email": "a@b.com", "email_verified": True}}
        result = await fetch_google_user_info(client, token)
        assert result["provider_user_id"] == "9"
        client.userinfo.assert_not_awaited()

    async def test_fetch_falls_back_to_userinfo_endpoint(self):
        client = MagicMock()
        client.userinfo = AsyncMock(return_value={"sub": "7", "email": "c@d.com"})
        result = await fetch_google_user_info(client, {"access_token": "t"})
        assert result["email"] == "c@d.com"
        client.userinfo.assert_awaited_once()
