"""Tests for reCAPTCHA verification."""

import httpx
import pytest

from core.integrations import recaptcha as recaptcha_module
from core.integrations.recaptcha import RecaptchaVerifier

VERIFY_URL = "https://recaptcha.test/siteverify"


@pytest.fixture
def mock_transport(monkeypatch):
    """Route the verifier's httpx client through a MockTransport."""
    state = {"handler": None, "requests": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return state["handler"](request)

    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(recaptcha_module.httpx, "AsyncClient", client_factory)
    return state


class TestRecaptchaVerifier:
    @pytest.mark.asyncio
    async def test_disabled_without_secret(self, mock_transport):
        verifier = RecaptchaVerifier(secret_key="")

        assert verifier.enabled is False
        assert await verifier.verify("anything") is True
        assert mock_transport["requests"] == []

    @pytest.mark.asyncio
    async def test_valid_token(self, mock_transport):
        mock_transport["handler"] = lambda request: httpx.Response(200, json={"success": True})
        verifier = RecaptchaVerifier(secret_key="server-secret", verify_url=VERIFY_URL)

        assert await verifier.verify("client-token", remote_ip="203.0.113.7") is True

        sent = mock_transport["requests"][0]
        assert str(sent.url) == VERIFY_URL
        form = dict(pair.split("=", 1) for pair in sent.content.decode().split("&"))
        assert form == {
            "secret": "server-secret",
            "response": "client-token",
            "remoteip": "203.0.113.7",
        }

    @pytest.mark.asyncio
    async def test_rejected_token(self, mock_transport):
        mock_transport["handler"] = lambda request: httpx.Response(
            200, json={"success": False, "error-codes": ["invalid-input-response"]}
        )
        verifier = RecaptchaVerifier(secret_key="server-secret", verify_url=VERIFY_URL)

        assert await verifier.verify("bad-token") is False

    @pytest.mark.asyncio
    async def test_http_error_status(self, mock_transport):
        mock_transport["handler"] = lambda request: httpx.Response(500)
        verifier = RecaptchaVerifier(secret_key="server-secret", verify_url=VERIFY_URL)

        assert await verifier.verify("client-token") is False

    @pytest.mark.asyncio
    async def test_network_failure(self, mock_transport):
        def fail(request):
            raise httpx.ConnectError("unreachable", request=request)

        mock_transport["handler"] = fail
        verifier = RecaptchaVerifier(secret_key="server-secret", verify_url=VERIFY_URL)

        assert await verifier.verify("client-token") is False

    @pytest.mark.asyncio
    async def test_non_json_body(self, mock_transport):
        mock_transport["handler"] = lambda request: httpx.Response(
            200, text="<html>upstream proxy error</html>"
        )
        verifier = RecaptchaVerifier(secret_key="server-secret", verify_url=VERIFY_URL)

        assert await verifier.verify("client-token") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [["success"], "ok", {"success": "true"}])
    async def test_unexpected_payload(self, mock_transport, payload):
        mock_transport["handler"] = lambda request: httpx.Response(200, json=payload)
        verifier = RecaptchaVerifier(secret_key="server-secret", verify_url=VERIFY_URL)

        assert await verifier.verify("client-token") is False
