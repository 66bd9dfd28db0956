"""
Tests for outbound email delivery.
"""

import json

import httpx
import pytest

from volt.core.config import settings
from volt.services.email_service import EmailService
from volt.utils.exceptions import InternalError


def _service(handler) -> EmailService:
    config = settings.model_copy(update={"EMAIL_API_KEY": "re_test_key"})
    return EmailService(config, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_send_password_reset():
    """Test the reset link is posted to the email API."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "email-id"})

    service = _service(handler)
    await service.send_password_reset("alice@example.com", "tok-123")

    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == settings.EMAIL_API_URL
    assert request.headers["Authorization"] == "Bearer re_test_key"

    body = json.loads(request.content)
    assert body["to"] == ["alice@example.com"]
    assert body["subject"] == "Password reset"
    assert service.password_reset_link("tok-123") in body["html"]


@pytest.mark.asyncio
async def test_send_rejected_by_api():
    service = _service(lambda request: httpx.Response(422, json={"message": "bad sender"}))

    with pytest.raises(InternalError):
        await service.send("alice@example.com", "Hello", "<p>hi</p>")


@pytest.mark.asyncio
async def test_send_transport_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(InternalError):
        await _service(handler).send("alice@example.com", "Hello", "<p>hi</p>")


@pytest.mark.asyncio
async def test_send_disabled_without_api_key():
    """Test nothing is sent when no API key is configured."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    config = settings.model_copy(update={"EMAIL_API_KEY": ""})
    service = EmailService(config, transport=httpx.MockTransport(handler))

    assert service.enabled is False
    await service.send("alice@example.com", "Hello", "<p>hi</p>")


def test_password_reset_link_is_quoted():
    config = settings.model_copy(update={"FRONTEND_URL": "https://app.example.com/"})
    service = EmailService(config)

    assert service.password_reset_link("a b") == "https://app.example.com/recover/reset?token=a%20b"
