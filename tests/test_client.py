"""
Tests for LanefulClient / AsyncLanefulClient using httpx.MockTransport
"""

import json

import httpx
import pytest

from laneful import __version__
from laneful.client import AsyncLanefulClient, LanefulClient
from laneful.exceptions import ApiException, HttpException, ValidationException

BASE_URL = "https://test.send.laneful.net"
TOKEN = "test-token"


def make_client(handler, base_url=BASE_URL):
    transport = httpx.MockTransport(handler)
    return LanefulClient(base_url, TOKEN, http_client=httpx.Client(transport=transport))


def json_response(status_code, data):
    return lambda request: httpx.Response(status_code, json=data)


class TestClientConstruction:
    """Tests for client setup"""

    @pytest.mark.parametrize("base_url", ["", "  ", None])
    def test_base_url_required(self, base_url):
        with pytest.raises(ValidationException, match="Base URL cannot be empty"):
            LanefulClient(base_url, TOKEN)

    @pytest.mark.parametrize("token", ["", "  ", None])
    def test_auth_token_required(self, token):
        with pytest.raises(ValidationException, match="Auth token cannot be empty"):
            LanefulClient(BASE_URL, token)

    @pytest.mark.parametrize(
        "base_url,endpoint,expected",
        [
            ("https://x.net", "/email/send", "https://x.net/v1/email/send"),
            ("https://x.net/", "/email/send", "https://x.net/v1/email/send"),
            ("https://x.net", "email/send", "https://x.net/v1/email/send"),
        ],
    )
    def test_build_url(self, base_url, endpoint, expected):
        with LanefulClient(base_url, TOKEN) as client:
            assert client.build_url(endpoint) == expected

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("LANEFUL_BASE_URL", BASE_URL)
        monkeypatch.setenv("LANEFUL_AUTH_TOKEN", TOKEN)
        monkeypatch.setenv("LANEFUL_TIMEOUT", "12")

        with LanefulClient.from_settings() as client:
            assert client.base_url == BASE_URL
            assert client.auth_token == TOKEN
            assert client.timeout == 12.0

    def test_from_settings_unconfigured(self):
        with pytest.raises(ValidationException, match="Base URL cannot be empty"):
            LanefulClient.from_settings()


class TestSendEmail:
    """Tests for the sync client"""

    def test_request_shape(self, valid_email):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json={"status": "queued", "count": 1})

        with make_client(handler) as client:
            result = client.send_email(valid_email)

        request = seen["request"]
        assert result == {"status": "queued", "count": 1}
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/v1/email/send"
        assert request.headers["authorization"] == f"Bearer {TOKEN}"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["accept"] == "application/json"
        assert request.headers["user-agent"] == f"laneful-python/{__version__}"
        assert json.loads(request.content) == {"emails": [valid_email.to_payload()]}

    def test_send_multiple(self, valid_email):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"status": "queued"})

        with make_client(handler) as client:
            client.send_emails([valid_email, valid_email])

        assert len(seen["body"]["emails"]) == 2

    def test_empty_success_body(self, valid_email):
        with make_client(lambda request: httpx.Response(202, content=b"")) as client:
            assert client.send_email(valid_email) == {}

    @pytest.mark.parametrize("emails", [[], None])
    def test_empty_list_rejected(self, emails):
        with make_client(json_response(200, {})) as client:
            with pytest.raises(ValidationException, match="Emails list cannot be empty"):
                client.send_emails(emails)

    def test_null_email_rejected(self, valid_email):
        with make_client(json_response(200, {})) as client:
            with pytest.raises(ValidationException, match="Email cannot be null"):
                client.send_emails([valid_email, None])

    def test_wrong_type_rejected(self):
        with make_client(json_response(200, {})) as client:
            with pytest.raises(ValidationException, match="Expected Email instance"):
                client.send_emails([{"subject": "hi"}])

    def test_not_found(self, valid_email):
        with make_client(lambda request: httpx.Response(404, text="nope")) as client:
            with pytest.raises(HttpException) as exc_info:
                client.send_email(valid_email)

        assert exc_info.value.status_code == 404
        assert "Check your base URL" in exc_info.value.message
        assert f"{BASE_URL}/v1/email/send" in exc_info.value.message

    def test_api_error_with_details(self, valid_email):
        handler = json_response(400, {"error": "Invalid sender", "details": "domain not verified"})
        with make_client(handler) as client:
            with pytest.raises(ApiException) as exc_info:
                client.send_email(valid_email)

        exc = exc_info.value
        assert exc.status_code == 400
        assert exc.error_message == "Invalid sender - domain not verified"
        assert str(exc).endswith("(400): Invalid sender - domain not verified")

    def test_api_error_without_body(self, valid_email):
        with make_client(lambda request: httpx.Response(503, content=b"")) as client:
            with pytest.raises(ApiException) as exc_info:
                client.send_email(valid_email)

        assert exc_info.value.status_code == 503
        assert exc_info.value.error_message == "Unknown API error"

    def test_undecodable_body(self, valid_email):
        with make_client(lambda request: httpx.Response(200, text="<html>oops</html>")) as client:
            with pytest.raises(HttpException, match="Failed to decode JSON response") as exc_info:
                client.send_email(valid_email)

        assert exc_info.value.status_code == 200
        assert "<html>oops</html>" in exc_info.value.message

    def test_undecodable_body_truncated(self, valid_email):
        body = "x" * 800
        with make_client(lambda request: httpx.Response(500, text=body)) as client:
            with pytest.raises(HttpException) as exc_info:
                client.send_email(valid_email)

        message = exc_info.value.message
        assert "x" * 500 + "..." in message
        assert "x" * 501 not in message

    def test_non_object_body(self, valid_email):
        with make_client(json_response(200, [1, 2])) as client:
            with pytest.raises(HttpException, match="expected an object"):
                client.send_email(valid_email)

    def test_transport_error(self, valid_email):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(HttpException, match="HTTP request failed") as exc_info:
                client.send_email(valid_email)

        assert exc_info.value.status_code == 0


class TestCallerSuppliedClient:
    """A caller-owned httpx client is used as-is and left open"""

    def test_client_state_untouched(self, valid_email):
        http_client = httpx.Client(
            transport=httpx.MockTransport(json_response(200, {"status": "queued"})),
            headers={"X-App": "billing"},
            timeout=5.0,
        )

        with LanefulClient(BASE_URL, TOKEN, timeout=20.0, http_client=http_client) as client:
            client.send_email(valid_email)

        assert "authorization" not in http_client.headers
        assert http_client.headers["x-app"] == "billing"
        assert http_client.timeout == httpx.Timeout(5.0)
        assert not http_client.is_closed
        http_client.close()

    def test_request_carries_client_and_sdk_headers(self, valid_email):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json={})

        http_client = httpx.Client(transport=httpx.MockTransport(handler), headers={"X-App": "billing"})
        with LanefulClient(BASE_URL, TOKEN, http_client=http_client) as client:
            client.send_email(valid_email)

        assert seen["request"].headers["x-app"] == "billing"
        assert seen["request"].headers["authorization"] == f"Bearer {TOKEN}"
        http_client.close()

    def test_owned_client_closed(self):
        client = LanefulClient(BASE_URL, TOKEN)
        client.close()
        assert client.client.is_closed

    @pytest.mark.asyncio
    async def test_async_client_left_open(self, valid_email):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(json_response(200, {})))

        async with AsyncLanefulClient(BASE_URL, TOKEN, http_client=http_client) as client:
            await client.send_email(valid_email)

        assert not http_client.is_closed
        assert "authorization" not in http_client.headers
        await http_client.aclose()


class TestAsyncClient:
    """Tests for the async client"""

    @pytest.mark.asyncio
    async def test_send_email(self, valid_email):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json={"status": "queued"})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with AsyncLanefulClient(BASE_URL, TOKEN, http_client=http_client) as client:
            result = await client.send_email(valid_email)

        assert result == {"status": "queued"}
        assert seen["request"].headers["authorization"] == f"Bearer {TOKEN}"

    @pytest.mark.asyncio
    async def test_api_error(self, valid_email):
        handler = json_response(429, {"error": "Rate limited"})
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with AsyncLanefulClient(BASE_URL, TOKEN, http_client=http_client) as client:
            with pytest.raises(ApiException) as exc_info:
                await client.send_email(valid_email)

        assert exc_info.value.status_code == 429
        assert exc_info.value.error_message == "Rate limited"

    @pytest.mark.asyncio
    async def test_transport_error(self, valid_email):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with AsyncLanefulClient(BASE_URL, TOKEN, http_client=http_client) as client:
            with pytest.raises(HttpException) as exc_info:
                await client.send_email(valid_email)

        assert exc_info.value.status_code == 0

    @pytest.mark.asyncio
    async def test_validation_before_request(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(json_response(200, {})))
        async with AsyncLanefulClient(BASE_URL, TOKEN, http_client=http_client) as client:
            with pytest.raises(ValidationException):
                await client.send_emails([])
