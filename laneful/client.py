"""
Laneful API Client

HTTP clients (sync and async) for the Laneful email-sending API.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import httpx

from laneful import __version__, json_utils
from laneful.config import get_settings
from laneful.exceptions import ApiException, HttpException, ValidationException
from laneful.logger import logger
from laneful.models import Email

API_VERSION = "v1"
USER_AGENT = f"laneful-python/{__version__}"
DEFAULT_TIMEOUT = 30.0
SEND_ENDPOINT = "/email/send"
MAX_ERROR_BODY = 500


class _BaseClient:
    """Request building and response handling shared by both clients."""

    def __init__(self, base_url: Optional[str], auth_token: Optional[str], timeout: float):
        if base_url is None or not base_url.strip():
            raise ValidationException("Base URL cannot be empty")
        if auth_token is None or not auth_token.strip():
            raise ValidationException("Auth token cannot be empty")

        self.base_url = base_url.strip()
        self.auth_token = auth_token.strip()
        self.timeout = timeout

    @property
    def default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.auth_token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    @property
    def request_headers(self) -> Dict[str, str]:
        """Headers sent with each request; a caller-supplied http_client is left untouched."""
        return {**self.default_headers, "Content-Type": "application/json"}

    @classmethod
    def _settings_kwargs(cls) -> Dict[str, Any]:
        settings = get_settings()
        return {
            "base_url": settings.base_url,
            "auth_token": settings.auth_token.get_secret_value() if settings.auth_token else None,
            "timeout": settings.timeout,
        }

    def build_url(self, endpoint: str) -> str:
        """Join base URL, API version and endpoint: ``<base>/v1/<endpoint>``."""
        base = self.base_url[:-1] if self.base_url.endswith("/") else self.base_url
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{base}/{API_VERSION}{path}"

    def _build_body(self, emails: Iterable[Email]) -> bytes:
        email_list = list(emails) if emails is not None else []
        if not email_list:
            raise ValidationException("Emails list cannot be empty")

        payloads: List[Dict[str, Any]] = []
        for email in email_list:
            if email is None:
                raise ValidationException("Email cannot be null")
            if not isinstance(email, Email):
                raise ValidationException(f"Expected Email instance, got {type(email).__name__}")
            payloads.append(email.to_payload())

        body = json_utils.dumps_bytes({"emails": payloads})
        logger.debug("Request body: {}", body.decode("utf-8"))
        return body

    def _handle_response(self, response: httpx.Response, url: str) -> Dict[str, Any]:
        status_code = response.status_code

        # 404 almost always means a wrong base URL rather than an API error
        if status_code == 404:
            raise HttpException(
                f"API endpoint not found (404). Check your base URL. Requested: {url}",
                status_code,
            )

        body = response.text
        data: Optional[Dict[str, Any]] = None
        if body.strip():
            try:
                decoded = json_utils.loads(body)
            except json_utils.JSONDecodeError as exc:
                raise HttpException(
                    f"Failed to decode JSON response: {exc}. "
                    f"Response body: {_truncate(body)}. URL: {url}",
                    status_code,
                ) from exc
            if not isinstance(decoded, dict):
                raise HttpException(
                    f"Failed to decode JSON response: expected an object. "
                    f"Response body: {_truncate(body)}. URL: {url}",
                    status_code,
                )
            data = decoded

        if 200 <= status_code < 300:
            return data or {}

        error = (data or {}).get("error")
        details = (data or {}).get("details")
        error_message = str(error) if error is not None else "Unknown API error"
        if details:
            error_message = f"{error_message} - {details}"

        logger.warning("API request to {} failed with {}: {}", url, status_code, error_message)
        raise ApiException(f"API request failed to {url}", status_code, error_message)


def _truncate(body: str) -> str:
    return body[:MAX_ERROR_BODY] + "..." if len(body) > MAX_ERROR_BODY else body


class LanefulClient(_BaseClient):
    """
    Client for the Laneful API.

    Handles authentication, request serialization and error mapping.
    """

    def __init__(
        self,
        base_url: Optional[str],
        auth_token: Optional[str],
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Laneful endpoint URL
            auth_token: API token
            timeout: Request timeout in seconds
            http_client: Optional preconfigured httpx.Client. Its headers and
                timeout are not modified and close() leaves it open.
        """
        super().__init__(base_url, auth_token, timeout)
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "LanefulClient":
        """Create a client from LANEFUL_* settings."""
        return cls(**{**cls._settings_kwargs(), **kwargs})

    def send_email(self, email: Email) -> Dict[str, Any]:
        """Send a single email. Returns the decoded API response."""
        return self.send_emails([email])

    def send_emails(self, emails: Iterable[Email]) -> Dict[str, Any]:
        """
        Send multiple emails in one request.

        Raises:
            ValidationException: empty list or invalid element
            ApiException: API returned an error status
            HttpException: transport failure, 404 or undecodable response
        """
        body = self._build_body(emails)
        url = self.build_url(SEND_ENDPOINT)
        try:
            response = self.client.post(
                url, content=body, headers=self.request_headers, timeout=self.timeout
            )
        except httpx.RequestError as exc:
            raise HttpException(f"HTTP request failed: {exc}", 0) from exc
        return self._handle_response(response, url)

    def close(self):
        """Close HTTP client (only when this instance created it)."""
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class AsyncLanefulClient(_BaseClient):
    """Async variant of LanefulClient built on httpx.AsyncClient."""

    def __init__(
        self,
        base_url: Optional[str],
        auth_token: Optional[str],
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, auth_token, timeout)
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "AsyncLanefulClient":
        return cls(**{**cls._settings_kwargs(), **kwargs})

    async def send_email(self, email: Email) -> Dict[str, Any]:
        return await self.send_emails([email])

    async def send_emails(self, emails: Iterable[Email]) -> Dict[str, Any]:
        body = self._build_body(emails)
        url = self.build_url(SEND_ENDPOINT)
        try:
            response = await self.client.post(
                url, content=body, headers=self.request_headers, timeout=self.timeout
            )
        except httpx.RequestError as exc:
            raise HttpException(f"HTTP request failed: {exc}", 0) from exc
        return self._handle_response(response, url)

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
