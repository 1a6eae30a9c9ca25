"""
Shared test fixtures for all test files

Provides common fixtures for:
- Environment isolation (LANEFUL_* variables, settings cache, .env lookup)
- Webhook secrets and payloads
- Email models
"""

import json
import os

import pytest

os.environ["LANEFUL_ENVIRONMENT"] = "testing"

from laneful.models import Email
from laneful.webhooks.signature import generate_signature


LANE_ID = "5805dd85-ed8c-44db-91a7-1d53a41c86a5"


# =============================================================================
# ENVIRONMENT ISOLATION
# =============================================================================

@pytest.fixture(scope="function", autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """
    Isolate environment for each test to prevent .env contamination.
    This fixture runs automatically before every test function.
    """
    for var in list(os.environ):
        if var.startswith("LANEFUL_"):
            monkeypatch.delenv(var, raising=False)

    monkeypatch.setenv("LANEFUL_ENVIRONMENT", "testing")
    # pydantic-settings looks for .env in the working directory
    monkeypatch.chdir(tmp_path)

    from laneful.config import get_settings
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


# =============================================================================
# WEBHOOK DATA
# =============================================================================

@pytest.fixture
def webhook_secret():
    """Webhook secret long enough to avoid the weak-secret warning"""
    return "whsec_test_secret_1234567890"


@pytest.fixture
def lane_id():
    return LANE_ID


@pytest.fixture
def event_data():
    """A valid delivery event as a dict"""
    return {
        "event": "delivery",
        "email": "user@example.com",
        "lane_id": LANE_ID,
        "message_id": "msg-123",
        "timestamp": 1640995200,
        "tag": "welcome-email",
    }


@pytest.fixture
def single_payload(event_data):
    return json.dumps(event_data)


@pytest.fixture
def batch_payload(event_data):
    second = {
        "event": "open",
        "email": "other@example.com",
        "lane_id": LANE_ID,
        "message_id": "msg-456",
        "timestamp": 1640995300,
        "client_device": "Desktop",
        "client_os": "Windows",
        "client_ip": "192.168.1.1",
    }
    return json.dumps([event_data, second])


@pytest.fixture
def signed_headers(webhook_secret, single_payload):
    return {"x-webhook-signature": generate_signature(webhook_secret, single_payload, include_prefix=True)}


# =============================================================================
# EMAIL DATA
# =============================================================================

@pytest.fixture
def valid_email():
    """Minimal sendable email"""
    return (
        Email.builder()
        .from_address("sender@example.com", "Sender")
        .to("user@example.com", "User")
        .subject("Welcome")
        .text_content("Hello there")
        .build()
    )
