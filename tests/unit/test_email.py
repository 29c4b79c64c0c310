"""
Unit tests for email delivery.

Tests cover:
- Template rendering and HTML escaping
- Test-mode recipient redirect
- Best-effort sending (missing key, HTTP errors, transport errors)
"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from app.config.settings import Settings
from app.services.email import EmailClient, render_template
from app.utils.exceptions import SideEffectFailure


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "environment": "test",
        "email_api_key": "re_test_key",
    }
    values.update(overrides)
    return Settings(**values)


def mock_http(status: int = 200, text: str = "", error: Exception | None = None):
    """ClientSession mock returning one response from post()."""
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=text)

    post_cm = MagicMock()
    if error is not None:
        post_cm.__aenter__ = AsyncMock(side_effect=error)
    else:
        post_cm.__aenter__ = AsyncMock(return_value=response)
    post_cm.__aexit__ = AsyncMock(return_value=False)

    http = MagicMock()
    http.post = MagicMock(return_value=post_cm)

    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=http)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    return session_cm, http


class TestRenderTemplate:
    """Test template rendering."""

    def test_matrix_complete(self):
        """Test placeholders are filled."""
        subject, html = render_template(
            "matrix_complete",
            {"first_name": "Ann", "amount": "200.00", "payment_handle": "@ann"},
        )
        assert subject == "Your matrix is complete!"
        assert "$200.00" in html
        assert "@ann" in html

    def test_body_values_are_escaped(self):
        """Test HTML in values is escaped."""
        _, html = render_template(
            "matrix_complete",
            {"first_name": "<b>x</b>", "amount": "1.00", "payment_handle": "h"},
        )
        assert "<b>x</b>" not in html
        assert "&lt;b&gt;x&lt;/b&gt;" in html

    def test_subject_uses_values(self):
        """Test subject placeholders."""
        subject, _ = render_template(
            "daily_payout_reminder", {"count": 3, "total_amount": "450.00"}
        )
        assert subject == "3 payout(s) waiting - $450.00"

    def test_unknown_template(self):
        """Test unknown template raises SideEffectFailure."""
        with pytest.raises(SideEffectFailure):
            render_template("nope", {})

    def test_missing_value(self):
        """Test missing placeholder raises SideEffectFailure."""
        with pytest.raises(SideEffectFailure):
            render_template("payout_initiated", {"first_name": "Ann"})


class TestTestMode:
    """Test recipient redirect."""

    def test_redirects_in_test_mode(self):
        """Test mode sends to the test recipient and tags the subject."""
        client = EmailClient(
            make_settings(email_test_mode=True, email_test_recipient="qa@example.com")
        )
        to, subject = client.resolve_recipient("ann@example.com", "Hello")
        assert to == "qa@example.com"
        assert subject == "[TEST to ann@example.com] Hello"

    def test_passthrough_outside_test_mode(self):
        """Test normal mode keeps recipient and subject."""
        client = EmailClient(make_settings())
        assert client.resolve_recipient("ann@example.com", "Hello") == (
            "ann@example.com",
            "Hello",
        )

    def test_test_mode_requires_recipient(self):
        """Test settings reject test mode without recipient."""
        with pytest.raises(ValueError):
            make_settings(email_test_mode=True, email_test_recipient=None)


class TestSend:
    """Test best-effort sending."""

    @pytest.mark.asyncio
    async def test_no_api_key_skips(self):
        """Test missing key returns False without HTTP."""
        client = EmailClient(make_settings(email_api_key=None))
        with patch("app.services.email.client.aiohttp.ClientSession") as session_cls:
            assert await client.send("ann@example.com", "Hi", "<p>x</p>") is False
            session_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_success(self):
        """Test accepted email returns True and posts payload."""
        session_cm, http = mock_http(status=200)
        client = EmailClient(make_settings())
        with patch(
            "app.services.email.client.aiohttp.ClientSession", return_value=session_cm
        ):
            assert await client.send("ann@example.com", "Hi", "<p>x</p>") is True

        payload = http.post.call_args.kwargs["json"]
        assert payload["to"] == ["ann@example.com"]
        assert payload["subject"] == "Hi"
        headers = http.post.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer re_test_key"

    @pytest.mark.asyncio
    async def test_test_mode_payload(self):
        """Test redirected recipient is what gets posted."""
        session_cm, http = mock_http(status=200)
        client = EmailClient(
            make_settings(email_test_mode=True, email_test_recipient="qa@example.com")
        )
        with patch(
            "app.services.email.client.aiohttp.ClientSession", return_value=session_cm
        ):
            await client.send("ann@example.com", "Hi", "<p>x</p>")

        payload = http.post.call_args.kwargs["json"]
        assert payload["to"] == ["qa@example.com"]
        assert payload["subject"] == "[TEST to ann@example.com] Hi"

    @pytest.mark.asyncio
    async def test_http_error_returns_false(self):
        """Test API error status is logged, not raised."""
        session_cm, _ = mock_http(status=500, text="boom")
        client = EmailClient(make_settings())
        with patch(
            "app.services.email.client.aiohttp.ClientSession", return_value=session_cm
        ):
            assert await client.send("ann@example.com", "Hi", "<p>x</p>") is False

    @pytest.mark.asyncio
    async def test_transport_error_returns_false(self):
        """Test connection errors are swallowed."""
        session_cm, _ = mock_http(error=aiohttp.ClientConnectionError("down"))
        client = EmailClient(make_settings())
        with patch(
            "app.services.email.client.aiohttp.ClientSession", return_value=session_cm
        ):
            assert await client.send("ann@example.com", "Hi", "<p>x</p>") is False

    @pytest.mark.asyncio
    async def test_timeout_returns_false(self):
        """Test timeouts are swallowed."""
        session_cm, _ = mock_http(error=TimeoutError())
        client = EmailClient(make_settings())
        with patch(
            "app.services.email.client.aiohttp.ClientSession", return_value=session_cm
        ):
            assert await client.send("ann@example.com", "Hi", "<p>x</p>") is False
