"""Unit tests for EmailService."""

from unittest.mock import MagicMock, patch

import pytest

from src.services.email_service import EmailService


@pytest.fixture
def enabled_settings() -> MagicMock:
    settings = MagicMock()
    settings.resend_api_key = "re_test"
    settings.email_enabled = True
    settings.email_from_address = "ThikaBizHub <noreply@thikabizhub.com>"
    settings.invite_expiry_days = 7
    return settings


class TestSendInviteEmail:
    """Tests for send_invite_email."""

    @pytest.mark.asyncio
    async def test_disabled_without_api_key(self) -> None:
        """Test nothing is sent when no Resend key is configured."""
        with patch("src.services.email_service.resend.Emails.send") as mock_send:
            result = await EmailService().send_invite_email(
                to_email="bob@example.com",
                inviter_name="Wanjiku",
                invite_type="user",
                invite_link="http://localhost:3000/invite/abc",
            )

        assert result["success"] is False
        mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_business_invite(self, enabled_settings: MagicMock) -> None:
        """Test the email names the business and carries the link."""
        with (
            patch("src.services.email_service.get_settings", return_value=enabled_settings),
            patch("src.services.email_service.resend.Emails.send", return_value={"id": "email-1"}) as mock_send,
        ):
            result = await EmailService().send_invite_email(
                to_email="bob@example.com",
                inviter_name="Wanjiku",
                invite_type="business",
                invite_link="http://localhost:3000/invite/abc",
                message="Karibu!",
                business_name="Mama Mboga",
            )

        assert result == {"success": True, "email_id": "email-1"}
        params = mock_send.call_args.args[0]
        assert params["to"] == ["bob@example.com"]
        assert "Mama Mboga" in params["subject"]
        assert "http://localhost:3000/invite/abc" in params["html"]
        assert "Karibu!" in params["text"]

    @pytest.mark.asyncio
    async def test_html_escapes_caller_text(self, enabled_settings: MagicMock) -> None:
        """Test markup in the note, inviter and business name is escaped in the HTML body."""
        with (
            patch("src.services.email_service.get_settings", return_value=enabled_settings),
            patch("src.services.email_service.resend.Emails.send", return_value={"id": "email-2"}) as mock_send,
        ):
            await EmailService().send_invite_email(
                to_email="bob@example.com",
                inviter_name="<b>Wanjiku</b>",
                invite_type="business",
                invite_link="http://localhost:3000/invite/abc",
                message='<a href="https://evil.example">Click to verify</a>',
                business_name="<script>x</script>",
            )

        html_body = mock_send.call_args.args[0]["html"]
        assert '<a href="https://evil.example">' not in html_body
        assert "&lt;a href=&quot;https://evil.example&quot;&gt;Click to verify&lt;/a&gt;" in html_body
        assert "<b>Wanjiku</b>" not in html_body
        assert "&lt;b&gt;Wanjiku&lt;/b&gt;" in html_body
        assert "<script>" not in html_body

    @pytest.mark.asyncio
    async def test_send_failure_is_reported(self, enabled_settings: MagicMock) -> None:
        """Test provider errors are returned, not raised."""
        with (
            patch("src.services.email_service.get_settings", return_value=enabled_settings),
            patch("src.services.email_service.resend.Emails.send", side_effect=RuntimeError("rate limited")),
        ):
            result = await EmailService().send_invite_email(
                to_email="bob@example.com",
                inviter_name="Wanjiku",
                invite_type="admin",
                invite_link="http://localhost:3000/invite/abc",
            )

        assert result == {"success": False, "error": "rate limited"}
