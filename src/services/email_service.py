"""Email service using Resend for transactional emails."""

import html
import logging
from typing import Any

import resend

from src.core.config import get_settings

logger = logging.getLogger(__name__)

_INVITE_HEADLINES = {
    "business": "join {business} on ThikaBizHub",
    "admin": "help manage ThikaBizHub as an administrator",
    "user": "join ThikaBizHub",
}


class EmailService:
    """Service for sending transactional emails via Resend."""

    def __init__(self) -> None:
        """Initialize email service with Resend API key."""
        settings = get_settings()
        resend.api_key = settings.resend_api_key
        self.enabled = settings.email_enabled
        self.from_email = settings.email_from_address
        self.expiry_days = settings.invite_expiry_days

    async def send_invite_email(
        self,
        to_email: str,
        inviter_name: str,
        invite_type: str,
        invite_link: str,
        message: str = "",
        business_name: str | None = None,
    ) -> dict[str, Any]:
        """Send an invitation email.

        Delivery is best effort: failures are logged and reported in the
        returned dict, never raised.

        Args:
            to_email: Recipient email address.
            inviter_name: Name of the person who sent the invite.
            invite_type: One of business, admin or user.
            invite_link: Link the recipient follows to accept.
            message: Optional personal note from the inviter.
            business_name: Business being joined, for business invites.

        Returns:
            dict: ``success`` flag plus the Resend email id or the error.
        """
        if not self.enabled:
            logger.info("Email disabled, not sending invite to %s", to_email)
            return {"success": False, "error": "email disabled"}

        template = _INVITE_HEADLINES.get(invite_type, _INVITE_HEADLINES["user"])
        business = business_name or "a business"
        headline = template.format(business=business)

        # Every caller-supplied value is escaped before it reaches the HTML body.
        html_headline = template.format(business=html.escape(business))
        html_inviter = html.escape(inviter_name)
        html_link = html.escape(invite_link)
        note_html = (
            f'<p style="font-style: italic; color: #4b5563;">"{html.escape(message)}"</p>' if message else ""
        )
        note_text = f'\n"{message}"\n' if message else ""

        html_content = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>You're Invited!</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #166534; padding: 30px; border-radius: 10px 10px 0 0; text-align: center;">
        <h1 style="color: white; margin: 0; font-size: 24px;">You're Invited!</h1>
    </div>

    <div style="background: #f9fafb; padding: 30px; border: 1px solid #e5e7eb; border-top: none; border-radius: 0 0 10px 10px;">
        <p style="font-size: 16px;">
            <strong>{html_inviter}</strong> has invited you to {html_headline}.
        </p>
        {note_html}
        <div style="text-align: center; margin: 30px 0;">
            <a href="{html_link}" style="background: #166534; color: white; padding: 14px 32px; text-decoration: none; border-radius: 8px; font-weight: 600;">
                Accept Invitation
            </a>
        </div>

        <p style="font-size: 12px; color: #9ca3af; text-align: center;">
            This invitation expires in {self.expiry_days} days. If the button doesn't work, open:<br>
            <a href="{html_link}" style="color: #166534; word-break: break-all;">{html_link}</a>
        </p>
    </div>
</body>
</html>
"""

        text_content = f"""
{inviter_name} has invited you to {headline}.
{note_text}
Accept your invitation here:
{invite_link}

This invitation expires in {self.expiry_days} days.
"""

        try:
            response = resend.Emails.send({
                "from": self.from_email,
                "to": [to_email],
                "subject": f"{inviter_name} invited you to {headline}",
                "html": html_content,
                "text": text_content,
            })

            logger.info("Invite email sent to %s, id: %s", to_email, response.get("id"))
            return {"success": True, "email_id": response.get("id")}

        except Exception as e:
            logger.error("Failed to send invite email to %s: %s", to_email, str(e))
            return {"success": False, "error": str(e)}
