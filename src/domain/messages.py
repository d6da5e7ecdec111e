"""Email content for challenge codes."""

from dataclasses import dataclass
from html import escape

from .models import Purpose


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    html_body: str
    text_body: str


_HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; line-height: 1.5; color: #333;">
  <h2 style="color: #0f172a; margin-bottom: 16px;">{subject}</h2>
  <p style="margin-bottom: 12px;">Hello,</p>
  <p style="margin-bottom: 12px;">Your one-time code is:</p>
  <p style="font-size: 24px; font-weight: bold; letter-spacing: 4px; margin: 20px 0;">{code}</p>
  <p style="margin-bottom: 12px;">
    This code will expire in {minutes} minutes. Please do not share it with anyone.
  </p>
  <p style="margin-top: 24px; color: #64748b;">
    If you did not request this code, please ignore this message or contact support.
  </p>
  <p style="margin-top: 24px;">Regards,<br/>{brand}</p>
</div>
"""


def render_challenge_message(
    code: str, purpose: Purpose, brand: str, ttl_minutes: int
) -> RenderedMessage:
    """Build subject, HTML and plain-text bodies for a challenge code."""
    if purpose is Purpose.CREDENTIAL_RESET:
        subject = f"{brand} Password Reset Code"
    else:
        subject = f"{brand} Verification Code"

    text_body = "\n".join(
        [
            f"Your one-time code is {code}.",
            f"This code will expire in {ttl_minutes} minutes.",
            "",
            "If you did not request this code, please ignore this email.",
        ]
    )
    html_body = _HTML_TEMPLATE.format(
        subject=escape(subject),
        code=escape(code),
        minutes=ttl_minutes,
        brand=escape(brand),
    )
    return RenderedMessage(subject=subject, html_body=html_body, text_body=text_body)
