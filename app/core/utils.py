import logging
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from jose import jwt
from datetime import datetime, timedelta

from app.core.config import settings

logger = logging.getLogger(__name__)

SENDGRID_API_KEY = settings.SENDGRID_API_KEY
EMAIL_SENDER = settings.EMAIL_SENDER
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
FRONTEND_BASE_URL = settings.FRONTEND_BASE_URL

def create_magic_token(email: str) -> str:
    """Creates a short-lived JWT for a passwordless "magic link" login.

    Args:
        email (str): The admin's email address to be encoded in the token.

    Returns:
        str: The generated JSON Web Token.
    """
    payload = {
        "sub": email,
        "scope": "magic",
        "exp": datetime.utcnow() + timedelta(minutes=30)
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

def create_access_token(email: str) -> str:
    """Creates the bearer token used on the back-office API."""
    payload = {
        "sub": email,
        "scope": "access",
        "exp": datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

def send_email_link(recipient: str, token: str) -> bool:
    """Sends the magic login link via SendGrid.

    Returns:
        bool: True if SendGrid accepted the message, False if sending was
              skipped or failed. Failures are logged, not raised, so the
              token endpoint still answers.
    """
    if not SENDGRID_API_KEY:
        logger.warning("SENDGRID_API_KEY is not set. Magic link for %s was not e-mailed.", recipient)
        return False

    base_url = FRONTEND_BASE_URL.rstrip('/')
    login_url = f"{base_url}/admin/login/magic-link?token={token}"

    html = f"""
<!DOCTYPE html>
<html lang="en">
  <body style="margin:0; padding:0; background-color:#F7F7F5; color:#1F2937; font-family:-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;">
    <table role="presentation" width="100%" cellspacing="0" cellpadding="0">
      <tr>
        <td align="center" style="padding:32px 16px;">
          <table role="presentation" width="600" cellspacing="0" cellpadding="0" style="max-width:600px; width:100%; background:#FFFFFF; border:1px solid #E5E7EB; border-radius:12px;">
            <tr>
              <td style="padding:28px 24px 8px 24px;">
                <h1 style="margin:0; font-size:22px; color:#065F46;">Back-office sign in</h1>
                <p style="margin:12px 0 0; font-size:14px; line-height:1.6;">Use the button below to open the donation dashboard.</p>
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:16px 24px;">
                <a href="{login_url}" style="display:inline-block; padding:12px 20px; background:#059669; color:#FFFFFF; text-decoration:none; border-radius:8px; font-weight:600;">Sign in</a>
              </td>
            </tr>
            <tr>
              <td style="padding:8px 24px 24px 24px;">
                <p style="margin:0; font-size:12px; color:#6B7280;">The link expires in 30 minutes. If you didn't request it, ignore this email.</p>
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>
    """

    message = Mail(
        from_email=EMAIL_SENDER,
        to_emails=recipient,
        subject="Your donation dashboard sign-in link",
        html_content=html,
    )

    try:
        sg = SendGridAPIClient(SENDGRID_API_KEY)
        sg.send(message)
        return True
    except Exception as e:
        logger.error(f"SendGrid error while sending magic link to {recipient}: {e}")
        return False
