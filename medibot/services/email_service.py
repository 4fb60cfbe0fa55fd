import smtplib
import logging
from email.message import EmailMessage
from medibot.core.config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, body: str, html: str | None = None) -> bool:
    if settings.EMAIL_BACKEND == "console":
        logger.info("Email to %s: %s\n%s", to_email, subject, body)
        return True

    smtp_host = settings.SMTP_HOST
    smtp_port = settings.SMTP_PORT
    smtp_user = settings.SMTP_USER
    smtp_pass = settings.SMTP_PASSWORD

    if not smtp_user or not smtp_pass:
        raise Exception("SMTP credentials not configured (SMTP_USER / SMTP_PASSWORD)")

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f"{settings.SENDER_NAME} <{smtp_user}>"
    msg["To"] = to_email
    msg.set_content(body)
    if html:
        msg.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(smtp_host, smtp_port, timeout=10) as server:
            server.ehlo()
            if smtp_port == 587:
                server.starttls()
                server.ehlo()
            server.login(smtp_user, smtp_pass)
            server.send_message(msg)
        return True
    except Exception:
        logger.exception("Failed to send email to %s", to_email)
        raise


def send_password_reset_email(to_email: str, recipient_name: str, reset_token: str, reset_url: str | None = None) -> bool:
    """Send a password reset email. With ``reset_url`` the token is appended to the link, otherwise it is sent raw."""
    subject = f"Reset your {settings.APP_NAME} password"
    if reset_url:
        link = f"{reset_url.rstrip('/')}/?token={reset_token}"
        body = (
            f"Hi {recipient_name},\n\n"
            f"A password reset was requested for your {settings.APP_NAME} account.\n"
            f"Open the link below to choose a new password:\n{link}\n\n"
            f"If you did not expect this, you can ignore this email.\n\n"
            f"{settings.SENDER_NAME}"
        )
        html = (
            f"<p>Hi {recipient_name},</p>"
            f"<p>A password reset was requested for your {settings.APP_NAME} account.</p>"
            f"<p><a href=\"{link}\">Choose a new password</a></p>"
            f"<p>If you did not expect this, you can ignore this email.</p>"
            f"<br/><p>{settings.SENDER_NAME}</p>"
        )
    else:
        body = (
            f"Hi {recipient_name},\n\n"
            f"Use this token to reset your password:\n\n{reset_token}\n\n"
            f"It expires in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes.\n\n"
            f"{settings.SENDER_NAME}"
        )
        html = None

    return send_email(to_email, subject, body, html)

