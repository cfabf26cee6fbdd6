from __future__ import annotations
import smtplib
from email.message import EmailMessage
import structlog
from hackboard.config import settings

log = structlog.get_logger()

def build_message(to: str, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.email_from
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)
    return msg

def send_email(to: str, subject: str, body: str) -> None:
    # RQ entry point (sync)
    msg = build_message(to, subject, body)
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
        if settings.smtp_starttls:
            smtp.starttls()
        if settings.smtp_user:
            smtp.login(settings.smtp_user, settings.smtp_password)
        smtp.send_message(msg)
    log.info("email_sent", to=to, subject=subject)
