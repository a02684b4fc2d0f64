"""Outbound email.

Every send is bounded by ``EMAIL_TIMEOUT_SECONDS``; a slow relay surfaces as
``DeliveryTimeoutError`` instead of hanging the request. Nothing is retried.
"""
from __future__ import annotations
import asyncio
from dataclasses import dataclass
from email.message import EmailMessage
import aiosmtplib
from config import settings
from errors import DeliveryError, DeliveryTimeoutError
from endpoints.logs import log_action, log_error


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: str | None = None

    def to_message(self, sender: str) -> EmailMessage:
        message = EmailMessage()
        message.set_content(self.text)
        if self.html:
            message.add_alternative(self.html, subtype="html")
        message["Subject"] = self.subject
        message["From"] = sender
        message["To"] = self.to
        return message


def otp_email(to: str, otp: str, purpose: str = "verification") -> OutgoingEmail:
    minutes = settings.OTP_EXPIRE_MINUTES
    if purpose == "password_reset":
        subject = f"{settings.ACADEMY_NAME} - Password reset OTP"
        intro = "Use the code below to reset your password."
    else:
        subject = f"{settings.ACADEMY_NAME} - OTP code"
        intro = "Your OTP code is below."
    text = f"""
    {intro}

    {otp}

    This code is valid for {minutes} minutes.
    If you didn't request this, please ignore this email.

    Thank you,
    {settings.ACADEMY_NAME} Team
    """
    html = (
        f"<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;\">"
        f"<p>{intro}</p>"
        f"<div style=\"font-size: 24px; font-weight: bold; letter-spacing: 5px;\">{otp}</div>"
        f"<p style=\"color: #666;\">This code is valid for {minutes} minutes.</p>"
        f"<p>Thank you,<br>{settings.ACADEMY_NAME} Team</p></div>"
    )
    return OutgoingEmail(to=to, subject=subject, text=text, html=html)


def course_access_email(to: str, name: str, course_name: str) -> OutgoingEmail:
    text = f"""
    Dear {name},

    Your payment has been approved and your access to "{course_name}" is now active.
    You can now watch all videos and read the notes and other content.

    Start the course: {settings.COURSE_URL}

    Thank you,
    {settings.ACADEMY_NAME} Team
    """
    html = (
        f"<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        f"<h2 style=\"color: #4caf50;\">Congratulations!</h2>"
        f"<p>Dear {name},</p>"
        f"<p>Your payment has been approved and your access to <strong>\"{course_name}\"</strong> is now active.</p>"
        f"<p><a href=\"{settings.COURSE_URL}\">Start the course</a></p>"
        f"<p>Thank you,<br>{settings.ACADEMY_NAME} Team</p></div>"
    )
    return OutgoingEmail(to=to, subject=f"{settings.ACADEMY_NAME} - Course approved", text=text, html=html)


class Mailer:
    def __init__(self, timeout: float | None = None):
        self.timeout = timeout if timeout is not None else settings.EMAIL_TIMEOUT_SECONDS

    def _check_configured(self):
        if not settings.SMTP_USERNAME or not settings.SMTP_PASSWORD:
            raise DeliveryError(detail="SMTP_USERNAME or SMTP_PASSWORD is not configured")

    async def _deliver(self, message: EmailMessage):
        smtp_client = aiosmtplib.SMTP(
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            use_tls=False,
            start_tls=settings.SMTP_START_TLS,
            timeout=self.timeout,
        )
        async with smtp_client:
            await smtp_client.send_message(message)

    async def send(self, email: OutgoingEmail):
        self._check_configured()
        message = email.to_message(settings.mail_sender)
        try:
            await asyncio.wait_for(self._deliver(message), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            log_error("email_timeout", e, email.to, context={"subject": email.subject, "timeout": self.timeout})
            raise DeliveryTimeoutError(detail=f"Email sending timed out after {self.timeout}s")
        except aiosmtplib.SMTPAuthenticationError as e:
            log_error("email_auth_failed", e, email.to, context={"subject": email.subject})
            raise DeliveryError("Email login credentials problem, please inform the administrator", detail=str(e))
        except (aiosmtplib.SMTPException, OSError) as e:
            log_error("email_failed", e, email.to, context={"subject": email.subject})
            raise DeliveryError(detail=str(e))
        log_action("email_sent", email.to, context={"subject": email.subject})


mailer = Mailer()


def get_mailer() -> Mailer:
    return mailer
