"""
Email Service using SMTP (when configured) or Resend (fallback)
Provides email functionality using MJML templates for responsive design

Every ``send_*`` helper is fire-and-forget: it is scheduled as a background
task after the primary write has committed, and a delivery failure is logged
without affecting the response.
"""

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import (
    ADMIN_EMAIL,
    EMAIL_FROM_ADDRESS,
    RESEND_API_KEY,
    SHOP_NAME,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USERNAME,
)
from .email_templates import (
    booking_cancelled_template,
    booking_confirmed_template,
    booking_received_template,
    contact_notification_template,
    welcome_email_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def send_via_smtp(to: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send email via the configured SMTP server"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(html_content, "html"))

    if SMTP_PORT == 465:
        context = ssl.create_default_context()
        server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
        if SMTP_USE_TLS:
            server.starttls(context=ssl.create_default_context())

    try:
        if SMTP_USERNAME:
            server.login(SMTP_USERNAME, SMTP_PASSWORD or "")
        server.sendmail(from_address.split("<")[-1].rstrip(">"), to, msg.as_string())
    finally:
        server.quit()

    logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
    return {"id": None, "success": True, "provider": "smtp"}


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    # Newer mjml releases return an object with .html/.errors; older ones a dict
    if isinstance(result, dict):
        errors, html = result.get("errors"), result.get("html", "")
    else:
        errors, html = getattr(result, "errors", None), getattr(result, "html", str(result))
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    return html


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using SMTP (if configured) or Resend (fallback)

    Raises:
        Exception: When no transport is configured or delivery fails
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if SMTP_HOST:
        try:
            logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
            return await asyncio.to_thread(send_via_smtp, recipients, subject, html_content, sender)
        except Exception as e:
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not RESEND_API_KEY:
        raise Exception("Email service not configured")

    logger.info(f"📧 Sending email via Resend to: {recipients}")
    response = await asyncio.to_thread(
        resend.Emails.send,
        {
            "from": sender,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        },
    )
    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


async def dispatch_email(to: Union[str, list[str]], subject: str, mjml_content: str) -> Optional[dict]:
    """Send without propagating failures; returns None when delivery failed"""
    try:
        return await send_email(to=to, subject=subject, mjml_content=mjml_content)
    except Exception as e:
        logger.warning(f"⚠️ Email '{subject}' to {to} not sent: {e}")
        return None


# ============================================
# Pre-built emails for booking, account and contact events
# ============================================


def appointment_details(booking) -> dict:
    """Flatten a booking into the fields the appointment templates print"""
    car = booking.car or {}
    return {
        "service_name": booking.service.name if booking.service else "",
        "date": booking.appointment_date.isoformat(),
        "time": booking.appointment_time,
        "car": f"{car.get('year', '')} {car.get('make', '')} {car.get('model', '')}".strip(),
        "estimated_cost": booking.estimated_cost,
    }


async def send_welcome_email(to: str, first_name: str) -> Optional[dict]:
    return await dispatch_email(to, f"Welcome to {SHOP_NAME}", welcome_email_template(first_name))


async def send_booking_received_email(to: str, first_name: str, details: dict) -> Optional[dict]:
    return await dispatch_email(
        to,
        f"{SHOP_NAME} - Appointment Request Received",
        booking_received_template(first_name, details),
    )


async def send_booking_confirmed_email(to: str, first_name: str, details: dict) -> Optional[dict]:
    return await dispatch_email(
        to,
        f"{SHOP_NAME} - Appointment Confirmed",
        booking_confirmed_template(first_name, details),
    )


async def send_booking_cancelled_email(
    to: str, first_name: str, details: dict, reason: str
) -> Optional[dict]:
    return await dispatch_email(
        to,
        f"{SHOP_NAME} - Appointment Cancelled",
        booking_cancelled_template(first_name, details, reason),
    )


async def send_contact_notification(contact: dict) -> Optional[dict]:
    """Notify the shop admin about a new contact form submission"""
    return await dispatch_email(
        ADMIN_EMAIL,
        f"New Contact Form Submission - {SHOP_NAME}",
        contact_notification_template(contact),
    )
