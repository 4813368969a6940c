"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from html import escape
from typing import Optional

from .config import FRONTEND_URL, SHOP_NAME

# Workshop theme colors - Amber/Slate
THEME = {
    "primary": "#f59e0b",
    "primary_dark": "#d97706",
    "background": "#f8fafc",
    "card_bg": "#f8f9fa",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "danger": "#ef4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    is_user_email: bool = False,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="6px"
              padding="16px 36px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if is_user_email:
        footer_notice = f"""
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          You're receiving this because you have an account with {SHOP_NAME}.
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Arial, 'Segoe UI', Tahoma, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              Best regards, The {SHOP_NAME} Team
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _details_block(heading: str, rows: list[tuple[str, str]]) -> str:
    lines = "<br/>".join(f"<strong>{label}:</strong> {escape(str(value))}" for label, value in rows)
    return f"""
    <mj-text background-color="{THEME['card_bg']}" padding="20px" container-background-color="{THEME['card_bg']}">
      <strong>{heading}</strong><br/>
      {lines}
    </mj-text>
    """


def welcome_email_template(first_name: str) -> str:
    content = f"""
    <mj-text>
      Dear {escape(first_name)},
    </mj-text>

    <mj-text>
      Thank you for registering with {SHOP_NAME}. We're excited to have you on board!
    </mj-text>

    <mj-text>
      You can now book service appointments online and follow their progress from your dashboard.
    </mj-text>
    """

    return get_base_template(
        title=f"Welcome to {SHOP_NAME}!",
        preview_text="Your account has been created successfully",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/dashboard",
        cta_label="Go to Dashboard",
        is_user_email=True,
    )


def _appointment_rows(details: dict) -> list[tuple[str, str]]:
    return [
        ("Service", details.get("service_name", "")),
        ("Date", details.get("date", "")),
        ("Time", details.get("time", "")),
        ("Car", details.get("car", "")),
        ("Estimated Cost", details.get("estimated_cost") if details.get("estimated_cost") is not None else "TBD"),
    ]


def booking_received_template(first_name: str, details: dict) -> str:
    """Sent right after a customer books; the booking is still pending"""
    content = f"""
    <mj-text>
      Dear {escape(first_name)},
    </mj-text>

    <mj-text>
      We have received your appointment request. Our team will confirm it shortly.
    </mj-text>

    {_details_block("Appointment Details", _appointment_rows(details))}
    """

    return get_base_template(
        title="Appointment Request Received",
        preview_text="We have received your appointment request",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/dashboard",
        cta_label="View My Bookings",
        is_user_email=True,
    )


def booking_confirmed_template(first_name: str, details: dict) -> str:
    content = f"""
    <mj-text>
      Dear {escape(first_name)},
    </mj-text>

    <mj-text>
      Your appointment has been confirmed. Here are the details:
    </mj-text>

    {_details_block("Appointment Details", _appointment_rows(details))}

    <mj-text>
      We look forward to serving you!
    </mj-text>
    """

    return get_base_template(
        title="Appointment Confirmed",
        preview_text="Your appointment has been confirmed",
        content_sections=content,
        is_user_email=True,
    )


def booking_cancelled_template(first_name: str, details: dict, reason: str) -> str:
    content = f"""
    <mj-text>
      Dear {escape(first_name)},
    </mj-text>

    <mj-text>
      Your appointment has been cancelled.
    </mj-text>

    {_details_block("Cancelled Appointment", _appointment_rows(details) + [("Reason", reason)])}

    <mj-text>
      You can book a new appointment at any time.
    </mj-text>
    """

    return get_base_template(
        title="Appointment Cancelled",
        preview_text="Your appointment has been cancelled",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/booking",
        cta_label="Book Again",
        is_user_email=True,
    )


def contact_notification_template(contact: dict) -> str:
    rows = [
        ("Name", contact.get("name", "")),
        ("Email", contact.get("email", "")),
        ("Phone", contact.get("phone", "")),
        ("Subject", contact.get("subject", "")),
        ("Type", contact.get("type", "")),
        ("Priority", contact.get("priority", "")),
    ]
    content = f"""
    {_details_block("Contact Details", rows)}

    <mj-text>
      <strong>Message:</strong><br/>
      {escape(contact.get("message", ""))}
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="13px">
      Submitted on: {escape(str(contact.get("submitted_at", "")))}
    </mj-text>
    """

    return get_base_template(
        title="New Contact Form Submission",
        preview_text=f"New {contact.get('type', 'general')} message from {contact.get('name', '')}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/admin/contacts",
        cta_label="Open in Dashboard",
    )
