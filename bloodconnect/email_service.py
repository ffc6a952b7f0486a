"""
Email Service using SMTP (primary) or Resend (fallback)
Provides email functionality using MJML templates for responsive design
"""

import asyncio
import logging
import smtplib
import ssl
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Union

import resend
from mjml import mjml_to_html

from .config import (
    EMAIL_FROM_ADDRESS,
    EMAIL_HOST,
    EMAIL_PASS,
    EMAIL_PORT,
    EMAIL_SECURE,
    EMAIL_USER,
    RESEND_API_KEY,
)
from .email_templates import (
    appointment_confirmation_template,
    donation_confirmation_template,
    donor_match_template,
    request_confirmation_template,
    volunteer_notification_template,
    welcome_email_template,
)

logger = logging.getLogger(__name__)

# Initialize Resend as fallback
resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Raised when no transport could deliver a message"""


def smtp_configured() -> bool:
    return bool(EMAIL_HOST and EMAIL_USER and EMAIL_PASS)


def send_via_smtp(to: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send email via the configured SMTP server"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(html_content, "html"))

    context = ssl.create_default_context()
    if EMAIL_SECURE or EMAIL_PORT == 465:
        server = smtplib.SMTP_SSL(EMAIL_HOST, EMAIL_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(EMAIL_HOST, EMAIL_PORT, timeout=30)
        server.starttls(context=context)

    try:
        server.login(EMAIL_USER, EMAIL_PASS)
        server.sendmail(from_address.split("<")[-1].rstrip(">"), to, msg.as_string())
    finally:
        server.quit()

    logger.info(f"✅ SMTP email sent successfully via {EMAIL_HOST}")
    return {"id": f"smtp-{datetime.utcnow().timestamp()}", "success": True}


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e

    # Newer releases return an object with .html/.errors, older ones a dict
    if isinstance(result, dict):
        errors, html = result.get("errors"), result.get("html", "")
    else:
        errors, html = getattr(result, "errors", None), getattr(result, "html", str(result))
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    return html


async def send_email(to: Union[str, list[str]], subject: str, mjml_content: str) -> dict:
    """
    Send an email using SMTP (if configured) or Resend (fallback)

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)

    Returns:
        Send response dict
    """
    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    if smtp_configured():
        try:
            logger.info(f"📧 Sending email via SMTP: {EMAIL_HOST}")
            return await asyncio.to_thread(
                send_via_smtp, recipients, subject, html_content, EMAIL_FROM_ADDRESS
            )
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing and no SMTP")
        raise EmailDeliveryError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = await asyncio.to_thread(
            resend.Emails.send,
            {
                "from": EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built Email Templates for Common Events
# ============================================


async def send_welcome_email(to: str, user_name: str) -> dict:
    """Send welcome email to new users"""
    return await send_email(
        to=to,
        subject="Welcome to BloodConnect",
        mjml_content=welcome_email_template(user_name),
    )


async def send_request_confirmation_email(to: str, user_name: str, request) -> dict:
    """Confirm a newly created blood request to its requester"""
    mjml_content = request_confirmation_template(
        user_name=user_name,
        patient_name=request.patient_name,
        blood_type=request.patient_blood_type,
        units_needed=request.units_needed,
        hospital=f"{request.hospital_name}, {request.hospital_city}",
        urgency=request.urgency,
    )
    return await send_email(to=to, subject="Blood Request Confirmation", mjml_content=mjml_content)


async def send_donor_match_email(donor, request) -> dict:
    """Tell a compatible donor about a request"""
    mjml_content = donor_match_template(
        donor_name=donor.name,
        donor_blood_type=donor.blood_type,
        needed_blood_type=request.patient_blood_type,
        hospital=f"{request.hospital_name}, {request.hospital_city}",
        urgency=request.urgency,
    )
    return await send_email(
        to=donor.email, subject="Blood Donation Request Match", mjml_content=mjml_content
    )


async def send_volunteer_notification_email(requester, donor, request) -> dict:
    """Tell the requester that a donor volunteered"""
    mjml_content = volunteer_notification_template(
        requester_name=requester.name,
        donor_name=donor.name,
        donor_blood_type=donor.blood_type,
        patient_name=request.patient_name,
    )
    return await send_email(
        to=requester.email, subject="A Donor Has Volunteered", mjml_content=mjml_content
    )


async def send_donation_confirmation_email(donor, donation) -> dict:
    """Thank a donor for a recorded donation"""
    mjml_content = donation_confirmation_template(
        donor_name=donor.name,
        donation_date=donation.donation_date.strftime("%d %b %Y"),
        blood_type=donation.blood_type,
        units=donation.units,
        hospital=f"{donation.hospital_name}, {donation.hospital_city}",
    )
    return await send_email(
        to=donor.email, subject="Thank You for Your Blood Donation", mjml_content=mjml_content
    )


async def send_appointment_confirmation_email(user, appointment, center) -> dict:
    mjml_content = appointment_confirmation_template(
        user_name=user.name,
        center_name=center.name,
        center_address=f"{center.address}, {center.city}",
        date=appointment.date.strftime("%A, %d %b %Y"),
        time_slot=appointment.time_slot,
    )
    return await send_email(
        to=user.email, subject="Donation Appointment Confirmed", mjml_content=mjml_content
    )
