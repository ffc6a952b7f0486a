"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from typing import Optional

from .config import FRONTEND_URL
from .utils.sanitization import sanitize_string

# Brand colors - Red/Slate color scheme
THEME = {
    "primary": "#e53e3e",
    "primary_dark": "#c53030",
    "primary_light": "#fed7d7",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
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
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Header -->
        <mj-section background-color="#ffffff" padding="32px 20px 0 20px">
          <mj-column>
            <mj-text font-size="22px" font-weight="700" color="{THEME['primary']}" align="center" padding="0">
              BloodConnect
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="24px 0 0 0" />
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="24px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}

            <mj-text padding="16px 0 0 0">
              Best regards,<br/>The BloodConnect Team
            </mj-text>
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="#94a3b8" padding="0">
              You're receiving this because you have an account with BloodConnect.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _escape(value) -> str:
    return sanitize_string(str(value))


def _details_list(rows: list[tuple[str, object]]) -> str:
    """Render label/value rows as a bulleted block, values escaped"""
    items = "<br/>".join(f"• {label}: <strong>{_escape(value)}</strong>" for label, value in rows)
    return f"""
    <mj-text padding="0 0 0 20px">
      {items}
    </mj-text>
    """


def welcome_email_template(user_name: str) -> str:
    user_name = _escape(user_name)
    content = f"""
    <mj-text>
      Hello {user_name},
    </mj-text>

    <mj-text>
      Thank you for joining BloodConnect. Your registration is complete, and you can now
      connect with blood donors and recipients.
    </mj-text>

    <mj-text padding="0 0 0 20px">
      • Find blood donors in your area<br/>
      • Create blood donation requests<br/>
      • Volunteer to donate blood<br/>
      • Track your donation history
    </mj-text>

    <mj-text>
      If you have any questions, feel free to reply to this email.
    </mj-text>
    """

    return get_base_template(
        title="Welcome to BloodConnect!",
        preview_text="Your registration is complete",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/dashboard",
        cta_label="Go to Dashboard",
    )


def request_confirmation_template(
    user_name: str,
    patient_name: str,
    blood_type: str,
    units_needed: int,
    hospital: str,
    urgency: str,
) -> str:
    user_name = _escape(user_name)
    content = f"""
    <mj-text>
      Hello {user_name},
    </mj-text>

    <mj-text>
      Your blood request has been created and is now active.
    </mj-text>

    {_details_list([
        ("Patient", patient_name),
        ("Blood Type", blood_type),
        ("Units Needed", units_needed),
        ("Hospital", hospital),
        ("Urgency", urgency),
    ])}

    <mj-text>
      We will notify you when donors are matched with your request.
    </mj-text>
    """

    return get_base_template(
        title="Blood Request Confirmation",
        preview_text=f"Your request for {blood_type} blood is active",
        content_sections=content,
    )


def donor_match_template(
    donor_name: str, donor_blood_type: str, needed_blood_type: str, hospital: str, urgency: str
) -> str:
    donor_name = _escape(donor_name)
    content = f"""
    <mj-text>
      Hello {donor_name},
    </mj-text>

    <mj-text>
      We've found a blood donation request that matches your blood type ({donor_blood_type}).
    </mj-text>

    {_details_list([
        ("Blood Type Needed", needed_blood_type),
        ("Hospital", hospital),
        ("Urgency", urgency),
    ])}

    <mj-text>
      If you're available to donate, please log in to your account and confirm your
      participation. Your donation can save a life!
    </mj-text>
    """

    return get_base_template(
        title="Blood Donation Match Found",
        preview_text=f"A {needed_blood_type} request near you needs donors",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/requests",
        cta_label="View Request",
    )


def volunteer_notification_template(
    requester_name: str, donor_name: str, donor_blood_type: str, patient_name: str
) -> str:
    requester_name, donor_name, patient_name = (
        _escape(requester_name),
        _escape(donor_name),
        _escape(patient_name),
    )
    content = f"""
    <mj-text>
      Hello {requester_name},
    </mj-text>

    <mj-text>
      {donor_name} ({donor_blood_type}) has volunteered to donate for {patient_name}.
    </mj-text>

    <mj-text>
      You can follow the progress of your request from your dashboard.
    </mj-text>
    """

    return get_base_template(
        title="A Donor Has Volunteered",
        preview_text=f"{donor_name} volunteered for your request",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/dashboard",
        cta_label="View Request",
    )


def donation_confirmation_template(
    donor_name: str, donation_date: str, blood_type: str, units: int, hospital: str
) -> str:
    donor_name = _escape(donor_name)
    content = f"""
    <mj-text>
      Hello {donor_name},
    </mj-text>

    <mj-text>
      Thank you for your recent blood donation. Your generosity helps save lives!
    </mj-text>

    {_details_list([
        ("Date", donation_date),
        ("Blood Type", blood_type),
        ("Units", units),
        ("Hospital", hospital),
    ])}

    <mj-text>
      Your donation count has been updated in your profile.
    </mj-text>
    """

    return get_base_template(
        title="Thank You for Your Donation!",
        preview_text="Your donation has been recorded",
        content_sections=content,
    )


def appointment_confirmation_template(
    user_name: str, center_name: str, center_address: str, date: str, time_slot: str
) -> str:
    user_name = _escape(user_name)
    content = f"""
    <mj-text>
      Hello {user_name},
    </mj-text>

    <mj-text>
      Your donation appointment is booked.
    </mj-text>

    {_details_list([
        ("Center", center_name),
        ("Address", center_address),
        ("Date", date),
        ("Time", time_slot),
    ])}

    <mj-text>
      Need to change plans? Appointments can be cancelled up to 24 hours before they start.
    </mj-text>
    """

    return get_base_template(
        title="Appointment Confirmed",
        preview_text=f"See you on {date} at {time_slot}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/appointments",
        cta_label="Manage Appointments",
    )
