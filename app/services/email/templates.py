"""
Email templates.

Subjects and HTML bodies with {placeholders} filled from the event context.
"""

from dataclasses import dataclass
from html import escape
from typing import Any

from app.utils.exceptions import SideEffectFailure


@dataclass(frozen=True)
class EmailTemplate:
    """Subject and body of a template email."""

    subject: str
    body: str


TEMPLATES: dict[str, EmailTemplate] = {
    "matrix_complete": EmailTemplate(
        subject="Your matrix is complete!",
        body=(
            "<p>Hi {first_name},</p>"
            "<p>All 7 spots in your referral matrix are filled. "
            "Your bonus of <strong>${amount}</strong> is now in the payout queue.</p>"
            "<p>We will send it to {payment_handle} and email you when it is on its way.</p>"
        ),
    ),
    "payout_initiated": EmailTemplate(
        subject="Your ${amount} payout has been sent",
        body=(
            "<p>Hi {first_name},</p>"
            "<p>We sent <strong>${amount}</strong> via {payment_method} "
            "to {payment_handle} on {date}.</p>"
            "<p>Confirmation number: {confirmation_number}</p>"
        ),
    ),
    "daily_payout_reminder": EmailTemplate(
        subject="{count} payout(s) waiting - ${total_amount}",
        body=(
            "<p>There are <strong>{count}</strong> pending payout(s) "
            "totalling <strong>${total_amount}</strong> in the payout queue.</p>"
        ),
    ),
}


def render_template(name: str, context: dict[str, Any]) -> tuple[str, str]:
    """
    Render a template email.

    Args:
        name: Template name
        context: Placeholder values; they are HTML-escaped in the body

    Returns:
        Tuple of (subject, html_body)

    Raises:
        SideEffectFailure: Unknown template or missing placeholder
    """
    template = TEMPLATES.get(name)
    if template is None:
        raise SideEffectFailure(f"Unknown email template: {name}")

    values = {key: "" if value is None else str(value) for key, value in context.items()}
    try:
        subject = template.subject.format(**values)
        body = template.body.format(
            **{key: escape(value) for key, value in values.items()}
        )
    except KeyError as e:
        raise SideEffectFailure(
            f"Email template {name} is missing value {e}"
        ) from e

    return subject, body
