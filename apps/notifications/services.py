"""
Service layer for notifications app.

Mail collaborator used by the report scheduler.
"""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils.html import escape

logger = logging.getLogger(__name__)


def send_report_email(to_email, subject, body, from_email=None):
    """
    Send a plain-text report email with a preformatted HTML alternative.

    Args:
        to_email: Recipient email address
        subject: Email subject
        body: Plain-text body
        from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)

    Returns:
        True if the mail backend accepted the message, False otherwise
    """
    if not to_email:
        logger.error(f'Report email "{subject}" has no recipient')
        return False

    message = EmailMultiAlternatives(
        subject=subject,
        body=body,
        from_email=from_email or settings.DEFAULT_FROM_EMAIL,
        to=[to_email],
    )
    message.attach_alternative(f'<pre>{escape(body)}</pre>', 'text/html')

    try:
        sent = message.send()
    except Exception as e:
        logger.error(f'Failed to send email to {to_email}: {e}')
        return False

    if sent:
        logger.info(f'Email sent to {to_email}: {subject}')
    return bool(sent)
