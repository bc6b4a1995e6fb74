"""
Email utility module.
Handles account emails using Flask-Mailman, with retry and exponential backoff.
"""
import time
import uuid
import logging

from flask import render_template, current_app, url_for
from flask_mailman import EmailMultiAlternatives

logger = logging.getLogger(__name__)

# Retry configuration
MAX_RETRIES = 3
RETRY_BASE_DELAY = 2  # seconds (2, 4, 8 with exponential backoff)


def send_email(subject, recipient, template, **kwargs):
    """
    Send an email using Flask-Mailman with retry logic.

    Args:
        subject: Email subject (will be prefixed with [Vantripper])
        recipient: Email address of the recipient
        template: Template name (without extension) in templates/email/
        **kwargs: Context variables for the template

    Returns:
        bool: True if email sent successfully, False otherwise
    """
    email_id = str(uuid.uuid4())[:8]

    logger.info(f"[EMAIL:{email_id}] Sending to {recipient} - {subject} (template: {template})")

    try:
        html_body = render_template(f'email/{template}.html', **kwargs)
        text_body = render_template(f'email/{template}.txt', **kwargs)

        msg = EmailMultiAlternatives(
            subject=f"[Vantripper] {subject}",
            body=text_body,
            from_email=current_app.config.get('MAIL_DEFAULT_SENDER', 'noreply@vantripper.com'),
            to=[recipient],
        )
        msg.attach_alternative(html_body, 'text/html')
    except Exception as e:
        logger.error(f"[EMAIL:{email_id}] Could not build message for {recipient}: {e}")
        return False

    return _send_with_retry(msg, email_id, recipient)


def _send_with_retry(msg, email_id, recipient):
    """
    Send a prepared message with exponential backoff retry.

    Returns:
        bool: True if sent successfully after retries
    """
    last_error = None
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            msg.send()
            logger.info(f"[EMAIL:{email_id}] Sent to {recipient}"
                        + (f" (attempt {attempt})" if attempt > 1 else ""))
            return True
        except Exception as e:
            last_error = e
            if attempt < MAX_RETRIES:
                delay = RETRY_BASE_DELAY * (2 ** (attempt - 1))
                logger.warning(
                    f"[EMAIL:{email_id}] Attempt {attempt}/{MAX_RETRIES} failed "
                    f"for {recipient}: {e}, retrying in {delay}s"
                )
                time.sleep(delay)
            else:
                logger.error(
                    f"[EMAIL:{email_id}] Giving up after {MAX_RETRIES} attempts "
                    f"for {recipient}: {last_error}"
                )
    return False


def send_verification_email(user):
    """Send the 'verify your email address' message to a newly registered user."""
    token = user.verification_token or user.generate_verification_token()
    verify_url = url_for('api.api_verify_email', token=token, _external=True)
    return send_email(
        subject='Verify your email address',
        recipient=user.email,
        template='verify_email',
        user=user,
        verify_url=verify_url,
    )


def send_account_approved_email(user):
    """Tell a user their account was approved and they can now sign in."""
    return send_email(
        subject='Your account has been approved',
        recipient=user.email,
        template='account_approved',
        user=user,
        app_url=current_app.config.get('APP_URL'),
    )
