"""Contact form submission pipeline."""

import logging

from flask import current_app

from tradehouse.errors import DuplicateSubmission
from tradehouse.models import Contact
from tradehouse.services import get_contact_mailer
from tradehouse.services.notifications import deliver, record_and_notify
from tradehouse.utils.dates import isoformat

logger = logging.getLogger(__name__)


def submit_contact(fields, client_meta):
    """Store a validated submission and send its emails.

    ``fields`` holds name, email, phone, company and message, already
    trimmed and validated. ``client_meta`` holds ip_address and user_agent.
    Raises ``DuplicateSubmission`` when the same address submitted within
    the duplicate window.
    """
    window = current_app.config['CONTACT_DUPLICATE_WINDOW_MINUTES']
    recent = Contact.find_recent_duplicate(fields.get('email'), minutes=window)
    if recent is not None:
        logger.info('Duplicate contact submission from %s', recent.email)
        raise DuplicateSubmission(lastSubmission=isoformat(recent.created_at))

    contact = Contact(
        name=fields.get('name'),
        email=fields.get('email'),
        phone=fields.get('phone'),
        company=fields.get('company') or '',
        message=fields.get('message'),
        status='new',
        email_sent=False,
        ip_address=client_meta.get('ip_address'),
        user_agent=(client_meta.get('user_agent') or '')[:500],
    )
    mailer = get_contact_mailer()
    return record_and_notify(contact, mailer.send_contact_emails)


def resend_contact_emails(contact):
    mailer = get_contact_mailer()
    return deliver(contact, mailer.send_contact_emails, stamp='resentAt')


def send_test_emails():
    return get_contact_mailer().send_test_emails()
