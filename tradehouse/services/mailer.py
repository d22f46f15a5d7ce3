"""Contact notification emails.

One message goes to every configured admin address and one acknowledgement
goes to the submitter. Messages are rendered in the calling thread and sent
concurrently; each send succeeds or fails on its own.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime

from flask import current_app, render_template
from flask_mail import Message

from tradehouse.extensions import mail

logger = logging.getLogger(__name__)


class DeliveryReport:
    """Outcome of one notification round."""

    def __init__(self):
        self.admin_sent = 0
        self.admin_failed = 0
        self.customer_sent = False
        self.errors = []

    @property
    def attempted(self):
        return self.admin_sent + self.admin_failed + 1

    @property
    def successful(self):
        return self.admin_sent + (1 if self.customer_sent else 0)

    @property
    def success(self):
        return self.successful > 0

    def summary(self):
        return {
            'adminEmailsSent': self.admin_sent,
            'adminEmailsFailed': self.admin_failed,
            'customerEmailSent': self.customer_sent,
            'totalEmailsAttempted': self.attempted,
            'totalEmailsSuccessful': self.successful,
        }


class SampleContact:
    """Stand-in submission used by the test-email endpoint. Never stored."""

    def __init__(self, email):
        self.id = None
        self.name = 'Test User'
        self.email = email
        self.phone = '+1234567890'
        self.company = 'Test Company'
        self.message = 'Email system test - all services operational'
        self.ip_address = '127.0.0.1'
        self.created_at = datetime.utcnow()


class ContactMailer:
    """Sends the admin notifications and the customer acknowledgement.

    ``transport`` is the callable that actually delivers a ``Message``; it
    defaults to Flask-Mail and runs inside an application context.
    """

    def __init__(self, admin_emails, company_name, timeout=20, transport=None):
        self.admin_emails = list(admin_emails or [])
        self.company_name = company_name
        self.timeout = timeout
        self.transport = transport or mail.send

    def admin_message(self, contact, recipient):
        return Message(
            subject=f'New Contact: {contact.name or "Unknown"}',
            recipients=[recipient],
            html=render_template('emails/admin_notification.html',
                                 contact=contact, company_name=self.company_name),
            body=render_template('emails/admin_notification.txt',
                                 contact=contact, company_name=self.company_name),
        )

    def customer_message(self, contact):
        return Message(
            subject='Thank you for contacting us',
            recipients=[contact.email],
            html=render_template('emails/customer_ack.html',
                                 contact=contact, company_name=self.company_name),
            body=render_template('emails/customer_ack.txt',
                                 contact=contact, company_name=self.company_name),
        )

    def _deliver(self, app, message):
        with app.app_context():
            self.transport(message)

    def send_contact_emails(self, contact):
        """Send every message for ``contact`` and report what happened."""
        app = current_app._get_current_object()
        report = DeliveryReport()
        jobs = [(recipient, self.admin_message(contact, recipient))
                for recipient in self.admin_emails]
        customer = self.customer_message(contact) if contact.email else None

        executor = ThreadPoolExecutor(max_workers=len(jobs) + 1,
                                      thread_name_prefix='contact-mail')
        try:
            admin_futures = {executor.submit(self._deliver, app, message): recipient
                             for recipient, message in jobs}
            customer_future = None
            if customer is not None:
                customer_future = executor.submit(self._deliver, app, customer)

            pending = list(admin_futures)
            if customer_future is not None:
                pending.append(customer_future)
            done, _ = wait(pending, timeout=self.timeout)

            for future, recipient in admin_futures.items():
                error = self._failure(future, done)
                if error is None:
                    report.admin_sent += 1
                else:
                    report.admin_failed += 1
                    report.errors.append(f'{recipient}: {error}')

            if customer_future is None:
                report.errors.append('Customer email failed: no recipient address')
            else:
                error = self._failure(customer_future, done)
                if error is None:
                    report.customer_sent = True
                else:
                    report.errors.append(f'Customer email failed: {error}')
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if report.errors:
            logger.warning('Contact email fan-out had %s failure(s): %s',
                           len(report.errors), '; '.join(report.errors))
        return report

    @staticmethod
    def _failure(future, done):
        if future not in done:
            return 'timed out'
        error = future.exception()
        if error is not None:
            return str(error) or error.__class__.__name__
        return None

    def send_test_emails(self):
        """Send the full set for a sample contact addressed to the sender."""
        sender = current_app.config.get('MAIL_USERNAME') or current_app.config.get('MAIL_DEFAULT_SENDER')
        report = self.send_contact_emails(SampleContact(sender))
        return report, list(self.admin_emails)


def build_contact_mailer(app):
    config = app.config
    return ContactMailer(
        admin_emails=config.get('ADMIN_EMAILS'),
        company_name=config.get('COMPANY_NAME'),
        timeout=config.get('EMAIL_SEND_TIMEOUT', 20),
    )
