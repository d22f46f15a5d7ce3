import threading

from conftest import RecordingTransport
from tradehouse.models import Contact
from tradehouse.services.mailer import ContactMailer, DeliveryReport


def make_contact():
    return Contact(name='Jane Doe', email='jane@acme.com', phone='+15551234567',
                   company='', message='<b>Quote</b> for 20 tonnes please', ip_address='10.1.1.1')


def test_every_message_is_sent(app):
    transport = RecordingTransport()
    mailer = ContactMailer(['sales@tradehouse.test', 'ops@tradehouse.test'], 'TradeHouse',
                           transport=transport)
    with app.app_context():
        report = mailer.send_contact_emails(make_contact())

    assert report.success is True
    assert report.errors == []
    assert report.summary() == {
        'adminEmailsSent': 2,
        'adminEmailsFailed': 0,
        'customerEmailSent': True,
        'totalEmailsAttempted': 3,
        'totalEmailsSuccessful': 3,
    }
    subjects = sorted(message.subject for message in transport.sent)
    assert subjects == ['New Contact: Jane Doe', 'New Contact: Jane Doe',
                        'Thank you for contacting us']


def test_html_body_escapes_submitted_text(app):
    transport = RecordingTransport()
    mailer = ContactMailer(['sales@tradehouse.test'], 'TradeHouse', transport=transport)
    with app.app_context():
        mailer.send_contact_emails(make_contact())
    admin = next(m for m in transport.sent if m.recipients == ['sales@tradehouse.test'])
    assert '&lt;b&gt;Quote&lt;/b&gt;' in admin.html
    assert '<b>Quote</b>' in admin.body
    assert 'Company: Not provided' in admin.body


def test_failures_are_independent(app):
    transport = RecordingTransport(fail_for={'ops@tradehouse.test'})
    mailer = ContactMailer(['sales@tradehouse.test', 'ops@tradehouse.test'], 'TradeHouse',
                           transport=transport)
    with app.app_context():
        report = mailer.send_contact_emails(make_contact())

    assert report.success is True
    assert report.admin_sent == 1
    assert report.admin_failed == 1
    assert report.errors == ['ops@tradehouse.test: SMTP connection refused']


def test_customer_only_success_is_success(app):
    transport = RecordingTransport(fail_for={'sales@tradehouse.test'})
    mailer = ContactMailer(['sales@tradehouse.test'], 'TradeHouse', transport=transport)
    with app.app_context():
        report = mailer.send_contact_emails(make_contact())
    assert report.success is True
    assert report.customer_sent is True
    assert report.successful == 1


def test_slow_send_times_out(app):
    release = threading.Event()

    def stuck_transport(message):
        if message.recipients == ['ops@tradehouse.test']:
            release.wait(5)

    mailer = ContactMailer(['sales@tradehouse.test', 'ops@tradehouse.test'], 'TradeHouse',
                           timeout=0.2, transport=stuck_transport)
    try:
        with app.app_context():
            report = mailer.send_contact_emails(make_contact())
    finally:
        release.set()

    assert report.admin_sent == 1
    assert report.customer_sent is True
    assert report.errors == ['ops@tradehouse.test: timed out']


def test_report_without_any_success():
    report = DeliveryReport()
    report.admin_failed = 2
    assert report.success is False
    assert report.summary()['totalEmailsAttempted'] == 3
