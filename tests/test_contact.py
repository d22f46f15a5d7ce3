from datetime import timedelta

from conftest import CONTACT, RecordingTransport
from tradehouse.extensions import db
from tradehouse.models import Contact


def submit(client, **changes):
    data = dict(CONTACT, **changes)
    return client.post('/api/contact/submit', json=data,
                       headers={'User-Agent': 'pytest-browser'})


def backdate(app, contact_id, delta):
    with app.app_context():
        contact = db.session.get(Contact, contact_id)
        contact.created_at = contact.created_at - delta
        db.session.commit()


def test_submit_stores_contact_and_sends_emails(app, client, mail_transport):
    response = submit(client, email='  Jane@Acme.com ', name=' Jane Doe ')
    assert response.status_code == 201
    body = response.get_json()
    assert body['success'] is True
    assert body['data']['emailSent'] is True
    assert body['data']['submittedAt'].endswith('Z')

    assert mail_transport.recipients == ['jane@acme.com', 'ops@tradehouse.test', 'sales@tradehouse.test']

    with app.app_context():
        contact = db.session.get(Contact, body['data']['id'])
        assert contact.email == 'jane@acme.com'
        assert contact.name == 'Jane Doe'
        assert contact.status == 'new'
        assert contact.email_sent is True
        assert contact.email_error is None
        assert contact.user_agent == 'pytest-browser'
        assert contact.email_metadata['adminEmailsSent'] == 2
        assert contact.email_metadata['customerEmailSent'] is True
        assert contact.email_metadata['totalEmailsSuccessful'] == 3
        assert contact.email_metadata['sentAt'].endswith('Z')


def test_duplicate_within_window_is_rejected(app, client, mail_transport):
    first = submit(client)
    assert first.status_code == 201

    second = submit(client, email='JANE@acme.com')
    assert second.status_code == 429
    body = second.get_json()
    assert body['code'] == 'DUPLICATE_SUBMISSION'
    assert body['message'] == 'Please wait before submitting another form.'
    assert body['lastSubmission'] == first.get_json()['data']['submittedAt']

    with app.app_context():
        assert Contact.query.count() == 1


def test_resubmission_after_window_is_accepted(app, client, mail_transport):
    first = submit(client)
    backdate(app, first.get_json()['data']['id'], timedelta(minutes=5, seconds=1))
    assert submit(client).status_code == 201


def test_resubmission_just_inside_window_is_rejected(app, client, mail_transport):
    first = submit(client)
    backdate(app, first.get_json()['data']['id'], timedelta(minutes=4, seconds=50))
    assert submit(client).status_code == 429


def test_other_addresses_are_not_duplicates(client, mail_transport):
    assert submit(client).status_code == 201
    assert submit(client, email='buyer@globex.com').status_code == 201


def test_partial_email_failure_still_counts_as_sent(app, client):
    mailer = app.extensions['contact_mailer']
    mailer.admin_emails = ['a@tradehouse.test', 'b@tradehouse.test', 'c@tradehouse.test']
    mailer.transport = RecordingTransport(fail_for={'a@tradehouse.test', 'b@tradehouse.test'})

    response = submit(client)
    assert response.status_code == 201
    assert response.get_json()['data']['emailSent'] is True

    with app.app_context():
        contact = Contact.query.one()
        assert contact.email_sent is True
        assert contact.email_metadata['adminEmailsSent'] == 1
        assert contact.email_metadata['adminEmailsFailed'] == 2
        assert contact.email_metadata['customerEmailSent'] is True
        assert contact.email_metadata['totalEmailsAttempted'] == 4
        assert 'a@tradehouse.test: SMTP connection refused' in contact.email_error
        assert 'b@tradehouse.test: SMTP connection refused' in contact.email_error


def test_total_email_failure_keeps_the_record(app, client):
    mailer = app.extensions['contact_mailer']
    mailer.transport = RecordingTransport(
        fail_for={'sales@tradehouse.test', 'ops@tradehouse.test', 'jane@acme.com'})

    response = submit(client)
    assert response.status_code == 201
    assert response.get_json()['data']['emailSent'] is False

    with app.app_context():
        contact = Contact.query.one()
        assert contact.email_sent is False
        assert contact.email_metadata is None
        assert contact.email_error.count('; ') == 2
        assert 'Customer email failed: SMTP connection refused' in contact.email_error


def test_notifier_crash_is_recorded(app, client):
    class BrokenMailer:
        def send_contact_emails(self, contact):
            raise RuntimeError('mail server misconfigured')

    app.extensions['contact_mailer'] = BrokenMailer()
    response = submit(client)
    assert response.status_code == 201
    assert response.get_json()['data']['emailSent'] is False
    with app.app_context():
        assert Contact.query.one().email_error == 'Email service error: mail server misconfigured'


def test_invalid_submission(client, mail_transport):
    response = submit(client, name='J4ne', phone='0123', message='short')
    assert response.status_code == 400
    fields = {error['field'] for error in response.get_json()['errors']}
    assert fields == {'name', 'phone', 'message'}
    assert mail_transport.sent == []


def test_company_is_optional(client, mail_transport):
    data = dict(CONTACT)
    del data['company']
    response = client.post('/api/contact/submit', json=data)
    assert response.status_code == 201


class TestAdmin:

    def seed(self, app, count=3):
        with app.app_context():
            for i in range(count):
                db.session.add(Contact(
                    name=f'Buyer {i}', email=f'buyer{i}@globex.com', phone='+15550000000',
                    company='Globex' if i % 2 else 'Initech', message='Need a price list please.',
                    ip_address='10.0.0.1', user_agent='agent', email_metadata={'sentAt': 'x'}
                ))
            db.session.commit()

    def test_submissions_require_admin(self, client):
        assert client.get('/api/contact/submissions').status_code == 401

    def test_submissions_list(self, app, client, admin_headers):
        self.seed(app)
        response = client.get('/api/contact/submissions?search=globex&limit=5', headers=admin_headers)
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['pagination']['total'] == 3
        assert data['pagination']['limit'] == 5
        first = data['contacts'][0]
        assert 'ipAddress' not in first
        assert 'userAgent' not in first
        assert 'emailMetadata' not in first

    def test_status_filter_and_update(self, app, client, admin_headers):
        self.seed(app, count=2)
        response = client.patch('/api/contact/1/status', json={'status': 'responded'},
                                headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'responded'

        response = client.get('/api/contact/submissions?status=responded', headers=admin_headers)
        contacts = response.get_json()['data']['contacts']
        assert [c['id'] for c in contacts] == [1]

    def test_status_must_be_known(self, app, client, admin_headers):
        self.seed(app, count=1)
        response = client.patch('/api/contact/1/status', json={'status': 'archived'},
                                headers=admin_headers)
        assert response.status_code == 400

    def test_get_and_delete(self, app, client, admin_headers):
        self.seed(app, count=1)
        response = client.get('/api/contact/1', headers=admin_headers)
        assert response.get_json()['data']['ipAddress'] == '10.0.0.1'

        response = client.delete('/api/contact/1', headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()['data']['email'] == 'buyer0@globex.com'
        assert client.get('/api/contact/1', headers=admin_headers).status_code == 404

    def test_unknown_and_malformed_ids(self, client, admin_headers):
        assert client.get('/api/contact/999', headers=admin_headers).status_code == 404
        assert client.get('/api/contact/not-an-id', headers=admin_headers).status_code == 404

    def test_stats(self, app, client, admin_headers, mail_transport):
        submit(client)
        self.seed(app, count=2)
        with app.app_context():
            failed = db.session.get(Contact, 2)
            failed.mark_notify_failed('smtp down')
            db.session.commit()

        response = client.get('/api/contact/admin/stats', headers=admin_headers)
        data = response.get_json()['data']
        assert data['overview']['total'] == 3
        assert data['overview']['today'] == 3
        assert data['byStatus'] == {'new': 3}
        assert data['emailStats'] == {'emailsSent': 1, 'emailsFailed': 1}

    def test_resend_emails(self, app, client, admin_headers, mail_transport):
        self.seed(app, count=1)
        response = client.post('/api/contact/1/resend-emails', headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()['success'] is True
        with app.app_context():
            contact = db.session.get(Contact, 1)
            assert contact.email_sent is True
            assert 'resentAt' in contact.email_metadata

    def test_test_email(self, client, admin_headers, mail_transport):
        response = client.post('/api/contact/test-email', headers=admin_headers)
        body = response.get_json()
        assert body['success'] is True
        assert body['recipients'] == ['sales@tradehouse.test', 'ops@tradehouse.test']
        assert 'noreply@tradehouse.test' in mail_transport.recipients


def test_numeric_phone_is_accepted(client):
    response = submit(client, phone=15551234567)
    assert response.status_code == 201


def test_accented_name_and_short_company(app, client):
    response = submit(client, name='José Müller', company='X')
    assert response.status_code == 201
    with app.app_context():
        contact = db.session.get(Contact, response.get_json()['data']['id'])
        assert contact.name == 'José Müller'
        assert contact.company == 'X'


def test_name_with_digits_is_rejected(client):
    response = submit(client, name='Agent 007')
    assert response.status_code == 400
    assert response.get_json()['code'] == 'VALIDATION_ERROR'
