import io
import threading

import pytest

from tradehouse import create_app
from tradehouse.errors import UpstreamFailure
from tradehouse.extensions import db as _db
from tradehouse.services.images import ImageStore, UploadedImage


class RecordingTransport:
    """Mail transport that records messages and fails for chosen recipients."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []
        self._lock = threading.Lock()

    def __call__(self, message):
        recipient = message.recipients[0]
        if recipient in self.fail_for:
            raise RuntimeError('SMTP connection refused')
        with self._lock:
            self.sent.append(message)

    @property
    def recipients(self):
        return sorted(message.recipients[0] for message in self.sent)


class MemoryImageStore(ImageStore):
    def __init__(self):
        self.uploaded = []
        self.deleted = []

    def upload(self, file, folder):
        public_id = f'{folder}/{len(self.uploaded) + 1}-{file.filename}'
        self.uploaded.append(public_id)
        return UploadedImage(f'https://cdn.test/{public_id}', public_id)

    def delete(self, public_id):
        self.deleted.append(public_id)


class FailingImageStore(MemoryImageStore):
    def upload(self, file, folder):
        raise UpstreamFailure('Image upload failed: host unreachable')


def make_app(tmp_path, **overrides):
    settings = {'UPLOAD_FOLDER': str(tmp_path / 'uploads')}
    settings.update(overrides)
    app = create_app('testing', settings)
    with app.app_context():
        _db.create_all()
    return app


@pytest.fixture
def app(tmp_path):
    app = make_app(tmp_path)
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mail_transport(app):
    transport = RecordingTransport()
    app.extensions['contact_mailer'].transport = transport
    return transport


@pytest.fixture
def image_store(app):
    store = MemoryImageStore()
    app.extensions['image_store'] = store
    return store


def login(client, username='admin', password='admin123'):
    return client.post('/api/auth/login', json={'username': username, 'password': password})


@pytest.fixture
def admin_token(client):
    response = login(client)
    assert response.status_code == 200
    return response.get_json()['token']


@pytest.fixture
def admin_headers(admin_token):
    return {'Authorization': f'Bearer {admin_token}'}


def image_file(name='photo.png', content=b'\x89PNG\r\n\x1a\nfake-image-bytes'):
    return (io.BytesIO(content), name)


CONTACT = {
    'name': 'Jane Doe',
    'email': 'jane@acme.com',
    'phone': '+15551234567',
    'company': 'Acme Imports',
    'message': 'Hello there, need a quote for 20 tonnes of rice.',
}
