from datetime import datetime, timedelta

from conftest import make_app
from tradehouse.extensions import db
from tradehouse.models import Feedback


def test_empty_feedback_is_accepted(app, client):
    response = client.post('/api/feedback', json={}, headers={'User-Agent': 'widget/1.0'})
    assert response.status_code == 201
    feedback_id = response.get_json()['data']['id']
    with app.app_context():
        feedback = db.session.get(Feedback, feedback_id)
        assert feedback.message == ''
        assert feedback.page == 'unknown'
        assert feedback.user_agent == 'widget/1.0'
        assert feedback.submitted_at is not None


def test_client_fields_are_kept(app, client):
    response = client.post('/api/feedback', json={
        'message': '  Great catalog ',
        'submittedAt': '2024-03-01T10:30:00.000Z',
        'userAgent': 'Mozilla/5.0',
        'page': '/products',
    })
    assert response.status_code == 201
    assert response.get_json()['data']['submittedAt'] == '2024-03-01T10:30:00Z'
    with app.app_context():
        feedback = Feedback.query.one()
        assert feedback.message == 'Great catalog'
        assert feedback.user_agent == 'Mozilla/5.0'
        assert feedback.page == '/products'


def test_bad_timestamp_falls_back_to_now(app, client):
    client.post('/api/feedback', json={'submittedAt': 'yesterday-ish'})
    with app.app_context():
        submitted = Feedback.query.one().submitted_at
        assert datetime.utcnow() - submitted < timedelta(minutes=1)


def test_admin_list_sorted_and_paginated(app, client, admin_headers):
    now = datetime.utcnow()
    with app.app_context():
        for days in (3, 1, 2):
            db.session.add(Feedback(message=f'{days} days ago', submitted_at=now - timedelta(days=days)))
        db.session.commit()

    response = client.get('/api/feedback?limit=2', headers=admin_headers)
    data = response.get_json()['data']
    assert [f['message'] for f in data['feedback']] == ['1 days ago', '2 days ago']
    assert data['pagination']['hasNext'] is True

    response = client.get('/api/feedback?sortOrder=asc', headers=admin_headers)
    assert response.get_json()['data']['feedback'][0]['message'] == '3 days ago'


def test_admin_requires_token(client):
    assert client.get('/api/feedback').status_code == 401
    assert client.get('/api/feedback/stats').status_code == 401


def test_stats(app, client, admin_headers):
    now = datetime.utcnow()
    with app.app_context():
        db.session.add(Feedback(message='now', submitted_at=now))
        db.session.add(Feedback(message='old', submitted_at=now - timedelta(days=30)))
        db.session.commit()
    overview = client.get('/api/feedback/stats', headers=admin_headers).get_json()['data']['overview']
    assert overview == {'total': 2, 'recent': 1, 'today': 1}


def test_get_and_delete(app, client, admin_headers):
    feedback_id = client.post('/api/feedback', json={'message': 'hi'}).get_json()['data']['id']
    assert client.get(f'/api/feedback/{feedback_id}', headers=admin_headers).get_json()['data']['message'] == 'hi'
    assert client.delete(f'/api/feedback/{feedback_id}', headers=admin_headers).status_code == 200
    response = client.get(f'/api/feedback/{feedback_id}', headers=admin_headers)
    assert response.status_code == 404
    assert response.get_json()['message'] == 'Feedback not found'


def test_submissions_are_rate_limited(tmp_path):
    app = make_app(tmp_path, RATELIMIT_ENABLED=True, FEEDBACK_RATE_LIMIT='2 per minute')
    client = app.test_client()
    assert client.post('/api/feedback', json={}).status_code == 201
    assert client.post('/api/feedback', json={}).status_code == 201
    response = client.post('/api/feedback', json={})
    assert response.status_code == 429
    assert response.get_json()['code'] == 'RATE_LIMIT_EXCEEDED'


def test_numeric_message_is_stored_as_text(app, client):
    response = client.post('/api/feedback', json={'message': 5})
    assert response.status_code == 201
    with app.app_context():
        assert Feedback.query.one().message == '5'


def test_non_object_body_is_rejected(client):
    response = client.post('/api/feedback', json=['x'])
    assert response.status_code == 400
    assert response.get_json()['code'] == 'VALIDATION_ERROR'
