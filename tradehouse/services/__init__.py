"""Application services kept on ``app.extensions`` so tests can swap them."""

from flask import current_app


def init_services(app):
    from .auth import build_auth_provider
    from .images import build_image_store
    from .mailer import build_contact_mailer

    app.extensions['image_store'] = build_image_store(app)
    app.extensions['auth_provider'] = build_auth_provider(app)
    app.extensions['contact_mailer'] = build_contact_mailer(app)


def get_image_store():
    return current_app.extensions['image_store']


def get_auth_provider():
    return current_app.extensions['auth_provider']


def get_contact_mailer():
    return current_app.extensions['contact_mailer']
