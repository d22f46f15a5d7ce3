"""Flask application factory."""

import logging
import os
from logging.config import dictConfig

import click
from flask import Flask, g
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import config
from .errors import Unauthorized, register_error_handlers
from .extensions import bcrypt, cors, db, limiter, login_manager, mail, migrate

logger = logging.getLogger(__name__)


def configure_logging(app):
    dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'default': {
                'format': '[%(asctime)s] %(levelname)s in %(name)s: %(message)s',
            },
        },
        'handlers': {
            'wsgi': {
                'class': 'logging.StreamHandler',
                'stream': 'ext://flask.logging.wsgi_errors_stream',
                'formatter': 'default',
            },
        },
        'root': {
            'level': app.config['LOG_LEVEL'],
            'handlers': ['wsgi'],
        },
    })


def create_app(config_name=None, overrides=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get('FLASK_CONFIG', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    if not app.config.get('JWT_SECRET'):
        if config_name == 'production':
            raise RuntimeError('JWT_SECRET must be set in production')
        logger.warning('JWT_SECRET is not set; admin login will fail')

    if app.config.get('TRUST_PROXY'):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    bcrypt.init_app(app)
    mail.init_app(app)
    limiter.init_app(app)
    cors.init_app(
        app,
        resources={
            r'/api/*': {'origins': app.config['CORS_ORIGINS']},
            r'/uploads/*': {'origins': app.config['CORS_ORIGINS']},
        },
        supports_credentials=True,
    )

    if app.config.get('IMAGE_STORE') == 'local':
        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    from .services import get_auth_provider, init_services
    init_services(app)

    # Bearer tokens only; nothing is kept in the session
    from .services.auth import identity_from_request
    login_manager.session_protection = None

    @login_manager.user_loader
    def load_user(user_id):
        return None

    @login_manager.request_loader
    def load_user_from_request(request):
        return identity_from_request(request, get_auth_provider())

    @login_manager.unauthorized_handler
    def unauthorized():
        raise g.get('auth_error') or Unauthorized()

    # Register blueprints
    from .routes import register_blueprints
    register_blueprints(app)

    register_error_handlers(app)

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('Database tables created.')

    return app
