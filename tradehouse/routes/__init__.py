"""Routes package - register all blueprints."""

from flask import Flask, current_app, request

from tradehouse.errors import NotFound
from tradehouse.extensions import db, limiter


def rate_limit(setting):
    """Per-client limit read from config at request time."""
    return limiter.limit(lambda: current_app.config[setting])


def get_or_404(model, ident, label):
    obj = db.session.get(model, ident)
    if obj is None:
        raise NotFound(f'{label} not found')
    return obj


def client_meta():
    return {
        'ip_address': request.remote_addr,
        'user_agent': request.headers.get('User-Agent', ''),
    }


def register_blueprints(app: Flask):
    """Register all blueprints with the application."""
    from .main import main_bp
    from .auth import auth_bp
    from .products import products_bp
    from .banners import banners_bp
    from .contact import contact_bp
    from .feedback import feedback_bp
    from .admin import admin_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(products_bp, url_prefix='/api/products')
    app.register_blueprint(banners_bp, url_prefix='/api/banners')
    app.register_blueprint(contact_bp, url_prefix='/api/contact')
    app.register_blueprint(feedback_bp, url_prefix='/api/feedback')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
