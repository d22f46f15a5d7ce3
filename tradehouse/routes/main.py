"""Service banner, health check and local uploads."""

from datetime import datetime

from flask import Blueprint, current_app, jsonify, send_from_directory
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tradehouse.extensions import db
from tradehouse.utils.dates import isoformat

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    return jsonify({
        'success': True,
        'message': f"{current_app.config['COMPANY_NAME']} API",
        'version': '1.0.0',
    })


@main_bp.route('/api/health')
def health():
    """Liveness plus a database ping."""
    try:
        db.session.execute(text('SELECT 1'))
        database = 'connected'
    except SQLAlchemyError:
        db.session.rollback()
        database = 'disconnected'
    healthy = database == 'connected'
    return jsonify({
        'success': healthy,
        'status': 'OK' if healthy else 'DEGRADED',
        'database': database,
        'timestamp': isoformat(datetime.utcnow()),
    }), 200 if healthy else 503


@main_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
