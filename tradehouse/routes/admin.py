"""Admin dashboard and back-office account management."""

import logging

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from tradehouse.errors import ValidationError
from tradehouse.extensions import db
from tradehouse.models import User
from tradehouse.services import get_auth_provider
from tradehouse.services.stats import dashboard_stats
from tradehouse.utils.decorators import admin_required
from tradehouse.utils.pagination import paginate, pagination_args
from . import get_or_404, rate_limit

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


def _not_self(user, action):
    if str(user.id) == str(current_user.id):
        raise ValidationError(f'You cannot {action} your own account')


@admin_bp.route('/dashboard')
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def dashboard():
    """Aggregate counts for the admin home page."""
    return jsonify({'success': True, 'data': dashboard_stats()})


@admin_bp.route('/users')
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def users():
    page, limit = pagination_args(default_limit=20)
    query = User.query.order_by(User.created_at.desc(), User.id.desc())
    items, pagination = paginate(query, page, limit)
    return jsonify({
        'success': True,
        'data': {
            'users': [user.to_dict() for user in items],
            'pagination': pagination,
        }
    })


@admin_bp.route('/users/<int:user_id>')
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def get_user(user_id):
    user = get_or_404(User, user_id, 'User')
    return jsonify({'success': True, 'data': user.to_dict()})


@admin_bp.route('/users/<int:user_id>/deactivate', methods=['PATCH'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def deactivate_user(user_id):
    user = get_or_404(User, user_id, 'User')
    _not_self(user, 'deactivate')
    user.is_active = False
    db.session.commit()
    get_auth_provider().forget(user.id)
    logger.info('User %s deactivated by %s', user.username, current_user.username)
    return jsonify({
        'success': True,
        'message': 'User deactivated successfully',
        'data': user.to_dict(),
    })


@admin_bp.route('/users/<int:user_id>/activate', methods=['PATCH'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def activate_user(user_id):
    user = get_or_404(User, user_id, 'User')
    user.is_active = True
    user.login_attempts = 0
    user.lock_until = None
    db.session.commit()
    get_auth_provider().forget(user.id)
    logger.info('User %s activated by %s', user.username, current_user.username)
    return jsonify({
        'success': True,
        'message': 'User activated successfully',
        'data': user.to_dict(),
    })


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def delete_user(user_id):
    user = get_or_404(User, user_id, 'User')
    _not_self(user, 'delete')
    db.session.delete(user)
    db.session.commit()
    get_auth_provider().forget(user_id)
    return jsonify({'success': True, 'message': 'User deleted successfully'})
