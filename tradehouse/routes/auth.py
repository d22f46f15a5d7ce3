"""Authentication routes."""

import logging

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from tradehouse.forms import LoginForm
from tradehouse.services import get_auth_provider
from tradehouse.utils.decorators import validate_form
from . import rate_limit

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
@rate_limit('LOGIN_RATE_LIMIT')
@validate_form(LoginForm)
def login(form):
    """Exchange admin credentials for a bearer token."""
    token, identity = get_auth_provider().issue_token(form.username.data, form.password.data)
    logger.info('Admin %s logged in', identity.username)
    return jsonify({
        'success': True,
        'message': 'Login successful',
        'token': token,
        'user': identity.to_dict(),
    })


@auth_bp.route('/verify', methods=['GET'])
@rate_limit('VERIFY_RATE_LIMIT')
@login_required
def verify():
    return jsonify({'success': True, 'user': current_user.to_dict()})


@auth_bp.route('/refresh', methods=['POST'])
@rate_limit('VERIFY_RATE_LIMIT')
@login_required
def refresh():
    token = get_auth_provider().refresh_token(current_user)
    return jsonify({'success': True, 'token': token, 'user': current_user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    # Tokens are stateless; the client discards its copy.
    return jsonify({'success': True, 'message': 'Logged out successfully'})
