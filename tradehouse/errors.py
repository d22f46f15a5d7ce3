"""API error types and the handlers that turn them into JSON responses."""

import logging
import traceback

from flask import jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500
    message = 'Server Error'
    code = None

    def __init__(self, message=None, code=None, **payload):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        self.payload = payload

    def to_dict(self):
        body = {'success': False, 'message': self.message}
        if self.code:
            body['code'] = self.code
        body.update(self.payload)
        return body


class ValidationError(ApiError):
    status_code = 400
    message = 'Validation failed'
    code = 'VALIDATION_ERROR'


class NotFound(ApiError):
    status_code = 404
    message = 'Not found'


class Unauthorized(ApiError):
    status_code = 401
    message = 'Access token required'
    code = 'TOKEN_REQUIRED'


class InvalidCredentials(Unauthorized):
    message = 'Invalid credentials'
    code = None


class TokenExpired(Unauthorized):
    message = 'Token expired'
    code = 'TOKEN_EXPIRED'


class InvalidToken(Unauthorized):
    message = 'Invalid token'
    code = 'INVALID_TOKEN'


class AccountLocked(Unauthorized):
    message = 'Account locked. Please try again later.'
    code = 'ACCOUNT_LOCKED'


class Forbidden(ApiError):
    status_code = 403
    message = 'Admin access required'
    code = 'INSUFFICIENT_PERMISSIONS'


class RateLimited(ApiError):
    status_code = 429
    message = 'Too many requests, please try again later'
    code = 'RATE_LIMIT_EXCEEDED'


class DuplicateSubmission(ApiError):
    status_code = 429
    message = 'Please wait before submitting another form.'
    code = 'DUPLICATE_SUBMISSION'


class UpstreamFailure(ApiError):
    status_code = 500
    message = 'Upstream service failed'
    code = 'UPSTREAM_FAILURE'


class ServerMisconfigured(ApiError):
    status_code = 500
    message = 'Server configuration error'
    code = 'SERVER_MISCONFIGURED'


def _error_response(error):
    return jsonify(error.to_dict()), error.status_code


def register_error_handlers(app):
    """Install JSON error handlers on the application."""

    @app.errorhandler(ApiError)
    def api_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            logger.error('%s %s failed: %s', request.method, request.path, error.message)
        return _error_response(error)

    @app.errorhandler(404)
    def not_found_error(error):
        return _error_response(NotFound(f'Route {request.path} not found'))

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'message': f'Method {request.method} not allowed on {request.path}',
        }), 405

    @app.errorhandler(413)
    def too_large(error):
        return jsonify({'success': False, 'message': 'Request entity too large'}), 413

    @app.errorhandler(429)
    def rate_limited(error):
        retry_after = None
        limit = getattr(error, 'limit', None)
        if limit is not None:
            retry_after = limit.limit.get_expiry()
        return _error_response(RateLimited(retryAfter=retry_after))

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        db.session.rollback()
        logger.exception('Database error on %s %s', request.method, request.path)
        return _error_response(ApiError('Database error'))

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'success': False, 'message': error.description}), error.code
        db.session.rollback()
        logger.exception('Unhandled error on %s %s', request.method, request.path)
        body = {'success': False, 'message': 'Server Error'}
        if current_app.config.get('INCLUDE_STACK_TRACES'):
            body['stack'] = traceback.format_exc()
        return jsonify(body), 500
