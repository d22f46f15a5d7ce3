"""Site feedback routes."""

from datetime import datetime

from flask import Blueprint, jsonify, request
from flask_login import login_required

from tradehouse.extensions import db
from tradehouse.forms import FeedbackForm
from tradehouse.models import Feedback
from tradehouse.services.stats import feedback_stats
from tradehouse.utils.dates import isoformat, parse_client_timestamp
from tradehouse.utils.decorators import admin_required, validate_form
from tradehouse.utils.pagination import paginate, pagination_args, sort_descending
from . import client_meta, get_or_404, rate_limit

feedback_bp = Blueprint('feedback', __name__)


@feedback_bp.route('', methods=['POST'])
@rate_limit('FEEDBACK_RATE_LIMIT')
@validate_form(FeedbackForm)
def submit_feedback(form):
    """Anonymous feedback. Every field is optional."""
    meta = client_meta()
    feedback = Feedback(
        message=form.message.data or '',
        submitted_at=parse_client_timestamp(form.submittedAt.data) or datetime.utcnow(),
        user_agent=(form.userAgent.data or meta['user_agent'] or '')[:500],
        page=form.page.data or 'unknown',
        ip_address=meta['ip_address'] or '',
    )
    db.session.add(feedback)
    db.session.commit()
    return jsonify({
        'success': True,
        'message': 'Feedback submitted successfully',
        'data': {
            'id': feedback.id,
            'submittedAt': isoformat(feedback.submitted_at),
        }
    }), 201


@feedback_bp.route('', methods=['GET'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def list_feedback():
    page, limit = pagination_args(default_limit=10)
    if sort_descending():
        order = (Feedback.submitted_at.desc(), Feedback.id.desc())
    else:
        order = (Feedback.submitted_at.asc(), Feedback.id.asc())
    items, pagination = paginate(Feedback.query.order_by(*order), page, limit)
    return jsonify({
        'success': True,
        'data': {
            'feedback': [item.to_dict() for item in items],
            'pagination': pagination,
        }
    })


@feedback_bp.route('/stats', methods=['GET'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def stats():
    return jsonify({'success': True, 'data': feedback_stats()})


@feedback_bp.route('/<int:feedback_id>', methods=['GET'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def get_feedback(feedback_id):
    feedback = get_or_404(Feedback, feedback_id, 'Feedback')
    return jsonify({'success': True, 'data': feedback.to_dict()})


@feedback_bp.route('/<int:feedback_id>', methods=['DELETE'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def delete_feedback(feedback_id):
    feedback = get_or_404(Feedback, feedback_id, 'Feedback')
    db.session.delete(feedback)
    db.session.commit()
    return jsonify({
        'success': True,
        'message': 'Feedback deleted successfully',
        'data': {'id': feedback_id},
    })
