"""Contact form and back-office contact management."""

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required
from sqlalchemy import or_

from tradehouse.extensions import db
from tradehouse.forms import ContactForm, ContactStatusForm
from tradehouse.models import CONTACT_STATUSES, Contact
from tradehouse.services.contacts import (resend_contact_emails, send_test_emails,
                                          submit_contact)
from tradehouse.services.stats import contact_stats
from tradehouse.utils.dates import isoformat
from tradehouse.utils.decorators import admin_required, validate_form
from tradehouse.utils.pagination import paginate, pagination_args
from . import client_meta, get_or_404, rate_limit

logger = logging.getLogger(__name__)

contact_bp = Blueprint('contact', __name__)


@contact_bp.route('/submit', methods=['POST'])
@rate_limit('CONTACT_RATE_LIMIT')
@validate_form(ContactForm)
def submit(form):
    """Public contact form submission."""
    fields = {
        'name': form.name.data,
        'email': form.email.data,
        'phone': form.phone.data,
        'company': form.company.data,
        'message': form.message.data,
    }
    contact = submit_contact(fields, client_meta())
    return jsonify({
        'success': True,
        'message': 'Thank you for your message!',
        'data': {
            'id': contact.id,
            'submittedAt': isoformat(contact.created_at),
            'emailSent': bool(contact.email_sent),
        }
    }), 201


@contact_bp.route('/submissions', methods=['GET'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def submissions():
    page, limit = pagination_args(default_limit=10)
    query = Contact.query

    status = request.args.get('status')
    if status in CONTACT_STATUSES:
        query = query.filter(Contact.status == status)

    search = (request.args.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Contact.name.ilike(pattern),
            Contact.email.ilike(pattern),
            Contact.company.ilike(pattern)
        ))

    query = query.order_by(Contact.created_at.desc(), Contact.id.desc())
    contacts, pagination = paginate(query, page, limit)
    return jsonify({
        'success': True,
        'data': {
            'contacts': [contact.to_dict(summary=True) for contact in contacts],
            'pagination': pagination,
        }
    })


@contact_bp.route('/admin/stats', methods=['GET'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def stats():
    return jsonify({'success': True, 'data': contact_stats()})


@contact_bp.route('/test-email', methods=['POST'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def test_email():
    report, recipients = send_test_emails()
    return jsonify({
        'success': report.success,
        'message': 'Test emails sent!' if report.success else 'Some emails failed',
        'details': report.summary(),
        'errors': report.errors,
        'recipients': recipients,
    })


@contact_bp.route('/<int:contact_id>', methods=['GET'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def get_contact(contact_id):
    contact = get_or_404(Contact, contact_id, 'Contact')
    return jsonify({'success': True, 'data': contact.to_dict()})


@contact_bp.route('/<int:contact_id>/status', methods=['PATCH'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
@validate_form(ContactStatusForm)
def update_status(form, contact_id):
    contact = get_or_404(Contact, contact_id, 'Contact')
    contact.status = form.status.data
    db.session.commit()
    return jsonify({
        'success': True,
        'message': 'Status updated successfully',
        'data': {
            'id': contact.id,
            'status': contact.status,
            'updatedAt': isoformat(contact.updated_at),
        }
    })


@contact_bp.route('/<int:contact_id>', methods=['DELETE'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def delete_contact(contact_id):
    contact = get_or_404(Contact, contact_id, 'Contact')
    data = {'id': contact.id, 'name': contact.name, 'email': contact.email}
    db.session.delete(contact)
    db.session.commit()
    return jsonify({
        'success': True,
        'message': 'Contact deleted successfully',
        'data': data,
    })


@contact_bp.route('/<int:contact_id>/resend-emails', methods=['POST'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def resend_emails(contact_id):
    contact = get_or_404(Contact, contact_id, 'Contact')
    report = resend_contact_emails(contact)
    if report is None:
        return jsonify({'success': False, 'message': 'Failed to resend emails',
                        'error': contact.email_error}), 500
    logger.info('Resent emails for contact %s: %s', contact.id, report.summary())
    return jsonify({
        'success': report.success,
        'message': 'Emails resent successfully!' if report.success else 'Failed to resend emails',
        'data': report.summary(),
    })
