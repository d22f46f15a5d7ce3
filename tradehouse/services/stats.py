"""Admin dashboard aggregates, computed live on every call."""

import time
from datetime import datetime

from sqlalchemy import and_, case, func

from tradehouse.extensions import db
from tradehouse.models import Banner, Contact, Feedback, Product, User
from tradehouse.utils.dates import isoformat, period_starts

_started = time.monotonic()


def _count_since(column, since):
    return func.coalesce(func.sum(case((column >= since, 1), else_=0)), 0)


def contact_stats(now=None):
    today, week, month = period_starts(now)
    total, today_count, week_count, month_count, sent, failed = db.session.query(
        func.count(Contact.id),
        _count_since(Contact.created_at, today),
        _count_since(Contact.created_at, week),
        _count_since(Contact.created_at, month),
        func.coalesce(func.sum(case((Contact.email_sent.is_(True), 1), else_=0)), 0),
        func.coalesce(func.sum(case(
            (and_(Contact.email_sent.isnot(True), Contact.email_error.isnot(None)), 1),
            else_=0)), 0),
    ).one()

    by_status = {
        (status or 'new'): count
        for status, count in db.session.query(Contact.status, func.count(Contact.id))
        .group_by(Contact.status).all()
    }

    return {
        'overview': {
            'total': total,
            'today': int(today_count),
            'week': int(week_count),
            'month': int(month_count),
        },
        'byStatus': by_status,
        'emailStats': {
            'emailsSent': int(sent),
            'emailsFailed': int(failed),
        },
    }


def feedback_stats(now=None):
    today, week, _ = period_starts(now)
    total, recent, today_count = db.session.query(
        func.count(Feedback.id),
        _count_since(Feedback.submitted_at, week),
        _count_since(Feedback.submitted_at, today),
    ).one()
    return {
        'overview': {
            'total': total,
            'recent': int(recent),
            'today': int(today_count),
        },
        'timestamp': isoformat(datetime.utcnow()),
    }


def dashboard_stats():
    user_total, user_active = db.session.query(
        func.count(User.id),
        func.coalesce(func.sum(case((User.is_active.is_(True), 1), else_=0)), 0),
    ).one()
    by_role = dict(db.session.query(User.role, func.count(User.id)).group_by(User.role).all())

    contact_total, contact_new = db.session.query(
        func.count(Contact.id),
        func.coalesce(func.sum(case((Contact.status == 'new', 1), else_=0)), 0),
    ).one()

    return {
        'users': {'total': user_total, 'active': int(user_active), 'byRole': by_role},
        'contacts': {'total': contact_total, 'new': int(contact_new)},
        'products': {'total': db.session.query(func.count(Product.id)).scalar()},
        'banners': {'total': db.session.query(func.count(Banner.id)).scalar()},
        'feedback': {'total': db.session.query(func.count(Feedback.id)).scalar()},
        'systemInfo': {
            'uptime': int(time.monotonic() - _started),
            'timestamp': isoformat(datetime.utcnow()),
        },
    }
