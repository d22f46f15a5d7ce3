"""Persist-then-notify.

A record is committed before anyone is told about it. The notifier's outcome
is written back onto the record afterwards; a failing notifier or a failing
write-back never undoes the stored record.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from tradehouse.extensions import db
from tradehouse.utils.dates import isoformat

logger = logging.getLogger(__name__)


def deliver(record, notify, stamp='sentAt'):
    """Run ``notify(record)`` and store the outcome on ``record``.

    Returns the notifier's report, or None if the notifier raised.
    """
    report = None
    try:
        report = notify(record)
    except Exception as e:
        logger.exception('Notification for %r failed', record)
        record.mark_notify_failed(f'Email service error: {e}')
    else:
        if report.success:
            summary = report.summary()
            summary[stamp] = isoformat(datetime.utcnow())
            record.mark_notified(summary, report.errors)
        else:
            record.mark_notify_failed('; '.join(report.errors) or 'No emails were sent')

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Could not store notification outcome for %r', record)
    return report


def record_and_notify(record, notify):
    """Commit ``record`` and then notify about it.

    A failure to commit the record propagates. Everything after the commit
    is best effort.
    """
    db.session.add(record)
    db.session.commit()
    deliver(record, notify)
    return record
