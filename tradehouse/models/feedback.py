"""Feedback model."""

from datetime import datetime
from tradehouse.extensions import db
from tradehouse.utils.dates import isoformat


class Feedback(db.Model):
    """Anonymous site feedback. An empty message is accepted."""
    __tablename__ = 'feedback'

    id = db.Column(db.Integer, primary_key=True)
    message = db.Column(db.Text, default='')
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    user_agent = db.Column(db.String(500), default='')
    page = db.Column(db.String(255), default='unknown')
    ip_address = db.Column(db.String(45), default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'message': self.message or '',
            'submittedAt': isoformat(self.submitted_at),
            'page': self.page,
            'createdAt': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Feedback {self.id}>'
