"""Contact submission model."""

from datetime import datetime, timedelta
from tradehouse.extensions import db
from tradehouse.utils.dates import isoformat

CONTACT_STATUSES = ('new', 'read', 'responded', 'closed')


class Contact(db.Model):
    """Contact form submission."""
    __tablename__ = 'contacts'
    __table_args__ = (
        db.Index('ix_contacts_email_created_at', 'email', 'created_at'),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100))
    email = db.Column(db.String(254))
    phone = db.Column(db.String(20))
    company = db.Column(db.String(200), default='')
    message = db.Column(db.Text)
    status = db.Column(db.String(20), default='new', index=True)  # new, read, responded, closed
    email_sent = db.Column(db.Boolean, default=False, index=True)
    email_error = db.Column(db.Text)
    email_metadata = db.Column(db.JSON)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, **kwargs):
        if kwargs.get('email'):
            kwargs['email'] = kwargs['email'].strip().lower()
        super().__init__(**kwargs)

    @classmethod
    def find_recent_duplicate(cls, email, minutes=5, now=None):
        """Most recent submission from this email inside the window, if any."""
        if not email:
            return None
        since = (now or datetime.utcnow()) - timedelta(minutes=minutes)
        return cls.query.filter(
            cls.email == email.strip().lower(),
            cls.created_at >= since
        ).order_by(cls.created_at.desc()).first()

    def mark_notified(self, summary, errors=None):
        """Record a notification round in which at least one email went out."""
        self.email_sent = True
        self.email_error = '; '.join(errors) if errors else None
        self.email_metadata = dict(summary)

    def mark_notify_failed(self, reason):
        """Record a notification round in which nothing was delivered."""
        self.email_error = reason

    def to_dict(self, summary=False):
        data = {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'company': self.company or '',
            'message': self.message,
            'status': self.status,
            'emailSent': bool(self.email_sent),
            'emailError': self.email_error,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
        if not summary:
            data.update({
                'emailMetadata': self.email_metadata,
                'ipAddress': self.ip_address,
                'userAgent': self.user_agent,
            })
        return data

    def __repr__(self):
        return f'<Contact {self.email}>'
