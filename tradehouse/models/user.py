"""Admin user model."""

from datetime import datetime, timedelta
from tradehouse.extensions import db, bcrypt
from tradehouse.utils.dates import isoformat

MAX_LOGIN_ATTEMPTS = 5
LOCK_DURATION = timedelta(hours=2)


class User(db.Model):
    """Back-office account, used when AUTH_PROVIDER is 'stored'."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='user')  # admin, user
    last_login = db.Column(db.DateTime)
    login_attempts = db.Column(db.Integer, default=0)
    lock_until = db.Column(db.DateTime)
    is_active = db.Column(db.Boolean, default=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, **kwargs):
        if kwargs.get('username'):
            kwargs['username'] = kwargs['username'].strip().lower()
        super().__init__(**kwargs)

    @classmethod
    def find_by_username(cls, username):
        return cls.query.filter_by(username=(username or '').strip().lower()).first()

    def set_password(self, password):
        """Hash and set the password."""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if password matches."""
        return bcrypt.check_password_hash(self.password_hash, password)

    def is_admin(self):
        return self.role == 'admin'

    def is_locked(self, now=None):
        return self.lock_until is not None and self.lock_until > (now or datetime.utcnow())

    def register_failed_login(self, now=None):
        """Count a failed attempt and lock the account once the limit is hit."""
        now = now or datetime.utcnow()
        self.login_attempts = (self.login_attempts or 0) + 1
        if self.login_attempts >= MAX_LOGIN_ATTEMPTS and not self.is_locked(now):
            self.lock_until = now + LOCK_DURATION

    def register_successful_login(self, now=None):
        self.login_attempts = 0
        self.lock_until = None
        self.last_login = now or datetime.utcnow()

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'isActive': bool(self.is_active),
            'lastLogin': isoformat(self.last_login),
            'createdAt': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.username}>'
