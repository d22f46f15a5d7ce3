"""Token issuance and verification for the admin back office.

Two interchangeable providers sit behind one interface:

- ``StaticCredentialAuth`` checks a single username/password pair taken from
  configuration and trusts the claims of any token it signed.
- ``StoredUserAuth`` checks ``User`` rows (bcrypt, lockout after repeated
  failures) and re-validates the account on every request through a small
  TTL cache.

Exactly one provider is active per deployment, selected by ``AUTH_PROVIDER``.
"""

import hmac
import logging
import threading
import time
from datetime import datetime, timedelta, timezone

from cachetools import TTLCache
from flask import g
from flask_login import UserMixin
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from tradehouse.errors import (AccountLocked, Forbidden, InvalidCredentials,
                               InvalidToken, ServerMisconfigured, TokenExpired,
                               Unauthorized)
from tradehouse.extensions import db
from tradehouse.models import User

logger = logging.getLogger(__name__)

STATIC_ADMIN_ID = 'admin-001'


class Identity(UserMixin):
    """The authenticated principal attached to a request."""

    def __init__(self, id, username, role, active=True, issued_at=None):
        self.id = id
        self.username = username
        self.role = role
        self.active = active
        self.issued_at = issued_at

    @classmethod
    def from_user(cls, user, issued_at=None):
        return cls(str(user.id), user.username, user.role, bool(user.is_active), issued_at)

    @property
    def is_active(self):
        return self.active

    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'isActive': self.active,
        }


class TokenService:
    """Signs and verifies HS256 tokens carrying an identity's claims."""

    def __init__(self, secret, expires=timedelta(hours=24), algorithm='HS256', clock=None):
        self.secret = secret
        self.expires = expires
        self.algorithm = algorithm
        self.clock = clock

    def _now(self):
        return self.clock() if self.clock else datetime.now(timezone.utc)

    def issue(self, identity):
        if not self.secret:
            raise ServerMisconfigured()
        now = self._now()
        claims = {
            'sub': str(identity.id),
            'username': identity.username,
            'role': identity.role,
            'iat': int(now.timestamp()),
            'exp': int((now + self.expires).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token):
        """Return the claims of a valid token.

        Expiry is always checked against the wall clock.
        """
        if not self.secret:
            raise ServerMisconfigured()
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpired()
        except JWTError:
            raise InvalidToken()


class IdentityCache:
    """Bounded, thread-safe TTL cache of recently resolved accounts."""

    def __init__(self, ttl=300, maxsize=256, timer=time.monotonic):
        self._entries = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            return self._entries.get(key)

    def set(self, key, value):
        with self._lock:
            self._entries[key] = value

    def invalidate(self, key):
        with self._lock:
            self._entries.pop(key, None)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


class AuthProvider:
    """Common token flow; subclasses decide how credentials and claims resolve."""
    name = None

    def __init__(self, tokens):
        self.tokens = tokens

    def authenticate(self, username, password):
        raise NotImplementedError

    def resolve(self, claims):
        raise NotImplementedError

    def forget(self, subject_id):
        """Drop anything cached for a subject."""

    def issue_token(self, username, password):
        identity = self.authenticate(username, password)
        return self.tokens.issue(identity), identity

    def refresh_token(self, identity):
        return self.tokens.issue(identity)

    def verify_token(self, token):
        claims = self.tokens.decode(token)
        return self.resolve(claims)


class StaticCredentialAuth(AuthProvider):
    name = 'static'

    def __init__(self, tokens, username, password):
        super().__init__(tokens)
        self.username = username or ''
        self.password = password or ''

    def authenticate(self, username, password):
        user_ok = hmac.compare_digest((username or '').encode(), self.username.encode())
        password_ok = hmac.compare_digest((password or '').encode(), self.password.encode())
        if not (user_ok and password_ok):
            raise InvalidCredentials()
        return Identity(STATIC_ADMIN_ID, self.username, 'admin')

    def resolve(self, claims):
        if not claims.get('username') or not claims.get('role'):
            raise InvalidToken()
        return Identity(claims['sub'], claims['username'], claims['role'],
                        issued_at=claims.get('iat'))


class StoredUserAuth(AuthProvider):
    name = 'stored'

    def __init__(self, tokens, cache=None):
        super().__init__(tokens)
        self.cache = cache

    def authenticate(self, username, password):
        user = User.find_by_username(username)
        if user is None or not user.is_active:
            raise InvalidCredentials()
        if user.is_locked():
            raise AccountLocked()
        if not user.check_password(password or ''):
            user.register_failed_login()
            db.session.commit()
            if user.is_locked():
                logger.warning('Account %s locked after %s failed logins',
                               user.username, user.login_attempts)
            raise InvalidCredentials()
        user.register_successful_login()
        db.session.commit()
        self.forget(str(user.id))
        return Identity.from_user(user)

    def _lookup(self, subject_id):
        if self.cache is not None:
            cached = self.cache.get(subject_id)
            if cached is not None:
                return cached
        try:
            user = db.session.get(User, int(subject_id))
        except (TypeError, ValueError):
            raise InvalidToken()
        if user is None:
            raise InvalidToken()
        snapshot = (user.username, user.role, bool(user.is_active))
        if self.cache is not None:
            self.cache.set(subject_id, snapshot)
        return snapshot

    def resolve(self, claims):
        username, role, active = self._lookup(claims.get('sub'))
        if not active:
            raise Forbidden('Account deactivated', code='ACCOUNT_INACTIVE')
        return Identity(claims['sub'], username, role, active, claims.get('iat'))

    def forget(self, subject_id):
        if self.cache is not None:
            self.cache.invalidate(str(subject_id))


def build_auth_provider(app):
    """Create the provider selected by AUTH_PROVIDER."""
    config = app.config
    tokens = TokenService(
        config.get('JWT_SECRET'),
        expires=timedelta(hours=config['JWT_EXPIRES_HOURS']),
        algorithm=config['JWT_ALGORITHM'],
    )
    mode = config.get('AUTH_PROVIDER', 'static')
    if mode == 'static':
        return StaticCredentialAuth(tokens, config.get('ADMIN_USERNAME'),
                                    config.get('ADMIN_PASSWORD'))
    if mode == 'stored':
        cache = IdentityCache(config['IDENTITY_CACHE_TTL'], config['IDENTITY_CACHE_SIZE'])
        return StoredUserAuth(tokens, cache)
    raise ValueError(f'Unknown AUTH_PROVIDER {mode!r}')


def bearer_token(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def identity_from_request(request, provider):
    """Flask-Login request loader body.

    Returns None when the request is not authenticated and remembers why in
    ``g.auth_error`` so the unauthorized handler can report it.
    """
    token = bearer_token(request)
    if token is None:
        g.auth_error = Unauthorized()
        return None
    try:
        return provider.verify_token(token)
    except (Unauthorized, Forbidden) as error:
        g.auth_error = error
        return None
