#!/usr/bin/env python3
"""
Create or promote an admin account for AUTH_PROVIDER=stored deployments.

    python create_admin.py <username>

The password is prompted for and never echoed.
"""

import getpass
import sys

from tradehouse import create_app
from tradehouse.extensions import db
from tradehouse.models import User


def create_admin_user(username, password):
    """
    Create an admin user, or promote and reset an existing one.

    Must run inside an application context. Returns ``(user, created)``.
    """
    user = User.find_by_username(username)
    created = user is None
    if created:
        user = User(username=username, role='admin')
        db.session.add(user)
    else:
        user.role = 'admin'
        user.is_active = True
        user.login_attempts = 0
        user.lock_until = None
    user.set_password(password)
    db.session.commit()
    return user, created


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print('Usage: python create_admin.py <username>')
        return 1

    password = getpass.getpass('Password: ')
    if len(password) < 8:
        print('Password must be at least 8 characters.')
        return 1
    if getpass.getpass('Confirm password: ') != password:
        print('Passwords do not match.')
        return 1

    app = create_app()
    with app.app_context():
        db.create_all()
        user, created = create_admin_user(argv[0], password)
        action = 'created' if created else 'updated to admin role'
        print(f'Admin user {user.username} {action}.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
