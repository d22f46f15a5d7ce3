"""Access and input decorators for API views."""

from functools import wraps
from flask_login import current_user

from tradehouse.errors import Forbidden, ValidationError


def admin_required(f):
    """Decorator to require admin role. Use under ``login_required``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_admin():
            raise Forbidden()
        return f(*args, **kwargs)
    return decorated_function


def form_errors(form):
    return [
        {'field': name, 'message': message}
        for name, messages in form.errors.items()
        for message in messages
    ]


def validate_form(form_class):
    """Validate the request against ``form_class`` before the view runs.

    The bound form is passed to the view as ``form``.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            form = form_class()
            if not form.validate():
                raise ValidationError(errors=form_errors(form))
            return f(*args, form=form, **kwargs)
        return decorated_function
    return decorator
