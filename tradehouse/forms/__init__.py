"""API input forms.

Forms read JSON bodies and multipart uploads alike (Flask-WTF picks the
source). Bearer-token clients carry no CSRF token, so CSRF is off, and every
string input is trimmed before validation.
"""

from flask import request
from flask_wtf import FlaskForm
from flask_wtf.form import _Auto
from werkzeug.datastructures import ImmutableMultiDict
from wtforms.validators import StopValidation

from tradehouse.errors import ValidationError


def strip_filter(value):
    # JSON clients may send numbers where text is expected
    if isinstance(value, (int, float)):
        value = str(value)
    if isinstance(value, str):
        return value.strip()
    return value


class ApiForm(FlaskForm):
    class Meta:
        csrf = False

        def bind_field(self, form, unbound_field, options):
            filters = list(unbound_field.kwargs.get('filters') or [])
            filters.append(strip_filter)
            return unbound_field.bind(form=form, filters=filters, **options)

        def wrap_formdata(self, form, formdata):
            if formdata is _Auto and request.is_json and request.method != 'GET':
                if not isinstance(request.get_json(silent=True), dict):
                    raise ValidationError('Request body must be a JSON object')
            # Requests without a body still validate against empty input
            formdata = super().wrap_formdata(form, formdata)
            if formdata is None:
                return ImmutableMultiDict()
            return formdata

    def provided(self, name):
        """Whether the client sent a value for ``name`` at all."""
        return bool(self[name].raw_data)


class NotBlankIfProvided:
    """For partial updates: a field may be left out, but not sent empty."""

    def __init__(self, message=None):
        self.message = message

    def __call__(self, form, field):
        if not field.raw_data:
            raise StopValidation()
        if not field.data:
            raise StopValidation(self.message or f'{field.label.text} cannot be empty')


from .auth import LoginForm  # noqa: E402
from .banner import BannerForm  # noqa: E402
from .contact import ContactForm, ContactStatusForm  # noqa: E402
from .feedback import FeedbackForm  # noqa: E402
from .product import ProductForm, ProductUpdateForm  # noqa: E402

__all__ = [
    'ApiForm',
    'LoginForm',
    'BannerForm',
    'ContactForm',
    'ContactStatusForm',
    'FeedbackForm',
    'ProductForm',
    'ProductUpdateForm',
]
