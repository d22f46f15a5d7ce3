"""Contact form and admin status update."""

from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Email, Length, Optional, Regexp

from tradehouse.models import CONTACT_STATUSES
from . import ApiForm


class ContactForm(ApiForm):
    """Public contact form."""
    name = StringField('Name', validators=[
        DataRequired(message='Name is required'),
        Length(min=2, max=100, message='Name must be between 2 and 100 characters'),
        Regexp(r'^[A-Za-z\s\u00C0-\u017F]+$', message='Name can only contain letters and spaces')
    ])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Please enter a valid email address'),
        Length(max=254)
    ])
    phone = StringField('Phone', validators=[
        DataRequired(message='Phone number is required'),
        Length(min=7, max=17, message='Phone number must be between 7 and 17 characters'),
        Regexp(r'^\+?[1-9]\d{0,15}$', message='Please enter a valid phone number')
    ])
    company = StringField('Company', validators=[
        Optional(),
        Length(max=200, message='Company name cannot exceed 200 characters')
    ])
    message = TextAreaField('Message', validators=[
        DataRequired(message='Message is required'),
        Length(min=10, max=1000, message='Message must be between 10 and 1000 characters')
    ])


class ContactStatusForm(ApiForm):
    status = StringField('Status', validators=[
        DataRequired(message='Status is required'),
        AnyOf(CONTACT_STATUSES, message='Status must be one of: ' + ', '.join(CONTACT_STATUSES))
    ])
