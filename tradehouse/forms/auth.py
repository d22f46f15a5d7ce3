"""Authentication forms."""

from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Length

from . import ApiForm


class LoginForm(ApiForm):
    """Admin login form."""
    username = StringField('Username', validators=[
        DataRequired(message='Username is required'),
        Length(max=80)
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
