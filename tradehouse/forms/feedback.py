"""Feedback form.

Every field is optional and an empty message is accepted; the widget posts
whatever the visitor typed.
"""

from wtforms import StringField, TextAreaField
from wtforms.validators import Length, Optional

from . import ApiForm


class FeedbackForm(ApiForm):
    message = TextAreaField('Message', validators=[Optional(), Length(max=5000)])
    submittedAt = StringField('Submitted at', validators=[Optional()])
    userAgent = StringField('User agent', validators=[Optional()])
    page = StringField('Page', validators=[Optional(), Length(max=255)])
