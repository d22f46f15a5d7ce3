"""Product forms."""

from flask_wtf.file import FileAllowed, FileField, FileSize
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional

from . import ApiForm, NotBlankIfProvided

IMAGE_EXTENSIONS = ['png', 'jpg', 'jpeg', 'gif', 'webp']
MAX_IMAGE_SIZE = 5 * 1024 * 1024

IMAGE_VALIDATORS = [
    FileAllowed(IMAGE_EXTENSIONS, message='Only image files (png, jpg, jpeg, gif, webp) are allowed'),
    FileSize(max_size=MAX_IMAGE_SIZE, message='Image must be 5MB or smaller'),
]


class ProductForm(ApiForm):
    """Create a product."""
    name = StringField('Name', validators=[
        DataRequired(message='Name is required'),
        Length(max=150)
    ])
    code = StringField('Code', validators=[
        DataRequired(message='Code is required'),
        Length(max=50)
    ])
    description = TextAreaField('Description', validators=[Optional(), Length(max=5000)])
    category = StringField('Category', validators=[Optional(), Length(max=100)])
    image = FileField('Image', validators=[Optional()] + IMAGE_VALIDATORS)


class ProductUpdateForm(ApiForm):
    """Partial product update; omitted fields are left alone."""
    name = StringField('Name', validators=[NotBlankIfProvided(), Length(max=150)])
    code = StringField('Code', validators=[NotBlankIfProvided(), Length(max=50)])
    description = TextAreaField('Description', validators=[Optional(), Length(max=5000)])
    category = StringField('Category', validators=[Optional(), Length(max=100)])
    image = FileField('Image', validators=[Optional()] + IMAGE_VALIDATORS)
