"""Banner forms."""

from flask_wtf.file import FileField, FileRequired

from . import ApiForm
from .product import IMAGE_VALIDATORS


class BannerForm(ApiForm):
    image = FileField('Image', validators=[
        FileRequired(message='Image file is required')
    ] + IMAGE_VALIDATORS)
