"""Database models package."""

from .product import Product
from .banner import Banner
from .contact import Contact, CONTACT_STATUSES
from .feedback import Feedback
from .user import User

__all__ = [
    'Product',
    'Banner',
    'Contact',
    'CONTACT_STATUSES',
    'Feedback',
    'User',
]
