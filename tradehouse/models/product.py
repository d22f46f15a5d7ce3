"""Product model."""

from datetime import datetime
from tradehouse.extensions import db
from tradehouse.utils.dates import isoformat


class Product(db.Model):
    """Catalog product."""
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    code = db.Column(db.String(50), index=True)  # unique in practice, checked on write
    description = db.Column(db.Text, default='')
    category = db.Column(db.String(100), default='', index=True)
    image = db.Column(db.String(500), default='')
    image_id = db.Column(db.String(255), default='')  # image host deletion handle
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def normalize_code(code):
        """Product codes are stored trimmed and uppercased."""
        return (code or '').strip().upper()

    @classmethod
    def code_taken(cls, code, exclude_id=None):
        """Check whether another product already uses this code."""
        query = cls.query.filter(cls.code == cls.normalize_code(code))
        if exclude_id is not None:
            query = query.filter(cls.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    @classmethod
    def categories(cls):
        """Distinct non-empty categories, sorted."""
        rows = db.session.query(cls.category).distinct().all()
        names = {(name or '').strip() for (name,) in rows}
        names.discard('')
        return sorted(names)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'code': self.code,
            'description': self.description or '',
            'category': self.category or '',
            'image': self.image or '',
            'imageId': self.image_id or '',
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Product {self.code}>'
