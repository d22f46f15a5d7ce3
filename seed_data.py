"""Seed script to populate the catalog with sample products."""

from tradehouse import create_app
from tradehouse.extensions import db
from tradehouse.models import Product

SAMPLE_PRODUCTS = [
    {
        'name': 'Basmati Rice 1121',
        'code': 'RICE-1121',
        'category': 'Grains',
        'description': 'Extra long grain steam basmati rice, 25kg bags.',
    },
    {
        'name': 'Sona Masoori Rice',
        'code': 'RICE-SM',
        'category': 'Grains',
        'description': 'Lightweight medium grain rice, 10kg and 25kg bags.',
    },
    {
        'name': 'Turmeric Finger',
        'code': 'SPC-TUR',
        'category': 'Spices',
        'description': 'Polished turmeric fingers, curcumin 3-5%.',
    },
    {
        'name': 'Cumin Seeds',
        'code': 'SPC-CUM',
        'category': 'Spices',
        'description': 'Machine cleaned cumin seeds, 99% purity.',
    },
    {
        'name': 'Red Onion',
        'code': 'VEG-ONI',
        'category': 'Fresh Produce',
        'description': 'Nashik red onions, 45-65mm, mesh bags.',
    },
    {
        'name': 'Cotton Yarn 30s',
        'code': 'TXT-CY30',
        'category': 'Textiles',
        'description': 'Combed compact cotton yarn for knitting.',
    },
]


def seed_products(products=None):
    """Insert sample products whose codes are not in the catalog yet.

    Must run inside an application context. Returns the number added.
    """
    added = 0
    for data in products or SAMPLE_PRODUCTS:
        if Product.code_taken(data['code']):
            continue
        product = Product(**data)
        product.code = Product.normalize_code(product.code)
        db.session.add(product)
        added += 1
    db.session.commit()
    return added


def seed_database():
    """Seed the database with sample data."""
    app = create_app()

    with app.app_context():
        # Create tables
        db.create_all()

        print('Seeding database...')
        added = seed_products()
        if added:
            print(f'Database seeded with {added} products!')
        else:
            print('Database already seeded!')


if __name__ == '__main__':
    seed_database()
