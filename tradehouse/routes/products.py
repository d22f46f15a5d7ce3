"""Product catalog routes."""

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from tradehouse.errors import ValidationError
from tradehouse.extensions import db
from tradehouse.forms import ProductForm, ProductUpdateForm
from tradehouse.models import Product
from tradehouse.services import get_image_store
from tradehouse.services.images import discard_image, replace_image
from tradehouse.utils.decorators import admin_required, validate_form
from tradehouse.utils.pagination import paginate, pagination_args, sort_descending
from . import get_or_404, rate_limit

logger = logging.getLogger(__name__)

products_bp = Blueprint('products', __name__)


def _duplicate_code():
    return ValidationError('Product code already exists',
                           errors=[{'field': 'code', 'message': 'Product code already exists'}])


@products_bp.route('', methods=['GET'])
def list_products():
    """Public catalog with search, category filter and pagination."""
    page, limit = pagination_args()
    query = Product.query

    search = (request.args.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Product.name.ilike(pattern),
            Product.code.ilike(pattern),
            Product.description.ilike(pattern),
            Product.category.ilike(pattern)
        ))

    category = (request.args.get('category') or '').strip()
    if category and category != 'All':
        query = query.filter(Product.category == category)

    if sort_descending():
        query = query.order_by(Product.created_at.desc(), Product.id.desc())
    else:
        query = query.order_by(Product.created_at.asc(), Product.id.asc())

    products, pagination = paginate(query, page, limit)
    return jsonify({
        'success': True,
        'data': {
            'products': [product.to_dict() for product in products],
            'pagination': pagination,
        }
    })


@products_bp.route('/categories', methods=['GET'])
def categories():
    return jsonify({'success': True, 'data': ['All'] + Product.categories()})


@products_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id):
    product = get_or_404(Product, product_id, 'Product')
    return jsonify({'success': True, 'data': product.to_dict()})


@products_bp.route('', methods=['POST'])
@rate_limit('UPLOAD_RATE_LIMIT')
@login_required
@admin_required
@validate_form(ProductForm)
def create_product(form):
    code = Product.normalize_code(form.code.data)
    if Product.code_taken(code):
        raise _duplicate_code()

    product = Product(
        name=form.name.data,
        code=code,
        description=form.description.data or '',
        category=form.category.data or '',
    )
    store = get_image_store()
    if form.image.data:
        replace_image(store, product, form.image.data, 'products')
    new_image = product.image_id

    db.session.add(product)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        discard_image(store, new_image)
        raise

    logger.info('Product %s created', product.code)
    return jsonify({
        'success': True,
        'message': 'Product created successfully',
        'data': product.to_dict(),
    }), 201


@products_bp.route('/<int:product_id>', methods=['PUT'])
@rate_limit('UPLOAD_RATE_LIMIT')
@login_required
@admin_required
@validate_form(ProductUpdateForm)
def update_product(form, product_id):
    """Partial update. A new image is stored before the old one is removed."""
    product = get_or_404(Product, product_id, 'Product')

    code = None
    if form.provided('code'):
        code = Product.normalize_code(form.code.data)
        if code != product.code and Product.code_taken(code, exclude_id=product.id):
            raise _duplicate_code()

    store = get_image_store()
    previous_image = None
    new_image = None
    if form.image.data:
        previous_image = replace_image(store, product, form.image.data, 'products')
        new_image = product.image_id

    if code is not None:
        product.code = code
    if form.provided('name'):
        product.name = form.name.data
    if form.provided('description'):
        product.description = form.description.data or ''
    if form.provided('category'):
        product.category = form.category.data or ''

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        discard_image(store, new_image)
        raise

    if new_image and previous_image:
        discard_image(store, previous_image)

    return jsonify({
        'success': True,
        'message': 'Product updated successfully',
        'data': product.to_dict(),
    })


@products_bp.route('/<int:product_id>', methods=['DELETE'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def delete_product(product_id):
    product = get_or_404(Product, product_id, 'Product')
    image_id = product.image_id
    db.session.delete(product)
    db.session.commit()
    discard_image(get_image_store(), image_id)
    return jsonify({'success': True, 'message': 'Product deleted successfully'})
