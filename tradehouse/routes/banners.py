"""Homepage banner routes."""

from flask import Blueprint, jsonify
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from tradehouse.extensions import db
from tradehouse.forms import BannerForm
from tradehouse.models import Banner
from tradehouse.services import get_image_store
from tradehouse.services.images import discard_image, replace_image
from tradehouse.utils.decorators import admin_required, validate_form
from . import get_or_404, rate_limit

banners_bp = Blueprint('banners', __name__)


@banners_bp.route('', methods=['GET'])
def list_banners():
    banners = Banner.query.order_by(Banner.created_at.desc(), Banner.id.desc()).all()
    return jsonify({'success': True, 'data': [banner.to_dict() for banner in banners]})


@banners_bp.route('/<int:banner_id>', methods=['GET'])
def get_banner(banner_id):
    banner = get_or_404(Banner, banner_id, 'Banner')
    return jsonify({'success': True, 'data': banner.to_dict()})


@banners_bp.route('', methods=['POST'])
@rate_limit('UPLOAD_RATE_LIMIT')
@login_required
@admin_required
@validate_form(BannerForm)
def create_banner(form):
    store = get_image_store()
    uploaded = store.upload(form.image.data, 'banners')
    banner = Banner(image=uploaded.url, image_id=uploaded.public_id)
    db.session.add(banner)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        discard_image(store, uploaded.public_id)
        raise
    return jsonify({
        'success': True,
        'message': 'Banner created successfully',
        'data': banner.to_dict(),
    }), 201


@banners_bp.route('/<int:banner_id>', methods=['PUT'])
@rate_limit('UPLOAD_RATE_LIMIT')
@login_required
@admin_required
@validate_form(BannerForm)
def update_banner(form, banner_id):
    """Swap the banner image; the old image is deleted after the commit."""
    banner = get_or_404(Banner, banner_id, 'Banner')
    store = get_image_store()
    previous_image = replace_image(store, banner, form.image.data, 'banners')
    new_image = banner.image_id
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        discard_image(store, new_image)
        raise
    discard_image(store, previous_image)
    return jsonify({
        'success': True,
        'message': 'Banner updated successfully',
        'data': banner.to_dict(),
    })


@banners_bp.route('/<int:banner_id>', methods=['DELETE'])
@rate_limit('ADMIN_RATE_LIMIT')
@login_required
@admin_required
def delete_banner(banner_id):
    banner = get_or_404(Banner, banner_id, 'Banner')
    image_id = banner.image_id
    db.session.delete(banner)
    db.session.commit()
    discard_image(get_image_store(), image_id)
    return jsonify({'success': True, 'message': 'Banner deleted successfully'})
