"""Pagination helpers for list endpoints."""

import math

from flask import current_app, request


def _int_arg(name, default):
    value = request.args.get(name)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def pagination_args(default_limit=None):
    """Read ``page`` and ``limit`` from the query string.

    Missing or non-integer values fall back to defaults; ``page`` is at
    least 1 and ``limit`` is kept between 1 and MAX_ITEMS_PER_PAGE.
    """
    if default_limit is None:
        default_limit = current_app.config['ITEMS_PER_PAGE']
    max_limit = current_app.config['MAX_ITEMS_PER_PAGE']
    page = max(1, _int_arg('page', 1))
    limit = min(max_limit, max(1, _int_arg('limit', default_limit)))
    return page, limit


def sort_descending(default=True):
    order = (request.args.get('sortOrder') or '').lower()
    if order == 'asc':
        return False
    if order == 'desc':
        return True
    return default


def paginate(query, page, limit):
    """Run ``query`` for one page and return ``(items, pagination)``."""
    result = query.paginate(page=page, per_page=limit, error_out=False)
    return result.items, pagination_dict(page, limit, result.total)


def pagination_dict(page, limit, total):
    pages = math.ceil(total / limit) if total else 0
    return {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': pages,
        'hasNext': page < pages,
        'hasPrev': page > 1,
    }
