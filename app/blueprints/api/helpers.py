"""
API helper functions — pagination, sorting, error formatting, response builders.
"""
from urllib.parse import urlencode

from flask import request, jsonify, current_app
from sqlalchemy import or_, cast, String

from app.extensions import db


def paginate_query(query, schema, default_per_page=20, max_per_page=None):
    """Apply offset-based pagination to a SQLAlchemy query.

    Query params:
        page (int): Page number (1-indexed, default 1)
        per_page (int): Items per page (default per endpoint, max 100)

    Returns:
        JSON-ready dict with data, meta, and links.
    """
    if max_per_page is None:
        max_per_page = current_app.config.get('MAX_PER_PAGE', 100)

    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', default_per_page, type=int)

    # Clamp values
    page = max(1, page)
    per_page = max(1, min(per_page, max_per_page))

    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    total_pages = pagination.pages if pagination.pages else 1

    # Build links, keeping the active filters
    base_url = request.base_url
    filters = [(key, value) for key, value in request.args.items(multi=True) if key not in ('page', 'per_page')]

    def page_url(number):
        return f'{base_url}?' + urlencode([('page', number), ('per_page', per_page)] + filters)

    links = {
        'self': page_url(page),
    }
    if pagination.has_next:
        links['next'] = page_url(page + 1)
    if pagination.has_prev:
        links['prev'] = page_url(page - 1)
    links['first'] = page_url(1)
    links['last'] = page_url(total_pages)

    return {
        'data': schema.dump(pagination.items, many=True),
        'meta': {
            'total': pagination.total,
            'page': page,
            'per_page': per_page,
            'total_pages': total_pages,
        },
        'links': links,
    }


def apply_sort(query, model, allowed, default, default_order='desc',
               sort_param='sort_by', order_param='sort_order'):
    """Order a query by a whitelisted column taken from the query string.

    Unknown columns fall back to ``default``; anything but 'asc' sorts descending.
    """
    sort_by = request.args.get(sort_param, default)
    if sort_by not in allowed:
        sort_by = default
    sort_order = (request.args.get(order_param) or default_order).lower()
    column = getattr(model, sort_by)
    return query.order_by(column.asc() if sort_order == 'asc' else column.desc())


def search_filter(term, *columns):
    """OR of case-insensitive 'contains' matches over the given columns."""
    pattern = f'%{term}%'
    return or_(*[cast(column, String).ilike(pattern) for column in columns])


def get_payload():
    """Request body as a dict: JSON bodies or multipart/form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def get_or_404(model, object_id, label):
    """Fetch a row by primary key or return (None, 404 response)."""
    obj = db.session.get(model, object_id)
    if obj is None:
        return None, api_error('not_found', f'{label} not found.', 404)
    return obj, None


def api_error(code, message, status=400, details=None):
    """Build a standard API error response."""
    error_body = {
        'error': {
            'code': code,
            'message': message,
        }
    }
    if details:
        error_body['error']['details'] = details
    return jsonify(error_body), status


def api_success(data, status=200, message=None):
    """Build a standard API success response."""
    body = {'data': data}
    if message:
        body['message'] = message
    return jsonify(body), status


def validation_details(messages):
    """Flatten marshmallow error messages into [{field, message, code}]."""
    details = []
    for field, errors in messages.items():
        if isinstance(errors, dict):
            for item in validation_details(errors):
                details.append({
                    'field': f"{field}.{item['field']}",
                    'message': item['message'],
                    'code': item['code'],
                })
            continue
        if not isinstance(errors, (list, tuple)):
            errors = [errors]
        for message in errors:
            message = str(message)
            code = 'required' if 'required' in message.lower() else 'invalid'
            details.append({'field': str(field), 'message': message, 'code': code})
    return details
