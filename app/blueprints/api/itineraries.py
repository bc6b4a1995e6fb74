"""
Itinerary endpoints — categories and their sub-category items.
"""
from flask import current_app
from marshmallow import ValidationError

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import token_required
from app.blueprints.api.helpers import api_success, get_payload, get_or_404
from app.blueprints.api.schemas import (
    CategorySchema, CategoryInputSchema, ItinerarySchema, ItineraryInputSchema,
)
from app.extensions import db
from app.models.invoice import Category, Subcategory


def _require_category(category_id):
    if db.session.get(Category, category_id) is None:
        raise ValidationError({'category_id': ['The selected category id is invalid.']})


@api_bp.route('/itineraries', methods=['GET'])
@token_required
def api_list_itineraries():
    """Sub-categories with their category name, ordered by category then name."""
    items = (
        Subcategory.query
        .join(Category, Subcategory.category_id == Category.id)
        .order_by(Category.category_name, Subcategory.subcategory_name)
        .all()
    )
    return api_success(ItinerarySchema(many=True).dump(items))


@api_bp.route('/itineraries/categories', methods=['GET'])
@token_required
def api_list_categories():
    categories = Category.query.order_by(Category.category_name).all()
    return api_success(CategorySchema(many=True, only=('id', 'category_name')).dump(categories))


@api_bp.route('/itineraries/categories', methods=['POST'])
@token_required
def api_create_category():
    data = CategoryInputSchema().load(get_payload())
    category = Category(
        category_name=data['category_name'],
        description=(data.get('description') or '').strip() or None,
    )
    db.session.add(category)
    db.session.commit()
    current_app.logger.info('Itinerary category created: %s (id=%s)', category.category_name, category.id)
    return api_success(CategorySchema().dump(category), 201, 'Category created successfully.')


@api_bp.route('/itineraries/categories/<int:category_id>', methods=['DELETE'])
@token_required
def api_delete_category(category_id):
    """Delete a category together with its sub-categories."""
    category, error = get_or_404(Category, category_id, 'Category')
    if error:
        return error
    db.session.delete(category)
    db.session.commit()
    current_app.logger.info('Itinerary category deleted: id=%s', category_id)
    return api_success(None, message='Category deleted successfully.')


@api_bp.route('/itineraries', methods=['POST'])
@token_required
def api_create_itinerary():
    data = ItineraryInputSchema().load(get_payload())
    _require_category(data['category_id'])
    item = Subcategory(
        category_id=data['category_id'],
        subcategory_name=data['subcategory_name'],
        details=data.get('details'),
    )
    db.session.add(item)
    db.session.commit()
    return api_success(ItinerarySchema().dump(item), 201, 'Subcategory created successfully.')


@api_bp.route('/itineraries/<int:item_id>', methods=['GET'])
@token_required
def api_get_itinerary(item_id):
    item, error = get_or_404(Subcategory, item_id, 'Subcategory')
    if error:
        return error
    return api_success(ItinerarySchema().dump(item))


@api_bp.route('/itineraries/<int:item_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_itinerary(item_id):
    """Update an itinerary item; category and name keep their value when omitted."""
    item, error = get_or_404(Subcategory, item_id, 'Subcategory')
    if error:
        return error

    data = ItineraryInputSchema().load(get_payload(), partial=True)
    if data.get('category_id') is not None:
        _require_category(data['category_id'])
        item.category_id = data['category_id']
    if data.get('subcategory_name'):
        item.subcategory_name = data['subcategory_name']
    item.details = data.get('details') or ''
    db.session.commit()

    return api_success(ItinerarySchema().dump(item), message='Subcategory updated successfully.')


@api_bp.route('/itineraries/<int:item_id>', methods=['DELETE'])
@token_required
def api_delete_itinerary(item_id):
    item, error = get_or_404(Subcategory, item_id, 'Subcategory')
    if error:
        return error
    db.session.delete(item)
    db.session.commit()
    return api_success(None, message='Subcategory deleted successfully.')
