"""
Website tour package endpoints — CRUD, image upload, active/featured toggles
and the destination picker.
"""
from flask import request, jsonify, current_app
from marshmallow import ValidationError
from sqlalchemy.orm import joinedload, selectinload

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import token_required
from app.blueprints.api.helpers import (
    paginate_query, api_success, get_payload, get_or_404, search_filter,
)
from app.blueprints.api.schemas import PackageSchema, PackageInputSchema, DestinationSchema
from app.extensions import db
from app.models.package import Package, Destination, PackageDestination
from app.utils import storage
from app.utils.formatting import parse_bool, slugify

IMAGE_EXTENSIONS = {'jpeg', 'png', 'jpg', 'gif'}
MAX_IMAGE_SIZE = 2 * storage.MB
PACKAGE_SORT_COLUMNS = ('title', 'created_at', 'updated_at', 'display_order')


def _package_payload():
    """Payload with combined_destinations kept as a list for multipart forms."""
    data = get_payload()
    if not request.is_json:
        ids = request.form.getlist('combined_destinations[]') or request.form.getlist('combined_destinations')
        if ids:
            data['combined_destinations'] = ids
        data.pop('combined_destinations[]', None)
    return data


def _check_destinations(data):
    """Referenced destinations must exist."""
    ids = list(data.get('combined_destinations') or [])
    if data.get('destination_id') is not None:
        ids.append(data['destination_id'])
    if not ids:
        return
    found = {row.id for row in Destination.query.filter(Destination.id.in_(ids))}
    missing = [destination_id for destination_id in ids if destination_id not in found]
    if missing:
        field = 'destination_id' if data.get('destination_id') in missing else 'combined_destinations'
        raise ValidationError({field: [f'The selected destination {missing[0]} is invalid.']})


def _check_slug(slug, exclude_id=None):
    query = Package.query.filter_by(slug=slug)
    if exclude_id is not None:
        query = query.filter(Package.id != exclude_id)
    if query.first() is not None:
        raise ValidationError({'slug': ['The slug has already been taken.']})


def _store_image(title):
    image = request.files.get('image')
    if image is None or not image.filename:
        return None
    storage.validate_upload(image, 'image', IMAGE_EXTENSIONS, MAX_IMAGE_SIZE)
    filename = f'{slugify(title)}.{storage.file_extension(image.filename)}'
    return storage.save_upload(image, 'tours', filename)


@api_bp.route('/packages', methods=['GET'])
@token_required
def api_list_packages():
    """List tour packages.

    Query params:
        destination_id (int), package_type ('single' | 'combined' | 'all'),
        tour_type, category, search, active_only, featured_only,
        sort_by (title | created_at | updated_at | display_order), sort_order,
        page, per_page
    """
    query = Package.query.options(
        joinedload(Package.destination),
        selectinload(Package.combined_destinations).joinedload(PackageDestination.destination),
    )

    destination_id = request.args.get('destination_id', type=int)
    if destination_id:
        query = query.filter(Package.destination_id == destination_id)

    package_type = request.args.get('package_type')
    if package_type and package_type != 'all':
        query = query.filter(Package.package_type == package_type)

    tour_type = request.args.get('tour_type')
    if tour_type:
        query = query.filter(Package.tour_type == tour_type)

    category = request.args.get('category')
    if category:
        query = query.filter(Package.frontend_category == category)

    search = request.args.get('search')
    if search:
        query = query.filter(search_filter(search, Package.title, Package.subtitle, Package.description))

    if parse_bool(request.args.get('active_only'), False):
        query = query.filter(Package.active.is_(True))

    if parse_bool(request.args.get('featured_only'), False):
        query = query.filter(Package.featured.is_(True))

    sort_by = request.args.get('sort_by', 'display_order')
    if sort_by in PACKAGE_SORT_COLUMNS and sort_by != 'display_order':
        column = getattr(Package, sort_by)
        sort_order = request.args.get('sort_order', 'asc').lower()
        query = query.order_by(column.desc() if sort_order == 'desc' else column.asc())
    else:
        query = query.order_by(Package.display_order.asc(), Package.created_at.desc())

    return jsonify(paginate_query(query, PackageSchema(), default_per_page=15)), 200


@api_bp.route('/packages', methods=['POST'])
@token_required
def api_create_package():
    """Create a package (JSON or multipart with an optional 'image' file)."""
    data = PackageInputSchema().load(_package_payload())
    _check_destinations(data)

    if data.get('slug'):
        _check_slug(data['slug'])
    else:
        data['slug'] = Package.generate_slug(data['title'])

    if not data.get('image_alt'):
        data['image_alt'] = f"{data['title']} - Tour Package Image"

    combined_ids = data.pop('combined_destinations', None) or []
    image_path = _store_image(data['title'])

    package = Package(**data)
    if image_path:
        package.image = image_path
    if package.is_combined:
        package.set_combined_destinations(combined_ids)

    db.session.add(package)
    db.session.commit()
    current_app.logger.info('Package created: %s (id=%s)', package.slug, package.id)

    return api_success(PackageSchema().dump(package), 201, 'Tour created successfully.')


@api_bp.route('/packages/<int:package_id>', methods=['GET'])
@token_required
def api_get_package(package_id):
    package, error = get_or_404(Package, package_id, 'Tour')
    if error:
        return error
    return api_success(PackageSchema().dump(package))


@api_bp.route('/packages/<int:package_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_package(package_id):
    """Update a package; only the submitted fields change.

    A new 'image' replaces (and deletes) the stored one. For combined
    packages, a submitted combined_destinations list replaces the old one.
    """
    package, error = get_or_404(Package, package_id, 'Tour')
    if error:
        return error

    data = PackageInputSchema().load(_package_payload(), partial=True)
    _check_destinations(data)
    if data.get('slug'):
        _check_slug(data['slug'], exclude_id=package.id)
    elif 'slug' in data:
        data.pop('slug')

    package_type = data.get('package_type', package.package_type)
    combined_ids = data.pop('combined_destinations', None)
    if package_type == 'combined' and not package.is_combined and not combined_ids:
        raise ValidationError({
            'combined_destinations': ['The combined destinations field is required when package type is combined.']
        })

    image_path = _store_image(data.get('title') or package.title)
    if image_path:
        if image_path != package.image:
            storage.delete_file(package.image)
        package.image = image_path

    for field, value in data.items():
        setattr(package, field, value)

    if package_type == 'combined' and combined_ids is not None:
        package.set_combined_destinations(combined_ids)
    elif package_type == 'single' and package.combined_destinations:
        package.combined_destinations = []

    db.session.commit()
    current_app.logger.info('Package updated: %s (id=%s)', package.slug, package.id)

    return api_success(PackageSchema().dump(package), message='Tour updated successfully.')


@api_bp.route('/packages/<int:package_id>', methods=['DELETE'])
@token_required
def api_delete_package(package_id):
    package, error = get_or_404(Package, package_id, 'Tour')
    if error:
        return error

    storage.delete_file(package.image)
    db.session.delete(package)
    db.session.commit()
    current_app.logger.info('Package deleted: id=%s', package_id)

    return api_success(None, message='Tour deleted successfully.')


@api_bp.route('/packages/<int:package_id>/toggle-active', methods=['PATCH', 'POST'])
@token_required
def api_toggle_package_active(package_id):
    package, error = get_or_404(Package, package_id, 'Tour')
    if error:
        return error
    package.active = not package.active
    db.session.commit()
    return api_success({'id': package.id, 'active': package.active}, message='Tour status updated successfully.')


@api_bp.route('/packages/<int:package_id>/toggle-featured', methods=['PATCH', 'POST'])
@token_required
def api_toggle_package_featured(package_id):
    package, error = get_or_404(Package, package_id, 'Tour')
    if error:
        return error
    package.featured = not package.featured
    db.session.commit()
    return api_success(
        {'id': package.id, 'featured': package.featured},
        message='Tour featured status updated successfully.',
    )


@api_bp.route('/destinations', methods=['GET'])
@token_required
def api_list_destinations():
    """Active destinations ordered by name (package form picker)."""
    destinations = Destination.query.filter(Destination.active.is_(True)).order_by(Destination.name).all()
    return api_success(DestinationSchema(many=True).dump(destinations))
