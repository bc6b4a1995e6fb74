"""
Invoicing endpoints — invoice line packages and invoice terms.
"""
from flask import request, jsonify, current_app

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import token_required
from app.blueprints.api.helpers import (
    paginate_query, api_success, apply_sort, get_payload, get_or_404, search_filter,
)
from app.blueprints.api.schemas import (
    InvoicePackageSchema, InvoicePackageInputSchema, InvoicePackageUpdateSchema,
    InvoiceTermSchema, InvoiceTermInputSchema,
)
from app.extensions import db
from app.models.invoice import InvoicePackage, InvoiceTerm

INVOICE_PACKAGE_SORT_COLUMNS = ('id', 'sku', 'quantity', 'category', 'items', 'price', 'created_at')


# ── Invoice packages ───────────────────────────────────────

@api_bp.route('/invoice-packages', methods=['GET'])
@token_required
def api_list_all_invoice_packages():
    """Every invoice package (invoice builder dropdown)."""
    packages = InvoicePackage.query.order_by(InvoicePackage.id).all()
    return api_success(InvoicePackageSchema(many=True).dump(packages))


@api_bp.route('/invoice-packages/paginated', methods=['GET'])
@token_required
def api_list_invoice_packages():
    """Paginated invoice packages.

    Query params:
        search (str): Matches sku, category, items, price, created_at or id
        sortBy (str), sortDir ('asc' | 'desc'): default created_at desc
        page, per_page (default 10)
    """
    query = InvoicePackage.query

    search = request.args.get('search')
    if search:
        query = query.filter(search_filter(
            search,
            InvoicePackage.sku, InvoicePackage.category, InvoicePackage.items,
            InvoicePackage.price, InvoicePackage.created_at, InvoicePackage.id,
        ))

    query = apply_sort(
        query, InvoicePackage, INVOICE_PACKAGE_SORT_COLUMNS, 'created_at',
        sort_param='sortBy', order_param='sortDir',
    )
    return jsonify(paginate_query(query, InvoicePackageSchema(), default_per_page=10)), 200


@api_bp.route('/invoice-packages', methods=['POST'])
@token_required
def api_create_invoice_package():
    data = InvoicePackageInputSchema().load(get_payload())
    package = InvoicePackage(
        sku=data.get('sku'),
        quantity=data.get('quantity') or 1,
        category=data.get('category'),
        items=data.get('items'),
        item_full_details=data.get('item_full_details'),
        price=data['price'],
    )
    db.session.add(package)
    db.session.commit()
    current_app.logger.info('Invoice package created: %s (id=%s)', package.sku, package.id)
    return api_success(InvoicePackageSchema().dump(package), 201, 'Invoice package created successfully.')


@api_bp.route('/invoice-packages/<int:package_id>', methods=['GET'])
@token_required
def api_get_invoice_package(package_id):
    package, error = get_or_404(InvoicePackage, package_id, 'Invoice package')
    if error:
        return error
    return api_success(InvoicePackageSchema().dump(package))


@api_bp.route('/invoice-packages/<int:package_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_invoice_package(package_id):
    """Update an invoice package. quantity and item_full_details keep their value when omitted."""
    package, error = get_or_404(InvoicePackage, package_id, 'Invoice package')
    if error:
        return error

    data = InvoicePackageUpdateSchema().load(get_payload())
    package.sku = data['sku']
    package.items = data['items']
    package.category = data['category']
    package.price = data['price']
    if data.get('quantity') is not None:
        package.quantity = data['quantity']
    if data.get('item_full_details') is not None:
        package.item_full_details = data['item_full_details']
    db.session.commit()

    return api_success(InvoicePackageSchema().dump(package), message='Invoice package updated successfully.')


@api_bp.route('/invoice-packages/<int:package_id>', methods=['DELETE'])
@token_required
def api_delete_invoice_package(package_id):
    package, error = get_or_404(InvoicePackage, package_id, 'Invoice package')
    if error:
        return error
    db.session.delete(package)
    db.session.commit()
    current_app.logger.info('Invoice package deleted: id=%s', package_id)
    return api_success(None, message='Invoice package deleted successfully.')


# ── Invoice terms ───────────────────────────────────────────

@api_bp.route('/invoice-terms', methods=['GET'])
@token_required
def api_list_invoice_terms():
    terms = InvoiceTerm.query.order_by(InvoiceTerm.id).all()
    return api_success(InvoiceTermSchema(many=True).dump(terms))


@api_bp.route('/invoice-terms', methods=['POST'])
@token_required
def api_create_invoice_term():
    data = InvoiceTermInputSchema().load(get_payload())
    term = InvoiceTerm(category=data['category'], details=data['details'])
    db.session.add(term)
    db.session.commit()
    return api_success(InvoiceTermSchema().dump(term), 201, 'Term created successfully.')


@api_bp.route('/invoice-terms/<int:term_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_invoice_term(term_id):
    term, error = get_or_404(InvoiceTerm, term_id, 'Term')
    if error:
        return error
    data = InvoiceTermInputSchema().load(get_payload())
    term.category = data['category']
    term.details = data['details']
    db.session.commit()
    return api_success(InvoiceTermSchema().dump(term), message='Term updated successfully.')


@api_bp.route('/invoice-terms/<int:term_id>', methods=['DELETE'])
@token_required
def api_delete_invoice_term(term_id):
    term, error = get_or_404(InvoiceTerm, term_id, 'Term')
    if error:
        return error
    db.session.delete(term)
    db.session.commit()
    return api_success(None, message='Term deleted successfully.')
