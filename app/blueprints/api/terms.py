"""
Terms and conditions endpoints — CRUD with optional PDF attachment,
status toggle, inline PDF viewing and bulk actions.
"""
from flask import request, jsonify, current_app, send_file

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import token_required
from app.blueprints.api.helpers import (
    paginate_query, api_error, api_success, apply_sort, get_payload, get_or_404, search_filter,
)
from app.blueprints.api.schemas import TermsSchema, TermsInputSchema, BulkTermsActionSchema
from app.extensions import db
from app.models.terms import TermsAndCondition
from app.utils import storage

PDF_EXTENSIONS = {'pdf'}
MAX_PDF_SIZE = 10 * storage.MB
TERMS_SORT_COLUMNS = ('title', 'created_at', 'updated_at')


def _store_pdf():
    """Save the uploaded 'pdf_file', if any. Returns (relative path, original name)."""
    pdf = request.files.get('pdf_file')
    if pdf is None or not pdf.filename:
        return None, None
    storage.validate_upload(pdf, 'pdf_file', PDF_EXTENSIONS, MAX_PDF_SIZE)
    path = storage.save_upload(pdf, 'terms_conditions', storage.sanitize_filename(pdf.filename))
    return path, pdf.filename


@api_bp.route('/terms', methods=['GET'])
@token_required
def api_list_terms():
    """List terms and conditions.

    Query params:
        status ('active' | 'inactive'), search (title/content),
        sort_by (title | created_at | updated_at), sort_order, page, per_page
    """
    query = TermsAndCondition.query

    status = request.args.get('status')
    if status == 'active':
        query = query.filter(TermsAndCondition.is_active.is_(True))
    elif status == 'inactive':
        query = query.filter(TermsAndCondition.is_active.is_(False))

    search = request.args.get('search')
    if search:
        query = query.filter(search_filter(search, TermsAndCondition.title, TermsAndCondition.content))

    query = apply_sort(query, TermsAndCondition, TERMS_SORT_COLUMNS, 'created_at')
    return jsonify(paginate_query(query, TermsSchema(), default_per_page=15)), 200


@api_bp.route('/terms', methods=['POST'])
@token_required
def api_create_terms():
    """Create terms (JSON or multipart with an optional 'pdf_file')."""
    data = TermsInputSchema().load(get_payload())
    pdf_path, pdf_name = _store_pdf()

    terms = TermsAndCondition(
        title=data['title'],
        content=data['content'],
        is_active=data['is_active'] if data.get('is_active') is not None else True,
        pdf_file_path=pdf_path,
        pdf_file_name=pdf_name,
    )
    db.session.add(terms)
    db.session.commit()
    current_app.logger.info('Terms created: %s (id=%s)', terms.title, terms.id)

    return api_success(TermsSchema().dump(terms), 201, 'Terms and conditions created successfully.')


@api_bp.route('/terms/<int:terms_id>', methods=['GET'])
@token_required
def api_get_terms(terms_id):
    terms, error = get_or_404(TermsAndCondition, terms_id, 'Terms and conditions')
    if error:
        return error
    return api_success(TermsSchema().dump(terms))


@api_bp.route('/terms/<int:terms_id>', methods=['PUT', 'PATCH', 'POST'])
@token_required
def api_update_terms(terms_id):
    """Update terms; a new 'pdf_file' replaces and deletes the stored PDF.

    POST is accepted because browsers cannot send multipart PUT forms.
    """
    terms, error = get_or_404(TermsAndCondition, terms_id, 'Terms and conditions')
    if error:
        return error

    data = TermsInputSchema().load(get_payload(), partial=True)
    pdf_path, pdf_name = _store_pdf()

    if 'title' in data:
        terms.title = data['title']
    if 'content' in data:
        terms.content = data['content']
    if data.get('is_active') is not None:
        terms.is_active = data['is_active']
    if pdf_path:
        if pdf_path != terms.pdf_file_path:
            storage.delete_file(terms.pdf_file_path)
        terms.pdf_file_path = pdf_path
        terms.pdf_file_name = pdf_name

    db.session.commit()
    current_app.logger.info('Terms updated: id=%s', terms.id)

    return api_success(TermsSchema().dump(terms), message='Terms and conditions updated successfully.')


@api_bp.route('/terms/<int:terms_id>', methods=['DELETE'])
@token_required
def api_delete_terms(terms_id):
    terms, error = get_or_404(TermsAndCondition, terms_id, 'Terms and conditions')
    if error:
        return error
    storage.delete_file(terms.pdf_file_path)
    db.session.delete(terms)
    db.session.commit()
    current_app.logger.info('Terms deleted: id=%s', terms_id)
    return api_success(None, message='Terms and conditions deleted successfully.')


@api_bp.route('/terms/<int:terms_id>/toggle-status', methods=['PATCH', 'POST'])
@token_required
def api_toggle_terms_status(terms_id):
    terms, error = get_or_404(TermsAndCondition, terms_id, 'Terms and conditions')
    if error:
        return error
    terms.is_active = not terms.is_active
    db.session.commit()
    return api_success({'id': terms.id, 'is_active': terms.is_active}, message='Status updated successfully.')


@api_bp.route('/terms/<int:terms_id>/pdf', methods=['GET'])
@token_required
def api_terms_pdf(terms_id):
    """Stream the PDF inline."""
    terms = db.session.get(TermsAndCondition, terms_id)
    if terms is None or not terms.pdf_file_path:
        return api_error('not_found', 'PDF file not found.', 404)
    if not storage.file_exists(terms.pdf_file_path):
        return api_error('not_found', 'PDF file not found on server.', 404)

    return send_file(
        storage.absolute_path(terms.pdf_file_path),
        mimetype='application/pdf',
        as_attachment=False,
        download_name=terms.display_file_name,
    )


@api_bp.route('/terms/bulk', methods=['POST'])
@token_required
def api_bulk_terms_action():
    """Activate, deactivate or delete several terms at once.

    Request body:
        {"action": "activate" | "deactivate" | "delete", "ids": [1, 2, 3]}
    """
    data = BulkTermsActionSchema().load(get_payload())
    action = data['action']
    items = TermsAndCondition.query.filter(TermsAndCondition.id.in_(data['ids'])).all()
    if not items:
        return api_error('not_found', 'No terms and conditions found for the given ids.', 404)

    for terms in items:
        if action == 'activate':
            terms.is_active = True
        elif action == 'deactivate':
            terms.is_active = False
        else:
            storage.delete_file(terms.pdf_file_path)
            db.session.delete(terms)
    db.session.commit()
    current_app.logger.info('Bulk %s on %d terms by %s', action, len(items), request.api_user.email)

    return api_success(
        {'action': action, 'processed': len(items), 'total': len(data['ids'])},
        message=f'Bulk {action} completed successfully.',
    )
