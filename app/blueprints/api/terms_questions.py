"""
Booking form questions — the yes/no terms questions asked per booking package.
"""
from flask import request, jsonify, current_app
from marshmallow import ValidationError
from sqlalchemy.orm import joinedload

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import token_required
from app.blueprints.api.helpers import (
    paginate_query, api_success, apply_sort, get_payload, get_or_404, search_filter,
)
from app.blueprints.api.schemas import (
    TermsQuestionSchema, TermsQuestionInputSchema, BookingPackageSchema,
)
from app.extensions import db
from app.models.submission import BookingPackage, TermsQuestion

QUESTION_SORT_COLUMNS = ('sort_order', 'created_at', 'updated_at')


def _require_package(package_id):
    if db.session.get(BookingPackage, package_id) is None:
        raise ValidationError({'package_id': ['The selected package id is invalid.']})


@api_bp.route('/terms-questions', methods=['GET'])
@token_required
def api_list_terms_questions():
    """List questions.

    Query params:
        package_id (int), search (question/yes/no option),
        sort_by (sort_order | created_at | updated_at), sort_order, page, per_page
    """
    query = TermsQuestion.query.options(joinedload(TermsQuestion.package))

    package_id = request.args.get('package_id', type=int)
    if package_id:
        query = query.filter(TermsQuestion.package_id == package_id)

    search = request.args.get('search')
    if search:
        query = query.filter(search_filter(
            search, TermsQuestion.question_text, TermsQuestion.yes_option, TermsQuestion.no_option,
        ))

    query = apply_sort(query, TermsQuestion, QUESTION_SORT_COLUMNS, 'sort_order', default_order='asc')
    return jsonify(paginate_query(query, TermsQuestionSchema(), default_per_page=50)), 200


@api_bp.route('/terms-questions/packages', methods=['GET'])
@token_required
def api_list_booking_packages():
    packages = BookingPackage.query.order_by(BookingPackage.id).all()
    return api_success(BookingPackageSchema(many=True).dump(packages))


@api_bp.route('/terms-questions', methods=['POST'])
@token_required
def api_create_terms_question():
    data = TermsQuestionInputSchema().load(get_payload())
    _require_package(data['package_id'])

    sort_order = data.get('sort_order')
    if sort_order is None:
        sort_order = TermsQuestion.next_sort_order(data['package_id'])

    question = TermsQuestion(
        package_id=data['package_id'],
        question_text=data['question_text'],
        yes_option=data['yes_option'],
        no_option=data['no_option'],
        sort_order=sort_order,
    )
    db.session.add(question)
    db.session.commit()
    current_app.logger.info('Terms question created: id=%s package=%s', question.id, question.package_id)

    return api_success(TermsQuestionSchema().dump(question), 201, 'Question created successfully.')


@api_bp.route('/terms-questions/<int:question_id>', methods=['GET'])
@token_required
def api_get_terms_question(question_id):
    question, error = get_or_404(TermsQuestion, question_id, 'Question')
    if error:
        return error
    return api_success(TermsQuestionSchema().dump(question))


@api_bp.route('/terms-questions/<int:question_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_terms_question(question_id):
    question, error = get_or_404(TermsQuestion, question_id, 'Question')
    if error:
        return error

    data = TermsQuestionInputSchema().load(get_payload(), partial=True)
    if data.get('package_id') is not None:
        _require_package(data['package_id'])

    for field in ('package_id', 'question_text', 'yes_option', 'no_option', 'sort_order'):
        if data.get(field) is not None:
            setattr(question, field, data[field])
    db.session.commit()

    return api_success(TermsQuestionSchema().dump(question), message='Question updated successfully.')


@api_bp.route('/terms-questions/<int:question_id>', methods=['DELETE'])
@token_required
def api_delete_terms_question(question_id):
    question, error = get_or_404(TermsQuestion, question_id, 'Question')
    if error:
        return error
    db.session.delete(question)
    db.session.commit()
    current_app.logger.info('Terms question deleted: id=%s', question_id)
    return api_success(None, message='Question deleted successfully.')
