"""
Booking form submissions — customer bookings with companions, answers
to the package questions and uploaded payment receipts.
"""
from datetime import datetime, timedelta

from flask import request, jsonify, current_app
from marshmallow import ValidationError
from sqlalchemy.orm import selectinload

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import token_required
from app.blueprints.api.helpers import (
    paginate_query, api_success, get_payload, get_or_404, search_filter,
)
from app.blueprints.api.schemas import SubmissionSchema, SubmissionInputSchema
from app.extensions import db
from app.models.submission import (
    Submission, Companion, SubmissionAnswer, PaymentReceipt, TermsQuestion,
)
from app.utils import storage

RECEIPT_EXTENSIONS = {'jpg', 'jpeg', 'png', 'pdf'}
MAX_RECEIPT_SIZE = 5 * storage.MB

SHOW_ACTIVE, SHOW_ALL, SHOW_ARCHIVED = 0, 1, 2


def _parse_date_arg(name):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        raise ValidationError({name: ['Not a valid date (expected YYYY-MM-DD).']})


def _check_questions(answers):
    ids = {answer['question_id'] for answer in answers}
    if not ids:
        return
    found = {row.id for row in TermsQuestion.query.filter(TermsQuestion.id.in_(ids))}
    missing = sorted(ids - found)
    if missing:
        raise ValidationError({'answers': [f'The selected question {missing[0]} is invalid.']})


def _set_companions(submission, names):
    submission.companions = [Companion(full_name=name.strip()) for name in names if name and name.strip()]


def _set_answers(submission, answers):
    _check_questions(answers)
    submission.answers = [
        SubmissionAnswer(question_id=answer['question_id'], answer=answer['answer'])
        for answer in answers
    ]


@api_bp.route('/submissions', methods=['GET'])
@token_required
def api_list_submissions():
    """List submissions, newest first.

    Query params:
        package_type, search (email, lead guest, fb name, contact),
        date_from / date_to (YYYY-MM-DD, on created_at, inclusive),
        show_archived (0 active only, 1 all, 2 archived only), page, per_page
    """
    query = Submission.query.options(
        selectinload(Submission.companions),
        selectinload(Submission.answers).joinedload(SubmissionAnswer.question),
        selectinload(Submission.receipts),
    )

    package_type = request.args.get('package_type')
    if package_type:
        query = query.filter(Submission.package_type == package_type)

    search = request.args.get('search')
    if search:
        query = query.filter(search_filter(
            search, Submission.email, Submission.lead_guest, Submission.fb_name, Submission.contact_number,
        ))

    date_from = _parse_date_arg('date_from')
    if date_from:
        query = query.filter(Submission.created_at >= date_from)
    date_to = _parse_date_arg('date_to')
    if date_to:
        query = query.filter(Submission.created_at < date_to + timedelta(days=1))

    show_archived = request.args.get('show_archived', SHOW_ACTIVE, type=int)
    if show_archived == SHOW_ARCHIVED:
        query = query.filter(Submission.archived.is_(True))
    elif show_archived != SHOW_ALL:
        query = query.filter(Submission.archived.is_(False))

    query = query.order_by(Submission.created_at.desc(), Submission.id.desc())
    return jsonify(paginate_query(query, SubmissionSchema(), default_per_page=15)), 200


@api_bp.route('/submissions', methods=['POST'])
@token_required
def api_create_submission():
    data = SubmissionInputSchema().load(get_payload())

    submission = Submission(
        package_type=data['package_type'],
        email=data['email'],
        lead_guest=data['lead_guest'],
        fb_name=data.get('fb_name'),
        contact_number=data['contact_number'],
        payment_date=data.get('payment_date'),
        payment_amount=data.get('payment_amount'),
        has_payment_receipt=bool(data.get('has_payment_receipt')),
        archived=False,
    )
    _set_companions(submission, data.get('companions') or [])
    _set_answers(submission, data.get('answers') or [])

    db.session.add(submission)
    db.session.commit()
    current_app.logger.info('Submission created: id=%s email=%s', submission.id, submission.email)

    return api_success(SubmissionSchema().dump(submission), 201, 'Submission created successfully.')


@api_bp.route('/submissions/<int:submission_id>', methods=['GET'])
@token_required
def api_get_submission(submission_id):
    submission, error = get_or_404(Submission, submission_id, 'Submission')
    if error:
        return error
    return api_success(SubmissionSchema().dump(submission))


@api_bp.route('/submissions/<int:submission_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_submission(submission_id):
    """Update a submission; companions and answers are replaced when given."""
    submission, error = get_or_404(Submission, submission_id, 'Submission')
    if error:
        return error

    data = SubmissionInputSchema().load(get_payload(), partial=True)
    companions = data.pop('companions', None)
    answers = data.pop('answers', None)

    for field, value in data.items():
        # flag columns are NOT NULL
        if value is None and field in ('has_payment_receipt', 'archived'):
            continue
        setattr(submission, field, value)

    if companions is not None:
        _set_companions(submission, companions)
    if answers is not None:
        _set_answers(submission, answers)

    db.session.commit()
    current_app.logger.info('Submission updated: id=%s', submission.id)

    return api_success(SubmissionSchema().dump(submission), message='Submission updated successfully.')


@api_bp.route('/submissions/<int:submission_id>', methods=['DELETE'])
@token_required
def api_delete_submission(submission_id):
    submission, error = get_or_404(Submission, submission_id, 'Submission')
    if error:
        return error

    for receipt in submission.receipts:
        storage.delete_file(receipt.file_path)
    db.session.delete(submission)
    db.session.commit()
    current_app.logger.info('Submission deleted: id=%s', submission_id)

    return api_success(None, message='Submission deleted successfully.')


@api_bp.route('/submissions/<int:submission_id>/archive', methods=['POST', 'PATCH'])
@token_required
def api_archive_submission(submission_id):
    submission, error = get_or_404(Submission, submission_id, 'Submission')
    if error:
        return error
    submission.archived = True
    db.session.commit()
    return api_success({'id': submission.id, 'archived': True}, message='Submission archived successfully.')


@api_bp.route('/submissions/<int:submission_id>/restore', methods=['POST', 'PATCH'])
@token_required
def api_restore_submission(submission_id):
    submission, error = get_or_404(Submission, submission_id, 'Submission')
    if error:
        return error
    submission.archived = False
    db.session.commit()
    return api_success({'id': submission.id, 'archived': False}, message='Submission restored successfully.')


@api_bp.route('/submissions/<int:submission_id>/receipts', methods=['POST'])
@token_required
def api_upload_receipt(submission_id):
    """Attach a payment receipt (multipart field 'receipt')."""
    submission, error = get_or_404(Submission, submission_id, 'Submission')
    if error:
        return error

    file = request.files.get('receipt')
    storage.validate_upload(file, 'receipt', RECEIPT_EXTENSIONS, MAX_RECEIPT_SIZE)
    size = storage.file_size(file)
    path = storage.save_receipt(file)

    receipt = PaymentReceipt(
        file_name=file.filename,
        file_path=path,
        file_size=size,
        mime_type=file.mimetype,
    )
    submission.receipts.append(receipt)
    submission.has_payment_receipt = True
    db.session.commit()
    current_app.logger.info('Receipt uploaded for submission %s: %s', submission.id, path)

    return api_success(SubmissionSchema().dump(submission), 201, 'Receipt uploaded successfully.')
