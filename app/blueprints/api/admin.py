"""
Administrator endpoints — account approval queue.
"""
from flask import request, jsonify, current_app

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import admin_required
from app.blueprints.api.helpers import paginate_query, api_error, api_success, get_or_404
from app.blueprints.api.schemas import UserSchema
from app.extensions import db
from app.models.user import User
from app.utils.email import send_account_approved_email


@api_bp.route('/admin/users', methods=['GET'])
@admin_required
def api_admin_list_users():
    """List accounts.

    Query params:
        status (str): 'pending' (not yet approved) or 'approved'
        page, per_page: Pagination
    """
    query = User.query.filter(User.user_delete.is_(False))

    status = request.args.get('status')
    if status == 'pending':
        query = query.filter(User.is_approved.is_(False))
    elif status == 'approved':
        query = query.filter(User.is_approved.is_(True))
    elif status:
        return api_error('invalid_filter', f'Invalid status: {status}', 422)

    query = query.order_by(User.created_at.desc())
    return jsonify(paginate_query(query, UserSchema(), default_per_page=15)), 200


@api_bp.route('/admin/users/<int:user_id>/approve', methods=['POST'])
@admin_required
def api_admin_approve_user(user_id):
    """Approve an account so it can log in."""
    user, error = get_or_404(User, user_id, 'User')
    if error:
        return error

    if not user.is_approved:
        user.is_approved = True
        db.session.commit()
        send_account_approved_email(user)
        current_app.logger.info('User %s approved by %s', user.email, request.api_user.email)

    return api_success(UserSchema().dump(user), message='User approved successfully.')


@api_bp.route('/admin/users/<int:user_id>/revoke-approval', methods=['POST'])
@admin_required
def api_admin_revoke_approval(user_id):
    """Withdraw approval and sign the account out everywhere."""
    user, error = get_or_404(User, user_id, 'User')
    if error:
        return error
    if user.id == request.api_user.id:
        return api_error('forbidden', 'You cannot revoke your own approval.', 403)

    user.is_approved = False
    user.revoke_tokens()
    db.session.commit()
    current_app.logger.info('User %s approval revoked by %s', user.email, request.api_user.email)

    return api_success(UserSchema().dump(user), message='User approval revoked.')
