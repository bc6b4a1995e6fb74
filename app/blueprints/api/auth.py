"""
API Authentication endpoints — registration, email verification, login,
logout and token refresh.
"""
from flask import request, current_app

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import create_api_token, token_required
from app.blueprints.api.helpers import api_error, api_success, get_payload
from app.blueprints.api.schemas import (
    LoginSchema, RegisterSchema, UserSchema, UserMinimalSchema, UserDetailSchema,
)
from app.extensions import db, limiter
from app.models.user import User
from app.utils.email import send_verification_email


def _token_response(user, token, status=200, message=None):
    expires_days = current_app.config.get('API_TOKEN_EXPIRES_DAYS', 7)
    return api_success({
        'user': UserMinimalSchema().dump(user),
        'token': token,
        'token_type': 'Bearer',
        'expires_in': f'{expires_days} days',
    }, status, message)


@api_bp.route('/auth/register', methods=['POST'])
@limiter.limit('5 per minute')
def api_register():
    """Register a new account.

    The account starts unverified and unapproved: the user must click the
    verification link and an administrator must approve them before login.

    Request body:
        {"name": "...", "email": "...", "password": "...", "password_confirmation": "..."}
    """
    data = RegisterSchema().load(get_payload())

    if User.query.filter_by(email=data['email']).first():
        return api_error('validation_error', 'The given data was invalid.', 422, [
            {'field': 'email', 'message': 'The email has already been taken.', 'code': 'unique'},
        ])

    user = User(
        name=data['name'],
        email=data['email'],
        is_approved=False,
        is_admin=False,
    )
    user.set_password(data['password'])
    user.generate_verification_token()
    db.session.add(user)
    db.session.commit()

    send_verification_email(user)

    current_app.logger.info(
        'New user registered: %s (id=%s, ip=%s)', user.email, user.id, request.remote_addr
    )

    return api_success(
        UserSchema().dump(user),
        201,
        'Registration successful. Please verify your email and wait for admin approval.',
    )


@api_bp.route('/auth/verify-email/<token>', methods=['GET'])
def api_verify_email(token):
    """Mark the account owning this verification token as verified."""
    user = User.query.filter_by(verification_token=token).first()
    if user is None:
        return api_error('invalid_token', 'Verification link is invalid or has already been used.', 404)

    user.mark_email_as_verified()
    db.session.commit()
    current_app.logger.info('Email verified: %s (id=%s)', user.email, user.id)

    return api_success(UserSchema().dump(user), message='Email verified successfully.')


@api_bp.route('/auth/login', methods=['POST'])
@limiter.limit('10 per minute')
def api_login():
    """Authenticate user and return a bearer token.

    Request body:
        {"email": "...", "password": "...", "device_name": "..."}

    Returns:
        {"data": {"user": {...}, "token": "...", "token_type": "Bearer", "expires_in": "7 days"}}
    """
    data = LoginSchema().load(get_payload())
    email = data['email'].strip().lower()

    user = User.query.filter_by(email=email).first()

    if user is None or not user.check_password(data['password']) or user.user_delete:
        current_app.logger.warning('Failed login attempt for %s (ip=%s)', email, request.remote_addr)
        return api_error('invalid_credentials', 'Invalid email or password.', 401)

    if not user.has_verified_email:
        current_app.logger.warning('Login attempt with unverified email: %s', email)
        return api_error('email_not_verified', 'Please verify your email address before logging in.', 403)

    if not user.is_approved:
        current_app.logger.warning('Login attempt by unapproved user: %s', email)
        return api_error('account_pending_approval', 'Your account is pending admin approval.', 403)

    # One active session per user: logging in revokes every older token
    user.revoke_tokens()
    token, _ = create_api_token(user, data.get('device_name') or 'api-token')
    db.session.commit()

    current_app.logger.info('User logged in: %s (id=%s, ip=%s)', user.email, user.id, request.remote_addr)

    return _token_response(user, token, message='Login successful.')


@api_bp.route('/auth/me', methods=['GET'])
@token_required
def api_me():
    """Get current authenticated user profile."""
    return api_success(UserSchema().dump(request.api_user))


@api_bp.route('/user', methods=['GET'])
@token_required
def api_user():
    """Full employee record of the authenticated user."""
    return api_success(UserDetailSchema().dump(request.api_user))


@api_bp.route('/auth/logout', methods=['POST'])
@token_required
def api_logout():
    """Revoke the token used for this request."""
    user = request.api_user
    db.session.delete(request.api_token)
    db.session.commit()
    current_app.logger.info('User logged out: %s (id=%s)', user.email, user.id)
    return api_success(None, message='Logged out successfully.')


@api_bp.route('/auth/logout-all', methods=['POST'])
@token_required
def api_logout_all():
    """Revoke every token of the authenticated user."""
    user = request.api_user
    revoked = user.revoke_tokens()
    db.session.commit()
    current_app.logger.info('User logged out from all devices: %s (%d tokens)', user.email, revoked)
    return api_success({'revoked': revoked}, message='Logged out from all devices successfully.')


@api_bp.route('/auth/refresh', methods=['POST'])
@limiter.limit('20 per minute')
@token_required
def api_refresh():
    """Swap the current token for a new one with the same device name."""
    user = request.api_user
    current_token = request.api_token
    token, _ = create_api_token(user, current_token.name)
    db.session.delete(current_token)
    db.session.commit()
    return _token_response(user, token, message='Token refreshed successfully.')
