"""
Bearer token authentication for the REST API.

Tokens are HS256 JWTs whose ``jti`` matches a row in ``api_tokens``; a token
stays valid only while that row exists and has not expired, so logout and
login-elsewhere revoke it immediately.
"""
from functools import wraps

import jwt
from flask import request, current_app

from app.blueprints.api.helpers import api_error
from app.extensions import db
from app.models.user import ApiToken
from app.utils.formatting import utcnow


def _signing_key():
    return current_app.config.get('JWT_SECRET_KEY') or current_app.config['SECRET_KEY']


def create_api_token(user, name):
    """Issue a new API token for a user. Returns (encoded token, ApiToken row)."""
    expires_days = current_app.config.get('API_TOKEN_EXPIRES_DAYS', 7)
    token = ApiToken.issue(user, name, expires_days)
    payload = {
        'sub': str(user.id),
        'jti': token.jti,
        'type': 'access',
        'iat': utcnow(),
        'exp': token.expires_at,
    }
    return jwt.encode(payload, _signing_key(), algorithm='HS256'), token


def decode_token(token):
    """Decode and validate a JWT token. Returns payload or None."""
    try:
        return jwt.decode(token, _signing_key(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_current_api_token():
    """Extract the token row from the Authorization header. Returns (token, error_response)."""
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None, api_error('missing_token', 'Authorization header with Bearer token required.', 401)

    payload = decode_token(auth_header[7:])
    if payload is None or payload.get('type') != 'access' or not payload.get('jti'):
        return None, api_error('invalid_token', 'Token is invalid or expired.', 401)

    token = ApiToken.query.filter_by(jti=payload['jti']).first()
    if token is None or token.is_expired or str(token.user_id) != str(payload.get('sub')):
        return None, api_error('invalid_token', 'Token has been revoked or has expired.', 401)

    user = token.user
    if user is None or user.user_delete:
        return None, api_error('user_not_found', 'User not found or deactivated.', 401)

    token.last_used_at = utcnow()
    db.session.commit()
    return token, None


def token_required(f):
    """Decorator: require a valid, unrevoked API token."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token, error = get_current_api_token()
        if error:
            return error
        request.api_token = token
        request.api_user = token.user
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """Decorator: require an API token belonging to an administrator."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token, error = get_current_api_token()
        if error:
            return error
        if not token.user.is_admin:
            return api_error('forbidden', 'Administrator access required.', 403)
        request.api_token = token
        request.api_user = token.user
        return f(*args, **kwargs)
    return decorated
