"""
Tests for the API auth flow — registration, email verification, approval
gate at login, token revocation and refresh.
"""
from datetime import timedelta
from unittest.mock import patch

from app.extensions import db
from app.models.user import User, ApiToken
from app.utils.formatting import utcnow

from tests.conftest import PASSWORD, get_auth_token, auth_header


REGISTRATION = {
    'name': 'Maria Santos',
    'email': 'Maria@Vantripper.com',
    'password': 'SecretPass1',
    'password_confirmation': 'SecretPass1',
}


# ── Registration ────────────────────────────────────────────

class TestRegistration:

    def test_register_creates_pending_unverified_user(self, client):
        with patch('app.blueprints.api.auth.send_verification_email') as mock_send:
            resp = client.post('/api/v1/auth/register', json=REGISTRATION)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body['data']['email'] == 'maria@vantripper.com'
        assert body['data']['is_approved'] is False
        assert body['data']['is_admin'] is False
        assert body['data']['email_verified_at'] is None
        assert 'password' not in body['data']
        assert 'admin approval' in body['message']
        mock_send.assert_called_once()

        user = User.query.filter_by(email='maria@vantripper.com').first()
        assert user is not None
        assert user.verification_token
        assert user.check_password('SecretPass1')

    def test_register_duplicate_email(self, client, staff_user):
        payload = dict(REGISTRATION, email='staff@vantripper.com')
        with patch('app.blueprints.api.auth.send_verification_email'):
            resp = client.post('/api/v1/auth/register', json=payload)

        assert resp.status_code == 422
        details = resp.get_json()['error']['details']
        assert details[0]['field'] == 'email'
        assert details[0]['code'] == 'unique'

    def test_register_password_mismatch(self, client):
        payload = dict(REGISTRATION, password_confirmation='Different1')
        resp = client.post('/api/v1/auth/register', json=payload)

        assert resp.status_code == 422
        error = resp.get_json()['error']
        assert error['code'] == 'validation_error'
        assert any(d['field'] == 'password' for d in error['details'])

    def test_register_short_password(self, client):
        payload = dict(REGISTRATION, password='short', password_confirmation='short')
        resp = client.post('/api/v1/auth/register', json=payload)
        assert resp.status_code == 422

    def test_register_missing_fields(self, client):
        resp = client.post('/api/v1/auth/register', json={'email': 'a@b.com'})

        assert resp.status_code == 422
        details = resp.get_json()['error']['details']
        fields = {d['field'] for d in details}
        assert {'name', 'password', 'password_confirmation'} <= fields
        assert all(d['code'] == 'required' for d in details)

    def test_verify_email(self, client):
        with patch('app.blueprints.api.auth.send_verification_email'):
            client.post('/api/v1/auth/register', json=REGISTRATION)
        user = User.query.filter_by(email='maria@vantripper.com').first()

        resp = client.get(f'/api/v1/auth/verify-email/{user.verification_token}')

        assert resp.status_code == 200
        assert resp.get_json()['data']['email_verified_at'] is not None
        assert user.has_verified_email
        assert user.verification_token is None

    def test_verify_email_invalid_token(self, client):
        resp = client.get('/api/v1/auth/verify-email/not-a-token')
        assert resp.status_code == 404
        assert resp.get_json()['error']['code'] == 'invalid_token'


# ── Login ───────────────────────────────────────────────────

class TestLogin:

    def test_login_success(self, client, staff_user):
        resp = client.post('/api/v1/auth/login', json={
            'email': 'staff@vantripper.com',
            'password': PASSWORD,
            'device_name': 'office-laptop',
        })

        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['token']
        assert data['token_type'] == 'Bearer'
        assert data['expires_in'] == '7 days'
        assert data['user'] == {
            'id': staff_user.id,
            'name': 'Staff User',
            'email': 'staff@vantripper.com',
            'is_admin': False,
        }
        assert staff_user.tokens.first().name == 'office-laptop'

    def test_login_email_is_case_insensitive(self, client, staff_user):
        resp = client.post('/api/v1/auth/login', json={
            'email': 'STAFF@vantripper.com',
            'password': PASSWORD,
        })
        assert resp.status_code == 200

    def test_login_invalid_password(self, client, staff_user):
        resp = client.post('/api/v1/auth/login', json={
            'email': 'staff@vantripper.com',
            'password': 'WrongPassword!',
        })
        assert resp.status_code == 401
        assert resp.get_json()['error']['code'] == 'invalid_credentials'

    def test_login_unknown_email(self, client):
        resp = client.post('/api/v1/auth/login', json={
            'email': 'nobody@vantripper.com',
            'password': PASSWORD,
        })
        assert resp.status_code == 401

    def test_login_unverified_email(self, client, pending_user):
        pending_user.email_verified_at = None
        db.session.commit()

        resp = client.post('/api/v1/auth/login', json={
            'email': 'pending@vantripper.com',
            'password': PASSWORD,
        })
        assert resp.status_code == 403
        assert resp.get_json()['error']['code'] == 'email_not_verified'

    def test_login_pending_approval(self, client, pending_user):
        resp = client.post('/api/v1/auth/login', json={
            'email': 'pending@vantripper.com',
            'password': PASSWORD,
        })
        assert resp.status_code == 403
        assert resp.get_json()['error']['code'] == 'account_pending_approval'

    def test_login_missing_fields(self, client):
        resp = client.post('/api/v1/auth/login', json={'email': 'staff@vantripper.com'})
        assert resp.status_code == 422
        assert resp.get_json()['error']['code'] == 'validation_error'

    def test_login_revokes_previous_tokens(self, client, staff_user):
        first = get_auth_token(client)
        second = get_auth_token(client)

        assert client.get('/api/v1/auth/me', headers=auth_header(first)).status_code == 401
        assert client.get('/api/v1/auth/me', headers=auth_header(second)).status_code == 200
        assert staff_user.tokens.count() == 1


# ── Token lifecycle ─────────────────────────────────────────

class TestTokens:

    def test_me(self, client, auth):
        resp = client.get('/api/v1/auth/me', headers=auth)
        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['email'] == 'staff@vantripper.com'
        assert data['email_verified_at'] is not None

    def test_user_record_has_no_password(self, client, auth):
        resp = client.get('/api/v1/user', headers=auth)
        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['name'] == 'Staff User'
        assert 'password_hash' not in data
        assert 'verification_token' not in data

    def test_missing_token(self, client):
        resp = client.get('/api/v1/auth/me')
        assert resp.status_code == 401
        assert resp.get_json()['error']['code'] == 'missing_token'

    def test_garbage_token(self, client):
        resp = client.get('/api/v1/auth/me', headers=auth_header('invalid.token.here'))
        assert resp.status_code == 401
        assert resp.get_json()['error']['code'] == 'invalid_token'

    def test_expired_token_row(self, client, staff_user):
        token = get_auth_token(client)
        row = staff_user.tokens.first()
        row.expires_at = utcnow() - timedelta(minutes=1)
        db.session.commit()

        resp = client.get('/api/v1/auth/me', headers=auth_header(token))
        assert resp.status_code == 401

    def test_deleted_user_is_rejected(self, client, staff_user):
        token = get_auth_token(client)
        staff_user.user_delete = True
        db.session.commit()

        resp = client.get('/api/v1/auth/me', headers=auth_header(token))
        assert resp.status_code == 401
        assert resp.get_json()['error']['code'] == 'user_not_found'

    def test_token_records_last_use(self, client, staff_user):
        token = get_auth_token(client)
        client.get('/api/v1/auth/me', headers=auth_header(token))
        assert staff_user.tokens.first().last_used_at is not None

    def test_logout_revokes_token(self, client, auth):
        resp = client.post('/api/v1/auth/logout', headers=auth)
        assert resp.status_code == 200
        assert ApiToken.query.count() == 0
        assert client.get('/api/v1/auth/me', headers=auth).status_code == 401

    def test_logout_all(self, client, staff_user, auth):
        # a second device token issued outside login
        ApiToken.issue(staff_user, 'tablet', 7)
        db.session.commit()

        resp = client.post('/api/v1/auth/logout-all', headers=auth)
        assert resp.status_code == 200
        assert resp.get_json()['data'] == {'revoked': 2}
        assert staff_user.tokens.count() == 0

    def test_refresh_swaps_token(self, client, staff_user, auth):
        resp = client.post('/api/v1/auth/refresh', headers=auth)
        assert resp.status_code == 200
        new_token = resp.get_json()['data']['token']

        assert client.get('/api/v1/auth/me', headers=auth).status_code == 401
        assert client.get('/api/v1/auth/me', headers=auth_header(new_token)).status_code == 200
        assert staff_user.tokens.count() == 1
        assert staff_user.tokens.first().name == 'api-token'
