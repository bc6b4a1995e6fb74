# =============================================================================
# Vantripper Back Office - Pytest Fixtures Configuration
# =============================================================================

import pytest

from app import create_app
from app.extensions import db
from app.models.user import User
from app.models.package import Destination
from app.models.submission import BookingPackage
from app.utils.formatting import utcnow


PASSWORD = 'TestPass123!'


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture(scope='function')
def app(tmp_path):
    """Create and configure test application with SQLite in-memory databases."""
    application = create_app('testing')
    application.config['UPLOAD_FOLDER'] = str(tmp_path / 'storage')

    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Test client for HTTP requests."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """CLI test runner."""
    return app.test_cli_runner()


# =============================================================================
# User Fixtures
# =============================================================================

def make_user(email, name='Test User', verified=True, approved=True, is_admin=False):
    user = User(
        name=name,
        email=email,
        email_verified_at=utcnow() if verified else None,
        is_approved=approved,
        is_admin=is_admin,
    )
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def staff_user(app):
    """Verified, approved, non-admin account."""
    return make_user('staff@vantripper.com', name='Staff User')


@pytest.fixture
def admin_user(app):
    """Verified, approved administrator."""
    return make_user('admin@vantripper.com', name='Admin User', is_admin=True)


@pytest.fixture
def pending_user(app):
    """Verified account still waiting for approval."""
    return make_user('pending@vantripper.com', name='Pending User', approved=False)


def get_auth_token(client, email='staff@vantripper.com', password=PASSWORD):
    """Helper: login and return the bearer token."""
    resp = client.post('/api/v1/auth/login', json={
        'email': email,
        'password': password,
    })
    return resp.get_json()['data']['token']


def auth_header(token):
    """Helper: build Authorization header."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth(client, staff_user):
    """Authorization header of a logged-in staff user."""
    return auth_header(get_auth_token(client))


@pytest.fixture
def admin_auth(client, admin_user):
    """Authorization header of a logged-in administrator."""
    return auth_header(get_auth_token(client, email='admin@vantripper.com'))


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def destinations(app):
    """Three active destinations and one inactive one."""
    rows = [
        Destination(name='Boracay', slug='boracay', category='beach'),
        Destination(name='Palawan', slug='palawan', category='beach'),
        Destination(name='Baguio', slug='baguio', category='mountain'),
        Destination(name='Closed Island', slug='closed-island', active=False),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


@pytest.fixture
def booking_package(app):
    """Booking form package (terms database)."""
    package = BookingPackage(name='Coron Island Hopping')
    db.session.add(package)
    db.session.commit()
    return package
