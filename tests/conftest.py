"""
Pytest configuration and fixtures for the e-commerce admin API tests.
Each test gets a fresh in-memory SQLite database with the permission
catalogue and roles seeded.
"""
import pytest

from ecommerce_admin import create_app
from ecommerce_admin.database import seed_permissions_and_roles
from ecommerce_admin.models import db, Permission, Role, User

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def app():
    """Create application with test configuration and seeded tables."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        seed_permissions_and_roles()
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Factory for staff users with optional roles and direct permissions."""
    def _make_user(email, is_admin=False, roles=(), permissions=(), password=DEFAULT_PASSWORD, username=None):
        user = User(username=username or email.split('@')[0], email=email, is_admin=is_admin)
        user.set_password(password)
        if roles:
            user.roles = Role.query.filter(Role.name.in_(list(roles))).all()
        if permissions:
            user.permissions = Permission.query.filter(Permission.name.in_(list(permissions))).all()
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def login(client):
    """Log in through the API and return the bearer token."""
    def _login(email, password=DEFAULT_PASSWORD):
        response = client.post('/api/v1/auth/login', json={"email": email, "password": password})
        assert response.status_code == 200, response.get_json()
        return response.get_json()['data']['token']
    return _login


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bearer():
    return auth_header


@pytest.fixture
def admin_user(make_user):
    return make_user('admin@example.com', is_admin=True)


@pytest.fixture
def admin_headers(admin_user, login):
    return auth_header(login(admin_user.email))


@pytest.fixture
def headers_for(make_user, login):
    """Bearer headers for a fresh non-admin user holding ``permissions``."""
    def _headers_for(*permissions, email='staff@example.com', roles=()):
        user = make_user(email, permissions=permissions, roles=roles)
        return auth_header(login(user.email))
    return _headers_for
