"""
Tests for the public health probe and the database CLI commands.
"""
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from ecommerce_admin.constants import SUPER_ADMIN_ROLE
from ecommerce_admin.models import Role, User, db


class TestHealth:
    def test_health_is_public(self, client):
        response = client.get('/api/v1/health')
        data = response.get_json()

        assert response.status_code == 200
        assert data["success"] is True
        assert data["data"]["status"] == "OK"
        assert data["data"]["message"] == "API is running"
        assert data["data"]["components"]["database"]["status"] == "up"
        assert data["data"]["timestamp"]

    def test_health_reports_database_failure(self, client):
        failure = OperationalError("SELECT 1", {}, Exception("database is locked"))
        with patch.object(db.session, 'execute', side_effect=failure):
            response = client.get('/api/v1/health')

        assert response.status_code == 200
        assert response.get_json()["data"]["status"] == "PARTIAL"
        assert response.get_json()["data"]["components"]["database"]["status"] == "down"

    def test_api_root(self, client):
        response = client.get('/api')

        assert response.get_json()["data"]["version"] == "v1"


class TestDatabaseCommands:
    def test_seed_db_creates_admin(self, app):
        runner = app.test_cli_runner()

        result = runner.invoke(args=['seed-db'])

        assert result.exit_code == 0
        admin = User.query.filter_by(email='test_admin@example.com').one()
        assert admin.is_admin
        assert admin.has_role(SUPER_ADMIN_ROLE)
        assert admin.check_password('test_password123')

    def test_seed_db_is_idempotent(self, app):
        runner = app.test_cli_runner()

        runner.invoke(args=['seed-db'])
        result = runner.invoke(args=['seed-db'])

        assert result.exit_code == 0
        assert User.query.count() == 1
        assert Role.query.filter_by(name=SUPER_ADMIN_ROLE).count() == 1

    def test_seeded_admin_can_log_in(self, app, client, login):
        app.test_cli_runner().invoke(args=['seed-db'])

        assert login('test_admin@example.com', 'test_password123')
