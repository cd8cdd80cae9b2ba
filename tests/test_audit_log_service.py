"""
Tests for the audit trail written after sign-ins and admin writes.
"""
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from ecommerce_admin.models import AuditLog, AuditLogStatusEnum, AuditTarget, db


class TestAuditLogService:
    def test_typed_target_stored_as_plain_value(self, app, admin_user):
        entry = app.audit_log_service.log_admin_action(admin_user, 'create_brand', AuditTarget.BRAND,
                                                       target_id=7, details="Created brand 'Acme'.")

        stored = db.session.get(AuditLog, entry.id)
        assert stored.target_type == "brand"
        assert stored.user_id == admin_user.id
        assert stored.status is AuditLogStatusEnum.SUCCESS

    def test_unknown_target_is_logged_not_raised(self, app):
        assert app.audit_log_service.log_action('create_widget', target_type='widget') is None
        assert AuditLog.query.count() == 0

    def test_unknown_status_falls_back_to_info(self, app):
        entry = app.audit_log_service.log_action('sync_roles', target_type='user', status='weird')

        assert entry.status is AuditLogStatusEnum.INFO

    def test_storage_failure_does_not_raise(self, app):
        error = OperationalError("INSERT INTO audit_logs", {}, Exception("database is locked"))
        with patch.object(db.session, 'commit', side_effect=error):
            assert app.audit_log_service.log_action('logout', target_type=AuditTarget.USER) is None

    def test_failed_login_records_email_and_ip(self, client, make_user):
        make_user('jane@example.com')

        client.post('/api/v1/auth/login', json={"email": "jane@example.com", "password": "nope-nope"},
                    environ_base={'REMOTE_ADDR': '203.0.113.9'})
        entry = AuditLog.query.filter_by(action='login_fail').one()

        assert entry.status is AuditLogStatusEnum.FAILURE
        assert entry.user_id is None
        assert "jane@example.com" in entry.details
        assert entry.ip_address == '203.0.113.9'

    def test_admin_write_records_actor(self, client, admin_headers, admin_user):
        client.post('/api/v1/colors', headers=admin_headers, json={"name": "Red", "code": "RED", "hex_code": "#FF0000"})
        entry = AuditLog.query.filter_by(action='create_color').one()

        assert entry.target_type == "color"
        assert entry.user_id == admin_user.id
