# ecommerce_admin/audit_log_service.py
# Audit trail for staff sign-ins and admin writes. Each entry is committed on
# its own, after the write it describes.
import logging

from flask import has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from .models import db, AuditLog, AuditLogStatusEnum, AuditTarget


def client_ip():
    if not has_request_context():
        return None
    return request.access_route[0] if request.access_route else request.remote_addr


class AuditLogService:
    def __init__(self, app=None):
        self.logger = app.logger if app is not None else logging.getLogger(__name__)

    def coerce_status(self, status):
        if isinstance(status, AuditLogStatusEnum):
            return status
        try:
            return AuditLogStatusEnum(str(status).lower())
        except ValueError:
            self.logger.warning(f"Invalid audit log status '{status}' received. Defaulting to INFO.")
            return AuditLogStatusEnum.INFO

    def log_action(self, action, user_id=None, target_type=None, target_id=None, details=None,
                   status=AuditLogStatusEnum.SUCCESS, ip_address=None):
        """
        Insert one audit row and commit it. Returns the entry, or None when it
        could not be stored; the caller's own write has already been committed.
        """
        try:
            target = AuditTarget(target_type).value if target_type is not None else None
            entry = AuditLog(
                action=action,
                user_id=user_id,
                target_type=target,
                target_id=target_id,
                details=details,
                status=self.coerce_status(status),
                ip_address=ip_address or client_ip(),
            )
            db.session.add(entry)
            db.session.commit()
            return entry
        except (SQLAlchemyError, ValueError) as e:
            db.session.rollback()
            self.logger.error(f"Failed to write audit log: Action={action}, UserID={user_id}, "
                              f"Target={target_type}/{target_id}. Error: {e}", exc_info=True)
            return None

    # --- Admin writes ---
    def log_admin_action(self, actor, action, target_type, target_id=None, details=None,
                         status=AuditLogStatusEnum.SUCCESS):
        return self.log_action(action, user_id=actor.id if actor is not None else None,
                               target_type=target_type, target_id=target_id, details=details, status=status)

    # --- Sessions ---
    def log_login(self, user):
        return self.log_action('login_success', user_id=user.id, target_type=AuditTarget.USER, target_id=user.id)

    def log_failed_login(self, email):
        return self.log_action('login_fail', target_type=AuditTarget.USER,
                               details=f"Attempt by email: {email}. Invalid credentials.",
                               status=AuditLogStatusEnum.FAILURE)

    def log_logout(self, user):
        return self.log_action('logout', user_id=user.id, target_type=AuditTarget.USER, target_id=user.id)
