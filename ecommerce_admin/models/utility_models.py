# ecommerce_admin/models/utility_models.py
from .base import db, utcnow
from .enums import AuditLogStatusEnum


class AuditLog(db.Model):
    __tablename__ = 'audit_logs'
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    action = db.Column(db.String(100), nullable=False, index=True)
    target_type = db.Column(db.String(50), nullable=True, index=True)
    target_id = db.Column(db.Integer, nullable=True, index=True)
    details = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    status = db.Column(db.Enum(AuditLogStatusEnum, name="audit_log_status_enum"),
                       nullable=False, default=AuditLogStatusEnum.INFO, index=True)

    def __repr__(self): return f'<AuditLog {self.action} by User {self.user_id}>'
