# ecommerce_admin/models/user_models.py
import uuid

from werkzeug.security import generate_password_hash, check_password_hash

from .base import db, BaseModel, AuditMixin, SoftDeleteMixin, isoformat, utcnow


user_roles = db.Table(
    'user_roles',
    db.Column('user_id', db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    db.Column('role_id', db.Integer, db.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True)
)

user_permissions = db.Table(
    'user_permissions',
    db.Column('user_id', db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    db.Column('permission_id', db.Integer, db.ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True)
)

role_permissions = db.Table(
    'role_permissions',
    db.Column('role_id', db.Integer, db.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
    db.Column('permission_id', db.Integer, db.ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True)
)


class User(BaseModel, AuditMixin, SoftDeleteMixin):
    """
    Staff account. ``is_admin`` bypasses every role and permission check.
    Capabilities come from direct permissions plus permissions inherited
    through roles.
    """
    __tablename__ = 'users'
    uuid = db.Column(db.String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    username = db.Column(db.String(100), nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(50), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    roles = db.relationship('Role', secondary=user_roles, back_populates='users', lazy='selectin')
    permissions = db.relationship('Permission', secondary=user_permissions, back_populates='users', lazy='selectin')
    tokens = db.relationship('ApiToken', back_populates='user', lazy='dynamic', cascade="all, delete-orphan")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash or not password:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def role_names(self):
        return [role.name for role in self.roles]

    @property
    def direct_permission_names(self):
        return [perm.name for perm in self.permissions]

    def all_permission_names(self):
        """Direct permissions plus those inherited through roles, in first-seen order."""
        names = dict.fromkeys(self.direct_permission_names)
        for role in self.roles:
            for perm in role.permissions:
                names.setdefault(perm.name)
        return list(names)

    def has_role(self, role_name):
        return role_name in self.role_names

    def has_permission(self, permission_name):
        return permission_name in self.all_permission_names()

    def to_dict(self, include_roles=False, include_permissions=False):
        data = {
            "id": self.id, "uuid": self.uuid, "username": self.username,
            "email": self.email, "phone": self.phone, "is_admin": self.is_admin,
            "last_login_at": isoformat(self.last_login_at),
            "deleted_at": isoformat(self.deleted_at),
        }
        data.update(self.audit_dict())
        if include_roles:
            data["roles"] = self.role_names
        if include_permissions:
            data["permissions"] = self.all_permission_names()
        return data

    def __repr__(self):
        return f'<User {self.email}>'


class Role(BaseModel):
    __tablename__ = 'roles'
    name = db.Column(db.String(125), unique=True, nullable=False, index=True)
    description = db.Column(db.String(255), nullable=True)

    permissions = db.relationship('Permission', secondary=role_permissions, back_populates='roles', lazy='selectin')
    users = db.relationship('User', secondary=user_roles, back_populates='roles', lazy='dynamic')

    def to_dict(self, include_permissions=True):
        data = {
            "id": self.id, "name": self.name, "description": self.description,
            "created_at": isoformat(self.created_at), "updated_at": isoformat(self.updated_at),
        }
        if include_permissions:
            data["permissions"] = [perm.to_dict() for perm in self.permissions]
        return data

    def __repr__(self):
        return f'<Role {self.name}>'


class Permission(BaseModel):
    __tablename__ = 'permissions'
    name = db.Column(db.String(125), unique=True, nullable=False, index=True)
    description = db.Column(db.String(255), nullable=True)

    roles = db.relationship('Role', secondary=role_permissions, back_populates='permissions', lazy='dynamic')
    users = db.relationship('User', secondary=user_permissions, back_populates='permissions', lazy='dynamic')

    def to_dict(self):
        return {
            "id": self.id, "name": self.name, "description": self.description,
            "created_at": isoformat(self.created_at), "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Permission {self.name}>'


class ApiToken(db.Model):
    """
    Issued bearer credentials, keyed by JWT id. A token is only accepted
    while its row exists and ``revoked_at`` is unset.
    """
    __tablename__ = 'api_tokens'
    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(36), nullable=False, unique=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False, default='auth_token')
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    user = db.relationship('User', back_populates='tokens')

    @property
    def is_revoked(self):
        return self.revoked_at is not None

    def __repr__(self):
        return f'<ApiToken {self.jti} user={self.user_id}>'
