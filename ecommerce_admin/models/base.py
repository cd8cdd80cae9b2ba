# ecommerce_admin/models/base.py
# Contains the shared SQLAlchemy instance and the column mixins used by every table.
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import declared_attr

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


def isoformat(dt):
    return dt.isoformat() if dt else None


def active_unique_index(table_name, *columns):
    """Unique index restricted to rows that are not soft-deleted.

    SQLite and PostgreSQL honour the partial predicate; other backends get a
    plain unique index.
    """
    predicate = db.text('deleted_at IS NULL')
    return db.Index(
        f"uq_{table_name}_{'_'.join(columns)}_active", *columns, unique=True,
        sqlite_where=predicate, postgresql_where=predicate
    )


class BaseModel(db.Model):
    __abstract__ = True
    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class AuditMixin:
    """created_by / updated_by point at the acting user."""

    @declared_attr
    def created_by(cls):
        return db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    @declared_attr
    def updated_by(cls):
        return db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    def stamp_created(self, user_id):
        self.created_by = user_id
        self.updated_by = user_id

    def stamp_updated(self, user_id):
        self.updated_by = user_id

    def audit_dict(self):
        return {
            "created_at": isoformat(self.created_at), "updated_at": isoformat(self.updated_at),
            "created_by": self.created_by, "updated_by": self.updated_by,
        }


class SoftDeleteMixin:
    """
    Rows are flagged with ``deleted_at`` instead of being removed.

    ``query_active()`` is the default read path for every controller; callers
    opt into trashed rows explicitly with ``include_deleted=True`` or
    ``query_trashed()``.
    """

    @declared_attr
    def deleted_at(cls):
        return db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    @declared_attr
    def deleted_by(cls):
        return db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    @classmethod
    def query_active(cls, include_deleted=False):
        query = cls.query
        if not include_deleted:
            query = query.filter(cls.deleted_at.is_(None))
        return query

    @classmethod
    def query_trashed(cls):
        return cls.query.filter(cls.deleted_at.isnot(None))

    @classmethod
    def find_active(cls, ident, include_deleted=False):
        return cls.query_active(include_deleted).filter(cls.id == ident).first()

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def soft_delete(self, user_id=None):
        self.deleted_at = utcnow()
        self.deleted_by = user_id

    def restore(self):
        self.deleted_at = None
        self.deleted_by = None
