# ecommerce_admin/models/__init__.py
from .base import db, BaseModel, AuditMixin, SoftDeleteMixin
from .enums import AuditLogStatusEnum, AuditTarget, RecordStatusEnum
from .user_models import User, Role, Permission, ApiToken, user_roles, user_permissions, role_permissions
from .catalog_models import Brand, Category, Product, Color, Size, ProductVariant
from .utility_models import AuditLog
