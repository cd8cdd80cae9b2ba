# ecommerce_admin/models/enums.py
# Contains all Enum definitions for the models.
import enum


class AuditLogStatusEnum(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"
    INFO = "info"


class RecordStatusEnum(enum.IntEnum):
    """Values stored in the catalogue ``status_id`` columns."""
    ACTIVE = 1
    INACTIVE = 2
    DRAFT = 3


class AuditTarget(str, enum.Enum):
    """Kinds of record an audit entry can point at; stored as the plain value."""
    USER = "user"
    ROLE = "role"
    PERMISSION = "permission"
    BRAND = "brand"
    CATEGORY = "category"
    PRODUCT = "product"
    PRODUCT_VARIANT = "product_variant"
    COLOR = "color"
    SIZE = "size"
