# ecommerce_admin/schemas.py
# Request payload schemas. Store-dependent rules (uniqueness, existence of
# referenced rows) are checked in the routes after these pass.
import re
from typing import List, Optional

from flask import request
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .utils import is_valid_email, sanitize_input

HEX_COLOR_RE = re.compile(r'^#[a-fA-F0-9]{6}$')
URL_RE = re.compile(r'^https?://[^\s/$.?#].[^\s]*$', re.IGNORECASE)


def format_validation_errors(exc):
    """pydantic ValidationError -> ``{field: [messages]}``."""
    errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get('loc', ())]
        field = '.'.join(loc) if loc else 'non_field_errors'
        if err.get('type') == 'missing':
            message = f"The {loc[0].replace('_', ' ') if loc else 'value'} field is required."
        else:
            message = err.get('msg', 'Invalid value.')
            if message.startswith('Value error, '):
                message = message[len('Value error, '):]
        errors.setdefault(field, []).append(message)
    return errors


def validate_payload(schema_cls, payload=None):
    if payload is None:
        payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Validation Error", {"body": ["A JSON object is required."]})
    try:
        return schema_cls.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError("Validation Error", format_validation_errors(e)) from e


def changed_fields(schema_obj):
    """Fields explicitly sent in a partial update."""
    return schema_obj.model_dump(exclude_unset=True)


def _not_null(value):
    if value is None:
        raise ValueError("This field may not be null.")
    return value


def _clean_text(value):
    return sanitize_input(value) if value is not None else None


def _check_email(value):
    if value is not None and not is_valid_email(value):
        raise ValueError("The email must be a valid email address.")
    return value.lower() if value else value


def _check_url(value):
    if value and not URL_RE.match(value):
        raise ValueError("The web url must be a valid http(s) URL.")
    return value or None


def _check_hex(value):
    if value is not None and not HEX_COLOR_RE.match(value):
        raise ValueError("The hex code must be in the format #RRGGBB.")
    return value


class RequestSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')


# --- Auth ---
class LoginRequest(RequestSchema):
    email: str = Field(max_length=120)
    password: str = Field(min_length=1)

    normalize_email = field_validator('email')(_check_email)


class CapabilityQuery(RequestSchema):
    permission: str = Field(min_length=1, max_length=125)


class RoleQuery(RequestSchema):
    role: str = Field(min_length=1, max_length=125)


# --- Users ---
class UserCreate(RequestSchema):
    username: str = Field(min_length=3, max_length=100)
    email: str = Field(max_length=120)
    password: str = Field(min_length=8, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=50)
    is_admin: bool = False
    roles: List[str] = Field(default_factory=list)

    normalize_email = field_validator('email')(_check_email)
    clean_username = field_validator('username')(_clean_text)


class UserUpdate(RequestSchema):
    username: Optional[str] = Field(default=None, min_length=3, max_length=100)
    email: Optional[str] = Field(default=None, max_length=120)
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=50)
    is_admin: Optional[bool] = None

    require_values = field_validator('username', 'email', 'is_admin')(_not_null)
    normalize_email = field_validator('email')(_check_email)


class RoleSync(RequestSchema):
    roles: List[str]


# --- Roles & permissions ---
class RoleCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=125)
    description: Optional[str] = Field(default=None, max_length=255)
    permissions: List[int] = Field(default_factory=list)


class RoleUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=125)
    description: Optional[str] = Field(default=None, max_length=255)
    permissions: Optional[List[int]] = None

    require_values = field_validator('name', 'permissions')(_not_null)


class PermissionSync(RequestSchema):
    permissions: List[int]


class PermissionCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=125)
    description: Optional[str] = Field(default=None, max_length=255)


class PermissionUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=125)
    description: Optional[str] = Field(default=None, max_length=255)

    require_values = field_validator('name')(_not_null)


# --- Catalogue ---
class CatalogFields(RequestSchema):
    status_id: int = Field(default=1, ge=1)
    order: int = Field(default=0, ge=0)


class BrandCreate(CatalogFields):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    web_url: Optional[str] = Field(default=None, max_length=255)
    is_featured: bool = False

    clean_name = field_validator('name')(_clean_text)
    check_web_url = field_validator('web_url')(_check_url)


class BrandUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    web_url: Optional[str] = Field(default=None, max_length=255)
    is_featured: Optional[bool] = None
    status_id: Optional[int] = Field(default=None, ge=1)
    order: Optional[int] = Field(default=None, ge=0)

    require_values = field_validator('name', 'is_featured', 'status_id', 'order')(_not_null)
    clean_name = field_validator('name')(_clean_text)
    check_web_url = field_validator('web_url')(_check_url)


class CategoryCreate(CatalogFields):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_featured: bool = False

    clean_name = field_validator('name')(_clean_text)


class CategoryUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_featured: Optional[bool] = None
    status_id: Optional[int] = Field(default=None, ge=1)
    order: Optional[int] = Field(default=None, ge=0)

    require_values = field_validator('name', 'is_featured', 'status_id', 'order')(_not_null)
    clean_name = field_validator('name')(_clean_text)


class ProductCreate(CatalogFields):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: int
    brand_id: int
    base_price: float = Field(ge=0)
    is_active: bool = True
    is_featured: bool = False

    clean_name = field_validator('name')(_clean_text)


class ProductUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    brand_id: Optional[int] = None
    base_price: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    status_id: Optional[int] = Field(default=None, ge=1)
    order: Optional[int] = Field(default=None, ge=0)

    require_values = field_validator('name', 'category_id', 'brand_id', 'base_price', 'is_active',
                                'is_featured', 'status_id', 'order')(_not_null)
    clean_name = field_validator('name')(_clean_text)


class VariantCreate(CatalogFields):
    color_id: int
    size_id: int
    stock_quantity: int = Field(default=0, ge=0)
    price_adjustment: float = 0.0
    sku_extension: Optional[str] = Field(default=None, max_length=50)


class VariantUpdate(RequestSchema):
    color_id: Optional[int] = None
    size_id: Optional[int] = None
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    price_adjustment: Optional[float] = None
    sku_extension: Optional[str] = Field(default=None, max_length=50)
    status_id: Optional[int] = Field(default=None, ge=1)
    order: Optional[int] = Field(default=None, ge=0)

    require_values = field_validator('color_id', 'size_id', 'stock_quantity', 'price_adjustment',
                                'sku_extension', 'status_id', 'order')(_not_null)


class ColorCreate(CatalogFields):
    name: str = Field(min_length=1, max_length=50)
    code: Optional[str] = Field(default=None, max_length=20)
    hex_code: Optional[str] = None

    check_hex_code = field_validator('hex_code')(_check_hex)


class ColorUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    code: Optional[str] = Field(default=None, max_length=20)
    hex_code: Optional[str] = None
    status_id: Optional[int] = Field(default=None, ge=1)
    order: Optional[int] = Field(default=None, ge=0)

    require_values = field_validator('name', 'status_id', 'order')(_not_null)
    check_hex_code = field_validator('hex_code')(_check_hex)


class SizeCreate(CatalogFields):
    name: str = Field(min_length=1, max_length=50)
    code: str = Field(min_length=1, max_length=20)
    description: Optional[str] = Field(default=None, max_length=255)


class SizeUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    code: Optional[str] = Field(default=None, min_length=1, max_length=20)
    description: Optional[str] = Field(default=None, max_length=255)
    status_id: Optional[int] = Field(default=None, ge=1)
    order: Optional[int] = Field(default=None, ge=0)

    require_values = field_validator('name', 'code', 'status_id', 'order')(_not_null)
