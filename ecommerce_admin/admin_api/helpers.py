# ecommerce_admin/admin_api/helpers.py
# Shared plumbing for the resource controllers.
from flask import current_app, g

from ..constants import StatusCode
from ..exceptions import NotFoundError, ValidationError
from ..models import db
from ..responses import ApiResponse
from ..utils import get_pagination_args

MAX_ID = 2 ** 63 - 1


def acting_user_id():
    user = getattr(g, 'current_user', None)
    return user.id if user is not None else None


def base_query(model, include_deleted=False):
    if hasattr(model, 'query_active'):
        return model.query_active(include_deleted)
    return model.query


def parse_id(ident):
    """``ident`` as a row id, or None when it is not a plain decimal that fits a BIGINT."""
    ident_str = str(ident)
    if not (ident_str.isascii() and ident_str.isdecimal()):
        return None
    value = int(ident_str)
    return value if value <= MAX_ID else None


def find_or_404(model, ident, message, status_code=StatusCode.NOT_FOUND, by_slug=False, include_deleted=False):
    """Fetch by integer id, or by slug when ``by_slug`` and ``ident`` is not numeric."""
    query = base_query(model, include_deleted)
    ident_str = str(ident)
    row_id = parse_id(ident_str)
    if row_id is not None:
        obj = query.filter(model.id == row_id).first()
    elif by_slug and not ident_str.isdecimal():
        obj = query.filter(model.slug == ident_str).first()
    else:
        obj = None
    if obj is None:
        raise NotFoundError(message, status_code=status_code)
    return obj


def paginated_response(query, key, serializer, message):
    page, per_page = get_pagination_args()
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)
    data = {key: [serializer(item) for item in pagination.items]}
    return ApiResponse.ok(data, message).with_pagination(pagination)


def unique_violation(model, column, value, exclude_id=None, case_insensitive=True, include_deleted=False):
    """True if another live row (or any row, with ``include_deleted``) already holds ``value``."""
    if value is None:
        return False
    field = getattr(model, column)
    query = base_query(model, include_deleted)
    if case_insensitive and isinstance(value, str):
        query = query.filter(db.func.lower(field) == value.lower())
    else:
        query = query.filter(field == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def check_unique(errors, model, fields, exclude_id=None, include_deleted=False):
    """Collect ``{field: ["The x has already been taken."]}`` for each clashing value."""
    for column, value in fields.items():
        if unique_violation(model, column, value, exclude_id, include_deleted=include_deleted):
            errors.setdefault(column, []).append(f"The {column.replace('_', ' ')} has already been taken.")
    return errors


def check_exists(errors, model, field, ident, label=None):
    if ident is None:
        return None
    obj = base_query(model).filter(model.id == ident).first()
    if obj is None:
        errors.setdefault(field, []).append(f"The selected {label or field.replace('_', ' ')} is invalid.")
    return obj


def raise_if_errors(errors):
    if errors:
        raise ValidationError("Validation Error", errors)


def log_admin_action(action, target_type=None, target_id=None, details=None, status='success'):
    current_app.audit_log_service.log_admin_action(
        getattr(g, 'current_user', None), action, target_type,
        target_id=target_id, details=details, status=status
    )
