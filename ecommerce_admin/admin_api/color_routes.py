# ecommerce_admin/admin_api/color_routes.py
# Colour management (CRUD)

from flask import request

from . import admin_api_bp
from .helpers import (acting_user_id, check_unique, find_or_404, log_admin_action,
                      paginated_response, raise_if_errors)
from ..auth.decorators import permission_required
from ..constants import StatusCode
from ..exceptions import ConflictError
from ..models import AuditTarget, Color
from ..responses import ApiResponse
from ..schemas import ColorCreate, ColorUpdate, changed_fields, validate_payload
from ..utils import apply_search, apply_sorting, commit_or_conflict
from .. import db

COLOR_SORT_FIELDS = ('id', 'name', 'code', 'order', 'created_at', 'status_id')


@admin_api_bp.route('/colors', methods=['GET'])
@permission_required('view colors')
def list_colors():
    query = apply_search(Color.query_active(), request.args.get('search'), [Color.name, Color.code])
    status_id = request.args.get('status_id', type=int)
    if status_id is not None:
        query = query.filter(Color.status_id == status_id)
    query = apply_sorting(query, Color, COLOR_SORT_FIELDS, 'name')
    return paginated_response(query, 'colors', Color.to_dict, "Colors retrieved successfully")


@admin_api_bp.route('/colors', methods=['POST'])
@permission_required('create colors')
def create_color():
    payload = validate_payload(ColorCreate)
    raise_if_errors(check_unique({}, Color, {'name': payload.name, 'code': payload.code}))

    color = Color(**payload.model_dump())
    color.stamp_created(acting_user_id())
    db.session.add(color)
    commit_or_conflict("creating a color")

    log_admin_action('create_color', AuditTarget.COLOR, color.id, f"Created color '{color.name}'.")
    return ApiResponse.created(color.to_dict(), "Color created successfully")


@admin_api_bp.route('/colors/<int:color_id>', methods=['GET'])
@permission_required('view colors')
def get_color(color_id):
    color = find_or_404(Color, color_id, "Color not found")
    data = color.to_dict()
    data['variants_count'] = color.live_variants_count()
    return ApiResponse.ok(data, "Color retrieved successfully")


@admin_api_bp.route('/colors/<int:color_id>', methods=['PUT', 'PATCH'])
@permission_required('edit colors')
def update_color(color_id):
    color = find_or_404(Color, color_id, "Color not found")
    fields = changed_fields(validate_payload(ColorUpdate))
    raise_if_errors(check_unique({}, Color, {'name': fields.get('name'), 'code': fields.get('code')},
                                 exclude_id=color.id))

    for key, value in fields.items():
        setattr(color, key, value)
    color.stamp_updated(acting_user_id())
    commit_or_conflict("updating a color")

    log_admin_action('update_color', AuditTarget.COLOR, color.id)
    return ApiResponse.ok(color.to_dict(), "Color updated successfully", status_code=StatusCode.UPDATED)


@admin_api_bp.route('/colors/<int:color_id>', methods=['DELETE'])
@permission_required('delete colors')
def delete_color(color_id):
    color = find_or_404(Color, color_id, "Color not found")

    variants_count = color.live_variants_count()
    if variants_count > 0:
        raise ConflictError("Cannot delete color that is used by product variants",
                            errors={"variants_count": variants_count},
                            status_code=StatusCode.COLOR_HAS_VARIANTS)

    color.soft_delete(acting_user_id())
    commit_or_conflict("deleting a color")

    log_admin_action('delete_color', AuditTarget.COLOR, color.id, f"Deleted color '{color.name}'.")
    return ApiResponse.ok(None, "Color deleted successfully", status_code=StatusCode.DELETED)
