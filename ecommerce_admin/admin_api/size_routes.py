# ecommerce_admin/admin_api/size_routes.py
# Size management (CRUD)

from flask import request

from . import admin_api_bp
from .helpers import (acting_user_id, check_unique, find_or_404, log_admin_action,
                      paginated_response, raise_if_errors)
from ..auth.decorators import permission_required
from ..constants import StatusCode
from ..exceptions import ConflictError
from ..models import AuditTarget, Size
from ..responses import ApiResponse
from ..schemas import SizeCreate, SizeUpdate, changed_fields, validate_payload
from ..utils import apply_search, apply_sorting, commit_or_conflict
from .. import db

SIZE_SORT_FIELDS = ('id', 'name', 'code', 'order', 'created_at', 'status_id')


@admin_api_bp.route('/sizes', methods=['GET'])
@permission_required('view sizes')
def list_sizes():
    query = apply_search(Size.query_active(), request.args.get('search'),
                         [Size.name, Size.code, Size.description])
    status_id = request.args.get('status_id', type=int)
    if status_id is not None:
        query = query.filter(Size.status_id == status_id)
    query = apply_sorting(query, Size, SIZE_SORT_FIELDS, 'order')
    return paginated_response(query, 'sizes', Size.to_dict, "Sizes retrieved successfully")


@admin_api_bp.route('/sizes', methods=['POST'])
@permission_required('create sizes')
def create_size():
    payload = validate_payload(SizeCreate)
    raise_if_errors(check_unique({}, Size, {'name': payload.name, 'code': payload.code}))

    size = Size(**payload.model_dump())
    size.stamp_created(acting_user_id())
    db.session.add(size)
    commit_or_conflict("creating a size")

    log_admin_action('create_size', AuditTarget.SIZE, size.id, f"Created size '{size.code}'.")
    return ApiResponse.created(size.to_dict(), "Size created successfully")


@admin_api_bp.route('/sizes/<int:size_id>', methods=['GET'])
@permission_required('view sizes')
def get_size(size_id):
    size = find_or_404(Size, size_id, "Size not found")
    data = size.to_dict()
    data['variants_count'] = size.live_variants_count()
    return ApiResponse.ok(data, "Size retrieved successfully")


@admin_api_bp.route('/sizes/<int:size_id>', methods=['PUT', 'PATCH'])
@permission_required('edit sizes')
def update_size(size_id):
    size = find_or_404(Size, size_id, "Size not found")
    fields = changed_fields(validate_payload(SizeUpdate))
    raise_if_errors(check_unique({}, Size, {'name': fields.get('name'), 'code': fields.get('code')},
                                 exclude_id=size.id))

    for key, value in fields.items():
        setattr(size, key, value)
    size.stamp_updated(acting_user_id())
    commit_or_conflict("updating a size")

    log_admin_action('update_size', AuditTarget.SIZE, size.id)
    return ApiResponse.ok(size.to_dict(), "Size updated successfully", status_code=StatusCode.UPDATED)


@admin_api_bp.route('/sizes/<int:size_id>', methods=['DELETE'])
@permission_required('delete sizes')
def delete_size(size_id):
    size = find_or_404(Size, size_id, "Size not found")

    variants_count = size.live_variants_count()
    if variants_count > 0:
        raise ConflictError("Cannot delete size that is used by product variants",
                            errors={"variants_count": variants_count},
                            status_code=StatusCode.SIZE_HAS_VARIANTS)

    size.soft_delete(acting_user_id())
    commit_or_conflict("deleting a size")

    log_admin_action('delete_size', AuditTarget.SIZE, size.id, f"Deleted size '{size.code}'.")
    return ApiResponse.ok(None, "Size deleted successfully", status_code=StatusCode.DELETED)
