# ecommerce_admin/admin_api/permission_routes.py
# Permission management

from flask import current_app, request

from . import admin_api_bp
from .helpers import check_unique, find_or_404, log_admin_action, paginated_response, raise_if_errors
from ..auth.decorators import permission_required
from ..constants import StatusCode
from ..exceptions import ConflictError
from ..models import AuditTarget, Permission
from ..responses import ApiResponse
from ..schemas import PermissionCreate, PermissionUpdate, changed_fields, validate_payload
from ..utils import apply_search, apply_sorting, commit_or_conflict
from .. import db

PERMISSION_SORT_FIELDS = ('id', 'name', 'created_at')


@admin_api_bp.route('/permissions', methods=['GET'])
@permission_required('view permissions')
def list_permissions():
    query = apply_search(Permission.query, request.args.get('search'), [Permission.name, Permission.description])
    query = apply_sorting(query, Permission, PERMISSION_SORT_FIELDS, 'name')
    return paginated_response(query, 'permissions', Permission.to_dict, "Permissions retrieved successfully")


@admin_api_bp.route('/permissions', methods=['POST'])
@permission_required('create permissions')
def create_permission():
    payload = validate_payload(PermissionCreate)
    raise_if_errors(check_unique({}, Permission, {'name': payload.name}))

    permission = Permission(name=payload.name, description=payload.description)
    db.session.add(permission)
    commit_or_conflict("creating a permission")

    log_admin_action('create_permission', AuditTarget.PERMISSION, permission.id, f"Created permission '{permission.name}'.")
    return ApiResponse.created(permission.to_dict(), "Permission created successfully")


@admin_api_bp.route('/permissions/<int:permission_id>', methods=['GET'])
@permission_required('view permissions')
def get_permission(permission_id):
    permission = find_or_404(Permission, permission_id, "Permission not found")
    return ApiResponse.ok(permission.to_dict(), "Permission retrieved successfully")


@admin_api_bp.route('/permissions/<int:permission_id>/roles', methods=['GET'])
@permission_required('view permissions')
def get_permission_roles(permission_id):
    permission = find_or_404(Permission, permission_id, "Permission not found")
    roles = [role.to_dict(include_permissions=False) for role in permission.roles]
    return ApiResponse.ok({"permission": permission.to_dict(), "roles": roles}, "Roles retrieved successfully")


@admin_api_bp.route('/permissions/<int:permission_id>', methods=['PUT', 'PATCH'])
@permission_required('edit permissions')
def update_permission(permission_id):
    permission = find_or_404(Permission, permission_id, "Permission not found")
    fields = changed_fields(validate_payload(PermissionUpdate))
    raise_if_errors(check_unique({}, Permission, {'name': fields.get('name')}, exclude_id=permission.id))

    renamed = 'name' in fields and fields['name'] != permission.name
    for key, value in fields.items():
        setattr(permission, key, value)
    commit_or_conflict("updating a permission")
    if renamed:
        current_app.permission_cache.clear()

    log_admin_action('update_permission', AuditTarget.PERMISSION, permission.id)
    return ApiResponse.ok(permission.to_dict(), "Permission updated successfully", status_code=StatusCode.UPDATED)


@admin_api_bp.route('/permissions/<int:permission_id>', methods=['DELETE'])
@permission_required('delete permissions')
def delete_permission(permission_id):
    permission = find_or_404(Permission, permission_id, "Permission not found")

    roles_count = permission.roles.count()
    if roles_count > 0:
        raise ConflictError("This permission is assigned to one or more roles and cannot be deleted",
                            errors={"roles_count": roles_count},
                            status_code=StatusCode.PERMISSION_IN_USE)

    permission_name = permission.name
    for user in permission.users.all():
        user.permissions.remove(permission)
    db.session.delete(permission)
    commit_or_conflict("deleting a permission")
    current_app.permission_cache.clear()

    log_admin_action('delete_permission', AuditTarget.PERMISSION, permission_id, f"Deleted permission '{permission_name}'.")
    return ApiResponse.ok(None, "Permission deleted successfully", status_code=StatusCode.DELETED)
