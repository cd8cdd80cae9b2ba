# ecommerce_admin/admin_api/role_routes.py
# Role management and role -> permission assignment

from flask import current_app, request

from . import admin_api_bp
from .helpers import check_unique, find_or_404, log_admin_action, paginated_response, raise_if_errors
from ..auth.decorators import permission_required
from ..constants import StatusCode, SUPER_ADMIN_ROLE
from ..exceptions import ConflictError
from ..models import AuditTarget, Permission, Role
from ..responses import ApiResponse
from ..schemas import PermissionSync, RoleCreate, RoleUpdate, changed_fields, validate_payload
from ..utils import apply_search, apply_sorting, commit_or_conflict
from .. import db

ROLE_SORT_FIELDS = ('id', 'name', 'created_at')


def resolve_permissions(errors, permission_ids):
    """Permission rows for ``permission_ids``; unknown ids are reported under ``permissions``."""
    wanted = list(dict.fromkeys(permission_ids))
    if not wanted:
        return []
    found = Permission.query.filter(Permission.id.in_(wanted)).all()
    missing = sorted(set(wanted) - {perm.id for perm in found})
    if missing:
        errors.setdefault('permissions', []).append(
            f"The selected permissions are invalid: {', '.join(str(i) for i in missing)}."
        )
    return found


def ensure_not_protected(role, action):
    if role.name == SUPER_ADMIN_ROLE:
        raise ConflictError(f"The {SUPER_ADMIN_ROLE} role cannot be {action}",
                            status_code=StatusCode.ROLE_PROTECTED)


@admin_api_bp.route('/roles', methods=['GET'])
@permission_required('view roles')
def list_roles():
    query = apply_search(Role.query, request.args.get('search'), [Role.name, Role.description])
    query = apply_sorting(query, Role, ROLE_SORT_FIELDS, 'name')
    return paginated_response(query, 'roles', Role.to_dict, "Roles retrieved successfully")


@admin_api_bp.route('/roles/permissions', methods=['GET'])
@permission_required('view roles')
def list_assignable_permissions():
    permissions = Permission.query.order_by(Permission.name).all()
    return ApiResponse.ok({"permissions": [perm.to_dict() for perm in permissions]},
                          "Permissions retrieved successfully")


@admin_api_bp.route('/roles', methods=['POST'])
@permission_required('create roles')
def create_role():
    payload = validate_payload(RoleCreate)
    errors = check_unique({}, Role, {'name': payload.name})
    permissions = resolve_permissions(errors, payload.permissions)
    raise_if_errors(errors)

    role = Role(name=payload.name, description=payload.description)
    role.permissions = permissions
    db.session.add(role)
    commit_or_conflict("creating a role")

    log_admin_action('create_role', AuditTarget.ROLE, role.id, f"Created role '{role.name}' with {len(permissions)} permission(s).")
    return ApiResponse.created(role.to_dict(), "Role created successfully")


@admin_api_bp.route('/roles/<int:role_id>', methods=['GET'])
@permission_required('view roles')
def get_role(role_id):
    role = find_or_404(Role, role_id, "Role not found")
    data = role.to_dict()
    data['users_count'] = role.users.count()
    return ApiResponse.ok(data, "Role retrieved successfully")


@admin_api_bp.route('/roles/<int:role_id>', methods=['PUT', 'PATCH'])
@permission_required('edit roles')
def update_role(role_id):
    role = find_or_404(Role, role_id, "Role not found")
    fields = changed_fields(validate_payload(RoleUpdate))
    if 'name' in fields and fields['name'] != role.name:
        ensure_not_protected(role, 'renamed')
    errors = check_unique({}, Role, {'name': fields.get('name')}, exclude_id=role.id)
    permissions = resolve_permissions(errors, fields['permissions']) if 'permissions' in fields else None
    raise_if_errors(errors)

    if 'name' in fields:
        role.name = fields['name']
    if 'description' in fields:
        role.description = fields['description']
    if permissions is not None:
        role.permissions = permissions
    commit_or_conflict("updating a role")
    current_app.permission_cache.clear()

    log_admin_action('update_role', AuditTarget.ROLE, role.id, f"Updated fields: {', '.join(sorted(fields)) or 'none'}.")
    return ApiResponse.ok(role.to_dict(), "Role updated successfully", status_code=StatusCode.UPDATED)


@admin_api_bp.route('/roles/<int:role_id>', methods=['DELETE'])
@permission_required('delete roles')
def delete_role(role_id):
    role = find_or_404(Role, role_id, "Role not found")
    ensure_not_protected(role, 'deleted')

    role_name = role.name
    for user in role.users.all():
        user.roles.remove(role)
    role.permissions = []
    db.session.delete(role)
    commit_or_conflict("deleting a role")
    current_app.permission_cache.clear()

    log_admin_action('delete_role', AuditTarget.ROLE, role_id, f"Deleted role '{role_name}'.")
    return ApiResponse.ok(None, "Role deleted successfully", status_code=StatusCode.DELETED)


@admin_api_bp.route('/roles/<int:role_id>/permissions', methods=['POST', 'PUT'])
@permission_required('assign permissions')
def sync_role_permissions(role_id):
    role = find_or_404(Role, role_id, "Role not found")
    payload = validate_payload(PermissionSync)
    errors = {}
    permissions = resolve_permissions(errors, payload.permissions)
    raise_if_errors(errors)

    role.permissions = permissions
    commit_or_conflict("syncing role permissions")
    current_app.permission_cache.clear()

    log_admin_action('sync_role_permissions', AuditTarget.ROLE, role.id,
                     f"Permissions: {', '.join(perm.name for perm in permissions) or 'none'}.")
    return ApiResponse.ok(role.to_dict(), "Permissions assigned successfully",
                          status_code=StatusCode.ROLE_PERMISSIONS_SYNCED)
