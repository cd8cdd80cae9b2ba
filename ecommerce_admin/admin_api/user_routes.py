# ecommerce_admin/admin_api/user_routes.py
# Staff user management, role assignment and capability lookups

from flask import current_app, g, request

from . import admin_api_bp
from .helpers import (acting_user_id, check_unique, find_or_404, log_admin_action,
                      paginated_response, raise_if_errors)
from ..auth.decorators import permission_required
from ..auth.session_manager import revoke_user_tokens
from ..constants import StatusCode
from ..exceptions import ConflictError, ForbiddenError, ValidationError
from ..models import AuditTarget, Permission, Role, User
from ..responses import ApiResponse
from ..schemas import (CapabilityQuery, RoleQuery, RoleSync, UserCreate, UserUpdate,
                       changed_fields, validate_payload)
from ..utils import apply_search, apply_sorting, commit_or_conflict, parse_bool
from .. import db

USER_SORT_FIELDS = ('id', 'username', 'email', 'created_at', 'last_login_at')


def serialize_user(user):
    return user.to_dict(include_roles=True)


def find_user(user_id, include_deleted=False):
    return find_or_404(User, user_id, "User not found", status_code=StatusCode.USER_NOT_FOUND,
                       include_deleted=include_deleted)


def resolve_roles(errors, role_names, field='roles'):
    """Role rows for ``role_names``, in request order; unknown names land in ``errors[field]``."""
    wanted = list(dict.fromkeys(role_names))
    if not wanted:
        return []
    found = {role.name: role for role in Role.query.filter(Role.name.in_(wanted)).all()}
    missing = [name for name in wanted if name not in found]
    if missing:
        errors.setdefault(field, []).append(f"The selected roles are invalid: {', '.join(missing)}.")
    return [found[name] for name in wanted if name in found]


def require_role(role_name):
    errors = {}
    roles = resolve_roles(errors, [role_name], field='role')
    raise_if_errors(errors)
    return roles[0]


def user_listing_query(query):
    query = apply_search(query, request.args.get('search'), [User.username, User.email, User.phone])
    is_admin = parse_bool(request.args.get('is_admin'))
    if is_admin is not None:
        query = query.filter(User.is_admin.is_(is_admin))
    role_name = request.args.get('role')
    if role_name:
        query = query.filter(User.roles.any(Role.name == role_name))
    return apply_sorting(query, User, USER_SORT_FIELDS, 'created_at', 'desc')


@admin_api_bp.route('/users', methods=['GET'])
@permission_required('view users')
def list_users():
    return paginated_response(user_listing_query(User.query_active()), 'users', serialize_user,
                              "Users retrieved successfully")


@admin_api_bp.route('/users/trashed', methods=['GET'])
@permission_required('view users')
def list_trashed_users():
    return paginated_response(user_listing_query(User.query_trashed()), 'users', serialize_user,
                              "Deleted users retrieved successfully")


@admin_api_bp.route('/users', methods=['POST'])
@permission_required('create users')
def create_user():
    payload = validate_payload(UserCreate)
    # Emails stay reserved by trashed accounts so a restore can never clash.
    errors = check_unique({}, User, {'email': payload.email}, include_deleted=True)
    roles = resolve_roles(errors, payload.roles)
    raise_if_errors(errors)
    if payload.is_admin and not g.current_user.is_admin:
        raise ForbiddenError("Only administrators can create administrator accounts.")

    user = User(username=payload.username, email=payload.email, phone=payload.phone, is_admin=payload.is_admin)
    user.set_password(payload.password)
    user.roles = roles
    user.stamp_created(acting_user_id())
    db.session.add(user)
    commit_or_conflict("creating a user")

    log_admin_action('create_user', AuditTarget.USER, user.id, f"Created user '{user.email}'.")
    return ApiResponse.created(user.to_dict(include_roles=True, include_permissions=True),
                               "User created successfully", status_code=StatusCode.CREATED_USER_SUCCESSFULLY)


@admin_api_bp.route('/users/<int:user_id>', methods=['GET'])
@permission_required('view users')
def get_user(user_id):
    user = find_user(user_id)
    return ApiResponse.ok(user.to_dict(include_roles=True, include_permissions=True),
                          "User retrieved successfully", status_code=StatusCode.GET_USER_SUCCESSFULLY)


@admin_api_bp.route('/users/<int:user_id>', methods=['PUT', 'PATCH'])
@permission_required('edit users')
def update_user(user_id):
    user = find_user(user_id)
    fields = changed_fields(validate_payload(UserUpdate))
    raise_if_errors(check_unique({}, User, {'email': fields.get('email')}, exclude_id=user.id,
                                 include_deleted=True))

    admin_changed = 'is_admin' in fields and fields['is_admin'] != user.is_admin
    if admin_changed and not g.current_user.is_admin:
        raise ForbiddenError("Only administrators can change administrator status.")

    password = fields.pop('password', None)
    if password:
        user.set_password(password)
    for key, value in fields.items():
        setattr(user, key, value)
    user.stamp_updated(acting_user_id())
    commit_or_conflict("updating a user")
    if admin_changed:
        current_app.permission_cache.invalidate(user.id)

    changed = sorted(fields) + (['password'] if password else [])
    log_admin_action('update_user', AuditTarget.USER, user.id, f"Updated fields: {', '.join(changed) or 'none'}.")
    return ApiResponse.ok(user.to_dict(include_roles=True, include_permissions=True),
                          "User updated successfully", status_code=StatusCode.UPDATE_USER_SUCCESSFULLY)


@admin_api_bp.route('/users/<int:user_id>', methods=['DELETE'])
@permission_required('delete users')
def delete_user(user_id):
    user = find_user(user_id)
    if user.id == acting_user_id():
        raise ConflictError("You cannot delete your own account", status_code=StatusCode.CANNOT_DELETE_SELF)

    user.soft_delete(acting_user_id())
    revoked = revoke_user_tokens(user.id)
    commit_or_conflict("deleting a user")
    current_app.permission_cache.invalidate(user.id)

    log_admin_action('delete_user', AuditTarget.USER, user.id, f"Deleted user '{user.email}', revoked {revoked} token(s).")
    return ApiResponse.ok(None, "User deleted successfully", status_code=StatusCode.DELETE_USER_SUCCESSFULLY)


@admin_api_bp.route('/users/<int:user_id>/restore', methods=['POST'])
@permission_required('restore users')
def restore_user(user_id):
    user = find_user(user_id, include_deleted=True)
    if not user.is_deleted:
        raise ConflictError("User is not deleted", status_code=StatusCode.USER_NOT_DELETED)

    user.restore()
    user.stamp_updated(acting_user_id())
    commit_or_conflict("restoring a user")

    log_admin_action('restore_user', AuditTarget.USER, user.id)
    return ApiResponse.ok(user.to_dict(include_roles=True), "User restored successfully",
                          status_code=StatusCode.RESTORE_USER_SUCCESSFULLY)


# --- Roles of a user ---
def roles_payload(user):
    return {"user_id": user.id, "roles": [role.to_dict(include_permissions=False) for role in user.roles]}


def save_user_roles(user, action, details):
    user.stamp_updated(acting_user_id())
    commit_or_conflict("updating user roles")
    current_app.permission_cache.invalidate(user.id)
    log_admin_action(action, AuditTarget.USER, user.id, details)
    return ApiResponse.ok(roles_payload(user), "User roles updated successfully",
                          status_code=StatusCode.USER_ROLES_UPDATED)


@admin_api_bp.route('/users/<int:user_id>/roles', methods=['GET'])
@permission_required('view users')
def get_user_roles(user_id):
    user = find_user(user_id)
    return ApiResponse.ok(roles_payload(user), "User roles retrieved successfully")


@admin_api_bp.route('/users/<int:user_id>/assign-role', methods=['POST'])
@permission_required('assign roles')
def assign_user_role(user_id):
    user = find_user(user_id)
    role = require_role(validate_payload(RoleQuery).role)
    if role not in user.roles:
        user.roles.append(role)
    return save_user_roles(user, 'assign_role', f"Assigned role '{role.name}'.")


@admin_api_bp.route('/users/<int:user_id>/remove-role', methods=['POST'])
@permission_required('assign roles')
def remove_user_role(user_id):
    user = find_user(user_id)
    role = require_role(validate_payload(RoleQuery).role)
    if role in user.roles:
        user.roles.remove(role)
    return save_user_roles(user, 'remove_role', f"Removed role '{role.name}'.")


@admin_api_bp.route('/users/<int:user_id>/sync-roles', methods=['POST', 'PUT'])
@permission_required('assign roles')
def sync_user_roles(user_id):
    user = find_user(user_id)
    payload = validate_payload(RoleSync)
    errors = {}
    roles = resolve_roles(errors, payload.roles)
    raise_if_errors(errors)

    user.roles = roles
    return save_user_roles(user, 'sync_roles', f"Roles: {', '.join(role.name for role in roles) or 'none'}.")


# --- Capability lookups ---
@admin_api_bp.route('/users/<int:user_id>/permissions', methods=['GET'])
@permission_required('view users')
def get_user_permissions(user_id):
    user = find_user(user_id)
    data = {
        "user_id": user.id,
        "direct_permissions": user.direct_permission_names,
        "permissions": user.all_permission_names(),
    }
    return ApiResponse.ok(data, "User permissions retrieved successfully")


@admin_api_bp.route('/users/<int:user_id>/has-role', methods=['POST'])
@permission_required('view users')
def user_has_role(user_id):
    user = find_user(user_id)
    role = require_role(validate_payload(RoleQuery).role)
    return ApiResponse.ok({"role": role.name, "has_role": user.has_role(role.name)}, "Role check completed")


@admin_api_bp.route('/users/<int:user_id>/has-permission', methods=['POST'])
@permission_required('view users')
def user_has_permission(user_id):
    user = find_user(user_id)
    name = validate_payload(CapabilityQuery).permission
    if Permission.query.filter_by(name=name).first() is None:
        raise ValidationError("Validation Error", {"permission": ["The selected permission is invalid."]})
    return ApiResponse.ok({"permission": name, "has_permission": user.is_admin or user.has_permission(name)},
                          "Permission check completed")
