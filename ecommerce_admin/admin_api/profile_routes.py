# ecommerce_admin/admin_api/profile_routes.py
# Endpoints about the authenticated user; no capability beyond a valid token.

from flask import current_app, g

from . import admin_api_bp
from ..auth.decorators import login_required
from ..exceptions import ValidationError
from ..models import Permission
from ..responses import ApiResponse
from ..schemas import CapabilityQuery, validate_payload


@admin_api_bp.route('/user-profile', methods=['GET'])
@login_required
def user_profile():
    return ApiResponse.ok(g.current_user.to_dict(include_roles=True, include_permissions=True),
                          "Profile retrieved successfully")


@admin_api_bp.route('/check-permission', methods=['POST'])
@login_required
def check_permission():
    user = g.current_user
    name = validate_payload(CapabilityQuery).permission
    if Permission.query.filter_by(name=name).first() is None:
        raise ValidationError("Validation Error", {"permission": ["The selected permission is invalid."]})

    if user.is_admin:
        allowed = True
    else:
        allowed = name in current_app.permission_cache.get_grants(user).permissions
    return ApiResponse.ok({"permission": name, "has_permission": allowed}, "Permission check completed")


@admin_api_bp.route('/my-permissions', methods=['GET'])
@login_required
def my_permissions():
    user = g.current_user
    grants = current_app.permission_cache.get_grants(user)
    data = {
        "permissions": sorted(grants.permissions),
        "roles": sorted(grants.roles),
        "is_admin": user.is_admin,
    }
    return ApiResponse.ok(data, "Permissions retrieved successfully")
