# ecommerce_admin/auth/routes.py
from flask import current_app, g

from . import auth_bp
from .decorators import login_required
from .session_manager import end_session, find_login_user, issue_token
from .. import limiter
from ..constants import StatusCode
from ..responses import ApiResponse
from ..schemas import LoginRequest, validate_payload


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(lambda: current_app.config.get('LOGIN_RATELIMITS', "10 per minute"))
def login():
    audit_logger = current_app.audit_log_service
    credentials = validate_payload(LoginRequest)

    user = find_login_user(credentials.email)
    if user is None or not user.check_password(credentials.password):
        audit_logger.log_failed_login(credentials.email)
        current_app.logger.warning(f"Failed login attempt for {credentials.email}")
        return ApiResponse.unauthorized("The provided credentials are incorrect.",
                                        status_code=StatusCode.LOGIN_INVALID_CREDENTIALS)

    token = issue_token(user)
    current_app.permission_cache.invalidate(user.id)
    audit_logger.log_login(user)
    return ApiResponse.ok(
        {"user": user.to_dict(include_roles=True, include_permissions=True), "token": token, "token_type": "Bearer"},
        "Login successful.", status_code=StatusCode.LOGIN_SUCCESS
    ).with_headers({"Cache-Control": "no-store"})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    user = g.current_user
    end_session(user)
    current_app.audit_log_service.log_logout(user)
    return ApiResponse.ok(None, "Logged out successfully.", status_code=StatusCode.LOGOUT_SUCCESS)
