# ecommerce_admin/auth/decorators.py
from functools import wraps

from flask import current_app, g, request
from flask_jwt_extended import get_current_user, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, RevokedTokenError
from jwt.exceptions import ExpiredSignatureError, PyJWTError

from ..constants import StatusCode
from ..responses import ApiResponse
from .gate import AuthorizationResult, Requirement, RequirementKind, authorize


def load_principal():
    """Verify the bearer token and return ``(user, None)`` or ``(None, error)``."""
    try:
        verify_jwt_in_request()
    except (JWTExtendedException, PyJWTError) as e:
        return None, e
    return get_current_user(), None


def current_user_id():
    user = get_current_user()
    return user.id if user is not None else None


def unauthenticated_response(auth_error=None):
    if isinstance(auth_error, ExpiredSignatureError):
        return ApiResponse.unauthorized("Token has expired.", status_code=StatusCode.TOKEN_EXPIRED)
    if isinstance(auth_error, RevokedTokenError):
        return ApiResponse.unauthorized("Token has been revoked.", status_code=StatusCode.TOKEN_REVOKED)
    return ApiResponse.unauthorized("Unauthenticated.")


def capability_required(requirement, kind=RequirementKind.PERMISSION):
    parsed = Requirement.parse(requirement, kind)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal, auth_error = load_principal()
            result = authorize(principal, parsed, load_grants=current_app.permission_cache.get_grants)
            if result is AuthorizationResult.REQUIRES_LOGIN:
                current_app.logger.warning(f"Access denied for {request.path}: authentication required - {auth_error}")
                return unauthenticated_response(auth_error)
            if result is AuthorizationResult.DENIED:
                current_app.logger.warning(f"Access denied for {request.path}: user {principal.id} lacks {parsed.kind.value} '{parsed}'.")
                return ApiResponse.forbidden("You do not have the required authorization.")
            g.current_user = principal
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def permission_required(permission):
    return capability_required(permission, RequirementKind.PERMISSION)


def role_required(role):
    return capability_required(role, RequirementKind.ROLE)


def role_or_permission_required(roles_or_permissions):
    return capability_required(roles_or_permissions, RequirementKind.ROLE_OR_PERMISSION)


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        principal, auth_error = load_principal()
        if principal is None:
            current_app.logger.warning(f"Access denied for {request.path}: authentication required - {auth_error}")
            return unauthenticated_response(auth_error)
        g.current_user = principal
        return fn(*args, **kwargs)
    return wrapper
