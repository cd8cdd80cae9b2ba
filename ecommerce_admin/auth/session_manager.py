# ecommerce_admin/auth/session_manager.py
# Store-backed bearer tokens: every issued JWT has an ApiToken row, and a
# token is only honoured while that row is unrevoked.
from datetime import datetime, timezone

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from sqlalchemy import func

from ..models import db, ApiToken, User
from ..models.base import utcnow


def find_login_user(email):
    return User.query_active().filter(func.lower(User.email) == email.strip().lower()).first()


def revoke_user_tokens(user_id):
    """Mark every live token of ``user_id`` revoked. Caller commits."""
    return ApiToken.query.filter(
        ApiToken.user_id == user_id, ApiToken.revoked_at.is_(None)
    ).update({ApiToken.revoked_at: utcnow()}, synchronize_session=False)


def issue_token(user, name='auth_token'):
    """Revoke the user's previous tokens and issue a fresh one."""
    revoked = revoke_user_tokens(user.id)
    access_token = create_access_token(identity=str(user.id), additional_claims={"is_admin": user.is_admin})
    decoded = decode_token(access_token)
    expires_at = datetime.fromtimestamp(decoded['exp'], tz=timezone.utc) if decoded.get('exp') else None
    db.session.add(ApiToken(jti=decoded['jti'], user_id=user.id, name=name, expires_at=expires_at))
    user.last_login_at = utcnow()
    db.session.commit()
    current_app.logger.info(f"Issued token for user {user.id} (revoked {revoked} previous token(s)).")
    return access_token


def end_session(user):
    revoked = revoke_user_tokens(user.id)
    db.session.commit()
    current_app.permission_cache.invalidate(user.id)
    current_app.logger.info(f"Revoked {revoked} token(s) for user {user.id} on logout.")
    return revoked


def is_token_revoked(jti):
    token = ApiToken.query.filter_by(jti=jti).first()
    return token is None or token.is_revoked


def load_token_user(identity):
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        return None
    return User.find_active(user_id)
