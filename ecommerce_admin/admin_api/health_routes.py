# ecommerce_admin/admin_api/health_routes.py
import time
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import admin_api_bp
from .. import db, limiter
from ..constants import StatusCode
from ..responses import ApiResponse


def check_database():
    started = time.perf_counter()
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Health check: database unreachable - {e}")
        return {"status": "down", "latency_ms": None}
    return {"status": "up", "latency_ms": round((time.perf_counter() - started) * 1000, 2)}


@admin_api_bp.route('/health', methods=['GET'])
@limiter.exempt
def health():
    """Public liveness probe; never requires a token."""
    components = {"database": check_database()}
    healthy = all(component["status"] == "up" for component in components.values())
    data = {
        "status": "OK" if healthy else "PARTIAL",
        "message": "API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": components,
    }
    return ApiResponse.ok(data, "API is running", status_code=StatusCode.HEALTH_OK)
