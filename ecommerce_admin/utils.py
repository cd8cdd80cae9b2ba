# ecommerce_admin/utils.py
import re
import time
import uuid

from flask import current_app, request
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from unidecode import unidecode

from .constants import StatusCode
from .exceptions import ConflictError
from .models import db


# --- Sanitization Helper ---
def sanitize_input(value, allow_html=False, max_length=None):
    """
    Basic input sanitizer.
    - Strips leading/trailing whitespace.
    - Optionally removes HTML tags.
    - Optionally truncates to max_length.
    """
    if value is None:
        return None

    value_str = str(value).strip()

    if not allow_html:
        value_str = re.sub(r'<[^>]*>', '', value_str)

    if max_length is not None and len(value_str) > max_length:
        value_str = value_str[:max_length]

    return value_str


def is_valid_email(email):
    if not email:
        return False
    regex = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(regex, email) is not None


def parse_bool(value):
    """Query-string flag -> True/False, or None when absent or unrecognised."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    return None


# --- Slugs & SKUs ---
def generate_slug(text):
    if not text: return ""
    text = unidecode(str(text)); text = re.sub(r'[^\w\s-]', '', text).strip().lower(); text = re.sub(r'[-\s_]+', '-', text)
    return text.strip('-')


def resolve_slug(candidate_name, existing, exclude_id=None):
    """
    Slug for ``candidate_name`` that does not collide with ``existing``.

    ``existing`` is either a container of taken slugs or a callable
    ``(slug, exclude_id) -> bool``. On collision the base slug gets a
    ``-<unix seconds>`` suffix. There is no retry: two collisions inside the
    same second are left to the storage unique index, which surfaces as a
    write conflict.
    """
    base = generate_slug(candidate_name) or uuid.uuid4().hex[:8]
    if callable(existing):
        taken = existing(base, exclude_id)
    else:
        taken = base in existing
    if not taken:
        return base
    return f"{base}-{int(time.time())}"


def model_slug_lookup(model, column='slug'):
    """Callable for :func:`resolve_slug` that checks active rows of ``model``."""
    field = getattr(model, column)

    def lookup(slug, exclude_id=None):
        query = model.query_active().filter(field == slug)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    return lookup


def generate_sku(name):
    """Up to three letters from the name plus a random 12-char hex suffix, e.g. ``RED-3F2A9C01B7D4``."""
    letters = re.sub(r'[^A-Za-z]', '', unidecode(str(name or '')))[:3].upper() or 'SKU'
    return f"{letters}-{uuid.uuid4().hex[:12].upper()}"


# --- Listing helpers ---
def clamp_per_page(value, minimum, maximum):
    if value is None:
        return minimum
    return max(minimum, min(int(value), maximum))


def get_pagination_args():
    cfg = current_app.config
    page = request.args.get('page', 1, type=int) or 1
    per_page = request.args.get('per_page', cfg.get('PER_PAGE_DEFAULT', 10), type=int)
    return max(page, 1), clamp_per_page(per_page, cfg.get('PER_PAGE_MIN', 5), cfg.get('PER_PAGE_MAX', 100))


def apply_search(query, term, columns):
    """OR-combine a case-insensitive ``LIKE`` over ``columns``; other filters stay ANDed."""
    term = (term or '').strip()
    if not term:
        return query
    term_like = f"%{term}%"
    return query.filter(or_(*[column.ilike(term_like) for column in columns]))


def apply_sorting(query, model, allowed_fields, default_field, default_direction='asc'):
    sort_by = request.args.get('sort_by', default_field)
    if sort_by not in allowed_fields:
        sort_by = default_field
    direction = (request.args.get('sort_direction') or default_direction).lower()
    if direction not in ('asc', 'desc'):
        direction = default_direction
    column = getattr(model, sort_by)
    ordering = column.desc() if direction == 'desc' else column.asc()
    return query.order_by(ordering, model.id.asc())


def commit_or_conflict(context):
    """Commit the session; a storage uniqueness violation becomes a write conflict."""
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        current_app.logger.warning(f"Write conflict while {context}: {e.orig}")
        raise ConflictError(
            "The record could not be saved because it conflicts with an existing one.",
            status_code=StatusCode.WRITE_CONFLICT
        ) from e
