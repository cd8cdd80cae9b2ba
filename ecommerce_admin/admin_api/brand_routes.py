# ecommerce_admin/admin_api/brand_routes.py
# Brand management (CRUD)

from flask import request

from . import admin_api_bp
from .helpers import (acting_user_id, check_unique, find_or_404, log_admin_action,
                      paginated_response, raise_if_errors)
from ..auth.decorators import permission_required
from ..constants import StatusCode
from ..exceptions import ConflictError
from ..models import AuditTarget, Brand
from ..responses import ApiResponse
from ..schemas import BrandCreate, BrandUpdate, changed_fields, validate_payload
from ..utils import apply_search, apply_sorting, commit_or_conflict, model_slug_lookup, parse_bool, resolve_slug
from .. import db

BRAND_SORT_FIELDS = ('id', 'name', 'order', 'created_at', 'updated_at', 'status_id')


@admin_api_bp.route('/brands', methods=['GET'])
@permission_required('view brands')
def list_brands():
    query = apply_search(Brand.query_active(), request.args.get('search'), [Brand.name, Brand.description])

    featured = parse_bool(request.args.get('featured'))
    if featured is not None:
        query = query.filter(Brand.is_featured == featured)
    status_id = request.args.get('status_id', type=int)
    if status_id is not None:
        query = query.filter(Brand.status_id == status_id)

    query = apply_sorting(query, Brand, BRAND_SORT_FIELDS, 'order')
    return paginated_response(query, 'brands', Brand.to_dict, "Brands retrieved successfully")


@admin_api_bp.route('/brands', methods=['POST'])
@permission_required('create brands')
def create_brand():
    payload = validate_payload(BrandCreate)
    raise_if_errors(check_unique({}, Brand, {'name': payload.name}))

    brand = Brand(**payload.model_dump())
    brand.slug = resolve_slug(payload.name, model_slug_lookup(Brand))
    brand.stamp_created(acting_user_id())
    db.session.add(brand)
    commit_or_conflict("creating a brand")

    log_admin_action('create_brand', AuditTarget.BRAND, brand.id, f"Created brand '{brand.name}'.")
    return ApiResponse.created(brand.to_dict(), "Brand created successfully")


@admin_api_bp.route('/brands/<ident>', methods=['GET'])
@permission_required('view brands')
def get_brand(ident):
    brand = find_or_404(Brand, ident, "Brand not found", by_slug=True)
    return ApiResponse.ok(brand.to_dict(include_counts=True), "Brand retrieved successfully")


@admin_api_bp.route('/brands/<int:brand_id>', methods=['PUT', 'PATCH'])
@permission_required('edit brands')
def update_brand(brand_id):
    brand = find_or_404(Brand, brand_id, "Brand not found")
    fields = changed_fields(validate_payload(BrandUpdate))
    raise_if_errors(check_unique({}, Brand, {'name': fields.get('name')}, exclude_id=brand.id))

    new_name = fields.get('name')
    if new_name is not None and new_name != brand.name:
        brand.slug = resolve_slug(new_name, model_slug_lookup(Brand), exclude_id=brand.id)
    for key, value in fields.items():
        setattr(brand, key, value)
    brand.stamp_updated(acting_user_id())
    commit_or_conflict("updating a brand")

    log_admin_action('update_brand', AuditTarget.BRAND, brand.id, f"Updated fields: {', '.join(sorted(fields)) or 'none'}.")
    return ApiResponse.ok(brand.to_dict(), "Brand updated successfully", status_code=StatusCode.UPDATED)


@admin_api_bp.route('/brands/<int:brand_id>', methods=['DELETE'])
@permission_required('delete brands')
def delete_brand(brand_id):
    brand = find_or_404(Brand, brand_id, "Brand not found")

    products_count = brand.live_products_count()
    if products_count > 0:
        raise ConflictError("Cannot delete brand with associated products",
                            errors={"products_count": products_count},
                            status_code=StatusCode.BRAND_HAS_PRODUCTS)

    brand.soft_delete(acting_user_id())
    commit_or_conflict("deleting a brand")

    log_admin_action('delete_brand', AuditTarget.BRAND, brand.id, f"Deleted brand '{brand.name}'.")
    return ApiResponse.ok(None, "Brand deleted successfully", status_code=StatusCode.DELETED)
