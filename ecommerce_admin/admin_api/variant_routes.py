# ecommerce_admin/admin_api/variant_routes.py
# Product variants (colour x size) nested under their product

import re

from flask import request

from . import admin_api_bp
from .helpers import (acting_user_id, check_exists, find_or_404, log_admin_action,
                      paginated_response, raise_if_errors)
from ..auth.decorators import permission_required
from ..constants import StatusCode
from ..exceptions import NotFoundError
from ..models import AuditTarget, Color, Product, ProductVariant, Size
from ..responses import ApiResponse
from ..schemas import VariantCreate, VariantUpdate, changed_fields, validate_payload
from ..utils import apply_sorting, commit_or_conflict
from .. import db

VARIANT_SORT_FIELDS = ('id', 'order', 'stock_quantity', 'price_adjustment', 'created_at')


def default_sku_extension(color, size):
    color_part = color.code or color.name[:3]
    return re.sub(r'[^A-Z0-9-]', '', f"{color_part}-{size.code}".upper())


def check_combination(errors, product_id, color_id, size_id, exclude_id=None):
    query = ProductVariant.query_active().filter_by(product_id=product_id, color_id=color_id, size_id=size_id)
    if exclude_id is not None:
        query = query.filter(ProductVariant.id != exclude_id)
    if db.session.query(query.exists()).scalar():
        errors.setdefault('size_id', []).append("A variant with this color and size already exists for the product.")
    return errors


def find_variant(product, variant_id):
    variant = product.live_variants().filter(ProductVariant.id == variant_id).first()
    if variant is None:
        raise NotFoundError("Product variant not found")
    return variant


@admin_api_bp.route('/products/<int:product_id>/variants', methods=['GET'])
@permission_required('view products')
def list_variants(product_id):
    product = find_or_404(Product, product_id, "Product not found")
    query = product.live_variants()
    for arg, column in (('color_id', ProductVariant.color_id), ('size_id', ProductVariant.size_id)):
        value = request.args.get(arg, type=int)
        if value is not None:
            query = query.filter(column == value)
    query = apply_sorting(query, ProductVariant, VARIANT_SORT_FIELDS, 'order')
    return paginated_response(query, 'variants', ProductVariant.to_dict, "Product variants retrieved successfully")


@admin_api_bp.route('/products/<int:product_id>/variants', methods=['POST'])
@permission_required('edit products')
def create_variant(product_id):
    product = find_or_404(Product, product_id, "Product not found")
    payload = validate_payload(VariantCreate)
    errors = {}
    color = check_exists(errors, Color, 'color_id', payload.color_id, 'color')
    size = check_exists(errors, Size, 'size_id', payload.size_id, 'size')
    if color and size:
        check_combination(errors, product.id, color.id, size.id)
    raise_if_errors(errors)

    fields = payload.model_dump()
    fields['sku_extension'] = fields.get('sku_extension') or default_sku_extension(color, size)
    variant = ProductVariant(product_id=product.id, **fields)
    variant.stamp_created(acting_user_id())
    db.session.add(variant)
    commit_or_conflict("creating a product variant")

    log_admin_action('create_product_variant', AuditTarget.PRODUCT_VARIANT, variant.id, f"Variant {variant.sku} created.")
    return ApiResponse.created(variant.to_dict(), "Product variant created successfully")


@admin_api_bp.route('/products/<int:product_id>/variants/<int:variant_id>', methods=['GET'])
@permission_required('view products')
def get_variant(product_id, variant_id):
    product = find_or_404(Product, product_id, "Product not found")
    return ApiResponse.ok(find_variant(product, variant_id).to_dict(), "Product variant retrieved successfully")


@admin_api_bp.route('/products/<int:product_id>/variants/<int:variant_id>', methods=['PUT', 'PATCH'])
@permission_required('edit products')
def update_variant(product_id, variant_id):
    product = find_or_404(Product, product_id, "Product not found")
    variant = find_variant(product, variant_id)
    fields = changed_fields(validate_payload(VariantUpdate))
    errors = {}
    check_exists(errors, Color, 'color_id', fields.get('color_id'), 'color')
    check_exists(errors, Size, 'size_id', fields.get('size_id'), 'size')
    if not errors and ('color_id' in fields or 'size_id' in fields):
        check_combination(errors, product.id, fields.get('color_id', variant.color_id),
                          fields.get('size_id', variant.size_id), exclude_id=variant.id)
    raise_if_errors(errors)

    for key, value in fields.items():
        setattr(variant, key, value)
    variant.stamp_updated(acting_user_id())
    commit_or_conflict("updating a product variant")

    log_admin_action('update_product_variant', AuditTarget.PRODUCT_VARIANT, variant.id)
    return ApiResponse.ok(variant.to_dict(), "Product variant updated successfully", status_code=StatusCode.UPDATED)


@admin_api_bp.route('/products/<int:product_id>/variants/<int:variant_id>', methods=['DELETE'])
@permission_required('edit products')
def delete_variant(product_id, variant_id):
    product = find_or_404(Product, product_id, "Product not found")
    variant = find_variant(product, variant_id)
    variant.soft_delete(acting_user_id())
    commit_or_conflict("deleting a product variant")

    log_admin_action('delete_product_variant', AuditTarget.PRODUCT_VARIANT, variant.id)
    return ApiResponse.ok(None, "Product variant deleted successfully", status_code=StatusCode.DELETED)
