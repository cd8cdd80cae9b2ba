# ecommerce_admin/admin_api/product_routes.py
# Product management (CRUD, restore, form lookups)

from flask import request

from . import admin_api_bp
from .helpers import (acting_user_id, check_exists, find_or_404, log_admin_action,
                      paginated_response, raise_if_errors)
from ..auth.decorators import permission_required
from ..constants import StatusCode
from ..exceptions import ConflictError
from ..models import AuditTarget, Brand, Category, Product
from ..models.base import utcnow
from ..responses import ApiResponse
from ..schemas import ProductCreate, ProductUpdate, changed_fields, validate_payload
from ..utils import (apply_search, apply_sorting, commit_or_conflict, generate_sku, model_slug_lookup,
                     parse_bool, resolve_slug)
from .. import db

PRODUCT_SORT_FIELDS = ('id', 'name', 'sku', 'base_price', 'order', 'created_at', 'updated_at', 'status_id')


@admin_api_bp.route('/products', methods=['GET'])
@permission_required('view products')
def list_products():
    query = apply_search(Product.query_active(), request.args.get('search'),
                         [Product.name, Product.description, Product.sku])

    for arg, column in (('category_id', Product.category_id), ('brand_id', Product.brand_id),
                        ('status_id', Product.status_id)):
        value = request.args.get(arg, type=int)
        if value is not None:
            query = query.filter(column == value)
    featured = parse_bool(request.args.get('featured'))
    if featured is not None:
        query = query.filter(Product.is_featured == featured)
    is_active = parse_bool(request.args.get('is_active'))
    if is_active is not None:
        query = query.filter(Product.is_active == is_active)

    query = apply_sorting(query, Product, PRODUCT_SORT_FIELDS, 'created_at', 'desc')
    return paginated_response(query, 'products', Product.to_dict, "Products retrieved successfully")


@admin_api_bp.route('/products/categories', methods=['GET'])
@permission_required('view products')
def product_category_options():
    categories = Category.query_active().order_by(Category.name).all()
    return ApiResponse.ok({"categories": [{"id": c.id, "name": c.name, "parent_id": c.parent_id} for c in categories]},
                          "Categories retrieved successfully")


@admin_api_bp.route('/products', methods=['POST'])
@permission_required('create products')
def create_product():
    payload = validate_payload(ProductCreate)
    errors = {}
    check_exists(errors, Category, 'category_id', payload.category_id, 'category')
    check_exists(errors, Brand, 'brand_id', payload.brand_id, 'brand')
    raise_if_errors(errors)

    product = Product(**payload.model_dump())
    product.slug = resolve_slug(payload.name, model_slug_lookup(Product))
    product.sku = generate_sku(payload.name)
    product.stamp_created(acting_user_id())
    db.session.add(product)
    commit_or_conflict("creating a product")

    log_admin_action('create_product', AuditTarget.PRODUCT, product.id, f"Created product '{product.name}' ({product.sku}).")
    return ApiResponse.created(product.to_dict(include_relations=True), "Product created successfully")


@admin_api_bp.route('/products/<ident>', methods=['GET'])
@permission_required('view products')
def get_product(ident):
    product = find_or_404(Product, ident, "Product not found", by_slug=True)
    return ApiResponse.ok(product.to_dict(include_relations=True), "Product retrieved successfully")


@admin_api_bp.route('/products/<int:product_id>', methods=['PUT', 'PATCH'])
@permission_required('edit products')
def update_product(product_id):
    product = find_or_404(Product, product_id, "Product not found")
    fields = changed_fields(validate_payload(ProductUpdate))
    errors = {}
    check_exists(errors, Category, 'category_id', fields.get('category_id'), 'category')
    check_exists(errors, Brand, 'brand_id', fields.get('brand_id'), 'brand')
    raise_if_errors(errors)

    new_name = fields.get('name')
    if new_name is not None and new_name != product.name:
        product.slug = resolve_slug(new_name, model_slug_lookup(Product), exclude_id=product.id)
    for key, value in fields.items():
        setattr(product, key, value)
    product.stamp_updated(acting_user_id())
    commit_or_conflict("updating a product")

    log_admin_action('update_product', AuditTarget.PRODUCT, product.id, f"Updated fields: {', '.join(sorted(fields)) or 'none'}.")
    return ApiResponse.ok(product.to_dict(include_relations=True), "Product updated successfully",
                          status_code=StatusCode.UPDATED)


@admin_api_bp.route('/products/<int:product_id>', methods=['DELETE'])
@permission_required('delete products')
def delete_product(product_id):
    product = find_or_404(Product, product_id, "Product not found")
    user_id = acting_user_id()
    deleted_at = utcnow()
    variants = product.live_variants().all()
    for variant in variants:
        variant.soft_delete(user_id)
        variant.deleted_at = deleted_at
    product.soft_delete(user_id)
    product.deleted_at = deleted_at
    commit_or_conflict("deleting a product")

    log_admin_action('delete_product', AuditTarget.PRODUCT, product.id,
                     f"Deleted product '{product.name}' and {len(variants)} variant(s).")
    return ApiResponse.ok(None, "Product deleted successfully", status_code=StatusCode.DELETED)


@admin_api_bp.route('/products/<int:product_id>/restore', methods=['POST'])
@permission_required('restore products')
def restore_product(product_id):
    product = find_or_404(Product, product_id, "Product not found", include_deleted=True)
    if not product.is_deleted:
        raise ConflictError("Product is not deleted")

    # Variants removed together with the product come back with it.
    restored_variants = product.variants.filter_by(deleted_at=product.deleted_at).all()
    lookup = model_slug_lookup(Product)
    if lookup(product.slug, product.id):
        product.slug = resolve_slug(product.name, lookup, exclude_id=product.id)
    product.restore()
    for variant in restored_variants:
        variant.restore()
    product.stamp_updated(acting_user_id())
    commit_or_conflict("restoring a product")

    log_admin_action('restore_product', AuditTarget.PRODUCT, product.id)
    return ApiResponse.ok(product.to_dict(include_relations=True), "Product restored successfully",
                          status_code=StatusCode.RESTORED)
