# ecommerce_admin/admin_api/category_routes.py
# Category management (CRUD + flattened tree)

from collections import defaultdict

from flask import request

from . import admin_api_bp
from .helpers import (acting_user_id, check_exists, find_or_404, log_admin_action,
                      paginated_response, raise_if_errors)
from ..auth.decorators import permission_required
from ..constants import StatusCode
from ..exceptions import ConflictError
from ..models import AuditTarget, Category
from ..responses import ApiResponse
from ..schemas import CategoryCreate, CategoryUpdate, changed_fields, validate_payload
from ..utils import apply_search, apply_sorting, commit_or_conflict, model_slug_lookup, parse_bool, resolve_slug
from .. import db

CATEGORY_SORT_FIELDS = ('id', 'name', 'order', 'created_at', 'updated_at', 'status_id', 'parent_id')


def flatten_category_tree(categories):
    """Depth-first list of ``{id, name, slug, parent_id, level, label}``, roots first."""
    by_parent = defaultdict(list)
    known_ids = {c.id for c in categories}
    for category in categories:
        parent_id = category.parent_id if category.parent_id in known_ids else None
        by_parent[parent_id].append(category)
    for siblings in by_parent.values():
        siblings.sort(key=lambda c: (c.order, c.name.lower()))

    flattened = []
    stack = [(root, 0) for root in reversed(by_parent[None])]
    while stack:
        category, level = stack.pop()
        flattened.append({
            "id": category.id, "name": category.name, "slug": category.slug,
            "parent_id": category.parent_id, "level": level,
            "label": f"{'— ' * level}{category.name}",
        })
        stack.extend((child, level + 1) for child in reversed(by_parent.get(category.id, [])))
    return flattened


def is_descendant(candidate_id, category):
    """True if ``candidate_id`` sits anywhere below ``category``."""
    pending = [category.id]
    seen = set()
    while pending:
        current = pending.pop()
        if current in seen:
            continue
        seen.add(current)
        child_ids = [row.id for row in Category.query_active().filter(Category.parent_id == current)
                     .with_entities(Category.id)]
        if candidate_id in child_ids:
            return True
        pending.extend(child_ids)
    return False


@admin_api_bp.route('/categories', methods=['GET'])
@permission_required('view categories')
def list_categories():
    query = apply_search(Category.query_active(), request.args.get('search'), [Category.name, Category.description])

    if 'parent_id' in request.args:
        parent_arg = request.args.get('parent_id', '').strip().lower()
        if parent_arg in ('', 'null', 'none', '0'):
            query = query.filter(Category.parent_id.is_(None))
        else:
            query = query.filter(Category.parent_id == request.args.get('parent_id', type=int))
    featured = parse_bool(request.args.get('featured'))
    if featured is not None:
        query = query.filter(Category.is_featured == featured)
    status_id = request.args.get('status_id', type=int)
    if status_id is not None:
        query = query.filter(Category.status_id == status_id)

    query = apply_sorting(query, Category, CATEGORY_SORT_FIELDS, 'order')
    return paginated_response(query, 'categories', Category.to_dict, "Categories retrieved successfully")


@admin_api_bp.route('/categories/hierarchy', methods=['GET'])
@permission_required('view categories')
def category_hierarchy():
    categories = Category.query_active().all()
    return ApiResponse.ok({"categories": flatten_category_tree(categories)},
                          "Category hierarchy retrieved successfully")


@admin_api_bp.route('/categories', methods=['POST'])
@permission_required('create categories')
def create_category():
    payload = validate_payload(CategoryCreate)
    errors = {}
    check_exists(errors, Category, 'parent_id', payload.parent_id, 'parent category')
    raise_if_errors(errors)

    category = Category(**payload.model_dump())
    category.slug = resolve_slug(payload.name, model_slug_lookup(Category))
    category.stamp_created(acting_user_id())
    db.session.add(category)
    commit_or_conflict("creating a category")

    log_admin_action('create_category', AuditTarget.CATEGORY, category.id, f"Created category '{category.name}'.")
    return ApiResponse.created(category.to_dict(), "Category created successfully")


@admin_api_bp.route('/categories/<ident>', methods=['GET'])
@permission_required('view categories')
def get_category(ident):
    category = find_or_404(Category, ident, "Category not found", by_slug=True)
    return ApiResponse.ok(category.to_dict(include_relations=True), "Category retrieved successfully")


@admin_api_bp.route('/categories/<int:category_id>', methods=['PUT', 'PATCH'])
@permission_required('edit categories')
def update_category(category_id):
    category = find_or_404(Category, category_id, "Category not found")
    fields = changed_fields(validate_payload(CategoryUpdate))

    parent_id = fields.get('parent_id')
    if parent_id is not None:
        if parent_id == category.id:
            raise ConflictError("A category cannot be its own parent",
                                errors={"parent_id": ["A category cannot be its own parent."]},
                                status_code=StatusCode.CATEGORY_SELF_PARENT)
        errors = {}
        check_exists(errors, Category, 'parent_id', parent_id, 'parent category')
        raise_if_errors(errors)
        if is_descendant(parent_id, category):
            raise ConflictError("A category cannot be moved below one of its subcategories",
                                errors={"parent_id": ["The selected parent is a subcategory of this category."]},
                                status_code=StatusCode.CATEGORY_SELF_PARENT)

    new_name = fields.get('name')
    if new_name is not None and new_name != category.name:
        category.slug = resolve_slug(new_name, model_slug_lookup(Category), exclude_id=category.id)
    for key, value in fields.items():
        setattr(category, key, value)
    category.stamp_updated(acting_user_id())
    commit_or_conflict("updating a category")

    log_admin_action('update_category', AuditTarget.CATEGORY, category.id, f"Updated fields: {', '.join(sorted(fields)) or 'none'}.")
    return ApiResponse.ok(category.to_dict(), "Category updated successfully", status_code=StatusCode.UPDATED)


@admin_api_bp.route('/categories/<int:category_id>', methods=['DELETE'])
@permission_required('delete categories')
def delete_category(category_id):
    category = find_or_404(Category, category_id, "Category not found")

    children_count = category.live_children().count()
    if children_count > 0:
        raise ConflictError("Cannot delete category with subcategories",
                            errors={"children_count": children_count},
                            status_code=StatusCode.CATEGORY_HAS_CHILDREN)

    category.soft_delete(acting_user_id())
    commit_or_conflict("deleting a category")

    log_admin_action('delete_category', AuditTarget.CATEGORY, category.id, f"Deleted category '{category.name}'.")
    return ApiResponse.ok(None, "Category deleted successfully", status_code=StatusCode.DELETED)
